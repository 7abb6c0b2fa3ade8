import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from gym_backend.auth.dependencies import get_token_settings  # noqa: E402
from gym_backend.auth.jwt_handler import TokenSettings  # noqa: E402
from gym_backend.database import Base, create_schema, get_db  # noqa: E402
from gym_backend.main import app  # noqa: E402
from gym_backend.seed import seed_identity_store  # noqa: E402

ADMIN_EMAIL = 'admin@gym.com'
ADMIN_PASSWORD = 'Admin@123'


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    create_schema(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(
        secret_key='test-signing-key-that-is-long-enough-for-hs256',
        issuer='gym-backend-tests',
        audience='gym-tests',
        expires_minutes=60,
    )


@pytest.fixture
def seeded_admin(db):
    return seed_identity_store(db, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD)


@pytest.fixture
def client(session_factory, token_settings):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_token_settings] = lambda: token_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_token_settings, None)


def bearer(token: str) -> dict[str, str]:
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(client, seeded_admin) -> dict[str, str]:
    response = client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    client.cookies.clear()
    return bearer(response.json()['token'])


@pytest.fixture
def user_headers(client, seeded_admin) -> dict[str, str]:
    response = client.post(
        '/api/auth/register',
        json={'email': 'user@example.com', 'password': 'secret1', 'confirmPassword': 'secret1'},
    )
    assert response.status_code == 200
    client.cookies.clear()
    return bearer(response.json()['token'])
