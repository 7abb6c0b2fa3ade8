import pytest
from fastapi import HTTPException, Response

from gym_backend.routes import auth_routes

ADMIN_CREDENTIALS = {'email': 'admin@gym.com', 'password': 'Admin@123'}


def _register(client, email='a@x.com', password='secret1', confirm=None):
    return client.post(
        '/api/auth/register',
        json={'email': email, 'password': password, 'confirmPassword': confirm or password},
    )


def test_register_then_login_returns_user_role(client, seeded_admin) -> None:
    registered = _register(client)
    assert registered.status_code == 200
    assert registered.json()['roles'] == ['User']

    response = client.post('/api/auth/login', json={'email': 'a@x.com', 'password': 'secret1'})

    assert response.status_code == 200
    body = response.json()
    assert body['email'] == 'a@x.com'
    assert body['roles'] == ['User']
    assert body['token'].count('.') == 2
    assert body['expiration']


def test_seeded_admin_login_includes_admin_role(client, seeded_admin) -> None:
    response = client.post('/api/auth/login', json=ADMIN_CREDENTIALS)

    assert response.status_code == 200
    assert 'Admin' in response.json()['roles']


def test_login_is_case_insensitive_on_email(client, seeded_admin) -> None:
    response = client.post('/api/auth/login', json={'email': 'ADMIN@GYM.COM', 'password': 'Admin@123'})

    assert response.status_code == 200


def test_wrong_password_and_unknown_email_look_the_same(client, seeded_admin) -> None:
    wrong_password = client.post('/api/auth/login', json={'email': 'admin@gym.com', 'password': 'nope123'})
    unknown_email = client.post('/api/auth/login', json={'email': 'ghost@gym.com', 'password': 'nope123'})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {'detail': 'Invalid email or password.'}


def test_register_rejects_mismatched_confirmation(client) -> None:
    response = _register(client, password='secret1', confirm='secret2')

    assert response.status_code == 400
    assert response.json()['detail'] == 'Validation failed.'
    assert response.json()['errors']


def test_register_rejects_malformed_email(client) -> None:
    response = _register(client, email='not-an-email')

    assert response.status_code == 400
    assert 'email' in response.json()['errors']


def test_register_rejects_short_password(client) -> None:
    response = _register(client, email='short@x.com', password='abc')

    assert response.status_code == 400
    assert 'password' in response.json()['errors']


def test_register_rejects_password_with_lone_surrogate(client) -> None:
    body = '{"email": "odd@x.com", "password": "abc\\ud800defg", "confirmPassword": "abc\\ud800defg"}'

    response = client.post('/api/auth/register', content=body, headers={'Content-Type': 'application/json'})

    assert response.status_code == 400
    assert 'password' in response.json()['errors']


def test_register_rejects_duplicate_email(client, seeded_admin) -> None:
    assert _register(client).status_code == 200

    response = _register(client, email='A@X.com')

    assert response.status_code == 400
    assert 'email' in response.json()['errors']


def test_register_never_grants_admin(client, seeded_admin) -> None:
    response = _register(client, email='wannabe@gym.com')

    assert response.json()['roles'] == ['User']


def test_login_sets_session_cookie_usable_for_me(client, seeded_admin) -> None:
    login = client.post('/api/auth/login', json=ADMIN_CREDENTIALS)
    assert 'gym_session' in login.cookies

    response = client.get('/api/auth/me')

    assert response.status_code == 200
    assert response.json()['email'] == 'admin@gym.com'
    assert response.json()['roles'] == ['Admin']


def test_logout_clears_session_cookie(client, seeded_admin) -> None:
    client.post('/api/auth/login', json=ADMIN_CREDENTIALS)

    response = client.post('/api/auth/logout')

    assert response.status_code == 204
    assert client.get('/api/auth/me').status_code == 401


def test_me_without_token_is_unauthorized(client) -> None:
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.headers['www-authenticate'] == 'Bearer'


def test_me_with_bearer_token(client, user_headers) -> None:
    response = client.get('/api/auth/me', headers=user_headers)

    assert response.status_code == 200
    assert response.json()['email'] == 'user@example.com'
    assert response.json()['roles'] == ['User']


def test_login_route_function_raises_401_for_bad_credentials(db, seeded_admin, token_settings) -> None:
    with pytest.raises(HTTPException) as exception_info:
        auth_routes.login(
            data=auth_routes.LoginRequest(email='admin@gym.com', password='wrong'),
            response=Response(),
            db=db,
            settings=token_settings,
        )

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid email or password.'
