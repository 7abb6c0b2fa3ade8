import logging

from sqlalchemy.orm import Session

from gym_backend.auth.passwords import hash_password
from gym_backend.auth.service import get_or_create_role, get_user_by_email
from gym_backend.core import config
from gym_backend.models.user import ADMIN_ROLE, KNOWN_ROLES, User, normalize_email

logger = logging.getLogger(__name__)


def seed_identity_store(db: Session, admin_email: str | None = None, admin_password: str | None = None) -> User:
    """Ensure both roles and the bootstrap admin identity exist.

    Safe to run on every startup. An existing admin account is left untouched.
    """
    admin_email = admin_email or config.ADMIN_EMAIL
    admin_password = admin_password or config.ADMIN_PASSWORD

    roles = {name: get_or_create_role(db, name) for name in KNOWN_ROLES}

    admin = get_user_by_email(db, admin_email)
    if admin is None:
        admin = User(
            email=admin_email,
            normalized_email=normalize_email(admin_email),
            hashed_password=hash_password(admin_password),
        )
        admin.roles.append(roles[ADMIN_ROLE])
        db.add(admin)
        logger.info("Seeded bootstrap admin %s", admin_email)

    db.commit()
    return admin
