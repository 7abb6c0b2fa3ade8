"""Credential verification, registration and token issuance."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gym_backend.auth import jwt_handler
from gym_backend.auth.passwords import hash_password, verify_password
from gym_backend.core import config
from gym_backend.core.errors import AuthFailure, AuthFailureReason, ValidationFailure
from gym_backend.models.user import USER_ROLE, Role, User, normalize_email

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

# Verified against when the email is unknown; both failure paths run bcrypt once.
_UNKNOWN_USER_HASH = hash_password("unknown-user-placeholder")


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.normalized_email == normalize_email(email))).first()


def get_or_create_role(db: Session, name: str) -> Role:
    role = db.scalars(select(Role).where(Role.name == name)).first()
    if role is None:
        role = Role(name=name)
        db.add(role)
        db.flush()
    return role


def verify_credentials(db: Session, email: str, password: str) -> User:
    """Return the identity for ``email`` if ``password`` matches.

    An unknown email and a wrong password raise the same failure so callers
    cannot tell which accounts exist. No lockout is applied.
    """
    user = get_user_by_email(db, email)
    if user is None:
        verify_password(password, _UNKNOWN_USER_HASH)
        raise AuthFailure(AuthFailureReason.INVALID_CREDENTIALS)
    if not verify_password(password, user.hashed_password):
        raise AuthFailure(AuthFailureReason.INVALID_CREDENTIALS)
    return user


def validate_password_policy(password: str) -> list[str]:
    problems = []
    if len(password) < config.PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {config.PASSWORD_MIN_LENGTH} characters long.")
    try:
        encoded = password.encode("utf-8")
    except UnicodeEncodeError:
        problems.append("Password contains characters that cannot be encoded.")
    else:
        if len(encoded) > MAX_PASSWORD_BYTES:
            problems.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.")
    return problems


def register_identity(db: Session, email: str, password: str) -> User:
    """Create an identity with the User role.

    Never grants Admin; the only Admin identity is the seeded one.
    """
    errors: dict[str, list[str]] = {}

    password_problems = validate_password_policy(password)
    if password_problems:
        errors["password"] = password_problems

    if get_user_by_email(db, email) is not None:
        errors["email"] = [f"Email '{email}' is already taken."]

    if errors:
        raise ValidationFailure(errors)

    user = User(
        email=email.strip(),
        normalized_email=normalize_email(email),
        hashed_password=hash_password(password),
    )
    user.roles.append(get_or_create_role(db, USER_ROLE))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if get_user_by_email(db, email) is None:
            raise
        # Lost a race with a concurrent registration for the same address.
        raise ValidationFailure({"email": [f"Email '{email}' is already taken."]}) from exc
    db.refresh(user)

    logger.info("Registered new identity %s", user.email)
    return user


def issue_token(user: User, settings: jwt_handler.TokenSettings) -> jwt_handler.IssuedToken:
    """Sign a token carrying the identity's roles as they are right now."""
    return jwt_handler.create_access_token(
        subject=str(user.id),
        email=user.email,
        name=user.user_name,
        roles=user.role_names,
        settings=settings,
    )
