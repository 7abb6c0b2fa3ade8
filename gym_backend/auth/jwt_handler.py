import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from gym_backend.core import config
from gym_backend.core.errors import AuthFailure, AuthFailureReason

ROLES_CLAIM = "roles"


@dataclass(frozen=True)
class TokenSettings:
    """Signing configuration, read once at startup and never mutated."""
    secret_key: str
    algorithm: str = "HS256"
    issuer: str | None = None
    audience: str | None = None
    expires_minutes: int = 60

    @classmethod
    def from_config(cls) -> "TokenSettings":
        return cls(
            secret_key=config.JWT_SECRET_KEY,
            algorithm=config.JWT_ALGORITHM,
            issuer=config.JWT_ISSUER or None,
            audience=config.JWT_AUDIENCE or None,
            expires_minutes=config.JWT_EXPIRES_MINUTES or 60,
        )


@dataclass(frozen=True)
class IssuedToken:
    """A signed token plus a plaintext summary for display.

    Only ``token`` is trusted on later requests.
    """
    token: str
    token_id: str
    expiration: datetime
    email: str
    roles: list[str]


def create_access_token(
    subject: str,
    email: str,
    name: str,
    roles: list[str],
    settings: TokenSettings,
    now: datetime | None = None,
) -> IssuedToken:
    issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    expire = issued_at + timedelta(minutes=settings.expires_minutes)
    token_id = uuid.uuid4().hex

    payload = {
        "sub": subject,
        "email": email,
        "name": name,
        "jti": token_id,
        ROLES_CLAIM: list(roles),
        "iat": issued_at,
        "nbf": issued_at,
        "exp": expire,
    }
    if settings.issuer:
        payload["iss"] = settings.issuer
    if settings.audience:
        payload["aud"] = settings.audience

    token = jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)
    return IssuedToken(token=token, token_id=token_id, expiration=expire, email=email, roles=list(roles))


def decode_access_token(token: str, settings: TokenSettings) -> dict:
    """Verify signature, validity window, issuer and audience.

    Any failure is reported the same way: the token is invalid or expired.
    """
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            audience=settings.audience,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise AuthFailure(AuthFailureReason.INVALID_TOKEN) from exc
