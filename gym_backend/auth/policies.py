"""
Access policies for the resource routes.

Every route declares exactly one policy:

- ``AnyAuthenticated``: a valid token is enough.
- ``RequiresRole({...})``: a valid token whose roles intersect the set.
- ``SelfScoped``: a valid token; the route then works on the caller's own
  member record, found by email, whatever the caller's roles are.

``check_policy`` is the single place that turns a policy plus a token into an
``AuthContext`` or an ``AuthFailure``.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from gym_backend import store
from gym_backend.auth import jwt_handler
from gym_backend.core.errors import AuthFailure, AuthFailureReason, NotFound
from gym_backend.models.member import Member


@dataclass(frozen=True)
class AuthContext:
    """The verified contents of a session token."""
    user_id: str
    email: str
    name: str
    token_id: str
    roles: frozenset[str]
    expires_at: datetime

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class AnyAuthenticated:
    pass


@dataclass(frozen=True, init=False)
class RequiresRole:
    roles: frozenset[str]

    def __init__(self, *roles: str):
        if not roles:
            raise ValueError("RequiresRole needs at least one role.")
        object.__setattr__(self, "roles", frozenset(roles))


@dataclass(frozen=True)
class SelfScoped:
    pass


AccessPolicy = AnyAuthenticated | RequiresRole | SelfScoped


def _context_from_claims(claims: dict) -> AuthContext:
    email = claims.get("email")
    if not email:
        raise AuthFailure(AuthFailureReason.INVALID_TOKEN)

    roles = claims.get(jwt_handler.ROLES_CLAIM) or []
    if isinstance(roles, str):
        roles = [roles]

    return AuthContext(
        user_id=str(claims["sub"]),
        email=email,
        name=claims.get("name") or email,
        token_id=claims.get("jti", ""),
        roles=frozenset(roles),
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )


def authorize(
    token: str | None,
    required_roles: set[str] | frozenset[str] | None,
    settings: jwt_handler.TokenSettings,
) -> AuthContext:
    """Validate ``token`` and, if roles are required, check membership."""
    if not token:
        raise AuthFailure(AuthFailureReason.INVALID_TOKEN)

    context = _context_from_claims(jwt_handler.decode_access_token(token, settings))

    if required_roles and not (context.roles & set(required_roles)):
        raise AuthFailure(AuthFailureReason.FORBIDDEN)

    return context


def check_policy(policy: AccessPolicy, token: str | None, settings: jwt_handler.TokenSettings) -> AuthContext:
    if isinstance(policy, RequiresRole):
        return authorize(token, policy.roles, settings)
    if isinstance(policy, (AnyAuthenticated, SelfScoped)):
        return authorize(token, None, settings)
    raise TypeError(f"Unknown access policy: {policy!r}")


def resolve_self(db: Session, context: AuthContext) -> Member:
    member = store.find_member_by_email(db, context.email)
    if member is None:
        raise NotFound("Member profile not found. Please contact an administrator.")
    return member
