import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gym_backend.auth import policies
from gym_backend.auth.jwt_handler import TokenSettings
from gym_backend.core import config
from gym_backend.core.errors import AuthFailure, AuthFailureReason
from gym_backend.models.user import ADMIN_ROLE

logger = logging.getLogger(__name__)

# Missing credentials are reported as 401 by the policy check, not 403 by HTTPBearer.
security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_settings() -> TokenSettings:
    return TokenSettings.from_config()


def auth_failure_to_http(exc: AuthFailure) -> HTTPException:
    headers = None
    if exc.reason is not AuthFailureReason.FORBIDDEN:
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=exc.status_code, detail=exc.message, headers=headers)


def get_request_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    if credentials is not None:
        return credentials.credentials
    # Browser sessions carry the same token in a cookie.
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def require(policy: policies.AccessPolicy):
    """Build a dependency that enforces ``policy`` and yields the AuthContext."""

    def dependency(
        request: Request,
        token: str | None = Depends(get_request_token),
        settings: TokenSettings = Depends(get_token_settings),
    ) -> policies.AuthContext:
        try:
            return policies.check_policy(policy, token, settings)
        except AuthFailure as exc:
            if exc.reason is AuthFailureReason.FORBIDDEN:
                logger.info("Forbidden: %s %s", request.method, request.url.path)
            raise auth_failure_to_http(exc) from exc

    return dependency


require_authenticated = require(policies.AnyAuthenticated())
require_admin = require(policies.RequiresRole(ADMIN_ROLE))
require_self = require(policies.SelfScoped())
