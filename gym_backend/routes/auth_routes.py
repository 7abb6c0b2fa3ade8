import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gym_backend.auth import service
from gym_backend.auth.dependencies import auth_failure_to_http, get_token_settings, require_authenticated
from gym_backend.auth.jwt_handler import IssuedToken, TokenSettings
from gym_backend.auth.policies import AuthContext
from gym_backend.core import config
from gym_backend.core.errors import AuthFailure
from gym_backend.database import get_db
from gym_backend.routes.common import database_guard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class TokenResponse(BaseModel):
    token: str
    expiration: datetime
    email: str
    roles: list[str]


class CurrentIdentityResponse(BaseModel):
    id: str
    email: str
    name: str
    roles: list[str]
    expiration: datetime


def set_session_cookie(response: Response, issued: IssuedToken, settings: TokenSettings) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=issued.token,
        max_age=settings.expires_minutes * 60,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def to_token_response(issued: IssuedToken) -> TokenResponse:
    return TokenResponse(
        token=issued.token,
        expiration=issued.expiration,
        email=issued.email,
        roles=issued.roles,
    )


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: TokenSettings = Depends(get_token_settings),
):
    with database_guard(db):
        try:
            user = service.verify_credentials(db, data.email, data.password)
        except AuthFailure as exc:
            logger.warning("Rejected login attempt for %s", data.email)
            raise auth_failure_to_http(exc) from exc

        issued = service.issue_token(user, settings)

    logger.info("Issued token %s for %s", issued.token_id, user.email)
    set_session_cookie(response, issued, settings)
    return to_token_response(issued)


@router.post("/register", response_model=TokenResponse)
def register(
    data: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: TokenSettings = Depends(get_token_settings),
):
    with database_guard(db):
        user = service.register_identity(db, data.email, data.password)
        issued = service.issue_token(user, settings)

    set_session_cookie(response, issued, settings)
    return to_token_response(issued)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def logout():
    # Tokens are self-contained; logging out only drops the browser cookie.
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key=config.SESSION_COOKIE_NAME)
    return response


@router.get("/me", response_model=CurrentIdentityResponse)
def me(context: AuthContext = Depends(require_authenticated)):
    return CurrentIdentityResponse(
        id=context.user_id,
        email=context.email,
        name=context.name,
        roles=sorted(context.roles),
        expiration=context.expires_at,
    )
