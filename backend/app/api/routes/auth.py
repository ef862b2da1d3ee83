from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.api.response import ResponseEnvelope, success_response
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.logging import get_logger
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.user import UserCreate, UserRead
from app.services.auth import AuthService, IssuedTokens

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger()

REFRESH_COOKIE_PATH = "/api/v1/auth"


def _set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.refresh_token_max_age_seconds,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
        path=REFRESH_COOKIE_PATH,
    )


def _clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
        path=REFRESH_COOKIE_PATH,
    )


def _token_payload(tokens: IssuedTokens, settings: Settings) -> dict:
    return TokenResponse(
        access_token=tokens.access_token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserRead.model_validate(tokens.user),
    ).model_dump(mode="json")


@router.post("/register", response_model=ResponseEnvelope, status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)) -> dict:
    user = AuthService(db).register(user_in)
    return success_response(UserRead.model_validate(user).model_dump(mode="json"), message="Registration successful")


@router.post("/login", response_model=ResponseEnvelope)
def login_user(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    tokens = AuthService(db).login(payload.email, payload.password.get_secret_value())
    _set_refresh_cookie(response, tokens.refresh_token, settings)
    return success_response(_token_payload(tokens, settings), message="Login successful")


@router.post("/refresh", response_model=ResponseEnvelope)
def refresh_tokens(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    tokens = AuthService(db).refresh(request.cookies.get(settings.refresh_cookie_name))
    _set_refresh_cookie(response, tokens.refresh_token, settings)
    return success_response(_token_payload(tokens, settings), message="Token refreshed")


@router.post("/logout", response_model=ResponseEnvelope)
def logout_user(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    AuthService(db).logout(request.cookies.get(settings.refresh_cookie_name))
    _clear_refresh_cookie(response, settings)
    return success_response(None, message="Logged out successfully")
