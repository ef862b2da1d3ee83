from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, http_exception
from app.core.security import InvalidTokenError, decode_access_token
from app.db.session import get_db
from app.logging import bind_log_context
from app.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _invalid_token(message: str = "Invalid authentication token"):
    return http_exception(
        status.HTTP_401_UNAUTHORIZED,
        ErrorCode.TOKEN_INVALID,
        message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _authenticate_jwt(raw_token: str, db: Session) -> User:
    try:
        payload = decode_access_token(raw_token)
    except InvalidTokenError:
        raise _invalid_token() from None

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise _invalid_token() from None

    user = db.get(User, user_id)
    if user is None:
        raise _invalid_token("Authentication credentials are no longer valid")
    return user


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise http_exception(
            status.HTTP_401_UNAUTHORIZED,
            ErrorCode.NOT_AUTHENTICATED,
            "Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = _authenticate_jwt(token, db)
    request.state.user_id = user.id
    bind_log_context(user_id=user.id)
    return user
