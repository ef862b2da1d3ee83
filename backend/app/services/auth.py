from __future__ import annotations

from dataclasses import dataclass

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, http_exception
from app.core.security import (
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    hash_token,
    verify_password,
)
from app.db.base import as_utc, utc_now
from app.logging import get_logger
from app.models import RefreshToken, User
from app.schemas.user import UserCreate

logger = get_logger()


@dataclass
class IssuedTokens:
    user: User
    access_token: str
    refresh_token: str


def _invalid_refresh(message: str = "Invalid or expired refresh token"):
    return http_exception(status.HTTP_401_UNAUTHORIZED, ErrorCode.TOKEN_INVALID, message)


class AuthService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def register(self, payload: UserCreate) -> User:
        email = payload.email.lower()
        existing = self.session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing is not None:
            raise http_exception(
                status.HTTP_409_CONFLICT,
                ErrorCode.EMAIL_EXISTS,
                "An account with this email already exists",
            )

        user = User(
            email=email,
            password_hash=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            custom_skills=[],
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise http_exception(
                status.HTTP_409_CONFLICT,
                ErrorCode.EMAIL_EXISTS,
                "An account with this email already exists",
            ) from None
        logger.info("user_registered", user_id=user.id)
        return user

    def login(self, email: str, password: str) -> IssuedTokens:
        user = self.session.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("login_failed", reason="invalid_credentials")
            raise http_exception(
                status.HTTP_401_UNAUTHORIZED,
                ErrorCode.INVALID_CREDENTIALS,
                "Invalid email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        tokens = self._issue(user)
        self.session.commit()
        logger.info("user_authenticated", user_id=user.id)
        return tokens

    def refresh(self, raw_token: str | None) -> IssuedTokens:
        if not raw_token:
            raise _invalid_refresh("Refresh token is required")
        try:
            payload = decode_refresh_token(raw_token)
        except InvalidTokenError:
            raise _invalid_refresh() from None

        stored = self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token)).with_for_update()
        ).scalar_one_or_none()
        if stored is None or stored.revoked or str(stored.user_id) != str(payload.get("sub")):
            logger.warning("refresh_token_rejected", reason="unknown_or_revoked")
            raise _invalid_refresh()
        if as_utc(stored.expires_at) <= utc_now():
            logger.warning("refresh_token_rejected", reason="expired", user_id=stored.user_id)
            raise _invalid_refresh("Refresh token has expired")

        stored.revoked = True
        tokens = self._issue(stored.user)
        self.session.commit()
        logger.info("refresh_token_rotated", user_id=stored.user_id)
        return tokens

    def logout(self, raw_token: str | None) -> None:
        if not raw_token:
            return
        stored = self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token))
        ).scalar_one_or_none()
        if stored is None or stored.revoked:
            return
        stored.revoked = True
        self.session.commit()
        logger.info("user_logged_out", user_id=stored.user_id)

    def _issue(self, user: User) -> IssuedTokens:
        access_token = create_access_token(subject=str(user.id))
        refresh_token, expires_at = create_refresh_token(subject=str(user.id))
        self.session.add(
            RefreshToken(
                user_id=user.id,
                token_hash=hash_token(refresh_token),
                expires_at=expires_at,
                revoked=False,
            )
        )
        return IssuedTokens(user=user, access_token=access_token, refresh_token=refresh_token)
