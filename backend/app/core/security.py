import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class InvalidTokenError(Exception):
    """Raised when a JWT cannot be decoded or validated."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def hash_token(raw_token: str) -> str:
    """Refresh tokens are stored by digest only."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _encode(subject: str, token_type: str, expire_delta: timedelta, extra: Dict[str, Any] | None = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expire_delta).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    settings = get_settings()
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    if minutes <= 0:
        raise ValueError("Token expiry must be greater than zero minutes")
    return _encode(subject, ACCESS_TOKEN_TYPE, timedelta(minutes=minutes))


def create_refresh_token(subject: str, expires_days: int | None = None) -> tuple[str, datetime]:
    settings = get_settings()
    days = expires_days if expires_days is not None else settings.refresh_token_expire_days
    if days <= 0:
        raise ValueError("Token expiry must be greater than zero days")
    expire_delta = timedelta(days=days)
    token = _encode(subject, REFRESH_TOKEN_TYPE, expire_delta, {"jti": uuid.uuid4().hex})
    return token, datetime.now(timezone.utc) + expire_delta


def _decode(token: str, expected_type: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"leeway": settings.token_clock_skew_seconds},
        )
    except JWTError as exc:
        raise InvalidTokenError("Invalid token") from exc
    if payload.get("type") != expected_type:
        raise InvalidTokenError("Unexpected token type")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, REFRESH_TOKEN_TYPE)
