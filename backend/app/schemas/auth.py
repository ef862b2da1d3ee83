from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator

from app.schemas.user import UserBase, UserRead


class LoginRequest(UserBase):
    password: SecretStr

    @field_validator("password", mode="before")
    @classmethod
    def password_non_empty(cls, value: SecretStr | str | None) -> SecretStr:
        if value is None:
            raise ValueError("password required")
        raw = value.get_secret_value() if isinstance(value, SecretStr) else str(value)
        if not raw.strip():
            raise ValueError("password required")
        return SecretStr(raw)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = Field(default="bearer")
    expires_in: int
    user: UserRead
