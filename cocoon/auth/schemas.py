"""Auth domain schemas.

Response field names follow the storefront client (camelCase for the
token fields).
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cocoon.core.security import BCRYPT_MAX_BYTES
from cocoon.user.schemas import UserRead


class AuthRegister(BaseModel):
    """Request schema for user registration."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=BCRYPT_MAX_BYTES)
    user_name: str = Field(min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken", min_length=1)


class EmailCheck(BaseModel):
    exists: bool
    message: str


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    refresh_token: str = Field(alias="refreshToken")
    expires_in: int = Field(alias="expiresIn")


class LoginResponse(TokenResponse):
    user: UserRead


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: UserRead
    expires_in: int = Field(alias="expiresIn")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
