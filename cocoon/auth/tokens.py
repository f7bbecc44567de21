"""JWT issuance and verification for access, refresh and verification tokens.

Every token carries a ``type`` claim so that one kind can never stand in
for another, even where two kinds share a signing secret.
"""

from dataclasses import dataclass
from functools import lru_cache

from bson import ObjectId

from cocoon.auth.exceptions import (
    AccessTokenExpiredError,
    InvalidTokenError,
    InvalidVerificationTokenError,
    RefreshTokenExpiredError,
    VerificationTokenExpiredError,
)
from cocoon.core.security import (
    TokenExpired,
    TokenMalformed,
    decode_token,
    encode_token,
)
from cocoon.core.settings import Settings, get_settings
from cocoon.user.models import User

ACCESS = "access"
REFRESH = "refresh"
VERIFY_EMAIL = "verify_email"


@dataclass(frozen=True)
class AccessClaims:
    """Decoded access token claims."""

    user_id: ObjectId
    name: str
    role: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int  # access token lifetime, seconds


def _user_id_claim(claims: dict, key: str = "user_id") -> ObjectId:
    raw = claims.get(key)
    if not isinstance(raw, str) or not ObjectId.is_valid(raw):
        raise TokenMalformed()
    return ObjectId(raw)


class TokenService:
    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def access_expires_in_seconds(self) -> int:
        return int(self._settings.access_token_expires_in.total_seconds())

    def create_access_token(self, user: User) -> str:
        return encode_token(
            {
                "type": ACCESS,
                "user_id": str(user.id),
                "name": user.name,
                "user_roles": user.role,
            },
            self._settings.jwt_secret,
            self._settings.access_token_expires_in,
        )

    def create_refresh_token(self, user: User) -> str:
        return encode_token(
            {"type": REFRESH, "user_id": str(user.id)},
            self._settings.refresh_token_secret,
            self._settings.refresh_token_expires_in,
        )

    def create_token_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user),
            refresh_token=self.create_refresh_token(user),
            expires_in=self.access_expires_in_seconds,
        )

    def create_verification_token(self, user_id: ObjectId) -> str:
        return encode_token(
            {"type": VERIFY_EMAIL, "userId": str(user_id)},
            self._settings.jwt_secret,
            self._settings.verification_token_expires_in,
        )

    def decode_access_token(self, token: str) -> AccessClaims:
        try:
            claims = decode_token(token, self._settings.jwt_secret)
            if claims.get("type") != ACCESS:
                raise TokenMalformed()
            user_id = _user_id_claim(claims)
        except TokenExpired as e:
            raise AccessTokenExpiredError() from e
        except TokenMalformed as e:
            raise InvalidTokenError() from e
        return AccessClaims(
            user_id=user_id,
            name=claims.get("name", ""),
            role=claims.get("user_roles", "user"),
        )

    def decode_refresh_token(self, token: str) -> ObjectId:
        try:
            claims = decode_token(token, self._settings.refresh_token_secret)
            if claims.get("type") != REFRESH:
                raise TokenMalformed()
            return _user_id_claim(claims)
        except TokenExpired as e:
            raise RefreshTokenExpiredError() from e
        except TokenMalformed as e:
            raise InvalidTokenError("Invalid refresh token") from e

    def decode_verification_token(self, token: str) -> ObjectId:
        try:
            claims = decode_token(token, self._settings.jwt_secret)
            if claims.get("type") != VERIFY_EMAIL:
                raise TokenMalformed()
            return _user_id_claim(claims, "userId")
        except TokenExpired as e:
            raise VerificationTokenExpiredError() from e
        except TokenMalformed as e:
            raise InvalidVerificationTokenError() from e


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(get_settings())
