"""Password hashing and JWT helpers.

Thin wrappers over bcrypt and PyJWT. Token decoding distinguishes an
expired token from a malformed one so callers can tell "refresh and retry"
apart from "authenticate again".
"""

import uuid
from datetime import timedelta
from typing import Any

import bcrypt
import jwt

from cocoon.core.mixins import utc_now

ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72


class TokenExpired(Exception):
    """The token signature is valid but its exp claim has passed."""


class TokenMalformed(Exception):
    """The token cannot be decoded or its signature does not verify."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def encode_token(claims: dict[str, Any], secret: str, expires_in: timedelta) -> str:
    now = utc_now()
    # jti keeps two tokens minted in the same second distinct.
    payload = {**claims, "iat": now, "exp": now + expires_in, "jti": uuid.uuid4().hex}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Decode and verify a token.

    Raises:
        TokenExpired: If the token is past its expiry
        TokenMalformed: For any other decoding or signature failure
    """
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired() from e
    except jwt.InvalidTokenError as e:
        raise TokenMalformed() from e
