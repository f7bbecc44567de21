"""Tests for cocoon/auth/tokens.py and cocoon/core/security.py."""

from datetime import timedelta

import jwt
import pytest
from bson import ObjectId

from cocoon.auth.exceptions import AccessTokenExpiredError, InvalidTokenError
from cocoon.auth.tokens import ACCESS
from cocoon.core.security import (
    ALGORITHM,
    TokenExpired,
    TokenMalformed,
    decode_token,
    encode_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_round_trip(self):
        hashed = hash_password("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("other-pass", hashed)

    def test_missing_or_foreign_hash(self):
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestCodec:
    def test_expired_is_distinguished_from_malformed(self):
        expired = encode_token({"sub": "x"}, "secret", timedelta(seconds=-1))

        with pytest.raises(TokenExpired):
            decode_token(expired, "secret")
        with pytest.raises(TokenMalformed):
            decode_token("a.b.c", "secret")

    def test_wrong_secret_is_malformed(self):
        token = encode_token({"sub": "x"}, "secret", timedelta(minutes=1))

        with pytest.raises(TokenMalformed):
            decode_token(token, "other-secret")

    def test_tokens_are_unique(self):
        first = encode_token({"sub": "x"}, "secret", timedelta(minutes=1))
        second = encode_token({"sub": "x"}, "secret", timedelta(minutes=1))

        assert first != second


class TestTokenService:
    def test_access_token_claims(self, tokens, settings, test_user):
        token = tokens.create_access_token(test_user)

        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
        assert payload["type"] == ACCESS
        assert payload["user_id"] == str(test_user.id)
        assert payload["name"] == test_user.name
        assert payload["user_roles"] == "user"
        assert payload["exp"] - payload["iat"] == 3600

    def test_decode_access_token(self, tokens, test_user):
        claims = tokens.decode_access_token(tokens.create_access_token(test_user))

        assert claims.user_id == test_user.id
        assert claims.name == test_user.name
        assert claims.role == "user"

    def test_refresh_token_uses_its_own_secret(self, tokens, settings, test_user):
        token = tokens.create_refresh_token(test_user)

        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
        assert tokens.decode_refresh_token(token) == test_user.id

    def test_refresh_token_lifetime(self, tokens, settings, test_user):
        payload = jwt.decode(
            tokens.create_refresh_token(test_user),
            settings.refresh_token_secret,
            algorithms=[ALGORITHM],
        )

        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_expired_access_token(self, tokens, settings, test_user):
        token = encode_token(
            {"type": ACCESS, "user_id": str(test_user.id)},
            settings.jwt_secret,
            timedelta(seconds=-1),
        )

        with pytest.raises(AccessTokenExpiredError) as exc_info:
            tokens.decode_access_token(token)

        assert exc_info.value.error_type == "token_expired"

    def test_verification_token_is_not_an_access_token(self, tokens):
        token = tokens.create_verification_token(ObjectId())

        with pytest.raises(InvalidTokenError):
            tokens.decode_access_token(token)

    def test_bad_user_id_claim(self, tokens, settings):
        token = encode_token(
            {"type": ACCESS, "user_id": "nope"},
            settings.jwt_secret,
            timedelta(minutes=1),
        )

        with pytest.raises(InvalidTokenError):
            tokens.decode_access_token(token)
