"""Unit tests for app.core.security: bcrypt hashing, JWT access tokens, refresh token values."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import SecretStr

from app.core.config import get_settings
from app.core.security import (
    create_access_token,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    verify_password,
)
from support import settings_with


class TestPasswordHashing(unittest.TestCase):
    """hash_password produces salted bcrypt digests that verify_password accepts."""

    def test_hash_then_verify(self) -> None:
        digest = hash_password("secret1", rounds=4)
        self.assertTrue(digest.startswith("$2"))
        self.assertTrue(verify_password("secret1", digest))

    def test_wrong_password_rejected(self) -> None:
        digest = hash_password("secret1", rounds=4)
        self.assertFalse(verify_password("secret2", digest))

    def test_same_password_gets_different_salt(self) -> None:
        self.assertNotEqual(hash_password("secret1", rounds=4), hash_password("secret1", rounds=4))

    def test_malformed_hash_is_false_not_error(self) -> None:
        self.assertFalse(verify_password("secret1", "not-a-bcrypt-hash"))

    def test_passwords_longer_than_72_bytes_are_truncated(self) -> None:
        base = "a" * 72
        digest = hash_password(base + "tail-one", rounds=4)
        self.assertTrue(verify_password(base + "tail-two", digest))


class TestAccessToken(unittest.TestCase):
    """create_access_token embeds sub/role/iss/aud; decode_access_token validates all of them."""

    def setUp(self) -> None:
        self.settings = get_settings()

    def test_claims(self) -> None:
        token = create_access_token("42", "Moderator", self.settings)
        payload = decode_access_token(token, self.settings)
        self.assertEqual(payload["sub"], "42")
        self.assertEqual(payload["role"], "Moderator")
        self.assertEqual(payload["iss"], self.settings.JWT_ISSUER)
        self.assertEqual(payload["aud"], self.settings.JWT_AUDIENCE)
        self.assertEqual(
            payload["exp"] - payload["iat"],
            self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    def test_expired_token_rejected(self) -> None:
        issued = datetime.now(UTC) - timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES + 1)
        token = create_access_token("42", "User", self.settings, now=issued)
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token, self.settings)

    def test_wrong_secret_rejected(self) -> None:
        other = settings_with(JWT_SECRET=SecretStr("another-secret-value-0123456789"))
        token = create_access_token("42", "User", other)
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token, self.settings)

    def test_wrong_audience_rejected(self) -> None:
        token = create_access_token("42", "User", settings_with(JWT_AUDIENCE="someone-else"))
        with self.assertRaises(jwt.InvalidAudienceError):
            decode_access_token(token, self.settings)

    def test_wrong_issuer_rejected(self) -> None:
        token = create_access_token("42", "User", settings_with(JWT_ISSUER="someone-else"))
        with self.assertRaises(jwt.InvalidIssuerError):
            decode_access_token(token, self.settings)


class TestRefreshTokenValue(unittest.TestCase):
    def test_long_and_unique(self) -> None:
        values = {generate_refresh_token() for _ in range(50)}
        self.assertEqual(len(values), 50)
        # 64 random bytes -> at least 512 bits of entropy, 86 url-safe chars.
        self.assertTrue(all(len(v) >= 86 for v in values))


if __name__ == "__main__":
    unittest.main()
