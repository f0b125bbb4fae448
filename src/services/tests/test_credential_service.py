"""Unit tests for credential_service module."""

import unittest
import sys
from pathlib import Path
from datetime import datetime, timedelta, timezone

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from jose import jwt

from domain.model.user import User
from services.credential_service import (
    JWT_ALGORITHM,
    JWT_AUDIENCE,
    JWT_ISSUER,
    CredentialService,
    TokenClaims,
    hash_password,
    verify_password,
)

SECRET = "test-secret-key"
FAST_ROUNDS = 4


def _make_user(**overrides) -> User:
    now = datetime.now(timezone.utc)
    defaults = dict(
        id="user-123",
        email="ann@example.com",
        name="Ann",
        password_hash="irrelevant",
        created_at=now,
        updated_at=now,
    )
    defaults.update(overrides)
    return User(**defaults)


class TestPasswordHashing(unittest.TestCase):
    """Test hash_password / verify_password."""

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("Password1", rounds=FAST_ROUNDS)

        self.assertNotEqual(hashed, "Password1")
        self.assertGreater(len(hashed), 50)
        self.assertTrue(verify_password("Password1", hashed))

    def test_same_password_gets_different_salts(self):
        first = hash_password("Password1", rounds=FAST_ROUNDS)
        second = hash_password("Password1", rounds=FAST_ROUNDS)

        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("Password1", second))

    def test_wrong_password_does_not_verify(self):
        hashed = hash_password("Password2", rounds=FAST_ROUNDS)
        self.assertFalse(verify_password("Password1", hashed))

    def test_malformed_hash_returns_false(self):
        self.assertFalse(verify_password("Password1", "not-a-bcrypt-hash"))
        self.assertFalse(verify_password("Password1", ""))
        self.assertFalse(verify_password("Password1", None))

    def test_long_password_is_hashed(self):
        long_password = "Aa1" + "x" * 100
        hashed = hash_password(long_password, rounds=FAST_ROUNDS)
        self.assertTrue(verify_password(long_password, hashed))


class TestCredentialService(unittest.TestCase):
    """Test token issuance and verification."""

    def setUp(self):
        self.service = CredentialService(SECRET, bcrypt_rounds=FAST_ROUNDS)
        self.user = _make_user()

    def test_requires_secret_key(self):
        with self.assertRaises(ValueError):
            CredentialService("")

    def test_issue_and_verify_round_trip(self):
        token = self.service.issue_token(self.user)

        claims = self.service.verify_token(token)

        self.assertEqual(claims, TokenClaims(id="user-123", email="ann@example.com", name="Ann"))

    def test_token_carries_issuer_audience_and_24h_expiry(self):
        issued = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        token = self.service.issue_token(self.user, now=issued)

        payload = jwt.get_unverified_claims(token)

        self.assertEqual(payload["iss"], JWT_ISSUER)
        self.assertEqual(payload["aud"], JWT_AUDIENCE)
        self.assertEqual(payload["exp"] - payload["iat"], 24 * 3600)
        self.assertNotIn("password_hash", payload)

    def test_expired_token_is_invalid(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = self.service.issue_token(self.user, now=issued)

        self.assertIsNone(self.service.verify_token(token))

    def test_token_signed_with_other_key_is_invalid(self):
        other = CredentialService("another-secret", bcrypt_rounds=FAST_ROUNDS)
        token = other.issue_token(self.user)

        self.assertIsNone(self.service.verify_token(token))

    def test_wrong_audience_is_invalid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "id": "user-123", "email": "ann@example.com", "name": "Ann",
                "iss": JWT_ISSUER, "aud": "someone-else",
                "iat": now, "exp": now + timedelta(hours=1),
            },
            SECRET,
            algorithm=JWT_ALGORITHM,
        )

        self.assertIsNone(self.service.verify_token(token))

    def test_missing_identity_claims_is_invalid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iss": JWT_ISSUER, "aud": JWT_AUDIENCE, "iat": now, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm=JWT_ALGORITHM,
        )

        self.assertIsNone(self.service.verify_token(token))

    def test_malformed_token_is_invalid(self):
        self.assertIsNone(self.service.verify_token("not-a-token"))
        self.assertIsNone(self.service.verify_token(""))

    def test_verify_password_without_hash_is_false(self):
        self.assertFalse(self.service.verify_password("Password1", None))

    def test_service_hash_uses_configured_rounds(self):
        hashed = self.service.hash_password("Password1")

        self.assertTrue(hashed.startswith("$2b$04$"))
        self.assertTrue(self.service.verify_password("Password1", hashed))


if __name__ == '__main__':
    unittest.main()
