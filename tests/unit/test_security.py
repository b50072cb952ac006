"""
Unit tests for password hashing and access tokens.
"""

from datetime import timedelta

import pytest
from jose import jwt

from booktracker.security import (
    InvalidTokenError,
    PasswordHasher,
    TokenExpiredError,
    TokenService,
)


class TestPasswordHasher:
    """Tests for PasswordHasher class."""

    def test_hash_is_not_plaintext(self, password_hasher):
        hashed = password_hasher.hash("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert hashed.startswith("$2")

    def test_verify_roundtrip(self, password_hasher):
        hashed = password_hasher.hash("s3cret-pass")

        assert password_hasher.verify("s3cret-pass", hashed)
        assert not password_hasher.verify("wrong-pass", hashed)

    def test_hashes_are_salted(self, password_hasher):
        assert password_hasher.hash("same") != password_hasher.hash("same")

    def test_default_cost_factor(self):
        hashed = PasswordHasher().hash("s3cret-pass")

        assert hashed.split("$")[2] == "10"

    def test_malformed_hash_does_not_verify(self, password_hasher):
        assert not password_hasher.verify("anything", "not-a-bcrypt-hash")

    def test_long_password(self, password_hasher):
        password = "x" * 100
        hashed = password_hasher.hash(password)

        assert password_hasher.verify(password, hashed)


class TestTokenService:
    """Tests for TokenService class."""

    def test_issue_and_verify(self, token_service):
        token = token_service.issue("user-1", "reader@example.com")

        claims = token_service.verify(token)

        assert claims.user_id == "user-1"
        assert claims.email == "reader@example.com"

    def test_payload_fields(self, token_service):
        token = token_service.issue("user-1", "reader@example.com")

        payload = jwt.get_unverified_claims(token)

        assert payload["userId"] == "user-1"
        assert payload["email"] == "reader@example.com"
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired_token(self, token_service):
        token = token_service.issue(
            "user-1", "reader@example.com", expires_delta=timedelta(seconds=-10)
        )

        with pytest.raises(TokenExpiredError):
            token_service.verify(token)

    def test_wrong_secret(self, token_service):
        forged = TokenService(secret_key="someone-else").issue("user-1", "reader@example.com")

        with pytest.raises(InvalidTokenError):
            token_service.verify(forged)

    def test_tampered_payload(self, token_service):
        token = token_service.issue("user-1", "reader@example.com")
        header, _, signature = token.split(".")
        other = token_service.issue("user-2", "other@example.com")
        _, other_payload, _ = other.split(".")

        with pytest.raises(InvalidTokenError):
            token_service.verify(f"{header}.{other_payload}.{signature}")

    def test_garbage_token(self, token_service):
        with pytest.raises(InvalidTokenError):
            token_service.verify("not-a-token")

    def test_missing_expiry_rejected(self, token_service):
        token = jwt.encode(
            {"userId": "user-1", "email": "reader@example.com"},
            token_service.secret_key,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_missing_identity_rejected(self, token_service):
        token = jwt.encode(
            {"email": "reader@example.com", "exp": 4102444800},
            token_service.secret_key,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenService(secret_key="")
