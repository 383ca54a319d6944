"""Tests for session credentials and password hashing."""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from strategic_planning.auth.credentials import CredentialService
from strategic_planning.auth.passwords import hash_password, verify_password
from strategic_planning.errors import TokenExpiredError, TokenMalformedError


@pytest.fixture
def service() -> CredentialService:
    return CredentialService(secret="test-secret", expire_minutes=5)


class TestCredentialService:
    def test_issue_and_verify(self, service):
        user = SimpleNamespace(id="u1", email="a@b.c", role="admin", department="IT")
        claims = service.verify(service.issue_for(user))
        assert claims["sub"] == "u1"
        assert claims["role"] == "admin"
        assert claims["department"] == "IT"
        assert claims["exp"] > claims["iat"]

    def test_expired(self, service):
        token = service.sign({"sub": "u1"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpiredError):
            service.verify(token)

    def test_wrong_secret(self, service):
        token = CredentialService(secret="other").sign({"sub": "u1"})
        with pytest.raises(TokenMalformedError):
            service.verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_garbage(self, service, token):
        with pytest.raises(TokenMalformedError):
            service.verify(token)

    def test_missing_subject(self, service):
        with pytest.raises(TokenMalformedError):
            service.verify(service.sign({"role": "admin"}))


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("admin123")
        assert hashed != "admin123"
        assert verify_password("admin123", hashed)
        assert not verify_password("admin124", hashed)

    def test_empty_inputs(self):
        assert not verify_password("", hash_password("x"))
        assert not verify_password("x", "")

    def test_unrecognized_hash(self):
        assert not verify_password("x", "plain-text")
