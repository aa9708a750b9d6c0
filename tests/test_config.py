"""
Tests for settings parsing and token handling.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from shared_expenses.config import DEFAULT_SPLIT_TOLERANCE, load_settings, parse_split_tolerance, split_tolerance
from shared_expenses.errors import AuthenticationError
from shared_expenses.security import TokenIssuer, hash_password, verify_password


@pytest.mark.parametrize("raw", [None, "", "abc", "-1", "NaN", "Infinity"])
def test_unusable_tolerance_falls_back_to_default(raw):
    assert parse_split_tolerance(raw) == DEFAULT_SPLIT_TOLERANCE


@pytest.mark.parametrize("raw, expected", [("0.5", Decimal("0.5")), (" 0 ", Decimal("0")), (Decimal("2"), Decimal("2"))])
def test_tolerance_is_parsed(raw, expected):
    assert parse_split_tolerance(raw) == expected


def test_tolerance_from_environment_without_app(monkeypatch):
    monkeypatch.setenv("SPLIT_TOLERANCE", "0.25")
    assert split_tolerance() == Decimal("0.25")
    monkeypatch.delenv("SPLIT_TOLERANCE")
    assert split_tolerance() == DEFAULT_SPLIT_TOLERANCE


def test_jwt_secret_is_generated_when_unset(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    first, second = load_settings()["JWT_SECRET"], load_settings()["JWT_SECRET"]
    assert first and second and first != second


class TestTokenIssuer:
    def test_issue_then_resolve(self):
        issuer = TokenIssuer("secret")
        token = issuer.issue("user-1")
        assert issuer.resolve(f"Bearer {token}") == "user-1"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer garbage"])
    def test_bad_header_is_rejected(self, header):
        with pytest.raises(AuthenticationError):
            TokenIssuer("secret").resolve(header)

    def test_token_from_another_secret_is_rejected(self):
        token = TokenIssuer("one").issue("user-1")
        with pytest.raises(AuthenticationError, match="invalid token"):
            TokenIssuer("two").resolve(f"Bearer {token}")

    def test_expired_token_is_rejected(self):
        issuer = TokenIssuer("secret")
        issuer.expiry = timedelta(seconds=-1)
        token = issuer.issue("user-1")
        with pytest.raises(AuthenticationError, match="expired token"):
            issuer.resolve(f"Bearer {token}")

    @pytest.mark.parametrize("hours", ["0", "-3", "soon"])
    def test_invalid_expiry_is_a_startup_error(self, hours):
        with pytest.raises(ValueError):
            TokenIssuer("secret", expiry_hours=hours)

    def test_empty_secret_is_a_startup_error(self):
        with pytest.raises(ValueError):
            TokenIssuer("")


def test_password_hash_round_trip():
    hashed = hash_password("x" * 100)
    assert verify_password("x" * 100, hashed)
    assert not verify_password("x" * 99, hashed)
    assert not verify_password("anything", None)
