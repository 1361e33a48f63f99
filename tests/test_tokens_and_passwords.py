"""Token issuer and credential hasher."""
from datetime import datetime, timedelta

import pytest

from coachhub.services import tokens
from coachhub.services.passwords import hash_password, verify_password


def test_generated_tokens_are_url_safe_and_unique():
    generated = {tokens.generate_token() for _ in range(200)}
    assert len(generated) == 200
    for token in generated:
        assert "+" not in token and "/" not in token and "=" not in token
        assert len(token) >= 43  # 32 bytes of base64url


def test_short_tokens_are_refused():
    with pytest.raises(ValueError):
        tokens.generate_token(16)


def test_expiry_windows():
    now = datetime(2026, 3, 1, 12, 0, 0)
    assert tokens.invitation_expiry(now) == now + timedelta(hours=48)
    assert tokens.verification_expiry(now) == now + timedelta(hours=24)


def test_is_expired_is_strict():
    moment = datetime(2026, 3, 1, 12, 0, 0)
    assert tokens.is_expired(moment, now=moment) is False
    assert tokens.is_expired(moment, now=moment + timedelta(microseconds=1)) is True
    assert tokens.is_expired(moment, now=moment - timedelta(seconds=1)) is False


def test_password_hash_round_trip():
    digest = hash_password("Backstroke#2024x")
    assert digest != "Backstroke#2024x"
    assert digest.startswith("$2b$10$")
    assert verify_password("Backstroke#2024x", digest)
    assert not verify_password("backstroke#2024x", digest)


def test_hashes_are_salted():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_rejects_missing_or_malformed_hash():
    assert verify_password("anything", None) is False
    assert verify_password("anything", "not-a-bcrypt-hash") is False
