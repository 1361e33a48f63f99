"""Token generation and expiry helpers for invitations and email verification"""
import secrets
from datetime import datetime, timedelta

INVITATION_TTL = timedelta(hours=48)
VERIFICATION_TTL = timedelta(hours=24)
MIN_TOKEN_BYTES = 32
DEFAULT_TOKEN_BYTES = 48


def generate_token(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Return a URL-safe token built from at least 32 random bytes."""
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"Tokens need at least {MIN_TOKEN_BYTES} random bytes")
    return secrets.token_urlsafe(nbytes)


def invitation_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.utcnow()) + INVITATION_TTL


def verification_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.utcnow()) + VERIFICATION_TTL


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    return (now or datetime.utcnow()) > expires_at
