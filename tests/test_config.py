"""Settings defaults"""
from coachhub.config import Settings


def test_unset_environment_is_not_development(monkeypatch):
    """Auto-verification must never switch on just because ENVIRONMENT was forgotten."""
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    settings = Settings(_env_file=None)
    assert settings.environment == "production"
    assert settings.is_development is False


def test_development_is_opt_in(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    assert Settings(_env_file=None).is_development is True
