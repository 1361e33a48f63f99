"""
Configuration management for the Coach Hub accounts service
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Coach Hub"
    environment: str = "production"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Database
    database_url: str = "sqlite:///./coachhub.db"

    # Sessions
    session_cookie_name: str = "coachhub_sid"
    session_lifetime_days: int = 30

    # Email (Resend)
    app_base_url: str = "http://localhost:8000"
    resend_api_key: str = ""
    email_from: str = "Coach Hub <noreply@coachhub.local>"

    # Bootstrap administrator
    initial_admin_email: str = ""
    initial_admin_password: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
