"""User (account), coach profile and verification token models"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from coachhub.models.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AccountStatus:
    PENDING = "pending"
    ACTIVE = "active"


class Role:
    COACH = "coach"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    password_hash = Column(String(255), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    account_status = Column(String(20), nullable=False, default=AccountStatus.PENDING)
    role = Column(String(20), nullable=False, default=Role.COACH)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    last_login = Column(DateTime, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.account_status == AccountStatus.ACTIVE and bool(self.is_email_verified)


class Coach(Base):
    """Staff profile. Managed elsewhere; only the account link is written here."""
    __tablename__ = "coaches"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    level = Column(String(50), nullable=False, default="No qualification")
    record_status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, server_default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class EmailVerificationToken(Base):
    __tablename__ = "email_verification_tokens"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(128), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
