"""Invitation model for invite-only registration"""
from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from coachhub.models.base import Base
from coachhub.models.user import _uuid


class InvitationStatus:
    PENDING = "pending"
    PROCESSING = "processing"
    ACCEPTED = "accepted"
    REVOKED = "revoked"
    EXPIRED = "expired"


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("coaches.id"), nullable=False, index=True)
    token = Column(String(128), unique=True, index=True, nullable=False)
    status = Column(String(20), nullable=False, default=InvitationStatus.PENDING)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)

    def effective_status(self, now: datetime | None = None) -> str:
        """Stored status with lazy expiry applied to open invitations."""
        now = now or datetime.utcnow()
        if self.status in (InvitationStatus.PENDING, InvitationStatus.PROCESSING) and now > self.expires_at:
            return InvitationStatus.EXPIRED
        return self.status
