"""Server-side session rows, keyed by the id stored in the session cookie"""
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func

from coachhub.models.base import Base


class UserSession(Base):
    __tablename__ = "user_sessions"

    sid = Column(String(128), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
