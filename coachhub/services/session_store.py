"""Server-side session storage backed by the user_sessions table"""
import secrets
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from coachhub.models.session import UserSession
from coachhub.services.principal import AuthMethod
from coachhub.utils.logger import log

SESSION_ID_BYTES = 32


@dataclass
class SessionData:
    user_id: str
    email: str
    auth_method: AuthMethod

    def to_dict(self) -> dict:
        data = asdict(self)
        data["auth_method"] = self.auth_method.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Optional["SessionData"]:
        try:
            return cls(
                user_id=data["user_id"],
                email=data["email"],
                auth_method=AuthMethod(data.get("auth_method", AuthMethod.EMAIL_PASSWORD.value)),
            )
        except (KeyError, ValueError, TypeError):
            return None


class SessionStore:
    """Sessions are pointers to an account, never a source of truth about it."""

    def __init__(self, db: Session, lifetime: timedelta = timedelta(days=30)):
        self.db = db
        self.lifetime = lifetime

    def _row(self, sid: str) -> Optional[UserSession]:
        return self.db.query(UserSession).filter(UserSession.sid == sid).first()

    def get(self, sid: Optional[str]) -> Optional[SessionData]:
        if not sid:
            return None
        row = self._row(sid)
        if row is None:
            return None
        if row.expires_at <= datetime.utcnow():
            self.destroy(sid)
            return None
        data = SessionData.from_dict(row.data or {})
        if data is None:
            log.warning(f"Discarding session {sid[:8]}... with unreadable data")
            self.destroy(sid)
        return data

    def regenerate(self, old_sid: Optional[str], data: SessionData) -> str:
        """Issue a fresh session id for ``data`` and drop the old one."""
        if old_sid:
            self.db.query(UserSession).filter(UserSession.sid == old_sid).delete(synchronize_session=False)
        sid = secrets.token_urlsafe(SESSION_ID_BYTES)
        self.db.add(UserSession(
            sid=sid,
            data=data.to_dict(),
            expires_at=datetime.utcnow() + self.lifetime,
        ))
        self.db.commit()
        return sid

    def touch(self, sid: str) -> None:
        """Roll the expiry forward on activity."""
        self.db.query(UserSession).filter(UserSession.sid == sid).update(
            {UserSession.expires_at: datetime.utcnow() + self.lifetime},
            synchronize_session=False,
        )
        self.db.commit()

    def destroy(self, sid: Optional[str]) -> None:
        if not sid:
            return
        self.db.query(UserSession).filter(UserSession.sid == sid).delete(synchronize_session=False)
        self.db.commit()

    def cleanup_expired(self) -> int:
        """Delete expired sessions. Returns count removed."""
        count = (
            self.db.query(UserSession)
            .filter(UserSession.expires_at <= datetime.utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if count:
            log.info(f"Removed {count} expired sessions")
        return count
