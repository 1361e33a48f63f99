"""
Invitation persistence and status transitions.

Each transition is a conditional UPDATE on the row's current status, so the
database decides which caller wins when two requests race for one invitation.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coachhub.exceptions import ClaimConflict, InvitationStateError, NotFoundError
from coachhub.models.invitation import Invitation, InvitationStatus
from coachhub.utils.logger import log


class InvitationStore:
    """Storage operations for invitations, scoped to one row each."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        email: str,
        coach_id: str,
        token: str,
        expires_at: datetime,
        created_by: Optional[str] = None,
    ) -> Invitation:
        invitation = Invitation(
            email=email.lower().strip(),
            coach_id=coach_id,
            token=token,
            status=InvitationStatus.PENDING,
            expires_at=expires_at,
            created_by=created_by,
        )
        self.db.add(invitation)
        self.db.commit()
        self.db.refresh(invitation)
        log.info(f"Invitation {invitation.id} created for {invitation.email}")
        return invitation

    def get(self, invitation_id: str) -> Optional[Invitation]:
        return self.db.query(Invitation).filter(Invitation.id == invitation_id).first()

    def get_by_token(self, token: str) -> Optional[Invitation]:
        return self.db.query(Invitation).filter(Invitation.token == token).first()

    def get_by_email(self, email: str) -> Optional[Invitation]:
        """Most recent invitation for the email, matched case-insensitively."""
        return (
            self.db.query(Invitation)
            .filter(func.lower(Invitation.email) == email.lower().strip())
            .order_by(Invitation.created_at.desc(), Invitation.expires_at.desc())
            .first()
        )

    def list_all(self) -> List[Invitation]:
        return (
            self.db.query(Invitation)
            .order_by(Invitation.created_at.desc(), Invitation.expires_at.desc())
            .all()
        )

    def _transition(self, invitation_id: str, source: str, target: str, **values) -> int:
        return (
            self.db.query(Invitation)
            .filter(Invitation.id == invitation_id, Invitation.status == source)
            .update({Invitation.status: target, **values}, synchronize_session=False)
        )

    def _reload(self, invitation_id: str) -> Optional[Invitation]:
        self.db.expire_all()
        return self.get(invitation_id)

    def claim(self, invitation_id: str) -> Invitation:
        """pending -> processing. Exactly one concurrent caller can win."""
        updated = self._transition(
            invitation_id, InvitationStatus.PENDING, InvitationStatus.PROCESSING
        )
        self.db.commit()
        if updated == 0:
            log.warning(f"Claim conflict on invitation {invitation_id}")
            raise ClaimConflict(invitation_id)
        log.info(f"Invitation {invitation_id} claimed")
        return self._reload(invitation_id)

    def revert_to_pending(self, invitation_id: str) -> bool:
        """processing -> pending. A no-op for every other status."""
        updated = self._transition(
            invitation_id, InvitationStatus.PROCESSING, InvitationStatus.PENDING
        )
        self.db.commit()
        if updated:
            log.info(f"Invitation {invitation_id} reverted to pending")
        return bool(updated)

    def mark_accepted(self, invitation_id: str, accepted_at: datetime) -> None:
        """processing -> accepted. Flushed only; the caller owns the transaction."""
        updated = self._transition(
            invitation_id,
            InvitationStatus.PROCESSING,
            InvitationStatus.ACCEPTED,
            accepted_at=accepted_at,
        )
        if updated == 0:
            current = self.db.query(Invitation.status).filter(Invitation.id == invitation_id).scalar()
            raise InvitationStateError(invitation_id, current or "missing", "accept")

    def revoke(self, invitation_id: str) -> Invitation:
        """pending -> revoked. Anything else is rejected with the current status."""
        updated = self._transition(
            invitation_id, InvitationStatus.PENDING, InvitationStatus.REVOKED
        )
        self.db.commit()
        invitation = self._reload(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        if updated == 0:
            raise InvitationStateError(invitation_id, invitation.status, "revoke")
        log.info(f"Invitation {invitation_id} revoked ({invitation.email})")
        return invitation
