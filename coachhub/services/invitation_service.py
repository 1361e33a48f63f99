"""Administrator operations on invitations: create, resend, revoke, list"""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from coachhub.exceptions import (
    AccountExists,
    EmailDeliveryError,
    InvalidInputError,
    InvitationExpired,
    InvitationStateError,
    NotFoundError,
)
from coachhub.models.invitation import Invitation, InvitationStatus
from coachhub.models.user import Coach
from coachhub.services import tokens
from coachhub.services.auth_service import get_user_by_email
from coachhub.services.email_service import EmailNotifier
from coachhub.services.invitation_store import InvitationStore
from coachhub.services.principal import Principal
from coachhub.services.registration import EMAIL_RE
from coachhub.utils.logger import log

MSG_EMAIL_FAILED = "Failed to send email. Invitation created but email delivery failed."


@dataclass
class EmailOutcome:
    sent: bool
    error: Optional[str] = None


def invitation_out(invitation: Invitation) -> dict:
    """Public view of an invitation. The token is never included."""
    return {
        "id": invitation.id,
        "email": invitation.email,
        "coachId": invitation.coach_id,
        "status": invitation.effective_status(),
        "createdBy": invitation.created_by,
        "createdAt": invitation.created_at.isoformat() if invitation.created_at else None,
        "expiresAt": invitation.expires_at.isoformat() if invitation.expires_at else None,
        "acceptedAt": invitation.accepted_at.isoformat() if invitation.accepted_at else None,
    }


class InvitationService:
    def __init__(self, db: Session, notifier: Optional[EmailNotifier] = None):
        self.db = db
        self.store = InvitationStore(db)
        self.notifier = notifier or EmailNotifier()

    def _coach(self, coach_id: str) -> Coach:
        coach = self.db.query(Coach).filter(Coach.id == coach_id).first()
        if coach is None:
            raise NotFoundError("Coach", coach_id)
        return coach

    def _send(self, invitation: Invitation, coach: Coach) -> EmailOutcome:
        try:
            self.notifier.send_invitation(invitation.email, invitation.token, coach.full_name)
        except EmailDeliveryError as exc:
            log.warning(f"Invitation email for {invitation.id} failed: {exc.message} {exc.details}")
            return EmailOutcome(sent=False, error=MSG_EMAIL_FAILED)
        return EmailOutcome(sent=True)

    def list_all(self) -> List[Invitation]:
        return self.store.list_all()

    def create(self, email: str, coach_id: str, principal: Principal) -> tuple[Invitation, EmailOutcome]:
        email = (email or "").strip().lower()
        if not EMAIL_RE.match(email):
            raise InvalidInputError("Invalid email address", details={"field": "email"})
        if not coach_id:
            raise InvalidInputError("Coach ID required", details={"field": "coachId"})

        coach = self._coach(coach_id)

        existing = self.store.get_by_email(email)
        if existing and existing.effective_status() == InvitationStatus.PENDING:
            raise InvalidInputError("Invitation already sent to this email")
        if get_user_by_email(self.db, email):
            raise AccountExists(email)

        invitation = self.store.create(
            email=email,
            coach_id=coach.id,
            token=tokens.generate_token(),
            expires_at=tokens.invitation_expiry(),
            created_by=principal.user_id,
        )
        return invitation, self._send(invitation, coach)

    def resend(self, invitation_id: str) -> EmailOutcome:
        invitation = self.store.get(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation", invitation_id)
        if invitation.status != InvitationStatus.PENDING:
            raise InvitationStateError(invitation.id, invitation.status, "resend")
        if tokens.is_expired(invitation.expires_at):
            raise InvitationExpired(invitation.id)
        return self._send(invitation, self._coach(invitation.coach_id))

    def revoke(self, invitation_id: str) -> Invitation:
        return self.store.revoke(invitation_id)
