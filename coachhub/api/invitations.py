"""Invitation management API (administrators only)."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coachhub.api.deps import require_admin
from coachhub.models.base import get_db
from coachhub.services.email_service import EmailNotifier, get_notifier
from coachhub.services.invitation_service import InvitationService, invitation_out
from coachhub.services.principal import Principal

router = APIRouter(prefix="/api/invitations", tags=["invitations"])


class CreateInvitationRequest(BaseModel):
    email: str = ""
    coach_id: str = Field(default="", alias="coachId")


def _service(
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
) -> InvitationService:
    return InvitationService(db, notifier)


@router.get("")
def list_invitations(
    service: InvitationService = Depends(_service),
    principal: Principal = Depends(require_admin),
):
    return [invitation_out(i) for i in service.list_all()]


@router.post("", status_code=201)
def create_invitation(
    body: CreateInvitationRequest,
    service: InvitationService = Depends(_service),
    principal: Principal = Depends(require_admin),
):
    """Create an invitation and email the registration link."""
    invitation, outcome = service.create(body.email, body.coach_id, principal)
    payload = {**invitation_out(invitation), "emailSent": outcome.sent}
    if not outcome.sent:
        payload["emailError"] = outcome.error
    return payload


@router.post("/{invitation_id}/resend")
def resend_invitation(
    invitation_id: str,
    service: InvitationService = Depends(_service),
    principal: Principal = Depends(require_admin),
):
    outcome = service.resend(invitation_id)
    if not outcome.sent:
        return JSONResponse(status_code=500, content={"message": "Failed to send email", "emailSent": False})
    return {"message": "Invitation email resent successfully", "emailSent": True}


@router.patch("/{invitation_id}/revoke")
def revoke_invitation(
    invitation_id: str,
    service: InvitationService = Depends(_service),
    principal: Principal = Depends(require_admin),
):
    return invitation_out(service.revoke(invitation_id))
