"""Authentication API — registration, email verification, login, status, logout."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coachhub.api.deps import get_auth_status, get_session_store
from coachhub.models.base import get_db
from coachhub.models.user import User
from coachhub.services import auth_service, registration
from coachhub.services.email_service import EmailNotifier, get_notifier
from coachhub.services.session_store import SessionStore

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────

class RegisterRequest(BaseModel):
    invite_token: str | None = Field(default=None, alias="inviteToken")
    email: str | None = None
    password: str | None = None
    password_confirm: str | None = Field(default=None, alias="passwordConfirm")


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ResendVerificationRequest(BaseModel):
    email: str = ""


def _user_out(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "role": u.role,
    }


# ── Registration ─────────────────────────────────────────

@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """Redeem an invitation and create the account."""
    result = registration.register(
        db,
        body.invite_token,
        body.email,
        body.password,
        body.password_confirm,
        notifier=notifier,
    )
    return {"message": result.message, "userId": result.user_id, "emailSent": result.email_sent}


@router.get("/verify-email")
def verify_email(token: str = "", db: Session = Depends(get_db)):
    """Consume a verification link and activate the account."""
    message = auth_service.verify_email(db, token)
    return {"success": True, "message": message}


@router.post("/resend-verification")
def resend_verification(
    body: ResendVerificationRequest,
    db: Session = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """Issue a fresh verification link for an unverified account."""
    return {"message": auth_service.resend_verification(db, body.email, notifier=notifier)}


# ── Sessions ─────────────────────────────────────────────

@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Authenticate and start a session under a fresh id."""
    result = auth_service.login(
        db, store, body.email, body.password,
        current_session_id=getattr(request.state, "session_id", None),
    )
    request.state.session_id = result.session_id
    return {"message": "Login successful", "user": _user_out(result.user)}


@router.get("/status")
def auth_status(status: auth_service.AuthStatus = Depends(get_auth_status)):
    """Report whether the session cookie maps to an active account."""
    if not status.authenticated:
        return {"authenticated": False}
    return {"authenticated": True, "user": _user_out(status.user)}


@router.post("/logout")
def logout(request: Request, store: SessionStore = Depends(get_session_store)):
    """Clear session and cookie."""
    auth_service.logout(store, getattr(request.state, "session_id", None))
    request.state.session_id = None
    return JSONResponse(content={"message": "Logged out successfully"})
