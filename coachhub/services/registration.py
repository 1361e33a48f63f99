"""
Invite-only registration.

The invitation is claimed (pending -> processing) before any account work, and
every exit after a successful claim leaves it either ``accepted`` (committed)
or back at ``pending``. Password hashing and email happen outside the
database transaction.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coachhub.config import get_settings
from coachhub.exceptions import (
    AccountExists,
    ClaimConflict,
    CoachHubError,
    EmailDeliveryError,
    EmailMismatch,
    InvalidInviteToken,
    InvitationExpired,
    InvitationUnavailable,
    ProfileConflict,
    ProfileMissing,
    RegistrationFailed,
    RegistrationValidationError,
)
from coachhub.models.base import transaction
from coachhub.models.invitation import Invitation, InvitationStatus
from coachhub.models.user import AccountStatus, Coach, EmailVerificationToken, Role, User
from coachhub.services import tokens
from coachhub.services.email_service import EmailNotifier
from coachhub.services.invitation_store import InvitationStore
from coachhub.services.passwords import hash_password
from coachhub.utils.logger import log

MIN_PASSWORD_LENGTH = 12
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MSG_REGISTERED = "Registration successful. Please check your email to verify your account."
MSG_REGISTERED_NO_EMAIL = (
    "Registration successful, but we could not send the verification email. "
    "Request a new verification link from the login page."
)
MSG_REGISTERED_DEV = "Registration successful. Account activated (development mode)."

CLAIM_CONFLICT_MESSAGES = {
    InvitationStatus.ACCEPTED: "This invitation has already been used. Please log in instead.",
    InvitationStatus.REVOKED: "This invitation is no longer valid. Please contact an administrator.",
    InvitationStatus.EXPIRED: "This invitation is no longer valid. Please contact an administrator.",
    InvitationStatus.PROCESSING: "A previous registration attempt failed. Please try again.",
}
MSG_CLAIM_UNKNOWN = "Unable to process invitation. Please try again or contact an administrator."


@dataclass
class RegistrationResult:
    user_id: str
    email_sent: bool
    message: str


def password_errors(password: Optional[str]) -> List[str]:
    """Every strength rule the password breaks, in display order."""
    password = password or ""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("Password must contain at least one number")
    if not any(ch in SPECIAL_CHARACTERS for ch in password):
        problems.append("Password must contain at least one special character")
    return problems


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email.strip()))


def validate_registration(
    invite_token: Optional[str],
    email: Optional[str],
    password: Optional[str],
    password_confirm: Optional[str],
) -> None:
    """Field-level checks. Raises RegistrationValidationError with every problem found."""
    errors: Dict[str, List[str]] = {}

    def add(field: str, message: str):
        errors.setdefault(field, []).append(message)

    if not invite_token:
        add("inviteToken", "Invitation token required")
    if not is_valid_email(email):
        add("email", "Invalid email address")
    for problem in password_errors(password):
        add("password", problem)
    if (password or "") != (password_confirm or ""):
        add("passwordConfirm", "Passwords do not match")

    if errors:
        raise RegistrationValidationError(errors)


def _claim_conflict(store: InvitationStore, invitation_id: str) -> InvitationUnavailable:
    """Build the registrant-facing error from the invitation's status right now."""
    current = store.get(invitation_id)
    status = current.effective_status() if current else None

    if status == InvitationStatus.PROCESSING:
        # Left over from a crashed attempt; free it so the next try can claim it.
        store.revert_to_pending(invitation_id)

    message = CLAIM_CONFLICT_MESSAGES.get(status, MSG_CLAIM_UNKNOWN)
    return InvitationUnavailable(message, invitation_id, status)


def link_profile(coach: Coach, user_id: str) -> None:
    """Attach an account to a coach profile. Re-linking the same account is a no-op."""
    if coach.user_id and coach.user_id != user_id:
        raise ProfileConflict(coach.id, coach.user_id)
    coach.user_id = user_id


def _provision(
    db: Session,
    store: InvitationStore,
    invitation: Invitation,
    coach: Coach,
    email: str,
    password_hash: str,
    auto_verify: bool,
) -> tuple[User, str]:
    """Create account, link profile, accept invitation and issue a verification token as one unit."""
    verification_token = tokens.generate_token()
    now = datetime.utcnow()

    with transaction(db):
        user = User(
            email=email,
            first_name=coach.first_name,
            last_name=coach.last_name,
            password_hash=password_hash,
            is_email_verified=auto_verify,
            account_status=AccountStatus.ACTIVE if auto_verify else AccountStatus.PENDING,
            role=Role.COACH,
        )
        db.add(user)
        db.flush()

        link_profile(coach, user.id)
        store.mark_accepted(invitation.id, now)
        db.add(EmailVerificationToken(
            user_id=user.id,
            token=verification_token,
            expires_at=tokens.verification_expiry(now),
        ))
        db.flush()

    return user, verification_token


def register(
    db: Session,
    invite_token: Optional[str],
    email: Optional[str],
    password: Optional[str],
    password_confirm: Optional[str],
    notifier: Optional[EmailNotifier] = None,
) -> RegistrationResult:
    """Redeem an invitation and create the coach's account exactly once."""
    validate_registration(invite_token, email, password, password_confirm)
    email = email.strip().lower()

    store = InvitationStore(db)
    invitation = store.get_by_token(invite_token)
    if invitation is None:
        raise InvalidInviteToken()
    if tokens.is_expired(invitation.expires_at):
        raise InvitationExpired(invitation.id)
    if invitation.email.lower() != email:
        raise EmailMismatch(invitation.id)

    try:
        store.claim(invitation.id)
    except ClaimConflict:
        raise _claim_conflict(store, invitation.id)

    settings = get_settings()
    auto_verify = settings.is_development

    try:
        existing = db.query(User).filter(func.lower(User.email) == email).first()
        if existing:
            raise AccountExists(email)

        coach = db.query(Coach).filter(Coach.id == invitation.coach_id).first()
        if coach is None:
            raise ProfileMissing(invitation.coach_id)

        password_hash = hash_password(password)
        user, verification_token = _provision(
            db, store, invitation, coach, email, password_hash, auto_verify
        )
    except CoachHubError:
        store.revert_to_pending(invitation.id)
        raise
    except IntegrityError as exc:
        # A concurrent registration took the email between the check and the insert
        log.warning(f"Email {email} taken during registration for invitation {invitation.id}: {exc.orig}")
        store.revert_to_pending(invitation.id)
        raise AccountExists(email) from exc
    except Exception as exc:
        log.exception(f"Registration failed for invitation {invitation.id}: {exc}")
        store.revert_to_pending(invitation.id)
        raise RegistrationFailed(exc) from exc

    log.info(f"Account {user.id} created for {email} (invitation {invitation.id} accepted)")

    if auto_verify:
        return RegistrationResult(user_id=user.id, email_sent=False, message=MSG_REGISTERED_DEV)

    notifier = notifier or EmailNotifier()
    try:
        notifier.send_verification(user.email, verification_token, user.first_name)
    except EmailDeliveryError as exc:
        log.warning(f"Verification email to {email} failed: {exc.message} {exc.details}")
        return RegistrationResult(user_id=user.id, email_sent=False, message=MSG_REGISTERED_NO_EMAIL)

    return RegistrationResult(user_id=user.id, email_sent=True, message=MSG_REGISTERED)
