"""Authentication service — login, session status, logout, email verification"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coachhub.config import get_settings
from coachhub.exceptions import (
    AccountInactive,
    EmailDeliveryError,
    EmailUnverified,
    InvalidCredentials,
    VerificationExpired,
    VerificationInvalid,
)
from coachhub.models.user import AccountStatus, EmailVerificationToken, Role, User
from coachhub.services import tokens
from coachhub.services.email_service import EmailNotifier
from coachhub.services.passwords import hash_password, verify_password
from coachhub.services.principal import AuthMethod, Principal
from coachhub.services.registration import password_errors
from coachhub.services.session_store import SessionData, SessionStore
from coachhub.utils.logger import log

MSG_VERIFIED = "Email verified successfully. You can now log in."
MSG_RESEND = "If an unverified account exists for that email, a new verification link has been sent."

_DUMMY_PASSWORD_HASH = hash_password("coachhub-timing-equaliser")


@dataclass
class LoginResult:
    session_id: str
    user: User
    principal: Principal


@dataclass
class AuthStatus:
    authenticated: bool
    user: Optional[User] = None
    principal: Optional[Principal] = None


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def login(
    db: Session,
    store: SessionStore,
    email: str,
    password: str,
    current_session_id: Optional[str] = None,
) -> LoginResult:
    """Check credentials and open a session under a newly issued id."""
    user = get_user_by_email(db, email or "")
    if user is None:
        # Same bcrypt cost whether or not the account exists
        verify_password(password or "", _DUMMY_PASSWORD_HASH)
        log.info(f"Failed login for {email}")
        raise InvalidCredentials()
    if not verify_password(password or "", user.password_hash):
        log.info(f"Failed login for {email}")
        raise InvalidCredentials()
    if not user.is_email_verified:
        raise EmailUnverified()
    if user.account_status != AccountStatus.ACTIVE:
        raise AccountInactive()

    user.last_login = datetime.utcnow()
    db.commit()

    data = SessionData(user_id=user.id, email=user.email, auth_method=AuthMethod.EMAIL_PASSWORD)
    session_id = store.regenerate(current_session_id, data)
    log.info(f"User {user.id} logged in")
    return LoginResult(
        session_id=session_id,
        user=user,
        principal=Principal.from_user(user, data.auth_method),
    )


def status(db: Session, store: SessionStore, session_id: Optional[str]) -> AuthStatus:
    """Resolve a session id to a live, active account, or drop the session."""
    if not session_id:
        return AuthStatus(authenticated=False)

    data = store.get(session_id)
    if data is None:
        return AuthStatus(authenticated=False)

    user = db.query(User).filter(User.id == data.user_id).first()
    if not user or not user.is_active:
        log.info(f"Destroying session for missing or inactive user {data.user_id}")
        store.destroy(session_id)
        return AuthStatus(authenticated=False)

    return AuthStatus(
        authenticated=True,
        user=user,
        principal=Principal.from_user(user, data.auth_method),
    )


def logout(store: SessionStore, session_id: Optional[str]) -> None:
    """Remove a session (logout). Safe to call without one."""
    store.destroy(session_id)


def verify_email(db: Session, token: str) -> str:
    """Consume a verification token and activate its account."""
    record = (
        db.query(EmailVerificationToken)
        .filter(EmailVerificationToken.token == (token or ""))
        .first()
    )
    if not record:
        raise VerificationInvalid()

    if tokens.is_expired(record.expires_at):
        db.delete(record)
        db.commit()
        raise VerificationExpired()

    user = db.query(User).filter(User.id == record.user_id).first()
    if not user:
        db.delete(record)
        db.commit()
        raise VerificationInvalid()

    user.is_email_verified = True
    user.account_status = AccountStatus.ACTIVE
    db.delete(record)
    db.commit()
    log.info(f"Email verified for user {user.id}")
    return MSG_VERIFIED


def resend_verification(db: Session, email: str, notifier: Optional[EmailNotifier] = None) -> str:
    """Replace an unverified account's verification token and email it again."""
    user = get_user_by_email(db, email or "")
    if not user or user.is_email_verified:
        return MSG_RESEND

    db.query(EmailVerificationToken).filter(EmailVerificationToken.user_id == user.id).delete(
        synchronize_session=False
    )
    token = tokens.generate_token()
    db.add(EmailVerificationToken(
        user_id=user.id,
        token=token,
        expires_at=tokens.verification_expiry(),
    ))
    db.commit()

    notifier = notifier or EmailNotifier()
    try:
        notifier.send_verification(user.email, token, user.first_name)
    except EmailDeliveryError as exc:
        log.warning(f"Verification email resend to {user.email} failed: {exc.details}")
    return MSG_RESEND


def seed_initial_admin(db: Session) -> Optional[User]:
    """Create the first admin user from env vars if no users exist."""
    settings = get_settings()
    if not settings.initial_admin_email or not settings.initial_admin_password:
        return None
    # Skip if any users already exist
    if db.query(User).first():
        return None
    problems = password_errors(settings.initial_admin_password)
    if problems:
        log.error(f"INITIAL_ADMIN_PASSWORD rejected, no admin seeded: {'; '.join(problems)}")
        return None
    user = User(
        email=settings.initial_admin_email.lower().strip(),
        password_hash=hash_password(settings.initial_admin_password),
        first_name="Admin",
        is_email_verified=True,
        account_status=AccountStatus.ACTIVE,
        role=Role.ADMIN,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info(f"Seeded initial admin user: {user.email}")
    return user
