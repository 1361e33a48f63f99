"""Operator-side account management: create administrators, change roles"""
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from coachhub.exceptions import (
    AccountExists,
    InvalidInputError,
    NotFoundError,
    RegistrationValidationError,
)
from coachhub.models.base import transaction
from coachhub.models.user import AccountStatus, Role, User
from coachhub.services.auth_service import get_user_by_email
from coachhub.services.passwords import hash_password
from coachhub.services.registration import is_valid_email, password_errors
from coachhub.utils.logger import log

ROLES = (Role.ADMIN, Role.COACH)


def check_admin_credentials(email: Optional[str], password: Optional[str]) -> None:
    """Apply the registration email and password rules to operator-supplied credentials."""
    errors = {}
    if not is_valid_email(email):
        errors["email"] = ["Invalid email address"]
    problems = password_errors(password)
    if problems:
        errors["password"] = problems
    if errors:
        raise RegistrationValidationError(errors)


def create_admin(
    db: Session,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
) -> User:
    """Create a verified, active administrator account."""
    check_admin_credentials(email, password)
    email = email.strip().lower()

    if get_user_by_email(db, email):
        raise AccountExists(email)

    password_hash = hash_password(password)
    with transaction(db):
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            is_email_verified=True,
            account_status=AccountStatus.ACTIVE,
            role=Role.ADMIN,
        )
        db.add(user)
    db.refresh(user)

    log.info(f"Created admin user {user.id} ({user.email})")
    return user


def set_role(db: Session, email: str, role: str) -> Tuple[User, bool]:
    """Change an account's role. Returns the user and whether anything changed."""
    if role not in ROLES:
        raise InvalidInputError(
            f"Role must be one of: {', '.join(ROLES)}",
            details={"role": role},
        )

    user = get_user_by_email(db, email or "")
    if user is None:
        raise NotFoundError("User", email)

    if user.role == role:
        return user, False

    previous = user.role
    with transaction(db):
        user.role = role
    log.info(f"Changed role of {user.email} from {previous} to {role}")
    return user, True
