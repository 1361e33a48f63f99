"""Database models for Coach Hub"""

from coachhub.models.user import (
    User,
    Coach,
    EmailVerificationToken,
    AccountStatus,
    Role,
)

from coachhub.models.invitation import Invitation, InvitationStatus
from coachhub.models.session import UserSession

__all__ = [
    "User",
    "Coach",
    "EmailVerificationToken",
    "AccountStatus",
    "Role",
    "Invitation",
    "InvitationStatus",
    "UserSession",
]
