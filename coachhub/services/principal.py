"""The authenticated caller, as handed to every protected handler"""
from dataclasses import dataclass
from enum import Enum

from coachhub.models.user import Role, User


class AuthMethod(str, Enum):
    EMAIL_PASSWORD = "email_password"
    OAUTH = "oauth"


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    role: str
    auth_method: AuthMethod

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user: User, auth_method: AuthMethod) -> "Principal":
        return cls(user_id=user.id, email=user.email, role=user.role, auth_method=auth_method)
