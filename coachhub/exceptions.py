"""
Custom exceptions for Coach Hub.

Every error carries a user-facing ``message`` and the HTTP status it maps to.
Internal detail goes in ``details`` and is logged, never returned.
"""

from typing import Any


class CoachHubError(Exception):
    """Base exception for Coach Hub."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# === Validation ===

class RegistrationValidationError(CoachHubError):
    """Raised when registration input is malformed. Holds per-field messages."""

    def __init__(self, errors: dict[str, list[str]]):
        first = next(iter(errors.values()))[0]
        super().__init__(message=first, details={"errors": errors})
        self.errors = errors


class InvalidInputError(CoachHubError):
    """Raised for malformed admin or login input."""
    pass


# === Invitation state ===

class InvalidInviteToken(CoachHubError):
    """Raised when no invitation matches the submitted token."""

    def __init__(self):
        super().__init__(message="Invalid invitation token")


class InvitationExpired(CoachHubError):
    """Raised when the invitation's expiry has passed."""

    def __init__(self, invitation_id: str):
        super().__init__(
            message="Invitation has expired. Please contact an administrator for a new invitation.",
            details={"invitation_id": invitation_id}
        )


class EmailMismatch(CoachHubError):
    """Raised when the registering email differs from the invited one."""

    def __init__(self, invitation_id: str):
        super().__init__(
            message="Email does not match invitation",
            details={"invitation_id": invitation_id}
        )


class ClaimConflict(CoachHubError):
    """Raised by the conditional pending -> processing update when no row matched."""

    def __init__(self, invitation_id: str):
        super().__init__(
            message="Invitation not available (already claimed or invalid status)",
            details={"invitation_id": invitation_id}
        )
        self.invitation_id = invitation_id


class InvitationUnavailable(CoachHubError):
    """Raised to the registrant after a failed claim, worded for the current status."""

    def __init__(self, message: str, invitation_id: str, current_status: str | None):
        super().__init__(
            message=message,
            details={"invitation_id": invitation_id, "current_status": current_status}
        )
        self.current_status = current_status


class InvitationStateError(CoachHubError):
    """Raised when an invitation transition is attempted from the wrong status."""

    def __init__(self, invitation_id: str, current_status: str, action: str):
        super().__init__(
            message=f"Cannot {action} invitation with status: {current_status}",
            details={"invitation_id": invitation_id, "current_status": current_status}
        )
        self.current_status = current_status


# === Accounts and profiles ===

class AccountExists(CoachHubError):
    """Raised when an account already exists for the email."""

    def __init__(self, email: str):
        super().__init__(
            message="An account with this email already exists",
            details={"email": email}
        )


class ProfileMissing(CoachHubError):
    """Raised when the coach profile linked to an invitation is gone."""

    def __init__(self, coach_id: str):
        super().__init__(
            message="Coach profile not found",
            details={"coach_id": coach_id}
        )


class ProfileConflict(CoachHubError):
    """Raised when a coach profile is already linked to a different account."""

    def __init__(self, coach_id: str, linked_user_id: str):
        super().__init__(
            message="Coach profile is already linked to another account",
            details={"coach_id": coach_id, "linked_user_id": linked_user_id}
        )


class NotFoundError(CoachHubError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(self, kind: str, identifier: str):
        super().__init__(
            message=f"{kind} not found",
            details={"identifier": identifier}
        )


# === Authentication ===

class InvalidCredentials(CoachHubError):
    """Same message for unknown email and wrong password."""

    status_code = 401

    def __init__(self):
        super().__init__(message="Invalid email or password")


class EmailUnverified(CoachHubError):
    status_code = 403

    def __init__(self):
        super().__init__(message="Please verify your email before logging in")


class AccountInactive(CoachHubError):
    status_code = 403

    def __init__(self):
        super().__init__(message="Your account is not active. Please contact administrator.")


class NotAuthenticated(CoachHubError):
    status_code = 401

    def __init__(self):
        super().__init__(message="Not authenticated")


class Forbidden(CoachHubError):
    status_code = 403

    def __init__(self, message: str = "Administrator access required"):
        super().__init__(message=message)


class VerificationInvalid(CoachHubError):
    """Raised when a verification token is unknown or already consumed."""

    def __init__(self):
        super().__init__(message="Invalid or expired verification link")


class VerificationExpired(VerificationInvalid):
    """Raised (after deleting the token) when a verification token has expired."""

    def __init__(self):
        CoachHubError.__init__(self, message="Verification link has expired")


# === Infrastructure ===

class RegistrationFailed(CoachHubError):
    """Raised when provisioning fails for an infrastructure reason."""

    status_code = 500

    def __init__(self, original_error: Exception | None = None):
        super().__init__(
            message="Registration failed. Please try again.",
            details={"original_error": str(original_error) if original_error else None}
        )
        self.original_error = original_error


class EmailDeliveryError(CoachHubError):
    """Raised by the email notifier; callers downgrade it to a flag."""

    status_code = 500

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(
            message=message,
            details={"original_error": str(original_error) if original_error else None}
        )
        self.original_error = original_error
