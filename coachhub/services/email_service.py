"""Outbound email via Resend: invitation and verification messages"""
import resend

from coachhub.config import get_settings
from coachhub.exceptions import EmailDeliveryError
from coachhub.utils.logger import log


def _button(url: str, label: str) -> str:
    return (
        f"<a href='{url}' style='display:inline-block;background:#4B9A4A;color:#ffffff;"
        f"padding:12px 24px;border-radius:4px;text-decoration:none;font-weight:600;"
        f"margin:16px 0'>{label}</a>"
    )


class EmailNotifier:
    """Sends transactional email. Raises EmailDeliveryError on any failure."""

    def __init__(self, api_key: str | None = None, sender: str | None = None, base_url: str | None = None):
        settings = get_settings()
        self.api_key = settings.resend_api_key if api_key is None else api_key
        self.sender = sender or settings.email_from
        self.base_url = (base_url or settings.app_base_url).rstrip("/")

    def _send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            raise EmailDeliveryError("RESEND_API_KEY not configured")

        resend.api_key = self.api_key
        try:
            resend.Emails.send({
                "from": self.sender,
                "to": [to],
                "subject": subject,
                "html": html,
            })
        except Exception as exc:
            raise EmailDeliveryError(f"Failed to send email to {to}", original_error=exc) from exc
        log.info(f"Email '{subject}' sent to {to}")

    def send_invitation(self, email: str, token: str, coach_name: str) -> None:
        url = f"{self.base_url}/register?token={token}"
        self._send(
            email,
            "You've been invited to Coach Hub",
            (
                f"<h2>Welcome to Coach Hub, {coach_name}!</h2>"
                f"<p>You've been invited to join the coaching team platform.</p>"
                f"<p>Click the link below to create your account:</p>"
                f"{_button(url, 'Create Account')}"
                f"<p style='color:#666;font-size:14px'>This invitation link expires in 48 hours.</p>"
                f"<p style='color:#666;font-size:14px'>If you didn't expect this invitation, please ignore this email.</p>"
            ),
        )

    def send_verification(self, email: str, token: str, first_name: str | None) -> None:
        url = f"{self.base_url}/verify-email?token={token}"
        self._send(
            email,
            "Verify your email address",
            (
                f"<h2>Welcome {first_name or ''}!</h2>"
                f"<p>Please verify your email address to activate your account:</p>"
                f"{_button(url, 'Verify Email')}"
                f"<p style='color:#666;font-size:14px'>This verification link expires in 24 hours.</p>"
                f"<p style='color:#666;font-size:14px'>If you didn't create this account, please ignore this email.</p>"
            ),
        )


def get_notifier() -> EmailNotifier:
    return EmailNotifier()
