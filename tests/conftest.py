"""
Shared fixtures. The database URL and environment are fixed before any
coachhub module is imported, since settings and the engine load at import.
"""
import os
import tempfile
from datetime import datetime, timedelta

_TMP_DIR = tempfile.mkdtemp(prefix="coachhub-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "test.db")
os.environ["ENVIRONMENT"] = "production"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["RESEND_API_KEY"] = ""
os.environ["INITIAL_ADMIN_EMAIL"] = ""
os.environ["INITIAL_ADMIN_PASSWORD"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from coachhub.config import get_settings  # noqa: E402
from coachhub.exceptions import EmailDeliveryError  # noqa: E402
from coachhub.models import (  # noqa: E402
    AccountStatus,
    Coach,
    Invitation,
    InvitationStatus,
    Role,
    User,
)
from coachhub.models.base import Base, SessionLocal, engine  # noqa: E402
from coachhub.services import tokens  # noqa: E402
from coachhub.services.passwords import hash_password  # noqa: E402

STRONG_PASSWORD = "Backstroke#2024x"


class RecordingNotifier:
    """Stands in for the Resend notifier; records what would have been sent."""

    def __init__(self):
        self.fail = False
        self.invitations = []
        self.verifications = []

    def send_invitation(self, email, token, coach_name):
        if self.fail:
            raise EmailDeliveryError("simulated outage")
        self.invitations.append({"email": email, "token": token, "coach_name": coach_name})

    def send_verification(self, email, token, first_name):
        if self.fail:
            raise EmailDeliveryError("simulated outage")
        self.verifications.append({"email": email, "token": token, "first_name": first_name})


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dev_mode(monkeypatch):
    monkeypatch.setattr(get_settings(), "environment", "development")


@pytest.fixture
def client(notifier):
    from coachhub.services.email_service import get_notifier
    from coachhub.main import app

    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app, base_url="https://testserver")
    finally:
        app.dependency_overrides.clear()


def make_coach(db, first_name="Ada", last_name="Lovelace", user_id=None) -> Coach:
    coach = Coach(first_name=first_name, last_name=last_name, level="Level 2", user_id=user_id)
    db.add(coach)
    db.commit()
    db.refresh(coach)
    return coach


def make_invitation(db, coach_id, email="coach@club.org", status=InvitationStatus.PENDING,
                    expires_at=None, token=None) -> Invitation:
    invitation = Invitation(
        email=email,
        coach_id=coach_id,
        token=token or tokens.generate_token(),
        status=status,
        expires_at=expires_at or tokens.invitation_expiry(),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    return invitation


def make_user(db, email="admin@club.org", password=STRONG_PASSWORD, role=Role.COACH,
              verified=True, account_status=AccountStatus.ACTIVE) -> User:
    user = User(
        email=email,
        first_name="Grace",
        last_name="Hopper",
        password_hash=hash_password(password),
        is_email_verified=verified,
        account_status=account_status,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def past(hours=1) -> datetime:
    return datetime.utcnow() - timedelta(hours=hours)
