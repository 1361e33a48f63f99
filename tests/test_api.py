"""End-to-end HTTP flows through the FastAPI app."""
from coachhub.config import get_settings
from coachhub.models import InvitationStatus, Role, UserSession
from tests.conftest import STRONG_PASSWORD, make_coach, make_invitation, make_user, past

COOKIE = get_settings().session_cookie_name


def _login(client, email, password=STRONG_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def _as_admin(client, db):
    make_user(db, email="head@club.org", role=Role.ADMIN)
    assert _login(client, "head@club.org").status_code == 200


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_full_invitation_to_login_flow(client, db, notifier):
    coach = make_coach(db, first_name="Ada", last_name="Lovelace")
    _as_admin(client, db)

    created = client.post("/api/invitations", json={"email": "Coach@Club.org", "coachId": coach.id})
    assert created.status_code == 201
    body = created.json()
    assert body["emailSent"] is True
    assert body["status"] == InvitationStatus.PENDING
    assert "token" not in body
    invite_token = notifier.invitations[0]["token"]
    assert notifier.invitations[0]["coach_name"] == "Ada Lovelace"

    client.post("/api/auth/logout")

    registered = client.post("/api/auth/register", json={
        "inviteToken": invite_token,
        "email": "coach@club.org",
        "password": STRONG_PASSWORD,
        "passwordConfirm": STRONG_PASSWORD,
    })
    assert registered.status_code == 201
    assert registered.json()["emailSent"] is True
    assert registered.json()["userId"]

    blocked = _login(client, "coach@club.org")
    assert blocked.status_code == 403

    verify_token = notifier.verifications[0]["token"]
    verified = client.get("/api/auth/verify-email", params={"token": verify_token})
    assert verified.status_code == 200
    assert verified.json()["success"] is True

    again = client.get("/api/auth/verify-email", params={"token": verify_token})
    assert again.status_code == 400
    assert again.json()["message"] == "Invalid or expired verification link"

    logged_in = _login(client, "coach@club.org")
    assert logged_in.status_code == 200
    assert logged_in.json()["user"] == {
        "id": registered.json()["userId"],
        "email": "coach@club.org",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "role": "coach",
    }

    status = client.get("/api/auth/status").json()
    assert status["authenticated"] is True
    assert status["user"]["email"] == "coach@club.org"

    assert client.post("/api/auth/logout").json() == {"message": "Logged out successfully"}
    assert client.get("/api/auth/status").json() == {"authenticated": False}


def test_login_rotates_a_planted_session_cookie(client, db):
    make_user(db, email="coach@club.org")
    response = client.post(
        "/api/auth/login",
        json={"email": "coach@club.org", "password": STRONG_PASSWORD},
        headers={"Cookie": f"{COOKIE}=attacker-chosen-id"},
    )
    assert response.status_code == 200
    issued = response.cookies.get(COOKIE)
    assert issued and issued != "attacker-chosen-id"
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "secure" in set_cookie


def test_login_failures_share_one_message(client, db):
    make_user(db, email="coach@club.org")
    wrong = _login(client, "coach@club.org", "Wrong#Password99")
    unknown = _login(client, "ghost@club.org")
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"message": "Invalid email or password"}


def test_register_validation_errors_are_field_level(client):
    response = client.post("/api/auth/register", json={
        "inviteToken": "whatever",
        "email": "coach@club.org",
        "password": "short",
        "passwordConfirm": "different",
    })
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert "password" in errors
    assert "passwordConfirm" in errors


def test_register_with_wrongly_typed_field_is_a_400_without_echo(client):
    response = client.post("/api/auth/register", json={
        "inviteToken": "whatever",
        "email": "coach@club.org",
        "password": 123456789012,
        "passwordConfirm": "123456789012",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["message"]
    assert "password" in body["errors"]
    assert all(isinstance(m, str) for m in body["errors"]["password"])
    assert "123456789012" not in response.text


def test_register_with_malformed_body(client):
    response = client.post("/api/auth/register", content="not json",
                           headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["message"]


def test_register_twice_reports_already_used(client, db):
    invitation = make_invitation(db, make_coach(db).id)
    payload = {
        "inviteToken": invitation.token,
        "email": "coach@club.org",
        "password": STRONG_PASSWORD,
        "passwordConfirm": STRONG_PASSWORD,
    }
    assert client.post("/api/auth/register", json=payload).status_code == 201
    second = client.post("/api/auth/register", json=payload)
    assert second.status_code == 400
    assert "log in instead" in second.json()["message"]


def test_register_with_expired_invitation(client, db):
    invitation = make_invitation(db, make_coach(db).id, expires_at=past())
    response = client.post("/api/auth/register", json={
        "inviteToken": invitation.token,
        "email": "coach@club.org",
        "password": STRONG_PASSWORD,
        "passwordConfirm": STRONG_PASSWORD,
    })
    assert response.status_code == 400
    assert "expired" in response.json()["message"]


def test_register_against_profile_linked_elsewhere_is_a_400(client, db):
    other = make_user(db, email="someone@club.org")
    invitation = make_invitation(db, make_coach(db, user_id=other.id).id)
    response = client.post("/api/auth/register", json={
        "inviteToken": invitation.token,
        "email": "coach@club.org",
        "password": STRONG_PASSWORD,
        "passwordConfirm": STRONG_PASSWORD,
    })
    assert response.status_code == 400
    assert response.json() == {"message": "Coach profile is already linked to another account"}


def test_status_clears_cookie_for_vanished_session(client, db):
    make_user(db, email="coach@club.org")
    assert _login(client, "coach@club.org").status_code == 200

    db.query(UserSession).delete()
    db.commit()

    response = client.get("/api/auth/status")
    assert response.json() == {"authenticated": False}
    assert COOKIE not in client.cookies


def test_invitation_endpoints_require_admin(client, db):
    assert client.get("/api/invitations").status_code == 401

    make_user(db, email="coach@club.org", role=Role.COACH)
    _login(client, "coach@club.org")
    forbidden = client.get("/api/invitations")
    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Administrator access required"}


def test_create_invitation_reports_email_failure(client, db, notifier):
    coach = make_coach(db)
    _as_admin(client, db)
    notifier.fail = True

    response = client.post("/api/invitations", json={"email": "coach@club.org", "coachId": coach.id})
    assert response.status_code == 201
    assert response.json()["emailSent"] is False
    assert "email delivery failed" in response.json()["emailError"]

    listed = client.get("/api/invitations").json()
    assert [i["email"] for i in listed] == ["coach@club.org"]
    assert all("token" not in i for i in listed)


def test_create_invitation_rejects_duplicates_and_unknown_coach(client, db):
    coach = make_coach(db)
    _as_admin(client, db)

    missing = client.post("/api/invitations", json={"email": "coach@club.org", "coachId": "nope"})
    assert missing.status_code == 404

    assert client.post("/api/invitations", json={"email": "coach@club.org", "coachId": coach.id}).status_code == 201
    duplicate = client.post("/api/invitations", json={"email": "COACH@club.org", "coachId": coach.id})
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Invitation already sent to this email"

    existing_user = client.post("/api/invitations", json={"email": "head@club.org", "coachId": coach.id})
    assert existing_user.status_code == 400


def test_resend_and_revoke(client, db, notifier):
    invitation = make_invitation(db, make_coach(db).id)
    _as_admin(client, db)

    resent = client.post(f"/api/invitations/{invitation.id}/resend")
    assert resent.status_code == 200
    assert resent.json()["emailSent"] is True
    assert notifier.invitations[-1]["token"] == invitation.token

    notifier.fail = True
    failed = client.post(f"/api/invitations/{invitation.id}/resend")
    assert failed.status_code == 500
    assert failed.json() == {"message": "Failed to send email", "emailSent": False}

    revoked = client.patch(f"/api/invitations/{invitation.id}/revoke")
    assert revoked.status_code == 200
    assert revoked.json()["status"] == InvitationStatus.REVOKED

    again = client.patch(f"/api/invitations/{invitation.id}/revoke")
    assert again.status_code == 400
    assert again.json()["message"] == "Cannot revoke invitation with status: revoked"

    assert client.post(f"/api/invitations/{invitation.id}/resend").status_code == 400
    assert client.patch("/api/invitations/unknown/revoke").status_code == 404
