from datetime import datetime, timedelta, timezone

import pytest

from conftest import ADMIN_EMAIL, DEFAULT_PASSWORD

from jobboard.errors import ValidationError
from jobboard.models.user import User
from jobboard.services import password_reset_service


def test_full_reset_flow(client, seeker, mailer) -> None:
    request = {"email": "seeker@example.com", "role": "jobSeeker"}
    sent = client.post("/auth/forgot-password", json=request)
    assert sent.status_code == 200
    assert mailer.sent[-1]["to"] == "seeker@example.com"
    otp = mailer.last_otp()
    assert len(otp) == 6 and otp.isdigit()

    wrong = client.post("/auth/verify-otp", json={**request, "otp": "000000" if otp != "000000" else "111111"})
    assert wrong.status_code == 400
    assert client.post("/auth/verify-otp", json={**request, "otp": otp}).status_code == 200

    reset = client.post("/auth/reset-password", json={**request, "otp": otp, "newPassword": "BrandNew123"})
    assert reset.status_code == 200

    old = client.post("/auth/login", json={**request, "password": DEFAULT_PASSWORD})
    assert old.status_code == 401
    new = client.post("/auth/login", json={**request, "password": "BrandNew123"})
    assert new.status_code == 200

    # The code is single-use.
    again = client.post("/auth/reset-password", json={**request, "otp": otp, "newPassword": "Another123"})
    assert again.status_code == 400


def test_otp_is_stored_hashed(client, seeker, mailer, db_session) -> None:
    client.post("/auth/forgot-password", json={"email": "seeker@example.com", "role": "jobSeeker"})
    user = db_session.query(User).filter(User.email == "seeker@example.com").one()
    assert user.reset_password_token
    assert user.reset_password_token != mailer.last_otp()


def test_resend_cooldown(client, seeker, mailer) -> None:
    request = {"email": "seeker@example.com", "role": "jobSeeker"}
    assert client.post("/auth/forgot-password", json=request).status_code == 200
    too_soon = client.post("/auth/forgot-password", json=request)
    assert too_soon.status_code == 400
    assert "wait" in too_soon.json()["message"]
    assert len(mailer.sent) == 1


def test_cooldown_and_expiry_windows(client, seeker, mailer, db_session) -> None:
    start = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    password_reset_service.request_password_reset(db_session, mailer, "seeker@example.com", "jobSeeker", now=start)
    first_otp = mailer.last_otp()

    with pytest.raises(ValidationError):
        password_reset_service.request_password_reset(
            db_session, mailer, "seeker@example.com", "jobSeeker", now=start + timedelta(minutes=4)
        )

    password_reset_service.request_password_reset(
        db_session, mailer, "seeker@example.com", "jobSeeker", now=start + timedelta(minutes=6)
    )
    second_otp = mailer.last_otp()
    issued = start + timedelta(minutes=6)

    if second_otp != first_otp:
        with pytest.raises(ValidationError):
            password_reset_service.verify_otp(
                db_session, "seeker@example.com", "jobSeeker", first_otp, now=issued + timedelta(minutes=1)
            )
    password_reset_service.verify_otp(
        db_session, "seeker@example.com", "jobSeeker", second_otp, now=issued + timedelta(minutes=14)
    )
    with pytest.raises(ValidationError):
        password_reset_service.verify_otp(
            db_session, "seeker@example.com", "jobSeeker", second_otp, now=issued + timedelta(minutes=16)
        )


def test_unknown_user_and_admin_are_rejected(client, admin) -> None:
    unknown = client.post("/auth/forgot-password", json={"email": "ghost@example.com", "role": "jobSeeker"})
    assert unknown.status_code == 404
    admin_reset = client.post("/auth/forgot-password", json={"email": ADMIN_EMAIL, "role": "admin"})
    assert admin_reset.status_code == 400


def test_email_outage_is_reported_and_nothing_is_stored(client, seeker, mailer, db_session) -> None:
    mailer.fail = True
    response = client.post("/auth/forgot-password", json={"email": "seeker@example.com", "role": "jobSeeker"})
    assert response.status_code == 500
    assert response.json()["success"] is False
    user = db_session.query(User).filter(User.email == "seeker@example.com").one()
    assert user.reset_password_token is None


def test_otp_email_escapes_the_account_name(client, signup, mailer) -> None:
    signup(role="jobSeeker", email="markup@example.com", name="<b>Eve</b> & co")
    client.post("/auth/forgot-password", json={"email": "markup@example.com", "role": "jobSeeker"})
    body = mailer.sent[-1]["html"]
    assert "<b>Eve</b>" not in body
    assert "Hi &lt;b&gt;Eve&lt;/b&gt; &amp; co," in body
    assert len(mailer.last_otp()) == 6
