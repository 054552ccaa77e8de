"""Registration, verification, login and logout via TestClient."""

from datetime import datetime, timedelta, timezone

import pytest

from pizzago.data.models.account import AccountModel
from pizzago.data.models.email_verification import EmailVerificationModel
from pizzago.repos.account_repo import AccountRepo
from pizzago.tasks.purge import purge_expired_verifications
from pizzago.utils.settings import EMAIL_RATE_LIMIT_PREFIX, SESSION_PREFIX

EMAIL = "alice@example.com"
PASSWORD = "correct horse"


def _register(client, email=EMAIL, password=PASSWORD):
    return client.post("/api/v1/auth/register", json={"email": email, "password": password})


def _account(session_factory, email=EMAIL):
    db = session_factory()
    try:
        return AccountRepo(db).get_by_email(email)
    finally:
        db.close()


def _add_token(session_factory, account_id, token, expires_in):
    db = session_factory()
    try:
        db.add(
            EmailVerificationModel(
                user_id=account_id,
                email=EMAIL,
                token=token,
                expires_at=datetime.now(timezone.utc) + expires_in,
            )
        )
        db.commit()
    finally:
        db.close()


@pytest.fixture()
def verified_account(client, mailer):
    _register(client)
    assert client.get(f"/api/v1/auth/verify?token={mailer.last_token()}").status_code == 200


class TestRegister:
    def test_creates_unverified_account_and_sends_link(self, client, mailer, session_factory):
        response = _register(client)

        assert response.status_code == 201
        assert "User created successfully" in response.json()["message"]

        account = _account(session_factory)
        assert account.verified is False
        assert account.password_hash != PASSWORD

        assert len(mailer.sent) == 1
        assert mailer.sent[0]["to"] == EMAIL
        assert "/api/v1/auth/verify?token=" in mailer.sent[0]["body"]

    def test_token_is_valid_for_a_day(self, client, mailer, session_factory):
        _register(client)
        db = session_factory()
        try:
            token = db.query(EmailVerificationModel).filter_by(user_id=_account(session_factory).id).one()
        finally:
            db.close()
        assert token.token == mailer.last_token()
        lifetime = token.expires_at - token.created_at
        assert lifetime == timedelta(hours=24)

    def test_email_is_normalized(self, client, session_factory):
        _register(client, email="  Alice@Example.COM ")
        assert _account(session_factory, "alice@example.com") is not None

    def test_duplicate_email_conflicts(self, client):
        _register(client)
        response = _register(client, email="ALICE@example.com")
        assert response.status_code == 409
        assert "User already exists" in response.json()["error"]

    @pytest.mark.parametrize("body", [{}, {"email": EMAIL}, {"password": PASSWORD}])
    def test_missing_fields(self, client, body):
        response = client.post("/api/v1/auth/register", json=body)
        assert response.status_code == 400
        assert "required" in response.json()["error"]

    def test_invalid_email(self, client):
        response = _register(client, email="not-an-email")
        assert response.status_code == 400
        assert "Invalid email format" in response.json()["error"]

    def test_weak_password(self, client, mailer):
        response = _register(client, password="short")
        assert response.status_code == 400
        assert "at least 8 characters" in response.json()["error"]
        assert mailer.sent == []


class TestVerify:
    def test_token_is_single_use(self, client, mailer, session_factory):
        _register(client)
        token = mailer.last_token()

        first = client.get(f"/api/v1/auth/verify?token={token}")
        second = client.get(f"/api/v1/auth/verify?token={token}")

        assert first.status_code == 200
        assert "verified successfully" in first.json()["message"]
        assert second.status_code == 404
        assert "Invalid or expired token" in second.json()["error"]
        assert _account(session_factory).verified is True

    def test_missing_token(self, client):
        response = client.get("/api/v1/auth/verify")
        assert response.status_code == 400
        assert "Token is required" in response.json()["error"]

    def test_unknown_token(self, client):
        assert client.get("/api/v1/auth/verify?token=nope").status_code == 404

    def test_expired_token_is_rejected(self, client, session_factory):
        _register(client)
        account = _account(session_factory)
        _add_token(session_factory, account.id, "stale", timedelta(minutes=-1))

        response = client.get("/api/v1/auth/verify?token=stale")

        assert response.status_code == 404
        assert _account(session_factory).verified is False

    def test_already_verified(self, client, session_factory, verified_account):
        account = _account(session_factory)
        _add_token(session_factory, account.id, "late", timedelta(hours=1))

        response = client.get("/api/v1/auth/verify?token=late")

        assert response.status_code == 400
        assert "User already verified" in response.json()["error"]


class TestResendVerification:
    def test_rate_limit_window(self, client, mailer, redis_client):
        _register(client)

        first = client.post("/api/v1/auth/resend-verification", json={"email": EMAIL})
        second = client.post("/api/v1/auth/resend-verification", json={"email": EMAIL})

        assert first.status_code == 200
        assert "Verification email sent" in first.json()["message"]
        assert second.status_code == 429
        assert "Please wait" in second.json()["error"]
        assert 0 < redis_client.ttl(f"{EMAIL_RATE_LIMIT_PREFIX}{EMAIL}") <= 60

        # window elapsed
        redis_client.delete(f"{EMAIL_RATE_LIMIT_PREFIX}{EMAIL}")
        third = client.post("/api/v1/auth/resend-verification", json={"email": EMAIL})
        assert third.status_code == 200
        assert len(mailer.sent) == 3

    def test_new_token_replaces_old(self, client, mailer):
        _register(client)
        old = mailer.last_token()
        client.post("/api/v1/auth/resend-verification", json={"email": EMAIL})
        new = mailer.last_token()

        assert new != old
        assert client.get(f"/api/v1/auth/verify?token={old}").status_code == 404
        assert client.get(f"/api/v1/auth/verify?token={new}").status_code == 200

    def test_missing_email(self, client):
        response = client.post("/api/v1/auth/resend-verification", json={})
        assert response.status_code == 400
        assert "Email is required" in response.json()["error"]

    def test_unknown_email(self, client):
        response = client.post("/api/v1/auth/resend-verification", json={"email": "ghost@example.com"})
        assert response.status_code == 404

    def test_verified_account(self, client, verified_account):
        response = client.post("/api/v1/auth/resend-verification", json={"email": EMAIL})
        assert response.status_code == 404
        assert "already verified" in response.json()["error"]


class TestLogin:
    def test_login_binds_new_session_token(self, client, verified_account, redis_client, sessions):
        client.get("/api/v1/cart")
        cookie_before = client.cookies["session"]

        response = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == EMAIL
        token = response.headers["X-Session-Token"]
        assert token != cookie_before
        assert sessions.load(token).user_id == user["id"]
        # the cookie session stays anonymous
        assert client.cookies["session"] == cookie_before
        assert sessions.load(cookie_before).user_id is None

    def test_unverified_account(self, client):
        _register(client)
        response = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert response.status_code == 404
        assert "not verified" in response.json()["error"]

    def test_unknown_account(self, client):
        response = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert response.status_code == 404

    def test_wrong_password(self, client, verified_account):
        response = client.post("/api/v1/auth/login", json={"email": EMAIL, "password": "wrong password"})
        assert response.status_code == 401
        assert "Invalid credentials" in response.json()["error"]

    def test_missing_fields(self, client):
        response = client.post("/api/v1/auth/login", json={"email": EMAIL})
        assert response.status_code == 400


class TestLogout:
    def test_logout_deletes_session(self, client, redis_client):
        client.get("/api/v1/cart")
        session_id = client.cookies["session"]

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        assert "Logged out" in response.json()["message"]
        assert redis_client.get(f"{SESSION_PREFIX}{session_id}") is None

    def test_logout_without_cookie(self, client):
        response = client.post("/api/v1/auth/logout")
        assert response.status_code == 400
        assert "No session found" in response.json()["error"]


class TestPurgeExpiredVerifications:
    def test_only_expired_rows_are_removed(self, client, session_factory):
        _register(client)
        account = _account(session_factory)
        _add_token(session_factory, account.id, "old", timedelta(hours=-2))

        db = session_factory()
        try:
            assert purge_expired_verifications(db) == 1
            remaining = [v.token for v in db.query(EmailVerificationModel).filter_by(user_id=account.id)]
        finally:
            db.close()
        assert len(remaining) == 1
        assert "old" not in remaining
