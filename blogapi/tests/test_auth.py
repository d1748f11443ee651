"""
Tests for authentication: sessions, registration, confirmation and password reset.
"""

from datetime import timedelta

import pytest

from blogapi.auth import (
    create_session_token,
    hash_password,
    is_internal_key,
    read_session_token,
    verify_password,
)
from blogapi.database import utcnow
from blogapi.rate_limit import limiter

API = "/api/v1/auth"


def _register(client, username="new_reader", email="new.reader@example.com", password="Secret1!"):
    return client.post(
        f"{API}/register",
        json={"username": username, "email": email, "password": password},
    )


class TestPasswordHashing:
    """Tests for password hashing helpers."""

    def test_hash_and_verify(self):
        stored = hash_password("Secret1!")
        assert stored != "Secret1!"
        assert verify_password("Secret1!", stored)
        assert not verify_password("secret1!", stored)

    def test_hashes_are_salted(self):
        assert hash_password("Secret1!") != hash_password("Secret1!")

    def test_bcrypt_format(self):
        stored = hash_password("Secret1!")
        assert stored.startswith("$2b$04$")

    def test_malformed_hash(self):
        assert verify_password("anything", "not-a-hash") is False

    def test_password_over_byte_limit_does_not_verify(self):
        stored = hash_password("Secret1!")
        assert verify_password("A1!" + "a" * 80, stored) is False


class TestSessionTokens:
    """Tests for signed session tokens."""

    def test_round_trip(self):
        assert read_session_token(create_session_token("abc123")) == "abc123"

    def test_tampered_token(self):
        token = create_session_token("abc123")
        assert read_session_token(token[:-2] + "xx") is None

    def test_other_secret_rejected(self, monkeypatch):
        from blogapi.config import config

        token = create_session_token("abc123")
        monkeypatch.setattr(config, "SESSION_SECRET", "another-secret")
        assert read_session_token(token) is None

    def test_internal_key(self):
        assert is_internal_key("internal-test-key")
        assert not is_internal_key("wrong")
        assert not is_internal_key(None)


class TestRegister:
    """Tests for POST /auth/register endpoint."""

    def test_register(self, client, mailer, test_db):
        """A new account is unverified and gets a confirmation email."""
        response = _register(client, email="New.Reader@Example.com")
        assert response.status_code == 201
        user = response.json()["data"]
        assert user["email"] == "new.reader@example.com"
        assert user["email_verified"] is False
        assert user["role"] == "user"
        assert "password" not in user
        assert "verification_token" not in user

        sent = mailer.to("new.reader@example.com")
        assert len(sent) == 1
        assert "confirm-email" in sent[0].body
        assert test_db.users.get_by_email("new.reader@example.com").verification_token in sent[0].body

    def test_language_from_accept_language(self, client):
        response = client.post(
            f"{API}/register",
            json={"username": "leitora", "email": "leitora@example.com", "password": "Secret1!"},
            headers={"Accept-Language": "pt-BR,pt;q=0.9"},
        )
        assert response.json()["data"]["preferences"]["language"] == "pt"

    @pytest.mark.parametrize("password", ["Sh1!", "secret1!", "SECRET1!", "Secret!!", "Secret11"])
    def test_password_policy(self, client, password):
        """Passwords need length, lower, upper, digit and symbol."""
        response = _register(client, password=password)
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    @pytest.mark.parametrize("username", ["abc", "has space", "x" * 31])
    def test_invalid_username(self, client, username):
        assert _register(client, username=username).status_code == 400

    def test_duplicate_email(self, client, make_user):
        make_user(email="taken@example.com")
        response = _register(client, email="taken@example.com")
        assert response.status_code == 409

    def test_duplicate_username(self, client, make_user):
        make_user(username="taken_name")
        response = _register(client, username="taken_name")
        assert response.status_code == 409

    def test_invalid_category_interest(self, client):
        response = client.post(
            f"{API}/register",
            json={
                "username": "new_reader",
                "email": "new.reader@example.com",
                "password": "Secret1!",
                "category_interests": ["astrology"],
            },
        )
        assert response.status_code == 400


class TestEmailConfirmation:
    """Tests for account email confirmation."""

    def test_confirm_email(self, client, test_db):
        _register(client)
        token = test_db.users.get_by_email("new.reader@example.com").verification_token

        response = client.post(f"{API}/confirm-email", json={"token": token})
        assert response.status_code == 200
        assert response.json()["data"]["email_verified"] is True

        again = client.post(f"{API}/confirm-email", json={"token": token})
        assert again.status_code == 400

    def test_invalid_token(self, client):
        response = client.post(f"{API}/confirm-email", json={"token": "bogus"})
        assert response.status_code == 400

    def test_confirmation_verifies_linked_subscriber(self, client, test_db):
        client.post("/api/v1/subscribers", json={"email": "new.reader@example.com"})
        _register(client)
        token = test_db.users.get_by_email("new.reader@example.com").verification_token
        client.post(f"{API}/confirm-email", json={"token": token})
        assert test_db.subscribers.get_by_email("new.reader@example.com").email_verified is True

    def test_request_new_confirmation(self, client, test_db, mailer):
        _register(client)
        old_token = test_db.users.get_by_email("new.reader@example.com").verification_token
        response = client.post(f"{API}/request-email-confirmation", json={"email": "new.reader@example.com"})
        assert response.status_code == 200
        new_token = test_db.users.get_by_email("new.reader@example.com").verification_token
        assert new_token != old_token
        assert len(mailer.to("new.reader@example.com")) == 2

    def test_request_confirmation_unknown_email(self, client, mailer):
        response = client.post(f"{API}/request-email-confirmation", json={"email": "ghost@example.com"})
        assert response.status_code == 200
        assert mailer.sent == []

    def test_request_confirmation_already_verified(self, client, make_user):
        user = make_user()
        response = client.post(f"{API}/request-email-confirmation", json={"email": user.email})
        assert response.status_code == 400


class TestPasswordReset:
    """Tests for the password reset flow."""

    def test_reset_flow(self, client, make_user, test_db, mailer):
        """Request a reset, use the emailed token, sign in with the new password."""
        user = make_user()
        response = client.post(f"{API}/request-password-reset", json={"email": user.email})
        assert response.status_code == 200
        token = test_db.users.get_by_id(user.id).reset_password_token
        assert token in mailer.to(user.email)[0].body

        response = client.post(f"{API}/reset-password/confirm", json={"token": token, "password": "Fresh2@pass"})
        assert response.status_code == 200

        stored = test_db.users.get_by_id(user.id)
        assert stored.reset_password_token is None
        assert client.post(f"{API}/signin", json={"email": user.email, "password": "Fresh2@pass"}).status_code == 200

    def test_unknown_email_same_response(self, client, make_user, mailer):
        """The response does not reveal whether the account exists."""
        user = make_user()
        known = client.post(f"{API}/request-password-reset", json={"email": user.email})
        unknown = client.post(f"{API}/request-password-reset", json={"email": "ghost@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert mailer.to("ghost@example.com") == []

    def test_token_single_use(self, client, make_user, test_db):
        user = make_user()
        client.post(f"{API}/request-password-reset", json={"email": user.email})
        token = test_db.users.get_by_id(user.id).reset_password_token
        client.post(f"{API}/reset-password/confirm", json={"token": token, "password": "Fresh2@pass"})
        response = client.post(f"{API}/reset-password/confirm", json={"token": token, "password": "Other3#pass"})
        assert response.status_code == 400

    def test_expired_token(self, client, make_user, test_db):
        user = make_user()
        test_db.users.set_reset_token(user.id, "expired-token", utcnow() - timedelta(minutes=1))
        response = client.post(
            f"{API}/reset-password/confirm",
            json={"token": "expired-token", "password": "Fresh2@pass"},
        )
        assert response.status_code == 400

    def test_weak_new_password(self, client, make_user, test_db):
        user = make_user()
        test_db.users.set_reset_token(user.id, "valid-token", utcnow() + timedelta(minutes=30))
        response = client.post(f"{API}/reset-password/confirm", json={"token": "valid-token", "password": "weak"})
        assert response.status_code == 400
        assert test_db.users.get_by_id(user.id).reset_password_token == "valid-token"


class TestSignIn:
    """Tests for sign-in, sign-out and /me."""

    def test_signin_sets_cookie(self, client, make_user):
        user = make_user()
        response = client.post(f"{API}/signin", json={"email": user.email, "password": "Secret1!"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == user.id
        assert data["token"]
        assert "session" in response.cookies

        me = client.get(f"{API}/me")
        assert me.status_code == 200
        assert me.json()["data"]["username"] == user.username

    def test_signin_updates_last_login(self, client, make_user, test_db):
        user = make_user()
        client.post(f"{API}/signin", json={"email": user.email, "password": "Secret1!"})
        assert test_db.users.get_by_id(user.id).last_login is not None

    def test_bearer_token(self, client, make_user):
        user = make_user()
        token = client.post(f"{API}/signin", json={"email": user.email, "password": "Secret1!"}).json()["data"]["token"]
        client.cookies.clear()
        response = client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_wrong_password(self, client, make_user):
        user = make_user()
        response = client.post(f"{API}/signin", json={"email": user.email, "password": "Wrong1!"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_unknown_email(self, client):
        response = client.post(f"{API}/signin", json={"email": "ghost@example.com", "password": "Secret1!"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_deactivated_account(self, client, make_user):
        user = make_user(is_active=False)
        response = client.post(f"{API}/signin", json={"email": user.email, "password": "Secret1!"})
        assert response.status_code == 403

    def test_signout(self, client, make_user):
        user = make_user()
        client.post(f"{API}/signin", json={"email": user.email, "password": "Secret1!"})
        assert client.post(f"{API}/signout").status_code == 200
        assert client.get(f"{API}/me").status_code == 401

    def test_me_requires_auth(self, client):
        response = client.get(f"{API}/me")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Not authenticated. Please sign in.",
            "error": "unauthenticated",
        }

    def test_invalid_token(self, client):
        response = client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401


class TestRateLimiting:
    """Tests for the email endpoint rate limit."""

    def test_email_endpoints_limited(self, client, monkeypatch):
        monkeypatch.setattr(limiter, "enabled", True)
        limiter.reset()
        statuses = [
            client.post(f"{API}/request-password-reset", json={"email": "ghost@example.com"}).status_code
            for _ in range(6)
        ]
        limiter.reset()
        assert statuses[:5] == [200] * 5
        assert statuses[5] == 429
