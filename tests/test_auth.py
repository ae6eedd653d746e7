"""
Tests for authentication: signup, login, /auth/me and password reset.

Covers:
  - Signup creates a user + customer profile and returns a usable token
  - Duplicate emails are rejected
  - Login errors never reveal whether the email exists
  - Deactivated users can't log in
  - Forgot-password answers the same for known and unknown emails
  - Reset tokens work once and only once
"""

import uuid
from datetime import timedelta

from sqlalchemy import select

from bank_portal.models.email import EmailNotification, EmailEventType, EmailDeliveryStatus
from bank_portal.models.password_reset import PasswordResetToken
from bank_portal.services.auth_service import FORGOT_PASSWORD_MESSAGE
from bank_portal.security import create_access_token
from conftest import CUSTOMER, bearer, signup


class TestSignup:
    async def test_signup_returns_token_and_customer_role(self, client):
        body = await signup(client, CUSTOMER)
        assert body["email"] == CUSTOMER["email"]
        assert body["role"] == "customer"
        assert body["token_type"] == "bearer"
        assert body["token"]

    async def test_signup_token_authenticates(self, client):
        body = await signup(client, CUSTOMER)
        response = await client.get(
            "/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert response.status_code == 200
        me = response.json()
        assert me["email"] == CUSTOMER["email"]
        assert me["first_name"] == "Test"
        assert me["last_name"] == "User"

    async def test_duplicate_email_rejected(self, client):
        await signup(client, CUSTOMER)
        response = await client.post("/auth/signup", json=CUSTOMER)
        assert response.status_code == 409
        assert response.json()["error_type"] == "duplicate_email"

    async def test_short_password_rejected(self, client):
        response = await client.post(
            "/auth/signup", json={**CUSTOMER, "password": "short"}
        )
        assert response.status_code == 422

    async def test_invalid_email_rejected(self, client):
        response = await client.post(
            "/auth/signup", json={**CUSTOMER, "email": "not-an-email"}
        )
        assert response.status_code == 422


class TestLogin:
    async def test_login_success(self, client):
        await signup(client, CUSTOMER)
        response = await client.post(
            "/auth/login",
            json={"email": CUSTOMER["email"], "password": CUSTOMER["password"]},
        )
        assert response.status_code == 200
        assert response.json()["token"]

    async def test_wrong_password_and_unknown_email_look_the_same(self, client):
        await signup(client, CUSTOMER)
        wrong_password = await client.post(
            "/auth/login",
            json={"email": CUSTOMER["email"], "password": "WrongPass123!"},
        )
        unknown_email = await client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPass123!"},
        )
        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()

    async def test_deactivated_user_cannot_log_in(self, client, admin_headers):
        body = await signup(client, CUSTOMER)
        response = await client.delete(
            f"/admin/users/{body['user_id']}", headers=admin_headers
        )
        assert response.status_code == 200

        login = await client.post(
            "/auth/login",
            json={"email": CUSTOMER["email"], "password": CUSTOMER["password"]},
        )
        assert login.status_code == 401

        # An already-issued token stops working too
        me = await client.get(
            "/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.status_code == 401


class TestTokens:
    async def test_missing_token_rejected(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == 401

    async def test_garbage_token_rejected(self, client):
        response = await client.get(
            "/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    async def test_expired_token_rejected(self, client):
        signed_up = await signup(client, CUSTOMER)
        token = create_access_token(
            uuid.UUID(signed_up["user_id"]), expires_in=timedelta(seconds=-1)
        )
        response = await client.get("/auth/me", headers=bearer(token))
        assert response.status_code == 401

    async def test_token_for_unknown_user_rejected(self, client):
        token = create_access_token(uuid.uuid4())
        response = await client.get("/auth/me", headers=bearer(token))
        assert response.status_code == 401


class TestPasswordReset:
    async def test_forgot_password_same_answer_for_unknown_email(self, client):
        await signup(client, CUSTOMER)
        known = await client.post(
            "/auth/forgot-password", json={"email": CUSTOMER["email"]}
        )
        unknown = await client.post(
            "/auth/forgot-password", json={"email": "nobody@example.com"}
        )
        assert known.status_code == 200
        assert unknown.status_code == 200
        assert known.json() == unknown.json() == {"message": FORGOT_PASSWORD_MESSAGE}

    async def test_forgot_password_records_email(self, client, db_session):
        await signup(client, CUSTOMER)
        await client.post("/auth/forgot-password", json={"email": CUSTOMER["email"]})

        result = await db_session.execute(
            select(EmailNotification).where(
                EmailNotification.event_type == EmailEventType.PASSWORD_RESET
            )
        )
        email = result.scalar_one()
        assert email.to_email == CUSTOMER["email"]
        # No provider key in tests
        assert email.status == EmailDeliveryStatus.NOT_CONFIGURED

    async def test_reset_password_flow(self, client, db_session):
        await signup(client, CUSTOMER)
        await client.post("/auth/forgot-password", json={"email": CUSTOMER["email"]})

        token = (await db_session.execute(select(PasswordResetToken.token))).scalar_one()

        response = await client.post(
            "/auth/reset-password",
            json={"token": token, "new_password": "BrandNewPass1!"},
        )
        assert response.status_code == 200

        old = await client.post(
            "/auth/login",
            json={"email": CUSTOMER["email"], "password": CUSTOMER["password"]},
        )
        new = await client.post(
            "/auth/login",
            json={"email": CUSTOMER["email"], "password": "BrandNewPass1!"},
        )
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_reset_token_is_single_use(self, client, db_session):
        await signup(client, CUSTOMER)
        await client.post("/auth/forgot-password", json={"email": CUSTOMER["email"]})
        token = (await db_session.execute(select(PasswordResetToken.token))).scalar_one()

        first = await client.post(
            "/auth/reset-password", json={"token": token, "new_password": "BrandNewPass1!"}
        )
        second = await client.post(
            "/auth/reset-password", json={"token": token, "new_password": "OtherPass123!"}
        )
        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["error_type"] == "invalid_token"

    async def test_unknown_reset_token_rejected(self, client):
        response = await client.post(
            "/auth/reset-password",
            json={"token": "does-not-exist", "new_password": "BrandNewPass1!"},
        )
        assert response.status_code == 400
