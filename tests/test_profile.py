"""Tests for the customer profile."""

from sqlalchemy import select

from bank_portal.models.customer_profile import CustomerProfile
from bank_portal.security import decrypt_value


class TestProfile:
    async def test_get_profile(self, client, customer_headers):
        response = await client.get("/profile", headers=customer_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["first_name"] == "Test"
        assert body["kyc_status"] == "pending"
        assert body["id_verification_status"] == "pending"

    async def test_partial_update(self, client, customer_headers):
        response = await client.patch(
            "/profile",
            json={"city": "Boston", "annual_income_cents": 8_500_000},
            headers=customer_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["city"] == "Boston"
        assert body["annual_income_cents"] == 8_500_000
        assert body["first_name"] == "Test"

    async def test_required_names_ignore_null(self, client, customer_headers):
        response = await client.patch(
            "/profile", json={"first_name": None}, headers=customer_headers
        )
        assert response.json()["first_name"] == "Test"

    async def test_ssn_is_write_only(self, client, customer_headers, db_session):
        response = await client.patch(
            "/profile", json={"ssn": "123-45-6789"}, headers=customer_headers
        )
        body = response.json()
        assert body["ssn_last_four"] == "6789"
        assert "ssn" not in body

        stored = (await db_session.execute(select(CustomerProfile))).scalar_one()
        assert decrypt_value(stored.ssn_encrypted) == "123456789"

    async def test_bad_ssn_rejected(self, client, customer_headers):
        response = await client.patch(
            "/profile", json={"ssn": "12-345"}, headers=customer_headers
        )
        assert response.status_code == 422

    async def test_admin_has_no_customer_profile_access(self, client, admin_headers):
        response = await client.get("/profile", headers=admin_headers)
        assert response.status_code == 403
