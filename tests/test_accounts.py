"""
Tests for account endpoints.

Covers:
  - Opening accounts (zero balance, 10-digit number, bank routing number)
  - Listing and fetching only the caller's own accounts
  - Balance check: cached balance agrees with the ledger
  - Recipient lookup by account number
  - Admins can't use customer endpoints
"""

import uuid

from bank_portal.config import settings
from conftest import fund, open_account


class TestCreateAccount:
    async def test_create_checking_account(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        assert account["account_type"] == "checking"
        assert account["cached_balance_cents"] == 0
        assert account["status"] == "active"
        assert account["currency"] == "USD"
        assert len(account["account_number"]) == 10
        assert account["account_number"].isdigit()
        assert account["routing_number"] == settings.ROUTING_NUMBER

    async def test_create_savings_account(self, client, customer_headers):
        account = await open_account(client, customer_headers, "savings")
        assert account["account_type"] == "savings"

    async def test_invalid_account_type(self, client, customer_headers):
        response = await client.post(
            "/accounts", json={"account_type": "crypto"}, headers=customer_headers
        )
        assert response.status_code == 422

    async def test_admin_cannot_open_account(self, client, admin_headers):
        response = await client.post(
            "/accounts", json={"account_type": "checking"}, headers=admin_headers
        )
        assert response.status_code == 403

    async def test_unauthenticated(self, client):
        response = await client.post("/accounts", json={"account_type": "checking"})
        assert response.status_code == 401

    async def test_welcome_notification(self, client, customer_headers):
        await open_account(client, customer_headers)
        response = await client.get("/notifications", headers=customer_headers)
        titles = [n["title"] for n in response.json()]
        assert "Account opened" in titles


class TestReadAccounts:
    async def test_list_only_own_accounts(
        self, client, customer_headers, second_customer_headers
    ):
        mine = await open_account(client, customer_headers)
        await open_account(client, second_customer_headers)

        response = await client.get("/accounts", headers=customer_headers)
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [mine["id"]]

    async def test_get_own_account(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        response = await client.get(f"/accounts/{account['id']}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["account_number"] == account["account_number"]

    async def test_other_customers_account_forbidden(
        self, client, customer_headers, second_customer_headers
    ):
        theirs = await open_account(client, second_customer_headers)
        response = await client.get(f"/accounts/{theirs['id']}", headers=customer_headers)
        assert response.status_code == 403

    async def test_missing_account_not_found(self, client, customer_headers):
        response = await client.get(f"/accounts/{uuid.uuid4()}", headers=customer_headers)
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"


class TestBalance:
    async def test_balance_matches_ledger(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        await fund(client, admin_headers, account["id"], 12_345)
        await fund(client, admin_headers, account["id"], 55)

        response = await client.get(
            f"/accounts/{account['id']}/balance", headers=customer_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["cached_balance_cents"] == 12_400
        assert body["computed_balance_cents"] == 12_400
        assert body["match"] is True


class TestLookup:
    async def test_lookup_returns_holder_name_without_balance(
        self, client, customer_headers, second_customer_headers
    ):
        theirs = await open_account(client, second_customer_headers)
        response = await client.get(
            f"/accounts/lookup/{theirs['account_number']}", headers=customer_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["account_holder_name"] == "Second User"
        assert "cached_balance_cents" not in body

    async def test_lookup_unknown_number(self, client, customer_headers):
        response = await client.get("/accounts/lookup/0000000000", headers=customer_headers)
        assert response.status_code == 404

    async def test_lookup_closed_account_not_found(
        self, client, customer_headers, second_customer_headers, admin_headers
    ):
        theirs = await open_account(client, second_customer_headers)
        await client.post(
            f"/admin/accounts/{theirs['id']}/status",
            json={"status": "closed", "reason": "Customer request"},
            headers=admin_headers,
        )
        response = await client.get(
            f"/accounts/lookup/{theirs['account_number']}", headers=customer_headers
        )
        assert response.status_code == 404
