"""
Tests for cross-customer isolation.

One customer must never read or move another customer's money. Each test
has the second customer aim at a resource owned by the first.

Tests verify:
  - Accounts, balances and ledgers of others are forbidden (403)
  - Another customer's cards, statements and transfers are forbidden
  - A transfer cannot be drawn on someone else's account
  - Listing endpoints only ever return the caller's own rows
"""

from conftest import open_account


class TestCrossCustomerAccountAccess:
    async def test_cannot_view_account(self, client, funded_account, second_customer_headers):
        response = await client.get(
            f"/accounts/{funded_account['id']}", headers=second_customer_headers
        )
        assert response.status_code == 403

    async def test_cannot_view_balance(self, client, funded_account, second_customer_headers):
        response = await client.get(
            f"/accounts/{funded_account['id']}/balance", headers=second_customer_headers
        )
        assert response.status_code == 403

    async def test_list_only_shows_own(self, client, funded_account, second_customer_headers):
        await open_account(client, second_customer_headers)
        response = await client.get("/accounts", headers=second_customer_headers)
        ids = [a["id"] for a in response.json()]
        assert funded_account["id"] not in ids
        assert len(ids) == 1


class TestCrossCustomerLedgerAccess:
    async def test_cannot_list_transactions(self, client, funded_account, second_customer_headers):
        response = await client.get(
            f"/accounts/{funded_account['id']}/transactions", headers=second_customer_headers
        )
        assert response.status_code == 403

    async def test_cannot_view_single_transaction(
        self, client, funded_account, customer_headers, second_customer_headers
    ):
        ledger = await client.get(
            f"/accounts/{funded_account['id']}/transactions", headers=customer_headers
        )
        txn_id = ledger.json()[0]["id"]
        response = await client.get(
            f"/accounts/{funded_account['id']}/transactions/{txn_id}",
            headers=second_customer_headers,
        )
        assert response.status_code == 403

    async def test_all_transactions_excludes_others(
        self, client, funded_account, second_customer_headers
    ):
        response = await client.get("/transactions", headers=second_customer_headers)
        assert response.json() == []

    async def test_cannot_view_statement(self, client, funded_account, second_customer_headers):
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params={"year": 2026, "month": 1},
            headers=second_customer_headers,
        )
        assert response.status_code == 403


class TestCrossCustomerTransferProtection:
    async def test_cannot_draw_on_other_account(
        self, client, funded_account, second_customer_headers
    ):
        own = await open_account(client, second_customer_headers)
        response = await client.post(
            "/transfers",
            json={
                "from_account_id": funded_account["id"],
                "to_account_id": own["id"],
                "amount_cents": 50_000,
            },
            headers=second_customer_headers,
        )
        assert response.status_code == 403

        balance = await client.get(
            f"/accounts/{funded_account['id']}/balance", headers=second_customer_headers
        )
        assert balance.status_code == 403

    async def test_cannot_view_unrelated_transfer(
        self, client, funded_account, customer_headers, second_customer_headers
    ):
        other = await open_account(client, customer_headers, "savings")
        submitted = await client.post(
            "/transfers",
            json={
                "from_account_id": funded_account["id"],
                "to_account_id": other["id"],
                "amount_cents": 1_000,
            },
            headers=customer_headers,
        )
        response = await client.get(
            f"/transfers/{submitted.json()['id']}", headers=second_customer_headers
        )
        assert response.status_code == 403


class TestCrossCustomerCardAccess:
    async def test_cannot_issue_card_on_other_account(
        self, client, funded_account, second_customer_headers
    ):
        response = await client.post(
            "/cards", json={"account_id": funded_account["id"]}, headers=second_customer_headers
        )
        assert response.status_code == 403

    async def test_cannot_view_or_use_other_card(
        self, client, funded_account, customer_headers, second_customer_headers
    ):
        card = await client.post(
            "/cards", json={"account_id": funded_account["id"]}, headers=customer_headers
        )
        card_id = card.json()["id"]

        view = await client.get(f"/cards/{card_id}", headers=second_customer_headers)
        purchase = await client.post(
            f"/cards/{card_id}/purchases",
            json={"amount_cents": 500, "merchant": "Coffee shop"},
            headers=second_customer_headers,
        )
        assert view.status_code == 403
        assert purchase.status_code == 403
