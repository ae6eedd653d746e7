"""
Tests for ledger reads: customer history, per-account filters and admin views.

Covers:
  - Every balance change has a ledger row with the resulting balance
  - The combined history carries account numbers
  - Filters by type and status
  - Ownership on per-account and single-row reads
  - Admin views across every account
"""

import uuid

from conftest import fund, open_account


class TestCustomerHistory:
    async def test_balance_after_tracks_each_row(
        self, client, customer_headers, admin_headers
    ):
        account = await open_account(client, customer_headers)
        await fund(client, admin_headers, account["id"], 10_000)
        await fund(client, admin_headers, account["id"], 2_500)
        await client.post(
            f"/admin/accounts/{account['id']}/debit",
            json={"amount_cents": 1_000, "description": "Correction"},
            headers=admin_headers,
        )

        rows = (
            await client.get(
                f"/accounts/{account['id']}/transactions", headers=customer_headers
            )
        ).json()
        balances = sorted(r["balance_after_cents"] for r in rows)
        assert balances == [10_000, 11_500, 12_500]

    async def test_combined_history_has_account_numbers(
        self, client, customer_headers, admin_headers
    ):
        checking = await open_account(client, customer_headers)
        savings = await open_account(client, customer_headers, "savings")
        await fund(client, admin_headers, checking["id"], 1_000)
        await fund(client, admin_headers, savings["id"], 2_000)

        rows = (await client.get("/transactions", headers=customer_headers)).json()
        assert {r["account_number"] for r in rows} == {
            checking["account_number"],
            savings["account_number"],
        }

    async def test_filter_by_type(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        await fund(client, admin_headers, account["id"], 5_000)
        await client.post(
            f"/admin/accounts/{account['id']}/debit",
            json={"amount_cents": 500, "description": "Service charge"},
            headers=admin_headers,
        )
        debits = (
            await client.get(
                f"/accounts/{account['id']}/transactions",
                params={"type": "debit"},
                headers=customer_headers,
            )
        ).json()
        assert [r["amount_cents"] for r in debits] == [500]

    async def test_pagination(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        for _ in range(3):
            await fund(client, admin_headers, account["id"], 100)
        page = (
            await client.get(
                f"/accounts/{account['id']}/transactions",
                params={"limit": 2},
                headers=customer_headers,
            )
        ).json()
        assert len(page) == 2


class TestOwnership:
    async def test_other_customers_ledger_forbidden(
        self, client, second_customer_headers, funded_account
    ):
        response = await client.get(
            f"/accounts/{funded_account['id']}/transactions",
            headers=second_customer_headers,
        )
        assert response.status_code == 403

    async def test_single_row(self, client, customer_headers, funded_account):
        rows = (
            await client.get(
                f"/accounts/{funded_account['id']}/transactions", headers=customer_headers
            )
        ).json()
        txn_id = rows[0]["id"]

        response = await client.get(
            f"/accounts/{funded_account['id']}/transactions/{txn_id}",
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["type"] == "credit"

    async def test_unknown_row(self, client, customer_headers, funded_account):
        response = await client.get(
            f"/accounts/{funded_account['id']}/transactions/{uuid.uuid4()}",
            headers=customer_headers,
        )
        assert response.status_code == 404


class TestAdminLedger:
    async def test_admin_sees_all_rows(
        self, client, customer_headers, second_customer_headers, admin_headers
    ):
        first = await open_account(client, customer_headers)
        second = await open_account(client, second_customer_headers)
        await fund(client, admin_headers, first["id"], 1_000)
        await fund(client, admin_headers, second["id"], 2_000)

        rows = (await client.get("/admin/transactions", headers=admin_headers)).json()
        assert {r["account_id"] for r in rows} == {first["id"], second["id"]}

        one = await client.get(
            f"/admin/transactions/{rows[0]['id']}", headers=admin_headers
        )
        assert one.status_code == 200

    async def test_admin_account_ledger(self, client, admin_headers, funded_account):
        response = await client.get(
            f"/admin/accounts/{funded_account['id']}/transactions", headers=admin_headers
        )
        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_customer_blocked_from_admin_ledger(self, client, customer_headers):
        response = await client.get("/admin/transactions", headers=customer_headers)
        assert response.status_code == 403
