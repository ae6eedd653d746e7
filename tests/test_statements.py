"""
Tests for monthly statements.

Covers:
  - Totals and closing balance for the current month
  - Opening balance is zero before any activity
  - Declined rows are listed but not counted
  - CSV export
  - Ownership and parameter validation
"""

from datetime import datetime, timezone

from conftest import open_account


def this_month() -> dict:
    now = datetime.now(timezone.utc)
    return {"year": now.year, "month": now.month}


class TestStatementJSON:
    async def test_current_month_totals(self, client, customer_headers, admin_headers, funded_account):
        await client.post(
            f"/admin/accounts/{funded_account['id']}/debit",
            json={"amount_cents": 2_500, "description": "Utility bill"},
            headers=admin_headers,
        )
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params=this_month(),
            headers=customer_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["opening_balance_cents"] == 0
        assert body["total_credits_cents"] == 100_000
        assert body["total_debits_cents"] == 2_500
        assert body["closing_balance_cents"] == 97_500
        assert body["transaction_count"] == 2
        assert body["account_number"] == funded_account["account_number"]

    async def test_empty_past_month(self, client, customer_headers, funded_account):
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params={"year": 2020, "month": 1},
            headers=customer_headers,
        )
        body = response.json()
        assert body["transactions"] == []
        assert body["opening_balance_cents"] == 0
        assert body["closing_balance_cents"] == 0

    async def test_declined_rows_listed_not_counted(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        card = (
            await client.post(
                "/cards", json={"account_id": account["id"]}, headers=customer_headers
            )
        ).json()
        await client.post(
            f"/cards/{card['id']}/purchases",
            json={"amount_cents": 999, "merchant": "Cafe"},
            headers=customer_headers,
        )

        body = (
            await client.get(
                f"/accounts/{account['id']}/statements",
                params=this_month(),
                headers=customer_headers,
            )
        ).json()
        assert body["transaction_count"] == 1
        assert body["transactions"][0]["status"] == "declined"
        assert body["total_debits_cents"] == 0
        assert body["closing_balance_cents"] == 0


class TestStatementCSV:
    async def test_csv_download(self, client, customer_headers, funded_account):
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params={**this_month(), "format": "csv"},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]

        lines = response.text.strip().splitlines()
        assert lines[0] == "Date,Type,Amount,Description,Balance,Status"
        assert lines[1].split(",")[1:] == [
            "credit", "1000.00", "Initial deposit", "1000.00", "approved",
        ]


class TestStatementAccess:
    async def test_other_customer_forbidden(
        self, client, second_customer_headers, funded_account
    ):
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params=this_month(),
            headers=second_customer_headers,
        )
        assert response.status_code == 403

    async def test_invalid_month(self, client, customer_headers, funded_account):
        response = await client.get(
            f"/accounts/{funded_account['id']}/statements",
            params={"year": 2024, "month": 13},
            headers=customer_headers,
        )
        assert response.status_code == 422
