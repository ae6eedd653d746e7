"""
Tests for bill payments.

Covers:
  - Bills due now are paid immediately (ledger debit, reference, paid_at)
  - Bills due later wait as PENDING and can be cancelled
  - Paid bills can't be cancelled
  - Funds and ownership checks
"""

from datetime import date, timedelta

from conftest import open_account


def bill(account_id: str, **overrides) -> dict:
    body = {
        "account_id": account_id,
        "bill_type": "electricity",
        "biller_name": "City Power",
        "biller_account_number": "ACCT-99812",
        "amount_cents": 8_450,
    }
    body.update(overrides)
    return body


class TestPayBill:
    async def test_bill_without_due_date_is_paid(self, client, customer_headers, funded_account):
        response = await client.post(
            "/bill-payments", json=bill(funded_account["id"]), headers=customer_headers
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "paid"
        assert body["reference"].startswith("BP")
        assert body["paid_at"] is not None

        balance = await client.get(
            f"/accounts/{funded_account['id']}/balance", headers=customer_headers
        )
        assert balance.json()["cached_balance_cents"] == 100_000 - 8_450
        assert balance.json()["match"] is True

    async def test_future_bill_waits(self, client, customer_headers, funded_account):
        due = (date.today() + timedelta(days=10)).isoformat()
        response = await client.post(
            "/bill-payments",
            json=bill(funded_account["id"], due_date=due),
            headers=customer_headers,
        )
        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        balance = await client.get(
            f"/accounts/{funded_account['id']}/balance", headers=customer_headers
        )
        assert balance.json()["cached_balance_cents"] == 100_000

    async def test_insufficient_funds(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        response = await client.post(
            "/bill-payments", json=bill(account["id"]), headers=customer_headers
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "insufficient_funds"

    async def test_recurring_needs_frequency(self, client, customer_headers, funded_account):
        response = await client.post(
            "/bill-payments",
            json=bill(funded_account["id"], is_recurring=True),
            headers=customer_headers,
        )
        assert response.status_code == 422

    async def test_other_customers_account(self, client, second_customer_headers, funded_account):
        response = await client.post(
            "/bill-payments", json=bill(funded_account["id"]), headers=second_customer_headers
        )
        assert response.status_code == 403


class TestCancelBill:
    async def test_cancel_pending_bill(self, client, customer_headers, funded_account):
        due = (date.today() + timedelta(days=10)).isoformat()
        created = (
            await client.post(
                "/bill-payments",
                json=bill(funded_account["id"], due_date=due),
                headers=customer_headers,
            )
        ).json()

        response = await client.delete(
            f"/bill-payments/{created['id']}", headers=customer_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    async def test_paid_bill_cannot_be_cancelled(self, client, customer_headers, funded_account):
        created = (
            await client.post(
                "/bill-payments", json=bill(funded_account["id"]), headers=customer_headers
            )
        ).json()
        response = await client.delete(
            f"/bill-payments/{created['id']}", headers=customer_headers
        )
        assert response.status_code == 409

    async def test_list_only_own_bills(
        self, client, customer_headers, second_customer_headers, funded_account
    ):
        await client.post(
            "/bill-payments", json=bill(funded_account["id"]), headers=customer_headers
        )
        mine = await client.get("/bill-payments", headers=customer_headers)
        theirs = await client.get("/bill-payments", headers=second_customer_headers)
        assert len(mine.json()) == 1
        assert theirs.json() == []
