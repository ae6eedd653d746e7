"""
Tests for savings goals and standing orders.

Covers:
  - Goal creation and progress
  - Contributions debit the linked account
  - Deactivated goals refuse contributions
  - Standing orders can't pay into their own source account
"""

from datetime import date, timedelta

from conftest import open_account


async def create_goal(client, headers, account_id, **overrides):
    body = {
        "account_id": account_id,
        "name": "Holiday",
        "target_amount_cents": 50_000,
    }
    body.update(overrides)
    return await client.post("/savings-goals", json=body, headers=headers)


class TestSavingsGoals:
    async def test_create_goal(self, client, customer_headers, funded_account):
        response = await create_goal(client, customer_headers, funded_account["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["current_amount_cents"] == 0
        assert body["progress_percent"] == 0
        assert body["is_active"] is True

    async def test_auto_deposit_needs_schedule(self, client, customer_headers, funded_account):
        response = await create_goal(
            client, customer_headers, funded_account["id"], auto_deposit=True
        )
        assert response.status_code == 422

    async def test_contribution_moves_money(self, client, customer_headers, funded_account):
        goal = (await create_goal(client, customer_headers, funded_account["id"])).json()
        response = await client.post(
            f"/savings-goals/{goal['id']}/contributions",
            json={"amount_cents": 12_500},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["current_amount_cents"] == 12_500
        assert response.json()["progress_percent"] == 25.0

        rows = (
            await client.get(
                f"/accounts/{funded_account['id']}/transactions",
                params={"type": "debit"},
                headers=customer_headers,
            )
        ).json()
        assert rows[0]["description"] == "Savings goal: Holiday"
        assert rows[0]["balance_after_cents"] == 100_000 - 12_500

    async def test_contribution_needs_funds(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        goal = (await create_goal(client, customer_headers, account["id"])).json()
        response = await client.post(
            f"/savings-goals/{goal['id']}/contributions",
            json={"amount_cents": 100},
            headers=customer_headers,
        )
        assert response.status_code == 422

    async def test_deactivated_goal_refuses_contributions(
        self, client, customer_headers, funded_account
    ):
        goal = (await create_goal(client, customer_headers, funded_account["id"])).json()
        closed = await client.delete(f"/savings-goals/{goal['id']}", headers=customer_headers)
        assert closed.json()["is_active"] is False

        response = await client.post(
            f"/savings-goals/{goal['id']}/contributions",
            json={"amount_cents": 100},
            headers=customer_headers,
        )
        assert response.status_code == 400

    async def test_other_customer_cannot_contribute(
        self, client, customer_headers, second_customer_headers, funded_account
    ):
        goal = (await create_goal(client, customer_headers, funded_account["id"])).json()
        response = await client.post(
            f"/savings-goals/{goal['id']}/contributions",
            json={"amount_cents": 100},
            headers=second_customer_headers,
        )
        assert response.status_code == 403


class TestStandingOrders:
    def order(self, account: dict, **overrides) -> dict:
        body = {
            "from_account_id": account["id"],
            "to_account_number": "5550001234",
            "to_account_holder_name": "Landlord LLC",
            "amount_cents": 150_000,
            "frequency": "monthly",
            "next_payment_date": (date.today() + timedelta(days=5)).isoformat(),
        }
        body.update(overrides)
        return body

    async def test_create_and_list(self, client, customer_headers, funded_account):
        response = await client.post(
            "/standing-orders", json=self.order(funded_account), headers=customer_headers
        )
        assert response.status_code == 201
        assert response.json()["is_active"] is True

        listed = await client.get("/standing-orders", headers=customer_headers)
        assert len(listed.json()) == 1

    async def test_cannot_pay_own_source_account(self, client, customer_headers, funded_account):
        response = await client.post(
            "/standing-orders",
            json=self.order(funded_account, to_account_number=funded_account["account_number"]),
            headers=customer_headers,
        )
        assert response.status_code == 400

    async def test_end_date_before_start_rejected(self, client, customer_headers, funded_account):
        response = await client.post(
            "/standing-orders",
            json=self.order(funded_account, end_date=date.today().isoformat()),
            headers=customer_headers,
        )
        assert response.status_code == 422

    async def test_deactivate(self, client, customer_headers, second_customer_headers, funded_account):
        order = (
            await client.post(
                "/standing-orders", json=self.order(funded_account), headers=customer_headers
            )
        ).json()
        forbidden = await client.delete(
            f"/standing-orders/{order['id']}", headers=second_customer_headers
        )
        assert forbidden.status_code == 403

        response = await client.delete(
            f"/standing-orders/{order['id']}", headers=customer_headers
        )
        assert response.json()["is_active"] is False
