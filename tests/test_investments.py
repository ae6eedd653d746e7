"""Tests for investment purchases and the portfolio summary."""

from decimal import Decimal

from bank_portal.services.investment_service import DEFAULT_PRICE, get_price
from conftest import open_account


class TestPricing:
    def test_known_instrument(self):
        assert get_price("AAPL") == Decimal("175.43")

    def test_unknown_instrument_uses_default(self):
        assert get_price("Obscure Holdings") == DEFAULT_PRICE


class TestBuy:
    async def test_buy_debits_account(self, client, customer_headers, funded_account):
        response = await client.post(
            "/investments",
            json={
                "account_id": funded_account["id"],
                "investment_type": "stocks",
                "instrument_name": "AAPL",
                "amount_cents": 17_543,
            },
            headers=customer_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert Decimal(str(body["quantity"])) == Decimal("1")
        assert body["amount_invested_cents"] == 17_543
        assert body["profit_loss_cents"] == 0

        balance = await client.get(
            f"/accounts/{funded_account['id']}/balance", headers=customer_headers
        )
        assert balance.json()["cached_balance_cents"] == 100_000 - 17_543

    async def test_quantity_rounds_down(self, client, customer_headers, funded_account):
        response = await client.post(
            "/investments",
            json={
                "account_id": funded_account["id"],
                "investment_type": "mutual_funds",
                "instrument_name": "Contrafund",
                "amount_cents": 10_000,
            },
            headers=customer_headers,
        )
        # 100.00 / 18.45 = 5.420054200542...
        assert Decimal(str(response.json()["quantity"])) == Decimal("5.42005420")

    async def test_insufficient_funds(self, client, customer_headers):
        account = await open_account(client, customer_headers)
        response = await client.post(
            "/investments",
            json={
                "account_id": account["id"],
                "investment_type": "stocks",
                "instrument_name": "MSFT",
                "amount_cents": 1_000,
            },
            headers=customer_headers,
        )
        assert response.status_code == 422


class TestPortfolio:
    async def test_portfolio_totals(self, client, customer_headers, funded_account):
        for name, amount in (("AAPL", 10_000), ("Growth Fund", 5_000)):
            await client.post(
                "/investments",
                json={
                    "account_id": funded_account["id"],
                    "investment_type": "stocks",
                    "instrument_name": name,
                    "amount_cents": amount,
                },
                headers=customer_headers,
            )
        response = await client.get("/investments", headers=customer_headers)
        body = response.json()
        assert body["total_invested_cents"] == 15_000
        assert body["total_value_cents"] == 15_000
        assert len(body["holdings"]) == 2

    async def test_empty_portfolio(self, client, second_customer_headers):
        body = (await client.get("/investments", headers=second_customer_headers)).json()
        assert body["holdings"] == []
        assert body["total_invested_cents"] == 0
