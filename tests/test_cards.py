"""
Tests for cards: issuance, status, limits and purchases.

Covers:
  - Card numbers and CVVs never appear in responses
  - Status changes, with CANCELLED as a dead end
  - Per-purchase and daily limits
  - Declined purchases are kept in the ledger
"""

import uuid

from sqlalchemy import select

from bank_portal.models.card import Card
from bank_portal.security import decrypt_value
from bank_portal.services import card_service, transaction_service
from conftest import open_account


async def issue(client, headers, account_id, **extra):
    response = await client.post(
        "/cards", json={"account_id": account_id, **extra}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def buy(client, headers, card_id, amount_cents, merchant="Corner Shop"):
    return await client.post(
        f"/cards/{card_id}/purchases",
        json={"amount_cents": amount_cents, "merchant": merchant},
        headers=headers,
    )


class TestIssueCard:
    async def test_issue_debit_card(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        assert card["card_type"] == "debit"
        assert card["status"] == "active"
        assert card["cardholder_name"] == "TEST USER"
        assert len(card["card_number_last_four"]) == 4
        assert "card_number" not in card
        assert "cvv" not in card
        assert card["is_virtual"] is False

    async def test_card_number_encrypted_at_rest(
        self, client, customer_headers, funded_account, db_session
    ):
        card = await issue(client, customer_headers, funded_account["id"])
        stored = (
            await db_session.execute(select(Card).where(Card.id == uuid.UUID(card["id"])))
        ).scalar_one()
        number = decrypt_value(stored.card_number_encrypted)
        assert stored.card_number_encrypted != number
        assert len(number) == 16
        assert number.endswith(card["card_number_last_four"])
        assert len(decrypt_value(stored.cvv_encrypted)) == 3

    async def test_several_cards_per_account(self, client, customer_headers, funded_account):
        await issue(client, customer_headers, funded_account["id"])
        virtual = await issue(
            client, customer_headers, funded_account["id"], card_type="virtual"
        )
        assert virtual["is_virtual"] is True

        response = await client.get("/cards", headers=customer_headers)
        assert len(response.json()) == 2

    async def test_cannot_issue_on_someone_elses_account(
        self, client, second_customer_headers, funded_account
    ):
        response = await client.post(
            "/cards",
            json={"account_id": funded_account["id"]},
            headers=second_customer_headers,
        )
        assert response.status_code == 403

    async def test_other_customer_cannot_read_card(
        self, client, customer_headers, second_customer_headers, funded_account
    ):
        card = await issue(client, customer_headers, funded_account["id"])
        response = await client.get(f"/cards/{card['id']}", headers=second_customer_headers)
        assert response.status_code == 403


class TestCardStatus:
    async def test_freeze_and_unfreeze(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        frozen = await client.patch(
            f"/cards/{card['id']}/status", json={"status": "frozen"}, headers=customer_headers
        )
        assert frozen.json()["status"] == "frozen"

        declined = await buy(client, customer_headers, card["id"], 1_000)
        assert declined.status_code == 400

        active = await client.patch(
            f"/cards/{card['id']}/status", json={"status": "active"}, headers=customer_headers
        )
        assert active.json()["status"] == "active"

    async def test_cancelled_card_is_final(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        await client.patch(
            f"/cards/{card['id']}/status", json={"status": "cancelled"}, headers=customer_headers
        )
        response = await client.patch(
            f"/cards/{card['id']}/status", json={"status": "active"}, headers=customer_headers
        )
        assert response.status_code == 409

        limits = await client.patch(
            f"/cards/{card['id']}/limits",
            json={"daily_limit_cents": 5_000},
            headers=customer_headers,
        )
        assert limits.status_code == 409


class TestLimits:
    async def test_update_limits(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        response = await client.patch(
            f"/cards/{card['id']}/limits",
            json={"spending_limit_cents": 2_000},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["spending_limit_cents"] == 2_000
        assert response.json()["daily_limit_cents"] == card["daily_limit_cents"]

    async def test_empty_limits_update_rejected(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        response = await client.patch(
            f"/cards/{card['id']}/limits", json={}, headers=customer_headers
        )
        assert response.status_code == 422

    async def test_spending_limit_enforced(self, client, customer_headers, funded_account):
        card = await issue(
            client, customer_headers, funded_account["id"], spending_limit_cents=5_000
        )
        response = await buy(client, customer_headers, card["id"], 5_001)
        assert response.status_code == 422
        assert response.json()["error_type"] == "card_limit_exceeded"

    async def test_daily_limit_counts_earlier_purchases(
        self, client, customer_headers, funded_account
    ):
        card = await issue(
            client, customer_headers, funded_account["id"], daily_limit_cents=10_000
        )
        first = await buy(client, customer_headers, card["id"], 6_000)
        second = await buy(client, customer_headers, card["id"], 6_000)
        assert first.status_code == 201
        assert second.status_code == 422
        assert "daily" in second.json()["detail"]

    async def test_daily_sum_read_under_account_lock(
        self, client, customer_headers, funded_account, monkeypatch
    ):
        calls = []
        lock_account = transaction_service.lock_account
        spent_today = card_service._spent_today

        async def recording_lock(db, account_id):
            calls.append("lock")
            return await lock_account(db, account_id)

        async def recording_spent_today(db, card_id):
            calls.append("spent_today")
            return await spent_today(db, card_id)

        card = await issue(client, customer_headers, funded_account["id"])
        monkeypatch.setattr(transaction_service, "lock_account", recording_lock)
        monkeypatch.setattr(card_service, "_spent_today", recording_spent_today)

        response = await buy(client, customer_headers, card["id"], 1_000)
        assert response.status_code == 201
        assert calls.index("lock") < calls.index("spent_today")


class TestPurchases:
    async def test_purchase_debits_account(self, client, customer_headers, funded_account):
        card = await issue(client, customer_headers, funded_account["id"])
        response = await buy(client, customer_headers, card["id"], 4_250, "Book Store")
        assert response.status_code == 201
        txn = response.json()
        assert txn["type"] == "debit"
        assert txn["status"] == "approved"
        assert txn["card_id"] == card["id"]
        assert txn["balance_after_cents"] == 100_000 - 4_250
        assert txn["description"] == "Card purchase at Book Store"

    async def test_declined_purchase_is_recorded(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        card = await issue(client, customer_headers, account["id"])

        response = await buy(client, customer_headers, card["id"], 1_000)
        assert response.status_code == 422
        assert response.json()["error_type"] == "insufficient_funds"

        rows = await client.get(
            f"/accounts/{account['id']}/transactions",
            params={"status": "declined"},
            headers=customer_headers,
        )
        declined = rows.json()
        assert len(declined) == 1
        assert declined[0]["amount_cents"] == 1_000
        assert declined[0]["balance_after_cents"] == 0

        balance = await client.get(
            f"/accounts/{account['id']}/balance", headers=customer_headers
        )
        assert balance.json()["match"] is True
