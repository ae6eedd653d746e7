"""
Tests for loan applications and their review.

Covers:
  - Amortized monthly payment (and the 0% special case)
  - Applications start pending and appear in the admin queue
  - Approval sets rate, term, payment and remaining balance
  - Only pending loans can be reviewed
"""

from decimal import Decimal

import pytest_asyncio

from bank_portal.services.loan_service import monthly_payment_cents


@pytest_asyncio.fixture
async def loan(client, customer_headers):
    response = await client.post(
        "/loans/apply",
        json={"amount_cents": 1_000_000, "loan_type": "personal", "purpose": "Car repair"},
        headers=customer_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestMonthlyPayment:
    def test_amortized_payment(self):
        # $10,000 at 12% over 12 months
        assert monthly_payment_cents(1_000_000, Decimal("12"), 12) == 88_849

    def test_zero_rate(self):
        assert monthly_payment_cents(1_200_000, Decimal("0"), 12) == 100_000


class TestApply:
    async def test_application_is_pending(self, loan):
        assert loan["status"] == "pending"
        assert loan["term_months"] == 60
        assert loan["monthly_payment_cents"] is None

    async def test_list_own_loans(self, client, loan, customer_headers, second_customer_headers):
        mine = await client.get("/loans", headers=customer_headers)
        theirs = await client.get("/loans", headers=second_customer_headers)
        assert [item["id"] for item in mine.json()] == [loan["id"]]
        assert theirs.json() == []

    async def test_amount_must_be_positive(self, client, customer_headers):
        response = await client.post(
            "/loans/apply",
            json={"amount_cents": 0, "loan_type": "personal"},
            headers=customer_headers,
        )
        assert response.status_code == 422


class TestReview:
    async def test_pending_queue(self, client, loan, admin_headers):
        response = await client.get("/admin/loans/pending", headers=admin_headers)
        assert [item["id"] for item in response.json()] == [loan["id"]]

    async def test_approve(self, client, loan, admin_headers, customer_headers):
        response = await client.post(
            f"/admin/loans/{loan['id']}/approve",
            json={"interest_rate": "12", "term_months": 12},
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "approved"
        assert body["monthly_payment_cents"] == 88_849
        assert body["remaining_balance_cents"] == 1_000_000
        assert body["approved_at"] is not None

        notifications = (await client.get("/notifications", headers=customer_headers)).json()
        assert notifications[0]["title"] == "Loan approved"

    async def test_reject(self, client, loan, admin_headers):
        response = await client.post(
            f"/admin/loans/{loan['id']}/reject",
            json={"reason": "Income too low"},
            headers=admin_headers,
        )
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Income too low"

        queue = await client.get("/admin/loans/pending", headers=admin_headers)
        assert queue.json() == []

    async def test_reviewed_loan_is_final(self, client, loan, admin_headers):
        await client.post(
            f"/admin/loans/{loan['id']}/reject",
            json={"reason": "Income too low"},
            headers=admin_headers,
        )
        response = await client.post(
            f"/admin/loans/{loan['id']}/approve",
            json={"interest_rate": "5", "term_months": 36},
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_customer_cannot_approve(self, client, loan, customer_headers):
        response = await client.post(
            f"/admin/loans/{loan['id']}/approve",
            json={"interest_rate": "0", "term_months": 12},
            headers=customer_headers,
        )
        assert response.status_code == 403
