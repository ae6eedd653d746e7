"""
Tests for the back office: users, accounts, stats, audit log and email.

Covers:
  - Every /admin endpoint refuses customers
  - User management with self-protection rules
  - Manual credits/debits and freeze / unfreeze / close
  - Audit rows carry the admin, target and client details
  - Dashboard stats
"""

import uuid

import pytest

from conftest import CUSTOMER, fund, open_account, signup


class TestAdminAccess:
    @pytest.mark.parametrize(
        "path",
        ["/admin/users", "/admin/accounts", "/admin/stats", "/admin/audit-logs", "/admin/transfers"],
    )
    async def test_customer_forbidden(self, client, customer_headers, path):
        response = await client.get(path, headers=customer_headers)
        assert response.status_code == 403

    async def test_unauthenticated(self, client):
        response = await client.get("/admin/users")
        assert response.status_code == 401


class TestUsers:
    async def test_list_users_with_kyc_status(self, client, customer_headers, admin_headers):
        response = await client.get(
            "/admin/users", params={"role": "customer"}, headers=admin_headers
        )
        users = response.json()
        assert [u["email"] for u in users] == [CUSTOMER["email"]]
        assert users[0]["kyc_status"] == "pending"
        assert "hashed_password" not in users[0]

    async def test_user_detail(self, client, customer_headers, customer_user_id, admin_headers):
        await open_account(client, customer_headers)
        response = await client.get(f"/admin/users/{customer_user_id}", headers=admin_headers)
        body = response.json()
        assert body["user"]["email"] == CUSTOMER["email"]
        assert body["profile"]["first_name"] == "Test"
        assert len(body["accounts"]) == 1

    async def test_unknown_user(self, client, admin_headers):
        response = await client.get(f"/admin/users/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    async def test_create_user(self, client, admin_headers):
        response = await client.post(
            "/admin/users",
            json={
                "email": "staff@example.com",
                "password": "StaffPass123!",
                "first_name": "Staff",
                "last_name": "Member",
                "role": "admin",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["role"] == "admin"

        login = await client.post(
            "/auth/login", json={"email": "staff@example.com", "password": "StaffPass123!"}
        )
        assert login.status_code == 200

    async def test_update_user_and_profile(
        self, client, customer_headers, customer_user_id, admin_headers
    ):
        response = await client.patch(
            f"/admin/users/{customer_user_id}",
            json={"email": "renamed@example.com", "last_name": "Renamed"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["email"] == "renamed@example.com"

        me = await client.get("/auth/me", headers=customer_headers)
        assert me.json()["last_name"] == "Renamed"

    async def test_update_to_taken_email(self, client, customer_user_id, admin_headers):
        await signup(
            client,
            {"email": "taken@example.com", "password": "TakenPass123!", "first_name": "T", "last_name": "K"},
        )
        response = await client.patch(
            f"/admin/users/{customer_user_id}",
            json={"email": "taken@example.com"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_admin_cannot_demote_or_delete_self(self, client, admin_headers):
        me = (await client.get("/auth/me", headers=admin_headers)).json()
        demote = await client.patch(
            f"/admin/users/{me['id']}", json={"role": "customer"}, headers=admin_headers
        )
        deactivate = await client.patch(
            f"/admin/users/{me['id']}", json={"is_active": False}, headers=admin_headers
        )
        delete = await client.delete(f"/admin/users/{me['id']}", headers=admin_headers)
        assert demote.status_code == 400
        assert deactivate.status_code == 400
        assert delete.status_code == 400

    async def test_send_password_reset(self, client, customer_user_id, admin_headers):
        response = await client.post(
            f"/admin/users/{customer_user_id}/reset-password", headers=admin_headers
        )
        assert response.status_code == 200

        logs = await client.get(
            "/admin/audit-logs", params={"action": "password_reset_sent"}, headers=admin_headers
        )
        assert logs.json()[0]["target_user_id"] == customer_user_id


class TestAccountOperations:
    async def test_credit_and_debit(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        credited = await fund(client, admin_headers, account["id"], 5_000, "Branch deposit")
        assert credited["account"]["cached_balance_cents"] == 5_000
        assert credited["transaction"]["type"] == "credit"

        response = await client.post(
            f"/admin/accounts/{account['id']}/debit",
            json={"amount_cents": 1_500, "description": "Wire fee refund reversal"},
            headers=admin_headers,
        )
        assert response.json()["account"]["cached_balance_cents"] == 3_500

    async def test_debit_cannot_overdraw(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        response = await client.post(
            f"/admin/accounts/{account['id']}/debit",
            json={"amount_cents": 1, "description": "Test"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    async def test_credit_notifies_customer(self, client, customer_headers, admin_headers, funded_account):
        inbox = (await client.get("/notifications", headers=customer_headers)).json()
        assert inbox[0]["title"] == "Account credited"
        assert inbox[0]["message"] == "$1,000.00: Initial deposit"

    async def test_freeze_blocks_money_movement(
        self, client, customer_headers, admin_headers, funded_account
    ):
        response = await client.post(
            f"/admin/accounts/{funded_account['id']}/status",
            json={"status": "frozen", "reason": "Fraud review"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "frozen"

        credit = await client.post(
            f"/admin/accounts/{funded_account['id']}/credit",
            json={"amount_cents": 100, "description": "Deposit"},
            headers=admin_headers,
        )
        assert credit.status_code == 422

        unfrozen = await client.post(
            f"/admin/accounts/{funded_account['id']}/status",
            json={"status": "active", "reason": "Review cleared"},
            headers=admin_headers,
        )
        assert unfrozen.json()["status"] == "active"

    async def test_closed_is_final(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        await client.post(
            f"/admin/accounts/{account['id']}/status",
            json={"status": "closed", "reason": "Customer request"},
            headers=admin_headers,
        )
        response = await client.post(
            f"/admin/accounts/{account['id']}/status",
            json={"status": "active", "reason": "Oops"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_same_status_rejected(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        response = await client.post(
            f"/admin/accounts/{account['id']}/status",
            json={"status": "active", "reason": "No-op"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_list_and_filter_accounts(
        self, client, customer_headers, second_customer_headers, admin_headers
    ):
        first = await open_account(client, customer_headers)
        await open_account(client, second_customer_headers)
        await client.post(
            f"/admin/accounts/{first['id']}/status",
            json={"status": "frozen", "reason": "Check"},
            headers=admin_headers,
        )
        everything = await client.get("/admin/accounts", headers=admin_headers)
        frozen = await client.get(
            "/admin/accounts", params={"status": "frozen"}, headers=admin_headers
        )
        assert len(everything.json()) == 2
        assert [a["id"] for a in frozen.json()] == [first["id"]]

    async def test_admin_balance(self, client, admin_headers, funded_account):
        response = await client.get(
            f"/admin/accounts/{funded_account['id']}/balance", headers=admin_headers
        )
        assert response.json()["computed_balance_cents"] == 100_000


class TestAuditLog:
    async def test_credit_is_audited_with_client_details(
        self, client, admin_headers, funded_account
    ):
        logs = await client.get(
            "/admin/audit-logs", params={"action": "balance_credited"}, headers=admin_headers
        )
        entry = logs.json()[0]
        assert entry["details"]["account_id"] == funded_account["id"]
        assert entry["details"]["amount_cents"] == 100_000
        assert entry["ip_address"] is not None
        assert entry["user_agent"].startswith("python-httpx")

    async def test_newest_first(self, client, customer_headers, admin_headers):
        account = await open_account(client, customer_headers)
        await fund(client, admin_headers, account["id"], 100, "first")
        await fund(client, admin_headers, account["id"], 200, "second")
        logs = (await client.get("/admin/audit-logs", headers=admin_headers)).json()
        assert [e["details"]["description"] for e in logs[:2]] == ["second", "first"]


class TestStats:
    async def test_stats(
        self, client, customer_headers, second_customer_headers, admin_headers, funded_account
    ):
        response = await client.get("/admin/stats", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["users"] == {"total": 3, "admins": 1, "customers": 2, "new_last_24h": 3}
        assert body["accounts"]["total"] == 1
        assert body["accounts"]["total_active_balance_cents"] == 100_000
        assert body["transfers"]["pending_review"] == 0
        assert body["transactions"]["count_last_24h"] == 1


class TestBulkEmail:
    async def test_email_counts_delivered_only(
        self, client, customer_user_id, admin_headers
    ):
        response = await client.post(
            "/admin/email",
            json={
                "user_ids": [customer_user_id, str(uuid.uuid4())],
                "subject": "Policy update",
                "message": "Our terms have changed.",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        # No provider key in tests: nothing is delivered
        assert response.json() == {"requested": 2, "sent_count": 0}

        logs = await client.get(
            "/admin/audit-logs", params={"action": "email_sent"}, headers=admin_headers
        )
        assert logs.json()[0]["details"]["recipients"] == [customer_user_id]
