"""
Tests for in-app notifications.

Covers:
  - Listing, unread count, mark read, mark all read, delete
  - Other users' notifications look missing
  - Admin sends (single, bulk, all customers) are audited
  - A notification setting can switch in-app copies off
"""

import uuid

import pytest_asyncio

from conftest import open_account


@pytest_asyncio.fixture
async def notified(client, customer_headers):
    """Opening two accounts leaves two unread notifications."""
    await open_account(client, customer_headers)
    await open_account(client, customer_headers, "savings")
    return (await client.get("/notifications", headers=customer_headers)).json()


class TestInbox:
    async def test_unread_count(self, client, customer_headers, notified):
        response = await client.get("/notifications/unread-count", headers=customer_headers)
        assert response.json() == {"unread_count": 2}

    async def test_mark_read(self, client, customer_headers, notified):
        target = notified[0]["id"]
        response = await client.patch(
            f"/notifications/{target}/read", headers=customer_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "read"
        assert response.json()["read_at"] is not None

        unread = await client.get(
            "/notifications", params={"status": "unread"}, headers=customer_headers
        )
        assert len(unread.json()) == 1

    async def test_mark_all_read(self, client, customer_headers, notified):
        response = await client.post("/notifications/mark-all-read", headers=customer_headers)
        assert response.json()["message"] == "2 notifications marked as read"
        count = await client.get("/notifications/unread-count", headers=customer_headers)
        assert count.json()["unread_count"] == 0

    async def test_delete(self, client, customer_headers, notified):
        response = await client.delete(
            f"/notifications/{notified[0]['id']}", headers=customer_headers
        )
        assert response.status_code == 204
        remaining = await client.get("/notifications", headers=customer_headers)
        assert len(remaining.json()) == 1

    async def test_other_users_notification_is_missing(
        self, client, second_customer_headers, notified
    ):
        response = await client.patch(
            f"/notifications/{notified[0]['id']}/read", headers=second_customer_headers
        )
        assert response.status_code == 404

    async def test_metadata_is_exposed(self, notified):
        assert all("account_id" in n["metadata"] for n in notified)


class TestAdminSend:
    async def test_send_single(self, client, customer_headers, customer_user_id, admin_headers):
        response = await client.post(
            "/admin/notifications/send",
            json={"user_id": customer_user_id, "title": "Hello", "message": "Welcome aboard"},
            headers=admin_headers,
        )
        assert response.json() == {"sent_count": 1}

        inbox = (await client.get("/notifications", headers=customer_headers)).json()
        assert inbox[0]["title"] == "Hello"
        assert inbox[0]["type"] == "system"

        logs = await client.get(
            "/admin/audit-logs", params={"action": "notification_sent"}, headers=admin_headers
        )
        assert logs.json()[0]["target_user_id"] == customer_user_id

    async def test_bulk_skips_unknown_users(self, client, customer_user_id, admin_headers):
        response = await client.post(
            "/admin/notifications/send-bulk",
            json={
                "user_ids": [customer_user_id, str(uuid.uuid4())],
                "title": "Maintenance",
                "message": "Tonight 1-2am",
            },
            headers=admin_headers,
        )
        assert response.json() == {"sent_count": 1}

    async def test_send_to_all_customers(
        self, client, customer_headers, second_customer_headers, admin_headers
    ):
        response = await client.post(
            "/admin/notifications/send-to-all",
            json={"title": "New feature", "message": "Try savings goals"},
            headers=admin_headers,
        )
        # Two customers; the admin is not included
        assert response.json() == {"sent_count": 2}

        inbox = (await client.get("/notifications", headers=second_customer_headers)).json()
        assert inbox[0]["type"] == "admin_announcement"

    async def test_customer_cannot_send(self, client, customer_headers, customer_user_id):
        response = await client.post(
            "/admin/notifications/send",
            json={"user_id": customer_user_id, "title": "Hi", "message": "Hi"},
            headers=customer_headers,
        )
        assert response.status_code == 403


class TestSettings:
    async def test_in_app_switched_off(self, client, customer_headers, admin_headers):
        response = await client.put(
            "/admin/email-configuration/account_created",
            json={"in_app_enabled": False},
            headers=admin_headers,
        )
        assert response.status_code == 200

        await open_account(client, customer_headers)
        inbox = await client.get("/notifications", headers=customer_headers)
        assert inbox.json() == []
