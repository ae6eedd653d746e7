"""
Tests for KYC verifications.

Covers:
  - Duplicate submissions while pending or verified are refused
  - Review is only possible once, and rejection needs a reason
  - The profile's kyc_status and id_verification_status follow reviews
"""


async def submit(client, headers, verification_type, document_url="https://files.example/doc.pdf"):
    return await client.post(
        "/kyc/verifications",
        json={"verification_type": verification_type, "document_url": document_url},
        headers=headers,
    )


async def review(client, admin_headers, verification_id, status, reason=None):
    body = {"status": status}
    if reason is not None:
        body["rejection_reason"] = reason
    return await client.post(
        f"/admin/kyc/verifications/{verification_id}/review", json=body, headers=admin_headers
    )


async def profile(client, headers) -> dict:
    return (await client.get("/profile", headers=headers)).json()


class TestSubmit:
    async def test_submit_is_pending(self, client, customer_headers):
        response = await submit(client, customer_headers, "id")
        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        listed = await client.get("/kyc/verifications", headers=customer_headers)
        assert len(listed.json()) == 1

    async def test_duplicate_pending_refused(self, client, customer_headers):
        await submit(client, customer_headers, "id")
        response = await submit(client, customer_headers, "id")
        assert response.status_code == 409

    async def test_resubmit_after_rejection(self, client, customer_headers, admin_headers):
        first = (await submit(client, customer_headers, "id")).json()
        await review(client, admin_headers, first["id"], "rejected", "Blurry photo")
        response = await submit(client, customer_headers, "id")
        assert response.status_code == 201


class TestReview:
    async def test_admin_queue_filters_by_status(self, client, customer_headers, admin_headers):
        await submit(client, customer_headers, "id")
        await submit(client, customer_headers, "address")
        response = await client.get(
            "/admin/kyc/verifications", params={"status": "pending"}, headers=admin_headers
        )
        assert [v["verification_type"] for v in response.json()] == ["id", "address"]

    async def test_rejection_needs_reason(self, client, customer_headers, admin_headers):
        verification = (await submit(client, customer_headers, "id")).json()
        response = await review(client, admin_headers, verification["id"], "rejected")
        assert response.status_code == 422

    async def test_review_only_once(self, client, customer_headers, admin_headers):
        verification = (await submit(client, customer_headers, "id")).json()
        await review(client, admin_headers, verification["id"], "verified")
        again = await review(client, admin_headers, verification["id"], "rejected", "Changed mind")
        assert again.status_code == 409

    async def test_kyc_completes_with_id_and_address(self, client, customer_headers, admin_headers):
        id_check = (await submit(client, customer_headers, "id")).json()
        address = (await submit(client, customer_headers, "address")).json()

        await review(client, admin_headers, id_check["id"], "verified")
        halfway = await profile(client, customer_headers)
        assert halfway["id_verification_status"] == "verified"
        assert halfway["kyc_status"] == "pending"

        await review(client, admin_headers, address["id"], "verified")
        done = await profile(client, customer_headers)
        assert done["kyc_status"] == "completed"

    async def test_rejection_marks_profile(self, client, customer_headers, admin_headers):
        verification = (await submit(client, customer_headers, "id")).json()
        response = await review(client, admin_headers, verification["id"], "rejected", "Expired")
        assert response.json()["rejection_reason"] == "Expired"

        rejected = await profile(client, customer_headers)
        assert rejected["kyc_status"] == "rejected"
        assert rejected["id_verification_status"] == "rejected"

        notifications = (await client.get("/notifications", headers=customer_headers)).json()
        assert notifications[0]["type"] == "security"

    async def test_approved_resubmission_clears_rejection(
        self, client, customer_headers, admin_headers
    ):
        first = (await submit(client, customer_headers, "id")).json()
        await review(client, admin_headers, first["id"], "rejected", "Blurry photo")
        second = (await submit(client, customer_headers, "id")).json()
        await review(client, admin_headers, second["id"], "verified")

        assert (await profile(client, customer_headers))["kyc_status"] == "pending"

    async def test_review_is_audited(self, client, customer_headers, admin_headers):
        verification = (await submit(client, customer_headers, "ssn")).json()
        await review(client, admin_headers, verification["id"], "verified")
        logs = await client.get(
            "/admin/audit-logs", params={"action": "kyc_reviewed"}, headers=admin_headers
        )
        assert logs.json()[0]["details"]["verification_type"] == "ssn"
