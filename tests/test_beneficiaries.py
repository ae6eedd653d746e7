"""
Tests for beneficiaries.

Active beneficiaries' shares can never add up to more than 100%.
Removing a beneficiary deactivates it and frees its share.
"""

from decimal import Decimal


async def add(client, headers, name, percentage, relationship="child"):
    return await client.post(
        "/beneficiaries",
        json={"name": name, "relationship": relationship, "percentage": percentage},
        headers=headers,
    )


class TestBeneficiaries:
    async def test_add_and_list(self, client, customer_headers):
        response = await add(client, customer_headers, "Alex Doe", "60")
        assert response.status_code == 201
        body = response.json()
        assert body["relationship"] == "child"
        assert Decimal(str(body["percentage"])) == Decimal("60")

        listed = await client.get("/beneficiaries", headers=customer_headers)
        assert [b["name"] for b in listed.json()] == ["Alex Doe"]

    async def test_total_cannot_exceed_100(self, client, customer_headers):
        await add(client, customer_headers, "Alex Doe", "60")
        await add(client, customer_headers, "Sam Doe", "40")
        response = await add(client, customer_headers, "Extra Doe", "0.01")
        assert response.status_code == 400

    async def test_update_checks_total_without_own_share(self, client, customer_headers):
        first = (await add(client, customer_headers, "Alex Doe", "60")).json()
        await add(client, customer_headers, "Sam Doe", "30")

        ok = await client.patch(
            f"/beneficiaries/{first['id']}", json={"percentage": "70"}, headers=customer_headers
        )
        too_much = await client.patch(
            f"/beneficiaries/{first['id']}", json={"percentage": "71"}, headers=customer_headers
        )
        assert ok.status_code == 200
        assert too_much.status_code == 400

    async def test_remove_frees_share(self, client, customer_headers):
        first = (await add(client, customer_headers, "Alex Doe", "100")).json()
        response = await client.delete(
            f"/beneficiaries/{first['id']}", headers=customer_headers
        )
        assert response.status_code == 204

        listed = await client.get("/beneficiaries", headers=customer_headers)
        assert listed.json() == []
        assert (await add(client, customer_headers, "Sam Doe", "100")).status_code == 201

    async def test_removed_beneficiary_not_found(self, client, customer_headers):
        first = (await add(client, customer_headers, "Alex Doe", "50")).json()
        await client.delete(f"/beneficiaries/{first['id']}", headers=customer_headers)
        response = await client.patch(
            f"/beneficiaries/{first['id']}", json={"name": "New Name"}, headers=customer_headers
        )
        assert response.status_code == 404

    async def test_other_customer_forbidden(
        self, client, customer_headers, second_customer_headers
    ):
        first = (await add(client, customer_headers, "Alex Doe", "50")).json()
        response = await client.delete(
            f"/beneficiaries/{first['id']}", headers=second_customer_headers
        )
        assert response.status_code == 403
