"""
Tests for application wiring: health check, request ids, error format.
"""


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "version" in response.json()


class TestRequestId:
    async def test_generated_when_missing(self, client):
        response = await client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 16

    async def test_echoed_when_supplied(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestErrorFormat:
    async def test_domain_errors_carry_error_type(self, client, customer_headers):
        response = await client.get(
            "/accounts/00000000-0000-0000-0000-000000000000", headers=customer_headers
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"
