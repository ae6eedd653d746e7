"""
Tests for the fixed-window rate limiter and the 429 response.
"""

import pytest

from bank_portal.config import settings
from bank_portal.rate_limit import FixedWindowRateLimiter
from conftest import open_account


class TestFixedWindowRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter()
        results = [limiter.check("ip:POST:/auth/login", 3, 60, now=1000.0) for _ in range(3)]
        assert all(r.allowed for r in results)
        assert [r.remaining for r in results] == [2, 1, 0]

    def test_blocks_over_limit(self):
        limiter = FixedWindowRateLimiter()
        for _ in range(3):
            limiter.check("key", 3, 60, now=1000.0)
        result = limiter.check("key", 3, 60, now=1030.0)
        assert not result.allowed
        assert result.reset_at == 1060.0

    def test_new_window_after_reset(self):
        limiter = FixedWindowRateLimiter()
        for _ in range(3):
            limiter.check("key", 3, 60, now=1000.0)
        result = limiter.check("key", 3, 60, now=1060.0)
        assert result.allowed
        assert result.remaining == 2

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter()
        limiter.check("a", 1, 60, now=1000.0)
        assert not limiter.check("a", 1, 60, now=1000.0).allowed
        assert limiter.check("b", 1, 60, now=1000.0).allowed

    def test_reset_clears_state(self):
        limiter = FixedWindowRateLimiter()
        limiter.check("a", 1, 60, now=1000.0)
        limiter.reset()
        assert limiter.check("a", 1, 60, now=1000.0).allowed


class TestRateLimitedEndpoint:
    @pytest.fixture
    def limits_on(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)

    async def test_forgot_password_throttled(self, client, limits_on):
        payload = {"email": "nobody@example.com"}
        for _ in range(3):
            response = await client.post("/auth/forgot-password", json=payload)
            assert response.status_code == 200

        response = await client.post("/auth/forgot-password", json=payload)
        assert response.status_code == 429
        body = response.json()
        assert body["error_type"] == "rate_limited"
        assert int(response.headers["Retry-After"]) >= 1
        assert body["retry_after"] == int(response.headers["Retry-After"])

    async def test_disabled_by_setting(self, client):
        for _ in range(5):
            response = await client.post(
                "/auth/forgot-password", json={"email": "nobody@example.com"}
            )
            assert response.status_code == 200

    async def test_budget_shared_across_path_ids(
        self, client, customer_headers, admin_headers, monkeypatch
    ):
        accounts = [await open_account(client, customer_headers) for _ in range(3)]
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)

        codes = []
        for i in range(11):
            response = await client.post(
                f"/admin/accounts/{accounts[i % 3]['id']}/credit",
                json={"amount_cents": 100, "description": "Deposit"},
                headers=admin_headers,
            )
            codes.append(response.status_code)
        assert codes == [200] * 10 + [429]
