"""
Tests for rate limiting middleware.

Tests the token bucket algorithm and rate limit enforcement.
"""

import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from userauth.middleware.rate_limit import RateLimitMiddleware, TokenBucket


class TestTokenBucket:
    """Unit tests for TokenBucket implementation."""

    def test_token_bucket_initialization(self):
        """Test token bucket initializes with full capacity."""
        bucket = TokenBucket(capacity=10, refill_rate=1.0)
        assert bucket.capacity == 10
        assert bucket.refill_rate == 1.0
        assert bucket.tokens == 10.0

    def test_consume_token_success(self):
        bucket = TokenBucket(capacity=10, refill_rate=0.001)
        assert bucket.consume(1) is True
        assert bucket.tokens == pytest.approx(9.0, abs=0.01)

    def test_consume_token_failure(self):
        bucket = TokenBucket(capacity=1, refill_rate=0.001)
        assert bucket.consume(1) is True
        assert bucket.consume(1) is False

    def test_token_refill_over_time(self):
        """Test tokens refill at correct rate."""
        bucket = TokenBucket(capacity=10, refill_rate=10.0)
        bucket.consume(5)

        time.sleep(0.5)
        bucket.consume(0)  # Trigger refill
        assert bucket.tokens >= 9.9

    def test_token_refill_cap(self):
        bucket = TokenBucket(capacity=10, refill_rate=10.0)
        time.sleep(0.2)
        bucket.consume(0)
        assert bucket.tokens <= 10.0

    def test_get_wait_time(self):
        """Test wait time calculation."""
        bucket = TokenBucket(capacity=10, refill_rate=2.0)  # 2 tokens/second
        bucket.consume(10)
        wait_time = bucket.get_wait_time()
        assert 0.4 <= wait_time <= 0.6

    def test_no_wait_when_tokens_available(self):
        assert TokenBucket(capacity=3, refill_rate=1.0).get_wait_time() == 0.0


class TestRateLimitMiddleware:
    """Integration tests for rate limiting middleware."""

    @pytest.fixture
    def app_with_rate_limit(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, auth_limit=5, default_limit=10)

        @app.get("/test")
        async def test_endpoint():
            return {"message": "success"}

        @app.post("/api/v1/auth/sign-in")
        async def auth_endpoint():
            return {"message": "auth success"}

        return app

    def test_allows_requests_under_limit(self, app_with_rate_limit):
        client = TestClient(app_with_rate_limit)

        for _ in range(5):
            response = client.get("/test")
            assert response.status_code == 200
            assert response.headers["X-RateLimit-Limit"] == "10"

    def test_blocks_requests_over_limit(self, app_with_rate_limit):
        # Arrange
        client = TestClient(app_with_rate_limit)
        for _ in range(10):
            assert client.get("/test").status_code == 200

        # Act
        response = client.get("/test")

        # Assert
        assert response.status_code == 429
        body = response.json()
        assert body["statusCode"] == 429
        assert body["code"] == "TOO_MANY_REQUESTS"
        assert body["message"] == "Rate limit exceeded"
        assert body["path"] == "/test"
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_auth_endpoint_stricter(self, app_with_rate_limit):
        client = TestClient(app_with_rate_limit)

        for _ in range(5):
            assert client.post("/api/v1/auth/sign-in").status_code == 200

        assert client.post("/api/v1/auth/sign-in").status_code == 429

    def test_auth_and_default_scopes_are_independent(self, app_with_rate_limit):
        client = TestClient(app_with_rate_limit)

        for _ in range(5):
            client.post("/api/v1/auth/sign-in")

        assert client.post("/api/v1/auth/sign-in").status_code == 429
        assert client.get("/test").status_code == 200

    def test_different_ips_independent(self, app_with_rate_limit):
        client = TestClient(app_with_rate_limit)
        headers1 = {"X-Forwarded-For": "192.168.1.1"}
        headers2 = {"X-Forwarded-For": "192.168.1.2"}

        for _ in range(10):
            assert client.get("/test", headers=headers1).status_code == 200

        assert client.get("/test", headers=headers1).status_code == 429
        assert client.get("/test", headers=headers2).status_code == 200

    def test_options_requests_are_not_limited(self, app_with_rate_limit):
        client = TestClient(app_with_rate_limit)

        for _ in range(12):
            assert client.options("/test").status_code != 429


class TestRateLimitConfiguration:
    def test_disabled_middleware_passes_everything(self):
        # Arrange
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, default_limit=1, enabled=False)

        @app.get("/test")
        async def test_endpoint():
            return {"message": "success"}

        client = TestClient(app)

        # Act / Assert
        for _ in range(5):
            response = client.get("/test")
            assert response.status_code == 200
            assert "X-RateLimit-Limit" not in response.headers

    def test_idle_buckets_are_cleaned_up(self):
        app = FastAPI()
        middleware = RateLimitMiddleware(app, cleanup_interval=60)
        middleware.last_cleanup = time.monotonic() - 120
        middleware.buckets[("10.0.0.1", "default")] = (
            TokenBucket(capacity=1, refill_rate=1.0),
            time.monotonic() - 10_000,
        )

        middleware._get_or_create_bucket(("10.0.0.2", "default"), 60)

        assert ("10.0.0.1", "default") not in middleware.buckets
        assert ("10.0.0.2", "default") in middleware.buckets
