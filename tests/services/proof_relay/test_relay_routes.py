"""
Proof Relay Routes Tests
========================

Tests for the relay HTTP endpoints with a stubbed attestor and exchange.

Version: 0.1.0
"""

import httpx
import pytest
from fastapi import status
from httpx import AsyncClient

from common.cache import InMemoryCacheStore, fingerprint
from common.zk import ProverError
from tests.conftest import SAMPLE_PROOF, SAMPLE_TRANSFORMED, StubProvingCapability


TRADE_BODY = {
    "api_key": "test-key",
    "api_secret": "test-secret",
    "symbol": "BTCUSDT",
    "order_id": 123,
}

ASSET_BODY = {"api_key": "test-key", "api_secret": "test-secret", "asset": "USDT"}


# =============================================================================
# Trade Proof
# =============================================================================


class TestTradeProof:
    """Tests for POST /generateUSDMTradeProof."""

    @pytest.mark.asyncio
    async def test_success_returns_both_proof_forms(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """A valid proof returns transformedProof and proof."""
        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"transformedProof": SAMPLE_TRANSFORMED, "proof": SAMPLE_PROOF}
        assert stub_capability.call_count == 1

    @pytest.mark.asyncio
    async def test_request_sent_to_attestor(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """The attestor gets a signed trades URL, the key header, a match and retries."""
        await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        request = stub_capability.requests[0]
        assert request.url.startswith("https://fapi.exchange.test/fapi/v1/userTrades?timestamp=")
        assert "&symbol=BTCUSDT&orderId=123&recvWindow=60000&signature=" in request.url
        assert request.headers == {"X-MBX-APIKEY": "test-key"}
        assert request.response_matches[0].type == "regex"
        assert "(?<orderId>" in request.response_matches[0].value
        assert request.retries == 20
        assert request.retry_interval_ms == 2000

    @pytest.mark.asyncio
    async def test_second_identical_request_hits_cache(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
        memory_cache: InMemoryCacheStore,
    ) -> None:
        """The attestor is not invoked again for an identical request."""
        first = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)
        second = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        assert second.json() == first.json()
        assert stub_capability.call_count == 1
        assert await memory_cache.get(fingerprint("test-key", "BTCUSDT", 123)) is not None

    @pytest.mark.asyncio
    async def test_different_order_is_not_cached(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """A different order id generates a new proof."""
        await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)
        await relay_client.post("/generateUSDMTradeProof", json={**TRADE_BODY, "order_id": 124})

        assert stub_capability.call_count == 2

    @pytest.mark.asyncio
    async def test_no_proof_returns_400(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
        memory_cache: InMemoryCacheStore,
    ) -> None:
        """A null proof is reported as a plain-text 400 and not cached."""
        stub_capability.proof = None

        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Failed to generate proof"
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_invalid_proof_returns_400(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
        memory_cache: InMemoryCacheStore,
    ) -> None:
        """A proof failing verification is reported as a plain-text 400."""
        stub_capability.valid = False

        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Proof is invalid"
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_failure_is_retried_on_next_request(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Failures are not cached."""
        stub_capability.valid = False
        await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)
        stub_capability.valid = True
        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_200_OK
        assert stub_capability.call_count == 2

    @pytest.mark.asyncio
    async def test_prover_error_message(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Attestor errors are returned as their message."""
        stub_capability.error = ProverError("Response does not match")

        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Response does not match"

    @pytest.mark.asyncio
    async def test_unreachable_attestor_returns_500(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Transport failures reaching the attestor are server errors."""
        stub_capability.error = httpx.ConnectError("connection refused")

        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.text == "connection refused"

    @pytest.mark.asyncio
    async def test_corrupted_cache_returns_500(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
        memory_cache: InMemoryCacheStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Unreadable cache entries fail loudly."""
        from common.cache import CacheCorruptedError

        async def broken_get(key: str):
            raise CacheCorruptedError(key, "bad json")

        monkeypatch.setattr(memory_cache, "get", broken_get)

        response = await relay_client.post("/generateUSDMTradeProof", json=TRADE_BODY)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert "corrupted" in response.text
        assert stub_capability.call_count == 0

    @pytest.mark.asyncio
    async def test_malformed_body_returns_500(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Missing fields are unexpected errors, and secrets are not echoed."""
        response = await relay_client.post(
            "/generateUSDMTradeProof",
            json={"api_key": "k", "api_secret": "very-secret"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert "symbol" in response.text
        assert "very-secret" not in response.text
        assert stub_capability.call_count == 0


# =============================================================================
# Asset Proof
# =============================================================================


class TestAssetProof:
    """Tests for POST /generateAssetProof."""

    @pytest.mark.asyncio
    async def test_success(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Asset proofs target the spot account endpoint with the asset match."""
        response = await relay_client.post("/generateAssetProof", json=ASSET_BODY)

        assert response.status_code == status.HTTP_200_OK
        assert set(response.json()) == {"transformedProof", "proof"}

        request = stub_capability.requests[0]
        assert request.url.startswith("https://api.exchange.test/api/v3/account?timestamp=")
        assert '"asset":\\s*"USDT"' in request.response_matches[0].value
        assert "(?<amount>" in request.response_matches[0].value
        assert request.retries is None

    @pytest.mark.asyncio
    async def test_not_cached(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Balances change; every request is proven afresh."""
        await relay_client.post("/generateAssetProof", json=ASSET_BODY)
        await relay_client.post("/generateAssetProof", json=ASSET_BODY)

        assert stub_capability.call_count == 2

    @pytest.mark.asyncio
    async def test_invalid_proof(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Verification failures are 400."""
        stub_capability.valid = False

        response = await relay_client.post("/generateAssetProof", json=ASSET_BODY)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Proof is invalid"


# =============================================================================
# Debug Proxy
# =============================================================================


class TestDebugProxy:
    """Tests for POST /debugproxy."""

    @pytest.mark.asyncio
    async def test_success(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """The public IP page is attested without credentials or matches."""
        response = await relay_client.post("/debugproxy")

        assert response.status_code == status.HTTP_200_OK
        assert set(response.json()) == {"transformedProof", "proof"}

        request = stub_capability.requests[0]
        assert request.url == "https://browserleaks.com/ip"
        assert request.headers == {}
        assert request.response_matches == []

    @pytest.mark.asyncio
    async def test_no_proof(
        self,
        relay_client: AsyncClient,
        stub_capability: StubProvingCapability,
    ) -> None:
        """Generation failures are 400."""
        stub_capability.proof = None

        response = await relay_client.post("/debugproxy")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.text == "Failed to generate proof"


# =============================================================================
# Trades Page
# =============================================================================


class TestTradesPage:
    """Tests for GET /."""

    @pytest.mark.asyncio
    async def test_renders_trades(self, relay_client: AsyncClient) -> None:
        """Trades are rendered as HTML."""
        response = await relay_client.get("/", params={"symbol": "BTCUSDT"})

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/html")
        assert "BTCUSDT" in response.text
        assert "43000.10" in response.text


class TestTradesPageUpstreamFailure:
    """Tests for GET / when the exchange fails."""

    @pytest.fixture
    def exchange_handler(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"code": -1001, "msg": "Disconnected"})

        return handler

    @pytest.mark.asyncio
    async def test_server_time_failure_returns_500(self, relay_client: AsyncClient) -> None:
        """Upstream errors return 500 with the raw payload."""
        response = await relay_client.get("/", params={"symbol": "BTCUSDT"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": {"code": -1001, "msg": "Disconnected"}}


# =============================================================================
# Health
# =============================================================================


class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_healthy(self, relay_client: AsyncClient) -> None:
        """Cache and prover components are reported."""
        response = await relay_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "proof-relay"
        assert body["components"]["cache"] == {"status": "healthy", "backend": "memory"}
        assert body["components"]["prover"] == {"status": "healthy", "mode": "mock"}

    @pytest.mark.asyncio
    async def test_degraded_when_a_component_fails(
        self,
        relay_client: AsyncClient,
        memory_cache: InMemoryCacheStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """An unhealthy component degrades the overall status."""

        async def unhealthy() -> dict:
            return {"status": "unhealthy", "backend": "memory"}

        monkeypatch.setattr(memory_cache, "health_check", unhealthy)

        response = await relay_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "degraded"
