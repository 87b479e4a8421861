"""
Test Configuration
==================

Pytest fixtures for proof relay tests.
"""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["PROVER_MODE"] = "mock"
os.environ["CACHE_BACKEND"] = "memory"

from common.cache import InMemoryCacheStore  # noqa: E402
from common.config import ProverMode  # noqa: E402
from common.exchange import ExchangeClient  # noqa: E402
from common.zk import ProofRequest, ProofRequester, ProvingCapability  # noqa: E402


SAMPLE_PROOF: dict[str, Any] = {
    "identifier": "0xabc",
    "claimData": {"provider": "http", "parameters": "{}", "context": "{}"},
    "signatures": ["0xsig"],
    "witnesses": [{"id": "attestor", "url": "wss://attestor.test"}],
}

SAMPLE_TRANSFORMED: dict[str, Any] = {
    "claimInfo": {"provider": "http", "parameters": "{}", "context": "{}"},
    "signedClaim": {"claim": {"identifier": "0xabc"}, "signatures": ["0xsig"]},
}


class StubProvingCapability(ProvingCapability):
    """Scriptable proving capability that records its calls."""

    def __init__(
        self,
        proof: dict[str, Any] | None = SAMPLE_PROOF,
        valid: bool = True,
        error: Exception | None = None,
        transform_error: Exception | None = None,
    ) -> None:
        self.proof = proof
        self.valid = valid
        self.error = error
        self.transform_error = transform_error
        self.requests: list[ProofRequest] = []
        self.verify_calls = 0
        self.transform_calls = 0

    @property
    def mode(self) -> ProverMode:
        return ProverMode.MOCK

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def fetch_and_prove(self, request: ProofRequest) -> dict[str, Any] | None:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.proof

    async def verify_signed_proof(self, proof: dict[str, Any]) -> bool:
        self.verify_calls += 1
        return self.valid

    async def transform_for_onchain(self, proof: dict[str, Any]) -> dict[str, Any]:
        self.transform_calls += 1
        if self.transform_error is not None:
            raise self.transform_error
        return SAMPLE_TRANSFORMED


@pytest.fixture
def stub_capability() -> StubProvingCapability:
    """A capability that returns a valid proof."""
    return StubProvingCapability()


@pytest.fixture
def memory_cache() -> InMemoryCacheStore:
    """Fresh in-memory cache store."""
    return InMemoryCacheStore()


@pytest.fixture
def exchange_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Default exchange stub: server time plus one trade."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/fapi/v1/time":
            return httpx.Response(200, json={"serverTime": 1700000000000})
        if request.url.path == "/fapi/v1/userTrades":
            return httpx.Response(
                200,
                json=[
                    {
                        "symbol": "BTCUSDT",
                        "id": 1,
                        "orderId": 123,
                        "side": "BUY",
                        "price": "43000.10",
                        "qty": "0.010",
                        "quoteQty": "430.001",
                        "realizedPnl": "0",
                        "commission": "0.17",
                        "commissionAsset": "USDT",
                        "time": 1700000000000,
                    }
                ],
            )
        return httpx.Response(404, json={"code": -1, "msg": "not found"})

    return handler


@pytest_asyncio.fixture
async def relay_client(
    stub_capability: StubProvingCapability,
    memory_cache: InMemoryCacheStore,
    exchange_handler: Callable[[httpx.Request], httpx.Response],
) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the proof relay with stubbed collaborators."""
    from services.proof_relay.dependencies import (
        get_cache,
        get_futures_client,
        get_requester,
        get_spot_client,
    )
    from services.proof_relay.main import app

    transport = httpx.MockTransport(exchange_handler)
    futures = ExchangeClient("https://fapi.exchange.test", transport=transport)
    spot = ExchangeClient("https://api.exchange.test", transport=transport)

    app.dependency_overrides[get_cache] = lambda: memory_cache
    app.dependency_overrides[get_requester] = lambda: ProofRequester(stub_capability)
    app.dependency_overrides[get_futures_client] = lambda: futures
    app.dependency_overrides[get_spot_client] = lambda: spot

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    await futures.close()
    await spot.close()
