"""
Service Dependencies
====================

FastAPI dependency providers. Tests replace these through
``app.dependency_overrides``.
"""

from functools import lru_cache

from common.cache import CacheStore, get_cache_store
from common.config import settings
from common.exchange import ExchangeClient
from common.zk import ProofRequester, get_proof_requester


@lru_cache
def get_futures_client() -> ExchangeClient:
    """USD-M futures REST client."""
    return ExchangeClient(
        settings.exchange.futures_base_url,
        api_key_header=settings.exchange.api_key_header,
        recv_window=settings.exchange.recv_window,
        timeout_seconds=settings.exchange.timeout_seconds,
    )


@lru_cache
def get_spot_client() -> ExchangeClient:
    """Spot REST client."""
    return ExchangeClient(
        settings.exchange.spot_base_url,
        api_key_header=settings.exchange.api_key_header,
        recv_window=settings.exchange.recv_window,
        timeout_seconds=settings.exchange.timeout_seconds,
    )


def get_cache() -> CacheStore:
    """Proof cache store."""
    return get_cache_store()


def get_requester() -> ProofRequester:
    """Proof requester over the configured capability."""
    return get_proof_requester()
