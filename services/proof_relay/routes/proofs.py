"""
Proof Generation Routes
=======================

API endpoints that sign an exchange request and have the attestor prove
its response.
"""

import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, Field, SecretStr

from common.cache import CacheStore, fingerprint
from common.config import settings
from common.exchange import ACCOUNT_PATH, USER_TRADES_PATH, ExchangeClient
from common.logging import get_logger
from common.zk import ProofFailure, ProofRequester, ResponseMatch
from services.proof_relay.dependencies import (
    get_cache,
    get_futures_client,
    get_requester,
    get_spot_client,
)


logger = get_logger(__name__)
router = APIRouter()

ORDER_ID_PATTERN = r'"orderId":\s*(?<orderId>[\d.]+)'

# Characters with syntax meaning in attestor (JavaScript) regexes
_REGEX_SYNTAX = re.compile(r"[\\^$.*+?()\[\]{}|/]")


def escape_literal(value: str) -> str:
    """Escape ``value`` for JavaScript regexes, including the ``u`` flag."""
    return _REGEX_SYNTAX.sub(r"\\\g<0>", value)


def asset_free_pattern(asset: str) -> str:
    """Regex capturing the free balance of ``asset`` in an account snapshot."""
    return rf'"asset":\s*"{escape_literal(asset)}",\s*"free":\s*"(?<amount>[\d.]+)"'


# ============================================================================
# Request Models
# ============================================================================


class TradeProofRequest(BaseModel):
    """Request to prove a futures order belongs to the caller."""

    api_key: SecretStr = Field(..., description="Exchange API key")
    api_secret: SecretStr = Field(..., description="Exchange API secret")
    symbol: str = Field(..., min_length=1, description="Trading pair, e.g. BTCUSDT")
    order_id: int | str = Field(..., description="Exchange order id")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "api_key": "<api key>",
                    "api_secret": "<api secret>",
                    "symbol": "BTCUSDT",
                    "order_id": 123,
                }
            ]
        }
    }


class AssetProofRequest(BaseModel):
    """Request to prove the free balance of a spot asset."""

    api_key: SecretStr = Field(..., description="Exchange API key")
    api_secret: SecretStr = Field(..., description="Exchange API secret")
    asset: str = Field(..., min_length=1, description="Asset code, e.g. USDT")


def _failure_response(result: ProofFailure) -> Response:
    return PlainTextResponse(result.error, status_code=result.http_status)


# ============================================================================
# Proof Endpoints
# ============================================================================


@router.post("/generateUSDMTradeProof")
async def generate_usdm_trade_proof(
    request: TradeProofRequest,
    cache: CacheStore = Depends(get_cache),
    requester: ProofRequester = Depends(get_requester),
    exchange: ExchangeClient = Depends(get_futures_client),
) -> Response:
    """
    Prove that order ``order_id`` on ``symbol`` belongs to the caller.

    Only the matched ``orderId`` is revealed by the proof. Successful
    results are cached by (api key, symbol, order id); an identical request
    is answered from the cache without contacting the attestor.
    """
    api_key = request.api_key.get_secret_value()
    key = fingerprint(api_key, request.symbol, request.order_id)

    try:
        cached = await cache.get(key)
        if cached is not None:
            logger.info("trade_proof_cache_hit", symbol=request.symbol, cached_at=cached.cached_at)
            return JSONResponse(cached.data)

        logger.info("generating_trade_proof", symbol=request.symbol, order_id=request.order_id)

        signed = exchange.sign(
            USER_TRADES_PATH,
            request.api_secret.get_secret_value(),
            {"symbol": request.symbol, "orderId": request.order_id},
        )
        result = await requester.request_proof(
            url=signed.url,
            headers={exchange.api_key_header: api_key},
            matches=[ResponseMatch(type="regex", value=ORDER_ID_PATTERN)],
            retries=settings.prover.retries,
            retry_interval_ms=settings.prover.retry_interval_ms,
        )

        if not result.success:
            logger.warning(
                "trade_proof_failed",
                symbol=request.symbol,
                kind=result.kind.value,
                error=result.error,
            )
            return _failure_response(result)

        data: dict[str, Any] = result.data
        await cache.put(key, data)
        return JSONResponse(data)

    except Exception as e:
        logger.error("trade_proof_unexpected_error", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e


@router.post("/generateAssetProof")
async def generate_asset_proof(
    request: AssetProofRequest,
    requester: ProofRequester = Depends(get_requester),
    exchange: ExchangeClient = Depends(get_spot_client),
) -> Response:
    """
    Prove the caller's free balance of ``asset``.

    Only the matched ``amount`` is revealed; the rest of the account
    snapshot stays private. Single attempt, not cached.
    """
    try:
        logger.info("generating_asset_proof", asset=request.asset)

        signed = exchange.sign(ACCOUNT_PATH, request.api_secret.get_secret_value())
        result = await requester.request_proof(
            url=signed.url,
            headers={exchange.api_key_header: request.api_key.get_secret_value()},
            matches=[ResponseMatch(type="regex", value=asset_free_pattern(request.asset))],
        )

        if not result.success:
            logger.warning("asset_proof_failed", asset=request.asset, kind=result.kind.value)
            return _failure_response(result)

        return JSONResponse(result.data)

    except Exception as e:
        logger.error("asset_proof_unexpected_error", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e


@router.post("/debugproxy")
async def debug_proxy(
    requester: ProofRequester = Depends(get_requester),
) -> Response:
    """
    Prove the relay's public IP via a third-party page.

    Exercises the attestor without exchange credentials.
    """
    try:
        result = await requester.request_proof_without_context(settings.prover.debug_url)

        if not result.success:
            logger.warning("debug_proof_failed", kind=result.kind.value, error=result.error)
            return _failure_response(result)

        return JSONResponse(result.data)

    except Exception as e:
        logger.error("debug_proof_unexpected_error", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
