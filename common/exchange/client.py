"""
Exchange REST Client
====================

Async client for the signed endpoints of the exchange REST API.

Version: 0.1.0
"""

from typing import Any

import httpx

from common.logging import get_logger, redact_url
from common.signing import SignedRequest, sign_request

logger = get_logger(__name__)

SERVER_TIME_PATH = "/fapi/v1/time"
USER_TRADES_PATH = "/fapi/v1/userTrades"
ACCOUNT_PATH = "/api/v3/account"


class UpstreamUnavailableError(Exception):
    """The exchange (or another upstream page) failed or was unreachable."""

    def __init__(self, message: str, payload: Any = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.payload = payload if payload is not None else message
        self.status_code = status_code


class ExchangeClient:
    """
    Exchange REST client.

    Usage:
        client = ExchangeClient("https://fapi.binance.com")
        trades = await client.user_trades("BTCUSDT", api_key, api_secret)
    """

    def __init__(
        self,
        base_url: str,
        api_key_header: str = "X-MBX-APIKEY",
        recv_window: int = 60000,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Exchange host
            api_key_header: Header carrying the API key
            recv_window: recvWindow sent with signed requests
            timeout_seconds: Request timeout
            transport: Optional httpx transport (for testing)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key_header = api_key_header
        self.recv_window = recv_window
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _get(self, url: str, headers: dict[str, str] | None = None) -> Any:
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("exchange_unreachable", url=redact_url(url), error=str(e))
            raise UpstreamUnavailableError(f"Exchange unreachable: {type(e).__name__}") from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            logger.warning(
                "exchange_request_failed",
                url=redact_url(url),
                status=response.status_code,
            )
            raise UpstreamUnavailableError(
                f"Exchange returned HTTP {response.status_code}",
                payload=body,
                status_code=response.status_code,
            )
        return body

    async def server_time(self) -> int:
        """Exchange server time in epoch milliseconds."""
        body = await self._get(SERVER_TIME_PATH)
        try:
            return int(body["serverTime"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError("Malformed server time response", payload=body) from e

    async def signed_get(self, signed: SignedRequest, api_key: str) -> Any:
        """Send a signed GET request with the API-key header."""
        return await self._get(signed.url, headers={self.api_key_header: api_key})

    def sign(
        self,
        path: str,
        api_secret: str,
        params: dict[str, str | int] | None = None,
        timestamp: int | None = None,
    ) -> SignedRequest:
        """Sign a request for this client's host."""
        return sign_request(
            self.base_url,
            path,
            api_secret,
            params=params,
            recv_window=self.recv_window,
            timestamp=timestamp,
        )

    async def user_trades(self, symbol: str, api_key: str, api_secret: str) -> list[dict[str, Any]]:
        """
        Recent futures trades for ``symbol``.

        The request timestamp is taken from the exchange clock so local
        clock drift cannot push it outside ``recvWindow``.
        """
        timestamp = await self.server_time()
        signed = self.sign(USER_TRADES_PATH, api_secret, {"symbol": symbol}, timestamp=timestamp)
        trades = await self.signed_get(signed, api_key)
        if not isinstance(trades, list):
            raise UpstreamUnavailableError("Unexpected trades response", payload=trades)
        return trades
