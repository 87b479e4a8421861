"""
Exchange Module
===============

Signed REST access to the exchange (Binance-style HMAC authentication).
"""

from common.exchange.client import (
    ACCOUNT_PATH,
    SERVER_TIME_PATH,
    USER_TRADES_PATH,
    ExchangeClient,
    UpstreamUnavailableError,
)

__all__ = [
    "ExchangeClient",
    "UpstreamUnavailableError",
    "ACCOUNT_PATH",
    "SERVER_TIME_PATH",
    "USER_TRADES_PATH",
]
