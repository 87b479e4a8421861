"""
Request Signing
===============

HMAC-SHA256 signing for the exchange REST API.

The exchange authenticates a request by a keyed hash over the exact query
string, appended as a trailing ``signature`` parameter. Parameter order is
fixed: ``timestamp`` first, then the endpoint fields, then ``recvWindow``.

Version: 0.1.0
"""

import hashlib
import hmac
import time
from collections.abc import Mapping
from dataclasses import dataclass, field


def sign(query_string: str, secret: str) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 of ``query_string``.

    An empty secret is accepted; the resulting signature is simply rejected
    upstream.
    """
    return hmac.new(
        secret.encode("utf-8"),
        query_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def build_query_string(params: Mapping[str, str]) -> str:
    """Serialize ``params`` as ``k=v`` pairs joined by ``&`` in insertion order."""
    return "&".join(f"{key}={value}" for key, value in params.items())


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SignedRequest:
    """A fully signed exchange request."""

    base_url: str
    path: str
    query_params: dict[str, str] = field(default_factory=dict)
    signature: str = ""

    @property
    def query_string(self) -> str:
        """The exact string the signature was computed over."""
        return build_query_string(self.query_params)

    @property
    def url(self) -> str:
        """Absolute URL including the trailing signature parameter."""
        return f"{self.base_url}{self.path}?{self.query_string}&signature={self.signature}"


def sign_request(
    base_url: str,
    path: str,
    secret: str,
    params: Mapping[str, str | int] | None = None,
    recv_window: int = 60000,
    timestamp: int | None = None,
) -> SignedRequest:
    """
    Build and sign an exchange request.

    Args:
        base_url: Exchange host, e.g. ``https://fapi.binance.com``
        path: Endpoint path, e.g. ``/fapi/v1/userTrades``
        secret: Caller's API secret
        params: Endpoint-specific fields, in the order they must be sent
        recv_window: Validity window in milliseconds
        timestamp: Request time in epoch milliseconds (defaults to now)

    Returns:
        SignedRequest whose signature covers ``query_string``
    """
    query_params: dict[str, str] = {
        "timestamp": str(timestamp if timestamp is not None else now_ms()),
    }
    for key, value in (params or {}).items():
        query_params[key] = str(value)
    query_params["recvWindow"] = str(recv_window)

    query_string = build_query_string(query_params)
    return SignedRequest(
        base_url=base_url,
        path=path,
        query_params=query_params,
        signature=sign(query_string, secret),
    )
