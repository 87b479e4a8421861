"""
ZK Proof Module
===============

Relay-side contract with the zkFetch attestor.

Usage:
    from common.zk import ResponseMatch, get_proof_requester

    requester = get_proof_requester()
    result = await requester.request_proof(
        url="https://fapi.binance.com/fapi/v1/userTrades?...",
        headers={"X-MBX-APIKEY": api_key},
        matches=[ResponseMatch(type="regex", value='"orderId":\\s*(?<orderId>[\\d.]+)')],
        retries=20,
        retry_interval_ms=2000,
    )

    if result.success:
        body = result.data  # {"transformedProof": ..., "proof": ...}

Version: 0.1.0
"""

from common.zk.models import (
    MatchType,
    ProofErrorKind,
    ProofFailure,
    ProofRequest,
    ProofResult,
    ProofSuccess,
    ResponseMatch,
)
from common.zk.prover import (
    ProverError,
    ProvingCapability,
    get_proving_capability,
    reset_proving_capability,
    set_proving_capability,
)
from common.zk.requester import ProofRequester, get_proof_requester


__all__ = [
    # Capability
    "ProvingCapability",
    "ProverError",
    "get_proving_capability",
    "set_proving_capability",
    "reset_proving_capability",
    # Requester
    "ProofRequester",
    "get_proof_requester",
    # Models
    "MatchType",
    "ResponseMatch",
    "ProofRequest",
    "ProofResult",
    "ProofSuccess",
    "ProofFailure",
    "ProofErrorKind",
]
