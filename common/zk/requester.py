"""
Proof Requester
===============

Orchestrates a proof: fetch-and-prove through the capability, independent
signature verification, and transformation for on-chain consumption.

Every outcome is returned as a ProofResult; nothing raises to the caller.

Version: 0.1.0
"""

import time
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from common.logging import get_logger, redact_url
from common.zk.models import (
    ProofErrorKind,
    ProofFailure,
    ProofRequest,
    ProofResult,
    ProofSuccess,
    ResponseMatch,
)
from common.zk.prover import ProverError, ProvingCapability

logger = get_logger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate proof"
INVALID_PROOF_MESSAGE = "Proof is invalid"


class ProofRequester:
    """
    Proof orchestration over a ProvingCapability.

    Usage:
        requester = ProofRequester(get_proving_capability())

        result = await requester.request_proof(
            url=signed.url,
            headers={"X-MBX-APIKEY": api_key},
            matches=[ResponseMatch(type="regex", value=pattern)],
            retries=20,
            retry_interval_ms=2000,
        )
        if result.success:
            return result.data
    """

    def __init__(self, capability: ProvingCapability) -> None:
        self.capability = capability

    async def request_proof(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        matches: Sequence[ResponseMatch] | None = None,
        retries: int | None = None,
        retry_interval_ms: int | None = None,
    ) -> ProofResult:
        """
        Generate, verify and transform a proof of ``url``'s response.

        Args:
            url: Target URL (already signed where required)
            headers: Private request headers (never attested)
            matches: Response match rules; only matched fields are revealed
            retries: Attempts the attestor may make
            retry_interval_ms: Delay between attempts

        Both retry parameters must be given for retries to apply; otherwise a
        single attempt is made.
        """
        if retries is None or retry_interval_ms is None:
            retries = retry_interval_ms = None

        request = ProofRequest(
            url=url,
            headers=dict(headers or {}),
            response_matches=list(matches or []),
            retries=retries,
            retry_interval_ms=retry_interval_ms,
        )
        return await self._prove(request)

    async def request_proof_without_context(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> ProofResult:
        """Attest the full response of ``url`` with a single attempt and no matches."""
        return await self._prove(ProofRequest(url=url, headers=dict(headers or {})))

    async def _prove(self, request: ProofRequest) -> ProofResult:
        log = logger.bind(url=redact_url(request.url), matches=len(request.response_matches))
        start_time = time.perf_counter()

        try:
            proof = await self.capability.fetch_and_prove(request)
            if proof is None:
                log.warning("proof_generation_failed")
                return ProofFailure(
                    kind=ProofErrorKind.GENERATION_FAILED,
                    error=GENERATION_FAILED_MESSAGE,
                )

            if not await self.capability.verify_signed_proof(proof):
                log.warning("proof_invalid")
                return ProofFailure(kind=ProofErrorKind.INVALID, error=INVALID_PROOF_MESSAGE)

        except ProverError as e:
            log.warning("prover_error", error=str(e))
            return ProofFailure(kind=ProofErrorKind.PROVER_ERROR, error=str(e))
        except httpx.TransportError as e:
            log.error("prover_unreachable", error=str(e), error_type=type(e).__name__)
            return ProofFailure(kind=ProofErrorKind.UPSTREAM_UNAVAILABLE, error=str(e))
        except Exception as e:
            log.error("proof_request_failed", error=str(e), error_type=type(e).__name__)
            return ProofFailure(kind=ProofErrorKind.UNEXPECTED, error=str(e))

        try:
            transformed: dict[str, Any] = await self.capability.transform_for_onchain(proof)
        except Exception as e:
            log.error("proof_transform_failed", error=str(e), error_type=type(e).__name__)
            return ProofFailure(kind=ProofErrorKind.TRANSFORM_FAILED, error=str(e))

        log.info(
            "proof_generated",
            elapsed_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return ProofSuccess(transformed_proof=transformed, proof=proof)


def get_proof_requester() -> ProofRequester:
    """Create a requester over the configured proving capability."""
    from common.zk.prover import get_proving_capability

    return ProofRequester(get_proving_capability())
