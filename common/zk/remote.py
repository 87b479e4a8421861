"""
Remote Proving Capability
=========================

Adapter for an attestor sidecar that wraps the zkFetch SDK and exposes it
over HTTP:

    POST /zkfetch    {url, publicOptions, privateOptions, retries?, retryInterval?}
                     -> {"proof": {...} | null}
    POST /verify     {proof} -> {"valid": bool}
    POST /transform  {proof} -> {"transformedProof": {...}}

The sidecar holds the attestor application credentials. Exchange headers
travel in ``privateOptions`` and are never part of the attested claim.

Version: 0.1.0
"""

from typing import Any

import httpx

from common.config import ProverMode
from common.logging import get_logger, redact_url
from common.zk.models import ProofRequest
from common.zk.prover import ProverError, ProvingCapability

logger = get_logger(__name__)


class RemoteProvingCapability(ProvingCapability):
    """HTTP client for the attestor sidecar."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            base_url: Sidecar base URL
            timeout_seconds: Read timeout; proof generation with retries is slow
            transport: Optional httpx transport (for testing)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            transport=transport,
        )

    @property
    def mode(self) -> ProverMode:
        return ProverMode.REMOTE

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(path, json=payload)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            raise ProverError(message or f"Attestor returned HTTP {response.status_code}")

        if not isinstance(body, dict):
            raise ProverError("Attestor returned a malformed response")
        return body

    async def fetch_and_prove(self, request: ProofRequest) -> dict[str, Any] | None:
        payload: dict[str, Any] = {
            "url": request.url,
            "publicOptions": {"method": request.method},
            "privateOptions": {"headers": request.headers},
        }
        if request.response_matches:
            payload["privateOptions"]["responseMatches"] = [
                m.model_dump() for m in request.response_matches
            ]
        if request.retries is not None and request.retry_interval_ms is not None:
            payload["retries"] = request.retries
            payload["retryInterval"] = request.retry_interval_ms

        logger.debug(
            "attestor_fetch_started",
            url=redact_url(request.url),
            matches=len(request.response_matches),
            retries=request.retries,
        )
        body = await self._post("/zkfetch", payload)
        return body.get("proof")

    async def verify_signed_proof(self, proof: dict[str, Any]) -> bool:
        body = await self._post("/verify", {"proof": proof})
        return bool(body.get("valid"))

    async def transform_for_onchain(self, proof: dict[str, Any]) -> dict[str, Any]:
        body = await self._post("/transform", {"proof": proof})
        transformed = body.get("transformedProof")
        if not isinstance(transformed, dict):
            raise ValueError("Attestor returned no transformed proof")
        return transformed

    async def close(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> dict[str, Any]:
        try:
            response = await self._client.get("/health")
            healthy = response.is_success
        except httpx.HTTPError as e:
            logger.error("attestor_health_check_failed", error=str(e))
            return {"status": "unhealthy", "mode": self.mode.value, "error": str(e)}
        return {"status": "healthy" if healthy else "unhealthy", "mode": self.mode.value}
