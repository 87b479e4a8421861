"""
Mock Proving Capability
=======================

Local stand-in for the zkFetch attestor, for development and testing.

Fetches the target URL itself, applies response matches, and issues a claim
signed with an HMAC key instead of attestor signatures. The proof layout
follows the attestor's (``claimData``, ``identifier``, ``signatures``,
``witnesses``) so downstream consumers can be exercised end to end.

No zero-knowledge property is provided: do not use outside development.

Version: 0.1.0
"""

import asyncio
import hashlib
import hmac
import json
import re
import time
from typing import Any

import httpx

from common.config import ProverMode
from common.logging import get_logger, redact_url
from common.zk.models import MatchType, ProofRequest, ResponseMatch
from common.zk.prover import ProverError, ProvingCapability

logger = get_logger(__name__)

# JS-style named groups (?<name>...) -> Python (?P<name>...)
_JS_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")

MOCK_WITNESS = {"id": "mock-attestor", "url": "mock://attestor"}


def to_python_pattern(pattern: str) -> str:
    """Translate attestor (JavaScript) regex syntax to Python."""
    return _JS_NAMED_GROUP.sub("(?P<", pattern)


def apply_matches(body: str, matches: list[ResponseMatch]) -> dict[str, str]:
    """
    Check ``body`` against every match rule.

    Returns:
        Values of all named capture groups

    Raises:
        ProverError: If any rule does not match
    """
    extracted: dict[str, str] = {}
    for match in matches:
        if match.type == MatchType.CONTAINS:
            if match.value not in body:
                raise ProverError(f"Response does not contain {match.value!r}")
            continue

        found = re.search(to_python_pattern(match.value), body)
        if found is None:
            raise ProverError(f"Response does not match {match.value!r}")
        extracted.update({k: v for k, v in found.groupdict().items() if v is not None})
    return extracted


def claim_identifier(provider: str, parameters: str, context: str) -> str:
    """Hash identifying a claim."""
    digest = hashlib.sha256("\n".join([provider, parameters, context]).encode()).hexdigest()
    return f"0x{digest}"


class MockProvingCapability(ProvingCapability):
    """
    In-process mock attestor.

    Retries are honored the way the attestor honors them: the whole
    fetch-and-match is repeated up to ``retries`` times with
    ``retry_interval_ms`` between attempts.
    """

    def __init__(
        self,
        signing_key: str = "",
        owner: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """
        Initialize the mock.

        Args:
            signing_key: HMAC key for claim signatures
            owner: Owner recorded in claims (the application id)
            transport: Optional httpx transport (for testing)
            timeout_seconds: Fetch timeout
        """
        self._signing_key = (signing_key or "mock-attestor-key").encode()
        self.owner = owner or "0x0000000000000000000000000000000000000000"
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            follow_redirects=True,
        )
        self.request_count = 0

        logger.debug("mock_prover_initialized")

    @property
    def mode(self) -> ProverMode:
        return ProverMode.MOCK

    def _sign(self, identifier: str) -> str:
        return "0x" + hmac.new(self._signing_key, identifier.encode(), hashlib.sha256).hexdigest()

    async def _attempt(self, request: ProofRequest) -> dict[str, Any]:
        self.request_count += 1
        response = await self._client.request(request.method, request.url, headers=request.headers)
        if response.is_error:
            raise ProverError(f"Target returned HTTP {response.status_code}")

        extracted = apply_matches(response.text, list(request.response_matches))

        parameters = json.dumps(
            {
                "method": request.method,
                "url": request.url,
                "responseMatches": [m.model_dump() for m in request.response_matches],
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        context = json.dumps(
            {"extractedParameters": extracted},
            sort_keys=True,
            separators=(",", ":"),
        )
        identifier = claim_identifier("http", parameters, context)

        return {
            "identifier": identifier,
            "claimData": {
                "provider": "http",
                "parameters": parameters,
                "context": context,
                "owner": self.owner,
                "timestampS": int(time.time()),
                "epoch": 1,
                "identifier": identifier,
            },
            "signatures": [self._sign(identifier)],
            "witnesses": [MOCK_WITNESS],
            "extractedParameterValues": extracted,
        }

    async def fetch_and_prove(self, request: ProofRequest) -> dict[str, Any] | None:
        attempts = 1
        if request.retries is not None and request.retry_interval_ms is not None:
            attempts = max(request.retries, 1)

        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                return await self._attempt(request)
            except (ProverError, httpx.HTTPError) as e:
                last_error = e
                logger.warning(
                    "mock_prover_attempt_failed",
                    url=redact_url(request.url),
                    attempt=attempt + 1,
                    error=str(e),
                )
                if attempt + 1 < attempts:
                    await asyncio.sleep((request.retry_interval_ms or 0) / 1000)

        # An unreachable target surfaces as-is so it reads as upstream unavailable
        if isinstance(last_error, (ProverError, httpx.TransportError)):
            raise last_error
        raise ProverError(f"Failed to fetch target: {last_error}")

    async def verify_signed_proof(self, proof: dict[str, Any]) -> bool:
        claim = proof.get("claimData")
        signatures = proof.get("signatures") or []
        if not isinstance(claim, dict) or not signatures:
            return False

        try:
            identifier = claim_identifier(
                claim["provider"],
                claim["parameters"],
                claim["context"],
            )
        except (KeyError, TypeError):
            return False

        if identifier != proof.get("identifier") or identifier != claim.get("identifier"):
            return False
        return all(
            isinstance(sig, str) and hmac.compare_digest(sig, self._sign(identifier))
            for sig in signatures
        )

    async def transform_for_onchain(self, proof: dict[str, Any]) -> dict[str, Any]:
        claim = proof["claimData"]
        return {
            "claimInfo": {
                "provider": claim["provider"],
                "parameters": claim["parameters"],
                "context": claim["context"],
            },
            "signedClaim": {
                "claim": {
                    "identifier": proof["identifier"],
                    "owner": claim["owner"],
                    "timestampS": claim["timestampS"],
                    "epoch": claim["epoch"],
                },
                "signatures": list(proof["signatures"]),
            },
        }

    async def close(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "mode": self.mode.value,
            "requests": self.request_count,
        }
