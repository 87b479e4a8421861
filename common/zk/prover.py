"""
Proving Capability Interface
============================

The zkFetch attestor is an external collaborator: it fetches a URL on our
behalf, attests the response (or the fragments selected by response
matches) and signs the claim. This module defines the contract the relay
depends on and selects the configured adapter.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from typing import Any

from common.config import ProverMode, settings
from common.logging import get_logger
from common.zk.models import ProofRequest

logger = get_logger(__name__)


class ProverError(Exception):
    """The proving capability reported a failure."""


class ProvingCapability(ABC):
    """
    Abstract base class for proving capabilities.

    Implements the Strategy pattern for different prover modes. Retry and
    backoff are owned by the capability; callers pass the parameters in
    the ProofRequest.
    """

    @property
    @abstractmethod
    def mode(self) -> ProverMode:
        """Get the prover mode."""
        ...

    @abstractmethod
    async def fetch_and_prove(self, request: ProofRequest) -> dict[str, Any] | None:
        """
        Fetch ``request.url`` through the attestor and return the signed proof.

        Returns:
            The proof, or None if the attestor produced nothing

        Raises:
            ProverError: If the attestor rejected the request
            httpx.TransportError: If the attestor could not be reached
        """
        ...

    @abstractmethod
    async def verify_signed_proof(self, proof: dict[str, Any]) -> bool:
        """Check the attestor signatures on ``proof``."""
        ...

    @abstractmethod
    async def transform_for_onchain(self, proof: dict[str, Any]) -> dict[str, Any]:
        """Re-encode ``proof`` for an on-chain verifier contract."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None

    async def health_check(self) -> dict[str, Any]:
        """Report capability health."""
        return {"status": "healthy", "mode": self.mode.value}


# Global capability instance
_capability: ProvingCapability | None = None


def get_proving_capability() -> ProvingCapability:
    """
    Get the proving capability for the configured mode.

    Returns:
        ProvingCapability instance (created on first use)
    """
    global _capability

    if _capability is None:
        mode = settings.prover.mode

        if mode == ProverMode.MOCK:
            from common.zk.mock import MockProvingCapability

            _capability = MockProvingCapability(
                signing_key=settings.prover.app_secret.get_secret_value(),
                owner=settings.prover.app_id,
            )
        elif mode == ProverMode.REMOTE:
            from common.zk.remote import RemoteProvingCapability

            _capability = RemoteProvingCapability(
                base_url=settings.prover.url,
                timeout_seconds=settings.prover.timeout_seconds,
            )
        else:
            raise ValueError(f"Unknown prover mode: {mode}")

        logger.info("proving_capability_initialized", mode=mode.value)

    return _capability


def set_proving_capability(capability: ProvingCapability) -> None:
    """
    Set a custom proving capability.

    Args:
        capability: ProvingCapability instance
    """
    global _capability
    _capability = capability
    logger.info("proving_capability_set", mode=capability.mode.value)


def reset_proving_capability() -> None:
    """Reset the capability to be re-initialized."""
    global _capability
    _capability = None
