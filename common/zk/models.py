"""
Proof Data Models
=================

Pydantic models for proof requests and results.

Version: 0.1.0
"""

from enum import Enum
from typing import Any, Literal

from fastapi import status
from pydantic import BaseModel, ConfigDict, Field


class MatchType(str, Enum):
    """How a response match rule is applied to the fetched body."""

    REGEX = "regex"
    CONTAINS = "contains"


class ResponseMatch(BaseModel):
    """
    A rule the attestor checks against the fetched response.

    Regex rules use named capture groups; only the captured values are
    revealed in the proof.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    type: MatchType
    value: str


class ProofRequest(BaseModel):
    """A request to the proving capability."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: Literal["GET"] = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    response_matches: list[ResponseMatch] = Field(default_factory=list)

    # Passed through to the attestor; None means a single attempt
    retries: int | None = Field(default=None, ge=0)
    retry_interval_ms: int | None = Field(default=None, ge=0)


class ProofErrorKind(str, Enum):
    """Reason a proof could not be produced."""

    GENERATION_FAILED = "generation_failed"
    INVALID = "invalid"
    PROVER_ERROR = "prover_error"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    TRANSFORM_FAILED = "transform_failed"
    UNEXPECTED = "unexpected"

    @property
    def http_status(self) -> int:
        """Status code surfaced by the HTTP facade."""
        if self in (
            ProofErrorKind.GENERATION_FAILED,
            ProofErrorKind.INVALID,
            ProofErrorKind.PROVER_ERROR,
        ):
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_500_INTERNAL_SERVER_ERROR


class ProofSuccess(BaseModel):
    """A verified proof and its on-chain form."""

    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    transformed_proof: dict[str, Any]
    proof: dict[str, Any]

    @property
    def data(self) -> dict[str, Any]:
        """Response body: ``{"transformedProof": ..., "proof": ...}``."""
        return {"transformedProof": self.transformed_proof, "proof": self.proof}


class ProofFailure(BaseModel):
    """A failed proof attempt."""

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    kind: ProofErrorKind
    error: str

    @property
    def http_status(self) -> int:
        return self.kind.http_status


ProofResult = ProofSuccess | ProofFailure
