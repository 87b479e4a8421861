"""
Shared Models
=============

Pydantic models shared across services.
"""

from common.models.common import HealthResponse

__all__ = ["HealthResponse"]
