"""
Relay Shared Library
====================

Common building blocks for the ZK trade proof relay.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - signing: HMAC request signing for the exchange REST API
    - exchange: Async exchange REST client
    - cache: Proof result cache stores (file, memory, Redis)
    - zk: Proving capability adapters and the proof requester
    - models: Shared Pydantic models

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Relay Team"

from common.config import settings
from common.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
