"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from common.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context; credential fields are censored
    logger.info("trade_proof_requested", symbol="BTCUSDT", api_key="...")
"""

from common.logging.logger import (
    get_logger,
    redact_url,
    setup_logging,
)


__all__ = [
    "get_logger",
    "redact_url",
    "setup_logging",
]
