"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from common.config import settings

    print(settings.environment)
    print(settings.exchange.futures_base_url)
"""

from common.config.settings import (
    CacheBackend,
    Environment,
    LogLevel,
    ProverMode,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "ProverMode",
    "CacheBackend",
]
