"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ProverMode(str, Enum):
    """Proving capability mode."""

    MOCK = "mock"
    REMOTE = "remote"


class CacheBackend(str, Enum):
    """Proof cache storage backend."""

    FILE = "file"
    MEMORY = "memory"
    REDIS = "redis"


class ExchangeSettings(BaseSettings):
    """Exchange REST API configuration."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    futures_base_url: str = "https://fapi.binance.com"
    spot_base_url: str = "https://api.binance.com"
    api_key_header: str = "X-MBX-APIKEY"
    recv_window: int = Field(default=60000, ge=0)
    timeout_seconds: float = 30.0

    # Account used by the trades listing page
    api_key: SecretStr = Field(default=SecretStr(""), alias="BINANCE_API_KEY")
    api_secret: SecretStr = Field(default=SecretStr(""), alias="BINANCE_API_SECRET")


class ProverSettings(BaseSettings):
    """Proving capability (zkFetch attestor) configuration."""

    model_config = SettingsConfigDict(env_prefix="PROVER_")

    mode: ProverMode = ProverMode.MOCK

    # Sidecar running the attestor SDK (remote mode)
    url: str = "http://localhost:8090"
    timeout_seconds: float = 120.0

    # Retry policy passed through to the attestor for trade proofs
    retries: int = Field(default=20, ge=0)
    retry_interval_ms: int = Field(default=2000, ge=0)

    # Public page attested by the debug endpoint
    debug_url: str = "https://browserleaks.com/ip"

    app_id: str = Field(default="", alias="APP_ID")
    app_secret: SecretStr = Field(default=SecretStr(""), alias="APP_SECRET")


class CacheSettings(BaseSettings):
    """Proof cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    backend: CacheBackend = CacheBackend.FILE
    directory: Path = Path("cache")

    # None keeps entries forever
    ttl_seconds: int | None = Field(default=None, ge=1)


class RedisSettings(BaseSettings):
    """Redis cache configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = "localhost"
    port: int = 6379
    password: SecretStr = SecretStr("")
    db: int = 0
    key_prefix: str = "proof-cache:"

    @property
    def url(self) -> str:
        """Generate Redis connection URL."""
        pwd = self.password.get_secret_value()
        auth = f":{pwd}@" if pwd else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "*"
    allow_credentials: bool = False

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = Field(default=8080, alias="PORT")

    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    prover: ProverSettings = Field(default_factory=ProverSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
