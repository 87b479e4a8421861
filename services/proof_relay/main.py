"""
Proof Relay Service - Main Application
======================================

FastAPI application relaying exchange requests to the zkFetch attestor.

Version: 0.1.0
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from common.cache import CacheStore, get_cache_store
from common.config import settings
from common.logging import get_logger, setup_logging
from common.models.common import HealthResponse
from common.zk import ProofRequester, get_proving_capability
from services.proof_relay.dependencies import (
    get_cache,
    get_futures_client,
    get_requester,
    get_spot_client,
)
from services.proof_relay.routes import proofs, trades


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="proof-relay",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "proof_relay_starting",
        environment=settings.environment.value,
        port=settings.port,
        prover_mode=settings.prover.mode.value,
        cache_backend=settings.cache.backend.value,
    )

    # Startup: creates the cache directory for the file backend
    try:
        get_cache_store()
        get_proving_capability()
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("proof_relay_shutting_down")
    await get_proving_capability().close()
    await get_futures_client().close()
    await get_spot_client().close()
    store = get_cache_store()
    close = getattr(store, "close", None)
    if close is not None:
        await close()


# Create FastAPI application
app = FastAPI(
    title="ZK Trade Proof Relay",
    description="Signed exchange requests proven through a zkFetch attestor",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(
    cache: CacheStore = Depends(get_cache),
    requester: ProofRequester = Depends(get_requester),
) -> HealthResponse:
    """
    Service health check.

    Returns health status of the cache store and the proving capability.
    """
    components: dict[str, dict[str, Any]] = {
        "cache": await cache.health_check(),
        "prover": await requester.capability.health_check(),
    }

    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service="proof-relay",
        version="0.1.0",
        components=components,
    )


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(trades.router, tags=["Trades"])
app.include_router(proofs.router, tags=["ZK Proofs"])


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> PlainTextResponse:
    """Handle HTTP exceptions with a plain-text reason."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> PlainTextResponse:
    """Malformed input is reported as an unexpected failure."""
    errors = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    logger.warning("request_validation_failed", path=request.url.path, errors=errors)
    return PlainTextResponse(
        "; ".join(errors),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return PlainTextResponse(
        str(exc),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.proof_relay.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
