"""
Trades Page Route
=================

Renders recent futures trades for the relay's own exchange account.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.templating import Jinja2Templates

from common.config import settings
from common.exchange import ExchangeClient, UpstreamUnavailableError
from common.logging import get_logger
from services.proof_relay.dependencies import get_futures_client


logger = get_logger(__name__)
router = APIRouter()

templates = Jinja2Templates(directory=Path(__file__).parent.parent / "templates")


@router.get("/")
async def list_trades(
    request: Request,
    symbol: str = Query(..., min_length=1, description="Trading pair, e.g. BTCUSDT"),
    exchange: ExchangeClient = Depends(get_futures_client),
) -> Response:
    """Recent trades for ``symbol`` as an HTML table."""
    try:
        trades = await exchange.user_trades(
            symbol,
            settings.exchange.api_key.get_secret_value(),
            settings.exchange.api_secret.get_secret_value(),
        )
    except UpstreamUnavailableError as e:
        logger.error("trades_fetch_failed", symbol=symbol, error=str(e), status=e.status_code)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": e.payload},
        )

    logger.info("trades_fetched", symbol=symbol, count=len(trades))
    return templates.TemplateResponse(
        request,
        "trades.html",
        {"trades": trades, "symbol": symbol},
    )
