"""
Dashboard endpoints.
- /api/etsy-data: nested payload for the browser dashboard
- /trmnl: flat, pre-formatted payload for the trmnl e-ink display
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shopboard.app.api.deps import DataSource, get_data_source, get_app_settings
from shopboard.app.core.logging import get_logger
from shopboard.app.core.metrics import dashboard_builds_total
from shopboard.app.core.settings import Settings
from shopboard.app.schemas import DashboardView, DisplayView, ErrorResponse
from shopboard.app.services.marketplace import MarketplaceError
from shopboard.app.services.stats import compute_stats
from shopboard.app.services.views import to_dashboard_view, to_display_view, display_error_view

router = APIRouter()
logger = get_logger(__name__)


@router.get("/api/etsy-data", response_model=DashboardView, responses={500: {"model": ErrorResponse}})
async def get_etsy_data(source: DataSource = Depends(get_data_source)):
    """Shop info, today's sales and stats for the browser dashboard."""
    logger.info("API endpoint called", mode=source.mode.value)
    try:
        shop, orders = await source.fetch_shop_and_orders()
    except MarketplaceError as e:
        logger.error("Error in API endpoint", mode=source.mode.value, error=e.message)
        return _dashboard_error(source, e.message)
    except Exception as e:
        logger.exception("Unexpected error in API endpoint", mode=source.mode.value)
        return _dashboard_error(source, str(e))

    stats = compute_stats(orders, source.mode)
    dashboard_builds_total.labels(view="dashboard", mode=source.mode.value, outcome="ok").inc()
    logger.info("Sending dashboard response", mode=source.mode.value, sales=stats.today_sales_count)
    return to_dashboard_view(shop, orders, stats)


def _dashboard_error(source: DataSource, message: str) -> JSONResponse:
    dashboard_builds_total.labels(view="dashboard", mode=source.mode.value, outcome="error").inc()
    body = ErrorResponse(
        error="Failed to fetch Etsy data",
        message=message,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


@router.get("/trmnl", response_model=DisplayView)
async def get_trmnl(
    source: DataSource = Depends(get_data_source),
    settings: Settings = Depends(get_app_settings),
):
    """
    Flat payload for the trmnl display.

    On failure the display still gets its usual shape (zeroed stats and an
    error status message) with a 500 status.
    """
    logger.info("trmnl endpoint called", mode=source.mode.value)
    tz = settings.display_tz
    try:
        shop, orders = await source.fetch_shop_and_orders()
    except MarketplaceError as e:
        logger.error("Error in trmnl endpoint", mode=source.mode.value, error=e.message)
        return _trmnl_error(source, settings)
    except Exception:
        logger.exception("Unexpected error in trmnl endpoint", mode=source.mode.value)
        return _trmnl_error(source, settings)

    stats = compute_stats(orders, source.mode)
    dashboard_builds_total.labels(view="trmnl", mode=source.mode.value, outcome="ok").inc()
    return to_display_view(
        shop,
        orders,
        stats,
        tz=tz,
        currency_symbol=settings.CURRENCY_SYMBOL,
    )


def _trmnl_error(source: DataSource, settings: Settings) -> JSONResponse:
    dashboard_builds_total.labels(view="trmnl", mode=source.mode.value, outcome="error").inc()
    view = display_error_view(tz=settings.display_tz, currency_symbol=settings.CURRENCY_SYMBOL)
    return JSONResponse(status_code=500, content=view.model_dump(mode="json"))
