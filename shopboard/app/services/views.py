"""
Output projections of the dashboard data.

to_dashboard_view() keeps the nested shape for the browser dashboard.
to_display_view() flattens everything into pre-formatted strings for the
trmnl e-ink display, which has no templating or loops.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence, Dict, Any, Union

from shopboard.app.core.constants import (
    ZERO,
    ONE_CENT,
    DISPLAY_SALE_SLOTS,
    DISPLAY_ITEMS_PER_SALE,
    DISPLAY_TITLE,
    DISPLAY_FALLBACK_SHOP_NAME,
    STATUS_GOOD_DAY,
    STATUS_NO_SALES,
    STATUS_ERROR,
    CLOCK_FORMAT,
)
from shopboard.app.schemas import ShopInfo, NormalizedOrder, Stats, DashboardView, DisplayView

TimeValue = Union[datetime, str, int, float, None]


def to_dashboard_view(shop: ShopInfo, orders: Sequence[NormalizedOrder], stats: Stats) -> DashboardView:
    return DashboardView(shop=shop, todays_sales=list(orders), stats=stats)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Decimal(45.99) -> "$45.99" (two places, rounded half-up)."""
    quantized = Decimal(amount).quantize(ONE_CENT, rounding=ROUND_HALF_UP)
    return f"{symbol}{quantized:f}"


def format_clock(moment: datetime, tz=None) -> str:
    """Hour:minute in the display zone (server local zone when tz is None)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(tz) if tz is not None else moment.astimezone()
    return local.strftime(CLOCK_FORMAT)


def _coerce_time(value: TimeValue) -> Optional[datetime]:
    """datetime, ISO-8601 string or epoch seconds -> aware datetime."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_relative_time(value: TimeValue, now: Optional[datetime] = None, tz=None) -> str:
    """
    Age of a sale for the display.

    Under an hour -> "5m ago", under a day -> "3h ago", older -> clock time.
    Unparseable input -> "Unknown".
    """
    moment = _coerce_time(value)
    if moment is None:
        return "Unknown"
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    diff = now - moment
    diff_minutes = diff // timedelta(minutes=1)
    diff_hours = diff // timedelta(hours=1)

    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    return format_clock(moment, tz)


def format_alert(sales_count: int) -> Optional[str]:
    if sales_count == 0:
        return None
    suffix = "S" if sales_count > 1 else ""
    return f"🔔 {sales_count} NEW SALE{suffix} TODAY!"


def _empty_slots() -> Dict[str, Any]:
    slots: Dict[str, Any] = {}
    for n in range(1, DISPLAY_SALE_SLOTS + 1):
        slots[f"sale{n}_amount"] = ""
        slots[f"sale{n}_items"] = ""
        slots[f"sale{n}_time"] = ""
        slots[f"has_sale{n}"] = False
    return slots


# ---------------------------------------------------------------------------
# trmnl display
# ---------------------------------------------------------------------------

def to_display_view(
    shop: ShopInfo,
    orders: Sequence[NormalizedOrder],
    stats: Stats,
    now: Optional[datetime] = None,
    tz=None,
    currency_symbol: str = "$",
) -> DisplayView:
    if now is None:
        now = datetime.now(timezone.utc)

    slots = _empty_slots()
    # First five as received, no re-sorting.
    for n, order in enumerate(orders[:DISPLAY_SALE_SLOTS], start=1):
        slots[f"sale{n}_amount"] = format_currency(order.amount, currency_symbol)
        slots[f"sale{n}_items"] = ", ".join(order.items[:DISPLAY_ITEMS_PER_SALE])
        slots[f"sale{n}_time"] = format_relative_time(order.time, now=now, tz=tz)
        slots[f"has_sale{n}"] = True

    count = stats.today_sales_count
    return DisplayView(
        title=DISPLAY_TITLE,
        shop_name=shop.name,
        alert=format_alert(count),
        today_revenue=format_currency(stats.today_revenue, currency_symbol),
        today_sales=str(count),
        monthly_revenue=format_currency(stats.monthly_revenue, currency_symbol),
        monthly_sales=str(stats.monthly_sales_count),
        total_sales=str(shop.total_sales),
        total_favorites=str(shop.total_favorites),
        last_updated=format_clock(now, tz),
        status_message=STATUS_GOOD_DAY if count > 0 else STATUS_NO_SALES,
        has_sales=len(orders) > 0,
        **slots,
    )


def display_error_view(
    now: Optional[datetime] = None,
    tz=None,
    currency_symbol: str = "$",
) -> DisplayView:
    """Display-shaped payload with zeroed stats, shown when data could not be loaded."""
    if now is None:
        now = datetime.now(timezone.utc)
    zero_money = format_currency(ZERO, currency_symbol)
    return DisplayView(
        title=DISPLAY_TITLE,
        shop_name=DISPLAY_FALLBACK_SHOP_NAME,
        alert=None,
        today_revenue=zero_money,
        today_sales="0",
        monthly_revenue=zero_money,
        monthly_sales="0",
        total_sales="0",
        total_favorites="0",
        last_updated=format_clock(now, tz),
        status_message=STATUS_ERROR,
        has_sales=False,
        **_empty_slots(),
    )
