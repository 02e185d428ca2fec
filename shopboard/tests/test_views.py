"""
Tests for the dashboard and trmnl projections.
"""
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from shopboard.app.schemas import ShopInfo
from shopboard.app.services.marketplace import DataSourceMode, normalize_order
from shopboard.app.services.stats import compute_stats
from shopboard.app.services.views import (
    to_dashboard_view,
    to_display_view,
    display_error_view,
    format_alert,
    format_clock,
    format_currency,
    format_relative_time,
)

UTC = ZoneInfo("UTC")
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
SHOP = ShopInfo(name="Test Shop", total_sales=1247, total_favorites=892)


# --- format_relative_time ---


def test_relative_time_minutes():
    assert format_relative_time(NOW - timedelta(minutes=5), now=NOW) == "5m ago"


def test_relative_time_rounds_down():
    assert format_relative_time(NOW - timedelta(minutes=5, seconds=59), now=NOW) == "5m ago"
    assert format_relative_time(NOW - timedelta(seconds=30), now=NOW) == "0m ago"


def test_relative_time_hours():
    assert format_relative_time(NOW - timedelta(minutes=90), now=NOW) == "1h ago"
    assert format_relative_time(NOW - timedelta(minutes=60), now=NOW) == "1h ago"
    assert format_relative_time(NOW - timedelta(hours=23, minutes=59), now=NOW) == "23h ago"


def test_relative_time_older_than_a_day_is_clock():
    moment = NOW - timedelta(hours=30)
    assert format_relative_time(moment, now=NOW, tz=UTC) == "06:00 AM"
    assert format_relative_time(moment, now=NOW, tz=UTC) == format_clock(moment, UTC)


@pytest.mark.parametrize("value", [None, "not a date", "", object()])
def test_relative_time_unparseable_is_unknown(value):
    assert format_relative_time(value, now=NOW) == "Unknown"


def test_relative_time_accepts_iso_and_epoch():
    iso = (NOW - timedelta(minutes=12)).isoformat()
    epoch = (NOW - timedelta(hours=3)).timestamp()
    assert format_relative_time(iso, now=NOW) == "12m ago"
    assert format_relative_time(epoch, now=NOW) == "3h ago"


# --- helpers ---


def test_format_currency():
    assert format_currency(Decimal("45.99")) == "$45.99"
    assert format_currency(Decimal("23.5")) == "$23.50"
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(Decimal("1.005")) == "$1.01"
    assert format_currency(Decimal("2890.45"), "€") == "€2890.45"


def test_alert_pluralization():
    assert format_alert(0) is None
    assert format_alert(1) == "🔔 1 NEW SALE TODAY!"
    assert format_alert(3) == "🔔 3 NEW SALES TODAY!"


# --- dashboard view ---


def test_dashboard_view_serialization(order_factory):
    orders = [order_factory(1, "45.99", items=["Mug"], time=NOW)]
    stats = compute_stats(orders, DataSourceMode.LIVE)
    data = to_dashboard_view(SHOP, orders, stats).model_dump(mode="json", by_alias=True)

    assert data["shop"] == {"shop_name": "Test Shop", "total_sales": 1247, "total_favorites": 892}
    assert data["todaysSales"][0]["amount"] == 45.99
    assert data["todaysSales"][0]["items"] == ["Mug"]
    assert data["stats"]["todayRevenue"] == 45.99
    assert data["stats"]["todaySalesCount"] == 1
    assert data["stats"]["monthlySalesCount"] == 15


# --- display view ---


def test_display_view_fields(order_factory):
    orders = [
        order_factory(1, "45.99", items=["Mug", "Stickers", "Card"], time=NOW - timedelta(hours=2)),
        order_factory(2, "23.5", items=["T-Shirt"], time=NOW - timedelta(minutes=7)),
    ]
    stats = compute_stats(orders, DataSourceMode.MOCK)
    view = to_display_view(SHOP, orders, stats, now=NOW, tz=UTC)

    assert view.shop_name == "Test Shop"
    assert view.alert == "🔔 2 NEW SALES TODAY!"
    assert view.today_revenue == "$69.49"
    assert view.today_sales == "2"
    assert view.monthly_revenue == "$2890.45"
    assert view.monthly_sales == "67"
    assert view.total_sales == "1247"
    assert view.total_favorites == "892"
    assert view.last_updated == "12:00 PM"
    assert view.status_message == "🎉 Great sales today!"
    assert view.has_sales is True

    assert view.sale1_amount == "$45.99"
    assert view.sale1_items == "Mug, Stickers"
    assert view.sale1_time == "2h ago"
    assert view.has_sale1 is True
    assert view.sale2_amount == "$23.50"
    assert view.sale2_items == "T-Shirt"
    assert view.sale2_time == "7m ago"
    assert view.has_sale2 is True


def test_display_view_always_has_five_slots(order_factory):
    orders = [order_factory(1)]
    view = to_display_view(SHOP, orders, compute_stats(orders, DataSourceMode.LIVE), now=NOW, tz=UTC)
    data = view.model_dump()

    for n in range(1, 6):
        assert f"sale{n}_amount" in data
        assert f"has_sale{n}" in data
    assert "sale6_amount" not in data
    for n in range(2, 6):
        assert data[f"sale{n}_amount"] == ""
        assert data[f"sale{n}_items"] == ""
        assert data[f"sale{n}_time"] == ""
        assert data[f"has_sale{n}"] is False


def test_display_view_truncates_to_first_five_in_order(order_factory):
    orders = [order_factory(i, f"{i}.00", time=NOW) for i in range(1, 8)]
    view = to_display_view(SHOP, orders, compute_stats(orders, DataSourceMode.LIVE), now=NOW, tz=UTC)

    assert [getattr(view, f"sale{n}_amount") for n in range(1, 6)] == [
        "$1.00", "$2.00", "$3.00", "$4.00", "$5.00",
    ]
    assert view.today_sales == "7"
    assert view.alert == "🔔 7 NEW SALES TODAY!"


def test_display_view_no_sales():
    view = to_display_view(SHOP, [], compute_stats([], DataSourceMode.LIVE), now=NOW, tz=UTC)
    assert view.alert is None
    assert view.has_sales is False
    assert view.today_revenue == "$0.00"
    assert view.status_message == "💪 Keep pushing!"
    assert view.has_sale1 is False


def test_display_view_single_sale_alert(order_factory):
    orders = [order_factory(1)]
    view = to_display_view(SHOP, orders, compute_stats(orders, DataSourceMode.LIVE), now=NOW, tz=UTC)
    assert view.alert == "🔔 1 NEW SALE TODAY!"


def test_display_view_unknown_sale_time(order_factory):
    order = order_factory(1)
    order.time = None
    view = to_display_view(SHOP, [order], compute_stats([order], DataSourceMode.LIVE), now=NOW, tz=UTC)
    assert view.sale1_time == "Unknown"


def test_display_error_view_shape():
    view = display_error_view(now=NOW, tz=UTC)
    assert view.today_revenue == "$0.00"
    assert view.monthly_revenue == "$0.00"
    assert view.today_sales == "0"
    assert view.alert is None
    assert view.has_sales is False
    assert view.status_message == "⚠️ Unable to load shop data"
    assert all(getattr(view, f"has_sale{n}") is False for n in range(1, 6))
    assert set(view.model_dump()) == set(
        to_display_view(SHOP, [], compute_stats([], DataSourceMode.LIVE), now=NOW, tz=UTC).model_dump()
    )


def test_display_view_absorbs_huge_upstream_total():
    """One absurd receipt total must not break the whole display."""
    orders = [
        normalize_order({"receipt_id": 1, "grandtotal": "1e30", "creation_timestamp": NOW.timestamp()}),
        normalize_order({"receipt_id": 2, "grandtotal": "12.50", "creation_timestamp": NOW.timestamp()}),
    ]
    stats = compute_stats(orders, DataSourceMode.LIVE)
    view = to_display_view(SHOP, orders, stats, now=NOW, tz=UTC)

    assert view.sale1_amount == "$0.00"
    assert view.sale2_amount == "$12.50"
    assert view.today_revenue == "$12.50"
    assert view.monthly_revenue == "$187.50"
