"""
Dashboard statistics derived from today's orders.
"""
from typing import Sequence

from shopboard.app.core.constants import (
    ZERO,
    MOCK_MONTHLY_REVENUE,
    MOCK_MONTHLY_SALES_COUNT,
    MONTHLY_EXTRAPOLATION_FACTOR,
)
from shopboard.app.schemas import NormalizedOrder, Stats
from shopboard.app.services.marketplace import DataSourceMode


def compute_stats(orders: Sequence[NormalizedOrder], mode: DataSourceMode) -> Stats:
    """
    Today's revenue and count, plus monthly figures.

    Orders are expected to be today's already (the live source filters by
    creation time, the mock fixture is always "today"). Monthly figures are
    canned in mock mode and a x15 extrapolation of today in live mode.
    """
    today_revenue = sum((o.amount for o in orders), ZERO)
    today_sales_count = len(orders)

    if mode == DataSourceMode.MOCK:
        monthly_revenue = MOCK_MONTHLY_REVENUE
        monthly_sales_count = MOCK_MONTHLY_SALES_COUNT
    else:
        monthly_revenue = today_revenue * MONTHLY_EXTRAPOLATION_FACTOR
        monthly_sales_count = today_sales_count * MONTHLY_EXTRAPOLATION_FACTOR

    return Stats(
        today_revenue=today_revenue,
        today_sales_count=today_sales_count,
        monthly_revenue=monthly_revenue,
        monthly_sales_count=monthly_sales_count,
    )
