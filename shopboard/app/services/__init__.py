# shopboard/app/services/__init__.py
"""
Services layer for business logic.
Keeps API endpoints thin and the data pipeline testable and reusable.
"""

from shopboard.app.services.marketplace import (
    DataSourceMode,
    MarketplaceError,
    UpstreamHttpError,
    NetworkFailure,
    MockDataSource,
    LiveDataSource,
    build_data_source,
    normalize_order,
    normalize_shop,
)
from shopboard.app.services.stats import compute_stats
from shopboard.app.services.views import (
    to_dashboard_view,
    to_display_view,
    display_error_view,
    format_relative_time,
    format_currency,
)

__all__ = [
    # Data sources
    "DataSourceMode",
    "MarketplaceError",
    "UpstreamHttpError",
    "NetworkFailure",
    "MockDataSource",
    "LiveDataSource",
    "build_data_source",
    "normalize_order",
    "normalize_shop",
    # Stats
    "compute_stats",
    # Views
    "to_dashboard_view",
    "to_display_view",
    "display_error_view",
    "format_relative_time",
    "format_currency",
]
