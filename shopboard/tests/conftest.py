"""
Test fixtures for shopboard tests.

Provides:
- Async test client bound to the ASGI app
- Fake data sources injected through the get_data_source dependency
- httpx.MockTransport helpers for the live Etsy source
"""
# IMPORTANT: Set environment variables BEFORE any other imports
import os

# Mock mode by default; live behaviour is injected per test
os.environ.pop("ETSY_API_KEY", None)
os.environ.pop("ETSY_SHOP_ID", None)
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Callable, List, Optional

import httpx
from httpx import AsyncClient, ASGITransport

from shopboard.app.main import app
from shopboard.app.api.deps import get_data_source
from shopboard.app.schemas import ShopInfo, NormalizedOrder
from shopboard.app.services.marketplace import DataSourceMode, MockDataSource, LiveDataSource


class FakeDataSource:
    """Data source returning canned values (or raising) without any I/O."""

    def __init__(
        self,
        mode: DataSourceMode = DataSourceMode.LIVE,
        shop: Optional[ShopInfo] = None,
        orders: Optional[List[NormalizedOrder]] = None,
        error: Optional[Exception] = None,
    ):
        self.mode = mode
        self.shop = shop or ShopInfo(name="Test Shop", total_sales=10, total_favorites=5)
        self.orders = orders if orders is not None else []
        self.error = error
        self.calls = 0

    async def fetch_shop_and_orders(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.shop, list(self.orders)


def make_order(
    order_id: int = 1,
    amount: str = "10.00",
    items: Optional[List[str]] = None,
    time: Optional[datetime] = None,
    buyer: str = "Customer #1",
) -> NormalizedOrder:
    return NormalizedOrder(
        id=order_id,
        amount=Decimal(amount),
        buyer=buyer,
        time=time or datetime.now(timezone.utc),
        items=items or ["Test Item"],
    )


def make_live_source(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> LiveDataSource:
    """LiveDataSource whose HTTP calls are answered by `handler`."""
    params = {
        "api_key": "test-key",
        "shop_id": "12345",
        "base_url": "https://etsy.test/v3/application",
        "timeout": 5.0,
        "transport": httpx.MockTransport(handler),
    }
    params.update(kwargs)
    return LiveDataSource(**params)


@pytest.fixture
def data_source() -> MockDataSource:
    """Data source used by the `client` fixture; override in tests as needed."""
    return MockDataSource()


@pytest.fixture
async def client(data_source) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.
    Overrides the data source dependency with the `data_source` fixture.
    """
    app.dependency_overrides[get_data_source] = lambda: data_source

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Factories ---

@pytest.fixture
def order_factory():
    """Build NormalizedOrder objects with sensible defaults."""
    return make_order


@pytest.fixture
def fake_source():
    """Build FakeDataSource objects."""
    return FakeDataSource


@pytest.fixture
def live_source_factory():
    """Build LiveDataSource objects backed by httpx.MockTransport."""
    return make_live_source


@pytest.fixture
def use_source(client):
    """Swap the data source served to `client` for the rest of the test."""
    def _use(source):
        app.dependency_overrides[get_data_source] = lambda: source
        return source
    return _use
