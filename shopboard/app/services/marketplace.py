"""
Etsy data sources.

Two interchangeable strategies return the same normalized shape:
MockDataSource serves a built-in demo fixture, LiveDataSource calls the
Etsy Open API. build_data_source() picks one from settings at startup.
"""
import enum
import math
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, List, Dict, Any, Tuple, Sequence

import httpx

from shopboard.app.core.constants import (
    ZERO,
    ONE_CENT,
    MAX_ORDER_AMOUNT,
    GUEST_BUYER,
    DEFAULT_ORDER_ITEMS,
    RECEIPTS_LIMIT,
    RECEIPTS_INCLUDES,
)
from shopboard.app.core.exceptions import ServiceError
from shopboard.app.core.logging import get_logger
from shopboard.app.core.metrics import upstream_requests_total, upstream_request_duration_seconds
from shopboard.app.core.settings import Settings
from shopboard.app.schemas import ShopInfo, NormalizedOrder

logger = get_logger(__name__)


class DataSourceMode(str, enum.Enum):
    MOCK = "mock"
    LIVE = "live"


class MarketplaceError(ServiceError):
    """Base exception for data source errors."""


class UpstreamHttpError(MarketplaceError):
    """The Etsy API answered with a non-success status."""
    def __init__(self, resource: str, upstream_status: int):
        self.resource = resource
        self.upstream_status = upstream_status
        super().__init__(f"{resource.capitalize()} API error: {upstream_status}")


class NetworkFailure(MarketplaceError):
    """The Etsy API could not be reached (DNS, refused connection, timeout)."""
    def __init__(self, resource: str, detail: str):
        self.resource = resource
        super().__init__(f"{resource.capitalize()} API request failed: {detail}")


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def parse_amount(value: Any) -> Decimal:
    """
    Parse an order total into a non-negative Decimal.

    Accepts a decimal string/number or the Etsy money object
    {"amount": 4599, "divisor": 100}. The result is rounded to cents.
    Anything missing, malformed, non-finite, negative or implausibly
    large becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        if isinstance(value, dict):
            divisor = Decimal(str(value.get("divisor") or 1))
            amount = Decimal(str(value["amount"])) / divisor
        else:
            amount = Decimal(str(value).strip())
        if not amount.is_finite() or amount < 0 or amount > MAX_ORDER_AMOUNT:
            return ZERO
        return amount.quantize(ONE_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, KeyError, TypeError, ZeroDivisionError):
        return ZERO


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Unix seconds -> aware UTC datetime, None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def normalize_shop(raw: Dict[str, Any]) -> ShopInfo:
    """Map an upstream shop resource (or the fixture) to ShopInfo."""
    def _count(*keys: str) -> int:
        for key in keys:
            value = raw.get(key)
            if value is None:
                continue
            try:
                return int(value)
            except (TypeError, ValueError):
                continue
        return 0

    return ShopInfo(
        name=str(raw.get("shop_name") or ""),
        total_sales=_count("total_sales", "transaction_sold_count"),
        total_favorites=_count("total_favorites", "num_favorers"),
    )


def normalize_order(raw: Dict[str, Any]) -> NormalizedOrder:
    """
    Map an upstream receipt to NormalizedOrder.

    Bad records are absorbed here with defaults instead of failing the request.
    """
    buyer_id = raw.get("buyer_user_id")
    buyer = f"Customer #{buyer_id}" if buyer_id not in (None, "") else GUEST_BUYER

    transactions = raw.get("transactions") or []
    items = [
        str(t["title"])
        for t in transactions
        if isinstance(t, dict) and t.get("title")
    ]

    return NormalizedOrder(
        id=raw.get("receipt_id"),
        amount=parse_amount(raw.get("grandtotal")),
        buyer=buyer,
        time=parse_timestamp(raw.get("creation_timestamp")),
        items=items or list(DEFAULT_ORDER_ITEMS),
    )


def start_of_today(now: Optional[datetime] = None, tz=None) -> int:
    """Epoch seconds of the most recent local midnight (tz=None: server local zone)."""
    if now is None:
        now = datetime.now(tz=tz) if tz is not None else datetime.now().astimezone()
    elif tz is not None:
        now = now.astimezone(tz)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())


# ---------------------------------------------------------------------------
# Mock source
# ---------------------------------------------------------------------------

MOCK_SHOP: Dict[str, Any] = {
    "shop_name": "Your Amazing Etsy Shop",
    "total_sales": 1247,
    "total_favorites": 892,
}


def build_mock_receipts(now: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Demo receipts placed 2, 4 and 6 hours before `now`.

    Rebuilt per call so the sales always look recent.
    """
    if now is None:
        now = time.time()

    def _hours_ago(hours: int) -> int:
        return int(now - hours * 60 * 60)

    return [
        {
            "receipt_id": 1,
            "grandtotal": "45.99",
            "creation_timestamp": _hours_ago(2),
            "buyer_user_id": "1234",
            "transactions": [
                {"title": "Custom Coffee Mug"},
                {"title": "Sticker Pack"},
            ],
        },
        {
            "receipt_id": 2,
            "grandtotal": "23.50",
            "creation_timestamp": _hours_ago(4),
            "buyer_user_id": "5678",
            "transactions": [
                {"title": "Vintage T-Shirt"},
            ],
        },
        {
            "receipt_id": 3,
            "grandtotal": "78.00",
            "creation_timestamp": _hours_ago(6),
            "buyer_user_id": "9101",
            "transactions": [
                {"title": "Custom Art Print"},
                {"title": "Wooden Frame"},
            ],
        },
    ]


class MockDataSource:
    """Serves the demo fixture; used when Etsy credentials are not configured."""

    mode = DataSourceMode.MOCK

    async def fetch_shop_and_orders(self) -> Tuple[ShopInfo, List[NormalizedOrder]]:
        logger.debug("Using mock data - no API keys set")
        receipts = build_mock_receipts()
        return normalize_shop(MOCK_SHOP), [normalize_order(r) for r in receipts]


# ---------------------------------------------------------------------------
# Live source
# ---------------------------------------------------------------------------

class LiveDataSource:
    """Reads the shop and today's receipts from the Etsy Open API."""

    mode = DataSourceMode.LIVE

    def __init__(
        self,
        api_key: str,
        shop_id: str,
        base_url: str = "https://openapi.etsy.com/v3/application",
        timeout: float = 10.0,
        tz=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.shop_id = shop_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tz = tz
        # Injected by tests (httpx.MockTransport); None uses the network.
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        resource: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        start_time = time.time()
        try:
            response = await client.get(url, params=params, headers=self.headers)
        except httpx.TimeoutException as e:
            upstream_requests_total.labels(resource=resource, status="timeout").inc()
            logger.error("Etsy API timeout", resource=resource, timeout=self.timeout)
            raise NetworkFailure(resource, f"timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            upstream_requests_total.labels(resource=resource, status="network_error").inc()
            logger.error("Etsy API request error", resource=resource, error=str(e))
            raise NetworkFailure(resource, str(e) or type(e).__name__) from e
        finally:
            upstream_request_duration_seconds.labels(resource=resource).observe(time.time() - start_time)

        upstream_requests_total.labels(resource=resource, status=str(response.status_code)).inc()
        if not response.is_success:
            logger.error(
                "Etsy API error",
                resource=resource,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise UpstreamHttpError(resource, response.status_code)
        return response.json()

    async def fetch_shop_and_orders(self) -> Tuple[ShopInfo, List[NormalizedOrder]]:
        logger.info("Using real Etsy API", shop_id=self.shop_id)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            shop_data = await self._get_json(client, "shop", f"/shops/{self.shop_id}")

            params = {
                "min_created": start_of_today(tz=self.tz),
                "limit": RECEIPTS_LIMIT,
                "includes": RECEIPTS_INCLUDES,
            }
            orders_data = await self._get_json(
                client, "orders", f"/shops/{self.shop_id}/receipts", params=params
            )

        receipts: Sequence[Dict[str, Any]] = orders_data.get("results") or []
        orders = [normalize_order(r) for r in receipts if isinstance(r, dict)]
        logger.info("Fetched Etsy receipts", count=len(orders))
        return normalize_shop(shop_data), orders


def build_data_source(settings: Settings):
    """Pick the data source once, from configured credentials."""
    if settings.has_api_keys:
        return LiveDataSource(
            api_key=settings.ETSY_API_KEY,
            shop_id=settings.ETSY_SHOP_ID,
            base_url=settings.ETSY_API_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            tz=settings.display_tz,
        )
    return MockDataSource()
