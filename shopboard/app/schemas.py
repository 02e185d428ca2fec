from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# --- Shop ---
class ShopInfo(BaseModel):
    """Shop summary; serialized with the keys the dashboard page reads."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="shop_name")
    total_sales: int = 0
    total_favorites: int = 0


# --- Orders ---
class NormalizedOrder(BaseModel):
    id: Optional[Union[int, str]] = None
    amount: Decimal = Decimal(0)
    buyer: str
    time: Optional[datetime] = None
    items: List[str]

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, v: Decimal) -> float:
        return float(v)


# --- Stats ---
class Stats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    today_revenue: Decimal = Field(alias="todayRevenue")
    today_sales_count: int = Field(alias="todaySalesCount")
    monthly_revenue: Decimal = Field(alias="monthlyRevenue")
    monthly_sales_count: int = Field(alias="monthlySalesCount")

    @field_serializer("today_revenue", "monthly_revenue", when_used="json")
    def serialize_money(self, v: Decimal) -> float:
        return float(v)


# --- Views ---
class DashboardView(BaseModel):
    """Nested payload for the browser dashboard."""
    model_config = ConfigDict(populate_by_name=True)

    shop: ShopInfo
    todays_sales: List[NormalizedOrder] = Field(alias="todaysSales")
    stats: Stats


class DisplayView(BaseModel):
    """
    Flat payload for the trmnl e-ink display.

    The display cannot template or loop, so every value is pre-formatted
    and the recent sales are unrolled into five fixed slots.
    """
    title: str
    shop_name: str
    alert: Optional[str] = None
    today_revenue: str
    today_sales: str
    monthly_revenue: str
    monthly_sales: str
    total_sales: str
    total_favorites: str
    last_updated: str
    status_message: str
    has_sales: bool

    sale1_amount: str = ""
    sale1_items: str = ""
    sale1_time: str = ""
    has_sale1: bool = False

    sale2_amount: str = ""
    sale2_items: str = ""
    sale2_time: str = ""
    has_sale2: bool = False

    sale3_amount: str = ""
    sale3_items: str = ""
    sale3_time: str = ""
    has_sale3: bool = False

    sale4_amount: str = ""
    sale4_items: str = ""
    sale4_time: str = ""
    has_sale4: bool = False

    sale5_amount: str = ""
    sale5_items: str = ""
    sale5_time: str = ""
    has_sale5: bool = False


# --- Service responses ---
class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    timestamp: str
    has_api_keys: bool = Field(alias="hasApiKeys")
    port: int


class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: str
