"""
Shared constants for the dashboard application.
"""
from decimal import Decimal

# ---------------------------------------------------------------------------
# Decimal helpers
# ---------------------------------------------------------------------------
ZERO = Decimal("0")
ONE_CENT = Decimal("0.01")

# ---------------------------------------------------------------------------
# Etsy API
# ---------------------------------------------------------------------------
RECEIPTS_LIMIT = 20
RECEIPTS_INCLUDES = "transactions"

# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
# Mock mode shows canned monthly figures.
MOCK_MONTHLY_REVENUE = Decimal("2890.45")
MOCK_MONTHLY_SALES_COUNT = 67

# Live mode has no monthly query: today's figures are scaled by this factor.
# Rough approximation, not a real month of data.
MONTHLY_EXTRAPOLATION_FACTOR = 15

# ---------------------------------------------------------------------------
# Normalization defaults
# ---------------------------------------------------------------------------
GUEST_BUYER = "Guest"
DEFAULT_ORDER_ITEMS = ("Order items",)
# Larger order totals are treated as malformed upstream data.
MAX_ORDER_AMOUNT = Decimal("1000000000")

# ---------------------------------------------------------------------------
# trmnl display
# ---------------------------------------------------------------------------
DISPLAY_SALE_SLOTS = 5
DISPLAY_ITEMS_PER_SALE = 2
DISPLAY_TITLE = "🛍️ ETSY DASHBOARD"
DISPLAY_FALLBACK_SHOP_NAME = "Etsy Shop"
STATUS_GOOD_DAY = "🎉 Great sales today!"
STATUS_NO_SALES = "💪 Keep pushing!"
STATUS_ERROR = "⚠️ Unable to load shop data"
CLOCK_FORMAT = "%I:%M %p"
