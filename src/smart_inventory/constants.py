"""Constants and enumerations shared across the Smart Inventory modules.

Keeps the numeric store policy (thresholds, discount rate, capacities) and
the identifiers used by the console and export layers in one place so the
record store, business logic and presentation layers agree on them.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum


# Quantity at or below which an active product counts as low on stock.
LOW_STOCK_THRESHOLD = 5

# Purchases of at least this many units receive the bulk discount.
BULK_DISCOUNT_THRESHOLD = 5
BULK_DISCOUNT_RATE = Decimal("0.10")

# Largest unit price a product may carry.
MAX_PRICE = Decimal("1000000")

DEFAULT_STORE_NAME = "Smart Inventory"
DEFAULT_MAX_ITEMS = 100
DEFAULT_MAX_TRANSACTIONS = 200
DEFAULT_EXPORT_FILE = "inventory_session.xlsx"

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M:%S"


class StockStatus(str, Enum):
    """Classify an on-hand quantity against the low-stock threshold."""

    IN_STOCK = "IN STOCK"
    LOW_STOCK = "LOW STOCK"
    OUT_OF_STOCK = "OUT OF STOCK"

    @property
    def short_label(self) -> str:
        """Compact label used in the products table status column."""
        return {
            StockStatus.IN_STOCK: "OK",
            StockStatus.LOW_STOCK: "LOW",
            StockStatus.OUT_OF_STOCK: "OUT",
        }[self]


class MessageLevel(str, Enum):
    """Severity prefixes for messages written to the console."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    WARNING = "WARNING"


class MenuSection(str, Enum):
    """Headings that group the main menu entries."""

    CATEGORIES = "CATEGORY MANAGEMENT"
    PRODUCTS = "PRODUCT MANAGEMENT"
    SALES = "SALES & TRANSACTIONS"
    SUPPLIERS = "SUPPLIER MANAGEMENT"
    REPORTS = "REPORTS & ANALYTICS"


class SheetName(str, Enum):
    """Enumerate the sheet names written by the session workbook export."""

    PRODUCTS = "Products"
    CATEGORIES = "Categories"
    SUPPLIERS = "Suppliers"
    TRANSACTIONS = "Transactions"


__all__ = [
    "LOW_STOCK_THRESHOLD",
    "BULK_DISCOUNT_THRESHOLD",
    "BULK_DISCOUNT_RATE",
    "MAX_PRICE",
    "DEFAULT_STORE_NAME",
    "DEFAULT_MAX_ITEMS",
    "DEFAULT_MAX_TRANSACTIONS",
    "DEFAULT_EXPORT_FILE",
    "DATE_FORMAT",
    "TIME_FORMAT",
    "StockStatus",
    "MessageLevel",
    "MenuSection",
    "SheetName",
]
