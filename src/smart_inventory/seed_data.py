"""Fixed dataset loaded into every new session.

There is no persistence between runs, so each start begins from the same
three categories, five products and two suppliers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from . import log
from .data_manager import CategoryRecord, ProductRecord, RecordStore, SupplierRecord


SEED_CATEGORIES: Sequence[CategoryRecord] = (
    CategoryRecord("Electronics", "Electronic devices and accessories"),
    CategoryRecord("Clothing", "Apparel and fashion items"),
    CategoryRecord("Food", "Food and beverages"),
)

SEED_PRODUCTS: Sequence[ProductRecord] = (
    ProductRecord(1, "Laptop", "Electronics", 15, Decimal("899.99")),
    ProductRecord(2, "Mouse", "Electronics", 50, Decimal("19.99")),
    ProductRecord(3, "Keyboard", "Electronics", 3, Decimal("49.99")),
    ProductRecord(4, "T-Shirt", "Clothing", 100, Decimal("15.99")),
    ProductRecord(5, "Jeans", "Clothing", 2, Decimal("39.99")),
)

SEED_SUPPLIERS: Sequence[SupplierRecord] = (
    SupplierRecord("TechSupply Co", "tech@supply.com"),
    SupplierRecord("Fashion World", "contact@fashion.com"),
)


def load_seed_data(
    store: RecordStore,
    *,
    categories: Sequence[CategoryRecord] = SEED_CATEGORIES,
    products: Sequence[ProductRecord] = SEED_PRODUCTS,
    suppliers: Sequence[SupplierRecord] = SEED_SUPPLIERS,
) -> RecordStore:
    """Append the seed records to ``store`` and return it.

    The records bypass the business-layer validation: they are known-good
    and the tables start empty. Parameters are overridable for tests.
    """

    for category in categories:
        store.categories.append(category)
    for product in products:
        store.products.append(product)
    for supplier in suppliers:
        store.suppliers.append(supplier)

    log.info(
        "Loaded seed data: %d categories, %d products, %d suppliers",
        len(categories),
        len(products),
        len(suppliers),
    )
    return store
