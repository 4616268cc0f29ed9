"""Business logic layer for Smart Inventory.

This module holds the rules of the store: input validation, bulk-discount
pricing, the purchase workflow, category/product/supplier management and
the read-only reports. It consumes the data access layer for all storage
and raises :class:`BusinessRuleViolation` subclasses for every rejected
request, leaving presentation to the console layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

from . import data_manager, export_excel, log
from .constants import (
    BULK_DISCOUNT_RATE,
    BULK_DISCOUNT_THRESHOLD,
    DATE_FORMAT,
    LOW_STOCK_THRESHOLD,
    MAX_PRICE,
    TIME_FORMAT,
    StockStatus,
)
from .seed_data import load_seed_data


class BusinessRuleViolation(Exception):
    """Raised when a requested operation violates a domain constraint."""


class ValidationError(BusinessRuleViolation):
    """Raised when an identifier, quantity, price or required text is invalid."""


class DuplicateRecordError(BusinessRuleViolation):
    """Raised when an id or name is already held by an active record."""


class MissingReferenceError(BusinessRuleViolation):
    """Raised when a referenced product, category or supplier is unknown."""


class InsufficientStockError(BusinessRuleViolation):
    """Raised when a sale asks for more units than are on hand."""

    def __init__(self, message: str, *, available: int, requested: int) -> None:
        super().__init__(message)
        self.available = available
        self.requested = requested


class CapacityError(BusinessRuleViolation):
    """Raised when a record table has no slot left for a new record."""


class ReferentialIntegrityError(BusinessRuleViolation):
    """Raised when deleting a record that active records still point at."""


_LIMIT_MESSAGES = {
    "Product": "Product limit reached!",
    "Category": "Category limit reached!",
    "Supplier": "Supplier limit reached!",
}


@dataclass(frozen=True)
class RuntimeContext:
    """Container for the session settings and the record store."""

    settings: data_manager.ConfigSettings
    store: data_manager.RecordStore


@dataclass(frozen=True)
class PurchaseCommand:
    """User intent for buying ``quantity`` units of the product named ``product_name``."""

    product_name: str
    quantity: int
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class PriceQuote:
    """Pricing outcome for one purchase line."""

    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount: Decimal
    total: Decimal

    @property
    def discount_applied(self) -> bool:
        return self.discount > 0


@dataclass(frozen=True)
class PurchaseReceipt:
    """Everything the invoice needs after a successful purchase.

    ``transaction`` is ``None`` when the history was full and the sale could
    not be logged; the stock change still happened.
    """

    product: data_manager.ProductRecord
    quote: PriceQuote
    transaction: Optional[data_manager.TransactionRecord]
    date: str
    time: str

    @property
    def history_full(self) -> bool:
        return self.transaction is None

    @property
    def low_stock(self) -> bool:
        return self.product.quantity <= LOW_STOCK_THRESHOLD


@dataclass(frozen=True)
class ProductStatistics:
    """Aggregates over the active products."""

    total_products: int
    low_stock: int
    out_of_stock: int
    total_value: Decimal


@dataclass(frozen=True)
class StockAlert:
    """One row of the low-stock alert."""

    product_id: int
    name: str
    quantity: int
    status: StockStatus


@dataclass(frozen=True)
class InventoryReport:
    """Statistics plus the record counts shown on the inventory report."""

    statistics: ProductStatistics
    total_categories: int
    total_suppliers: int
    total_transactions: int


@dataclass(frozen=True)
class TransactionHistory:
    """Logged transactions, newest first, with their summed totals."""

    entries: Tuple[data_manager.TransactionRecord, ...]
    total_revenue: Decimal


def _resolve_timestamp(candidate: Optional[datetime]) -> datetime:
    """Return ``candidate`` or, when ``None``, the current local time."""

    return candidate if candidate is not None else datetime.now()


def load_runtime_context(config_path: Optional[Path] = None) -> RuntimeContext:
    """Resolve configuration and build a fresh session.

    With an explicit ``config_path`` the file must exist. Without one the
    data layer searches upward from the working directory; when nothing is
    found the built-in defaults are used.

    Args:
        config_path (Path | None): Optional override path for ``config.ini``.

    Returns:
        RuntimeContext: Context holding the settings and a store that has
            been seeded unless the configuration disables it.

    Raises:
        FileNotFoundError: If an explicit configuration file is missing.
        KeyError: When mandatory configuration options are missing.
        ValueError: When configuration values are malformed.
    """
    try:
        located_config = data_manager.find_config_file(config_path)
    except FileNotFoundError:
        log.info("No %s found; using built-in defaults", data_manager.CONFIG_FILE_NAME)
        settings = data_manager.default_settings()
    else:
        resolved_config = Path(located_config).expanduser().resolve()
        parser = data_manager.read_config(resolved_config)
        settings = data_manager.parse_settings(parser, base_path=resolved_config.parent)
        log.info("Loaded configuration from '%s'", resolved_config)
    return build_runtime_context(settings)


def build_runtime_context(settings: data_manager.ConfigSettings) -> RuntimeContext:
    """Create the record store for ``settings`` and load the seed data."""

    store = data_manager.create_store(settings)
    if settings.load_seed_data:
        load_seed_data(store)
    log.info("Started session for store '%s'", settings.store_name)
    return RuntimeContext(settings=settings, store=store)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def is_valid_identifier(product_id: int) -> bool:
    return product_id > 0


def is_duplicate_identifier(context: RuntimeContext, product_id: int) -> bool:
    """True if an active product already uses ``product_id``."""
    return context.store.products.find("product_id", product_id) is not None


def is_valid_quantity(quantity: int) -> bool:
    return quantity >= 0


def is_valid_price(price: Decimal) -> bool:
    """True for prices between zero and :data:`MAX_PRICE` inclusive."""
    return 0 <= price <= MAX_PRICE


def _price_error(price: Decimal, message: str) -> ValidationError:
    if price > MAX_PRICE:
        return ValidationError(f"Invalid price! Must not exceed ${MAX_PRICE:.2f}.")
    return ValidationError(message)


def category_exists(context: RuntimeContext, name: str) -> bool:
    """True if an active category is called ``name``."""
    return context.store.categories.find("name", name) is not None


def supplier_exists(context: RuntimeContext, name: str) -> bool:
    return context.store.suppliers.find("name", name) is not None


def require_existing_category(context: RuntimeContext, name: str) -> None:
    """Raise :class:`MissingReferenceError` unless ``name`` is an active category."""
    if not category_exists(context, name):
        log.warning("Unknown category '%s'", name)
        raise MissingReferenceError("Category does not exist!")


def require_new_category_name(context: RuntimeContext, name: str) -> None:
    if category_exists(context, name):
        log.warning("Category '%s' already exists", name)
        raise DuplicateRecordError("Category already exists!")


def require_new_supplier_name(context: RuntimeContext, name: str) -> None:
    if supplier_exists(context, name):
        log.warning("Supplier '%s' already exists", name)
        raise DuplicateRecordError("Supplier already exists!")


def require_text(value: Optional[str], message: str) -> str:
    """Return ``value`` without surrounding whitespace or raise if blank.

    Raises:
        ValidationError: With ``message`` when nothing is left after
            stripping.
    """
    text = (value or "").strip()
    if not text:
        log.warning("Rejected empty text: %s", message)
        raise ValidationError(message)
    return text


def require_positive_quantity(quantity: int) -> None:
    """Validate that a purchase quantity is strictly positive.

    Raises:
        ValidationError: If ``quantity`` is zero or negative.
    """
    if quantity <= 0:
        log.warning("Quantity validation failed: %s", quantity)
        raise ValidationError("Invalid quantity! Must be positive.")


def validate_product_data(
    context: RuntimeContext,
    *,
    product_id: int,
    quantity: int,
    price: Decimal,
    category: str,
) -> None:
    """Check the numeric fields and category of a new product.

    The checks run in a fixed order and stop at the first failure: positive
    id, id not held by an active product, non-negative quantity,
    non-negative price, existing category.

    Raises:
        ValidationError: For an invalid id, quantity or price.
        DuplicateRecordError: If an active product already has the id.
        MissingReferenceError: If the category does not exist.
    """
    if not is_valid_identifier(product_id):
        log.warning("Product validation failed: invalid id %s", product_id)
        raise ValidationError("Invalid ID! Must be positive.")
    if is_duplicate_identifier(context, product_id):
        log.warning("Product validation failed: duplicate id %s", product_id)
        raise DuplicateRecordError("Product ID already exists!")
    if not is_valid_quantity(quantity):
        log.warning("Product validation failed: invalid quantity %s", quantity)
        raise ValidationError("Invalid quantity! Must be non-negative.")
    if not is_valid_price(price):
        log.warning("Product validation failed: invalid price %s", price)
        raise _price_error(price, "Invalid price! Must be non-negative.")
    if not category_exists(context, category):
        log.warning("Product validation failed: unknown category '%s'", category)
        raise MissingReferenceError("Category does not exist! Please create it first.")


def ensure_capacity(table: data_manager.RecordTable) -> None:
    """Fail early when ``table`` cannot take another record.

    Raises:
        CapacityError: If every slot of ``table`` is used.
    """
    if table.is_full:
        log.warning("%s table is full (%d slots)", table.label, table.capacity)
        raise CapacityError(_LIMIT_MESSAGES.get(table.label, f"{table.label} limit reached!"))


def _append(table: data_manager.RecordTable, record: object) -> int:
    try:
        return table.append(record)
    except data_manager.StoreFullError as exc:
        raise CapacityError(_LIMIT_MESSAGES.get(table.label, str(exc))) from exc


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def list_products(context: RuntimeContext, *, include_inactive: bool = False) -> List[data_manager.ProductRecord]:
    """Return product records in insertion order, active ones only by default."""
    table = context.store.products
    return table.all() if include_inactive else table.active()


def list_categories(context: RuntimeContext, *, include_inactive: bool = False) -> List[data_manager.CategoryRecord]:
    table = context.store.categories
    return table.all() if include_inactive else table.active()


def list_suppliers(context: RuntimeContext, *, include_inactive: bool = False) -> List[data_manager.SupplierRecord]:
    table = context.store.suppliers
    return table.all() if include_inactive else table.active()


def list_transactions(context: RuntimeContext) -> List[data_manager.TransactionRecord]:
    """Return the transaction log in the order the sales happened."""
    return context.store.transactions.all()


def _require_product_slot(context: RuntimeContext, product_id: int) -> int:
    slot = context.store.products.find_slot("product_id", product_id)
    if slot is None:
        log.warning("Product lookup failed for id '%s'", product_id)
        raise MissingReferenceError("Product not found!")
    return slot


def get_product(context: RuntimeContext, product_id: int) -> data_manager.ProductRecord:
    """Resolve an active product by identifier.

    Raises:
        MissingReferenceError: If no active product has ``product_id``.
    """
    return context.store.products.get(_require_product_slot(context, product_id))


def find_product_by_name(context: RuntimeContext, name: str) -> data_manager.ProductRecord:
    """Resolve an active product by exact name; no partial matching.

    When several active products share the name the earliest one wins.

    Raises:
        MissingReferenceError: If no active product is called ``name``.
    """
    product = context.store.products.find("name", name)
    if product is None:
        log.warning("Product lookup failed for name '%s'", name)
        raise MissingReferenceError("Product not found!")
    return product


# ---------------------------------------------------------------------------
# Product management
# ---------------------------------------------------------------------------


def add_product(
    context: RuntimeContext,
    *,
    product_id: int,
    name: str,
    category: str,
    quantity: int,
    price: Decimal,
) -> data_manager.ProductRecord:
    """Validate and store a new active product.

    Raises:
        CapacityError: If the product table is full.
        ValidationError: For blank text or invalid id, quantity or price.
        DuplicateRecordError: If an active product already has the id.
        MissingReferenceError: If the category does not exist.
    """
    ensure_capacity(context.store.products)
    name = require_text(name, "Product name cannot be empty!")
    category = require_text(category, "Category cannot be empty!")
    validate_product_data(context, product_id=product_id, quantity=quantity, price=price, category=category)

    record = data_manager.ProductRecord(
        product_id=product_id,
        name=name,
        category=category,
        quantity=quantity,
        price=price,
    )
    _append(context.store.products, record)
    log.info(
        "Added product %s '%s' (category=%s, quantity=%s, price=%s)",
        product_id,
        name,
        category,
        quantity,
        price,
    )
    return record


def update_product(
    context: RuntimeContext,
    product_id: int,
    *,
    name: str,
    category: str,
    quantity: int,
    price: Decimal,
) -> data_manager.ProductRecord:
    """Replace the editable fields of an active product.

    Every field is validated before anything is written, so a rejected
    update leaves the product untouched.

    Raises:
        MissingReferenceError: If the product or the category is unknown.
        ValidationError: For blank text or a negative quantity or price.
    """
    slot = _require_product_slot(context, product_id)
    name = require_text(name, "Product name cannot be empty!")
    category = require_text(category, "Category cannot be empty!")
    require_existing_category(context, category)
    if not is_valid_quantity(quantity):
        log.warning("Product update failed: invalid quantity %s", quantity)
        raise ValidationError("Invalid quantity!")
    if not is_valid_price(price):
        log.warning("Product update failed: invalid price %s", price)
        raise _price_error(price, "Invalid price!")

    updated = context.store.products.update(
        slot,
        name=name,
        category=category,
        quantity=quantity,
        price=price,
    )
    log.info("Updated product %s '%s'", product_id, name)
    return updated


def delete_product(context: RuntimeContext, product_id: int) -> data_manager.ProductRecord:
    """Soft-delete an active product; its id becomes free for reuse.

    Raises:
        MissingReferenceError: If no active product has ``product_id``.
    """
    slot = _require_product_slot(context, product_id)
    record = context.store.products.deactivate(slot)
    log.info("Deactivated product %s '%s'", product_id, record.name)
    return record


# ---------------------------------------------------------------------------
# Category and supplier management
# ---------------------------------------------------------------------------


def category_in_use(context: RuntimeContext, name: str) -> bool:
    """True if any active product names ``name`` as its category."""
    return any(product.category == name for product in context.store.products.active())


def add_category(context: RuntimeContext, *, name: str, description: str = "") -> data_manager.CategoryRecord:
    """Store a new category whose name is not used by another active one.

    Raises:
        CapacityError: If the category table is full.
        ValidationError: If the name is blank.
        DuplicateRecordError: If an active category already has the name.
    """
    ensure_capacity(context.store.categories)
    name = require_text(name, "Category name cannot be empty!")
    require_new_category_name(context, name)

    record = data_manager.CategoryRecord(name=name, description=(description or "").strip())
    _append(context.store.categories, record)
    log.info("Added category '%s'", name)
    return record


def delete_category(context: RuntimeContext, name: str) -> data_manager.CategoryRecord:
    """Soft-delete a category that no active product references.

    Deleting an already deactivated category reports it as not found.

    Raises:
        ValidationError: If the name is blank.
        MissingReferenceError: If no active category has the name.
        ReferentialIntegrityError: If an active product uses the category.
    """
    name = require_text(name, "Category name cannot be empty!")
    slot = context.store.categories.find_slot("name", name)
    if slot is None:
        log.warning("Category lookup failed for name '%s'", name)
        raise MissingReferenceError("Category not found!")
    if category_in_use(context, name):
        log.warning("Refused to delete category '%s': still in use", name)
        raise ReferentialIntegrityError("Cannot delete! Category is in use by products.")

    record = context.store.categories.deactivate(slot)
    log.info("Deactivated category '%s'", name)
    return record


def add_supplier(context: RuntimeContext, *, name: str, contact: str = "") -> data_manager.SupplierRecord:
    """Store a new supplier whose name is not used by another active one.

    Raises:
        CapacityError: If the supplier table is full.
        ValidationError: If the name is blank.
        DuplicateRecordError: If an active supplier already has the name.
    """
    ensure_capacity(context.store.suppliers)
    name = require_text(name, "Supplier name cannot be empty!")
    require_new_supplier_name(context, name)

    record = data_manager.SupplierRecord(name=name, contact=(contact or "").strip())
    _append(context.store.suppliers, record)
    log.info("Added supplier '%s'", name)
    return record


def delete_supplier(context: RuntimeContext, name: str) -> data_manager.SupplierRecord:
    """Soft-delete an active supplier.

    Raises:
        ValidationError: If the name is blank.
        MissingReferenceError: If no active supplier has the name.
    """
    name = require_text(name, "Supplier name cannot be empty!")
    slot = context.store.suppliers.find_slot("name", name)
    if slot is None:
        log.warning("Supplier lookup failed for name '%s'", name)
        raise MissingReferenceError("Supplier not found!")

    record = context.store.suppliers.deactivate(slot)
    log.info("Deactivated supplier '%s'", name)
    return record


# ---------------------------------------------------------------------------
# Pricing and the purchase workflow
# ---------------------------------------------------------------------------


def calculate_discount(quantity: int, subtotal: Decimal) -> Tuple[Decimal, Decimal]:
    """Return ``(discount, total)`` for a purchase line.

    Quantities at or above :data:`BULK_DISCOUNT_THRESHOLD` get
    :data:`BULK_DISCOUNT_RATE` off the subtotal. Nothing is rounded here;
    two-decimal rounding only happens when amounts are displayed.
    """
    discount = subtotal * BULK_DISCOUNT_RATE if quantity >= BULK_DISCOUNT_THRESHOLD else Decimal("0")
    return discount, subtotal - discount


def quote_purchase(quantity: int, unit_price: Decimal) -> PriceQuote:
    """Price ``quantity`` units at ``unit_price``."""
    subtotal = unit_price * quantity
    discount, total = calculate_discount(quantity, subtotal)
    return PriceQuote(
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
        discount=discount,
        total=total,
    )


def update_inventory_stock(context: RuntimeContext, product_id: int, quantity_sold: int) -> data_manager.ProductRecord:
    """Take ``quantity_sold`` units off an active product's stock.

    The stock is checked again here even though :func:`purchase_product`
    has already compared it, so no caller can drive a quantity negative.

    Raises:
        MissingReferenceError: If the product is unknown.
        InsufficientStockError: If fewer than ``quantity_sold`` units remain.
    """
    slot = _require_product_slot(context, product_id)
    product = context.store.products.get(slot)
    if product.quantity < quantity_sold:
        log.warning(
            "Stock update refused for product %s: available=%s requested=%s",
            product_id,
            product.quantity,
            quantity_sold,
        )
        raise InsufficientStockError(
            "Insufficient stock!",
            available=product.quantity,
            requested=quantity_sold,
        )
    return context.store.products.update(slot, quantity=product.quantity - quantity_sold)


def record_transaction(
    context: RuntimeContext,
    *,
    product: data_manager.ProductRecord,
    quote: PriceQuote,
    timestamp: datetime,
) -> Optional[data_manager.TransactionRecord]:
    """Append a transaction snapshot, or return ``None`` if the log is full.

    A full log is not an error: the entry is dropped with a warning and the
    id counter is left untouched.
    """
    transactions = context.store.transactions
    if transactions.is_full:
        log.warning(
            "Transaction history limit reached (%d); sale of product %s not logged",
            transactions.capacity,
            product.product_id,
        )
        return None

    record = data_manager.TransactionRecord(
        transaction_id=context.store.allocate_transaction_id(),
        product_id=product.product_id,
        product_name=product.name,
        quantity=quote.quantity,
        unit_price=quote.unit_price,
        discount=quote.discount,
        total=quote.total,
        date=timestamp.strftime(DATE_FORMAT),
        time=timestamp.strftime(TIME_FORMAT),
    )
    transactions.append(record)
    return record


def purchase_product(context: RuntimeContext, command: PurchaseCommand) -> PurchaseReceipt:
    """Sell units of a product as one all-or-nothing operation.

    The steps run in order: resolve the product by exact name, validate
    the quantity, compare it with the stock on hand, price the line,
    decrement the stock, then log the transaction. Every check happens
    before the first mutation, so a rejected purchase changes nothing.

    Args:
        context (RuntimeContext): Active session.
        command (PurchaseCommand): Product name, quantity and optional
            timestamp (defaults to now).

    Returns:
        PurchaseReceipt: Updated product, price quote, logged transaction
            (``None`` if the history was full) and the sale date/time.

    Raises:
        ValidationError: If the name is blank or the quantity not positive.
        MissingReferenceError: If no active product has that name.
        InsufficientStockError: If the request exceeds the stock on hand.
    """
    name = require_text(command.product_name, "Product name cannot be empty!")
    product = find_product_by_name(context, name)
    log.debug("Purchase: resolved '%s' to product %s", name, product.product_id)

    require_positive_quantity(command.quantity)
    if product.quantity < command.quantity:
        log.warning(
            "Purchase refused for '%s': available=%s requested=%s",
            name,
            product.quantity,
            command.quantity,
        )
        raise InsufficientStockError(
            "Insufficient stock!",
            available=product.quantity,
            requested=command.quantity,
        )
    log.debug("Purchase: quantity %s validated", command.quantity)

    quote = quote_purchase(command.quantity, product.price)
    log.debug("Purchase: priced at subtotal=%s discount=%s", quote.subtotal, quote.discount)

    updated = update_inventory_stock(context, product.product_id, command.quantity)
    timestamp = _resolve_timestamp(command.timestamp)
    transaction = record_transaction(context, product=updated, quote=quote, timestamp=timestamp)

    log.info(
        "Recorded purchase %s of product %s '%s' (quantity=%s, total=%s, stock_left=%s)",
        transaction.transaction_id if transaction else "(not logged)",
        updated.product_id,
        updated.name,
        command.quantity,
        quote.total,
        updated.quantity,
    )
    return PurchaseReceipt(
        product=updated,
        quote=quote,
        transaction=transaction,
        date=timestamp.strftime(DATE_FORMAT),
        time=timestamp.strftime(TIME_FORMAT),
    )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def classify_stock(quantity: int) -> StockStatus:
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def compute_statistics(context: RuntimeContext) -> ProductStatistics:
    """Count and value the active products in a single pass.

    Low stock means ``0 < quantity <= LOW_STOCK_THRESHOLD``; zero quantity is
    counted separately as out of stock. The total value is the sum of
    ``quantity * price``.
    """
    total_products = 0
    low_stock = 0
    out_of_stock = 0
    total_value = Decimal("0")
    for product in context.store.products.active():
        total_products += 1
        total_value += product.stock_value
        status = classify_stock(product.quantity)
        if status is StockStatus.OUT_OF_STOCK:
            out_of_stock += 1
        elif status is StockStatus.LOW_STOCK:
            low_stock += 1
    log.debug(
        "Computed statistics: products=%d low=%d out=%d value=%s",
        total_products,
        low_stock,
        out_of_stock,
        total_value,
    )
    return ProductStatistics(
        total_products=total_products,
        low_stock=low_stock,
        out_of_stock=out_of_stock,
        total_value=total_value,
    )


def low_stock_alert(context: RuntimeContext) -> List[StockAlert]:
    """List active products at or below the low-stock threshold."""
    return [
        StockAlert(
            product_id=product.product_id,
            name=product.name,
            quantity=product.quantity,
            status=classify_stock(product.quantity),
        )
        for product in context.store.products.active()
        if product.quantity <= LOW_STOCK_THRESHOLD
    ]


def build_inventory_report(context: RuntimeContext) -> InventoryReport:
    return InventoryReport(
        statistics=compute_statistics(context),
        total_categories=len(context.store.categories.active()),
        total_suppliers=len(context.store.suppliers.active()),
        total_transactions=len(context.store.transactions),
    )


def transaction_history(context: RuntimeContext) -> TransactionHistory:
    """Return the log newest first together with the summed totals."""
    entries = tuple(reversed(context.store.transactions.all()))
    total_revenue = sum((entry.total for entry in entries), Decimal("0"))
    return TransactionHistory(entries=entries, total_revenue=total_revenue)


def export_session(context: RuntimeContext, destination: Optional[Path] = None) -> Path:
    """Write the current session to an ``.xlsx`` workbook.

    The workbook is a write-only snapshot; nothing reads it back.

    Args:
        context (RuntimeContext): Session to export.
        destination (Path | None): Target file; defaults to the configured
            ``ExportFile``.

    Returns:
        Path: Resolved location of the written workbook.
    """
    target = destination if destination is not None else context.settings.export_file
    written = export_excel.create_session_workbook(context.store, target, overwrite=True)
    log.info("Exported session workbook to '%s'", written)
    return written
