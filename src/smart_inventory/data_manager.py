"""Data access layer for Smart Inventory.

This module owns everything the business layer reads from or writes to.
Business rules belong elsewhere.

The public API is designed around three responsibilities:

1. Configuration handling: finding and parsing ``config.ini``.
2. Record storage: fixed-capacity, insertion-ordered tables with
   soft-delete semantics and active-only lookup indices.
3. Row serialization: flattening records into column order for the
   session workbook export.
"""


from __future__ import annotations

import bisect
import configparser
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, TypeVar

from . import log
from .constants import (
    DEFAULT_EXPORT_FILE,
    DEFAULT_MAX_ITEMS,
    DEFAULT_MAX_TRANSACTIONS,
    DEFAULT_STORE_NAME,
)


CONFIG_FILE_NAME = "config.ini"


class StoreFullError(Exception):
    """Raised when a record table has used every one of its slots."""


@dataclass(frozen=True)
class ConfigSettings:
    """Typed representation of the ``config.ini`` settings we care about."""

    store_name: str
    max_items: int
    max_transactions: int
    load_seed_data: bool
    export_file: Path


@dataclass(frozen=True)
class ProductRecord:
    """A product row; ``category`` holds a category name, not a reference."""

    product_id: int
    name: str
    category: str
    quantity: int
    price: Decimal
    is_active: bool = True

    @property
    def stock_value(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class CategoryRecord:
    """A product category."""

    name: str
    description: str
    is_active: bool = True


@dataclass(frozen=True)
class SupplierRecord:
    """A supplier; informational only, products do not reference it."""

    name: str
    contact: str
    is_active: bool = True


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable snapshot of a completed sale.

    The product id and name are copied at purchase time so the history
    stays readable after the product is renamed or deleted.
    """

    transaction_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total: Decimal
    date: str
    time: str


R = TypeVar("R")


class RecordTable(Generic[R]):
    """Fixed-capacity, insertion-ordered storage for one record type.

    Records live in numbered slots that are never reused or compacted, so a
    soft-deleted record keeps its slot for good. ``key_fields`` get an
    auxiliary index mapping each value to the slots of the *active* records
    holding it, in slot order, which gives constant-time lookups while still
    letting a deactivated record's id or name be taken by a new record.
    Records without an ``is_active`` attribute are always active.
    """

    def __init__(self, label: str, capacity: int, key_fields: Sequence[str] = ()) -> None:
        if capacity <= 0:
            raise ValueError(f"{label} capacity must be positive, got {capacity}")
        self.label = label
        self.capacity = capacity
        self.key_fields = tuple(key_fields)
        self._records: List[R] = []
        self._indices: Dict[str, Dict[Any, List[int]]] = {name: {} for name in self.key_fields}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[R]:
        return iter(list(self._records))

    @property
    def is_full(self) -> bool:
        return len(self._records) >= self.capacity

    def append(self, record: R) -> int:
        """Store ``record`` in the next free slot and return the slot number.

        Raises:
            StoreFullError: If every slot is already taken, including the
                slots held by deactivated records.
        """

        if self.is_full:
            log.warning("%s table is full (%d slots)", self.label, self.capacity)
            raise StoreFullError(f"{self.label} limit reached ({self.capacity} records)")
        slot = len(self._records)
        self._records.append(record)
        if _is_active(record):
            self._add_to_indices(slot, record)
        log.debug("Stored %s record in slot %d", self.label, slot)
        return slot

    def get(self, slot: int) -> R:
        return self._records[slot]

    def find_slot(self, key_field: str, value: Any) -> Optional[int]:
        """Return the earliest active slot whose ``key_field`` equals ``value``."""

        slots = self._require_index(key_field).get(value)
        return slots[0] if slots else None

    def find(self, key_field: str, value: Any) -> Optional[R]:
        slot = self.find_slot(key_field, value)
        return None if slot is None else self._records[slot]

    def update(self, slot: int, **field_values: Any) -> R:
        """Replace the record in ``slot`` with a copy carrying ``field_values``.

        Raises:
            KeyError: If a field name does not exist on the record type.
        """

        current = self._records[slot]
        known = {item.name for item in fields(current)}  # type: ignore[arg-type]
        for name in field_values:
            if name not in known:
                raise KeyError(f"Unknown {self.label} field: {name}")

        updated = replace(current, **field_values)  # type: ignore[type-var]
        if _is_active(current):
            self._remove_from_indices(slot, current)
        self._records[slot] = updated
        if _is_active(updated):
            self._add_to_indices(slot, updated)
        return updated

    def deactivate(self, slot: int) -> R:
        """Soft-delete the record in ``slot``; the slot stays occupied."""

        return self.update(slot, is_active=False)

    def active(self) -> List[R]:
        return [record for record in self._records if _is_active(record)]

    def all(self) -> List[R]:
        return list(self._records)

    def _require_index(self, key_field: str) -> Dict[Any, List[int]]:
        try:
            return self._indices[key_field]
        except KeyError as exc:
            raise KeyError(f"{self.label} table has no index on '{key_field}'") from exc

    def _add_to_indices(self, slot: int, record: R) -> None:
        for name, index in self._indices.items():
            bisect.insort(index.setdefault(getattr(record, name), []), slot)

    def _remove_from_indices(self, slot: int, record: R) -> None:
        for name, index in self._indices.items():
            value = getattr(record, name)
            slots = index.get(value)
            if not slots or slot not in slots:
                continue
            slots.remove(slot)
            if not slots:
                del index[value]


def _is_active(record: object) -> bool:
    return bool(getattr(record, "is_active", True))


@dataclass
class RecordStore:
    """Every table of the running session plus the transaction id counter."""

    products: RecordTable[ProductRecord]
    categories: RecordTable[CategoryRecord]
    suppliers: RecordTable[SupplierRecord]
    transactions: RecordTable[TransactionRecord]
    next_transaction_id: int = 1

    def allocate_transaction_id(self) -> int:
        """Hand out the next transaction id; ids are never handed out twice."""

        transaction_id = self.next_transaction_id
        self.next_transaction_id += 1
        return transaction_id


def create_store(settings: ConfigSettings) -> RecordStore:
    """Build an empty :class:`RecordStore` sized from ``settings``."""

    store = RecordStore(
        products=RecordTable("Product", settings.max_items, key_fields=("product_id", "name")),
        categories=RecordTable("Category", settings.max_items, key_fields=("name",)),
        suppliers=RecordTable("Supplier", settings.max_items, key_fields=("name",)),
        transactions=RecordTable("Transaction", settings.max_transactions, key_fields=("transaction_id",)),
    )
    log.debug(
        "Created record store (items=%d, transactions=%d)",
        settings.max_items,
        settings.max_transactions,
    )
    return store


def find_config_file(explicit_path: Optional[Path] = None) -> Path:
    """Return the ``config.ini`` a session should read.

    A ``--config`` value wins as-is; whether it exists is checked later by
    :func:`read_config`. Otherwise the working directory and each of its
    parents are tried in turn and the nearest ``config.ini`` is used.

    Raises:
        FileNotFoundError: If neither the working directory nor any parent
            holds a ``config.ini``; the caller then falls back to defaults.
    """

    if explicit_path:
        return explicit_path

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate

    raise FileNotFoundError(f"Configuration file not found: {CONFIG_FILE_NAME}")


def read_config(config_path: Path) -> configparser.ConfigParser:
    """Load ``config.ini`` and return a populated ``ConfigParser`` instance.

    Args:
        config_path (Path): Path to the configuration file, relative or
            absolute. User home references (``~``) are expanded.

    Returns:
        configparser.ConfigParser: Parser holding the raw configuration data.
            Required entries are checked later by :func:`parse_settings`.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist after expansion and
            resolution.
    """

    config_path = config_path.expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser()
    parser.read(config_path, encoding="utf-8")
    return parser


def parse_settings(parser: configparser.ConfigParser, *, base_path: Optional[Path] = None) -> ConfigSettings:
    """Convert a ``ConfigParser`` into strongly typed :class:`ConfigSettings`.

    ``[Store] Name`` is mandatory. Capacities, the seed-data switch and the
    export path fall back to the built-in defaults when absent. A relative
    ``ExportFile`` is anchored at ``base_path`` (the config file's directory
    in practice) or the current working directory.

    Args:
        parser (configparser.ConfigParser): Parsed configuration data.
        base_path (Path | None): Directory used to resolve a relative
            ``ExportFile``.

    Returns:
        ConfigSettings: Immutable settings container.

    Raises:
        KeyError: If ``[Store] Name`` is missing.
        ValueError: If a capacity is not a positive integer, the store name is
            blank, or ``LoadSeedData`` is not a boolean.
    """

    try:
        store_name = parser.get("Store", "Name").strip()
    except (configparser.NoSectionError, configparser.NoOptionError) as exc:
        raise KeyError(f"Missing required configuration entry: {exc}") from exc
    if not store_name:
        raise ValueError("Store name cannot be empty")

    max_items = parser.getint("Capacity", "MaxItems", fallback=DEFAULT_MAX_ITEMS)
    max_transactions = parser.getint("Capacity", "MaxTransactions", fallback=DEFAULT_MAX_TRANSACTIONS)
    for option, value in (("MaxItems", max_items), ("MaxTransactions", max_transactions)):
        if value <= 0:
            raise ValueError(f"Capacity {option} must be a positive integer, got {value}")

    load_seed_data = parser.getboolean("Session", "LoadSeedData", fallback=True)
    export_raw = parser.get("Session", "ExportFile", fallback=DEFAULT_EXPORT_FILE)

    return ConfigSettings(
        store_name=store_name,
        max_items=max_items,
        max_transactions=max_transactions,
        load_seed_data=load_seed_data,
        export_file=_resolve_against(Path(export_raw), base_path),
    )


def default_settings(*, base_path: Optional[Path] = None) -> ConfigSettings:
    """Settings used when no ``config.ini`` can be found."""

    return ConfigSettings(
        store_name=DEFAULT_STORE_NAME,
        max_items=DEFAULT_MAX_ITEMS,
        max_transactions=DEFAULT_MAX_TRANSACTIONS,
        load_seed_data=True,
        export_file=_resolve_against(Path(DEFAULT_EXPORT_FILE), base_path),
    )


def _resolve_against(path: Path, base_path: Optional[Path]) -> Path:
    path = path.expanduser()
    if not path.is_absolute():
        path = (base_path if base_path is not None else Path.cwd()) / path
    return path.resolve()


def serialize_product(record: ProductRecord) -> list[object]:
    """Flatten a product into ``[ID, Name, Category, Quantity, Price, Active]``."""

    return [
        record.product_id,
        record.name,
        record.category,
        record.quantity,
        record.price,
        record.is_active,
    ]


def serialize_category(record: CategoryRecord) -> list[object]:
    return [record.name, record.description, record.is_active]


def serialize_supplier(record: SupplierRecord) -> list[object]:
    return [record.name, record.contact, record.is_active]


def serialize_transaction(record: TransactionRecord) -> list[object]:
    """Flatten a transaction into the export column order.

    Monetary fields stay :class:`~decimal.Decimal` so the workbook keeps the
    unrounded amounts.
    """

    return [
        record.transaction_id,
        record.product_id,
        record.product_name,
        record.quantity,
        record.unit_price,
        record.discount,
        record.total,
        record.date,
        record.time,
    ]
