"""Write a snapshot of the running session to an Excel workbook.

The export is one-way: the program never loads a workbook, so every run
still starts from the seed data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

import openpyxl
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from . import data_manager
from .constants import SheetName

SHEET_COLUMNS: Mapping[str, Sequence[str]] = {
    SheetName.PRODUCTS.value: [
        "ProductID",
        "Name",
        "Category",
        "Quantity",
        "Price",
        "IsActive",
    ],
    SheetName.CATEGORIES.value: [
        "Name",
        "Description",
        "IsActive",
    ],
    SheetName.SUPPLIERS.value: [
        "Name",
        "Contact",
        "IsActive",
    ],
    SheetName.TRANSACTIONS.value: [
        "TransactionID",
        "ProductID",
        "ProductName",
        "Quantity",
        "UnitPrice",
        "Discount",
        "Total",
        "Date",
        "Time",
    ],
}


MONEY_COLUMNS = frozenset({"Price", "UnitPrice", "Discount", "Total"})
MONEY_FORMAT = "#,##0.00"


def _sheet_rows(store: data_manager.RecordStore) -> Mapping[str, Iterable[Sequence[object]]]:
    def rows(records: Iterable[object], serialize: Callable[[object], list[object]]) -> list[list[object]]:
        return [serialize(record) for record in records]

    return {
        SheetName.PRODUCTS.value: rows(store.products, data_manager.serialize_product),  # type: ignore[arg-type]
        SheetName.CATEGORIES.value: rows(store.categories, data_manager.serialize_category),  # type: ignore[arg-type]
        SheetName.SUPPLIERS.value: rows(store.suppliers, data_manager.serialize_supplier),  # type: ignore[arg-type]
        SheetName.TRANSACTIONS.value: rows(store.transactions, data_manager.serialize_transaction),  # type: ignore[arg-type]
    }


def _write_sheet(worksheet: Worksheet, columns: Sequence[str], rows: Iterable[Sequence[object]]) -> None:
    worksheet.append(list(columns))
    header_font = Font(bold=True)
    for cell in worksheet[1]:
        cell.font = header_font
    worksheet.freeze_panes = "A2"

    money_indexes = [index for index, name in enumerate(columns) if name in MONEY_COLUMNS]
    for row in rows:
        worksheet.append(list(row))
        for index in money_indexes:
            worksheet.cell(row=worksheet.max_row, column=index + 1).number_format = MONEY_FORMAT


def create_session_workbook(
    store: data_manager.RecordStore,
    destination: Path,
    *,
    sheet_columns: Mapping[str, Sequence[str]] = SHEET_COLUMNS,
    overwrite: bool = False,
) -> Path:
    """Write every record of ``store`` (inactive ones included) to ``destination``.

    Each sheet gets a bold, frozen header row followed by one row per record
    in insertion order. Money cells keep their full precision and are only
    formatted to two decimals. When ``overwrite`` is ``False`` (the default)
    this function raises ``FileExistsError`` if the target already exists.
    """

    destination = Path(destination).expanduser().resolve()
    if destination.exists() and not overwrite:
        raise FileExistsError(f"Refusing to overwrite existing workbook: {destination}")

    workbook = openpyxl.Workbook()
    default_sheet = workbook.active
    sheet_rows = _sheet_rows(store)
    for sheet_name, columns in sheet_columns.items():
        _write_sheet(workbook.create_sheet(title=sheet_name), columns, sheet_rows.get(sheet_name, ()))
    if default_sheet is not None:
        workbook.remove(default_sheet)

    workbook.save(destination)
    return destination
