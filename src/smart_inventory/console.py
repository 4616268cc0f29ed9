"""Terminal input and output for the interactive menu.

:class:`Console` reads whole lines from an input callable and writes to a
text stream, which keeps the menu scriptable in tests. The ``render_*``
functions turn business-layer results into tables and blocks of text; they
never change state.
"""

from __future__ import annotations

import sys
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from itertools import groupby
from typing import Callable, Iterable, Optional, Sequence, TextIO

from tabulate import tabulate

from . import core_logic, data_manager
from .constants import MessageLevel

RULE_WIDTH = 64
WIDE_RULE_WIDTH = 80
CLEAR_SEQUENCE = "\033[2J\033[H"
CENT = Decimal("0.01")


class InputFormatError(Exception):
    """Raised when a numeric field receives text that is not a number."""


class Console:
    """Line-oriented prompt/response surface.

    Args:
        input_func: Called with the prompt text and returns the typed line.
            Raises :class:`EOFError` when input is exhausted.
        output: Stream for everything except the prompts themselves.
    """

    def __init__(self, input_func: Callable[[str], str] = input, output: Optional[TextIO] = None) -> None:
        self._input = input_func
        self._output = output if output is not None else sys.stdout

    def write(self, text: str = "") -> None:
        print(text, file=self._output)

    def rule(self, char: str = "-", width: int = RULE_WIDTH) -> None:
        self.write(char * width)

    def header(self, title: str) -> None:
        self.write()
        self.rule("=")
        self.write(f"  {title}")
        self.rule("=")

    def clear(self) -> None:
        """Clear the terminal; a no-op when output is not a TTY."""
        isatty = getattr(self._output, "isatty", None)
        if isatty is not None and isatty():
            self._output.write(CLEAR_SEQUENCE)
            self._output.flush()

    def message(self, level: MessageLevel, text: str) -> None:
        # Success and error replace the screen; warnings stack below it.
        if level is not MessageLevel.WARNING:
            self.clear()
        self.write(f"\n[{level.value}] {text}")

    def success(self, text: str) -> None:
        self.message(MessageLevel.SUCCESS, text)

    def error(self, text: str) -> None:
        self.message(MessageLevel.ERROR, text)

    def warning(self, text: str) -> None:
        self.message(MessageLevel.WARNING, text)

    def read_line(self, prompt: str) -> str:
        return self._input(prompt)

    def read_int(self, prompt: str, field_label: str) -> int:
        """Read an integer field.

        Raises:
            InputFormatError: If the line is not an integer.
        """
        raw = self.read_line(prompt).strip()
        try:
            return int(raw)
        except ValueError as exc:
            raise InputFormatError(f"Invalid input! {field_label} must be a number.") from exc

    def read_decimal(self, prompt: str, field_label: str) -> Decimal:
        """Read a finite decimal field.

        Raises:
            InputFormatError: If the line is not a finite number.
        """
        raw = self.read_line(prompt).strip()
        try:
            value = Decimal(raw)
        except InvalidOperation as exc:
            raise InputFormatError(f"Invalid input! {field_label} must be a number.") from exc
        if not value.is_finite():
            raise InputFormatError(f"Invalid input! {field_label} must be a number.")
        return value

    def pause(self) -> None:
        self.read_line("\nPress Enter to continue...")


def format_money(amount: Decimal) -> str:
    """Render ``amount`` as dollars, rounding half-cents up."""
    with localcontext() as context:
        context.prec = max(context.prec, amount.adjusted() + 3)
        return f"${amount.quantize(CENT, rounding=ROUND_HALF_UP)}"


def _table(rows: Iterable[Sequence[object]], headers: Sequence[str]) -> str:
    return tabulate(list(rows), headers=list(headers), tablefmt="simple", disable_numparse=True)


def render_menu(console: Console, title: str, commands: Iterable[object], exit_label: str = "Exit") -> None:
    """Print the main menu grouped by section.

    ``commands`` are objects with ``key``, ``label`` and ``section``
    attributes, already in display order.
    """
    console.write()
    console.rule("=")
    console.write(f"{title.upper():^{RULE_WIDTH}}")
    console.rule("=")
    for index, (section, entries) in enumerate(groupby(commands, key=lambda spec: spec.section)):
        if index:
            console.rule()
        console.write(f"  {section.value}")
        for spec in entries:
            console.write(f"   {spec.key:>2}. {spec.label}")
    console.rule()
    console.write(f"   {'0':>2}. {exit_label}")
    console.rule("=")


def render_categories(console: Console, categories: Sequence[data_manager.CategoryRecord]) -> None:
    console.header("ALL CATEGORIES")
    console.write(_table(((category.name, category.description) for category in categories), ("Name", "Description")))
    console.rule()


def render_suppliers(console: Console, suppliers: Sequence[data_manager.SupplierRecord]) -> None:
    console.header("ALL SUPPLIERS")
    console.write(_table(((supplier.name, supplier.contact) for supplier in suppliers), ("Name", "Contact")))
    console.rule()


def render_products(console: Console, products: Sequence[data_manager.ProductRecord]) -> None:
    console.header("ALL PRODUCTS")
    rows = (
        (
            product.product_id,
            product.name,
            product.category,
            product.quantity,
            format_money(product.price),
            core_logic.classify_stock(product.quantity).short_label,
        )
        for product in products
    )
    console.write(_table(rows, ("ID", "Name", "Category", "Quantity", "Price", "Status")))
    console.rule()


def render_product_details(console: Console, product: data_manager.ProductRecord) -> None:
    console.header("PRODUCT DETAILS")
    console.write(f"{'ID:':<14}{product.product_id}")
    console.write(f"{'Name:':<14}{product.name}")
    console.write(f"{'Category:':<14}{product.category}")
    console.write(f"{'Quantity:':<14}{product.quantity}")
    console.write(f"{'Price:':<14}{format_money(product.price)}")
    console.write(f"{'Status:':<14}{core_logic.classify_stock(product.quantity).value}")
    console.rule("=")


def render_low_stock_alert(console: Console, alerts: Sequence[core_logic.StockAlert]) -> None:
    """Print the alert table; prints nothing when no product is low."""
    if not alerts:
        return
    console.warning("LOW STOCK ALERT!")
    console.rule()
    console.write(
        _table(
            ((alert.product_id, alert.name, alert.quantity, alert.status.value) for alert in alerts),
            ("ID", "Product", "Quantity", "Status"),
        )
    )
    console.rule()


def render_invoice(console: Console, receipt: core_logic.PurchaseReceipt) -> None:
    """Print the invoice block followed by any discount or stock notices."""
    quote = receipt.quote
    transaction_label = "not recorded" if receipt.transaction is None else str(receipt.transaction.transaction_id)

    console.write()
    console.rule("=")
    console.write(f"{'INVOICE':^{RULE_WIDTH}}")
    console.rule("=")
    console.write(f"Transaction ID: {transaction_label}")
    console.write(f"Date: {receipt.date}  Time: {receipt.time}")
    console.rule()
    console.write(
        _table(
            [(receipt.product.name, quote.quantity, format_money(quote.unit_price), format_money(quote.subtotal))],
            ("Product", "Qty", "Unit Price", "Amount"),
        )
    )
    console.rule()
    console.write(_total_line("Subtotal:", format_money(quote.subtotal)))
    if quote.discount_applied:
        console.write(_total_line("Discount (10%):", "-" + format_money(quote.discount)))
    console.write(_total_line("TOTAL:", format_money(quote.total)))
    console.rule("=")

    if quote.discount_applied:
        console.warning("Bulk discount applied!")
    if receipt.history_full:
        console.warning("Transaction history limit reached!")
    if receipt.low_stock:
        console.warning("Low stock alert for this product!")


def _total_line(label: str, amount: str) -> str:
    return f"{label:>46} {amount}"


def render_transaction_history(console: Console, history: core_logic.TransactionHistory) -> None:
    console.header("TRANSACTION HISTORY")
    rows = (
        (
            entry.transaction_id,
            entry.product_name,
            entry.quantity,
            format_money(entry.unit_price),
            format_money(entry.discount),
            format_money(entry.total),
            entry.date,
            entry.time,
        )
        for entry in history.entries
    )
    console.write(_table(rows, ("Trans#", "Product", "Qty", "Unit Price", "Discount", "Total", "Date", "Time")))
    console.rule(width=WIDE_RULE_WIDTH)
    console.write(f"{'Total Revenue:':>68} {format_money(history.total_revenue)}")
    console.rule("=", width=WIDE_RULE_WIDTH)


def render_inventory_report(console: Console, report: core_logic.InventoryReport) -> None:
    statistics = report.statistics
    console.header("INVENTORY REPORT")
    console.write(f"{'Total Products:':<23}{statistics.total_products}")
    console.write(f"{'Low Stock Products:':<23}{statistics.low_stock}")
    console.write(f"{'Out of Stock Products:':<23}{statistics.out_of_stock}")
    console.write(f"{'Total Inventory Value:':<23}{format_money(statistics.total_value)}")
    console.write(f"{'Total Categories:':<23}{report.total_categories}")
    console.write(f"{'Total Suppliers:':<23}{report.total_suppliers}")
    console.write(f"{'Total Transactions:':<23}{report.total_transactions}")
    console.rule("=")


def render_farewell(console: Console, store_name: str) -> None:
    console.write()
    console.rule("=")
    console.write(f"  Thank you for using {store_name} Management System!")
    console.rule("=")
    console.write()
