"""Unit tests for console input parsing and the text renderers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from smart_inventory import console as console_module
from smart_inventory import core_logic
from smart_inventory.constants import MenuSection
from smart_inventory.console import InputFormatError


class _TtyBuffer:
    def __init__(self) -> None:
        self.chunks: list[str] = []

    def write(self, text: str) -> int:
        self.chunks.append(text)
        return len(text)

    def flush(self) -> None:
        pass

    def isatty(self) -> bool:
        return True


def test_read_int_parses_stripped_line(console_factory):
    console, scripted, _ = console_factory([" 42 "])

    assert console.read_int("Enter Product ID: ", "ID") == 42
    assert scripted.prompts == ["Enter Product ID: "]


def test_read_int_rejects_text(console_factory):
    console, _, _ = console_factory(["abc"])

    with pytest.raises(InputFormatError, match="Invalid input! ID must be a number."):
        console.read_int("Enter Product ID: ", "ID")


@pytest.mark.parametrize("raw", ["12.5.1", "", "nan", "inf"])
def test_read_decimal_rejects_non_numbers(console_factory, raw):
    console, _, _ = console_factory([raw])

    with pytest.raises(InputFormatError, match="Price must be a number"):
        console.read_decimal("Enter Price: $", "Price")


def test_read_decimal_keeps_exact_value(console_factory):
    console, _, _ = console_factory(["19.99"])

    assert console.read_decimal("Enter Price: $", "Price") == Decimal("19.99")


def test_read_line_raises_eof_when_input_closed(console_factory):
    console, _, _ = console_factory([])

    with pytest.raises(EOFError):
        console.read_line("Enter your choice: ")


def test_messages_carry_severity_prefix(console_factory):
    console, _, output = console_factory()

    console.success("Saved")
    console.error("Broken")
    console.warning("Careful")

    text = output.getvalue()
    assert "[SUCCESS] Saved" in text
    assert "[ERROR] Broken" in text
    assert "[WARNING] Careful" in text
    assert console_module.CLEAR_SEQUENCE not in text


def test_clear_only_writes_escape_codes_to_a_terminal():
    buffer = _TtyBuffer()
    console = console_module.Console(input_func=lambda prompt: "", output=buffer)

    console.error("Broken")
    console.warning("Careful")

    assert buffer.chunks.count(console_module.CLEAR_SEQUENCE) == 1


def test_format_money_rounds_to_cents():
    assert console_module.format_money(Decimal("539.994")) == "$539.99"
    assert console_module.format_money(Decimal("4859.946")) == "$4859.95"


def test_render_menu_groups_entries_by_section(console_factory, command_table):
    console, _, output = console_factory()

    console_module.render_menu(console, "Test Store Management System", command_table.values())

    text = output.getvalue()
    assert "TEST STORE MANAGEMENT SYSTEM" in text
    for section in MenuSection:
        assert section.value in text
    assert text.index(MenuSection.CATEGORIES.value) < text.index(MenuSection.REPORTS.value)
    assert " 9. Purchase Product" in text
    assert "16. Export Session Workbook" in text
    assert " 0. Exit" in text


def test_render_products_shows_status_column(console_factory, runtime_context):
    console, _, output = console_factory()

    console_module.render_products(console, core_logic.list_products(runtime_context))

    lines = output.getvalue().splitlines()
    laptop = next(line for line in lines if "Laptop" in line)
    keyboard = next(line for line in lines if "Keyboard" in line)
    assert "$899.99" in laptop and laptop.rstrip().endswith("OK")
    assert keyboard.rstrip().endswith("LOW")


def test_render_product_details_uses_full_status(console_factory, runtime_context):
    console, _, output = console_factory()

    console_module.render_product_details(console, core_logic.get_product(runtime_context, 5))

    text = output.getvalue()
    assert "Jeans" in text
    assert "LOW STOCK" in text


def test_render_low_stock_alert_is_silent_when_empty(console_factory):
    console, _, output = console_factory()

    console_module.render_low_stock_alert(console, [])

    assert output.getvalue() == ""


def test_render_invoice_with_discount(console_factory, runtime_context):
    console, _, output = console_factory()
    receipt = core_logic.purchase_product(runtime_context, core_logic.PurchaseCommand("Laptop", 6))

    console_module.render_invoice(console, receipt)

    text = output.getvalue()
    assert "Transaction ID: 1" in text
    assert "Subtotal: $5399.94" in text
    assert "Discount (10%): -$539.99" in text
    assert "TOTAL: $4859.95" in text
    assert "[WARNING] Bulk discount applied!" in text
    assert "Low stock alert for this product!" not in text


def test_render_invoice_without_discount_omits_discount_line(console_factory, runtime_context):
    console, _, output = console_factory()
    receipt = core_logic.purchase_product(runtime_context, core_logic.PurchaseCommand("Keyboard", 1))

    console_module.render_invoice(console, receipt)

    text = output.getvalue()
    assert "Discount (10%)" not in text
    assert "TOTAL: $49.99" in text
    assert "[WARNING] Low stock alert for this product!" in text


def test_render_invoice_when_history_full(console_factory, settings_factory):
    context = core_logic.build_runtime_context(settings_factory(max_transactions=1))
    core_logic.purchase_product(context, core_logic.PurchaseCommand("Mouse", 1))
    receipt = core_logic.purchase_product(context, core_logic.PurchaseCommand("Mouse", 1))
    console, _, output = console_factory()

    console_module.render_invoice(console, receipt)

    text = output.getvalue()
    assert "Transaction ID: not recorded" in text
    assert "[WARNING] Transaction history limit reached!" in text


def test_render_transaction_history_shows_revenue(console_factory, runtime_context):
    core_logic.purchase_product(runtime_context, core_logic.PurchaseCommand("Mouse", 1))
    core_logic.purchase_product(runtime_context, core_logic.PurchaseCommand("Keyboard", 2))
    console, _, output = console_factory()

    console_module.render_transaction_history(console, core_logic.transaction_history(runtime_context))

    text = output.getvalue()
    assert text.index("Keyboard") < text.index("Mouse")
    assert "Total Revenue: $119.97" in text


def test_render_inventory_report_lists_counts(console_factory, runtime_context):
    console, _, output = console_factory()

    console_module.render_inventory_report(console, core_logic.build_inventory_report(runtime_context))

    text = output.getvalue()
    assert "Total Products:        5" in text
    assert "Low Stock Products:    2" in text
    assert "Total Inventory Value: $16328.30" in text
    assert "Total Categories:      3" in text
    assert "Total Suppliers:       2" in text


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (Decimal("0.125"), "$0.13"),
        (Decimal("0.135"), "$0.14"),
        (Decimal("0"), "$0.00"),
        (Decimal("1E+3"), "$1000.00"),
    ],
)
def test_format_money_rounds_half_cents_up(amount, expected):
    assert console_module.format_money(amount) == expected


def test_format_money_handles_amounts_beyond_default_precision():
    amount = Decimal(10) ** 40

    assert console_module.format_money(amount) == "$1" + "0" * 40 + ".00"
