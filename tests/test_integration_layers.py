"""Integration tests describing end-to-end Smart Inventory sessions.

Each scenario drives the real menu loop with a scripted console, so the
console, CLI, business logic and data access layers all collaborate as
they do in an interactive session.
"""

from __future__ import annotations

from decimal import Decimal

from smart_inventory import cli, core_logic

PAUSE = ""
EXIT = "0"


def _run_session(context, console_factory, command_table, *lines: str) -> str:
    console, _, output = console_factory(list(lines))
    assert cli.run_loop(context, console, command_table) == 0
    return output.getvalue()


def test_sale_lifecycle_flow(runtime_context, console_factory, command_table):
    """Buy, report and review history in one session."""

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "9", "Laptop", "6", PAUSE,
        "9", "Keyboard", "5", PAUSE,
        "9", "Laptop", "4", PAUSE,
        "10", PAUSE,
        "14", PAUSE,
        EXIT,
    )

    assert "Discount (10%): -$539.99" in text
    assert "[ERROR] Insufficient stock!" in text
    assert "Available: 3" in text
    assert "TOTAL: $3599.96" in text
    assert "Total Revenue: $8459.91" in text
    assert "Total Transactions:    2" in text

    laptop = core_logic.get_product(runtime_context, 1)
    assert laptop.quantity == 5
    assert core_logic.find_product_by_name(runtime_context, "Keyboard").quantity == 3
    history = core_logic.transaction_history(runtime_context)
    assert [entry.total for entry in history.entries] == [Decimal("3599.96"), Decimal("4859.946")]


def test_catalog_management_flow(runtime_context, console_factory, command_table):
    """Create a category and product, then retire them in dependency order."""

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "1", "Toys", "Games and toys", PAUSE,
        "4", "10", "Yo-yo", "Toys", "20", "3.25", PAUSE,
        "3", "Toys", PAUSE,
        "6", "10", PAUSE,
        "3", "Toys", PAUSE,
        "3", "Toys", PAUSE,
        "4", "10", "Kite", "Toys", "2", "8.00", PAUSE,
        EXIT,
    )

    assert text.count("[SUCCESS] Category added successfully!") == 1
    assert "[ERROR] Cannot delete! Category is in use by products." in text
    assert "[SUCCESS] Product deleted successfully!" in text
    assert "[SUCCESS] Category deleted successfully!" in text
    assert "[ERROR] Category not found!" in text
    assert "[ERROR] Category does not exist! Please create it first." in text
    assert [product.product_id for product in core_logic.list_products(runtime_context)] == [1, 2, 3, 4, 5]


def test_reused_identifier_flow(runtime_context, console_factory, command_table):
    """A deleted product id can be given to a new product."""

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "6", "2", PAUSE,
        "7", "2", PAUSE,
        "4", "2", "Trackpad", "Electronics", "12", "59.00", PAUSE,
        "7", "2", PAUSE,
        EXIT,
    )

    assert "[ERROR] Product not found!" in text
    assert "Trackpad" in text
    assert core_logic.get_product(runtime_context, 2).name == "Trackpad"


def test_malformed_input_returns_to_menu(runtime_context, console_factory, command_table):
    """Non-numeric fields abort the action without touching the store."""

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "4", "abc", PAUSE,
        "9", "Mouse", "lots", PAUSE,
        "5", "1", "Laptop", "Electronics", "15", "cheap", PAUSE,
        EXIT,
    )

    assert "[ERROR] Invalid input! ID must be a number." in text
    assert "[ERROR] Invalid input! Quantity must be a number." in text
    assert "[ERROR] Invalid input! Price must be a number." in text
    assert core_logic.get_product(runtime_context, 2).quantity == 50
    assert core_logic.get_product(runtime_context, 1).price == Decimal("899.99")
    assert len(runtime_context.store.transactions) == 0


def test_supplier_and_alert_flow(runtime_context, console_factory, command_table):
    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "11", "Food Direct", "sales@food.example", PAUSE,
        "11", "Food Direct", PAUSE,
        "12", PAUSE,
        "13", "Fashion World", PAUSE,
        "15", PAUSE,
        "8", PAUSE,
        EXIT,
    )

    assert "[ERROR] Supplier already exists!" in text
    assert "sales@food.example" in text
    assert "[SUCCESS] Supplier deleted successfully!" in text
    assert text.count("LOW STOCK ALERT!") == 2
    assert [supplier.name for supplier in core_logic.list_suppliers(runtime_context)] == ["TechSupply Co", "Food Direct"]


def test_session_export_flow(runtime_context, console_factory, command_table, tmp_path):
    destination = tmp_path / "exports.xlsx"

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "9", "Mouse", "2", PAUSE,
        "16", str(destination), PAUSE,
        "16", str(tmp_path / "nowhere" / "out.xlsx"), PAUSE,
        EXIT,
    )

    assert destination.exists()
    assert "[SUCCESS] Session exported" in text
    assert "[ERROR] Unable to write file" in text


def test_extreme_price_is_rejected_and_report_still_works(runtime_context, console_factory, command_table):
    """An out-of-range price never reaches the store, so reports keep working."""

    text = _run_session(
        runtime_context,
        console_factory,
        command_table,
        "4", "60", "Widget", "Electronics", "10", "1e999999", PAUSE,
        "14", PAUSE,
        EXIT,
    )

    assert "[ERROR] Invalid price! Must not exceed $1000000.00." in text
    assert "Unexpected error" not in text
    assert "Total Products:        5" in text
    assert "Total Inventory Value: $16328.30" in text
