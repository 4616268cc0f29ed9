"""Command-line entry point and interactive menu for Smart Inventory.

Start-up is plain argparse wiring. After that the program runs a menu loop
that reads one choice at a time and dispatches it through a command table
of :class:`CommandSpec` entries. Handlers only translate console input into
business-layer calls and render the results; every rule lives in
:mod:`smart_inventory.core_logic`.
"""

from __future__ import annotations

import argparse
import configparser
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence

from . import core_logic, log
from .console import (
    Console,
    InputFormatError,
    format_money,
    render_categories,
    render_farewell,
    render_inventory_report,
    render_invoice,
    render_low_stock_alert,
    render_menu,
    render_product_details,
    render_products,
    render_suppliers,
    render_transaction_history,
)
from .constants import LOW_STOCK_THRESHOLD, MenuSection

EXIT_CHOICE = 0


@dataclass(frozen=True)
class CommandSpec:
    """Describe one numbered entry of the main menu."""

    key: str
    label: str
    section: MenuSection
    execute: Callable[[core_logic.RuntimeContext, Console], None]


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="smart-inventory",
        description="Interactive inventory, sales and supplier tracking for a single store.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional path to config.ini (defaults to searching upward from the working directory).",
    )
    return parser


def menu_commands() -> List[CommandSpec]:
    """Return the main menu entries in display order."""
    return [
        CommandSpec("1", "Add Category", MenuSection.CATEGORIES, run_add_category),
        CommandSpec("2", "View All Categories", MenuSection.CATEGORIES, run_view_categories),
        CommandSpec("3", "Delete Category", MenuSection.CATEGORIES, run_delete_category),
        CommandSpec("4", "Add Product", MenuSection.PRODUCTS, run_add_product),
        CommandSpec("5", "Update Product", MenuSection.PRODUCTS, run_update_product),
        CommandSpec("6", "Delete Product", MenuSection.PRODUCTS, run_delete_product),
        CommandSpec("7", "Search Product", MenuSection.PRODUCTS, run_search_product),
        CommandSpec("8", "View All Products", MenuSection.PRODUCTS, run_view_products),
        CommandSpec("9", "Purchase Product", MenuSection.SALES, run_purchase_product),
        CommandSpec("10", "View Transaction History", MenuSection.SALES, run_transaction_history),
        CommandSpec("11", "Add Supplier", MenuSection.SUPPLIERS, run_add_supplier),
        CommandSpec("12", "View All Suppliers", MenuSection.SUPPLIERS, run_view_suppliers),
        CommandSpec("13", "Delete Supplier", MenuSection.SUPPLIERS, run_delete_supplier),
        CommandSpec("14", "Inventory Report", MenuSection.REPORTS, run_inventory_report),
        CommandSpec("15", "Check Low Stock Alerts", MenuSection.REPORTS, run_low_stock_alert),
        CommandSpec("16", "Export Session Workbook", MenuSection.REPORTS, run_export_session),
    ]


def build_command_table(
    specs: Iterable[CommandSpec],
) -> MutableMapping[str, CommandSpec]:
    """Build an index of command specifications keyed by menu choice."""
    table: Dict[str, CommandSpec] = {}
    for spec in specs:
        if spec.key in table:
            raise ValueError(f"Duplicate menu choice: {spec.key}")
        if spec.key == str(EXIT_CHOICE):
            raise ValueError(f"Menu choice {EXIT_CHOICE} is reserved for exit")
        table[spec.key] = spec
    return table


def load_runtime_context(config_path: Optional[Path] = None) -> core_logic.RuntimeContext:
    """Resolve the runtime context for the session."""
    return core_logic.load_runtime_context(config_path)


def dispatch_command(
    context: core_logic.RuntimeContext,
    console: Console,
    choice: str,
    command_table: Mapping[str, CommandSpec],
) -> None:
    """Run the handler registered for ``choice``.

    Raises:
        KeyError: If no command is registered for ``choice``.
    """
    spec = command_table.get(choice)
    if spec is None:
        raise KeyError(f"Unknown menu choice: {choice}")
    log.debug("Dispatching menu choice %s (%s)", choice, spec.label)
    spec.execute(context, console)


# ---------------------------------------------------------------------------
# Category handlers
# ---------------------------------------------------------------------------


def run_add_category(context: core_logic.RuntimeContext, console: Console) -> None:
    core_logic.ensure_capacity(context.store.categories)
    console.clear()
    console.header("ADD NEW CATEGORY")
    name = core_logic.require_text(console.read_line("Enter Category Name: "), "Category name cannot be empty!")
    core_logic.require_new_category_name(context, name)
    description = console.read_line("Enter Description: ")
    core_logic.add_category(context, name=name, description=description)
    console.success("Category added successfully!")


def run_view_categories(context: core_logic.RuntimeContext, console: Console) -> None:
    categories = core_logic.list_categories(context)
    if not categories:
        console.error("No categories available!")
        return
    console.clear()
    render_categories(console, categories)


def run_delete_category(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("DELETE CATEGORY")
    name = console.read_line("Enter Category Name: ")
    core_logic.delete_category(context, name)
    console.success("Category deleted successfully!")


# ---------------------------------------------------------------------------
# Product handlers
# ---------------------------------------------------------------------------


def run_add_product(context: core_logic.RuntimeContext, console: Console) -> None:
    core_logic.ensure_capacity(context.store.products)
    console.clear()
    console.header("ADD NEW PRODUCT")
    product_id = console.read_int("Enter Product ID: ", "ID")
    name = core_logic.require_text(console.read_line("Enter Product Name: "), "Product name cannot be empty!")
    category = core_logic.require_text(console.read_line("Enter Category: "), "Category cannot be empty!")
    quantity = console.read_int("Enter Quantity: ", "Quantity")
    price = console.read_decimal("Enter Price: $", "Price")

    product = core_logic.add_product(
        context,
        product_id=product_id,
        name=name,
        category=category,
        quantity=quantity,
        price=price,
    )
    console.success("Product added successfully!")
    if product.quantity <= LOW_STOCK_THRESHOLD:
        console.warning("This product has low stock!")


def run_update_product(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("UPDATE PRODUCT")
    product_id = console.read_int("Enter Product ID to update: ", "ID")
    product = core_logic.get_product(context, product_id)

    console.write("\nCurrent Details:")
    console.write(f"Name: {product.name}")
    console.write(f"Category: {product.category}")
    console.write(f"Quantity: {product.quantity}")
    console.write(f"Price: {format_money(product.price)}")

    name = core_logic.require_text(console.read_line("\nEnter New Name: "), "Product name cannot be empty!")
    category = core_logic.require_text(console.read_line("Enter New Category: "), "Category cannot be empty!")
    core_logic.require_existing_category(context, category)
    quantity = console.read_int("Enter New Quantity: ", "Quantity")
    price = console.read_decimal("Enter New Price: $", "Price")

    core_logic.update_product(
        context,
        product_id,
        name=name,
        category=category,
        quantity=quantity,
        price=price,
    )
    console.success("Product updated successfully!")


def run_delete_product(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("DELETE PRODUCT")
    product_id = console.read_int("Enter Product ID to delete: ", "ID")
    core_logic.delete_product(context, product_id)
    console.success("Product deleted successfully!")


def run_search_product(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("SEARCH PRODUCT")
    product_id = console.read_int("Enter Product ID: ", "ID")
    product = core_logic.get_product(context, product_id)
    console.clear()
    render_product_details(console, product)


def run_view_products(context: core_logic.RuntimeContext, console: Console) -> None:
    products = core_logic.list_products(context)
    if not products:
        console.error("No products available!")
        return
    console.clear()
    render_products(console, products)
    render_low_stock_alert(console, core_logic.low_stock_alert(context))


# ---------------------------------------------------------------------------
# Sales handlers
# ---------------------------------------------------------------------------


def run_purchase_product(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("PURCHASE PRODUCT")
    name = core_logic.require_text(console.read_line("Enter Product Name: "), "Product name cannot be empty!")
    core_logic.find_product_by_name(context, name)
    quantity = console.read_int("Enter Quantity to Purchase: ", "Quantity")

    receipt = core_logic.purchase_product(
        context,
        core_logic.PurchaseCommand(product_name=name, quantity=quantity),
    )
    console.clear()
    render_invoice(console, receipt)


def run_transaction_history(context: core_logic.RuntimeContext, console: Console) -> None:
    history = core_logic.transaction_history(context)
    if not history.entries:
        console.error("No transactions recorded!")
        return
    console.clear()
    render_transaction_history(console, history)


# ---------------------------------------------------------------------------
# Supplier handlers
# ---------------------------------------------------------------------------


def run_add_supplier(context: core_logic.RuntimeContext, console: Console) -> None:
    core_logic.ensure_capacity(context.store.suppliers)
    console.clear()
    console.header("ADD NEW SUPPLIER")
    name = core_logic.require_text(console.read_line("Enter Supplier Name: "), "Supplier name cannot be empty!")
    core_logic.require_new_supplier_name(context, name)
    contact = console.read_line("Enter Contact Info: ")
    core_logic.add_supplier(context, name=name, contact=contact)
    console.success("Supplier added successfully!")


def run_view_suppliers(context: core_logic.RuntimeContext, console: Console) -> None:
    suppliers = core_logic.list_suppliers(context)
    if not suppliers:
        console.error("No suppliers available!")
        return
    console.clear()
    render_suppliers(console, suppliers)


def run_delete_supplier(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("DELETE SUPPLIER")
    name = console.read_line("Enter Supplier Name: ")
    core_logic.delete_supplier(context, name)
    console.success("Supplier deleted successfully!")


# ---------------------------------------------------------------------------
# Report handlers
# ---------------------------------------------------------------------------


def run_inventory_report(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    render_inventory_report(console, core_logic.build_inventory_report(context))


def run_low_stock_alert(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    alerts = core_logic.low_stock_alert(context)
    if not alerts:
        console.write("\nAll products are above the low stock threshold.")
        return
    render_low_stock_alert(console, alerts)


def run_export_session(context: core_logic.RuntimeContext, console: Console) -> None:
    console.clear()
    console.header("EXPORT SESSION WORKBOOK")
    default = context.settings.export_file
    raw = console.read_line(f"Enter file path [{default}]: ").strip()
    written = core_logic.export_session(context, Path(raw) if raw else None)
    console.success(f"Session exported to '{written}'.")


# ---------------------------------------------------------------------------
# Loop and error handling
# ---------------------------------------------------------------------------


def handle_menu_error(console: Console, error: Exception) -> None:
    """Report a failed menu action; the loop carries on afterwards."""
    if isinstance(error, core_logic.InsufficientStockError):
        console.error(str(error))
        console.write(f"Available: {error.available}")
        console.write(f"Requested: {error.requested}")
        return
    if isinstance(error, (core_logic.BusinessRuleViolation, InputFormatError)):
        console.error(str(error))
        return
    if isinstance(error, OSError):
        log.error("File operation failed: %s", error)
        console.error(f"Unable to write file: {error}")
        return
    log.error("Unexpected error during menu action: %s", error, exc_info=error)
    console.error(f"Unexpected error: {error}")


def run_menu_action(
    context: core_logic.RuntimeContext,
    console: Console,
    choice: str,
    command_table: Mapping[str, CommandSpec],
) -> None:
    """Dispatch ``choice`` and report any failure without leaving the loop."""
    try:
        dispatch_command(context, console, choice, command_table)
    except EOFError:
        raise
    except Exception as error:
        handle_menu_error(console, error)


def run_loop(
    context: core_logic.RuntimeContext,
    console: Console,
    command_table: Mapping[str, CommandSpec],
) -> int:
    """Show the menu and handle choices until the user exits.

    Closed input ends the session the same way as choosing ``0``.

    Returns:
        int: Always ``0``.
    """
    title = f"{context.settings.store_name} Management System"
    try:
        while True:
            render_menu(console, title, command_table.values())
            raw = console.read_line("Enter your choice: ").strip()
            try:
                choice = int(raw)
            except ValueError:
                console.error("Invalid input! Please enter a number.")
            else:
                if choice == EXIT_CHOICE:
                    console.clear()
                    render_farewell(console, context.settings.store_name)
                    log.info("Session ended by user")
                    return 0
                key = str(choice)
                if key in command_table:
                    run_menu_action(context, console, key, command_table)
                else:
                    console.error("Invalid choice! Please try again.")
            console.pause()
            console.clear()
    except EOFError:
        log.info("Input closed; ending session")
        console.write()
        return 0


def handle_cli_error(error: Exception) -> int:
    """Convert start-up failures into exit codes."""
    if isinstance(error, (FileNotFoundError, KeyError, ValueError, configparser.Error)):
        log.error("Configuration error: %s", error)
        return 2
    log.error("%s", error)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point that loads the session and runs the menu loop."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        context = load_runtime_context(getattr(args, "config", None))
    except Exception as error:
        return handle_cli_error(error)
    command_table = build_command_table(menu_commands())
    return run_loop(context, Console(), command_table)
