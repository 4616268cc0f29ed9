"""Shared pytest fixtures and utilities for Smart Inventory tests."""

from __future__ import annotations

import io
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, List

import pytest

# Ensure source packages are importable without installation.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from smart_inventory import cli, core_logic, data_manager  # noqa: E402
from smart_inventory.console import Console  # noqa: E402

_CONFIG_TEMPLATE = (
    "[Store]\n"
    "Name = {store_name}\n\n"
    "[Capacity]\n"
    "MaxItems = {max_items}\n"
    "MaxTransactions = {max_transactions}\n\n"
    "[Session]\n"
    "LoadSeedData = {load_seed_data}\n"
    "ExportFile = {export_file}\n"
)


class ScriptedInput:
    """Input callable that replays ``lines`` and records every prompt.

    Raises ``EOFError`` once the script is exhausted, like ``input()`` does
    on a closed stdin.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(list(lines))
        self.prompts: List[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        try:
            return next(self._lines)
        except StopIteration:
            raise EOFError from None


@pytest.fixture(scope="session", autouse=True)
def _restore_sys_path() -> Iterator[None]:
    """Ensure sys.path modifications are undone after the test session."""

    original = sys.path.copy()
    try:
        yield
    finally:
        sys.path[:] = original


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the repository root path."""

    return PROJECT_ROOT


@pytest.fixture
def config_factory(tmp_path: Path) -> Callable[..., Path]:
    """Provide a callable that writes a ``config.ini`` into a temp folder."""

    def _create_config(
        *,
        store_name: str = "Test Store",
        max_items: int = 100,
        max_transactions: int = 200,
        load_seed_data: str = "yes",
        export_file: str = "session.xlsx",
    ) -> Path:
        config_path = tmp_path / "config.ini"
        config_path.write_text(
            _CONFIG_TEMPLATE.format(
                store_name=store_name,
                max_items=max_items,
                max_transactions=max_transactions,
                load_seed_data=load_seed_data,
                export_file=export_file,
            ),
            encoding="utf-8",
        )
        return config_path

    return _create_config


@pytest.fixture
def config_file(config_factory: Callable[..., Path]) -> Path:
    """Convenience fixture returning a default config path."""

    return config_factory()


@pytest.fixture
def settings(tmp_path: Path) -> data_manager.ConfigSettings:
    """Provide default configuration settings for runtime context tests."""

    return data_manager.ConfigSettings(
        store_name="Test Store",
        max_items=100,
        max_transactions=200,
        load_seed_data=True,
        export_file=tmp_path / "session.xlsx",
    )


@pytest.fixture
def settings_factory(tmp_path: Path) -> Callable[..., data_manager.ConfigSettings]:
    """Build settings with custom capacities or seeding."""

    def _create(
        *,
        max_items: int = 100,
        max_transactions: int = 200,
        load_seed_data: bool = True,
    ) -> data_manager.ConfigSettings:
        return data_manager.ConfigSettings(
            store_name="Test Store",
            max_items=max_items,
            max_transactions=max_transactions,
            load_seed_data=load_seed_data,
            export_file=tmp_path / "session.xlsx",
        )

    return _create


@pytest.fixture
def runtime_context(settings: data_manager.ConfigSettings) -> core_logic.RuntimeContext:
    """Fresh session loaded with the seed data."""

    return core_logic.build_runtime_context(settings)


@pytest.fixture
def empty_context(settings_factory: Callable[..., data_manager.ConfigSettings]) -> core_logic.RuntimeContext:
    """Fresh session without seed data."""

    return core_logic.build_runtime_context(settings_factory(load_seed_data=False))


@pytest.fixture
def set_fixed_datetime(monkeypatch: pytest.MonkeyPatch) -> Callable[[datetime], datetime]:
    """Patch ``core_logic.datetime`` to return a predetermined moment."""

    def _apply(moment: datetime) -> datetime:
        class _FixedDateTime:
            @staticmethod
            def now(tz=None):
                assert tz is None
                return moment

        monkeypatch.setattr(core_logic, "datetime", _FixedDateTime)
        return moment

    return _apply


# ---------------------------------------------------------------------------
# Console fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def console_factory() -> Callable[..., tuple[Console, ScriptedInput, io.StringIO]]:
    """Return a factory for consoles fed from a list of typed lines."""

    def _create(lines: Iterable[str] = ()) -> tuple[Console, ScriptedInput, io.StringIO]:
        scripted = ScriptedInput(lines)
        output = io.StringIO()
        return Console(input_func=scripted, output=output), scripted, output

    return _create


@pytest.fixture
def command_table() -> dict[str, cli.CommandSpec]:
    """The production menu command table."""

    return dict(cli.build_command_table(cli.menu_commands()))
