import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]
LOG_DIR_ENV = "SMART_INVENTORY_LOG_DIR"
LOG_DIR = Path(os.environ.get(LOG_DIR_ENV, PROJECT_ROOT / ".logs"))
LOG_FILE = LOG_DIR / "smart_inventory.log"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(_FORMATTER)
    return handler


def _console_handler() -> logging.Handler:
    # Errors only: the menu shares the terminal.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.ERROR)
    handler.setFormatter(_FORMATTER)
    return handler


def _configure_logging() -> logging.Logger:
    """Attach the rotating file and stderr handlers to the package logger.

    Safe to call repeatedly. The file lives in ``LOG_DIR``, which can be
    moved with the ``SMART_INVENTORY_LOG_DIR`` environment variable; when it
    cannot be created the session runs with stderr logging only.
    """

    logger = logging.getLogger(__name__)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    try:
        logger.addHandler(_file_handler(LOG_FILE))
    except OSError as exc:
        print(
            f"Warning: unable to initialize log file at '{LOG_FILE}': {exc}",
            file=sys.stderr,
        )
    logger.addHandler(_console_handler())
    return logger


log = _configure_logging()
log.info("Logger initialized for the 'smart_inventory' package.")
