"""Rich console logging for gopro-remote."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every radio event at DEBUG
NOISY_LOGGERS = ("bleak", "asyncio")


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
    console: Console | None = None,
    ble_debug: bool = False,
) -> None:
    """
    Send log records to a rich console and, optionally, a plain text file.

    Args:
        level: Level for gopro-remote records (default: INFO)
        log_file: Also append records to this file (parent directories are created)
        console: Rich Console to render to, a fresh one if omitted
        ble_debug: Keep bleak and asyncio at ``level`` instead of WARNING
    """
    rich_handler = RichHandler(
        console=console or Console(),
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        markup=False,
    )
    handlers: list[logging.Handler] = [rich_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if ble_debug else logging.WARNING)
