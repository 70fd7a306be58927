"""
Logging setup shared by the CLI and the HTTP API.

The CLI hands in its own rich Console so log records are drawn above the live
layer chart instead of through it.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

RICH_FORMAT = "%(name)s: %(message)s"
PLAIN_FORMAT = "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s"
TIME_FORMAT = "%H:%M:%S"


def _rich_handler(console: Console) -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
        log_time_format=f"[{TIME_FORMAT}]",
    )
    handler.setFormatter(logging.Formatter(RICH_FORMAT))
    return handler


def _plain_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=TIME_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    use_rich: bool = True,
    console: Optional[Console] = None,
) -> logging.Handler:
    """
    Route every wiki_bridge logger through a single root handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        use_rich: Render through Rich; otherwise plain timestamped lines on stderr
        console: Console the Rich handler draws on. Pass the console that owns
            any rich Live display so records land above it (defaults to stderr)

    Returns:
        The installed handler
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if use_rich:
        handler = _rich_handler(console or Console(stderr=True))
    else:
        handler = _plain_handler()
    handler.setLevel(numeric_level)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
