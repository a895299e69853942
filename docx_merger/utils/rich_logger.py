"""
Rich logging for merge runs.

The library only emits records through ``logging.getLogger(__name__)``;
applications call :func:`setup_logging` once to get colourful console
output through rich.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def create_rich_handler(console: Optional[Console] = None, show_path: bool = True) -> RichHandler:
    """
    Create a RichHandler with the project's formatting.

    Args:
        console: Console to write to (stderr console by default)
        show_path: Whether to show the emitting module and line

    Returns:
        Configured handler
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=show_path,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def setup_logging(level: str = "INFO", use_rich: bool = True, console: Optional[Console] = None) -> logging.Logger:
    """
    Setup logging for the application.

    Replaces the handlers of the root logger.

    Args:
        level: Log level name
        use_rich: Whether to use rich logging
        console: Console for the rich handler

    Returns:
        The root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    if use_rich:
        root_logger.addHandler(create_rich_handler(console))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(f"Logging initialized at {level} level (rich={use_rich})")
    return root_logger
