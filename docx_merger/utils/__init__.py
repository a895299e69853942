"""
Shared helpers: XML handling and logging setup.
"""

from .rich_logger import create_rich_handler, setup_logging

__all__ = ["create_rich_handler", "setup_logging"]
