"""
Package writing.
"""

from .docx_writer import collect_parts, write_document

__all__ = ["collect_parts", "write_document"]
