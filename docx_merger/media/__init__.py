"""
Media helpers.
"""

from .image_types import extension_for, is_image_content_type, resolve_image_type, sniff_content_type

__all__ = ["extension_for", "is_image_content_type", "resolve_image_type", "sniff_content_type"]
