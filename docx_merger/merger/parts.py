"""
Definition-part bookkeeping for the base document.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Union

from ..models.document import Document
from ..models.numbering import NumberingTable
from ..models.styles import StyleTable
from .id_allocator import IdAllocator

logger = logging.getLogger(__name__)


def ensure_definitions_part(
    base: Document,
    table: Union[StyleTable, NumberingTable],
    rel_type: str,
    default_part: str,
    content_type: str,
    allocator: IdAllocator,
) -> None:
    """
    Give a table of the base document a package part if it has none.

    Creates the root element, a free part name, the content-type override
    and the main-part relationship. No-op when the part already exists.
    """
    table.ensure_root()
    if table.part_name:
        return

    part_name = default_part
    if base.package.has_part(part_name):
        directory, file_name = posixpath.split(default_part)
        stem, extension = posixpath.splitext(file_name)
        part_name = base.package.unique_part_name(directory, stem, extension.lstrip("."), start=2)

    rel = base.attach_part(rel_type, part_name, content_type, allocator.next_relationship_id(base))
    table.part_name = part_name
    logger.info(f"Created {part_name} in base document ({rel.rel_id})")
