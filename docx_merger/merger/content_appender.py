"""
Content appender: moves the body blocks of a document into the base.
"""

from __future__ import annotations

import logging
from collections import Counter

from ..models.blocks import BlockKind
from ..models.document import Document

logger = logging.getLogger(__name__)


def append_content(base: Document, document: Document) -> int:
    """
    Move every content block of document to the end of the base body.

    Blocks are moved, not copied, in source order and before the base's
    body-level w:sectPr. The document's own body-level w:sectPr stays
    behind. Each block is registered in the base's reference index.

    Returns:
        Number of blocks moved
    """
    counts: Counter = Counter()
    for block in document.blocks():
        if block.kind is BlockKind.PARAGRAPH:
            counts["paragraphs"] += 1
        elif block.kind is BlockKind.TABLE:
            counts["tables"] += 1
        elif block.kind is BlockKind.OTHER:
            counts["other"] += 1
        else:
            raise AssertionError(f"Unhandled block kind: {block.kind}")
        base.append_block(block.element)

    total = sum(counts.values())
    logger.info(
        f"Appended {total} blocks from {document.name} "
        f"({counts['paragraphs']} paragraphs, {counts['tables']} tables, {counts['other']} other)"
    )
    return total
