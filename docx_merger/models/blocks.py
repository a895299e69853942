"""
Block-level content nodes.

A body child is one of a closed set of kinds: paragraph, table, or any
other block (content controls, bookmarks, custom XML, ...). Traversals
branch on :class:`BlockKind` and must handle all three.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from lxml import etree

from ..utils.xml_utils import w

_P = w("p")
_TBL = w("tbl")
_SECT_PR = w("sectPr")


class BlockKind(Enum):
    PARAGRAPH = "paragraph"
    TABLE = "table"
    OTHER = "other"


@dataclass(frozen=True)
class Block:
    """A body child together with its kind."""

    kind: BlockKind
    element: etree._Element

    @property
    def section_properties(self) -> Optional[etree._Element]:
        """Paragraph-level w:sectPr ending a section at this block, if any."""
        if self.kind is BlockKind.PARAGRAPH:
            ppr = self.element.find(w("pPr"))
            return None if ppr is None else ppr.find(_SECT_PR)
        if self.kind in (BlockKind.TABLE, BlockKind.OTHER):
            return None
        raise AssertionError(f"Unhandled block kind: {self.kind}")


def classify(element: etree._Element) -> BlockKind:
    """Kind of a block-level element."""
    if element.tag == _P:
        return BlockKind.PARAGRAPH
    if element.tag == _TBL:
        return BlockKind.TABLE
    return BlockKind.OTHER


def is_body_section_properties(element: etree._Element) -> bool:
    return element.tag == _SECT_PR


def iter_blocks(body: etree._Element) -> Iterator[Block]:
    """
    Iterate over the content blocks of a w:body.

    The body-level w:sectPr is not content and is skipped. Comments and
    processing instructions are yielded as OTHER so they travel with the
    content they annotate.
    """
    for child in list(body):
        if is_body_section_properties(child):
            continue
        yield Block(classify(child), child)
