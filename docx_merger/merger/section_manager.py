"""
Section boundary manager.

Between the content of document k and document k+1 a paragraph is
inserted whose w:pPr/w:sectPr ends document k's section: break type
"nextPage" with copies of document k's page size and margins. The merged
body ends with one w:sectPr taken from the last document, falling back to
the first document and finally to an empty w:sectPr.

A document without a body-level w:sectPr whose last paragraph carries one
already ends its section; that w:sectPr gets break type "nextPage" instead
of a marker paragraph following it.

Section properties are never shared: every attach point receives its own
clone.
"""

from __future__ import annotations

import logging
from typing import Optional

from lxml import etree

from ..models.document import Document
from ..options import MergeOptions
from ..utils.xml_utils import PPR_ORDER, SECTPR_ORDER, W_VAL, clone, insert_in_order, w

logger = logging.getLogger(__name__)

SECT_PR = w("sectPr")
BREAK_TYPE = "nextPage"
CARRIED_PAGE_SETTINGS = ("pgSz", "pgMar")


def _last_paragraph_section(document: Document) -> Optional[etree._Element]:
    for block in reversed(document.blocks()):
        if block.section_properties is not None:
            return block.section_properties
    return None


class SectionManager:
    """
    Produces section-break markers and the final section properties.

    One instance lives for the whole merge so the first document's section
    properties stay available as a fallback in later batches.
    """

    def __init__(self, options: Optional[MergeOptions] = None):
        self.options = options or MergeOptions()
        self._first: Optional[etree._Element] = None
        self._first_recorded = False

    def capture(self, document: Document) -> Optional[etree._Element]:
        """
        Owned clone of the section properties governing a document's last content.

        Uses the body-level w:sectPr, or the last paragraph-level one when
        the body has none. w:docGrid is removed when configured.
        """
        source = document.body_section_properties()
        if source is None:
            source = _last_paragraph_section(document)
        if source is None:
            logger.debug(f"{document.name}: no section properties")
            return None

        sect_pr = clone(source)
        if self.options.strip_document_grid:
            for grid in sect_pr.findall(w("docGrid")):
                sect_pr.remove(grid)
        return sect_pr

    def record_first(self, sect_pr: Optional[etree._Element]) -> None:
        """Remember the first document's section properties (only the first call counts)."""
        if self._first_recorded:
            return
        self._first = clone(sect_pr) if sect_pr is not None else None
        self._first_recorded = True

    @staticmethod
    def closing_section(document: Document) -> Optional[etree._Element]:
        """
        Paragraph-level w:sectPr on the last block of a body without a body-level one.

        Such a document already ends its own section, so no marker paragraph
        is needed after it.
        """
        if document.body_section_properties() is not None:
            return None
        blocks = document.blocks()
        return blocks[-1].section_properties if blocks else None

    @staticmethod
    def continue_on_next_page(sect_pr: etree._Element) -> None:
        """Make the section following sect_pr start on a new page."""
        break_type = sect_pr.find(w("type"))
        if break_type is None:
            break_type = insert_in_order(sect_pr, etree.Element(w("type")), SECTPR_ORDER)
        break_type.set(W_VAL, BREAK_TYPE)

    @staticmethod
    def release_closing(sect_pr: etree._Element) -> None:
        """Detach a closing paragraph-level w:sectPr replaced by the body-level one."""
        parent = sect_pr.getparent()
        if parent is not None:
            parent.remove(sect_pr)

    def section_break(self, previous: Optional[etree._Element]) -> etree._Element:
        """
        Marker paragraph ending the section of the preceding document.

        Args:
            previous: Captured section properties of the preceding document

        Returns:
            A new w:p carrying w:pPr/w:sectPr
        """
        sect_pr = etree.Element(SECT_PR)
        break_type = etree.Element(w("type"))
        break_type.set(W_VAL, BREAK_TYPE)
        insert_in_order(sect_pr, break_type, SECTPR_ORDER)

        if previous is not None:
            for tag in CARRIED_PAGE_SETTINGS:
                setting = previous.find(w(tag))
                if setting is not None:
                    insert_in_order(sect_pr, clone(setting), SECTPR_ORDER)

        paragraph = etree.Element(w("p"))
        ppr = etree.SubElement(paragraph, w("pPr"))
        insert_in_order(ppr, sect_pr, PPR_ORDER)
        return paragraph

    def final_section(self, last: Optional[etree._Element]) -> etree._Element:
        """
        Body-level w:sectPr for the merged document.

        Last document's properties, else the first document's, else empty.
        """
        if last is not None:
            return clone(last)
        if self._first is not None:
            logger.info("Last document has no section properties, using the first document's")
            return clone(self._first)
        logger.warning("No document carries section properties, ending with an empty w:sectPr")
        return etree.Element(SECT_PR)
