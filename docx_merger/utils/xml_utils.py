"""
XML utilities for DOCX packages.

Namespace constants, qualified-name helpers, parsing/serialization and
schema-order insertion for WordprocessingML elements, built on lxml.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Optional, Sequence

from lxml import etree

from ..exceptions import ParsingError

logger = logging.getLogger(__name__)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
OPC_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"

# Child order of w:rPr (CT_RPr). w:rPrChange always stays last.
RPR_ORDER = (
    "rStyle", "rFonts", "b", "bCs", "i", "iCs", "caps", "smallCaps", "strike",
    "dstrike", "outline", "shadow", "emboss", "imprint", "noProof", "snapToGrid",
    "vanish", "webHidden", "color", "spacing", "w", "kern", "position", "sz",
    "szCs", "highlight", "u", "effect", "bdr", "shd", "fitText", "vertAlign",
    "rtl", "cs", "em", "lang", "eastAsianLayout", "specVanish", "oMath",
    "rPrChange",
)

# Child order of w:sectPr (CT_SectPr).
SECTPR_ORDER = (
    "headerReference", "footerReference", "footnotePr", "endnotePr", "type",
    "pgSz", "pgMar", "paperSrc", "pgBorders", "lnNumType", "pgNumType", "cols",
    "formProt", "vAlign", "noEndnote", "titlePg", "textDirection", "bidi",
    "rtlGutter", "docGrid", "printerSettings", "sectPrChange",
)

# Child order of w:pPr (CT_PPr), enough to place w:sectPr before w:pPrChange.
PPR_ORDER = (
    "pStyle", "keepNext", "keepLines", "pageBreakBefore", "framePr",
    "widowControl", "numPr", "suppressLineNumbers", "pBdr", "shd", "tabs",
    "suppressAutoHyphens", "kinsoku", "wordWrap", "overflowPunct", "topLinePunct",
    "autoSpaceDE", "autoSpaceDN", "bidi", "adjustRightInd", "snapToGrid",
    "spacing", "ind", "contextualSpacing", "mirrorIndents", "suppressOverlap",
    "jc", "textDirection", "textAlignment", "textboxTightWrap",
    "outlineLvl", "divId", "cnfStyle", "rPr", "sectPr", "pPrChange",
)

_PARSER = etree.XMLParser(remove_blank_text=False, resolve_entities=False, huge_tree=True)


def w(tag: str) -> str:
    """Return the Clark-notation name of a WordprocessingML tag."""
    return f"{{{W_NS}}}{tag}"


W_VAL = w("val")


def local_name(element: etree._Element) -> str:
    """Local part of an element tag ('' for comments and processing instructions)."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def parse_xml(content: bytes, part_name: str = "") -> etree._Element:
    """
    Parse XML bytes into an lxml element.

    Args:
        content: Raw part content
        part_name: Part name used in the error message

    Returns:
        Root element

    Raises:
        ParsingError: If the content is not well-formed XML
    """
    try:
        return etree.fromstring(content, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise ParsingError("Malformed XML", part_name=part_name, details=f"{part_name}: {e}") from e


def serialize_xml(root: etree._Element) -> bytes:
    """Serialize a part root the way Word writes it (UTF-8, standalone declaration)."""
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def get_val(element: Optional[etree._Element], default: Optional[str] = None) -> Optional[str]:
    """Read the w:val attribute of an element, tolerating None."""
    if element is None:
        return default
    return element.get(W_VAL, default)


def clone(element: etree._Element) -> etree._Element:
    """Owned deep copy of an element; the copy has no parent."""
    return copy.deepcopy(element)


def insert_in_order(parent: etree._Element, child: etree._Element, order: Sequence[str]) -> etree._Element:
    """
    Insert child into parent respecting a schema child sequence.

    Siblings with names outside the sequence (extension elements) are skipped.

    Returns:
        The inserted child
    """
    name = local_name(child)
    try:
        rank = order.index(name)
    except ValueError:
        parent.append(child)
        return child

    for index, sibling in enumerate(parent):
        sibling_name = local_name(sibling)
        if sibling_name in order and order.index(sibling_name) > rank:
            parent.insert(index, child)
            return child
    parent.append(child)
    return child


def iter_tags(root: etree._Element, tags: Iterable[str]) -> Iterable[etree._Element]:
    """Iterate over every descendant whose WordprocessingML local name is in tags."""
    return root.iter(*[w(tag) for tag in tags])
