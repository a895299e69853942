"""
Reference discovery for WordprocessingML content.

Finds the three kinds of cross-part references carried by body markup:
style references (w:pStyle, w:rStyle, w:tblStyle), numbering references
(w:numPr/w:numId) and relationship references (any attribute in the
officeDocument relationships namespace: r:embed, r:link, r:id, ...).
"""

from __future__ import annotations

from collections import Counter
from typing import Iterator, Tuple

from lxml import etree

from ..utils.xml_utils import R_NS, W_VAL, w

STYLE_REFERENCE_TAGS = (w("pStyle"), w("rStyle"), w("tblStyle"))
NUM_PR = w("numPr")
NUM_ID = w("numId")

_R_PREFIX = f"{{{R_NS}}}"


def iter_style_references(root: etree._Element) -> Iterator[etree._Element]:
    """Every style reference element below root (root included)."""
    for element in root.iter(*STYLE_REFERENCE_TAGS):
        if element.get(W_VAL):
            yield element


def iter_numbering_references(root: etree._Element) -> Iterator[etree._Element]:
    """Every w:numPr/w:numId element below root."""
    for element in root.iter(NUM_ID):
        parent = element.getparent()
        if parent is not None and parent.tag == NUM_PR and element.get(W_VAL) is not None:
            yield element


def iter_relationship_attributes(root: etree._Element) -> Iterator[Tuple[etree._Element, str]]:
    """(element, attribute name) for every r:* attribute below root."""
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        for name in element.attrib:
            if name.startswith(_R_PREFIX):
                yield element, name


class ReferenceIndex:
    """
    Counts of the ids referenced by the content of a document body.

    Populated when blocks are attached to a body, so later stages know
    which styles, lists and relationships the body depends on without
    rescanning it.
    """

    def __init__(self):
        self.styles: Counter = Counter()
        self.numbering: Counter = Counter()
        self.relationships: Counter = Counter()

    def register(self, element: etree._Element) -> None:
        """Record every reference carried by element and its descendants."""
        for ref in iter_style_references(element):
            self.styles[ref.get(W_VAL)] += 1
        for ref in iter_numbering_references(element):
            self.numbering[ref.get(W_VAL)] += 1
        for owner, name in iter_relationship_attributes(element):
            self.relationships[owner.get(name)] += 1

    def clear(self) -> None:
        self.styles.clear()
        self.numbering.clear()
        self.relationships.clear()

    def __repr__(self) -> str:
        return (
            f"ReferenceIndex(styles={len(self.styles)}, numbering={len(self.numbering)}, "
            f"relationships={len(self.relationships)})"
        )
