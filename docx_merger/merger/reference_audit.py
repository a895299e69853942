"""
Reference auditor.

Checks the merged document before it is written:

- uniqueness of style ids, numIds, abstractNumIds and relationship ids;
- closure of body style references, numbering references (numId 0
  excluded), relationship references and style basedOn/link/next links.

Unresolved references are collected as :class:`UnresolvedReference`
records and handled according to :class:`UnresolvedReferencePolicy`.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from lxml import etree

from ..exceptions import UnresolvedReferenceError
from ..models.document import Document
from ..models.numbering import parse_int
from ..models.references import iter_numbering_references, iter_relationship_attributes, iter_style_references
from ..models.styles import STYLE_ID, STYLE_LINK_TAGS
from ..options import UnresolvedReferencePolicy
from ..utils.xml_utils import W_VAL, local_name, w

logger = logging.getLogger(__name__)

STYLE = "style"
STYLE_LINK = "style-link"
NUMBERING = "numbering"
RELATIONSHIP = "relationship"


@dataclass
class UnresolvedReference:
    """A reference in the merged document that points at nothing."""

    kind: str
    ref_id: str
    location: str
    element: Optional[etree._Element] = field(default=None, repr=False, compare=False)
    attribute: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.kind} {self.ref_id!r} at {self.location}"


@dataclass
class DuplicateId:
    namespace: str
    ref_id: str
    count: int

    def __str__(self) -> str:
        return f"{self.namespace} id {self.ref_id!r} defined {self.count} times"


@dataclass
class AuditResult:
    unresolved: List[UnresolvedReference] = field(default_factory=list)
    duplicates: List[DuplicateId] = field(default_factory=list)
    cleared: int = 0

    @property
    def is_clean(self) -> bool:
        return not self.unresolved and not self.duplicates


@dataclass
class MergeReport:
    """Summary of a merge run."""

    output_path: Optional[Path] = None
    documents: List[str] = field(default_factory=list)
    batches: int = 0
    styles_added: int = 0
    lists_added: int = 0
    media_copied: int = 0
    resources_skipped: List[str] = field(default_factory=list)
    sizes_normalized: int = 0
    justification_repaired: int = 0
    unresolved: List[UnresolvedReference] = field(default_factory=list)
    duplicates: List[DuplicateId] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unresolved and not self.duplicates

    def summary(self) -> Dict[str, object]:
        return {
            "output": str(self.output_path) if self.output_path else None,
            "documents": len(self.documents),
            "batches": self.batches,
            "styles_added": self.styles_added,
            "lists_added": self.lists_added,
            "media_copied": self.media_copied,
            "resources_skipped": len(self.resources_skipped),
            "sizes_normalized": self.sizes_normalized,
            "justification_repaired": self.justification_repaired,
            "unresolved": len(self.unresolved),
            "duplicates": len(self.duplicates),
        }


def find_duplicates(document: Document) -> List[DuplicateId]:
    """Ids defined more than once in any of the document's namespaces."""
    namespaces = {
        "style": document.styles.ids(),
        "numId": [str(num_id) for num_id in document.numbering.num_ids()],
        "abstractNumId": [str(abstract_id) for abstract_id in document.numbering.abstract_ids()],
        "relationship": document.relationships.ids(),
    }
    duplicates = []
    for namespace, ids in namespaces.items():
        for ref_id, count in Counter(ids).items():
            if count > 1:
                duplicates.append(DuplicateId(namespace, ref_id, count))
    return duplicates


def _index_is_closed(document: Document, style_ids, num_ids, rel_ids) -> bool:
    """Whether every id recorded in the document's reference index resolves."""
    index = document.references
    if any(style_id not in style_ids for style_id in index.styles):
        return False
    if any(num_id not in num_ids for num_id in index.numbering if num_id != "0"):
        return False
    return all(rel_id in rel_ids for rel_id in index.relationships)


def find_unresolved(document: Document) -> List[UnresolvedReference]:
    """Every reference of the document that does not resolve."""
    style_ids = set(document.styles.ids())
    num_ids = {str(num_id) for num_id in document.numbering.num_ids()}
    rel_ids = set(document.relationships.ids())
    unresolved: List[UnresolvedReference] = []

    for style in document.styles:
        for link_tag in STYLE_LINK_TAGS:
            link = style.find(w(link_tag))
            if link is not None and link.get(W_VAL) and link.get(W_VAL) not in style_ids:
                unresolved.append(
                    UnresolvedReference(STYLE_LINK, link.get(W_VAL), f"style {style.get(STYLE_ID)} {link_tag}", link)
                )

    if _index_is_closed(document, style_ids, num_ids, rel_ids):
        return unresolved

    for element in iter_style_references(document.body):
        if element.get(W_VAL) not in style_ids:
            unresolved.append(UnresolvedReference(STYLE, element.get(W_VAL), f"w:{local_name(element)}", element))

    for element in iter_numbering_references(document.body):
        value = element.get(W_VAL)
        if parse_int(value) == 0:
            continue
        if str(parse_int(value)) not in num_ids:
            unresolved.append(UnresolvedReference(NUMBERING, value, "w:numPr/w:numId", element))

    for element, attribute in iter_relationship_attributes(document.body):
        value = element.get(attribute)
        if value and value not in rel_ids:
            location = f"r:{etree.QName(attribute).localname} on {local_name(element)}"
            unresolved.append(UnresolvedReference(RELATIONSHIP, value, location, element, attribute))

    return unresolved


def _clear(reference: UnresolvedReference) -> bool:
    """Remove the dangling element or attribute; False if it is already gone."""
    element = reference.element
    if element is None:
        return False
    if reference.kind == RELATIONSHIP:
        if reference.attribute in element.attrib:
            del element.attrib[reference.attribute]
            return True
        return False
    if reference.kind == NUMBERING:
        # The whole w:numPr goes; w:ilvl alone is meaningless.
        element = element.getparent()
    parent = element.getparent() if element is not None else None
    if parent is None:
        return False
    parent.remove(element)
    return True


def audit_references(
    document: Document, policy: UnresolvedReferencePolicy = UnresolvedReferencePolicy.WARN
) -> AuditResult:
    """
    Audit a merged document and apply the unresolved-reference policy.

    Raises:
        UnresolvedReferenceError: With the FAIL policy, if anything is unresolved
    """
    result = AuditResult(unresolved=find_unresolved(document), duplicates=find_duplicates(document))

    for duplicate in result.duplicates:
        logger.warning(f"Duplicate id in merged document: {duplicate}")

    if not result.unresolved:
        logger.debug("Reference audit: every reference resolves")
        return result

    if policy is UnresolvedReferencePolicy.FAIL:
        logger.error(f"{len(result.unresolved)} unresolved references in merged document")
        raise UnresolvedReferenceError(
            f"{len(result.unresolved)} unresolved references in merged document", references=result.unresolved
        )

    for reference in result.unresolved:
        if policy is UnresolvedReferencePolicy.CLEAR:
            if _clear(reference):
                result.cleared += 1
            logger.warning(f"Unresolved {reference}: removed")
        else:
            logger.warning(f"Unresolved {reference}")
    return result
