"""
Style namespace merger.

Non-base documents get every style id suffixed with a per-document tag
(``Heading1`` -> ``Heading1_DOC2``) and every reference to those ids is
rewritten in place. Renamed definitions are then moved into the base
style table by plain set insertion: after renaming, ids cannot collide.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Set

from lxml import etree

from ..exceptions import StyleError
from ..models.document import Document
from ..models.references import iter_style_references
from ..models.styles import DEFAULT_STYLES_PART, STYLE_DEFAULT, STYLE_ID, STYLE_LINK_TAGS, STYLES_CONTENT_TYPE
from ..options import MergeOptions
from ..parser.relationships import RT_STYLES
from ..utils.xml_utils import W_VAL, iter_tags, w
from .id_allocator import IdAllocator
from .parts import ensure_definitions_part

logger = logging.getLogger(__name__)

# Style references held by numbering definitions.
NUMBERING_STYLE_TAGS = ("styleLink", "numStyleLink")

_MAX_TAG_ATTEMPTS = 1000


def allocate_style_tag(base: Document, document: Document, allocator: IdAllocator, options: MergeOptions) -> str:
    """
    Reserve the merge position of a document and return its style tag.

    Positions whose tag would turn one of the document's ids into an id
    already present in the base are skipped.

    Raises:
        StyleError: If no free tag is found
    """
    base_ids = set(base.styles.ids())
    document_ids = document.styles.ids()
    for _ in range(_MAX_TAG_ATTEMPTS):
        tag = options.style_tag(allocator.next_position())
        if not any(f"{style_id}{tag}" in base_ids for style_id in document_ids):
            return tag
        logger.debug(f"Style tag {tag} collides with base styles, trying next position")
    raise StyleError(f"No free style tag for {document.name}", details=f"{_MAX_TAG_ATTEMPTS} positions tried")


def _rename_value(element: etree._Element, mapping: Dict[str, str], tag: str) -> bool:
    """
    Rewrite the w:val of a style reference.

    Ids the document does not define are tagged as well so they cannot
    resolve to an unrelated style of the base. Returns False for those.
    """
    old = element.get(W_VAL)
    if old in mapping:
        element.set(W_VAL, mapping[old])
        return True
    element.set(W_VAL, f"{old}{tag}")
    return False


def _iter_references(document: Document) -> Iterator[etree._Element]:
    """Every style reference owned by a document outside its style definitions."""
    yield from iter_style_references(document.body)
    if document.numbering.root is not None:
        yield from iter_style_references(document.numbering.root)
        for element in iter_tags(document.numbering.root, NUMBERING_STYLE_TAGS):
            if element.get(W_VAL):
                yield element


def rename_styles(document: Document, tag: str) -> Dict[str, str]:
    """
    Suffix every style id of a document with tag, rewriting all references.

    Covers the style definitions (styleId, basedOn, link, next), every
    w:pStyle / w:rStyle / w:tblStyle anywhere in the body, and the style
    references of the document's own numbering part.

    Args:
        document: Non-base document, mutated in place
        tag: Suffix such as "_DOC2"

    Returns:
        Map of old id to new id
    """
    mapping = {style_id: f"{style_id}{tag}" for style_id in document.styles.ids()}

    for style in document.styles:
        style_id = style.get(STYLE_ID)
        if style_id:
            style.set(STYLE_ID, mapping[style_id])
        for link_tag in STYLE_LINK_TAGS:
            link = style.find(w(link_tag))
            if link is not None and link.get(W_VAL):
                if not _rename_value(link, mapping, tag):
                    logger.warning(f"{document.name}: style {style_id} {link_tag} {link.get(W_VAL)} is undefined")

    unmapped: Set[str] = set()
    rewritten = 0
    for element in _iter_references(document):
        old = element.get(W_VAL)
        if not _rename_value(element, mapping, tag):
            unmapped.add(old)
        rewritten += 1

    if unmapped:
        logger.warning(f"{document.name}: references to undefined styles: {', '.join(sorted(unmapped))}")
    logger.debug(f"{document.name}: renamed {len(mapping)} styles with tag {tag}, rewrote {rewritten} references")
    return mapping


def absorb_styles(base: Document, document: Document, allocator: IdAllocator) -> int:
    """
    Move a document's (renamed) style definitions into the base table.

    A style is inserted only if its id is not yet present. An absorbed
    style loses its w:default flag when the base already has a default
    style of the same type.

    Returns:
        Number of styles inserted
    """
    if document.styles.is_empty:
        logger.debug(f"{document.name}: no styles to absorb")
        return 0

    ensure_definitions_part(base, base.styles, RT_STYLES, DEFAULT_STYLES_PART, STYLES_CONTENT_TYPE, allocator)

    base_ids = set(base.styles.ids())
    default_types = {base.styles.style_type(style) for style in base.styles if base.styles.is_default(style)}

    added = 0
    for style in list(document.styles):
        style_id = style.get(STYLE_ID)
        if not style_id or style_id in base_ids:
            logger.debug(f"Skipping style {style_id!r} from {document.name}: already present")
            continue
        style_type = base.styles.style_type(style)
        if base.styles.is_default(style):
            if style_type in default_types:
                del style.attrib[STYLE_DEFAULT]
            else:
                default_types.add(style_type)
        base.styles.add(style)
        base_ids.add(style_id)
        added += 1

    logger.info(f"Absorbed {added} styles from {document.name}")
    return added
