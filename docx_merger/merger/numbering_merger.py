"""
Numbering namespace merger.

numId and abstractNumId values of every non-base document are shifted
past a running maximum kept by the :class:`IdAllocator`:

    new_id = running_max + 1 + old_id

The running maximum then advances past the largest new id, so ids stay
unique across any number of documents and batches. numId 0 means "no
numbering" and is never remapped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from lxml import etree

from ..exceptions import NumberingError
from ..models.document import Document
from ..models.numbering import (
    ABSTRACT_NUM_ID,
    DEFAULT_NUMBERING_PART,
    NUM_ID,
    NUMBERING_CONTENT_TYPE,
    NumberingTable,
    parse_int,
)
from ..models.references import iter_numbering_references
from ..parser.relationships import RT_NUMBERING
from ..utils.xml_utils import W_VAL
from .id_allocator import IdAllocator
from .parts import ensure_definitions_part

logger = logging.getLogger(__name__)


@dataclass
class NumberingMap:
    """Old -> new ids applied to one document."""

    num_ids: Dict[int, int] = field(default_factory=dict)
    abstract_ids: Dict[int, int] = field(default_factory=dict)


def _shift(ceiling: int, old: int) -> int:
    return ceiling + 1 + old


def _rewrite_references(
    roots: Iterable[Optional[etree._Element]], num_ids: Dict[int, int], ceiling: int, source: str
) -> int:
    """
    Rewrite w:numPr/w:numId values below every root.

    Ids without a definition are shifted with the same rule so they cannot
    resolve to a list of the base; they stay unresolved.
    """
    rewritten = 0
    for root in roots:
        if root is None:
            continue
        for element in iter_numbering_references(root):
            old = parse_int(element.get(W_VAL))
            if old is None or old == 0:
                continue
            if old not in num_ids:
                num_ids[old] = _shift(ceiling, old)
                logger.warning(f"{source}: numbering reference numId={old} has no definition")
            element.set(W_VAL, str(num_ids[old]))
            rewritten += 1
    return rewritten


def renumber(document: Document, allocator: IdAllocator) -> NumberingMap:
    """
    Shift a document's numbering ids past the running maxima.

    Rewrites w:num/@w:numId, w:abstractNum/@w:abstractNumId,
    w:num/w:abstractNumId and every w:numPr/w:numId in the body and in
    the document's own styles.

    Args:
        document: Non-base document, mutated in place
        allocator: Holds the running maxima; advanced on return

    Returns:
        The applied id maps
    """
    mapping = NumberingMap()
    num_ceiling = allocator.max_num_id
    abstract_ceiling = allocator.max_abstract_id
    table = document.numbering

    for abstract in table.abstract_nums():
        old = parse_int(abstract.get(ABSTRACT_NUM_ID))
        if old is None:
            logger.warning(f"{document.name}: w:abstractNum without a numeric id")
            continue
        new = _shift(abstract_ceiling, old)
        abstract.set(ABSTRACT_NUM_ID, str(new))
        mapping.abstract_ids[old] = new

    for num in table.nums():
        old = parse_int(num.get(NUM_ID))
        if old is None:
            logger.warning(f"{document.name}: w:num without a numeric id")
            continue
        new = _shift(num_ceiling, old)
        num.set(NUM_ID, str(new))
        mapping.num_ids[old] = new

        abstract_ref = num.find(ABSTRACT_NUM_ID)
        old_abstract = NumberingTable.abstract_ref(num)
        if old_abstract is not None:
            if old_abstract not in mapping.abstract_ids:
                mapping.abstract_ids[old_abstract] = _shift(abstract_ceiling, old_abstract)
                logger.warning(f"{document.name}: numId={old} points at undefined abstractNumId={old_abstract}")
            abstract_ref.set(W_VAL, str(mapping.abstract_ids[old_abstract]))

    rewritten = _rewrite_references(
        (document.body, document.styles.root), mapping.num_ids, num_ceiling, document.name
    )

    allocator.advance_num_ids(mapping.num_ids.values())
    allocator.advance_abstract_ids(mapping.abstract_ids.values())

    logger.debug(
        f"{document.name}: renumbered {len(mapping.num_ids)} lists and "
        f"{len(mapping.abstract_ids)} abstract definitions, rewrote {rewritten} references"
    )
    return mapping


def absorb_numbering(base: Document, document: Document, allocator: IdAllocator) -> int:
    """
    Move a document's (renumbered) definitions into the base table.

    All w:abstractNum entries are placed before all w:num entries.

    Returns:
        Number of lists inserted

    Raises:
        NumberingError: If an id is already taken in the base
    """
    if document.numbering.is_empty:
        logger.debug(f"{document.name}: no numbering definitions to absorb")
        return 0

    ensure_definitions_part(
        base, base.numbering, RT_NUMBERING, DEFAULT_NUMBERING_PART, NUMBERING_CONTENT_TYPE, allocator
    )

    taken_abstract = set(base.numbering.abstract_ids())
    taken_num = set(base.numbering.num_ids())

    for abstract in document.numbering.abstract_nums():
        abstract_id = parse_int(abstract.get(ABSTRACT_NUM_ID))
        if abstract_id in taken_abstract:
            raise NumberingError(f"abstractNumId {abstract_id} already used in base", details=document.name)
        base.numbering.add_abstract(abstract)
        taken_abstract.add(abstract_id)

    added = 0
    for num in document.numbering.nums():
        num_id = parse_int(num.get(NUM_ID))
        if num_id in taken_num:
            raise NumberingError(f"numId {num_id} already used in base", details=document.name)
        base.numbering.add_num(num)
        taken_num.add(num_id)
        added += 1

    logger.info(f"Absorbed {added} numbering lists from {document.name}")
    return added
