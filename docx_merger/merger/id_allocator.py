"""
Id allocator for a merge run.

Owns the "next free id" state of every identifier namespace touched while
folding documents into the base: relationship ids and media part names of
the base package, the running maxima of numId and abstractNumId, and the
merge position that feeds per-document style tags. One allocator lives for
the whole run, across batches.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..models.document import Document

logger = logging.getLogger(__name__)

MEDIA_DIRECTORY = "word/media"
MEDIA_STEM = "image"


class IdAllocator:
    """
    Allocates fresh identifiers in the base document's namespaces.

    Example:
        >>> allocator = IdAllocator(base)
        >>> allocator.next_relationship_id(base)
        'rId7'
    """

    def __init__(self, base: Document):
        """
        Initialize from the current state of the base document.

        Args:
            base: Merge target; its maxima seed every counter
        """
        self._next_relationship = base.relationships.max_numeric_id() + 1
        self._next_media = 1
        self._max_num_id = base.numbering.max_num_id()
        self._max_abstract_id = base.numbering.max_abstract_id()
        # The base occupies merge position 1.
        self._position = 1

        logger.debug(
            f"IdAllocator initialized: next rId{self._next_relationship}, "
            f"numId ceiling {self._max_num_id}, abstractNumId ceiling {self._max_abstract_id}"
        )

    @property
    def position(self) -> int:
        """Merge position of the most recently registered document."""
        return self._position

    @property
    def max_num_id(self) -> int:
        return self._max_num_id

    @property
    def max_abstract_id(self) -> int:
        return self._max_abstract_id

    def next_position(self) -> int:
        """Register the next document in merge order and return its 1-based position."""
        self._position += 1
        return self._position

    def next_relationship_id(self, base: Document) -> str:
        """Fresh rId<n> not used in the base relationship table."""
        while True:
            rel_id = f"rId{self._next_relationship}"
            self._next_relationship += 1
            if rel_id not in base.relationships:
                return rel_id

    def next_media_part(self, base: Document, extension: str) -> str:
        """Fresh word/media/image<k>.<extension> part name in the base package."""
        part_name = base.package.unique_part_name(MEDIA_DIRECTORY, MEDIA_STEM, extension, start=self._next_media)
        stem = part_name.rsplit("/", 1)[-1].rsplit(".", 1)[0]
        self._next_media = int(stem[len(MEDIA_STEM):]) + 1
        return part_name

    def advance_num_ids(self, assigned: Iterable[int]) -> None:
        """Move the numId ceiling past every id just assigned."""
        self._max_num_id = max([self._max_num_id, *assigned])

    def advance_abstract_ids(self, assigned: Iterable[int]) -> None:
        """Move the abstractNumId ceiling past every id just assigned."""
        self._max_abstract_id = max([self._max_abstract_id, *assigned])

    def __repr__(self) -> str:
        return (
            f"IdAllocator(next_relationship={self._next_relationship}, next_media={self._next_media}, "
            f"max_num_id={self._max_num_id}, max_abstract_id={self._max_abstract_id}, position={self._position})"
        )
