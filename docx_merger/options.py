"""
Merge options.

Configuration for a merge run: batching, unresolved-reference policy and
the formatting defaults applied while splicing documents together.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class UnresolvedReferencePolicy(Enum):
    """What to do with a reference that points at nothing after the merge."""

    WARN = "warn"
    FAIL = "fail"
    CLEAR = "clear"


class MergeOptions:
    """Options controlling a document merge."""

    def __init__(
        self,
        batch_size: int = 5,
        unresolved_references: Union[UnresolvedReferencePolicy, str] = UnresolvedReferencePolicy.WARN,
        default_justification: str = "left",
        default_font_size: Optional[int] = None,
        normalize_font_sizes: bool = True,
        strip_document_grid: bool = True,
        style_tag_format: str = "_DOC{index}",
    ):
        """
        Initialize merge options.

        Args:
            batch_size: Number of documents loaded at once (caps peak memory)
            unresolved_references: Policy for dangling references ("warn", "fail", "clear")
            default_justification: Value written into w:jc elements that carry none
            default_font_size: Explicit default run size in half-points; overrides
                the size found on each document's default paragraph style
            normalize_font_sizes: Whether implicit run sizes are made explicit
            strip_document_grid: Whether w:docGrid is dropped from carried section properties
            style_tag_format: Suffix appended to style ids of non-base documents;
                must contain "{index}"
        """
        if not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError(f"batch_size must be a positive integer, got {batch_size!r}")
        if default_font_size is not None and (not isinstance(default_font_size, int) or default_font_size <= 0):
            raise ValueError(f"default_font_size must be a positive number of half-points, got {default_font_size!r}")
        if not default_justification:
            raise ValueError("default_justification must be a non-empty string")
        if "{index}" not in style_tag_format:
            raise ValueError("style_tag_format must contain '{index}'")

        self.batch_size = batch_size
        self.unresolved_references = UnresolvedReferencePolicy(unresolved_references)
        self.default_justification = default_justification
        self.default_font_size = default_font_size
        self.normalize_font_sizes = normalize_font_sizes
        self.strip_document_grid = strip_document_grid
        self.style_tag_format = style_tag_format

    def style_tag(self, index: int) -> str:
        """Style id suffix for the document at 1-based merge position index."""
        return self.style_tag_format.format(index=index)

    def __repr__(self) -> str:
        return (
            f"MergeOptions(batch_size={self.batch_size}, "
            f"unresolved_references={self.unresolved_references.value!r}, "
            f"default_justification={self.default_justification!r}, "
            f"default_font_size={self.default_font_size!r})"
        )
