"""
Public API.

    >>> from docx_merger import merge_documents
    >>> report = merge_documents(["cover.docx", "body.docx"], "out/merged.docx")
    >>> report.ok
    True
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

from .merger.orchestrator import DocumentMerger
from .merger.reference_audit import MergeReport
from .options import MergeOptions


def merge_documents(
    paths: Sequence[Union[str, Path]],
    output_path: Union[str, Path],
    options: Optional[MergeOptions] = None,
    **option_overrides,
) -> MergeReport:
    """
    Merge DOCX files into one package.

    Args:
        paths: Ordered list of source documents; the first one is the base
        output_path: Where the merged document is written
        options: Merge options (defaults used if None)
        **option_overrides: Keyword arguments for :class:`MergeOptions`,
            used when ``options`` is not given

    Returns:
        MergeReport describing the run

    Raises:
        ValueError: If no paths are given or the options are invalid
        DocxMergerError: If the merge fails

    Examples:
        >>> merge_documents(["a.docx", "b.docx"], "merged.docx", unresolved_references="fail")
    """
    if options is None:
        options = MergeOptions(**option_overrides)
    elif option_overrides:
        raise ValueError("Pass either options or keyword overrides, not both")
    return DocumentMerger(options).merge(paths, output_path)
