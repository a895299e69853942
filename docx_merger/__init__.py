"""
DOCX Merger - merge independently authored Word documents into one package.

Every source keeps its formatting, numbering and images. Colliding
identifiers are rewritten so the merged package stays consistent:

- style ids of later documents get a per-document suffix (``_DOC2``)
- numbering ids are shifted past a running maximum
- images are copied under fresh part names and relationship ids
- implicit default font sizes are made explicit before splicing
- each document keeps its own page size and margins through section breaks

Main Components:
- merge_documents / DocumentMerger: public entry points
- MergeOptions: configuration
- Document: loaded package model
- utils.setup_logging: optional rich console logging
"""

from .api import merge_documents
from .exceptions import (
    DocxMergerError,
    MediaError,
    NumberingError,
    PackageError,
    ParsingError,
    StyleError,
    UnresolvedReferenceError,
)
from .merger.orchestrator import DocumentMerger
from .merger.reference_audit import MergeReport, UnresolvedReference
from .models.document import Document
from .options import MergeOptions, UnresolvedReferencePolicy

__version__ = "0.1.0"

__all__ = [
    "merge_documents",
    "DocumentMerger",
    "Document",
    "MergeOptions",
    "MergeReport",
    "UnresolvedReference",
    "UnresolvedReferencePolicy",
    "DocxMergerError",
    "PackageError",
    "ParsingError",
    "StyleError",
    "NumberingError",
    "MediaError",
    "UnresolvedReferenceError",
]
