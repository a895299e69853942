"""
Package-level parsing: container access, relationships, preprocessing.
"""

from .package_reader import PackageReader, normalize_part_name, rels_part_for
from .preprocessor import PreprocessResult, preprocess_document
from .relationships import (
    RT_HYPERLINK,
    RT_IMAGE,
    RT_NUMBERING,
    RT_OFFICE_DOCUMENT,
    RT_STYLES,
    Relationship,
    RelationshipTable,
)

__all__ = [
    "PackageReader",
    "normalize_part_name",
    "rels_part_for",
    "PreprocessResult",
    "preprocess_document",
    "Relationship",
    "RelationshipTable",
    "RT_HYPERLINK",
    "RT_IMAGE",
    "RT_NUMBERING",
    "RT_OFFICE_DOCUMENT",
    "RT_STYLES",
]
