"""
Merge engine: namespace reconciliation, resource relocation and splicing.
"""

from .id_allocator import IdAllocator
from .orchestrator import DocumentMerger
from .reference_audit import MergeReport, UnresolvedReference, audit_references
from .relationship_merger import RelationshipMerger, rewrite_relationship_ids
from .section_manager import SectionManager

__all__ = [
    "DocumentMerger",
    "IdAllocator",
    "MergeReport",
    "RelationshipMerger",
    "SectionManager",
    "UnresolvedReference",
    "audit_references",
    "rewrite_relationship_ids",
]
