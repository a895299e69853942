"""
Document model used by the merge stages.
"""

from .blocks import Block, BlockKind, classify, iter_blocks
from .document import Document
from .numbering import NumberingTable
from .references import ReferenceIndex
from .styles import StyleTable

__all__ = [
    "Block",
    "BlockKind",
    "classify",
    "iter_blocks",
    "Document",
    "NumberingTable",
    "ReferenceIndex",
    "StyleTable",
]
