"""
Numbering table of a document (word/numbering.xml).
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from lxml import etree

from ..utils.xml_utils import W_NS, get_val, w

logger = logging.getLogger(__name__)

NUMBERING_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
DEFAULT_NUMBERING_PART = "word/numbering.xml"

NUM = w("num")
ABSTRACT_NUM = w("abstractNum")
NUM_ID = w("numId")
ABSTRACT_NUM_ID = w("abstractNumId")

# Elements that follow all w:num entries in CT_Numbering.
_TRAILING = (w("numIdMacAtCleanup"),)


def parse_int(value: Optional[str]) -> Optional[int]:
    """Integer value of a numbering id attribute, None if absent or not numeric."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class NumberingTable:
    """
    Numbering definitions of one document.

    CT_Numbering requires every w:abstractNum to precede every w:num;
    the insert helpers keep that order.
    """

    def __init__(self, root: Optional[etree._Element] = None, part_name: Optional[str] = None):
        self.root = root
        self.part_name = part_name

    @property
    def is_empty(self) -> bool:
        return self.root is None or (not self.nums() and not self.abstract_nums())

    def ensure_root(self) -> etree._Element:
        if self.root is None:
            self.root = etree.Element(w("numbering"), nsmap={"w": W_NS})
            logger.debug("Created empty numbering table")
        return self.root

    def nums(self) -> List[etree._Element]:
        if self.root is None:
            return []
        return list(self.root.iterchildren(NUM))

    def abstract_nums(self) -> List[etree._Element]:
        if self.root is None:
            return []
        return list(self.root.iterchildren(ABSTRACT_NUM))

    def num_ids(self) -> List[int]:
        return [num_id for num_id in (parse_int(num.get(NUM_ID)) for num in self.nums()) if num_id is not None]

    def abstract_ids(self) -> List[int]:
        ids = (parse_int(abstract.get(ABSTRACT_NUM_ID)) for abstract in self.abstract_nums())
        return [abstract_id for abstract_id in ids if abstract_id is not None]

    def max_num_id(self) -> int:
        return max(self.num_ids(), default=0)

    def max_abstract_id(self) -> int:
        return max(self.abstract_ids(), default=0)

    @staticmethod
    def abstract_ref(num: etree._Element) -> Optional[int]:
        """abstractNumId a w:num points at."""
        return parse_int(get_val(num.find(ABSTRACT_NUM_ID)))

    def __iter__(self) -> Iterator[etree._Element]:
        return iter(self.abstract_nums() + self.nums())

    def add_abstract(self, abstract: etree._Element) -> None:
        """Insert after the last w:abstractNum, before any w:num."""
        root = self.ensure_root()
        existing = self.abstract_nums()
        if existing:
            existing[-1].addnext(abstract)
            return
        first_num = next(root.iterchildren(NUM), None)
        if first_num is not None:
            first_num.addprevious(abstract)
        else:
            self._insert_before_trailing(root, abstract)

    def add_num(self, num: etree._Element) -> None:
        """Insert after the last w:num."""
        root = self.ensure_root()
        existing = self.nums()
        if existing:
            existing[-1].addnext(num)
        else:
            self._insert_before_trailing(root, num)

    @staticmethod
    def _insert_before_trailing(root: etree._Element, element: etree._Element) -> None:
        trailing = next(root.iterchildren(*_TRAILING), None)
        if trailing is not None:
            trailing.addprevious(element)
        else:
            root.append(element)
