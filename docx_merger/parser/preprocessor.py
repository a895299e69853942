"""
Main document preprocessing.

Repairs known non-conformant markup in a freshly parsed main document part
before the merge touches it:

- ``w:start`` / ``w:end`` border and margin elements are renamed to their
  transitional equivalents ``w:left`` / ``w:right``;
- ``w:headerReference`` / ``w:footerReference`` are dropped, because header
  and footer parts are not carried into the merged package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from lxml import etree

from ..utils.xml_utils import w

logger = logging.getLogger(__name__)

TAG_RENAMES = {
    w("start"): w("left"),
    w("end"): w("right"),
}

DROPPED_REFERENCES = (w("headerReference"), w("footerReference"))


@dataclass
class PreprocessResult:
    renamed_tags: int = 0
    dropped_references: int = 0


def preprocess_document(root: etree._Element, source: str = "") -> PreprocessResult:
    """
    Repair a main document tree in place.

    Args:
        root: Root element of the main document part (w:document)
        source: Name used in log messages

    Returns:
        Counts of the applied repairs
    """
    result = PreprocessResult()

    # Collect first: mutating while iterating would skip nodes.
    for element in list(root.iter(*TAG_RENAMES)):
        element.tag = TAG_RENAMES[element.tag]
        result.renamed_tags += 1

    for element in list(root.iter(*DROPPED_REFERENCES)):
        element.getparent().remove(element)
        result.dropped_references += 1

    if result.renamed_tags or result.dropped_references:
        logger.debug(
            f"{source}: renamed {result.renamed_tags} start/end elements, "
            f"dropped {result.dropped_references} header/footer references"
        )
    return result
