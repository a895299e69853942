"""
Markup repair pass.

Some producers write a bare ``<w:jc/>``; the schema requires w:val. Every
such element in the body and the style definitions gets the configured
default justification. Running the pass again changes nothing.
"""

from __future__ import annotations

import logging
from typing import Optional

from lxml import etree

from ..models.document import Document
from ..utils.xml_utils import W_VAL, w

logger = logging.getLogger(__name__)

JC = w("jc")


def repair_justification(root: Optional[etree._Element], default: str = "left") -> int:
    """Give every w:jc below root without a w:val the default value; returns the count."""
    if root is None:
        return 0
    repaired = 0
    for element in root.iter(JC):
        if not element.get(W_VAL):
            element.set(W_VAL, default)
            repaired += 1
    return repaired


def repair_markup(document: Document, default_justification: str = "left") -> int:
    """Repair the body and styles of a (merged) document in place."""
    repaired = repair_justification(document.body, default_justification)
    repaired += repair_justification(document.styles.root, default_justification)
    if repaired:
        logger.info(f"Backfilled w:val={default_justification!r} on {repaired} w:jc elements")
    return repaired
