"""
Format normalizer.

A run without w:sz inherits its size from the default paragraph style
(or w:docDefaults) of the document it lives in. After a merge the shared
default belongs to the base, so such runs would silently change size.
Before splicing, every run is given its document's effective default size
explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from lxml import etree

from ..models.document import Document
from ..models.styles import STYLE_ID, StyleTable
from ..options import MergeOptions
from ..utils.xml_utils import RPR_ORDER, W_VAL, get_val, insert_in_order, w

logger = logging.getLogger(__name__)

SIZE_TAGS = ("sz", "szCs")


@dataclass(frozen=True)
class EffectiveSize:
    """Default run sizes of a document, in half-points (as strings, like w:val)."""

    size: Optional[str] = None
    complex_size: Optional[str] = None

    def for_tag(self, tag: str) -> Optional[str]:
        return self.size if tag == "sz" else self.complex_size

    @property
    def is_known(self) -> bool:
        return self.size is not None or self.complex_size is not None


def effective_default_size(document: Document, options: Optional[MergeOptions] = None) -> EffectiveSize:
    """
    Effective default run size of a document.

    Order: the explicit ``default_font_size`` option, then the default
    paragraph style (through its basedOn chain), then w:docDefaults.
    """
    if options is not None and options.default_font_size is not None:
        value = str(options.default_font_size)
        return EffectiveSize(value, value)

    styles = document.styles
    default_style = styles.default_style("paragraph")
    default_id = default_style.get(STYLE_ID) if default_style is not None else None

    values = []
    for tag in SIZE_TAGS:
        value, _ = styles.resolve_run_property(default_id, tag)
        values.append(value or styles.doc_default_run_property(tag))
    return EffectiveSize(*values)


class _StyleSizes:
    """Memoized size lookups through style chains of one document."""

    def __init__(self, styles: StyleTable):
        self.styles = styles
        self._cache: Dict[Tuple[str, str], bool] = {}

    def declares(self, style_id: Optional[str], tag: str) -> bool:
        if not style_id:
            return False
        key = (style_id, tag)
        if key not in self._cache:
            value, _ = self.styles.resolve_run_property(style_id, tag)
            self._cache[key] = value is not None
        return self._cache[key]


def _context_styles(run: etree._Element) -> Tuple[Optional[str], Optional[str]]:
    """(run style, paragraph style) governing a run."""
    rpr = run.find(w("rPr"))
    run_style = get_val(rpr.find(w("rStyle"))) if rpr is not None else None

    paragraph_style = None
    paragraph = next(run.iterancestors(w("p")), None)
    if paragraph is not None:
        paragraph_style = get_val(paragraph.find(f"{w('pPr')}/{w('pStyle')}"))

    return run_style, paragraph_style


def normalize_font_sizes(document: Document, options: Optional[MergeOptions] = None) -> int:
    """
    Make the effective default size explicit on every run lacking one.

    Runs whose size comes from a run or paragraph style are left alone:
    that style travels with the document and keeps supplying it. A table
    style ranks below the default paragraph style, so runs in styled
    tables still get the default.

    Returns:
        Number of size elements inserted
    """
    size = effective_default_size(document, options)
    if not size.is_known:
        logger.debug(f"{document.name}: no default font size declared, runs left as they are")
        return 0

    style_sizes = _StyleSizes(document.styles)
    inserted = 0

    for run in document.body.iter(w("r")):
        run_style, paragraph_style = _context_styles(run)
        rpr = run.find(w("rPr"))
        for tag in SIZE_TAGS:
            value = size.for_tag(tag)
            if value is None:
                continue
            if rpr is not None and rpr.find(w(tag)) is not None:
                continue
            if any(style_sizes.declares(style_id, tag) for style_id in (run_style, paragraph_style)):
                continue
            if rpr is None:
                rpr = etree.Element(w("rPr"))
                run.insert(0, rpr)
            element = etree.Element(w(tag))
            element.set(W_VAL, value)
            insert_in_order(rpr, element, RPR_ORDER)
            inserted += 1

    logger.debug(f"{document.name}: inserted {inserted} explicit sizes (sz={size.size}, szCs={size.complex_size})")
    return inserted
