"""
Style table of a document (word/styles.xml).

Thin typed view over the parsed w:styles element: lookup by id, default
style per type, and property resolution through the basedOn chain.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from lxml import etree

from ..utils.xml_utils import W_NS, W_VAL, get_val, w

logger = logging.getLogger(__name__)

STYLES_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
DEFAULT_STYLES_PART = "word/styles.xml"

STYLE_ID = w("styleId")
STYLE_TYPE = w("type")
STYLE_DEFAULT = w("default")

# Style-to-style references inside a w:style element.
STYLE_LINK_TAGS = ("basedOn", "link", "next")

_TRUE_VALUES = ("1", "true", "on")


class StyleTable:
    """
    Styles of one document.

    A document without a styles part has an empty table whose root is None
    until :meth:`ensure_root` is called.
    """

    def __init__(self, root: Optional[etree._Element] = None, part_name: Optional[str] = None):
        self.root = root
        self.part_name = part_name

    @property
    def is_empty(self) -> bool:
        return self.root is None or next(self.root.iterchildren(w("style")), None) is None

    def ensure_root(self) -> etree._Element:
        """Create an empty w:styles element when the document had none."""
        if self.root is None:
            self.root = etree.Element(w("styles"), nsmap={"w": W_NS})
            logger.debug("Created empty styles table")
        return self.root

    def __iter__(self) -> Iterator[etree._Element]:
        if self.root is None:
            return iter(())
        return self.root.iterchildren(w("style"))

    def ids(self) -> List[str]:
        return [style.get(STYLE_ID) for style in self if style.get(STYLE_ID)]

    def get(self, style_id: Optional[str]) -> Optional[etree._Element]:
        if not style_id:
            return None
        for style in self:
            if style.get(STYLE_ID) == style_id:
                return style
        return None

    def __contains__(self, style_id: str) -> bool:
        return self.get(style_id) is not None

    @staticmethod
    def style_type(style: etree._Element) -> str:
        return style.get(STYLE_TYPE, "paragraph")

    @staticmethod
    def is_default(style: etree._Element) -> bool:
        return style.get(STYLE_DEFAULT, "").lower() in _TRUE_VALUES

    def default_style(self, style_type: str = "paragraph") -> Optional[etree._Element]:
        """
        Default style of a type.

        Falls back to the style named "Normal" for paragraphs, which is what
        Word does for packages that omit the w:default flag.
        """
        for style in self:
            if self.style_type(style) == style_type and self.is_default(style):
                return style
        if style_type == "paragraph":
            for style in self:
                if self.style_type(style) == "paragraph" and get_val(style.find(w("name"))) == "Normal":
                    return style
        return None

    def add(self, style: etree._Element) -> None:
        """Append a style definition (moved, not copied)."""
        self.ensure_root().append(style)

    def based_on(self, style: etree._Element) -> Optional[str]:
        return get_val(style.find(w("basedOn")))

    def resolve_run_property(self, style_id: Optional[str], tag: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Walk a style's basedOn chain looking for a run property.

        Args:
            style_id: Style to start from
            tag: Local name of the w:rPr child (e.g. "sz")

        Returns:
            (value, id of the style that declares it), or (None, None)
        """
        seen = set()
        current = self.get(style_id)
        while current is not None:
            current_id = current.get(STYLE_ID)
            if current_id in seen:
                logger.warning(f"basedOn cycle at style {current_id}")
                break
            seen.add(current_id)
            rpr = current.find(w("rPr"))
            if rpr is not None:
                prop = rpr.find(w(tag))
                if prop is not None and prop.get(W_VAL):
                    return prop.get(W_VAL), current_id
            current = self.get(self.based_on(current))
        return None, None

    def doc_default_run_property(self, tag: str) -> Optional[str]:
        """Run property declared in w:docDefaults/w:rPrDefault."""
        if self.root is None:
            return None
        prop = self.root.find(f"{w('docDefaults')}/{w('rPrDefault')}/{w('rPr')}/{w(tag)}")
        return get_val(prop)
