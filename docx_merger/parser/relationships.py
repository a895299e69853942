"""
Relationship table for DOCX parts.

Handles relationship part parsing, target resolution, id allocation and
serialization for a single source part (normally the main document part).
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from lxml import etree

from ..utils.xml_utils import OPC_RELS_NS, serialize_xml
from .package_reader import normalize_part_name

logger = logging.getLogger(__name__)

RT_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT_OFFICE_DOCUMENT = f"{RT_BASE}/officeDocument"
RT_IMAGE = f"{RT_BASE}/image"
RT_HYPERLINK = f"{RT_BASE}/hyperlink"
RT_STYLES = f"{RT_BASE}/styles"
RT_NUMBERING = f"{RT_BASE}/numbering"
RT_HEADER = f"{RT_BASE}/header"
RT_FOOTER = f"{RT_BASE}/footer"

_NUMERIC_ID = re.compile(r"^rId(\d+)$")


@dataclass
class Relationship:
    """One entry of a .rels part."""

    rel_id: str
    rel_type: str
    target: str
    target_mode: str = "Internal"

    @property
    def is_external(self) -> bool:
        return self.target_mode == "External"

    @property
    def type_name(self) -> str:
        """Last segment of the relationship type URI (image, hyperlink, ...)."""
        return self.rel_type.rsplit("/", 1)[-1]


class RelationshipTable:
    """
    Relationships owned by one source part.

    Keeps insertion order so rewritten .rels parts stay diffable against
    the originals.
    """

    def __init__(self, source_part: str, relationships: Optional[List[Relationship]] = None):
        """
        Args:
            source_part: Part name the relationships belong to (e.g. word/document.xml)
            relationships: Initial entries
        """
        self.source_part = normalize_part_name(source_part)
        self._relationships: Dict[str, Relationship] = {}
        for rel in relationships or []:
            self._relationships[rel.rel_id] = rel

    @classmethod
    def from_xml(cls, source_part: str, root: Optional[etree._Element]) -> "RelationshipTable":
        """Build a table from a parsed .rels part (None yields an empty table)."""
        table = cls(source_part)
        if root is None:
            return table
        for rel in root.findall(f"{{{OPC_RELS_NS}}}Relationship"):
            rel_id = rel.get("Id", "")
            target = rel.get("Target", "")
            if not rel_id or not target:
                logger.debug(f"Skipping incomplete relationship entry in {source_part}")
                continue
            table._relationships[rel_id] = Relationship(
                rel_id=rel_id,
                rel_type=rel.get("Type", ""),
                target=target,
                target_mode=rel.get("TargetMode", "Internal"),
            )
        return table

    def __iter__(self) -> Iterator[Relationship]:
        return iter(list(self._relationships.values()))

    def __len__(self) -> int:
        return len(self._relationships)

    def __contains__(self, rel_id: str) -> bool:
        return rel_id in self._relationships

    def get(self, rel_id: str) -> Optional[Relationship]:
        return self._relationships.get(rel_id)

    def ids(self) -> List[str]:
        return list(self._relationships)

    def by_type(self, rel_type: str) -> List[Relationship]:
        return [rel for rel in self._relationships.values() if rel.rel_type == rel_type]

    def first_of_type(self, rel_type: str) -> Optional[Relationship]:
        for rel in self._relationships.values():
            if rel.rel_type == rel_type:
                return rel
        return None

    def max_numeric_id(self) -> int:
        """Largest n among ids of the form rId<n> (0 if none)."""
        highest = 0
        for rel_id in self._relationships:
            match = _NUMERIC_ID.match(rel_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest

    def add(self, rel: Relationship) -> Relationship:
        """
        Add a relationship under its own id.

        Raises:
            ValueError: If the id is already taken
        """
        if rel.rel_id in self._relationships:
            raise ValueError(f"Relationship id {rel.rel_id} already used in {self.source_part}")
        self._relationships[rel.rel_id] = rel
        logger.debug(f"Added relationship: {rel.rel_id} ({rel.type_name}) -> {rel.target}")
        return rel

    def resolve_target(self, rel: Relationship) -> Optional[str]:
        """Package part name an internal relationship points at (None for external)."""
        if rel.is_external:
            return None
        if rel.target.startswith("/"):
            return normalize_part_name(rel.target)
        base_dir = posixpath.dirname(self.source_part)
        return normalize_part_name(posixpath.join(base_dir, rel.target))

    def relative_target(self, part_name: str) -> str:
        """Target string for a part, relative to the source part's directory."""
        base_dir = posixpath.dirname(self.source_part) or "."
        return posixpath.relpath(normalize_part_name(part_name), base_dir)

    def to_xml(self) -> bytes:
        """Serialize as a .rels part."""
        root = etree.Element(f"{{{OPC_RELS_NS}}}Relationships", nsmap={None: OPC_RELS_NS})
        for rel in self._relationships.values():
            element = etree.SubElement(root, f"{{{OPC_RELS_NS}}}Relationship")
            element.set("Id", rel.rel_id)
            element.set("Type", rel.rel_type)
            element.set("Target", rel.target)
            if rel.is_external:
                element.set("TargetMode", "External")
        return serialize_xml(root)
