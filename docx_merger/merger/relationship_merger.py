"""
Resource relocator.

Copies the images of a non-base document into the base package under
fresh part names and relationship ids, re-creates external image links and
hyperlinks, and rewrites the relationship attributes of the document body.

Handles:
- direct part lookup with a fallback to resolution relative to the main part
- content-type checks (manifest first, Pillow sniffing otherwise)
- [Content_Types].xml updates for new media extensions
- two-phase id substitution so that old and new ids can never be confused
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from lxml import etree

from ..exceptions import MediaError
from ..media.image_types import resolve_image_type
from ..models.document import Document
from ..models.references import iter_relationship_attributes
from ..parser.package_reader import normalize_part_name
from ..parser.relationships import RT_HYPERLINK, RT_IMAGE, Relationship
from .id_allocator import IdAllocator

logger = logging.getLogger(__name__)

_PLACEHOLDER = "__docx_merger_rel_{index}__"


@dataclass
class RelocationResult:
    """Outcome of relocating one document's resources."""

    relationship_ids: Dict[str, str] = field(default_factory=dict)
    copied_parts: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    unmapped: Set[str] = field(default_factory=set)


class RelationshipMerger:
    """
    Moves the resources of one source document into the base.

    Example:
        >>> merger = RelationshipMerger(base, document, allocator, "_DOC2")
        >>> result = merger.relocate()
    """

    def __init__(self, base: Document, document: Document, allocator: IdAllocator, tag: str):
        """
        Args:
            base: Merge target receiving the resources
            document: Source document, its body is rewritten in place
            allocator: Hands out relationship ids and media part names
            tag: Suffix for relationship ids that cannot be mapped
        """
        self.base = base
        self.document = document
        self.allocator = allocator
        self.tag = tag
        # source part -> new base relationship id
        self._copied: Dict[str, str] = {}

    def relocate(self) -> RelocationResult:
        """Copy resources, then rewrite every r:* attribute of the body."""
        result = RelocationResult()
        for rel in self.document.relationships:
            if rel.rel_type == RT_IMAGE:
                new_id = self._relocate_image(rel, result)
            elif rel.rel_type == RT_HYPERLINK and rel.is_external:
                new_id = self._add_base_relationship(rel.rel_type, rel.target, external=True)
            else:
                continue
            if new_id is not None:
                result.relationship_ids[rel.rel_id] = new_id
                logger.debug(f"{self.document.name}: {rel.rel_id} -> {new_id} ({rel.type_name})")

        result.unmapped = rewrite_relationship_ids(self.document.body, result.relationship_ids, self.tag)
        if result.unmapped:
            logger.warning(
                f"{self.document.name}: relationship references left unmapped: {', '.join(sorted(result.unmapped))}"
            )
        logger.info(
            f"Relocated {len(result.copied_parts)} media parts and {len(result.relationship_ids)} relationships "
            f"from {self.document.name}"
        )
        return result

    def _locate_part(self, rel: Relationship) -> Optional[str]:
        """Part name of an internal target: direct lookup first, then relative to the main part."""
        package = self.document.package
        direct = normalize_part_name(rel.target)
        if package.has_part(direct):
            return direct
        resolved = self.document.relationships.resolve_target(rel)
        if resolved and package.has_part(resolved):
            return resolved
        return None

    def _relocate_image(self, rel: Relationship, result: RelocationResult) -> Optional[str]:
        if rel.is_external:
            return self._add_base_relationship(RT_IMAGE, rel.target, external=True)

        source_part = self._locate_part(rel)
        if source_part is None:
            logger.warning(f"{self.document.name}: image {rel.rel_id} -> {rel.target} not found, skipped")
            result.skipped.append(rel.rel_id)
            return None
        if source_part in self._copied:
            return self._copied[source_part]

        data = self.document.package.get_binary_content(source_part)
        content_type, extension = resolve_image_type(
            source_part, data, self.document.package.content_type_for(source_part)
        )
        if content_type is None:
            logger.warning(f"{self.document.name}: {source_part} is not an image (wrong-typed), skipped")
            result.skipped.append(rel.rel_id)
            return None

        new_part = self._copy_media(data, content_type, extension)
        new_id = self._add_base_relationship(RT_IMAGE, self.base.relationships.relative_target(new_part))
        self._copied[source_part] = new_id
        result.copied_parts.append(new_part)
        return new_id

    def _copy_media(self, data: bytes, content_type: str, extension: str) -> str:
        """Write bytes to a fresh media part of the base and register its content type."""
        package = self.base.package
        new_part = self.allocator.next_media_part(self.base, extension)
        package.set_part(new_part, data)
        package.ensure_default_content_type(extension, content_type)
        if package.content_type_for(new_part) != content_type:
            package.set_part(new_part, data, content_type)
        return new_part

    def _add_base_relationship(self, rel_type: str, target: str, external: bool = False) -> str:
        rel = Relationship(
            rel_id=self.allocator.next_relationship_id(self.base),
            rel_type=rel_type,
            target=target,
            target_mode="External" if external else "Internal",
        )
        try:
            self.base.relationships.add(rel)
        except ValueError as e:
            raise MediaError("Cannot register relationship in base document", details=str(e)) from e
        return rel.rel_id


def rewrite_relationship_ids(root: etree._Element, mapping: Dict[str, str], tag: str) -> Set[str]:
    """
    Rewrite every r:* attribute below root through mapping, in two phases.

    Phase one replaces each old id with a unique placeholder; phase two
    replaces each placeholder with its final id. A value is therefore
    rewritten exactly once even when an old id equals another entry's new
    id. Ids missing from mapping get tag appended.

    Returns:
        The old ids that were not in mapping
    """
    pending: List[Tuple[etree._Element, str, str]] = []
    finals: Dict[str, str] = {}
    unmapped: Set[str] = set()

    for index, (element, attribute) in enumerate(list(iter_relationship_attributes(root))):
        old = element.get(attribute)
        if not old:
            continue
        placeholder = _PLACEHOLDER.format(index=index)
        if old in mapping:
            finals[placeholder] = mapping[old]
        else:
            finals[placeholder] = f"{old}{tag}"
            unmapped.add(old)
        element.set(attribute, placeholder)
        pending.append((element, attribute, placeholder))

    for element, attribute, placeholder in pending:
        element.set(attribute, finals[placeholder])

    return unmapped
