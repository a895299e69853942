"""
Package reader for DOCX files.

Handles DOCX container reading, content types, and part access. Every part
is held in memory so the package can be rewritten after a merge.
"""

from __future__ import annotations

import logging
import posixpath
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from lxml import etree

from ..exceptions import PackageError
from ..utils.xml_utils import CONTENT_TYPES_NS, parse_xml, serialize_xml

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
ROOT_RELS_PART = "_rels/.rels"


def normalize_part_name(part_name: str) -> str:
    """Return a package part name without leading slash and with '..' resolved."""
    name = posixpath.normpath(part_name.replace("\\", "/").lstrip("/"))
    return "" if name == "." else name


def rels_part_for(part_name: str) -> str:
    """Relationship part name for a source part, e.g. word/document.xml -> word/_rels/document.xml.rels."""
    directory, file_name = posixpath.split(normalize_part_name(part_name))
    return posixpath.join(directory, "_rels", f"{file_name}.rels")


class PackageReader:
    """
    Reads and manages DOCX package contents.

    Holds the raw bytes of every part, the content-types manifest
    (defaults by extension and per-part overrides) and the original
    entry order of the ZIP container.
    """

    def __init__(self, docx_path: Union[str, Path]):
        """
        Initialize package reader.

        Args:
            docx_path: Path to DOCX file

        Raises:
            PackageError: If the file cannot be opened as a ZIP container
        """
        self.docx_path = Path(docx_path)

        self._parts: Dict[str, bytes] = {}
        self._order: List[str] = []
        self._defaults: Dict[str, str] = {}
        self._overrides: Dict[str, str] = {}
        self._closed: bool = False

        self._open_package()
        self._parse_content_types()

    @property
    def closed(self) -> bool:
        return self._closed

    def _open_package(self) -> None:
        """Read every entry of the DOCX container into memory."""
        if not self.docx_path.is_file():
            raise PackageError("DOCX file not found", path=str(self.docx_path), details=str(self.docx_path))
        try:
            with zipfile.ZipFile(self.docx_path, "r") as zip_file:
                for info in zip_file.infolist():
                    if info.is_dir():
                        continue
                    name = normalize_part_name(info.filename)
                    self._parts[name] = zip_file.read(info.filename)
                    self._order.append(name)
        except zipfile.BadZipFile as e:
            raise PackageError("Not a DOCX (ZIP) package", path=str(self.docx_path), details=str(e)) from e
        except OSError as e:
            raise PackageError("Cannot read DOCX package", path=str(self.docx_path), details=str(e)) from e

        logger.info(f"Opened DOCX package: {self.docx_path} ({len(self._parts)} parts)")

    def _parse_content_types(self) -> None:
        """Parse [Content_Types].xml into extension defaults and part overrides."""
        content = self._parts.get(CONTENT_TYPES_PART)
        if content is None:
            logger.warning(f"{self.docx_path.name}: no {CONTENT_TYPES_PART} in package")
            return

        root = parse_xml(content, CONTENT_TYPES_PART)
        for default in root.findall(f"{{{CONTENT_TYPES_NS}}}Default"):
            extension = default.get("Extension", "")
            content_type = default.get("ContentType", "")
            if extension and content_type:
                self._defaults[extension.lower()] = content_type
        for override in root.findall(f"{{{CONTENT_TYPES_NS}}}Override"):
            part_name = override.get("PartName", "")
            content_type = override.get("ContentType", "")
            if part_name and content_type:
                self._overrides[normalize_part_name(part_name)] = content_type

        logger.debug(f"Parsed {len(self._defaults)} default and {len(self._overrides)} override content types")

    def _ensure_open(self) -> None:
        if self._closed:
            raise PackageError("Package already closed", path=str(self.docx_path))

    def has_part(self, part_name: str) -> bool:
        return normalize_part_name(part_name) in self._parts

    def part_names(self) -> List[str]:
        """Part names in container order, followed by parts added since load."""
        return list(self._order)

    def get_binary_content(self, part_name: str) -> Optional[bytes]:
        """
        Get binary content for a given part name.

        Args:
            part_name: Name of the part to retrieve

        Returns:
            Binary content as bytes, or None if not found
        """
        self._ensure_open()
        return self._parts.get(normalize_part_name(part_name))

    def get_xml(self, part_name: str) -> Optional[etree._Element]:
        """
        Parse an XML part.

        Returns:
            Root element, or None if the part does not exist

        Raises:
            ParsingError: If the part is not well-formed
        """
        content = self.get_binary_content(part_name)
        if content is None:
            return None
        return parse_xml(content, normalize_part_name(part_name))

    def set_part(self, part_name: str, content: bytes, content_type: Optional[str] = None) -> None:
        """
        Add or replace a part.

        Args:
            part_name: Package part name
            content: Part bytes
            content_type: Registered as an override when given
        """
        self._ensure_open()
        name = normalize_part_name(part_name)
        if name not in self._parts:
            self._order.append(name)
        self._parts[name] = content
        if content_type:
            self._overrides[name] = content_type

    def content_type_for(self, part_name: str) -> Optional[str]:
        """Resolve a part's content type: override first, then extension default."""
        name = normalize_part_name(part_name)
        if name in self._overrides:
            return self._overrides[name]
        extension = posixpath.splitext(name)[1].lstrip(".").lower()
        return self._defaults.get(extension)

    def ensure_default_content_type(self, extension: str, content_type: str) -> None:
        """Register an extension default unless one already exists."""
        extension = extension.lower().lstrip(".")
        if extension and extension not in self._defaults:
            self._defaults[extension] = content_type
            logger.debug(f"Registered default content type .{extension} -> {content_type}")

    def content_types_xml(self) -> bytes:
        """Serialize the current content-types manifest."""
        root = etree.Element(f"{{{CONTENT_TYPES_NS}}}Types", nsmap={None: CONTENT_TYPES_NS})
        for extension, content_type in self._defaults.items():
            etree.SubElement(root, f"{{{CONTENT_TYPES_NS}}}Default", Extension=extension, ContentType=content_type)
        for part_name, content_type in self._overrides.items():
            if part_name in self._parts:
                etree.SubElement(
                    root, f"{{{CONTENT_TYPES_NS}}}Override", PartName=f"/{part_name}", ContentType=content_type
                )
        return serialize_xml(root)

    def unique_part_name(self, directory: str, stem: str, extension: str, start: int = 1) -> str:
        """First free '<directory>/<stem><n>.<extension>' with n >= start."""
        index = start
        while True:
            candidate = normalize_part_name(f"{directory}/{stem}{index}.{extension}")
            if candidate not in self._parts:
                return candidate
            index += 1

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release every part held in memory."""
        self._parts.clear()
        self._order.clear()
        self._defaults.clear()
        self._overrides.clear()
        self._closed = True
        logger.debug(f"Package reader closed: {self.docx_path.name}")
