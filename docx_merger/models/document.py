"""
In-memory model of one DOCX package taking part in a merge.

A Document owns the package parts (resource set), the parsed main
document part with its body, the main part's relationship table, and the
style and numbering tables. It is mutated in place by the merge stages and
is either kept as the merge base or released with :meth:`Document.close`
once its content has been absorbed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree

from ..exceptions import PackageError, ParsingError
from ..parser.package_reader import ROOT_RELS_PART, PackageReader, rels_part_for
from ..parser.preprocessor import PreprocessResult, preprocess_document
from ..parser.relationships import RT_NUMBERING, RT_OFFICE_DOCUMENT, RT_STYLES, Relationship, RelationshipTable
from ..utils.xml_utils import serialize_xml, w
from .blocks import Block, is_body_section_properties, iter_blocks
from .numbering import NumberingTable
from .references import ReferenceIndex
from .styles import StyleTable

logger = logging.getLogger(__name__)

DEFAULT_MAIN_PART = "word/document.xml"
RELS_CONTENT_TYPE = "application/vnd.openxmlformats-package.relationships+xml"


class Document:
    """
    One loaded word-processing package.

    Use :meth:`load` to create instances from a file.
    """

    def __init__(
        self,
        package: PackageReader,
        main_part: str,
        root: etree._Element,
        relationships: RelationshipTable,
        styles: StyleTable,
        numbering: NumberingTable,
        preprocess: Optional[PreprocessResult] = None,
    ):
        self.package = package
        self.main_part = main_part
        self.root = root
        self.relationships = relationships
        self.styles = styles
        self.numbering = numbering
        self.preprocess = preprocess or PreprocessResult()
        self.references = ReferenceIndex()
        self._closed = False

        body = root.find(w("body"))
        if body is None:
            raise ParsingError("Main document part has no w:body", part_name=main_part, details=main_part)
        self.body = body
        self.references.register(body)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Document":
        """
        Open a package and build its model.

        Args:
            path: Path to a .docx file

        Returns:
            Loaded and preprocessed document

        Raises:
            PackageError: If the file is unreadable or has no main document part
            ParsingError: If a required part is not well-formed XML
        """
        package = PackageReader(path)
        main_part = cls._locate_main_part(package)

        root = package.get_xml(main_part)
        if root is None:
            raise PackageError("Main document part missing", path=str(path), details=main_part)
        preprocess = preprocess_document(root, source=package.docx_path.name)

        relationships = RelationshipTable.from_xml(main_part, package.get_xml(rels_part_for(main_part)))
        styles = StyleTable(*cls._load_related_part(package, relationships, RT_STYLES))
        numbering = NumberingTable(*cls._load_related_part(package, relationships, RT_NUMBERING))

        document = cls(package, main_part, root, relationships, styles, numbering, preprocess)
        logger.info(
            f"Loaded {document.name}: {len(document.styles.ids())} styles, "
            f"{len(document.numbering.nums())} lists, {len(document.relationships)} relationships"
        )
        return document

    @staticmethod
    def _locate_main_part(package: PackageReader) -> str:
        """Main part name from the package relationships, default word/document.xml."""
        root_rels = RelationshipTable.from_xml("", package.get_xml(ROOT_RELS_PART))
        office_document = root_rels.first_of_type(RT_OFFICE_DOCUMENT)
        if office_document is not None:
            part_name = root_rels.resolve_target(office_document)
            if part_name and package.has_part(part_name):
                return part_name
            logger.warning(f"{package.docx_path.name}: officeDocument target {office_document.target} not found")
        return DEFAULT_MAIN_PART

    @staticmethod
    def _load_related_part(package: PackageReader, relationships: RelationshipTable, rel_type: str):
        """(root, part name) of the part a main-part relationship of rel_type points at."""
        rel = relationships.first_of_type(rel_type)
        if rel is None:
            return None, None
        part_name = relationships.resolve_target(rel)
        root = package.get_xml(part_name) if part_name else None
        if root is None:
            logger.warning(f"{package.docx_path.name}: {rel.type_name} part {rel.target} missing, treated as empty")
            return None, None
        return root, part_name

    @property
    def name(self) -> str:
        return self.package.docx_path.name

    @property
    def closed(self) -> bool:
        return self._closed

    def blocks(self) -> List[Block]:
        """Content blocks of the body, in document order."""
        return list(iter_blocks(self.body))

    def body_section_properties(self) -> Optional[etree._Element]:
        """The trailing body-level w:sectPr, if any."""
        last = self.body[-1] if len(self.body) else None
        if last is not None and is_body_section_properties(last):
            return last
        return None

    def set_body_section_properties(self, sect_pr: etree._Element) -> None:
        """Replace the body-level w:sectPr; the element is attached as given."""
        current = self.body_section_properties()
        if current is not None:
            self.body.remove(current)
        self.body.append(sect_pr)

    def append_block(self, element: etree._Element) -> None:
        """
        Attach a block at the end of the body content.

        The block goes before the body-level w:sectPr and its references are
        registered in :attr:`references`.
        """
        sect_pr = self.body_section_properties()
        if sect_pr is not None:
            sect_pr.addprevious(element)
        else:
            self.body.append(element)
        self.references.register(element)

    def attach_part(self, rel_type: str, part_name: str, content_type: str, rel_id: str) -> Relationship:
        """
        Create a relationship from the main part to a new part.

        The part bytes are written by :meth:`sync_parts`; only the
        content-type override and the relationship are registered here.
        """
        self.package.set_part(part_name, b"", content_type)
        rel = Relationship(rel_id=rel_id, rel_type=rel_type, target=self.relationships.relative_target(part_name))
        return self.relationships.add(rel)

    def sync_parts(self) -> None:
        """Serialize the mutated trees back into the package parts."""
        self.package.set_part(self.main_part, serialize_xml(self.root))
        if self.styles.root is not None and self.styles.part_name:
            self.package.set_part(self.styles.part_name, serialize_xml(self.styles.root))
        if self.numbering.root is not None and self.numbering.part_name:
            self.package.set_part(self.numbering.part_name, serialize_xml(self.numbering.root))
        if len(self.relationships):
            self.package.set_part(rels_part_for(self.main_part), self.relationships.to_xml())
            self.package.ensure_default_content_type("rels", RELS_CONTENT_TYPE)

    def close(self) -> None:
        """Release the package and every parsed tree."""
        if self._closed:
            return
        self.package.close()
        self.references.clear()
        self.styles = StyleTable()
        self.numbering = NumberingTable()
        self.relationships = RelationshipTable(self.main_part)
        self.body = None
        self.root = None
        self._closed = True
        logger.debug(f"Released document {self.name}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"Document({self.name!r}, closed={self._closed})"
