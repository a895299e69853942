"""
Merge orchestrator.

Sequences the merge stages over an ordered list of packages:

1. load and preprocess a batch of documents;
2. per non-base document: style rename, numbering renumber, resource
   relocation (all in place, inside the document);
3. format normalization on every document;
4. absorption of style and numbering definitions into the base;
5. section breaks and content splicing;

then, once every batch is folded in, markup repair, the reference audit
and the atomic write of the result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from ..export.docx_writer import write_document
from ..models.document import Document
from ..options import MergeOptions
from .content_appender import append_content
from .format_normalizer import normalize_font_sizes
from .id_allocator import IdAllocator
from .markup_repair import repair_markup
from .numbering_merger import absorb_numbering, renumber
from .reference_audit import MergeReport, audit_references
from .relationship_merger import RelationshipMerger
from .section_manager import SectionManager
from .style_merger import absorb_styles, allocate_style_tag, rename_styles

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DocumentMerger:
    """
    Merges DOCX packages into one.

    The first document is the base: its styles, numbering and section
    properties keep their ids. Every later document is folded into it in
    order, ``options.batch_size`` documents at a time.

    Example:
        >>> merger = DocumentMerger(MergeOptions(batch_size=10))
        >>> report = merger.merge(["a.docx", "b.docx"], "merged.docx")
    """

    def __init__(self, options: Optional[MergeOptions] = None) -> None:
        self.options = options or MergeOptions()

    def merge(self, paths: Sequence[PathLike], output_path: PathLike) -> MergeReport:
        """
        Merge paths in order and write the result to output_path.

        Args:
            paths: Ordered source packages; the first one is the base
            output_path: Destination .docx

        Returns:
            Report of the run

        Raises:
            ValueError: If paths is empty
            PackageError: If a source cannot be read or the output cannot be written
            ParsingError: If a required part is malformed
            UnresolvedReferenceError: With the "fail" policy, before anything is written
        """
        paths = [Path(path) for path in paths]
        if not paths:
            raise ValueError("At least one document is required")

        report = MergeReport(documents=[path.name for path in paths])
        sections = SectionManager(self.options)
        base: Optional[Document] = None
        allocator: Optional[IdAllocator] = None

        logger.info(f"Merging {len(paths)} documents in batches of {self.options.batch_size}")
        try:
            for batch_number, batch_paths in enumerate(self._batches(paths), start=1):
                documents = self._load_batch(batch_paths)
                if base is None:
                    base, documents = documents[0], documents[1:]
                    allocator = IdAllocator(base)
                    sections.record_first(sections.capture(base))
                    if self.options.normalize_font_sizes:
                        report.sizes_normalized += normalize_font_sizes(base, self.options)

                logger.info(f"Batch {batch_number}: folding {len(documents)} documents into {base.name}")
                self._merge_batch(base, documents, allocator, sections, report)
                report.batches += 1

            report.justification_repaired = repair_markup(base, self.options.default_justification)
            audit = audit_references(base, self.options.unresolved_references)
            report.unresolved = audit.unresolved
            report.duplicates = audit.duplicates

            report.output_path = write_document(base, output_path)
        finally:
            if base is not None:
                base.close()

        logger.info(f"Merge finished: {report.summary()}")
        return report

    def _batches(self, paths: List[Path]) -> Iterator[List[Path]]:
        size = self.options.batch_size
        for start in range(0, len(paths), size):
            yield paths[start:start + size]

    @staticmethod
    def _load_batch(paths: List[Path]) -> List[Document]:
        """Load a batch; documents already loaded are released if a later one fails."""
        documents: List[Document] = []
        try:
            for path in paths:
                documents.append(Document.load(path))
        except Exception:
            for document in documents:
                document.close()
            raise
        return documents

    def _merge_batch(
        self,
        base: Document,
        documents: List[Document],
        allocator: IdAllocator,
        sections: SectionManager,
        report: MergeReport,
    ) -> None:
        """Fold documents into base, then release them."""
        try:
            for document in documents:
                tag = allocate_style_tag(base, document, allocator, self.options)
                rename_styles(document, tag)
                renumber(document, allocator)
                relocation = RelationshipMerger(base, document, allocator, tag).relocate()
                report.media_copied += len(relocation.copied_parts)
                report.resources_skipped.extend(f"{document.name}:{rel_id}" for rel_id in relocation.skipped)

            if self.options.normalize_font_sizes:
                for document in documents:
                    report.sizes_normalized += normalize_font_sizes(document, self.options)

            for document in documents:
                report.styles_added += absorb_styles(base, document, allocator)
                report.lists_added += absorb_numbering(base, document, allocator)

            # Captured before splicing: appending moves the blocks out of each document.
            previous = sections.capture(base)
            closing = sections.closing_section(base)
            captured = [(sections.capture(document), sections.closing_section(document)) for document in documents]
            for document, (section, document_closing) in zip(documents, captured):
                if closing is not None:
                    sections.continue_on_next_page(closing)
                else:
                    base.append_block(sections.section_break(previous))
                append_content(base, document)
                previous, closing = section, document_closing
            # The body-level w:sectPr takes over the last closing paragraph's section.
            if closing is not None:
                sections.release_closing(closing)
            base.set_body_section_properties(sections.final_section(previous))
        finally:
            for document in documents:
                document.close()
