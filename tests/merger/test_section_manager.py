"""
Tests for section boundaries and content splicing.
"""

from docx_merger.merger.content_appender import append_content
from docx_merger.merger.section_manager import SectionManager
from docx_merger.options import MergeOptions
from tests.helpers import paragraph, sect_pr, table, w


def _attr(element, tag, name):
    return element.find(w(tag)).get(w(name))


class TestSectionManager:
    """Tests for section capture, breaks and the final section."""

    def test_capture_clones_and_strips_doc_grid(self, load_docx):
        document = load_docx("a.docx", paragraph("x") + sect_pr(width=12240))
        manager = SectionManager()

        captured = manager.capture(document)

        assert captured is not document.body_section_properties()
        assert captured.find(w("docGrid")) is None
        assert document.body_section_properties().find(w("docGrid")) is not None
        assert _attr(captured, "pgSz", "w") == "12240"

    def test_capture_keeps_doc_grid_when_configured(self, load_docx):
        document = load_docx("a.docx", paragraph("x") + sect_pr())
        captured = SectionManager(MergeOptions(strip_document_grid=False)).capture(document)
        assert captured.find(w("docGrid")) is not None

    def test_capture_falls_back_to_last_paragraph_section(self, load_docx):
        body = paragraph("one", sect_pr=sect_pr(width=100)) + paragraph("two", sect_pr=sect_pr(width=200))
        document = load_docx("a.docx", body)
        assert _attr(SectionManager().capture(document), "pgSz", "w") == "200"

    def test_section_break_copies_page_settings_by_value(self, load_docx):
        document = load_docx("a.docx", paragraph("x") + sect_pr(width=16838, height=11906, orient="landscape"))
        manager = SectionManager()
        previous = manager.capture(document)

        marker = manager.section_break(previous)

        sect = marker.find(f"{w('pPr')}/{w('sectPr')}")
        assert [child.tag.rsplit("}", 1)[1] for child in sect] == ["type", "pgSz", "pgMar"]
        assert _attr(sect, "type", "val") == "nextPage"
        assert _attr(sect, "pgSz", "orient") == "landscape"
        assert sect.find(w("pgSz")) is not previous.find(w("pgSz"))

    def test_section_break_without_previous(self):
        marker = SectionManager().section_break(None)
        sect = marker.find(f"{w('pPr')}/{w('sectPr')}")
        assert [child.tag.rsplit("}", 1)[1] for child in sect] == ["type"]

    def test_final_section_three_tier_fallback(self, load_docx):
        """Last document, then first document, then an empty w:sectPr."""
        first = load_docx("a.docx", paragraph("x") + sect_pr(width=111))
        manager = SectionManager()

        assert len(SectionManager().final_section(None)) == 0

        manager.record_first(manager.capture(first))
        assert _attr(manager.final_section(None), "pgSz", "w") == "111"

        last = load_docx("c.docx", paragraph("x") + sect_pr(width=333))
        final = manager.final_section(manager.capture(last))
        assert _attr(final, "pgSz", "w") == "333"

    def test_record_first_only_once(self, load_docx):
        first = load_docx("a.docx", paragraph("x") + sect_pr(width=1))
        second = load_docx("b.docx", paragraph("x") + sect_pr(width=2))
        manager = SectionManager()
        manager.record_first(manager.capture(first))
        manager.record_first(manager.capture(second))
        assert _attr(manager.final_section(None), "pgSz", "w") == "1"

    def test_closing_section_only_on_last_paragraph(self, load_docx):
        closing = load_docx("a.docx", paragraph("one") + paragraph("two", sect_pr=sect_pr(width=100)))
        inner = load_docx("b.docx", paragraph("one", sect_pr=sect_pr(width=100)) + paragraph("two"))
        with_body = load_docx("c.docx", paragraph("one", sect_pr=sect_pr(width=100)) + sect_pr())

        found = SectionManager.closing_section(closing)

        assert found is closing.blocks()[-1].section_properties
        assert SectionManager.closing_section(inner) is None
        assert SectionManager.closing_section(with_body) is None

    def test_continue_on_next_page_sets_break_type(self, load_docx):
        document = load_docx("a.docx", paragraph("x", sect_pr=sect_pr(width=100)))
        closing = SectionManager.closing_section(document)

        SectionManager.continue_on_next_page(closing)
        SectionManager.continue_on_next_page(closing)

        assert [child.tag.rsplit("}", 1)[1] for child in closing] == ["type", "pgSz", "pgMar", "docGrid"]
        assert _attr(closing, "type", "val") == "nextPage"

    def test_release_closing_detaches(self, load_docx):
        document = load_docx("a.docx", paragraph("x", sect_pr=sect_pr(width=100)))
        closing = SectionManager.closing_section(document)

        SectionManager.release_closing(closing)

        assert document.body.find(f".//{w('sectPr')}") is None


class TestAppendContent:

    def test_blocks_moved_in_order_before_base_sect_pr(self, load_docx):
        base = load_docx("a.docx", paragraph("base") + sect_pr())
        other = load_docx(
            "b.docx", paragraph("one", style="S1") + table(paragraph("cell")) + "<w:sdt/>" + sect_pr(width=5)
        )

        moved = append_content(base, other)

        assert moved == 3
        tags = [child.tag.rsplit("}", 1)[1] for child in base.body]
        assert tags == ["p", "p", "tbl", "sdt", "sectPr"]
        assert len(other.body) == 1
        assert base.references.styles["S1"] == 1
        assert base.body_section_properties().find(w("pgSz")).get(w("w")) == "11906"
