"""
Tests for main document preprocessing.
"""

from lxml import etree

from docx_merger.parser.preprocessor import preprocess_document
from tests.helpers import NS_DECL, W_NS, w


def _document(body):
    return etree.fromstring(f"<w:document {NS_DECL}><w:body>{body}</w:body></w:document>".encode())


class TestPreprocessDocument:

    def test_renames_start_and_end(self):
        """w:start/w:end become w:left/w:right, attributes intact."""
        root = _document(
            '<w:p><w:pPr><w:pBdr><w:start w:val="single"/><w:end w:val="double"/></w:pBdr></w:pPr></w:p>'
        )

        result = preprocess_document(root, "a.docx")

        assert result.renamed_tags == 2
        borders = root.find(f".//{w('pBdr')}")
        assert [child.tag for child in borders] == [w("left"), w("right")]
        assert borders[1].get(f"{{{W_NS}}}val") == "double"

    def test_drops_header_and_footer_references(self):
        root = _document(
            '<w:sectPr><w:headerReference w:type="default" r:id="rId8"/>'
            '<w:footerReference w:type="default" r:id="rId9"/><w:pgSz w:w="100" w:h="200"/></w:sectPr>'
        )

        result = preprocess_document(root)

        assert result.dropped_references == 2
        sect_pr = root.find(f".//{w('sectPr')}")
        assert [child.tag for child in sect_pr] == [w("pgSz")]

    def test_clean_document_is_untouched(self):
        root = _document("<w:p><w:r><w:t>plain</w:t></w:r></w:p>")
        before = etree.tostring(root)

        result = preprocess_document(root)

        assert (result.renamed_tags, result.dropped_references) == (0, 0)
        assert etree.tostring(root) == before
