"""Tests for reference document parsing."""

import pytest
from landingqa.document.parser import DocumentParser, find_bare_urls
from landingqa.exceptions import ParseError
from landingqa.protocols import Link


@pytest.fixture
def parser():
    return DocumentParser()


@pytest.mark.unit
def test_find_bare_urls():
    text = "Visit https://shop.example.com/sale. Or (https://help.example.com/faq), again https://shop.example.com/sale"
    assert find_bare_urls(text) == ["https://shop.example.com/sale", "https://help.example.com/faq"]


@pytest.mark.unit
class TestPlainText:
    def test_text_file(self, parser, tmp_path):
        path = tmp_path / "copy.txt"
        path.write_text("Spring sale starts today\n\nShop now at https://shop.example.com/sale", encoding="utf-8")

        document = parser.parse(path)

        assert document.text.startswith("Spring sale starts today\n\n")
        assert document.links == [Link("https://shop.example.com/sale", "https://shop.example.com/sale")]
        assert document.source_name == "copy.txt"

    def test_source_name_decides_type(self, parser, tmp_path):
        path = tmp_path / "upload.tmp"
        path.write_text("Plain markdown copy", encoding="utf-8")
        document = parser.parse(path, source_name="brief.md")
        assert document.text == "Plain markdown copy"
        assert document.source_name == "brief.md"

    def test_unsupported_type(self, parser, tmp_path):
        path = tmp_path / "brief.pdf"
        path.write_bytes(b"%PDF-1.4")
        with pytest.raises(ParseError):
            parser.parse(path)


@pytest.mark.unit
class TestDocx:
    def test_paragraphs_and_hyperlinks(self, parser, make_docx):
        path = make_docx(
            [
                "Spring sale starts today",
                ("Save twenty percent. ", "https://shop.example.com/sale?utm_source=email", "Shop the sale"),
                "Questions? Write to https://help.example.com/contact",
            ]
        )

        document = parser.parse(path)

        assert document.text.split("\n\n") == [
            "Spring sale starts today",
            "Save twenty percent. Shop the sale",
            "Questions? Write to https://help.example.com/contact",
        ]
        assert document.links == [
            Link("Shop the sale", "https://shop.example.com/sale?utm_source=email"),
            Link("https://help.example.com/contact", "https://help.example.com/contact"),
        ]

    def test_bare_url_matching_anchor_not_duplicated(self, parser, make_docx):
        path = make_docx([("See ", "https://shop.example.com/sale", "https://shop.example.com/sale")])
        document = parser.parse(path)
        assert document.links == [Link("https://shop.example.com/sale", "https://shop.example.com/sale")]

    def test_table_cells_included(self, parser, make_docx):
        path = make_docx(["Intro paragraph text"], table_rows=[["Cell one text", "Cell two text"]])
        document = parser.parse(path)
        assert document.text.split("\n\n") == ["Intro paragraph text", "Cell one text", "Cell two text"]

    def test_merged_cells_read_once(self, parser, tmp_path):
        from docx import Document

        doc = Document()
        table = doc.add_table(rows=1, cols=2)
        merged = table.cell(0, 0).merge(table.cell(0, 1))
        merged.text = "Merged cell copy"
        path = tmp_path / "merged.docx"
        doc.save(str(path))

        document = parser.parse(path)

        assert document.text == "Merged cell copy"

    def test_corrupt_docx(self, parser, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(ParseError):
            parser.parse(path)
