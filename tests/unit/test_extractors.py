"""Unit tests for format extractors with real in-memory documents.

Tests parse real file bytes (no mocks on the extraction libraries); only
the OCR engine is faked.
"""

from __future__ import annotations

import io

import pytest
from pypdf import PdfWriter

from extract_service.errors import ExtractionError
from extract_service.extraction.extractors.docx import DocxExtractor
from extract_service.extraction.extractors.html import HtmlExtractor
from extract_service.extraction.extractors.image import ImageExtractor
from extract_service.extraction.extractors.pdf import PdfExtractor
from extract_service.extraction.extractors.presentation import PresentationExtractor
from extract_service.extraction.extractors.spreadsheet import SpreadsheetExtractor
from extract_service.extraction.extractors.text import TextExtractor
from extract_service.extraction.normalizer import normalize


def _texts(raw) -> list[tuple[str, str]]:
    return [(c.type, c.text) for c in normalize(raw.units)]


# ===========================================================================
# Base behaviour
# ===========================================================================


class TestExtractorBase:
    def test_zero_byte_input_rejected(self):
        with pytest.raises(ExtractionError, match="empty.txt is empty"):
            TextExtractor().extract(data=b"", file_name="empty.txt")

    def test_library_errors_wrapped(self):
        with pytest.raises(ExtractionError, match="Could not parse corrupt.docx"):
            DocxExtractor().extract(data=b"NOT_A_VALID_ZIP", file_name="corrupt.docx")


# ===========================================================================
# TextExtractor
# ===========================================================================


class TestTextExtractor:
    def test_paragraphs_split_on_blank_lines(self):
        data = b"First paragraph\nstill first.\n\n\n\nSecond paragraph."
        raw = TextExtractor().extract(data=data, file_name="notes.txt")
        assert _texts(raw) == [
            ("paragraph", "First paragraph still first."),
            ("paragraph", "Second paragraph."),
        ]

    def test_markdown_headings_and_lists(self):
        data = b"# Guide\n\nIntro text.\n\n## Steps\n- install\n- run\n\n1. one\n2. two\n"
        raw = TextExtractor().extract(data=data, file_name="guide.md")
        assert _texts(raw) == [
            ("heading", "Guide"),
            ("paragraph", "Intro text."),
            ("heading", "Steps"),
            ("list", "- install - run"),
            ("list", "- one - two"),
        ]

    def test_bom_and_null_bytes_removed(self):
        raw = TextExtractor().extract(data=b"\xef\xbb\xbfHello\x00 World", file_name="a.txt")
        assert _texts(raw) == [("paragraph", "Hello World")]

    def test_binary_garbage_decoded_with_ignore(self):
        raw = TextExtractor().extract(data=bytes(range(0x80, 0xFF)), file_name="garbage.txt")
        assert isinstance(raw.units, list)


# ===========================================================================
# HtmlExtractor
# ===========================================================================


_HTML = b"""<html><head><title>Platform Guide</title>
<style>.x { font-size: 2px; }</style></head>
<body>
<h1>Welcome</h1>
<p>First    paragraph.</p>
<ul><li>One</li><li>Two <b>bold</b></li></ul>
<table><tr><th>Key</th><th>Value</th></tr><tr><td>a</td><td>1</td></tr></table>
<script>alert('x'); console.log('y');</script>
<div><p>Nested paragraph</p></div>
</body></html>"""


class TestHtmlExtractor:
    def test_blocks_in_document_order(self):
        raw = HtmlExtractor().extract(data=_HTML, file_name="guide.html")
        assert _texts(raw) == [
            ("heading", "Welcome"),
            ("paragraph", "First paragraph."),
            ("list", "- One - Two bold"),
            ("table", "Key | Value || a | 1"),
            ("paragraph", "Nested paragraph"),
        ]
        assert raw.metadata == {"title": "Platform Guide"}

    def test_script_and_style_stripped(self):
        raw = HtmlExtractor().extract(data=_HTML, file_name="guide.html")
        joined = " ".join(u.text for u in raw.units)
        assert "alert" not in joined
        assert "font-size" not in joined

    def test_text_without_blocks_becomes_paragraph(self):
        raw = HtmlExtractor().extract(data=b"<html><body><div>Loose  text</div></body></html>", file_name="a.html")
        assert _texts(raw) == [("paragraph", "Loose text")]

    def test_container_text_kept_alongside_blocks(self):
        data = (
            b"<html><body><div>Important div content here</div><p>Footer</p>"
            b"<section>Tail <span>text</span></section>Bare body text</body></html>"
        )
        raw = HtmlExtractor().extract(data=data, file_name="page.html")
        assert _texts(raw) == [
            ("paragraph", "Important div content here"),
            ("paragraph", "Footer"),
            ("paragraph", "Tail text Bare body text"),
        ]

    def test_comments_and_title_not_treated_as_text(self):
        data = b"<html><head><title>Doc</title></head><body><!-- hidden --><div>Shown</div></body></html>"
        raw = HtmlExtractor().extract(data=data, file_name="page.html")
        assert _texts(raw) == [("paragraph", "Shown")]
        assert raw.metadata == {"title": "Doc"}

    def test_malformed_html_tolerant(self):
        data = b"<html><body><p>First paragraph<p>Second <b>misnested</p></b><h2>Tail"
        raw = HtmlExtractor().extract(data=data, file_name="bad.html")
        texts = [t for _, t in _texts(raw)]
        assert "First paragraph" in texts
        assert any("misnested" in t for t in texts)

    def test_script_only_yields_nothing(self):
        data = b"<html><head><script>var data = 1;</script></head><body></body></html>"
        raw = HtmlExtractor().extract(data=data, file_name="script.html")
        assert normalize(raw.units) == []


# ===========================================================================
# DocxExtractor
# ===========================================================================


class TestDocxExtractor:
    def test_structure(self, sample_docx_bytes: bytes):
        raw = DocxExtractor().extract(data=sample_docx_bytes, file_name="report.docx")
        assert _texts(raw) == [
            ("heading", "Quarterly Report"),
            ("paragraph", "First paragraph of the document."),
            ("list", "- Alpha item - Beta item"),
            ("table", "Name | Value || Apples | 3"),
            ("paragraph", "Closing paragraph."),
        ]

    def test_metadata(self, sample_docx_bytes: bytes):
        raw = DocxExtractor().extract(data=sample_docx_bytes, file_name="report.docx")
        assert raw.metadata["author"] == "Jane Analyst"
        assert raw.metadata["table_count"] == 1
        assert raw.metadata["paragraph_count"] == 5

    def test_empty_docx_has_no_units(self, empty_docx_bytes: bytes):
        raw = DocxExtractor().extract(data=empty_docx_bytes, file_name="empty.docx")
        assert raw.units == []

    def test_truncated_docx_raises(self, sample_docx_bytes: bytes):
        truncated = sample_docx_bytes[: len(sample_docx_bytes) // 2]
        with pytest.raises(ExtractionError):
            DocxExtractor().extract(data=truncated, file_name="truncated.docx")


# ===========================================================================
# PdfExtractor
# ===========================================================================


class TestPdfExtractor:
    def test_pdf_happy_path(self, sample_pdf_bytes: bytes):
        raw = PdfExtractor().extract(data=sample_pdf_bytes, file_name="sample.pdf")
        chunks = normalize(raw.units)
        assert chunks
        assert "Line one" in chunks[0].text
        assert all(c.type == "paragraph" and c.page == 1 for c in chunks)
        assert raw.metadata["page_count"] == 1

    def test_page_numbers(self, multi_page_pdf_bytes: bytes):
        raw = PdfExtractor().extract(data=multi_page_pdf_bytes, file_name="multi.pdf")
        chunks = normalize(raw.units)
        assert [c.page for c in chunks] == [1, 2, 3]
        assert "page 2" in chunks[1].text
        assert raw.metadata["page_count"] == 3

    def test_empty_page_without_ocr_yields_no_units(self, empty_pdf_bytes: bytes):
        raw = PdfExtractor().extract(data=empty_pdf_bytes, file_name="empty.pdf")
        assert raw.units == []
        assert "ocr_pages" not in raw.metadata

    def test_image_less_empty_page_with_ocr(self, empty_pdf_bytes: bytes, make_ocr):
        adapter, events = make_ocr()
        raw = PdfExtractor(ocr=adapter).extract(data=empty_pdf_bytes, file_name="empty.pdf")
        assert raw.units == []
        assert events == []  # no embedded images, no engine started

    def test_image_only_page_is_ocrd(self, scanned_pdf_bytes: bytes, make_ocr):
        adapter, events = make_ocr(text="Scanned page text")
        raw = PdfExtractor(ocr=adapter).extract(data=scanned_pdf_bytes, file_name="scan.pdf")
        chunks = normalize(raw.units)
        assert [(c.type, c.text, c.page) for c in chunks] == [("paragraph", "Scanned page text", 1)]
        assert raw.metadata["ocr_pages"] == [1]
        assert events == ["start", "recognize", "terminate"]

    def test_failed_page_ocr_skipped(self, scanned_pdf_bytes: bytes, make_ocr):
        adapter, events = make_ocr(fail_on="recognize")
        raw = PdfExtractor(ocr=adapter).extract(data=scanned_pdf_bytes, file_name="scan.pdf")
        assert raw.units == []
        assert "ocr_pages" not in raw.metadata
        assert events[-1] == "terminate"

    def test_image_only_page_without_ocr(self, scanned_pdf_bytes: bytes):
        raw = PdfExtractor().extract(data=scanned_pdf_bytes, file_name="scan.pdf")
        assert raw.units == []
        assert raw.metadata["page_count"] == 1

    @pytest.mark.parametrize("data", [b"%PDF-1.4 GARBAGE", b"NOT_EVEN_PDF"])
    def test_corrupt_pdf_raises(self, data: bytes):
        with pytest.raises(ExtractionError, match="corrupt.pdf"):
            PdfExtractor().extract(data=data, file_name="corrupt.pdf")

    def test_password_protected_pdf_rejected(self):
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        writer.encrypt(user_password="secret", algorithm="RC4-128")
        buf = io.BytesIO()
        writer.write(buf)

        with pytest.raises(ExtractionError, match="PDF is encrypted"):
            PdfExtractor().extract(data=buf.getvalue(), file_name="locked.pdf")


# ===========================================================================
# SpreadsheetExtractor
# ===========================================================================


class TestSpreadsheetExtractor:
    def test_xlsx_sheets_become_sections(self, sample_xlsx_bytes: bytes):
        raw = SpreadsheetExtractor().extract(data=sample_xlsx_bytes, file_name="book.xlsx")
        chunks = normalize(raw.units)
        assert [(c.type, c.text, c.section) for c in chunks] == [
            ("heading", "Sales", "Sales"),
            ("table", "Region | Total || North | 10 || South | 20", "Sales"),
        ]
        assert raw.metadata == {"sheet_count": 2, "sheet_names": ["Sales", "Scratch"]}

    def test_csv(self):
        data = b"name,qty\nfoo,1\nbar,2\n"
        raw = SpreadsheetExtractor().extract(data=data, file_name="data.csv")
        assert _texts(raw) == [("table", "name | qty || foo | 1 || bar | 2")]
        assert raw.metadata == {"row_count": 3}

    def test_tsv_by_extension(self):
        data = b"a\tb\n1\t2\n"
        raw = SpreadsheetExtractor().extract(data=data, file_name="data.tsv")
        assert _texts(raw) == [("table", "a | b || 1 | 2")]

    def test_semicolon_delimiter_sniffed(self):
        data = b"city;population\nParis;2100000\nLyon;520000\n"
        raw = SpreadsheetExtractor().extract(data=data, file_name="cities.csv")
        assert _texts(raw) == [("table", "city | population || Paris | 2100000 || Lyon | 520000")]

    def test_long_tables_split_with_repeated_header(self):
        rows = ["id,value"] + [f"{i},v{i}" for i in range(120)]
        raw = SpreadsheetExtractor().extract(data="\n".join(rows).encode(), file_name="big.csv")
        chunks = normalize(raw.units)
        assert len(chunks) == 3
        assert all(c.text.startswith("id | value || ") for c in chunks)
        assert "119 | v119" in chunks[-1].text

    def test_blank_rows_skipped(self):
        raw = SpreadsheetExtractor().extract(data=b"h1,h2\n,\n\nx,y\n", file_name="gaps.csv")
        assert _texts(raw) == [("table", "h1 | h2 || x | y")]

    def test_corrupt_xlsx_raises(self):
        with pytest.raises(ExtractionError):
            SpreadsheetExtractor().extract(data=b"PK\x03\x04broken", file_name="broken.xlsx")


# ===========================================================================
# PresentationExtractor
# ===========================================================================


class TestPresentationExtractor:
    def test_slides(self, sample_pptx_bytes: bytes):
        raw = PresentationExtractor().extract(data=sample_pptx_bytes, file_name="deck.pptx")
        chunks = normalize(raw.units)
        assert [(c.type, c.text, c.page, c.section) for c in chunks] == [
            ("heading", "Roadmap", 1, "Roadmap"),
            ("list", "- Ship v1 - Beta program", 1, "Roadmap"),
            ("heading", "Numbers", 2, "Numbers"),
            ("table", "A | B || 1 | 2", 2, "Numbers"),
        ]
        assert raw.metadata["slide_count"] == 2

    def test_corrupt_pptx_raises(self):
        with pytest.raises(ExtractionError, match="deck.pptx"):
            PresentationExtractor().extract(data=b"not a deck", file_name="deck.pptx")


# ===========================================================================
# ImageExtractor
# ===========================================================================


class TestImageExtractor:
    def test_single_paragraph_from_ocr(self, make_ocr, sample_png_bytes: bytes):
        adapter, events = make_ocr(text="Invoice\n  Total: 42")
        raw = ImageExtractor(ocr=adapter).extract(data=sample_png_bytes, file_name="scan.png", mime_type="image/png")
        assert _texts(raw) == [("paragraph", "Invoice Total: 42")]
        assert raw.metadata == {"ocr_engine": "fake", "ocr_language": "eng"}
        assert events == ["start", "recognize", "terminate"]

    def test_ocr_failure_is_degraded_content_not_error(self, make_ocr, sample_png_bytes: bytes):
        adapter, _ = make_ocr(fail_on="recognize")
        raw = ImageExtractor(ocr=adapter).extract(data=sample_png_bytes, file_name="scan.png")
        chunks = normalize(raw.units)
        assert len(chunks) == 1
        assert chunks[0].text.startswith("[OCR Error]")
        assert raw.metadata["ocr_error"] == "engine crashed"

    def test_blank_ocr_text_yields_no_chunks(self, make_ocr, sample_png_bytes: bytes):
        adapter, _ = make_ocr(text="   ")
        raw = ImageExtractor(ocr=adapter).extract(data=sample_png_bytes, file_name="blank.png")
        assert normalize(raw.units) == []

