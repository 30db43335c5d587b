"""Unit test conftest - sample documents generated in memory."""

from __future__ import annotations

import io

import pytest


@pytest.fixture
def sample_docx_bytes() -> bytes:
    """DOCX with a heading, paragraphs, a bullet list and a table."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    doc.add_heading("Quarterly Report", level=1)
    doc.add_paragraph("First paragraph of the document.")
    doc.add_paragraph("Alpha item", style="List Bullet")
    doc.add_paragraph("Beta item", style="List Bullet")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Name"
    table.cell(0, 1).text = "Value"
    table.cell(1, 0).text = "Apples"
    table.cell(1, 1).text = "3"
    doc.add_paragraph("Closing paragraph.")
    doc.core_properties.author = "Jane Analyst"
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def empty_docx_bytes() -> bytes:
    """Generate a valid DOCX with no paragraphs containing text."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Generate a 1-page PDF with 3 lines via fpdf2."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.cell(text="Line one of the PDF document.")
    pdf.ln()
    pdf.cell(text="Line two with additional content.")
    pdf.ln()
    pdf.cell(text="Line three concludes the page.")
    return bytes(pdf.output())


@pytest.fixture
def multi_page_pdf_bytes() -> bytes:
    """Generate a 3-page PDF for page number verification."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.set_font("Helvetica", size=12)
    for i in range(1, 4):
        pdf.add_page()
        pdf.cell(text=f"Content on page {i}.")
    return bytes(pdf.output())


@pytest.fixture
def empty_pdf_bytes() -> bytes:
    """Generate a 1-page PDF with no text content."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.add_page()
    return bytes(pdf.output())


@pytest.fixture
def sample_xlsx_bytes() -> bytes:
    """Workbook with a populated 'Sales' sheet and an empty 'Scratch' sheet."""
    openpyxl = pytest.importorskip("openpyxl")
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Sales"
    ws.append(["Region", "Total"])
    ws.append(["North", 10])
    ws.append(["South", 20])
    wb.create_sheet("Scratch")
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_pptx_bytes() -> bytes:
    """Two slides: title + indented bullets, then title + 2x2 table."""
    pptx = pytest.importorskip("pptx")
    from pptx.util import Inches

    prs = pptx.Presentation()

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Roadmap"
    body = slide.placeholders[1].text_frame
    body.text = "Ship v1"
    sub = body.add_paragraph()
    sub.text = "Beta program"
    sub.level = 1

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Numbers"
    table = slide.shapes.add_table(2, 2, Inches(1), Inches(2), Inches(4), Inches(1)).table
    table.cell(0, 0).text = "A"
    table.cell(0, 1).text = "B"
    table.cell(1, 0).text = "1"
    table.cell(1, 1).text = "2"

    buf = io.BytesIO()
    prs.save(buf)
    return buf.getvalue()


@pytest.fixture
def sample_png_bytes() -> bytes:
    """A small blank PNG (OCR engines are faked in unit tests)."""
    image_mod = pytest.importorskip("PIL.Image")
    img = image_mod.new("RGB", (32, 16), color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def scanned_pdf_bytes(sample_png_bytes: bytes) -> bytes:
    """A 1-page PDF whose only content is an embedded image (no text layer)."""
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.add_page()
    pdf.image(io.BytesIO(sample_png_bytes), x=10, y=10, w=64)
    return bytes(pdf.output())
