import io
import stat
from collections.abc import Callable
from pathlib import Path

import docx
import pytesseract
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

POLICY_LINES = [
    "Comprehensive Travel Insurance Policy",
    "Insurer: Maple Leaf Assurance Company",
    "Emergency Medical coverage up to $5,000,000 CAD per insured person.",
    "Trip Cancellation coverage up to $10,000 with a $100 deductible.",
    "Exclusions: pre-existing medical conditions that are not stable.",
]


def _pdf(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a single-page PDF with known policy text."""
    return _pdf([POLICY_LINES])


@pytest.fixture()
def five_page_pdf_bytes() -> bytes:
    """Generate a five-page PDF with text on every page."""
    return _pdf([[f"Page {n} of the policy wording.", *POLICY_LINES] for n in range(1, 6)])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return _pdf([["Page one content of the policy"], ["Page two content of the policy"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf([[]])


@pytest.fixture()
def sample_docx_bytes() -> bytes:
    """Generate a DOCX with two paragraphs and a coverage table."""
    document = docx.Document()
    document.add_paragraph("Home Insurance Policy")
    document.add_paragraph("Insurer: Example Mutual")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Dwelling"
    table.cell(0, 1).text = "$500,000"
    table.cell(1, 0).text = "Personal Property"
    table.cell(1, 1).text = "$150,000"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture
def fake_tesseract(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str], Path]:
    """Install a shell script in place of the tesseract binary."""

    def install(body: str) -> Path:
        script = tmp_path / "tesseract"
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IEXEC)
        monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", str(script))
        return script

    return install
