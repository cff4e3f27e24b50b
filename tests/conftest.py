"""
Pytest configuration and fixtures for pdf_recompressor tests.

PDFs are built in memory with PyMuPDF so every test runs against real
documents: text pages, image-only scans and scans with a stray watermark.
"""

import io

import numpy as np
import pytest
from PIL import Image

try:
    import fitz
except ImportError:
    import pymupdf as fitz

from pdf_recompressor.models import InputFile

TEXT_LINES = [
    "Quarterly report for the northern region",
    "Revenue grew steadily over the period",
    "Operating costs remained within budget",
    "Headcount increased by four people",
    "Two new offices opened in March",
    "Customer churn dropped below target",
    "Next review is scheduled for autumn",
    "Prepared by the finance team",
]

TEXT_PAGE_SIZE = (612.0, 792.0)
SCAN_PAGE_SIZE = (400.0, 300.0)


def make_scan_png(width: int = 200, height: int = 150, seed: int = 0) -> bytes:
    """Colorful noisy image standing in for a scanned photo."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def add_text_page(doc, lines=TEXT_LINES, size=TEXT_PAGE_SIZE):
    page = doc.new_page(width=size[0], height=size[1])
    for i, line in enumerate(lines):
        page.insert_text((72, 72 + i * 24), line, fontsize=12)
    return page


def add_scan_page(doc, size=SCAN_PAGE_SIZE, watermark=None, seed=0):
    page = doc.new_page(width=size[0], height=size[1])
    page.insert_image(page.rect, stream=make_scan_png(seed=seed))
    for i, word in enumerate(watermark or []):
        page.insert_text((20, 30 + i * 20), word, fontsize=10)
    return page


def build_pdf(*builders) -> bytes:
    """Build a PDF from page builder callables taking the document."""
    doc = fitz.open()
    try:
        for builder in builders:
            builder(doc)
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def text_pdf():
    """Two text-bearing pages."""
    return build_pdf(add_text_page, add_text_page)


@pytest.fixture
def scan_pdf():
    """One image-only page."""
    return build_pdf(add_scan_page)


@pytest.fixture
def mixed_pdf():
    """Text page, plain scan, scan with a two-word watermark."""
    return build_pdf(
        add_text_page,
        lambda d: add_scan_page(d, seed=1),
        lambda d: add_scan_page(d, size=(300.0, 500.0), watermark=["DRAFT", "CONFIDENTIAL"], seed=2),
    )


@pytest.fixture
def invalid_pdf():
    return b"This is not a PDF document at all"


@pytest.fixture
def make_input():
    """Factory for in-memory InputFile objects."""

    def _make(name="doc.pdf", data=b"", media_type="application/pdf"):
        return InputFile(name=name, media_type=media_type, data=data)

    return _make


def open_pdf(data: bytes):
    return fitz.open(stream=data, filetype="pdf")
