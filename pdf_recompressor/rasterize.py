"""
rasterize.py - Page queries and rendering using PyMuPDF.

Opens the query view of a source document, extracts text spans for
classification and renders image-only pages at a quality-derived scale.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import cv2
import numpy as np
try:
    import fitz  # pip install pymupdf
except ImportError:
    import pymupdf as fitz

from .errors import InvalidFormatError, PageRenderError

logger = logging.getLogger(__name__)

# Scale = MIN_SCALE + quality * SCALE_RANGE  ->  0.5x .. 2.0x
MIN_SCALE = 0.5
SCALE_RANGE = 1.5


@dataclass
class RasterBuffer:
    """Rendered page pixels (RGB, uint8) plus the page geometry they came from."""
    page_num: int
    pixels: np.ndarray
    scale: float
    page_width_pts: float
    page_height_pts: float

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


def open_document(data: bytes) -> fitz.Document:
    """Parse PDF bytes into a PyMuPDF document. Caller closes it."""
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise InvalidFormatError(f"Invalid or corrupted PDF file: {e}") from e

    if doc.needs_pass:
        doc.close()
        raise InvalidFormatError("PDF is password protected")

    return doc


def get_page_count(doc: fitz.Document) -> int:
    """Get total page count."""
    return doc.page_count


def get_page_dimensions(doc: fitz.Document, page_num: int) -> Tuple[float, float]:
    """Get page viewport in PDF points (1/72 inch)."""
    rect = doc[page_num].rect
    return rect.width, rect.height


def extract_text_tokens(doc: fitz.Document, page_num: int) -> List[str]:
    """
    Extract the trimmed text of every span on a page, in reading order.

    Empty spans are kept (as ""), the classifier decides what counts.
    """
    page = doc[page_num]
    text_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

    tokens = []
    for block in text_dict.get("blocks", []):
        if block.get("type") != 0:  # Skip image blocks
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                tokens.append(span.get("text", "").strip())

    return tokens


def render_scale(quality: float) -> float:
    """Map quality [0, 1] to a render scale in [0.5, 2.0]."""
    return MIN_SCALE + quality * SCALE_RANGE


def raster_size(width: float, height: float, scale: float) -> Tuple[int, int]:
    """Pixel dimensions of a viewport rendered at ``scale``."""
    return int(round(width * scale)), int(round(height * scale))


def rasterize_page(
    doc: fitz.Document,
    page_num: int,
    quality: float
) -> RasterBuffer:
    """
    Rasterize a single page to an RGB buffer.

    Args:
        doc: Open PyMuPDF document (query view)
        page_num: 0-indexed page number
        quality: Quality scalar in [0, 1]

    Returns:
        RasterBuffer sized round(viewport * scale)
    """
    scale = render_scale(quality)

    try:
        page = doc[page_num]
        rect = page.rect
        page_width_pts = rect.width
        page_height_pts = rect.height

        target_width, target_height = raster_size(page_width_pts, page_height_pts, scale)
        if target_width < 1 or target_height < 1:
            raise PageRenderError(
                f"Page {page_num} has an empty viewport "
                f"({page_width_pts}x{page_height_pts} pts)"
            )

        matrix = fitz.Matrix(scale, scale)
        pixmap = page.get_pixmap(matrix=matrix, alpha=False, colorspace=fitz.csRGB)

        image = np.frombuffer(pixmap.samples, dtype=np.uint8).reshape(
            pixmap.height, pixmap.width, pixmap.n
        ).copy()  # Copy to own the memory
    except PageRenderError:
        raise
    except Exception as e:
        raise PageRenderError(f"Failed to render page {page_num}: {e}") from e

    # MuPDF rounds the pixel box outward; snap to the rounded viewport
    if (image.shape[1], image.shape[0]) != (target_width, target_height):
        image = cv2.resize(image, (target_width, target_height), interpolation=cv2.INTER_AREA)

    logger.debug(
        f"Rasterized page {page_num}: {target_width}x{target_height} @ {scale:.2f}x"
    )

    return RasterBuffer(
        page_num=page_num,
        pixels=image,
        scale=scale,
        page_width_pts=page_width_pts,
        page_height_pts=page_height_pts,
    )
