"""
classifier.py - Decide whether a page carries meaningful selectable text.

A page is text-bearing iff at least one span is longer than
SIGNIFICANT_TOKEN_LENGTH characters AND at least MIN_TOKEN_COUNT spans are
non-empty. A few stray glyphs (e.g. a watermark on a scan) are not enough.
"""

import logging
from typing import Iterable

from .rasterize import extract_text_tokens

logger = logging.getLogger(__name__)

SIGNIFICANT_TOKEN_LENGTH = 3  # Token must be longer than this
MIN_TOKEN_COUNT = 5           # Non-empty tokens required


def has_meaningful_text(tokens: Iterable[str]) -> bool:
    """Apply the text-presence rule to a page's text tokens."""
    trimmed = [t.strip() for t in tokens]

    has_significant = any(len(t) > SIGNIFICANT_TOKEN_LENGTH for t in trimmed)
    word_count = sum(1 for t in trimmed if t)

    return has_significant and word_count >= MIN_TOKEN_COUNT


def page_has_meaningful_text(doc, page_num: int) -> bool:
    """
    Classify a page of an open PyMuPDF document.

    If text extraction fails the page is treated as text-bearing, so it is
    copied as-is rather than rasterized.
    """
    try:
        tokens = extract_text_tokens(doc, page_num)
    except Exception as e:
        logger.warning(f"Text detection failed on page {page_num}, preserving it: {e}")
        return True

    verdict = has_meaningful_text(tokens)
    logger.debug(f"Page {page_num}: {len(tokens)} text spans, text-bearing={verdict}")
    return verdict
