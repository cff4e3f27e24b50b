"""
PDF Recompressor - per-page text/scan aware PDF compression.

Pages with selectable text are copied untouched; image-only pages are
re-rendered and re-encoded as JPEG.
"""

__version__ = "1.0.0"

from .errors import (
    AssemblyError,
    InvalidFormatError,
    IOReadError,
    PageCopyError,
    PageEncodeError,
    PageRenderError,
    RecompressionCancelled,
    RecompressionError,
)
from .models import BatchItemResult, InputFile, PageOutcome, PageStrategy
from .pipeline import (
    DocumentResult,
    compress_batch,
    compress_batch_async,
    compress_document,
    compress_file,
    iter_batch,
    output_name,
)

__all__ = [
    "AssemblyError",
    "BatchItemResult",
    "DocumentResult",
    "IOReadError",
    "InputFile",
    "InvalidFormatError",
    "PageCopyError",
    "PageEncodeError",
    "PageOutcome",
    "PageRenderError",
    "PageStrategy",
    "RecompressionCancelled",
    "RecompressionError",
    "compress_batch",
    "compress_batch_async",
    "compress_document",
    "compress_file",
    "iter_batch",
    "output_name",
]
