"""
errors.py - Failure taxonomy for the recompression pipeline.

Every stage wraps engine exceptions (PyMuPDF, pikepdf, Pillow) in one of
these so the batch loop can turn them into per-file failure entries.
"""


class RecompressionError(Exception):
    """
    Base class for anything that aborts processing of a single document.

    Attributes:
        message: Human readable reason
    """

    def __init__(self, message: str = "Failed to recompress document"):
        self.message = message
        super().__init__(self.message)


class InvalidFormatError(RecompressionError):
    """Input bytes cannot be parsed as a PDF."""

    def __init__(self, message: str = "Invalid or corrupted PDF file"):
        super().__init__(message)


class IOReadError(RecompressionError):
    """Input byte source could not be read."""

    def __init__(self, message: str = "Could not read input file"):
        super().__init__(message)


class PageRenderError(RecompressionError):
    """A page could not be rasterized."""

    def __init__(self, message: str = "Failed to render page"):
        super().__init__(message)


class PageEncodeError(RecompressionError):
    """A raster buffer could not be encoded."""

    def __init__(self, message: str = "Failed to encode page image"):
        super().__init__(message)


class AssemblyError(RecompressionError):
    """The output document could not be built or finalized."""

    def __init__(self, message: str = "Failed to assemble output document"):
        super().__init__(message)


class PageCopyError(AssemblyError):
    """A source page could not be copied into the output document."""

    def __init__(self, message: str = "Failed to copy page"):
        super().__init__(message)


class RecompressionCancelled(RecompressionError):
    """Processing was stopped through a cancel event."""

    def __init__(self, message: str = "Cancelled"):
        super().__init__(message)
