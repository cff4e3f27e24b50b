"""
models.py - Value types shared between pipeline stages.
"""

import enum
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .compression import EncodedImage
from .errors import IOReadError
from .formatting import calculate_reduction

PDF_MEDIA_TYPE = "application/pdf"


@dataclass
class InputFile:
    """
    A named byte source with a declared media type.

    Either ``data`` (in memory) or ``path`` (read lazily) must be set.
    """
    name: str
    media_type: str = PDF_MEDIA_TYPE
    data: Optional[bytes] = None
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path) -> "InputFile":
        path = Path(path)
        media_type, _ = mimetypes.guess_type(str(path))
        return cls(
            name=path.name,
            media_type=media_type or "application/octet-stream",
            path=path,
        )

    @property
    def size(self) -> int:
        if self.data is not None:
            return len(self.data)
        if self.path is None:
            return 0
        try:
            return self.path.stat().st_size
        except OSError as e:
            raise IOReadError(f"Could not read {self.name}: {e}") from e

    def read_bytes(self) -> bytes:
        """Return the full content, raising IOReadError if unreadable."""
        if self.data is not None:
            return bytes(self.data)
        if self.path is None:
            raise IOReadError(f"No data source for {self.name}")
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise IOReadError(f"Could not read {self.name}: {e}") from e


class PageStrategy(enum.Enum):
    PRESERVED = "preserved"
    RASTERIZED = "rasterized"


@dataclass(frozen=True)
class PageOutcome:
    """Which strategy was applied to a page, threaded from classification to assembly."""
    page_num: int
    kind: PageStrategy
    image: Optional[EncodedImage] = None

    @classmethod
    def preserved(cls, page_num: int) -> "PageOutcome":
        return cls(page_num=page_num, kind=PageStrategy.PRESERVED)

    @classmethod
    def rasterized(cls, page_num: int, image: EncodedImage) -> "PageOutcome":
        if image is None:
            raise ValueError("Rasterized outcome requires an encoded image")
        return cls(page_num=page_num, kind=PageStrategy.RASTERIZED, image=image)

    @property
    def is_preserved(self) -> bool:
        return self.kind is PageStrategy.PRESERVED


class DocumentState(enum.Enum):
    PENDING = "pending"
    PARSING = "parsing"
    CLASSIFYING = "classifying"
    TRANSCODING = "transcoding"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BatchItemResult:
    """Outcome of one file in a batch. One per input, in input order."""
    input_name: str
    success: bool
    output_bytes: Optional[bytes] = None
    output_name: Optional[str] = None
    error: Optional[str] = None
    input_size: int = 0

    @classmethod
    def ok(
        cls,
        input_name: str,
        output_bytes: bytes,
        output_name: str,
        input_size: int = 0
    ) -> "BatchItemResult":
        return cls(
            input_name=input_name,
            success=True,
            output_bytes=output_bytes,
            output_name=output_name,
            input_size=input_size,
        )

    @classmethod
    def failed(cls, input_name: str, error: str, input_size: int = 0) -> "BatchItemResult":
        return cls(input_name=input_name, success=False, error=error, input_size=input_size)

    @property
    def output_size(self) -> int:
        return len(self.output_bytes) if self.output_bytes is not None else 0

    @property
    def media_type(self) -> str:
        return PDF_MEDIA_TYPE

    @property
    def reduction(self) -> int:
        if not self.success:
            return 0
        return calculate_reduction(self.input_size, self.output_size)
