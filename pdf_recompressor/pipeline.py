"""
pipeline.py - Per-page classify/transcode pipeline and batch driver.

Pipeline per document:
1. Parse the bytes twice: PyMuPDF query view, pikepdf copy source
2. Per page: text-bearing -> preserve, otherwise render -> JPEG
3. Assemble output from the recorded outcomes
4. Close both views on every exit path

Batches run strictly one file at a time; a failing file is recorded and
the next one still runs.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Callable, Iterator, List, Optional, Sequence

from .classifier import page_has_meaningful_text
from .compression import encode_page
from .errors import RecompressionCancelled, RecompressionError
from .formatting import calculate_reduction, format_size
from .models import BatchItemResult, DocumentState, InputFile, PageOutcome
from .pdf_writer import assemble, open_copy_source
from .rasterize import get_page_count, open_document, rasterize_page

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 0.5
OUTPUT_SUFFIX = "_compressed"

ProgressCallback = Callable[[int, int], None]


@dataclass
class DocumentResult:
    """Result of recompressing one PDF."""
    input_name: str
    output_name: str
    output_bytes: bytes
    input_size: int = 0
    outcomes: List[PageOutcome] = field(default_factory=list)
    states: List[DocumentState] = field(default_factory=list)
    total_time: float = 0.0

    @property
    def page_count(self) -> int:
        return len(self.outcomes)

    @property
    def pages_preserved(self) -> int:
        return sum(1 for o in self.outcomes if o.is_preserved)

    @property
    def pages_rasterized(self) -> int:
        return self.page_count - self.pages_preserved

    @property
    def output_size(self) -> int:
        return len(self.output_bytes)

    @property
    def reduction(self) -> int:
        return calculate_reduction(self.input_size, self.output_size)

    def summary(self) -> str:
        return (
            f"Input:  {self.input_name} ({format_size(self.input_size)})\n"
            f"Output: {self.output_name} ({format_size(self.output_size)})\n"
            f"Reduction: {self.reduction}%\n"
            f"Pages: {self.page_count} "
            f"({self.pages_preserved} preserved, {self.pages_rasterized} rasterized)\n"
            f"Time: {self.total_time:.1f}s"
        )


class DocumentJob:
    """Tracks the state machine of one document through the pipeline."""

    def __init__(self, name: str):
        self.name = name
        self.state = DocumentState.PENDING
        self.history: List[DocumentState] = [DocumentState.PENDING]
        self.error: Optional[str] = None

    def advance(self, state: DocumentState):
        if state is self.state:
            return
        logger.debug(f"{self.name}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, reason: str):
        self.error = reason
        self.advance(DocumentState.FAILED)


def validate_quality(quality: float) -> float:
    quality = float(quality)
    if not 0.0 <= quality <= 1.0:
        raise ValueError(f"Quality must be in [0.0, 1.0], got {quality}")
    return quality


def output_name(name: str) -> str:
    """Insert the ``_compressed`` marker before the file extension."""
    path = PurePath(name)
    if path.suffix:
        return str(path.with_name(f"{path.stem}{OUTPUT_SUFFIX}{path.suffix}"))
    return f"{name}{OUTPUT_SUFFIX}"


def _check_cancelled(cancel_event: Optional[threading.Event]):
    if cancel_event is not None and cancel_event.is_set():
        raise RecompressionCancelled()


def compress_document(
    data: bytes,
    quality: float = DEFAULT_QUALITY,
    name: str = "document.pdf",
    job: Optional[DocumentJob] = None,
    cancel_event: Optional[threading.Event] = None
) -> DocumentResult:
    """
    Recompress a PDF, preserving text pages and re-encoding image pages.

    Args:
        data: Input PDF bytes
        quality: Quality in [0, 1], drives render scale and JPEG quality
        name: Input file name, used for the output name and logging
        job: Optional state tracker, created if not given
        cancel_event: Checked between pages

    Returns:
        DocumentResult with the output bytes and per-page outcomes

    Raises:
        RecompressionError: any stage failed; nothing partial is returned
    """
    quality = validate_quality(quality)
    job = job or DocumentJob(name)
    start_time = time.time()

    try:
        job.advance(DocumentState.PARSING)
        with open_document(data) as doc, open_copy_source(data) as source:
            page_count = get_page_count(doc)
            logger.info(f"Processing {name}: {page_count} pages, {len(data):,} bytes, q={quality:.2f}")

            outcomes: List[PageOutcome] = []
            for page_num in range(page_count):
                _check_cancelled(cancel_event)

                job.advance(DocumentState.CLASSIFYING)
                if page_has_meaningful_text(doc, page_num):
                    logger.info(f"Page {page_num}: has text - copying as-is")
                    outcomes.append(PageOutcome.preserved(page_num))
                    continue

                job.advance(DocumentState.TRANSCODING)
                logger.info(f"Page {page_num}: image only - rasterizing")
                buffer = rasterize_page(doc, page_num, quality)
                image = encode_page(buffer, quality)
                del buffer
                outcomes.append(PageOutcome.rasterized(page_num, image))

            _check_cancelled(cancel_event)
            job.advance(DocumentState.ASSEMBLING)
            output_bytes = assemble(source, outcomes)
    except RecompressionError as e:
        job.fail(e.message)
        raise
    except Exception as e:
        job.fail(str(e))
        raise

    job.advance(DocumentState.DONE)

    result = DocumentResult(
        input_name=name,
        output_name=output_name(name),
        output_bytes=output_bytes,
        input_size=len(data),
        outcomes=outcomes,
        states=list(job.history),
        total_time=time.time() - start_time,
    )
    logger.info(f"\n{result.summary()}")
    return result


def compress_file(
    input_file: InputFile,
    quality: float = DEFAULT_QUALITY,
    cancel_event: Optional[threading.Event] = None
) -> DocumentResult:
    """Read an input file and recompress it."""
    data = input_file.read_bytes()
    return compress_document(
        data,
        quality=quality,
        name=input_file.name,
        cancel_event=cancel_event,
    )


def _to_batch_result(
    input_file: InputFile,
    quality: float,
    cancel_event: Optional[threading.Event]
) -> BatchItemResult:
    """Run one file, turning any failure into a failure entry."""
    try:
        result = compress_file(input_file, quality, cancel_event=cancel_event)
    except Exception as e:
        reason = e.message if isinstance(e, RecompressionError) else str(e)
        logger.error(f"Failed to compress {input_file.name}: {reason}")
        return BatchItemResult.failed(
            input_file.name,
            f"Error compressing {input_file.name}: {reason}",
        )

    return BatchItemResult.ok(
        input_file.name,
        output_bytes=result.output_bytes,
        output_name=result.output_name,
        input_size=result.input_size,
    )


def iter_batch(
    files: Sequence[InputFile],
    quality: float = DEFAULT_QUALITY,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None
) -> Iterator[BatchItemResult]:
    """
    Recompress files one at a time, yielding a result per file in order.

    on_progress(completed, total) fires exactly once per file, after its
    attempt concludes and before the next file starts.
    """
    quality = validate_quality(quality)
    total = len(files)

    for index, input_file in enumerate(files):
        if cancel_event is not None and cancel_event.is_set():
            item = BatchItemResult.failed(
                input_file.name,
                f"Error compressing {input_file.name}: Cancelled",
            )
        else:
            logger.info(f"[{index + 1}/{total}] {input_file.name}")
            item = _to_batch_result(input_file, quality, cancel_event)

        if on_progress:
            on_progress(index + 1, total)

        yield item


def compress_batch(
    files: Sequence[InputFile],
    quality: float = DEFAULT_QUALITY,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None
) -> List[BatchItemResult]:
    """Recompress a batch. Result list has the same length and order as ``files``."""
    return list(iter_batch(files, quality, on_progress, cancel_event))


async def compress_batch_async(
    files: Sequence[InputFile],
    quality: float = DEFAULT_QUALITY,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None
) -> List[BatchItemResult]:
    """
    Same as compress_batch, but each file runs in a worker thread so the
    event loop stays responsive. Files are still processed one at a time.
    """
    quality = validate_quality(quality)
    total = len(files)
    results: List[BatchItemResult] = []

    for index, input_file in enumerate(files):
        if cancel_event is not None and cancel_event.is_set():
            item = BatchItemResult.failed(
                input_file.name,
                f"Error compressing {input_file.name}: Cancelled",
            )
        else:
            item = await asyncio.to_thread(_to_batch_result, input_file, quality, cancel_event)

        results.append(item)
        if on_progress:
            on_progress(index + 1, total)

    return results
