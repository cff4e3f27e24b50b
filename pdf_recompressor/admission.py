"""
admission.py - Checks a caller runs before handing files to the pipeline.

Only PDFs up to MAX_FILE_SIZE are accepted, and no more than MAX_FILES may
be held at once. An addition that would exceed the cap is rejected whole.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from .models import InputFile, PDF_MEDIA_TYPE

logger = logging.getLogger(__name__)

MAX_FILES = 5
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB
ALLOWED_TYPE = PDF_MEDIA_TYPE


@dataclass
class AdmissionResult:
    valid_files: List[InputFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def is_pdf(input_file: InputFile) -> bool:
    return input_file.media_type == ALLOWED_TYPE


def is_valid_size(input_file: InputFile) -> bool:
    return input_file.size <= MAX_FILE_SIZE


def validate_file(input_file: InputFile) -> List[str]:
    """Return every admission error for one file (empty if admissible)."""
    errors = []

    if not is_pdf(input_file):
        errors.append(f"{input_file.name}: Only PDF files are allowed")

    if not is_valid_size(input_file):
        errors.append(
            f"{input_file.name}: File exceeds the maximum allowed size "
            f"({MAX_FILE_SIZE // (1024 * 1024)}MB)"
        )

    return errors


def validate_batch(files: Sequence[InputFile], current_count: int = 0) -> AdmissionResult:
    """
    Validate files being added to a set that already holds ``current_count``.

    Exceeding MAX_FILES rejects every file with a single error; otherwise
    each file is accepted or rejected on its own.
    """
    result = AdmissionResult()

    if current_count + len(files) > MAX_FILES:
        result.errors.append(f"You can only add up to {MAX_FILES} files in total")
        return result

    for input_file in files:
        errors = validate_file(input_file)
        if errors:
            result.errors.extend(errors)
        else:
            result.valid_files.append(input_file)

    return result


class FileQueue:
    """Files admitted for the next batch, capped at MAX_FILES."""

    def __init__(self):
        self._files: List[InputFile] = []

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[InputFile]:
        return iter(self._files)

    @property
    def files(self) -> List[InputFile]:
        return list(self._files)

    @property
    def is_full(self) -> bool:
        return len(self._files) >= MAX_FILES

    def add(self, files: Sequence[InputFile]) -> List[str]:
        """Admit what passes validation; return the errors for the rest."""
        result = validate_batch(files, current_count=len(self._files))
        self._files.extend(result.valid_files)
        for error in result.errors:
            logger.warning(error)
        return result.errors

    def remove(self, index: int) -> InputFile:
        return self._files.pop(index)

    def clear(self):
        self._files.clear()
