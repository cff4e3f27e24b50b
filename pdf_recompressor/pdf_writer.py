"""
pdf_writer.py - Output document assembly.

Builds the output PDF page by page in source order:
- Preserved pages are copied from the source object graph untouched
- Rasterized pages become a blank page of the original size with one
  JPEG (DCTDecode) image filling it

Finalization uses object streams for a compact cross-reference layout.
"""

import io
import logging
from typing import Sequence

import pikepdf
from pikepdf import Pdf, Stream, Dictionary, Name

from .compression import EncodedImage
from .errors import AssemblyError, InvalidFormatError, PageCopyError

logger = logging.getLogger(__name__)


def open_copy_source(data: bytes) -> Pdf:
    """Parse PDF bytes into a pikepdf document used only as a copy source."""
    try:
        return pikepdf.open(io.BytesIO(data))
    except pikepdf.PasswordError as e:
        raise InvalidFormatError("PDF is password protected") from e
    except Exception as e:
        raise InvalidFormatError(f"Invalid or corrupted PDF file: {e}") from e


class PDFWriter:
    """
    Assembles preserved and rasterized pages into a new PDF.

    The source document must stay open until finalize() returns, since
    copied pages reference its objects.
    """

    def __init__(self, source: Pdf):
        self.source = source
        self.pdf = Pdf.new()
        self.preserved = 0
        self.rasterized = 0
        self._finalized = False

    @property
    def page_count(self) -> int:
        return len(self.pdf.pages)

    def _check_open(self):
        if self._finalized:
            raise AssemblyError("Output document is already finalized")

    def copy_page(self, page_num: int):
        """Copy a source page, keeping text, fonts, annotations and vectors."""
        self._check_open()
        try:
            self.pdf.pages.append(self.source.pages[page_num])
        except Exception as e:
            raise PageCopyError(f"Failed to copy page {page_num}: {e}") from e

        self.preserved += 1
        logger.debug(f"Copied page {page_num} from source")

    def add_image_page(self, image: EncodedImage):
        """Add a page sized to the original viewport, filled by the JPEG."""
        self._check_open()
        try:
            self.pdf.add_blank_page(
                page_size=(image.page_width_pts, image.page_height_pts)
            )
            page = self.pdf.pages[-1]

            colorspace = Name.DeviceRGB if image.is_color else Name.DeviceGray

            image_dict = Dictionary({
                '/Type': Name.XObject,
                '/Subtype': Name.Image,
                '/Width': image.width,
                '/Height': image.height,
                '/ColorSpace': colorspace,
                '/BitsPerComponent': 8,
                '/Filter': Name.DCTDecode,
            })
            img_stream = Stream(self.pdf, image.image_data, image_dict)

            xobjects = Dictionary({})
            xobjects['/Im0'] = self.pdf.make_indirect(img_stream)
            page.Resources = Dictionary({'/XObject': xobjects})

            # Scale the unit image square to the page, anchored at origin
            content = f"""
q
{image.page_width_pts:.4f} 0 0 {image.page_height_pts:.4f} 0 0 cm
/Im0 Do
Q
"""
            page.Contents = self.pdf.make_indirect(
                Stream(self.pdf, content.strip().encode("ascii"))
            )
        except Exception as e:
            raise AssemblyError(f"Failed to embed image for page {image.page_num}: {e}") from e

        self.rasterized += 1

        mode = "color" if image.is_color else "gray"
        logger.debug(
            f"Added image page {image.page_num}: "
            f"{image.total_size:,} bytes ({mode})"
        )

    def finalize(self) -> bytes:
        """Serialize the document once and return its bytes."""
        self._check_open()
        buffer = io.BytesIO()
        try:
            self.pdf.save(
                buffer,
                compress_streams=True,
                object_stream_mode=pikepdf.ObjectStreamMode.generate
            )
        except Exception as e:
            raise AssemblyError(f"Failed to save output document: {e}") from e
        finally:
            self._finalized = True
            self.pdf.close()

        data = buffer.getvalue()
        logger.info(
            f"Assembled {self.preserved + self.rasterized} pages "
            f"({self.preserved} preserved, {self.rasterized} rasterized): {len(data):,} bytes"
        )
        return data


def assemble(source: Pdf, outcomes: Sequence) -> bytes:
    """
    Build the output document from per-page outcomes.

    Args:
        source: Open pikepdf copy source
        outcomes: One PageOutcome per source page, in page order

    Returns:
        Finalized PDF bytes

    Raises:
        AssemblyError: outcome list does not match the source, or any
            copy/embed/save step failed. The whole document is abandoned.
    """
    source_pages = len(source.pages)
    if len(outcomes) != source_pages:
        raise AssemblyError(
            f"Got {len(outcomes)} page outcomes for a {source_pages}-page document"
        )

    writer = PDFWriter(source)
    try:
        for index, outcome in enumerate(outcomes):
            if outcome.page_num != index:
                raise AssemblyError(
                    f"Outcome for page {outcome.page_num} found at position {index}"
                )
            if outcome.is_preserved:
                writer.copy_page(index)
            else:
                writer.add_image_page(outcome.image)
    except Exception:
        writer.pdf.close()
        raise

    return writer.finalize()

