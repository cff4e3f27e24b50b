"""
compression.py - JPEG encoding of rasterized pages.

Color pages are encoded as RGB JPEG, effectively gray pages as
single-channel JPEG. No alpha: PDF pages are opaque.
"""

import io
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image
import cv2

from .errors import PageEncodeError

logger = logging.getLogger(__name__)

# Encode quality never drops below this factor
MIN_ENCODE_QUALITY = 0.3

# Pillow's useful JPEG quality range
MAX_JPEG_QUALITY = 95

# Saturation threshold for grayscale conversion
# Only convert to grayscale if mean saturation is below this
GRAYSCALE_SATURATION_THRESHOLD = 10  # Out of 255


@dataclass
class EncodedImage:
    """Compressed page image ready for PDF embedding."""
    page_num: int
    image_data: bytes
    width: int
    height: int
    page_width_pts: float
    page_height_pts: float
    is_color: bool
    quality: float

    @property
    def total_size(self) -> int:
        return len(self.image_data)


def encode_quality(quality: float) -> float:
    """Applied encode factor: the input quality, floored at MIN_ENCODE_QUALITY."""
    return max(MIN_ENCODE_QUALITY, quality)


def jpeg_quality(factor: float) -> int:
    """Map an encode factor in [0, 1] to Pillow's 1-95 JPEG quality scale."""
    return max(1, min(MAX_JPEG_QUALITY, int(round(factor * 100))))


def is_grayscale_image(image: np.ndarray) -> bool:
    """
    Check if image is effectively grayscale based on saturation.

    Only returns True if the entire page has very low saturation.
    """
    if len(image.shape) != 3 or image.shape[2] != 3:
        return True  # Already grayscale

    hsv = cv2.cvtColor(image, cv2.COLOR_RGB2HSV)
    mean_saturation = np.mean(hsv[:, :, 1])

    is_gray = bool(mean_saturation < GRAYSCALE_SATURATION_THRESHOLD)
    logger.debug(f"Mean saturation: {mean_saturation:.1f}, is_grayscale: {is_gray}")

    return is_gray


def compress_jpeg(image: np.ndarray, quality: int) -> bytes:
    """
    Compress image as baseline JPEG.

    Args:
        image: RGB (h, w, 3) or grayscale (h, w) uint8 array
        quality: Pillow JPEG quality (1-95)
    """
    img = Image.fromarray(np.ascontiguousarray(image))  # L or RGB from shape

    buffer = io.BytesIO()
    img.save(
        buffer,
        format="JPEG",
        quality=quality,
        optimize=True,
        subsampling=2  # 4:2:0 chroma subsampling
    )
    return buffer.getvalue()


def encode_page(buffer, quality: float) -> EncodedImage:
    """
    Encode a RasterBuffer as JPEG at max(0.3, quality).

    Raises:
        PageEncodeError: buffer is missing, empty or cannot be encoded
    """
    pixels = getattr(buffer, "pixels", None)
    if pixels is None or not isinstance(pixels, np.ndarray):
        raise PageEncodeError("Raster buffer has no pixel data")
    if pixels.size == 0 or pixels.ndim not in (2, 3):
        raise PageEncodeError(
            f"Page {buffer.page_num}: empty or malformed raster buffer {pixels.shape}"
        )

    factor = encode_quality(quality)
    q = jpeg_quality(factor)

    try:
        image = np.ascontiguousarray(pixels, dtype=np.uint8)
        if image.ndim == 3 and image.shape[2] == 1:
            image = image[:, :, 0]
        elif image.ndim == 3 and image.shape[2] == 4:
            image = np.ascontiguousarray(image[:, :, :3])  # Drop alpha
        is_color = not is_grayscale_image(image)
        if image.ndim == 3 and not is_color:
            # Effectively gray, store one channel
            image = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
        jpeg_data = compress_jpeg(image, quality=q)
    except Exception as e:
        raise PageEncodeError(f"Page {buffer.page_num}: JPEG encoding failed: {e}") from e

    height, width = image.shape[:2]

    logger.info(
        f"Page {buffer.page_num}: {len(jpeg_data):,} bytes | "
        f"{width}x{height} | color={is_color} | q={q}"
    )

    return EncodedImage(
        page_num=buffer.page_num,
        image_data=jpeg_data,
        width=width,
        height=height,
        page_width_pts=buffer.page_width_pts,
        page_height_pts=buffer.page_height_pts,
        is_color=is_color,
        quality=factor,
    )
