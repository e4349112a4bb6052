"""
Image preprocessing for texture matching.

Every query photo is reduced to the same small grid before any analysis:
scaled to a fixed width (aspect ratio preserved), pushed through a lossy
JPEG round-trip at a fixed quality, then decoded to RGBA. The reference
index was built from images treated the same way, so skipping the JPEG
step changes the histograms noticeably.
"""

import os
import logging
from typing import Union

import cv2
import numpy as np

from .errors import DecodeError
from .models import RawImage

logger = logging.getLogger(__name__)

# Must match the width and JPEG quality the reference index was built with
TARGET_WIDTH = 64
JPEG_QUALITY = 80

ImageSource = Union[str, os.PathLike, bytes, bytearray, memoryview]


def read_image_bytes(source: ImageSource) -> bytes:
    """Resolve an image reference (path or raw bytes) to its bytes."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    try:
        with open(source, "rb") as f:
            return f.read()
    except (OSError, TypeError) as e:
        raise DecodeError(f"Could not read image {source!r}: {e}") from e


def _decode_bgr(data: bytes) -> np.ndarray:
    if not data:
        raise DecodeError("Image data is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"Image data could not be decoded: {e}") from e
    if image is None or image.size == 0:
        raise DecodeError("Image data could not be decoded")
    return image


def scaled_height(width: int, height: int, target_width: int = TARGET_WIDTH) -> int:
    """
    Height that preserves aspect ratio at target_width.

    Very wide images would round to zero rows; those fall back to one row.
    """
    if width <= 0 or height <= 0:
        raise DecodeError(f"Degenerate image dimensions {width}x{height}")
    return max(1, int(round(height * target_width / width)))


def resize_to_width(image_np: np.ndarray, target_width: int = TARGET_WIDTH) -> np.ndarray:
    h, w = image_np.shape[:2]
    new_h = scaled_height(w, h, target_width)
    # Area averaging when shrinking, bilinear when enlarging
    interpolation = cv2.INTER_AREA if w > target_width else cv2.INTER_LINEAR
    return cv2.resize(image_np, (target_width, new_h), interpolation=interpolation)


def jpeg_roundtrip(image_bgr: np.ndarray, quality: int = JPEG_QUALITY) -> np.ndarray:
    """Encode to JPEG at the given quality and decode the result."""
    ok, encoded = cv2.imencode(".jpg", image_bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise DecodeError("JPEG re-encode failed")
    return _decode_bgr(encoded.tobytes())


def decode_image(source: ImageSource,
                 target_width: int = TARGET_WIDTH,
                 jpeg_quality: int = JPEG_QUALITY) -> RawImage:
    """
    Decode an image reference into a normalized RGBA pixel grid.

    Process:
        1. Read bytes from a path, or take them as given
        2. Decode with OpenCV
        3. Resize to target_width, preserving aspect ratio
        4. JPEG round-trip at jpeg_quality
        5. Convert to RGBA

    Args:
        source: File path or encoded image bytes.
        target_width: Output width in pixels.
        jpeg_quality: JPEG quality (0-100) for the lossy round-trip.

    Returns:
        RawImage of width target_width.

    Raises:
        DecodeError: If the source is unreadable, corrupt, or degenerate.
    """
    data = read_image_bytes(source)
    image = _decode_bgr(data)
    h, w = image.shape[:2]

    resized = resize_to_width(image, target_width)
    roundtrip = jpeg_roundtrip(resized, jpeg_quality)

    out_h, out_w = roundtrip.shape[:2]
    if out_w == 0 or out_h == 0:
        raise DecodeError(f"Degenerate image dimensions {out_w}x{out_h} after re-encode")

    rgba = cv2.cvtColor(roundtrip, cv2.COLOR_BGR2RGBA)
    logger.debug(f"Decoded {w}x{h} image to {out_w}x{out_h}")
    return RawImage.from_array(rgba)
