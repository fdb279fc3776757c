"""Image preprocessing: decode uploads and flatten arrays into RGBA pixel buffers.

The detector only understands row-major RGBA bytes, so everything arriving
over the API (encoded files or numpy arrays) is funneled through here first.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageTooLargeError(ValueError):
    """Raised when an image exceeds the configured pixel budget."""


def decode_image(image_bytes: bytes, max_image_pixels: int) -> NDArray[np.uint8]:
    """Decode raw image bytes into an RGBA uint8 numpy array.

    EXIF orientation is applied so boxes line up with what a viewer shows.

    Args:
        image_bytes: Raw file bytes (any format Pillow can open).
        max_image_pixels: Upper bound on width * height.

    Returns:
        HxWx4 RGBA uint8 numpy array.

    Raises:
        ValueError: If the image cannot be decoded.
        ImageTooLargeError: If the image exceeds max_image_pixels.
    """
    if not image_bytes:
        raise ValueError("Empty image payload")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size
            if width * height > max_image_pixels:
                raise ImageTooLargeError(f"Image is {width}x{height}, exceeds limit of {max_image_pixels} pixels")
            img = ImageOps.exif_transpose(img)
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValueError(f"Could not decode image: {exc}") from exc

    logger.debug("Decoded %dx%d image (mode=%s)", rgba.width, rgba.height, rgba.mode)
    return np.asarray(rgba, dtype=np.uint8)


def to_pixel_buffer(image: NDArray[np.uint8]) -> tuple[bytes, int, int]:
    """Flatten an image array into (rgba_bytes, width, height).

    Accepts HxW grayscale, HxWx3 RGB or HxWx4 RGBA uint8 arrays. Missing
    channels are filled in: gray is replicated, alpha is set to 255.

    Raises:
        ValueError: If the array shape is not one of the supported layouts.
    """
    if image.ndim == 2:
        image = np.repeat(image[:, :, np.newaxis], 3, axis=2)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported image shape {image.shape}")

    height, width = image.shape[:2]
    if image.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=2)

    rgba = np.ascontiguousarray(image, dtype=np.uint8)
    return rgba.tobytes(), int(width), int(height)
