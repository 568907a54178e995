"""
Screenshot preprocessing.

Uploaded screenshots are shrunk to fit inside 800x600 (never enlarged) and
re-encoded as JPEG before being sent to a vision model.
"""

import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE: Tuple[int, int] = (800, 600)
JPEG_QUALITY = 85


class InvalidImageError(ValueError):
    """Raised when an upload declared as an image cannot be decoded."""


def prepare_image(data: bytes) -> Tuple[bytes, str]:
    """
    Resize and re-encode an uploaded image.

    Args:
        data: Raw bytes of the uploaded file

    Returns:
        (jpeg_bytes, "image/jpeg")

    Raises:
        InvalidImageError: If Pillow cannot decode the data or the image
            has more pixels than Image.MAX_IMAGE_PIXELS allows
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            original_size = img.size
            if img.mode != "RGB":
                img = img.convert("RGB")
            # thumbnail() keeps the aspect ratio and never upscales
            img.thumbnail(MAX_IMAGE_SIZE, Image.Resampling.LANCZOS)

            out = io.BytesIO()
            img.save(out, format="JPEG", quality=JPEG_QUALITY)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidImageError(f"Could not process image: {e}") from e

    logger.debug("Prepared image %sx%s -> %sx%s", *original_size, *img.size)
    return out.getvalue(), "image/jpeg"
