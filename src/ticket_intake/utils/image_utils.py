# ============================================================================
# src/ticket_intake/utils/image_utils.py
# ============================================================================
"""
Image utilities for photographed citations.

Provides:
- Image format detection from magic bytes
- EXIF orientation correction (phone photos are stored sideways)
- OCR-optimized image loading from uploaded bytes
"""

from io import BytesIO
from typing import Optional
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Images larger than this get downscaled; tesseract works best at 1500-2500px.
OCR_MAX_DIMENSION = 2500


def detect_image_type(data: bytes) -> Optional[str]:
    """
    Detect image type by reading magic bytes.

    Returns:
        Image type string ('png', 'jpeg', 'gif', 'tiff', 'bmp', 'webp') or None
    """
    header = data[:32]

    if header.startswith(b'\x89PNG'):
        return 'png'
    if header.startswith(b'\xff\xd8\xff'):
        return 'jpeg'
    if header.startswith(b'GIF87a') or header.startswith(b'GIF89a'):
        return 'gif'
    if header.startswith(b'II*\x00') or header.startswith(b'MM\x00*'):
        return 'tiff'
    if header.startswith(b'BM'):
        return 'bmp'
    if header.startswith(b'RIFF') and header[8:12] == b'WEBP':
        return 'webp'
    return None


def load_image_for_ocr(
    data: bytes,
    max_dimension: int = OCR_MAX_DIMENSION,
    ensure_rgb: bool = True,
) -> Image.Image:
    """
    Load an uploaded image with all corrections needed for reliable OCR.

    1. Decode the bytes with Pillow
    2. Apply EXIF orientation correction
    3. Downscale oversized photos
    4. Convert color mode to RGB

    Raises:
        ValueError: bytes are empty or not a decodable image
    """
    if not data:
        raise ValueError("Image is empty")

    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {e}") from e

    try:
        image = ImageOps.exif_transpose(image)
    except Exception as e:
        logger.warning(f"EXIF transpose failed (non-fatal): {e}")

    w, h = image.size
    if max(w, h) > max_dimension:
        scale = max_dimension / max(w, h)
        new_w, new_h = int(w * scale), int(h * scale)
        image = image.resize((new_w, new_h), Image.LANCZOS)
        logger.info(f"Resized {w}x{h} -> {new_w}x{new_h} for OCR")

    if ensure_rgb and image.mode not in ('RGB', 'L'):
        image = image.convert('RGB')

    logger.debug(f"Image loaded for OCR: {image.size}, mode={image.mode}")
    return image
