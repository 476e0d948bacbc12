"""
Preview - Tiny inline WebP placeholder.
"""

import base64
from typing import Tuple

from PIL import Image, ImageFilter

from . import webp

PREVIEW_SIZE = 48
PREVIEW_QUALITY = 0.2


def preview_size(width: int, height: int, size: int = PREVIEW_SIZE) -> Tuple[int, int]:
    """Largest size within size x size that keeps the aspect ratio."""
    ratio = min(size / width, size / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def make_tiny_preview(
    img: Image.Image,
    size: int = PREVIEW_SIZE,
    quality: float = PREVIEW_QUALITY,
    lib=None
) -> str:
    """
    Resize img to fill size x size and return it as a WebP data: URI.

    Small images are scaled up as well as large ones down. Pillow has no
    Gaussian resampling filter, so a downscaled image is blurred with a
    Gaussian kernel matched to the reduction factor before a bilinear
    resize.
    """
    factor = max(img.width, img.height) / size
    source = img
    if factor > 1:
        source = img.filter(ImageFilter.GaussianBlur(radius=factor / 2))

    thumb = source.resize(preview_size(img.width, img.height, size), Image.Resampling.BILINEAR)

    with webp.encode(thumb, quality, lib=lib) as buf:
        encoded = base64.b64encode(buf.view()).decode('ascii')
    return f"data:image/webp;base64,{encoded}"
