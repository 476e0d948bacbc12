"""
Orientation - Normalizes EXIF orientation to upright pixels.
"""

from enum import IntEnum
from typing import Any

from PIL import Image


class Orientation(IntEnum):
    """EXIF orientation tag values."""
    UNSPECIFIED = 0
    NORMAL = 1
    HORIZONTAL_FLIP = 2
    ROTATE_180 = 3
    VERTICAL_FLIP = 4
    ROTATE_90_HORIZONTAL_FLIP = 5
    ROTATE_90 = 6
    ROTATE_90_VERTICAL_FLIP = 7
    ROTATE_270 = 8

    @classmethod
    def from_tag(cls, value: Any) -> 'Orientation':
        """Map a raw tag value to a member; anything unrecognized is UNSPECIFIED."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNSPECIFIED


# Rotations are clockwise as the tag describes them; Pillow's ROTATE_* are
# counter-clockwise, hence ROTATE_90 -> Transpose.ROTATE_270.
_TRANSFORMS = {
    Orientation.HORIZONTAL_FLIP: Image.Transpose.FLIP_LEFT_RIGHT,
    Orientation.ROTATE_180: Image.Transpose.ROTATE_180,
    Orientation.VERTICAL_FLIP: Image.Transpose.FLIP_TOP_BOTTOM,
    Orientation.ROTATE_90_HORIZONTAL_FLIP: Image.Transpose.TRANSPOSE,
    Orientation.ROTATE_90: Image.Transpose.ROTATE_270,
    Orientation.ROTATE_90_VERTICAL_FLIP: Image.Transpose.TRANSVERSE,
    Orientation.ROTATE_270: Image.Transpose.ROTATE_90,
}


def normalize_orientation(img: Image.Image, orientation: Orientation) -> Image.Image:
    """
    Return an upright copy of img.

    Unknown or identity orientations return img unchanged.
    """
    method = _TRANSFORMS.get(orientation)
    if method is None:
        return img
    return img.transpose(method)
