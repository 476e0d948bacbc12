"""
Quality - Size-dependent lossy quality ("compressive images").

Large images hide compression artifacts per pixel, so quality drops
linearly once the width passes 5000 px.
"""

BONUS_FLOOR_WIDTH = 4900
BONUS_ZERO_WIDTH = 5000
BONUS_PER_PIXEL = 0.001


def quality_bonus(width: int) -> float:
    """
    Quality adjustment for an image of the given width.

    +0.1 up to 4900 px, decaying to 0 at 5000 px and negative beyond.
    """
    return (BONUS_ZERO_WIDTH - max(width, BONUS_FLOOR_WIDTH)) * BONUS_PER_PIXEL


def effective_quality(base: float, width: int) -> float:
    """Base quality plus the size bonus, clamped to the 0-100 codec range."""
    return min(100.0, max(0.0, base + quality_bonus(width)))
