"""
Palette - Dominant colors of a photo.
"""

import itertools
from typing import List, NamedTuple

from PIL import Image

from .errors import PaletteExtractionError, UnsupportedColorFormatError

# Quantizing a bounded sample is plenty for a handful of dominant colors
SAMPLE_BOUND = 256

# Pixels less opaque than this do not count toward the palette
ALPHA_THRESHOLD = 125


class RGB(NamedTuple):
    r: int
    g: int
    b: int


def _opaque_sample(sample: Image.Image) -> Image.Image:
    """
    Collect the sufficiently opaque pixels of an RGBA sample into one RGB row.

    A sample with no such pixels is returned whole, without its alpha.
    """
    raw = sample.tobytes()
    opaque = b''.join(
        raw[i:i + 3] for i in range(0, len(raw), 4) if raw[i + 3] >= ALPHA_THRESHOLD
    )
    if not opaque:
        return sample.convert('RGB')
    return Image.frombytes('RGB', (len(opaque) // 3, 1), opaque)


def extract_palette(img: Image.Image, size: int = 10) -> List[RGB]:
    """
    Compute exactly size dominant colors, most common first.

    Median-cut quantization over a downsampled copy. In RGBA images only
    pixels with alpha of at least ALPHA_THRESHOLD are counted. Images with
    fewer distinct colors than size repeat their colors to fill the palette.

    Raises:
        UnsupportedColorFormatError: If img is not RGB or RGBA
        PaletteExtractionError: If quantization fails
    """
    if img.mode not in ('RGB', 'RGBA'):
        raise UnsupportedColorFormatError(img.mode)

    try:
        sample = img.copy()
        sample.thumbnail((SAMPLE_BOUND, SAMPLE_BOUND), Image.Resampling.NEAREST)
        sample = _opaque_sample(sample) if sample.mode == 'RGBA' else sample
        quantized = sample.quantize(colors=size, method=Image.Quantize.MEDIANCUT)
        counts = quantized.getcolors(256) or []
        flat = quantized.getpalette() or []
    except (ValueError, OSError) as e:
        raise PaletteExtractionError(f"Unable to extract palette: {e}") from e

    ordered = sorted(counts, key=lambda entry: (-entry[0], entry[1]))
    colors = [RGB(*flat[index * 3:index * 3 + 3]) for _, index in ordered]
    if not colors:
        raise PaletteExtractionError("Unable to extract palette: quantizer produced no colors")

    return list(itertools.islice(itertools.cycle(colors), size))
