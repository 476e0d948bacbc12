"""
Naming - Content-addressed file names for derived renditions.
"""

import hashlib
import math
import posixpath

from slugify import slugify

DEFAULT_HASH_BYTES = 6


def basename(path: str) -> str:
    """
    Strip directories and every extension from a path.

    'uploads/2020/IMG_0001.tar.gz' -> 'IMG_0001'

    A dotfile such as '.hidden' keeps its whole name rather than collapsing
    to an empty stem, so its renditions still carry a readable slug.
    """
    name = posixpath.basename(path.replace('\\', '/'))
    stem = name.split('.', 1)[0]
    return stem or name


def content_hash(pixels: bytes, hash_bytes: int = DEFAULT_HASH_BYTES) -> str:
    """Hex digest of the first hash_bytes bytes of SHAKE-128 over the pixels."""
    return hashlib.shake_128(pixels).hexdigest(hash_bytes)


def content_prefix(pixels: bytes, filename: str, hash_bytes: int = DEFAULT_HASH_BYTES) -> str:
    """
    Build the file name prefix shared by every rendition of one photo.

    Args:
        pixels: Raw normalized pixel bytes
        filename: Caller-supplied display filename
        hash_bytes: Truncation length of the content hash

    Returns:
        '<hex>_<slug>', or just '<hex>' when the name slugifies to nothing
    """
    digest = content_hash(pixels, hash_bytes)
    slug = slugify(basename(filename))
    if not slug:
        return digest
    return f"{digest}_{slug}"


def rendition_name(prefix: str, width: int, extension: str) -> str:
    """'<prefix>.<width>.<extension>'"""
    return f"{prefix}.{width}.{extension}"


def collision_probability(count: int, hash_bytes: int = DEFAULT_HASH_BYTES) -> float:
    """
    Birthday-bound probability that any two of count distinct images
    share a truncated hash.
    """
    space = 2.0 ** (8 * hash_bytes)
    return -math.expm1(-count * (count - 1) / (2.0 * space))
