"""
ZopfliPNG - Swaps the DEFLATE stream of a PNG for a custom compressor's.

Pillow has no hook for replacing zlib inside its PNG writer, so the
encoder writes the PNG uncompressed and this module rebuilds the IDAT
data: the filtered scanlines are inflated and handed to a compressor
callback, whose zlib stream replaces every original IDAT chunk.
"""

import logging
import struct
import zlib
from typing import Callable, List, Tuple

import zopfli.zlib

from .errors import EncodeError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

Compressor = Callable[[bytes], bytes]


def zopfli_compress(data: bytes) -> bytes:
    """Default compressor: a zlib stream produced by Zopfli."""
    return zopfli.zlib.compress(data)


def iter_chunks(png: bytes) -> List[Tuple[bytes, bytes]]:
    """
    Split a PNG into (type, data) chunks.

    Raises:
        ValueError: On a bad signature, truncated chunk or CRC mismatch
    """
    if not png.startswith(PNG_SIGNATURE):
        raise ValueError("not a PNG stream")

    chunks = []
    offset = len(PNG_SIGNATURE)
    while offset < len(png):
        if offset + 8 > len(png):
            raise ValueError("truncated chunk header")
        length, chunk_type = struct.unpack('>I4s', png[offset:offset + 8])
        data_end = offset + 8 + length
        if data_end + 4 > len(png):
            raise ValueError(f"truncated {chunk_type!r} chunk")
        data = png[offset + 8:data_end]
        (crc,) = struct.unpack('>I', png[data_end:data_end + 4])
        if crc != zlib.crc32(chunk_type + data):
            raise ValueError(f"CRC mismatch in {chunk_type!r} chunk")
        chunks.append((chunk_type, data))
        offset = data_end + 4
        if chunk_type == b'IEND':
            break
    return chunks


def build_chunk(chunk_type: bytes, data: bytes) -> bytes:
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', zlib.crc32(chunk_type + data))


def recompress(png: bytes, compressor: Compressor = zopfli_compress) -> bytes:
    """
    Rebuild a PNG with its image data compressed by compressor.

    Args:
        png: A complete PNG stream (any zlib level)
        compressor: Callback taking the raw filtered scanlines and returning a
            complete zlib stream

    Returns:
        PNG bytes with a single IDAT chunk holding the compressor's output

    Raises:
        EncodeError: If the PNG is malformed or the compressor fails or
            returns nothing
    """
    try:
        chunks = iter_chunks(png)
        raw = zlib.decompress(b''.join(data for kind, data in chunks if kind == b'IDAT'))
    except (ValueError, zlib.error) as e:
        raise EncodeError('png', f"cannot read PNG image data: {e}") from e

    try:
        compressed = compressor(raw)
    except Exception as e:
        raise EncodeError('png', f"custom compressor failed: {e}") from e

    if not compressed:
        raise EncodeError('png', "custom compressor returned no data")

    out = [PNG_SIGNATURE]
    idat_written = False
    for kind, data in chunks:
        if kind == b'IDAT':
            if not idat_written:
                out.append(build_chunk(b'IDAT', bytes(compressed)))
                idat_written = True
            continue
        out.append(build_chunk(kind, data))

    if not idat_written:
        raise EncodeError('png', "PNG has no IDAT chunk")

    logger.debug(f"Recompressed PNG image data: {len(raw)} -> {len(compressed)} bytes")
    return b''.join(out)
