"""
WebP - libwebp simple encoding API through ctypes.

libwebp allocates the encoded output itself. WebPBuffer owns that
allocation from the moment the encode call returns and hands it back to
WebPFree exactly once: on close(), on leaving a with-block, or when the
wrapper is garbage collected, whichever happens first.
"""

import ctypes
import ctypes.util
import logging
import os
import weakref
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

import PIL
from PIL import Image

from .errors import EncodeError, IntegerConversionError, UnsupportedColorFormatError

logger = logging.getLogger(__name__)

C_INT_MAX = 2 ** 31 - 1

_CHANNELS = {'RGB': 3, 'RGBA': 4}

_OutPointer = ctypes.POINTER(ctypes.c_uint8)


class WebPBuffer:
    """
    Read-only view of a libwebp-allocated output buffer.

    The memory is released through the library's WebPFree, never through
    Python's allocator. Views returned by view() are released on close;
    use tobytes() for data that must outlive the buffer.
    """

    def __init__(self, lib, pointer: ctypes.c_void_p, size: int):
        self._address = ctypes.cast(pointer, ctypes.c_void_p).value
        self._size = size
        self._view: Optional[memoryview] = None
        self._finalizer = weakref.finalize(self, lib.WebPFree, self._address)

    def __len__(self) -> int:
        return self._size

    def __enter__(self) -> 'WebPBuffer':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def view(self) -> memoryview:
        """Zero-copy read-only view, valid until close()."""
        self._check_open()
        if self._view is None:
            array = (ctypes.c_ubyte * self._size).from_address(self._address)
            self._view = memoryview(array).toreadonly()
        return self._view

    def tobytes(self) -> bytes:
        """Copy the encoded data into a Python bytes object."""
        self._check_open()
        return ctypes.string_at(self._address, self._size)

    def close(self) -> None:
        """Release the native buffer. Safe to call more than once."""
        if self._view is not None:
            self._view.release()
            self._view = None
        self._finalizer()

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("WebP buffer already freed")


def _candidate_paths() -> Iterator[str]:
    override = os.getenv('IMGROLL_LIBWEBP')
    if override:
        yield override

    system = ctypes.util.find_library('webp')
    if system:
        yield system

    # Pillow wheels ship their own libwebp next to the package
    pil_dir = Path(PIL.__file__).parent
    bundled = (
        (pil_dir.parent / 'pillow.libs', 'libwebp-*.so*'),
        (pil_dir / '.dylibs', 'libwebp.*.dylib'),
    )
    for directory, pattern in bundled:
        if directory.is_dir():
            yield from sorted(str(p) for p in directory.glob(pattern))


def _bind(lib) -> None:
    encode_args = [
        ctypes.c_char_p, ctypes.c_int, ctypes.c_int, ctypes.c_int,
        ctypes.c_float, ctypes.POINTER(_OutPointer),
    ]
    lossless_args = [
        ctypes.c_char_p, ctypes.c_int, ctypes.c_int, ctypes.c_int,
        ctypes.POINTER(_OutPointer),
    ]
    for name in ('WebPEncodeRGB', 'WebPEncodeRGBA'):
        fn = getattr(lib, name)
        fn.argtypes = encode_args
        fn.restype = ctypes.c_size_t
    for name in ('WebPEncodeLosslessRGB', 'WebPEncodeLosslessRGBA'):
        fn = getattr(lib, name)
        fn.argtypes = lossless_args
        fn.restype = ctypes.c_size_t
    lib.WebPFree.argtypes = [ctypes.c_void_p]
    lib.WebPFree.restype = None


@lru_cache(maxsize=1)
def load_library():
    """
    Locate and bind libwebp.

    Search order: $IMGROLL_LIBWEBP, the system library path, the copy
    bundled with Pillow.

    Raises:
        EncodeError: If no usable libwebp is found
    """
    tried = []
    for path in _candidate_paths():
        try:
            lib = ctypes.CDLL(path)
            _bind(lib)
        except (OSError, AttributeError) as e:
            tried.append(f"{path}: {e}")
            continue
        logger.debug(f"Loaded libwebp from {path}")
        return lib
    raise EncodeError('webp', f"libwebp shared library not found (tried: {tried or 'nothing'})")


def is_available() -> bool:
    """True if libwebp can be loaded."""
    try:
        load_library()
    except EncodeError:
        return False
    return True


def _to_c_int(name: str, value: int) -> int:
    if not 0 <= value <= C_INT_MAX:
        raise IntegerConversionError(name, value)
    return value


def encode(img: Image.Image, quality: float = 75.0, lossless: bool = False, lib=None) -> WebPBuffer:
    """
    Encode an RGB or RGBA image to WebP.

    Args:
        img: Source image
        quality: Lossy quality factor, 0-100 (ignored when lossless)
        lossless: Use the lossless encoder
        lib: Bound libwebp handle (default: load_library())

    Returns:
        WebPBuffer owning the encoded bytes

    Raises:
        UnsupportedColorFormatError: If img is not RGB or RGBA
        IntegerConversionError: If a dimension does not fit a C int
        EncodeError: If libwebp reports failure
    """
    channels = _CHANNELS.get(img.mode)
    if channels is None:
        raise UnsupportedColorFormatError(img.mode)

    width, height = img.size
    c_width = _to_c_int('width', width)
    c_height = _to_c_int('height', height)
    stride = _to_c_int('stride', width * channels)

    if lib is None:
        lib = load_library()

    pixels = img.tobytes()
    # Passed as-is: argtypes make ctypes apply byref() itself
    output = _OutPointer()

    if lossless:
        fn = lib.WebPEncodeLosslessRGBA if channels == 4 else lib.WebPEncodeLosslessRGB
        size = fn(pixels, c_width, c_height, stride, output)
    else:
        fn = lib.WebPEncodeRGBA if channels == 4 else lib.WebPEncodeRGB
        size = fn(pixels, c_width, c_height, stride, float(quality), output)

    # Nothing to free on failure: libwebp leaves the output pointer NULL
    if size < 1 or not output:
        raise EncodeError('webp', f"encoder returned {size}")

    return WebPBuffer(lib, output, size)
