"""
Pytest fixtures for imgroll tests.
"""

import ctypes
import functools
import io
import logging
import zlib

import pytest
from PIL import Image


class FakeWebPLib:
    """
    Stands in for a bound libwebp handle.

    Hands out ctypes-owned buffers through the output pointer the way
    libwebp does and records every WebPFree call.
    """

    def __init__(self, payload=b'RIFF\x1a\x00\x00\x00WEBPVP8 fake-bitstream', fail=False, null_output=False):
        self.payload = payload
        self.fail = fail
        self.null_output = null_output
        self.calls = []
        self.freed = []
        self.live = {}

    def _emit(self, output):
        if self.fail:
            return 0
        if self.null_output:
            return len(self.payload)
        buf = ctypes.create_string_buffer(self.payload, len(self.payload))
        self.live[ctypes.addressof(buf)] = buf
        output.contents = ctypes.c_uint8.from_buffer(buf)
        return len(self.payload)

    def WebPEncodeRGB(self, pixels, width, height, stride, quality, output):
        self.calls.append(('RGB', width, height, stride, quality))
        return self._emit(output)

    def WebPEncodeRGBA(self, pixels, width, height, stride, quality, output):
        self.calls.append(('RGBA', width, height, stride, quality))
        return self._emit(output)

    def WebPEncodeLosslessRGB(self, pixels, width, height, stride, output):
        self.calls.append(('LosslessRGB', width, height, stride, None))
        return self._emit(output)

    def WebPEncodeLosslessRGBA(self, pixels, width, height, stride, output):
        self.calls.append(('LosslessRGBA', width, height, stride, None))
        return self._emit(output)

    def WebPFree(self, address):
        self.freed.append(address)
        self.live.pop(address, None)


def encode_image(img, fmt, **kwargs):
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


@pytest.fixture
def fake_webp_lib():
    """Fixture providing a fake libwebp handle."""
    return FakeWebPLib()


@pytest.fixture
def fast_compressor():
    """Fixture providing a zlib compressor in place of Zopfli."""
    return functools.partial(zlib.compress, level=9)


@pytest.fixture
def make_jpeg():
    """Fixture providing a factory for JPEG bytes with optional EXIF."""
    def _make(size=(64, 48), color=(200, 100, 50), exif=None, mode='RGB'):
        img = Image.new(mode, size, color)
        kwargs = {'exif': exif} if exif is not None else {}
        return encode_image(img, 'JPEG', **kwargs)
    return _make


@pytest.fixture
def sample_jpeg_bytes(make_jpeg):
    """Fixture providing sample JPEG image bytes."""
    return make_jpeg()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    img = Image.new('RGBA', (100, 100), color=(255, 0, 0, 128))
    return encode_image(img, 'PNG')


@pytest.fixture
def sample_gif_bytes():
    """Fixture providing sample GIF image bytes."""
    img = Image.new('P', (16, 16), color=1)
    return encode_image(img, 'GIF')


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


@pytest.fixture
def webp_lib_factory():
    """Fixture providing the FakeWebPLib class for custom failure modes."""
    return FakeWebPLib
