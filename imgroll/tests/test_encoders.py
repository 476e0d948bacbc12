"""Tests for encoders and the encoder registry."""

import functools
import io

import pytest
from PIL import Image

from imgroll.config import ProcessingConfig
from imgroll.encoders import (
    ENCODER_REGISTRY,
    JpegEncoder,
    PngPaletteEncoder,
    WebpEncoder,
    check_supported,
    encoders_for,
    is_lossless,
)
from imgroll.errors import EncodeError, UnsupportedColorFormatError, UnsupportedMediaTypeError
from imgroll.metadata import MediaType


class TestJpegEncoder:
    """Tests for JpegEncoder."""

    def test_encode(self):
        """Test output is a JPEG of the same size."""
        result = JpegEncoder().encode(Image.new('RGB', (40, 30), 'blue'))

        assert result.mime_type == 'image/jpeg'
        assert result.extension == 'jpg'
        assert result.data[:2] == b'\xff\xd8'
        assert Image.open(io.BytesIO(result.data)).size == (40, 30)

    def test_rgba_flattened(self):
        """Test RGBA input is accepted."""
        result = JpegEncoder().encode(Image.new('RGBA', (10, 10), (1, 2, 3, 4)))

        assert Image.open(io.BytesIO(result.data)).mode == 'RGB'

    def test_quality_for(self):
        """Test quality is the rounded size-adjusted base."""
        encoder = JpegEncoder(ProcessingConfig(jpeg_quality=65.0))

        assert encoder.quality_for(2000) == 65
        assert encoder.quality_for(6000) == 64

    def test_unsupported_mode(self):
        """Test grayscale is rejected."""
        with pytest.raises(UnsupportedColorFormatError):
            JpegEncoder().encode(Image.new('L', (10, 10)))


class TestWebpEncoder:
    """Tests for WebpEncoder."""

    def test_encode(self, fake_webp_lib):
        """Test bytes are copied out and the native buffer freed."""
        encoder = WebpEncoder(lib=fake_webp_lib)

        result = encoder.encode(Image.new('RGB', (20, 10)))

        assert result.data == fake_webp_lib.payload
        assert result.mime_type == 'image/webp'
        assert len(fake_webp_lib.freed) == 1

    def test_quality_passed_through(self, fake_webp_lib):
        """Test the size-adjusted quality reaches libwebp as a float."""
        WebpEncoder(ProcessingConfig(webp_quality=53.0), lib=fake_webp_lib).encode(Image.new('RGB', (20, 10)))

        assert fake_webp_lib.calls[0][4] == pytest.approx(53.1)

    def test_failure(self, webp_lib_factory):
        """Test a libwebp failure surfaces as EncodeError."""
        with pytest.raises(EncodeError):
            WebpEncoder(lib=webp_lib_factory(fail=True)).encode(Image.new('RGB', (20, 10)))


class TestPngPaletteEncoder:
    """Tests for PngPaletteEncoder."""

    def test_rgb(self, fast_compressor):
        """Test RGB becomes an indexed PNG."""
        img = Image.linear_gradient('L').resize((64, 64)).convert('RGB')
        encoder = PngPaletteEncoder(ProcessingConfig(png_colors=16), compressor=fast_compressor)

        result = encoder.encode(img)
        decoded = Image.open(io.BytesIO(result.data))

        assert result.mime_type == 'image/png'
        assert decoded.mode == 'P'
        assert decoded.size == (64, 64)
        gray = decoded.convert('L')
        assert gray.getpixel((0, 0)) < gray.getpixel((0, 63))

    def test_rgba_keeps_alpha(self, fast_compressor):
        """Test transparency survives quantization."""
        img = Image.new('RGBA', (16, 16), (255, 0, 0, 0))
        img.paste((0, 0, 255, 255), (0, 0, 8, 16))

        result = PngPaletteEncoder(compressor=fast_compressor).encode(img)
        decoded = Image.open(io.BytesIO(result.data)).convert('RGBA')

        assert decoded.getpixel((0, 0))[3] == 255
        assert decoded.getpixel((15, 0))[3] == 0

    def test_compressor_receives_image_data(self, fast_compressor):
        """Test the compressor callback is invoked exactly once."""
        calls = []

        def compressor(data):
            calls.append(len(data))
            return fast_compressor(data)

        PngPaletteEncoder(compressor=compressor).encode(Image.new('RGB', (8, 8)))

        assert len(calls) == 1
        assert calls[0] > 0

    def test_compressor_failure(self):
        """Test a failing compressor aborts the encode."""
        def compressor(data):
            raise RuntimeError("boom")

        with pytest.raises(EncodeError) as exc_info:
            PngPaletteEncoder(compressor=compressor).encode(Image.new('RGB', (8, 8)))

        assert exc_info.value.codec == 'png'


class TestRegistry:
    """Tests for the media type registry."""

    def test_jpeg_encoders_in_order(self):
        """Test JPEG sources get JPEG then WebP."""
        encoders = encoders_for(MediaType.JPEG)

        assert [type(e) for e in encoders] == [JpegEncoder, WebpEncoder]

    def test_png_encoders(self):
        """Test PNG sources get the palette PNG encoder only."""
        assert [type(e) for e in encoders_for(MediaType.PNG)] == [PngPaletteEncoder]

    def test_unsupported(self):
        """Test media types without encoders are rejected."""
        with pytest.raises(UnsupportedMediaTypeError):
            encoders_for(MediaType.OTHER)

    def test_check_supported_names_format(self):
        """Test the error message carries the detected format."""
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            check_supported(MediaType.OTHER, 'GIF')

        assert 'GIF' in str(exc_info.value)

    def test_config_shared(self):
        """Test every encoder gets the caller's config."""
        config = ProcessingConfig(jpeg_quality=90.0)

        assert all(e.config is config for e in encoders_for(MediaType.JPEG, config))

    def test_custom_registry(self, fake_webp_lib):
        """Test a registry override with a partially applied factory."""
        registry = {MediaType.JPEG: (functools.partial(WebpEncoder, lib=fake_webp_lib),)}

        encoders = encoders_for(MediaType.JPEG, registry=registry)

        assert len(encoders) == 1
        assert encoders[0].lib is fake_webp_lib

    def test_lossless(self):
        """Test only PNG is lossless."""
        assert is_lossless(MediaType.PNG)
        assert not is_lossless(MediaType.JPEG)
        assert set(ENCODER_REGISTRY) == {MediaType.JPEG, MediaType.PNG}
