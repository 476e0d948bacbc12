"""
Encoders - Codec wrappers and the media-type registry that selects them.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Type

from PIL import Image

from . import webp
from .config import ProcessingConfig
from .errors import EncodeError, UnsupportedColorFormatError, UnsupportedMediaTypeError
from .metadata import MediaType
from .quality import effective_quality
from .zopfli_png import Compressor, recompress, zopfli_compress

SUPPORTED_MODES = ('RGB', 'RGBA')


@dataclass(frozen=True)
class EncodedImage:
    """Output of one encoder invocation."""
    data: bytes = field(repr=False)
    mime_type: str
    extension: str


class Encoder:
    """
    Base class for codec wrappers.

    Subclasses set codec, mime_type and extension, and implement
    _encode().
    """

    codec = ''
    mime_type = ''
    extension = ''

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize encoder.

        Args:
            config: Processing configuration (default: ProcessingConfig())
            logger: Optional logger instance
        """
        self.config = config or ProcessingConfig()
        self.logger = logger or logging.getLogger(__name__)

    def encode(self, img: Image.Image) -> EncodedImage:
        """
        Encode an RGB or RGBA image.

        Raises:
            UnsupportedColorFormatError: If img is neither RGB nor RGBA
            EncodeError: If the codec fails
        """
        if img.mode not in SUPPORTED_MODES:
            raise UnsupportedColorFormatError(img.mode)

        data = self._encode(img)
        self.logger.debug(f"Encoded {self.codec} {img.width}x{img.height}: {len(data)} bytes")
        return EncodedImage(data=data, mime_type=self.mime_type, extension=self.extension)

    def _encode(self, img: Image.Image) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class JpegEncoder(Encoder):
    """Progressive, optimized JPEG with size-dependent quality."""

    codec = 'jpeg'
    mime_type = 'image/jpeg'
    extension = 'jpg'

    def quality_for(self, width: int) -> int:
        # Pillow only takes integer JPEG qualities
        return int(round(effective_quality(self.config.jpeg_quality, width)))

    def _encode(self, img: Image.Image) -> bytes:
        if img.mode == 'RGBA':
            img = img.convert('RGB')

        output = io.BytesIO()
        try:
            img.save(
                output,
                format='JPEG',
                quality=self.quality_for(img.width),
                optimize=True,
                progressive=True,
            )
        except (OSError, ValueError) as e:
            raise EncodeError(self.codec, str(e)) from e
        return output.getvalue()


class WebpEncoder(Encoder):
    """Lossy WebP through libwebp with size-dependent quality."""

    codec = 'webp'
    mime_type = 'image/webp'
    extension = 'webp'

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        logger: Optional[logging.Logger] = None,
        lib=None
    ):
        super().__init__(config, logger)
        self.lib = lib

    def quality_for(self, width: int) -> float:
        return effective_quality(self.config.webp_quality, width)

    def _encode(self, img: Image.Image) -> bytes:
        with webp.encode(img, self.quality_for(img.width), lib=self.lib) as buf:
            return buf.tobytes()


class PngPaletteEncoder(Encoder):
    """
    8-bit palette PNG.

    RGB images are quantized with k-means refinement and then remapped
    with Floyd-Steinberg dithering. Pillow only quantizes RGBA with the
    fast octree method and cannot dither it, so RGBA images keep their
    alpha but are not dithered. The DEFLATE stream is produced by the
    compressor callback (Zopfli by default).
    """

    codec = 'png'
    mime_type = 'image/png'
    extension = 'png'

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        logger: Optional[logging.Logger] = None,
        compressor: Compressor = zopfli_compress
    ):
        super().__init__(config, logger)
        self.compressor = compressor

    def quantize(self, img: Image.Image) -> Image.Image:
        colors = self.config.png_colors
        kmeans = self.config.png_kmeans_iterations
        if img.mode == 'RGBA':
            return img.quantize(colors=colors, method=Image.Quantize.FASTOCTREE, kmeans=kmeans)

        palette = img.quantize(colors=colors, method=Image.Quantize.MEDIANCUT, kmeans=kmeans)
        return img.quantize(palette=palette, dither=Image.Dither.FLOYDSTEINBERG)

    def _encode(self, img: Image.Image) -> bytes:
        output = io.BytesIO()
        try:
            indexed = self.quantize(img)
            # Stored uncompressed; the compressor callback does the real work
            indexed.save(output, format='PNG', compress_level=0)
        except (OSError, ValueError) as e:
            raise EncodeError(self.codec, str(e)) from e
        return recompress(output.getvalue(), self.compressor)


EncoderFactory = Callable[..., Encoder]

ENCODER_REGISTRY: Dict[MediaType, Tuple[Type[Encoder], ...]] = {
    MediaType.JPEG: (JpegEncoder, WebpEncoder),
    MediaType.PNG: (PngPaletteEncoder,),
}

LOSSLESS_MEDIA_TYPES = frozenset({MediaType.PNG})


def check_supported(
    media_type: MediaType,
    format_name: Optional[str] = None,
    registry: Optional[Dict[MediaType, Tuple[EncoderFactory, ...]]] = None
) -> None:
    """
    Raises:
        UnsupportedMediaTypeError: If no encoders are registered for media_type
    """
    registry = ENCODER_REGISTRY if registry is None else registry
    if media_type not in registry:
        raise UnsupportedMediaTypeError(format_name or media_type.value)


def is_lossless(media_type: MediaType) -> bool:
    """Lossless sources never get extra thumbnail renditions."""
    return media_type in LOSSLESS_MEDIA_TYPES


def encoders_for(
    media_type: MediaType,
    config: Optional[ProcessingConfig] = None,
    logger: Optional[logging.Logger] = None,
    registry: Optional[Dict[MediaType, Tuple[EncoderFactory, ...]]] = None
) -> List[Encoder]:
    """
    Instantiate the ordered encoder list for a source media type.

    Raises:
        UnsupportedMediaTypeError: If the media type has no encoders
    """
    registry = ENCODER_REGISTRY if registry is None else registry
    check_supported(media_type, registry=registry)
    return [factory(config=config, logger=logger) for factory in registry[media_type]]
