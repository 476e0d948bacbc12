"""
imgroll - Derived assets for uploaded photos.

One call turns an uploaded JPEG or PNG into:
    1. A descriptor: dimensions, srcset per format, palette, EXIF camera data
    2. Content-addressed renditions (JPEG + WebP, or palette PNG)
    3. A tiny inline WebP preview

Runs locally from the CLI or on S3 upload events.
"""

__version__ = "0.3.0"

from .errors import (
    ImgrollError,
    MetadataParseError,
    UnsupportedMediaTypeError,
    DecodeError,
    UnsupportedColorFormatError,
    PaletteExtractionError,
    EncodeError,
    IntegerConversionError,
    InvalidEventError,
    CallbackError,
)
from .config import ProcessingConfig
from .s3_config import S3Config
from .s3_client import S3Client
from .metadata import MediaType, GeoLocation, PhotoMetadata
from .orientation import Orientation
from .palette import RGB
from .descriptor import SrcSetEntry, Source, OutFile, PhotoDescriptor
from .encoders import JpegEncoder, WebpEncoder, PngPaletteEncoder, ENCODER_REGISTRY
from .dispatcher import ParallelDispatcher
from .processor import PhotoProcessor, process_photo
from .callback import CallbackClient
from .batch_stats import BatchStats

__all__ = [
    "ImgrollError",
    "MetadataParseError",
    "UnsupportedMediaTypeError",
    "DecodeError",
    "UnsupportedColorFormatError",
    "PaletteExtractionError",
    "EncodeError",
    "IntegerConversionError",
    "InvalidEventError",
    "CallbackError",
    "ProcessingConfig",
    "S3Config",
    "S3Client",
    "MediaType",
    "GeoLocation",
    "PhotoMetadata",
    "Orientation",
    "RGB",
    "SrcSetEntry",
    "Source",
    "OutFile",
    "PhotoDescriptor",
    "JpegEncoder",
    "WebpEncoder",
    "PngPaletteEncoder",
    "ENCODER_REGISTRY",
    "ParallelDispatcher",
    "PhotoProcessor",
    "process_photo",
    "CallbackClient",
    "BatchStats",
]
