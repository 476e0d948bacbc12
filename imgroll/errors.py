"""
Errors - Exception hierarchy for the photo pipeline.

Every failure inside process_photo is terminal for that call. Callers
catch ImgrollError to handle any of them.
"""

from typing import Optional


class ImgrollError(Exception):
    """Base class for all imgroll errors."""
    pass


class MetadataParseError(ImgrollError):
    """Raised when the container or its EXIF block cannot be parsed."""
    pass


class UnsupportedMediaTypeError(ImgrollError):
    """Raised when the source is neither JPEG nor PNG."""

    def __init__(self, media_type: Optional[str]):
        self.media_type = media_type
        super().__init__(f"Unsupported file format: {media_type}")


class DecodeError(ImgrollError):
    """Raised when pixel data cannot be decoded."""
    pass


class UnsupportedColorFormatError(ImgrollError):
    """Raised when an operation gets a buffer that is not 8-bit RGB or RGBA."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"Unsupported color format: {mode}")


class PaletteExtractionError(ImgrollError):
    """Raised when the dominant-color palette cannot be computed."""
    pass


class EncodeError(ImgrollError):
    """Raised when a codec fails to produce output."""

    def __init__(self, codec: str, message: str):
        self.codec = codec
        super().__init__(f"Could not encode {codec}: {message}")


class IntegerConversionError(ImgrollError):
    """Raised when a dimension does not fit the integer width a native API expects."""

    def __init__(self, name: str, value: int):
        self.name = name
        self.value = value
        super().__init__(f"Could not fit {name}={value} into a C int")


class InvalidEventError(ImgrollError):
    """Raised when an S3 event record lacks a required field."""
    pass


class CallbackError(ImgrollError):
    """Raised when the descriptor cannot be delivered to the callback URL."""
    pass
