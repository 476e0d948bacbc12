"""
Metadata - Media type, orientation and EXIF fields of an uploaded photo.
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import GPS, IFD, Base

from .errors import DecodeError, MetadataParseError
from .orientation import Orientation

logger = logging.getLogger(__name__)


class MediaType(Enum):
    """Source container formats the pipeline distinguishes."""
    JPEG = 'JPEG'
    PNG = 'PNG'
    OTHER = 'OTHER'

    @classmethod
    def from_pillow_format(cls, fmt: Optional[str]) -> 'MediaType':
        # Pillow reports multi-picture JPEGs from phones as MPO
        if fmt in ('JPEG', 'MPO'):
            return cls.JPEG
        if fmt == 'PNG':
            return cls.PNG
        return cls.OTHER

    @property
    def mime_type(self) -> Optional[str]:
        return {
            MediaType.JPEG: 'image/jpeg',
            MediaType.PNG: 'image/png',
        }.get(self)


@dataclass(frozen=True)
class GeoLocation:
    """GPS position in decimal degrees and meters above sea level."""
    longitude: float
    latitude: float
    altitude: float

    def to_dict(self) -> dict:
        return {
            'longitude': self.longitude,
            'latitude': self.latitude,
            'altitude': self.altitude,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GeoLocation':
        return cls(
            longitude=float(data['longitude']),
            latitude=float(data['latitude']),
            altitude=float(data['altitude']),
        )


@dataclass(frozen=True)
class PhotoMetadata:
    """
    Scalar metadata parsed from the source file.

    Attributes:
        media_type: Container format
        format_name: Format name as reported by Pillow (for error messages)
        orientation: EXIF orientation
        geo: GPS location, if the file has latitude and longitude
        aperture: F-number
        shutter_speed: Exposure time as (numerator, denominator)
        focal_length: Focal length in millimeters
        iso: ISO speed rating
    """
    media_type: MediaType
    format_name: Optional[str] = None
    orientation: Orientation = Orientation.UNSPECIFIED
    geo: Optional[GeoLocation] = None
    aperture: Optional[float] = None
    shutter_speed: Optional[Tuple[int, int]] = None
    focal_length: Optional[float] = None
    iso: Optional[int] = None


def read_metadata(raw: bytes) -> PhotoMetadata:
    """
    Parse the container header and EXIF block without decoding pixels.

    Args:
        raw: Uploaded file contents

    Returns:
        PhotoMetadata

    Raises:
        MetadataParseError: If the bytes are not a recognizable image or the
            EXIF block is corrupt
    """
    try:
        img = Image.open(io.BytesIO(raw))
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError,
            Image.DecompressionBombError) as e:
        raise MetadataParseError(f"Unable to parse metadata: {e}") from e

    with img:
        media_type = MediaType.from_pillow_format(img.format)
        try:
            exif = img.getexif()
            exif_ifd = exif.get_ifd(IFD.Exif)
            gps_ifd = exif.get_ifd(IFD.GPSInfo)
        except Exception as e:
            raise MetadataParseError(f"Unable to parse EXIF data: {e}") from e

    def tag(key: int) -> Any:
        # Exposure tags normally live in the Exif sub-IFD, some writers put them in IFD0
        value = exif_ifd.get(key)
        return exif.get(key) if value is None else value

    metadata = PhotoMetadata(
        media_type=media_type,
        format_name=img.format,
        orientation=Orientation.from_tag(exif.get(Base.Orientation)),
        geo=_parse_gps(gps_ifd),
        aperture=_to_float(tag(Base.FNumber)),
        shutter_speed=_to_ratio(tag(Base.ExposureTime)),
        focal_length=_to_float(tag(Base.FocalLength)),
        iso=_to_int(tag(Base.ISOSpeedRatings)),
    )
    logger.debug(
        f"Metadata: format={metadata.format_name} orientation={metadata.orientation.name} "
        f"gps={'yes' if metadata.geo else 'no'}"
    )
    return metadata


def decode_image(raw: bytes) -> Image.Image:
    """
    Decode the full pixel buffer.

    Palette images are expanded to RGB or RGBA; every other mode is kept
    as decoded and rejected later by operations that need RGB or RGBA.

    Raises:
        DecodeError: If the pixel data cannot be decoded
    """
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError,
            Image.DecompressionBombError) as e:
        raise DecodeError(f"Unable to decode image: {e}") from e

    if img.mode == 'P':
        return img.convert('RGBA' if 'transparency' in img.info else 'RGB')
    if img.mode == 'PA':
        return img.convert('RGBA')
    return img


def _parse_gps(gps: dict) -> Optional[GeoLocation]:
    latitude = _dms_to_degrees(gps.get(GPS.GPSLatitude))
    longitude = _dms_to_degrees(gps.get(GPS.GPSLongitude))
    if latitude is None or longitude is None:
        return None

    if _ref(gps.get(GPS.GPSLatitudeRef)) == 'S':
        latitude = -latitude
    if _ref(gps.get(GPS.GPSLongitudeRef)) == 'W':
        longitude = -longitude

    altitude = _to_float(gps.get(GPS.GPSAltitude)) or 0.0
    # AltitudeRef 1 means below sea level
    if gps.get(GPS.GPSAltitudeRef) in (1, b'\x01'):
        altitude = -altitude

    return GeoLocation(longitude=longitude, latitude=latitude, altitude=altitude)


def _dms_to_degrees(value: Any) -> Optional[float]:
    if not value or len(value) != 3:
        return None
    parts = [_to_float(v) for v in value]
    if any(p is None for p in parts):
        return None
    degrees, minutes, seconds = parts
    return degrees + minutes / 60.0 + seconds / 3600.0


def _ref(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode('ascii', 'replace')
    if isinstance(value, str):
        return value.strip('\x00 ').upper()
    return None


def _scalar(value: Any) -> Any:
    # Some writers store single values as one-element arrays
    if isinstance(value, (tuple, list)) and len(value) == 1:
        return value[0]
    return value


def _to_float(value: Any) -> Optional[float]:
    value = _scalar(value)
    if value is None:
        return None
    if hasattr(value, 'denominator'):
        ratio = _to_ratio(value)
        return ratio[0] / ratio[1] if ratio else None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_ratio(value: Any) -> Optional[Tuple[int, int]]:
    value = _scalar(value)
    numerator = getattr(value, 'numerator', None)
    denominator = getattr(value, 'denominator', None)
    if numerator is None or denominator is None:
        return None
    if not denominator:
        return None
    return int(numerator), int(denominator)


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, (tuple, list)):
        value = value[0] if value else None
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
