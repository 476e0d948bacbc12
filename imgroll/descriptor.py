"""
Descriptor - The photo descriptor and the files derived alongside it.
"""

import json
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .metadata import GeoLocation
from .palette import RGB


@dataclass(frozen=True)
class SrcSetEntry:
    """
    One concrete rendition.

    Attributes:
        src: File name (or URL once the caller rewrites it)
        width: Pixel width the rendition was rendered at
    """
    src: str
    width: int

    def to_dict(self) -> dict:
        return {'src': self.src, 'width': self.width}

    @classmethod
    def from_dict(cls, data: dict) -> 'SrcSetEntry':
        return cls(src=data['src'], width=int(data['width']))


@dataclass(frozen=True)
class Source:
    """
    Rendition family for one MIME type.

    Attributes:
        original: True for the untouched upload
        type: MIME type shared by every entry
        srcset: Renditions, largest first
    """
    original: bool
    type: str
    srcset: Tuple[SrcSetEntry, ...] = ()

    @property
    def widths(self) -> List[int]:
        return [entry.width for entry in self.srcset]

    def to_dict(self) -> dict:
        return {
            'original': self.original,
            'type': self.type,
            'srcset': [entry.to_dict() for entry in self.srcset],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Source':
        return cls(
            original=bool(data['original']),
            type=data['type'],
            srcset=tuple(SrcSetEntry.from_dict(e) for e in data.get('srcset', [])),
        )


@dataclass(frozen=True)
class OutFile:
    """
    Encoded payload of one derived rendition, to be stored under name.

    Attributes:
        name: Storage name, matching a SrcSetEntry.src
        data: Encoded bytes
        mimetype: Content type to store the object with
    """
    name: str
    data: bytes = field(repr=False)
    mimetype: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PhotoDescriptor:
    """
    Self-describing record of a processed photo.

    Attributes:
        tiny_preview: data: URI of a tiny WebP preview
        source: Original entry followed by one Source per derived codec
        width: Width of the working image
        height: Height of the working image
        palette: Dominant colors, most common first
        geo: GPS location if the photo had one
        aperture: F-number
        shutter_speed: Exposure time as (numerator, denominator)
        focal_length: Focal length in millimeters
        iso: ISO speed rating
    """
    tiny_preview: str
    source: Tuple[Source, ...]
    width: int
    height: int
    palette: Tuple[RGB, ...]
    geo: Optional[GeoLocation] = None
    aperture: Optional[float] = None
    shutter_speed: Optional[Tuple[int, int]] = None
    focal_length: Optional[float] = None
    iso: Optional[int] = None

    @property
    def original(self) -> Source:
        """The single Source describing the caller's upload."""
        return next(s for s in self.source if s.original)

    @property
    def derived(self) -> List[Source]:
        return [s for s in self.source if not s.original]

    def get_source(self, mime_type: str) -> Optional[Source]:
        """Get the derived Source for a MIME type."""
        for s in self.derived:
            if s.type == mime_type:
                return s
        return None

    def with_url_prefix(self, url_for) -> 'PhotoDescriptor':
        """
        Copy with every srcset src passed through url_for.

        Args:
            url_for: Callable mapping a stored name to its public URL
        """
        source = tuple(
            replace(s, srcset=tuple(replace(e, src=url_for(e.src)) for e in s.srcset))
            for s in self.source
        )
        return replace(self, source=source)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'tiny_preview': self.tiny_preview,
            'source': [s.to_dict() for s in self.source],
            'width': self.width,
            'height': self.height,
            'palette': [color._asdict() for color in self.palette],
            'geo': self.geo.to_dict() if self.geo else None,
            'aperture': self.aperture,
            'shutter_speed': list(self.shutter_speed) if self.shutter_speed else None,
            'focal_length': self.focal_length,
            'iso': self.iso,
        }

    def to_json(self) -> str:
        """Compact JSON for delivery."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: dict) -> 'PhotoDescriptor':
        """Create from dictionary."""
        shutter = data.get('shutter_speed')
        geo = data.get('geo')
        return cls(
            tiny_preview=data['tiny_preview'],
            source=tuple(Source.from_dict(s) for s in data['source']),
            width=int(data['width']),
            height=int(data['height']),
            palette=tuple(RGB(c['r'], c['g'], c['b']) for c in data.get('palette', [])),
            geo=GeoLocation.from_dict(geo) if geo else None,
            aperture=data.get('aperture'),
            shutter_speed=(int(shutter[0]), int(shutter[1])) if shutter else None,
            focal_length=data.get('focal_length'),
            iso=data.get('iso'),
        )
