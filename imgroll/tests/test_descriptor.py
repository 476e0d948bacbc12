"""Tests for descriptor records."""

import json

import pytest

from imgroll.descriptor import OutFile, PhotoDescriptor, Source, SrcSetEntry
from imgroll.metadata import GeoLocation
from imgroll.palette import RGB


@pytest.fixture
def descriptor():
    """Fixture providing a descriptor for a JPEG upload."""
    return PhotoDescriptor(
        tiny_preview='data:image/webp;base64,AAAA',
        source=(
            Source(original=True, type='image/jpeg', srcset=(SrcSetEntry('photo.jpg', 3000),)),
            Source(original=False, type='image/jpeg', srcset=(
                SrcSetEntry('abc_photo.2250.jpg', 2250),
                SrcSetEntry('abc_photo.1500.jpg', 1500),
            )),
            Source(original=False, type='image/webp', srcset=(
                SrcSetEntry('abc_photo.2250.webp', 2250),
            )),
        ),
        width=2250,
        height=3000,
        palette=(RGB(1, 2, 3), RGB(4, 5, 6)),
        geo=GeoLocation(longitude=-122.4, latitude=37.8, altitude=12.0),
        aperture=2.8,
        shutter_speed=(1, 250),
        focal_length=50.0,
        iso=200,
    )


class TestSource:
    """Tests for Source."""

    def test_widths(self, descriptor):
        """Test widths follow srcset order."""
        assert descriptor.source[1].widths == [2250, 1500]


class TestOutFile:
    """Tests for OutFile."""

    def test_size(self):
        """Test size is the payload length."""
        assert OutFile('a.1.jpg', b'12345', 'image/jpeg').size == 5

    def test_repr_hides_data(self):
        """Test the payload is not dumped into reprs."""
        assert 'data' not in repr(OutFile('a.1.jpg', b'\x00' * 1000, 'image/jpeg'))


class TestPhotoDescriptor:
    """Tests for PhotoDescriptor."""

    def test_original_and_derived(self, descriptor):
        """Test the original entry is separated from derived ones."""
        assert descriptor.original.srcset[0].src == 'photo.jpg'
        assert [s.type for s in descriptor.derived] == ['image/jpeg', 'image/webp']

    def test_get_source(self, descriptor):
        """Test lookup by MIME type skips the original."""
        assert descriptor.get_source('image/webp').widths == [2250]
        assert not descriptor.get_source('image/jpeg').original
        assert descriptor.get_source('image/png') is None

    def test_to_dict(self, descriptor):
        """Test the serialized shape."""
        data = descriptor.to_dict()

        assert data['width'] == 2250
        assert data['palette'][0] == {'r': 1, 'g': 2, 'b': 3}
        assert data['shutter_speed'] == [1, 250]
        assert data['geo'] == {'longitude': -122.4, 'latitude': 37.8, 'altitude': 12.0}
        assert data['source'][0] == {
            'original': True,
            'type': 'image/jpeg',
            'srcset': [{'src': 'photo.jpg', 'width': 3000}],
        }

    def test_optional_fields_null(self):
        """Test absent metadata serializes as null."""
        bare = PhotoDescriptor(tiny_preview='', source=(), width=1, height=1, palette=())
        data = bare.to_dict()

        assert data['geo'] is None
        assert data['shutter_speed'] is None
        assert data['iso'] is None

    def test_to_json_compact(self, descriptor):
        """Test JSON output has no whitespace separators."""
        text = descriptor.to_json()

        assert ', ' not in text
        assert json.loads(text) == descriptor.to_dict()

    def test_from_dict(self, descriptor):
        """Test a parsed descriptor equals the original."""
        assert PhotoDescriptor.from_dict(json.loads(descriptor.to_json())) == descriptor

    def test_with_url_prefix(self, descriptor):
        """Test every src is rewritten and nothing else changes."""
        rewritten = descriptor.with_url_prefix(lambda src: f'https://cdn.example.com/{src}')

        srcs = [e.src for s in rewritten.source for e in s.srcset]
        assert all(src.startswith('https://cdn.example.com/') for src in srcs)
        assert rewritten.original.srcset[0].src == 'https://cdn.example.com/photo.jpg'
        assert rewritten.palette == descriptor.palette
        assert descriptor.original.srcset[0].src == 'photo.jpg'
