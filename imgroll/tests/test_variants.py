"""Tests for rendition generation."""

import pytest
from PIL import Image

from imgroll.config import ProcessingConfig
from imgroll.encoders import Encoder
from imgroll.errors import EncodeError
from imgroll.variants import VariantGenerator, fit_within


class RecordingEncoder(Encoder):
    """Encoder that records the sizes it was asked to encode."""

    codec = 'fake'
    mime_type = 'image/x-fake'
    extension = 'fake'

    def __init__(self, config=None, logger=None):
        super().__init__(config, logger)
        self.sizes = []

    def _encode(self, img):
        self.sizes.append(img.size)
        return b'%dx%d' % img.size


class FailingEncoder(RecordingEncoder):
    """Encoder that fails on its second rendition."""

    def _encode(self, img):
        if self.sizes:
            raise EncodeError(self.codec, "second rendition failed")
        return super()._encode(img)


@pytest.fixture
def config():
    """Small thresholds so tests stay fast."""
    return ProcessingConfig(thumbnail_steps=[(250, 200), (150, 100)])


class TestFitWithin:
    """Tests for fit_within."""

    def test_preserves_aspect(self):
        """Test landscape and portrait images fit the bound."""
        assert fit_within(Image.new('RGB', (400, 300)), 200).size == (200, 150)
        assert fit_within(Image.new('RGB', (300, 400)), 200).size == (150, 200)

    def test_never_upscales(self):
        """Test images already within the bound are unchanged in size."""
        assert fit_within(Image.new('RGB', (50, 40)), 200).size == (50, 40)

    def test_copy(self):
        """Test the input is not resized in place."""
        img = Image.new('RGB', (400, 300))
        fit_within(img, 100)

        assert img.size == (400, 300)


class TestThumbnailBounds:
    """Tests for VariantGenerator.thumbnail_bounds."""

    def test_both_steps(self, config):
        """Test a large image gets both extra bounds."""
        assert VariantGenerator(config).thumbnail_bounds(300, 200, lossy=True) == [200, 100]

    def test_one_step(self, config):
        """Test the steps are independent thresholds."""
        assert VariantGenerator(config).thumbnail_bounds(200, 120, lossy=True) == [100]

    def test_small(self, config):
        """Test an image at or below every threshold gets none."""
        assert VariantGenerator(config).thumbnail_bounds(150, 150, lossy=True) == []

    def test_longer_edge_counts(self, config):
        """Test portrait images are measured by their height."""
        assert VariantGenerator(config).thumbnail_bounds(100, 300, lossy=True) == [200, 100]

    def test_lossless_exempt(self, config):
        """Test lossless sources never get thumbnails."""
        assert VariantGenerator(config).thumbnail_bounds(3000, 3000, lossy=False) == []

    def test_default_steps(self):
        """Test the default 2500/1500 thresholds."""
        gen = VariantGenerator()

        assert gen.thumbnail_bounds(3000, 2250, lossy=True) == [2000, 1000]
        assert gen.thumbnail_bounds(2000, 1500, lossy=True) == [1000]
        assert gen.thumbnail_bounds(1500, 1000, lossy=True) == []

    def test_default_steps_tall_portrait(self):
        """Test a portrait no wider than 1500 is still thinned by its height."""
        assert VariantGenerator().thumbnail_bounds(1000, 2400, lossy=True) == [1000]


class TestGenerate:
    """Tests for VariantGenerator.generate."""

    def test_lossy_renditions(self, config):
        """Test main rendition plus thumbnails, largest first."""
        encoder = RecordingEncoder()

        result = VariantGenerator(config).generate(encoder, Image.new('RGB', (300, 200)), 'abc_photo', lossy=True)

        assert encoder.sizes == [(300, 200), (200, 133), (100, 67)]
        assert result.source.widths == [300, 200, 100]
        assert result.source.type == 'image/x-fake'
        assert not result.source.original
        assert [f.name for f in result.files] == [
            'abc_photo.300.fake',
            'abc_photo.200.fake',
            'abc_photo.100.fake',
        ]

    def test_files_match_srcset(self, config):
        """Test every srcset entry has a file of the same name."""
        result = VariantGenerator(config).generate(
            RecordingEncoder(), Image.new('RGB', (300, 200)), 'p', lossy=True
        )

        assert [e.src for e in result.source.srcset] == [f.name for f in result.files]
        assert all(f.mimetype == 'image/x-fake' for f in result.files)
        assert result.files[0].data == b'300x200'

    def test_lossless_single(self, config):
        """Test lossless sources get only the main rendition."""
        result = VariantGenerator(config).generate(
            RecordingEncoder(), Image.new('RGB', (300, 200)), 'p', lossy=False
        )

        assert result.source.widths == [300]
        assert len(result.files) == 1

    def test_duplicate_widths_skipped(self, config):
        """Test a very narrow image does not produce two files with one name."""
        result = VariantGenerator(config).generate(
            RecordingEncoder(), Image.new('RGB', (1, 400)), 'p', lossy=True
        )

        names = [f.name for f in result.files]
        assert len(names) == len(set(names))
        assert result.source.widths == [1]

    def test_failure_propagates(self, config):
        """Test a failing rendition aborts the whole set."""
        with pytest.raises(EncodeError):
            VariantGenerator(config).generate(
                FailingEncoder(), Image.new('RGB', (300, 200)), 'p', lossy=True
            )

    def test_working_image_untouched(self, config):
        """Test the shared working image is never modified."""
        img = Image.new('RGB', (300, 200))

        VariantGenerator(config).generate(RecordingEncoder(), img, 'p', lossy=True)

        assert img.size == (300, 200)
