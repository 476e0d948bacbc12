"""
Variants - Main rendition plus size-threshold thumbnails for one encoder.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from PIL import Image

from .config import ProcessingConfig
from .descriptor import OutFile, Source, SrcSetEntry
from .encoders import Encoder
from .naming import rendition_name


def fit_within(img: Image.Image, bound: int) -> Image.Image:
    """Aspect-preserving Lanczos downscale so neither side exceeds bound."""
    resized = img.copy()
    resized.thumbnail((bound, bound), Image.Resampling.LANCZOS)
    return resized


@dataclass(frozen=True)
class RenditionSet:
    """Everything one encoder produced for a photo."""
    source: Source
    files: Tuple[OutFile, ...] = field(repr=False)


class VariantGenerator:
    """
    Produces the responsive renditions of the working image for one encoder.

    The main rendition is always produced. Lossy sources also get one
    downscaled rendition per configured (threshold, bound) step whose
    threshold the working image's longer edge exceeds; steps are
    independent of each other.
    """

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize variant generator.

        Args:
            config: Processing configuration
            logger: Optional logger instance
        """
        self.config = config or ProcessingConfig()
        self.logger = logger or logging.getLogger(__name__)

    def thumbnail_bounds(self, width: int, height: int, lossy: bool) -> List[int]:
        """Bounds of the extra renditions an image of this size gets."""
        if not lossy:
            return []
        # Thresholds apply to the longer edge, so a narrow but tall portrait
        # still gets the extra renditions its height calls for
        longer = max(width, height)
        return [bound for threshold, bound in self.config.thumbnail_steps if longer > threshold]

    def _renditions(self, img: Image.Image, lossy: bool) -> Iterator[Image.Image]:
        yield img
        for bound in self.thumbnail_bounds(img.width, img.height, lossy):
            yield fit_within(img, bound)

    def generate(
        self,
        encoder: Encoder,
        img: Image.Image,
        prefix: str,
        lossy: bool
    ) -> RenditionSet:
        """
        Encode every rendition of img with encoder.

        Args:
            encoder: Codec to use
            img: Working image (shared, never modified)
            prefix: Content-addressed name prefix
            lossy: Whether the source format is lossy

        Returns:
            RenditionSet with the Source (largest first) and its files

        Raises:
            ImgrollError: If any encode fails; nothing is returned
        """
        entries = []
        files = []
        widths = set()

        for rendition in self._renditions(img, lossy):
            # Extremely narrow images can round to the same width at two bounds
            if rendition.width in widths:
                self.logger.debug(
                    f"Skipping {encoder.codec} rendition at duplicate width {rendition.width}"
                )
                continue

            encoded = encoder.encode(rendition)
            name = rendition_name(prefix, rendition.width, encoded.extension)
            entries.append(SrcSetEntry(src=name, width=rendition.width))
            files.append(OutFile(name=name, data=encoded.data, mimetype=encoded.mime_type))
            widths.add(rendition.width)

        self.logger.debug(
            f"{encoder.codec}: {len(files)} renditions "
            f"({', '.join(str(e.width) for e in entries)})"
        )
        return RenditionSet(
            source=Source(original=False, type=encoder.mime_type, srcset=tuple(entries)),
            files=tuple(files),
        )
