"""
PhotoProcessor - Turns one uploaded photo into a descriptor and derived files.
"""

import functools
import logging
import time
from typing import Dict, List, Optional, Tuple

from .config import ProcessingConfig
from .descriptor import OutFile, PhotoDescriptor, Source, SrcSetEntry
from .dispatcher import ParallelDispatcher
from .encoders import ENCODER_REGISTRY, EncoderFactory, check_supported, encoders_for, is_lossless
from .metadata import MediaType, decode_image, read_metadata
from .naming import content_prefix
from .orientation import normalize_orientation
from .palette import extract_palette
from .preview import make_tiny_preview
from .variants import VariantGenerator, fit_within


class PhotoProcessor:
    """
    Runs the derived-asset pipeline for a single photo.

    raw bytes -> metadata + decoded pixels -> upright working image ->
    (palette, name prefix, per-encoder renditions, tiny preview) ->
    PhotoDescriptor + OutFiles
    """

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        logger: Optional[logging.Logger] = None,
        registry: Optional[Dict[MediaType, Tuple[EncoderFactory, ...]]] = None,
        dispatcher: Optional[ParallelDispatcher] = None,
        webp_lib=None
    ):
        """
        Initialize processor.

        Args:
            config: Processing configuration (default: ProcessingConfig())
            logger: Optional logger instance
            registry: Media type -> encoder factories (default: ENCODER_REGISTRY)
            dispatcher: Runs the per-encoder tasks (default: thread pool of
                config.max_workers)
            webp_lib: Bound libwebp handle for the tiny preview
        """
        self.config = config or ProcessingConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.registry = ENCODER_REGISTRY if registry is None else registry
        self.dispatcher = dispatcher or ParallelDispatcher(self.config.max_workers, self.logger)
        self.variants = VariantGenerator(self.config, self.logger)
        self.webp_lib = webp_lib

    def process(self, raw: bytes, filename: str) -> Tuple[PhotoDescriptor, List[OutFile]]:
        """
        Process one photo.

        Args:
            raw: Uploaded file contents
            filename: Display filename; used verbatim as the original src and
                slugified into the derived file names

        Returns:
            Tuple of (descriptor, derived files)

        Raises:
            ImgrollError: On any failure; no partial output is returned
        """
        start = time.time()

        meta = read_metadata(raw)
        check_supported(meta.media_type, meta.format_name, self.registry)
        lossy = not is_lossless(meta.media_type)

        img = normalize_orientation(decode_image(raw), meta.orientation)
        original_width = img.width
        prefix = content_prefix(img.tobytes(), filename, self.config.hash_bytes)

        bound = self.config.max_lossy_dimension
        if lossy and max(img.size) > bound:
            self.logger.debug(f"Downscaling {img.width}x{img.height} to fit {bound}px")
            img = fit_within(img, bound)

        palette = extract_palette(img, self.config.palette_size)

        encoders = encoders_for(meta.media_type, self.config, self.logger, self.registry)
        tasks = [
            functools.partial(self.variants.generate, encoder, img, prefix, lossy)
            for encoder in encoders
        ]
        rendition_sets = self.dispatcher.run(tasks)

        tiny_preview = make_tiny_preview(
            img, self.config.preview_size, self.config.preview_quality, lib=self.webp_lib
        )

        original = Source(
            original=True,
            type=meta.media_type.mime_type,
            srcset=(SrcSetEntry(src=filename, width=original_width),),
        )
        files = [f for rs in rendition_sets for f in rs.files]

        descriptor = PhotoDescriptor(
            tiny_preview=tiny_preview,
            source=(original,) + tuple(rs.source for rs in rendition_sets),
            width=img.width,
            height=img.height,
            palette=tuple(palette),
            geo=meta.geo,
            aperture=meta.aperture,
            shutter_speed=meta.shutter_speed,
            focal_length=meta.focal_length,
            iso=meta.iso,
        )

        self.logger.info(
            f"Processed {filename}: {img.width}x{img.height}, {len(files)} files, "
            f"{sum(f.size for f in files)} bytes ({time.time() - start:.2f}s)"
        )
        return descriptor, files


def process_photo(
    raw: bytes,
    filename: str,
    config: Optional[ProcessingConfig] = None,
    logger: Optional[logging.Logger] = None
) -> Tuple[PhotoDescriptor, List[OutFile]]:
    """Process one photo with a default PhotoProcessor. See PhotoProcessor.process."""
    return PhotoProcessor(config, logger).process(raw, filename)
