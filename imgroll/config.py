"""
ProcessingConfig - Policy constants for the photo pipeline.
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple


def _default_thumbnail_steps() -> List[Tuple[int, int]]:
    return [(2500, 2000), (1500, 1000)]


@dataclass
class ProcessingConfig:
    """
    Policy constants for the photo pipeline.

    Attributes:
        jpeg_quality: Base JPEG quality before the size bonus
        webp_quality: Base lossy WebP quality before the size bonus
        preview_size: Bounding box of the tiny preview, in pixels
        preview_quality: WebP quality of the tiny preview
        max_lossy_dimension: Lossy sources are downscaled to fit this bound
        thumbnail_steps: (threshold, bound) pairs; a lossy image whose longer
            edge exceeds threshold gets an extra rendition fitting bound
        palette_size: Number of dominant colors reported
        png_colors: Palette entries used by the PNG encoder
        png_kmeans_iterations: K-means refinement passes for the PNG palette
        hash_bytes: Length of the content hash in the file prefix
        max_workers: Worker threads for per-encoder tasks
    """
    jpeg_quality: float = 65.0
    webp_quality: float = 53.0
    preview_size: int = 48
    preview_quality: float = 0.2
    max_lossy_dimension: int = 3000
    thumbnail_steps: List[Tuple[int, int]] = field(default_factory=_default_thumbnail_steps)
    palette_size: int = 10
    png_colors: int = 69
    png_kmeans_iterations: int = 3
    hash_bytes: int = 6
    max_workers: int = 4

    ENV_PREFIX = 'IMGROLL_'

    @classmethod
    def from_env(cls) -> 'ProcessingConfig':
        """Create configuration from IMGROLL_* environment variables."""
        config = cls()

        float_fields = ('jpeg_quality', 'webp_quality', 'preview_quality')
        int_fields = (
            'preview_size', 'max_lossy_dimension', 'palette_size',
            'png_colors', 'png_kmeans_iterations', 'hash_bytes', 'max_workers',
        )

        for name in float_fields:
            value = os.getenv(cls.ENV_PREFIX + name.upper())
            if value:
                setattr(config, name, float(value))

        for name in int_fields:
            value = os.getenv(cls.ENV_PREFIX + name.upper())
            if value:
                setattr(config, name, int(value))

        # Format: "2500:2000,1500:1000"
        steps = os.getenv(cls.ENV_PREFIX + 'THUMBNAIL_STEPS')
        if steps:
            config.thumbnail_steps = [
                (int(threshold), int(bound))
                for threshold, bound in (pair.split(':') for pair in steps.split(','))
            ]

        return config

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        for name in ('jpeg_quality', 'webp_quality', 'preview_quality'):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                errors.append(f"{name} must be between 0 and 100, got {value}")

        if self.preview_size < 1:
            errors.append("preview_size must be positive")
        if self.max_lossy_dimension < 1:
            errors.append("max_lossy_dimension must be positive")
        if not 1 <= self.palette_size <= 256:
            errors.append("palette_size must be between 1 and 256")
        if not 2 <= self.png_colors <= 256:
            errors.append("png_colors must be between 2 and 256")
        if self.png_kmeans_iterations < 0:
            errors.append("png_kmeans_iterations must not be negative")
        if not 1 <= self.hash_bytes <= 32:
            errors.append("hash_bytes must be between 1 and 32")
        if self.max_workers < 1:
            errors.append("max_workers must be positive")

        bounds = [bound for _, bound in self.thumbnail_steps]
        if len(set(bounds)) != len(bounds):
            errors.append("thumbnail_steps bounds must be unique")
        for threshold, bound in self.thumbnail_steps:
            if bound >= threshold:
                errors.append(f"thumbnail bound {bound} must be below its threshold {threshold}")

        return errors
