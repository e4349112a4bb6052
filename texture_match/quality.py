"""
Quality gate for query photos.

Rejects photos that are too dark, too flat, or lack visible structure
before any matching work is done. A rejected photo yields an empty
result list rather than an error, so callers can ask for a retake.

Thresholds are tuned for 64px-wide photos of surface textures. They are
fixed at module level; analyze_image_quality() accepts per-call overrides.
"""

import math
import logging
from dataclasses import dataclass

import numpy as np

from .edges import luminance, edge_density
from .models import RawImage

logger = logging.getLogger(__name__)

DARK_MEAN_THRESHOLD = 18.0
FLAT_STD_THRESHOLD = 10.0
MIN_EDGE_DENSITY = 0.02


@dataclass(frozen=True)
class QualityMetrics:
    mean: float
    std: float
    edge_norm: float
    is_too_dark: bool
    is_too_flat: bool
    is_too_blank: bool


def analyze_image_quality(image: RawImage,
                          dark_threshold: float = None,
                          flat_threshold: float = None,
                          min_edge: float = None) -> QualityMetrics:
    """
    Compute brightness, contrast and edge statistics for a decoded photo.

    Args:
        image: Decoded RGBA image.
        dark_threshold: Mean luminance below which the photo is too dark.
        flat_threshold: Luminance std below which the photo is too flat.
        min_edge: Edge density below which the photo is blank.

    Returns:
        QualityMetrics. is_too_blank is
        (is_too_dark and is_too_flat) or edge_norm < min_edge.
    """
    if dark_threshold is None:
        dark_threshold = DARK_MEAN_THRESHOLD
    if flat_threshold is None:
        flat_threshold = FLAT_STD_THRESHOLD
    if min_edge is None:
        min_edge = MIN_EDGE_DENSITY

    n = image.width * image.height
    if n <= 0:
        return QualityMetrics(
            mean=0.0, std=0.0, edge_norm=0.0,
            is_too_dark=True, is_too_flat=True, is_too_blank=True,
        )

    gray = luminance(image)
    mean = float(gray.sum() / n)
    variance = max(0.0, float(np.square(gray).sum() / n) - mean * mean)
    std = math.sqrt(variance)
    edge_norm = edge_density(gray)

    is_too_dark = mean < dark_threshold
    is_too_flat = std < flat_threshold
    # Mixed AND/OR: a very dark photo with visible texture still passes
    is_too_blank = (is_too_dark and is_too_flat) or edge_norm < min_edge

    return QualityMetrics(
        mean=mean, std=std, edge_norm=edge_norm,
        is_too_dark=is_too_dark, is_too_flat=is_too_flat,
        is_too_blank=is_too_blank,
    )


def passes_quality_gate(image: RawImage) -> bool:
    """Return True when the photo has enough structure to be matched."""
    metrics = analyze_image_quality(image)
    logger.debug(
        f"Quality: mean={metrics.mean:.1f} std={metrics.std:.1f} "
        f"edge={metrics.edge_norm:.3f} blank={metrics.is_too_blank}"
    )
    return not metrics.is_too_blank
