"""
Luminance and edge-density statistics.

Both the quality gate and the feature extractor need the mean interior
gradient magnitude of an image. They apply different thresholds to it,
so each calls edge_density() separately rather than sharing a result.
"""

import numpy as np

from .models import RawImage

EDGE_NORMALIZER = 100.0

# ITU-R BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114


def luminance(image: RawImage) -> np.ndarray:
    """Per-pixel grayscale luminance in [0, 255] as float64, shape (h, w)."""
    rgb = image.pixels[:, :, :3].astype(np.float64)
    return LUMA_R * rgb[:, :, 0] + LUMA_G * rgb[:, :, 1] + LUMA_B * rgb[:, :, 2]


def mean_gradient_magnitude(gray: np.ndarray) -> float:
    """
    Mean central-difference gradient magnitude over interior pixels.

    The 1-pixel border is excluded. Returns 0.0 when the image has no
    interior pixels (width or height below 3).
    """
    h, w = gray.shape[:2]
    if h < 3 or w < 3:
        return 0.0
    gx = gray[1:-1, 2:] - gray[1:-1, :-2]
    gy = gray[2:, 1:-1] - gray[:-2, 1:-1]
    magnitude = np.sqrt(gx * gx + gy * gy)
    return float(magnitude.mean())


def edge_density(gray: np.ndarray, normalizer: float = EDGE_NORMALIZER) -> float:
    """Mean interior gradient magnitude divided by normalizer, clamped to [0, 1]."""
    return min(1.0, max(0.0, mean_gradient_magnitude(gray) / normalizer))
