"""
Color histogram and feature vector extraction.

Each channel is quantized into HIST_BINS equal-width bins and the three
bin indices are flattened into one of HIST_BINS**3 buckets, giving a
joint RGB histogram normalized to a probability distribution. The edge
density from edges.py is stored next to it as a color-independent
texture roughness signal.
"""

import numpy as np

from .edges import luminance, edge_density
from .models import FeatureVector, HIST_BINS, HIST_DIM, RawImage


def bin_index(values: np.ndarray, bins: int = HIST_BINS) -> np.ndarray:
    """Quantize 0-255 channel values into bins: clamp(floor(v / 256 * bins), 0, bins - 1)."""
    scaled = np.floor(values.astype(np.float64) / 256.0 * bins)
    return np.clip(scaled, 0, bins - 1).astype(np.int64)


def extract_color_histogram(image: RawImage) -> np.ndarray:
    """
    Build the normalized joint RGB histogram of an image.

    Args:
        image: Decoded RGBA image with at least one pixel.

    Returns:
        Float64 vector of HIST_DIM entries summing to 1.0. Alpha is ignored.

    Raises:
        ValueError: If the image has no pixels.
    """
    total = image.width * image.height
    if total <= 0:
        raise ValueError("Cannot build a histogram for an empty image")

    pixels = image.pixels
    r_bin = bin_index(pixels[:, :, 0])
    g_bin = bin_index(pixels[:, :, 1])
    b_bin = bin_index(pixels[:, :, 2])
    bucket = (r_bin * HIST_BINS + g_bin) * HIST_BINS + b_bin

    counts = np.bincount(bucket.ravel(), minlength=HIST_DIM)
    return counts.astype(np.float64) / total


def extract_features(image: RawImage) -> FeatureVector:
    """Extract the color histogram + edge density descriptor of an image."""
    hist = extract_color_histogram(image)
    edge = edge_density(luminance(image))
    return FeatureVector.create(hist, edge)
