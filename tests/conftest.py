"""Shared test fixtures for texture matching tests."""

import numpy as np
import cv2
import pytest

from texture_match.models import FeatureVector, IndexEntry, RawImage, HIST_DIM
from texture_match.index import ReferenceIndex


def encode(image_rgb, ext=".png"):
    """Encode an RGB uint8 array to image file bytes."""
    ok, buf = cv2.imencode(ext, cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return buf.tobytes()


def one_hot_features(bucket, edge):
    hist = np.zeros(HIST_DIM)
    hist[bucket] = 1.0
    return FeatureVector.create(hist, edge)


@pytest.fixture
def black_image():
    """64x64 solid black image."""
    return RawImage.from_array(np.zeros((64, 64, 3), dtype=np.uint8))


@pytest.fixture
def gray_image():
    """64x64 uniform mid-gray image."""
    return RawImage.from_array(np.full((64, 64, 3), 128, dtype=np.uint8))


@pytest.fixture
def checkerboard_rgb():
    """64x80 checkerboard of 8px dark/light squares (strong edges)."""
    img = np.full((80, 64, 3), 200, dtype=np.uint8)
    for y in range(0, 80, 8):
        for x in range(0, 64, 8):
            if (x // 8 + y // 8) % 2 == 0:
                img[y:y+8, x:x+8] = [50, 40, 30]
    return img


@pytest.fixture
def checkerboard_image(checkerboard_rgb):
    return RawImage.from_array(checkerboard_rgb)


@pytest.fixture
def noise_rgb():
    """128x160 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (160, 128, 3), dtype=np.uint8)


@pytest.fixture
def noise_image(noise_rgb):
    return RawImage.from_array(noise_rgb[:80, :64])


@pytest.fixture
def noise_png(noise_rgb):
    return encode(noise_rgb)


@pytest.fixture
def two_label_index():
    """Label A concentrated in bucket 0, label B in bucket 63."""
    return ReferenceIndex([
        IndexEntry("A", "a_01.jpg", one_hot_features(0, 0.1)),
        IndexEntry("B", "b_01.jpg", one_hot_features(HIST_DIM - 1, 0.9)),
    ])


@pytest.fixture
def multi_sample_index():
    """Five labels, two samples each, histograms drawn from a fixed seed."""
    rng = np.random.RandomState(7)
    entries = []
    for label in ["oak", "birch", "maple", "pine", "cedar"]:
        for i in range(2):
            hist = rng.rand(HIST_DIM)
            hist /= hist.sum()
            entries.append(IndexEntry(label, f"{label}_{i}.jpg",
                                      FeatureVector.create(hist, rng.rand())))
    return ReferenceIndex(entries)
