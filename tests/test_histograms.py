"""Tests for color histogram and feature extraction."""

import numpy as np
import pytest

from texture_match.edges import edge_density, luminance
from texture_match.histograms import bin_index, extract_color_histogram, extract_features
from texture_match.models import RawImage, HIST_DIM
from texture_match.quality import analyze_image_quality


class TestBinIndex:

    def test_bin_edges(self):
        values = np.array([0, 63, 64, 127, 128, 191, 192, 255], dtype=np.uint8)
        assert list(bin_index(values)) == [0, 0, 1, 1, 2, 2, 3, 3]


class TestExtractColorHistogram:
    """Tests for the joint RGB histogram."""

    def test_output_shape(self, noise_image):
        assert extract_color_histogram(noise_image).shape == (HIST_DIM,)

    def test_sums_to_one(self, noise_image, checkerboard_image):
        for image in (noise_image, checkerboard_image):
            assert abs(extract_color_histogram(image).sum() - 1.0) < 1e-6

    def test_non_negative(self, noise_image):
        assert np.all(extract_color_histogram(noise_image) >= 0)

    def test_black_fills_bucket_zero(self, black_image):
        hist = extract_color_histogram(black_image)
        assert hist[0] == 1.0

    def test_white_fills_last_bucket(self):
        white = RawImage.from_array(np.full((8, 8, 3), 255, dtype=np.uint8))
        assert extract_color_histogram(white)[HIST_DIM - 1] == 1.0

    def test_bucket_layout(self):
        # r bin 2, g bin 1, b bin 3 -> (2*4 + 1)*4 + 3 = 39
        img = RawImage.from_array(np.full((4, 4, 3), [130, 70, 250], dtype=np.uint8))
        hist = extract_color_histogram(img)
        assert hist[39] == 1.0

    def test_alpha_ignored(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        hist = extract_color_histogram(RawImage.from_array(rgba))
        assert hist[0] == 1.0

    def test_split_image(self):
        img = np.zeros((10, 10, 3), dtype=np.uint8)
        img[:, 5:] = 255
        hist = extract_color_histogram(RawImage.from_array(img))
        assert hist[0] == pytest.approx(0.5)
        assert hist[HIST_DIM - 1] == pytest.approx(0.5)

    def test_empty_image_raises(self):
        empty = RawImage.from_array(np.zeros((0, 0, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            extract_color_histogram(empty)


class TestExtractFeatures:
    """Tests for the combined descriptor."""

    def test_edge_in_range(self, noise_image, checkerboard_image, black_image):
        for image in (noise_image, checkerboard_image, black_image):
            assert 0.0 <= extract_features(image).edge <= 1.0

    def test_edge_matches_quality_gate(self, checkerboard_image, noise_image):
        for image in (checkerboard_image, noise_image):
            features = extract_features(image)
            assert features.edge == analyze_image_quality(image).edge_norm
            assert features.edge == edge_density(luminance(image))

    def test_bit_identical_on_repeat(self, noise_image):
        first = extract_features(noise_image)
        second = extract_features(RawImage.from_array(noise_image.pixels.copy()))
        assert np.array_equal(first.hist, second.hist)
        assert first.edge == second.edge

    def test_histogram_read_only(self, noise_image):
        features = extract_features(noise_image)
        with pytest.raises(ValueError):
            features.hist[0] = 1.0

    def test_no_nan_or_inf(self, noise_image):
        features = extract_features(noise_image)
        assert np.all(np.isfinite(features.hist))
        assert np.isfinite(features.edge)
