"""
Immutable data types shared across the matching pipeline.

Pixel and histogram data are held in read-only numpy arrays so a loaded
reference index can be shared between concurrent queries without copying.
"""

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np

HIST_BINS = 4
HIST_DIM = HIST_BINS ** 3


def _frozen_array(values, dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class RawImage:
    """Decoded RGBA pixel grid of shape (height, width, 4)."""

    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def from_array(cls, image_np: np.ndarray) -> "RawImage":
        """
        Build a RawImage from an RGB or RGBA uint8 array.

        RGB input gets a fully opaque alpha channel.
        """
        if image_np.ndim != 3 or image_np.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected an HxWx3 or HxWx4 array, got shape {image_np.shape}"
            )
        image_np = np.asarray(image_np, dtype=np.uint8)
        if image_np.shape[2] == 3:
            alpha = np.full(image_np.shape[:2] + (1,), 255, dtype=np.uint8)
            image_np = np.concatenate([image_np, alpha], axis=2)
        h, w = image_np.shape[:2]
        return cls(width=int(w), height=int(h), pixels=_frozen_array(image_np, np.uint8))


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """64-bucket color histogram plus a normalized edge density in [0, 1]."""

    hist: np.ndarray
    edge: float

    @classmethod
    def create(cls, hist, edge: float) -> "FeatureVector":
        return cls(hist=_frozen_array(hist, np.float64), edge=float(edge))

    def to_dict(self) -> Dict[str, Any]:
        return {"hist": [float(v) for v in self.hist], "edge": self.edge}


@dataclass(frozen=True, eq=False)
class IndexEntry:
    label_key: str
    source_ref: str
    features: FeatureVector


@dataclass(frozen=True)
class MatchCandidate:
    """Best entry found for one label."""

    label_key: str
    distance: float
    source_ref: str


@dataclass(frozen=True)
class MatchResult:
    rank: int
    label_key: str
    source_ref: str
    distance: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "labelKey": self.label_key,
            "sourceRef": self.source_ref,
            "distance": self.distance,
            "confidence": self.confidence,
        }
