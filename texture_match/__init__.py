"""
texture_match — Surface texture matching against a labeled reference index.

Decodes a photo into a small fixed-width pixel grid, rejects photos with
too little visual structure, extracts a color histogram + edge density
descriptor, and ranks labels by their best-matching reference sample.

Modules:
    engine         Main MatchEngine class
    preprocessing  Image decoding and normalization to a 64px grid
    quality        Quality gate (darkness, flatness, edge energy)
    edges          Shared luminance and edge-density routine
    histograms     Joint RGB histogram + feature extraction
    index          Reference index loading and validation
    scoring        Distance metric, label reduction, confidence scoring
    runner         Background execution with stale-result discarding
    cli            Command line entry point
"""

from .errors import DecodeError, IndexFormatError
from .models import RawImage, FeatureVector, IndexEntry, MatchCandidate, MatchResult
from .index import ReferenceIndex
from .engine import MatchEngine, match_photo

__version__ = "1.0.0"

__all__ = [
    "DecodeError",
    "IndexFormatError",
    "RawImage",
    "FeatureVector",
    "IndexEntry",
    "MatchCandidate",
    "MatchResult",
    "ReferenceIndex",
    "MatchEngine",
    "match_photo",
]
