"""
Texture matching engine.

Runs the per-query pipeline:
    1. Decode and normalize the photo to a 64px-wide RGBA grid
    2. Quality gate (a blank photo ends the query with no results)
    3. Extract the histogram + edge descriptor
    4. Score against every index entry, keep the best entry per label
    5. Rank, truncate to top_k, assign relative confidence

The engine holds no per-query state. One instance, and its index, can
serve concurrent queries from several threads.
"""

import logging
from typing import List, Union

from .histograms import extract_features
from .index import ReferenceIndex
from .models import FeatureVector, MatchResult, RawImage
from .preprocessing import ImageSource, decode_image
from .quality import passes_quality_gate
from .scoring import DEFAULT_TOP_K, normalize_confidence, rank_candidates, reduce_by_label

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Matches query photos against a reference index of labeled textures.
    """

    def __init__(self, index: Union[ReferenceIndex, str]):
        """
        Args:
            index: A loaded ReferenceIndex, or a path to an index JSON file.
        """
        if not isinstance(index, ReferenceIndex):
            index = ReferenceIndex.load(index)
        self.index = index
        if not self.index:
            logger.warning("Reference index is empty, every query will return no matches")

    def match(self, source: ImageSource, top_k: int = DEFAULT_TOP_K) -> List[MatchResult]:
        """
        Match a photo against the index.

        Args:
            source: Image file path or encoded image bytes.
            top_k: Maximum number of labels to return.

        Returns:
            Ranked MatchResults, at most one per label. Empty when the
            photo fails the quality gate or the index is empty.

        Raises:
            DecodeError: If the photo cannot be decoded.
        """
        image = decode_image(source)
        return self.match_image(image, top_k)

    def match_image(self, image: RawImage, top_k: int = DEFAULT_TOP_K) -> List[MatchResult]:
        """Match an already decoded image (quality gate onwards)."""
        if not passes_quality_gate(image):
            logger.info("Photo rejected by quality gate")
            return []
        return self.match_features(extract_features(image), top_k)

    def match_features(self, features: FeatureVector,
                       top_k: int = DEFAULT_TOP_K) -> List[MatchResult]:
        """Score a descriptor against the index and return the ranked shortlist."""
        candidates = reduce_by_label(features, self.index)
        if self.index and not candidates:
            logger.warning("Label reduction produced no candidates from a non-empty index")
            return []

        results = normalize_confidence(rank_candidates(candidates, top_k))

        logger.info(
            f"Match complete: {len(self.index)} entries → "
            f"{len(candidates)} labels → {len(results)} results"
        )
        return results


def match_photo(source: ImageSource,
                index: Union[ReferenceIndex, str],
                top_k: int = DEFAULT_TOP_K) -> List[MatchResult]:
    """One-off convenience wrapper around MatchEngine.match()."""
    return MatchEngine(index).match(source, top_k)
