"""
Distance metric, per-label reduction and confidence scoring.

The distance combines the Euclidean histogram distance with a weighted
edge-density difference. The edge weight is well below 1 because the
color signature carries most of the discriminating signal.

Confidence is relative to one query's shortlist: the best candidate maps
to CONF_BEST and the worst retained one to CONF_WORST. It is not a
calibrated probability and is not comparable across queries.
"""

import os
import logging
from typing import Dict, Iterable, List

import numpy as np

from .models import FeatureVector, IndexEntry, MatchCandidate, MatchResult

logger = logging.getLogger(__name__)

EDGE_WEIGHT = float(os.environ.get("SCORE_EDGE_WEIGHT", "0.25"))
DEFAULT_TOP_K = int(os.environ.get("MATCH_TOP_K", "3"))

BEST_CONFIDENCE = float(os.environ.get("CONF_BEST", "0.95"))
WORST_CONFIDENCE = float(os.environ.get("CONF_WORST", "0.55"))
MIN_CONFIDENCE = float(os.environ.get("CONF_MIN", "0.05"))
MAX_CONFIDENCE = float(os.environ.get("CONF_MAX", "0.99"))

# Floor for the best/worst spread so a single candidate never divides by zero
SPREAD_EPSILON = 1e-9


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def feature_distance(query: FeatureVector,
                     target: FeatureVector,
                     edge_weight: float = EDGE_WEIGHT) -> float:
    """
    Distance between two feature vectors (lower = more similar).

    ||query.hist - target.hist|| + edge_weight * |query.edge - target.edge|.
    Symmetric, and exactly 0.0 for identical vectors.
    """
    hist_distance = float(np.linalg.norm(query.hist - target.hist))
    return hist_distance + edge_weight * abs(query.edge - target.edge)


def reduce_by_label(query: FeatureVector,
                    entries: Iterable[IndexEntry],
                    edge_weight: float = EDGE_WEIGHT) -> List[MatchCandidate]:
    """
    Score every entry and keep the best entry per label.

    A label's best record is replaced only by a strictly smaller distance,
    so on ties the entry seen first wins. The result lists labels in the
    order they were first seen in entries.

    Returns:
        One MatchCandidate per distinct label.
    """
    best: Dict[str, MatchCandidate] = {}
    order: List[str] = []

    for entry in entries:
        distance = feature_distance(query, entry.features, edge_weight)
        previous = best.get(entry.label_key)
        if previous is None:
            order.append(entry.label_key)
        elif distance >= previous.distance:
            continue
        best[entry.label_key] = MatchCandidate(
            label_key=entry.label_key,
            distance=distance,
            source_ref=entry.source_ref,
        )

    return [best[label] for label in order]


def rank_candidates(candidates: List[MatchCandidate],
                    top_k: int = DEFAULT_TOP_K) -> List[MatchCandidate]:
    """
    Sort candidates by ascending distance and keep the first top_k.

    The sort is stable: equal distances keep their input order.

    Raises:
        ValueError: If top_k is negative.
    """
    if top_k < 0:
        raise ValueError(f"top_k must be >= 0, got {top_k}")
    return sorted(candidates, key=lambda c: c.distance)[:top_k]


def normalize_confidence(ranked: List[MatchCandidate],
                         best_confidence: float = BEST_CONFIDENCE,
                         worst_confidence: float = WORST_CONFIDENCE) -> List[MatchResult]:
    """
    Turn a ranked shortlist into MatchResults with relative confidence.

    Each candidate's position within the shortlist's distance spread,
    t = (distance - best) / (worst - best), is mapped linearly from
    best_confidence (t=0) to worst_confidence (t=1), then clamped to
    [MIN_CONFIDENCE, MAX_CONFIDENCE]. A lone candidate gets best_confidence.

    Args:
        ranked: Candidates sorted by ascending distance.

    Returns:
        MatchResults with 1-based ranks, or [] for an empty shortlist.
    """
    if not ranked:
        return []

    best_dist = ranked[0].distance
    worst_dist = ranked[-1].distance
    denom = max(SPREAD_EPSILON, worst_dist - best_dist)

    results = []
    for i, candidate in enumerate(ranked):
        t = clamp((candidate.distance - best_dist) / denom, 0.0, 1.0)
        confidence = lerp(best_confidence, worst_confidence, t)
        results.append(MatchResult(
            rank=i + 1,
            label_key=candidate.label_key,
            source_ref=candidate.source_ref,
            distance=candidate.distance,
            confidence=clamp(confidence, MIN_CONFIDENCE, MAX_CONFIDENCE),
        ))
    return results
