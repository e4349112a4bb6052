"""
Reference index loading and validation.

The index is produced by an external dataset step and stored as JSON,
either as a list of entries or as {"entries": [...]}. Each entry:

    {"labelKey": "oak", "sourceRef": "oak_03.jpg",
     "features": {"hist": [64 floats], "edge": 0.31}}

A ReferenceIndex is loaded once and never modified afterwards; entries
live in a tuple and histograms in read-only arrays, so one instance can
be shared by any number of concurrent queries.
"""

import os
import json
import math
import logging
from typing import Iterable, Iterator, List, Tuple

from .errors import IndexFormatError
from .models import FeatureVector, IndexEntry, HIST_DIM

logger = logging.getLogger(__name__)

HIST_SUM_TOLERANCE = 1e-3


def _as_float(value, position: int, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise IndexFormatError(f"Entry {position}: non-numeric {field} value {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise IndexFormatError(f"Entry {position}: {field} value out of range") from e
    if not math.isfinite(number):
        raise IndexFormatError(f"Entry {position}: {field} value {value!r} is not finite")
    return number


def _parse_features(raw, position: int) -> FeatureVector:
    if not isinstance(raw, dict):
        raise IndexFormatError(f"Entry {position}: 'features' must be an object")

    hist = raw.get("hist")
    if not isinstance(hist, list) or len(hist) != HIST_DIM:
        raise IndexFormatError(
            f"Entry {position}: 'hist' must be a list of {HIST_DIM} numbers"
        )
    values = []
    for value in hist:
        number = _as_float(value, position, "histogram")
        if number < 0:
            raise IndexFormatError(f"Entry {position}: negative histogram value {value!r}")
        values.append(number)

    edge = _as_float(raw.get("edge"), position, "edge")
    if not 0.0 <= edge <= 1.0:
        raise IndexFormatError(f"Entry {position}: 'edge' {edge!r} outside [0, 1]")

    total = math.fsum(values)
    if abs(total - 1.0) > HIST_SUM_TOLERANCE:
        logger.warning(f"Entry {position}: histogram sums to {total:.4f}, expected 1.0")

    return FeatureVector.create(values, edge)


def parse_entry(raw, position: int = 0) -> IndexEntry:
    """Validate one persisted entry and convert it to an IndexEntry."""
    if not isinstance(raw, dict):
        raise IndexFormatError(f"Entry {position} must be an object")
    for key in ("labelKey", "sourceRef", "features"):
        if key not in raw:
            raise IndexFormatError(f"Entry {position} is missing '{key}'")
    label_key = raw["labelKey"]
    source_ref = raw["sourceRef"]
    if not isinstance(label_key, str) or not isinstance(source_ref, str):
        raise IndexFormatError(f"Entry {position}: 'labelKey' and 'sourceRef' must be strings")

    return IndexEntry(
        label_key=label_key,
        source_ref=source_ref,
        features=_parse_features(raw["features"], position),
    )


class ReferenceIndex:
    """Ordered, read-only collection of labeled reference descriptors."""

    def __init__(self, entries: Iterable[IndexEntry] = ()):
        self._entries: Tuple[IndexEntry, ...] = tuple(entries)

    @classmethod
    def from_document(cls, document) -> "ReferenceIndex":
        """Build an index from a parsed JSON document (list or {"entries": [...]})."""
        if isinstance(document, dict):
            if "entries" not in document:
                raise IndexFormatError("Index document has no 'entries' list")
            document = document["entries"]
        if not isinstance(document, list):
            raise IndexFormatError("Index entries must be a list")
        return cls(parse_entry(raw, i) for i, raw in enumerate(document))

    @classmethod
    def load(cls, path: str) -> "ReferenceIndex":
        """
        Load and validate an index file.

        Raises:
            IndexFormatError: If the file is not valid JSON or fails validation.
            OSError: If the file cannot be opened.
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                document = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise IndexFormatError(f"Index {path} is not valid UTF-8 JSON: {e}") from e

        index = cls.from_document(document)
        logger.info(
            f"Loaded reference index {os.path.basename(path)}: "
            f"{len(index)} entries, {len(index.labels)} labels"
        )
        return index

    @property
    def entries(self) -> Tuple[IndexEntry, ...]:
        return self._entries

    @property
    def labels(self) -> List[str]:
        """Distinct label keys in first-seen order."""
        seen = {}
        for entry in self._entries:
            seen.setdefault(entry.label_key, None)
        return list(seen)

    def to_document(self) -> dict:
        return {
            "entries": [
                {
                    "labelKey": e.label_key,
                    "sourceRef": e.source_ref,
                    "features": e.features.to_dict(),
                }
                for e in self._entries
            ]
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
