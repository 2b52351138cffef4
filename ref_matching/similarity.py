"""Generalized Jaccard similarity over named, weighted signals."""
from __future__ import annotations

from typing import Dict, Optional, Tuple


class GenJaccardSimilarity:
    """
    Accumulates (expected, matched) weight pairs per signal name.

    Updating a signal that already exists overwrites it; this is how signals
    are revised after the fact (e.g. the +-1 year relaxation).
    """

    def __init__(self) -> None:
        self._weights: Dict[str, Tuple[float, float]] = {}

    def update(self, name: str, expected: float, matched: float) -> None:
        self._weights[name] = (float(expected), float(matched))

    def min_weight(self, name: str) -> Optional[float]:
        pair = self._weights.get(name)
        if pair is None:
            return None
        return min(pair)

    def similarity(self) -> float:
        numerator = sum(min(e, m) for e, m in self._weights.values())
        denominator = sum(max(e, m) for e, m in self._weights.values())
        # an empty signal set is a vacuous full match
        if denominator == 0:
            return 1.0
        return numerator / denominator

    def signals(self) -> Dict[str, Tuple[float, float]]:
        return dict(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"GenJaccardSimilarity({self._weights!r})"
