"""Request/response containers for batch reference matching."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .errors import MatchConfigError
from .references import Reference, StructuredReference, UnstructuredReference
from .runtime_config import MAX_WORKERS, RUNTIME_CONFIG

_DEFAULTS = RUNTIME_CONFIG.matching


def _check_score(name: str, value: Any, upper: Optional[float] = None) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise MatchConfigError(f"{name} must be a number, got {value!r}")
    if value < 0 or (upper is not None and value > upper):
        bound = f"[0, {upper}]" if upper is not None else ">= 0"
        raise MatchConfigError(f"{name} must be {bound}, got {value!r}")


def _check_rows(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise MatchConfigError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class MatchRequest:
    """
    A batch of references plus the per-kind thresholds and candidate-set
    sizes used to match them. Invalid settings raise MatchConfigError.
    """

    references: Sequence[Reference]
    candidate_min_score: float = _DEFAULTS.candidate_min_score
    unstructured_min_score: float = _DEFAULTS.unstructured_min_score
    structured_min_score: float = _DEFAULTS.structured_min_score
    unstructured_rows: int = _DEFAULTS.unstructured_rows
    structured_rows: int = _DEFAULTS.structured_rows
    workers: int = _DEFAULTS.workers
    headers: Dict[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.references is None:
            raise MatchConfigError("references are required")
        object.__setattr__(self, "references", tuple(self.references))
        for ref in self.references:
            if not isinstance(ref, (StructuredReference, UnstructuredReference)):
                raise MatchConfigError(f"not a reference: {ref!r}")
        _check_score("candidate_min_score", self.candidate_min_score)
        _check_score("unstructured_min_score", self.unstructured_min_score, 1.0)
        _check_score("structured_min_score", self.structured_min_score, 1.0)
        _check_rows("unstructured_rows", self.unstructured_rows)
        _check_rows("structured_rows", self.structured_rows)
        _check_rows("workers", self.workers)
        object.__setattr__(self, "headers", dict(self.headers or {}))

    @property
    def effective_workers(self) -> int:
        """Worker count clamped to [1, min(batch size, MAX_WORKERS)]."""
        return max(1, min(self.workers, MAX_WORKERS, len(self.references)))


@dataclass(frozen=True)
class ReferenceLink:
    """The outcome of matching one reference."""

    reference: Reference
    doi: Optional[str]
    score: float

    def to_json(self) -> Dict[str, Any]:
        return {
            "reference": self.reference.original(),
            "DOI": self.doi,
            "score": self.score,
        }


@dataclass(frozen=True)
class MatchResponse:
    request: MatchRequest
    links: List[ReferenceLink]

    def to_json(self) -> List[Dict[str, Any]]:
        return [link.to_json() for link in self.links]

    @property
    def matched(self) -> int:
        return sum(1 for link in self.links if link.doi)
