from __future__ import annotations

from typing import List, Optional

from .candidate import Candidate
from .logging_setup import get_logger
from .references import Reference

logger = get_logger(__name__)


class CandidateValidator:
    """Pick the best-scoring candidate and accept it only above a threshold."""

    def choose_candidate(
        self, reference: Reference, candidates: List[Candidate], min_score: float
    ) -> Optional[Candidate]:
        if not candidates:
            return None
        scores = [c.validation_similarity(reference) for c in candidates]
        best = 0
        for i in range(1, len(scores)):
            # earlier candidates win ties
            if not scores[best] >= scores[i]:
                best = i
        chosen = candidates[best].with_validation_score(scores[best])
        logger.debug("Best candidate %s score=%.4f", chosen.doi, scores[best])
        if scores[best] >= min_score:
            return chosen
        return None
