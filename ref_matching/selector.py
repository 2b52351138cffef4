from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .candidate import Candidate
from .logging_setup import get_logger, with_extras
from .references import Reference
from .search_client import SearchClient

logger = get_logger(__name__)


def select_candidates(query: str, items: List[Dict[str, Any]], min_score: float) -> List[Candidate]:
    """
    Keep the top result, then follow the ranking while the relevance score
    per query character stays at or above `min_score`; stop at the first drop.
    """
    candidates: List[Candidate] = []
    for item in items:
        candidate = Candidate(item)
        if candidates and candidate.search_score / len(query) < min_score:
            break
        candidates.append(candidate)
    return candidates


class CandidateSelector:
    """Retrieve search results for a reference and cut the list at the relevance cliff."""

    def __init__(self, client: SearchClient):
        self.client = client

    def find_candidates(
        self,
        reference: Reference,
        rows: int,
        min_score: float,
        headers: Optional[Mapping[str, str]] = None,
    ) -> List[Candidate]:
        query = reference.query_string
        if not query:
            return []
        try:
            items = self.client.search(query, rows, headers)
        except Exception:
            with_extras(logger, query_excerpt=query[:200]).exception("Candidate search failed")
            return []
        candidates = select_candidates(query, items or [], min_score)
        with_extras(
            logger, query_excerpt=query[:200], results=len(items or []), kept=len(candidates)
        ).debug("Candidates selected")
        return candidates
