"""Batch orchestration: candidate selection, validation and the journal-abbreviation retry."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, List, Mapping, Optional

from .candidate import Candidate
from .journals import EMPTY_JOURNALS
from .logging_setup import get_logger, with_extras
from .models import MatchRequest, MatchResponse, ReferenceLink
from .references import Reference, ReferenceKind, StructuredReference, UnstructuredReference, structured_from_json
from .search_client import SearchClient
from .selector import CandidateSelector
from .text_utils import normalize_journal_key
from .validator import CandidateValidator

logger = get_logger(__name__)


def _info(msg: str, **extras):
    if extras:
        with_extras(logger, **extras).info(msg)
    else:
        logger.info(msg)


def _exception(msg: str, **extras):
    if extras:
        with_extras(logger, **extras).exception(msg)
    else:
        logger.exception(msg)


def _better(first: Optional[Candidate], second: Optional[Candidate]) -> Optional[Candidate]:
    """The retry result wins only when it scores strictly higher (or the first found nothing)."""
    if first is None:
        return second
    if second is None:
        return first
    if (second.validation_score or 0.0) > (first.validation_score or 0.0):
        return second
    return first


class ReferenceMatcher:
    """
    Resolve references to DOIs using a search collaborator.

    `journals` maps normalized journal abbreviations to full titles; it is
    read-only and shared by all workers.
    """

    def __init__(self, client: SearchClient, journals: Mapping[str, str] = EMPTY_JOURNALS):
        self.selector = CandidateSelector(client)
        self.validator = CandidateValidator()
        self.journals = journals

    def match(self, request: MatchRequest) -> MatchResponse:
        refs = list(request.references)
        links: List[Optional[ReferenceLink]] = [None] * len(refs)
        workers = request.effective_workers
        _info("Matching batch", references=len(refs), workers=workers)

        if workers > 1 and len(refs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.match_reference, ref, request): idx
                    for idx, ref in enumerate(refs)
                }
                for future in as_completed(futures):
                    idx = futures[future]
                    links[idx] = self._collect(refs[idx], future.result)
        else:
            for idx, ref in enumerate(refs):
                links[idx] = self._collect(ref, lambda ref=ref: self.match_reference(ref, request))

        response = MatchResponse(request=request, links=[link for link in links if link is not None])
        _info("Batch complete", references=len(refs), matched=response.matched)
        return response

    @staticmethod
    def _collect(reference: Reference, result) -> ReferenceLink:
        try:
            return result()
        except Exception:
            _exception("Reference matching failed", query_excerpt=reference.query_string[:200])
            return ReferenceLink(reference=reference, doi=None, score=0.0)

    def match_reference(self, reference: Reference, request: MatchRequest) -> ReferenceLink:
        if reference.kind is ReferenceKind.STRUCTURED:
            candidate = self._match_structured(reference, request)
        else:
            candidate = self._attempt(
                reference,
                rows=request.unstructured_rows,
                min_score=request.unstructured_min_score,
                request=request,
            )
        link = ReferenceLink(
            reference=reference,
            doi=candidate.doi if candidate else None,
            score=(candidate.validation_score or 0.0) if candidate else 0.0,
        )
        with_extras(logger, doi=link.doi, score=link.score).debug(
            "Reference matched" if link.doi else "Reference unmatched"
        )
        return link

    def match_unstructured(self, text: str, request: Optional[MatchRequest] = None) -> ReferenceLink:
        reference = UnstructuredReference(text)
        return self.match_reference(reference, request or MatchRequest([reference]))

    def match_structured(self, fields: Mapping[str, Any], request: Optional[MatchRequest] = None) -> ReferenceLink:
        reference = structured_from_json(fields)
        return self.match_reference(reference, request or MatchRequest([reference]))

    def _attempt(self, reference: Reference, *, rows: int, min_score: float, request: MatchRequest) -> Optional[Candidate]:
        candidates = self.selector.find_candidates(
            reference, rows, request.candidate_min_score, request.headers
        )
        return self.validator.choose_candidate(reference, candidates, min_score)

    def _match_structured(self, reference: StructuredReference, request: MatchRequest) -> Optional[Candidate]:
        candidate = self._attempt(
            reference,
            rows=request.structured_rows,
            min_score=request.structured_min_score,
            request=request,
        )
        expansion = self.journals.get(normalize_journal_key(reference.field_value("journal-title")))
        if not expansion:
            return candidate

        expanded = reference.with_field("journal-title", expansion)
        retry = self._attempt(
            expanded,
            rows=request.structured_rows,
            min_score=request.structured_min_score,
            request=request,
        )
        return _better(candidate, retry)

