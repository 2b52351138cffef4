"""Resolve bibliographic references to DOIs by scoring search candidates."""

from .candidate import Candidate
from .errors import MatchConfigError, MatchError
from .journals import load_journal_abbreviations
from .matcher import ReferenceMatcher
from .models import MatchRequest, MatchResponse, ReferenceLink
from .references import ReferenceKind, StructuredReference, UnstructuredReference
from .search_client import CrossrefSearchClient
from .similarity import GenJaccardSimilarity

__all__ = [
    "Candidate",
    "CrossrefSearchClient",
    "GenJaccardSimilarity",
    "MatchConfigError",
    "MatchError",
    "MatchRequest",
    "MatchResponse",
    "ReferenceKind",
    "ReferenceLink",
    "ReferenceMatcher",
    "StructuredReference",
    "UnstructuredReference",
    "load_journal_abbreviations",
]
