"""Candidate target documents and their validation similarity against a reference."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from .logging_setup import get_logger
from .references import Reference, ReferenceKind
from .similarity import GenJaccardSimilarity
from .text_utils import (
    complete_page_ranges,
    first_number,
    normalize,
    numbers_in,
    strip_identifiers,
    string_similarity,
)

logger = get_logger(__name__)

SUPPORT_TEXT_MIN = 0.7
MIN_SUPPORT = 3
# the first characters of a citation usually hold its marker ("[12]", "12.")
MARKER_PREFIX_LEN = 5
# author names are only looked for near the start of the citation
AUTHOR_WINDOW_FACTOR = 3


def _first_text(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _first_family(people: Any) -> Optional[str]:
    if not isinstance(people, list) or not people:
        return None
    person = people[0]
    if not isinstance(person, dict):
        return None
    return _first_text(person.get("family"))


def _above(similarity: GenJaccardSimilarity, name: str, threshold: float) -> bool:
    value = similarity.min_weight(name)
    return value is not None and value > threshold


@dataclass(frozen=True)
class Candidate:
    """One search-result document considered as a match target."""

    item: Mapping[str, Any] = field(hash=False)
    validation_score: Optional[float] = None

    @property
    def doi(self) -> Optional[str]:
        return _first_text(self.item.get("DOI"))

    @property
    def search_score(self) -> float:
        try:
            return float(self.item.get("score") or 0.0)
        except (TypeError, ValueError):
            return 0.0

    @property
    def type(self) -> Optional[str]:
        return _first_text(self.item.get("type"))

    @property
    def volume(self) -> Optional[str]:
        return _first_text(self.item.get("volume"))

    @property
    def issue(self) -> Optional[str]:
        return _first_text(self.item.get("issue"))

    @property
    def page(self) -> Optional[str]:
        return _first_text(self.item.get("page"))

    @property
    def year(self) -> Optional[str]:
        issued = self.item.get("issued")
        if not isinstance(issued, dict):
            return None
        parts = issued.get("date-parts") or []
        if parts and isinstance(parts[0], list) and parts[0] and parts[0][0] is not None:
            return str(parts[0][0])
        return None

    @property
    def title(self) -> Optional[str]:
        return _first_text(self.item.get("title"))

    @property
    def container_title(self) -> Optional[str]:
        return _first_text(self.item.get("container-title"))

    @property
    def author(self) -> Optional[str]:
        return _first_family(self.item.get("author"))

    @property
    def editor(self) -> Optional[str]:
        return _first_family(self.item.get("editor"))

    def with_validation_score(self, score: float) -> "Candidate":
        return replace(self, validation_score=score)

    def validation_similarity(self, reference: Reference) -> float:
        if reference.kind is ReferenceKind.STRUCTURED:
            return self.structured_validation_similarity(reference.fields)
        return self.string_validation_similarity(reference.query_string)

    # ------------------------------------------------------------------
    # unstructured references
    # ------------------------------------------------------------------

    def string_validation_similarity(self, ref_string: str) -> float:
        similarity = GenJaccardSimilarity()
        score = self.search_score

        similarity.update("score", max(1.0, score / 100), score / 100)
        norm = score / len(ref_string) if ref_string else 0.0
        similarity.update("score_norm", max(1.0, norm), norm)

        ref_string = complete_page_ranges(strip_identifiers(ref_string))
        numbers = numbers_in(ref_string[MARKER_PREFIX_LEN:])
        if not numbers:
            return 0.0

        volume, year = self.volume, self.year
        # volume and year may legitimately share a single occurrence
        if volume is not None and volume == year and numbers.count(volume) == 1:
            numbers.append(volume)

        for name, value in (
            ("volume", volume),
            ("year", year),
            ("issue", self.issue),
            ("page", self.page),
            ("title", self.title),
            ("ctitle", self.container_title),
        ):
            if value is not None:
                _consume_numbers(name, value, numbers, similarity)

        name = self.author if self.author is not None else self.editor
        if name is not None:
            a = normalize(name)
            b = normalize(ref_string)[: AUTHOR_WINDOW_FACTOR * len(a)]
            similarity.update("author", 1.0, string_similarity(a, b, normalized=False, partial=True))

        year_weight = similarity.min_weight("year_0")
        if year is not None and year_weight is not None and year_weight < 1:
            _relax_year(year, numbers, similarity)

        support = 0
        if self.title is not None and string_similarity(
            self.title, ref_string, normalized=True, partial=True
        ) > SUPPORT_TEXT_MIN:
            support += 1
        if _above(similarity, "year_0", 0):
            support += 1
        if _above(similarity, "volume_0", 0):
            support += 1
        if _above(similarity, "author", SUPPORT_TEXT_MIN):
            support += 1
        if _above(similarity, "page_0", 0):
            support += 1
        if support < MIN_SUPPORT:
            logger.debug("Rejecting %s: support %s", self.doi, support)
            return 0.0

        # every unexplained number counts against the candidate
        for i, _ in enumerate(numbers):
            similarity.update(f"rest_{i}", 0.0, 1.0)

        return similarity.similarity()

    # ------------------------------------------------------------------
    # structured references
    # ------------------------------------------------------------------

    def structured_validation_similarity(self, fields: Mapping[str, str]) -> float:
        similarity = GenJaccardSimilarity()

        ref_volume = fields.get("volume")
        if ref_volume:
            _compare_first_numbers("volume", self.volume, ref_volume, similarity)

        ref_year = fields.get("year")
        if ref_year:
            _compare_first_numbers("year", self.year, ref_year, similarity)
            year_weight = similarity.min_weight("year")
            if year_weight is not None and year_weight < 1 and _adjacent_years(self.year, ref_year):
                similarity.update("year", 1.0, 0.5)

        ref_page = fields.get("first-page")
        if ref_page:
            _compare_first_numbers("page", self.page, ref_page, similarity)

        ref_title = fields.get("article-title")
        if ref_title:
            similarity.update(
                "title", 1.0, string_similarity(self.title, ref_title, normalized=True, partial=False)
            )

        ref_journal = fields.get("journal-title")
        if ref_journal:
            similarity.update(
                "ctitle",
                1.0,
                string_similarity(self.container_title, ref_journal, normalized=True, partial=False),
            )

        ref_volume_title = fields.get("volume-title")
        if ref_volume_title:
            similarity.update(
                "vtitle",
                1.0,
                max(
                    string_similarity(self.title, ref_volume_title, normalized=True, partial=False),
                    string_similarity(self.container_title, ref_volume_title, normalized=True, partial=False),
                ),
            )

        ref_author = fields.get("author")
        if ref_author:
            # a surname-only reference is aligned inside the candidate name; full names compare whole
            partial = " " not in ref_author
            similarity.update(
                "author",
                1.0,
                max(
                    string_similarity(self.author, ref_author, normalized=True, partial=partial),
                    string_similarity(self.editor, ref_author, normalized=True, partial=partial),
                ),
            )

        textual = ("title", "ctitle", "vtitle", "author")
        if not any(_above(similarity, name, SUPPORT_TEXT_MIN) for name in textual):
            logger.debug("Rejecting %s: no textual evidence", self.doi)
            return 0.0

        support = sum(1 for name in ("year", "volume", "page") if _above(similarity, name, 0))
        support += sum(1 for name in textual if _above(similarity, name, SUPPORT_TEXT_MIN))
        if support < MIN_SUPPORT:
            logger.debug("Rejecting %s: support %s", self.doi, support)
            return 0.0

        if self.type == "book-chapter" and not fields.get("first-page"):
            return 0.0
        # issues are never valid targets
        if self.type == "journal-issue":
            return 0.0

        return similarity.similarity()


def _consume_numbers(name: str, value: str, ref_numbers: List[str], similarity: GenJaccardSimilarity) -> None:
    """One signal per number in `value`; a matched reference number is used up."""
    for i, number in enumerate(numbers_in(value)):
        if number in ref_numbers:
            similarity.update(f"{name}_{i}", 1.0, 1.0)
            ref_numbers.remove(number)
        else:
            similarity.update(f"{name}_{i}", 1.0, 0.0)


def _relax_year(year: str, ref_numbers: List[str], similarity: GenJaccardSimilarity) -> None:
    try:
        value = int(year)
    except ValueError:
        return
    for neighbour in (str(value - 1), str(value + 1)):
        if neighbour in ref_numbers:
            similarity.update("year_0", 1.0, 0.5)
            ref_numbers.remove(neighbour)
            return


def _compare_first_numbers(
    name: str, candidate_value: Optional[str], ref_value: Optional[str], similarity: GenJaccardSimilarity
) -> None:
    a = first_number(candidate_value)
    b = first_number(ref_value)
    if a is None or b is None:
        similarity.update(name, 0.5, 0.0)
    else:
        similarity.update(name, 1.0, 1.0 if a == b else 0.0)


def _adjacent_years(year1: Optional[str], year2: Optional[str]) -> bool:
    try:
        return abs(int(year1 or "") - int(year2 or "")) == 1
    except ValueError:
        return False


def candidates_from_items(items: List[Dict[str, Any]]) -> List[Candidate]:
    return [Candidate(item) for item in items if isinstance(item, dict)]
