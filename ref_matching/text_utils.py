"""String helpers shared by the candidate scoring code."""
from __future__ import annotations

import re
from typing import List, Optional

from thefuzz import fuzz
from unidecode import unidecode

NUMBER_RE = re.compile(r"(?<!\d)\d+(?!\d)")
DOI_RE = re.compile(r"(?<!\d)10\.\d{4,9}/[-._;()/:a-zA-Z0-9]+")
ARXIV_RE = re.compile(r"(?<![a-zA-Z0-9])arXiv:[\d.]+")
BRACKET_MARKER_RE = re.compile(r"\[[^\[\]]*\]")
# hyphen, soft hyphen, the U+2010..U+2015 dash block, super/subscript minus, minus sign
DASHES = "\u002d\u00ad\u2010\u2011\u2012\u2013\u2014\u2015\u207b\u208b\u2212"
PAGE_RANGE_RE = re.compile(r"\d+[" + DASHES + r"]\d+")


def normalize(value: Optional[str]) -> str:
    """ASCII-fold and lowercase; characters with no ASCII form become '?'."""
    if not value:
        return ""
    return unidecode(value, errors="replace", replace_str="?").lower().replace("[?]", "?")


def string_similarity(a: Optional[str], b: Optional[str], *, normalized: bool, partial: bool) -> float:
    """Fuzzy similarity in [0, 1]; `partial` aligns the shorter string inside the longer."""
    a = a or ""
    b = b or ""
    if normalized:
        a = normalize(a)
        b = normalize(b)
    if partial:
        return fuzz.partial_ratio(a, b) / 100
    return fuzz.ratio(a, b) / 100


def complete_last_page(pages: str) -> str:
    """
    Expand an abbreviated last page from the first one: "1425-37" -> "1425-1437".

    Left unchanged when the short form cannot be a continuation of the first
    page ("1325-128", "1009-8").
    """
    numbers = [n for n in re.split(r"\D", pages) if n]
    if len(numbers) < 2:
        return pages
    first, last = numbers[0], numbers[1]
    if len(first) > len(last) and int(first[len(first) - len(last):]) <= int(last):
        return f"{first}-{first[:len(first) - len(last)]}{last}"
    return pages


def complete_page_ranges(text: str) -> str:
    return PAGE_RANGE_RE.sub(lambda m: complete_last_page(m.group()), text)


def strip_identifiers(text: str) -> str:
    """Drop the first DOI, arXiv id and bracketed marker; they only add stray numbers."""
    text = DOI_RE.sub("", text, count=1)
    text = ARXIV_RE.sub("", text, count=1)
    return BRACKET_MARKER_RE.sub("", text, count=1).strip()


def numbers_in(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return NUMBER_RE.findall(text)


def first_number(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    m = NUMBER_RE.search(text)
    return m.group() if m else None


def normalize_journal_key(value: Optional[str]) -> str:
    return re.sub(r"[^a-z]", "", (value or "").lower())
