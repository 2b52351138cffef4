from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from .logging_setup import get_logger, with_extras
from .text_utils import normalize_journal_key

logger = get_logger(__name__)

EMPTY_JOURNALS: Mapping[str, str] = MappingProxyType({})


def _default_journals_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config" / "journal-abbreviations.txt"


def journals_path(configured: Optional[str] = None) -> Path:
    raw = os.environ.get("JOURNAL_ABBREVIATIONS_PATH")
    if raw and raw.strip():
        return Path(raw.strip())
    if configured and configured.strip():
        return Path(configured.strip())
    return _default_journals_path()


def load_journal_abbreviations(path: Union[str, Path, None] = None) -> Mapping[str, str]:
    """
    Load `<abbreviation>\\t<full title>` lines into a read-only mapping keyed by
    the normalized abbreviation. A missing or unreadable file gives an empty map.
    """
    path = Path(path) if path else journals_path()
    data: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                txt = line.strip()
                if not txt or txt.startswith("#"):
                    continue
                abbrev, sep, full = txt.partition("\t")
                key = normalize_journal_key(abbrev)
                full = full.strip()
                if not sep or not key or not full:
                    continue
                data[key] = full
    except (OSError, UnicodeDecodeError):
        with_extras(logger, path=str(path)).warning("Journal abbreviations unavailable; retry heuristic disabled")
        return EMPTY_JOURNALS
    logger.debug("Loaded %s journal abbreviations from %s", len(data), path)
    return MappingProxyType(data)
