from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from .errors import MatchConfigError
from .references import Reference, UnstructuredReference, reference_from_json, structured_from_json

INPUT_TYPES = ("string", "file")


def read_input(input_type: str, value: Optional[str]) -> str:
    if input_type not in INPUT_TYPES:
        raise MatchConfigError(f"Invalid input type {input_type!r}; valid types are {list(INPUT_TYPES)}")
    if value is None:
        raise MatchConfigError("Input value not specified")
    if input_type == "string":
        return value
    path = Path(value)
    if not path.is_file():
        raise MatchConfigError(f"The specified input file does not exist: {value}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MatchConfigError(f"Unable to read input file {value}: {e}") from e


def _parse_piece(piece: str) -> Reference:
    try:
        obj = json.loads(piece)
    except ValueError:
        return UnstructuredReference(piece)
    if isinstance(obj, dict):
        return structured_from_json(obj)
    return UnstructuredReference(piece)


def parse_references(data: str, delimiter: str = "\n") -> List[Reference]:
    """
    A JSON array yields one reference per element (strings unstructured,
    objects structured). Anything else is split on `delimiter`; each piece is
    a JSON object or a citation string. Blank pieces are skipped.
    """
    try:
        parsed = json.loads(data)
    except ValueError:
        parsed = None
    if isinstance(parsed, list):
        return [reference_from_json(element) for element in parsed if element is not None]

    refs: List[Reference] = []
    for piece in data.split(delimiter):
        txt = piece.strip()
        if txt:
            refs.append(_parse_piece(txt))
    return refs
