"""Reference value types: free-text citations and structured field maps."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

# field order used to build the search query of a structured reference
QUERY_FIELDS = (
    "author",
    "article-title",
    "journal-title",
    "series-title",
    "volume-title",
    "year",
    "volume",
    "issue",
    "first-page",
    "edition",
    "ISSN",
)


class ReferenceKind(str, Enum):
    STRUCTURED = "structured"
    UNSTRUCTURED = "unstructured"


@dataclass(frozen=True)
class UnstructuredReference:
    """A raw citation string."""

    text: str
    kind: ReferenceKind = field(default=ReferenceKind.UNSTRUCTURED, init=False)

    @property
    def query_string(self) -> str:
        return self.text

    def field_value(self, name: str) -> Optional[str]:
        return None

    def original(self) -> str:
        return self.text


@dataclass(frozen=True)
class StructuredReference:
    """A citation given as named fields (author, article-title, year, ...)."""

    fields: Mapping[str, str] = field(hash=False)
    kind: ReferenceKind = field(default=ReferenceKind.STRUCTURED, init=False)

    def __post_init__(self) -> None:
        # values are always strings; numbers are stringified and nulls dropped
        fields: Dict[str, str] = {}
        for key, value in dict(self.fields).items():
            coerced = _coerce_field_value(value)
            if coerced is not None:
                fields[str(key)] = coerced
        object.__setattr__(self, "fields", MappingProxyType(fields))

    @property
    def query_string(self) -> str:
        joined = " ".join(self.fields.get(key, "") for key in QUERY_FIELDS)
        return re.sub(r" +", " ", joined).strip()

    def field_value(self, name: str) -> Optional[str]:
        return self.fields.get(name)

    def with_field(self, name: str, value: str) -> "StructuredReference":
        updated = dict(self.fields)
        updated[name] = value
        return StructuredReference(updated)

    def original(self) -> Dict[str, str]:
        return dict(self.fields)


Reference = Union[StructuredReference, UnstructuredReference]


def _coerce_field_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def structured_from_json(obj: Mapping[str, Any]) -> StructuredReference:
    """Build a structured reference from a JSON object; numbers become strings, nulls are dropped."""
    return StructuredReference(dict(obj))


def reference_from_json(value: Any) -> Reference:
    if isinstance(value, Mapping):
        return structured_from_json(value)
    return UnstructuredReference(str(value))
