from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import logging
import math
import tomllib

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "runtime.toml"

MAX_WORKERS = 30


@dataclass(frozen=True)
class MatchingConfig:
    candidate_min_score: float
    unstructured_min_score: float
    structured_min_score: float
    unstructured_rows: int
    structured_rows: int
    workers: int
    delimiter: str


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    connect_timeout: float
    read_timeout: float
    mailto: Optional[str]
    key_file: str
    user_agent: str


@dataclass(frozen=True)
class JournalsConfig:
    path: Optional[str]


@dataclass(frozen=True)
class RuntimeConfig:
    matching: MatchingConfig
    api: ApiConfig
    journals: JournalsConfig


def _default_config() -> RuntimeConfig:
    return RuntimeConfig(
        matching=MatchingConfig(
            candidate_min_score=0.4,
            unstructured_min_score=0.34,
            structured_min_score=0.76,
            unstructured_rows=20,
            structured_rows=100,
            workers=4,
            delimiter="\n",
        ),
        api=ApiConfig(
            base_url="https://api.crossref.org",
            connect_timeout=10.0,
            read_timeout=30.0,
            mailto=None,
            key_file=str(Path.home() / ".crapi_key"),
            user_agent="ref-matching/0.1",
        ),
        journals=JournalsConfig(path=None),
    )


def _safe_int(value: Any, fallback: int) -> int:
    try:
        parsed = int(value)
        return parsed if parsed > 0 else fallback
    except Exception:
        return fallback


def _safe_float(value: Any, fallback: float) -> float:
    if isinstance(value, bool):
        return fallback
    try:
        parsed = float(value)
    except Exception:
        return fallback
    if math.isnan(parsed) or parsed < 0:
        return fallback
    return parsed


def _str_field(d: dict, key: str, default: Optional[str]) -> Optional[str]:
    val = d.get(key, default)
    if not isinstance(val, str) or not val.strip():
        return default
    return val.strip()


def _section(raw: Any, name: str) -> dict:
    section = raw.get(name) if isinstance(raw, dict) else {}
    return section if isinstance(section, dict) else {}


def load_runtime_config(config_path: Optional[Path] = None) -> RuntimeConfig:
    cfg = _default_config()
    path = config_path or _DEFAULT_CONFIG_PATH
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        logger.warning("Runtime config file not found; using defaults", extra={"path": str(path)})
        return cfg
    except tomllib.TOMLDecodeError:
        logger.exception("Runtime config parse failed; using defaults", extra={"path": str(path)})
        return cfg
    except Exception:
        logger.exception("Runtime config load failed; using defaults", extra={"path": str(path)})
        return cfg

    matching_raw = _section(raw, "matching")
    api_raw = _section(raw, "api")
    journals_raw = _section(raw, "journals")
    m = cfg.matching

    delimiter = matching_raw.get("delimiter", m.delimiter)
    if not isinstance(delimiter, str) or not delimiter:
        delimiter = m.delimiter

    matching = MatchingConfig(
        candidate_min_score=_safe_float(matching_raw.get("candidate_min_score"), m.candidate_min_score),
        unstructured_min_score=_safe_float(matching_raw.get("unstructured_min_score"), m.unstructured_min_score),
        structured_min_score=_safe_float(matching_raw.get("structured_min_score"), m.structured_min_score),
        unstructured_rows=_safe_int(matching_raw.get("unstructured_rows"), m.unstructured_rows),
        structured_rows=_safe_int(matching_raw.get("structured_rows"), m.structured_rows),
        workers=min(_safe_int(matching_raw.get("workers"), m.workers), MAX_WORKERS),
        delimiter=delimiter,
    )

    a = cfg.api
    api = ApiConfig(
        base_url=_str_field(api_raw, "base_url", a.base_url) or a.base_url,
        connect_timeout=_safe_float(api_raw.get("connect_timeout"), a.connect_timeout) or a.connect_timeout,
        read_timeout=_safe_float(api_raw.get("read_timeout"), a.read_timeout) or a.read_timeout,
        mailto=_str_field(api_raw, "mailto", a.mailto),
        key_file=str(Path(_str_field(api_raw, "key_file", a.key_file) or a.key_file).expanduser()),
        user_agent=_str_field(api_raw, "user_agent", a.user_agent) or a.user_agent,
    )

    journals = JournalsConfig(path=_str_field(journals_raw, "path", cfg.journals.path))

    return RuntimeConfig(matching=matching, api=api, journals=journals)


RUNTIME_CONFIG = load_runtime_config()
