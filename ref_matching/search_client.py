from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union

import requests

from .logging_setup import get_logger, with_extras

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.crossref.org"
DEFAULT_TIMEOUT: Tuple[float, float] = (10.0, 30.0)
DEFAULT_USER_AGENT = "ref-matching/0.1"


def _info(msg: str, **extras):
    if extras:
        with_extras(logger, **extras).info(msg)
    else:
        logger.info(msg)


def _warn(msg: str, **extras):
    if extras:
        with_extras(logger, **extras).warning(msg)
    else:
        logger.warning(msg)


class SearchClient(Protocol):
    """Anything that turns a query into a ranked list of work records."""

    def search(self, query: str, rows: int, headers: Optional[Mapping[str, str]] = None) -> List[Dict[str, Any]]:
        ...


def load_api_headers(path: Union[str, Path, None]) -> Dict[str, str]:
    """
    Read Authorization/Mailto headers from a JSON key file.
    Falls back to CROSSREF_AUTHORIZATION / CROSSREF_MAILTO for whatever the file lacks.
    """
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            _info("API key file not found", path=str(path))
        except (OSError, ValueError) as e:
            _warn("Unable to read API key file", path=str(path), error=str(e))
        if not isinstance(data, dict):
            _warn("API key file is not a JSON object", path=str(path))
            data = {}

    headers: Dict[str, str] = {}
    authorization = data.get("Authorization") or os.environ.get("CROSSREF_AUTHORIZATION")
    mailto = data.get("Mailto") or os.environ.get("CROSSREF_MAILTO")
    if authorization:
        headers["Authorization"] = str(authorization)
    if mailto:
        headers["Mailto"] = str(mailto)
    return headers


class CrossrefSearchClient:
    """
    Bibliographic search against the Crossref REST API.

    One attempt per query; transport errors, timeouts, HTTP errors and
    malformed payloads all come back as an empty result list.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        headers: Optional[Mapping[str, str]] = None,
        mailto: Optional[str] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self.mailto = mailto or self.headers.get("Mailto")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def _build_params(self, query: str, rows: int) -> Dict[str, str]:
        params = {
            "query.bibliographic": query,
            "rows": str(rows),
        }
        if self.mailto:
            params["mailto"] = self.mailto
        return params

    def search(self, query: str, rows: int, headers: Optional[Mapping[str, str]] = None) -> List[Dict[str, Any]]:
        if not query:
            return []
        url = f"{self.base_url}/works"
        request_headers = dict(self.headers)
        request_headers.update(headers or {})
        try:
            r = self.session.get(
                url,
                params=self._build_params(query, rows),
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            _warn("Search request failed", url=url, query_excerpt=query[:200], error=str(e))
            return []

        if r.status_code != 200:
            _warn("Search HTTP error", status=r.status_code, url=r.url, body=r.text[:600])
            return []
        try:
            payload = r.json()
        except ValueError:
            _warn("Search response is not JSON", url=r.url)
            return []
        return _items_from_payload(payload)

    def close(self) -> None:
        self.session.close()


def _items_from_payload(payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    message = payload.get("message")
    if not isinstance(message, dict):
        return []
    items = message.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]
