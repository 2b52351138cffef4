"""Command line entry point: match a batch of references and print JSON results."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import MatchConfigError
from .inputs import INPUT_TYPES, parse_references, read_input
from .journals import journals_path, load_journal_abbreviations
from .logging_setup import get_logger, set_level
from .matcher import ReferenceMatcher
from .models import MatchRequest
from .runtime_config import RUNTIME_CONFIG, load_runtime_config
from .search_client import CrossrefSearchClient, load_api_headers

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description=(
            "Resolve bibliographic references (citation strings or structured JSON objects) "
            "to DOIs using Crossref search and candidate validation."
        )
    )
    ap.add_argument("--input-type", "-it", required=True, choices=INPUT_TYPES,
                    help="'string': --input is the data itself; 'file': --input is a path to read")
    ap.add_argument("--input", "-i", required=True,
                    help="A JSON array of references, or delimited reference strings / JSON objects")
    ap.add_argument("--delimiter", "-d", default=None, help="Delimiter for non-JSON input (default: newline)")
    ap.add_argument("--cand-min", "-ct", type=float, default=None, help="Candidate selection normalized threshold")
    ap.add_argument("--unstr-min", "-ut", type=float, default=None, help="Unstructured validation threshold")
    ap.add_argument("--str-min", "-st", type=float, default=None, help="Structured validation threshold")
    ap.add_argument("--unstr-rows", "-ur", type=int, default=None,
                    help="Number of candidates to consider for an unstructured match")
    ap.add_argument("--str-rows", "-sr", type=int, default=None,
                    help="Number of candidates to consider for a structured match")
    ap.add_argument("--workers", "-w", type=int, default=None, help="Number of parallel workers")
    ap.add_argument("--api-url", default=None, help="Crossref API base URL")
    ap.add_argument("--key-file", "-ak", default=None, help="JSON file with Authorization/Mailto headers")
    ap.add_argument("--mailto", "-m", default=None, help="Mailto for polite API calls")
    ap.add_argument("--timeout", type=float, default=None, help="Read timeout in seconds for search calls")
    ap.add_argument("--journals", default=None, help="Journal abbreviation table (TSV)")
    ap.add_argument("--config", type=Path, default=None, help="Runtime config TOML")
    ap.add_argument("--output", "-o", type=Path, default=None, help="Write JSON results here instead of stdout")
    ap.add_argument("--debug", action="store_true")
    return ap


def _pick(value, default):
    return default if value is None else value


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = _build_parser()
    args = ap.parse_args(argv)
    if args.debug:
        set_level("DEBUG")

    cfg = load_runtime_config(args.config) if args.config else RUNTIME_CONFIG
    m = cfg.matching

    try:
        data = read_input(args.input_type, args.input)
        references = parse_references(data, _pick(args.delimiter, m.delimiter))
        headers = load_api_headers(_pick(args.key_file, cfg.api.key_file))
        if args.mailto:
            headers["Mailto"] = args.mailto
        request = MatchRequest(
            references,
            candidate_min_score=_pick(args.cand_min, m.candidate_min_score),
            unstructured_min_score=_pick(args.unstr_min, m.unstructured_min_score),
            structured_min_score=_pick(args.str_min, m.structured_min_score),
            unstructured_rows=_pick(args.unstr_rows, m.unstructured_rows),
            structured_rows=_pick(args.str_rows, m.structured_rows),
            workers=_pick(args.workers, m.workers),
        )
    except MatchConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    client = CrossrefSearchClient(
        _pick(args.api_url, cfg.api.base_url),
        headers=headers,
        mailto=_pick(args.mailto, cfg.api.mailto),
        timeout=(cfg.api.connect_timeout, _pick(args.timeout, cfg.api.read_timeout)),
        user_agent=cfg.api.user_agent,
    )
    journals = load_journal_abbreviations(args.journals or journals_path(cfg.journals.path))
    try:
        response = ReferenceMatcher(client, journals).match(request)
    finally:
        client.close()

    payload = json.dumps(response.to_json(), indent=2, ensure_ascii=False)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {len(response.links)} results to {args.output}", file=sys.stderr, flush=True)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
