"""CLI entrypoint: decode Atom feeds from files or URLs and print them."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any

import requests
from dotenv import load_dotenv

from atom_feed import fetch_feed, read_document
from errors import DecodeError
from models import Entry, Feed, MarkupContent, ReferenceContent, TextContent

_CONTENT_KINDS = {
    TextContent: "text",
    MarkupContent: "markup",
    ReferenceContent: "reference",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Decode Atom feeds and entries")
    parser.add_argument("sources", nargs="+", help="Feed file paths or http(s) URLs")
    parser.add_argument("--json", action="store_true", help="Print the decoded entity graph as JSON")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of entries to print per feed")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_source(source: str) -> Feed | Entry:
    """Decode a URL (feeds only) or a local file (feed or standalone entry)."""
    if source.startswith(("http://", "https://")):
        return fetch_feed(source)
    return read_document(source)


def to_jsonable(value: Any) -> Any:
    """Convert an entity graph to plain JSON types, tagging content variants."""
    if dataclasses.is_dataclass(value):
        data = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        kind = _CONTENT_KINDS.get(type(value))
        if kind is not None:
            data = {"kind": kind, **data}
        return data
    if isinstance(value, tuple):
        return [to_jsonable(item) for item in value]
    return value


def format_entry(entry: Entry) -> str:
    alternate = next((link.href for link in entry.links if link.relation == "alternate"), "")
    return f"{entry.updated}  {entry.title}  {alternate}".rstrip()


def render(document: Feed | Entry, as_json: bool, limit: int | None) -> str:
    if isinstance(document, Entry):
        entries: tuple[Entry, ...] = (document,)
    else:
        entries = document.entries[:limit] if limit is not None else document.entries

    if as_json:
        payload = to_jsonable(document)
        if isinstance(document, Feed):
            payload["entries"] = [to_jsonable(entry) for entry in entries]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    lines = [format_entry(entry) for entry in entries]
    if isinstance(document, Feed):
        lines.insert(0, f"# {document.title} ({len(document.entries)} entries)")
    return "\n".join(lines)


def run(sources: list[str], as_json: bool, limit: int | None) -> int:
    """Decode and print every source; return the number of failures."""
    failed = 0
    for source in sources:
        try:
            document = load_source(source)
        except (requests.RequestException, DecodeError, OSError) as exc:
            failed += 1
            logging.error("Failed to decode %s: %s", source, exc)
            continue

        print(render(document, as_json=as_json, limit=limit))

    logging.info("Run complete. sources=%s failed=%s", len(sources), failed)
    return failed


def main(argv: list[str] | None = None) -> None:
    """Initialize config and decode the requested sources."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if run(args.sources, as_json=args.json, limit=args.limit):
        sys.exit(1)


if __name__ == "__main__":
    main()
