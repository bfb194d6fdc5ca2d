"""Atom feed ingestion helpers: decode from bytes, files and URLs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

import requests

from decoders import decode_document
from errors import DecodeError
from models import Entry, Feed
from xml_events import EventReader

_DEFAULT_REQUEST_TIMEOUT_SECONDS = 20
_DEFAULT_USER_AGENT = "atom-decode/0.1"


def parse_document(data: bytes | str) -> Feed | Entry:
    """Decode a complete Atom document whose root is ``<feed>`` or ``<entry>``."""
    return decode_document(EventReader(data))


def parse_feed(data: bytes | str) -> Feed:
    document = parse_document(data)
    if not isinstance(document, Feed):
        raise DecodeError("expected a <feed> document, got a standalone <entry>")
    return document


def parse_entry(data: bytes | str) -> Entry:
    document = parse_document(data)
    if not isinstance(document, Entry):
        raise DecodeError("expected a standalone <entry> document, got a <feed>")
    return document


def read_document(path: str | Path) -> Feed | Entry:
    """Decode a document stored on disk, streaming the file in chunks."""
    with Path(path).open("rb") as fh:
        return decode_document(EventReader(fh))


def read_feed(path: str | Path) -> Feed:
    document = read_document(path)
    if not isinstance(document, Feed):
        raise DecodeError(f"{path}: expected a <feed> document, got a standalone <entry>")

    logging.info("Atom read: path=%s entries=%s", path, len(document.entries))
    return document


def fetch_feed(url: str, timeout: float | None = None) -> Feed:
    """Download and decode a single Atom feed.

    Args:
        url: Feed URL.
        timeout: Request timeout in seconds. Reads ATOM_REQUEST_TIMEOUT env var
            if not supplied; defaults to 20.

    Raises:
        requests.RequestException: The HTTP request failed.
        DecodeError: The response body is not a decodable Atom feed.
    """
    if timeout is None:
        timeout = float(os.environ.get("ATOM_REQUEST_TIMEOUT", _DEFAULT_REQUEST_TIMEOUT_SECONDS))
    headers = {"User-Agent": os.environ.get("ATOM_USER_AGENT", _DEFAULT_USER_AGENT)}

    response = requests.get(url, headers=headers, timeout=timeout)
    response.raise_for_status()

    feed = parse_feed(response.content)
    logging.info(
        "Atom fetch: url=%s bytes=%s entries=%s",
        url,
        len(response.content),
        len(feed.entries),
    )
    return feed


def fetch_feeds(urls: Iterable[str]) -> list[Feed]:
    """Fetch several feeds, skipping any that fail to download or decode."""
    feeds: list[Feed] = []
    requested = 0
    for url in urls:
        requested += 1
        try:
            feeds.append(fetch_feed(url))
        except requests.RequestException as exc:
            logging.warning("Atom fetch: request failed for url=%s, skipping: %s", url, exc)
        except DecodeError as exc:
            logging.warning("Atom fetch: could not decode url=%s, skipping: %s", url, exc)

    logging.info("Atom fetch: requested=%s decoded=%s", requested, len(feeds))
    return feeds
