from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from atom_feed import fetch_feed, fetch_feeds, parse_entry, parse_feed, read_document, read_feed
from errors import DecodeError, EofError
from models import Entry, Feed

FEED_XML = (
    b'<?xml version="1.0" encoding="utf-8"?>'
    b'<feed xmlns="http://www.w3.org/2005/Atom">'
    b"<title>Example</title><id>urn:feed</id><updated>2024-01-01T00:00:00Z</updated>"
    b"<entry><title>One</title><id>urn:1</id><updated>2024-01-01T00:00:00Z</updated></entry>"
    b"<entry><title>Two</title><id>urn:2</id><updated>2024-01-02T00:00:00Z</updated></entry>"
    b"</feed>"
)

ENTRY_XML = b'<entry xmlns="http://www.w3.org/2005/Atom"><title>Alone</title><id>urn:a</id></entry>'


def _mock_resp(content: bytes) -> MagicMock:
    """Return a mock requests.Response carrying the given body."""
    mock = MagicMock()
    mock.content = content
    return mock


def test_parse_feed_smoke() -> None:
    feed = parse_feed(FEED_XML)

    assert feed.title == "Example"
    assert [entry.id for entry in feed.entries] == ["urn:1", "urn:2"]


def test_parse_feed_rejects_standalone_entry() -> None:
    with pytest.raises(DecodeError, match="expected a <feed>"):
        parse_feed(ENTRY_XML)


def test_parse_entry() -> None:
    assert parse_entry(ENTRY_XML) == Entry(title="Alone", id="urn:a")


def test_parse_entry_rejects_feed() -> None:
    with pytest.raises(DecodeError, match="standalone <entry>"):
        parse_entry(FEED_XML)


def test_read_feed_from_file(tmp_path: Path) -> None:
    path = tmp_path / "feed.xml"
    path.write_bytes(FEED_XML)

    feed = read_feed(path)

    assert isinstance(feed, Feed)
    assert len(feed.entries) == 2


def test_read_document_standalone_entry(tmp_path: Path) -> None:
    path = tmp_path / "entry.xml"
    path.write_bytes(ENTRY_XML)

    assert read_document(path) == Entry(title="Alone", id="urn:a")


def test_read_feed_truncated_file(tmp_path: Path) -> None:
    path = tmp_path / "feed.xml"
    path.write_bytes(FEED_XML[:-len(b"</feed>")])

    with pytest.raises(EofError):
        read_feed(path)


def test_fetch_feed_uses_timeout_and_user_agent() -> None:
    with patch.dict("os.environ", {"ATOM_REQUEST_TIMEOUT": "5", "ATOM_USER_AGENT": "tests/1.0"}), \
         patch("atom_feed.requests.get", return_value=_mock_resp(FEED_XML)) as mock_get:
        feed = fetch_feed("https://example.com/feed.xml")

    assert feed.id == "urn:feed"
    mock_get.assert_called_once_with(
        "https://example.com/feed.xml",
        headers={"User-Agent": "tests/1.0"},
        timeout=5.0,
    )


def test_fetch_feed_explicit_timeout_wins() -> None:
    with patch("atom_feed.requests.get", return_value=_mock_resp(FEED_XML)) as mock_get:
        fetch_feed("https://example.com/feed.xml", timeout=1.5)

    assert mock_get.call_args.kwargs["timeout"] == 1.5


def test_fetch_feed_http_error_propagates() -> None:
    response = _mock_resp(b"")
    response.raise_for_status.side_effect = requests.HTTPError("404")

    with patch("atom_feed.requests.get", return_value=response), \
         pytest.raises(requests.HTTPError):
        fetch_feed("https://example.com/missing.xml")


def test_fetch_feeds_continues_on_per_url_error() -> None:
    """Request and decode failures are logged as warnings and do not abort the run."""
    with patch("atom_feed.requests.get",
               side_effect=[
                   requests.RequestException("timeout"),
                   _mock_resp(b"<feed><title>cut"),
                   _mock_resp(FEED_XML),
               ]):
        feeds = fetch_feeds(["https://a.example/", "https://b.example/", "https://c.example/"])

    assert len(feeds) == 1
    assert feeds[0].title == "Example"
