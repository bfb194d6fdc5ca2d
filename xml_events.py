"""Pull-based XML event stream over lxml's incremental parser.

lxml delivers parse events by calling methods on a parser *target* while
``feed()`` runs. ``EventReader`` queues those callbacks and hands them out one
at a time, so decoders can walk the document as a single shared cursor.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator

from lxml import etree

from errors import MalformedMarkupError

LOGGER = logging.getLogger(__name__)

_DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class StartElement:
    name: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class EndElement:
    name: str


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class Comment:
    text: str


@dataclass(frozen=True, slots=True)
class ProcessingInstruction:
    target: str
    data: str | None = None


@dataclass(frozen=True, slots=True)
class EndOfStream:
    pass


END_OF_STREAM = EndOfStream()

Event = StartElement | EndElement | Text | Comment | ProcessingInstruction | EndOfStream


def local_name(qname: str) -> str:
    """Drop the namespace from ``{uri}local`` or ``prefix:local``."""
    if qname.startswith("{"):
        qname = qname.rpartition("}")[2]
    return qname.rpartition(":")[2]


class _EventCollector:
    """lxml parser target that records callbacks as events."""

    def __init__(self) -> None:
        self.events: deque[Event] = deque()
        self.depth = 0
        self.root_closed = False

    def start(self, tag: str, attrib: dict[str, str]) -> None:
        self.depth += 1
        attributes = {local_name(key): value for key, value in attrib.items()}
        self.events.append(StartElement(local_name(tag), attributes))

    def end(self, tag: str) -> None:
        self.depth -= 1
        if self.depth == 0:
            self.root_closed = True
        self.events.append(EndElement(local_name(tag)))

    def data(self, data: str) -> None:
        self.events.append(Text(data))

    def comment(self, text: str) -> None:
        self.events.append(Comment(text))

    def pi(self, target: str, data: str | None = None) -> None:
        self.events.append(ProcessingInstruction(target, data))

    def close(self) -> None:
        return None


def _slices(data: bytes, size: int) -> Iterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start:start + size]


def _read_chunks(stream: BinaryIO, size: int) -> Iterator[bytes]:
    while True:
        chunk = stream.read(size)
        if not chunk:
            return
        yield chunk


class EventReader:
    """Sequential cursor over the parse events of one XML document.

    Input ending between tags or inside text while elements are still open
    yields ``END_OF_STREAM``. Input ending inside a tag, comment or other
    markup, or any other syntax error reported by lxml, raises
    ``MalformedMarkupError`` once every event tokenized before it has been
    handed out.

    lxml discards events it still buffers when closing an unfinished
    document, so the last few events before a truncation point may never be
    delivered; callers see the end of stream slightly earlier than the cut.
    """

    def __init__(self, source: bytes | str | BinaryIO, chunk_size: int | None = None) -> None:
        if chunk_size is None:
            chunk_size = int(os.getenv("ATOM_READ_CHUNK_SIZE", _DEFAULT_CHUNK_SIZE))
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        if isinstance(source, str):
            source = source.encode("utf-8")
        if isinstance(source, bytes):
            self._chunks: Iterator[bytes] = _slices(source, chunk_size)
        else:
            self._chunks = _read_chunks(source, chunk_size)

        self._target = _EventCollector()
        self._parser = etree.XMLParser(
            target=self._target,
            resolve_entities=False,
            no_network=True,
            huge_tree=False,
        )
        self._finished = False
        # True while the input fed so far stops inside "<...".
        self._inside_markup = False
        self._syntax_error: etree.XMLSyntaxError | None = None

    def next_event(self) -> Event:
        """Return the next event, advancing the cursor."""
        pending = self._target.events
        while not pending:
            if self._syntax_error is not None:
                raise MalformedMarkupError(str(self._syntax_error)) from self._syntax_error
            if self._finished:
                return END_OF_STREAM
            self._pull()
        return pending.popleft()

    def _pull(self) -> None:
        chunk = next(self._chunks, None)
        if chunk is None:
            self._finished = True
            self._close()
            return

        self._track_markup(chunk)
        try:
            self._parser.feed(chunk)
        except etree.XMLSyntaxError as exc:
            LOGGER.debug("XML tokenizer rejected input: %s", exc)
            self._finished = True
            self._syntax_error = exc

    def _close(self) -> None:
        try:
            self._parser.close()
        except etree.XMLSyntaxError as exc:
            # Input that stops while an element is open (or before the root)
            # is reported by lxml as a premature end; that is END_OF_STREAM
            # unless it stops in the middle of a tag.
            if not self._target.root_closed and not self._inside_markup:
                LOGGER.debug("XML input ended early: %s", exc)
                return
            LOGGER.debug("XML tokenizer rejected input: %s", exc)
            self._syntax_error = exc

    def _track_markup(self, chunk: bytes | str) -> None:
        open_at = chunk.rfind("<" if isinstance(chunk, str) else b"<")
        close_at = chunk.rfind(">" if isinstance(chunk, str) else b">")
        if open_at != close_at:
            self._inside_markup = open_at > close_at
