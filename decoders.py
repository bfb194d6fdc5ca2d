"""Recursive-descent decoders from XML events to the Atom entity graph.

Every ``decode_*`` function is called right after its element's start tag was
read (the tag is passed in for its name and attributes) and returns with the
reader positioned just past the matching end tag. Failures are never caught
here: a truncated or malformed document fails the whole decode.

Composite elements are decoded through a dispatch table mapping a child's
local name to ``(field, handler, action)``. Children missing from the table
are skipped with their whole subtree.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum, auto
from typing import Any, Callable

from errors import DecodeError, EofError
from models import (
    Category,
    Content,
    Entry,
    Feed,
    Generator,
    Link,
    MarkupContent,
    Person,
    ReferenceContent,
    Source,
    TextContent,
)
from xml_events import EndElement, EndOfStream, EventReader, StartElement
from xml_util import extract_markup, extract_text, skip_element

LOGGER = logging.getLogger(__name__)


class _Action(Enum):
    # Single-valued field; a repeated element overwrites the earlier value.
    SET = auto()
    APPEND = auto()


Handler = Callable[[EventReader, StartElement], Any]
DispatchTable = dict[str, tuple[str, Handler, _Action]]


def _required_text(reader: EventReader, element: StartElement) -> str:
    return extract_text(reader) or ""


def _optional_text(reader: EventReader, element: StartElement) -> str | None:
    return extract_text(reader)


def _decode_children(reader: EventReader, element: StartElement, table: DispatchTable) -> dict[str, Any]:
    """Run the dispatch loop for ``element`` and return the collected fields."""
    values: dict[str, Any] = {}
    lists: defaultdict[str, list[Any]] = defaultdict(list)

    while True:
        event = reader.next_event()
        if isinstance(event, StartElement):
            rule = table.get(event.name)
            if rule is None:
                LOGGER.debug("Skipping unrecognized <%s> inside <%s>", event.name, element.name)
                skip_element(reader, event.name)
                continue

            field_name, handler, action = rule
            value = handler(reader, event)
            if action is _Action.APPEND:
                lists[field_name].append(value)
            else:
                values[field_name] = value
        elif isinstance(event, EndElement):
            break
        elif isinstance(event, EndOfStream):
            raise EofError(f"input ended inside <{element.name}>")

    values.update((name, tuple(items)) for name, items in lists.items())
    return values


def decode_person(reader: EventReader, element: StartElement) -> Person:
    return Person(**_decode_children(reader, element, _PERSON_TABLE))


def decode_category(reader: EventReader, element: StartElement) -> Category:
    attrs = element.attributes
    category = Category(
        term=attrs.get("term", ""),
        scheme=attrs.get("scheme"),
        label=attrs.get("label"),
    )
    skip_element(reader, element.name)
    return category


def decode_link(reader: EventReader, element: StartElement) -> Link:
    attrs = element.attributes
    link = Link(
        href=attrs.get("href", ""),
        rel=attrs.get("rel"),
        hreflang=attrs.get("hreflang"),
        mime_type=attrs.get("type"),
        title=attrs.get("title"),
        length=attrs.get("length"),
    )
    skip_element(reader, element.name)
    return link


def decode_generator(reader: EventReader, element: StartElement) -> Generator:
    attrs = element.attributes
    return Generator(
        value=extract_text(reader) or "",
        uri=attrs.get("uri"),
        version=attrs.get("version"),
    )


def decode_content(reader: EventReader, element: StartElement) -> Content:
    """Decode ``<content>`` into one of the three content shapes.

    The attributes decide whether a body is read at all: with ``src`` the
    element is a reference and its body (normally empty) is discarded.
    Only a missing ``type`` or ``type="text"`` gives ``TextContent``; every
    other type, ``text/plain`` included, gives ``MarkupContent`` so the
    declared media type is kept.
    """
    attrs = element.attributes
    media_type = attrs.get("type")
    src = attrs.get("src")

    if src is not None:
        skip_element(reader, element.name)
        return ReferenceContent(src=src, media_type=media_type)
    if media_type is None or media_type == "text":
        return TextContent(extract_text(reader) or "")
    if media_type == "xhtml":
        return MarkupContent(extract_markup(reader), media_type)
    return MarkupContent(extract_text(reader) or "", media_type)


def decode_source(reader: EventReader, element: StartElement) -> Source:
    return Source(**_decode_children(reader, element, _SOURCE_TABLE))


def decode_entry(reader: EventReader, element: StartElement) -> Entry:
    return Entry(**_decode_children(reader, element, _ENTRY_TABLE))


def decode_feed(reader: EventReader, element: StartElement) -> Feed:
    return Feed(**_decode_children(reader, element, _FEED_TABLE))


_PERSON_TABLE: DispatchTable = {
    "name": ("name", _required_text, _Action.SET),
    "uri": ("uri", _optional_text, _Action.SET),
    "email": ("email", _optional_text, _Action.SET),
}

# Shared by feed, source and entry.
_COMMON_LISTS: DispatchTable = {
    "author": ("authors", decode_person, _Action.APPEND),
    "category": ("categories", decode_category, _Action.APPEND),
    "contributor": ("contributors", decode_person, _Action.APPEND),
    "link": ("links", decode_link, _Action.APPEND),
}

_SOURCE_TABLE: DispatchTable = {
    **_COMMON_LISTS,
    "id": ("id", _optional_text, _Action.SET),
    "title": ("title", _optional_text, _Action.SET),
    "updated": ("updated", _optional_text, _Action.SET),
    "generator": ("generator", decode_generator, _Action.SET),
    "icon": ("icon", _optional_text, _Action.SET),
    "logo": ("logo", _optional_text, _Action.SET),
    "rights": ("rights", _optional_text, _Action.SET),
    "subtitle": ("subtitle", _optional_text, _Action.SET),
}

_ENTRY_TABLE: DispatchTable = {
    **_COMMON_LISTS,
    "id": ("id", _required_text, _Action.SET),
    "title": ("title", _required_text, _Action.SET),
    "updated": ("updated", _required_text, _Action.SET),
    "published": ("published", _optional_text, _Action.SET),
    "source": ("source", decode_source, _Action.SET),
    "summary": ("summary", _optional_text, _Action.SET),
    "rights": ("rights", _optional_text, _Action.SET),
    "content": ("content", decode_content, _Action.SET),
}

_FEED_TABLE: DispatchTable = {
    **_COMMON_LISTS,
    "id": ("id", _required_text, _Action.SET),
    "title": ("title", _required_text, _Action.SET),
    "updated": ("updated", _required_text, _Action.SET),
    "entry": ("entries", decode_entry, _Action.APPEND),
    "generator": ("generator", decode_generator, _Action.SET),
    "icon": ("icon", _optional_text, _Action.SET),
    "logo": ("logo", _optional_text, _Action.SET),
    "rights": ("rights", _optional_text, _Action.SET),
    "subtitle": ("subtitle", _optional_text, _Action.SET),
}

_ROOT_DECODERS: dict[str, Callable[[EventReader, StartElement], Feed | Entry]] = {
    "feed": decode_feed,
    "entry": decode_entry,
}


def decode_document(reader: EventReader) -> Feed | Entry:
    """Decode the root element of a document, either ``<feed>`` or ``<entry>``."""
    while True:
        event = reader.next_event()
        if isinstance(event, StartElement):
            decoder = _ROOT_DECODERS.get(event.name)
            if decoder is None:
                raise DecodeError(f"unsupported root element <{event.name}>")
            return decoder(reader, event)
        if isinstance(event, EndOfStream):
            raise EofError("input contains no root element")
