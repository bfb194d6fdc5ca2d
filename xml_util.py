"""Text extraction and subtree skipping over an ``EventReader``.

All helpers are called immediately after a start tag has been read and leave
the reader positioned just past that element's end tag.
"""

from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr

from errors import EofError
from xml_events import EndElement, EndOfStream, EventReader, StartElement, Text


def extract_text(reader: EventReader) -> str | None:
    """Concatenate the character data of the element just entered.

    Child elements are not expected in a text construct; they are skipped and
    contribute nothing. Empty text collapses to None.
    """
    parts: list[str] = []
    while True:
        event = reader.next_event()
        if isinstance(event, Text):
            parts.append(event.text)
        elif isinstance(event, StartElement):
            skip_element(reader, event.name)
        elif isinstance(event, EndElement):
            break
        elif isinstance(event, EndOfStream):
            raise EofError("input ended inside a text element")

    return "".join(parts) or None


def extract_markup(reader: EventReader) -> str:
    """Re-serialize the children of the element just entered as markup.

    Used for inline xhtml content, where the payload is nested elements rather
    than escaped text. Names are written without namespace prefixes.
    """
    parts: list[str] = []
    depth = 0
    while True:
        event = reader.next_event()
        if isinstance(event, Text):
            parts.append(escape(event.text))
        elif isinstance(event, StartElement):
            depth += 1
            attrs = "".join(f" {key}={quoteattr(value)}" for key, value in event.attributes.items())
            parts.append(f"<{event.name}{attrs}>")
        elif isinstance(event, EndElement):
            if depth == 0:
                break
            depth -= 1
            parts.append(f"</{event.name}>")
        elif isinstance(event, EndOfStream):
            raise EofError("input ended inside inline markup")

    return "".join(parts)


def skip_element(reader: EventReader, name: str) -> None:
    """Discard everything up to and including the end tag of ``name``.

    Nested elements with the same name are counted so the skip does not stop
    at an inner end tag.
    """
    depth = 1
    while depth:
        event = reader.next_event()
        if isinstance(event, StartElement) and event.name == name:
            depth += 1
        elif isinstance(event, EndElement) and event.name == name:
            depth -= 1
        elif isinstance(event, EndOfStream):
            raise EofError(f"input ended inside <{name}>")
