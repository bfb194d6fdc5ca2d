"""Typed entity graph produced by the Atom decoder."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Person:
    """An author or contributor of a feed, entry or source."""

    name: str = ""
    uri: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class Category:
    term: str = ""
    scheme: str | None = None
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Link:
    """A reference from a feed or entry to a Web resource.

    ``length`` is kept as the raw attribute string; no arithmetic is done on it.
    """

    href: str = ""
    rel: str | None = None
    hreflang: str | None = None
    mime_type: str | None = None
    title: str | None = None
    length: str | None = None

    @property
    def relation(self) -> str:
        """Link relation, falling back to the Atom default when rel is absent."""
        return self.rel or "alternate"


@dataclass(frozen=True, slots=True)
class Generator:
    """The agent used to generate a feed."""

    value: str = ""
    uri: str | None = None
    version: str | None = None


@dataclass(frozen=True, slots=True)
class TextContent:
    """Inline plain-text content."""

    value: str = ""


@dataclass(frozen=True, slots=True)
class MarkupContent:
    """Inline content of a non-plain media type (escaped html, xhtml, ...)."""

    value: str = ""
    media_type: str = "html"


@dataclass(frozen=True, slots=True)
class ReferenceContent:
    """Out-of-line content, linked through the ``src`` attribute."""

    src: str = ""
    media_type: str | None = None


Content = TextContent | MarkupContent | ReferenceContent


@dataclass(frozen=True, slots=True)
class Source:
    """Metadata of the feed an entry was copied from."""

    id: str | None = None
    title: str | None = None
    updated: str | None = None
    authors: tuple[Person, ...] = ()
    categories: tuple[Category, ...] = ()
    contributors: tuple[Person, ...] = ()
    links: tuple[Link, ...] = ()
    generator: Generator | None = None
    icon: str | None = None
    logo: str | None = None
    rights: str | None = None
    subtitle: str | None = None


@dataclass(frozen=True, slots=True)
class Entry:
    """A single Atom entry."""

    title: str = ""
    id: str = ""
    updated: str = ""
    authors: tuple[Person, ...] = ()
    categories: tuple[Category, ...] = ()
    contributors: tuple[Person, ...] = ()
    links: tuple[Link, ...] = ()
    published: str | None = None
    source: Source | None = None
    summary: str | None = None
    rights: str | None = None
    content: Content | None = None


@dataclass(frozen=True, slots=True)
class Feed:
    """An Atom feed document and its entries."""

    title: str = ""
    id: str = ""
    updated: str = ""
    authors: tuple[Person, ...] = ()
    categories: tuple[Category, ...] = ()
    contributors: tuple[Person, ...] = ()
    links: tuple[Link, ...] = ()
    entries: tuple[Entry, ...] = ()
    generator: Generator | None = None
    icon: str | None = None
    logo: str | None = None
    rights: str | None = None
    subtitle: str | None = None
