"""Failures raised while decoding an Atom document."""


class DecodeError(Exception):
    """Base class for every decode failure."""


class EofError(DecodeError):
    """The event stream ended before an open element's end tag was seen."""

    def __init__(self, message: str = "unexpected end of input") -> None:
        super().__init__(message)


class MalformedMarkupError(DecodeError):
    """The XML tokenizer reported that the input is not well-formed."""
