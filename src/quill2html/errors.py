"""quill2html exception hierarchy.

Kept dependency-free: it is imported by the parser, the renderer, the CLI and
the tests alike.
"""

from __future__ import annotations

from typing import Optional


class Quill2HtmlError(Exception):
    """Base exception for all quill2html errors."""


class DecodeError(Quill2HtmlError, ValueError):
    """Raised when the input is not a well-formed Delta array of inserts.

    Decoding happens before any rendering, so there is never partial output.
    """

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        if index is not None:
            message = f"op {index}: {message}"
        super().__init__(message)
        self.index = index


class RenderError(Quill2HtmlError):
    """Raised when rendering stops part way through the operations.

    ``html`` holds whatever was rendered before the failing operation and
    ``index`` is the position of that operation in the input array.
    """

    def __init__(self, message: str, *, index: int, html: bytes = b"") -> None:
        super().__init__(f"op {index}: {message}")
        self.index = index
        self.html = html


class MissingFormatterError(RenderError):
    """Raised when an operation's kind has neither a custom nor a built-in formatter."""

    def __init__(self, keyword: str, *, index: int, html: bytes = b"") -> None:
        super().__init__(
            f"no format defined for op type {keyword!r}", index=index, html=html,
        )
        self.keyword = keyword
