"""Format descriptors and the built-in formatters.

A *formatter* turns one Delta keyword (an op type such as ``text`` or
``image``, or an attribute name such as ``bold``) into a :class:`Format`:
the string to write and where it goes (a tag, a CSS class or a style
declaration), and whether it applies to the whole block or inline.

Formatters may have two extra capabilities, checked with ``isinstance``
against the runtime-checkable protocols below:

* :class:`FormatWriter` writes the entire body of an op itself (embeds).
* :class:`FormatWrapper` wraps blocks in container markup (``<ul>`` around
  list items).

Formatters hold no state across ops; the renderer's tag stack does.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import IO, TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

from mistune.util import escape

if TYPE_CHECKING:
    from quill2html.parser import Op


# ---------------------------------------------------------------------------
# Format descriptors
# ---------------------------------------------------------------------------

class FormatPlace(Enum):
    TAG = "tag"
    CLASS = "class"
    STYLE = "style"


@dataclass(frozen=True)
class Format:
    """What a formatter writes, and where.

    For ``TAG`` formats ``val`` is the content of the opening tag, which may
    carry attributes (``a href="..."``); the closing tag uses its first word.
    """

    val: str
    place: FormatPlace = FormatPlace.TAG
    block: bool = False
    keyword: str = ""

    @property
    def tag_name(self) -> str:
        if self.place is FormatPlace.TAG:
            return self.val.split(" ", 1)[0]
        return "span"

    def open_tag(self) -> str:
        if self.place is FormatPlace.CLASS:
            return f'<span class="{self.val}">'
        if self.place is FormatPlace.STYLE:
            return f'<span style="{self.val}">'
        return f"<{self.val}>"

    def close_tag(self) -> str:
        return f"</{self.tag_name}>"


@dataclass(frozen=True)
class OpenFormat:
    """An entry of the tag stack: a written format and the formatter it came from."""

    format: Format
    formatter: Formatter


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

@runtime_checkable
class Formatter(Protocol):
    def fmt(self) -> Optional[Format]:
        """Give the format to write, or ``None`` if the formatter only writes a body."""
        ...

    def has_format(self, op: Op) -> bool:
        """Say if *op* carries the format that :meth:`fmt` returns."""
        ...


@runtime_checkable
class FormatWriter(Protocol):
    def fmt(self) -> Optional[Format]:
        ...

    def has_format(self, op: Op) -> bool:
        ...

    def write(self, buf: IO[str]) -> None:
        """Write the entire body of the op."""
        ...


@runtime_checkable
class FormatWrapper(Protocol):
    def fmt(self) -> Optional[Format]:
        ...

    def has_format(self, op: Op) -> bool:
        ...

    def pre_wrap(self, open: Sequence[OpenFormat]) -> str:
        """Given the open wrappers, give the markup to write before the block.

        A non-empty result means a new container is opened; the renderer then
        pushes this formatter on the open wrappers.
        """
        ...

    def post_wrap(self, open: Sequence[OpenFormat], op: Optional[Op]) -> str:
        """Give the markup that closes this container ahead of *op*.

        *op* is the op terminating the next block, or ``None`` at the end of
        the document. An empty result keeps the container open.
        """
        ...


# ---------------------------------------------------------------------------
# Block formats
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextFormat:
    def fmt(self) -> Format:
        return Format("p", FormatPlace.TAG, block=True, keyword="text")

    def has_format(self, op: Op) -> bool:
        # Plain text may be wrapped by whatever block formats its newline has.
        return False


@dataclass(frozen=True)
class HeaderFormat:
    level: str

    def fmt(self) -> Format:
        return Format(f"h{self.depth}", FormatPlace.TAG, block=True, keyword="header")

    def has_format(self, op: Op) -> bool:
        return op.attrs.get("header") == self.level

    @property
    def depth(self) -> int:
        try:
            return max(1, min(6, int(self.level)))
        except ValueError:
            return 1


@dataclass(frozen=True)
class BlockQuoteFormat:
    def fmt(self) -> Format:
        return Format("blockquote", FormatPlace.TAG, block=True, keyword="blockquote")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("blockquote")


@dataclass(frozen=True)
class AlignFormat:
    val: str
    prefix: str = "align-"

    def fmt(self) -> Format:
        return Format(escape(self.prefix + self.val), FormatPlace.CLASS, block=True, keyword="align")

    def has_format(self, op: Op) -> bool:
        return op.attrs.get("align") == self.val


MAX_INDENT = 8


def indent_depth(op: Op) -> int:
    """Nesting depth of a list item, from its ``indent`` attribute."""
    try:
        return max(0, min(MAX_INDENT, int(op.attrs.get("indent", "0"))))
    except ValueError:
        return 0


@dataclass(frozen=True)
class ListFormat:
    """A list item, wrapped in a ``<ul>`` or ``<ol>`` container.

    Containers stay open across consecutive items. A deeper ``indent`` opens
    a nested container inside the current one; coming back to a shallower
    indent closes the deeper containers.
    """

    list_type: str  # "ul" or "ol"
    indent: int = 0

    def fmt(self) -> Format:
        return Format("li", FormatPlace.TAG, block=True, keyword="list")

    def has_format(self, op: Op) -> bool:
        return _list_tag(op) == self.list_type and indent_depth(op) == self.indent

    def pre_wrap(self, open: Sequence[OpenFormat]) -> str:
        if open and open[-1].formatter == self:
            return ""
        return f"<{self.list_type}>"

    def post_wrap(self, open: Sequence[OpenFormat], op: Optional[Op]) -> str:
        if op is not None and _list_tag(op):
            depth = indent_depth(op)
            if depth > self.indent:
                return ""
            if depth == self.indent and _list_tag(op) == self.list_type:
                return ""
        return f"</{self.list_type}>"


def _list_tag(op: Op) -> str:
    value = op.attrs.get("list", "")
    if not value:
        return ""
    return "ul" if value == "bullet" else "ol"


# ---------------------------------------------------------------------------
# Embeds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageFormat:
    src: str

    def fmt(self) -> None:
        # The body written by write() is the entire element.
        return None

    def has_format(self, op: Op) -> bool:
        return False

    def write(self, buf: IO[str]) -> None:
        buf.write(f'<img src="{escape(self.src)}">')


# ---------------------------------------------------------------------------
# Inline formats
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinkFormat:
    href: str
    target: str = "_blank"

    def fmt(self) -> Format:
        val = f'a href="{escape(self.href)}"'
        if self.target:
            val += f' target="{escape(self.target)}"'
        return Format(val, FormatPlace.TAG, keyword="link")

    def has_format(self, op: Op) -> bool:
        return op.attrs.get("link") == self.href


@dataclass(frozen=True)
class BoldFormat:
    def fmt(self) -> Format:
        return Format("strong", FormatPlace.TAG, keyword="bold")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("bold")


@dataclass(frozen=True)
class ItalicFormat:
    def fmt(self) -> Format:
        return Format("em", FormatPlace.TAG, keyword="italic")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("italic")


@dataclass(frozen=True)
class UnderlineFormat:
    def fmt(self) -> Format:
        return Format("u", FormatPlace.TAG, keyword="underline")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("underline")


@dataclass(frozen=True)
class ColorFormat:
    color: str

    def fmt(self) -> Format:
        return Format(f"color:{escape(self.color)};", FormatPlace.STYLE, keyword="color")

    def has_format(self, op: Op) -> bool:
        return op.attrs.get("color") == self.color
