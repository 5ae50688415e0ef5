"""HTML renderer - converts Delta operations to HTML.

Ops are rendered one at a time. Inline content goes to a temporary buffer
while the formats of consecutive ops are diffed against a stack of open
tags, so that a format spanning several ops is opened and closed once.

Block elements are only known when the ``"\\n"`` ending the block is reached
(the newline op carries the block attributes), so the opening block tag is
written to the final buffer together with the temporary buffer at that
point::

    [{"insert": "Title"}, {"insert": "\\n", "attributes": {"header": 1}}]

renders ``<h1>Title</h1>``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import IO, Optional, Sequence, Union

from mistune.util import escape

from quill2html.errors import MissingFormatterError
from quill2html.formats import (
    Format,
    FormatPlace,
    Formatter,
    FormatWrapper,
    FormatWriter,
    OpenFormat,
    TextFormat,
)
from quill2html.options import RenderOptions
from quill2html.parser import DeltaParser, Op
from quill2html.registry import CustomFormats, FormatRegistry

logger = logging.getLogger(__name__)

# Written into otherwise empty blocks so that blank lines stay visible.
EMPTY_BLOCK_BODY = "<br>"


# ---------------------------------------------------------------------------
# Tag stack
# ---------------------------------------------------------------------------

class FormatState:
    """The inline formats currently open, outer to inner, and the open block wrappers."""

    def __init__(self) -> None:
        self.open: list[OpenFormat] = []
        self.wraps: list[OpenFormat] = []

    def has_set(self, fm: Format) -> bool:
        return any(entry.format == fm for entry in self.open)

    def close_previous(self, buf: IO[str], op: Op) -> None:
        """Close the open formats that *op* does not carry.

        Tags close in reverse order of opening, so everything above the first
        format no longer wanted is closed too; formats in that range which are
        still wanted get reopened by :meth:`open_formats`.
        """
        keep = 0
        for entry in self.open:
            if not entry.formatter.has_format(op):
                break
            keep += 1
        while len(self.open) > keep:
            self.pop(buf)

    def close_all(self, buf: IO[str]) -> None:
        while self.open:
            self.pop(buf)

    def open_formats(self, buf: IO[str], demanded: Sequence[OpenFormat]) -> None:
        """Open, in order, each demanded format that is not open yet."""
        for entry in demanded:
            if self.has_set(entry.format):
                continue
            buf.write(entry.format.open_tag())
            self.open.append(entry)

    def pop(self, buf: IO[str]) -> None:
        entry = self.open.pop()
        buf.write(entry.format.close_tag())


# ---------------------------------------------------------------------------
# Block wrapper
# ---------------------------------------------------------------------------

@dataclass
class BlockWrapper:
    """The single element wrapping a block, merged from all its block formats."""

    tag_name: str = ""
    classes: list[str] = field(default_factory=list)
    style: str = ""

    def add(self, fm: Format) -> None:
        if fm.place is FormatPlace.TAG:
            # A tag from an attribute (header, list, ...) overrides the op type's.
            if fm.val:
                self.tag_name = fm.val
        elif fm.place is FormatPlace.CLASS:
            self.classes.append(fm.val)
        elif fm.place is FormatPlace.STYLE:
            self.style += fm.val

    def open_tag(self) -> str:
        parts = [f"<{self.tag_name}"]
        if self.classes:
            parts.append(f' class="{" ".join(self.classes)}"')
        if self.style:
            parts.append(f' style="{self.style}"')
        parts.append(">")
        return "".join(parts)

    def close_tag(self) -> str:
        return f"</{self.tag_name.split(' ', 1)[0]}>"


# ---------------------------------------------------------------------------
# HtmlRenderer
# ---------------------------------------------------------------------------

@dataclass
class _Resolved:
    """The formatters of one op, split by what the renderer does with them."""

    block: list[tuple[Formatter, Format]] = field(default_factory=list)
    inline: list[OpenFormat] = field(default_factory=list)
    writer: Optional[FormatWriter] = None


class HtmlRenderer:
    """Render a list of :class:`~quill2html.parser.Op` to HTML bytes."""

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        registry: Optional[FormatRegistry] = None,
        custom_formats: Optional[CustomFormats] = None,
    ) -> None:
        self.options: RenderOptions = options or RenderOptions()
        self.registry: FormatRegistry = registry or FormatRegistry(self.options)
        self.custom_formats = custom_formats
        self._reset()

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, ops: Sequence[Op]) -> bytes:
        """Return the HTML for *ops*.

        Raises :class:`~quill2html.errors.MissingFormatterError` when an op
        type has no formatter; the error carries the HTML rendered so far.
        """
        self._reset()

        for index, op in enumerate(ops):
            fms = self.registry.formatters_for(op, self.custom_formats)
            if fms is None:
                raise MissingFormatterError(
                    op.type, index=index, html=self._final.getvalue().encode("utf-8"),
                )
            self._render_op(op, self._split(fms))

        self._finish()
        logger.debug("Rendered %d ops into %d blocks", len(ops), self._blocks)
        return self._final.getvalue().encode("utf-8")

    # ======================================================================
    # Driver
    # ======================================================================

    def _reset(self) -> None:
        self._final: io.StringIO = io.StringIO()  # the final output
        self._temp: io.StringIO = io.StringIO()   # inline content of the current block
        self._state: FormatState = FormatState()
        self._blocks: int = 0

    def _split(self, fms: list[Formatter]) -> _Resolved:
        resolved = _Resolved()
        for fm in fms:
            f = fm.fmt()
            if f is None:
                # Only writers have a use without a format.
                if resolved.writer is None and isinstance(fm, FormatWriter):
                    resolved.writer = fm
            elif f.block:
                resolved.block.append((fm, f))
            else:
                resolved.inline.append(OpenFormat(f, fm))
        return resolved

    def _render_op(self, op: Op, resolved: _Resolved) -> None:
        if resolved.writer is not None:
            self._write_inline(op, resolved.inline, writer=resolved.writer)
            return

        if not op.data:
            return

        if "\n" not in op.data:
            self._write_inline(op, resolved.inline, op.data)
            return

        # Each "\n" ends a block; text after the last one starts the next block.
        lines = op.data.split("\n")
        for i, line in enumerate(lines):
            segment = op.with_data(line)
            if line:
                self._write_inline(segment, resolved.inline, line)
            if i < len(lines) - 1:
                self._write_block(segment, resolved.block)

    def _finish(self) -> None:
        if self._temp.tell() or self._state.open:
            if self.options.flush_trailing:
                text = TextFormat()
                self._write_block(None, [(text, text.fmt())])
            else:
                logger.debug("Dropping content not terminated by a newline")
                self._state.close_all(self._temp)
        self._close_wraps(None)

    # ======================================================================
    # Inline content
    # ======================================================================

    def _write_inline(
        self,
        op: Op,
        inline: Sequence[OpenFormat],
        text: str = "",
        writer: Optional[FormatWriter] = None,
    ) -> None:
        self._state.close_previous(self._temp, op)
        self._state.open_formats(self._temp, inline)
        if writer is not None:
            writer.write(self._temp)
        else:
            self._temp.write(escape(text, quote=False))

    # ======================================================================
    # Blocks
    # ======================================================================

    def _write_block(
        self,
        op: Optional[Op],
        block: Sequence[tuple[Formatter, Format]],
    ) -> None:
        """Write the block ended by *op*, wrapping the accumulated inline content."""
        # Close the inline formats opened within the block.
        self._state.close_all(self._temp)
        self._close_wraps(op)

        body = self._temp.getvalue()
        self._temp = io.StringIO()

        if not block:
            self._final.write(body)
            self._blocks += 1
            return

        wrapper = BlockWrapper()
        for fm, f in block:
            wrapper.add(f)
            if isinstance(fm, FormatWrapper):
                prefix = fm.pre_wrap(self._state.wraps)
                if prefix:
                    self._final.write(prefix)
                    self._state.wraps.append(OpenFormat(f, fm))

        if not body and self._blocks:
            body = EMPTY_BLOCK_BODY

        if wrapper.tag_name:
            self._final.write(wrapper.open_tag())
        self._final.write(body)
        if wrapper.tag_name:
            self._final.write(wrapper.close_tag())
        self._blocks += 1

    def _close_wraps(self, op: Optional[Op]) -> None:
        """Close the open wrappers that *op* does not continue, innermost first."""
        wraps = self._state.wraps
        while wraps:
            fw = wraps[-1].formatter
            suffix = fw.post_wrap(wraps, op) if isinstance(fw, FormatWrapper) else ""
            if not suffix:
                break
            self._final.write(suffix)
            wraps.pop()


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def render(ops: Union[bytes, str]) -> bytes:
    """Render a Delta JSON array of inserts with the built-in formats."""
    return render_extended(ops, None)


def render_extended(
    ops: Union[bytes, str],
    custom_formats: Optional[CustomFormats],
    options: Optional[RenderOptions] = None,
) -> bytes:
    """Render a Delta JSON array of inserts, asking *custom_formats* first for every keyword.

    *custom_formats* receives each keyword (the op type, then each attribute
    name) with the op and returns a formatter, or ``None`` to use the
    built-in one.
    """
    parsed = DeltaParser().parse(ops)
    renderer = HtmlRenderer(options=options, custom_formats=custom_formats)
    return renderer.render(parsed)
