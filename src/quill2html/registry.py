"""Keyword to formatter resolution.

Every op is resolved twice over: once for its type (``text``, ``image``, ...)
and once for each of its attributes. A host may pass a *custom formats*
callable that is consulted first for every keyword; whatever it returns wins
over the built-in table.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from quill2html.formats import (
    AlignFormat,
    BlockQuoteFormat,
    BoldFormat,
    ColorFormat,
    Formatter,
    HeaderFormat,
    ImageFormat,
    ItalicFormat,
    LinkFormat,
    ListFormat,
    TextFormat,
    UnderlineFormat,
    indent_depth,
)
from quill2html.options import RenderOptions
from quill2html.parser import Op

logger = logging.getLogger(__name__)

CustomFormats = Callable[[str, Op], Optional[Formatter]]


class Keyword(str, Enum):
    """The op types and attribute names with a built-in formatter."""

    TEXT = "text"
    IMAGE = "image"
    HEADER = "header"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    ALIGN = "align"
    LINK = "link"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    COLOR = "color"


_BUILTINS: dict[Keyword, Callable[[Op, RenderOptions], Formatter]] = {
    Keyword.TEXT: lambda op, opts: TextFormat(),
    Keyword.IMAGE: lambda op, opts: ImageFormat(src=op.data),
    Keyword.HEADER: lambda op, opts: HeaderFormat(level=op.attrs.get("header", "")),
    Keyword.LIST: lambda op, opts: ListFormat(
        list_type="ul" if op.attrs.get("list") == "bullet" else "ol",
        indent=indent_depth(op),
    ),
    Keyword.BLOCKQUOTE: lambda op, opts: BlockQuoteFormat(),
    Keyword.ALIGN: lambda op, opts: AlignFormat(
        val=op.attrs.get("align", ""), prefix=opts.align_class_prefix,
    ),
    Keyword.LINK: lambda op, opts: LinkFormat(
        href=op.attrs.get("link", ""), target=opts.link_target,
    ),
    Keyword.BOLD: lambda op, opts: BoldFormat(),
    Keyword.ITALIC: lambda op, opts: ItalicFormat(),
    Keyword.UNDERLINE: lambda op, opts: UnderlineFormat(),
    Keyword.COLOR: lambda op, opts: ColorFormat(color=op.attrs.get("color", "")),
}

# Attributes are resolved in this order; formats resolved earlier are opened
# first and so nest outside later ones. Other names follow alphabetically.
NESTING_ORDER: tuple[str, ...] = (
    "blockquote",
    "header",
    "list",
    "align",
    "link",
    "color",
    "underline",
    "italic",
    "bold",
)
_RANK = {name: i for i, name in enumerate(NESTING_ORDER)}


def ordered_attributes(attrs: Iterable[str]) -> list[str]:
    """Return attribute names in canonical resolution order."""
    return sorted(attrs, key=lambda name: (_RANK.get(name, len(_RANK)), name))


class FormatRegistry:
    """Resolve keywords to formatters.

    The built-in table is read-only, so one registry can serve any number of
    renders.
    """

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options: RenderOptions = options or RenderOptions()

    def resolve(
        self,
        keyword: str,
        op: Op,
        custom: Optional[CustomFormats] = None,
    ) -> Optional[Formatter]:
        """Return the formatter for *keyword* on *op*, or ``None`` if there is none."""
        if custom is not None:
            fm = custom(keyword, op)
            if fm is not None:
                return fm
        try:
            builtin = _BUILTINS[Keyword(keyword)]
        except ValueError:
            return None
        return builtin(op, self.options)

    def formatters_for(
        self,
        op: Op,
        custom: Optional[CustomFormats] = None,
    ) -> Optional[list[Formatter]]:
        """Return the formatters for *op*'s type followed by those of its attributes.

        Returns ``None`` when the op type itself cannot be resolved.
        Attributes without a formatter are skipped.
        """
        base = self.resolve(op.type, op, custom)
        if base is None:
            return None

        fms: list[Formatter] = [base]
        for attr in ordered_attributes(op.attrs):
            fm = self.resolve(attr, op, custom)
            if fm is None:
                logger.debug("Ignoring attribute %r with no formatter", attr)
                continue
            fms.append(fm)
        return fms
