"""Tests for the HTML renderer: tag diffing, block assembly and the entry points."""

from __future__ import annotations

import io
import json
from dataclasses import dataclass
from pathlib import Path

import pytest

from quill2html import render, render_extended
from quill2html.errors import DecodeError, MissingFormatterError
from quill2html.formats import Format, FormatPlace, OpenFormat
from quill2html.options import RenderOptions
from quill2html.parser import Op
from quill2html.renderer import BlockWrapper, FormatState, HtmlRenderer

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def html_of(ops: list[dict], **kwargs) -> str:
    """Render Python-side ops and return the HTML as text."""
    if kwargs:
        return render_extended(json.dumps(ops), None, RenderOptions(**kwargs)).decode("utf-8")
    return render(json.dumps(ops)).decode("utf-8")


def text(s: str, **attrs) -> dict:
    op: dict = {"insert": s}
    if attrs:
        op["attributes"] = attrs
    return op


def nl(**attrs) -> dict:
    return text("\n", **attrs)


# ---------------------------------------------------------------------------
# Plain paragraphs
# ---------------------------------------------------------------------------

class TestSimple:
    @pytest.mark.parametrize(
        "ops, want",
        [
            ('[{"insert": "\\n"}]', "<p></p>"),
            ('[{"insert":"line1\\nline2\\n"}]', "<p>line1</p><p>line2</p>"),
            ('[{"insert": "line1\\n\\nline3\\n"}]', "<p>line1</p><p><br></p><p>line3</p>"),
        ],
    )
    def test_paragraphs(self, ops: str, want: str) -> None:
        assert render(ops.encode("utf-8")) == want.encode("utf-8")

    def test_returns_bytes(self) -> None:
        assert isinstance(render(b'[{"insert": "x\\n"}]'), bytes)

    def test_blank_line_after_text_is_br(self) -> None:
        assert html_of([text("a\n"), nl()]) == "<p>a</p><p><br></p>"

    def test_consecutive_blank_lines(self) -> None:
        assert html_of([nl(), nl(), nl()]) == "<p></p><p><br></p><p><br></p>"

    def test_multi_newline_payload(self) -> None:
        got = html_of([text("a\n\n\nb\n")])
        assert got == "<p>a</p><p><br></p><p><br></p><p>b</p>"

    def test_text_after_last_newline_starts_next_block(self) -> None:
        got = html_of([text("a\nb"), text("c\n")])
        assert got == "<p>a</p><p>bc</p>"

    def test_text_is_escaped(self) -> None:
        assert html_of([text('1 < 2 & "q"\n')]) == '<p>1 &lt; 2 &amp; "q"</p>'

    def test_unicode(self) -> None:
        assert html_of([text("한글 본문\n")]) == "<p>한글 본문</p>"

    def test_empty_document(self) -> None:
        assert render(b"[]") == b""

    def test_empty_insert_writes_nothing(self) -> None:
        assert html_of([text("a"), text("", bold=True), text("b\n")]) == "<p>ab</p>"

    def test_deterministic(self) -> None:
        ops = json.dumps([text("a", bold=True), text("b", italic=True), nl(header=2)])
        assert render(ops) == render(ops)


# ---------------------------------------------------------------------------
# Inline format diffing
# ---------------------------------------------------------------------------

class TestInlineDiff:
    def test_single_format(self) -> None:
        assert html_of([text("a", bold=True), nl()]) == "<p><strong>a</strong></p>"

    def test_identical_formats_are_not_reopened(self) -> None:
        got = html_of([
            text("a", bold=True, italic=True),
            text("b", italic=True, bold=True),
            nl(),
        ])
        assert got == "<p><em><strong>ab</strong></em></p>"

    def test_bold_italic_then_italic_keeps_italic_open(self) -> None:
        got = html_of([text("a", bold=True, italic=True), text("b", italic=True), nl()])
        assert got == "<p><em><strong>a</strong>b</em></p>"
        assert got.count("<em>") == 1

    def test_superset_opens_only_new_tags_innermost(self) -> None:
        got = html_of([text("a", bold=True), text("b", bold=True, italic=True), nl()])
        assert got == "<p><strong>a<em>b</em></strong></p>"

    def test_subset_closes_only_dropped_tags(self) -> None:
        got = html_of([text("a", italic=True, bold=True), text("b", italic=True), nl()])
        assert got == "<p><em><strong>a</strong>b</em></p>"

    def test_no_attributes_close_everything(self) -> None:
        got = html_of([
            text("a", underline=True, italic=True, bold=True),
            text("b"),
            nl(),
        ])
        assert got == "<p><u><em><strong>a</strong></em></u>b</p>"

    def test_formats_close_at_block_end(self) -> None:
        got = html_of([text("a", bold=True), text("\n"), text("b", bold=True), nl()])
        assert got == "<p><strong>a</strong></p><p><strong>b</strong></p>"

    def test_formats_on_split_payload(self) -> None:
        got = html_of([text("a\nb", italic=True), nl()])
        assert got == "<p><em>a</em></p><p><em>b</em></p>"

    def test_link_changes_href(self) -> None:
        got = html_of([text("a", link="/one"), text("b", link="/two"), nl()])
        assert got == (
            '<p><a href="/one" target="_blank">a</a>'
            '<a href="/two" target="_blank">b</a></p>'
        )

    def test_color_span(self) -> None:
        got = html_of([text("red", color="#e60000"), text(" plain\n")])
        assert got == '<p><span style="color:#e60000;">red</span> plain</p>'

    def test_unknown_attribute_is_ignored(self) -> None:
        plain = html_of([text("a", bold=True), nl()])
        extra = html_of([text("a", bold=True, font="serif", **{"data-x": "1"}), nl()])
        assert extra == plain


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class TestBlocks:
    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_header(self, level: int) -> None:
        got = html_of([text("Title"), nl(header=level)])
        assert got == f"<h{level}>Title</h{level}>"

    def test_blockquote(self) -> None:
        assert html_of([text("quoted"), nl(blockquote=True)]) == "<blockquote>quoted</blockquote>"

    def test_align_class(self) -> None:
        got = html_of([text("mid"), nl(align="center")])
        assert got == '<p class="align-center">mid</p>'

    def test_align_quill_preset(self) -> None:
        got = html_of([text("mid"), nl(align="center")], align_class_prefix="ql-align-")
        assert got == '<p class="ql-align-center">mid</p>'

    def test_block_formats_merge_into_one_element(self) -> None:
        got = html_of([text("item"), nl(list="bullet", align="right")])
        assert got == '<ul><li class="align-right">item</li></ul>'

    def test_empty_header_gets_br(self) -> None:
        got = html_of([text("a\n"), nl(header=1)])
        assert got == "<p>a</p><h1><br></h1>"

    def test_inline_inside_header(self) -> None:
        got = html_of([text("Big ", italic=True), text("title"), nl(header=1)])
        assert got == "<h1><em>Big </em>title</h1>"

    def test_image_embed(self) -> None:
        got = html_of([{"insert": {"image": "https://example.com/a.png"}}, nl()])
        assert got == '<p><img src="https://example.com/a.png"></p>'

    def test_linked_image(self) -> None:
        got = html_of([{"insert": {"image": "a.png"}, "attributes": {"link": "/x"}}, nl()])
        assert got == '<p><a href="/x" target="_blank"><img src="a.png"></a></p>'


class TestLists:
    def test_consecutive_items_share_container(self) -> None:
        got = html_of([
            text("a"), nl(list="bullet"),
            text("b"), nl(list="bullet"),
        ])
        assert got == "<ul><li>a</li><li>b</li></ul>"

    def test_list_closed_before_next_paragraph(self) -> None:
        got = html_of([text("a"), nl(list="ordered"), text("after\n")])
        assert got == "<ol><li>a</li></ol><p>after</p>"

    def test_list_type_change(self) -> None:
        got = html_of([text("a"), nl(list="ordered"), text("b"), nl(list="bullet")])
        assert got == "<ol><li>a</li></ol><ul><li>b</li></ul>"

    def test_nested(self) -> None:
        got = html_of([
            text("One"), nl(list="ordered"),
            text("One a"), nl(list="ordered", indent=1),
            text("One b"), nl(list="ordered", indent=1),
            text("Two"), nl(list="ordered"),
            text("Bullet"), nl(list="bullet"),
        ])
        assert got == (
            "<ol><li>One</li><ol><li>One a</li><li>One b</li></ol><li>Two</li></ol>"
            "<ul><li>Bullet</li></ul>"
        )

    def test_two_levels_closed_at_once(self) -> None:
        got = html_of([
            text("a"), nl(list="bullet"),
            text("b"), nl(list="bullet", indent=1),
            text("c"), nl(list="bullet", indent=2),
            text("d\n"),
        ])
        assert got == (
            "<ul><li>a</li><ul><li>b</li><ul><li>c</li></ul></ul></ul><p>d</p>"
        )

    def test_inline_formats_in_items(self) -> None:
        got = html_of([text("x", bold=True), nl(list="bullet"), text("y"), nl(list="bullet")])
        assert got == "<ul><li><strong>x</strong></li><li>y</li></ul>"


# ---------------------------------------------------------------------------
# Document end
# ---------------------------------------------------------------------------

class TestTrailingContent:
    def test_unterminated_text_is_flushed(self) -> None:
        assert html_of([text("a\nb")]) == "<p>a</p><p>b</p>"

    def test_unterminated_formats_are_closed(self) -> None:
        assert html_of([text("a", bold=True)]) == "<p><strong>a</strong></p>"

    def test_unterminated_after_list(self) -> None:
        got = html_of([text("a"), nl(list="bullet"), text("tail")])
        assert got == "<ul><li>a</li></ul><p>tail</p>"

    def test_strict_drops_tail(self) -> None:
        got = html_of([text("a\nb", bold=True)], flush_trailing=False)
        assert got == "<p><strong>a</strong></p>"

    def test_open_list_closed_at_end(self) -> None:
        assert html_of([text("a"), nl(list="bullet")]).endswith("</ul>")


# ---------------------------------------------------------------------------
# Errors and extension
# ---------------------------------------------------------------------------

class TestErrors:
    def test_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            render(b"{not json")

    def test_missing_formatter_keeps_partial_html(self) -> None:
        ops = json.dumps([text("first\n"), {"insert": {"video": "v.mp4"}}, text("never\n")])
        with pytest.raises(MissingFormatterError) as info:
            render(ops)
        assert info.value.index == 1
        assert info.value.keyword == "video"
        assert info.value.html == b"<p>first</p>"
        assert "video" in str(info.value)


@dataclass(frozen=True)
class _VideoFormat:
    src: str

    def fmt(self) -> None:
        return None

    def has_format(self, op: Op) -> bool:
        return False

    def write(self, buf: io.StringIO) -> None:
        buf.write(f'<iframe src="{self.src}"></iframe>')


@dataclass(frozen=True)
class _HighlightFormat:
    def fmt(self) -> Format:
        return Format("hl", FormatPlace.CLASS, keyword="highlight")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("highlight")


@dataclass(frozen=True)
class _InlineTextFormat:
    """Op type formatter with no block-level format."""

    def fmt(self) -> Format:
        return Format("span", keyword="text")

    def has_format(self, op: Op) -> bool:
        return False


@dataclass(frozen=True)
class _PaddingFormat:
    def fmt(self) -> Format:
        return Format("padding-left:3em;", FormatPlace.STYLE, block=True, keyword="indent")

    def has_format(self, op: Op) -> bool:
        return op.has_attr("indent")


class TestRenderExtended:
    def test_custom_embed(self) -> None:
        def custom(keyword: str, op: Op):
            if keyword == "video":
                return _VideoFormat(op.data)
            return None

        ops = json.dumps([{"insert": {"video": "v.mp4"}}, nl()])
        assert render_extended(ops, custom) == b'<p><iframe src="v.mp4"></iframe></p>'

    def test_custom_attribute(self) -> None:
        def custom(keyword: str, op: Op):
            return _HighlightFormat() if keyword == "highlight" else None

        ops = json.dumps([text("a", highlight=True), text("b", highlight=True), nl()])
        assert render_extended(ops, custom) == b'<p><span class="hl">ab</span></p>'

    def test_custom_overrides_builtin(self) -> None:
        def custom(keyword: str, op: Op):
            return _HighlightFormat() if keyword == "bold" else None

        ops = json.dumps([text("a", bold=True), nl()])
        assert render_extended(ops, custom) == b'<p><span class="hl">a</span></p>'

    def test_custom_called_for_type_and_each_attribute(self) -> None:
        seen: list[str] = []

        def custom(keyword: str, op: Op):
            seen.append(keyword)
            return None

        render_extended(json.dumps([text("a", italic=True, bold=True)]), custom)
        assert seen == ["text", "italic", "bold"]

    def test_block_without_block_format_is_unwrapped(self) -> None:
        def custom(keyword: str, op: Op):
            return _InlineTextFormat() if keyword == "text" else None

        got = render_extended('[{"insert":"a\\nb\\n"}]', custom)
        assert got == b"<span>a</span><span>b</span>"

    def test_empty_unwrapped_block_writes_nothing(self) -> None:
        def custom(keyword: str, op: Op):
            return _InlineTextFormat() if keyword == "text" else None

        got = render_extended(json.dumps([text("a\n\nb\n")]), custom)
        assert got == b"<span>a</span><span>b</span>"
        assert b"<br>" not in got

    def test_custom_block_style(self) -> None:
        def custom(keyword: str, op: Op):
            return _PaddingFormat() if keyword == "indent" else None

        ops = json.dumps([text("x"), nl(indent=1, align="center")])
        assert render_extended(ops, custom) == (
            b'<p class="align-center" style="padding-left:3em;">x</p>'
        )



# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

class _Flag:
    """Formatter stand-in: carried by an op when the op has attribute *name*."""

    def __init__(self, name: str) -> None:
        self.name = name

    def fmt(self) -> Format:
        return Format(self.name, keyword=self.name)

    def has_format(self, op: Op) -> bool:
        return op.has_attr(self.name)


def _entry(name: str) -> OpenFormat:
    flag = _Flag(name)
    return OpenFormat(flag.fmt(), flag)


class TestFormatState:
    def test_close_previous_without_attributes(self) -> None:
        fs = FormatState()
        fs.open = [_entry("em"), _entry("strong")]
        buf = io.StringIO()
        fs.close_previous(buf, Op("stuff"))
        assert buf.getvalue() == "</strong></em>"
        assert fs.open == []

    def test_close_previous_keeps_common_prefix(self) -> None:
        fs = FormatState()
        fs.open = [_entry("em"), _entry("strong"), _entry("u")]
        buf = io.StringIO()
        fs.close_previous(buf, Op("x", attrs={"em": "y", "u": "y"}))
        assert buf.getvalue() == "</u></strong>"
        assert [e.format.val for e in fs.open] == ["em"]

    def test_open_formats_skips_already_open(self) -> None:
        fs = FormatState()
        em, strong = _entry("em"), _entry("strong")
        fs.open = [em]
        buf = io.StringIO()
        fs.open_formats(buf, [em, strong])
        assert buf.getvalue() == "<strong>"
        assert fs.open == [em, strong]

    def test_close_all(self) -> None:
        fs = FormatState()
        fs.open = [_entry("em"), _entry("strong")]
        buf = io.StringIO()
        fs.close_all(buf)
        assert buf.getvalue() == "</strong></em>"


class TestBlockWrapper:
    def test_last_tag_wins(self) -> None:
        bw = BlockWrapper()
        bw.add(Format("p", block=True))
        bw.add(Format("h2", block=True))
        assert bw.open_tag() == "<h2>"
        assert bw.close_tag() == "</h2>"

    def test_classes_and_style(self) -> None:
        bw = BlockWrapper()
        bw.add(Format("li", block=True))
        bw.add(Format("a", FormatPlace.CLASS, block=True))
        bw.add(Format("b", FormatPlace.CLASS, block=True))
        bw.add(Format("margin:0;", FormatPlace.STYLE, block=True))
        bw.add(Format("color:red;", FormatPlace.STYLE, block=True))
        assert bw.open_tag() == '<li class="a b" style="margin:0;color:red;">'


class TestFixtures:
    def test_sample(self) -> None:
        ops = (FIXTURES_DIR / "sample.json").read_bytes()
        expected = (FIXTURES_DIR / "sample.html").read_text(encoding="utf-8").strip()
        assert render(ops).decode("utf-8") == expected

    def test_renderer_is_reusable(self) -> None:
        renderer = HtmlRenderer()
        ops = [Op("a", attrs={"bold": "y"})]
        first = renderer.render(ops)
        assert renderer.render(ops) == first == b"<p><strong>a</strong></p>"
