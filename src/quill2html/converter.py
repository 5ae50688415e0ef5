"""High-level Delta-to-HTML conversion orchestrator.

Ties together the Delta parser, the options presets and the renderer into a
single public API for converting Delta JSON text or files to HTML.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from quill2html.options import PRESETS, RenderOptions
from quill2html.parser import DeltaParser
from quill2html.registry import CustomFormats
from quill2html.renderer import HtmlRenderer


class Converter:
    """Convert Delta content to HTML.

    Usage::

        converter = Converter(preset="quill")
        converter.convert_file("input.json", "output.html")

        # or from string
        html = converter.convert_text('[{"insert": "Hello\\n"}]')
    """

    PRESETS = PRESETS

    def __init__(
        self,
        preset: str = "default",
        custom_formats: Optional[CustomFormats] = None,
    ) -> None:
        self.preset = preset
        self.options = RenderOptions.from_preset(preset)
        self.parser = DeltaParser()
        self.renderer = HtmlRenderer(self.options, custom_formats=custom_formats)

    def convert_bytes(self, data: bytes) -> bytes:
        """Convert Delta JSON bytes to HTML bytes (UTF-8)."""
        ops = self.parser.parse(data)
        return self.renderer.render(ops)

    def convert_text(self, delta_json: str) -> str:
        """Convert Delta JSON text to an HTML string.

        Args:
            delta_json: JSON array of insert operations, or a ``{"ops": [...]}``
                object.

        Returns:
            The rendered HTML.
        """
        ops = self.parser.parse(delta_json)
        return self.renderer.render(ops).decode("utf-8")

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Delta JSON file and write the HTML output.

        Args:
            input_path: Path to the input ``.json`` file.
            output_path: Path for the output ``.html`` file.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        delta_json = input_path.read_text(encoding=encoding)
        html = self.convert_text(delta_json)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
