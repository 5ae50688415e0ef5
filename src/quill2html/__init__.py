"""Render Quill Delta insert operations as HTML."""

from __future__ import annotations

__version__ = "0.1.0"

from quill2html.renderer import render, render_extended  # noqa: E402

__all__ = ["__version__", "render", "render_extended"]
