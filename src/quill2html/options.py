"""Rendering options and named presets.

A preset bundles the few knobs that change the produced markup without
changing the structure of the document: the class prefix used for block
alignment, the ``target`` written on links, and what happens to text that is
not terminated by a final newline.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RenderOptions:
    """Options shared by every formatter and by the render driver."""

    align_class_prefix: str = "align-"
    link_target: str = "_blank"
    # Delta documents normally end with "\n"; when one does not, render the
    # tail as a final paragraph instead of dropping it.
    flush_trailing: bool = True

    def derive(self, **overrides) -> RenderOptions:
        """Return a copy with selected fields overridden."""
        return replace(self, **overrides)

    @classmethod
    def from_preset(cls, preset: str = "default") -> RenderOptions:
        if preset not in _PRESETS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESETS)}"
            )
        return _PRESETS[preset]


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

_DEFAULT = RenderOptions()

_PRESETS: dict[str, RenderOptions] = {
    "default": _DEFAULT,
    # Class names used by Quill's own stylesheet.
    "quill": _DEFAULT.derive(align_class_prefix="ql-align-"),
    "strict": _DEFAULT.derive(link_target="", flush_trailing=False),
}

PRESETS = list(_PRESETS.keys())
