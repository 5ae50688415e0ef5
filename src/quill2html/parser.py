"""Delta decoder that produces the operation model for HTML rendering.

Uses the standard :mod:`json` module to read a Quill Delta (a JSON array of
``insert`` operations) and converts each record into a normalised
:class:`Op`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from quill2html.errors import DecodeError

# Attribute value recorded for ``true`` flags such as ``"bold": true``.
TRUE_VALUE = "y"

TEXT_TYPE = "text"


# ---------------------------------------------------------------------------
# Operation model
# ---------------------------------------------------------------------------

@dataclass
class Op:
    """One Delta insert.

    ``data`` is the inserted text, or the value of the embed object for embeds
    (for ``{"image": "a.png"}`` the type is ``"image"`` and data ``"a.png"``).
    ``attrs`` never holds empty values: unset attributes are absent.
    """

    data: str
    type: str = TEXT_TYPE
    attrs: dict[str, str] = field(default_factory=dict)

    def has_attr(self, name: str) -> bool:
        """Say if the attribute *name* is set to a non-blank value."""
        return bool(self.attrs.get(name))

    def with_data(self, data: str) -> Op:
        """Return a fresh op carrying *data* with the same type and attributes."""
        return Op(data=data, type=self.type, attrs=self.attrs)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class DeltaParser:
    """Parse a Delta JSON document into a list of :class:`Op`."""

    # -- public API ---------------------------------------------------------

    def parse(self, source: Union[bytes, str]) -> list[Op]:
        """Return the operations of the Delta in *source*.

        Accepts either the bare array of inserts or a ``{"ops": [...]}``
        object as produced by ``quill.getContents()``.
        """
        try:
            raw = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc

        if isinstance(raw, dict) and "ops" in raw:
            raw = raw["ops"]
        if not isinstance(raw, list):
            raise DecodeError(
                f"expected a JSON array of insert operations, got {type(raw).__name__}"
            )
        return [self._convert_op(rec, i) for i, rec in enumerate(raw)]

    # -- record conversion --------------------------------------------------

    def _convert_op(self, rec: Any, index: int) -> Op:
        if not isinstance(rec, dict):
            raise DecodeError("operation is not a JSON object", index)
        if "insert" not in rec:
            raise DecodeError("operation lacks an insert", index)

        op_type, data = self._convert_insert(rec["insert"], index)
        attrs = self._convert_attrs(rec.get("attributes"), index)
        return Op(data=data, type=op_type, attrs=attrs)

    def _convert_insert(self, insert: Any, index: int) -> tuple[str, str]:
        if isinstance(insert, str):
            return TEXT_TYPE, insert
        if isinstance(insert, dict):
            if not insert:
                raise DecodeError("embed insert is an empty object", index)
            # An embed object has a single key naming its type.
            key, value = next(iter(insert.items()))
            if not isinstance(value, str):
                raise DecodeError(
                    f"embed {key!r} must have a string value, got {type(value).__name__}",
                    index,
                )
            return key, value
        raise DecodeError(
            f"insert must be a string or an object, got {type(insert).__name__}",
            index,
        )

    def _convert_attrs(self, attrs: Any, index: int) -> dict[str, str]:
        if attrs is None:
            return {}
        if not isinstance(attrs, dict):
            raise DecodeError("attributes must be a JSON object", index)

        converted: dict[str, str] = {}
        for name, value in attrs.items():
            # bool first: True is also an int
            if isinstance(value, bool):
                if value:
                    converted[name] = TRUE_VALUE
            elif isinstance(value, str):
                if value:
                    converted[name] = value
            elif isinstance(value, int):
                converted[name] = str(value)
            elif value is None:
                continue
            else:
                raise DecodeError(
                    f"attribute {name!r} has unsupported value type {type(value).__name__}",
                    index,
                )
        return converted


def decode_ops(source: Union[bytes, str]) -> list[Op]:
    """Shortcut for ``DeltaParser().parse(source)``."""
    return DeltaParser().parse(source)
