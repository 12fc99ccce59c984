"""
CSS rendering of literal token values.

Mode collapse interpolates values into CSS expressions, so structured
values (font stacks, shadows) need a textual form first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import TokenShapeError

_SHADOW_FIELDS = ("offsetX", "offsetY", "blur", "spread")


def format_number(number: float) -> str:
    """Render a number without a trailing ``.0`` (``1``, ``0.875``)."""
    if isinstance(number, float):
        return str(int(number)) if number.is_integer() else repr(number)
    return str(number)


def css_value(value: Any) -> str:
    """Render a token value as CSS text.

    Strings pass through unchanged, lists of strings become a font stack,
    and shadow objects (or lists of them) become shorthand.

    Raises:
        TokenShapeError: For values with no CSS rendering.
    """
    if isinstance(value, bool):
        raise TokenShapeError(f"cannot render boolean {value!r} as CSS")
    if isinstance(value, str):
        return value
    if isinstance(value, int | float):
        return format_number(value)
    if isinstance(value, Mapping):
        return _shadow(value)
    if isinstance(value, list):
        if all(isinstance(item, Mapping) for item in value):
            return ", ".join(_shadow(item) for item in value)
        if all(isinstance(item, str) for item in value):
            return ", ".join(_font_family(item) for item in value)
    raise TokenShapeError(f"cannot render {type(value).__name__} value as CSS: {value!r}")


def _font_family(name: str) -> str:
    if " " in name and not name.startswith(("'", '"')) and "{" not in name:
        return f"'{name}'"
    return name


def _shadow(shadow: Mapping[str, Any]) -> str:
    if "color" not in shadow and not any(field in shadow for field in _SHADOW_FIELDS):
        raise TokenShapeError(f"unrecognized structured value: {dict(shadow)!r}")

    parts = ["inset"] if shadow.get("inset") else []
    for field in _SHADOW_FIELDS:
        parts.append(css_value(shadow.get(field, 0)))
    if shadow.get("color") is not None:
        parts.append(css_value(shadow["color"]))
    return " ".join(parts)
