"""
Mode resolution.

Design-tool exports carry per-mode values (``Light``/``Dark``, brand
variants, ``Base``/``Compact``/``Comfortable``) on a single token. CSS has
one value per custom property, so each resolution pass picks one theme
variant's dimensions and collapses the matching mode values into a single
expression that switches at render time:

- color light/dark: ``light-dark(<light>, <dark>)``
- other light/dark: ``var(--is-light, <light>) var(--is-dark, <dark>)``
- size: ``var(--is-size-base, …) var(--is-size-compact, …)
  var(--is-size-comfortable, …)``

Exactly one toggle variable of a set is ``initial`` at any time and the
rest are empty, so only one fallback is live.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .css import css_value
from .errors import ConfigError, TokenShapeError
from .tree import Group, Token, TokenPath, map_tokens

logger = logging.getLogger(__name__)

COLOR_TYPE = "color"

LIGHT_DARK_TOGGLES = ("--is-light", "--is-dark")
SIZE_TOGGLES = ("--is-size-base", "--is-size-compact", "--is-size-comfortable")


class DimensionKind(StrEnum):
    """Kinds of mode dimension."""

    LIGHT_DARK = "light_dark"
    SIZE = "size"


_ARITY: dict[str, int] = {
    DimensionKind.LIGHT_DARK: 2,
    DimensionKind.SIZE: 3,
}


class ModeDimension(BaseModel):
    """
    A named, ordered set of mode names resolved together.

    Example:
        ModeDimension(
            name="brand-2",
            kind=DimensionKind.LIGHT_DARK,
            modes=("Brand #2 - Light", "Brand #2 - Dark"),
        )
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Dimension name (theme variant or 'size')")
    kind: DimensionKind
    modes: tuple[str, ...] = Field(
        description="light, dark  |  base, compact, comfortable (order significant)"
    )

    @model_validator(mode="after")
    def _check_arity(self) -> ModeDimension:
        expected = _ARITY[self.kind]
        if len(self.modes) != expected:
            raise ValueError(
                f"{self.kind.value} dimension '{self.name}' needs {expected} mode names, "
                f"got {len(self.modes)}"
            )
        if len(set(self.modes)) != len(self.modes):
            raise ValueError(f"dimension '{self.name}' repeats a mode name")
        return self

    def matches(self, modes: dict[str, Any]) -> bool:
        """True if every mode name of this dimension is present."""
        return all(name in modes for name in self.modes)


def light_dark(name: str, light: str, dark: str) -> ModeDimension:
    return ModeDimension(name=name, kind=DimensionKind.LIGHT_DARK, modes=(light, dark))


def size(base: str, compact: str, comfortable: str, name: str = "size") -> ModeDimension:
    return ModeDimension(name=name, kind=DimensionKind.SIZE, modes=(base, compact, comfortable))


def validate_dimensions(dimensions: Sequence[ModeDimension]) -> None:
    """Check dimensions for duplicate names and overlapping mode names.

    Raises:
        ConfigError: If two dimensions share a name or a mode name.
    """
    seen_names: set[str] = set()
    owner: dict[str, str] = {}
    for dimension in dimensions:
        if dimension.name in seen_names:
            raise ConfigError(f"duplicate mode dimension '{dimension.name}'")
        seen_names.add(dimension.name)
        for mode in dimension.modes:
            if mode in owner:
                raise ConfigError(
                    f"mode '{mode}' is declared by both '{owner[mode]}' and '{dimension.name}'"
                )
            owner[mode] = dimension.name


# =============================================================================
# Collapse
# =============================================================================


def _comparable(value: Any) -> tuple[str, str]:
    """Rendered CSS text, or the JSON form for values with no CSS rendering."""
    try:
        return "css", css_value(value)
    except TokenShapeError:
        return "json", json.dumps(value, sort_keys=True)


def _same(values: Sequence[Any]) -> bool:
    first = _comparable(values[0])
    return all(_comparable(value) == first for value in values[1:])


def _toggles(names: Sequence[str], values: Sequence[Any]) -> str:
    return " ".join(f"var({name}, {css_value(value)})" for name, value in zip(names, values))


def collapse(token: Token, dimension: ModeDimension) -> Any:
    """Collapse the token's values for ``dimension`` into one value."""
    modes = token.modes or {}
    values = [modes[name] for name in dimension.modes]

    if _same(values):
        return values[0]

    if dimension.kind == DimensionKind.SIZE:
        return _toggles(SIZE_TOGGLES, values)

    light, dark = values
    if token.type == COLOR_TYPE:
        return f"light-dark({css_value(light)}, {css_value(dark)})"
    return _toggles(LIGHT_DARK_TOGGLES, values)


def resolve_token(
    token: Token, dimensions: Sequence[ModeDimension], path: TokenPath = ()
) -> Token:
    """Resolve one token against the first dimension whose modes it carries.

    Tokens without modes, or whose modes cover no dimension completely,
    are returned unchanged.

    Raises:
        TokenShapeError: If a mode value has no CSS rendering; the error
            carries the token path.
    """
    if not token.modes:
        return token

    for dimension in dimensions:
        if dimension.matches(token.modes):
            try:
                value = collapse(token, dimension)
            except TokenShapeError as e:
                raise TokenShapeError(e.message, e.path or path) from e
            return token.model_copy(update={"value": value, "modes": None})

    logger.debug(f"No mode dimension applies to {'.'.join(path)}; keeping base value")
    return token


def resolve_modes(tree: Group, dimensions: Sequence[ModeDimension]) -> Group:
    """Copy of ``tree`` with every multi-mode token collapsed.

    Args:
        tree: Reshaped, reference-rewritten token tree (not modified).
        dimensions: Dimensions for one theme variant, tried in order.

    Returns:
        New tree with resolved tokens.

    Raises:
        ConfigError: If the dimensions overlap.
    """
    validate_dimensions(dimensions)
    return map_tokens(tree, lambda path, token: (path[-1], resolve_token(token, dimensions, path)))
