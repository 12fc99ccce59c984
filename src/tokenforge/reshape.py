"""
Reshaper: rebuild a source token tree under a target theme vocabulary.

A mapping table is data. For each target root key (``spacing``,
``font-weight``, ...) it names the source subtrees to pull in, how to rename
their keys, and what post-processing to apply. Every pull produces an
independent copy, so one source subtree can feed several targets.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .css import format_number
from .errors import ConfigError
from .tree import (
    SKIP,
    Group,
    Token,
    TokenMapper,
    TokenPath,
    copy_node,
    get_node,
    map_tokens,
    merge,
    omit,
    walk,
)

logger = logging.getLogger(__name__)

DEFAULT_REM_BASE = 16.0

DEFAULT_DIMENSION_TYPES: frozenset[str] = frozenset(
    {
        "dimension",
        "fontSize",
        "letterSpacing",
        "lineHeight",
        "spacing",
        "sizing",
        "borderRadius",
        "borderWidth",
    }
)

_PIXELS = re.compile(r"^\s*(-?(?:\d+(?:\.\d*)?|\.\d+))\s*(?:px)?\s*$")


# =============================================================================
# Recipes
# =============================================================================


class SourceSpec(BaseModel):
    """
    One source subtree pulled into a target.

    Example:
        SourceSpec(
            path=["Typography Primitives", "Weight"],
            strip_prefix="Weight ",
            drop_suffixes=[" Italic"],
        )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: list[str] = Field(min_length=1, description="Source path segments")
    exclude: list[str] = Field(default_factory=list, description="Direct children to drop")
    nest_as: str | None = Field(
        default=None, description="Place the subtree under this key instead of spreading it"
    )
    flatten_prefix: str | None = Field(
        default=None,
        description="Flatten Category > Item into 'Category<rest>' for items starting with this",
    )
    strip_prefix: str | None = Field(default=None, description="Remove this leading text from keys")
    split_on: str | None = Field(
        default=None, description="Rename keys to the text after the last delimiter"
    )
    drop_suffixes: list[str] = Field(
        default_factory=list, description="Skip tokens whose key ends with any of these"
    )
    set_type: str | None = Field(default=None, description="Re-tag token types")
    append_values: dict[str, Any] = Field(
        default_factory=dict, description="Token key -> value appended to make a list"
    )


class TargetSpec(BaseModel):
    """Recipe for one target root key: a single token, or merged sources."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: list[str] | None = Field(default=None, description="Path of a single source token")
    sources: list[SourceSpec] = Field(default_factory=list)
    convert_units: bool = Field(default=False, description="Convert pixel dimensions to rem")

    @model_validator(mode="after")
    def _one_kind(self) -> TargetSpec:
        if (self.token is None) == (not self.sources):
            raise ValueError("a target needs exactly one of 'token' or 'sources'")
        return self


class MappingTable(BaseModel):
    """Target root key -> recipe, in output order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: dict[str, TargetSpec] = Field(default_factory=dict)


# =============================================================================
# Unit conversion
# =============================================================================


def convert_dimension(value: Any, base: float = DEFAULT_REM_BASE) -> Any:
    """Convert a bare pixel magnitude (``16``, ``"16px"``) to rem.

    References, other units, and non-numeric values are returned unchanged.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        magnitude = float(value)
    elif isinstance(value, str):
        if "{" in value:
            return value
        match = _PIXELS.match(value)
        if match is None:
            return value
        magnitude = float(match.group(1))
    else:
        return value
    return f"{format_number(magnitude / base)}rem"


def px_to_rem(
    token: Token,
    base: float = DEFAULT_REM_BASE,
    dimension_types: frozenset[str] = DEFAULT_DIMENSION_TYPES,
) -> Token:
    """Convert a dimension token's value and every mode value to rem."""
    if token.type not in dimension_types:
        return token

    modes = None
    if token.modes is not None:
        modes = {name: convert_dimension(value, base) for name, value in token.modes.items()}
    return token.model_copy(update={"value": convert_dimension(token.value, base), "modes": modes})


# =============================================================================
# Extraction
# =============================================================================


def _flatten_with_prefix(group: Group, prefix: str, path: TokenPath) -> Group:
    """Pull ``Category > <prefix><rest>`` items up to ``<Category><rest>``.

    Items whose names lack the prefix are left out; another recipe is
    expected to claim them.
    """
    children: dict[str, Token | Group] = {}
    for category, node in group.children.items():
        if isinstance(node, Token):
            logger.debug(f"Flatten skips token '{category}' at {'.'.join(path)}")
            continue
        for item, child in node.children.items():
            if item.startswith(prefix):
                children[f"{category}{item[len(prefix):]}"] = copy_node(child)
    return Group(children=children)


def _rename(key: str, spec: SourceSpec) -> str:
    if spec.strip_prefix and key.startswith(spec.strip_prefix):
        key = key[len(spec.strip_prefix) :]
    if spec.split_on and spec.split_on in key:
        key = key.rsplit(spec.split_on, 1)[1]
    return key


def _append(value: Any, extra: Any) -> list[Any]:
    if isinstance(value, list):
        return [*value, extra]
    return [value, extra]


def _token_rules(spec: SourceSpec) -> TokenMapper:
    def apply(path: TokenPath, token: Token):
        key = path[-1]
        if any(key.endswith(suffix) for suffix in spec.drop_suffixes):
            return SKIP

        update: dict[str, Any] = {}
        if key in spec.append_values:
            extra = spec.append_values[key]
            update["value"] = _append(token.value, extra)
            if token.modes is not None:
                update["modes"] = {
                    name: _append(value, extra) for name, value in token.modes.items()
                }
        if spec.set_type is not None:
            update["type"] = spec.set_type

        return _rename(key, spec), token.model_copy(update=update) if update else token

    return apply


def extract_source(source: Group, spec: SourceSpec) -> Group:
    """Copy one source subtree and apply the recipe's renaming rules.

    Raises:
        ConfigError: If the path does not exist or names a token.
    """
    path = tuple(spec.path)
    node = get_node(source, path)
    if isinstance(node, Token):
        raise ConfigError("source path names a token; use 'token' for single-token targets", path)

    missing = [name for name in spec.exclude if name not in node.children]
    if missing:
        logger.warning(f"Excluded name(s) not present at {'.'.join(path)}: {', '.join(missing)}")

    group = omit(node, spec.exclude)
    if spec.flatten_prefix is not None:
        group = _flatten_with_prefix(group, spec.flatten_prefix, path)
    group = map_tokens(group, _token_rules(spec))

    if spec.nest_as is not None:
        return Group(children={spec.nest_as: group})
    return group


def build_target(
    source: Group,
    spec: TargetSpec,
    *,
    rem_base: float = DEFAULT_REM_BASE,
    dimension_types: frozenset[str] = DEFAULT_DIMENSION_TYPES,
) -> Token | Group:
    """Build one target root from its recipe."""
    if spec.token is not None:
        node = get_node(source, spec.token)
        if not isinstance(node, Token):
            raise ConfigError("expected a token, found a group", tuple(spec.token))
        token = node.model_copy(deep=True)
        return px_to_rem(token, rem_base, dimension_types) if spec.convert_units else token

    group = merge(*(extract_source(source, source_spec) for source_spec in spec.sources))
    if spec.convert_units:
        group = map_tokens(
            group, lambda path, token: (path[-1], px_to_rem(token, rem_base, dimension_types))
        )
    return group


def reshape(
    source: Group,
    table: MappingTable,
    *,
    rem_base: float = DEFAULT_REM_BASE,
    dimension_types: frozenset[str] = DEFAULT_DIMENSION_TYPES,
) -> Group:
    """Build a new tree whose root keys are the table's target names.

    Args:
        source: Source token tree (not modified).
        table: Mapping table.
        rem_base: Pixel size of 1rem for unit conversion.
        dimension_types: Token types subject to unit conversion.

    Returns:
        Group keyed by target root name.

    Raises:
        ConfigError: If any recipe references a missing source path.
    """
    targets: dict[str, Token | Group] = {}
    for name, spec in table.targets.items():
        targets[name] = build_target(
            source, spec, rem_base=rem_base, dimension_types=dimension_types
        )

    result = Group(children=targets)
    logger.info(f"Reshaped {len(targets)} target(s), {sum(1 for _ in walk(result))} token(s)")
    return result
