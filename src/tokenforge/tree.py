"""
Token tree model.

A design token document is a tree of Groups whose leaves are Tokens. A node
is a Token iff its source object carries ``$value``; the distinction is made
once, by :func:`parse_tree`, and recorded in each model's ``kind`` field.

Every transform in this package takes a tree and returns a freshly built
tree. Tokens handed to callbacks are deep copies, so a callback can never
reach into a tree another stage still holds.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigError, TokenShapeError

logger = logging.getLogger(__name__)

VALUE_KEY = "$value"
TYPE_KEY = "$type"
DESCRIPTION_KEY = "$description"
EXTENSIONS_KEY = "$extensions"
DEFAULT_MODES_KEY = "mode"

TokenPath = tuple[str, ...]


# =============================================================================
# Models
# =============================================================================


class Token(BaseModel):
    """
    Leaf node carrying a value and, optionally, per-mode values.

    Example:
        Token(
            type="color",
            value="{Color Primitives.Slate.50}",
            modes={"Light": "{Color Primitives.Slate.50}", "Dark": "#000"},
        )
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["token"] = "token"
    type: str | None = Field(default=None, description="Semantic type tag (color, dimension, ...)")
    value: Any = Field(description="Literal, structured literal, or {reference} string")
    modes: dict[str, Any] | None = Field(
        default=None, description="Mode name -> value, when the token varies across modes"
    )
    description: str | None = None
    extensions: dict[str, Any] = Field(
        default_factory=dict, description="Other $extensions entries, kept verbatim"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Other $-prefixed keys, kept verbatim"
    )


class Group(BaseModel):
    """Internal node: named children, no payload of its own."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["group"] = "group"
    children: dict[str, Node] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="$-prefixed group keys ($type, $description)"
    )


Node = Annotated[Union[Token, Group], Field(discriminator="kind")]

Group.model_rebuild()


class _Signal(Enum):
    SKIP = "skip"


# Returned from a map_tokens callback to drop the token.
SKIP = _Signal.SKIP

TokenMapper = Callable[[TokenPath, Token], "tuple[str, Token] | _Signal | None"]


def is_token(node: Token | Group) -> bool:
    return node.kind == "token"


def is_group(node: Token | Group) -> bool:
    return node.kind == "group"


# =============================================================================
# Ingestion / serialization
# =============================================================================


def parse_tree(data: Any, *, modes_key: str = DEFAULT_MODES_KEY) -> Group:
    """Build a Group tree from a DTCG-style token document.

    Args:
        data: Decoded JSON document (nested mappings).
        modes_key: Key under ``$extensions`` holding the mode map.

    Returns:
        Root Group.

    Raises:
        TokenShapeError: If any node is neither a clean group nor a clean token.
    """
    if not isinstance(data, Mapping):
        raise TokenShapeError(f"expected an object at the root, got {type(data).__name__}")
    if VALUE_KEY in data:
        raise TokenShapeError("root must be a group, not a token")
    return _parse_group(data, (), None, modes_key)


def _parse_group(
    data: Mapping[str, Any],
    path: TokenPath,
    inherited_type: str | None,
    modes_key: str,
) -> Group:
    metadata = {key: copy.deepcopy(value) for key, value in data.items() if key.startswith("$")}

    group_type = metadata.get(TYPE_KEY, inherited_type)
    if group_type is not None and not isinstance(group_type, str):
        raise TokenShapeError(f"$type must be a string, got {type(group_type).__name__}", path)

    children: dict[str, Token | Group] = {}
    for key, child in data.items():
        if key.startswith("$"):
            continue
        child_path = (*path, key)
        if not isinstance(child, Mapping):
            raise TokenShapeError(
                f"expected a group or token object, got {type(child).__name__}", child_path
            )
        if VALUE_KEY in child:
            children[key] = _parse_token(child, child_path, group_type, modes_key)
        else:
            children[key] = _parse_group(child, child_path, group_type, modes_key)

    return Group(children=children, metadata=metadata)


def _parse_token(
    data: Mapping[str, Any],
    path: TokenPath,
    inherited_type: str | None,
    modes_key: str,
) -> Token:
    stray = [key for key in data if not key.startswith("$")]
    if stray:
        raise TokenShapeError(f"token has non-token keys: {', '.join(stray)}", path)

    token_type = data.get(TYPE_KEY, inherited_type)
    if token_type is not None and not isinstance(token_type, str):
        raise TokenShapeError(f"$type must be a string, got {type(token_type).__name__}", path)

    description = data.get(DESCRIPTION_KEY)
    if description is not None and not isinstance(description, str):
        raise TokenShapeError("$description must be a string", path)

    extensions = data.get(EXTENSIONS_KEY, {})
    if not isinstance(extensions, Mapping):
        raise TokenShapeError("$extensions must be an object", path)
    extensions = copy.deepcopy(dict(extensions))

    modes = extensions.pop(modes_key, None)
    if modes is not None and not isinstance(modes, Mapping):
        raise TokenShapeError(f"$extensions.{modes_key} must be an object", path)

    metadata = {
        key: copy.deepcopy(value)
        for key, value in data.items()
        if key not in (VALUE_KEY, TYPE_KEY, DESCRIPTION_KEY, EXTENSIONS_KEY)
    }

    return Token(
        type=token_type,
        value=copy.deepcopy(data[VALUE_KEY]),
        modes=dict(modes) if modes is not None else None,
        description=description,
        extensions=extensions,
        metadata=metadata,
    )


def to_data(node: Token | Group, *, modes_key: str = DEFAULT_MODES_KEY) -> dict[str, Any]:
    """Serialize a node back to the DTCG document shape."""
    if isinstance(node, Token):
        data: dict[str, Any] = {}
        if node.type is not None:
            data[TYPE_KEY] = node.type
        data[VALUE_KEY] = copy.deepcopy(node.value)
        if node.description is not None:
            data[DESCRIPTION_KEY] = node.description
        data.update(copy.deepcopy(node.metadata))
        extensions = copy.deepcopy(node.extensions)
        if node.modes is not None:
            extensions[modes_key] = copy.deepcopy(node.modes)
        if extensions:
            data[EXTENSIONS_KEY] = extensions
        return data

    data = copy.deepcopy(node.metadata)
    for key, child in node.children.items():
        data[key] = to_data(child, modes_key=modes_key)
    return data


# =============================================================================
# Traversal
# =============================================================================


def walk(tree: Group, path: TokenPath = ()) -> Iterator[tuple[TokenPath, Token]]:
    """Yield every Token in the tree with its full path, depth first."""
    for key, child in tree.children.items():
        child_path = (*path, key)
        if isinstance(child, Token):
            yield child_path, child
        else:
            yield from walk(child, child_path)


def map_tokens(tree: Group, fn: TokenMapper) -> Group:
    """Return a copy of ``tree`` with every Token passed through ``fn``.

    ``fn(path, token)`` receives a deep copy of the token and returns one of:

    - ``(new_key, new_token)``: store ``new_token`` under ``new_key`` at the
      same level. A key already produced at that level is overwritten.
    - ``SKIP``: omit the token.
    - ``None``: keep the token under its original key.

    Groups are always recursed into and never handed to ``fn``. The returned
    token is not visited again.
    """
    return _map_group(tree, fn, ())


def _map_group(group: Group, fn: TokenMapper, path: TokenPath) -> Group:
    children: dict[str, Token | Group] = {}
    for key, child in group.children.items():
        child_path = (*path, key)
        if isinstance(child, Group):
            children[key] = _map_group(child, fn, child_path)
            continue

        token = child.model_copy(deep=True)
        result = fn(child_path, token)
        if result is SKIP:
            continue
        if result is None:
            children[key] = token
            continue

        new_key, new_token = result
        if not isinstance(new_token, Token):
            raise TokenShapeError(
                f"mapper must return a Token, got {type(new_token).__name__}", child_path
            )
        children[new_key] = new_token

    return Group(children=children, metadata=copy.deepcopy(group.metadata))


# =============================================================================
# Structural helpers
# =============================================================================


def get_node(tree: Group, path: Sequence[str]) -> Token | Group:
    """Look up the node at ``path``.

    Raises:
        ConfigError: If any segment of the path does not exist.
    """
    node: Token | Group = tree
    for depth, segment in enumerate(path):
        if not isinstance(node, Group) or segment not in node.children:
            raise ConfigError("source path does not exist", tuple(path[: depth + 1]))
        node = node.children[segment]
    return node


def copy_node(node: Token | Group) -> Token | Group:
    return node.model_copy(deep=True)


def omit(group: Group, names: Iterable[str]) -> Group:
    """Copy of ``group`` without the named direct children."""
    excluded = set(names)
    return Group(
        children={
            key: copy_node(child) for key, child in group.children.items() if key not in excluded
        },
        metadata=copy.deepcopy(group.metadata),
    )


def merge(*groups: Group) -> Group:
    """Merge groups left to right; later keys win."""
    children: dict[str, Token | Group] = {}
    for group in groups:
        for key, child in group.children.items():
            if key in children:
                logger.debug(f"Merge overwrites existing key '{key}'")
            children[key] = copy_node(child)
    return Group(children=children)
