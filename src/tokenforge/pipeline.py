"""
Pipeline orchestration.

Reshaper -> reference rewriter per output file, then one mode-resolution
pass per theme variant, then a flat list of leaves for CSS emission.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import TokenForgeConfig
from .errors import TokenShapeError
from .modes import resolve_modes
from .references import rewrite_references_in_tree
from .reshape import reshape
from .tree import DEFAULT_MODES_KEY, Group, TokenPath, parse_tree, to_data, walk

logger = logging.getLogger(__name__)

_RUNS = re.compile(r"[^\W_]+")
_REFERENCE = re.compile(r"\{([^{}]+)\}")


# =============================================================================
# File I/O
# =============================================================================


def load_token_file(path: Path, *, modes_key: str = DEFAULT_MODES_KEY) -> Group:
    """Read a token JSON document.

    Raises:
        TokenShapeError: If the file is not valid JSON or not a token tree.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TokenShapeError(f"Invalid JSON in {path}: {e}") from e

    tree = parse_tree(data, modes_key=modes_key)
    logger.info(f"Loaded {sum(1 for _ in walk(tree))} token(s) from {path}")
    return tree


def write_token_file(path: Path, tree: Group, *, modes_key: str = DEFAULT_MODES_KEY) -> Path:
    """Write a token tree as indented JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(to_data(tree, modes_key=modes_key), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info(f"Wrote {path}")
    return path


# =============================================================================
# Stages
# =============================================================================


def build_outputs(source: Group, config: TokenForgeConfig) -> dict[str, Group]:
    """Reshape the source once per output file and rewrite its references.

    Returns:
        Output file name -> reshaped, reference-rewritten tree.
    """
    rules = config.rules()
    dimension_types = frozenset(config.dimension_types)

    outputs: dict[str, Group] = {}
    for name, table in config.outputs.items():
        reshaped = reshape(
            source, table, rem_base=config.rem_base, dimension_types=dimension_types
        )
        outputs[name] = rewrite_references_in_tree(reshaped, rules)
        logger.info(f"Built output {name}")
    return outputs


def resolve_variants(
    tree: Group,
    config: TokenForgeConfig,
    themes: list[str] | None = None,
) -> dict[str, Group]:
    """Run one independent mode-resolution pass per theme variant."""
    resolved: dict[str, Group] = {}
    for theme in themes if themes is not None else list(config.themes):
        resolved[theme] = resolve_modes(tree, config.dimensions_for(theme))
        logger.info(f"Resolved modes for theme '{theme}'")
    return resolved


def write_outputs(outputs: dict[str, Group], directory: Path) -> list[Path]:
    return [write_token_file(directory / name, tree) for name, tree in outputs.items()]


# =============================================================================
# Emission hand-off
# =============================================================================


@dataclass(frozen=True)
class FlatToken:
    """A resolved leaf ready for CSS emission."""

    path: TokenPath
    name: str
    value: Any
    type: str | None


def _split_words(run: str) -> list[str]:
    """Split a letter-and-digit run at digit and camelCase boundaries."""
    words = []
    start = 0
    for i in range(1, len(run)):
        prev, cur = run[i - 1], run[i]
        following = run[i + 1] if i + 1 < len(run) else ""
        if (
            prev.isdigit() != cur.isdigit()
            or (prev.islower() and cur.isupper())
            or (prev.isupper() and cur.isupper() and following.islower())
        ):
            words.append(run[start:i])
            start = i
    words.append(run[start:])
    return words


def kebab_case(text: str) -> str:
    """Kebab-case a path or key: ``'Brand #2 Primary'`` -> ``'brand-2-primary'``.

    Letters outside ASCII are kept (``'Größe'`` -> ``'größe'``).
    """
    return "-".join(word.lower() for run in _RUNS.findall(text) for word in _split_words(run))


def reference_to_var(value: str) -> str:
    """Replace ``{a.b}`` references with ``var(--a-b)``."""
    return _REFERENCE.sub(lambda m: f"var(--{kebab_case(m.group(1))})", value)


def flatten_tokens(tree: Group) -> list[FlatToken]:
    """List every leaf with its kebab-cased custom-property name."""
    return [
        FlatToken(path=path, name=kebab_case(" ".join(path)), value=token.value, type=token.type)
        for path, token in walk(tree)
    ]
