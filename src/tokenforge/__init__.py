"""
tokenforge - reshape design-tool token exports into a CSS framework's theme
vocabulary and resolve multi-mode tokens into CSS expressions.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

from .config import TokenForgeConfig, default_config, load_config
from .errors import ConfigError, TokenForgeError, TokenShapeError
from .modes import DimensionKind, ModeDimension, resolve_modes
from .pipeline import build_outputs, flatten_tokens, load_token_file, resolve_variants
from .references import RewriteRule, rewrite_references, rewrite_references_in_tree
from .reshape import MappingTable, SourceSpec, TargetSpec, reshape
from .tree import SKIP, Group, Token, is_group, is_token, map_tokens, parse_tree, walk


def _get_version() -> str:
    try:
        return _metadata_version("tokenforge")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    # Errors
    "TokenForgeError",
    "ConfigError",
    "TokenShapeError",
    # Tree model
    "Token",
    "Group",
    "SKIP",
    "is_token",
    "is_group",
    "parse_tree",
    "walk",
    "map_tokens",
    # Stages
    "MappingTable",
    "TargetSpec",
    "SourceSpec",
    "reshape",
    "RewriteRule",
    "rewrite_references",
    "rewrite_references_in_tree",
    "DimensionKind",
    "ModeDimension",
    "resolve_modes",
    # Configuration / pipeline
    "TokenForgeConfig",
    "load_config",
    "default_config",
    "load_token_file",
    "build_outputs",
    "resolve_variants",
    "flatten_tokens",
]
