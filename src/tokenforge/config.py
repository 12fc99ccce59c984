"""
Pipeline configuration.

One YAML document declares the mapping tables (one per output file), the
ordered reference-rewrite rules, and the theme variants to resolve. The
bundled ``defaults.yaml`` maps a Figma variables export onto the Tailwind
CSS v4 theme vocabulary.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError
from .modes import ModeDimension, light_dark, size, validate_dimensions
from .references import RewriteRule, parse_rules
from .reshape import DEFAULT_DIMENSION_TYPES, DEFAULT_REM_BASE, MappingTable
from .tree import DEFAULT_MODES_KEY

logger = logging.getLogger(__name__)

DEFAULTS_FILE = "defaults.yaml"


class RewriteRuleSpec(BaseModel):
    """A reference rewrite rule as written in configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str = Field(description="Dotted segment pattern, e.g. 'Theme.*.Font Size*'")
    replacement: str = Field(description="Dotted replacement, e.g. 'text.$1$2'")


class TokenForgeConfig(BaseModel):
    """
    Complete pipeline configuration.

    Example:
        TokenForgeConfig(
            outputs={"theme.tokens.json": MappingTable(targets={...})},
            rewrite_rules=[RewriteRuleSpec(pattern="Color Primitives", replacement="color")],
            themes={"default": ("Light", "Dark")},
        )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rem_base: float = Field(default=DEFAULT_REM_BASE, gt=0, description="Pixels per rem")
    dimension_types: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_DIMENSION_TYPES),
        description="Token types converted from px to rem",
    )
    modes_key: str = Field(default=DEFAULT_MODES_KEY, description="$extensions key of mode maps")
    outputs: dict[str, MappingTable] = Field(
        default_factory=dict, description="Output file name -> mapping table"
    )
    rewrite_rules: list[RewriteRuleSpec] = Field(default_factory=list)
    themes: dict[str, tuple[str, str]] = Field(
        default_factory=dict, description="Theme variant -> (light mode, dark mode)"
    )
    size_modes: tuple[str, str, str] | None = Field(
        default=("Base", "Compact", "Comfortable"),
        description="(base, compact, comfortable) mode names, shared by all variants",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> TokenForgeConfig:
        self.rules()
        for theme in self.themes:
            validate_dimensions(self.dimensions_for(theme))
        return self

    def rules(self) -> list[RewriteRule]:
        """Parsed, order-checked rewrite rules."""
        return parse_rules((rule.pattern, rule.replacement) for rule in self.rewrite_rules)

    def dimensions_for(self, theme: str) -> list[ModeDimension]:
        """Dimensions for one theme variant: its light/dark pair, then size.

        Raises:
            ConfigError: If the theme is not configured.
        """
        if theme not in self.themes:
            known = ", ".join(self.themes) or "none"
            raise ConfigError(f"unknown theme '{theme}' (configured: {known})")

        dimensions = [light_dark(theme, *self.themes[theme])]
        if self.size_modes is not None:
            dimensions.append(size(*self.size_modes))
        return dimensions


def parse_config(data: Any, source: str = "<config>") -> TokenForgeConfig:
    """Validate decoded configuration data.

    Raises:
        ConfigError: If the data does not describe a valid configuration.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {source} must be a mapping")
    try:
        return TokenForgeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {source}: {e}") from e


def load_config(path: Path) -> TokenForgeConfig:
    """Load configuration from a YAML file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if not path.exists():
        raise ConfigError(f"Configuration not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not data:
        raise ConfigError(f"Empty configuration: {path}")

    config = parse_config(data, source=str(path))
    logger.info(f"Loaded configuration from {path}: {len(config.outputs)} output(s)")
    return config


def default_config() -> TokenForgeConfig:
    """The bundled Figma -> Tailwind configuration."""
    text = resources.files("tokenforge").joinpath(DEFAULTS_FILE).read_text(encoding="utf-8")
    return parse_config(yaml.safe_load(text), source=DEFAULTS_FILE)
