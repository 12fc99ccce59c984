"""Shared pytest fixtures for tokenforge tests."""

import copy
from typing import Any

import pytest

from tokenforge.config import TokenForgeConfig, default_config
from tokenforge.tree import Group, parse_tree


def _color(value: str, **modes: str) -> dict[str, Any]:
    token: dict[str, Any] = {"$type": "color", "$value": value}
    if modes:
        token["$extensions"] = {"mode": modes}
    return token


def _dimension(value: Any, modes: dict[str, Any] | None = None) -> dict[str, Any]:
    token: dict[str, Any] = {"$type": "dimension", "$value": value}
    if modes:
        token["$extensions"] = {"mode": modes}
    return token


# A trimmed-down Figma variables export with the group layout the bundled
# configuration expects.
SOURCE_TOKENS: dict[str, Any] = {
    "Color Primitives": {
        "Slate": {
            "50": _color("#f8fafc"),
            "500": _color("#64748b"),
            "900": _color("#0f172a"),
        },
        "Brand": {
            "500": _color("#6366f1"),
            "700": _color("#4338ca"),
        },
    },
    "Theme": {
        "Background": {
            "Primary": {
                "$type": "color",
                "$value": "{Color Primitives.Slate.50}",
                "$extensions": {
                    "mode": {
                        "Light": "{Color Primitives.Slate.50}",
                        "Dark": "{Color Primitives.Slate.900}",
                        "Brand #2 - Light": "{Color Primitives.Brand.500}",
                        "Brand #2 - Dark": "{Color Primitives.Brand.500}",
                    }
                },
            },
            "Utilities": {
                "Debug": _color("#ff00ff"),
            },
        },
        "Text": {
            "Default": {
                "$type": "color",
                "$value": "{Color Primitives.Slate.900}",
                "$extensions": {
                    "mode": {
                        "Light": "{Color Primitives.Slate.900}",
                        "Dark": "{Color Primitives.Slate.50}",
                    }
                },
            },
            "Utilities": {
                "Debug": _color("#00ff00"),
            },
        },
        "Icon": {
            "Default": _color("{Color Primitives.Slate.500}"),
        },
        "Border": {
            "Default": {
                "$type": "color",
                "$value": "{Color Primitives.Slate.500}",
                "$extensions": {
                    "mode": {
                        "Light": "{Color Primitives.Slate.500}",
                        "Dark": "{Color Primitives.Slate.500}",
                    }
                },
            },
            "Utilities": {
                "Debug": _color("#0000ff"),
            },
        },
        "Heading": {
            "Font Family": {
                "$type": "string",
                "$value": "{Typography Primitives.Inter.Family Sans}",
            },
            "Font Size": _dimension(
                "32px", {"Base": "32px", "Compact": "28px", "Comfortable": "36px"}
            ),
            "Font Size Small": _dimension("24px"),
            "Font Weight": {
                "$type": "number",
                "$value": "{Typography Primitives.Weight.Weight Bold}",
            },
            "Letter Spacing": _dimension("-0.5px"),
            "Line Height": _dimension("40px"),
        },
    },
    "Size": {
        "Space": {
            "0": _dimension("0px"),
            "2": _dimension("8px", {"Base": "8px", "Compact": "8px", "Comfortable": "8px"}),
            "4": _dimension("16px", {"Base": "16px", "Compact": "12px", "Comfortable": "20px"}),
            "Gutter": _dimension("{Size.Space.4}"),
        },
        "Icon": {
            "Small": _dimension("16px"),
        },
        "Radius": {
            "Medium": _dimension("8px"),
        },
        "Depth": {
            "Raised": {"$type": "number", "$value": 10},
        },
        "Blur": {
            "Small": _dimension("4px"),
        },
        "Stroke": {
            "Border": _dimension("1px"),
            "Focus Ring": _dimension("2px"),
        },
    },
    "Typography Primitives": {
        "Inter": {
            "Family Sans": {"$type": "string", "$value": "Inter"},
            "Family Mono": {"$type": "string", "$value": "JetBrains Mono"},
        },
        "Scale": {
            "Scale 100": _dimension("14px"),
            "Scale 200": _dimension("16px"),
        },
        "Weight": {
            "Weight Regular": {"$type": "number", "$value": 400},
            "Weight Bold": {"$type": "number", "$value": 700},
            "Weight Bold Italic": {"$type": "number", "$value": 700},
        },
    },
    "Effect-styles": {
        "Drop Shadow": {
            "Small": {
                "$type": "shadow",
                "$value": [
                    {
                        "inset": False,
                        "color": "{Color Primitives.Slate.900}",
                        "offsetX": "0px",
                        "offsetY": "1px",
                        "blur": "2px",
                        "spread": "0px",
                    }
                ],
            },
        },
        "Inner Shadow": {
            "Small": {
                "$type": "shadow",
                "$value": {
                    "inset": True,
                    "color": "#0000001a",
                    "offsetX": "0px",
                    "offsetY": "1px",
                    "blur": "2px",
                    "spread": "0px",
                },
            },
        },
    },
    "Typography-styles": {
        "Heading": {
            "$type": "typography",
            "$value": {
                "fontFamily": "{Theme.Heading.Font Family}",
                "fontSize": "{Theme.Heading.Font Size}",
                "fontWeight": "{Theme.Heading.Font Weight}",
                "lineHeight": "{Theme.Heading.Line Height}",
                "letterSpacing": "{Theme.Heading.Letter Spacing}",
            },
        },
        ".Utilities": {
            "Debug": {"$type": "typography", "$value": {"fontFamily": "Comic Sans MS"}},
        },
    },
}


@pytest.fixture
def source_data() -> dict[str, Any]:
    """Raw decoded token document (a fresh copy per test)."""
    return copy.deepcopy(SOURCE_TOKENS)


@pytest.fixture
def source_tree(source_data: dict[str, Any]) -> Group:
    """Parsed source token tree."""
    return parse_tree(source_data)


@pytest.fixture
def config() -> TokenForgeConfig:
    """Bundled Figma -> Tailwind configuration."""
    return default_config()
