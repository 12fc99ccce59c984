"""End-to-end tests: reshape -> rewrite -> resolve -> flatten, plus file I/O."""

from __future__ import annotations

import json

import pytest

from tokenforge.errors import TokenShapeError
from tokenforge.pipeline import (
    build_outputs,
    flatten_tokens,
    kebab_case,
    load_token_file,
    reference_to_var,
    resolve_variants,
    write_outputs,
    write_token_file,
)
from tokenforge.tree import get_node, to_data


@pytest.fixture
def outputs(source_tree, config):
    return build_outputs(source_tree, config)


class TestBuildOutputs:
    def test_one_tree_per_output_file(self, outputs):
        assert set(outputs) == {"theme.tokens.json", "typography.tokens.json"}

    def test_references_point_at_new_coordinates(self, outputs):
        theme = outputs["theme.tokens.json"]

        primary = get_node(theme, ["background-color", "Primary"])
        assert primary.value == "{color.Slate.50}"
        assert primary.modes["Brand #2 - Light"] == "{color.Brand.500}"
        assert get_node(theme, ["font", "Heading"]).value == "{font.Inter.Sans}"
        assert get_node(theme, ["font-weight", "Heading"]).value == "{font-weight.Bold}"
        assert get_node(theme, ["spacing", "Gutter"]).value == "{spacing.4}"
        assert get_node(theme, ["shadow", "Small"]).value[0]["color"] == "{color.Slate.900}"

    def test_rewritten_references_resolve(self, outputs):
        theme = outputs["theme.tokens.json"]

        assert get_node(theme, ["font", "Inter", "Sans"]).value == ["Inter", "sans-serif"]
        assert get_node(theme, ["font-weight", "Bold"]).value == 700
        assert get_node(theme, ["color", "Slate", "50"]).value == "#f8fafc"

    def test_typography_output(self, outputs):
        typography = outputs["typography.tokens.json"]

        heading = get_node(typography, ["typography", "Heading"])
        assert heading.value == {
            "fontFamily": "{font.Heading}",
            "fontSize": "{text.Heading}",
            "fontWeight": "{font-weight.Heading}",
            "lineHeight": "{leading.Heading}",
            "letterSpacing": "{tracking.Heading}",
        }
        assert ".Utilities" not in typography.children["typography"].children


class TestResolveVariants:
    def test_one_tree_per_theme(self, outputs, config):
        resolved = resolve_variants(outputs["theme.tokens.json"], config)

        assert list(resolved) == ["default", "brand-2", "brand-3"]

    def test_default_theme(self, outputs, config):
        resolved = resolve_variants(outputs["theme.tokens.json"], config, themes=["default"])
        theme = resolved["default"]

        assert get_node(theme, ["background-color", "Primary"]).value == (
            "light-dark({color.Slate.50}, {color.Slate.900})"
        )
        assert get_node(theme, ["border-color", "Default"]).value == "{color.Slate.500}"
        assert get_node(theme, ["spacing", "4"]).value == (
            "var(--is-size-base, 1rem) var(--is-size-compact, 0.75rem) "
            "var(--is-size-comfortable, 1.25rem)"
        )
        assert get_node(theme, ["spacing", "2"]).value == "0.5rem"

    def test_brand_theme_selects_its_own_modes(self, outputs, config):
        resolved = resolve_variants(outputs["theme.tokens.json"], config)

        primary = get_node(resolved["brand-2"], ["background-color", "Primary"])
        assert primary.value == "{color.Brand.500}"
        assert "Slate" not in primary.value

    def test_missing_brand_modes_fall_back(self, outputs, config):
        resolved = resolve_variants(outputs["theme.tokens.json"], config)

        text = get_node(resolved["brand-3"], ["text-color", "Default"])
        assert text.value == "{color.Slate.900}"

    def test_passes_leave_the_input_alone(self, outputs, config):
        theme = outputs["theme.tokens.json"]
        before = to_data(theme)

        resolve_variants(theme, config)

        assert to_data(theme) == before


class TestFiles:
    def test_write_then_load(self, outputs, tmp_path):
        target = tmp_path / "out" / "theme.tokens.json"
        path = write_token_file(target, outputs["theme.tokens.json"])

        text = path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert json.loads(text)["spacing"]["4"]["$extensions"]["mode"]["Compact"] == "0.75rem"

        reloaded = load_token_file(path)
        assert to_data(reloaded) == to_data(outputs["theme.tokens.json"])

    def test_write_outputs(self, outputs, tmp_path):
        paths = write_outputs(outputs, tmp_path)

        assert sorted(p.name for p in paths) == ["theme.tokens.json", "typography.tokens.json"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(TokenShapeError, match="Invalid JSON"):
            load_token_file(path)


class TestFlatten:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("background-color Primary", "background-color-primary"),
            ("Brand #2 - Light", "brand-2-light"),
            ("fontWeight", "font-weight"),
            ("color.Slate.500", "color-slate-500"),
            ("text Heading Small", "text-heading-small"),
            ("spacing 2XL", "spacing-2-xl"),
            ("color Größe 500", "color-größe-500"),
            ("Ärger Überschrift", "ärger-überschrift"),
            ("borderRadiusXL", "border-radius-xl"),
            ("HTMLHeading", "html-heading"),
        ],
    )
    def test_kebab_case(self, text, expected):
        assert kebab_case(text) == expected

    def test_non_ascii_keys_stay_distinct(self):
        assert kebab_case("color Größe") != kebab_case("color Grüße")

    def test_reference_to_var(self):
        assert reference_to_var("light-dark({color.Slate.50}, {color.Slate.900})") == (
            "light-dark(var(--color-slate-50), var(--color-slate-900))"
        )

    def test_flatten_resolved_theme(self, outputs, config):
        resolved = resolve_variants(outputs["theme.tokens.json"], config, themes=["default"])
        theme = resolved["default"]

        leaves = {leaf.name: leaf for leaf in flatten_tokens(theme)}

        primary = leaves["background-color-primary"]
        assert primary.path == ("background-color", "Primary")
        assert primary.type == "color"
        assert primary.value == "light-dark({color.Slate.50}, {color.Slate.900})"
        assert leaves["default-border-width"].value == "1px"
        assert leaves["text-color-icon-default"].value == "{color.Slate.500}"
        assert leaves["font-inter-sans"].value == ["Inter", "sans-serif"]
