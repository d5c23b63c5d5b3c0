"""Tests for the transform registry and built-in transforms."""

import logging

import pytest

from chassis_tokens.errors import ConfigurationError, TokenValueError
from chassis_tokens.ir import PlatformOptions, ReferenceStyle, Token
from chassis_tokens.transforms import (
    NameTransform,
    TransformRegistry,
    ValueTransform,
    always_literal,
    android_resource_kind,
    default_transforms,
    format_reference,
    kebab_case,
    numeric_font_weight,
    pascal_case,
    render_literal,
    snake_case,
)


@pytest.fixture
def registry() -> TransformRegistry:
    return default_transforms()


@pytest.fixture
def web() -> PlatformOptions:
    return PlatformOptions(prefix="cx", size_unit="rem")


def _token(path: str, token_type: str, value, **metadata) -> Token:
    token = Token(path=tuple(path.split(".")), type=token_type, value=value)
    return token.with_metadata(**metadata) if metadata else token


def _apply(registry: TransformRegistry, name: str, token: Token, options=None):
    return registry.get_value(name)(token, options or PlatformOptions())


class TestRegistry:
    def test_unknown_transform(self, registry: TransformRegistry):
        with pytest.raises(ConfigurationError, match="Unknown transform 'size/em'"):
            registry.get("size/em")

    def test_wrong_kind(self, registry: TransformRegistry):
        with pytest.raises(ConfigurationError, match="not a name transform"):
            registry.get_name("size/rem")
        with pytest.raises(ConfigurationError, match="not a value transform"):
            registry.get_value("name/kebab")

    def test_duplicate_name(self):
        transform = NameTransform("name/test", lambda t, o: "x")

        with pytest.raises(ConfigurationError, match="defined twice"):
            TransformRegistry([transform, transform])

    def test_built_in_names(self, registry: TransformRegistry):
        for name in ("name/kebab", "size/rem", "color/android", "typography/scss-map"):
            assert name in registry

    def test_value_transforms_are_transitive(self, registry: TransformRegistry):
        for name in registry.names():
            transform = registry.get(name)
            if isinstance(transform, ValueTransform):
                assert transform.transitive


class TestNames:
    def test_kebab(self):
        assert kebab_case(("color", "brandPrimary")) == "color-brand-primary"
        assert kebab_case(("space", "sm"), "cx") == "cx-space-sm"

    def test_snake(self):
        assert snake_case(("color", "palette", "blue", "500")) == "color_palette_blue_500"
        assert snake_case(("font", "lineHeight")) == "font_line_height"

    def test_pascal(self):
        assert pascal_case(("color", "brand", "primary")) == "ColorBrandPrimary"
        assert pascal_case(("space", "1x")) == "Space1x"

    def test_name_transforms_use_prefix(self, registry: TransformRegistry, web: PlatformOptions):
        token = _token("color.text.body", "color", "#000")

        assert registry.get_name("name/kebab")(token, web) == "cx-color-text-body"
        assert registry.get_name("name/snake")(token, PlatformOptions()) == "color_text_body"


class TestSizes:
    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            ("size/rem", "8", "0.5rem"),
            ("size/rem", 24, "1.5rem"),
            ("size/rem", "8px 16px", "0.5rem 1rem"),
            ("size/rem", "2rem", "2rem"),
            ("size/rem", "50%", "50%"),
            ("size/px", "8", "8px"),
            ("size/px", "1rem", "16px"),
            ("size/vw", "16", "1vw"),
        ],
    )
    def test_web_units(self, registry: TransformRegistry, name, value, expected):
        assert _apply(registry, name, _token("space.sm", "dimension", value)) == expected

    def test_rem_uses_base_font_size(self, registry: TransformRegistry):
        options = PlatformOptions(base_px_font_size=10)

        token = _token("space.sm", "dimension", "5")

        assert _apply(registry, "size/rem", token, options) == "0.5rem"

    def test_rem_rounds_to_four_places(self, registry: TransformRegistry):
        assert _apply(registry, "size/rem", _token("space.odd", "dimension", "1")) == "0.0625rem"

    def test_invalid_number(self, registry: TransformRegistry):
        with pytest.raises(TokenValueError) as exc_info:
            _apply(registry, "size/rem", _token("space.bad", "dimension", "abc"))

        message = str(exc_info.value)
        assert "Invalid Number: 'space.bad: abc' is not a valid number" in message
        assert "cannot transform to 'rem'" in message
        assert exc_info.value.context.target == "rem"

    def test_unitless_line_height_is_a_ratio(self, registry: TransformRegistry):
        token = _token("font.lineHeight.body", "lineHeight", "1.5")

        assert _apply(registry, "size/rem", token) == "1.5"
        assert _apply(registry, "size/android", token) == "1.5"

    def test_android_dp(self, registry: TransformRegistry):
        assert _apply(registry, "size/android", _token("space.sm", "dimension", "8")) == "8dp"

    def test_android_sp_for_font_sizes(self, registry: TransformRegistry):
        token = _token("font.size.body", "fontSize", "16")

        assert _apply(registry, "size/android", token) == "16sp"

    def test_android_sp_for_expanded_paragraph_spacing(self, registry: TransformRegistry):
        token = _token(
            "typography.body.paragraphSpacing", "dimension", "12", originalType="paragraphSpacing"
        )

        assert _apply(registry, "size/android", token) == "12sp"

    @pytest.mark.parametrize(
        ("token_type", "value", "expected"),
        [
            ("dimension", "8", "CGFloat(8)"),
            ("lineHeight", "150%", "CGFloat(1.5)"),
            ("dimension", "1rem", "CGFloat(16)"),
            ("opacity", "0.5", "CGFloat(0.5)"),
        ],
    )
    def test_cgfloat(self, registry: TransformRegistry, token_type, value, expected):
        assert _apply(registry, "size/cgfloat", _token("x.y", token_type, value)) == expected

    def test_sizes_skip_composites(self, registry: TransformRegistry):
        transform = registry.get_value("size/rem")

        assert not transform.matches(_token("x.y", "dimension", {"a": "1"}))


class TestNumbers:
    def test_percent_becomes_fraction(self, registry: TransformRegistry):
        assert _apply(registry, "number/web", _token("opacity.muted", "opacity", "50%")) == 0.5

    def test_plain_number(self, registry: TransformRegistry):
        assert _apply(registry, "number/web", _token("duration.fast", "duration", "150")) == 150.0

    def test_number_with_unit_passes_through(self, registry: TransformRegistry):
        token = _token("duration.fast", "duration", "150ms")

        assert _apply(registry, "number/web", token) == "150ms"

    def test_non_number_raises(self, registry: TransformRegistry):
        with pytest.raises(TokenValueError, match="cannot transform to 'number'"):
            _apply(registry, "number/web", _token("opacity.bad", "opacity", "half"))

    def test_math(self, registry: TransformRegistry):
        assert _apply(registry, "math/resolve", _token("space.md", "dimension", "8 * 2")) == 16

    def test_math_in_composite(self, registry: TransformRegistry):
        token = _token("shadow.sm", "shadow", {"blur": "2 * 2", "color": "#000"})

        assert _apply(registry, "math/resolve", token) == {"blur": 4, "color": "#000"}

    def test_math_error(self, registry: TransformRegistry):
        with pytest.raises(TokenValueError, match="Division by zero"):
            _apply(registry, "math/resolve", _token("space.bad", "dimension", "4 / 0"))


class TestColors:
    def test_css(self, registry: TransformRegistry):
        assert _apply(registry, "color/css", _token("color.red", "color", "#ff0000")) == (
            "rgba(255, 0, 0, 1)"
        )

    def test_android(self, registry: TransformRegistry):
        assert _apply(registry, "color/android", _token("color.red", "color", "#FF0000")) == (
            "#ffff0000"
        )

    def test_invalid_color_passes_through_with_warning(self, registry: TransformRegistry, caplog):
        with caplog.at_level(logging.WARNING, logger="chassis_tokens.transforms"):
            result = _apply(registry, "color/css", _token("color.bad", "color", "not-a-color"))

        assert result == "not-a-color"
        assert "Invalid color token: color.bad (not-a-color)" in caplog.text


class TestFonts:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Bold", 700),
            ("Semi Bold", 600),
            ("semibold", 600),
            ("Bold Italic", 700),
            ("Regular", 400),
            ("Extra-Light", 200),
            (500, 500),
            ("300", 300),
            ("Unknown", 400),
        ],
    )
    def test_numeric_weight(self, value, expected):
        assert numeric_font_weight(value) == expected

    def test_weight_slug(self, registry: TransformRegistry):
        token = _token("font.weight.semi", "fontWeight", "Semi Bold")

        assert _apply(registry, "font-weight/slug", token) == "semi-bold"

    def test_first_family(self, registry: TransformRegistry):
        token = _token("font.family.base", "fontFamily", "'Inter', -apple-system, sans-serif")

        assert _apply(registry, "font-family/first", token) == "Inter"

    def test_swift_string_escapes_quotes(self, registry: TransformRegistry):
        token = _token("content.quote", "content", 'Say "hi"')

        assert _apply(registry, "string/swift", token) == '"Say \\"hi\\""'

    def test_asset_url(self, registry: TransformRegistry):
        token = _token("icon.logo", "asset", "img/logo.svg")

        assert _apply(registry, "asset/web", token) == 'url("img/logo.svg")'

    def test_asset_swift_is_quoted(self, registry: TransformRegistry):
        token = _token("icon.logo", "asset", "img/logo.svg")

        assert _apply(registry, "asset/swift", token) == '"img/logo.svg"'


class TestComposites:
    def test_typography_scss_map(self, registry: TransformRegistry, web: PlatformOptions):
        token = _token(
            "typography.body",
            "typography",
            {
                "fontFamily": "Inter, sans-serif",
                "fontWeight": "Bold",
                "fontSize": "16",
                "lineHeight": "1.5",
                "fontStyle": "italic",
            },
        )

        assert _apply(registry, "typography/scss-map", token, web) == (
            '("font-family": (Inter, sans-serif), "font-weight": 700, '
            '"font-size": 1rem, "line-height": 1.5, "font-style": italic)'
        )

    def test_typography_scss_map_sub_references(
        self, registry: TransformRegistry, web: PlatformOptions
    ):
        token = _token(
            "typography.body",
            "typography",
            {"fontFamily": "Inter", "fontWeight": "Bold", "fontSize": "16"},
            subReferences={"fontWeight": "var(--#{$prefix}font-weight-bold)"},
        )

        assert _apply(registry, "typography/scss-map", token, web) == (
            '("font-family": Inter, "font-weight": var(--#{$prefix}font-weight-bold), '
            '"font-size": 1rem)'
        )

    def test_shadow_css(self, registry: TransformRegistry):
        token = _token(
            "shadow.sm",
            "shadow",
            {"offsetX": "0", "offsetY": "2", "blur": "4", "spread": "0", "color": "#000000"},
        )

        assert _apply(registry, "shadow/css", token) == "0px 2px 4px 0px rgba(0, 0, 0, 1)"

    def test_multi_layer_inner_shadow(self, registry: TransformRegistry, web: PlatformOptions):
        token = _token(
            "shadow.layered",
            "shadow",
            [
                {"offsetX": "0", "offsetY": "1", "blur": "2", "color": "#000000"},
                {
                    "offsetX": "0",
                    "offsetY": "0",
                    "blur": "16",
                    "color": "#ffffff",
                    "type": "innerShadow",
                },
            ],
        )

        assert _apply(registry, "shadow/css", token, web) == (
            "0rem 0.0625rem 0.125rem 0rem rgba(0, 0, 0, 1), "
            "0rem 0rem 1rem 0rem rgba(255, 255, 255, 1) inset"
        )

    def test_shadow_swift(self, registry: TransformRegistry):
        token = _token("shadow.sm", "shadow", {"offsetX": "0", "blur": "4", "color": "#ff0000"})

        assert _apply(registry, "shadow/swift", token) == (
            '[["offsetX": CGFloat(0), "blur": CGFloat(4), '
            '"color": UIColor(red: 1.000, green: 0.000, blue: 0.000, alpha: 1)]]'
        )

    def test_typography_swift(self, registry: TransformRegistry):
        token = _token(
            "typography.body",
            "typography",
            {"fontFamily": "Inter, sans-serif", "fontWeight": "Semi Bold", "fontSize": "16"},
        )

        assert _apply(registry, "typography/swift", token) == (
            '["fontFamily": "Inter", "fontWeight": "semi-bold", "fontSize": CGFloat(16)]'
        )


class TestReferences:
    def test_android_resource_kind(self):
        assert android_resource_kind("dimension") == "dimen"
        assert android_resource_kind("fontSize") == "dimen"
        assert android_resource_kind("color") == "color"
        assert android_resource_kind("fontFamily") == "string"
        assert android_resource_kind("opacity") == "integer"
        assert android_resource_kind("content") == "string"
        assert android_resource_kind(None) == "string"

    def test_base_colors_are_always_literal(self):
        token = _token("color.base.inverse", "color", "{color.base.black}")

        assert always_literal(token, token.value)

    def test_size_arithmetic_is_always_literal(self):
        token = _token("space.md", "dimension", "{space.sm} * 2")

        assert always_literal(token, token.value)
        assert not always_literal(token, "{space.sm}")

    def test_colors_may_reference(self):
        token = _token("color.brand.primary", "color", "{color.palette.blue.500}")

        assert not always_literal(token, token.value)

    def test_css_reference(self):
        options = PlatformOptions(prefix="cx", reference_style=ReferenceStyle.CSS_VAR)
        token = _token("space.lg", "dimension", "{space.sm}")
        target = _token("space.sm", "dimension", "8")

        reference = format_reference(token, target, "cx-space-sm", options)

        assert reference == "var(--#{$prefix}space-sm)"

    def test_android_reference(self):
        options = PlatformOptions(reference_style=ReferenceStyle.ANDROID_RESOURCE)
        token = _token("color.brand.primary", "color", "{color.palette.blue.500}")
        target = _token("color.palette.blue.500", "color", "#0d6efd")

        assert format_reference(token, target, "color_palette_blue_500", options) == (
            "@color/color_palette_blue_500"
        )

    def test_no_reference_style(self):
        token = _token("space.lg", "dimension", "{space.sm}")

        assert format_reference(token, token, "space_sm", PlatformOptions()) is None


class TestRenderLiteral:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, "true"), (16, "16"), (1.5, "1.5"), (2.0, "2"), (None, ""), ("Inter", "Inter")],
    )
    def test_render(self, value, expected):
        assert render_literal(value) == expected
