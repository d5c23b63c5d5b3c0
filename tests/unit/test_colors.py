"""Tests for color parsing and platform encodings."""

import pytest

from chassis_tokens.colors import (
    Rgba,
    is_valid_color,
    parse_color,
    to_android_argb,
    to_css_rgba,
    to_uicolor,
)


class TestParseColor:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("#ff0000", Rgba(255, 0, 0)),
            ("#f00", Rgba(255, 0, 0)),
            ("red", Rgba(255, 0, 0)),
            ("rgb(13, 110, 253)", Rgba(13, 110, 253)),
            ("rgba(255, 0, 0, 0.5)", Rgba(255, 0, 0, 0.5)),
            ("rgba(255, 0, 0, 50%)", Rgba(255, 0, 0, 0.5)),
            ("rgba(#000000, 0.25)", Rgba(0, 0, 0, 0.25)),
        ],
    )
    def test_valid(self, value: str, expected: Rgba):
        assert parse_color(value) == expected

    def test_hex_with_alpha(self):
        color = parse_color("#ff000080")

        assert (color.red, color.green, color.blue) == (255, 0, 0)
        assert color.alpha == pytest.approx(128 / 255)

    @pytest.mark.parametrize("value", ["not-a-color", "rgba(300, 0, 0, 1)", "", 12])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_color(value)

    def test_is_valid_color(self):
        assert is_valid_color("#0d6efd")
        assert not is_valid_color("#zzzzzz")


class TestEncodings:
    def test_css_rgba(self):
        assert to_css_rgba(Rgba(255, 0, 0, 0.5)) == "rgba(255, 0, 0, 0.5)"
        assert to_css_rgba(Rgba(13, 110, 253)) == "rgba(13, 110, 253, 1)"

    def test_css_alpha_rounded(self):
        assert to_css_rgba(parse_color("#ff000080")) == "rgba(255, 0, 0, 0.5)"

    def test_uicolor(self):
        assert to_uicolor(Rgba(255, 0, 0)) == (
            "UIColor(red: 1.000, green: 0.000, blue: 0.000, alpha: 1)"
        )
        assert to_uicolor(Rgba(0, 0, 255, 0.5)) == (
            "UIColor(red: 0.000, green: 0.000, blue: 1.000, alpha: 0.5)"
        )

    def test_android_argb_puts_alpha_first(self):
        assert to_android_argb(Rgba(255, 0, 0)) == "#ffff0000"
        assert to_android_argb(Rgba(255, 0, 0, 0.5)) == "#80ff0000"

    def test_hex8(self):
        assert Rgba(13, 110, 253).hex8 == "0d6efdff"
