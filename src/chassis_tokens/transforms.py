"""
Transform registry.

A transform is one of two kinds:

- ``NameTransform`` turns a token path into a platform identifier.
- ``ValueTransform`` turns a resolved token value into a platform literal.
  It is scoped by a predicate and marked transitive when it also applies
  to tokens whose value comes from a reference.

The registry is built once per build and handed to the task matrix and
the token dictionaries. Nothing registers into it afterwards.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from . import colors
from .errors import ConfigurationError, ErrorContext, TokenValueError
from .filters import TOKEN_CATEGORIES, in_category
from .ir.platforms import PlatformOptions, ReferenceStyle
from .ir.tokens import Token
from .math_eval import MathError, check_and_evaluate, format_number
from .references import is_reference

logger = logging.getLogger(__name__)

# Font weight names -> numeric weights
FONT_WEIGHTS: dict[str, int] = {
    "hairline": 100,
    "thin": 100,
    "extralight": 200,
    "ultralight": 200,
    "extraleicht": 200,
    "light": 300,
    "leicht": 300,
    "normal": 400,
    "regular": 400,
    "buch": 400,
    "book": 400,
    "medium": 500,
    "kraeftig": 500,
    "kräftig": 500,
    "semibold": 600,
    "demibold": 600,
    "halbfett": 600,
    "bold": 700,
    "dreiviertelfett": 700,
    "extrabold": 800,
    "ultrabold": 800,
    "fett": 800,
    "black": 900,
    "heavy": 900,
    "super": 900,
    "extrafett": 900,
    "ultra": 950,
    "ultrablack": 950,
    "extrablack": 950,
}
DEFAULT_NUMERIC_WEIGHT = 400

# Android resource kind per token category, checked in this order
ANDROID_RESOURCE_KINDS: dict[str, str] = {
    "size": "dimen",
    "color": "color",
    "string": "string",
    "number": "integer",
}
ANDROID_TYPE_KINDS: dict[str, str] = {
    "content": "string",
    "duration": "integer",
}
DEFAULT_ANDROID_KIND = "string"

# Size sub-values that scale with the user's font size
FONT_SIZE_KEYS: frozenset[str] = frozenset({"fontSize", "lineHeight", "paragraphSpacing"})

# Typography sub-property -> CSS property
CSS_TYPOGRAPHY_KEYS: dict[str, str] = {
    "fontFamily": "font-family",
    "fontWeight": "font-weight",
    "fontSize": "font-size",
    "fontStyle": "font-style",
    "letterSpacing": "letter-spacing",
    "lineHeight": "line-height",
    "paragraphSpacing": "paragraph-spacing",
    "paragraphIndent": "text-indent",
    "textCase": "text-transform",
    "textDecoration": "text-decoration",
}

# Metadata key holding ready-made references for composite sub-values
SUB_REFERENCES = "subReferences"

SHADOW_LENGTH_KEYS: tuple[str, ...] = ("offsetX", "offsetY", "blur", "spread")
INNER_SHADOW = "innerShadow"

_NUMBER = re.compile(r"^([+-]?\d*\.?\d+)([a-zA-Z%]*)$")
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")


# =============================================================================
# Transform kinds
# =============================================================================


class TransformKind(StrEnum):
    NAME = "name"
    VALUE = "value"


@dataclass(frozen=True)
class NameTransform:
    """Derives a platform identifier from a token."""

    name: str
    fn: Callable[[Token, PlatformOptions], str] = field(repr=False)
    description: str = ""
    kind: TransformKind = field(default=TransformKind.NAME, init=False)

    def __call__(self, token: Token, options: PlatformOptions) -> str:
        return self.fn(token, options)


@dataclass(frozen=True)
class ValueTransform:
    """Converts a resolved token value into a platform literal."""

    name: str
    matches: Callable[[Token], bool] = field(repr=False)
    fn: Callable[[Token, PlatformOptions], Any] = field(repr=False)
    transitive: bool = True
    description: str = ""
    kind: TransformKind = field(default=TransformKind.VALUE, init=False)

    def __call__(self, token: Token, options: PlatformOptions) -> Any:
        return self.fn(token, options)


Transform = NameTransform | ValueTransform


class TransformRegistry:
    """Immutable mapping of transform name to transform."""

    def __init__(self, transforms: Iterable[Transform]):
        registered: dict[str, Transform] = {}
        for transform in transforms:
            if transform.name in registered:
                raise ConfigurationError(f"Transform '{transform.name}' is defined twice")
            registered[transform.name] = transform
        self._transforms: Mapping[str, Transform] = registered

    def get(self, name: str) -> Transform:
        try:
            return self._transforms[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown transform '{name}'. "
                f"Known transforms: {', '.join(sorted(self._transforms))}"
            ) from None

    def get_name(self, name: str) -> NameTransform:
        transform = self.get(name)
        if not isinstance(transform, NameTransform):
            raise ConfigurationError(f"Transform '{name}' is not a name transform")
        return transform

    def get_value(self, name: str) -> ValueTransform:
        transform = self.get(name)
        if not isinstance(transform, ValueTransform):
            raise ConfigurationError(f"Transform '{name}' is not a value transform")
        return transform

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def names(self) -> list[str]:
        return list(self._transforms)


# =============================================================================
# Helpers
# =============================================================================


def _words(path: Iterable[str]) -> list[str]:
    words: list[str] = []
    for segment in path:
        for chunk in _SEPARATORS.split(str(segment)):
            words.extend(w for w in _WORD_BOUNDARY.split(chunk) if w)
    return words


def kebab_case(path: Iterable[str], prefix: str = "") -> str:
    """``("color", "brandPrimary")`` -> ``color-brand-primary``"""
    return "-".join(w.lower() for w in _words([prefix, *path]))


def snake_case(path: Iterable[str], prefix: str = "") -> str:
    return "_".join(w.lower() for w in _words([prefix, *path]))


def pascal_case(path: Iterable[str], prefix: str = "") -> str:
    return "".join(w[:1].upper() + w[1:].lower() for w in _words([prefix, *path]))


def _value_error(token: Token, message: str, target: str) -> TokenValueError:
    return TokenValueError(
        message,
        ErrorContext(token_path=token.dotted_path, raw_value=token.value, target=target),
    )


def _invalid_number(token: Token, target: str) -> TokenValueError:
    return _value_error(
        token,
        f"Invalid Number: '{token.dotted_path}: {token.value}' is not a valid number, "
        f"cannot transform to '{target}'.",
        target,
    )


def parse_number(value: Any) -> tuple[float, str] | None:
    """Split a number literal into (number, unit); None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value), ""
    match = _NUMBER.match(str(value).strip())
    if match is None:
        return None
    return float(match.group(1)), match.group(2)


def render_literal(value: Any) -> str:
    """Format a transformed value for output."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int | float):
        return format_number(value)
    if value is None:
        return ""
    return str(value)


def is_font_size(token: Token) -> bool:
    """Whether a size token scales with font size (``sp``) rather than density (``dp``)."""
    if token.type in ("fontSize", "lineHeight"):
        return True
    if token.original_type in FONT_SIZE_KEYS or token.original_type in ("fontSizes", "lineHeights"):
        return True
    return bool(token.path) and token.path[-1] in FONT_SIZE_KEYS


def _is_line_height(token: Token) -> bool:
    return "lineHeight" in (token.type, token.original_type, token.path[-1] if token.path else None)


def _is_scalar(token: Token) -> bool:
    return not isinstance(token.value, dict | list)


# =============================================================================
# Sizes and numbers
# =============================================================================


def _to_px(number: float, unit: str, options: PlatformOptions) -> float | None:
    if unit in ("", "px"):
        return number
    if unit in ("rem", "em", "vw"):
        return number * options.base_px_font_size
    return None


def convert_size(
    token: Token,
    value: Any,
    unit: str,
    options: PlatformOptions,
    *,
    unitless_ok: bool = False,
) -> str:
    """Convert every space-separated part of a pixel size to ``unit``.

    Parts already in ``unit`` and percentages pass through. Unitless parts
    pass through as ratios when ``unitless_ok`` is set.

    Raises:
        TokenValueError: If a part is not a number.
    """
    parts = str(value).split() if isinstance(value, str) else [value]
    converted: list[str] = []
    for part in parts:
        parsed = parse_number(part)
        if parsed is None:
            raise _invalid_number(token, unit)
        number, part_unit = parsed
        if part_unit == unit or part_unit == "%":
            converted.append(str(part))
            continue
        if unitless_ok and part_unit == "":
            converted.append(format_number(number))
            continue
        px = _to_px(number, part_unit, options)
        if px is None:
            raise _invalid_number(token, unit)
        if unit in ("rem", "vw"):
            px = round(px / options.base_px_font_size, 4)
        converted.append(f"{format_number(px)}{unit}")
    return " ".join(converted)


def _size_transform(unit: str) -> Callable[[Token, PlatformOptions], str]:
    def transform(token: Token, options: PlatformOptions) -> str:
        return convert_size(token, token.value, unit, options, unitless_ok=_is_line_height(token))

    return transform


def _size_android(token: Token, options: PlatformOptions) -> str:
    unit = "sp" if is_font_size(token) else "dp"
    return convert_size(token, token.value, unit, options, unitless_ok=_is_line_height(token))


def _size_cgfloat(token: Token, options: PlatformOptions) -> str:
    parsed = parse_number(token.value)
    if parsed is None:
        raise _invalid_number(token, "CGFloat")
    number, unit = parsed
    if unit == "%":
        number /= 100
    elif unit in ("rem", "em"):
        number *= options.base_px_font_size
    return f"CGFloat({format_number(number)})"


def _number_web(token: Token, options: PlatformOptions) -> Any:
    parsed = parse_number(token.value)
    if parsed is None:
        raise _invalid_number(token, "number")
    number, unit = parsed
    if unit == "%":
        return round(number / 100, 4)
    if unit:
        return token.value
    return number


def _resolve_math(value: Any, token: Token) -> Any:
    if isinstance(value, dict):
        return {k: _resolve_math(v, token) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_math(v, token) for v in value]
    try:
        return check_and_evaluate(value)
    except MathError as e:
        raise _value_error(token, f"Cannot evaluate math: {e}", "number") from e


# =============================================================================
# Colors
# =============================================================================


def _color_transform(
    encode: Callable[[colors.Rgba], str],
) -> Callable[[Token, PlatformOptions], Any]:
    def transform(token: Token, options: PlatformOptions) -> Any:
        return encode_color(token.value, encode, token.dotted_path)

    return transform


def encode_color(value: Any, encode: Callable[[colors.Rgba], str], path: str) -> Any:
    """Encode a color, passing invalid input through with a warning."""
    try:
        return encode(colors.parse_color(value))
    except ValueError:
        logger.warning(f"Invalid color token: {path} ({value})")
        return value


# =============================================================================
# Fonts and strings
# =============================================================================


def numeric_font_weight(value: Any) -> int | Any:
    """``"Semi Bold"`` -> 600. Unknown names map to 400."""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value
    text = str(value)
    parsed = parse_number(text)
    if parsed is not None and not parsed[1]:
        return int(parsed[0]) if parsed[0].is_integer() else parsed[0]
    cleaned = re.sub(r"normal|italic|oblique|[\s_-]", "", text.lower())
    if cleaned not in FONT_WEIGHTS:
        logger.debug("Unknown font weight %r, using %d", value, DEFAULT_NUMERIC_WEIGHT)
    return FONT_WEIGHTS.get(cleaned, DEFAULT_NUMERIC_WEIGHT)


def font_weight_slug(value: Any) -> str:
    return re.sub(r"\s+", "-", str(value).strip()).lower()


def first_font_family(value: Any) -> str:
    """First family of a font stack, without quotes."""
    return str(value).split(",")[0].strip().strip("'\"")


def swift_string(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


# =============================================================================
# Composites
# =============================================================================


def _scss_font_family(value: Any) -> str:
    text = str(value)
    return f"({text})" if "," in text else text


def _typography_scss_map(token: Token, options: PlatformOptions) -> Any:
    value = token.value
    if not isinstance(value, dict):
        return value
    references = token.metadata.get(SUB_REFERENCES) or {}
    entries: list[str] = []
    for key, sub_value in value.items():
        if sub_value is None:
            continue
        css_key = CSS_TYPOGRAPHY_KEYS.get(key, kebab_case([key]))
        if key in references:
            rendered = references[key]
        elif key == "fontFamily":
            rendered = _scss_font_family(sub_value)
        elif key == "fontWeight":
            rendered = render_literal(numeric_font_weight(sub_value))
        elif key in ("fontSize", "paragraphSpacing", "paragraphIndent"):
            rendered = convert_size(token, sub_value, options.size_unit, options)
        elif key == "lineHeight":
            rendered = convert_size(token, sub_value, options.size_unit, options, unitless_ok=True)
        else:
            rendered = render_literal(sub_value)
        entries.append(f'"{css_key}": {rendered}')
    return "(" + ", ".join(entries) + ")"


def _shadow_layers(value: Any) -> list[dict[str, Any]]:
    layers = value if isinstance(value, list) else [value]
    return [layer for layer in layers if isinstance(layer, dict)]


def _shadow_css(token: Token, options: PlatformOptions) -> Any:
    if not isinstance(token.value, dict | list):
        return token.value
    unit = options.size_unit
    rendered: list[str] = []
    for layer in _shadow_layers(token.value):
        lengths = [
            convert_size(token, layer.get(key, 0), unit, options) for key in SHADOW_LENGTH_KEYS
        ]
        color = encode_color(layer.get("color"), colors.to_css_rgba, token.dotted_path)
        inset = " inset" if layer.get("type") == INNER_SHADOW else ""
        rendered.append(f"{' '.join(lengths)} {color}{inset}")
    return ", ".join(rendered)


def _swift_sub_value(token: Token, key: str, value: Any, options: PlatformOptions) -> str:
    if key == "color":
        return render_literal(encode_color(value, colors.to_uicolor, token.dotted_path))
    if key == "fontFamily":
        return swift_string(first_font_family(value))
    if key in ("fontWeight", "fontStyle", "textCase", "textDecoration", "type"):
        return swift_string(font_weight_slug(value) if key == "fontWeight" else value)
    sub_token = token.model_copy(update={"value": value})
    return _size_cgfloat(sub_token, options)


def _swift_dictionary(token: Token, value: dict[str, Any], options: PlatformOptions) -> str:
    entries = [
        f'"{key}": {_swift_sub_value(token, key, sub_value, options)}'
        for key, sub_value in value.items()
        if sub_value is not None
    ]
    return "[" + ", ".join(entries) + "]"


def _typography_swift(token: Token, options: PlatformOptions) -> Any:
    if not isinstance(token.value, dict):
        return token.value
    return _swift_dictionary(token, token.value, options)


def _shadow_swift(token: Token, options: PlatformOptions) -> Any:
    if not isinstance(token.value, dict | list):
        return token.value
    layers = [_swift_dictionary(token, layer, options) for layer in _shadow_layers(token.value)]
    return "[" + ", ".join(layers) + "]"


# =============================================================================
# References
# =============================================================================


def android_resource_kind(token_type: str | None) -> str:
    """Android resource element for a token: ``dimen``, ``color``, ``string`` or ``integer``."""
    if token_type in ANDROID_TYPE_KINDS:
        return ANDROID_TYPE_KINDS[token_type]
    for category, kind in ANDROID_RESOURCE_KINDS.items():
        if (token_type or "") in TOKEN_CATEGORIES[category]:
            return kind
    return DEFAULT_ANDROID_KIND


def is_base_color(token: Token) -> bool:
    return token.type == "color" and len(token.path) > 1 and token.path[1] == "base"


def always_literal(token: Token, raw_value: Any) -> bool:
    """Tokens that render their literal even when references are output.

    Base colors are never referenced. Size tokens whose declared value is
    anything other than a single reference carry arithmetic a reference
    cannot express.
    """
    if is_base_color(token):
        return True
    return in_category(token, "size") and not is_reference(raw_value)


def format_reference(
    token: Token,
    target: Token,
    target_name: str,
    options: PlatformOptions,
) -> str | None:
    """Spell a reference from ``token`` to ``target`` in the platform's syntax.

    Args:
        token: The referencing token.
        target: The referenced token.
        target_name: Platform name of the referenced token.
        options: Platform options.

    Returns:
        The reference text, or None when the platform has no reference syntax.
    """
    if options.reference_style == ReferenceStyle.CSS_VAR:
        return f"var(--{options.css_var_prefix}{kebab_case(target.path)})"
    if options.reference_style == ReferenceStyle.ANDROID_RESOURCE:
        return f"@{android_resource_kind(token.type)}/{target_name}"
    return None


# =============================================================================
# Built-in registry
# =============================================================================


def _of_type(*types: str) -> Callable[[Token], bool]:
    return lambda token: token.type in types


def _scalar_in(category: str) -> Callable[[Token], bool]:
    return lambda token: in_category(token, category) and _is_scalar(token)


def _number_or_size(token: Token) -> bool:
    return (in_category(token, "number") or in_category(token, "size")) and _is_scalar(token)


def _string_scalar(token: Token) -> bool:
    return in_category(token, "string") and _is_scalar(token)


def default_transforms() -> TransformRegistry:
    """Build the registry of built-in transforms."""
    return TransformRegistry(
        [
            # Names
            NameTransform(
                "name/kebab", lambda t, o: kebab_case(t.path, o.prefix), "Kebab case, prefixed"
            ),
            NameTransform("name/pascal", lambda t, o: pascal_case(t.path, o.prefix), "Pascal case"),
            NameTransform("name/snake", lambda t, o: snake_case(t.path, o.prefix), "Snake case"),
            # Math
            ValueTransform(
                "math/resolve",
                lambda t: True,
                lambda t, o: _resolve_math(t.value, t),
                description="Evaluate arithmetic expressions",
            ),
            # Colors
            ValueTransform(
                "color/css", _of_type("color"), _color_transform(colors.to_css_rgba)
            ),
            ValueTransform(
                "color/uicolor", _of_type("color"), _color_transform(colors.to_uicolor)
            ),
            ValueTransform(
                "color/android", _of_type("color"), _color_transform(colors.to_android_argb)
            ),
            # Sizes
            ValueTransform("size/rem", _scalar_in("size"), _size_transform("rem")),
            ValueTransform("size/px", _scalar_in("size"), _size_transform("px")),
            ValueTransform("size/vw", _scalar_in("size"), _size_transform("vw")),
            ValueTransform("size/android", _scalar_in("size"), _size_android),
            ValueTransform("size/cgfloat", _number_or_size, _size_cgfloat),
            # Numbers, fonts and strings
            ValueTransform("number/web", _scalar_in("number"), _number_web),
            ValueTransform(
                "font-weight/numeric",
                _of_type("fontWeight"),
                lambda t, o: numeric_font_weight(t.value),
            ),
            ValueTransform(
                "font-weight/slug", _of_type("fontWeight"), lambda t, o: font_weight_slug(t.value)
            ),
            ValueTransform(
                "font-family/first",
                _of_type("fontFamily"),
                lambda t, o: first_font_family(t.value),
            ),
            ValueTransform("string/swift", _string_scalar, lambda t, o: swift_string(t.value)),
            ValueTransform("asset/web", _of_type("asset"), lambda t, o: f'url("{t.value}")'),
            ValueTransform("asset/swift", _of_type("asset"), lambda t, o: swift_string(t.value)),
            # Composites
            ValueTransform("typography/scss-map", _of_type("typography"), _typography_scss_map),
            ValueTransform("typography/swift", _of_type("typography"), _typography_swift),
            ValueTransform("shadow/css", _of_type("shadow"), _shadow_css),
            ValueTransform("shadow/swift", _of_type("shadow"), _shadow_swift),
        ]
    )
