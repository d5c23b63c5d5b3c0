"""
Filter registry.

Filters are pure predicates over a token's canonical type and path that
select which tokens go into an output file. Elementary filters cover one
category each; composite filters are built with ``|``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .ir.tokens import Token

logger = logging.getLogger(__name__)

# Canonical types per category. A type may sit in several categories.
TOKEN_CATEGORIES: dict[str, frozenset[str]] = {
    "color": frozenset({"color"}),
    "font": frozenset(
        {
            "fontFamily",
            "fontSize",
            "fontStyle",
            "fontWeight",
            "letterSpacing",
            "lineHeight",
            "paragraphSpacing",
            "textCase",
            "textDecoration",
            "typography",
        }
    ),
    "gradient": frozenset({"gradient"}),
    "number": frozenset({"duration", "letterSpacing", "number", "opacity"}),
    "shadow": frozenset({"shadow"}),
    "size": frozenset({"dimension", "fontSize", "lineHeight", "paragraphSpacing"}),
    "string": frozenset(
        {
            "content",
            "fontFamily",
            "fontStyle",
            "fontWeight",
            "string",
            "text",
            "textCase",
            "textDecoration",
            "type",
        }
    ),
    "asset": frozenset({"asset"}),
}

# Color sub-groups holding raw building blocks; never exported as public variables
INTERNAL_COLOR_GROUPS: frozenset[str] = frozenset({"palette", "context", "utility"})
# Color sub-groups that are not themeable
NON_THEME_COLOR_GROUPS: frozenset[str] = frozenset({"base", "utility"})
# Size sub-group of unit primitives
PRIMITIVE_SIZE_GROUP = "dimension"


def in_category(token: Token, category: str) -> bool:
    return (token.type or "") in TOKEN_CATEGORIES[category]


def categories_of(token_type: str | None) -> list[str]:
    """Categories containing ``token_type``, in registry order."""
    return [name for name, types in TOKEN_CATEGORIES.items() if (token_type or "") in types]


def _subgroup(token: Token) -> str | None:
    return token.path[1] if len(token.path) > 1 else None


# =============================================================================
# Filters
# =============================================================================


@dataclass(frozen=True)
class TokenFilter:
    """A named predicate over tokens."""

    name: str
    predicate: Callable[[Token], bool] = field(repr=False)
    description: str = ""

    def __call__(self, token: Token) -> bool:
        return self.predicate(token)

    def __or__(self, other: TokenFilter) -> TokenFilter:
        return any_of(f"{self.name}|{other.name}", self, other)


def any_of(name: str, *filters: TokenFilter, description: str = "") -> TokenFilter:
    """Logical OR of ``filters``."""
    members = tuple(filters)
    return TokenFilter(
        name=name,
        predicate=lambda token: any(f(token) for f in members),
        description=description or " or ".join(f.name for f in members),
    )


COLOR = TokenFilter(
    "color",
    lambda t: in_category(t, "color") and _subgroup(t) not in INTERNAL_COLOR_GROUPS,
    "Public color tokens",
)
THEME = TokenFilter(
    "theme",
    lambda t: in_category(t, "color") and _subgroup(t) not in NON_THEME_COLOR_GROUPS,
    "Themeable color tokens (no base colors)",
)
SIZE = TokenFilter(
    "size",
    lambda t: in_category(t, "size") and _subgroup(t) != PRIMITIVE_SIZE_GROUP,
    "Size tokens outside the dimension primitives",
)
NUMBER = TokenFilter("number", lambda t: in_category(t, "number"), "Unitless numbers")
TYPOGRAPHY = TokenFilter("typography", lambda t: in_category(t, "font"), "Font tokens")
SHADOW = TokenFilter("shadow", lambda t: in_category(t, "shadow"), "Shadow tokens")
GRADIENT = TokenFilter("gradient", lambda t: in_category(t, "gradient"), "Gradient tokens")
STRING = TokenFilter("string", lambda t: in_category(t, "string"), "String tokens")
ASSET = TokenFilter("asset", lambda t: in_category(t, "asset"), "Icon and asset tokens")

NUMERIC = any_of("numeric", NUMBER, SIZE, description="Number and size tokens")
ALL = any_of(
    "all",
    COLOR,
    TYPOGRAPHY,
    GRADIENT,
    NUMBER,
    SHADOW,
    SIZE,
    STRING,
    ASSET,
    description="Every public token",
)


class FilterRegistry:
    """Immutable mapping of filter name to TokenFilter."""

    def __init__(self, filters: Iterable[TokenFilter]):
        self._filters: Mapping[str, TokenFilter] = {f.name: f for f in filters}

    def get(self, name: str) -> TokenFilter:
        try:
            return self._filters[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown filter '{name}'. Known filters: {', '.join(sorted(self._filters))}"
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def names(self) -> list[str]:
        return list(self._filters)


def default_filters() -> FilterRegistry:
    """Build the registry of built-in filters."""
    return FilterRegistry(
        [ALL, COLOR, THEME, NUMERIC, NUMBER, SIZE, TYPOGRAPHY, SHADOW, GRADIENT, STRING, ASSET]
    )
