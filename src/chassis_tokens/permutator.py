"""
Theme permutations.

Expands a theme manifest into a flat mapping of permutation name to the
token sets it outputs (``sets``) and the sets it only references
(``excludes``).

Ungrouped themes map one to one. When themes are grouped, one theme is
picked from every group and the choices are combined as a Cartesian
product. Groups enumerate in declaration order, and themes within a group
do too, so repeated builds produce identical orderings.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence

from .errors import ConfigurationError
from .ir.themes import Permutation, Theme

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "_"


def _dedupe(items: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _direct_mapping(themes: Sequence[Theme]) -> dict[str, Permutation]:
    return {
        theme.name: Permutation(
            name=theme.name,
            sets=tuple(theme.enabled_sets()),
            excludes=tuple(theme.source_sets()),
        )
        for theme in themes
    }


def group_themes(themes: Sequence[Theme]) -> dict[str, list[Theme]]:
    """Group themes by their ``group`` value, preserving declaration order.

    Raises:
        ConfigurationError: If some themes declare a group and others don't.
    """
    groups: dict[str, list[Theme]] = {}
    for theme in themes:
        if not theme.group:
            raise ConfigurationError(
                f"Theme {theme.name} does not have a group property, "
                "which is required for multi-dimensional theming."
            )
        groups.setdefault(theme.group, []).append(theme)
    return groups


def permutate_themes(
    themes: Sequence[Theme],
    *,
    separator: str = DEFAULT_SEPARATOR,
) -> dict[str, Permutation]:
    """Compute the theme permutations.

    Args:
        themes: Themes in manifest order.
        separator: String joining theme names of a grouped permutation.

    Returns:
        Ordered mapping of permutation name to Permutation.

    Raises:
        ConfigurationError: On mixed grouped/ungrouped themes or a name collision.
    """
    if not any(theme.group for theme in themes):
        return _direct_mapping(themes)

    groups = group_themes(themes)
    if len(groups) <= 1:
        return _direct_mapping(themes)

    permutations: dict[str, Permutation] = {}
    for combo in itertools.product(*groups.values()):
        name = separator.join(theme.name for theme in combo)
        sets = _dedupe([s for theme in combo for s in theme.enabled_sets()])
        sources = _dedupe([s for theme in combo for s in theme.source_sets()])
        # An include always wins over a reference-only marker
        excludes = tuple(s for s in sources if s not in sets)

        if name in permutations:
            raise ConfigurationError(
                f"Theme permutation '{name}' is produced twice; "
                f"theme names must be unique within their group"
            )
        permutations[name] = Permutation(name=name, sets=sets, excludes=excludes)

    logger.debug(
        "Expanded %d themes in %d groups into %d permutations",
        len(themes),
        len(groups),
        len(permutations),
    )
    return permutations
