"""
Token graph preprocessor.

Normalizes a token graph before any platform-specific work:

1. Aligns legacy/alternate type names to canonical types, recording the
   original type under the token's ``chassis`` metadata.
2. Renames known sub-properties of composite values (shadow offsets),
   for single objects and multi-layer lists alike.
3. Splits combined font weight strings such as ``"Bold Italic"`` into a
   weight and a style. Typography composites gain a ``fontStyle``
   sub-value. Standalone font-weight tokens with a non-default style are
   replaced by ``weight``/``style`` sibling tokens.

Preprocessing returns a new graph and is idempotent: running it on its
own output changes nothing.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Any

from .errors import ResolutionError
from .ir.tokens import TokenEntry, TokenGraph
from .loader import walk_graph
from .references import ReferenceResolver, uses_references

logger = logging.getLogger(__name__)

# Legacy/alternate type -> canonical type
TYPE_ALIASES: dict[str, str] = {
    "fontFamilies": "fontFamily",
    "fontWeights": "fontWeight",
    "fontSizes": "fontSize",
    "lineHeights": "lineHeight",
    "boxShadow": "shadow",
    "spacing": "dimension",
    "sizing": "dimension",
    "borderRadius": "dimension",
    "borderWidth": "dimension",
    "letterSpacing": "number",
    "paragraphSpacing": "dimension",
    "paragraphIndent": "dimension",
    "text": "content",
}

# Canonical type -> {legacy sub-property: canonical sub-property}
PROPERTY_RENAMES: dict[str, dict[str, str]] = {
    "shadow": {
        "x": "offsetX",
        "y": "offsetY",
    },
}

FONT_STYLES: tuple[str, ...] = ("italic", "oblique", "normal")
DEFAULT_FONT_STYLE = "normal"
DEFAULT_FONT_WEIGHT = "Regular"

_FONT_WEIGHT_RE = re.compile(
    rf"(?P<weight>.+?)\s?(?P<style>{'|'.join(FONT_STYLES)})?$",
    re.IGNORECASE,
)


# =============================================================================
# Font weight / style split
# =============================================================================


@dataclass(frozen=True)
class WeightStyle:
    """A font weight split into its weight and style parts."""

    weight: str
    style: str = DEFAULT_FONT_STYLE


def split_weight_style(font_weight: str) -> WeightStyle:
    """Split a combined font weight string.

    ``"Bold Italic"`` -> (Bold, italic); ``"Italic"`` -> (Regular, italic);
    ``"Bold"`` -> (Bold, normal).
    """
    text = str(font_weight).strip()
    if not text:
        return WeightStyle(weight=text)
    if text.lower() in FONT_STYLES:
        return WeightStyle(weight=DEFAULT_FONT_WEIGHT, style=text.lower())

    match = _FONT_WEIGHT_RE.match(text)
    if match and match.group("weight") and match.group("style"):
        return WeightStyle(
            weight=match.group("weight").strip(),
            style=match.group("style").lower(),
        )
    return WeightStyle(weight=text)


def _resolve_font_weight(value: Any, resolver: ReferenceResolver, path: tuple[str, ...]) -> str:
    """Resolve a font weight through references, failing soft."""
    text = str(value)
    if not uses_references(text):
        return text
    try:
        return str(resolver.resolve(text))
    except ResolutionError as e:
        logger.warning(f"Could not resolve font weight of {'.'.join(path)}: {e}")
        return text


# =============================================================================
# Passes
# =============================================================================


def _rename_properties(value: Any, renames: dict[str, str]) -> Any:
    if isinstance(value, list):
        return [_rename_properties(item, renames) for item in value]
    if not isinstance(value, dict):
        return value
    renamed: dict[str, Any] = {}
    for key, item in value.items():
        renamed[renames.get(key, key)] = item
    return renamed


def align_entry(entry: TokenEntry) -> TokenEntry:
    """Rewrite an aliased type to its canonical form and rename composite props."""
    token = entry.current
    canonical = TYPE_ALIASES.get(token.type or "", token.type)

    if canonical != token.type:
        token = token.model_copy(update={"type": canonical}).with_metadata(
            originalType=token.type
        )

    renames = PROPERTY_RENAMES.get(canonical or "")
    if renames and isinstance(token.value, dict | list):
        token = token.model_copy(
            update={"value": _rename_properties(copy.deepcopy(token.value), renames)}
        )

    if token is entry.current:
        return entry
    return entry.model_copy(update={"current": token})


def align_types(graph: TokenGraph) -> TokenGraph:
    """Apply ``align_entry`` depth-first over every nested group."""
    aligned: TokenGraph = {}
    for key, node in graph.items():
        if isinstance(node, TokenEntry):
            aligned[key] = align_entry(node)
        elif isinstance(node, dict):
            aligned[key] = align_types(node)
        else:
            aligned[key] = node
    return aligned


def _typography_font_style(entry: TokenEntry, resolver: ReferenceResolver) -> TokenEntry:
    token = entry.current
    value = token.value
    if not isinstance(value, dict) or value.get("fontWeight") is None:
        return entry

    raw_weight = value["fontWeight"]
    resolved = _resolve_font_weight(raw_weight, resolver, token.path)
    split = split_weight_style(resolved)

    new_value = copy.deepcopy(value)
    if split.style != DEFAULT_FONT_STYLE:
        new_value["fontWeight"] = split.weight
        new_value["fontStyle"] = split.style
    elif "fontStyle" not in new_value:
        new_value["fontStyle"] = DEFAULT_FONT_STYLE

    meta: dict[str, Any] = {}
    if "originalFontWeight" not in token.metadata:
        meta["originalFontWeight"] = str(raw_weight)
    if "resolvedFontWeight" not in token.metadata:
        meta["resolvedFontWeight"] = resolved

    if new_value == value and not meta:
        return entry
    updated = token.with_metadata(**meta) if meta else token
    return entry.model_copy(update={"current": updated.model_copy(update={"value": new_value})})


def _split_font_weight(
    entry: TokenEntry, resolver: ReferenceResolver
) -> TokenEntry | dict[str, TokenEntry]:
    token = entry.current
    if token.value is None or isinstance(token.value, dict | list):
        return entry

    resolved = _resolve_font_weight(token.value, resolver, token.path)
    split = split_weight_style(resolved)
    if split.style == DEFAULT_FONT_STYLE:
        return entry

    base = token.with_metadata(originalFontWeight=str(token.value), resolvedFontWeight=resolved)
    weight = base.model_copy(
        update={"path": (*token.path, "weight"), "type": "fontWeight", "value": split.weight}
    )
    style = base.model_copy(
        update={"path": (*token.path, "style"), "type": "fontStyle", "value": split.style}
    )
    logger.debug(f"Split font weight {token.dotted_path} into {split.weight}/{split.style}")
    return {
        "weight": entry.model_copy(update={"current": weight}),
        "style": entry.model_copy(update={"current": style}),
    }


def add_font_styles(graph: TokenGraph, resolver: ReferenceResolver) -> TokenGraph:
    """Split weight/style for typography composites and font-weight tokens."""
    result: TokenGraph = {}
    for key, node in graph.items():
        if isinstance(node, TokenEntry):
            if node.current.type == "typography":
                result[key] = _typography_font_style(node, resolver)
            elif node.current.type == "fontWeight":
                result[key] = _split_font_weight(node, resolver)
            else:
                result[key] = node
        elif isinstance(node, dict):
            result[key] = add_font_styles(node, resolver)
        else:
            result[key] = node
    return result


def graph_resolver(graph: TokenGraph) -> ReferenceResolver:
    """Build a resolver over the current values of every token in ``graph``."""
    return ReferenceResolver({entry.path: entry.current.value for entry in walk_graph(graph)})


def preprocess(graph: TokenGraph) -> TokenGraph:
    """Normalize a token graph.

    Args:
        graph: Token graph as produced by the loader (or a previous run).

    Returns:
        A new, normalized graph. The input is left untouched.
    """
    aligned = align_types(graph)
    # References are resolved against the graph as it was before any split
    return add_font_styles(aligned, graph_resolver(aligned))
