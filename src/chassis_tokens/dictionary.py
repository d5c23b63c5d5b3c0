"""
Per-task token dictionary.

Takes the preprocessed, merged graph of one permutation and prepares it
for one task's platform:

1. Expands composite tokens the platform lists under ``expand`` into one
   child token per sub-property.
2. Resolves references against every token, reference-only sets included.
3. Runs the platform's value transforms and names every token.
4. Renders a reference instead of the literal where the platform supports
   it and the token's declared value is a single reference. Typography maps
   on style sheets reference their sub-values the same way.

Failures are recorded per token. A file fails only if it selects a
failed token.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ErrorContext, ResolutionError, TokensError
from .filters import TokenFilter
from .ir.platforms import ReferenceStyle, Task
from .ir.tokens import RenderToken, Token, TokenGraph
from .loader import walk_graph
from .references import ReferenceResolver, is_reference, split_reference, uses_references
from .transforms import (
    SUB_REFERENCES,
    TransformRegistry,
    always_literal,
    format_reference,
    render_literal,
)

logger = logging.getLogger(__name__)

# Types of the children a split font weight leaves behind
SPLIT_FONT_TYPES: frozenset[str] = frozenset({"fontWeight", "fontStyle"})

# Composite type -> sub-property -> type of the expanded child token
COMPOSITE_SUBTYPES: dict[str, dict[str, str]] = {
    "typography": {
        "fontFamily": "fontFamily",
        "fontWeight": "fontWeight",
        "fontStyle": "fontStyle",
        "fontSize": "fontSize",
        "lineHeight": "lineHeight",
        "letterSpacing": "letterSpacing",
        "paragraphSpacing": "paragraphSpacing",
        "paragraphIndent": "dimension",
        "textCase": "textCase",
        "textDecoration": "textDecoration",
    },
    "shadow": {
        "offsetX": "dimension",
        "offsetY": "dimension",
        "blur": "dimension",
        "spread": "dimension",
        "color": "color",
        "type": "string",
    },
}


@dataclass
class DictionaryEntry:
    """One token of the dictionary and what became of it."""

    token: Token
    declared: Any = None
    is_source: bool = False
    expanded: bool = False
    rendered: RenderToken | None = None
    error: TokensError | None = None


@dataclass
class Selection:
    """Tokens picked by a filter, sorted by name, plus the failures among them."""

    tokens: list[RenderToken] = field(default_factory=list)
    errors: list[TokensError] = field(default_factory=list)


# =============================================================================
# Expansion
# =============================================================================


def _child(
    parent: Token, key: str, value: Any, child_type: str, path: tuple[str, ...]
) -> Token:
    child = parent.model_copy(update={"path": path, "type": child_type, "value": value})
    return child.with_metadata(originalType=key, expandedFrom=parent.dotted_path)


def expand_token(
    token: Token,
    composite_value: Any,
    overrides: Mapping[str, str],
) -> list[Token]:
    """Split a composite token into one child token per sub-property.

    Args:
        token: The composite token.
        composite_value: Its value as an object, or list of objects for
            multi-layer shadows. Sub-values keep their references.
        overrides: Sub-property -> type replacements for this platform.

    Returns:
        Child tokens in declared sub-property order.
    """
    subtypes = {**COMPOSITE_SUBTYPES.get(token.type or "", {}), **overrides}
    layers = composite_value if isinstance(composite_value, list) else [composite_value]
    multi = isinstance(composite_value, list) and len(layers) > 1

    children: list[Token] = []
    for index, layer in enumerate(layers):
        if not isinstance(layer, dict):
            continue
        base = (*token.path, str(index)) if multi else token.path
        for key, value in layer.items():
            child_type = subtypes.get(key, "string")
            children.append(_child(token, key, value, child_type, (*base, key)))
    return children


# =============================================================================
# Dictionary
# =============================================================================


class TokenDictionary:
    """
    Transformed tokens of one task.

    Built from a read-only graph. Each dictionary owns its resolver, so no
    state is shared between tasks.
    """

    def __init__(self, graph: TokenGraph, task: Task, transforms: TransformRegistry):
        self.task = task
        self.platform = task.config
        self.options = task.config.options
        self._name_transform = transforms.get_name(self.platform.name_transform)
        self._value_transforms = [transforms.get_value(n) for n in self.platform.transforms]
        self._excludes = set(task.excludes)

        self._entries: dict[tuple[str, ...], DictionaryEntry] = {}
        loaded = list(walk_graph(graph))
        base_resolver = ReferenceResolver({e.path: e.current.value for e in loaded})
        for loaded_entry in loaded:
            self._add(loaded_entry.current, base_resolver, loaded_entry.original.value)

        self.resolver = ReferenceResolver(
            {path: e.token.value for path, e in self._entries.items()}
        )
        for entry in self._entries.values():
            if entry.is_source or entry.expanded or entry.error is not None:
                continue
            try:
                entry.rendered = self._render(entry.token, entry.declared)
            except TokensError as e:
                logger.debug(f"Token {entry.token.dotted_path} failed: {e}")
                entry.error = e

    def _add(self, token: Token, resolver: ReferenceResolver, declared: Any) -> None:
        is_source = token.token_set in self._excludes
        entry = DictionaryEntry(token=token, declared=declared, is_source=is_source)
        self._entries[token.path] = entry

        overrides = self.platform.expand.get(token.type or "")
        if overrides is None:
            return
        value = token.value
        if not isinstance(value, dict | list):
            try:
                value = resolver.resolve(value, origin=token.path)
            except ResolutionError as e:
                entry.error = e
                return
            if not isinstance(value, dict | list):
                return

        entry.expanded = True
        for child in expand_token(token, value, overrides):
            self._entries[child.path] = DictionaryEntry(
                token=child, declared=child.value, is_source=is_source
            )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def name_of(self, token: Token) -> str:
        return self._name_transform(token, self.options)

    def _render(self, token: Token, declared: Any) -> RenderToken:
        raw = token.value
        resolved = self.resolver.resolve(raw, origin=token.path)

        working = token.model_copy(update={"value": resolved})
        sub_references = self._sub_references(token, declared)
        if sub_references:
            working = working.with_metadata(**{SUB_REFERENCES: sub_references})
        for transform in self._value_transforms:
            if not transform.matches(working):
                continue
            if not transform.transitive and uses_references(raw):
                continue
            try:
                value = transform(working, self.options)
            except (TypeError, ValueError) as e:
                raise TokensError(
                    f"Transform {transform.name} failed: {e}",
                    ErrorContext(
                        token_path=token.dotted_path, raw_value=raw, target=transform.name
                    ),
                ) from e
            working = working.model_copy(update={"value": value})

        reference = self._reference(token, declared)
        return RenderToken(
            name=self.name_of(token),
            path=token.path,
            type=token.type,
            value=reference if reference is not None else render_literal(working.value),
            raw_value=declared,
            resolved_value=resolved,
            description=token.description,
            token_set=token.token_set,
            is_reference=reference is not None,
        )

    def _references_enabled(self) -> bool:
        return (
            self.options.output_references
            and self.options.reference_style != ReferenceStyle.NONE
        )

    def _output_target(self, value: Any, member: str | None = None) -> Token | None:
        """The token a single reference points at, if that token is output too."""
        if not is_reference(value):
            return None
        path = split_reference(value)
        target_entry = self._entries.get(path)
        if target_entry is None and member is not None:
            # A split font weight lives on as its weight/style children
            target_entry = self._entries.get((*path, member))
        if target_entry is None or target_entry.is_source or target_entry.expanded:
            return None
        return target_entry.token

    def _reference(self, token: Token, declared: Any) -> str | None:
        """Reference text for a token whose declared value is one reference."""
        if not self._references_enabled():
            return None
        if not is_reference(declared) or always_literal(token, declared):
            return None

        member = token.path[-1] if token.type in SPLIT_FONT_TYPES else None
        target = self._output_target(declared, member)
        if target is None:
            return None
        return format_reference(token, target, self.name_of(target), self.options)

    def _sub_references(self, token: Token, declared: Any) -> dict[str, str]:
        """References for the sub-values of a typography map on style sheets.

        The font weight is looked up through the weight declared before the
        preprocessor split it from its style.
        """
        if not self._references_enabled():
            return {}
        if self.options.reference_style != ReferenceStyle.CSS_VAR:
            return {}
        if token.type != "typography" or not isinstance(declared, dict):
            return {}

        references: dict[str, str] = {}
        for key, sub_value in declared.items():
            member = None
            if key == "fontWeight":
                sub_value = token.metadata.get("originalFontWeight", sub_value)
                member = "weight"
            target = self._output_target(sub_value, member)
            if target is None:
                continue
            text = format_reference(token, target, self.name_of(target), self.options)
            if text is not None:
                references[key] = text
        return references

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def entries(self) -> list[DictionaryEntry]:
        return list(self._entries.values())

    def get(self, path: tuple[str, ...]) -> DictionaryEntry | None:
        return self._entries.get(tuple(path))

    def output_entries(self) -> list[DictionaryEntry]:
        """Entries eligible for output: not reference-only and not expanded away."""
        return [e for e in self._entries.values() if not e.is_source and not e.expanded]

    def select(self, token_filter: TokenFilter) -> Selection:
        """Pick the output tokens matching ``token_filter``."""
        selection = Selection()
        for entry in self.output_entries():
            if not token_filter(entry.token):
                continue
            if entry.error is not None:
                selection.errors.append(entry.error)
            elif entry.rendered is not None:
                selection.tokens.append(entry.rendered)
        selection.tokens.sort(key=lambda t: (t.name, t.path))
        return selection

    @property
    def errors(self) -> list[TokensError]:
        return [e.error for e in self.output_entries() if e.error is not None]
