"""
Reference expressions between tokens.

A reference is a string of the exact form ``{group.subgroup.name}``.
Values may also embed references inside a larger string, e.g. a math
expression such as ``{space.sm} * 2``, or nest them inside composite
objects.

Resolution walks the reference graph with the chain of visited paths
and fails fast with the full chain when it loops. It never recurses
without bound.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

from .errors import ErrorContext, ResolutionError

_EXACT_REFERENCE = re.compile(r"^\{([^{}]+)\}$")
_EMBEDDED_REFERENCE = re.compile(r"\{([^{}]+)\}")


def is_reference(value: Any) -> bool:
    """Return True if ``value`` is exactly one reference expression."""
    return isinstance(value, str) and _EXACT_REFERENCE.match(value.strip()) is not None


def uses_references(value: Any) -> bool:
    """Return True if ``value`` contains a reference anywhere, including nested values."""
    if isinstance(value, str):
        return _EMBEDDED_REFERENCE.search(value) is not None
    if isinstance(value, dict):
        return any(uses_references(v) for v in value.values())
    if isinstance(value, list):
        return any(uses_references(v) for v in value)
    return False


def split_reference(value: str) -> tuple[str, ...]:
    """Split ``{a.b.c}`` into ``("a", "b", "c")``.

    Raises:
        ValueError: If ``value`` is not a single reference expression.
    """
    match = _EXACT_REFERENCE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Not a reference: {value!r}")
    return tuple(match.group(1).split("."))


def get_references(value: Any) -> list[tuple[str, ...]]:
    """Collect every referenced path in ``value``, in order of appearance."""
    found: list[tuple[str, ...]] = []
    if isinstance(value, str):
        found.extend(tuple(m.group(1).split(".")) for m in _EMBEDDED_REFERENCE.finditer(value))
    elif isinstance(value, dict):
        for item in value.values():
            found.extend(get_references(item))
    elif isinstance(value, list):
        for item in value:
            found.extend(get_references(item))
    return found


def format_scalar(value: Any) -> str:
    """Render a resolved scalar for substitution into a larger string."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ReferenceResolver:
    """
    Resolves reference expressions against a flat path -> value mapping.

    The mapping holds unresolved values; the resolver follows chains of
    references and caches each successfully resolved path. One resolver
    belongs to one token dictionary, so the cache never crosses tasks.
    """

    def __init__(self, values: Mapping[tuple[str, ...], Any]):
        self._values = values
        self._cache: dict[tuple[str, ...], Any] = {}

    def has(self, path: tuple[str, ...]) -> bool:
        return tuple(path) in self._values

    def resolve(self, value: Any, origin: tuple[str, ...] | None = None) -> Any:
        """Resolve every reference inside ``value``.

        Args:
            value: Scalar or composite value, possibly containing references.
            origin: Path of the token owning ``value``; seeds cycle detection.

        Returns:
            A new value with references replaced.

        Raises:
            ResolutionError: If a reference is missing or circular.
        """
        chain = (".".join(origin),) if origin else ()
        return self._resolve(value, chain)

    def resolve_path(self, path: tuple[str, ...]) -> Any:
        """Resolve the token at ``path`` to its final value."""
        return self._resolve_path(tuple(path), ())

    def _resolve(self, value: Any, chain: tuple[str, ...]) -> Any:
        if isinstance(value, str):
            exact = _EXACT_REFERENCE.match(value.strip())
            if exact:
                return self._resolve_path(tuple(exact.group(1).split(".")), chain)
            if _EMBEDDED_REFERENCE.search(value) is None:
                return value
            return _EMBEDDED_REFERENCE.sub(
                lambda m: format_scalar(self._resolve_path(tuple(m.group(1).split(".")), chain)),
                value,
            )
        if isinstance(value, dict):
            return {k: self._resolve(v, chain) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve(v, chain) for v in value]
        return value

    def _resolve_path(self, path: tuple[str, ...], chain: tuple[str, ...]) -> Any:
        dotted = ".".join(path)
        if dotted in chain:
            loop = [*chain, dotted]
            raise ResolutionError(
                f"Circular reference: {' -> '.join(loop)}",
                ErrorContext(token_path=chain[0], raw_value=f"{{{dotted}}}"),
                chain=loop,
            )
        if path in self._cache:
            return copy.deepcopy(self._cache[path])
        if path not in self._values:
            raise ResolutionError(
                f"Reference {{{dotted}}} does not match any token",
                ErrorContext(token_path=chain[0] if chain else None, raw_value=f"{{{dotted}}}"),
                chain=[*chain, dotted],
            )
        resolved = self._resolve(self._values[path], (*chain, dotted))
        self._cache[path] = resolved
        return copy.deepcopy(resolved)
