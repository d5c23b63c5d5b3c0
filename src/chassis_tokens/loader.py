"""
Token graph loader.

Reads token sets (DTCG JSON files, one per set) and the theme manifest,
and produces the in-memory token graph: a nested mapping keyed by path
segments whose leaves are ``TokenEntry`` objects.

Set names map to files below the tokens directory, so the set
``brand/chassis`` is read from ``<tokens_dir>/brand/chassis.json``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigurationError, LoadError
from .ir.themes import Theme
from .ir.tokens import TokenEntry, TokenGraph, is_raw_token

logger = logging.getLogger(__name__)


# =============================================================================
# Graph construction
# =============================================================================


def build_graph(
    raw: dict[str, Any],
    *,
    token_set: str | None = None,
    path: tuple[str, ...] = (),
    inherited_type: str | None = None,
) -> TokenGraph:
    """Convert a raw JSON token tree into a token graph.

    Group-level ``$type`` is inherited by descendant tokens that declare
    none. Other ``$``-prefixed group keys are metadata and are skipped.

    Args:
        raw: Decoded JSON object of one token set.
        token_set: Name of the set, recorded on every token.
        path: Path of ``raw`` within the graph.
        inherited_type: Type declared by an enclosing group.

    Returns:
        Nested mapping with TokenEntry leaves.
    """
    group_type = raw["$type"] if isinstance(raw.get("$type"), str) else inherited_type

    graph: TokenGraph = {}
    for key, node in raw.items():
        if key.startswith("$") or not isinstance(node, dict):
            continue
        child_path = (*path, key)
        if is_raw_token(node):
            graph[key] = TokenEntry.from_raw(
                child_path, node, inherited_type=group_type, token_set=token_set
            )
        else:
            graph[key] = build_graph(
                node, token_set=token_set, path=child_path, inherited_type=group_type
            )
    return graph


def walk_graph(graph: TokenGraph) -> Iterator[TokenEntry]:
    """Yield every entry of ``graph`` depth-first, in declaration order."""
    for node in graph.values():
        if isinstance(node, TokenEntry):
            yield node
        elif isinstance(node, dict):
            yield from walk_graph(node)


def merge_graphs(graphs: Sequence[TokenGraph]) -> TokenGraph:
    """Merge graphs leaf-wise; later graphs override earlier ones."""
    merged: TokenGraph = {}
    for graph in graphs:
        _merge_into(merged, graph)
    return merged


def _merge_into(target: TokenGraph, source: TokenGraph) -> None:
    for key, node in source.items():
        existing = target.get(key)
        if isinstance(node, dict) and isinstance(existing, dict):
            _merge_into(existing, node)
        elif isinstance(node, dict):
            target[key] = {}
            _merge_into(target[key], node)
        else:
            target[key] = node


# =============================================================================
# File loading
# =============================================================================


def token_set_path(tokens_dir: Path, name: str) -> Path:
    """Get the JSON file of a token set."""
    return tokens_dir / f"{name}.json"


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise LoadError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise LoadError(f"Not UTF-8 encoded: {path}: {e}") from e
    except OSError as e:
        raise LoadError(f"Could not read {path}: {e}") from e


def load_token_set(tokens_dir: Path, name: str) -> TokenGraph:
    """Load one token set into a graph.

    Raises:
        LoadError: If the set file is missing or not a JSON object.
    """
    path = token_set_path(tokens_dir, name)
    data = _read_json(path)
    if not isinstance(data, dict):
        raise LoadError(f"Token set {name} must be a JSON object: {path}")
    graph = build_graph(data, token_set=name)
    logger.debug("Loaded token set %s from %s", name, path)
    return graph


def parse_themes(data: Any) -> list[Theme]:
    """Validate decoded theme manifest data.

    Raises:
        ConfigurationError: If the manifest is not a list of valid themes.
    """
    if not isinstance(data, list):
        raise ConfigurationError("Theme manifest must be a JSON list of themes")
    themes: list[Theme] = []
    for i, item in enumerate(data):
        try:
            themes.append(Theme.model_validate(item))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid theme at index {i}: {e}") from e
    return themes


def load_themes(path: Path) -> list[Theme]:
    """Load the theme manifest (``$themes.json``)."""
    return parse_themes(_read_json(path))


class TokenSource:
    """
    Token sets below one tokens directory.

    Each set is read at most once. Loading happens before tasks run;
    afterwards the loaded graphs are only read.
    """

    def __init__(self, tokens_dir: Path):
        self.tokens_dir = tokens_dir
        self._sets: dict[str, TokenGraph] = {}

    def load(self, name: str) -> TokenGraph:
        if name not in self._sets:
            self._sets[name] = load_token_set(self.tokens_dir, name)
        return self._sets[name]

    def merged(self, names: Sequence[str]) -> TokenGraph:
        """Merge the named sets in order into a fresh graph."""
        return merge_graphs([self.load(name) for name in names])
