"""
Token IR types.

A token lives in the graph as a ``TokenEntry``: the ``current`` token that
preprocessing normalizes, paired with the immutable ``original`` snapshot
taken when the token was first loaded. Nothing ever mutates an entry;
every normalization step produces a new one.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Namespace inside ``$extensions`` holding pipeline metadata
EXTENSION_NAMESPACE = "chassis"

# Keys recognised on a raw token object (DTCG first, legacy second)
TYPE_KEYS = ("$type", "type")
VALUE_KEYS = ("$value", "value")
DESCRIPTION_KEYS = ("$description", "description")
EXTENSION_KEYS = ("$extensions", "extensions")


def _first_key(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def is_raw_token(node: Any) -> bool:
    """Return True if a raw JSON node is a token rather than a group."""
    if not isinstance(node, dict):
        return False
    if "$value" in node:
        return True
    # Legacy format needs both keys; a group may legitimately be named "value"
    return "value" in node and isinstance(node.get("type"), str)


# =============================================================================
# Snapshot and token
# =============================================================================


class TokenSnapshot(BaseModel):
    """Immutable record of a token exactly as it was first loaded."""

    model_config = ConfigDict(frozen=True)

    type: str | None = Field(default=None, description="Declared type")
    value: Any = Field(default=None, description="Declared value, references unresolved")
    description: str | None = Field(default=None, description="Declared description")
    extensions: dict[str, Any] = Field(default_factory=dict, description="Declared extensions")


class Token(BaseModel):
    """A design token at some stage of normalization."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...] = Field(description="Location in the token graph")
    type: str | None = Field(default=None, description="Canonical semantic type")
    value: Any = Field(default=None, description="Scalar or composite value")
    description: str | None = Field(default=None, description="Human-readable comment")
    extensions: dict[str, Any] = Field(default_factory=dict, description="Metadata bag")
    token_set: str | None = Field(default=None, description="Token set the token came from")

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)

    @property
    def metadata(self) -> dict[str, Any]:
        """Pipeline metadata stored under the ``chassis`` extension namespace."""
        meta = self.extensions.get(EXTENSION_NAMESPACE)
        return meta if isinstance(meta, dict) else {}

    @property
    def original_type(self) -> str | None:
        """Type before alias normalization, falling back to the current type."""
        return self.metadata.get("originalType", self.type)

    def with_metadata(self, **values: Any) -> Token:
        """Return a copy with extra pipeline metadata merged in."""
        extensions = copy.deepcopy(self.extensions)
        meta = dict(extensions.get(EXTENSION_NAMESPACE) or {})
        meta.update(values)
        extensions[EXTENSION_NAMESPACE] = meta
        return self.model_copy(update={"extensions": extensions})


class TokenEntry(BaseModel):
    """Pairs the working token with the snapshot it started from."""

    model_config = ConfigDict(frozen=True)

    current: Token
    original: TokenSnapshot

    @classmethod
    def from_raw(
        cls,
        path: tuple[str, ...],
        raw: dict[str, Any],
        *,
        inherited_type: str | None = None,
        token_set: str | None = None,
    ) -> TokenEntry:
        """Build an entry from a raw JSON token object.

        Args:
            path: Path segments of the token.
            raw: Raw token object (``$type``/``$value`` or legacy keys).
            inherited_type: Type declared on an enclosing group.
            token_set: Name of the token set the token was read from.

        Returns:
            TokenEntry whose current token and snapshot start identical.
        """
        token_type = _first_key(raw, TYPE_KEYS) or inherited_type
        value = _first_key(raw, VALUE_KEYS)
        description = _first_key(raw, DESCRIPTION_KEYS)
        extensions = _first_key(raw, EXTENSION_KEYS) or {}

        snapshot = TokenSnapshot(
            type=token_type,
            value=copy.deepcopy(value),
            description=description,
            extensions=copy.deepcopy(extensions),
        )
        token = Token(
            path=tuple(path),
            type=token_type,
            value=copy.deepcopy(value),
            description=description,
            extensions=copy.deepcopy(extensions),
            token_set=token_set,
        )
        return cls(current=token, original=snapshot)

    @property
    def path(self) -> tuple[str, ...]:
        return self.current.path

    def evolve(self, **changes: Any) -> TokenEntry:
        """Return a new entry whose current token has ``changes`` applied."""
        return self.model_copy(update={"current": self.current.model_copy(update=changes)})


# A token graph is a nested mapping of group names down to TokenEntry leaves.
TokenGraph = dict[str, Any]


class RenderToken(BaseModel):
    """A token ready for a renderer: platform name plus rendered literal."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Platform identifier")
    path: tuple[str, ...]
    type: str | None = None
    value: str = Field(description="Rendered literal or reference")
    raw_value: Any = Field(default=None, description="Declared value, references unresolved")
    resolved_value: Any = Field(default=None, description="Value after reference resolution")
    description: str | None = None
    token_set: str | None = None
    is_reference: bool = Field(default=False, description="Value renders a reference")

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)
