"""
Theme manifest IR types.

Themes are loaded once from ``$themes.json`` and never mutated. The
permutator derives ``Permutation`` records from them.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TokenSetState(StrEnum):
    """Inclusion state of a token set within a theme."""

    ENABLED = "enabled"
    SOURCE = "source"
    DISABLED = "disabled"


class Theme(BaseModel):
    """A named, optionally grouped selection of token sets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(description="Theme identifier")
    group: str | None = Field(default=None, description="Permutation dimension")
    selected_token_sets: dict[str, TokenSetState] = Field(
        default_factory=dict,
        alias="selectedTokenSets",
        description="Token set name -> inclusion state",
    )

    def enabled_sets(self) -> list[str]:
        """Names of sets that contribute output tokens, in declaration order."""
        return [
            name
            for name, state in self.selected_token_sets.items()
            if state == TokenSetState.ENABLED
        ]

    def source_sets(self) -> list[str]:
        """Names of reference-only sets, in declaration order."""
        return [
            name
            for name, state in self.selected_token_sets.items()
            if state == TokenSetState.SOURCE
        ]


class Permutation(BaseModel):
    """Token sets selected by one theme or one combination of grouped themes."""

    model_config = ConfigDict(frozen=True)

    name: str
    sets: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()

    def source_list(self) -> list[str]:
        """All sets to load: reference-only sets first so output sets override them."""
        ordered = list(self.excludes)
        ordered.extend(s for s in self.sets if s not in ordered)
        return ordered
