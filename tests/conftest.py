"""Shared pytest fixtures for chassis-tokens tests."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

CORE_SET: dict[str, Any] = {
    "color": {
        "$type": "color",
        "base": {
            "white": {"$value": "#ffffff"},
            "black": {"$value": "#000000"},
            "inverse": {"$value": "{color.base.black}"},
        },
        "palette": {
            "blue": {"500": {"$value": "#0d6efd"}},
            "gray": {"900": {"$value": "#212529"}},
        },
    },
    "space": {
        "$type": "spacing",
        "sm": {"$value": "8"},
        "md": {"$value": "{space.sm} * 2"},
        "lg": {"$value": "{space.sm}"},
    },
    "font": {
        "family": {"base": {"$type": "fontFamilies", "$value": "Inter, sans-serif"}},
        "weight": {
            "bold": {"$type": "fontWeights", "$value": "Bold"},
            "boldItalic": {"$type": "fontWeights", "$value": "Bold Italic"},
        },
        "size": {"body": {"$type": "fontSizes", "$value": "16"}},
    },
    "opacity": {"muted": {"$type": "opacity", "$value": "50%"}},
    "content": {"greeting": {"$type": "text", "$value": "Hello"}},
    "typography": {
        "body": {
            "$type": "typography",
            "$value": {
                "fontFamily": "{font.family.base}",
                "fontWeight": "{font.weight.boldItalic}",
                "fontSize": "{font.size.body}",
                "lineHeight": "150%",
            },
        }
    },
    "shadow": {
        "sm": {
            "$type": "boxShadow",
            "$value": {
                "x": "0",
                "y": "2",
                "blur": "4",
                "spread": "0",
                "color": "rgba(0, 0, 0, 0.5)",
                "type": "dropShadow",
            },
        }
    },
}

PRIMITIVES_SET: dict[str, Any] = {
    "color": {"palette": {"red": {"500": {"$type": "color", "$value": "#dc3545"}}}},
}

LIGHT_SET: dict[str, Any] = {
    "color": {
        "$type": "color",
        "brand": {"primary": {"$value": "{color.palette.blue.500}", "$description": "Brand"}},
        "text": {"body": {"$value": "{color.palette.gray.900}"}},
        "danger": {"$value": "{color.palette.red.500}"},
    }
}

DARK_SET: dict[str, Any] = {
    "color": {
        "$type": "color",
        "brand": {"primary": {"$value": "#6ea8fe"}},
        "text": {"body": {"$value": "{color.base.white}"}},
    }
}

THEMES: list[dict[str, Any]] = [
    {
        "id": "1",
        "name": "light",
        "selectedTokenSets": {"core": "enabled", "primitives": "source", "light": "enabled"},
    },
    {
        "id": "2",
        "name": "dark",
        "selectedTokenSets": {"core": "enabled", "dark": "enabled", "light": "disabled"},
    },
]

SETTINGS: dict[str, Any] = {
    "brands": ["chassis"],
    "apps": {"docs": ["web", "android"]},
    "themes": ["light", "dark"],
    "default_theme": "light",
}


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def token_sets() -> dict[str, Any]:
    """Return a fresh copy of the standard token sets, safe to modify."""
    return copy.deepcopy(
        {"core": CORE_SET, "primitives": PRIMITIVES_SET, "light": LIGHT_SET, "dark": DARK_SET}
    )


@pytest.fixture
def make_project() -> Callable[..., Path]:
    """Return a factory writing a token project below a directory."""

    def _make(
        root: Path,
        *,
        sets: dict[str, Any] | None = None,
        themes: list[dict[str, Any]] | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Path:
        token_sets = sets if sets is not None else {
            "core": CORE_SET,
            "primitives": PRIMITIVES_SET,
            "light": LIGHT_SET,
            "dark": DARK_SET,
        }
        for name, data in token_sets.items():
            write_json(root / "tokens" / f"{name}.json", data)
        write_json(root / "tokens" / "$themes.json", themes if themes is not None else THEMES)
        (root / "chassis.yaml").write_text(
            yaml.safe_dump(settings if settings is not None else SETTINGS), encoding="utf-8"
        )
        return root

    return _make


@pytest.fixture
def token_project(tmp_path: Path, make_project: Callable[..., Path]) -> Path:
    """Create the standard two-theme token project."""
    return make_project(tmp_path / "project")
