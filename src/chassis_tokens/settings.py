"""
Build settings for the token pipeline.

Handles reading the build matrix (brands, apps, platforms, themes) and
output options from ``chassis.yaml`` in the project root.

Default location: {project_root}/chassis.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "chassis.yaml"


# =============================================================================
# Models
# =============================================================================


class HeaderSettings(BaseModel):
    """Lines written into the header of every generated file."""

    model_config = ConfigDict(frozen=True)

    tool_name: str = Field(default="Chassis - Tokens", description="Tool name in the header")
    version: str | None = Field(default=None, description="Version; defaults to the package's")
    copyright: str | None = Field(default=None, description="Copyright line")
    license: str | None = Field(default="Licensed under MIT", description="License line")
    timestamp: bool = Field(default=False, description="Add a generation timestamp")


class BuildSettings(BaseModel):
    """The build matrix and output options."""

    model_config = ConfigDict(frozen=True)

    brands: list[str] = Field(default_factory=lambda: ["chassis"], min_length=1)
    apps: dict[str, list[str]] = Field(
        default_factory=lambda: {"docs": ["web"]},
        description="App name -> platform ids",
    )
    themes: list[str] = Field(default_factory=lambda: ["light", "dark"], min_length=1)
    default_theme: str = Field(default="light", description="Theme emitting the full file set")
    full_file_set_themes: list[str] | None = Field(
        default=None,
        description="Themes emitting the full file set; None means the default theme only",
    )
    separator: str = Field(default="_", description="Joins grouped theme names")
    tokens_dir: str = Field(default="tokens", description="Directory of token set JSON files")
    themes_file: str = Field(default="$themes.json", description="Theme manifest file name")
    output_dir: str = Field(default="dist/tokens", description="Root of generated output")
    output_references: bool = Field(
        default=True, description="Emit references on platforms that support them"
    )
    max_workers: int = Field(default=1, ge=1, le=64, description="Concurrent tasks")
    header: HeaderSettings = Field(default_factory=HeaderSettings)

    @model_validator(mode="after")
    def _check_themes(self) -> BuildSettings:
        if self.default_theme not in self.themes:
            raise ValueError(
                f"default_theme '{self.default_theme}' is not one of the themes {self.themes}"
            )
        unknown = [t for t in self.full_file_set_themes or [] if t not in self.themes]
        if unknown:
            raise ValueError(f"full_file_set_themes lists unknown themes: {unknown}")
        return self


# =============================================================================
# Loading
# =============================================================================


def get_settings_path(project_root: Path) -> Path:
    """Get the chassis.yaml file path."""
    return project_root / SETTINGS_FILE


def _parse_settings_data(data: dict[str, Any]) -> BuildSettings:
    header_data = data.get("header") or {}
    fields = {k: v for k, v in data.items() if k != "header"}
    return BuildSettings(**fields, header=HeaderSettings(**header_data))


def load_settings(project_root: Path, *, use_defaults: bool = True) -> BuildSettings:
    """Load build settings from chassis.yaml.

    Args:
        project_root: Root directory of the token project.
        use_defaults: If True, return default settings when the file doesn't exist.

    Returns:
        BuildSettings instance.

    Raises:
        SettingsError: If the file is missing (when use_defaults=False) or invalid.
    """
    settings_path = get_settings_path(project_root)

    if not settings_path.exists():
        if use_defaults:
            logger.debug("No chassis.yaml found, using defaults")
            return BuildSettings()
        raise SettingsError(f"Settings not found: {settings_path}")

    try:
        data = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {settings_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SettingsError(f"Not UTF-8 encoded: {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Could not read {settings_path}: {e}") from e

    if not data:
        if use_defaults:
            logger.warning(f"Empty chassis.yaml at {settings_path}, using defaults")
            return BuildSettings()
        raise SettingsError(f"Empty or invalid YAML in {settings_path}")
    if not isinstance(data, dict):
        raise SettingsError(f"Expected a mapping at the top of {settings_path}")

    try:
        return _parse_settings_data(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e
    except TypeError as e:
        raise SettingsError(f"Failed to parse settings in {settings_path}: {e}") from e
