"""
Platform configuration and task IR types.

A ``PlatformConfig`` is a static, declarative description of one build
target. A ``Task`` binds one (brand, app, platform, theme) combination to
a platform configuration and the token sets it reads.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class CommentStyle(StrEnum):
    """Comment syntax used for file headers and token comments."""

    SHORT = "short"
    XML = "xml"


class ReferenceStyle(StrEnum):
    """How a platform spells a reference to another token."""

    NONE = "none"
    CSS_VAR = "css-var"
    ANDROID_RESOURCE = "android-resource"


# =============================================================================
# Platform configuration
# =============================================================================


class FileSpec(BaseModel):
    """One output file of a platform."""

    model_config = ConfigDict(frozen=True)

    destination: str = Field(description="File name relative to the build path")
    filter: str = Field(description="Filter registry name")
    format: str = Field(description="Format registry name")
    options: dict[str, Any] = Field(default_factory=dict, description="Format-specific options")


class PlatformOptions(BaseModel):
    """Options shared by every file of a platform."""

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(default="", description="Name prefix for generated identifiers")
    base_px_font_size: float = Field(default=16.0, gt=0, description="Pixels per rem/vw unit")
    size_unit: str = Field(default="px", description="Unit for sizes inside composite values")
    output_references: bool = Field(default=False, description="Emit references, not literals")
    reference_style: ReferenceStyle = Field(default=ReferenceStyle.NONE)
    css_var_prefix: str = Field(
        default="#{$prefix}",
        description="Text inserted after '--' in CSS custom-property references",
    )
    comment_style: CommentStyle = Field(default=CommentStyle.SHORT)
    file_header_timestamp: bool = Field(default=False, description="Stamp generation time")
    imports: tuple[str, ...] = Field(default=(), description="Imports for class formats")
    access_control: str = Field(default="public", description="Swift access modifier")


class PlatformConfig(BaseModel):
    """Declarative description of how one platform is built."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Platform identifier (web, ios, android, ...)")
    name_transform: str = Field(description="Transform registry name used for token names")
    transforms: tuple[str, ...] = Field(default=(), description="Ordered value transforms")
    files: tuple[FileSpec, ...] = Field(default=(), description="Output files")
    build_path: str = Field(description="Directory the files are written to")
    options: PlatformOptions = Field(default_factory=PlatformOptions)
    expand: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Composite type -> sub-property type overrides; listed types are expanded",
    )
    file_extension: str = Field(default="", description="Extension of generated files")

    def output_paths(self) -> list[PurePosixPath]:
        return [PurePosixPath(self.build_path) / f.destination for f in self.files]


# =============================================================================
# Tasks
# =============================================================================


class Task(BaseModel):
    """One concrete (brand, app, platform, theme) build unit."""

    model_config = ConfigDict(frozen=True)

    brand: str
    app: str
    platform: str
    theme: str
    config: PlatformConfig
    permutation: str = Field(description="Permutation key the token sets came from")
    token_sets: tuple[str, ...] = Field(default=(), description="Sets that produce output")
    excludes: tuple[str, ...] = Field(default=(), description="Reference-only sets")
    full_file_set: bool = Field(default=True, description="Emit every file, not just theme colors")

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self.brand, self.app, self.platform, self.theme)

    @property
    def label(self) -> str:
        return f"{self.brand}/{self.app}-{self.platform} [{self.theme}]"

    def source_list(self) -> list[str]:
        """Sets to load in merge order: reference-only sets first."""
        ordered = list(self.excludes)
        ordered.extend(s for s in self.token_sets if s not in ordered)
        return ordered
