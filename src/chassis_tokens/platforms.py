"""
Built-in platform configurations.

Five platforms are known: three style-sheet variants (``web`` in rem,
``web-px``, ``web-vw``), ``ios`` (Swift class) and ``android`` (resource
XML). A configuration is constructed per task because its build path and
file list depend on the brand, app and theme.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from .errors import ConfigurationError
from .ir.platforms import (
    CommentStyle,
    FileSpec,
    PlatformConfig,
    PlatformOptions,
    ReferenceStyle,
)

FILE_EXTENSIONS: dict[str, str] = {
    "web": "scss",
    "web-px": "scss",
    "web-vw": "scss",
    "ios": "swift",
    "android": "xml",
}
PLATFORM_IDS: tuple[str, ...] = tuple(FILE_EXTENSIONS)

# File extension -> format registry name
FORMATS: dict[str, str] = {
    "scss": "scss/variables",
    "swift": "ios/swift-class",
    "xml": "android/resources",
}

WEB_PREFIX = "cx"
WEB_SIZE_UNITS: dict[str, str] = {"web": "rem", "web-px": "px", "web-vw": "vw"}

WEB_TRANSFORMS: tuple[str, ...] = (
    "math/resolve",
    "color/css",
    "font-weight/numeric",
    "number/web",
    "asset/web",
    "shadow/css",
    "typography/scss-map",
)
IOS_TRANSFORMS: tuple[str, ...] = (
    "math/resolve",
    "color/uicolor",
    "font-family/first",
    "font-weight/slug",
    "size/cgfloat",
    "string/swift",
    "asset/swift",
    "typography/swift",
    "shadow/swift",
)
ANDROID_TRANSFORMS: tuple[str, ...] = (
    "math/resolve",
    "color/android",
    "size/android",
    "font-family/first",
    "font-weight/slug",
)

# Composite types expanded on mobile, with sub-property type overrides
MOBILE_EXPAND: dict[str, dict[str, str]] = {
    "typography": {
        "lineHeight": "dimension",
        "paragraphSpacing": "dimension",
        "letterSpacing": "number",
    },
    "shadow": {},
}


def theme_file_stem(theme: str) -> str:
    return f"theme-{theme}Tokens"


def platform_files(platform_id: str, theme: str, *, full_file_set: bool) -> tuple[FileSpec, ...]:
    """Output files of one task.

    Args:
        platform_id: Platform identifier.
        theme: Theme the task builds.
        full_file_set: Emit every file; otherwise only the theme-color file.

    Returns:
        File specs in output order.
    """
    ext = FILE_EXTENSIONS[platform_id]
    fmt = FORMATS[ext]
    files = [
        FileSpec(destination=f"allTokens.{ext}", filter="all", format=fmt),
        FileSpec(destination=f"colorTokens.{ext}", filter="theme", format=fmt),
        FileSpec(destination=f"{theme_file_stem(theme)}.{ext}", filter="theme", format=fmt),
        FileSpec(destination=f"numberTokens.{ext}", filter="numeric", format=fmt),
        FileSpec(destination=f"stringTokens.{ext}", filter="string", format=fmt),
    ]
    if full_file_set:
        return tuple(files)
    return tuple(f for f in files if f.destination.startswith(theme_file_stem(theme)))


def build_path(
    output_dir: str, platform_id: str, brand: str, app: str, theme_dir: str | None = None
) -> str:
    """Output directory of a task: ``<output_dir>/<platform>/<brand>-<app>[/<theme>]``."""
    path = PurePosixPath(output_dir) / platform_id / f"{brand}-{app}"
    return str(path / theme_dir if theme_dir else path)


def get_platform_config(
    platform_id: str,
    *,
    brand: str,
    app: str,
    theme: str,
    full_file_set: bool = True,
    theme_dir: bool = False,
    output_dir: str = "dist/tokens",
    output_references: bool = True,
    file_header_timestamp: bool = False,
) -> PlatformConfig:
    """Build the configuration of one platform for one task.

    Args:
        platform_id: Platform identifier.
        brand: Brand name.
        app: App name.
        theme: Theme the task builds.
        full_file_set: Emit every file; otherwise only the theme-color file.
        theme_dir: Write into a ``<theme>`` subdirectory of the brand-app
            directory. Set for full file sets of non-default themes.
        output_dir: Root of generated output.
        output_references: Emit references where the platform supports them.
        file_header_timestamp: Stamp generated files with the build time.

    Raises:
        ConfigurationError: If ``platform_id`` is not a known platform.
    """
    if platform_id not in FILE_EXTENSIONS:
        raise ConfigurationError(
            f"Unknown platform '{platform_id}'. Known platforms: {', '.join(PLATFORM_IDS)}"
        )

    common: dict[str, Any] = {
        "id": platform_id,
        "files": platform_files(platform_id, theme, full_file_set=full_file_set),
        "build_path": build_path(
            output_dir, platform_id, brand, app, theme if theme_dir else None
        ),
        "file_extension": FILE_EXTENSIONS[platform_id],
    }

    if platform_id in WEB_SIZE_UNITS:
        unit = WEB_SIZE_UNITS[platform_id]
        return PlatformConfig(
            **common,
            name_transform="name/kebab",
            transforms=(*WEB_TRANSFORMS, f"size/{unit}"),
            options=PlatformOptions(
                prefix=WEB_PREFIX,
                size_unit=unit,
                output_references=output_references,
                reference_style=ReferenceStyle.CSS_VAR,
                comment_style=CommentStyle.SHORT,
                file_header_timestamp=file_header_timestamp,
            ),
        )

    if platform_id == "ios":
        return PlatformConfig(
            **common,
            name_transform="name/pascal",
            transforms=IOS_TRANSFORMS,
            expand=MOBILE_EXPAND,
            options=PlatformOptions(
                comment_style=CommentStyle.SHORT,
                file_header_timestamp=file_header_timestamp,
                imports=("UIKit",),
            ),
        )

    return PlatformConfig(
        **common,
        name_transform="name/snake",
        transforms=ANDROID_TRANSFORMS,
        expand=MOBILE_EXPAND,
        options=PlatformOptions(
            output_references=output_references,
            reference_style=ReferenceStyle.ANDROID_RESOURCE,
            comment_style=CommentStyle.XML,
            file_header_timestamp=file_header_timestamp,
        ),
    )
