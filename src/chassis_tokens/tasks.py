"""
Task matrix generator.

Every (brand, app, platform, theme) combination becomes one ``Task``
bound to its platform configuration and the token sets of its theme
permutation. Tasks come out in a fixed order: brands, then apps, then
platforms, then themes, each in configured order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from .errors import ConfigurationError
from .filters import FilterRegistry, default_filters
from .ir.platforms import PlatformConfig, Task
from .ir.themes import Permutation
from .permutator import DEFAULT_SEPARATOR
from .platforms import get_platform_config
from .renderers import FormatRegistry, default_formats
from .settings import BuildSettings
from .transforms import TransformRegistry, default_transforms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registries:
    """Filters, transforms and formats, built once and passed explicitly."""

    filters: FilterRegistry = field(default_factory=default_filters)
    transforms: TransformRegistry = field(default_factory=default_transforms)
    formats: FormatRegistry = field(default_factory=default_formats)

    def validate(self, config: PlatformConfig) -> None:
        """Check that every name a platform configuration uses is registered.

        Raises:
            ConfigurationError: On the first unknown filter, transform or format.
        """
        self.transforms.get_name(config.name_transform)
        for name in config.transforms:
            self.transforms.get_value(name)
        for file in config.files:
            self.filters.get(file.filter)
            self.formats.get(file.format)


def find_permutation(
    permutations: Mapping[str, Permutation],
    brand: str,
    app: str,
    theme: str,
    separator: str = DEFAULT_SEPARATOR,
) -> Permutation:
    """Find the permutation for a task.

    The grouped key ``<brand><sep><app><sep><theme>`` is tried first, then
    the bare theme name for manifests without groups.

    Raises:
        ConfigurationError: If neither key exists.
    """
    grouped = separator.join([brand, app, theme])
    for key in (grouped, theme):
        if key in permutations:
            return permutations[key]
    raise ConfigurationError(
        f"No theme permutation named '{grouped}' or '{theme}'. "
        f"Available: {', '.join(permutations) or 'none'}"
    )


def _check_disjoint_outputs(tasks: Sequence[Task]) -> None:
    owners: dict[PurePosixPath, Task] = {}
    for task in tasks:
        for path in task.config.output_paths():
            if path in owners:
                raise ConfigurationError(
                    f"Tasks {owners[path].label} and {task.label} both write {path}"
                )
            owners[path] = task


def generate_tasks(
    brands: Sequence[str],
    apps: Mapping[str, Sequence[str]],
    themes: Sequence[str],
    default_theme: str,
    permutations: Mapping[str, Permutation],
    *,
    full_file_set_themes: Sequence[str] | None = None,
    separator: str = DEFAULT_SEPARATOR,
    output_dir: str = "dist/tokens",
    output_references: bool = True,
    file_header_timestamp: bool = False,
    registries: Registries | None = None,
) -> list[Task]:
    """Compute the task matrix.

    Args:
        brands: Brand names.
        apps: App name -> platform ids.
        themes: Theme names.
        default_theme: Theme emitting the full file set when
            ``full_file_set_themes`` is not given. Other themes with a full
            file set write into a ``<theme>`` subdirectory.
        permutations: Output of the theme permutator.
        full_file_set_themes: Themes whose tasks emit every file.
        separator: Separator of grouped permutation names.
        output_dir: Root of generated output.
        output_references: Emit references where the platform supports them.
        file_header_timestamp: Stamp generated files with the build time.
        registries: Registries to validate platform configurations against.

    Returns:
        Tasks in brand, app, platform, theme order.

    Raises:
        ConfigurationError: On an unknown platform, filter, transform or
            format, a missing permutation, or two tasks sharing an output file.
    """
    registries = registries or Registries()
    full_themes = set(full_file_set_themes) if full_file_set_themes is not None else {default_theme}

    tasks: list[Task] = []
    for brand in brands:
        for app, platforms in apps.items():
            for platform_id in platforms:
                for theme in themes:
                    permutation = find_permutation(permutations, brand, app, theme, separator)
                    full = theme in full_themes
                    config = get_platform_config(
                        platform_id,
                        brand=brand,
                        app=app,
                        theme=theme,
                        full_file_set=full,
                        theme_dir=full and theme != default_theme,
                        output_dir=output_dir,
                        output_references=output_references,
                        file_header_timestamp=file_header_timestamp,
                    )
                    registries.validate(config)
                    tasks.append(
                        Task(
                            brand=brand,
                            app=app,
                            platform=platform_id,
                            theme=theme,
                            config=config,
                            permutation=permutation.name,
                            token_sets=permutation.sets,
                            excludes=permutation.excludes,
                            full_file_set=full,
                        )
                    )

    _check_disjoint_outputs(tasks)
    logger.debug("Generated %d tasks", len(tasks))
    return tasks


def tasks_for_settings(
    settings: BuildSettings,
    permutations: Mapping[str, Permutation],
    registries: Registries | None = None,
) -> list[Task]:
    """Compute the task matrix described by build settings."""
    return generate_tasks(
        settings.brands,
        settings.apps,
        settings.themes,
        settings.default_theme,
        permutations,
        full_file_set_themes=settings.full_file_set_themes,
        separator=settings.separator,
        output_dir=settings.output_dir,
        output_references=settings.output_references,
        file_header_timestamp=settings.header.timestamp,
        registries=registries,
    )
