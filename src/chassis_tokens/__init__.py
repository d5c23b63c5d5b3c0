"""
Chassis Tokens: design token transformation and multi-platform build pipeline.

Turns a Tokens Studio token tree into style-sheet variables, Swift classes
and Android resources for every brand, app, platform and theme.
"""

from ._version import __version__
from .build import BuildDriver, BuildReport, build
from .errors import (
    ConfigurationError,
    LoadError,
    OutputError,
    ResolutionError,
    SettingsError,
    TokensError,
    TokenValueError,
)
from .permutator import permutate_themes
from .preprocessor import preprocess
from .tasks import Registries, generate_tasks

__all__ = [
    "__version__",
    "BuildDriver",
    "BuildReport",
    "ConfigurationError",
    "LoadError",
    "OutputError",
    "Registries",
    "ResolutionError",
    "SettingsError",
    "TokenValueError",
    "TokensError",
    "build",
    "generate_tasks",
    "permutate_themes",
    "preprocess",
]
