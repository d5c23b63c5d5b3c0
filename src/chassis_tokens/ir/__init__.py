"""
Intermediate representation types for the token pipeline.

All types are re-exported from this package.
"""

from .platforms import (
    CommentStyle,
    FileSpec,
    PlatformConfig,
    PlatformOptions,
    ReferenceStyle,
    Task,
)
from .themes import Permutation, Theme, TokenSetState
from .tokens import (
    EXTENSION_NAMESPACE,
    RenderToken,
    Token,
    TokenEntry,
    TokenGraph,
    TokenSnapshot,
    is_raw_token,
)

__all__ = [
    "EXTENSION_NAMESPACE",
    "CommentStyle",
    "FileSpec",
    "Permutation",
    "PlatformConfig",
    "PlatformOptions",
    "ReferenceStyle",
    "RenderToken",
    "Task",
    "Theme",
    "Token",
    "TokenEntry",
    "TokenGraph",
    "TokenSetState",
    "TokenSnapshot",
    "is_raw_token",
]
