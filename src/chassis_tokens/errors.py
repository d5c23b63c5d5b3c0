"""
Error types for the token build pipeline.

Errors are attributed to the narrowest scope that applies (token, file,
task, build). The build driver catches everything below ``TokensError``
per file or per task and reports it at the end of the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        token_path: Dotted path of the offending token
        raw_value: Raw (unresolved or untransformed) value
        target: Target unit or type the value was being converted to
        file: Output file destination
        task: Task identifier (brand/app/platform/theme)
    """

    token_path: str | None = None
    raw_value: Any = None
    target: str | None = None
    file: str | None = None
    task: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "token color.brand.primary (value '#zz') -> rgba"
        """
        parts: list[str] = []
        if self.task:
            parts.append(f"task {self.task}")
        if self.file:
            parts.append(f"file {self.file}")
        if self.token_path:
            location = f"token {self.token_path}"
            if self.raw_value is not None:
                location += f" (value {self.raw_value!r})"
            if self.target:
                location += f" -> {self.target}"
            parts.append(location)
        return ", ".join(parts)


class TokensError(Exception):
    """Base exception for all token pipeline errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            location = self.context.format()
            if location:
                return f"{location}: {self.message}"
        return self.message


class ConfigurationError(TokensError):
    """
    Raised when the build configuration is inconsistent.

    Examples:
    - Some themes declare a group and others do not
    - A platform references an unknown filter, transform or format
    - Two tasks would write the same output file
    """

    pass


class ResolutionError(TokensError):
    """
    Raised when a reference cannot be resolved.

    Examples:
    - ``{color.brand.missing}`` points at no token
    - A reference chain loops back on itself
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        chain: list[str] | None = None,
    ):
        self.chain = list(chain or [])
        super().__init__(message, context)


class TokenValueError(TokensError):
    """
    Raised when a value cannot be converted to a platform literal.

    Examples:
    - ``"abc"`` handed to a rem conversion
    - ``"4 / 0"`` in a math expression
    """

    pass


class LoadError(TokensError):
    """
    Raised when a token set or theme manifest cannot be read.

    Examples:
    - ``tokens/brand/chassis.json`` does not exist
    - A token file is not valid JSON
    """

    pass


class OutputError(TokensError):
    """Raised when an output path cannot be cleaned or written."""

    pass


class SettingsError(TokensError):
    """Error loading or validating the build settings file."""

    pass
