"""
Output formats.

Each format owns one concrete syntax and renders a Jinja2 template from
the templates/ directory. Rendering is a pure function of the token
list, the file spec, the platform options and the file header: the
header's timestamp is fixed by the caller, never read from the clock here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import ConfigurationError, ErrorContext, OutputError
from .ir.platforms import CommentStyle, FileSpec, PlatformOptions
from .ir.tokens import RenderToken
from .transforms import android_resource_kind, parse_number, pascal_case

logger = logging.getLogger(__name__)

# Template directory
TEMPLATES_DIR = Path(__file__).parent / "templates"

DO_NOT_EDIT = "Do not edit directly, this file was auto-generated."
ANDROID_FLOAT_DIMEN = ' type="dimen" format="float"'


# =============================================================================
# File header
# =============================================================================


@dataclass(frozen=True)
class FileHeader:
    """Lines at the top of every generated file."""

    tool_name: str = "Chassis - Tokens"
    version: str | None = None
    copyright: str | None = None
    license: str | None = "Licensed under MIT"
    generated_at: datetime | None = None

    def lines(self, destination: str) -> list[str]:
        lines = [destination, "", DO_NOT_EDIT]
        if self.generated_at is not None:
            lines.append(f"Generated on {self.generated_at.strftime('%a, %d %b %Y %H:%M:%S')}")
        lines.append("")
        lines.append(f"{self.tool_name} v{self.version}" if self.version else self.tool_name)
        if self.copyright:
            lines.append(self.copyright)
        if self.license:
            lines.append(self.license)
        return lines

    def render(self, destination: str, style: CommentStyle) -> str:
        """Render the header as a comment block in ``style``."""
        lines = self.lines(destination)
        if style == CommentStyle.XML:
            body = [f"  {_xml_comment_text(line)}".rstrip() for line in lines]
            return "\n".join(["<!--", *body, "-->"])
        body = [f"// {line}".rstrip() for line in lines]
        return "\n".join(["//", *body, "//"])


def _xml_comment_text(text: str) -> str:
    # "--" is not allowed inside an XML comment
    return text.replace("--", "- -")


# =============================================================================
# Formats
# =============================================================================

ContextBuilder = Callable[[list[RenderToken], FileSpec, PlatformOptions], dict[str, Any]]


@dataclass(frozen=True)
class Format:
    """A named output syntax backed by one template."""

    name: str
    template: str
    context: ContextBuilder = field(repr=False)


def _scss_context(
    tokens: list[RenderToken], file: FileSpec, options: PlatformOptions
) -> dict[str, Any]:
    return {"tokens": tokens}


def swift_class_name(destination: str) -> str:
    """``theme-darkTokens.swift`` -> ``ThemeDarkTokens``"""
    return pascal_case([PurePosixPath(destination).stem])


def _swift_context(
    tokens: list[RenderToken], file: FileSpec, options: PlatformOptions
) -> dict[str, Any]:
    access = file.options.get("access_control", options.access_control)
    return {
        "tokens": tokens,
        "imports": list(file.options.get("imports", options.imports)),
        "access_prefix": f"{access} " if access else "",
        "class_name": file.options.get("class_name") or swift_class_name(file.destination),
    }


def android_element(token: RenderToken) -> tuple[str, str]:
    """Element name and extra attributes of an Android resource.

    A unitless dimension such as a line-height ratio is written as a float
    item of the dimen type rather than a ``<dimen>`` element.
    """
    kind = android_resource_kind(token.type)
    if kind == "dimen" and not token.is_reference:
        parsed = parse_number(token.value)
        if parsed is not None and not parsed[1]:
            return "item", ANDROID_FLOAT_DIMEN
    return kind, ""


def _android_context(
    tokens: list[RenderToken], file: FileSpec, options: PlatformOptions
) -> dict[str, Any]:
    fixed_kind = file.options.get("resource_type")
    rows = []
    for token in tokens:
        kind, attributes = (fixed_kind, "") if fixed_kind else android_element(token)
        rows.append(
            {
                "token": token,
                "kind": kind,
                "attributes": attributes,
                "comment": _xml_comment_text(token.description) if token.description else "",
            }
        )
    return {"rows": rows}


SCSS_VARIABLES = Format("scss/variables", "scss_variables.scss.j2", _scss_context)
IOS_SWIFT_CLASS = Format("ios/swift-class", "ios_swift_class.swift.j2", _swift_context)
ANDROID_RESOURCES = Format("android/resources", "android_resources.xml.j2", _android_context)


class FormatRegistry:
    """Immutable mapping of format name to Format."""

    def __init__(self, formats: Iterable[Format]):
        self._formats: Mapping[str, Format] = {f.name: f for f in formats}

    def get(self, name: str) -> Format:
        try:
            return self._formats[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown format '{name}'. Known formats: {', '.join(sorted(self._formats))}"
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._formats

    def names(self) -> list[str]:
        return list(self._formats)


def default_formats() -> FormatRegistry:
    """Build the registry of built-in formats."""
    return FormatRegistry([SCSS_VARIABLES, IOS_SWIFT_CLASS, ANDROID_RESOURCES])


# =============================================================================
# Rendering
# =============================================================================


def create_jinja_env(templates_dir: Path | None = None) -> Environment:
    """Create the Jinja2 environment for output templates."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )


class Renderer:
    """Renders files through a format registry and one Jinja2 environment."""

    def __init__(self, formats: FormatRegistry, env: Environment | None = None):
        self.formats = formats
        self.env = env or create_jinja_env()

    def render(
        self,
        tokens: list[RenderToken],
        file: FileSpec,
        options: PlatformOptions,
        header: FileHeader,
    ) -> str:
        """Render one output file.

        Args:
            tokens: Transformed tokens, already sorted by name.
            file: The file being rendered.
            options: Platform options.
            header: File header lines.

        Returns:
            Complete file text.

        Raises:
            ConfigurationError: If the file names an unknown format.
            OutputError: If the template fails to render.
        """
        fmt = self.formats.get(file.format)
        logger.debug("Rendering %s as %s with %d tokens", file.destination, fmt.name, len(tokens))
        context = fmt.context(tokens, file, options)
        context["header"] = header.render(file.destination, options.comment_style)
        try:
            return self.env.get_template(fmt.template).render(**context)
        except TemplateError as e:
            raise OutputError(
                f"Template {fmt.template} failed: {e}", ErrorContext(file=file.destination)
            ) from e
