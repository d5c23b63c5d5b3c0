"""
Command-line interface.

Commands:
- build: Build every task and report failures
- permutations: Show the theme permutations
- tasks: Show the task matrix
- icons: Generate the icon font

Environment Variables:
    CHASSIS_LOG_LEVEL - Logging level (default: INFO)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import typer

from .build import BuildDriver
from .errors import TokensError

app = typer.Typer(
    help="Build design tokens for every brand, app, platform and theme.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.getenv("CHASSIS_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _driver(project_dir: Path) -> BuildDriver:
    return BuildDriver(project_dir.resolve())


@app.command("build")
def build_command(
    project_dir: Path = typer.Option(".", "--project", "-p", help="Project directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build every task and report all failures at the end."""
    _configure_logging(verbose)
    try:
        report = _driver(project_dir).run()
    except TokensError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{len(report.tasks)} tasks, {len(report.files_written)} files written")
    if not report.ok:
        typer.echo(f"Failures ({len(report.failures)}):", err=True)
        for line in report.failures:
            typer.echo(f"  ✗ {line}", err=True)
        raise typer.Exit(1)


@app.command("permutations")
def permutations_command(
    project_dir: Path = typer.Option(".", "--project", "-p", help="Project directory"),
) -> None:
    """Show every theme permutation and its token sets."""
    _configure_logging(False)
    try:
        permutations = _driver(project_dir).load_permutations()
    except TokensError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for name, permutation in permutations.items():
        typer.echo(name)
        typer.echo(f"  sets:     {', '.join(permutation.sets) or '-'}")
        typer.echo(f"  excludes: {', '.join(permutation.excludes) or '-'}")


@app.command("tasks")
def tasks_command(
    project_dir: Path = typer.Option(".", "--project", "-p", help="Project directory"),
) -> None:
    """Show the task matrix and the files each task writes."""
    _configure_logging(False)
    try:
        tasks = _driver(project_dir).plan()
    except TokensError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for task in tasks:
        typer.echo(f"{task.label} <- {task.permutation}")
        for path in task.config.output_paths():
            typer.echo(f"  {path}")


@app.command("icons")
def icons_command(
    project_dir: Path = typer.Option(".", "--project", "-p", help="Project directory"),
    timeout: float = typer.Option(300, "--timeout", help="Seconds before the tool is killed"),
) -> None:
    """Generate the icon font with fantasticon."""
    from .externals import ExternalStepError, build_icons

    _configure_logging(False)
    try:
        build_icons(project_dir.resolve(), timeout=timeout)
    except ExternalStepError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("Icon font generated")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
