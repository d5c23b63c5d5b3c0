"""
External build steps.

Icon font generation and similar steps run as opaque child processes.
Each step is bounded by a timeout and fails with ``ExternalStepError``;
it never touches token outputs that were already written.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import TokensError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300
ICON_FONT_COMMAND: tuple[str, ...] = ("npx", "fantasticon")


class ExternalStepError(TokensError):
    """Raised when an external step exits non-zero, times out or cannot start."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


@dataclass(frozen=True)
class StepResult:
    """Output of a completed external step."""

    command: tuple[str, ...]
    stdout: str
    stderr: str


def run_external_step(
    cmd: Sequence[str],
    timeout: float = DEFAULT_TIMEOUT,
    cwd: Path | None = None,
) -> StepResult:
    """Run a child process to completion.

    Args:
        cmd: Command and arguments.
        timeout: Seconds before the child is killed.
        cwd: Working directory of the child.

    Returns:
        StepResult with captured output.

    Raises:
        ExternalStepError: On non-zero exit, timeout or a missing executable.
    """
    command = tuple(cmd)
    logger.info("Running: %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=str(cwd) if cwd else None,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalStepError(f"{command[0]} timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise ExternalStepError(f"{command[0]} not found") from e

    if result.returncode != 0:
        logger.error("%s failed:\n%s", command[0], result.stderr)
        raise ExternalStepError(
            f"{' '.join(command)} exited with status {result.returncode}",
            returncode=result.returncode,
            stderr=result.stderr,
        )
    if result.stderr:
        logger.warning("%s wrote to stderr:\n%s", command[0], result.stderr)
    return StepResult(command=command, stdout=result.stdout, stderr=result.stderr)


def build_icons(project_root: Path, timeout: float = DEFAULT_TIMEOUT) -> StepResult:
    """Generate the icon font with fantasticon (configured by .fantasticonrc)."""
    return run_external_step(ICON_FONT_COMMAND, timeout=timeout, cwd=project_root)
