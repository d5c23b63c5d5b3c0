"""
Build driver.

Runs the whole pipeline for a token project:

1. Load settings, the theme manifest and the permutations.
2. Generate the task matrix.
3. Load, merge and preprocess the token sets of every permutation once.
   The resulting graphs are read-only from here on.
4. Run every task: clean its own output files, then build each file.

Tasks write disjoint files and share only read-only inputs, so they run
sequentially or on a thread pool with the same result. Errors are
collected per file and per task and reported together at the end.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ._version import __version__
from .dictionary import TokenDictionary
from .errors import ErrorContext, OutputError, TokensError
from .ir.platforms import FileSpec, Task
from .ir.themes import Permutation
from .ir.tokens import TokenGraph
from .loader import TokenSource, load_themes
from .permutator import permutate_themes
from .preprocessor import preprocess
from .renderers import FileHeader, Renderer
from .settings import BuildSettings, load_settings
from .tasks import Registries, tasks_for_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass
class FileResult:
    """Outcome of building one output file."""

    destination: str
    path: Path | None = None
    token_count: int = 0
    errors: list[TokensError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class TaskResult:
    """Outcome of one task."""

    task: Task
    files: list[FileResult] = field(default_factory=list)
    error: TokensError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and all(f.ok for f in self.files)

    @property
    def written(self) -> list[Path]:
        return [f.path for f in self.files if f.ok and f.path is not None]


@dataclass
class BuildReport:
    """Everything that happened during a build."""

    tasks: list[TaskResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(t.ok for t in self.tasks)

    @property
    def files_written(self) -> list[Path]:
        return [path for t in self.tasks for path in t.written]

    @property
    def failures(self) -> list[str]:
        """One line per failure, attributed to its task and file."""
        lines: list[str] = []
        for result in self.tasks:
            label = result.task.label
            if result.error is not None:
                lines.append(f"{label}: {result.error}")
            for file in result.files:
                lines.extend(f"{label} {file.destination}: {e}" for e in file.errors)
        return lines

    def log_summary(self) -> None:
        for line in self.failures:
            logger.error(line)
        failed = sum(1 for t in self.tasks if not t.ok)
        logger.info(
            "Built %d tasks, %d files written, %d tasks failed",
            len(self.tasks),
            len(self.files_written),
            failed,
        )


# =============================================================================
# Driver
# =============================================================================


class BuildDriver:
    """
    Builds every task of a token project.

    Args:
        project_root: Directory holding chassis.yaml and the tokens directory.
        settings: Build settings; loaded from ``project_root`` when omitted.
        registries: Filter, transform and format registries.
        clock: Source of the header timestamp, read once per build.
    """

    def __init__(
        self,
        project_root: Path,
        settings: BuildSettings | None = None,
        registries: Registries | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.project_root = project_root
        self.settings = settings if settings is not None else load_settings(project_root)
        self.registries = registries or Registries()
        self.renderer = Renderer(self.registries.formats)
        self.clock = clock
        self.source = TokenSource(project_root / self.settings.tokens_dir)
        self._graphs: dict[str, TokenGraph] = {}
        self._load_errors: dict[str, TokensError] = {}

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def load_permutations(self) -> dict[str, Permutation]:
        """Read the theme manifest and expand it into permutations."""
        tokens_dir = self.project_root / self.settings.tokens_dir
        themes = load_themes(tokens_dir / self.settings.themes_file)
        return permutate_themes(themes, separator=self.settings.separator)

    def plan(self) -> list[Task]:
        """Generate the task matrix.

        Raises:
            ConfigurationError: If the configuration cannot produce a valid matrix.
            LoadError: If the theme manifest cannot be read.
        """
        return tasks_for_settings(self.settings, self.load_permutations(), self.registries)

    def prepare(self, tasks: list[Task]) -> None:
        """Load and preprocess the token graph of every permutation the tasks use.

        A permutation that fails to load is remembered, and every task that
        depends on it fails with the same error.
        """
        for task in tasks:
            if task.permutation in self._graphs or task.permutation in self._load_errors:
                continue
            try:
                merged = self.source.merged(task.source_list())
                self._graphs[task.permutation] = preprocess(merged)
                logger.debug(f"Prepared permutation {task.permutation}")
            except TokensError as e:
                logger.debug(f"Permutation {task.permutation} failed to load: {e}")
                self._load_errors[task.permutation] = e

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _header(self, task: Task, generated_at: datetime) -> FileHeader:
        header = self.settings.header
        stamped = header.timestamp or task.config.options.file_header_timestamp
        return FileHeader(
            tool_name=header.tool_name,
            version=header.version or __version__,
            copyright=header.copyright,
            license=header.license,
            generated_at=generated_at if stamped else None,
        )

    def output_path(self, task: Task, file: FileSpec) -> Path:
        return self.project_root / task.config.build_path / file.destination

    def clean(self, task: Task) -> None:
        """Remove the task's own output files and create its build directory.

        Raises:
            OutputError: If a file cannot be removed or the directory created.
        """
        build_dir = self.project_root / task.config.build_path
        try:
            for file in task.config.files:
                self.output_path(task, file).unlink(missing_ok=True)
            build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(
                f"Could not clean {build_dir}: {e}", ErrorContext(task=task.label)
            ) from e

    def build_file(
        self, task: Task, dictionary: TokenDictionary, file: FileSpec, header: FileHeader
    ) -> FileResult:
        """Filter, render and write one file.

        Token and render errors fail only this file.

        Raises:
            OutputError: If the file cannot be written; this aborts the task.
        """
        result = FileResult(destination=file.destination)
        selection = dictionary.select(self.registries.filters.get(file.filter))
        if selection.errors:
            result.errors.extend(selection.errors)
            return result

        try:
            text = self.renderer.render(selection.tokens, file, task.config.options, header)
        except TokensError as e:
            result.errors.append(e)
            return result

        path = self.output_path(task, file)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise OutputError(
                f"Could not write {path}: {e}",
                ErrorContext(task=task.label, file=file.destination),
            ) from e
        result.path = path
        result.token_count = len(selection.tokens)
        logger.info(f"Wrote {path.relative_to(self.project_root)} ({result.token_count} tokens)")
        return result

    def run_task(self, task: Task, generated_at: datetime) -> TaskResult:
        """Clean, then build every file of one task."""
        result = TaskResult(task=task)
        logger.info(f"Starting: {task.label}")

        if task.permutation in self._load_errors:
            result.error = self._load_errors[task.permutation]
            return result
        graph = self._graphs.get(task.permutation)
        if graph is None:
            result.error = TokensError(
                f"Permutation {task.permutation} was not prepared", ErrorContext(task=task.label)
            )
            return result

        try:
            self.clean(task)
            dictionary = TokenDictionary(graph, task, self.registries.transforms)
            header = self._header(task, generated_at)
            for file in task.config.files:
                result.files.append(self.build_file(task, dictionary, file, header))
        except TokensError as e:
            result.error = e

        status = "Completed" if result.ok else "Failed"
        logger.info(f"{status}: {task.label}")
        return result

    def run(self, tasks: list[Task] | None = None) -> BuildReport:
        """Build every task and return the report.

        Args:
            tasks: Tasks to run; the full matrix when omitted.

        Raises:
            ConfigurationError: If the task matrix cannot be generated.
        """
        tasks = self.plan() if tasks is None else tasks
        self.prepare(tasks)
        generated_at = self.clock()

        report = BuildReport()
        workers = min(self.settings.max_workers, len(tasks)) if tasks else 1
        if workers <= 1:
            report.tasks = [self.run_task(task, generated_at) for task in tasks]
        else:
            results: dict[int, TaskResult] = {}
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.run_task, task, generated_at): index
                    for index, task in enumerate(tasks)
                }
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            # Report in task order, not completion order
            report.tasks = [results[i] for i in range(len(tasks))]

        report.log_summary()
        return report


def build(project_root: Path, settings: BuildSettings | None = None) -> BuildReport:
    """Build a token project with the built-in registries."""
    return BuildDriver(project_root, settings).run()
