"""
Run coordinator.

Drives one flattening run from pre-flight to archive: classify and walk the
source, resolve names, transfer, write the audit document, optionally open
and archive the result. Progress and the terminal value are delivered as a
stream of events.
"""

import logging
import os
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

import click

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.errors import OutputDirectoryError, UnfoldError
from ..core.types import LogEntry, ProgressEvent, RunError, RunOptions, RunResult
from .archiver import create_zip_archive
from .classifier import PathClassifier, preflight
from .executor import ProgressCallback, TransferExecutor, TransferResult
from .report import RunReport
from .resolver import CollisionResolver
from .walk_stats import WalkStatistics
from .walker import TreeWalker

logger = logging.getLogger(__name__)

RunEvent = Union[ProgressEvent, RunResult, RunError]
Opener = Callable[[Path], None]


def launch_path(path: Path) -> None:
    """Open ``path`` in the platform file manager."""
    click.launch(str(path))


class Unfolder:
    """Flatten one source folder into ``<source>_unfolded``."""

    def __init__(
        self,
        source: Union[str, Path],
        options: Optional[RunOptions] = None,
        settings: Optional[Settings] = None,
        opener: Optional[Opener] = None,
    ):
        """
        Initialize a run.

        Args:
            source: Folder to flatten
            options: Run options (copy by default)
            settings: Settings; the module-level instance if omitted
            opener: Callable opening a folder for the user
        """
        self.settings = settings or default_settings
        self.options = options or RunOptions()
        self.opener = opener or launch_path

        self.source_root = Path(os.path.abspath(Path(source).expanduser()))
        self.output_root = self.settings.output_path_for(self.source_root)
        self.archive_path = self.settings.archive_path_for(self.source_root)
        self.report_path = self.output_root / self.settings.report_filename

        self.walk_stats: Optional[WalkStatistics] = None
        self.transfer_result: Optional[TransferResult] = None

    def iter_events(self) -> Iterator[RunEvent]:
        """
        Execute the run as a stream of events.

        Yields progress events, then exactly one RunResult or RunError. When
        archiving is requested it runs after the RunResult is yielded; if it
        fails the error is appended to the same result, which is yielded
        again.
        """
        dry_run = self.options.is_dry_run
        logger.info(
            f"Starting unfold of {self.source_root} "
            f"({'DRY RUN' if dry_run else self.options.mode.value})"
        )

        try:
            preflight(self.source_root, self.settings)
        except UnfoldError as e:
            logger.error(f"Pre-flight rejected {self.source_root}: {e.message}")
            yield RunError(message=e.message)
            return

        start_time = time.monotonic()
        log_entries: List[LogEntry] = []

        try:
            if not dry_run:
                self._create_output_root()

            classifier = PathClassifier(self.output_root, self.settings)
            walker = TreeWalker(classifier, self.settings)
            files = walker.walk(self.source_root)
            self.walk_stats = walker.stats

            resolver = CollisionResolver(
                files, reserved_names={self.settings.report_filename}
            )
            executor = TransferExecutor(
                self.source_root,
                self.output_root,
                self.options,
                log_entries=log_entries,
                settings=self.settings,
                walk_errors=walker.stats.total_errors,
            )
            yield from executor.iter_transfer(files, resolver)
            self.transfer_result = executor.result

            duration_ms = int((time.monotonic() - start_time) * 1000)

            if not dry_run:
                self._write_report(log_entries, duration_ms)

            result = RunResult(
                output_path=self.output_root,
                parent_path=self.output_root.parent,
                log_entries=log_entries,
                duration_ms=duration_ms,
                was_opened=self._open_result(),
                walk_stats=self.walk_stats.to_dict(),
            )

        except UnfoldError as e:
            logger.error(f"Unfold process failed: {e.message}")
            yield RunError(message=e.message)
            return
        except Exception as e:
            logger.exception("Unfold process failed")
            yield RunError(message=str(e) or "An unknown error occurred.")
            return

        logger.info(
            f"Unfold complete in {result.duration_ms} ms: "
            f"{self.transfer_result.processed} files processed, "
            f"{result.error_count} errors"
        )
        yield result

        if self.options.should_zip and not dry_run:
            if not self._archive(result):
                yield result

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> RunResult:
        """
        Execute the run to completion.

        Raises:
            UnfoldError: If the run was rejected or could not continue
        """
        result: Optional[RunResult] = None
        for event in self.iter_events():
            if isinstance(event, ProgressEvent):
                if progress_callback:
                    progress_callback(event)
            elif isinstance(event, RunError):
                raise UnfoldError(event.message)
            else:
                result = event
        if result is None:
            raise UnfoldError("Run ended without a result")
        return result

    def _create_output_root(self) -> None:
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(
                f"Could not create output directory {self.output_root}: {e}"
            ) from e

    def _write_report(self, log_entries: List[LogEntry], duration_ms: int) -> None:
        report = RunReport(self.source_root, self.output_root, log_entries, duration_ms)
        try:
            report.write(self.report_path)
        except (OSError, UnicodeError) as e:
            logger.error(f"Could not write run report {self.report_path}: {e}")
            log_entries.append(
                LogEntry.error(self.report_path, f"Failed to write run report: {e}")
            )

    def _open_result(self) -> bool:
        if not self.options.should_open or self.options.is_dry_run:
            return False
        path_to_open = (
            self.output_root.parent if self.options.should_zip else self.output_root
        )
        try:
            self.opener(path_to_open)
        except Exception as e:
            logger.warning(f"Could not open {path_to_open}: {e}")
            return False
        return True

    def _archive(self, result: RunResult) -> bool:
        try:
            create_zip_archive(self.output_root, self.archive_path, self.settings)
        except Exception as e:
            logger.error(f"Zipping failed: {e}")
            result.log_entries.append(
                LogEntry.error(
                    self.output_root, f"Failed to create ZIP archive: {e}"
                )
            )
            return False
        result.archive_path = self.archive_path
        return True


def iter_unfold(
    source: Union[str, Path],
    options: Optional[RunOptions] = None,
    settings: Optional[Settings] = None,
    opener: Optional[Opener] = None,
) -> Iterator[RunEvent]:
    """Stream the events of one run; see ``Unfolder.iter_events``."""
    return Unfolder(source, options, settings=settings, opener=opener).iter_events()


def unfold(
    source: Union[str, Path],
    options: Optional[RunOptions] = None,
    progress_callback: Optional[ProgressCallback] = None,
    settings: Optional[Settings] = None,
    opener: Optional[Opener] = None,
) -> RunResult:
    """
    Flatten ``source`` and return the run result.

    Args:
        source: Folder to flatten
        options: Run options (copy by default)
        progress_callback: Called with every progress event
        settings: Settings override
        opener: Callable opening a folder for the user

    Returns:
        The completed run's result

    Raises:
        UnfoldError: If the run was rejected or could not continue
    """
    return Unfolder(source, options, settings=settings, opener=opener).run(
        progress_callback
    )
