"""
Transfer executor.

Copies each resolved file into the output directory, one at a time, so the
collision counters and progress percentages stay deterministic. A failing
file is recorded and skipped; in move mode the source tree is deleted only
when every copy succeeded.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.types import (
    DiscoveredFile,
    LogEntry,
    LogEntryType,
    ProgressEvent,
    ResolvedFile,
    RunMode,
    RunOptions,
)
from ..shared import compute_checksum
from . import messages
from .resolver import CollisionResolver, resolution_entry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class TransferResult(BaseModel):
    """Statistics of the transfer stage."""

    total_files: int = 0
    processed: int = 0
    transferred: int = 0
    renamed: int = 0
    failed: int = 0
    bytes_copied: int = 0
    source_deleted: bool = False
    dry_run: bool = False


class TransferExecutor:
    """Copy or move resolved files into the flat output directory."""

    def __init__(
        self,
        source_root: Path,
        output_root: Path,
        options: RunOptions,
        log_entries: Optional[List[LogEntry]] = None,
        settings: Optional[Settings] = None,
        walk_errors: int = 0,
    ):
        """
        Initialize transfer executor.

        Args:
            source_root: Folder being flattened (deleted after a clean move)
            output_root: Existing flat output directory
            options: Run options (mode and verification)
            log_entries: Log to append to; a new list if omitted
            settings: Settings providing the progress cadence
            walk_errors: Directories or entries the walk could not read; a
                move never deletes the source when this is non-zero
        """
        self.source_root = Path(source_root)
        self.output_root = Path(output_root)
        self.options = options
        self.settings = settings or default_settings
        self.log_entries: List[LogEntry] = (
            log_entries if log_entries is not None else []
        )
        self.copy_errors: List[LogEntry] = []
        self.walk_errors = walk_errors
        self.result = TransferResult(dry_run=options.is_dry_run)

    def iter_transfer(
        self, files: Sequence[DiscoveredFile], resolver: CollisionResolver
    ) -> Iterator[ProgressEvent]:
        """
        Resolve and transfer every file, yielding progress as it goes.

        Progress is reported every ``progress_every`` files and always on the
        last one. The move-mode epilogue runs once the loop is exhausted.

        Args:
            files: Complete list of discovered files
            resolver: Resolver built over the same list

        Yields:
            Progress events with non-decreasing percentages
        """
        total = len(files)
        self.result.total_files = total
        every = self.settings.progress_every

        logger.info(
            f"Transferring {total} files ({self.options.mode.value}) "
            f"into {self.output_root}"
        )

        if total == 0:
            yield ProgressEvent(progress=100, file="")

        for index, file in enumerate(files, start=1):
            resolved = resolver.resolve(file)
            self.log_entries.append(resolution_entry(resolved))
            if resolved.renamed:
                self.result.renamed += 1

            if not self.options.is_dry_run:
                self.transfer_one(resolved)

            self.result.processed = index
            if index % every == 0 or index == total:
                yield ProgressEvent(
                    progress=round(index / total * 100), file=file.base_name
                )

        if self.options.mode == RunMode.MOVE:
            self.finish_move()

    def execute(
        self,
        files: Sequence[DiscoveredFile],
        resolver: CollisionResolver,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """Run the transfer to completion, forwarding progress to a callback."""
        for event in self.iter_transfer(files, resolver):
            if progress_callback:
                progress_callback(event)
        return self.result

    def transfer_one(self, resolved: ResolvedFile) -> bool:
        """
        Copy a single file to its destination name.

        Any failure becomes an ERROR entry; nothing is raised.

        Returns:
            True if the file was copied
        """
        target_path = self.output_root / resolved.dest_name

        try:
            shutil.copy2(resolved.source_path, target_path)

            if self.options.verify:
                self._verify_copy(resolved.source_path, target_path)

            self.result.transferred += 1
            self.result.bytes_copied += os.path.getsize(target_path)
            logger.debug(f"Copied {resolved.source_path} → {target_path}")
            return True

        except Exception as e:
            logger.error(f"Error copying {resolved.source_path}: {e}")
            entry = LogEntry.error(resolved.source_path, str(e))
            self.log_entries.append(entry)
            self.copy_errors.append(entry)
            self.result.failed += 1
            return False

    def _verify_copy(self, source_path: Path, target_path: Path) -> None:
        source_checksum = compute_checksum(source_path)
        target_checksum = compute_checksum(target_path)
        if source_checksum is None or source_checksum != target_checksum:
            # Checksum mismatch - delete target and raise error
            target_path.unlink()
            raise ValueError(
                f"Checksum mismatch after copy: "
                f"expected {source_checksum}, got {target_checksum}"
            )

    def finish_move(self) -> None:
        """
        Delete the source tree if, and only if, every copy succeeded and
        the walk read the whole tree.

        Records the outcome as run-level entries.
        """
        if self.copy_errors:
            error_count = len(self.copy_errors)
            logger.error(
                f"{error_count} file(s) failed to copy; "
                f"keeping source folder {self.source_root}"
            )
            self.log_entries.append(
                LogEntry.run_level(
                    LogEntryType.FATAL, messages.MOVE_FATAL, errorCount=error_count
                )
            )
            return

        if self.walk_errors:
            logger.error(
                f"{self.walk_errors} path(s) could not be read during the walk; "
                f"keeping source folder {self.source_root}"
            )
            self.log_entries.append(
                LogEntry.run_level(
                    LogEntryType.FATAL,
                    messages.MOVE_WALK_ERRORS,
                    errorCount=self.walk_errors,
                )
            )
            return

        self.log_entries.append(
            LogEntry.run_level(LogEntryType.INFO, messages.MOVE_SUCCESS)
        )
        try:
            shutil.rmtree(self.source_root)
        except OSError as e:
            logger.error(f"Could not delete source folder {self.source_root}: {e}")
            self.log_entries.append(
                LogEntry.run_level(
                    LogEntryType.FATAL, messages.MOVE_DELETE_FAILED, error=str(e)
                )
            )
            return

        self.result.source_deleted = True
        logger.info(f"Deleted source folder {self.source_root}")
        self.log_entries.append(
            LogEntry.run_level(LogEntryType.SUCCESS, messages.MOVE_SUCCESS_DONE)
        )
