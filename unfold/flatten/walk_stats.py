"""
Walk statistics for the discovery pass.

Tracks what the tree walker saw, and why entries were left out, so a run
with unreadable subtrees can be diagnosed after the fact.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class WalkStatistics:
    """
    Counters for one walk.

    Listing tasks run on worker threads, so every mutation goes through
    ``increment``/``record_error`` which hold the instance lock.
    """

    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0

    directories_scanned: int = 0
    files_discovered: int = 0

    skipped_ignored: int = 0  # OS artifacts, symlinks, special files
    skipped_excluded_dirs: int = 0  # output root, node_modules
    skipped_revisited_dirs: int = 0  # same (device, inode) seen before

    errors_unreadable_dirs: int = 0
    errors_unstatable_entries: int = 0

    error_samples: List[Dict[str, str]] = field(default_factory=list)
    max_error_samples: int = 50

    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def increment(self, counter: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def record_error(self, path: str, error_type: str, error_msg: str) -> None:
        """Record an error with its path for debugging."""
        with self._lock:
            if error_type == "unreadable_dir":
                self.errors_unreadable_dirs += 1
            else:
                self.errors_unstatable_entries += 1
            if len(self.error_samples) < self.max_error_samples:
                self.error_samples.append(
                    {
                        "path": str(path),
                        "type": error_type,
                        "message": str(error_msg)[:200],
                    }
                )

    @property
    def duration_seconds(self) -> float:
        if self.end_time > 0:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    @property
    def total_skipped(self) -> int:
        return (
            self.skipped_ignored
            + self.skipped_excluded_dirs
            + self.skipped_revisited_dirs
        )

    @property
    def total_errors(self) -> int:
        return self.errors_unreadable_dirs + self.errors_unstatable_entries

    def finish(self) -> None:
        """Mark the walk as complete."""
        self.end_time = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "duration_seconds": round(self.duration_seconds, 2),
            "directories_scanned": self.directories_scanned,
            "files_discovered": self.files_discovered,
            "total_skipped": self.total_skipped,
            "total_errors": self.total_errors,
            "skip_reasons": {
                "ignored": self.skipped_ignored,
                "excluded_dirs": self.skipped_excluded_dirs,
                "revisited_dirs": self.skipped_revisited_dirs,
            },
            "error_reasons": {
                "unreadable_dirs": self.errors_unreadable_dirs,
                "unstatable_entries": self.errors_unstatable_entries,
            },
            "error_samples": list(self.error_samples),
        }

    def to_summary(self) -> str:
        """Generate a human-readable summary."""
        lines = [
            f"Walk completed in {self.duration_seconds:.2f}s",
            f"Directories scanned: {self.directories_scanned:,}",
            f"Files discovered: {self.files_discovered:,}",
        ]
        if self.total_skipped:
            lines.append(f"Entries skipped: {self.total_skipped:,}")
        if self.total_errors:
            lines.append(
                f"Unreadable: {self.errors_unreadable_dirs:,} directories, "
                f"{self.errors_unstatable_entries:,} entries"
            )
        return "\n".join(lines)
