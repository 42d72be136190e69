"""
Run report.

Turns the audit log of one run into the Markdown document written as
``documentation.md`` inside the output directory.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..core.types import LogEntry, LogEntryType
from ..shared import format_duration
from .messages import render_message

logger = logging.getLogger(__name__)

FILE_ENTRY_TYPES = (LogEntryType.COPIED, LogEntryType.RENAMED, LogEntryType.ERROR)

SECTION_TITLES = {
    LogEntryType.COPIED: "✅ Copied Files",
    LogEntryType.RENAMED: "🔵 Renamed Files",
    LogEntryType.ERROR: "❌ Errors",
}


class RunReport:
    """Partition and render the log entries of one run."""

    def __init__(
        self,
        source_root: Path,
        output_root: Path,
        log_entries: List[LogEntry],
        duration_ms: int,
        timestamp: Optional[datetime] = None,
    ):
        self.source_root = source_root
        self.output_root = output_root
        self.log_entries = log_entries
        self.duration_ms = duration_ms
        self.timestamp = timestamp or datetime.now()

    @property
    def run_level_entries(self) -> List[LogEntry]:
        return [e for e in self.log_entries if e.type.is_run_level]

    @property
    def file_entries(self) -> List[LogEntry]:
        return [e for e in self.log_entries if not e.type.is_run_level]

    def grouped(self) -> Dict[LogEntryType, List[LogEntry]]:
        """Per-file entries grouped by type, in log order."""
        groups: Dict[LogEntryType, List[LogEntry]] = {t: [] for t in FILE_ENTRY_TYPES}
        for entry in self.file_entries:
            groups[entry.type].append(entry)
        return groups

    def renamed_by_original(self) -> Dict[str, List[LogEntry]]:
        """RENAMED entries grouped by their pre-disambiguation name."""
        groups: Dict[str, List[LogEntry]] = {}
        for entry in self.log_entries:
            if entry.type == LogEntryType.RENAMED:
                groups.setdefault(entry.original_name or "", []).append(entry)
        return groups

    def counts(self) -> Dict[str, int]:
        return {t.value: len(entries) for t, entries in self.grouped().items()}

    def render_markdown(self) -> str:
        lines = [
            "# Unfold Log",
            "",
            f"*   **Source:** `{self.source_root}`",
            f"*   **Destination:** `{self.output_root}`",
            f"*   **Date:** {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            f"*   **Duration:** {format_duration(self.duration_ms)} seconds",
            "",
        ]

        summary = self.run_level_entries
        if summary:
            lines += ["## Summary", ""]
            for entry in summary:
                text = render_message(entry.message_key, entry.vars)
                lines.append(f"*   **{entry.type.value}:** {text}")
            lines += ["", "---", ""]

        groups = self.grouped()

        copied = groups[LogEntryType.COPIED]
        if copied:
            lines += [self._heading(LogEntryType.COPIED, len(copied)), ""]
            lines += [f"- `{entry.to}`" for entry in copied]
            lines.append("")

        if groups[LogEntryType.RENAMED]:
            lines += [
                self._heading(LogEntryType.RENAMED, len(groups[LogEntryType.RENAMED])),
                "",
            ]
            for original_name, entries in self.renamed_by_original().items():
                lines += [f"#### `{original_name}` ({len(entries)})", ""]
                lines += [
                    f"- **New:** `{entry.to}` (from `{entry.from_path}`)"
                    for entry in entries
                ]
                lines.append("")

        errors = groups[LogEntryType.ERROR]
        if errors:
            lines += [self._heading(LogEntryType.ERROR, len(errors)), ""]
            for entry in errors:
                lines.append(f"- **File:** `{entry.from_path}`")
                lines.append(f"  - **Error:** {entry.message}")
            lines.append("")

        return "\n".join(lines)

    def write(self, path: Path) -> Path:
        """
        Write the rendered document to ``path``.

        Names that are not valid UTF-8 on disk are written with backslash
        escapes so the document itself is always valid UTF-8.
        """
        path.write_text(
            self.render_markdown(), encoding="utf-8", errors="backslashreplace"
        )
        logger.info(f"Wrote run report to {path}")
        return path

    @staticmethod
    def _heading(entry_type: LogEntryType, count: int) -> str:
        return f"### {SECTION_TITLES[entry_type]} ({count})"
