"""
Type definitions for a flattening run.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunMode(str, Enum):
    """How discovered files reach the output directory."""

    COPY = "copy"
    MOVE = "move"
    DRY_RUN = "dry-run"


class EntryKind(str, Enum):
    """Classification of a single directory entry."""

    IGNORED = "ignored"
    FILE = "file"
    DIRECTORY = "directory"
    EXCLUDED_DIRECTORY = "excluded_directory"


class LogEntryType(str, Enum):
    """Kind of audit log entry."""

    # Per-file
    COPIED = "COPIED"
    RENAMED = "RENAMED"
    ERROR = "ERROR"

    # Run-level
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    FATAL = "FATAL"

    @property
    def is_run_level(self) -> bool:
        return self in (LogEntryType.INFO, LogEntryType.SUCCESS, LogEntryType.FATAL)


class DiscoveredFile(BaseModel):
    """A regular file found under the source root."""

    source_path: Path
    base_name: str

    model_config = ConfigDict(frozen=True)


class ResolvedFile(BaseModel):
    """A discovered file paired with its collision-free destination name."""

    source_path: Path
    base_name: str
    dest_name: str

    model_config = ConfigDict(frozen=True)

    @property
    def renamed(self) -> bool:
        return self.dest_name != self.base_name


class LogEntry(BaseModel):
    """
    One audit log entry.

    Per-file entries carry ``from_path``/``to``/``original_name``/``message``;
    run-level entries carry ``message_key`` and optional ``vars``.
    """

    type: LogEntryType
    from_path: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    original_name: Optional[str] = Field(default=None, alias="originalName")
    message: Optional[str] = None
    message_key: Optional[str] = Field(default=None, alias="messageKey")
    vars: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def copied(cls, source: Path, dest_name: str) -> "LogEntry":
        return cls(type=LogEntryType.COPIED, from_path=str(source), to=dest_name)

    @classmethod
    def renamed(cls, source: Path, dest_name: str, original_name: str) -> "LogEntry":
        return cls(
            type=LogEntryType.RENAMED,
            from_path=str(source),
            to=dest_name,
            original_name=original_name,
        )

    @classmethod
    def error(cls, source: Path, message: str) -> "LogEntry":
        return cls(type=LogEntryType.ERROR, from_path=str(source), message=message)

    @classmethod
    def run_level(
        cls, entry_type: LogEntryType, message_key: str, **variables: Any
    ) -> "LogEntry":
        if not entry_type.is_run_level:
            raise ValueError(f"{entry_type.value} is not a run-level entry type")
        return cls(
            type=entry_type,
            message_key=message_key,
            vars=variables or None,
        )


class RunOptions(BaseModel):
    """Immutable configuration for a single run."""

    mode: RunMode = RunMode.COPY
    should_zip: bool = Field(default=False, alias="shouldZip")
    should_open: bool = Field(default=False, alias="shouldOpen")
    verify: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def is_dry_run(self) -> bool:
        return self.mode == RunMode.DRY_RUN


class ProgressEvent(BaseModel):
    """Progress of the transfer stage."""

    progress: int = Field(ge=0, le=100)
    file: str = ""


class RunError(BaseModel):
    """Terminal error of a run that never produced a result."""

    message: str


class RunResult(BaseModel):
    """Terminal artifact of a completed run."""

    output_path: Path = Field(alias="outputPath")
    parent_path: Path = Field(alias="parentPath")
    log_entries: List[LogEntry] = Field(default_factory=list, alias="logEntries")
    duration_ms: int = Field(default=0, alias="durationMs")
    was_opened: bool = Field(default=False, alias="wasOpened")
    archive_path: Optional[Path] = Field(default=None, alias="archivePath")
    walk_stats: Optional[Dict[str, Any]] = Field(default=None, alias="walkStats")

    model_config = ConfigDict(populate_by_name=True)

    def count(self, entry_type: LogEntryType) -> int:
        return sum(1 for entry in self.log_entries if entry.type == entry_type)

    @property
    def error_count(self) -> int:
        return self.count(LogEntryType.ERROR)

    @property
    def has_failures(self) -> bool:
        """True if the log holds any ERROR or FATAL entry."""
        return self.error_count > 0 or self.count(LogEntryType.FATAL) > 0

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
