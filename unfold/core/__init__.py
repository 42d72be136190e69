"""Core types, settings and errors shared by every flattening stage."""

from .config import Settings, settings
from .errors import OutputDirectoryError, PreflightError, UnfoldError
from .types import (
    DiscoveredFile,
    EntryKind,
    LogEntry,
    LogEntryType,
    ProgressEvent,
    ResolvedFile,
    RunError,
    RunMode,
    RunOptions,
    RunResult,
)

__all__ = [
    "Settings",
    "settings",
    "UnfoldError",
    "PreflightError",
    "OutputDirectoryError",
    "DiscoveredFile",
    "EntryKind",
    "LogEntry",
    "LogEntryType",
    "ProgressEvent",
    "ResolvedFile",
    "RunError",
    "RunMode",
    "RunOptions",
    "RunResult",
]
