"""
Shared utilities for unfold.
"""

from .fs_utils import (
    compute_checksum,
    format_bytes,
    format_duration,
    setup_logging,
    split_name,
)

__all__ = [
    "compute_checksum",
    "format_bytes",
    "format_duration",
    "setup_logging",
    "split_name",
]
