"""
Filesystem and formatting helpers used across the flattening stages.
"""

import hashlib
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def split_name(name: str) -> Tuple[str, str]:
    """
    Split a file name at its last extension separator.

    A name without an extension (or a dotfile such as ``.bashrc``) keeps the
    whole name as the stem and an empty extension.

    Args:
        name: Base file name

    Returns:
        Tuple of (stem, ext) where ext includes the leading dot
    """
    return os.path.splitext(name)


def compute_checksum(file_path: Path, algorithm: str = "sha256") -> Optional[str]:
    """
    Compute the checksum of a file using chunked reads.

    Args:
        file_path: Path to the file
        algorithm: Hash algorithm (sha256, md5, etc.)

    Returns:
        Hexadecimal checksum string, or None on error
    """
    try:
        hash_obj = hashlib.new(algorithm)

        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                hash_obj.update(chunk)

        return hash_obj.hexdigest()
    except OSError as e:
        logger.error(f"Error computing checksum for {file_path}: {e}")
        return None


def format_duration(duration_ms: int) -> str:
    """Format milliseconds as seconds with two decimals, e.g. ``1.23``."""
    return f"{duration_ms / 1000:.2f}"


def format_bytes(size_bytes: int) -> str:
    """
    Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "2.50 GB")
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.2f} {units[unit_index]}"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set logging level to DEBUG
        quiet: If True, set logging level to WARNING
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
