"""
Path classification and pre-flight checks.

Decides, for each directory entry, whether the walker ignores it, records it
as a file, or recurses into it. The checks that reject a whole run also live
here so they can run before anything touches the filesystem.
"""

import logging
import os
import stat as stat_module
from pathlib import Path
from typing import Optional

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.errors import PreflightError
from ..core.types import EntryKind

logger = logging.getLogger(__name__)


class PathClassifier:
    """Classify directory entries against the ignore and disallowed sets."""

    def __init__(self, output_root: Path, settings: Optional[Settings] = None):
        """
        Initialize classifier.

        Args:
            output_root: Flattened output directory, never recursed into
            settings: Settings providing the ignore and disallowed name sets
        """
        self.settings = settings or default_settings
        self.output_root = Path(os.path.abspath(output_root))

    def classify(self, name: str, st: os.stat_result, path: Path) -> EntryKind:
        """
        Classify one entry by its name and its own (non-followed) stat.

        Args:
            name: Entry name within its directory
            st: Result of ``lstat`` on the entry
            path: Absolute path of the entry

        Returns:
            The entry's kind
        """
        if self.is_ignored_name(name):
            return EntryKind.IGNORED

        if stat_module.S_ISDIR(st.st_mode):
            if self.is_excluded_directory(name, path):
                return EntryKind.EXCLUDED_DIRECTORY
            return EntryKind.DIRECTORY

        if stat_module.S_ISREG(st.st_mode):
            return EntryKind.FILE

        # Symlinks, sockets, FIFOs and devices
        return EntryKind.IGNORED

    def is_ignored_name(self, name: str) -> bool:
        """True for OS artifact names, checked before any stat call."""
        return name in self.settings.ignored_names

    def is_excluded_directory(self, name: str, path: Path) -> bool:
        if name in self.settings.disallowed_dir_names:
            return True
        return Path(os.path.abspath(path)) == self.output_root


def preflight(source_root: Path, settings: Optional[Settings] = None) -> None:
    """
    Reject a source folder before any filesystem mutation.

    Args:
        source_root: Folder to be flattened
        settings: Settings providing the suffix and disallowed names

    Raises:
        PreflightError: If the folder must not be flattened
    """
    settings = settings or default_settings

    if not source_root.name:
        raise PreflightError(f"Cannot unfold a filesystem root: {source_root}")

    try:
        is_dir = source_root.is_dir()
    except OSError as e:
        raise PreflightError(
            f"A critical error occurred while checking the source folder: {e}"
        ) from e
    if not is_dir:
        raise PreflightError(f"Source folder does not exist: {source_root}")

    for dir_name in sorted(settings.disallowed_dir_names):
        try:
            present = (source_root / dir_name).is_dir()
        except OSError as e:
            raise PreflightError(
                f"A critical error occurred while checking the source folder: {e}"
            ) from e
        if present:
            raise PreflightError(
                f'Source folder contains a "{dir_name}" directory. '
                "This is not supported to prevent errors."
            )

    if source_root.name.endswith(settings.output_suffix):
        raise PreflightError("Cannot run Unfold on an already unfolded directory.")

    logger.debug(f"Pre-flight checks passed for {source_root}")
