"""
Concurrent tree walker.

Lists every directory under the source root on a thread pool and collects
the regular files into one fully materialized list, since collision
resolution needs the complete set before any transfer decision.
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import List, Optional, Set, Tuple

from ..core.config import Settings
from ..core.config import settings as default_settings
from ..core.types import DiscoveredFile, EntryKind
from .classifier import PathClassifier
from .walk_stats import WalkStatistics

logger = logging.getLogger(__name__)

DirKey = Tuple[int, int]


class TreeWalker:
    """Enumerate all regular files below a root directory."""

    def __init__(
        self,
        classifier: PathClassifier,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize tree walker.

        Args:
            classifier: Classifier deciding what to record and what to skip
            settings: Settings providing the worker count
        """
        self.classifier = classifier
        self.settings = settings or default_settings
        self.stats = WalkStatistics()

    def walk(self, root: Path) -> List[DiscoveredFile]:
        """
        Walk ``root`` and return every regular file found.

        Unreadable directories and entries that cannot be stat'ed are logged
        and skipped. Directory symlinks are never followed; directories are
        also tracked by (device, inode) so no directory is listed twice.

        Args:
            root: Absolute path of the source root

        Returns:
            Discovered files, sorted by source path
        """
        self.stats = WalkStatistics()
        root = Path(root)
        files: List[DiscoveredFile] = []
        visited: Set[DirKey] = set()

        try:
            root_st = os.stat(root)
            visited.add((root_st.st_dev, root_st.st_ino))
        except OSError as e:
            logger.warning(f"Could not stat source root {root}: {e}")

        logger.info(
            f"Walking {root} with {self.settings.walker_workers} listing workers"
        )

        with ThreadPoolExecutor(max_workers=self.settings.walker_workers) as executor:
            pending: Set[Future] = {executor.submit(self._list_directory, root)}

            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    dir_files, subdirs = future.result()
                    files.extend(dir_files)

                    for subdir, key in subdirs:
                        if key in visited:
                            logger.debug(f"Skipping already visited directory {subdir}")
                            self.stats.increment("skipped_revisited_dirs")
                            continue
                        visited.add(key)
                        pending.add(executor.submit(self._list_directory, subdir))

        files.sort(key=lambda f: str(f.source_path))
        self.stats.files_discovered = len(files)
        self.stats.finish()

        logger.info(
            f"Walk complete: {len(files)} files in "
            f"{self.stats.directories_scanned} directories "
            f"({self.stats.total_skipped} skipped, {self.stats.total_errors} errors)"
        )
        return files

    def _list_directory(
        self, directory: Path
    ) -> Tuple[List[DiscoveredFile], List[Tuple[Path, DirKey]]]:
        """
        List and classify the entries of one directory.

        Returns:
            Tuple of (files found, subdirectories to descend into)
        """
        try:
            names = os.listdir(directory)
        except OSError as e:
            logger.warning(f"Could not read directory: {directory}: {e}")
            self.stats.record_error(str(directory), "unreadable_dir", str(e))
            return [], []

        self.stats.increment("directories_scanned")

        found: List[DiscoveredFile] = []
        subdirs: List[Tuple[Path, DirKey]] = []

        for name in sorted(names):
            if self.classifier.is_ignored_name(name):
                self.stats.increment("skipped_ignored")
                continue

            path = directory / name
            try:
                st = os.lstat(path)
            except OSError as e:
                logger.warning(f"Could not stat path: {path}: {e}")
                self.stats.record_error(str(path), "unstatable_entry", str(e))
                continue

            kind = self.classifier.classify(name, st, path)

            if kind == EntryKind.FILE:
                found.append(DiscoveredFile(source_path=path, base_name=name))
            elif kind == EntryKind.DIRECTORY:
                subdirs.append((path, (st.st_dev, st.st_ino)))
            elif kind == EntryKind.EXCLUDED_DIRECTORY:
                logger.debug(f"Not descending into excluded directory {path}")
                self.stats.increment("skipped_excluded_dirs")
            else:
                self.stats.increment("skipped_ignored")

        return found, subdirs
