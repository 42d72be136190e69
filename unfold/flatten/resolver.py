"""
Collision resolution for the flat output namespace.

Every base name that occurs more than once across the whole tree is a
collision. Each file carrying such a name gets a numbered destination
``[conflict-{n}]-{stem}{ext}`` where ``n`` counts per base name, starting
at 1 in processing order. All other names pass through unchanged.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Set

from ..core.types import DiscoveredFile, LogEntry, ResolvedFile
from ..shared import split_name

logger = logging.getLogger(__name__)

CONFLICT_NAME_FORMAT = "[conflict-{counter}]-{stem}{ext}"


def conflict_name(base_name: str, counter: int) -> str:
    """Build the disambiguated name for the ``counter``-th occurrence."""
    stem, ext = split_name(base_name)
    return CONFLICT_NAME_FORMAT.format(counter=counter, stem=stem, ext=ext)


class CollisionResolver:
    """Assign collision-free destination names for one run."""

    def __init__(
        self,
        files: Sequence[DiscoveredFile],
        reserved_names: Iterable[str] = (),
    ):
        """
        Count base names over the complete file list.

        Args:
            files: Every file discovered by the walker
            reserved_names: Output names owned by the run itself (the audit
                document); a file with such a name is always renamed
        """
        self.name_counts: Counter = Counter(f.base_name for f in files)
        self.conflicts: Set[str] = {
            name for name, count in self.name_counts.items() if count > 1
        }
        self.conflicts.update(
            name for name in reserved_names if name in self.name_counts
        )
        self._counters: Dict[str, int] = {}

        if self.conflicts:
            logger.info(
                f"{len(self.conflicts)} colliding names across {len(files)} files"
            )

    def resolve(self, file: DiscoveredFile) -> ResolvedFile:
        """Return ``file`` with its destination name, advancing its counter."""
        dest_name = file.base_name
        if file.base_name in self.conflicts:
            counter = self._counters.get(file.base_name, 0) + 1
            dest_name = conflict_name(file.base_name, counter)
            # A source file may literally be named like a generated one
            while self._is_passed_through(dest_name):
                counter += 1
                dest_name = conflict_name(file.base_name, counter)
            self._counters[file.base_name] = counter

        return ResolvedFile(
            source_path=file.source_path,
            base_name=file.base_name,
            dest_name=dest_name,
        )

    def _is_passed_through(self, name: str) -> bool:
        return name in self.name_counts and name not in self.conflicts


def resolution_entry(resolved: ResolvedFile) -> LogEntry:
    """The COPIED or RENAMED entry recording a resolution."""
    if resolved.renamed:
        return LogEntry.renamed(
            resolved.source_path, resolved.dest_name, resolved.base_name
        )
    return LogEntry.copied(resolved.source_path, resolved.dest_name)


def resolve_all(
    files: Sequence[DiscoveredFile], reserved_names: Iterable[str] = ()
) -> List[ResolvedFile]:
    """Resolve a complete file list in order."""
    resolver = CollisionResolver(files, reserved_names)
    return [resolver.resolve(f) for f in files]
