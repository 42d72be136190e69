"""
Flattening engine.

Walks a nested source folder, resolves base-name collisions and copies or
moves every regular file into a single ``<source>_unfolded`` directory,
with per-file failure isolation, an all-or-nothing move, a Markdown audit
document and an optional ZIP archive.
"""

from .archiver import create_zip_archive
from .classifier import PathClassifier, preflight
from .executor import TransferExecutor, TransferResult
from .report import RunReport
from .resolver import CollisionResolver, conflict_name, resolve_all
from .runner import Unfolder, iter_unfold, unfold
from .walk_stats import WalkStatistics
from .walker import TreeWalker

__all__ = [
    "create_zip_archive",
    "PathClassifier",
    "preflight",
    "TransferExecutor",
    "TransferResult",
    "RunReport",
    "CollisionResolver",
    "conflict_name",
    "resolve_all",
    "Unfolder",
    "iter_unfold",
    "unfold",
    "WalkStatistics",
    "TreeWalker",
]
