"""Tests for the transfer executor."""

import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from unfold.core.types import LogEntryType, RunMode, RunOptions
from unfold.flatten import messages
from unfold.flatten.classifier import PathClassifier
from unfold.flatten.executor import TransferExecutor
from unfold.flatten.resolver import CollisionResolver
from unfold.flatten.walker import TreeWalker


def discover(source: Path, settings):
    output_root = settings.output_path_for(source)
    walker = TreeWalker(PathClassifier(output_root, settings), settings)
    return walker.walk(source), output_root


def run_transfer(source: Path, settings, mode=RunMode.COPY, verify=False):
    files, output_root = discover(source, settings)
    if mode != RunMode.DRY_RUN:
        output_root.mkdir()
    executor = TransferExecutor(
        source, output_root, RunOptions(mode=mode, verify=verify), settings=settings
    )
    events = list(executor.iter_transfer(files, CollisionResolver(files)))
    return executor, events, output_root


class TestCopy:
    """Test copy mode."""

    def test_copies_into_flat_directory(self, make_tree, settings):
        """Test every file lands in the output directory with its content."""
        source = make_tree({"a.txt": "top", "sub/a.txt": "nested", "sub/b.txt": "b"})

        executor, _, output_root = run_transfer(source, settings)

        assert sorted(p.name for p in output_root.iterdir()) == [
            "[conflict-1]-a.txt",
            "[conflict-2]-a.txt",
            "b.txt",
        ]
        assert (output_root / "[conflict-1]-a.txt").read_text() == "top"
        assert (output_root / "[conflict-2]-a.txt").read_text() == "nested"
        assert executor.result.transferred == 3
        assert executor.result.renamed == 2
        assert executor.result.bytes_copied == len("top") + len("nested") + 1

    def test_source_untouched(self, make_tree, settings):
        """Test copy mode leaves the source tree in place."""
        source = make_tree({"a.txt": "a", "sub/b.txt": "b"})

        run_transfer(source, settings)

        assert (source / "a.txt").read_text() == "a"
        assert (source / "sub" / "b.txt").read_text() == "b"

    def test_log_entry_per_file(self, make_tree, settings):
        """Test each file produces exactly one resolution entry."""
        source = make_tree({"a.txt": "1", "x/a.txt": "2", "c.txt": "3"})

        executor, _, _ = run_transfer(source, settings)
        types = [e.type for e in executor.log_entries]

        assert types.count(LogEntryType.RENAMED) == 2
        assert types.count(LogEntryType.COPIED) == 1
        assert not any(t.is_run_level for t in types)

    def test_failed_copy_isolated(self, make_tree, settings):
        """Test one failing file becomes an ERROR and the rest still copy."""
        source = make_tree({"a.txt": "a", "bad.txt": "x", "c.txt": "c"})
        real_copy2 = shutil.copy2

        def flaky_copy2(src, dst, *args, **kwargs):
            if Path(src).name == "bad.txt":
                raise PermissionError("Permission denied")
            return real_copy2(src, dst, *args, **kwargs)

        with patch("unfold.flatten.executor.shutil.copy2", side_effect=flaky_copy2):
            executor, _, output_root = run_transfer(source, settings)

        errors = [e for e in executor.log_entries if e.type == LogEntryType.ERROR]
        assert len(errors) == 1
        assert errors[0].from_path == str(source / "bad.txt")
        assert "Permission denied" in errors[0].message
        assert sorted(p.name for p in output_root.iterdir()) == ["a.txt", "c.txt"]
        assert executor.result.failed == 1
        assert executor.result.transferred == 2

    def test_verify_mismatch_removes_copy(self, make_tree, settings):
        """Test a checksum mismatch deletes the copy and records an ERROR."""
        source = make_tree({"a.txt": "content"})
        checksums = iter(["aaa", "bbb"])

        with patch(
            "unfold.flatten.executor.compute_checksum",
            side_effect=lambda path: next(checksums),
        ):
            executor, _, output_root = run_transfer(source, settings, verify=True)

        assert not (output_root / "a.txt").exists()
        (error,) = [e for e in executor.log_entries if e.type == LogEntryType.ERROR]
        assert "Checksum mismatch" in error.message

    def test_verify_match_keeps_copy(self, make_tree, settings):
        """Test verified copies are kept."""
        source = make_tree({"a.txt": "content"})

        executor, _, output_root = run_transfer(source, settings, verify=True)

        assert (output_root / "a.txt").read_text() == "content"
        assert executor.result.failed == 0


class TestDryRun:
    """Test dry-run mode."""

    def test_no_filesystem_changes(self, make_tree, settings):
        """Test dry-run creates nothing and keeps the full audit log."""
        source = make_tree({"a.txt": "1", "sub/a.txt": "2"})

        with patch("unfold.flatten.executor.shutil.copy2") as mock_copy:
            executor, _, output_root = run_transfer(source, settings, RunMode.DRY_RUN)

        mock_copy.assert_not_called()
        assert not output_root.exists()
        assert [e.to for e in executor.log_entries] == [
            "[conflict-1]-a.txt",
            "[conflict-2]-a.txt",
        ]
        assert executor.result.dry_run
        assert executor.result.transferred == 0


class TestMove:
    """Test move mode."""

    def test_clean_move_deletes_source(self, make_tree, settings):
        """Test the source tree is deleted after every copy succeeded."""
        source = make_tree({"a.txt": "a", "sub/b.txt": "b"})

        executor, _, output_root = run_transfer(source, settings, RunMode.MOVE)

        assert not source.exists()
        assert (output_root / "a.txt").read_text() == "a"
        assert executor.result.source_deleted
        run_level = [e for e in executor.log_entries if e.type.is_run_level]
        assert [(e.type, e.message_key) for e in run_level] == [
            (LogEntryType.INFO, messages.MOVE_SUCCESS),
            (LogEntryType.SUCCESS, messages.MOVE_SUCCESS_DONE),
        ]

    def test_failed_copy_keeps_source(self, make_tree, settings):
        """Test a single copy failure keeps the whole source tree."""
        source = make_tree({"a.txt": "a", "sub/b.txt": "b"})
        real_copy2 = shutil.copy2

        def flaky_copy2(src, dst, *args, **kwargs):
            if Path(src).name == "b.txt":
                raise OSError("disk full")
            return real_copy2(src, dst, *args, **kwargs)

        with patch("unfold.flatten.executor.shutil.copy2", side_effect=flaky_copy2):
            executor, _, _ = run_transfer(source, settings, RunMode.MOVE)

        assert (source / "a.txt").exists()
        assert (source / "sub" / "b.txt").exists()
        assert not executor.result.source_deleted
        fatal = executor.log_entries[-1]
        assert fatal.type == LogEntryType.FATAL
        assert fatal.message_key == messages.MOVE_FATAL
        assert fatal.vars == {"errorCount": 1}

    def test_walk_errors_keep_source(self, make_tree, settings):
        """Test a walk that could not read everything never deletes the source."""
        source = make_tree({"a.txt": "a"})
        files, output_root = discover(source, settings)
        output_root.mkdir()
        executor = TransferExecutor(
            source,
            output_root,
            RunOptions(mode=RunMode.MOVE),
            settings=settings,
            walk_errors=2,
        )

        with patch("unfold.flatten.executor.shutil.rmtree") as mock_rmtree:
            list(executor.iter_transfer(files, CollisionResolver(files)))

        mock_rmtree.assert_not_called()
        assert source.exists()
        assert not executor.result.source_deleted
        fatal = executor.log_entries[-1]
        assert fatal.type == LogEntryType.FATAL
        assert fatal.message_key == messages.MOVE_WALK_ERRORS
        assert fatal.vars == {"errorCount": 2}

    def test_delete_failure_is_fatal(self, make_tree, settings):
        """Test a failing source deletion is recorded as FATAL."""
        source = make_tree({"a.txt": "a"})

        with patch(
            "unfold.flatten.executor.shutil.rmtree",
            side_effect=OSError("Device or resource busy"),
        ):
            executor, _, _ = run_transfer(source, settings, RunMode.MOVE)

        assert source.exists()
        run_level = [e for e in executor.log_entries if e.type.is_run_level]
        assert [e.type for e in run_level] == [LogEntryType.INFO, LogEntryType.FATAL]
        assert run_level[-1].message_key == messages.MOVE_DELETE_FAILED
        assert "busy" in run_level[-1].vars["error"]


class TestProgress:
    """Test progress reporting."""

    def test_cadence_and_final_event(self, make_tree, settings):
        """Test events every N files plus one on the last file."""
        source = make_tree({f"f{i:02d}.txt": str(i) for i in range(25)})

        _, events, _ = run_transfer(source, settings)

        assert [e.progress for e in events] == [40, 80, 100]
        assert events[-1].file == "f24.txt"

    def test_custom_cadence(self, make_tree, settings):
        """Test the cadence follows the configured interval."""
        source = make_tree({f"f{i}.txt": "x" for i in range(4)})
        settings = settings.model_copy(update={"progress_every": 1})

        _, events, _ = run_transfer(source, settings)

        assert [e.progress for e in events] == [25, 50, 75, 100]

    def test_progress_monotonic(self, make_tree, settings):
        """Test percentages never decrease and end at 100."""
        source = make_tree({f"d{i % 3}/f{i}.txt": "x" for i in range(37)})
        settings = settings.model_copy(update={"progress_every": 3})

        _, events, _ = run_transfer(source, settings)
        values = [e.progress for e in events]

        assert values == sorted(values)
        assert values[-1] == 100

    def test_zero_files(self, make_tree, settings):
        """Test an empty tree still reports completion."""
        source = make_tree({})

        executor, events, output_root = run_transfer(source, settings)

        assert [(e.progress, e.file) for e in events] == [(100, "")]
        assert executor.log_entries == []
        assert list(output_root.iterdir()) == []

    def test_execute_forwards_events(self, make_tree, settings):
        """Test execute() passes every event to the callback."""
        source = make_tree({"a.txt": "a"})
        files, output_root = discover(source, settings)
        output_root.mkdir()
        executor = TransferExecutor(
            source, output_root, RunOptions(), settings=settings
        )
        received = []

        result = executor.execute(files, CollisionResolver(files), received.append)

        assert [e.progress for e in received] == [100]
        assert result.transferred == 1


@pytest.mark.parametrize("mode", [RunMode.COPY, RunMode.MOVE])
def test_error_count_matches_failures(make_tree, settings, mode):
    """Test every failed copy is one ERROR entry."""
    source = make_tree({f"f{i}.txt": "x" for i in range(5)})

    with patch(
        "unfold.flatten.executor.shutil.copy2", side_effect=OSError("read-only")
    ):
        executor, _, _ = run_transfer(source, settings, mode)

    errors = [e for e in executor.log_entries if e.type == LogEntryType.ERROR]
    assert len(errors) == 5
    assert executor.result.failed == 5
    assert source.exists()
