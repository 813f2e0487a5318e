"""Unit tests for DeletionOperator.

Tests target collection, ordering, permanent deletion, batched trash
moves, partial failure, dry-run mode and cancellation.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from ignorectl.filesystem.concurrency import CancellationToken
from ignorectl.filesystem.models import DeleteOutcome
from ignorectl.filesystem.operator import DeletionOperator
from ignorectl.filesystem.scanner import IgnoreScanner
from ignorectl.tree.node import ScanNode


def _scan(root: Path) -> ScanNode:
    result = IgnoreScanner().scan(root)
    assert result.root is not None
    return result.root


class TestCollectTargets:
    """Tests for DeletionOperator.collect_targets."""

    def test_top_most_candidates(self, project_tree: Path) -> None:
        """Candidate directories are targets; their contents are not."""
        tree = _scan(project_tree)

        targets = DeletionOperator.collect_targets(tree)

        assert [t.path for t in targets] == [
            str(project_tree / "build"),
            str(project_tree / "debug.log"),
            str(project_tree / "src" / "trace.log"),
        ]

    def test_unselected_skipped(self, project_tree: Path) -> None:
        """Unselected subtrees contribute no targets."""
        tree = _scan(project_tree)
        build = tree.find(str(project_tree / "build"))
        assert build is not None
        build.set_selected(False)

        targets = DeletionOperator.collect_targets(tree)

        assert str(project_tree / "build") not in [t.path for t in targets]
        assert len(targets) == 2

    def test_mixed_candidate_descends(self, project_tree: Path) -> None:
        """A partially selected candidate directory yields its selected children."""
        tree = _scan(project_tree)
        obj = tree.find(str(project_tree / "build" / "obj"))
        assert obj is not None
        obj.set_selected(False)

        targets = DeletionOperator.collect_targets(tree)

        assert str(project_tree / "build" / "out.bin") in [t.path for t in targets]
        assert str(project_tree / "build") not in [t.path for t in targets]

    def test_accepts_node_list(self, project_tree: Path) -> None:
        """An iterable of top-level nodes is accepted."""
        tree = _scan(project_tree)
        assert len(DeletionOperator.collect_targets(tree.children)) == 3


class TestOrderTargets:
    """Tests for DeletionOperator.order_targets."""

    def test_files_first_then_deepest(self) -> None:
        """Files come before directories; longer paths first within each group."""
        short_dir = ScanNode("b", "/r/b", is_directory=True, is_candidate=True)
        long_dir = ScanNode("bb", "/r/a/bb", is_directory=True, is_candidate=True)
        short_file = ScanNode("f", "/r/f", is_directory=False, is_candidate=True)
        long_file = ScanNode("ff", "/r/a/ff", is_directory=False, is_candidate=True)

        ordered = DeletionOperator.order_targets([short_dir, short_file, long_dir, long_file])

        assert ordered == [long_file, short_file, long_dir, short_dir]


class TestPermanentDelete:
    """Tests for permanent deletion."""

    def test_deletes_and_detaches(self, project_tree: Path) -> None:
        """Targets are removed from disk and from the tree."""
        tree = _scan(project_tree)
        targets = DeletionOperator.collect_targets(tree)
        deleted: list[str] = []

        result = DeletionOperator(permanent=True).delete(
            targets, on_item_deleted=lambda node: deleted.append(node.path)
        )

        assert result.outcome == DeleteOutcome.COMPLETED
        assert not (project_tree / "build").exists()
        assert not (project_tree / "debug.log").exists()
        assert not (project_tree / "src" / "trace.log").exists()
        assert (project_tree / "src" / "keep.log").exists()
        assert (project_tree / "main.py").exists()
        assert sorted(deleted) == sorted(t.path for t in targets)
        assert result.freed_bytes == 122
        assert tree.children == ()
        assert tree.size_bytes == 0

    def test_symlink_removed_not_target(self, tmp_path: Path) -> None:
        """Deleting a link leaves the linked directory intact."""
        real = tmp_path / "real"
        real.mkdir()
        (real / "data").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        node = ScanNode("link", str(link), is_directory=True, is_candidate=True)

        result = DeletionOperator(permanent=True).delete([node])

        assert result.outcome == DeleteOutcome.COMPLETED
        assert not link.exists()
        assert (real / "data").exists()

    def test_failure_does_not_stop_others(self, tmp_path: Path) -> None:
        """A missing path fails alone and the run completes with warnings."""
        present = tmp_path / "present.tmp"
        present.write_text("x")
        missing = tmp_path / "missing.tmp"
        nodes = [
            ScanNode("missing.tmp", str(missing), is_directory=False, is_candidate=True),
            ScanNode("present.tmp", str(present), is_directory=False, is_candidate=True),
        ]

        result = DeletionOperator(permanent=True).delete(nodes)

        assert result.outcome == DeleteOutcome.COMPLETED_WITH_WARNINGS
        assert not present.exists()
        assert [n.path for n in result.deleted] == [str(present)]
        assert result.errors == [f"Failed to delete {missing}: Path does not exist"]
        failed = [item for item in result.items if not item.success]
        assert [item.path for item in failed] == [str(missing)]

    def test_all_failed(self, tmp_path: Path) -> None:
        """When nothing could be deleted the outcome is FAILED."""
        node = ScanNode("gone", str(tmp_path / "gone"), is_directory=False, is_candidate=True)

        result = DeletionOperator(permanent=True).delete([node])

        assert result.outcome == DeleteOutcome.FAILED
        assert result.deleted == []

    def test_failed_node_stays_in_tree(self, tmp_path: Path) -> None:
        """Targets that could not be deleted remain in the tree."""
        root = ScanNode("r", str(tmp_path), is_directory=True)
        node = ScanNode("gone", str(tmp_path / "gone"), is_directory=False, is_candidate=True)
        root.add_child(node)

        DeletionOperator(permanent=True).delete([node])

        assert root.children == (node,)


class TestTrashDelete:
    """Tests for moving targets to the trash."""

    def test_batches(self, tmp_path: Path) -> None:
        """Paths are handed to the trash in batches of batch_size."""
        nodes = [
            ScanNode(f"f{i}", str(tmp_path / f"f{i}"), is_directory=False, is_candidate=True)
            for i in range(5)
        ]

        with patch("ignorectl.filesystem.operator.send2trash") as mock_trash:
            result = DeletionOperator(batch_size=2).delete(nodes)

        assert mock_trash.call_count == 3
        batches = [call.args[0] for call in mock_trash.call_args_list]
        assert [len(b) for b in batches] == [2, 2, 1]
        assert result.outcome == DeleteOutcome.COMPLETED
        assert len(result.deleted) == 5

    def test_batch_failure_reported_once(self, tmp_path: Path) -> None:
        """A failing batch yields one error and failed items for each path."""
        nodes = [
            ScanNode(f"f{i}", str(tmp_path / f"f{i}"), is_directory=False, is_candidate=True)
            for i in range(3)
        ]

        with patch(
            "ignorectl.filesystem.operator.send2trash",
            side_effect=[OSError("trash unavailable"), None],
        ):
            result = DeletionOperator(batch_size=2).delete(nodes)

        first_batch = DeletionOperator.order_targets(nodes)[:2]
        assert result.errors == [
            f"Failed to move batch starting with {first_batch[0].path} to trash: trash unavailable"
        ]
        assert [item.success for item in result.items] == [False, False, True]
        assert len(result.deleted) == 1
        assert result.outcome == DeleteOutcome.COMPLETED_WITH_WARNINGS

    def test_trash_is_default(self, tmp_path: Path) -> None:
        """Without permanent=True nothing is removed permanently."""
        target = tmp_path / "a.log"
        target.write_text("x")
        node = ScanNode("a.log", str(target), is_directory=False, is_candidate=True)

        with patch("ignorectl.filesystem.operator.send2trash") as mock_trash:
            DeletionOperator().delete([node])

        mock_trash.assert_called_once_with([str(target)])
        assert target.exists()


class TestDryRunAndCancel:
    """Tests for dry-run and cancellation."""

    def test_dry_run_touches_nothing(self, project_tree: Path) -> None:
        """Dry-run reports targets but leaves disk and tree unchanged."""
        tree = _scan(project_tree)
        targets = DeletionOperator.collect_targets(tree)

        with patch("ignorectl.filesystem.operator.send2trash") as mock_trash:
            result = DeletionOperator(dry_run=True).delete(targets)

        mock_trash.assert_not_called()
        assert result.dry_run is True
        assert all(item.dry_run and item.success for item in result.items)
        assert len(result.items) == 3
        assert result.deleted == []
        assert (project_tree / "build").exists()
        assert len(tree.children) == 3

    @pytest.mark.parametrize("permanent", [True, False])
    def test_cancelled_before_start(self, tmp_path: Path, permanent: bool) -> None:
        """A cancelled token stops before the first target or batch."""
        target = tmp_path / "a.log"
        target.write_text("x")
        node = ScanNode("a.log", str(target), is_directory=False, is_candidate=True)
        token = CancellationToken()
        token.cancel()

        with patch("ignorectl.filesystem.operator.send2trash") as mock_trash:
            result = DeletionOperator(permanent=permanent).delete([node], cancel_token=token)

        mock_trash.assert_not_called()
        assert result.outcome == DeleteOutcome.CANCELLED
        assert target.exists()
