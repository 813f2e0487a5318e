"""Unit tests for scan and deletion result models."""

from ignorectl import __version__
from ignorectl.filesystem.models import (
    DeleteOutcome,
    DeleteResult,
    DeletionItemResult,
    ScanOutcome,
    ScanResult,
)
from ignorectl.tree.node import ScanNode


class TestScanResult:
    """Tests for ScanResult."""

    def test_outcomes(self) -> None:
        """Outcome reflects cancellation and recorded errors."""
        assert ScanResult(root_path="/r").outcome == ScanOutcome.COMPLETED
        warned = ScanResult(root_path="/r", errors=["x"])
        assert warned.outcome == ScanOutcome.COMPLETED_WITH_WARNINGS
        assert ScanResult(root_path="/r", cancelled=True).outcome == ScanOutcome.CANCELLED

    def test_to_dict(self) -> None:
        """to_dict includes metadata, summary, errors and the tree."""
        root = ScanNode("r", "/r", is_directory=True)
        leaf = ScanNode("a.log", "/r/a.log", is_directory=False, is_candidate=True, size_bytes=4)
        root.add_child(leaf)
        result = ScanResult(root_path="/r", root=root, candidate_count=1, total_bytes=4)

        data = result.to_dict()

        assert data["metadata"]["root"] == "/r"
        assert data["metadata"]["ignorectl_version"] == __version__
        assert data["metadata"]["outcome"] == "completed"
        assert data["summary"] == {"candidates": 1, "total_bytes": 4, "processed": 0}
        assert data["tree"]["children"][0]["matched_rule"] is None

    def test_to_dict_without_tree(self) -> None:
        """An empty scan serializes the tree as None."""
        assert ScanResult(root_path="/r").to_dict()["tree"] is None


class TestDeleteResult:
    """Tests for DeleteResult."""

    def test_outcomes(self) -> None:
        """Outcome distinguishes completed, partial, failed and cancelled runs."""
        node = ScanNode("a", "/r/a", is_directory=False, is_candidate=True, size_bytes=3)
        failed = DeletionItemResult(path="/r/b", success=False, error="nope")

        assert DeleteResult(deleted=[node]).outcome == DeleteOutcome.COMPLETED
        assert (
            DeleteResult(deleted=[node], items=[failed], errors=["nope"]).outcome
            == DeleteOutcome.COMPLETED_WITH_WARNINGS
        )
        assert DeleteResult(errors=["nope"]).outcome == DeleteOutcome.FAILED
        assert DeleteResult(cancelled=True).outcome == DeleteOutcome.CANCELLED

    def test_freed_bytes(self) -> None:
        """freed_bytes sums the sizes of deleted nodes."""
        nodes = [
            ScanNode("a", "/r/a", is_directory=False, is_candidate=True, size_bytes=3),
            ScanNode("b", "/r/b", is_directory=False, is_candidate=True, size_bytes=5),
        ]
        assert DeleteResult(deleted=nodes).freed_bytes == 8
