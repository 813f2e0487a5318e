"""Unit tests for shared CLI helpers."""

import time
from pathlib import Path

import pytest
from ignorectl.cli.types import run_cancellable, run_delete
from ignorectl.core.errors import ScanError
from ignorectl.filesystem.concurrency import CancellationToken
from ignorectl.filesystem.operator import DeletionOperator
from ignorectl.tree.node import ScanNode


class TestRunCancellable:
    """Tests for run_cancellable."""

    def test_returns_work_result(self) -> None:
        """The worker's return value is passed through."""
        assert run_cancellable(lambda token: 42) == 42

    def test_interrupt_cancels_token(self) -> None:
        """Ctrl+C cancels the token and returns the partial result."""
        tokens: list[CancellationToken] = []

        def work(token: CancellationToken) -> str:
            tokens.append(token)
            while not token.is_cancelled:
                time.sleep(0.01)
            return "stopped"

        def interrupt() -> None:
            raise KeyboardInterrupt

        assert run_cancellable(work, on_wait=interrupt) == "stopped"
        assert tokens[0].is_cancelled

    def test_worker_errors_propagate(self) -> None:
        """Exceptions raised by the work reach the caller."""

        def work(token: CancellationToken) -> None:
            raise ScanError("Scan root is not a directory: /x")

        with pytest.raises(ScanError):
            run_cancellable(work)


class TestRunDelete:
    """Tests for run_delete."""

    def test_deletes_on_worker(self, tmp_path: Path) -> None:
        """Targets are deleted and the result is returned."""
        victim = tmp_path / "a.log"
        victim.write_text("x")
        root = ScanNode("r", str(tmp_path), is_directory=True)
        node = ScanNode("a.log", str(victim), is_directory=False, is_candidate=True)
        root.add_child(node)

        result = run_delete(DeletionOperator(permanent=True), [node])

        assert result.deleted == [node]
        assert not victim.exists()
        assert root.children == ()
