"""Result models for scan and deletion runs.

Both results are created fresh for each operation. Errors are recorded as
path-scoped human-readable strings instead of being raised.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ignorectl.tree.node import ScanNode

DEFAULT_IGNORE_FILE_NAMES: tuple[str, ...] = (".gitignore", ".ignore")
DEFAULT_PROGRESS_INTERVAL = 50
DEFAULT_BATCH_SIZE = 50


class ScanOutcome(str, Enum):
    """Terminal state of a scan.

    Attributes:
        COMPLETED: Traversal finished without recorded errors.
        COMPLETED_WITH_WARNINGS: Traversal finished, some paths could not be read.
        CANCELLED: Cancellation was requested; the tree is partial.
    """

    COMPLETED = "completed"
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"
    CANCELLED = "cancelled"


class DeleteOutcome(str, Enum):
    """Terminal state of a deletion run.

    Attributes:
        COMPLETED: Every target was removed.
        COMPLETED_WITH_WARNINGS: Some targets failed, others were removed.
        FAILED: Nothing was removed and at least one target failed.
        CANCELLED: Cancellation was requested before all targets were processed.
    """

    COMPLETED = "completed"
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class ScanResult:
    """Result of scanning one root tree.

    Attributes:
        root_path: Absolute path of the scanned root.
        root: Root of the result tree, None when nothing matched.
        errors: Path-scoped error messages recorded during the scan.
        candidate_count: Number of top-most candidate nodes.
        total_bytes: Combined size of the top-most candidates.
        processed_count: Filesystem entries visited.
        cancelled: Whether the scan stopped on cancellation.
        scanned_at: ISO 8601 timestamp of the scan start.
    """

    root_path: str
    root: ScanNode | None = None
    errors: list[str] = field(default_factory=list)
    candidate_count: int = 0
    total_bytes: int = 0
    processed_count: int = 0
    cancelled: bool = False
    scanned_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def outcome(self) -> ScanOutcome:
        if self.cancelled:
            return ScanOutcome.CANCELLED
        if self.errors:
            return ScanOutcome.COMPLETED_WITH_WARNINGS
        return ScanOutcome.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        from ignorectl import __version__

        return {
            "metadata": {
                "root": self.root_path,
                "scanned_at": self.scanned_at,
                "ignorectl_version": __version__,
                "outcome": self.outcome.value,
            },
            "summary": {
                "candidates": self.candidate_count,
                "total_bytes": self.total_bytes,
                "processed": self.processed_count,
            },
            "errors": list(self.errors),
            "tree": self.root.to_dict() if self.root is not None else None,
        }


@dataclass(frozen=True, slots=True)
class DeletionItemResult:
    """Outcome for a single deletion target.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the path was removed.
        error: Error message if the operation failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual deletion).
    """

    path: str
    success: bool
    error: str | None = None
    dry_run: bool = False


@dataclass(slots=True)
class DeleteResult:
    """Result of a deletion run.

    Attributes:
        deleted: Nodes removed from disk (and from the tree).
        items: Per-target outcomes in processing order.
        errors: Path-scoped error messages; batch failures appear once.
        cancelled: Whether the run stopped on cancellation.
        dry_run: Whether nothing was actually deleted.
    """

    deleted: list[ScanNode] = field(default_factory=list)
    items: list[DeletionItemResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False
    dry_run: bool = False

    @property
    def freed_bytes(self) -> int:
        return sum(node.size_bytes for node in self.deleted)

    @property
    def outcome(self) -> DeleteOutcome:
        if self.cancelled:
            return DeleteOutcome.CANCELLED
        if self.errors and not self.deleted:
            return DeleteOutcome.FAILED
        if self.errors:
            return DeleteOutcome.COMPLETED_WITH_WARNINGS
        return DeleteOutcome.COMPLETED
