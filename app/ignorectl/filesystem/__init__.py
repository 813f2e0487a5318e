"""Filesystem scanning and cleanup module.

This module provides the ignore-aware directory scanner, the deletion
operator for selected candidates, their result models, and the
cancellation/dispatch hooks both share.
"""

from ignorectl.filesystem.concurrency import CancellationToken, Dispatcher, run_inline
from ignorectl.filesystem.models import (
    DeleteOutcome,
    DeleteResult,
    DeletionItemResult,
    ScanOutcome,
    ScanResult,
)
from ignorectl.filesystem.operator import DeletionOperator
from ignorectl.filesystem.scanner import IgnoreScanner

__all__ = [
    "CancellationToken",
    "DeleteOutcome",
    "DeleteResult",
    "DeletionItemResult",
    "DeletionOperator",
    "Dispatcher",
    "IgnoreScanner",
    "ScanOutcome",
    "ScanResult",
    "run_inline",
]
