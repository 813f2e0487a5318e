"""Cooperative cancellation and dispatch hooks for scan and delete runs.

Scans and deletions run as one unit of work on one worker. A
presentation layer that observes the tree from another thread passes a
dispatcher that marshals each tree mutation onto its own thread; the
default runs mutations inline.
"""

import threading
from collections.abc import Callable

from ignorectl.core.errors import ScanCancelledError

Dispatcher = Callable[[Callable[[], None]], None]


def run_inline(action: Callable[[], None]) -> None:
    """Default dispatcher: execute the mutation immediately."""
    action()


class CancellationToken:
    """Thread-safe flag checked at directory, entry and batch boundaries."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of the running operation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ScanCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise ScanCancelledError("Operation cancelled")
