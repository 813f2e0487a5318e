"""Deletion of selected scan results.

Turns the tree's selection into a flat list of non-overlapping targets
and removes them, either permanently or by moving them to the trash in
batches. Failures are recorded per target (or once per trash batch) and
never stop the remaining work. Each successful deletion is detached from
the result tree immediately so sizes and selection stay consistent.
"""

import errno
import logging
import os
import shutil
import stat
from collections.abc import Callable, Iterable
from functools import partial

from send2trash import send2trash

from ignorectl.filesystem.concurrency import CancellationToken, Dispatcher, run_inline
from ignorectl.filesystem.models import (
    DEFAULT_BATCH_SIZE,
    DeleteResult,
    DeletionItemResult,
)
from ignorectl.filesystem.scanner import describe_os_error
from ignorectl.tree.node import ScanNode, SelectionState

logger = logging.getLogger(__name__)

ItemDeletedCallback = Callable[[ScanNode], None]


class DeletionOperator:
    """Deletes selected candidates from disk.

    Args:
        permanent: Remove permanently instead of moving to the trash.
        batch_size: Number of paths handed to the trash per call.
        dry_run: Report what would be deleted without touching anything.
    """

    def __init__(
        self,
        *,
        permanent: bool = False,
        batch_size: int = DEFAULT_BATCH_SIZE,
        dry_run: bool = False,
    ) -> None:
        self._permanent = permanent
        self._batch_size = max(1, batch_size)
        self._dry_run = dry_run

    @staticmethod
    def collect_targets(nodes: ScanNode | Iterable[ScanNode]) -> list[ScanNode]:
        """Flatten the selection into deletion roots.

        Unselected subtrees are skipped, a selected candidate is a target
        and is not descended into, anything else is searched for nested
        targets.

        Args:
            nodes: Tree root or top-level nodes.

        Returns:
            Non-overlapping target nodes in tree order.
        """
        pending = [nodes] if isinstance(nodes, ScanNode) else list(nodes)
        targets: list[ScanNode] = []
        stack = list(reversed(pending))
        while stack:
            node = stack.pop()
            if node.selection == SelectionState.UNSELECTED:
                continue
            if node.is_candidate and node.selection == SelectionState.SELECTED:
                targets.append(node)
                continue
            stack.extend(reversed(node.children))
        return targets

    @staticmethod
    def order_targets(targets: Iterable[ScanNode]) -> list[ScanNode]:
        """Files before directories, longer paths before shorter ones."""
        return sorted(targets, key=lambda node: (node.is_directory, -len(node.path)))

    def delete(
        self,
        targets: Iterable[ScanNode],
        *,
        cancel_token: CancellationToken | None = None,
        on_item_deleted: ItemDeletedCallback | None = None,
        dispatch: Dispatcher | None = None,
    ) -> DeleteResult:
        """Delete targets and detach them from the result tree.

        Args:
            targets: Nodes returned by collect_targets().
            cancel_token: Optional token checked between targets/batches.
            on_item_deleted: Optional callback fired for each deleted node.
            dispatch: Optional hook that runs tree mutations on the caller's thread.

        Returns:
            DeleteResult with deleted nodes, per-target outcomes and errors.
        """
        ordered = self.order_targets(targets)
        token = cancel_token or CancellationToken()
        dispatch = dispatch or run_inline

        if self._dry_run:
            for node in ordered:
                logger.info("Dry-run: would delete %s", node.path)
            return DeleteResult(
                items=[
                    DeletionItemResult(path=node.path, success=True, dry_run=True)
                    for node in ordered
                ],
                dry_run=True,
            )

        result = DeleteResult()
        if self._permanent:
            self._delete_permanently(ordered, result, token, on_item_deleted, dispatch)
        else:
            self._delete_to_trash(ordered, result, token, on_item_deleted, dispatch)
        return result

    def _delete_permanently(
        self,
        ordered: list[ScanNode],
        result: DeleteResult,
        token: CancellationToken,
        on_item_deleted: ItemDeletedCallback | None,
        dispatch: Dispatcher,
    ) -> None:
        for node in ordered:
            if token.is_cancelled:
                result.cancelled = True
                break
            try:
                _remove_path(node.path)
            except OSError as e:
                message = f"Failed to delete {node.path}: {describe_os_error(e)}"
                logger.warning("%s", message)
                result.errors.append(message)
                result.items.append(
                    DeletionItemResult(path=node.path, success=False, error=message)
                )
                continue
            _report_deleted(node, result, on_item_deleted, dispatch)

    def _delete_to_trash(
        self,
        ordered: list[ScanNode],
        result: DeleteResult,
        token: CancellationToken,
        on_item_deleted: ItemDeletedCallback | None,
        dispatch: Dispatcher,
    ) -> None:
        for start in range(0, len(ordered), self._batch_size):
            if token.is_cancelled:
                result.cancelled = True
                break
            batch = ordered[start : start + self._batch_size]
            paths = [node.path for node in batch]
            try:
                send2trash(paths)
            except OSError as e:
                message = (
                    f"Failed to move batch starting with {paths[0]} to trash: "
                    f"{describe_os_error(e)}"
                )
                logger.warning("%s", message)
                result.errors.append(message)
                result.items.extend(
                    DeletionItemResult(path=path, success=False, error=message) for path in paths
                )
                continue

            logger.info("Moved %d path(s) to trash", len(paths))
            for node in batch:
                _report_deleted(node, result, on_item_deleted, dispatch)


def _report_deleted(
    node: ScanNode,
    result: DeleteResult,
    on_item_deleted: ItemDeletedCallback | None,
    dispatch: Dispatcher,
) -> None:
    dispatch(node.detach)
    result.deleted.append(node)
    result.items.append(DeletionItemResult(path=node.path, success=True))
    if on_item_deleted is not None:
        dispatch(partial(on_item_deleted, node))


def _remove_path(path: str) -> None:
    """Remove a path from disk without following links.

    Links (including links to directories) are removed themselves,
    directories recursively, files after clearing the read-only bit.

    Raises:
        OSError: If the path does not exist or cannot be removed.
    """
    if os.path.islink(path) or _is_junction(path):
        if os.name == "nt" and os.path.isdir(path):
            os.rmdir(path)
        else:
            os.unlink(path)
    elif os.path.isdir(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        _clear_readonly(path)
        os.unlink(path)
    else:
        raise FileNotFoundError(errno.ENOENT, "Path does not exist", path)


def _is_junction(path: str) -> bool:
    is_junction = getattr(os.path, "isjunction", None)
    return bool(is_junction and is_junction(path))


def _clear_readonly(path: str) -> None:
    try:
        mode = os.lstat(path).st_mode
        if not mode & stat.S_IWRITE:
            os.chmod(path, mode | stat.S_IWRITE)
    except OSError as e:
        logger.debug("Cannot clear read-only flag on %s: %s", path, e)
