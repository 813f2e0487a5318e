"""Depth-first scanner for files excluded by layered ignore files.

Walks a single root tree. In every directory the ignore files found there
are parsed and pushed onto the rule stack for the duration of the visit;
each entry is checked against the stack. Ignored files become candidate
leaves, and a directory that is itself ignored and holds nothing
unignored is promoted to a candidate so it can be deleted as one unit.

After the traversal, directory sizes are recomputed from the leaves and
chains of single-child containers are compacted.
"""

import logging
import os
import stat
from collections.abc import Callable, Iterable
from functools import partial
from pathlib import Path

from ignorectl.core.errors import ScanCancelledError, ScanError
from ignorectl.filesystem.concurrency import CancellationToken, Dispatcher, run_inline
from ignorectl.filesystem.models import (
    DEFAULT_IGNORE_FILE_NAMES,
    DEFAULT_PROGRESS_INTERVAL,
    ScanResult,
)
from ignorectl.ignore.matchers import MatcherKind
from ignorectl.ignore.models import IgnoreVerdict, RuleLayer
from ignorectl.ignore.parser import parse_ignore_file
from ignorectl.ignore.stack import RuleStack
from ignorectl.tree.node import ScanNode

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def describe_os_error(error: OSError) -> str:
    """Short message for an OSError, without the repeated path."""
    return error.strerror or str(error)


def _is_link(entry: os.DirEntry[str]) -> bool:
    """Symlinks and Windows junctions are never followed."""
    if entry.is_symlink():
        return True
    is_junction = getattr(entry, "is_junction", None)
    return bool(is_junction and is_junction())


def _is_offline(entry: os.DirEntry[str]) -> bool:
    """Check the Windows offline attribute (always False elsewhere)."""
    attributes = getattr(entry.stat(follow_symlinks=False), "st_file_attributes", 0)
    return bool(attributes & stat.FILE_ATTRIBUTE_OFFLINE)


class IgnoreScanner:
    """Finds files and directories excluded by ignore files below a root.

    Args:
        ignore_file_names: Ignore file names to load in every directory,
            compared case-insensitively. Defaults to .gitignore and .ignore.
        matcher_kind: Pattern matching engine for compiled rules.
        progress_interval: Number of entries between progress callbacks.
    """

    def __init__(
        self,
        *,
        ignore_file_names: Iterable[str] | None = None,
        matcher_kind: MatcherKind = MatcherKind.GLOB,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        names: dict[str, str] = {}
        for name in ignore_file_names or ():
            if name:
                names.setdefault(name.casefold(), name)
        self._ignore_file_names: tuple[str, ...] = (
            tuple(names.values()) or DEFAULT_IGNORE_FILE_NAMES
        )
        self._folded_names = frozenset(name.casefold() for name in self._ignore_file_names)
        self._matcher_kind = matcher_kind
        self._progress_interval = max(1, progress_interval)

    @property
    def ignore_file_names(self) -> tuple[str, ...]:
        return self._ignore_file_names

    @property
    def folded_names(self) -> frozenset[str]:
        """Casefolded ignore file names."""
        return self._folded_names

    @property
    def matcher_kind(self) -> MatcherKind:
        return self._matcher_kind

    @property
    def progress_interval(self) -> int:
        return self._progress_interval

    def is_ignore_file_name(self, name: str) -> bool:
        """Check a directory entry name against the ignore file names."""
        return name.casefold() in self._folded_names

    def scan(
        self,
        root: str | Path,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
        dispatch: Dispatcher | None = None,
    ) -> ScanResult:
        """Scan a root directory for ignored entries.

        Args:
            root: Directory to scan.
            cancel_token: Optional token checked before every directory and entry.
            on_progress: Optional callback receiving the processed entry count.
            dispatch: Optional hook that runs tree mutations on the caller's thread.

        Returns:
            ScanResult with the tree (None if nothing matched), totals and
            recorded errors. A cancelled scan returns the partial tree with
            ``cancelled`` set.

        Raises:
            ScanError: If the root is not an existing directory.
        """
        root_path = os.path.abspath(os.fspath(root))
        if not os.path.isdir(root_path):
            raise ScanError(f"Scan root is not a directory: {root_path}")

        run = _ScanRun(
            scanner=self,
            result=ScanResult(root_path=root_path),
            token=cancel_token or CancellationToken(),
            on_progress=on_progress,
            dispatch=dispatch or run_inline,
        )
        root_node = ScanNode(root_path, root_path, is_directory=True)

        try:
            run.scan_directory(root_path, is_root=True, get_parent=lambda: root_node)
        except ScanCancelledError:
            logger.info("Scan of %s cancelled after %d entries", root_path, run.processed)
            run.result.cancelled = True

        run.result.processed_count = run.processed
        if on_progress is not None:
            run.dispatch(partial(on_progress, run.processed))
        run.dispatch(partial(_finalize, run.result, root_node))
        return run.result


def _finalize(result: ScanResult, root_node: ScanNode) -> None:
    """Authoritative size pass, compaction and totals."""
    root_node.recalculate_size()
    root_node.compact_children()

    candidates = root_node.candidate_roots()
    result.candidate_count = len(candidates)
    result.total_bytes = sum(node.size_bytes for node in candidates)
    result.root = root_node if root_node.children else None


class _ScanRun:
    """State of one scan: rule stack, counters, result and hooks."""

    def __init__(
        self,
        *,
        scanner: IgnoreScanner,
        result: ScanResult,
        token: CancellationToken,
        on_progress: ProgressCallback | None,
        dispatch: Dispatcher,
    ) -> None:
        self.scanner = scanner
        self.result = result
        self.token = token
        self.on_progress = on_progress
        self.dispatch = dispatch
        self.stack = RuleStack()
        self.processed = 0

    def record(self, message: str) -> None:
        logger.warning("%s", message)
        self.result.errors.append(message)

    def tick(self) -> None:
        self.processed += 1
        if self.on_progress is not None and self.processed % self.scanner.progress_interval == 0:
            self.dispatch(partial(self.on_progress, self.processed))

    def scan_directory(
        self,
        directory: str,
        *,
        is_root: bool,
        get_parent: Callable[[], ScanNode],
    ) -> bool:
        """Visit one directory.

        Returns:
            True if the directory contains anything unignored (or could not
            be read), which keeps its ancestors from becoming candidates.
        """
        self.token.raise_if_cancelled()

        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda e: e.name)
        except OSError as e:
            self.record(f"Failed to read {directory}: {describe_os_error(e)}")
            return True

        with self.stack.scoped(self._load_ignore_files(entries)):
            verdict = (
                IgnoreVerdict(ignored=False)
                if is_root
                else self.stack.check_ignored(directory, is_dir=True)
            )
            contains_unignored = not is_root and not verdict.ignored
            node: ScanNode | None = None

            def get_node() -> ScanNode:
                nonlocal node
                if node is None:
                    if is_root:
                        node = get_parent()
                    else:
                        node = ScanNode(
                            os.path.basename(directory),
                            directory,
                            is_directory=True,
                            matched_rule=verdict.description,
                            ignore_rule_paths=verdict.sources,
                        )
                        self.dispatch(partial(get_parent().add_child, node))
                return node

            for entry in entries:
                self.token.raise_if_cancelled()
                self.tick()

                if self.scanner.is_ignore_file_name(entry.name):
                    continue

                try:
                    is_dir = entry.is_dir()
                    is_link = _is_link(entry)
                except OSError as e:
                    self.record(f"Failed to inspect {entry.path}: {describe_os_error(e)}")
                    contains_unignored = True
                    continue

                if is_dir and not is_link:
                    if self.scan_directory(entry.path, is_root=False, get_parent=get_node):
                        contains_unignored = True
                    continue

                if is_link and is_dir:
                    logger.debug("Not following directory link: %s", entry.path)

                entry_verdict = self.stack.check_ignored(entry.path, is_dir=is_dir)
                if not entry_verdict.ignored:
                    contains_unignored = True
                    continue

                size = 0
                if not is_dir:
                    try:
                        size = entry.stat(follow_symlinks=False).st_size
                    except OSError as e:
                        self.record(f"Failed to read size for {entry.path}: {describe_os_error(e)}")

                leaf = ScanNode(
                    entry.name,
                    entry.path,
                    is_directory=is_dir,
                    is_candidate=True,
                    size_bytes=size,
                    matched_rule=entry_verdict.description,
                    ignore_rule_paths=entry_verdict.sources,
                )
                self.dispatch(partial(get_node().add_child, leaf))
                self.result.candidate_count += 1
                self.result.total_bytes += size

        if not is_root and verdict.ignored and not contains_unignored:
            self.dispatch(partial(get_node().set_candidate, True))

        return contains_unignored

    def _load_ignore_files(self, entries: list[os.DirEntry[str]]) -> list[RuleLayer]:
        """Parse the ignore files among a directory's entries.

        Files are loaded in configured-name order so later names override
        earlier ones. Offline files are skipped; unreadable ones are recorded.
        """
        by_name: dict[str, list[os.DirEntry[str]]] = {}
        for entry in entries:
            folded = entry.name.casefold()
            if folded in self.scanner.folded_names:
                by_name.setdefault(folded, []).append(entry)
        if not by_name:
            return []

        layers: list[RuleLayer] = []
        for name in self.scanner.ignore_file_names:
            for entry in by_name.get(name.casefold(), []):
                try:
                    if not entry.is_file():
                        continue
                    if _is_offline(entry):
                        logger.debug("Skipping offline ignore file: %s", entry.path)
                        continue
                    layers.append(parse_ignore_file(entry.path, self.scanner.matcher_kind))
                except OSError as e:
                    self.record(f"Failed to read ignore file {entry.path}: {describe_os_error(e)}")
        return layers
