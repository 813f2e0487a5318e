"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used by the scan
and clean commands to avoid code duplication.
"""

import contextlib
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer
from rich.markup import escape

from ignorectl.core.config import IgnorectlConfig, get_effective_config
from ignorectl.core.errors import ConfigError, ScanError
from ignorectl.filesystem.concurrency import CancellationToken
from ignorectl.filesystem.models import DeleteResult, ScanResult
from ignorectl.filesystem.operator import DeletionOperator
from ignorectl.filesystem.scanner import IgnoreScanner
from ignorectl.ignore.matchers import MatcherKind
from ignorectl.tree.node import ScanNode
from ignorectl.utils.formatting import err_console, print_error, print_warning

EXIT_CANCELLED = 130
_POLL_SECONDS = 0.1

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format options for scan results."""

    TREE = "tree"
    JSON = "json"


def load_config_or_exit(config_path: Path | None) -> IgnorectlConfig:
    """Load the effective configuration, exiting with code 1 if it is invalid."""
    try:
        return get_effective_config(config_path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e


def get_scanner(
    config: IgnorectlConfig,
    ignore_files: list[str] | None = None,
    matcher: MatcherKind | None = None,
) -> IgnoreScanner:
    """Create a scanner from configuration, letting CLI options take precedence.

    Args:
        config: Effective configuration.
        ignore_files: Ignore file names given on the command line.
        matcher: Matcher engine given on the command line.

    Returns:
        Configured IgnoreScanner.
    """
    return IgnoreScanner(
        ignore_file_names=ignore_files or config.scan.ignore_file_names,
        matcher_kind=matcher or config.scan.matcher,
        progress_interval=config.scan.progress_interval,
    )


def run_cancellable(
    work: Callable[[CancellationToken], T],
    *,
    on_wait: Callable[[], None] | None = None,
) -> T:
    """Run one unit of work on a worker thread with cooperative cancellation.

    The calling thread polls the worker so Ctrl+C stays responsive. On
    KeyboardInterrupt the token is cancelled and the partial result of the
    work is returned.

    Args:
        work: Callable receiving the cancellation token.
        on_wait: Optional callback run on every poll while the work runs.

    Returns:
        Whatever ``work`` returns.
    """
    token = CancellationToken()
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(work, token)
        try:
            while True:
                try:
                    return future.result(timeout=_POLL_SECONDS)
                except TimeoutError:
                    if on_wait is not None:
                        on_wait()
        except KeyboardInterrupt:
            token.cancel()
            return future.result()


def run_scan(scanner: IgnoreScanner, root: Path, *, quiet: bool = False) -> ScanResult:
    """Run a scan on a worker thread behind a status spinner.

    Ctrl+C cancels the scan cooperatively; the partial result is returned
    with ``cancelled`` set.

    Raises:
        typer.Exit: If the root cannot be scanned.
    """
    processed = [0]

    def on_progress(count: int) -> None:
        processed[0] = count

    with contextlib.ExitStack() as stack:
        status = None
        if not quiet:
            status = stack.enter_context(err_console.status(f"Scanning {root} ..."))

        def on_wait() -> None:
            if status is not None:
                status.update(f"Scanning {root} ... {processed[0]} entries")

        try:
            return run_cancellable(
                lambda token: scanner.scan(root, token, on_progress), on_wait=on_wait
            )
        except ScanError as e:
            print_error(escape(str(e)))
            raise typer.Exit(code=1) from e


def run_delete(operator: DeletionOperator, targets: list[ScanNode]) -> DeleteResult:
    """Run a deletion on a worker thread; Ctrl+C stops it between targets."""
    return run_cancellable(lambda token: operator.delete(targets, cancel_token=token))


def exit_if_cancelled(result: ScanResult) -> None:
    """Exit with code 130 when a scan was cancelled."""
    if result.cancelled:
        print_warning(f"Scan cancelled after {result.processed_count} entries.")
        raise typer.Exit(code=EXIT_CANCELLED)


def print_scan_errors(errors: list[str]) -> None:
    """Print recorded path errors as warnings."""
    for message in errors:
        print_warning(escape(message))
