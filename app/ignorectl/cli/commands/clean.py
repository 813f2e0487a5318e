"""Clean command implementation.

Scans a directory tree and deletes the ignored entries it finds, either by
moving them to the trash (default) or permanently.
"""

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from ignorectl.cli.types import (
    EXIT_CANCELLED,
    exit_if_cancelled,
    get_scanner,
    load_config_or_exit,
    print_scan_errors,
    run_delete,
    run_scan,
)
from ignorectl.filesystem.models import DeleteResult
from ignorectl.filesystem.operator import DeletionOperator
from ignorectl.ignore.matchers import MatcherKind
from ignorectl.tree.node import ScanNode
from ignorectl.utils.formatting import (
    console,
    create_path_table,
    format_size,
    print_info,
    print_success,
    print_warning,
)


def clean(
    ctx: typer.Context,
    root: Annotated[
        Path,
        typer.Argument(
            help="Directory to clean.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    keep: Annotated[
        list[str] | None,
        typer.Option(
            "--keep",
            "-k",
            help="Path relative to ROOT to exclude from deletion (repeatable).",
        ),
    ] = None,
    permanent: Annotated[
        bool,
        typer.Option("--permanent", help="Delete permanently instead of moving to trash."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    ignore_files: Annotated[
        list[str] | None,
        typer.Option(
            "--ignore-file",
            "-i",
            help="Ignore file name to load (repeatable, later names override earlier).",
        ),
    ] = None,
    matcher: Annotated[
        MatcherKind | None,
        typer.Option(
            "--matcher",
            "-m",
            help="Pattern matching engine.",
            case_sensitive=False,
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file to use instead of the default.",
        ),
    ] = None,
) -> None:
    """Delete ignored files and directories below ROOT.

    Examples:
        ignorectl clean . --dry-run               # Show the deletion plan only
        ignorectl clean . --keep .env             # Keep one ignored file
        ignorectl clean . --permanent --yes       # Delete without trash or prompt
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    config = load_config_or_exit(config_path)
    scanner = get_scanner(config, ignore_files, matcher)

    result = run_scan(scanner, root, quiet=quiet)
    exit_if_cancelled(result)
    print_scan_errors(result.errors)

    if result.root is None:
        print_success("Nothing to clean. No ignored entries found.")
        return

    for relative in keep or []:
        _keep_path(result.root, root, relative)

    targets = DeletionOperator.collect_targets(result.root)
    if not targets:
        print_info("Nothing selected for deletion.")
        return

    use_permanent = permanent or config.delete.permanent
    _print_deletion_plan(targets, dry_run=dry_run, permanent=use_permanent)

    if not dry_run and not yes:
        action = "permanently delete" if use_permanent else "move to trash"
        confirmed = typer.confirm(
            f"\nProceed and {action} {len(targets)} path(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    operator = DeletionOperator(
        permanent=use_permanent,
        batch_size=config.delete.batch_size,
        dry_run=dry_run,
    )
    delete_result = run_delete(operator, targets)
    _print_deletion_results(delete_result)

    if delete_result.cancelled:
        print_warning(
            f"Deletion cancelled after {len(delete_result.items)} of {len(targets)} path(s)."
        )
        raise typer.Exit(code=EXIT_CANCELLED)
    if delete_result.errors:
        raise typer.Exit(code=1)


def _keep_path(tree_root: ScanNode, root: Path, relative: str) -> None:
    """Unselect everything at or below ROOT/relative, warning if nothing is there."""
    path = os.path.normpath(os.path.join(str(root), relative))
    covered = tree_root.find_covered(path)
    if not covered:
        print_warning(f"Not in scan results, nothing to keep: {relative}")
        return
    for node in covered:
        node.set_selected(False)


def _print_deletion_plan(targets: list[ScanNode], *, dry_run: bool, permanent: bool) -> None:
    """Display planned deletions."""
    mode = "permanent" if permanent else "trash"
    label = f"Planned Deletions ({mode}, dry-run)" if dry_run else f"Planned Deletions ({mode})"
    table = create_path_table(label)
    table.add_column("Path", style="bold")
    table.add_column("Size", style="node.size", justify="right")
    table.add_column("Rule", style="node.rule")

    for node in targets:
        suffix = "/" if node.is_directory else ""
        table.add_row(
            escape(f"{node.path}{suffix}"),
            format_size(node.size_bytes),
            escape(node.matched_rule or "-"),
        )

    console.print(table)
    total = sum(node.size_bytes for node in targets)
    console.print(f"[dim]{len(targets)} path(s), {format_size(total)} total[/dim]")


def _print_deletion_results(result: DeleteResult) -> None:
    """Display deletion results."""
    table = create_path_table("Deletion Results")
    table.add_column("Path", style="bold")
    table.add_column("Status", width=10)
    table.add_column("Details", style="dim")

    for item in result.items:
        if item.dry_run:
            status = "[info]dry-run[/]"
            detail = "Would delete"
        elif item.success:
            status = "[success]deleted[/]"
            detail = ""
        else:
            status = "[error]failed[/]"
            detail = escape(item.error or "Unknown error")
        table.add_row(escape(item.path), status, detail)

    console.print(table)

    success_count = sum(1 for item in result.items if item.success and not item.dry_run)
    fail_count = sum(1 for item in result.items if not item.success)

    if result.dry_run:
        print_info(f"Dry-run: {len(result.items)} path(s) would be deleted.")
    elif fail_count:
        print_warning(f"{success_count} succeeded, {fail_count} failed")
    elif not result.cancelled:
        print_success(
            f"All {success_count} path(s) deleted, {format_size(result.freed_bytes)} freed."
        )
