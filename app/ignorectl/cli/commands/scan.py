"""Scan command implementation.

Lists files and directories excluded by ignore files below a root.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from ignorectl.cli.types import (
    OutputFormat,
    exit_if_cancelled,
    get_scanner,
    load_config_or_exit,
    print_scan_errors,
    run_scan,
)
from ignorectl.filesystem.models import ScanResult
from ignorectl.ignore.matchers import MatcherKind
from ignorectl.utils.formatting import (
    build_result_tree,
    console,
    format_size,
    print_error,
    print_info,
    print_success,
)


def scan(
    ctx: typer.Context,
    root: Annotated[
        Path,
        typer.Argument(
            help="Directory to scan.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
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
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: tree or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TREE,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export scan results to JSON file.",
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
    """Scan a directory tree for ignored files and directories.

    Examples:
        ignorectl scan .                          # Scan the current directory
        ignorectl scan ~/src --format json        # Output as JSON
        ignorectl scan . -i .gitignore            # Only honour .gitignore files
        ignorectl scan . --export scan.json       # Export to JSON file
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    config = load_config_or_exit(config_path)
    scanner = get_scanner(config, ignore_files, matcher)

    result = run_scan(scanner, root, quiet=quiet or output_format == OutputFormat.JSON)
    exit_if_cancelled(result)

    if export_path is not None:
        _export_results(result, export_path, announce=output_format == OutputFormat.TREE)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
    elif result.root is None:
        print_success("Nothing to clean. No ignored entries found.")
    else:
        console.print(build_result_tree(result.root))
        if not quiet:
            console.print(
                f"\n[dim]Found {result.candidate_count} ignored entries "
                f"({format_size(result.total_bytes)} total)[/dim]"
            )

    if result.errors:
        print_scan_errors(result.errors)
        raise typer.Exit(code=1)


def _export_results(result: ScanResult, export_path: Path, *, announce: bool = True) -> None:
    """Export scan results to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(result.to_dict(), indent=2))
        if announce:
            print_info(f"Scan results exported to {export_path}")
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e
