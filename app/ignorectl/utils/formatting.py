"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ignorectl.core.theme import get_theme
from ignorectl.tree.node import ScanNode, SelectionState

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string (1024-based units)."""
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    for unit in _SIZE_UNITS[:-1]:
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"


def format_node_label(node: ScanNode, *, show_rules: bool = True) -> str:
    """Format a result tree node as a single Rich markup line.

    Candidates are highlighted, containers carry their hint, and
    unselected nodes are struck through.
    """
    name = escape(node.name) + ("/" if node.is_directory else "")
    if node.selection == SelectionState.UNSELECTED:
        label = f"[node.unselected]{name}[/]"
    elif node.is_candidate:
        label = f"[node.candidate]{name}[/]"
    else:
        label = f"[node.container]{name}[/]"

    label += f"  [node.size]{format_size(node.size_bytes)}[/]"
    if node.hint:
        label += f"  [muted]({node.hint})[/]"
    if show_rules and node.is_candidate and node.matched_rule:
        label += f"  [node.rule]{escape(node.matched_rule)}[/]"
    return label


def build_result_tree(root: ScanNode, *, show_rules: bool = True) -> Tree:
    """Build a Rich Tree mirroring a scan result tree.

    Candidate subtrees are shown as a single line; their contents are
    deleted together with them.
    """
    size = format_size(root.size_bytes)
    tree = Tree(f"[bold_header]{escape(root.path)}[/]  [node.size]{size}[/]")
    stack: list[tuple[Tree, ScanNode]] = [(tree, child) for child in reversed(root.children)]
    while stack:
        branch, node = stack.pop()
        sub = branch.add(format_node_label(node, show_rules=show_rules))
        if not node.is_candidate:
            stack.extend((sub, child) for child in reversed(node.children))
    return tree


def create_path_table(title: str) -> Table:
    """Create a pre-configured table for listing paths."""
    return Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
