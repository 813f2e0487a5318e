"""Utility modules for ignorectl.

This module exports commonly used utility functions.
"""

from ignorectl.utils.formatting import (
    build_result_tree,
    console,
    create_path_table,
    err_console,
    format_node_label,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "build_result_tree",
    "console",
    "create_path_table",
    "err_console",
    "format_node_label",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
