"""Scan result tree model."""

from ignorectl.tree.node import NodeObserver, ScanNode, SelectionState

__all__ = ["NodeObserver", "ScanNode", "SelectionState"]
