"""Result tree nodes with size aggregation and tri-state selection.

Each ScanNode owns its children and keeps a non-owning reference to its
parent. Every mutating method performs its own cascade:

- sizes are propagated upward whenever a child is added or removed,
- selection set on a node is pushed down to all descendants, and parents
  recompute their aggregate state upward until it stops changing,
- removing the last child of a non-candidate container removes the
  container from its own parent.

Observers registered with ``subscribe`` are notified synchronously with
the node and the name of the property that changed.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any


class SelectionState(str, Enum):
    """Tri-state selection of a node.

    Attributes:
        SELECTED: Node (and all descendants) selected for deletion.
        UNSELECTED: Node (and all descendants) excluded from deletion.
        MIXED: Descendants disagree.
    """

    SELECTED = "selected"
    UNSELECTED = "unselected"
    MIXED = "mixed"


NodeObserver = Callable[["ScanNode", str], None]


class ScanNode:
    """A file or directory in the scan result tree.

    Args:
        name: Display name (a path fragment after compaction).
        path: Absolute filesystem path.
        is_directory: Whether the node represents a directory.
        is_candidate: Whether the node itself is ignored and deletable.
        size_bytes: Size of a leaf; directory sizes are aggregated.
        matched_rule: Description of the rule that decided the verdict.
        ignore_rule_paths: Ignore files that contributed matching rules.
    """

    def __init__(
        self,
        name: str,
        path: str,
        *,
        is_directory: bool,
        is_candidate: bool = False,
        size_bytes: int = 0,
        matched_rule: str = "",
        ignore_rule_paths: list[str] | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self._is_directory = is_directory
        self._is_candidate = is_candidate
        self._size_bytes = size_bytes
        self.matched_rule = matched_rule
        self.ignore_rule_paths: list[str] = list(ignore_rule_paths or [])
        self._selection = SelectionState.SELECTED
        self._children: list[ScanNode] = []
        self.parent: ScanNode | None = None
        self._observers: list[NodeObserver] = []

    def __repr__(self) -> str:
        kind = "dir" if self._is_directory else "file"
        flag = " candidate" if self._is_candidate else ""
        state = self._selection.value
        return f"ScanNode({self.path!r}, {kind}{flag}, {self._size_bytes} B, {state})"

    # -- read access -------------------------------------------------------

    @property
    def is_directory(self) -> bool:
        return self._is_directory

    @property
    def is_candidate(self) -> bool:
        return self._is_candidate

    @property
    def size_bytes(self) -> int:
        return self._size_bytes

    @property
    def children(self) -> tuple[ScanNode, ...]:
        return tuple(self._children)

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @selection.setter
    def selection(self, state: SelectionState) -> None:
        if state == SelectionState.MIXED:
            msg = "Mixed selection is derived from children and cannot be set"
            raise ValueError(msg)
        self._cascade_selection(state)
        if self.parent is not None:
            self.parent._reflect_children()

    @property
    def hint(self) -> str:
        """Short note for containers that are listed only for their contents."""
        return "contains matches" if self._is_directory and not self._is_candidate else ""

    # -- observers ---------------------------------------------------------

    def subscribe(self, observer: NodeObserver) -> None:
        """Register a callback fired as ``observer(node, property_name)``."""
        self._observers.append(observer)

    def unsubscribe(self, observer: NodeObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, prop: str) -> None:
        for observer in list(self._observers):
            observer(self, prop)

    # -- selection ---------------------------------------------------------

    def set_selected(self, selected: bool) -> None:
        """Select or unselect the node and its whole subtree."""
        self.selection = SelectionState.SELECTED if selected else SelectionState.UNSELECTED

    def _set_selection_state(self, state: SelectionState) -> bool:
        if self._selection == state:
            return False
        self._selection = state
        self._notify("selection")
        return True

    def _cascade_selection(self, state: SelectionState) -> None:
        stack: list[ScanNode] = [self]
        while stack:
            node = stack.pop()
            node._set_selection_state(state)
            stack.extend(node._children)

    def _aggregate_selection(self) -> SelectionState:
        states = {child._selection for child in self._children}
        if len(states) == 1:
            return states.pop()
        return SelectionState.MIXED

    def _reflect_children(self) -> None:
        node: ScanNode | None = self
        while node is not None and node._children:
            if not node._set_selection_state(node._aggregate_selection()):
                break
            node = node.parent

    # -- structure ---------------------------------------------------------

    def set_candidate(self, value: bool) -> None:
        if self._is_candidate == value:
            return
        self._is_candidate = value
        self._notify("is_candidate")

    def add_child(self, child: ScanNode) -> None:
        """Attach a child, updating ancestor sizes and aggregate selection.

        Raises:
            ValueError: If the child already belongs to another node.
        """
        if child.parent is not None:
            msg = f"Node {child.path!r} already has a parent"
            raise ValueError(msg)
        child.parent = self
        self._children.append(child)
        self._notify("children")
        if child._size_bytes:
            self._update_size_upwards(child._size_bytes)
        self._reflect_children()

    def remove_child(self, child: ScanNode) -> bool:
        """Detach a child, updating sizes and pruning emptied containers.

        Returns:
            True if the child was found and removed.
        """
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                break
        else:
            return False

        child.parent = None
        self._notify("children")
        if child._size_bytes:
            self._update_size_upwards(-child._size_bytes)

        if not self._children and not self._is_candidate and self.parent is not None:
            self.parent.remove_child(self)
        else:
            self._reflect_children()
        return True

    def detach(self) -> None:
        """Remove this node from its parent, if any."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def _set_size(self, size: int) -> None:
        if self._size_bytes == size:
            return
        self._size_bytes = size
        self._notify("size")

    def _update_size_upwards(self, delta: int) -> None:
        node: ScanNode | None = self
        while node is not None:
            node._set_size(node._size_bytes + delta)
            node = node.parent

    def recalculate_size(self) -> int:
        """Recompute directory sizes bottom-up from the leaves.

        Returns:
            The node's size after recomputation.
        """
        if not self._is_directory:
            return self._size_bytes
        total = sum(child.recalculate_size() for child in self._children)
        self._set_size(total)
        return total

    def compact(self) -> None:
        """Collapse chains of single-child, non-candidate directories.

        Children are compacted first. A non-candidate directory whose only
        child is a directory absorbs that child: names are joined with
        ``/`` and path, candidacy, attribution and children are taken over.
        """
        for child in list(self._children):
            child.compact()

        while (
            self._is_directory
            and not self._is_candidate
            and len(self._children) == 1
            and self._children[0]._is_directory
        ):
            self._absorb(self._children[0])

    def compact_children(self) -> None:
        """Compact every subtree below this node, keeping the node itself."""
        for child in list(self._children):
            child.compact()

    def _absorb(self, child: ScanNode) -> None:
        self.name = f"{self.name}/{child.name}"
        self.path = child.path
        self.matched_rule = child.matched_rule
        self.ignore_rule_paths = list(child.ignore_rule_paths)

        grandchildren = child._children
        child._children = []
        child.parent = None
        for grandchild in grandchildren:
            grandchild.parent = self
        self._children = grandchildren

        self.set_candidate(child._is_candidate)
        self._set_size(child._size_bytes)
        self._set_selection_state(child._selection)
        self._notify("children")

    # -- traversal ---------------------------------------------------------

    def iter_nodes(self) -> Iterator[ScanNode]:
        """Yield this node and all descendants in pre-order."""
        stack: list[ScanNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def find(self, path: str) -> ScanNode | None:
        """Return the node with the given absolute path, if present."""
        for node in self.iter_nodes():
            if node.path == path:
                return node
        return None

    def find_covered(self, path: str) -> list[ScanNode]:
        """Return the top-most nodes at or below an absolute path.

        Compaction gives a collapsed chain the path of its innermost
        directory, so a path naming an absorbed intermediate directory
        resolves to the compacted node below it.
        """
        prefix = path if path.endswith(os.sep) else path + os.sep
        covered: list[ScanNode] = []
        stack: list[ScanNode] = [self]
        while stack:
            node = stack.pop()
            if node.path == path or node.path.startswith(prefix):
                covered.append(node)
                continue
            stack.extend(reversed(node._children))
        return covered

    def candidate_roots(self) -> list[ScanNode]:
        """Top-most candidate nodes (candidates not nested in another)."""
        roots: list[ScanNode] = []
        stack: list[ScanNode] = [self]
        while stack:
            node = stack.pop()
            if node._is_candidate:
                roots.append(node)
                continue
            stack.extend(reversed(node._children))
        return roots

    def to_dict(self) -> dict[str, Any]:
        """Convert the subtree to a dictionary for JSON serialization."""
        return {
            "name": self.name,
            "path": self.path,
            "is_directory": self._is_directory,
            "is_candidate": self._is_candidate,
            "size_bytes": self._size_bytes,
            "selection": self._selection.value,
            "matched_rule": self.matched_rule or None,
            "ignore_rule_paths": list(self.ignore_rule_paths),
            "children": [child.to_dict() for child in self._children],
        }
