"""Layered rule stack used during directory descent.

Layers are pushed when the scanner enters a directory holding ignore
files and popped when it leaves. Rules are evaluated in push order and
the last matching rule decides, so deeper ignore files and later lines
override earlier ones.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from ignorectl.ignore.models import IgnoreRule, IgnoreVerdict, RuleLayer, relative_to_base


class RuleStack:
    """Ordered stack of rule layers currently in scope."""

    def __init__(self) -> None:
        self._layers: list[RuleLayer] = []

    def __len__(self) -> int:
        return len(self._layers)

    @property
    def depth(self) -> int:
        """Number of layers currently pushed."""
        return len(self._layers)

    @property
    def layers(self) -> tuple[RuleLayer, ...]:
        """Snapshot of the pushed layers, oldest first."""
        return tuple(self._layers)

    def push(self, layer: RuleLayer) -> int:
        """Push a layer on top of the stack.

        Args:
            layer: Rules parsed from one ignore file.

        Returns:
            Stack depth before the push.
        """
        token = len(self._layers)
        self._layers.append(layer)
        return token

    def pop(self, count: int = 1) -> None:
        """Remove the most recently pushed layers.

        Args:
            count: Number of layers to remove; clamped to the stack depth.
        """
        if count <= 0:
            return
        count = min(count, len(self._layers))
        del self._layers[len(self._layers) - count :]

    @contextmanager
    def scoped(self, layers: Iterable[RuleLayer]) -> Iterator[int]:
        """Push layers for the duration of a block.

        Exactly the pushed layers are popped on exit, including when the
        block raises (cancellation, unexpected errors).

        Args:
            layers: Layers to push, in order.

        Yields:
            Number of layers pushed.
        """
        pushed = 0
        try:
            for layer in layers:
                self.push(layer)
                pushed += 1
            yield pushed
        finally:
            self.pop(pushed)

    def check_ignored(self, path: str, is_dir: bool) -> IgnoreVerdict:
        """Evaluate every rule in scope against a path.

        Args:
            path: Absolute filesystem path.
            is_dir: Whether the path denotes a directory.

        Returns:
            IgnoreVerdict holding the final verdict, the deciding rule and
            all matching rules. No matching rule means not ignored.
        """
        matched: list[IgnoreRule] = []
        for layer in self._layers:
            relative = relative_to_base(path, layer.directory)
            if not relative:
                continue
            for rule in layer.rules:
                if rule.matches_relative(relative, is_dir):
                    matched.append(rule)

        if not matched:
            return IgnoreVerdict(ignored=False)

        deciding = matched[-1]
        return IgnoreVerdict(ignored=not deciding.negation, rule=deciding, matched=tuple(matched))
