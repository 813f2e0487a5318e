"""Ignore rule domain models.

This module defines the compiled form of ignore-file lines, the layer of
rules contributed by one ignore file, and the verdict returned when a
path is checked against the rule stack.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from ignorectl.ignore.matchers import RuleMatcher


def relative_to_base(path: str, base: str) -> str | None:
    """Compute a path relative to a base directory with forward slashes.

    Args:
        path: Absolute path to convert.
        base: Absolute directory the result is relative to.

    Returns:
        The relative path ("" for the base itself), or None when the path
        lies outside the base.
    """
    if path == base:
        return ""
    prefix = base if base.endswith(os.sep) else base + os.sep
    if path.startswith(prefix):
        relative = path[len(prefix) :]
    else:
        try:
            relative = os.path.relpath(path, base)
        except ValueError:
            # Different drives on Windows
            return None
        if relative == os.curdir:
            return ""
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
    relative = relative.replace(os.sep, "/")
    if os.altsep:
        relative = relative.replace(os.altsep, "/")
    return relative


@dataclass(frozen=True, slots=True)
class IgnoreRule:
    """Compiled form of one ignore-file line.

    Attributes:
        pattern: Glob text after stripping negation, anchor and trailing slash.
        matcher: Compiled matcher for the glob.
        base_dir: Directory the rule is relative to (the ignore file's folder).
        source: Path of the ignore file the rule came from.
        line_number: 1-based line number inside the ignore file.
        negation: Rule started with ``!`` and re-includes matches.
        directory_only: Rule ended with ``/`` and matches directories only.
        anchored: Rule started with ``/`` and only matches below base_dir.
        contains_slash: Pattern contains an inner ``/``.
    """

    pattern: str
    matcher: RuleMatcher = field(compare=False, repr=False)
    base_dir: str
    source: str
    line_number: int = 0
    negation: bool = False
    directory_only: bool = False
    anchored: bool = False
    contains_slash: bool = False

    @property
    def matches_full_path(self) -> bool:
        """Whether the whole relative path is matched instead of the basename."""
        return self.anchored or self.contains_slash

    @property
    def text(self) -> str:
        """Pattern rebuilt as it would appear in the ignore file."""
        prefix = "!" if self.negation else ""
        anchor = "/" if self.anchored else ""
        suffix = "/" if self.directory_only else ""
        return f"{prefix}{anchor}{self.pattern}{suffix}"

    @property
    def description(self) -> str:
        """Human-readable attribution, e.g. ``.gitignore:3 build/``."""
        return f"{Path(self.source).name}:{self.line_number} {self.text}"

    def matches(self, path: str, is_dir: bool) -> bool:
        """Check whether an absolute path is matched by this rule.

        Args:
            path: Absolute filesystem path.
            is_dir: Whether the path denotes a directory.

        Returns:
            True if the rule matches the path or one of its ancestors
            below the rule's base directory.
        """
        relative = relative_to_base(path, self.base_dir)
        if not relative:
            return False
        return self.matches_relative(relative, is_dir)

    def matches_relative(self, relative: str, is_dir: bool) -> bool:
        """Check a path already made relative to the rule's base directory.

        Excluding a directory excludes everything beneath it, so ancestor
        directory segments are checked as well as the path itself.

        Args:
            relative: Non-empty relative path with forward slashes.
            is_dir: Whether the path denotes a directory.

        Returns:
            True if the rule matches.
        """
        segments = relative.split("/")
        if (is_dir or not self.directory_only) and self._match_target(relative, segments[-1]):
            return True
        return self._match_ancestors(segments[:-1])

    def _match_target(self, relative: str, name: str) -> bool:
        if self.matches_full_path:
            return self.matcher.matches(relative)
        return self.matcher.matches(name)

    def _match_ancestors(self, ancestors: list[str]) -> bool:
        if not ancestors:
            return False
        if self.matches_full_path:
            return any(
                self.matcher.matches("/".join(ancestors[: i + 1])) for i in range(len(ancestors))
            )
        return any(self.matcher.matches(segment) for segment in ancestors)


@dataclass(frozen=True, slots=True)
class RuleLayer:
    """Rules parsed from one ignore file, scoped to its directory.

    Attributes:
        directory: Directory governed by the layer.
        source: Path of the ignore file.
        rules: Rules in file order.
    """

    directory: str
    source: str
    rules: tuple[IgnoreRule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)


@dataclass(frozen=True, slots=True)
class IgnoreVerdict:
    """Result of checking a path against the rule stack.

    Attributes:
        ignored: Final verdict after applying every matching rule.
        rule: The last matching rule, which decided the verdict.
        matched: Every rule that matched, in evaluation order.
    """

    ignored: bool
    rule: IgnoreRule | None = None
    matched: tuple[IgnoreRule, ...] = ()

    @property
    def description(self) -> str:
        """Attribution of the deciding rule, or an empty string."""
        return self.rule.description if self.rule is not None else ""

    @property
    def sources(self) -> list[str]:
        """Ignore files that contributed a matching rule, first match first."""
        seen: dict[str, None] = {}
        for rule in self.matched:
            seen.setdefault(rule.source, None)
        return list(seen)
