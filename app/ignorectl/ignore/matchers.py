"""Pattern matchers for ignore rules.

A RuleMatcher answers one question: does this normalized relative path
(forward slashes, no leading slash) match the compiled pattern? Negation,
anchoring and directory-only handling live in IgnoreRule, so both matcher
engines share the same override semantics.

Two engines are available:
- GlobMatcher: self-contained glob to regular expression compiler.
- PathSpecMatcher: delegates one pattern to pathspec's git-wildmatch.
"""

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum

import pathspec

logger = logging.getLogger(__name__)


class MatcherKind(str, Enum):
    """Available pattern matching engines.

    Attributes:
        GLOB: Built-in glob compiler (default).
        PATHSPEC: pathspec library, git-wildmatch flavour.
    """

    GLOB = "glob"
    PATHSPEC = "pathspec"


class RuleMatcher(ABC):
    """Matches a single compiled pattern against relative paths."""

    @abstractmethod
    def matches(self, relative_path: str) -> bool:
        """Check whether a normalized relative path matches the pattern.

        Args:
            relative_path: Path relative to the ignore file's directory,
                using forward slashes. For basename-only rules this is a
                single segment.

        Returns:
            True if the path matches.
        """


class NeverMatcher(RuleMatcher):
    """Matcher for patterns that failed to compile."""

    def matches(self, relative_path: str) -> bool:
        return False


def glob_to_regex(pattern: str) -> str:
    """Translate a glob into the body of an equivalent regular expression.

    ``**`` spans segments (``**/`` also matches zero directories), ``*``
    stays within one segment, ``?`` is one non-separator character. Every
    other character is escaped and matches literally.

    Args:
        pattern: Glob pattern without negation/anchor/directory markers.

    Returns:
        Regular expression source (not anchored).
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            if i + 1 < n and pattern[i + 1] == "*":
                i += 2
                while i < n and pattern[i] == "*":
                    i += 1
                if i < n and pattern[i] == "/":
                    parts.append("(?:.*/)?")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1
    return "".join(parts)


class GlobMatcher(RuleMatcher):
    """Case-insensitive matcher compiled from a glob pattern."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        try:
            self._regex: re.Pattern[str] | None = re.compile(
                rf"\A{glob_to_regex(pattern)}\Z", re.IGNORECASE
            )
        except re.error as e:
            logger.warning("Cannot compile pattern %r: %s", pattern, e)
            self._regex = None

    def matches(self, relative_path: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.match(relative_path) is not None

    def __repr__(self) -> str:
        return f"GlobMatcher({self.pattern!r})"


class PathSpecMatcher(RuleMatcher):
    """Matcher delegating to pathspec's git-wildmatch implementation.

    Pattern and path are lower-cased so matching stays case-insensitive
    like the built-in engine.

    Args:
        pattern: Glob pattern without negation/anchor/directory markers.
        full_path: True when the rule matches the whole relative path
            (anchored or containing a slash), False for basename rules.
    """

    def __init__(self, pattern: str, *, full_path: bool) -> None:
        self.pattern = pattern
        line = pattern.lower()
        # pathspec would read these as comment/negation markers
        if line.startswith(("#", "!")):
            line = "\\" + line
        if full_path:
            line = "/" + line
        try:
            self._spec: pathspec.PathSpec | None = pathspec.PathSpec.from_lines(
                "gitwildmatch", [line]
            )
        except (ValueError, TypeError) as e:
            logger.warning("pathspec rejected pattern %r: %s", pattern, e)
            self._spec = None

    def matches(self, relative_path: str) -> bool:
        if self._spec is None:
            return False
        return self._spec.match_file(relative_path.lower())

    def __repr__(self) -> str:
        return f"PathSpecMatcher({self.pattern!r})"


def create_matcher(
    pattern: str,
    *,
    full_path: bool,
    kind: MatcherKind = MatcherKind.GLOB,
) -> RuleMatcher:
    """Create a matcher for a pattern using the requested engine.

    Args:
        pattern: Glob pattern without negation/anchor/directory markers.
        full_path: Whether the rule matches whole relative paths.
        kind: Matching engine to use.

    Returns:
        A RuleMatcher instance. Never raises for malformed patterns.
    """
    if not pattern:
        return NeverMatcher()
    if kind == MatcherKind.PATHSPEC:
        return PathSpecMatcher(pattern, full_path=full_path)
    return GlobMatcher(pattern)
