"""Ignore file parsing.

Turns the lines of a ``.gitignore``-style file into IgnoreRule objects
grouped in a RuleLayer for the file's directory.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from ignorectl.ignore.matchers import MatcherKind, create_matcher
from ignorectl.ignore.models import IgnoreRule, RuleLayer

logger = logging.getLogger(__name__)


def parse_line(
    line: str,
    base_dir: str,
    source: str,
    line_number: int = 0,
    matcher_kind: MatcherKind = MatcherKind.GLOB,
) -> IgnoreRule | None:
    """Compile one ignore-file line into a rule.

    Recognizes ``#`` comments, ``\\#`` / ``\\!`` escapes, ``!`` negation,
    trailing ``/`` (directory-only) and leading ``/`` (anchored).

    Args:
        line: Raw line from the ignore file.
        base_dir: Directory containing the ignore file.
        source: Path of the ignore file.
        line_number: 1-based line number for attribution.
        matcher_kind: Matching engine for the compiled glob.

    Returns:
        The compiled rule, or None for blank lines, comments and patterns
        that are empty once markers are stripped.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    negation = False
    if text.startswith(("\\#", "\\!")):
        text = text[1:]
    elif text.startswith("!"):
        negation = True
        text = text[1:]

    directory_only = text.endswith("/")
    if directory_only:
        text = text.rstrip("/")

    anchored = text.startswith("/")
    if anchored:
        text = text.lstrip("/")

    if not text:
        return None

    contains_slash = "/" in text
    return IgnoreRule(
        pattern=text,
        matcher=create_matcher(text, full_path=anchored or contains_slash, kind=matcher_kind),
        base_dir=base_dir,
        source=source,
        line_number=line_number,
        negation=negation,
        directory_only=directory_only,
        anchored=anchored,
        contains_slash=contains_slash,
    )


def parse_lines(
    lines: Iterable[str],
    base_dir: str,
    source: str,
    matcher_kind: MatcherKind = MatcherKind.GLOB,
) -> list[IgnoreRule]:
    """Compile every line of an ignore file, skipping lines without a rule."""
    rules: list[IgnoreRule] = []
    for number, line in enumerate(lines, start=1):
        rule = parse_line(line, base_dir, source, number, matcher_kind)
        if rule is not None:
            rules.append(rule)
    return rules


def parse_ignore_file(
    path: str | Path,
    matcher_kind: MatcherKind = MatcherKind.GLOB,
) -> RuleLayer:
    """Read an ignore file and build the rule layer for its directory.

    Args:
        path: Path to the ignore file.
        matcher_kind: Matching engine for the compiled globs.

    Returns:
        RuleLayer governing the file's parent directory.

    Raises:
        OSError: If the file cannot be read.
    """
    file_path = Path(path)
    content = file_path.read_text(encoding="utf-8-sig", errors="replace")
    directory = str(file_path.parent)
    rules = parse_lines(content.splitlines(), directory, str(file_path), matcher_kind)
    logger.debug("Loaded %d rules from %s", len(rules), file_path)
    return RuleLayer(directory=directory, source=str(file_path), rules=tuple(rules))
