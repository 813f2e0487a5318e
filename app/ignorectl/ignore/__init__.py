"""Ignore-file parsing, pattern matching and the layered rule stack."""

from ignorectl.ignore.matchers import (
    GlobMatcher,
    MatcherKind,
    NeverMatcher,
    PathSpecMatcher,
    RuleMatcher,
    create_matcher,
    glob_to_regex,
)
from ignorectl.ignore.models import IgnoreRule, IgnoreVerdict, RuleLayer, relative_to_base
from ignorectl.ignore.parser import parse_ignore_file, parse_line, parse_lines
from ignorectl.ignore.stack import RuleStack

__all__ = [
    "GlobMatcher",
    "IgnoreRule",
    "IgnoreVerdict",
    "MatcherKind",
    "NeverMatcher",
    "PathSpecMatcher",
    "RuleLayer",
    "RuleMatcher",
    "RuleStack",
    "create_matcher",
    "glob_to_regex",
    "parse_ignore_file",
    "parse_line",
    "parse_lines",
    "relative_to_base",
]
