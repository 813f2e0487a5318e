"""Unit tests for the layered rule stack.

Tests push/pop scoping, last-match-wins evaluation across layers,
negation overrides and verdict attribution.
"""

import pytest
from ignorectl.ignore.models import RuleLayer
from ignorectl.ignore.parser import parse_lines
from ignorectl.ignore.stack import RuleStack


def _layer(directory: str, *lines: str, name: str = ".gitignore") -> RuleLayer:
    source = f"{directory}/{name}"
    rules = tuple(parse_lines(lines, directory, source))
    return RuleLayer(directory=directory, source=source, rules=rules)


class TestPushPop:
    """Tests for stack depth management."""

    def test_push_returns_previous_depth(self) -> None:
        """push() returns the depth before the layer was added."""
        stack = RuleStack()
        assert stack.push(_layer("/p", "*.log")) == 0
        assert stack.push(_layer("/p/src", "*.tmp")) == 1
        assert stack.depth == 2
        assert len(stack) == 2

    def test_pop_removes_most_recent(self) -> None:
        """pop() removes layers from the top."""
        stack = RuleStack()
        first = _layer("/p", "*.log")
        stack.push(first)
        stack.push(_layer("/p/src", "*.tmp"))

        stack.pop()

        assert stack.layers == (first,)

    def test_pop_clamps_to_depth(self) -> None:
        """Popping more layers than pushed empties the stack."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))
        stack.pop(5)
        assert stack.depth == 0

    def test_pop_non_positive_is_noop(self) -> None:
        """pop(0) leaves the stack unchanged."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))
        stack.pop(0)
        assert stack.depth == 1

    def test_scoped_pops_on_exit(self) -> None:
        """scoped() restores the depth after the block."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))

        with stack.scoped([_layer("/p/a", "x"), _layer("/p/a", "y", name=".ignore")]) as pushed:
            assert pushed == 2
            assert stack.depth == 3

        assert stack.depth == 1

    def test_scoped_pops_on_error(self) -> None:
        """scoped() restores the depth when the block raises."""
        stack = RuleStack()

        with pytest.raises(RuntimeError), stack.scoped([_layer("/p", "*.log")]):
            raise RuntimeError("boom")

        assert stack.depth == 0


class TestCheckIgnored:
    """Tests for RuleStack.check_ignored."""

    def test_empty_stack_not_ignored(self) -> None:
        """Without rules nothing is ignored."""
        verdict = RuleStack().check_ignored("/p/a.log", is_dir=False)
        assert verdict.ignored is False
        assert verdict.rule is None
        assert verdict.description == ""

    def test_simple_match(self) -> None:
        """A matching rule ignores the path and is attributed."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))

        verdict = stack.check_ignored("/p/sub/debug.log", is_dir=False)

        assert verdict.ignored is True
        assert verdict.description == ".gitignore:1 *.log"
        assert verdict.sources == ["/p/.gitignore"]

    def test_later_line_overrides(self) -> None:
        """The last matching line in a file decides."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log", "!keep.log"))

        assert stack.check_ignored("/p/keep.log", is_dir=False).ignored is False
        assert stack.check_ignored("/p/other.log", is_dir=False).ignored is True

    def test_deeper_layer_overrides(self) -> None:
        """A deeper ignore file re-includes what a shallower one excluded."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))
        stack.push(_layer("/p/src", "!keep.log"))

        verdict = stack.check_ignored("/p/src/keep.log", is_dir=False)

        assert verdict.ignored is False
        assert verdict.rule is not None
        assert verdict.rule.negation is True
        assert verdict.sources == ["/p/.gitignore", "/p/src/.gitignore"]

    def test_later_file_name_overrides(self) -> None:
        """Layers pushed later in the same directory win."""
        stack = RuleStack()
        stack.push(_layer("/p", "*.log"))
        stack.push(_layer("/p", "!*.log", name=".ignore"))

        verdict = stack.check_ignored("/p/a.log", is_dir=False)

        assert verdict.ignored is False
        assert verdict.description == ".ignore:1 !*.log"

    def test_directory_only_rule_skips_files(self) -> None:
        """A trailing-slash rule matches directories but not files of that name."""
        stack = RuleStack()
        stack.push(_layer("/p", "build/"))

        assert stack.check_ignored("/p/build", is_dir=True).ignored is True
        assert stack.check_ignored("/p/build", is_dir=False).ignored is False

    def test_excluded_directory_covers_contents(self) -> None:
        """Paths below an excluded directory are excluded too."""
        stack = RuleStack()
        stack.push(_layer("/p", "build/"))

        assert stack.check_ignored("/p/build/obj/a.o", is_dir=False).ignored is True
        assert stack.check_ignored("/p/src/build/x", is_dir=False).ignored is True

    def test_anchored_rule(self) -> None:
        """An anchored rule only matches directly below its directory."""
        stack = RuleStack()
        stack.push(_layer("/p", "/dist"))

        assert stack.check_ignored("/p/dist", is_dir=True).ignored is True
        assert stack.check_ignored("/p/pkg/dist", is_dir=True).ignored is False

    def test_rule_does_not_apply_outside_its_directory(self) -> None:
        """Rules from a nested ignore file do not affect siblings."""
        stack = RuleStack()
        stack.push(_layer("/p/src", "*.log"))

        assert stack.check_ignored("/p/other/a.log", is_dir=False).ignored is False

    def test_base_directory_never_matches(self) -> None:
        """The directory holding the ignore file is not matched by its own rules."""
        stack = RuleStack()
        stack.push(_layer("/p/build", "*"))

        assert stack.check_ignored("/p/build", is_dir=True).ignored is False
        assert stack.check_ignored("/p/build/x", is_dir=False).ignored is True
