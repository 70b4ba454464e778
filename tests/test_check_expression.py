"""Test Check Expression Parsing

Tests how CHECK and CHECK_TYPE bodies become CheckExpressions, and which
bodies are rejected.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.checks.expression import (
    CheckKind, flip_comparator, parse_check, parse_marker, parse_type_check,
)
from autocheck.errors import ParseError


def test_comparison():
    """A single top-level comparator splits the check"""
    check = parse_check(["x + 1 <= y"])
    assert check.kind == CheckKind.COMPARISON
    assert check.lhs == "x + 1"
    assert check.comparator == "<="
    assert check.rhs == "y"
    assert check.has_comparison


def test_boolean():
    check = parse_check(["is_sorted(v)"])
    assert check.kind == CheckKind.BOOLEAN
    assert check.lhs == "is_sorted(v)"
    assert check.comparator is None
    assert check.rhs == ""
    assert not check.has_comparison


def test_nested_and_non_comparator_operators():
    """Comparators in brackets and shift / spaceship operators do not count"""
    check = parse_check(["f(a < b) == c"])
    assert check.lhs == "f(a < b)"
    assert check.comparator == "=="

    check = parse_check(["x << 2 == 8"])
    assert check.lhs == "x << 2"
    assert check.rhs == "8"

    assert parse_check(["a <=> b"]).kind == CheckKind.BOOLEAN
    assert parse_check(["p->valid()"]).kind == CheckKind.BOOLEAN


def test_quoted_comparators():
    check = parse_check(['s == "a<b"'])
    assert check.rhs == '"a<b"'

    check = parse_check(['s == "a && b"'])
    assert check.comparator == "=="


def test_messages():
    check = parse_check(["x == 1", '"x is "', "x"])
    assert check.messages == ('"x is "', "x")


@pytest.mark.parametrize("body, error", [
    ("", "cannot be empty"),
    ("a && b", "do not allow"),
    ("a || b", "do not allow"),
    ("f(a && b)", "do not allow"),
    ("a < b < c", "only one comparison"),
    ("== 3", "missing an operand"),
    ("x ==", "missing an operand"),
])
def test_rejected_checks(body, error):
    """Malformed checks raise ParseError with context"""
    with pytest.raises(ParseError, match=error) as info:
        parse_check([body], location="Testcase #1, Line 4 (check 0)")
    assert "Testcase #1, Line 4 (check 0)" in str(info.value)


def test_type_check():
    check = parse_type_check(["f(2)", "double", '"wrong type"'])
    assert check.kind == CheckKind.TYPE
    assert check.text == "TYPE(f(2)) == double"
    assert check.lhs == "f(2)"
    assert check.rhs == "double"
    assert check.messages == ('"wrong type"',)

    with pytest.raises(ParseError, match="at least two args"):
        parse_type_check(["f(2)"])


def test_parse_marker():
    check = parse_marker("CHECK", 'v.size() == 3, "size was ", v.size()', line=7)
    assert check.kind == CheckKind.COMPARISON
    assert check.messages == ('"size was "', "v.size()")
    assert check.line == 7

    check = parse_marker("CHECK_TYPE", "x, std::vector<int>")
    assert check.kind == CheckKind.TYPE
    assert check.rhs == "std::vector<int>"


def test_flip_comparator():
    assert flip_comparator("<") == ">="
    assert flip_comparator("==") == "!="
    assert flip_comparator(">=") == "<"
