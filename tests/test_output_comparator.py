"""Test Output Comparator

Tests output normalization and the match_case / match_space settings.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.errors import ConfigurationError
from autocheck.execution.output_comparator import OutputComparator


def test_exact_match():
    result = OutputComparator().compare("Hello\nWorld\n", "Hello\nWorld\n")
    assert result.match
    assert result.first_mismatch == -1


def test_blank_lines_and_line_endings_ignored():
    comparator = OutputComparator()
    assert comparator.compare("Hello\n\n\nWorld\n", "Hello\nWorld").match
    assert comparator.compare("Hello\r\nWorld\r\n", "Hello\nWorld\n").match


def test_match_case():
    assert not OutputComparator().compare("HELLO", "hello").match
    assert OutputComparator(match_case=False).compare("HELLO", "hello").match


def test_match_space():
    """Without match_space every whitespace character is removed"""
    assert not OutputComparator().compare("a b  c", "abc").match
    assert OutputComparator(match_space=False).compare("a b  c\n", " abc ").match
    assert OutputComparator(match_space=False).compare("a\n   \nb", "a\nb").match


def test_first_mismatch():
    result = OutputComparator().compare("one\ntwo\nthree", "one\n2\nthree")
    assert not result.match
    assert result.first_mismatch == 1

    result = OutputComparator().compare("one", "one\ntwo")
    assert result.first_mismatch == 1


def test_compare_files(tmp_path):
    output = tmp_path / "out.txt"
    expected = tmp_path / "expected.txt"
    output.write_text("Sum: 4\n")
    expected.write_text("sum:4\n")

    assert not OutputComparator().compare_files(output, expected).match
    assert OutputComparator(match_case=False, match_space=False).compare_files(output, expected).match


def test_missing_output_is_empty(tmp_path):
    expected = tmp_path / "expected.txt"
    expected.write_text("\n\n")
    assert OutputComparator().compare_files(tmp_path / "none.txt", expected).match

    expected.write_text("x\n")
    assert not OutputComparator().compare_files(tmp_path / "none.txt", expected).match


def test_missing_expected_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        OutputComparator().compare_files(tmp_path / "out.txt", tmp_path / "missing.txt")
