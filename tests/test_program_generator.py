"""Test Program Generator

Tests check numbering, marker replacement and the program skeleton.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.checks.expression import CheckKind
from autocheck.errors import ParseError
from autocheck.execution.program_generator import (
    BOILERPLATE, generate_program, process_checks, write_program,
)
from autocheck.scanner import to_literal


def test_process_checks_numbering():
    """CHECK and CHECK_TYPE share one dense id sequence in source order"""
    code = (
        "int x = 1;\n"
        "CHECK(x == 1);\n"
        "CHECK_TYPE(x, int);\n"
        "for (int i = 0; i < 3; ++i) CHECK(i < 3, \"i=\", i);\n"
    )
    body, checks = process_checks(code, 3)

    assert [check.check_id for check in checks] == [0, 1, 2]
    assert [check.expression.kind for check in checks] == [
        CheckKind.COMPARISON, CheckKind.TYPE, CheckKind.COMPARISON,
    ]
    assert [check.expression.line for check in checks] == [2, 3, 4]
    assert checks[0].expression.location == "Testcase #3, Line 2 (check 0)"

    assert "CHECK(x" not in body
    assert "CHECK_TYPE(x" not in body
    assert "// CHECK #2" in body
    assert body.startswith("int x = 1;\n")


def test_process_checks_without_markers():
    body, checks = process_checks("int y = 2;", 0)
    assert body == "int y = 2;"
    assert checks == []


def test_process_checks_parse_error():
    with pytest.raises(ParseError, match="Testcase #0, Line 1"):
        process_checks("CHECK(a && b);", 0)


def test_generate_program():
    """Boilerplate, header, body, SCORE line and runner are all present"""
    source = generate_program("  // body", ['#include "student.hpp"'],
                              ".autocheck/Test0-result.txt", points=5)

    assert source.startswith(BOILERPLATE)
    assert '#include "student.hpp"' in source
    assert "void _ac_main() {" in source
    assert to_literal(".autocheck/Test0-result.txt") in source
    assert "  // body" in source
    assert "(_ac_passed ? 5.0 : 0.0)" in source
    assert "static _ac_runner _ac_runner_instance;" in source
    assert "exit(0)" not in source


def test_generate_program_skips_main():
    source = generate_program("", [], "r.txt", call_main=False)
    assert "exit(0); // Don't execute main()." in source


def test_write_program(tmp_path):
    path = tmp_path / "sub" / "Test0.cpp"
    write_program(path, "int main() {}\n")
    assert path.read_text() == "int main() {}\n"
