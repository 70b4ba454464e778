"""Test Status Classification

Tests the ordered decision table that reduces a testcase's flags to one
verdict, and all-or-nothing scoring.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.checks.expression import parse_check
from autocheck.checks.record import CheckRecord
from autocheck.results.status import (
    STATUS_RULES, TestStatus, classify, earned_points, status_message, status_string,
)
from autocheck.testcase import Testcase


def create_check(check_id=0, *results):
    """Helper to create a check with the given outcomes"""
    check = CheckRecord(check_id, parse_check(["x == 1"]))
    for success in results:
        check.push_result(success, "1" if success else "2", "1", "")
    return check


def create_test(checks=None, **kwargs):
    """Helper to create a testcase that compiled and ran cleanly"""
    values = dict(id=0, name="Sample", points=10, compile_exit_code=0, run_exit_code=0)
    values.update(kwargs)
    test = Testcase(**values)
    test.checks = checks or []
    return test


def test_clean_run_passes():
    test = create_test([create_check(0, True, True)])
    assert classify(test) == TestStatus.PASSED
    assert earned_points(test) == 10
    assert test.passed


def test_nothing_attempted_is_no_evidence():
    """Flags left at None never fail a testcase"""
    test = Testcase(id=0, points=2)
    assert classify(test) == TestStatus.PASSED


def test_compile_failure_dominates():
    test = create_test([create_check(0, False)], compile_exit_code=1,
                       hit_timeout=True, run_exit_code=None, output_match=False)
    assert classify(test) == TestStatus.COMPILE_FAILED
    assert earned_points(test) == 0


def test_timeout():
    test = create_test(hit_timeout=True, run_exit_code=None)
    assert classify(test) == TestStatus.TIMED_OUT


def test_exit_codes():
    """A crash and an unexpected exit code are told apart"""
    assert classify(create_test(run_exit_code=1)) == TestStatus.RUNTIME_ERROR
    assert classify(create_test(run_exit_code=0, expect_exit_code=3)) == TestStatus.WRONG_EXIT_CODE
    assert classify(create_test(run_exit_code=3, expect_exit_code=3)) == TestStatus.PASSED


def test_failed_and_unreached_checks():
    assert classify(create_test([create_check(0, True, False)])) == TestStatus.CHECKS_FAILED
    # A check never reached at run time has not passed.
    assert classify(create_test([create_check(0)])) == TestStatus.CHECKS_FAILED


def test_output_mismatch_after_checks():
    test = create_test([create_check(0, True)], output_match=False)
    assert classify(test) == TestStatus.OUTPUT_MISMATCH

    test = create_test([create_check(0, False)], output_match=False)
    assert classify(test) == TestStatus.CHECKS_FAILED


def test_rule_order():
    assert [status for status, _ in STATUS_RULES] == [
        TestStatus.COMPILE_FAILED,
        TestStatus.TIMED_OUT,
        TestStatus.WRONG_EXIT_CODE,
        TestStatus.RUNTIME_ERROR,
        TestStatus.CHECKS_FAILED,
        TestStatus.OUTPUT_MISMATCH,
    ]


@pytest.mark.parametrize("points", [0, 0.5, 10])
@pytest.mark.parametrize("flags", [
    dict(compile_exit_code=1),
    dict(hit_timeout=True, run_exit_code=None),
    dict(run_exit_code=0, expect_exit_code=3),
    dict(run_exit_code=139),
    dict(checks=[create_check(0, True, False)]),
    dict(output_match=False),
])
def test_failing_states_earn_nothing(points, flags):
    """All or nothing: any failure earns 0, whatever the testcase is worth"""
    test = create_test(**flags, points=points)
    assert classify(test) != TestStatus.PASSED
    assert earned_points(test) == 0
    assert test.earned_points == 0


@pytest.mark.parametrize("points", [0, 0.5, 10])
def test_passing_earns_configured_points(points):
    test = create_test([create_check(0, True)], points=points)
    assert classify(test) == TestStatus.PASSED
    assert earned_points(test) == points
    assert test.earned_points == points


def test_status_strings():
    assert status_string(create_test()) == "Passing"
    assert status_string(create_test(compile_exit_code=2)) == "Compilation Error"
    assert status_string(create_test(run_exit_code=0, expect_exit_code=3)) == \
        "Wrong exit code (expected 3 received 0)"


def test_status_messages():
    assert status_message(create_test()) == ("Green", "PASSED!")
    assert status_message(create_test(hit_timeout=True)) == ("Purple", "FAILED due to timeout.")
    color, message = status_message(create_test([create_check(0, False)]))
    assert color == "Red"
    assert message == "FAILED due to unsuccessful check."


def test_counts():
    test = create_test([create_check(0, True), create_check(1, False), create_check(2)])
    assert test.num_checks == 3
    assert test.count_passed() == 1
    assert test.count_failed() == 2
    assert not test.all_checks_passed()
