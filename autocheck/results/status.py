"""Status classification for a finished testcase

A testcase produces several signals that can contradict each other (a
program that failed to compile also "failed" every check). The verdict is the
first rule in STATUS_RULES whose condition holds; earlier pipeline stages
dominate later ones because a failed stage makes later signals meaningless.

Flags left at None were never attempted and count as no evidence of failure.
"""

from enum import Enum
from typing import Callable, List, Tuple


class TestStatus(Enum):
    """Verdicts, in classification priority order."""
    __test__ = False  # Not a pytest test class.

    COMPILE_FAILED = "compile_failed"
    TIMED_OUT = "timed_out"
    WRONG_EXIT_CODE = "wrong_exit_code"
    RUNTIME_ERROR = "runtime_error"
    CHECKS_FAILED = "checks_failed"
    OUTPUT_MISMATCH = "output_mismatch"
    PASSED = "passed"


def _compile_failed(test) -> bool:
    return test.compile_exit_code not in (None, 0)


def _timed_out(test) -> bool:
    return test.hit_timeout


def _exit_code_differs(test) -> bool:
    return test.run_exit_code is not None and test.run_exit_code != test.expect_exit_code


def _wrong_exit_code(test) -> bool:
    # The test expected a specific failure code and did not get it.
    return _exit_code_differs(test) and test.expect_exit_code != 0


def _runtime_error(test) -> bool:
    return _exit_code_differs(test) and test.expect_exit_code == 0


def _checks_failed(test) -> bool:
    return not all(check.passed for check in test.checks)


def _output_mismatch(test) -> bool:
    return test.output_match is False


# Ordered decision table: first match wins.
STATUS_RULES: List[Tuple[TestStatus, Callable]] = [
    (TestStatus.COMPILE_FAILED, _compile_failed),
    (TestStatus.TIMED_OUT, _timed_out),
    (TestStatus.WRONG_EXIT_CODE, _wrong_exit_code),
    (TestStatus.RUNTIME_ERROR, _runtime_error),
    (TestStatus.CHECKS_FAILED, _checks_failed),
    (TestStatus.OUTPUT_MISMATCH, _output_mismatch),
]


def classify(test) -> TestStatus:
    """Reduce a testcase's execution flags to one verdict."""
    for status, condition in STATUS_RULES:
        if condition(test):
            return status
    return TestStatus.PASSED


def earned_points(test) -> float:
    """Scoring is all-or-nothing per testcase."""
    return test.points if classify(test) == TestStatus.PASSED else 0.0


def status_string(test) -> str:
    """Short status used in summary tables."""
    status = classify(test)
    if status == TestStatus.WRONG_EXIT_CODE:
        return f"Wrong exit code (expected {test.expect_exit_code} received {test.run_exit_code})"
    return {
        TestStatus.PASSED: "Passing",
        TestStatus.CHECKS_FAILED: "Checks Failing",
        TestStatus.COMPILE_FAILED: "Compilation Error",
        TestStatus.TIMED_OUT: "Timed Out",
        TestStatus.RUNTIME_ERROR: "Error During Run",
        TestStatus.OUTPUT_MISMATCH: "Incorrect Output",
    }[status]


def status_message(test) -> Tuple[str, str]:
    """Result line and its colour for per-testcase reports."""
    status = classify(test)
    if status == TestStatus.WRONG_EXIT_CODE:
        return ("OrangeRed",
                f"FAILED due to wrong error code (expected {test.expect_exit_code}; "
                f"received {test.run_exit_code}).")
    return {
        TestStatus.PASSED: ("Green", "PASSED!"),
        TestStatus.CHECKS_FAILED: ("Red", "FAILED due to unsuccessful check."),
        TestStatus.COMPILE_FAILED: ("DarkRed", "FAILED during compilation."),
        TestStatus.TIMED_OUT: ("Purple", "FAILED due to timeout."),
        TestStatus.RUNTIME_ERROR: ("OrangeRed", "FAILED due to run-time error."),
        TestStatus.OUTPUT_MISMATCH: ("OrangeRed", "FAILED due to mis-matched output."),
    }[status]
