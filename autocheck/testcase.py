"""Testcase model for autocheck"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from autocheck.checks.record import CheckRecord
from autocheck.config import DEFAULT_TIMEOUT_SECONDS
from autocheck.environment import Environment
from autocheck.results.status import TestStatus, classify, earned_points


@dataclass
class Testcase:
    """
    One gradable unit: code, configuration, checks and execution results.

    Post-execution flags use None for "phase not attempted", which the status
    classifier reads as "no evidence of failure from that phase".
    """
    __test__ = False  # Not a pytest test class.

    id: int
    name: str = ""
    points: float = 0.0
    hidden: bool = False
    expect_exit_code: int = 0

    # Inputs
    args: str = ""                  # Command-line arguments for the executable, as written
    argv: List[str] = field(default_factory=list)  # args split into words
    input_filename: str = ""        # Fed to standard input
    expect_filename: str = ""       # Compared against standard output
    code_filename: str = ""         # Test code kept in a separate file

    # Generated files
    cpp_filename: str = ""
    compile_filename: str = ""
    exe_filename: str = ""
    output_filename: str = ""
    error_filename: str = ""
    result_filename: str = ""

    # Run configuration
    call_main: bool = True
    match_case: bool = True
    match_space: bool = True
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    # Configured elsewhere
    code: List[str] = field(default_factory=list)
    processed_code: str = ""
    environment: Environment = field(default_factory=Environment)
    checks: List[CheckRecord] = field(default_factory=list)

    # Results
    compile_exit_code: Optional[int] = None
    run_exit_code: Optional[int] = None
    hit_timeout: bool = False
    output_match: Optional[bool] = None
    logged_score: Optional[float] = None   # SCORE line from the result log, if any
    score: float = 0.0
    phases: Dict[str, Dict[str, Any]] = field(default_factory=dict)  # Raw compile / run / compare results

    @property
    def num_checks(self) -> int:
        return len(self.checks)

    def count_passed(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    def count_failed(self) -> int:
        return sum(1 for check in self.checks if not check.passed)

    def all_checks_passed(self) -> bool:
        return all(check.passed for check in self.checks)

    def failed_lines(self) -> List[int]:
        """Lines of the test code holding a check that did not pass."""
        return sorted({check.expression.line for check in self.checks if not check.passed})

    @property
    def status(self) -> TestStatus:
        return classify(self)

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED

    @property
    def earned_points(self) -> float:
        return earned_points(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "points": self.points,
            "hidden": self.hidden,
            "status": self.status.name,
            "earned_points": self.earned_points,
            "compile_exit_code": self.compile_exit_code,
            "run_exit_code": self.run_exit_code,
            "expect_exit_code": self.expect_exit_code,
            "hit_timeout": self.hit_timeout,
            "output_match": self.output_match,
            "logged_score": self.logged_score,
            "settings": {
                "match_case": self.match_case,
                "match_space": self.match_space,
                "call_main": self.call_main,
                "timeout": self.timeout,
                "args": self.args,
            },
            "files": {
                "input": self.input_filename or None,
                "expect": self.expect_filename or None,
                "code": self.code_filename or None,
                "cpp": self.cpp_filename or None,
                "compile": self.compile_filename or None,
                "exe": self.exe_filename or None,
                "output": self.output_filename or None,
                "error": self.error_filename or None,
                "result": self.result_filename or None,
            },
            "phases": self.phases,
            "checks": [check.to_dict() for check in self.checks],
        }
