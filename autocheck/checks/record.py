"""Runtime outcomes of one check"""

from dataclasses import dataclass, field
from typing import List

from autocheck.checks.expression import CheckExpression


@dataclass
class CheckRecord:
    """
    Every evaluation of one check, in run order.

    A check inside a loop is evaluated (and logged) many times; the four lists
    are parallel and always the same length.
    """
    check_id: int
    expression: CheckExpression
    results: List[bool] = field(default_factory=list)
    lhs_values: List[str] = field(default_factory=list)
    rhs_values: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def evaluations(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> bool:
        """Evaluated at least once and never failed."""
        return bool(self.results) and all(self.results)

    @property
    def passed_any(self) -> bool:
        return any(self.results)

    def push_result(self, success: bool, lhs: str, rhs: str, message: str):
        """Append one evaluation (called only while replaying the result log)."""
        self.results.append(success)
        self.lhs_values.append(lhs.strip())
        self.rhs_values.append(rhs.strip())
        self.messages.append(message.strip())

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "check_id": self.check_id,
            "test": self.expression.text,
            "kind": self.expression.kind.value,
            "passed": self.passed,
            "results": list(self.results),
            "lhs_values": list(self.lhs_values),
            "rhs_values": list(self.rhs_values),
            "messages": list(self.messages),
        }
