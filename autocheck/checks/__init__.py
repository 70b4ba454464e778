"""
Checks embedded in test code

Components:
- parse_check / parse_type_check: Turn a marker body into a CheckExpression
- generate_check_code: Emit instrumented C++ for one CheckExpression
- CheckRecord: Runtime outcomes of one check
"""

from autocheck.checks.expression import (
    CheckExpression, CheckKind, parse_check, parse_type_check, parse_marker,
)
from autocheck.checks.instrumentation import generate_check_code
from autocheck.checks.record import CheckRecord

__all__ = [
    "CheckExpression",
    "CheckKind",
    "parse_check",
    "parse_type_check",
    "parse_marker",
    "generate_check_code",
    "CheckRecord",
]
