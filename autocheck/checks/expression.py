"""Check expression parsing

A check marker's body is a list of top-level arguments. The first argument
(or the first two, for CHECK_TYPE) is the assertion; the rest are message
expressions used to explain a failure.

Check kinds:
1. BOOLEAN    - CHECK(is_sorted(v))          lhs evaluated for truthiness
2. COMPARISON - CHECK(x + 1 <= y, "x=", x)   lhs <comparator> rhs
3. TYPE       - CHECK_TYPE(f(2), double)     decltype(lhs) is rhs
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple
import logging

from autocheck.config import (
    CHECK_TYPE_MARKER, COMPARATORS, LOGICAL_OPERATORS, NON_COMPARATOR_OPERATORS, TYPE_COMPARATOR,
)
from autocheck.errors import ParseError
from autocheck.scanner import find_operators, split_arguments

logger = logging.getLogger(__name__)


class CheckKind(Enum):
    """Variants of a check expression."""
    BOOLEAN = "boolean"
    COMPARISON = "comparison"
    TYPE = "type"


@dataclass(frozen=True)
class CheckExpression:
    """One parsed check; immutable once built."""
    kind: CheckKind
    text: str                         # Original assertion text (synthesized for TYPE)
    lhs: str
    comparator: Optional[str] = None  # None for BOOLEAN, TYPE_COMPARATOR for TYPE
    rhs: str = ""
    messages: Tuple[str, ...] = ()    # Extra arguments, streamed into failure messages
    location: str = ""
    line: int = 0                     # 1-based line of the marker in the testcase code

    @property
    def has_comparison(self) -> bool:
        return self.comparator is not None


def parse_check(args: Sequence[str], location: str = "", line: int = 0) -> CheckExpression:
    """
    Build a CHECK expression from its arguments.

    Args:
        args: Top-level arguments of the marker body
        location: Context for error messages (testcase / line / check id)
        line: Line of the marker inside the testcase code

    Returns:
        BOOLEAN or COMPARISON CheckExpression

    Raises:
        ParseError: empty check, && or ||, more than one comparator, or a
            comparator with a missing operand
    """
    if not args or not args[0].strip():
        raise ParseError("CHECK cannot be empty.", location)

    test = args[0].strip()
    messages = tuple(args[1:])

    if find_operators(test, LOGICAL_OPERATORS):
        raise ParseError("Unit test checks do not allow \"&&\" or \"||\".", location)

    comparisons = find_operators(test, COMPARATORS, top_level_only=True,
                                 ignore=NON_COMPARATOR_OPERATORS)
    if not comparisons:
        return CheckExpression(CheckKind.BOOLEAN, test, test,
                               messages=messages, location=location, line=line)

    if len(comparisons) > 1:
        raise ParseError("Unit test checks can have only one comparison.", location)

    comp_pos, comparator = comparisons[0]
    lhs = test[:comp_pos].strip()
    rhs = test[comp_pos + len(comparator):].strip()
    if not lhs or not rhs:
        raise ParseError(f"Comparison '{comparator}' is missing an operand.", location)

    logger.debug(f"{location}: parsed '{lhs}' {comparator} '{rhs}'")
    return CheckExpression(CheckKind.COMPARISON, test, lhs, comparator, rhs,
                           messages=messages, location=location, line=line)


def parse_type_check(args: Sequence[str], location: str = "", line: int = 0) -> CheckExpression:
    """Build a CHECK_TYPE expression: first argument is an expression, second a type."""
    if len(args) < 2 or not args[0].strip() or not args[1].strip():
        raise ParseError("CHECK_TYPE needs at least two args.", location)

    expression = args[0].strip()
    type_name = args[1].strip()
    return CheckExpression(
        CheckKind.TYPE,
        f"TYPE({expression}) == {type_name}",
        expression,
        TYPE_COMPARATOR,
        type_name,
        messages=tuple(args[2:]),
        location=location,
        line=line,
    )


def parse_marker(name: str, body: str, location: str = "", line: int = 0) -> CheckExpression:
    """Parse the body of a CHECK(...) or CHECK_TYPE(...) marker."""
    args = split_arguments(body)
    if name == CHECK_TYPE_MARKER:
        return parse_type_check(args, location, line)
    return parse_check(args, location, line)


def flip_comparator(comparator: str) -> str:
    """Return the negation of a comparator ("<" becomes ">=")."""
    return {
        "==": "!=",
        "!=": "==",
        "<": ">=",
        "<=": ">",
        ">": "<=",
        ">=": "<",
    }.get(comparator, "")
