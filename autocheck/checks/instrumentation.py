"""Instrumentation code for checks

Each check becomes a self-contained C++ block that evaluates the check,
captures both sides as text, and appends one record to the result log.
The emitters are pure functions of the CheckExpression; one per kind.

Names used from the generated program (see program_generator):
    _ac_results      std::ofstream for the result log
    _ac_passed       AND of every check outcome so far
    _ac_check_count  number of check evaluations so far
    _ac_to_literal   printable, escaped rendering of a value
    _ac_escape       escaped rendering of a string (no quotes)
    _ac_type_name<T> human-readable type name
"""

import re
from typing import Callable, Dict, List

from autocheck.checks.expression import CheckExpression, CheckKind
from autocheck.config import NO_RHS_PLACEHOLDER
from autocheck.scanner import to_literal

# C++ numeric literals (with optional sign, exponent, digit separators and suffixes).
_NUMBER_RE = re.compile(
    r"^[+-]?(?:0[xX][0-9a-fA-F']+|(?:\d[\d']*\.?[\d']*|\.\d[\d']*)(?:[eE][+-]?\d+)?)[uUlLfF]*$"
)


def is_number(text: str) -> bool:
    return bool(_NUMBER_RE.match(text.strip()))


def _emit_boolean(check: CheckExpression) -> List[str]:
    return [
        f"    auto _ac_lhs = {check.lhs};",
        f"    const char * _ac_rhs = {to_literal(NO_RHS_PLACEHOLDER)};",
        "    const bool _ac_success = static_cast<bool>(_ac_lhs);",
        "    const std::string _ac_lhs_text = _ac_to_literal(_ac_lhs);",
        "    const std::string _ac_rhs_text = _ac_rhs;",
    ]


def _emit_comparison(check: CheckExpression) -> List[str]:
    # Comparing against a numeric literal directly keeps the literal's type
    # (avoids signed/unsigned mismatches like v.size() == 3).
    rhs_operand = f"({check.rhs})" if is_number(check.rhs) else "_ac_rhs"
    return [
        f"    auto _ac_lhs = {check.lhs};",
        f"    auto _ac_rhs = {check.rhs};",
        f"    const bool _ac_success = static_cast<bool>(_ac_lhs {check.comparator} {rhs_operand});",
        "    const std::string _ac_lhs_text = _ac_to_literal(_ac_lhs);",
        "    const std::string _ac_rhs_text = _ac_to_literal(_ac_rhs);",
    ]


def _emit_type(check: CheckExpression) -> List[str]:
    return [
        f"    using _ac_type1 = decltype({check.lhs});",
        f"    using _ac_type2 = {check.rhs};",
        "    const bool _ac_success = std::is_same<_ac_type1, _ac_type2>();",
        "    const std::string _ac_lhs_text = _ac_escape(_ac_type_name<_ac_type1>());",
        f"    const std::string _ac_rhs_text = _ac_escape({to_literal(check.rhs)});",
    ]


_EMITTERS: Dict[CheckKind, Callable[[CheckExpression], List[str]]] = {
    CheckKind.BOOLEAN: _emit_boolean,
    CheckKind.COMPARISON: _emit_comparison,
    CheckKind.TYPE: _emit_type,
}


def generate_check_code(check: CheckExpression, check_id: int) -> str:
    """
    Generate the C++ block for one check.

    The block evaluates each operand exactly once, builds the failure message
    only when the check fails, updates _ac_passed / _ac_check_count, and
    writes (and flushes) one result-log record.

    Args:
        check: Parsed check
        check_id: Dense id assigned in source order

    Returns:
        C++ source text (a braced block; safe to follow with ';')
    """
    label = f"CHECK #{check_id}"
    if check.kind == CheckKind.TYPE:
        label += " (CHECK_TYPE)"

    lines = [f"  // {label}", "  {"]
    lines.extend(_EMITTERS[check.kind](check))

    lines.append("    _ac_passed = _ac_passed && _ac_success;")
    lines.append("    _ac_check_count++;")
    lines.append("    std::string _ac_msg;")
    lines.append("    if (!_ac_success) {")
    lines.append("      std::stringstream _ac_ss;")
    for message in check.messages:
        lines.append(f"      _ac_ss << {message};")
    lines.append("      _ac_msg = _ac_ss.str();")
    lines.append("    }")

    # The TEST literal is escaped twice: once for the C++ compiler, once for the log.
    lines.extend([
        f"    _ac_results << \":CHECK: {check_id}\\n\"",
        f"                << \":TEST: \" << {to_literal(to_literal(check.text))} << \"\\n\"",
        "                << \":RESULT: \" << (_ac_success ? 1 : 0) << \"\\n\"",
        "                << \":LHS: \" << _ac_lhs_text << \"\\n\"",
        "                << \":RHS: \" << _ac_rhs_text << \"\\n\"",
        "                << \":MSG: \" << _ac_to_literal(_ac_msg) << \"\\n\\n\" << std::flush;",
        "  }",
    ])
    return "\n".join(lines)
