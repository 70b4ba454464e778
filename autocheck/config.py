"""Configuration for autocheck"""

import os
from typing import Dict, Any

# Internal comment marker; text after it is stripped from every config line
# (lets instructors leave notes that students never see).
COMMENT_MARKER = os.getenv("AUTOCHECK_COMMENT", "///")

# Variables available as ${name} before any :Init settings are applied.
DEFAULT_VARIABLES = {
    "dir": ".autocheck",
    "debug": "false",
    "log": "Log.txt",
}

LOG_BANNER = "== AUTOCHECK TEST LOG =="

# ===========================================
# Testcase defaults
# ===========================================

DEFAULT_TIMEOUT_SECONDS = 5

# Generated files per testcase: variable name -> suffix after "${dir}/Test<id>"
GENERATED_FILE_SUFFIXES = {
    "compile": "-compile.txt",
    "cpp": ".cpp",
    "error": "-errors.txt",
    "exe": ".exe",
    "out": "-output.txt",
    "result": "-result.txt",
}

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")

# Exit code recorded when the built executable cannot be started at all
MISSING_EXECUTABLE_EXIT_CODE = 127

# ===========================================
# Check markers and comparators
# ===========================================

CHECK_MARKER = "CHECK"
CHECK_TYPE_MARKER = "CHECK_TYPE"

# Longest tokens first so "<=" is never split into "<" and "=".
COMPARATORS = ("==", "!=", "<=", ">=", "<", ">")
LOGICAL_OPERATORS = ("&&", "||")

# Operators built from comparator characters that are not comparisons.
NON_COMPARATOR_OPERATORS = ("<=>", "<<", ">>", "->")

TYPE_COMPARATOR = "TYPE"
NO_RHS_PLACEHOLDER = "N/A"

# ===========================================
# Reporting
# ===========================================

DETAIL_LEVELS = ("none", "percent", "score", "summary", "student", "teacher", "full", "debug")
DETAIL_ALIASES = {
    "instructor": "teacher",
}

ENCODING_ALIASES = {
    "htm": "html",
    "text": "txt",
}
DEFAULT_ENCODING = "txt"

DETAIL_HEADERS = {
    "summary": "Autograde Summary",
    "student": "Autograde Results",
    "teacher": "Autograde Results (Instructor Eyes Only)",
    "full": "Autograde Results (All details)",
    "debug": "Autograde Results (DEBUG mode)",
}

# Compile logs longer than this many lines get a scrolling box in HTML.
HTML_SCROLL_LINES = 25


def get_config() -> Dict[str, Any]:
    """Get snapshot of the default configuration"""
    return {
        "comment_marker": COMMENT_MARKER,
        "variables": dict(DEFAULT_VARIABLES),
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "generated_files": dict(GENERATED_FILE_SUFFIXES),
        "comparators": list(COMPARATORS),
        "detail_levels": list(DETAIL_LEVELS),
        "default_encoding": DEFAULT_ENCODING,
    }
