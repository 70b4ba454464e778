"""
Result recovery and classification

Components:
- ResultLog: Parse the record stream written by the instrumented program
- classify: Reduce a testcase's execution flags to one TestStatus
"""

from autocheck.results.result_log import ResultLog, LogEntry
from autocheck.results.status import TestStatus, STATUS_RULES, classify, earned_points

__all__ = [
    "ResultLog",
    "LogEntry",
    "TestStatus",
    "STATUS_RULES",
    "classify",
    "earned_points",
]
