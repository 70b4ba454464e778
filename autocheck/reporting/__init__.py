"""
Reporting of grading results

Components:
- OutputSink / Detail: Report destinations and how much each one shows
- compute_diff: Character diff between captured and expected output
- ReportRenderer / plan_sections: Text and HTML reports
"""

from autocheck.reporting.output_sink import Detail, OutputSink
from autocheck.reporting.diff import DiffSpan, compute_diff
from autocheck.reporting.renderer import ReportRenderer, Section, percent_earned, plan_sections

__all__ = [
    "Detail",
    "OutputSink",
    "DiffSpan",
    "compute_diff",
    "ReportRenderer",
    "Section",
    "percent_earned",
    "plan_sections",
]
