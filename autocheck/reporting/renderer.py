"""Report Renderer

Turns finished testcases into reports for each OutputSink.

Features:
- Per-testcase sections chosen by plan_sections() from status and detail level
- Text and HTML encodings of every section
- Check results with both sides of a comparison aligned
- Test source with the lines of failed checks highlighted
- Output vs. expected output with a character diff
- Aggregate percent / score / summary table after all testcases
"""

import html
import json
import math
from enum import Enum
from pathlib import Path
from typing import List, Sequence

from autocheck.checks.expression import CheckKind, flip_comparator
from autocheck.checks.record import CheckRecord
from autocheck.config import HTML_SCROLL_LINES
from autocheck.execution.output_comparator import read_text
from autocheck.reporting.diff import compute_diff, render_html, render_text
from autocheck.reporting.output_sink import Detail, OutputSink
from autocheck.results.status import TestStatus, status_message, status_string
from autocheck.testcase import Testcase


class Section(Enum):
    """Parts of a per-testcase report, in the order they are rendered."""
    TITLE = "title"
    STATUS = "status"
    CHECKS = "checks"
    CODE = "code"
    COMPILE_LOG = "compile_log"
    ERRORS = "errors"
    ARGS = "args"
    INPUT = "input"
    OUTPUT_DIFF = "output_diff"
    DEBUG_DUMP = "debug_dump"


def plan_sections(test: Testcase, detail: Detail) -> List[Section]:
    """
    Decide which sections to render for one testcase.

    Raising the detail level never removes a section.
    """
    if detail < Detail.STUDENT:
        return []

    sections = [Section.TITLE, Section.STATUS]
    if test.hidden and detail < Detail.TEACHER:
        return sections

    status = test.status
    full = detail >= Detail.FULL
    if status == TestStatus.CHECKS_FAILED or full:
        sections.append(Section.CHECKS)
    if status != TestStatus.PASSED or full:
        sections.append(Section.CODE)
    if status == TestStatus.COMPILE_FAILED:
        sections.append(Section.COMPILE_LOG)
    if status == TestStatus.RUNTIME_ERROR:
        sections.append(Section.ERRORS)
    if status in (TestStatus.WRONG_EXIT_CODE, TestStatus.OUTPUT_MISMATCH) or full:
        sections.extend([Section.ARGS, Section.INPUT])
    if status in (TestStatus.RUNTIME_ERROR, TestStatus.OUTPUT_MISMATCH):
        sections.append(Section.OUTPUT_DIFF)
    if detail >= Detail.DEBUG:
        sections.append(Section.DEBUG_DUMP)
    return sections


def percent_earned(earned: float, total: float) -> int:
    """Whole percent of points earned, rounding halves up; 0 if nothing to earn."""
    if total <= 0:
        return 0
    return int(math.floor(100.0 * earned / total + 0.5))


def format_points(points: float) -> str:
    return f"{points:g}"


def _file_lines(filename: str) -> List[str]:
    if not filename:
        return []
    return read_text(Path(filename)).splitlines()


class ReportRenderer:
    """
    Render testcases and summaries into output sinks.

    Usage:
        renderer = ReportRenderer()
        renderer.render_testcase(test, sink)      # after each testcase runs
        renderer.render_summary(tests, sink)      # once, at the end
    """

    def render_testcase(self, test: Testcase, sink: OutputSink):
        for section in plan_sections(test, sink.detail):
            getattr(self, f"_render_{section.value}")(test, sink)

    # ------------------------------------------------------------------
    # Per-testcase sections
    # ------------------------------------------------------------------

    def _render_title(self, test: Testcase, sink: OutputSink):
        show_hidden = test.hidden and sink.detail >= Detail.TEACHER
        if sink.is_html:
            marker = " <small>[HIDDEN]</small>" if show_hidden else ""
            sink.write(f"<h2 id=\"Test{test.id}\">Test Case {test.id}: "
                       f"{html.escape(test.name)}{marker}</h2>\n")
        else:
            marker = " [HIDDEN]" if show_hidden else ""
            sink.write(f"TEST CASE {test.id}: {test.name}{marker}\n")

    def _render_status(self, test: Testcase, sink: OutputSink):
        color, message = status_message(test)
        if sink.is_html:
            sink.write(f"<b>Result: <span style=\"color: {color}\">{message}</span></b><br><br>\n\n")
        else:
            sink.write(f"Result: {message}\n")

    def _render_checks(self, test: Testcase, sink: OutputSink):
        show_passed = sink.detail >= Detail.FULL
        for check in test.checks:
            if not check.evaluations:
                self._render_unreached_check(check, sink)
                continue
            for index, success in enumerate(check.results):
                if success and not show_passed:
                    continue
                self._render_evaluation(check, index, sink)

    def _render_unreached_check(self, check: CheckRecord, sink: OutputSink):
        text = check.expression.text
        if sink.is_html:
            sink.write(f"\nTest: <b><code>{html.escape(text)}</code></b>\n"
                       f"<p>Result: <span style=\"color: red\"><b>Never executed.</b></span><br>\n")
        else:
            sink.write(f"\nTest: {text}\n\nResult: Never executed.\n")

    def _render_evaluation(self, check: CheckRecord, index: int, sink: OutputSink):
        expression = check.expression
        success = check.results[index]
        lhs_value = check.lhs_values[index]
        rhs_value = check.rhs_values[index]
        message = check.messages[index]
        result = "Passed!" if success else "Failed."

        # A failed comparison means the opposite relation was observed.
        observed = ""
        if not success and expression.kind == CheckKind.COMPARISON:
            observed = f"{lhs_value} {flip_comparator(expression.comparator)} {rhs_value}"

        if sink.is_html:
            color = "green" if success else "red"
            sink.write(f"\nTest: <b><code>{html.escape(expression.text)}</code></b>\n"
                       f"<p>Result: <span style=\"color: {color}\"><b>{result}</b></span><br>\n")
            if message:
                sink.write(f"Error Message: {html.escape(message)}<br>\n")
            if expression.has_comparison:
                sink.write(
                    f"<table><tr><td>Left side:<td><code>{html.escape(expression.lhs)}</code>"
                    f"<td>&nbsp;&nbsp;==&gt;<td><code>{html.escape(lhs_value)}</code></tr>\n"
                    f"<tr><td>Right side:<td><code>{html.escape(expression.rhs)}</code>"
                    f"<td>&nbsp;&nbsp;==&gt;<td><code>{html.escape(rhs_value)}</code></tr></table>\n")
            if observed:
                sink.write(f"Observed: <code>{html.escape(observed)}</code><br>\n")
            sink.write("<br>\n")
        else:
            sink.write(f"\nTest: {expression.text}\n\nResult: {result}\n")
            if message:
                sink.write(f"Error Message: {message}\n")
            if expression.has_comparison:
                width = max(len(expression.lhs), len(expression.rhs))
                sink.write(f"Left side : {expression.lhs.ljust(width)}  ==>  {lhs_value}\n"
                           f"Right side: {expression.rhs.ljust(width)}  ==>  {rhs_value}\n")
            if observed:
                sink.write(f"Observed  : {observed}\n")

    def _render_code(self, test: Testcase, sink: OutputSink):
        if not test.processed_code.strip():
            return
        failed = set(test.failed_lines())
        lines = test.processed_code.split("\n")

        if sink.is_html:
            sink.write("Sourcecode for Test:<br><br>\n"
                       "<table style=\"background-color:#E3E0CF;\"><tr><td><pre>\n\n")
            for line_num, line in enumerate(lines, start=1):
                text = html.escape(line)
                if line_num in failed:
                    text = f"<b style=\"background-color:LightCoral\">{text}</b>"
                sink.write(text + "\n")
            sink.write("</pre></tr></table>\n")
        else:
            sink.write("\nSourcecode for Test:\n\n")
            for line_num, line in enumerate(lines, start=1):
                prefix = ">> " if line_num in failed else "   "
                sink.write(f"{prefix}{line}\n")

    def _render_compile_log(self, test: Testcase, sink: OutputSink):
        lines = _file_lines(test.compile_filename)
        if sink.is_html:
            size_style = "width:800px;"
            if len(lines) > HTML_SCROLL_LINES:
                size_style += " height:400px; overflow-y:scroll;"
            sink.write("<p>Compile Results for Test:<br><br>\n"
                       "<table style=\"background-color:Lavender\">"
                       f"<tr><td style=\"{size_style} display:block;\"><pre>\n\n")
            for line in lines:
                sink.write(html.escape(line) + "\n")
            sink.write("</pre></tr></table>\n")
        else:
            sink.write("\nCompile Results for Test:\n\n")
            for line in lines:
                sink.write(line + "\n")

    def _render_errors(self, test: Testcase, sink: OutputSink):
        lines = _file_lines(test.error_filename)
        if sink.is_html:
            sink.write("<table>\n<tr><th>Run-time Error Messages:</tr>\n"
                       "<tr><td valign=\"top\" style=\"background-color:LightGray\"><pre>\n")
            for line in lines:
                sink.write(html.escape(line) + "\n")
            sink.write("</pre></tr></table>\n")
        else:
            sink.write("========== RUN-TIME ERRORS ==========\n")
            for line in lines:
                sink.write(line + "\n")

    def _render_args(self, test: Testcase, sink: OutputSink):
        if not test.args:
            return
        if sink.is_html:
            sink.write(f"Command Line Arguments: <code>{html.escape(test.args)}</code><br>\n")
        else:
            sink.write(f"Command Line Arguments: {test.args}\n")

    def _render_input(self, test: Testcase, sink: OutputSink):
        if not test.input_filename:
            sink.write("No input for test.<br>\n" if sink.is_html else "No input for test.\n")
            return

        lines = _file_lines(test.input_filename)
        if sink.is_html:
            sink.write("<table>\n<tr><th>Input</tr>\n"
                       "<tr><td valign=\"top\" style=\"background-color:LightGreen\"><pre>\n")
            for line in lines:
                sink.write(html.escape(line) + "\n")
            sink.write("</pre></tr></table>\n")
        else:
            sink.write("========== INPUT ==========\n")
            for line in lines:
                sink.write(line + "\n")

    def _render_output_diff(self, test: Testcase, sink: OutputSink):
        output = read_text(Path(test.output_filename)) if test.output_filename else ""
        has_expected = bool(test.expect_filename)
        expected = read_text(Path(test.expect_filename)) if has_expected else ""

        if sink.is_html:
            sink.write("<table>\n<tr><th>Your Output<th> <th>Expected Output</tr>\n"
                       "<tr><td valign=\"top\" style=\"background-color:LightGoldenrodYellow\"><pre>\n")
            sink.write(html.escape(output))
            sink.write("</pre>\n<td>&nbsp;<td valign=\"top\" style=\"background-color:LightBlue\"><pre>\n")
            sink.write(html.escape(expected) if has_expected else "(no expected output)")
            sink.write("</pre></tr></table>\n")
            if has_expected:
                sink.write("<table>\n<tr><th>Diff</tr>\n"
                           "<tr><td valign=\"top\" style=\"background-color:LightGray\"><pre>\n")
                sink.write(render_html(compute_diff(output, expected)))
                sink.write("</pre></tr></table>\n")
        else:
            sink.write("========== YOUR OUTPUT ==========\n")
            sink.write(output if output.endswith("\n") or not output else output + "\n")
            if has_expected:
                sink.write("\n========== EXPECTED OUTPUT ==========\n")
                sink.write(expected if expected.endswith("\n") or not expected else expected + "\n")
                sink.write("\n========== DIFF ==========\n")
                sink.write(render_text(compute_diff(output, expected)) + "\n")
            sink.write("\n========== END OUTPUT ==========\n")

    def _render_debug_dump(self, test: Testcase, sink: OutputSink):
        dump = json.dumps(test.to_dict(), indent=2)
        if sink.is_html:
            sink.write(f"<h3>Debug</h3>\n<pre>{html.escape(dump)}</pre>\n")
        else:
            sink.write(f"\n========== DEBUG ==========\n{dump}\n")

    # ------------------------------------------------------------------
    # Aggregate
    # ------------------------------------------------------------------

    def render_summary(self, tests: Sequence[Testcase], sink: OutputSink):
        earned = sum(test.earned_points for test in tests)
        total = sum(test.points for test in tests)
        percent = percent_earned(earned, total)

        if sink.detail >= Detail.SUMMARY:
            if sink.is_html:
                self._render_summary_html(tests, sink, earned, total, percent)
            else:
                self._render_summary_text(tests, sink, earned, total, percent)
        elif sink.detail >= Detail.SCORE:
            sink.write(f"{format_points(earned)} of {format_points(total)}\n")
        elif sink.detail >= Detail.PERCENT:
            sink.write(f"{percent}%\n")

    def _render_summary_text(self, tests: Sequence[Testcase], sink: OutputSink,
                             earned: float, total: float, percent: int):
        sink.write("\n========== SUMMARY ==========\n")
        for test in tests:
            sink.write(f"{test.id} : {test.name} : {status_string(test)} : "
                       f"passed {test.count_passed()} of {test.num_checks} checks; "
                       f"{format_points(test.earned_points)} / {format_points(test.points)} points.\n")
        sink.write(f"TOTAL : {format_points(earned)} / {format_points(total)}\n")
        sink.write(f"\nFinal Score: {percent}%\n")

    def _render_summary_html(self, tests: Sequence[Testcase], sink: OutputSink,
                             earned: float, total: float, percent: int):
        sink.write("\n<hr>\n<h1>Summary</h1>\n\n"
                   "<table style=\"background-color:#3fc0FF;\" cellpadding=\"5px\" "
                   "border=\"1px solid black\" cellspacing=\"0\">"
                   "<tr><th>Test Case<th>Status<th>Checks<th>Passed<th>Failed<th>Score</tr>\n")
        for test in tests:
            sink.write(f"<tr><td>{test.id}: {html.escape(test.name)}"
                       f"<td>{html.escape(status_string(test))}"
                       f"<td>{test.num_checks}"
                       f"<td>{test.count_passed()}"
                       f"<td>{test.count_failed()}"
                       f"<td>{format_points(test.earned_points)} / {format_points(test.points)}"
                       "</tr>\n")
        sink.write(f"<tr><th>TOTAL<td><td><td><td><td>{format_points(earned)} / {format_points(total)}</tr>\n")
        sink.write(f"</table>\n<h2>Final Score: <span style=\"color: blue\">{percent}%</span></h2>\n"
                   "<br><br><br>\n")
