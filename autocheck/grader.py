"""Grader: configuration reader and run driver

A configuration file is a sequence of commands. A command line starts with
':' and carries comma-separated key=value settings; the raw lines up to the
next command line form its block.

    :Init dir=.autocheck
    :Compile
    g++ -std=c++20 ${cpp} -o ${exe}
    :Header
    #include "student.hpp"
    :Output filename=results.html, detail=student
    :Testcase name="Adds", points=5
    CHECK(add(2, 2) == 4, "add(2, 2) returned ", add(2, 2));

Each :Testcase runs through the whole pipeline and is reported as soon as it
is read; the summary is reported after the last command.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence
import logging
import math
import shlex

from autocheck.config import (
    COMMENT_MARKER, DEFAULT_VARIABLES, FALSE_VALUES, GENERATED_FILE_SUFFIXES, LOG_BANNER,
    TRUE_VALUES,
)
from autocheck.environment import Environment
from autocheck.errors import ConfigurationError
from autocheck.execution.pipeline import TestPipeline
from autocheck.reporting.output_sink import OutputSink
from autocheck.reporting.renderer import ReportRenderer, percent_earned
from autocheck.scanner import parse_assignments
from autocheck.testcase import Testcase

logger = logging.getLogger(__name__)

# Loggers of every autocheck module hang off this one.
PACKAGE_LOGGER = "autocheck"

OUTPUT_SETTINGS = ("filename", "detail", "type")

TESTCASE_SETTINGS = (
    "args", "code_file", "expect", "exit_code", "hidden", "input", "match_case",
    "match_space", "name", "points", "run_main", "timeout",
    # Generated-file overrides
    "compile", "cpp", "error", "exe", "out", "output", "result",
)


def strip_comment(line: str) -> str:
    """Remove instructor-only comments from a configuration line."""
    return line.split(COMMENT_MARKER, 1)[0]


def parse_bool(value: str, setting: str) -> bool:
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(f"Unknown testcase '{setting}' value '{value}'.")


def _parse_number(value: str, setting: str, kind: Callable = float):
    try:
        number = kind(value.strip())
    except ValueError:
        raise ConfigurationError(f"Setting '{setting}' needs a number, not '{value}'.")
    # float() also parses "nan" and "inf".
    if not math.isfinite(number):
        raise ConfigurationError(f"Setting '{setting}' needs a finite number, not '{value}'.")
    return number


class Grader:
    """
    Read a configuration, run its testcases and report on them.

    Usage:
        with Grader() as grader:
            grader.load("grade.cfg")
        print(grader.percent)
    """

    def __init__(self, variables: Optional[Dict[str, str]] = None):
        self.environment = Environment(DEFAULT_VARIABLES).derive(variables or {})
        self.is_init = False
        self.tests: List[Testcase] = []
        self.outputs: List[OutputSink] = []
        self.compile_lines: List[str] = []
        self.header_lines: List[str] = []
        self.renderer = ReportRenderer()
        self._log_handler: Optional[logging.Handler] = None

        self._commands: Dict[str, Callable] = {
            ":init": self.init,
            ":compile": self.set_compile,
            ":header": self.set_header,
            ":output": self.add_output,
            ":testcase": self.add_testcase,
        }

    def __enter__(self) -> "Grader":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, filename: str):
        """Load and run a configuration file."""
        path = Path(filename)
        if not path.exists():
            raise ConfigurationError(f"Configuration file '{filename}' not found.")
        with open(path, "r", encoding="utf-8") as f:
            self.load_text(f.read(), source=str(filename))

    def load_text(self, text: str, source: str = "input"):
        """Run every command in configuration text, then report the summary."""
        lines = [strip_comment(line) for line in text.splitlines()]
        pos = 0
        while pos < len(lines):
            line_num = pos + 1
            line = lines[pos]
            pos += 1
            if not line.strip():
                continue

            where = f"line {line_num} in {source}"
            if not line.startswith(":"):
                raise ConfigurationError(f"Unknown line: {line.strip()}", where)

            # Everything up to the next command line is this command's block.
            block = []
            while pos < len(lines) and not lines[pos].startswith(":"):
                if lines[pos].strip():
                    block.append(lines[pos])
                pos += 1

            try:
                self.run_command(line, block)
            except ConfigurationError as e:
                if e.location is not None:
                    raise
                raise type(e)(e.message, where) from e

        self.report_summary()

    def run_command(self, line: str, block: Sequence[str] = ()):
        """Run one command line with its block."""
        line = self.environment.substitute(line)
        parts = line.split(None, 1)
        command = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if command not in self._commands:
            raise ConfigurationError(f"Unknown command '{parts[0]}'.")
        logger.debug(f"Command {command} ({len(block)} block lines)")
        self._commands[command](args, list(block))

    def _load_vars(self, args: str) -> Dict[str, str]:
        """Layer a command's settings on top of the environment; return them."""
        settings = parse_assignments(args) if args.strip() else {}
        if settings:
            self.environment = self.environment.derive(settings)
        return settings

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def init(self, args: str = "", block: Sequence[str] = ()):
        if self.is_init:
            raise ConfigurationError(":Init run twice!")
        self.is_init = True
        self._load_vars(args)
        self._reject_block(":Init", block)

        dir_name = Path(self.environment["dir"])
        if not dir_name.exists():
            logger.info(f"Creating: {dir_name}")
            dir_name.mkdir(parents=True, exist_ok=True)

        self._attach_log(dir_name / self.environment["log"])
        if self.environment["debug"].strip().lower() in TRUE_VALUES:
            logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    def _ensure_init(self):
        if not self.is_init:
            self.init()

    def _reject_block(self, command: str, block: Sequence[str]):
        if block:
            raise ConfigurationError(f"{command} does not take a block; found: {block[0].strip()}")

    def set_compile(self, args: str, block: Sequence[str]):
        self._ensure_init()
        self._load_vars(args)
        self.compile_lines = list(block)

    def set_header(self, args: str, block: Sequence[str]):
        self._ensure_init()
        self._load_vars(args)
        self.header_lines = list(block)

    def add_output(self, args: str, block: Sequence[str] = ()):
        self._ensure_init()
        settings = self._load_vars(args)
        self._reject_block(":Output", block)

        sink = OutputSink()
        # The type goes first so an explicit type beats the filename extension.
        if "type" in settings:
            sink.set_encoding(settings["type"])
        for name, value in settings.items():
            if name == "detail":
                sink.set_detail(value)
            elif name == "filename":
                sink.set_filename(value)
            elif name not in OUTPUT_SETTINGS:
                raise ConfigurationError(f"Unknown :Output argument '{name}'.")
        self.outputs.append(sink)
        logger.info(f"Output {len(self.outputs) - 1}: {sink.describe()}")

    def add_testcase(self, args: str, block: Sequence[str]):
        self._ensure_init()
        if not self.compile_lines:
            raise ConfigurationError("Cannot set up testcase without compile rules.")

        test = self.configure_testcase(len(self.tests), args)
        test.code = list(block)
        self.tests.append(test)
        self.run_testcase(test)

    def configure_testcase(self, test_id: int, args: str) -> Testcase:
        """Build a Testcase from :Testcase settings and the current environment."""
        file_base = f"{self.environment['dir']}/Test{test_id}"
        file_vars = {name: file_base + suffix for name, suffix in GENERATED_FILE_SUFFIXES.items()}
        file_vars["#test"] = str(test_id)
        self.environment = self.environment.derive(file_vars)

        # Settings may override the generated-file names before they are locked in.
        settings = self._load_vars(args)
        if "output" in settings:
            self.environment = self.environment.derive(out=settings["output"])
        env = self.environment

        test = Testcase(
            id=test_id,
            cpp_filename=env["cpp"],
            compile_filename=env["compile"],
            exe_filename=env["exe"],
            output_filename=env["out"],
            error_filename=env["error"],
            result_filename=env["result"],
            environment=env,
        )

        for name, value in settings.items():
            if name not in TESTCASE_SETTINGS:
                raise ConfigurationError(f"Unknown :Testcase argument '{name}'.")
            if name == "args":
                test.args = value
                try:
                    test.argv = shlex.split(value)
                except ValueError as e:
                    raise ConfigurationError(f"Bad args '{value}': {e}")
            elif name == "code_file":
                test.code_filename = value
            elif name == "expect":
                test.expect_filename = value
            elif name == "exit_code":
                test.expect_exit_code = _parse_number(value, name, int)
            elif name == "hidden":
                test.hidden = parse_bool(value, name)
            elif name == "input":
                test.input_filename = value
            elif name == "match_case":
                test.match_case = parse_bool(value, name)
            elif name == "match_space":
                test.match_space = parse_bool(value, name)
            elif name == "name":
                test.name = value
            elif name == "points":
                test.points = _parse_number(value, name)
                if test.points < 0:
                    raise ConfigurationError(f"Testcase points cannot be negative ({value}).")
            elif name == "run_main":
                test.call_main = parse_bool(value, name)
            elif name == "timeout":
                test.timeout = _parse_number(value, name)
        return test

    # ------------------------------------------------------------------
    # Running and reporting
    # ------------------------------------------------------------------

    def run_testcase(self, test: Testcase):
        pipeline = TestPipeline(self.header_lines, self.compile_lines)
        pipeline.run(test)
        for sink in self.outputs:
            self.renderer.render_testcase(test, sink)

    def report_summary(self):
        for sink in self.outputs:
            self.renderer.render_summary(self.tests, sink)

    @property
    def total_points(self) -> float:
        return sum(test.points for test in self.tests)

    @property
    def earned_points(self) -> float:
        return sum(test.earned_points for test in self.tests)

    @property
    def percent(self) -> int:
        return percent_earned(self.earned_points, self.total_points)

    # ------------------------------------------------------------------
    # Log file
    # ------------------------------------------------------------------

    def _attach_log(self, log_path: Path):
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(f"{LOG_BANNER}\n\n")

        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logging.getLogger(PACKAGE_LOGGER).addHandler(handler)
        self._log_handler = handler
        logger.info(f"Logging to {log_path}")

    def close(self):
        for sink in self.outputs:
            sink.close()
        if self._log_handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._log_handler)
            self._log_handler.close()
            self._log_handler = None
