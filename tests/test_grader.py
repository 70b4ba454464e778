"""Test Grader

Tests the configuration reader: commands, blocks, settings, variables and
error locations. The pipeline is replaced by a stub so no compiler runs.
"""

from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import autocheck.grader as grader_module
from autocheck.config import LOG_BANNER
from autocheck.errors import ConfigurationError
from autocheck.grader import Grader, parse_bool, strip_comment


CONFIG = """\
/// Instructor notes never reach students.
:Init dir=build
:Compile
g++ -std=c++20 ${cpp} -o ${exe}   /// hidden flags go here

:Header
#include "student.hpp"
:Output filename=report.txt, detail=summary
:Testcase name="Adds", points=5
CHECK(add(2, 2) == 4);

CHECK(add(0, 0) == 0);
:Testcase name=Hidden, points=3, hidden=true, exit_code=2, match_case=false, timeout=1.5
CHECK(true);
"""


@pytest.fixture
def pipeline_runs(monkeypatch):
    """Replace the pipeline with one that records calls and passes every testcase"""
    runs = []

    class StubPipeline:
        def __init__(self, header_lines=(), compile_lines=()):
            self.header_lines = list(header_lines)
            self.compile_lines = list(compile_lines)

        def run(self, test):
            runs.append((test, self.header_lines, self.compile_lines))
            test.compile_exit_code = 0
            test.run_exit_code = test.expect_exit_code
            test.score = test.earned_points
            return test

    monkeypatch.setattr(grader_module, "TestPipeline", StubPipeline)
    return runs


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_config(workdir, pipeline_runs):
    print("\n" + "=" * 70)
    print("Test: Load Configuration")
    print("=" * 70)

    with Grader() as grader:
        grader.load_text(CONFIG, source="grade.cfg")

    first, second = grader.tests
    assert first.name == "Adds"
    assert first.points == 5
    assert first.code == ["CHECK(add(2, 2) == 4);", "CHECK(add(0, 0) == 0);"]
    assert first.cpp_filename == "build/Test0.cpp"
    assert first.result_filename == "build/Test0-result.txt"

    assert second.name == "Hidden"
    assert second.hidden
    assert second.expect_exit_code == 2
    assert not second.match_case
    assert second.timeout == 1.5
    assert second.output_filename == "build/Test1-output.txt"

    _, header, compile_lines = pipeline_runs[0]
    assert header == ['#include "student.hpp"']
    assert [line.strip() for line in compile_lines] == ["g++ -std=c++20 ${cpp} -o ${exe}"]

    assert grader.percent == 100
    print(f"Loaded {len(grader.tests)} testcases")
    print("[PASS] Configuration loaded")


def test_environment_snapshots(workdir, pipeline_runs):
    """Each testcase keeps the variables it ran under"""
    with Grader() as grader:
        grader.load_text(CONFIG)

    first, second = grader.tests
    assert first.environment.substitute("${cpp}") == "build/Test0.cpp"
    assert first.environment["#test"] == "0"
    assert second.environment["#test"] == "1"
    assert second.environment["name"] == "Hidden"
    # Later settings are threaded forward.
    assert grader.environment["dir"] == "build"


def test_directory_log_and_report(workdir, pipeline_runs):
    with Grader() as grader:
        grader.load_text(CONFIG)

    assert (workdir / "build").is_dir()
    assert (workdir / "build" / "Log.txt").read_text().startswith(LOG_BANNER)

    report = (workdir / "report.txt").read_text()
    assert report.startswith("Autograde Summary")
    assert "TOTAL : 8 / 8" in report
    assert "Final Score: 100%" in report


def test_output_settings(workdir, pipeline_runs):
    config = ":Init dir=out\n:Output filename=${dir}/r.txt, type=html, detail=instructor\n"
    with Grader() as grader:
        grader.load_text(config)

    sink = grader.outputs[0]
    assert sink.filename == "out/r.txt"
    assert sink.is_html
    assert sink.detail.name == "TEACHER"


def test_generated_file_overrides(workdir, pipeline_runs):
    config = ":Compile\ng++ ${cpp}\n:Testcase exe=prog.bin, output=stdout.txt\nCHECK(true);\n"
    with Grader() as grader:
        grader.load_text(config)

    test = grader.tests[0]
    assert test.exe_filename == "prog.bin"
    assert test.output_filename == "stdout.txt"
    assert test.environment["out"] == "stdout.txt"


@pytest.mark.parametrize("config, error", [
    ("hello\n", "line 1 in input: Unknown line: hello"),
    (":Bogus\n", "Unknown command"),
    (":Testcase\nCHECK(true);\n", "without compile rules"),
    (":Init\n:Init\n", "run twice"),
    (":Compile\ng++\n:Testcase color=red\n", "Unknown :Testcase argument 'color'"),
    (":Compile\ng++\n:Testcase hidden=maybe\n", "Unknown testcase 'hidden' value 'maybe'"),
    (":Compile\ng++\n:Testcase points=lots\n", "needs a number"),
    (":Compile\ng++\n:Testcase points=nan\n", "needs a finite number"),
    (":Compile\ng++\n:Testcase points=inf\n", "needs a finite number"),
    (":Compile\ng++\n:Testcase timeout=inf\n", "needs a finite number"),
    (':Compile\ng++\n:Testcase name=a, args="\\"abc"\n', "Bad args"),
    (":Output size=10\n", "Unknown :Output argument 'size'"),
    (":Output detail=everything\n", "unknown detail level"),
    (":Init dir=${nowhere}\n", "Unknown variable used: nowhere"),
    (":Init\nstray line\n", "does not take a block"),
])
def test_configuration_errors(workdir, pipeline_runs, config, error):
    """Broken configurations stop the run with a location"""
    with pytest.raises(ConfigurationError, match=error) as info:
        with Grader() as grader:
            grader.load_text(config)
    assert "in input" in str(info.value)


def test_args_split_when_configured(workdir, pipeline_runs):
    """Arguments are split into words before anything is compiled"""
    config = ':Compile\ng++ ${cpp}\n:Testcase args="-v \'big world\'"\nCHECK(true);\n'
    with Grader() as grader:
        grader.load_text(config)

    test = grader.tests[0]
    assert test.args == "-v 'big world'"
    assert test.argv == ["-v", "big world"]


def test_unbalanced_args_stop_before_running(workdir, pipeline_runs):
    config = ':Compile\ng++ ${cpp}\n:Testcase args="\\"abc"\nCHECK(true);\n'
    with pytest.raises(ConfigurationError) as info:
        with Grader() as grader:
            grader.load_text(config, source="grade.cfg")

    assert "No closing quotation" in str(info.value)
    assert info.value.location == "line 3 in grade.cfg"
    assert pipeline_runs == []


def test_error_line_numbers(workdir, pipeline_runs):
    config = ":Init\n\n:Compile\ng++\n:Testcase nope=1\n"
    with pytest.raises(ConfigurationError) as info:
        with Grader() as grader:
            grader.load_text(config, source="grade.cfg")
    assert info.value.location == "line 5 in grade.cfg"


def test_missing_config_file(workdir):
    with pytest.raises(ConfigurationError, match="not found"):
        with Grader() as grader:
            grader.load("missing.cfg")


def test_helpers():
    assert strip_comment("CHECK(x); /// secret") == "CHECK(x); "
    assert strip_comment("no comment") == "no comment"
    assert parse_bool("TRUE", "hidden") is True
    assert parse_bool("0", "hidden") is False
