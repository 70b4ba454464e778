"""Test Output Sinks

Tests detail levels, encoding selection, lazy opening and headers.
"""

import io
import logging
from pathlib import Path
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autocheck.errors import ConfigurationError
from autocheck.reporting.output_sink import Detail, OutputSink


def test_detail_levels():
    assert Detail.NONE < Detail.PERCENT < Detail.SCORE < Detail.SUMMARY
    assert Detail.SUMMARY < Detail.STUDENT < Detail.TEACHER < Detail.FULL < Detail.DEBUG
    assert Detail.from_name("FULL") == Detail.FULL
    assert Detail.from_name("instructor") == Detail.TEACHER

    with pytest.raises(ConfigurationError, match="unknown detail level"):
        Detail.from_name("everything")


def test_encoding_from_extension(caplog):
    assert OutputSink("report.html").is_html
    assert OutputSink("report.htm").is_html
    assert OutputSink("report.txt").is_text

    with caplog.at_level(logging.WARNING):
        sink = OutputSink("report.md")
    assert sink.encoding == "txt"
    assert "Unknown type 'md'" in caplog.text


def test_explicit_encoding_wins():
    sink = OutputSink()
    sink.set_encoding("html")
    sink.set_filename("report.txt")
    assert sink.is_html


def test_headers():
    """Sinks at SUMMARY and above start with a header"""
    stream = io.StringIO()
    sink = OutputSink(detail=Detail.SUMMARY, stream=stream)
    sink.write("body\n")
    assert stream.getvalue() == "Autograde Summary\n\nbody\n"

    stream = io.StringIO()
    sink = OutputSink(detail=Detail.TEACHER, encoding="html", stream=stream)
    sink.write("")
    assert stream.getvalue() == "<h1>Autograde Results (Instructor Eyes Only)</h1>\n\n"

    stream = io.StringIO()
    sink = OutputSink(detail=Detail.PERCENT, stream=stream)
    sink.write("75%\n")
    assert stream.getvalue() == "75%\n"


def test_lazy_open(tmp_path):
    path = tmp_path / "reports" / "out.txt"
    sink = OutputSink(str(path), detail=Detail.STUDENT)
    assert not path.exists()

    sink.write("hello\n")
    sink.close()
    assert path.read_text() == "Autograde Results\n\nhello\n"


def test_no_retarget_after_write(tmp_path):
    sink = OutputSink(str(tmp_path / "a.txt"))
    sink.set_filename(str(tmp_path / "b.txt"))  # Fine before first write.
    sink.write("x")
    with pytest.raises(ConfigurationError, match="Cannot change filename"):
        sink.set_filename(str(tmp_path / "c.txt"))
    sink.close()


def test_console_defaults_to_text(capsys):
    sink = OutputSink(detail=Detail.NONE)
    sink.write("hi")
    sink.close()
    assert sink.encoding == "txt"
    assert capsys.readouterr().out == "hi"
