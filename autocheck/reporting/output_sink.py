"""Report destinations

Each :Output command creates one OutputSink: a file (or the console), a
detail level and an encoding. Sinks open lazily so that an output that is
never written to never creates a file.
"""

import sys
from enum import IntEnum
from pathlib import Path
from typing import IO, Optional
import logging

from autocheck.config import (
    DEFAULT_ENCODING, DETAIL_ALIASES, DETAIL_HEADERS, DETAIL_LEVELS, ENCODING_ALIASES,
)
from autocheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENCODINGS = ("txt", "html")


class Detail(IntEnum):
    """How much a sink reports; every level includes everything below it."""
    NONE = 0      # No output
    PERCENT = 1   # Overall percentage ("60%")
    SCORE = 2     # Overall points ("70 of 100")
    SUMMARY = 3   # One summary row per testcase
    STUDENT = 4   # Details for failed visible testcases
    TEACHER = 5   # Details for failed hidden testcases too
    FULL = 6      # Details for passed testcases too
    DEBUG = 7     # Everything, plus internal state

    @classmethod
    def from_name(cls, name: str) -> "Detail":
        key = name.strip().lower()
        key = DETAIL_ALIASES.get(key, key)
        try:
            return cls[key.upper()]
        except KeyError:
            raise ConfigurationError(f"Trying to set unknown detail level '{name}' "
                                     f"(expected one of: {', '.join(DETAIL_LEVELS)}).")


class OutputSink:
    """
    One report destination.

    An empty filename means the console. The filename cannot change once
    something has been written.
    """

    def __init__(self, filename: str = "", detail: Detail = Detail.STUDENT,
                 encoding: str = "", stream: Optional[IO[str]] = None):
        self.filename = ""
        self.detail = detail
        self.encoding = ""
        self._stream = stream
        self._owns_stream = False
        self._opened = False

        if encoding:
            self.set_encoding(encoding)
        if filename:
            self.set_filename(filename)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_filename(self, filename: str):
        if self._opened:
            raise ConfigurationError(
                f"Cannot change filename once output file is used. (new name={filename})")
        self.filename = filename

        # Without an explicit type, the file extension decides.
        if not self.encoding:
            self.set_encoding(Path(filename).suffix.lstrip(".") or filename)

    def set_detail(self, level: str):
        self.detail = Detail.from_name(level)

    def set_encoding(self, encoding: str):
        encoding = encoding.strip().lower()
        encoding = ENCODING_ALIASES.get(encoding, encoding)
        if encoding not in ENCODINGS:
            logger.warning(f"Unknown type '{encoding}'; using TEXT.")
            encoding = DEFAULT_ENCODING
        self.encoding = encoding

    @property
    def is_html(self) -> bool:
        return self.encoding == "html"

    @property
    def is_text(self) -> bool:
        return not self.is_html

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def open(self):
        """Open the destination and write the header (SUMMARY detail and up)."""
        if self._opened:
            return
        if self._stream is None:
            if self.filename:
                path = Path(self.filename)
                path.parent.mkdir(parents=True, exist_ok=True)
                self._stream = open(path, "w", encoding="utf-8")
                self._owns_stream = True
            else:
                self._stream = sys.stdout
        if not self.encoding:
            self.encoding = DEFAULT_ENCODING
        self._opened = True

        if self.detail < Detail.SUMMARY:
            return
        header = DETAIL_HEADERS[self.detail.name.lower()]
        if self.is_html:
            self._stream.write(f"<h1>{header}</h1>\n\n")
        else:
            self._stream.write(f"{header}\n\n")

    def write(self, text: str):
        if not self._opened:
            self.open()
        self._stream.write(text)

    def close(self):
        if self._stream is not None:
            self._stream.flush()
            if self._owns_stream:
                self._stream.close()
                self._stream = None

    def describe(self) -> str:
        target = f"file '{self.filename}'" if self.filename else "standard out"
        return f"Target: {target}; Detail: {self.detail.name}; Encoding: {self.encoding or DEFAULT_ENCODING}"
