"""Output Comparator

Compares a program's captured standard output with the expected output.

Features:
- Optional case-insensitive matching (match_case=false)
- Optional whitespace-insensitive matching (match_space=false)
- Blank lines never matter
- Line ending differences never matter
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List
import logging

from autocheck.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class OutputComparison:
    """Results from comparing captured output against expected output"""
    match: bool
    output_lines: List[str] = field(default_factory=list)    # Normalized
    expected_lines: List[str] = field(default_factory=list)  # Normalized

    @property
    def first_mismatch(self) -> int:
        """Index of the first differing normalized line, or -1 if they match."""
        for index, (got, want) in enumerate(zip(self.output_lines, self.expected_lines)):
            if got != want:
                return index
        if len(self.output_lines) != len(self.expected_lines):
            return min(len(self.output_lines), len(self.expected_lines))
        return -1

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "match": self.match,
            "output_lines": len(self.output_lines),
            "expected_lines": len(self.expected_lines),
            "first_mismatch": self.first_mismatch,
        }


class OutputComparator:
    """
    Compare program output line by line after normalization.

    Normalization:
    1. Unify line endings
    2. Lower-case everything unless match_case
    3. Remove all whitespace from each line unless match_space
    4. Drop lines that are (or became) empty
    """

    def __init__(self, match_case: bool = True, match_space: bool = True):
        self.match_case = match_case
        self.match_space = match_space

    def normalize(self, text: str) -> List[str]:
        """Turn raw output into the list of lines that are compared."""
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        if not self.match_case:
            text = text.lower()

        lines = []
        for line in text.split("\n"):
            if not self.match_space:
                line = "".join(line.split())
            if line.strip():
                lines.append(line)
        return lines

    def compare(self, output: str, expected: str) -> OutputComparison:
        output_lines = self.normalize(output)
        expected_lines = self.normalize(expected)
        return OutputComparison(
            match=output_lines == expected_lines,
            output_lines=output_lines,
            expected_lines=expected_lines,
        )

    def compare_files(self, output_path: Path, expected_path: Path) -> OutputComparison:
        """
        Compare an output file against an expected-output file.

        A missing output file compares as empty output.

        Raises:
            ConfigurationError: if the expected-output file does not exist
        """
        expected_path = Path(expected_path)
        if not expected_path.exists():
            raise ConfigurationError(f"Expected output file '{expected_path}' not found.")

        output_text = read_text(output_path)
        expected_text = read_text(expected_path)
        result = self.compare(output_text, expected_text)
        if result.match:
            logger.info(f"...Output matches {expected_path}")
        else:
            logger.info(f"...Output differs from {expected_path} "
                        f"(first difference at line {result.first_mismatch + 1})")
        return result


def read_text(path: Path) -> str:
    """Read a captured file; missing files read as empty."""
    path = Path(path)
    if not path.exists():
        return ""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()
