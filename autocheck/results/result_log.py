"""Result log protocol

The instrumented program writes one record per check evaluation:

    :CHECK: 3
    :TEST: "x + 1 <= y"
    :RESULT: 0
    :LHS: 12
    :RHS: 11
    :MSG: "x was 11"

followed by a blank line, and a single `SCORE <points>` line at normal exit.
The field token may also be written without colons (CHECK, TEST, ...).

A program that crashes leaves a partial log; complete records are still
replayed and a missing SCORE simply means no points were logged.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

from autocheck.checks.record import CheckRecord
from autocheck.errors import ProtocolError
from autocheck.scanner import from_literal

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("TEST", "RESULT", "LHS", "RHS", "MSG")
REQUIRED_FIELDS = ("RESULT", "LHS", "RHS", "MSG")


@dataclass(frozen=True)
class LogEntry:
    """One complete record from the result log"""
    check_id: int
    test: str
    success: bool
    lhs: str
    rhs: str
    message: str


@dataclass
class ResultLog:
    """Append-only sequence of records recovered from one run"""
    entries: List[LogEntry] = field(default_factory=list)
    score: Optional[float] = None
    dropped: int = 0   # Incomplete records discarded

    def append(self, entry: LogEntry):
        self.entries.append(entry)

    @classmethod
    def parse(cls, text: str, source: str = "result log") -> "ResultLog":
        """
        Parse result-log text.

        Raises:
            ProtocolError: unknown field, bad value, or a record field that
                appears before any CHECK line
        """
        log = cls()
        lines = text.split("\n")
        if lines and lines[-1] != "":
            # Final line has no newline: the writer died mid-line.
            logger.warning(f"{source}: ignoring truncated last line {lines[-1]!r}")
        lines = lines[:-1]

        current: Optional[Dict[str, str]] = None
        current_id: Optional[int] = None

        def close_record():
            if current is None:
                return
            missing = [name for name in REQUIRED_FIELDS if name not in current]
            if missing:
                logger.warning(f"{source}: dropping incomplete record for check {current_id} "
                               f"(missing {', '.join(missing)})")
                log.dropped += 1
                return
            log.append(LogEntry(
                check_id=current_id,
                test=current.get("TEST", ""),
                success=current["RESULT"] == "1",
                lhs=current["LHS"],
                rhs=current["RHS"],
                message=current["MSG"],
            ))

        for line_num, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            parts = line.strip().split(None, 1)
            name = parts[0].strip(":").upper()
            value = parts[1] if len(parts) > 1 else ""
            where = f"{source}, line {line_num}"

            if name == "CHECK":
                close_record()
                try:
                    current_id = int(value.strip())
                except ValueError:
                    raise ProtocolError(f"Bad check id '{value}'", where)
                current = {}
            elif name == "SCORE":
                try:
                    log.score = float(value.strip())
                except ValueError:
                    raise ProtocolError(f"Bad score '{value}'", where)
            elif name in RECORD_FIELDS:
                if current is None:
                    raise ProtocolError(f"{name} line before any CHECK line", where)
                if name == "RESULT" and value.strip() not in ("0", "1"):
                    raise ProtocolError(f"Bad result '{value}'", where)
                if name in ("TEST", "MSG"):
                    try:
                        value = from_literal(value)
                    except ValueError as e:
                        raise ProtocolError(str(e), where)
                current[name] = value.strip() if name == "RESULT" else value
            else:
                raise ProtocolError(f"Unknown field in result file: {parts[0]}", where)

        close_record()
        return log

    @classmethod
    def load(cls, path: Path) -> "ResultLog":
        """Load a result log; a missing file is an empty log."""
        path = Path(path)
        if not path.exists():
            logger.info(f"No result log at {path}")
            return cls()
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return cls.parse(f.read(), source=str(path))

    def replay(self, checks: Sequence[CheckRecord]):
        """
        Push every entry onto its CheckRecord, in log order.

        Raises:
            ProtocolError: an entry names a check id the testcase does not have
        """
        by_id = {check.check_id: check for check in checks}
        for entry in self.entries:
            if entry.check_id not in by_id:
                raise ProtocolError(f"Result log refers to unknown check {entry.check_id}")
            by_id[entry.check_id].push_result(entry.success, entry.lhs, entry.rhs, entry.message)
