"""Compile and run generated test programs

Features:
- Runs the configured compile commands through the shell, in order
- Runs the built executable with arguments, stdin redirection and a timeout
- Captures stdout / stderr to the testcase's files
- Distinguishes a timeout from an ordinary non-zero exit
"""

import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

from autocheck.config import MISSING_EXECUTABLE_EXIT_CODE

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Results from running the compile commands"""
    exit_code: int
    commands: List[str]
    output: str
    duration_ms: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "exit_code": self.exit_code,
            "commands": self.commands,
            "output": self.output,
            "duration_ms": self.duration_ms,
        }


@dataclass
class RunResult:
    """Results from running a built executable"""
    exit_code: Optional[int]   # None when the run was killed by the timeout
    timeout: bool
    duration_ms: float
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timeout

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "exit_code": self.exit_code,
            "timeout": self.timeout,
            "duration_ms": self.duration_ms,
            "error_message": self.error_message,
        }


def compile_program(commands: Sequence[str], log_path: Path,
                    cwd: Optional[Path] = None) -> CompileResult:
    """
    Run compile commands in order, stopping at the first failure.

    The compile log is truncated first; anything the commands print (that
    they do not already redirect themselves) is appended to it.

    Args:
        commands: Shell command lines, variables already filled in
        log_path: Compile log for this testcase
        cwd: Working directory for the commands

    Returns:
        CompileResult with the exit code of the last command run
    """
    start_time = time.time()
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text("", encoding="utf-8")

    exit_code = 0
    ran: List[str] = []
    output: List[str] = []
    for command in commands:
        logger.info(f"Compiling: {command}")
        ran.append(command)
        result = subprocess.run(command, shell=True, cwd=cwd,
                                capture_output=True)
        captured = (result.stdout + result.stderr).decode("utf-8", errors="replace")
        if captured:
            output.append(captured)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write(captured)

        exit_code = result.returncode
        logger.info(f"Compile exit code: {exit_code}")
        if exit_code != 0:
            break

    return CompileResult(
        exit_code=exit_code,
        commands=ran,
        output="".join(output),
        duration_ms=(time.time() - start_time) * 1000,
    )


def run_program(exe_path: Path, args: Sequence[str] = (), input_path: Optional[Path] = None,
                output_path: Optional[Path] = None, error_path: Optional[Path] = None,
                timeout_seconds: Optional[float] = None,
                cwd: Optional[Path] = None) -> RunResult:
    """
    Run a built executable, capturing stdout and stderr to files.

    Args:
        exe_path: Executable to run
        args: Command-line arguments, already split into argv words
        input_path: File fed to standard input (empty input if None)
        output_path: Where standard output goes
        error_path: Where standard error goes
        timeout_seconds: Wall-clock limit; the process is killed past it

    Returns:
        RunResult; a missing executable is reported as exit code 127
    """
    start_time = time.time()
    command = [str(Path(exe_path).resolve())] + list(args)
    logger.info(f"Running: {' '.join(shlex.quote(part) for part in command)}")

    for path in (output_path, error_path):
        if path:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    stdin = open(input_path, "rb") if input_path else subprocess.DEVNULL
    stdout = open(output_path, "wb") if output_path else subprocess.DEVNULL
    stderr = open(error_path, "wb") if error_path else subprocess.DEVNULL
    try:
        result = subprocess.run(command, stdin=stdin, stdout=stdout, stderr=stderr,
                                cwd=cwd, timeout=timeout_seconds)
        logger.info(f"Executable exit code: {result.returncode}")
        return RunResult(
            exit_code=result.returncode,
            timeout=False,
            duration_ms=(time.time() - start_time) * 1000,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"...Halted due to timeout ({timeout_seconds}s).")
        return RunResult(
            exit_code=None,
            timeout=True,
            duration_ms=(time.time() - start_time) * 1000,
            error_message="Timeout",
        )
    except OSError as e:
        logger.error(f"Could not start {exe_path}: {e}")
        if error_path:
            stderr.write(f"Could not start {exe_path}: {e}\n".encode("utf-8"))
        return RunResult(
            exit_code=MISSING_EXECUTABLE_EXIT_CODE,
            timeout=False,
            duration_ms=(time.time() - start_time) * 1000,
            error_message=str(e),
        )
    finally:
        for handle in (stdin, stdout, stderr):
            if handle is not subprocess.DEVNULL:
                handle.close()
