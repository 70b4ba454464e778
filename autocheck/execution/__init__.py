"""
Execution of generated test programs

Components:
- process_checks / generate_program: Rewrite test code into an instrumented C++ program
- compile_program / run_program: Invoke the compiler and the built executable
- OutputComparator: Compare captured output with expected output
- TestPipeline: Run one testcase through every phase
"""

from autocheck.execution.program_generator import generate_program, process_checks, write_program
from autocheck.execution.runner import CompileResult, RunResult, compile_program, run_program
from autocheck.execution.output_comparator import OutputComparator, OutputComparison
from autocheck.execution.pipeline import TestPipeline

__all__ = [
    "generate_program",
    "process_checks",
    "write_program",
    "CompileResult",
    "RunResult",
    "compile_program",
    "run_program",
    "OutputComparator",
    "OutputComparison",
    "TestPipeline",
]
