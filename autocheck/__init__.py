"""
autocheck - automated grading for C++ unit-test style assignments

Pipeline per testcase:
1. Generate - rewrite CHECK(...) / CHECK_TYPE(...) markers into instrumented C++
2. Compile  - run the configured compile commands
3. Run      - execute the program under a wall-clock timeout
4. Compare  - match captured output against the expected output
5. Record   - replay the structured result log, classify, score and report
"""

__version__ = "1.0.0"

from autocheck.errors import ConfigurationError, ParseError, ProtocolError
from autocheck.grader import Grader

__all__ = [
    "ConfigurationError",
    "ParseError",
    "ProtocolError",
    "Grader",
]
