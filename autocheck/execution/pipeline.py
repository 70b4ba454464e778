"""Testcase pipeline

Coordinates the phases for one testcase:
1. Generate - substitute variables, instrument checks, write the program
2. Compile  - run the :Compile lines
3. Run      - execute the program (only if it compiled)
4. Compare  - match stdout against the expected output (if configured)
5. Record   - replay the result log into the checks and score the testcase

Grading outcomes (compile errors, crashes, timeouts, failed checks) are
recorded on the Testcase; only a broken configuration raises.
"""

from pathlib import Path
from typing import List, Optional, Sequence
import logging

from autocheck.errors import ConfigurationError
from autocheck.execution.output_comparator import OutputComparator
from autocheck.execution.program_generator import generate_program, process_checks, write_program
from autocheck.execution.runner import compile_program, run_program
from autocheck.results.result_log import ResultLog
from autocheck.testcase import Testcase

logger = logging.getLogger(__name__)


class TestPipeline:
    """
    Run testcases through generate / compile / run / compare / record.

    Usage:
        pipeline = TestPipeline(header_lines, compile_lines)
        pipeline.run(test)
        print(test.status, test.score)
    """
    __test__ = False  # Not a pytest test class.

    def __init__(self, header_lines: Sequence[str] = (), compile_lines: Sequence[str] = ()):
        """
        Args:
            header_lines: :Header block, placed above the generated _ac_main()
            compile_lines: :Compile block, one shell command per line
        """
        self.header_lines = list(header_lines)
        self.compile_lines = list(compile_lines)

    def run(self, test: Testcase) -> Testcase:
        """Run every phase for test and return it with results filled in."""
        logger.info(f"=== Testcase #{test.id}: {test.name} ===")
        self.generate(test)

        if self.compile(test):
            self.execute(test)
            self.compare(test)

        self.record(test)
        logger.info(f"Testcase #{test.id} status: {test.status.name} "
                    f"({test.score} of {test.points} points)")
        return test

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def load_code(self, test: Testcase) -> List[str]:
        """Code lines from the testcase's code file or its inline block."""
        if not test.code_filename:
            return list(test.code)

        if test.code:
            raise ConfigurationError(
                f"Testcase #{test.id} cannot have both a code_file and inline code.")
        path = Path(test.code_filename)
        if not path.exists():
            raise ConfigurationError(
                f"Testcase #{test.id}: code file '{path}' not found.")
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()

    def generate(self, test: Testcase):
        env = test.environment
        code = env.substitute("\n".join(self.load_code(test)))
        header = [env.substitute(line) for line in self.header_lines]

        # Stale files from a previous run must never be mistaken for new results.
        for filename in (test.result_filename, test.output_filename, test.error_filename):
            if filename:
                Path(filename).unlink(missing_ok=True)

        body, checks = process_checks(code, test.id)
        test.processed_code = code
        test.checks = checks

        source = generate_program(body, header, test.result_filename,
                                  points=test.points, call_main=test.call_main)
        write_program(Path(test.cpp_filename), source)

    def compile(self, test: Testcase) -> bool:
        commands = [test.environment.substitute(line) for line in self.compile_lines]
        result = compile_program(commands, Path(test.compile_filename))
        test.compile_exit_code = result.exit_code
        test.phases["compile"] = result.to_dict()
        if not result.success:
            logger.info(f"...Compilation failed for testcase #{test.id}")
        return result.success

    def execute(self, test: Testcase):
        input_path: Optional[Path] = None
        if test.input_filename:
            input_path = Path(test.input_filename)
            if not input_path.exists():
                raise ConfigurationError(
                    f"Testcase #{test.id}: input file '{input_path}' not found.")

        result = run_program(
            Path(test.exe_filename),
            args=test.argv,
            input_path=input_path,
            output_path=Path(test.output_filename),
            error_path=Path(test.error_filename),
            timeout_seconds=test.timeout,
        )
        test.hit_timeout = result.timeout
        test.run_exit_code = result.exit_code
        test.phases["run"] = result.to_dict()

    def compare(self, test: Testcase):
        if not test.expect_filename:
            return
        comparator = OutputComparator(match_case=test.match_case, match_space=test.match_space)
        result = comparator.compare_files(Path(test.output_filename), Path(test.expect_filename))
        test.output_match = result.match
        test.phases["compare"] = result.to_dict()

    def record(self, test: Testcase):
        log = ResultLog.load(Path(test.result_filename))
        log.replay(test.checks)
        test.logged_score = log.score
        test.score = test.earned_points
        logger.info(f"...{test.count_passed()} of {test.num_checks} checks passed")
