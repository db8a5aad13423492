"""
Differential fuzzer for loop matchers.

Runs each generated program twice, once with the reference linear-scan
matcher and once with the matcher under test, feeding both the same input
bytes, and reports any difference in output, tape contents, cursor or step
count. Programs that do not halt are cut off after a fixed number of steps;
both runs must stop in the same place.
"""

from dataclasses import dataclass
import io
import random
from typing import Callable, Optional

from bfstep.machine import InterpreterConfig, load_program, run
from bfstep.registry import DEFAULT_MATCHER, get_available_matchers
from .generators import GENERATORS, generate_input, generate_random_program

# =============================================================================
# Configuration Constants
# =============================================================================

REFERENCE_MATCHER = DEFAULT_MATCHER
DEFAULT_MAX_STEPS = 2000

# =============================================================================
# Execution Results
# =============================================================================

@dataclass(frozen=True)
class ExecutionResult:
    """Base class for execution results - used as a union type."""


@dataclass(frozen=True)
class Halted(ExecutionResult):
    output: str
    pending: bytes
    cells: bytes
    cursor: int
    steps: int


@dataclass(frozen=True)
class StepLimit(ExecutionResult):
    output: str
    pending: bytes
    cells: bytes
    cursor: int
    steps: int


@dataclass(frozen=True)
class Crash(ExecutionResult):
    reason: str


def execute_with_matcher(
    source: str,
    input_data: bytes,
    matcher: str,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> ExecutionResult:
    """Run a program with the given matcher and capture its observable state."""
    output = io.StringIO()
    try:
        state = load_program(
            source,
            config=InterpreterConfig(matcher=matcher),
            input_stream=io.BytesIO(input_data),
            output_stream=output,
        )
        run(state, max_steps=max_steps)
    except Exception as e:
        return Crash(f"{matcher} raised exception: {repr(e)}")

    result_type = Halted if state.halted else StepLimit
    return result_type(
        output=output.getvalue(),
        pending=state.pending_output,
        cells=bytes(reversed(state.tape.negative)) + bytes(state.tape.positive),
        cursor=state.cursor,
        steps=state.steps,
    )


def compare_results(expected: ExecutionResult, actual: ExecutionResult) -> bool:
    """
    Compare execution results for equivalence.

    Crashes match any crash (regardless of message); everything else must
    be identical.
    """
    return (
        type(expected) == type(actual) and
        (isinstance(expected, Crash) or expected == actual)
    )

# =============================================================================
# Statistics Tracking
# =============================================================================

@dataclass
class FuzzingStatistics:
    """Tracks fuzzing run statistics."""
    total_tests: int = 0
    bugs_found: int = 0
    crashes: int = 0
    step_limited: int = 0

    @property
    def halted_tests(self) -> int:
        return self.total_tests - self.step_limited

    @property
    def correct_tests(self) -> int:
        return self.total_tests - self.bugs_found

    @property
    def bug_rate(self) -> float:
        return (self.bugs_found / self.total_tests * 100) if self.total_tests > 0 else 0.0

    def record_test(self, reference: ExecutionResult, actual: ExecutionResult, results_match: bool) -> None:
        """Record results of a single test."""
        self.total_tests += 1

        if isinstance(reference, StepLimit):
            self.step_limited += 1

        if isinstance(actual, Crash):
            self.crashes += 1

        if not results_match:
            self.bugs_found += 1

    def print_summary(self) -> None:
        """Print formatted summary of results."""
        print("\n" + "=" * 60)
        print("Fuzzer Summary")
        print("-" * 40)
        print(f"Total tests run:           {self.total_tests}")
        print(f"Halted:                    {self.halted_tests}")
        print(f"Hit step limit:            {self.step_limited}")
        print(f"Mismatches found:          {self.bugs_found}")
        print(f"Matcher crashes:           {self.crashes}")
        print(f"Correct:                   {self.correct_tests}")

        if self.bugs_found > 0:
            print(f"Mismatch rate:          {self.bug_rate:.1f}%")
        else:
            print("\nNo mismatches detected!")

# =============================================================================
# Bug Reporting
# =============================================================================

def report_bug(test_num: int, source: str, input_data: bytes,
               expected: ExecutionResult, actual: ExecutionResult) -> None:
    """Print detailed mismatch report."""
    print(f"\nTest {test_num}: Mismatch found")
    print(f"  Program:  {source!r}")
    print(f"  Input:    {input_data.hex()}")
    print(f"  Expected: {expected}")
    print(f"  Actual:   {actual}")


def print_header(num_tests: int, matcher: str, generator: str) -> None:
    """Print fuzzer run header."""
    print(f"bfstep Fuzzer - Running {num_tests} tests")
    print(f"Testing matcher: {matcher} (reference: {REFERENCE_MATCHER})")
    print(f"Generator: {generator}")
    print("=" * 60)

# =============================================================================
# Fuzzer Main Logic
# =============================================================================

def run_single_test(
    source: str,
    input_data: bytes,
    matcher: str,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> tuple[ExecutionResult, ExecutionResult, bool]:
    """
    Run one program with the reference matcher and the matcher under test.

    Returns:
        Tuple of (reference_result, matcher_result, results_match)
    """
    reference = execute_with_matcher(source, input_data, REFERENCE_MATCHER, max_steps)
    actual = execute_with_matcher(source, input_data, matcher, max_steps)
    return reference, actual, compare_results(reference, actual)


def run_fuzzer(
    num_tests: int = 1000,
    seed: Optional[int] = None,
    matcher: str = "table",
    generator: str = "random",
    max_steps: int = DEFAULT_MAX_STEPS,
    verbose: bool = True,
) -> FuzzingStatistics:
    """
    Run the fuzzer for a specified number of tests.

    Args:
        num_tests: Number of random programs to generate
        seed: Random seed for reproducibility
        matcher: Loop matcher to compare against the reference
        generator: Generator type: "random", "structured" or "mixed"
        max_steps: Per-run step limit
        verbose: Print header, mismatch reports and summary

    Returns:
        FuzzingStatistics object with results
    """
    if seed is not None:
        random.seed(seed)

    generator_func: Callable[[], str] = GENERATORS.get(generator, generate_random_program)
    stats = FuzzingStatistics()

    if verbose:
        print_header(num_tests, matcher, generator)

    for i in range(num_tests):
        source = generator_func()
        input_data = generate_input()
        reference, actual, matches = run_single_test(source, input_data, matcher, max_steps)

        stats.record_test(reference, actual, matches)

        if not matches and verbose:
            report_bug(i + 1, source, input_data, reference, actual)

    if verbose:
        stats.print_summary()
    return stats

# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Differential fuzzer for bfstep loop matchers")
    parser.add_argument(
        "-n", "--num-tests",
        type=int,
        default=1000,
        help="Number of random programs to run (default: 1000)"
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "-m", "--matcher",
        type=str,
        default=get_available_matchers()[-1],
        choices=get_available_matchers(),
        help=f"Matcher to test. Available: {', '.join(get_available_matchers())} (default: %(default)s)"
    )
    parser.add_argument(
        "-g", "--generator",
        type=str,
        default="random",
        choices=list(GENERATORS),
        help="Generator type: 'random', 'structured' or 'mixed' (default: random)"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="Step limit per program run (default: %(default)s)"
    )

    args = parser.parse_args()

    run_fuzzer(
        num_tests=args.num_tests,
        seed=args.seed,
        matcher=args.matcher,
        generator=args.generator,
        max_steps=args.max_steps,
    )
