"""Differential fuzzing framework for bfstep loop matchers."""

from .fuzzer import (
    ExecutionResult, Halted, StepLimit, Crash,
    FuzzingStatistics,
    execute_with_matcher,
    run_fuzzer,
)

from .generators import (
    GENERATORS,
    generate_random_program,
    generate_structured_program,
    generate_mixed_program,
)

from .enumeration import (
    enumerate_programs,
    enumerate_bracket_programs,
    enumerate_nesting_tests,
    generate_comprehensive_suite,
)
