"""bfstep: a step-wise Brainfuck interpreter with a bidirectional tape."""

from .opcodes import (
    OP_INCREMENT, OP_DECREMENT, OP_SHIFT_LEFT, OP_SHIFT_RIGHT,
    OP_OUTPUT, OP_INPUT, OP_LOOP_BEGIN, OP_LOOP_END,
    OPCODES,
)

from .machine import (
    # Constants
    DEFAULT_TAPE_SIZE,
    # Exceptions
    BFException, TapeInvariantError, ProgramLoadError,
    # Configuration
    InterpreterConfig, DEFAULT_CONFIG,
    # Tape, state & execution
    Tape, BFState, load_program, step, run,
)

from .registry import (
    DEFAULT_MATCHER,
    get_available_matchers,
    get_matcher,
)

__version__ = "0.1.0"
