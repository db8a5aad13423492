import sys
from dataclasses import dataclass, field
from typing import Any, BinaryIO, List, Optional, TextIO, Tuple

from .opcodes import (
    OP_INCREMENT, OP_DECREMENT, OP_SHIFT_LEFT, OP_SHIFT_RIGHT,
    OP_OUTPUT, OP_INPUT, OP_LOOP_BEGIN, OP_LOOP_END,
    NEWLINE, BYTE_MAX,
)
from .registry import DEFAULT_MATCHER, get_matcher

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TAPE_SIZE = 3000

# =============================================================================
# Exceptions
# =============================================================================

class BFException(Exception):
    """Base exception for all bfstep errors."""
    pass


class TapeInvariantError(BFException):
    """Raised when the positive side of the tape is found empty."""
    pass


class ProgramLoadError(BFException):
    """Raised when program source cannot be read or decoded."""
    pass

# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class InterpreterConfig:
    """Settings fixed at program load."""
    tape_size: int = DEFAULT_TAPE_SIZE    # Pre-allocated positive cells
    wraparound: bool = False              # Wrap at the positive bound instead of growing
    newline_zero: bool = False            # Store input line feeds as 0
    matcher: str = DEFAULT_MATCHER        # Loop-matching strategy name

    def __post_init__(self):
        if self.tape_size < 1:
            raise ValueError(f"tape_size must be at least 1, got {self.tape_size}")
        get_matcher(self.matcher)


DEFAULT_CONFIG = InterpreterConfig()

# =============================================================================
# Tape Memory
# =============================================================================

class Tape:
    """
    Bidirectional byte tape addressed by a signed integer.

    Cells 0, 1, 2, ... live in the positive store and cells -1, -2, ... in
    the negative store (logical -1 is slot 0). Reads outside the allocated
    stores return 0 without touching them; only writes grow the tape.

    In wraparound mode every address is folded into the positive store:
    anything at or beyond its length maps to 0 and anything below 0 maps
    to its last cell. The mode is fixed for the lifetime of the tape.
    """

    def __init__(self, size: int = DEFAULT_TAPE_SIZE, wraparound: bool = False):
        if size < 1:
            raise ValueError(f"Tape size must be at least 1, got {size}")
        self.positive = bytearray(size)
        self.negative = bytearray()
        self.wraparound = wraparound

    @property
    def positive_length(self) -> int:
        length = len(self.positive)
        if length == 0:
            raise TapeInvariantError("Memory tape length is 0. This is an invalid state.")
        return length

    def normalize(self, index: int) -> int:
        """Fold an address into range when wrapping; identity otherwise."""
        length = self.positive_length
        if self.wraparound:
            if index < 0:
                return length - 1
            if index >= length:
                return 0
        return index

    def read(self, index: int) -> int:
        index = self.normalize(index)
        if index >= 0:
            return self.positive[index] if index < len(self.positive) else 0
        slot = -1 - index
        return self.negative[slot] if slot < len(self.negative) else 0

    def write(self, index: int, value: int) -> None:
        index = self.normalize(index)
        if index >= 0:
            if index >= len(self.positive):
                self.positive.extend(bytes(index + 1 - len(self.positive)))
            self.positive[index] = value
        else:
            slot = -1 - index
            if slot >= len(self.negative):
                self.negative.extend(bytes(slot + 1 - len(self.negative)))
            self.negative[slot] = value

    @property
    def bounds(self) -> Tuple[int, int]:
        """Lowest and highest allocated address."""
        return -len(self.negative), len(self.positive) - 1

    def snapshot(self, start: int, stop: int) -> List[int]:
        """Cell values for addresses start..stop-1 (reads only, no growth)."""
        return [self.read(i) for i in range(start, stop)]

    def __len__(self) -> int:
        return len(self.positive) + len(self.negative)

# =============================================================================
# Interpreter State
# =============================================================================

@dataclass
class BFState:
    code: bytes
    tape: Tape
    matcher: Any
    input_stream: BinaryIO
    output_stream: TextIO
    instruction_pointer: int = 0
    cursor: int = 0
    newline_zero: bool = False
    output: bytearray = field(default_factory=bytearray)
    steps: int = 0

    @property
    def halted(self) -> bool:
        return self.instruction_pointer >= len(self.code)

    @property
    def current_value(self) -> int:
        return self.tape.read(self.cursor)

    @property
    def pending_output(self) -> bytes:
        """Bytes waiting to form a complete UTF-8 sequence."""
        return bytes(self.output)


def load_program(
    source: str,
    config: InterpreterConfig = DEFAULT_CONFIG,
    input_stream: Optional[BinaryIO] = None,
    output_stream: Optional[TextIO] = None,
) -> BFState:
    """
    Create interpreter state for a program.

    Args:
        source: Program text; every byte of its UTF-8 encoding is an instruction
        config: Tape, input and loop-matching settings
        input_stream: Binary stream read one byte per ',' (default: stdin)
        output_stream: Text stream written on each decoded '.' (default: stdout)
    """
    code = source.encode('utf-8')
    return BFState(
        code=code,
        tape=Tape(config.tape_size, wraparound=config.wraparound),
        matcher=get_matcher(config.matcher).build(code),
        input_stream=input_stream if input_stream is not None else sys.stdin.buffer,
        output_stream=output_stream if output_stream is not None else sys.stdout,
        newline_zero=config.newline_zero,
    )

# =============================================================================
# I/O
# =============================================================================

def print_char(state: BFState) -> None:
    """
    Append the current cell to the output accumulator and emit it once the
    accumulated bytes decode as UTF-8.

    Bytes that do not decode stay in the accumulator. An invalid sequence
    is never cleared, so it blocks all later output.
    """
    state.output.append(state.tape.read(state.cursor))
    try:
        text = state.output.decode('utf-8')
    except UnicodeDecodeError:
        return
    state.output_stream.write(text)
    state.output_stream.flush()
    state.output.clear()


def read_char(state: BFState) -> None:
    """Store one input byte at the cursor; end of input stores 0."""
    data = state.input_stream.read(1)
    if data:
        value = data[0]
        if value == NEWLINE and state.newline_zero:
            value = 0
    else:
        value = 0
    state.tape.write(state.cursor, value)

# =============================================================================
# Execution
# =============================================================================

def _branch(state: BFState) -> None:
    # Unmatched brackets send the instruction pointer to the end of the program.
    partner = state.matcher.match(state.instruction_pointer)
    if partner is None:
        state.instruction_pointer = len(state.code)
    else:
        state.instruction_pointer = partner + 1


def step(state: BFState) -> bool:
    """
    Execute one instruction.

    Returns:
        False without touching the state if the program has ended,
        True after executing exactly one instruction otherwise.
    """
    if state.halted:
        return False

    opcode = state.code[state.instruction_pointer]
    tape = state.tape

    if opcode == OP_INCREMENT:
        value = tape.read(state.cursor)
        tape.write(state.cursor, 0 if value == BYTE_MAX else value + 1)
        state.instruction_pointer += 1

    elif opcode == OP_DECREMENT:
        value = tape.read(state.cursor)
        tape.write(state.cursor, BYTE_MAX if value == 0 else value - 1)
        state.instruction_pointer += 1

    elif opcode == OP_SHIFT_LEFT:
        if tape.wraparound and state.cursor <= 0:
            state.cursor = tape.positive_length - 1
        else:
            state.cursor -= 1
        state.instruction_pointer += 1

    elif opcode == OP_SHIFT_RIGHT:
        if tape.wraparound and state.cursor >= tape.positive_length:
            state.cursor = 0
        else:
            state.cursor += 1
        state.instruction_pointer += 1

    elif opcode == OP_OUTPUT:
        print_char(state)
        state.instruction_pointer += 1

    elif opcode == OP_INPUT:
        read_char(state)
        state.instruction_pointer += 1

    elif opcode == OP_LOOP_BEGIN:
        if tape.read(state.cursor) == 0:
            _branch(state)
        else:
            state.instruction_pointer += 1

    elif opcode == OP_LOOP_END:
        if tape.read(state.cursor) != 0:
            _branch(state)
        else:
            state.instruction_pointer += 1

    else:
        # Anything else is a comment.
        state.instruction_pointer += 1

    state.steps += 1
    return True


def run(state: BFState, max_steps: Optional[int] = None) -> int:
    """Step until the program halts or max_steps is reached; return steps taken."""
    taken = 0
    while max_steps is None or taken < max_steps:
        if not step(state):
            break
        taken += 1
    return taken
