"""
Random program generators for differential fuzzing.

Three strategies, mirroring the bytecode fuzzers this package grew out of:
- random:     characters drawn from the opcode alphabet plus comment noise,
              so unbalanced brackets are common
- structured: well-nested loops built recursively
- mixed:      one of the above chosen per call
"""

from dataclasses import dataclass
from enum import Enum
import random
from typing import Callable

# =============================================================================
# Configuration Constants
# =============================================================================

# Structure-aware generation probabilities
PROB_ARITHMETIC = 0.35
PROB_SHIFT = 0.25
PROB_IO = 0.12
PROB_LOOP = 0.20
PROB_NOISE = 0.08

# Mixed strategy probabilities
PROB_RANDOM_STRATEGY = 0.5

OPCODE_ALPHABET = "+-<>.,[]"
NOISE_ALPHABET = " \nabcxyz#é€"


@dataclass
class GeneratorConfig:
    """Configuration for program generators."""
    max_length: int = 24              # For random generator
    max_instructions: int = 8         # Per loop body, for structured generator
    max_depth: int = 3                # Loop nesting, for structured generator
    max_input_length: int = 8         # Bytes fed to ','


DEFAULT_CONFIG = GeneratorConfig()

# =============================================================================
# Instruction Selection
# =============================================================================

class InstructionChoice(Enum):
    """Instruction classes for structure-aware generation."""
    ARITHMETIC = "arithmetic"
    SHIFT = "shift"
    IO = "io"
    LOOP = "loop"
    NOISE = "noise"


def choose_instruction() -> InstructionChoice:
    """Choose instruction class based on configured probabilities."""
    weights = [
        (InstructionChoice.ARITHMETIC, int(PROB_ARITHMETIC * 100)),
        (InstructionChoice.SHIFT, int(PROB_SHIFT * 100)),
        (InstructionChoice.IO, int(PROB_IO * 100)),
        (InstructionChoice.LOOP, int(PROB_LOOP * 100)),
        (InstructionChoice.NOISE, int(PROB_NOISE * 100)),
    ]
    choices, probs = zip(*weights)
    return random.choices(choices, weights=probs)[0]

# =============================================================================
# Program Generators
# =============================================================================

def generate_random_program(max_length: int = DEFAULT_CONFIG.max_length) -> str:
    """Generate random characters - no bracket balancing."""
    length = random.randint(1, max_length)
    alphabet = OPCODE_ALPHABET * 3 + NOISE_ALPHABET
    return ''.join(random.choice(alphabet) for _ in range(length))


def generate_structured_program(
    max_instructions: int = DEFAULT_CONFIG.max_instructions,
    max_depth: int = DEFAULT_CONFIG.max_depth,
) -> str:
    """
    Generate a program whose loops are always balanced.

    Loop bodies are generated recursively until max_depth is reached; at
    the innermost level a loop choice falls back to an arithmetic opcode.
    """
    parts = []
    for _ in range(random.randint(1, max_instructions)):
        choice = choose_instruction()

        if choice == InstructionChoice.ARITHMETIC:
            parts.append(random.choice("+-"))
        elif choice == InstructionChoice.SHIFT:
            parts.append(random.choice("<>"))
        elif choice == InstructionChoice.IO:
            parts.append(random.choice(".,"))
        elif choice == InstructionChoice.LOOP and max_depth > 0:
            body = generate_structured_program(max_instructions, max_depth - 1)
            parts.append(f"[{body}]")
        elif choice == InstructionChoice.LOOP:
            parts.append(random.choice("+-"))
        else:
            parts.append(random.choice(NOISE_ALPHABET))

    return ''.join(parts)


def generate_mixed_program() -> str:
    """Pick the random or structured strategy for each program."""
    if random.random() < PROB_RANDOM_STRATEGY:
        return generate_random_program()
    return generate_structured_program()


def generate_input(max_length: int = DEFAULT_CONFIG.max_input_length) -> bytes:
    """Random input bytes, occasionally empty to exercise end of input."""
    length = random.randint(0, max_length)
    return bytes(random.randint(0, 255) for _ in range(length))


# Generator registry for dispatch
GENERATORS: dict[str, Callable[[], str]] = {
    "random": generate_random_program,
    "structured": generate_structured_program,
    "mixed": generate_mixed_program,
}
