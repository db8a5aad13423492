"""
Enumeration-based test generation for bfstep.

Exhaustively enumerates every program within a bounded length over a small
alphabet. Unlike random fuzzing, this guarantees that every nesting and
mis-nesting pattern up to the bound is exercised, including unmatched
brackets on either side.
"""

import itertools
from typing import Iterator

# ============================================================
# Configuration
# ============================================================

# Full opcode alphabet
FULL_ALPHABET = "+-<>.,[]"

# Brackets plus enough arithmetic to make loops enter and exit
BRACKET_ALPHABET = "+-[]"

# ============================================================
# Program Enumeration
# ============================================================

def enumerate_programs(max_length: int, alphabet: str = FULL_ALPHABET) -> Iterator[str]:
    """
    Enumerate all programs up to max_length characters.

    Yields:
        Programs in order of increasing length, starting with the empty one
    """
    for length in range(max_length + 1):
        for chars in itertools.product(alphabet, repeat=length):
            yield ''.join(chars)


def enumerate_bracket_programs(max_length: int) -> Iterator[str]:
    """All programs over '+-[]' up to max_length, balanced or not."""
    return enumerate_programs(max_length, BRACKET_ALPHABET)

# ============================================================
# Boundary Tests
# ============================================================

def enumerate_nesting_tests(max_depth: int = 4) -> Iterator[str]:
    """
    Enumerate deeply nested loops, balanced and unbalanced.

    Each shape is produced with and without a leading '+', so both the
    skip-forward and the enter-then-jump-back paths are taken.
    """
    for depth in range(1, max_depth + 1):
        shapes = [
            "[" * depth + "]" * depth,            # Balanced
            "[" * depth + "-]" * depth,           # Balanced, terminating
            "[" * depth + "]" * (depth - 1),      # Missing loop-end
            "[" * (depth - 1) + "]" * depth,      # Extra loop-end
            "]" * depth + "[" * depth,            # Inverted
        ]
        for shape in shapes:
            yield shape
            yield "+" + shape

# ============================================================
# Comprehensive Test Suites
# ============================================================

def generate_comprehensive_suite(max_length: int = 4) -> Iterator[str]:
    """
    Generate an exhaustive, deduplicated suite.

    Args:
        max_length: Length bound for the bracket enumeration (5-6 recommended);
                    the full alphabet is enumerated up to max_length - 1

    Yields:
        Each program once
    """
    seen = set()

    sources = itertools.chain(
        enumerate_bracket_programs(max_length),
        enumerate_programs(max(max_length - 1, 0)),
        enumerate_nesting_tests(),
    )
    for source in sources:
        if source not in seen:
            seen.add(source)
            yield source
