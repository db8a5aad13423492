"""
Command-line entry point.

Reads a program from a file, or one line of console input when no file is
given, and steps it to completion. Trace lines and diagnostics go to stderr
so they never mix with program output.
"""

import argparse
import sys
from typing import List, Optional

from .machine import (
    BFException, ProgramLoadError, BFState, InterpreterConfig,
    DEFAULT_TAPE_SIZE, load_program, step,
)
from .registry import DEFAULT_MATCHER, get_available_matchers


def read_source(filename: Optional[str]) -> str:
    """
    Read program text from a file or a single line of stdin.

    Raises:
        ProgramLoadError: If the file cannot be read or is not UTF-8
    """
    if filename is None:
        raw = sys.stdin.buffer.readline()
        origin = "stdin"
    else:
        try:
            with open(filename, 'rb') as f:
                raw = f.read()
        except OSError as e:
            raise ProgramLoadError(f"Failed to read file `{filename}`: {e}") from e
        origin = f"`{filename}`"

    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ProgramLoadError(f"Program in {origin} is not valid UTF-8: {e}") from e


def format_trace(state: BFState) -> str:
    """One line describing the instruction about to execute."""
    opcode = state.code[state.instruction_pointer]
    symbol = chr(opcode) if 0x20 <= opcode < 0x7F else f"0x{opcode:02X}"
    return (
        f"step={state.steps} ip={state.instruction_pointer} op={symbol} "
        f"cursor={state.cursor} cell={state.current_value}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bfstep", description="Step-wise Brainfuck interpreter")
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Program file (default: read one line from stdin)"
    )
    parser.add_argument(
        "--wrap",
        action="store_true",
        help="Wrap the tape at its positive bound instead of growing it"
    )
    parser.add_argument(
        "--newline-zero",
        action="store_true",
        help="Store input line feeds as 0"
    )
    parser.add_argument(
        "--tape-size",
        type=int,
        default=DEFAULT_TAPE_SIZE,
        help="Initial number of positive tape cells (default: %(default)s)"
    )
    parser.add_argument(
        "-m", "--matcher",
        type=str,
        default=DEFAULT_MATCHER,
        choices=get_available_matchers(),
        help="Loop-matching strategy (default: %(default)s)"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many instructions (default: run until the program ends)"
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print every executed instruction to stderr"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = InterpreterConfig(
            tape_size=args.tape_size,
            wraparound=args.wrap,
            newline_zero=args.newline_zero,
            matcher=args.matcher,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        state = load_program(read_source(args.file), config=config)
        while args.max_steps is None or state.steps < args.max_steps:
            if args.trace and not state.halted:
                print(format_trace(state), file=sys.stderr)
            if not step(state):
                break
    except BFException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
