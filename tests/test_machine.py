"""
Test suite for the bfstep tape and execution engine.

Run with: uv run pytest tests/test_machine.py
"""

import io

from bfstep.machine import (
    Tape, BFState, InterpreterConfig, DEFAULT_TAPE_SIZE,
    TapeInvariantError, BFException,
    load_program, step, run,
)

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def make_state(source: str, input_data: bytes = b"", **config) -> tuple[BFState, io.StringIO]:
    output = io.StringIO()
    state = load_program(
        source,
        config=InterpreterConfig(**config),
        input_stream=io.BytesIO(input_data),
        output_stream=output,
    )
    return state, output


def test_tape():
    print("Tape Tests")
    print("=" * 50)

    tape = Tape()
    assert len(tape.positive) == DEFAULT_TAPE_SIZE
    assert len(tape.negative) == 0
    print("✓ Initial allocation")

    for index in [0, 1, 2999, 3000, 10**6, -1, -2, -10**6]:
        assert tape.read(index) == 0
    assert len(tape) == DEFAULT_TAPE_SIZE
    assert tape.bounds == (0, DEFAULT_TAPE_SIZE - 1)
    print("✓ Unwritten cells read 0 without growing the tape")

    writes = [(0, 1), (-1, 2), (-2, 3), (2999, 4), (3000, 5), (5000, 6), (-100, 7), (-1, 8)]
    for index, value in writes:
        tape.write(index, value)
    expected = dict(writes)
    for index, value in expected.items():
        assert tape.read(index) == value, f"Cell {index}"
    assert len(tape.positive) == 5001
    assert len(tape.negative) == 100
    assert tape.bounds == (-100, 5000)
    assert tape.read(4000) == 0
    assert tape.read(-50) == 0
    print("✓ Write-then-read, growth on both sides")

    assert tape.snapshot(-2, 2) == [3, 8, 1, 0]
    print("✓ Snapshot")

    # Wraparound folds every address into the positive store
    tape = Tape(4, wraparound=True)
    tape.write(0, 9)
    tape.write(3, 7)
    assert tape.read(4) == 9
    assert tape.read(100) == 9
    assert tape.read(-1) == 7
    assert tape.read(-100) == 7
    tape.write(-1, 1)
    tape.write(4, 2)
    assert tape.read(3) == 1
    assert tape.read(0) == 2
    assert len(tape.negative) == 0
    assert len(tape.positive) == 4
    print("✓ Wraparound addressing never grows the tape")

    try:
        Tape(0)
        assert False, "Should have raised ValueError"
    except ValueError:
        pass
    print("✓ Empty tape rejected at construction")

    tape = Tape(1)
    tape.positive = bytearray()
    for operation in (lambda: tape.read(0), lambda: tape.write(0, 1)):
        try:
            operation()
            assert False, "Should have raised TapeInvariantError"
        except TapeInvariantError as e:
            assert isinstance(e, BFException)
    print("✓ Empty positive store is a fatal invariant violation")


def test_config():
    print("\nConfiguration Tests")
    print("=" * 50)

    state, _ = make_state("")
    assert state.instruction_pointer == 0
    assert state.cursor == 0
    assert state.output == bytearray()
    assert state.newline_zero is False
    assert state.tape.wraparound is False
    assert len(state.tape.positive) == DEFAULT_TAPE_SIZE
    assert len(state.tape.negative) == 0
    print("✓ Default state")

    for bad in [dict(tape_size=0), dict(tape_size=-3), dict(matcher="nope")]:
        try:
            InterpreterConfig(**bad)
            assert False, f"Should have rejected {bad}"
        except ValueError:
            pass
    print("✓ Invalid configuration rejected")


def test_arithmetic():
    print("\nArithmetic Tests")
    print("=" * 50)

    state, _ = make_state("-")
    run(state)
    assert state.current_value == 255
    print("✓ 0 - 1 = 255")

    state, _ = make_state("+" * 256)
    run(state)
    assert state.current_value == 0
    print("✓ 255 + 1 = 0")

    state, _ = make_state("-+")
    run(state)
    assert state.current_value == 0
    print("✓ 255 + 1 = 0 after underflow")


def test_shifts():
    print("\nShift Tests")
    print("=" * 50)

    state, _ = make_state("<+<++")
    run(state)
    assert state.cursor == -2
    assert state.tape.read(-1) == 1
    assert state.tape.read(-2) == 2
    assert len(state.tape.negative) == 2
    print("✓ Expanding tape grows to the left")

    state, _ = make_state(">>>>+", tape_size=4)
    run(state)
    assert state.cursor == 4
    assert len(state.tape.positive) == 5
    print("✓ Expanding tape grows to the right")

    state, _ = make_state(">>>+", tape_size=4, wraparound=True)
    run(state)
    assert state.tape.snapshot(0, 4) == [0, 0, 0, 1]
    state, _ = make_state(">>>>+", tape_size=4, wraparound=True)
    run(state)
    assert state.tape.snapshot(0, 4) == [1, 0, 0, 0]
    assert len(state.tape.positive) == 4
    print("✓ Wraparound: right from the last cell writes cell 0")

    # One shift past the end aliases cell 0; the next resets the cursor to 0
    state, _ = make_state(">+>+>+", tape_size=2, wraparound=True)
    run(state)
    assert state.cursor == 0
    assert state.tape.snapshot(0, 2) == [2, 1]
    assert len(state.tape.positive) == 2
    print("✓ Wraparound: repeated shifts across the end stay on cell 0")

    state, _ = make_state("<+", tape_size=4, wraparound=True)
    run(state)
    assert state.cursor == 3
    assert state.tape.read(3) == 1
    assert len(state.tape.negative) == 0
    print("✓ Wraparound: left from 0 lands on the last cell")


def test_step_contract():
    print("\nStep Contract Tests")
    print("=" * 50)

    state, _ = make_state("")
    assert step(state) is False
    print("✓ Empty program halts immediately")

    # Leaves the lead byte of a two-byte sequence pending
    state, output = make_state(">.<+.")
    state.tape.write(0, 0xC2)
    state.tape.write(1, ord("A"))
    run(state)

    def observable():
        return (
            state.instruction_pointer, state.cursor, state.steps,
            state.tape.snapshot(-1, 3), state.pending_output, output.getvalue(),
        )

    before = observable()
    assert before[4:] == (b"\xc3", "A")
    assert step(state) is False
    assert step(state) is False
    assert observable() == before
    print("✓ Halted step returns False and changes nothing")

    state, _ = make_state("a+ b+\né+")
    steps = run(state)
    assert state.current_value == 3
    assert steps == len("a+ b+\né+".encode('utf-8'))
    print("✓ Unknown bytes are no-ops that still advance")

    state, _ = make_state("+[]")
    assert run(state, max_steps=100) == 100
    assert not state.halted
    assert state.steps == 100
    print("✓ Caller-side step limit")


def test_loops():
    print("\nLoop Tests")
    print("=" * 50)

    for matcher in ["scan", "table"]:
        state, _ = make_state("[[]]", matcher=matcher)
        assert step(state) is True
        assert state.instruction_pointer == 4
        assert step(state) is False
        print(f"✓ [{matcher}] [[]] with cell 0 skips past the outer loop-end")

        state, _ = make_state("+[-]", matcher=matcher)
        assert run(state) == 4
        assert state.current_value == 0
        assert state.instruction_pointer == 4
        assert step(state) is False
        print(f"✓ [{matcher}] +[-] runs once and exits")

        state, _ = make_state("+[", matcher=matcher)
        run(state)
        assert state.instruction_pointer == 2
        assert state.current_value == 1
        print(f"✓ [{matcher}] Trailing [ with nonzero cell halts cleanly")

        state, _ = make_state("[+", matcher=matcher)
        assert step(state) is True
        assert state.instruction_pointer == 2
        assert step(state) is False
        assert state.current_value == 0
        print(f"✓ [{matcher}] Unmatched [ with zero cell jumps to the end")

        state, _ = make_state("+]+", matcher=matcher)
        run(state)
        assert state.instruction_pointer == 3
        assert state.current_value == 1
        print(f"✓ [{matcher}] Unmatched ] with nonzero cell jumps to the end")

        state, _ = make_state("++[>+++<-]>", matcher=matcher)
        run(state)
        assert state.tape.snapshot(0, 2) == [0, 6]
        print(f"✓ [{matcher}] Multiplication loop")

        state, output = make_state(HELLO_WORLD, matcher=matcher)
        run(state)
        assert output.getvalue() == "Hello World!\n"
        print(f"✓ [{matcher}] Hello World")


def test_output():
    print("\nOutput Tests")
    print("=" * 50)

    state, output = make_state("++.")
    run(state)
    assert state.current_value == 2
    assert output.getvalue() == "\x02"
    assert state.pending_output == b""
    print("✓ ++. emits 0x02")

    # 'é' is C3 A9
    state, output = make_state(".>.")
    state.tape.write(0, 0xC3)
    state.tape.write(1, 0xA9)
    step(state)
    assert output.getvalue() == ""
    assert state.pending_output == b"\xc3"
    run(state)
    assert output.getvalue() == "é"
    assert state.pending_output == b""
    print("✓ Multi-byte character assembled across outputs")

    state, output = make_state(".")
    state.tape.write(0, 0xE2)
    run(state)
    assert state.halted
    assert output.getvalue() == ""
    assert state.pending_output == b"\xe2"
    print("✓ Incomplete sequence left pending at halt")

    state, output = make_state(".>.>.")
    state.tape.write(0, 0xFF)
    state.tape.write(1, ord("A"))
    state.tape.write(2, ord("B"))
    run(state)
    assert output.getvalue() == ""
    assert state.pending_output == b"\xffAB"
    print("✓ Invalid sequence blocks later output")


def test_input():
    print("\nInput Tests")
    print("=" * 50)

    state, output = make_state(",.", b"A")
    run(state)
    assert output.getvalue() == "A"
    print("✓ ,. echoes A")

    state, _ = make_state("+,", b"")
    run(state)
    assert state.current_value == 0
    print("✓ End of input stores 0")

    state, _ = make_state(",>,>,", b"xy")
    run(state)
    assert state.tape.snapshot(0, 3) == [ord("x"), ord("y"), 0]
    print("✓ One byte per input, then 0")

    state, _ = make_state(",", b"\n")
    run(state)
    assert state.current_value == 10
    state, _ = make_state(",", b"\n", newline_zero=True)
    run(state)
    assert state.current_value == 0
    print("✓ Newline-to-zero translation")

    state, _ = make_state(",", b"\xe9")
    run(state)
    assert state.current_value == 0xE9
    print("✓ Raw bytes stored unchanged")


if __name__ == "__main__":
    test_tape()
    test_config()
    test_arithmetic()
    test_shifts()
    test_step_contract()
    test_loops()
    test_output()
    test_input()
    print("\n" + "=" * 50)
    print("All tests passed!")
