"""
Precomputed bracket table.

Pairs every loop-begin with its loop-end once, when the program is loaded,
so a taken branch is a dictionary lookup. Brackets left unpaired by the
stack walk have no entry and resolve to None, exactly like a scan that runs
off the end of the program.
"""

from typing import Dict, List, Optional

from bfstep.opcodes import OP_LOOP_BEGIN, OP_LOOP_END


def build_jump_table(code: bytes) -> Dict[int, int]:
    """Map each paired bracket offset to its partner, in both directions."""
    table: Dict[int, int] = {}
    open_offsets: List[int] = []

    for i, opcode in enumerate(code):
        if opcode == OP_LOOP_BEGIN:
            open_offsets.append(i)
        elif opcode == OP_LOOP_END and open_offsets:
            start = open_offsets.pop()
            table[start] = i
            table[i] = start

    return table


class TableMatcher:
    def __init__(self, code: bytes):
        self.table = build_jump_table(code)

    def match(self, ip: int) -> Optional[int]:
        return self.table.get(ip)


def build(code: bytes) -> TableMatcher:
    return TableMatcher(code)
