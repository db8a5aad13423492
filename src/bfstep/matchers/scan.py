"""
Linear-scan loop matching (default).

Every taken branch walks the program from the bracket under the instruction
pointer, counting nesting depth, until the depth returns to zero. Nothing is
precomputed, so the matcher holds only a reference to the code.
"""

from typing import Optional

from bfstep.opcodes import OP_LOOP_BEGIN, OP_LOOP_END


class ScanMatcher:
    """Resolve bracket partners by scanning on demand."""

    def __init__(self, code: bytes):
        self.code = code

    def match(self, ip: int) -> Optional[int]:
        """
        Find the partner of the bracket at ``ip``.

        Returns:
            Index of the matching bracket, or None if the scan runs off
            either end of the program.
        """
        code = self.code
        opcode = code[ip]

        if opcode == OP_LOOP_BEGIN:
            depth = 0
            for i in range(ip, len(code)):
                if code[i] == OP_LOOP_BEGIN:
                    depth += 1
                elif code[i] == OP_LOOP_END:
                    depth -= 1
                    if depth == 0:
                        return i
            return None

        if opcode == OP_LOOP_END:
            depth = 0
            for i in range(ip, -1, -1):
                if code[i] == OP_LOOP_END:
                    depth += 1
                elif code[i] == OP_LOOP_BEGIN:
                    depth -= 1
                    if depth == 0:
                        return i
            return None

        raise ValueError(f"No bracket at offset {ip}: 0x{opcode:02X}")


def build(code: bytes) -> ScanMatcher:
    return ScanMatcher(code)
