# =============================================================================
# Opcodes
# =============================================================================

OP_INCREMENT   = ord('+')  # 0x2B
OP_INPUT       = ord(',')  # 0x2C
OP_DECREMENT   = ord('-')  # 0x2D
OP_OUTPUT      = ord('.')  # 0x2E
OP_SHIFT_LEFT  = ord('<')  # 0x3C
OP_SHIFT_RIGHT = ord('>')  # 0x3E
OP_LOOP_BEGIN  = ord('[')  # 0x5B
OP_LOOP_END    = ord(']')  # 0x5D

OPCODES = frozenset([
    OP_INCREMENT, OP_INPUT, OP_DECREMENT, OP_OUTPUT,
    OP_SHIFT_LEFT, OP_SHIFT_RIGHT, OP_LOOP_BEGIN, OP_LOOP_END,
])

NEWLINE = 0x0A
BYTE_MAX = 0xFF
