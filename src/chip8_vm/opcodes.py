"""Opcodes: static decode table for the 35 base CHIP-8 instructions.

Each entry pairs an exact 16-bit mask/match with an operand shape and the
operation it identifies. resolve() scans the table for the first entry
where (word & mask) == match; no two entries overlap, so order only
affects scan speed.

Operand fields:
    nnn/addr: 12-bit, lowest 12 bits
    n/nibble:  4-bit, lowest 4 bits
    x:         4-bit, lower 4 bits of the high byte
    y:         4-bit, upper 4 bits of the low byte
    kk/byte:   8-bit, lowest 8 bits
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .errors import UnknownInstruction


class OperandShape(Enum):
    NONE = "none"
    NNN = "nnn"
    X = "x"
    XY = "xy"
    XKK = "xkk"
    XYN = "xyn"


class Op(Enum):
    """Every operation the machine can execute."""
    CLS = "cls"             # 00E0: CLS
    RET = "ret"             # 00EE: RET
    JP = "jp"               # 1nnn: JP   addr
    CALL = "call"           # 2nnn: CALL addr
    SE_BYTE = "se_byte"     # 3xkk: SE   Vx, byte
    SNE_BYTE = "sne_byte"   # 4xkk: SNE  Vx, byte
    SE_REG = "se_reg"       # 5xy0: SE   Vx, Vy
    LD_BYTE = "ld_byte"     # 6xkk: LD   Vx, byte
    ADD_BYTE = "add_byte"   # 7xkk: ADD  Vx, byte
    LD_REG = "ld_reg"       # 8xy0: LD   Vx, Vy
    OR = "or"               # 8xy1: OR   Vx, Vy
    AND = "and"             # 8xy2: AND  Vx, Vy
    XOR = "xor"             # 8xy3: XOR  Vx, Vy
    ADD_REG = "add_reg"     # 8xy4: ADD  Vx, Vy
    SUB = "sub"             # 8xy5: SUB  Vx, Vy
    SHR = "shr"             # 8xy6: SHR  Vx {, Vy}
    SUBN = "subn"           # 8xy7: SUBN Vx, Vy
    SHL = "shl"             # 8xyE: SHL  Vx {, Vy}
    SNE_REG = "sne_reg"     # 9xy0: SNE  Vx, Vy
    LD_I = "ld_i"           # Annn: LD   I, addr
    JP_V0 = "jp_v0"         # Bnnn: JP   V0, addr
    RND = "rnd"             # Cxkk: RND  Vx, byte
    DRW = "drw"             # Dxyn: DRW  Vx, Vy, nibble
    SKP = "skp"             # Ex9E: SKP  Vx
    SKNP = "sknp"           # ExA1: SKNP Vx
    LD_VX_DT = "ld_vx_dt"   # Fx07: LD   Vx, DT
    LD_VX_K = "ld_vx_k"     # Fx0A: LD   Vx, K
    LD_DT_VX = "ld_dt_vx"   # Fx15: LD   DT, Vx
    LD_ST_VX = "ld_st_vx"   # Fx18: LD   ST, Vx
    ADD_I = "add_i"         # Fx1E: ADD  I, Vx
    LD_F = "ld_f"           # Fx29: LD   F, Vx
    LD_B = "ld_b"           # Fx33: LD   B, Vx
    LD_ARR_W = "ld_arr_w"   # Fx55: LD   [I], Vx
    LD_ARR_R = "ld_arr_r"   # Fx65: LD   Vx, [I]


@dataclass(frozen=True)
class OpcodeEntry:
    """One row of the decode table."""
    mask: int
    match: int
    shape: OperandShape
    op: Op


_S = OperandShape

OPCODE_TABLE: Tuple[OpcodeEntry, ...] = (
    OpcodeEntry(0xFFFF, 0x00E0, _S.NONE, Op.CLS),
    OpcodeEntry(0xFFFF, 0x00EE, _S.NONE, Op.RET),
    OpcodeEntry(0xF000, 0x1000, _S.NNN, Op.JP),
    OpcodeEntry(0xF000, 0x2000, _S.NNN, Op.CALL),
    OpcodeEntry(0xF000, 0x3000, _S.XKK, Op.SE_BYTE),
    OpcodeEntry(0xF000, 0x4000, _S.XKK, Op.SNE_BYTE),
    OpcodeEntry(0xF00F, 0x5000, _S.XY, Op.SE_REG),
    OpcodeEntry(0xF000, 0x6000, _S.XKK, Op.LD_BYTE),
    OpcodeEntry(0xF000, 0x7000, _S.XKK, Op.ADD_BYTE),
    OpcodeEntry(0xF00F, 0x8000, _S.XY, Op.LD_REG),
    OpcodeEntry(0xF00F, 0x8001, _S.XY, Op.OR),
    OpcodeEntry(0xF00F, 0x8002, _S.XY, Op.AND),
    OpcodeEntry(0xF00F, 0x8003, _S.XY, Op.XOR),
    OpcodeEntry(0xF00F, 0x8004, _S.XY, Op.ADD_REG),
    OpcodeEntry(0xF00F, 0x8005, _S.XY, Op.SUB),
    OpcodeEntry(0xF00F, 0x8006, _S.XY, Op.SHR),
    OpcodeEntry(0xF00F, 0x8007, _S.XY, Op.SUBN),
    OpcodeEntry(0xF00F, 0x800E, _S.XY, Op.SHL),
    OpcodeEntry(0xF00F, 0x9000, _S.XY, Op.SNE_REG),
    OpcodeEntry(0xF000, 0xA000, _S.NNN, Op.LD_I),
    OpcodeEntry(0xF000, 0xB000, _S.NNN, Op.JP_V0),
    OpcodeEntry(0xF000, 0xC000, _S.XKK, Op.RND),
    OpcodeEntry(0xF000, 0xD000, _S.XYN, Op.DRW),
    OpcodeEntry(0xF0FF, 0xE09E, _S.X, Op.SKP),
    OpcodeEntry(0xF0FF, 0xE0A1, _S.X, Op.SKNP),
    OpcodeEntry(0xF0FF, 0xF007, _S.X, Op.LD_VX_DT),
    OpcodeEntry(0xF0FF, 0xF00A, _S.X, Op.LD_VX_K),
    OpcodeEntry(0xF0FF, 0xF015, _S.X, Op.LD_DT_VX),
    OpcodeEntry(0xF0FF, 0xF018, _S.X, Op.LD_ST_VX),
    OpcodeEntry(0xF0FF, 0xF01E, _S.X, Op.ADD_I),
    OpcodeEntry(0xF0FF, 0xF029, _S.X, Op.LD_F),
    OpcodeEntry(0xF0FF, 0xF033, _S.X, Op.LD_B),
    OpcodeEntry(0xF0FF, 0xF055, _S.X, Op.LD_ARR_W),
    OpcodeEntry(0xF0FF, 0xF065, _S.X, Op.LD_ARR_R),
)


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word.

    Attributes:
        word: Raw 16-bit instruction
        entry: Matching table entry
        operands: Operand values in encoding order
    """
    word: int
    entry: OpcodeEntry
    operands: Tuple[int, ...]

    @property
    def op(self) -> Op:
        return self.entry.op


def resolve(word: int) -> OpcodeEntry:
    """Find the table entry for an instruction word.

    Raises:
        UnknownInstruction: If no entry matches
    """
    for entry in OPCODE_TABLE:
        if word & entry.mask == entry.match:
            return entry
    raise UnknownInstruction(word)


def decode_operands(word: int, shape: OperandShape) -> Tuple[int, ...]:
    """Extract operand fields from a word according to its shape."""
    if shape is OperandShape.NONE:
        return ()
    if shape is OperandShape.NNN:
        return (word & 0x0FFF,)

    x = (word >> 8) & 0xF
    if shape is OperandShape.X:
        return (x,)
    if shape is OperandShape.XKK:
        return (x, word & 0xFF)

    y = (word >> 4) & 0xF
    if shape is OperandShape.XY:
        return (x, y)
    return (x, y, word & 0xF)


def decode(word: int) -> Instruction:
    """Resolve a word and extract its operands in one step."""
    entry = resolve(word)
    return Instruction(word, entry, decode_operands(word, entry.shape))
