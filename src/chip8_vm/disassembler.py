"""Disassembler: turn instruction words into an assembly listing.

Words that match no opcode are almost always sprite data embedded in the
program, so they are listed as DATA instead of failing.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .config import PROGRAM_BASE
from .errors import UnknownInstruction
from .opcodes import Op, decode
from .processor import INSTRUCTION_SIZE


log = logging.getLogger(__name__)

MNEMONICS: Dict[Op, str] = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP 0x{0:03x}",
    Op.CALL: "CALL 0x{0:03x}",
    Op.SE_BYTE: "SE V{0:x}, 0x{1:02x}",
    Op.SNE_BYTE: "SNE V{0:x}, 0x{1:02x}",
    Op.SE_REG: "SE V{0:x}, V{1:x}",
    Op.LD_BYTE: "LD V{0:x}, 0x{1:02x}",
    Op.ADD_BYTE: "ADD V{0:x}, 0x{1:02x}",
    Op.LD_REG: "LD V{0:x}, V{1:x}",
    Op.OR: "OR V{0:x}, V{1:x}",
    Op.AND: "AND V{0:x}, V{1:x}",
    Op.XOR: "XOR V{0:x}, V{1:x}",
    Op.ADD_REG: "ADD V{0:x}, V{1:x}",
    Op.SUB: "SUB V{0:x}, V{1:x}",
    Op.SHR: "SHR V{0:x}, V{1:x}",
    Op.SUBN: "SUBN V{0:x}, V{1:x}",
    Op.SHL: "SHL V{0:x}, V{1:x}",
    Op.SNE_REG: "SNE V{0:x}, V{1:x}",
    Op.LD_I: "LD I, 0x{0:03x}",
    Op.JP_V0: "JP V0, 0x{0:03x}",
    Op.RND: "RND V{0:x}, 0x{1:02x}",
    Op.DRW: "DRW V{0:x}, V{1:x}, 0x{2:x}",
    Op.SKP: "SKP V{0:x}",
    Op.SKNP: "SKNP V{0:x}",
    Op.LD_VX_DT: "LD V{0:x}, DT",
    Op.LD_VX_K: "LD V{0:x}, K",
    Op.LD_DT_VX: "LD DT, V{0:x}",
    Op.LD_ST_VX: "LD ST, V{0:x}",
    Op.ADD_I: "ADD I, V{0:x}",
    Op.LD_F: "LD F, V{0:x}",
    Op.LD_B: "LD B, V{0:x}",
    Op.LD_ARR_W: "LD [I], V{0:x}",
    Op.LD_ARR_R: "LD V{0:x}, [I]",
}


def disassemble_word(word: int) -> str:
    """Assembly text for one instruction word.

    Raises:
        UnknownInstruction: If the word is not an instruction
    """
    instruction = decode(word)
    return MNEMONICS[instruction.op].format(*instruction.operands)


def disassemble(words: Iterable[int], base: int = PROGRAM_BASE) -> List[str]:
    """Listing of a program, one line per word, addresses starting at base."""
    lines = []
    address = base
    for word in words:
        try:
            text = disassemble_word(word)
        except UnknownInstruction:
            text = f"{word:04x} # DATA"
        lines.append(f"{address:x} {text}")
        address += INSTRUCTION_SIZE
    return lines


def disassemble_to_file(words: Iterable[int], out: Union[str, Path], base: int = PROGRAM_BASE) -> int:
    """Write a listing to `out`.

    Returns:
        Number of lines written
    """
    lines = disassemble(words, base)
    Path(out).write_text("\n".join(lines))
    log.info("Wrote %d ASM lines to %s", len(lines), out)
    return len(lines)
