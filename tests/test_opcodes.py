"""Tests for the opcode table and instruction decode."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm.errors import UnknownInstruction
from chip8_vm.opcodes import (
    OPCODE_TABLE,
    Op,
    OperandShape,
    decode,
    decode_operands,
    resolve,
)


class TestOpcodeTable:
    """Test the static table itself."""

    def test_one_entry_per_operation(self):
        """35 entries, one for each Op."""
        assert len(OPCODE_TABLE) == 35
        assert {entry.op for entry in OPCODE_TABLE} == set(Op)

    def test_entries_do_not_overlap(self):
        """Each entry's match value resolves to that entry only."""
        for entry in OPCODE_TABLE:
            matches = [e for e in OPCODE_TABLE if entry.match & e.mask == e.match]
            assert matches == [entry]

    def test_match_within_mask(self):
        """Match values have no bits outside their mask."""
        for entry in OPCODE_TABLE:
            assert entry.match & ~entry.mask & 0xFFFF == 0

    def test_table_immutable(self):
        """Entries are frozen."""
        with pytest.raises(Exception):
            OPCODE_TABLE[0].match = 0


class TestResolve:
    """Test word -> entry lookup."""

    def test_cls(self):
        """00E0 is clear-screen with no operands."""
        instruction = decode(0x00E0)
        assert instruction.op is Op.CLS
        assert instruction.operands == ()

    def test_load_byte(self):
        """6A12 is LD VA, 0x12."""
        instruction = decode(0x6A12)
        assert instruction.op is Op.LD_BYTE
        assert instruction.operands == (0xA, 0x12)

    def test_unknown(self):
        """FFFF is not an instruction."""
        with pytest.raises(UnknownInstruction) as exc:
            resolve(0xFFFF)
        assert exc.value.word == 0xFFFF

    @pytest.mark.parametrize("word", [0x0000, 0x0123, 0x5121, 0x800F, 0x9AB1, 0xE19F, 0xF2FF])
    def test_non_instructions(self, word):
        """Words outside the base set fail to resolve."""
        with pytest.raises(UnknownInstruction):
            resolve(word)

    @pytest.mark.parametrize("word, op", [
        (0x00EE, Op.RET),
        (0x1ABC, Op.JP),
        (0x2ABC, Op.CALL),
        (0x3A12, Op.SE_BYTE),
        (0x4A12, Op.SNE_BYTE),
        (0x5AB0, Op.SE_REG),
        (0x7A01, Op.ADD_BYTE),
        (0x8AB0, Op.LD_REG),
        (0x8AB1, Op.OR),
        (0x8AB2, Op.AND),
        (0x8AB3, Op.XOR),
        (0x8AB4, Op.ADD_REG),
        (0x8AB5, Op.SUB),
        (0x8AB6, Op.SHR),
        (0x8AB7, Op.SUBN),
        (0x8ABE, Op.SHL),
        (0x9AB0, Op.SNE_REG),
        (0xA123, Op.LD_I),
        (0xB123, Op.JP_V0),
        (0xC1FF, Op.RND),
        (0xD125, Op.DRW),
        (0xE19E, Op.SKP),
        (0xE1A1, Op.SKNP),
        (0xF107, Op.LD_VX_DT),
        (0xF10A, Op.LD_VX_K),
        (0xF115, Op.LD_DT_VX),
        (0xF118, Op.LD_ST_VX),
        (0xF11E, Op.ADD_I),
        (0xF129, Op.LD_F),
        (0xF133, Op.LD_B),
        (0xF155, Op.LD_ARR_W),
        (0xF165, Op.LD_ARR_R),
    ])
    def test_each_operation(self, word, op):
        """Every documented encoding resolves to its operation."""
        assert resolve(word).op is op


class TestDecodeOperands:
    """Test operand field extraction."""

    def test_nnn(self):
        assert decode_operands(0x1ABC, OperandShape.NNN) == (0xABC,)

    def test_x(self):
        assert decode_operands(0xF529, OperandShape.X) == (0x5,)

    def test_xy(self):
        assert decode_operands(0x8AB4, OperandShape.XY) == (0xA, 0xB)

    def test_xkk(self):
        assert decode_operands(0x3C7F, OperandShape.XKK) == (0xC, 0x7F)

    def test_xyn(self):
        assert decode_operands(0xD12F, OperandShape.XYN) == (0x1, 0x2, 0xF)

    def test_none(self):
        assert decode_operands(0x00E0, OperandShape.NONE) == ()

    def test_decode_uses_entry_shape(self):
        """decode pairs the entry with its operands."""
        instruction = decode(0xD015)
        assert instruction.word == 0xD015
        assert instruction.entry.shape is OperandShape.XYN
        assert instruction.operands == (0x0, 0x1, 0x5)
