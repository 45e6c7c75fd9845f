"""Tests for the register file."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm.errors import InvalidRegister, RegisterError
from chip8_vm.registers import V_COUNT, Registers


@pytest.fixture
def regs():
    return Registers()


class TestGeneralRegisters:
    """Test V0-VF access."""

    def test_default_zeroed(self, regs):
        """All registers start at zero."""
        assert all(regs[i] == 0 for i in range(V_COUNT))
        assert regs.i == 0
        assert regs.dt == 0
        assert regs.st == 0

    def test_write_masks_every_register(self, regs):
        """Writing v reads back v & 0xFF for every register."""
        for index in range(V_COUNT):
            for value in (0, 1, 0x7F, 0xFF, 0x100, 0x1234, -1):
                regs[index] = value
                assert regs[index] == value & 0xFF

    @pytest.mark.parametrize("index", [-1, 16, 100])
    def test_invalid_index_read(self, regs, index):
        """Reading outside V0-VF raises RegisterError."""
        with pytest.raises(RegisterError) as exc:
            regs[index]
        assert exc.value.index == index

    @pytest.mark.parametrize("index", [-1, 16])
    def test_invalid_index_write(self, regs, index):
        """Writing outside V0-VF raises InvalidRegister."""
        with pytest.raises(InvalidRegister):
            regs[index] = 1


class TestSpecialRegisters:
    """Test I, DT and ST."""

    def test_i_masks_to_16_bits(self, regs):
        """I keeps 16 bits."""
        regs.i = 0x1FFFF
        assert regs.i == 0xFFFF
        regs.i = 0x0ABC
        assert regs.i == 0x0ABC

    def test_timers_mask_to_8_bits(self, regs):
        """DT and ST keep 8 bits."""
        regs.dt = 0x1FF
        regs.st = 0x105
        assert regs.dt == 0xFF
        assert regs.st == 0x05

    def test_tick_decrements_independently(self, regs):
        """tick counts both timers down by one."""
        regs.dt = 3
        regs.st = 1
        regs.tick()
        assert regs.dt == 2
        assert regs.st == 0

    def test_tick_floors_at_zero(self, regs):
        """Timers never go negative."""
        regs.dt = 1
        regs.tick()
        regs.tick()
        regs.tick()
        assert regs.dt == 0
        assert regs.st == 0


class TestRegisterInspection:
    """Test snapshots and dumps."""

    def test_dump_registers(self, regs):
        """dump_registers names every register."""
        regs[0xA] = 5
        regs.i = 0x300
        dump = regs.dump_registers()
        assert dump["VA"] == 5
        assert dump["I"] == 0x300
        assert set(dump) == {f"V{i:X}" for i in range(16)} | {"I", "DT", "ST"}

    def test_snapshot_is_copy(self, regs):
        """Modifying a snapshot doesn't affect the registers."""
        regs[0] = 42
        snapshot = regs.snapshot()
        snapshot["v"][0] = 99
        assert regs[0] == 42

    def test_str(self, regs):
        """String form shows registers in hex."""
        regs[1] = 0xAB
        assert "V1=AB" in str(regs)
