"""Tests for the accumulator-driven 60Hz timers and the tone gate."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm.audio import SilentTone, gate_tone
from conftest import PROGRAM_BASE, load_words


# Jump-to-self keeps the machine busy without side effects
IDLE_LOOP = [0x1000 | PROGRAM_BASE]


@pytest.fixture
def idle_cpu(cpu):
    load_words(cpu, IDLE_LOOP)
    return cpu


class TestTimerAccumulator:
    """Test DT/ST countdown cadence."""

    def test_sixteen_1ms_ticks_decrement_once(self, idle_cpu):
        """Sixteen 1ms ticks count DT down by exactly one."""
        idle_cpu.registers.dt = 10
        for _ in range(15):
            idle_cpu.tick(1)
        assert idle_cpu.registers.dt == 10
        idle_cpu.tick(1)
        assert idle_cpu.registers.dt == 9
        for _ in range(15):
            idle_cpu.tick(1)
        assert idle_cpu.registers.dt == 9

    def test_instructions_alone_do_not_tick(self, idle_cpu):
        """Zero elapsed time never moves the timers."""
        idle_cpu.registers.dt = 3
        for _ in range(100):
            idle_cpu.tick()
        assert idle_cpu.registers.dt == 3

    def test_dt_reaches_zero_and_stays(self, idle_cpu):
        """DT=5 with five 16ms ticks reaches 0 and stays there."""
        idle_cpu.registers.dt = 5
        for _ in range(5):
            idle_cpu.tick(16)
            assert idle_cpu.timer_accumulator == 0
        assert idle_cpu.registers.dt == 0
        idle_cpu.tick(16)
        assert idle_cpu.registers.dt == 0

    def test_remainder_carries_over(self, idle_cpu):
        """Time beyond a full period is kept for the next tick."""
        idle_cpu.registers.dt = 5
        idle_cpu.tick(20)
        assert idle_cpu.registers.dt == 4
        assert idle_cpu.timer_accumulator == pytest.approx(4)
        idle_cpu.tick(12)
        assert idle_cpu.registers.dt == 3

    def test_long_stall_catches_up(self, idle_cpu):
        """A long gap applies one decrement per elapsed period."""
        idle_cpu.registers.dt = 10
        assert idle_cpu.update_timers(48) == 3
        assert idle_cpu.registers.dt == 7

    def test_timers_tick_independently(self, idle_cpu):
        """DT and ST count down side by side."""
        idle_cpu.registers.dt = 1
        idle_cpu.registers.st = 3
        idle_cpu.tick(32)
        assert idle_cpu.registers.dt == 0
        assert idle_cpu.registers.st == 1


class TestToneGate:
    """Test the sound timer driving the tone device."""

    def test_tone_starts_while_st_positive(self, idle_cpu, tone):
        """A positive ST starts the tone at the next timer tick."""
        idle_cpu.registers.st = 3
        assert tone.is_playing() is False
        idle_cpu.tick(16)
        assert tone.is_playing() is True
        assert tone.starts == 1

    def test_tone_stops_after_st_reaches_zero(self, idle_cpu, tone):
        """The tone stops on the period after ST has counted down to zero."""
        idle_cpu.registers.st = 2
        idle_cpu.tick(16)
        assert tone.is_playing() is True
        idle_cpu.tick(16)
        assert idle_cpu.registers.st == 0
        assert tone.is_playing() is True
        idle_cpu.tick(16)
        assert tone.is_playing() is False
        assert tone.stops == 1

    def test_st_of_one_sounds_one_period(self, cpu, tone):
        """LD ST, Vx with Vx=1 starts the tone once, then stops it."""
        load_words(cpu, [0x6A01, 0xFA18, 0x1204])
        cpu.tick()
        cpu.tick()
        cpu.tick(16)
        assert tone.is_playing() is True
        assert tone.starts == 1
        cpu.tick(16)
        assert tone.is_playing() is False
        assert tone.stops == 1

    @pytest.mark.parametrize("st", [1, 2, 5])
    def test_st_sounds_for_st_periods(self, idle_cpu, tone, st):
        """ST=N keeps the tone on for exactly N timer periods."""
        idle_cpu.registers.st = st
        audible = 0
        for _ in range(st + 3):
            idle_cpu.tick(16)
            if tone.is_playing():
                audible += 1
        assert audible == st
        assert tone.starts == 1
        assert tone.stops == 1

    def test_tone_not_restarted_while_playing(self, idle_cpu, tone):
        """The tone is started once for a continuous sound."""
        idle_cpu.registers.st = 10
        for _ in range(5):
            idle_cpu.tick(16)
        assert tone.starts == 1

    def test_st_instruction_gates_on_next_timer_tick(self, cpu, tone):
        """LD ST, Vx only takes effect on the tone at a timer tick."""
        load_words(cpu, [0x6A04, 0xFA18, 0x1204])
        cpu.tick()
        cpu.tick()
        assert tone.is_playing() is False
        cpu.tick(16)
        assert tone.is_playing() is True

    def test_gate_tone_function(self):
        """gate_tone starts on ST > 0 and stops on ST == 0."""
        device = SilentTone()
        gate_tone(device, 0)
        assert device.is_playing() is False
        gate_tone(device, 5)
        assert device.is_playing() is True
        gate_tone(device, 0)
        assert device.is_playing() is False
