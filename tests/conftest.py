"""Shared fixtures for machine tests."""

import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm.audio import SilentTone
from chip8_vm.graphics import FONT_GLYPH_SIZE, STANDARD_SPRITES
from chip8_vm.keypad import Keypad
from chip8_vm.memory import Memory
from chip8_vm.processor import Processor


PROGRAM_BASE = 0x200
STACK_OFFSET = 0x50


def load_words(cpu, words, base=PROGRAM_BASE):
    """Write instruction words at base and point PC there."""
    data = []
    for word in words:
        data.extend((word >> 8, word & 0xFF))
    cpu.memory.write_block(data, base)
    cpu.pc = base


@pytest.fixture
def keypad():
    return Keypad()


@pytest.fixture
def tone():
    return SilentTone()


@pytest.fixture
def cpu(keypad, tone):
    mem = Memory()
    for index, sprite in enumerate(STANDARD_SPRITES):
        mem.write_sprite(sprite, index * FONT_GLYPH_SIZE)
    return Processor(mem, STACK_OFFSET, keypad, tone=tone, rng=random.Random(1234))


@pytest.fixture
def run():
    """Load words and execute them one tick each."""
    def _run(cpu, *words, ticks=None):
        load_words(cpu, words)
        for _ in range(len(words) if ticks is None else ticks):
            cpu.tick()
        return cpu
    return _run
