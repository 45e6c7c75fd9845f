"""chip8_vm: CHIP-8 virtual machine core.

This package emulates the CHIP-8 machine: 35 instructions, 4KB of memory,
16 general registers, a 16-deep call stack and a 64x32 monochrome screen,
with 60Hz countdown timers that run independently of instruction speed.

Architecture:
    MEMORY -> FETCH -> DECODE -> OPCODE TABLE -> EXECUTE -> REGISTERS/STACK/SCREEN
               |         |           |              |
             [PC]   [mask/match]  [Op enum]   [frozen handlers]

Window, audio backend and physical keys are outside the core: a renderer
reads the Framebuffer, the input loop feeds the Keypad, and a ToneDevice
is switched by the sound timer.

Modules:
    errors: Machine fault hierarchy
    config: MachineConfig memory layout and cadence
    memory: Bounds-checked byte store
    registers: V0-VF, I, DT, ST
    stack: Memory-backed call stack
    graphics: Sprite, Framebuffer, standard digit sprites
    opcodes: Static decode table
    processor: Execution engine
    keypad: Logical keys and the wait-for-key handoff
    audio: Tone device protocol and sound-timer gate
    program: Program image loading
    disassembler: Assembly listings
    interpreter: Run loop owner
"""

__version__ = "0.1.0"

from .config import MachineConfig
from .errors import (
    AddressError,
    Chip8Error,
    InputClosed,
    RegisterError,
    StackOverflow,
    StackUnderflow,
    UnknownInstruction,
)
from .graphics import Framebuffer, Sprite
from .interpreter import Interpreter
from .keypad import Keypad
from .memory import Memory
from .opcodes import Op, decode, resolve
from .processor import Processor
from .program import Program
from .registers import Registers
from .stack import Stack

__all__ = [
    "MachineConfig",
    "AddressError",
    "Chip8Error",
    "InputClosed",
    "RegisterError",
    "StackOverflow",
    "StackUnderflow",
    "UnknownInstruction",
    "Framebuffer",
    "Sprite",
    "Interpreter",
    "Keypad",
    "Memory",
    "Op",
    "decode",
    "resolve",
    "Processor",
    "Program",
    "Registers",
    "Stack",
]
