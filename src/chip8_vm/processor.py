"""Processor: the CHIP-8 execution engine.

One call to tick() runs the pipeline:
    TIMERS -> FETCH -> ADVANCE PC -> DECODE -> EXECUTE

The countdown timers are driven by elapsed wall time rather than by
instruction count: tick() adds the elapsed milliseconds to an
accumulator and decrements DT/ST once for every full timer period it
holds. The sound timer's transitions start and stop the tone device.

Handlers live in a table keyed by opcodes.Op that is frozen after
construction and must cover every operation. Machine errors propagate
out of tick() untouched; the run loop that owns the processor decides
whether to halt.
"""

import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Tuple

from .audio import SilentTone, ToneDevice, gate_tone
from .config import FONT_BASE, TIMER_PERIOD_MS
from .graphics import FONT_GLYPH_SIZE, Framebuffer, Sprite
from .keypad import Keypad
from .memory import Memory
from .opcodes import Instruction, Op, decode
from .registers import FLAG, Registers
from .stack import Stack


PC_MASK = 0xFFFF
INSTRUCTION_SIZE = 2

log = logging.getLogger(__name__)


@dataclass
class ExecutionTraceEntry:
    """Single executed instruction, recorded when tracing is enabled.

    Attributes:
        cycle: Cycle number (1-indexed, after execution)
        pc: Address the instruction was fetched from
        word: Raw instruction word
        op: Decoded operation
        operands: Decoded operand values
    """
    cycle: int
    pc: int
    word: int
    op: Op
    operands: Tuple[int, ...]


class Processor:
    """Fetch/decode/execute engine over memory, registers, stack and screen.

    Attributes:
        memory: Machine memory
        registers: Register file
        stack: Call stack, backed by memory at stack_offset
        framebuffer: Logical screen
        keypad: Logical key state and wait-for-key source
        tone: Tone device gated by the sound timer
        cycle_count: Number of instructions executed
        trace: Executed instructions, if tracing is enabled
    """

    def __init__(
        self,
        memory: Memory,
        stack_offset: int,
        keypad: Keypad,
        tone: Optional[ToneDevice] = None,
        framebuffer: Optional[Framebuffer] = None,
        rng: Optional[random.Random] = None,
        font_base: int = FONT_BASE,
        timer_period_ms: float = TIMER_PERIOD_MS,
        trace: bool = False,
    ):
        self.memory = memory
        self.registers = Registers()
        self.stack = Stack(memory, stack_offset)
        self.framebuffer = framebuffer if framebuffer is not None else Framebuffer()
        self.keypad = keypad
        self.tone = tone if tone is not None else SilentTone()
        self.rng = rng if rng is not None else random.Random()
        self.font_base = font_base
        self.timer_period_ms = timer_period_ms
        self.cycle_count = 0
        self.trace_enabled = trace
        self.trace: List[ExecutionTraceEntry] = []
        self._pc = 0
        self._timer_accumulator = 0.0
        self._handlers = self._build_handler_table()
        log.info("Processor initialized (stack at 0x%03X, fonts at 0x%03X)", stack_offset, font_base)

    # =========================================================================
    # Program counter
    # =========================================================================

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & PC_MASK

    def _skip(self) -> None:
        self.pc = self._pc + INSTRUCTION_SIZE

    # =========================================================================
    # Pipeline
    # =========================================================================

    def tick(self, elapsed_ms: float = 0.0) -> Instruction:
        """Advance the timers, then fetch and execute one instruction.

        Args:
            elapsed_ms: Wall time since the previous tick

        Returns:
            The instruction that was executed

        Raises:
            Chip8Error: Any machine fault raised while fetching or executing
        """
        self.update_timers(elapsed_ms)

        pc = self._pc
        word = self.fetch()
        self.pc = pc + INSTRUCTION_SIZE
        instruction = decode(word)
        self.execute(instruction)

        self.cycle_count += 1
        log.debug("%03X: %04X %s %s", pc, word, instruction.op.name, instruction.operands)
        if self.trace_enabled:
            self.trace.append(ExecutionTraceEntry(
                cycle=self.cycle_count,
                pc=pc,
                word=word,
                op=instruction.op,
                operands=instruction.operands,
            ))
        return instruction

    def fetch(self) -> int:
        """Read the big-endian instruction word at PC."""
        hi, lo = self.memory.read_block(self._pc, INSTRUCTION_SIZE)
        return (hi << 8) | lo

    def execute(self, instruction: Instruction) -> None:
        """Run the handler for an already decoded instruction."""
        self._handlers[instruction.op](*instruction.operands)

    def update_timers(self, elapsed_ms: float) -> int:
        """Accumulate elapsed time and count the timers down per full period.

        The tone is gated on ST as it stands at the start of each period,
        so ST=N keeps it audible for N periods.

        Returns:
            Number of timer ticks applied
        """
        self._timer_accumulator += elapsed_ms
        ticks = 0
        while self._timer_accumulator >= self.timer_period_ms:
            self._timer_accumulator -= self.timer_period_ms
            gate_tone(self.tone, self.registers.st)
            self.registers.tick()
            ticks += 1
        return ticks

    @property
    def timer_accumulator(self) -> float:
        return self._timer_accumulator

    def reset(self) -> None:
        """Return to power-on state: registers, stack, screen, timers and tone.

        Memory is left as it is.
        """
        self.registers = Registers()
        self.stack.depth = 0
        self.framebuffer.clear()
        self._timer_accumulator = 0.0
        self.cycle_count = 0
        self.trace = []
        gate_tone(self.tone, 0)

    # =========================================================================
    # Handler table
    # =========================================================================

    def _build_handler_table(self):
        handlers: Dict[Op, Callable[..., None]] = {}
        for op in Op:
            handler = getattr(self, f"_op_{op.value}", None)
            if handler is None:
                raise RuntimeError(f"No handler for operation: {op.name}")
            handlers[op] = handler
        return MappingProxyType(handlers)

    # -------------------------------------------------------------------------
    # Flow control
    # -------------------------------------------------------------------------

    def _op_cls(self) -> None:
        """CLS - Clear the screen."""
        self.framebuffer.clear()

    def _op_ret(self) -> None:
        """RET - Return from subroutine."""
        self.pc = self.stack.pop()

    def _op_jp(self, addr: int) -> None:
        """JP addr - Jump to address."""
        self.pc = addr

    def _op_call(self, addr: int) -> None:
        """CALL addr - Push the return address and jump."""
        self.stack.push(self._pc)
        self.pc = addr

    def _op_jp_v0(self, addr: int) -> None:
        """JP V0, addr - Jump to V0 + addr."""
        self.pc = self.registers[0x0] + addr

    # -------------------------------------------------------------------------
    # Conditional skips
    # -------------------------------------------------------------------------

    def _op_se_byte(self, x: int, byte: int) -> None:
        """SE Vx, byte - Skip if Vx == byte."""
        if self.registers[x] == byte:
            self._skip()

    def _op_sne_byte(self, x: int, byte: int) -> None:
        """SNE Vx, byte - Skip if Vx != byte."""
        if self.registers[x] != byte:
            self._skip()

    def _op_se_reg(self, x: int, y: int) -> None:
        """SE Vx, Vy - Skip if Vx == Vy."""
        if self.registers[x] == self.registers[y]:
            self._skip()

    def _op_sne_reg(self, x: int, y: int) -> None:
        """SNE Vx, Vy - Skip if Vx != Vy."""
        if self.registers[x] != self.registers[y]:
            self._skip()

    def _op_skp(self, x: int) -> None:
        """SKP Vx - Skip if the key with value Vx is down."""
        if self.keypad.is_key_down(self.registers[x]):
            self._skip()

    def _op_sknp(self, x: int) -> None:
        """SKNP Vx - Skip if the key with value Vx is not down."""
        if not self.keypad.is_key_down(self.registers[x]):
            self._skip()

    # -------------------------------------------------------------------------
    # Loads and arithmetic
    # -------------------------------------------------------------------------

    def _op_ld_byte(self, x: int, byte: int) -> None:
        """LD Vx, byte - Vx = byte."""
        self.registers[x] = byte

    def _op_add_byte(self, x: int, byte: int) -> None:
        """ADD Vx, byte - Wrapping add, VF untouched."""
        self.registers[x] = self.registers[x] + byte

    def _op_ld_reg(self, x: int, y: int) -> None:
        """LD Vx, Vy - Vx = Vy."""
        self.registers[x] = self.registers[y]

    def _op_or(self, x: int, y: int) -> None:
        """OR Vx, Vy - Vx = Vx OR Vy."""
        self.registers[x] = self.registers[x] | self.registers[y]

    def _op_and(self, x: int, y: int) -> None:
        """AND Vx, Vy - Vx = Vx AND Vy."""
        self.registers[x] = self.registers[x] & self.registers[y]

    def _op_xor(self, x: int, y: int) -> None:
        """XOR Vx, Vy - Vx = Vx XOR Vy."""
        self.registers[x] = self.registers[x] ^ self.registers[y]

    def _op_add_reg(self, x: int, y: int) -> None:
        """ADD Vx, Vy - VF = 1 if the unsigned sum exceeds 255."""
        result = self.registers[x] + self.registers[y]
        self.registers[FLAG] = 1 if result > 0xFF else 0
        self.registers[x] = result

    def _op_sub(self, x: int, y: int) -> None:
        """SUB Vx, Vy - Vx = Vx - Vy, VF = 1 when no borrow."""
        result = self.registers[x] - self.registers[y]
        self.registers[FLAG] = 0 if result < 0 else 1
        self.registers[x] = result

    def _op_subn(self, x: int, y: int) -> None:
        """SUBN Vx, Vy - Vx = Vy - Vx, VF = 1 when no borrow."""
        result = self.registers[y] - self.registers[x]
        self.registers[FLAG] = 0 if result < 0 else 1
        self.registers[x] = result

    def _op_shr(self, x: int, y: int) -> None:
        """SHR Vx - Shift right, VF = bit shifted out. Vy is ignored."""
        value = self.registers[x]
        self.registers[FLAG] = value & 0x1
        self.registers[x] = value >> 1

    def _op_shl(self, x: int, y: int) -> None:
        """SHL Vx - Shift left, VF = bit shifted out. Vy is ignored."""
        value = self.registers[x]
        self.registers[FLAG] = (value >> 7) & 0x1
        self.registers[x] = value << 1

    def _op_rnd(self, x: int, byte: int) -> None:
        """RND Vx, byte - Vx = random byte AND byte."""
        self.registers[x] = self.rng.randint(0, 0xFF) & byte

    # -------------------------------------------------------------------------
    # Address register, timers and memory
    # -------------------------------------------------------------------------

    def _op_ld_i(self, addr: int) -> None:
        """LD I, addr - I = addr."""
        self.registers.i = addr

    def _op_add_i(self, x: int) -> None:
        """ADD I, Vx - I = I + Vx, VF untouched."""
        self.registers.i = self.registers.i + self.registers[x]

    def _op_ld_vx_dt(self, x: int) -> None:
        """LD Vx, DT - Vx = delay timer."""
        self.registers[x] = self.registers.dt

    def _op_ld_dt_vx(self, x: int) -> None:
        """LD DT, Vx - Delay timer = Vx."""
        self.registers.dt = self.registers[x]

    def _op_ld_st_vx(self, x: int) -> None:
        """LD ST, Vx - Sound timer = Vx."""
        self.registers.st = self.registers[x]

    def _op_ld_vx_k(self, x: int) -> None:
        """LD Vx, K - Block until a key is pressed, store its value in Vx."""
        self.registers[x] = self.keypad.wait_for_key()

    def _op_ld_f(self, x: int) -> None:
        """LD F, Vx - Point I at the digit sprite for Vx."""
        self.registers.i = self.font_base + FONT_GLYPH_SIZE * self.registers[x]

    def _op_ld_b(self, x: int) -> None:
        """LD B, Vx - Store Vx as three BCD digits at I, I+1, I+2."""
        value = self.registers[x]
        self.memory.write_block((value // 100, (value % 100) // 10, value % 10), self.registers.i)

    def _op_ld_arr_w(self, x: int) -> None:
        """LD [I], Vx - Store V0..Vx at I. I is left unchanged."""
        self.memory.write_block(self.registers.v[:x + 1], self.registers.i)

    def _op_ld_arr_r(self, x: int) -> None:
        """LD Vx, [I] - Load V0..Vx from I. I is left unchanged."""
        data = self.memory.read_block(self.registers.i, x + 1)
        for index, value in enumerate(data):
            self.registers[index] = value

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def _op_drw(self, x: int, y: int, nibble: int) -> None:
        """DRW Vx, Vy, nibble - Draw `nibble` sprite rows from I at (Vx, Vy).

        VF is set to 1 if any lit pixel was erased.
        """
        data = self.memory.read_block(self.registers.i, nibble)
        sprite = Sprite(data)
        collided = self.framebuffer.draw_sprite(sprite, self.registers[x], self.registers[y])
        self.registers[FLAG] = 1 if collided else 0

    # =========================================================================
    # Inspection
    # =========================================================================

    def snapshot(self) -> dict:
        """Copy of the processor state for tracing and debugging."""
        return {
            "registers": self.registers.snapshot(),
            "pc": self._pc,
            "stack_depth": self.stack.depth,
            "cycle_count": self.cycle_count,
        }

    def get_summary(self) -> Dict:
        """Execution summary.

        Returns:
            Dictionary with execution statistics and current state
        """
        return {
            "cycles": self.cycle_count,
            "pc": self._pc,
            "registers": self.registers.dump_registers(),
            "stack_depth": self.stack.depth,
            "trace_length": len(self.trace),
        }
