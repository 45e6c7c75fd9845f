"""Interpreter: owns a machine and drives its execution loop.

The interpreter powers the machine on (memory, digit sprites, processor),
loads a program at the program base and runs the execution loop, either
in the calling thread with run() or on a background thread with start().
Each loop iteration passes the wall time elapsed since the previous one
to Processor.tick() and then sleeps for cpu_delay seconds.

The presentation/input side (window, key polling, audio backend) stays
outside: it reads the framebuffer, feeds the keypad and supplies a tone
device. Its quit signal maps to stop().

Error policy: a machine fault is logged, kept in `error`, and the loop
halts. The framebuffer keeps its last state.
"""

import logging
import random
import threading
import time
from pathlib import Path
from typing import Optional, Union

from .audio import SilentTone, ToneDevice
from .config import MachineConfig
from .errors import Chip8Error, InputClosed
from .graphics import FONT_GLYPH_SIZE, STANDARD_SPRITES, Framebuffer
from .keypad import Keypad
from .memory import Memory
from .processor import Processor
from .program import Program


log = logging.getLogger(__name__)


class Interpreter:
    """A powered-on CHIP-8 machine plus its run loop.

    Attributes:
        config: Memory layout and cadence
        memory: Machine memory
        keypad: Logical key state fed by the input loop
        tone: Tone device gated by the sound timer
        processor: Execution engine
        program: Currently loaded program, if any
        halted: Whether the loop stopped because of a machine fault
        error: The fault that halted the loop
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        keypad: Optional[Keypad] = None,
        tone: Optional[ToneDevice] = None,
        rng: Optional[random.Random] = None,
        trace: bool = False,
    ):
        self.config = config if config is not None else MachineConfig()
        self.keypad = keypad if keypad is not None else Keypad()
        self.tone = tone if tone is not None else SilentTone()
        self.memory = Memory()
        self._install_sprites()
        self.processor = Processor(
            self.memory,
            self.config.stack_offset,
            self.keypad,
            tone=self.tone,
            rng=rng,
            font_base=self.config.font_base,
            timer_period_ms=self.config.timer_period_ms,
            trace=trace,
        )
        self.program: Optional[Program] = None
        self.halted = False
        self.error: Optional[Chip8Error] = None
        self._cpu_delay = self.config.cpu_delay
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def framebuffer(self) -> Framebuffer:
        return self.processor.framebuffer

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self, program: Union[Program, bytes]) -> None:
        """Write a program at the program base and point PC at it.

        The processor is reset and a previous fault is cleared, so a halted
        machine can run again once a program is loaded.
        """
        if self.running:
            raise RuntimeError("Cannot load while the execution loop is running")
        if isinstance(program, (bytes, bytearray)):
            program = Program.from_bytes(bytes(program))
        self.processor.reset()
        self.memory.write_block(program.to_bytes(), self.config.program_base)
        self.processor.pc = self.config.program_base
        self.program = program
        self.halted = False
        self.error = None
        log.info("Loaded %d bytes at 0x%03X", program.size_bytes, self.config.program_base)

    def load_file(self, path: Union[str, Path]) -> None:
        self.load(Program.from_file(path))

    # =========================================================================
    # Run loop
    # =========================================================================

    @property
    def cpu_delay(self) -> float:
        """Seconds slept between ticks. May be changed while running."""
        return self._cpu_delay

    @cpu_delay.setter
    def cpu_delay(self, value: float) -> None:
        self._cpu_delay = max(0.0, value)
        log.info("CPU delay set to %s", self._cpu_delay)

    def adjust_speed(self, steps: int = 1, coarse: bool = False) -> float:
        """Change cpu_delay by `steps` delay steps; negative steps speed up.

        Returns:
            The new delay
        """
        amount = self.config.delay_step * steps
        if coarse:
            amount *= self.config.delay_step_multiplier
        self.cpu_delay = self._cpu_delay + amount
        return self._cpu_delay

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run the execution loop in the calling thread.

        Returns when stop() is called, when a machine fault halts the
        machine, or after max_cycles instructions. A machine that was
        stopped earlier can be run again.
        """
        self._prepare()
        self._loop(max_cycles)

    def _prepare(self) -> None:
        if self.program is None:
            raise RuntimeError("No program loaded")
        if self.halted:
            raise RuntimeError("Machine is halted")
        self._stop.clear()
        self.keypad.reopen()

    def _loop(self, max_cycles: Optional[int] = None) -> None:
        log.info("Execution loop started at 0x%03X", self.processor.pc)
        executed = 0
        last_tick = time.monotonic()
        while not self._stop.is_set():
            if max_cycles is not None and executed >= max_cycles:
                break

            now = time.monotonic()
            elapsed = (now - last_tick) * 1000
            last_tick = now
            try:
                self.processor.tick(elapsed)
            except InputClosed:
                log.info("Keypad closed while waiting for a key")
                break
            except Chip8Error as e:
                self.halted = True
                self.error = e
                log.error("Execution loop halted at 0x%03X: %s", self.processor.pc, e)
                break
            executed += 1

            if self._cpu_delay > 0:
                self._stop.wait(self._cpu_delay)

        log.info("Execution loop stopped after %d cycles", executed)

    def start(self) -> threading.Thread:
        """Run the execution loop on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Execution loop already running")
        self._prepare()
        self._thread = threading.Thread(target=self._loop, name="chip8-cpu", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Ask the loop to exit, releasing a blocked wait-for-key."""
        self._stop.set()
        self.keypad.close()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the background loop to finish.

        Returns:
            True if the loop is no longer running
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _install_sprites(self) -> None:
        for index, sprite in enumerate(STANDARD_SPRITES):
            self.memory.write_sprite(sprite, self.config.font_base + index * FONT_GLYPH_SIZE)
