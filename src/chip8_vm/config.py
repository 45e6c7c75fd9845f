"""MachineConfig: memory layout and run-loop cadence for the CHIP-8 machine."""

from dataclasses import dataclass

from .memory import END_ADDRESS, START_ADDRESS
from .graphics import FONT_GLYPH_SIZE, STANDARD_SPRITES
from .stack import ADDR_SIZE, MAX_DEPTH


# Conventional layout: digit sprites at 0x000, stack right after them,
# programs loaded at 0x200.
FONT_BASE = 0x000
STACK_OFFSET = FONT_BASE + FONT_GLYPH_SIZE * len(STANDARD_SPRITES)
PROGRAM_BASE = 0x200

# Seconds slept between execution loop iterations
CPU_DELAY = 0.001
DELAY_STEP = 0.001
DELAY_STEP_MULTIPLIER = 5

# Countdown timers run at 60Hz
TIMER_PERIOD_MS = 16.0


@dataclass(frozen=True)
class MachineConfig:
    """Machine constants known to the core and the run loop.

    Attributes:
        program_base: Address programs are loaded at and execution starts from
        font_base: Address of the 16 standard digit sprites (used by LD F, Vx)
        stack_offset: Start of the memory window backing the call stack
        cpu_delay: Seconds the execution loop sleeps between ticks
        delay_step: Default amount adjust_speed() changes cpu_delay by
        delay_step_multiplier: Coarse-step factor for adjust_speed()
        timer_period_ms: Elapsed time per DT/ST decrement
    """
    program_base: int = PROGRAM_BASE
    font_base: int = FONT_BASE
    stack_offset: int = STACK_OFFSET
    cpu_delay: float = CPU_DELAY
    delay_step: float = DELAY_STEP
    delay_step_multiplier: int = DELAY_STEP_MULTIPLIER
    timer_period_ms: float = TIMER_PERIOD_MS

    def __post_init__(self):
        for name in ("program_base", "font_base", "stack_offset"):
            value = getattr(self, name)
            if not START_ADDRESS <= value <= END_ADDRESS:
                raise ValueError(f"{name} out of memory range: 0x{value:X}")

        font = self.font_range()
        stack = self.stack_range()
        if stack.stop - 1 > END_ADDRESS or font.stop - 1 > END_ADDRESS:
            raise ValueError("Font table or stack window extends past end of memory")
        if _overlaps(font, stack):
            raise ValueError("Stack window overlaps the font table")
        for region, name in ((font, "Font table"), (stack, "Stack window")):
            if self.program_base in region:
                raise ValueError(f"{name} overlaps the program base")

        if self.cpu_delay < 0 or self.delay_step < 0:
            raise ValueError("Delays must be non-negative")
        if self.timer_period_ms <= 0:
            raise ValueError("timer_period_ms must be positive")

    def font_range(self) -> range:
        """Addresses occupied by the standard digit sprites."""
        return range(self.font_base, self.font_base + FONT_GLYPH_SIZE * len(STANDARD_SPRITES))

    def stack_range(self) -> range:
        """Addresses reserved for the call stack."""
        return range(self.stack_offset, self.stack_offset + ADDR_SIZE * MAX_DEPTH)


def _overlaps(a: range, b: range) -> bool:
    return a.start < b.stop and b.start < a.stop
