"""Registers: the CHIP-8 register file.

Register Components:
    - V0-VF: 16 general-purpose 8-bit registers (VF doubles as the flag output)
    - I: 16-bit address register
    - DT: 8-bit delay timer
    - ST: 8-bit sound timer

All setters mask to the register's width. DT and ST only count down via
tick(), which the execution engine calls on a fixed 60Hz cadence rather
than once per instruction.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .errors import RegisterError


V_COUNT = 16
FLAG = 0xF

V_MASK = 0xFF
I_MASK = 0xFFFF
DT_MASK = 0xFF
ST_MASK = 0xFF


@dataclass
class Registers:
    """Mutable CHIP-8 register file.

    Attributes:
        v: General registers V0-VF
    """
    v: List[int] = field(default_factory=lambda: [0] * V_COUNT)
    _i: int = field(default=0, repr=False)
    _dt: int = field(default=0, repr=False)
    _st: int = field(default=0, repr=False)

    def __getitem__(self, index: int) -> int:
        if not self._valid_v(index):
            raise RegisterError(index)
        return self.v[index]

    def __setitem__(self, index: int, value: int) -> None:
        if not self._valid_v(index):
            raise RegisterError(index)
        self.v[index] = value & V_MASK

    @property
    def i(self) -> int:
        return self._i

    @i.setter
    def i(self, value: int) -> None:
        self._i = value & I_MASK

    @property
    def dt(self) -> int:
        return self._dt

    @dt.setter
    def dt(self, value: int) -> None:
        self._dt = value & DT_MASK

    @property
    def st(self) -> int:
        return self._st

    @st.setter
    def st(self, value: int) -> None:
        self._st = value & ST_MASK

    def tick(self) -> None:
        """Count DT and ST down by one each, stopping at zero."""
        if self._dt > 0:
            self._dt -= 1
        if self._st > 0:
            self._st -= 1

    def snapshot(self) -> dict:
        """Copy of the register file for tracing."""
        return {
            "v": list(self.v),
            "i": self._i,
            "dt": self._dt,
            "st": self._st,
        }

    def dump_registers(self) -> Dict[str, int]:
        """Get a copy of all register values keyed by name.

        Returns:
            Dictionary of register names (V0-VF, I, DT, ST) to values
        """
        regs = {f"V{index:X}": value for index, value in enumerate(self.v)}
        regs.update({"I": self._i, "DT": self._dt, "ST": self._st})
        return regs

    @staticmethod
    def _valid_v(index: int) -> bool:
        return 0 <= index < V_COUNT

    def __str__(self) -> str:
        """Human-readable register representation."""
        v = " ".join(f"V{index:X}={value:02X}" for index, value in enumerate(self.v))
        return f"{v} I={self._i:04X} DT={self._dt} ST={self._st}"
