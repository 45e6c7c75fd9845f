"""Exception hierarchy for the CHIP-8 virtual machine.

Every error here is a contract violation raised at the point where it
happens. Nothing in the machine retries or corrects them; the run loop
that owns the machine decides what to do (see interpreter.Interpreter).

Hierarchy:
    Chip8Error
        MachineMemoryError
            AddressError (alias OutOfRangeAccess)
            StackOverflow
            StackUnderflow
        CpuError
            RegisterError (alias InvalidRegister)
            UnknownInstruction
        InputClosed
"""

from typing import Optional


class Chip8Error(RuntimeError):
    """Base class for all machine errors."""


class MachineMemoryError(Chip8Error):
    """Faults raised by memory and the memory-backed stack."""


class AddressError(MachineMemoryError):
    """Memory access outside the addressable range.

    Attributes:
        address: Offending address
        operation: "read" or "write"
    """

    def __init__(self, address: int, operation: str, message: Optional[str] = None):
        self.address = address
        self.operation = operation
        if message is None:
            message = f"Tried to {operation} invalid memory location 0x{address:X}"
        super().__init__(message)


class StackOverflow(MachineMemoryError):
    """Push onto a stack that is already at maximum depth."""


class StackUnderflow(MachineMemoryError):
    """Pop or peek on an empty stack."""


class CpuError(Chip8Error):
    """Faults raised by the register file and the decoder."""


class RegisterError(CpuError):
    """General register index outside V0..VF."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Invalid register index: {index}")


class UnknownInstruction(CpuError):
    """Instruction word that matches no opcode table entry."""

    def __init__(self, word: int):
        self.word = word
        super().__init__(f"Unknown instruction: 0x{word:04X}")


class InputClosed(Chip8Error):
    """The keypad was closed while the machine waited for a key."""


OutOfRangeAccess = AddressError
InvalidRegister = RegisterError
