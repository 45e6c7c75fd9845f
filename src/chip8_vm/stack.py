"""Stack: fixed-depth call/return stack stored in machine memory.

Addresses are written big-endian, two bytes each, into a reserved window
starting at `offset`. Choosing an offset that does not overlap the loaded
program is the caller's job; the stack does not check it.
"""

from .errors import StackOverflow, StackUnderflow
from .memory import Memory


MAX_DEPTH = 16

# An address on the stack is 16-bit, 2 bytes
ADDR_SIZE = 2


class Stack:
    """Call stack backed by a Memory window.

    Attributes:
        offset: First address of the reserved window
        depth: Number of pushed, un-popped addresses
    """

    def __init__(self, memory: Memory, offset: int):
        self._mem = memory
        self.offset = offset
        self.depth = 0

    def __len__(self) -> int:
        return self.depth

    @property
    def sp(self) -> int:
        """Address of the most recently pushed entry."""
        if self.depth == 0:
            raise StackUnderflow("Stack is empty")
        return self.offset + ADDR_SIZE * (self.depth - 1)

    def push(self, addr: int) -> None:
        """Push a 16-bit return address.

        Raises:
            StackOverflow: If MAX_DEPTH addresses are already on the stack
        """
        if self.depth >= MAX_DEPTH:
            raise StackOverflow(f"Stack depth limit ({MAX_DEPTH}) reached")
        slot = self.offset + ADDR_SIZE * self.depth
        self._mem.write_block(((addr >> 8) & 0xFF, addr & 0xFF), slot)
        self.depth += 1

    def pop(self) -> int:
        """Remove and return the most recently pushed address.

        Raises:
            StackUnderflow: If the stack is empty
        """
        addr = self.peek()
        self.depth -= 1
        return addr

    def peek(self) -> int:
        """Return the most recently pushed address without removing it."""
        hi, lo = self._mem.read_block(self.sp, ADDR_SIZE)
        return (hi << 8) | lo
