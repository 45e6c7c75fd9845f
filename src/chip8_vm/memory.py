"""Memory: flat 4KB byte-addressable store.

Every address must lie in [0x000, 0xFFF]. Writes are truncated to the
low 8 bits, the way values land on an 8-bit bus; only the address is
ever checked.
"""

from typing import Iterable

from .errors import AddressError
from .graphics import Sprite


START_ADDRESS = 0x000
END_ADDRESS = 0xFFF
SIZE = END_ADDRESS - START_ADDRESS + 1

ELEM_MASK = 0xFF


def truncate(value: int) -> int:
    """Mask a value to one byte."""
    return value & ELEM_MASK


def valid_address(address: int) -> bool:
    return START_ADDRESS <= address <= END_ADDRESS


class Memory:
    """4096 bytes of machine memory, zeroed at power-on."""

    def __init__(self):
        self._mem = bytearray(SIZE)

    def __len__(self) -> int:
        return SIZE

    def read(self, address: int) -> int:
        """Read one byte.

        Raises:
            AddressError: If address is outside memory
        """
        if not valid_address(address):
            raise AddressError(address, "read")
        return self._mem[address]

    def write(self, address: int, value: int) -> None:
        """Write one byte, keeping only the low 8 bits of value.

        Raises:
            AddressError: If address is outside memory
        """
        if not valid_address(address):
            raise AddressError(address, "write")
        self._mem[address] = truncate(value)

    def read_block(self, address: int, length: int) -> bytes:
        """Read `length` consecutive bytes starting at address.

        The whole range is checked before anything is read; the first
        out-of-range address is reported.
        """
        if length < 0:
            raise ValueError(f"Negative block length: {length}")
        self._check_range(address, length, "read")
        return bytes(self._mem[address:address + length])

    def write_block(self, data: Iterable[int], address: int) -> None:
        """Write a sequence of values starting at address.

        Each value is truncated to a byte. Nothing is written if any part
        of the range is out of bounds.
        """
        values = [truncate(v) for v in data]
        self._check_range(address, len(values), "write")
        self._mem[address:address + len(values)] = bytes(values)

    def write_sprite(self, sprite: Sprite, address: int) -> None:
        """Pack a sprite's rows into bytes and store them at address."""
        self.write_block(sprite.to_bytes(), address)

    def _check_range(self, address: int, length: int, operation: str) -> None:
        if not valid_address(address):
            raise AddressError(address, operation)
        last = address + length - 1
        if length > 0 and not valid_address(last):
            raise AddressError(END_ADDRESS + 1, operation)
