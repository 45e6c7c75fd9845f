"""Program: a CHIP-8 program image as a list of 16-bit instruction words."""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .processor import INSTRUCTION_SIZE


log = logging.getLogger(__name__)


class Program:
    """Big-endian instruction words read from a program image.

    Attributes:
        words: Instruction words in load order
        path: Source file, if loaded from disk
    """

    def __init__(self, words: List[int], path: Optional[Path] = None):
        self.words = [word & 0xFFFF for word in words]
        self.path = path

    @classmethod
    def from_bytes(cls, data: bytes, path: Optional[Path] = None) -> "Program":
        """Split raw bytes into words. A trailing odd byte is dropped."""
        usable = len(data) - len(data) % INSTRUCTION_SIZE
        if usable != len(data):
            log.warning("Dropping trailing odd byte from program image")
        words = [
            (data[index] << 8) | data[index + 1]
            for index in range(0, usable, INSTRUCTION_SIZE)
        ]
        return cls(words, path)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Program":
        """Read a binary program image from disk."""
        path = Path(path)
        log.info("Reading program data from %s", path)
        program = cls.from_bytes(path.read_bytes(), path)
        log.info("Program loaded: %d bytes", program.size_bytes)
        return program

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, index: int) -> int:
        return self.words[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self.words)

    @property
    def size_bytes(self) -> int:
        return len(self.words) * INSTRUCTION_SIZE

    def byte_pairs(self) -> Iterator[Tuple[int, int]]:
        """Yield each word as (high byte, low byte)."""
        for word in self.words:
            yield word >> 8, word & 0xFF

    def to_bytes(self) -> bytes:
        return bytes(byte for pair in self.byte_pairs() for byte in pair)
