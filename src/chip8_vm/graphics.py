"""Graphics: sprites and the logical monochrome framebuffer.

The framebuffer is pure state. Painting it is left to an external
renderer, which reads pixels through pixel_at() and learns about changes
through listeners registered with add_listener().

Drawing XORs sprite bits onto the grid. Coordinates wrap around both
axes instead of clipping. A draw reports a collision when at least one
pixel goes from set to unset.
"""

from typing import Callable, List, Sequence


WIDTH = 64
HEIGHT = 32

FONT_GLYPH_SIZE = 5


class Sprite:
    """Bitmap of up to 15 rows, 8 pixels wide.

    Attributes:
        rows: One list of booleans per row, MAX_WIDTH entries each
    """

    MAX_WIDTH = 8
    MAX_HEIGHT = 15

    def __init__(self, data: Sequence[int]):
        """Build a sprite from row bytes, most significant bit leftmost.

        Raises:
            ValueError: If more than MAX_HEIGHT rows are given
        """
        if len(data) > self.MAX_HEIGHT:
            raise ValueError(f"Too many bytes in sprite data: {len(data)}")
        self.rows: List[List[bool]] = [
            [bool((byte >> (self.MAX_WIDTH - col - 1)) & 0x1) for col in range(self.MAX_WIDTH)]
            for byte in data
        ]

    @classmethod
    def from_string(cls, text: str) -> "Sprite":
        """Build a sprite from lines where '*' marks a set pixel."""
        data = []
        for line in text.split("\n"):
            byte = 0
            for col, char in enumerate(line[:cls.MAX_WIDTH]):
                if char == "*":
                    byte |= 1 << (cls.MAX_WIDTH - col - 1)
            data.append(byte)
        return cls(data)

    def __getitem__(self, pos) -> bool:
        row, col = pos
        return self.rows[row][col]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def height(self) -> int:
        return len(self.rows)

    def to_bytes(self) -> bytes:
        """Pack rows back into bytes."""
        out = bytearray()
        for row in self.rows:
            byte = 0
            for col, bit in enumerate(row):
                if bit:
                    byte |= 1 << (self.MAX_WIDTH - col - 1)
            out.append(byte)
        return bytes(out)

    def __str__(self) -> str:
        return "\n".join("".join("*" if bit else " " for bit in row) for row in self.rows)


# Hex digit glyphs 0-F, 5 rows each
STANDARD_SPRITES = (
    Sprite([0xF0, 0x90, 0x90, 0x90, 0xF0]),  # 0
    Sprite([0x20, 0x60, 0x20, 0x20, 0x70]),  # 1
    Sprite([0xF0, 0x10, 0xF0, 0x80, 0xF0]),  # 2
    Sprite([0xF0, 0x10, 0xF0, 0x10, 0xF0]),  # 3
    Sprite([0x90, 0x90, 0xF0, 0x10, 0x10]),  # 4
    Sprite([0xF0, 0x80, 0xF0, 0x10, 0xF0]),  # 5
    Sprite([0xF0, 0x80, 0xF0, 0x90, 0xF0]),  # 6
    Sprite([0xF0, 0x10, 0x20, 0x40, 0x40]),  # 7
    Sprite([0xF0, 0x90, 0xF0, 0x90, 0xF0]),  # 8
    Sprite([0xF0, 0x90, 0xF0, 0x10, 0xF0]),  # 9
    Sprite([0xF0, 0x90, 0xF0, 0x90, 0x90]),  # A
    Sprite([0xE0, 0x90, 0xE0, 0x90, 0xE0]),  # B
    Sprite([0xF0, 0x80, 0x80, 0x80, 0xF0]),  # C
    Sprite([0xE0, 0x90, 0x90, 0x90, 0xE0]),  # D
    Sprite([0xF0, 0x80, 0xF0, 0x80, 0xF0]),  # E
    Sprite([0xF0, 0x80, 0xF0, 0x80, 0x80]),  # F
)


def standard_sprite(digit: int) -> Sprite:
    """Glyph for a hex digit 0-F."""
    if not 0 <= digit <= 0xF:
        raise ValueError(f"Invalid standard sprite requested: {digit}")
    return STANDARD_SPRITES[digit]


class Framebuffer:
    """WIDTH x HEIGHT grid of boolean pixels.

    The execution engine is the only writer. Readers on other threads may
    see a frame mid-update.
    """

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        self.width = width
        self.height = height
        self._pixels: List[List[bool]] = [[False] * width for _ in range(height)]
        self._listeners: List[Callable[["Framebuffer"], None]] = []

    def add_listener(self, callback: Callable[["Framebuffer"], None]) -> None:
        """Register a callback invoked whenever the screen needs a repaint."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["Framebuffer"], None]) -> None:
        self._listeners.remove(callback)

    def pixel_at(self, x: int, y: int) -> bool:
        """Pixel state at (x, y), with coordinates wrapped."""
        return self._pixels[y % self.height][x % self.width]

    def clear(self) -> None:
        """Turn every pixel off and request a full repaint."""
        for row in self._pixels:
            for x in range(self.width):
                row[x] = False
        self._notify()

    def draw(self, x: int, y: int, bit: bool) -> bool:
        """XOR one pixel at the wrapped position.

        Returns:
            True if the pixel was turned from on to off
        """
        changed, erased = self._xor(x, y, bit)
        if changed:
            self._notify()
        return erased

    def draw_sprite(self, sprite: Sprite, x: int, y: int) -> bool:
        """XOR a sprite onto the grid with its top-left corner at (x, y).

        Rows and columns that run off an edge wrap to the opposite side.

        Returns:
            True if any pixel was turned from on to off
        """
        collided = False
        changed = False
        for row in range(len(sprite)):
            for col in range(Sprite.MAX_WIDTH):
                c, e = self._xor(x + col, y + row, sprite[row, col])
                changed = changed or c
                collided = collided or e
        if changed:
            self._notify()
        return collided

    def rows(self) -> List[List[bool]]:
        """Copy of the grid, one list per row."""
        return [list(row) for row in self._pixels]

    def _xor(self, x: int, y: int, bit: bool):
        x %= self.width
        y %= self.height
        old = self._pixels[y][x]
        new = old ^ bool(bit)
        self._pixels[y][x] = new
        return old != new, old and not new

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    def __str__(self) -> str:
        return "\n".join("".join("*" if pixel else " " for pixel in row) for row in self._pixels)
