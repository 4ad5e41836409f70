"""QR Code module grid: function patterns, codeword placement, masking and penalties."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Iterator

from btkit.qrecc import Ecc, VERSION_MAX, VERSION_MIN, _check_version

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10
SIZE_MIN = VERSION_MIN * 4 + 17
SIZE_MAX = VERSION_MAX * 4 + 17


class Mask(IntEnum):
    """Mask pattern; AUTO asks the encoder to choose one."""

    AUTO = -1
    MASK_0 = 0
    MASK_1 = 1
    MASK_2 = 2
    MASK_3 = 3
    MASK_4 = 4
    MASK_5 = 5
    MASK_6 = 6
    MASK_7 = 7


_MASK_PATTERNS: dict[int, Callable[[int, int], bool]] = {
    0: lambda x, y: (x + y) % 2 == 0,
    1: lambda x, y: y % 2 == 0,
    2: lambda x, y: x % 3 == 0,
    3: lambda x, y: (x + y) % 3 == 0,
    4: lambda x, y: (x // 3 + y // 2) % 2 == 0,
    5: lambda x, y: x * y % 2 + x * y % 3 == 0,
    6: lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    7: lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
}


class Grid:
    """A square grid of dark (True) and light (False) modules."""

    def __init__(self, size: int) -> None:
        if not SIZE_MIN <= size <= SIZE_MAX:
            raise ValueError(f"Grid size {size} is out of range {SIZE_MIN}..{SIZE_MAX}.")
        self.size = size
        self._modules = [[False] * size for _ in range(size)]

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.size and 0 <= y < self.size):
            raise IndexError(f"Module ({x}, {y}) is outside a {self.size}x{self.size} grid.")

    def get(self, x: int, y: int) -> bool:
        """Color of the module at column ``x``, row ``y``."""
        self._check(x, y)
        return self._modules[y][x]

    def set(self, x: int, y: int, dark: bool) -> None:
        """Set the module at column ``x``, row ``y``."""
        self._check(x, y)
        self._modules[y][x] = bool(dark)

    def set_unbounded(self, x: int, y: int, dark: bool) -> None:
        """Set a module, ignoring coordinates outside the grid."""
        if 0 <= x < self.size and 0 <= y < self.size:
            self._modules[y][x] = bool(dark)

    def fill_rectangle(self, left: int, top: int, width: int, height: int) -> None:
        """Mark every module in the rectangle dark."""
        for y in range(top, top + height):
            for x in range(left, left + width):
                self.set(x, y, True)

    def rows(self) -> list[tuple[bool, ...]]:
        """The grid as a list of rows."""
        return [tuple(row) for row in self._modules]

    def columns(self) -> Iterator[tuple[bool, ...]]:
        return zip(*self._modules)

    def copy(self) -> "Grid":
        clone = Grid(self.size)
        clone._modules = [list(row) for row in self._modules]
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._modules == other._modules

    def __repr__(self) -> str:
        return f"Grid(size={self.size})"


def get_alignment_pattern_positions(version: int) -> list[int]:
    """Ascending coordinates of alignment pattern centers, used on both axes."""
    _check_version(version)
    if version == 1:
        return []
    num_align = version // 7 + 2
    if version == 32:
        step = 26
    else:
        step = (version * 4 + num_align * 2 + 1) // (num_align * 2 - 2) * 2
    last = version * 4 + 10
    return [6] + [last - step * i for i in reversed(range(num_align - 1))]


def _alignment_centers(version: int) -> Iterator[tuple[int, int]]:
    positions = get_alignment_pattern_positions(version)
    last = len(positions) - 1
    for i, px in enumerate(positions):
        for j, py in enumerate(positions):
            if (i, j) in ((0, 0), (0, last), (last, 0)):
                continue
            yield px, py


def function_modules(version: int) -> Grid:
    """A grid for ``version`` with every function module dark and the rest light."""
    _check_version(version)
    size = version * 4 + 17
    grid = Grid(size)
    grid.fill_rectangle(6, 0, 1, size)
    grid.fill_rectangle(0, 6, size, 1)
    grid.fill_rectangle(0, 0, 9, 9)
    grid.fill_rectangle(size - 8, 0, 8, 9)
    grid.fill_rectangle(0, size - 8, 9, 8)
    for x, y in _alignment_centers(version):
        grid.fill_rectangle(x - 2, y - 2, 5, 5)
    if version >= 7:
        grid.fill_rectangle(size - 11, 0, 3, 6)
        grid.fill_rectangle(0, size - 11, 6, 3)
    return grid


def draw_light_function_modules(grid: Grid, version: int) -> None:
    """Draw the light parts of function patterns and the version blocks.

    The grid must already have its function modules marked dark.
    """
    size = grid.size
    for i in range(7, size - 7, 2):
        grid.set(6, i, False)
        grid.set(i, 6, False)

    for dy in range(-4, 5):
        for dx in range(-4, 5):
            if max(abs(dx), abs(dy)) in (2, 4):
                grid.set_unbounded(3 + dx, 3 + dy, False)
                grid.set_unbounded(size - 4 + dx, 3 + dy, False)
                grid.set_unbounded(3 + dx, size - 4 + dy, False)

    for cx, cy in _alignment_centers(version):
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                grid.set(cx + dx, cy + dy, dx == 0 and dy == 0)

    if version >= 7:
        rem = version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = version << 12 | rem
        for i in range(6):
            for j in range(3):
                k = size - 11 + j
                dark = bool(bits & 1)
                grid.set(k, i, dark)
                grid.set(i, k, dark)
                bits >>= 1


def _bit(value: int, index: int) -> bool:
    return (value >> index) & 1 != 0


def draw_format_bits(grid: Grid, ecl: Ecc, mask: Mask) -> None:
    """Draw both copies of the format information for ``ecl`` and ``mask``."""
    mask = Mask(mask)
    if mask == Mask.AUTO:
        raise ValueError("A concrete mask is required to draw format bits.")
    data = Ecc(ecl).format_bits << 3 | int(mask)
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * 0x537)
    bits = (data << 10 | rem) ^ 0x5412

    for i in range(6):
        grid.set(8, i, _bit(bits, i))
    grid.set(8, 7, _bit(bits, 6))
    grid.set(8, 8, _bit(bits, 7))
    grid.set(7, 8, _bit(bits, 8))
    for i in range(9, 15):
        grid.set(14 - i, 8, _bit(bits, i))

    size = grid.size
    for i in range(8):
        grid.set(size - 1 - i, 8, _bit(bits, i))
    for i in range(8, 15):
        grid.set(8, size - 15 + i, _bit(bits, i))
    grid.set(8, size - 8, True)


def draw_codewords(grid: Grid, data: bytes) -> None:
    """Place codeword bits in the zigzag order on the light modules of ``grid``.

    The grid must have function modules dark and everything else light.
    """
    data = bytes(data)
    total = len(data) * 8
    size = grid.size
    index = 0
    right = size - 1
    while right >= 1:
        if right == 6:
            right = 5
        upward = ((right + 1) & 2) == 0
        for vert in range(size):
            y = size - 1 - vert if upward else vert
            for x in (right, right - 1):
                if index < total and not grid.get(x, y):
                    grid.set(x, y, _bit(data[index >> 3], 7 - (index & 7)))
                    index += 1
        right -= 2
    if index != total:
        raise ValueError(f"Only {index} of {total} codeword bits fit in the grid.")


def apply_mask(grid: Grid, function_grid: Grid, mask: Mask) -> None:
    """XOR the non-function modules with a mask pattern; applying twice undoes it."""
    mask = Mask(mask)
    if mask == Mask.AUTO:
        raise ValueError("A concrete mask is required.")
    if function_grid.size != grid.size:
        raise ValueError("Grid and function grid differ in size.")
    pattern = _MASK_PATTERNS[int(mask)]
    for y in range(grid.size):
        for x in range(grid.size):
            if not function_grid.get(x, y) and pattern(x, y):
                grid.set(x, y, not grid.get(x, y))


def _finder_count(history: list[int]) -> int:
    n = history[1]
    core = (n > 0 and history[2] == n and history[3] == n * 3
            and history[4] == n and history[5] == n)
    return (int(core and history[0] >= n * 4 and history[6] >= n)
            + int(core and history[6] >= n * 4 and history[0] >= n))


def _add_history(run_length: int, history: list[int], size: int) -> None:
    if history[0] == 0:
        run_length += size
    history.insert(0, run_length)
    history.pop()


def _line_penalty(line: tuple[bool, ...], size: int) -> int:
    result = 0
    run_color = False
    run_length = 0
    history = [0] * 7
    for color in line:
        if color == run_color:
            run_length += 1
            if run_length == 5:
                result += PENALTY_N1
            elif run_length > 5:
                result += 1
        else:
            _add_history(run_length, history, size)
            if not run_color:
                result += _finder_count(history) * PENALTY_N3
            run_color = color
            run_length = 1
    if run_color:
        _add_history(run_length, history, size)
        run_length = 0
    _add_history(run_length + size, history, size)
    return result + _finder_count(history) * PENALTY_N3


def penalty_score(grid: Grid) -> int:
    """Penalty used to choose the mask with the fewest undesirable features."""
    size = grid.size
    rows = grid.rows()
    result = sum(_line_penalty(row, size) for row in rows)
    result += sum(_line_penalty(column, size) for column in grid.columns())

    for upper, lower in zip(rows, rows[1:]):
        for x in range(size - 1):
            color = upper[x]
            if color == upper[x + 1] == lower[x] == lower[x + 1]:
                result += PENALTY_N2

    dark = sum(sum(row) for row in rows)
    total = size * size
    k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
    return result + k * PENALTY_N4