"""QR Code data segments: modes, bit buffers and segment construction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, Optional, Sequence

VERSION_MIN = 1
VERSION_MAX = 40
MAX_BIT_LENGTH = 32767
ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"
_ALPHANUMERIC_INDEX = {char: index for index, char in enumerate(ALPHANUMERIC_CHARSET)}


class Mode(IntEnum):
    """How a segment's data bits are interpreted; the value is the mode indicator."""

    NUMERIC = 0x1
    ALPHANUMERIC = 0x2
    BYTE = 0x4
    KANJI = 0x8
    ECI = 0x7


_CHAR_COUNT_BITS = {
    Mode.NUMERIC: (10, 12, 14),
    Mode.ALPHANUMERIC: (9, 11, 13),
    Mode.BYTE: (8, 16, 16),
    Mode.KANJI: (8, 10, 12),
    Mode.ECI: (0, 0, 0),
}


class BitBuffer:
    """A growable sequence of bits packed big-endian into bytes."""

    def __init__(self) -> None:
        self._data = bytearray()
        self.bit_length = 0

    def append_bits(self, value: int, num_bits: int) -> None:
        """Append the ``num_bits`` low-order bits of ``value``, most significant first."""
        if not 0 <= num_bits <= 16:
            raise ValueError(f"Bit count {num_bits} is out of range 0..16.")
        if value < 0 or value >> num_bits:
            raise ValueError(f"Value {value} does not fit in {num_bits} bits.")
        for shift in reversed(range(num_bits)):
            if self.bit_length % 8 == 0:
                self._data.append(0)
            bit = (value >> shift) & 1
            self._data[self.bit_length >> 3] |= bit << (7 - (self.bit_length & 7))
            self.bit_length += 1

    def __len__(self) -> int:
        return self.bit_length

    def __iter__(self) -> Iterator[int]:
        return _iter_bits(self._data, self.bit_length)

    def to_bytes(self) -> bytes:
        """Return the packed bits; unused trailing bits of the last byte are zero."""
        return bytes(self._data)


def _iter_bits(data: bytes, bit_length: int) -> Iterator[int]:
    for index in range(bit_length):
        yield (data[index >> 3] >> (7 - (index & 7))) & 1


@dataclass(frozen=True)
class Segment:
    """A segment of character, binary or control data in a QR Code."""

    mode: Mode
    num_chars: int
    data: bytes
    bit_length: int

    def __iter__(self) -> Iterator[int]:
        """Iterate over the segment's data bits."""
        return _iter_bits(self.data, self.bit_length)


def is_numeric(text: str) -> bool:
    """True if every character is an ASCII digit."""
    return all("0" <= char <= "9" for char in text)


def is_alphanumeric(text: str) -> bool:
    """True if every character belongs to the QR alphanumeric set."""
    return all(char in _ALPHANUMERIC_INDEX for char in text)


def calc_segment_bit_length(mode: Mode, num_chars: int) -> Optional[int]:
    """Number of data bits for a segment, or None if it exceeds the limit.

    For ECI mode ``num_chars`` must be 0 and the worst case is returned.
    """
    if num_chars < 0:
        raise ValueError("Character count cannot be negative.")
    if num_chars > MAX_BIT_LENGTH:
        return None
    if mode == Mode.NUMERIC:
        result = (num_chars * 10 + 2) // 3
    elif mode == Mode.ALPHANUMERIC:
        result = (num_chars * 11 + 1) // 2
    elif mode == Mode.BYTE:
        result = num_chars * 8
    elif mode == Mode.KANJI:
        result = num_chars * 13
    elif mode == Mode.ECI and num_chars == 0:
        result = 3 * 8
    else:
        raise ValueError(f"Invalid mode {mode!r} for {num_chars} characters.")
    return None if result > MAX_BIT_LENGTH else result


def calc_segment_buffer_size(mode: Mode, num_chars: int) -> Optional[int]:
    """Number of bytes needed for a segment's data, or None if it is too long."""
    bits = calc_segment_bit_length(mode, num_chars)
    return None if bits is None else (bits + 7) // 8


def _require_bit_length(mode: Mode, num_chars: int) -> int:
    bits = calc_segment_bit_length(mode, num_chars)
    if bits is None:
        raise ValueError(f"Segment of {num_chars} characters is too long.")
    return bits


def make_bytes(data: bytes) -> Segment:
    """Make a byte-mode segment holding ``data``."""
    data = bytes(data)
    bits = _require_bit_length(Mode.BYTE, len(data))
    return Segment(Mode.BYTE, len(data), data, bits)


def make_numeric(digits: str) -> Segment:
    """Make a numeric-mode segment from a string of decimal digits."""
    if not is_numeric(digits):
        raise ValueError("Numeric segment may only contain the digits 0-9.")
    expected = _require_bit_length(Mode.NUMERIC, len(digits))
    buffer = BitBuffer()
    for start in range(0, len(digits), 3):
        group = digits[start:start + 3]
        buffer.append_bits(int(group), len(group) * 3 + 1)
    assert buffer.bit_length == expected
    return Segment(Mode.NUMERIC, len(digits), buffer.to_bytes(), buffer.bit_length)


def make_alphanumeric(text: str) -> Segment:
    """Make an alphanumeric-mode segment from text in the QR alphanumeric set."""
    if not is_alphanumeric(text):
        raise ValueError("Text contains characters outside the alphanumeric set.")
    expected = _require_bit_length(Mode.ALPHANUMERIC, len(text))
    buffer = BitBuffer()
    for start in range(0, len(text), 2):
        pair = text[start:start + 2]
        if len(pair) == 2:
            value = _ALPHANUMERIC_INDEX[pair[0]] * 45 + _ALPHANUMERIC_INDEX[pair[1]]
            buffer.append_bits(value, 11)
        else:
            buffer.append_bits(_ALPHANUMERIC_INDEX[pair], 6)
    assert buffer.bit_length == expected
    return Segment(Mode.ALPHANUMERIC, len(text), buffer.to_bytes(), buffer.bit_length)


def make_eci(assign_val: int) -> Segment:
    """Make an Extended Channel Interpretation designator segment."""
    buffer = BitBuffer()
    if assign_val < 0:
        raise ValueError("ECI assignment value cannot be negative.")
    if assign_val < (1 << 7):
        buffer.append_bits(assign_val, 8)
    elif assign_val < (1 << 14):
        buffer.append_bits(2, 2)
        buffer.append_bits(assign_val, 14)
    elif assign_val < 1_000_000:
        buffer.append_bits(6, 3)
        buffer.append_bits(assign_val >> 10, 11)
        buffer.append_bits(assign_val & 0x3FF, 10)
    else:
        raise ValueError("ECI assignment value is out of range.")
    return Segment(Mode.ECI, 0, buffer.to_bytes(), buffer.bit_length)


def num_char_count_bits(mode: Mode, version: int) -> int:
    """Width of the character count field for ``mode`` at ``version``."""
    if not VERSION_MIN <= version <= VERSION_MAX:
        raise ValueError(f"Version {version} is out of range.")
    try:
        table = _CHAR_COUNT_BITS[Mode(mode)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Invalid mode {mode!r}.") from exc
    return table[(version + 7) // 17]


def get_total_bits(segments: Iterable[Segment], version: int) -> Optional[int]:
    """Bits needed to encode ``segments`` at ``version``, or None if they cannot fit.

    None is returned when a segment's length overflows its count field or the
    total exceeds the maximum bit length.
    """
    result = 0
    for segment in segments:
        if not 0 <= segment.num_chars <= MAX_BIT_LENGTH:
            raise ValueError("Segment character count is out of range.")
        if not 0 <= segment.bit_length <= MAX_BIT_LENGTH:
            raise ValueError("Segment bit length is out of range.")
        ccbits = num_char_count_bits(segment.mode, version)
        if segment.num_chars >= (1 << ccbits):
            return None
        result += 4 + ccbits + segment.bit_length
        if result > MAX_BIT_LENGTH:
            return None
    return result


__all__: Sequence[str] = (
    "Mode",
    "Segment",
    "BitBuffer",
    "is_numeric",
    "is_alphanumeric",
    "calc_segment_bit_length",
    "calc_segment_buffer_size",
    "make_bytes",
    "make_numeric",
    "make_alphanumeric",
    "make_eci",
    "num_char_count_bits",
    "get_total_bits",
)