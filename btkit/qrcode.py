"""QR Code symbols: encoding text, binary data and segments into a module grid."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from btkit.qrecc import (
    VERSION_MAX,
    VERSION_MIN,
    Ecc,
    add_ecc_and_interleave,
    get_num_data_codewords,
)
from btkit.qrmatrix import (
    Grid,
    Mask,
    apply_mask,
    draw_codewords,
    draw_format_bits,
    draw_light_function_modules,
    function_modules,
    penalty_score,
)
from btkit.qrsegment import (
    BitBuffer,
    Mode,
    Segment,
    calc_segment_bit_length,
    calc_segment_buffer_size,
    get_total_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_numeric,
    num_char_count_bits,
)

_PAD_BYTES = (0xEC, 0x11)


class QrCodeError(ValueError):
    """Raised when the data does not fit in any allowed version."""


def _buffer_len_for_version(version: int) -> int:
    size = version * 4 + 17
    return (size * size + 7) // 8 + 1


class QrCode:
    """An immutable QR Code symbol: a square grid of dark and light modules."""

    def __init__(self, version: int, ecl: Ecc, mask: Mask, grid: Grid) -> None:
        if not VERSION_MIN <= version <= VERSION_MAX:
            raise ValueError(f"Version {version} is out of range {VERSION_MIN}..{VERSION_MAX}.")
        mask = Mask(mask)
        if mask == Mask.AUTO:
            raise ValueError("A QR Code carries a concrete mask.")
        if grid.size != version * 4 + 17:
            raise ValueError(f"Grid size {grid.size} does not match version {version}.")
        self.version = version
        self.ecl = Ecc(ecl)
        self.mask = mask
        self._grid = grid.copy()

    @property
    def size(self) -> int:
        """Side length in modules, from 21 to 177."""
        return self._grid.size

    def get_module(self, x: int, y: int) -> bool:
        """True for a dark module; coordinates outside the symbol are light."""
        if 0 <= x < self.size and 0 <= y < self.size:
            return self._grid.get(x, y)
        return False

    def to_rows(self) -> list[tuple[bool, ...]]:
        """The modules as rows from top to bottom, True meaning dark."""
        return self._grid.rows()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QrCode):
            return NotImplemented
        return (self.version, self.ecl, self.mask, self._grid) == (
            other.version, other.ecl, other.mask, other._grid)

    def __repr__(self) -> str:
        return f"QrCode(version={self.version}, ecl={self.ecl.name}, mask={self.mask.name})"


def encode_text(
    text: str,
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode text, choosing numeric, alphanumeric or byte mode."""
    if not text:
        return encode_segments_advanced([], ecl, min_version, max_version, mask, boost_ecl)
    _check_version_range(min_version, max_version)
    buf_len = _buffer_len_for_version(max_version)

    if is_numeric(text):
        needed = calc_segment_buffer_size(Mode.NUMERIC, len(text))
        if needed is None or needed > buf_len:
            raise QrCodeError("Numeric text is too long.")
        segment = make_numeric(text)
    elif is_alphanumeric(text):
        needed = calc_segment_buffer_size(Mode.ALPHANUMERIC, len(text))
        if needed is None or needed > buf_len:
            raise QrCodeError("Alphanumeric text is too long.")
        segment = make_alphanumeric(text)
    else:
        data = text.encode("utf-8")
        if len(data) > buf_len:
            raise QrCodeError("Text is too long.")
        bit_length = calc_segment_bit_length(Mode.BYTE, len(data))
        if bit_length is None:
            raise QrCodeError("Text is too long.")
        segment = Segment(Mode.BYTE, len(data), data, bit_length)
    return encode_segments_advanced([segment], ecl, min_version, max_version, mask, boost_ecl)


def encode_binary(
    data: bytes,
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode binary data in byte mode."""
    data = bytes(data)
    bit_length = calc_segment_bit_length(Mode.BYTE, len(data))
    if bit_length is None:
        raise QrCodeError("Data is too long.")
    segment = Segment(Mode.BYTE, len(data), data, bit_length)
    return encode_segments_advanced([segment], ecl, min_version, max_version, mask, boost_ecl)


def encode_segments(segments: Iterable[Segment], ecl: Ecc = Ecc.LOW) -> QrCode:
    """Encode segments over the full version range with automatic mask and ECC boost."""
    return encode_segments_advanced(segments, ecl, VERSION_MIN, VERSION_MAX, Mask.AUTO, True)


def _check_version_range(min_version: int, max_version: int) -> None:
    if not VERSION_MIN <= min_version <= max_version <= VERSION_MAX:
        raise ValueError(
            f"Version range {min_version}..{max_version} is invalid; "
            f"it must lie within {VERSION_MIN}..{VERSION_MAX}."
        )


def _choose_version(
    segments: Sequence[Segment], ecl: Ecc, min_version: int, max_version: int
) -> tuple[int, int]:
    for version in range(min_version, max_version + 1):
        capacity = get_num_data_codewords(version, ecl) * 8
        used = get_total_bits(segments, version)
        if used is not None and used <= capacity:
            return version, used
    raise QrCodeError("Data does not fit in any version of the allowed range.")


def _data_codewords(segments: Sequence[Segment], version: int, ecl: Ecc) -> bytes:
    buffer = BitBuffer()
    for segment in segments:
        buffer.append_bits(int(segment.mode), 4)
        buffer.append_bits(segment.num_chars, num_char_count_bits(segment.mode, version))
        for bit in segment:
            buffer.append_bits(bit, 1)

    capacity = get_num_data_codewords(version, ecl) * 8
    buffer.append_bits(0, min(4, capacity - len(buffer)))
    buffer.append_bits(0, -len(buffer) % 8)
    pad_index = 0
    while len(buffer) < capacity:
        buffer.append_bits(_PAD_BYTES[pad_index % 2], 8)
        pad_index += 1
    return buffer.to_bytes()


def encode_segments_advanced(
    segments: Iterable[Segment],
    ecl: Ecc = Ecc.LOW,
    min_version: int = VERSION_MIN,
    max_version: int = VERSION_MAX,
    mask: Mask = Mask.AUTO,
    boost_ecl: bool = True,
) -> QrCode:
    """Encode segments in the smallest version of the range that holds them."""
    segments = list(segments)
    _check_version_range(min_version, max_version)
    ecl = Ecc(ecl)
    mask = Mask(mask)

    version, used_bits = _choose_version(segments, ecl, min_version, max_version)
    if boost_ecl:
        for level in (Ecc.MEDIUM, Ecc.QUARTILE, Ecc.HIGH):
            if used_bits <= get_num_data_codewords(version, level) * 8:
                ecl = level

    codewords = add_ecc_and_interleave(_data_codewords(segments, version, ecl), version, ecl)
    grid = function_modules(version)
    draw_codewords(grid, codewords)
    draw_light_function_modules(grid, version)
    function_grid = function_modules(version)

    if mask == Mask.AUTO:
        min_penalty: Optional[int] = None
        for candidate in (m for m in Mask if m != Mask.AUTO):
            apply_mask(grid, function_grid, candidate)
            draw_format_bits(grid, ecl, candidate)
            penalty = penalty_score(grid)
            if min_penalty is None or penalty < min_penalty:
                mask = candidate
                min_penalty = penalty
            apply_mask(grid, function_grid, candidate)
    apply_mask(grid, function_grid, mask)
    draw_format_bits(grid, ecl, mask)
    return QrCode(version, ecl, mask, grid)