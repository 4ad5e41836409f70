import pytest
from hypothesis import given
from hypothesis import strategies as st

from btkit.qrsegment import (
    ALPHANUMERIC_CHARSET,
    BitBuffer,
    Mode,
    Segment,
    calc_segment_bit_length,
    calc_segment_buffer_size,
    get_total_bits,
    is_alphanumeric,
    is_numeric,
    make_alphanumeric,
    make_bytes,
    make_eci,
    make_numeric,
    num_char_count_bits,
)


def _read(bits, start, count):
    value = 0
    for bit in bits[start:start + count]:
        value = (value << 1) | bit
    return value


def _decode_numeric(segment):
    bits = list(segment)
    out = []
    pos = 0
    remaining = segment.num_chars
    while remaining > 0:
        group = min(3, remaining)
        width = group * 3 + 1
        out.append(str(_read(bits, pos, width)).zfill(group))
        pos += width
        remaining -= group
    return "".join(out)


def _decode_alphanumeric(segment):
    bits = list(segment)
    out = []
    pos = 0
    remaining = segment.num_chars
    while remaining >= 2:
        value = _read(bits, pos, 11)
        out.append(ALPHANUMERIC_CHARSET[value // 45] + ALPHANUMERIC_CHARSET[value % 45])
        pos += 11
        remaining -= 2
    if remaining:
        out.append(ALPHANUMERIC_CHARSET[_read(bits, pos, 6)])
    return "".join(out)


def test_segments_carry_mode_indicators_from_format():
    modes = [
        make_numeric("1").mode,
        make_alphanumeric("A").mode,
        make_bytes(b"a").mode,
        make_eci(1).mode,
    ]
    assert [int(m) for m in modes] == [0x1, 0x2, 0x4, 0x7]
    assert int(Mode.KANJI) == 0x8
    assert calc_segment_bit_length(Mode.KANJI, 2) == 26


def test_bit_buffer_appends_big_endian():
    buffer = BitBuffer()
    buffer.append_bits(5, 3)
    buffer.append_bits(0x1F, 5)
    buffer.append_bits(1, 1)
    assert list(buffer) == [1, 0, 1, 1, 1, 1, 1, 1, 1]
    assert len(buffer) == 9
    assert buffer.to_bytes() == bytes([0xBF, 0x80])


def test_bit_buffer_zero_bits_is_noop():
    buffer = BitBuffer()
    buffer.append_bits(0, 0)
    assert len(buffer) == 0
    assert buffer.to_bytes() == b""


@pytest.mark.parametrize("value,num_bits", [(8, 3), (-1, 4), (0, 17), (0, -1)])
def test_bit_buffer_rejects_bad_arguments(value, num_bits):
    with pytest.raises(ValueError):
        BitBuffer().append_bits(value, num_bits)


@pytest.mark.parametrize(
    "text,numeric,alnum",
    [
        ("", True, True),
        ("0123456789", True, True),
        ("HELLO WORLD", False, True),
        ("hello", False, False),
        ("12a", False, False),
        ("$%*+-./:", False, True),
    ],
)
def test_character_class_checks(text, numeric, alnum):
    assert is_numeric(text) is numeric
    assert is_alphanumeric(text) is alnum


def test_is_numeric_rejects_non_ascii_digits():
    assert is_numeric("\u0663") is False


def test_calc_segment_bit_length_byte_and_eci():
    assert calc_segment_bit_length(Mode.BYTE, 10) == 80
    assert calc_segment_bit_length(Mode.ECI, 0) == 24


def test_calc_segment_bit_length_overflow_returns_none():
    assert calc_segment_bit_length(Mode.NUMERIC, 32768) is None
    assert calc_segment_bit_length(Mode.BYTE, 4096) is None
    assert calc_segment_buffer_size(Mode.BYTE, 4096) is None


def test_calc_segment_bit_length_eci_with_chars_raises():
    with pytest.raises(ValueError):
        calc_segment_bit_length(Mode.ECI, 1)


def test_calc_segment_buffer_size_rounds_up_bits():
    for mode in (Mode.NUMERIC, Mode.ALPHANUMERIC, Mode.BYTE, Mode.KANJI):
        for count in range(0, 20):
            bits = calc_segment_bit_length(mode, count)
            size = calc_segment_buffer_size(mode, count)
            assert size * 8 >= bits > size * 8 - 8 or (bits == 0 and size == 0)


def test_make_bytes_keeps_data():
    seg = make_bytes(b"\x01\xff")
    assert seg == Segment(Mode.BYTE, 2, b"\x01\xff", 16)


def test_make_bytes_too_long_raises():
    with pytest.raises(ValueError):
        make_bytes(bytes(4096))


@given(st.text(alphabet="0123456789", max_size=60))
def test_make_numeric_round_trip(digits):
    seg = make_numeric(digits)
    assert seg.mode == Mode.NUMERIC
    assert seg.num_chars == len(digits)
    assert seg.bit_length == calc_segment_bit_length(Mode.NUMERIC, len(digits))
    assert len(seg.data) == calc_segment_buffer_size(Mode.NUMERIC, len(digits))
    assert _decode_numeric(seg) == digits


def test_make_numeric_rejects_letters():
    with pytest.raises(ValueError):
        make_numeric("12A")


@given(st.text(alphabet=ALPHANUMERIC_CHARSET, max_size=60))
def test_make_alphanumeric_round_trip(text):
    seg = make_alphanumeric(text)
    assert seg.mode == Mode.ALPHANUMERIC
    assert seg.bit_length == calc_segment_bit_length(Mode.ALPHANUMERIC, len(text))
    assert _decode_alphanumeric(seg) == text


def test_make_alphanumeric_rejects_lowercase():
    with pytest.raises(ValueError):
        make_alphanumeric("abc")


def test_make_eci_single_byte():
    seg = make_eci(127)
    assert seg == Segment(Mode.ECI, 0, bytes([127]), 8)


@pytest.mark.parametrize("value,width", [(128, 16), (16383, 16), (16384, 24), (999999, 24)])
def test_make_eci_widths(value, width):
    seg = make_eci(value)
    assert seg.bit_length == width
    assert seg.num_chars == 0
    assert seg.bit_length <= calc_segment_bit_length(Mode.ECI, 0)


@pytest.mark.parametrize("value", [-1, 1000000])
def test_make_eci_out_of_range(value):
    with pytest.raises(ValueError):
        make_eci(value)


def test_num_char_count_bits_table():
    assert [num_char_count_bits(Mode.BYTE, v) for v in (1, 9, 10, 26, 27, 40)] == [8, 8, 16, 16, 16, 16]
    assert [num_char_count_bits(Mode.NUMERIC, v) for v in (1, 10, 27)] == [10, 12, 14]
    assert num_char_count_bits(Mode.ECI, 20) == 0


@pytest.mark.parametrize("version", [0, 41])
def test_num_char_count_bits_bad_version(version):
    with pytest.raises(ValueError):
        num_char_count_bits(Mode.BYTE, version)


def test_get_total_bits_sums_headers():
    segs = [make_numeric("123"), make_bytes(b"ab")]
    total = get_total_bits(segs, 1)
    expected = sum(4 + num_char_count_bits(s.mode, 1) + s.bit_length for s in segs)
    assert total == expected
    assert get_total_bits([], 1) == 0


def test_get_total_bits_count_field_overflow():
    seg = make_bytes(bytes(256))
    assert get_total_bits([seg], 1) is None
    assert get_total_bits([seg], 10) == 4 + 16 + seg.bit_length


def test_get_total_bits_total_overflow():
    seg = make_bytes(bytes(4000))
    assert get_total_bits([seg, seg], 40) is None