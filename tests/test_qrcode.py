import pytest
from hypothesis import given, settings, strategies as st

from btkit.qrcode import (
    QrCode,
    QrCodeError,
    encode_binary,
    encode_segments,
    encode_segments_advanced,
    encode_text,
)
from btkit.qrecc import Ecc
from btkit.qrmatrix import Grid, Mask, penalty_score
from btkit.qrsegment import make_alphanumeric, make_bytes, make_numeric


def _format_copies(qr):
    size = qr.size
    first = [qr.get_module(8, i) for i in range(6)]
    first += [qr.get_module(8, 7), qr.get_module(8, 8), qr.get_module(7, 8)]
    first += [qr.get_module(14 - i, 8) for i in range(9, 15)]
    second = [qr.get_module(size - 1 - i, 8) for i in range(8)]
    second += [qr.get_module(8, size - 15 + i) for i in range(8, 15)]
    return first, second


def _bits_to_int(bits):
    return sum(1 << i for i, bit in enumerate(bits) if bit)


def test_hello_world_version_and_boosted_ecl():
    qr = encode_text("Hello, world!", Ecc.LOW)
    assert qr.version == 1
    assert qr.ecl == Ecc.MEDIUM
    assert qr.size == 21


def test_no_boost_keeps_level():
    qr = encode_text("Hello, world!", Ecc.LOW, boost_ecl=False)
    assert qr.ecl == Ecc.LOW


def test_empty_text_uses_smallest_version():
    qr = encode_text("")
    assert qr.version == 1


def test_min_version_respected():
    qr = encode_text("12345", min_version=5, max_version=10)
    assert qr.version == 5
    assert qr.size == 5 * 4 + 17


def test_fixed_mask_is_used():
    qr = encode_text("HELLO WORLD", mask=Mask.MASK_2)
    assert qr.mask == Mask.MASK_2


@pytest.mark.parametrize("text", ["314159265358979", "HELLO WORLD $%*", "héllo wörld"])
def test_format_bits_encode_level_and_mask(text):
    qr = encode_text(text, Ecc.QUARTILE, mask=Mask.MASK_5, boost_ecl=False)
    first, second = _format_copies(qr)
    assert first == second
    data = (_bits_to_int(first) ^ 0x5412) >> 10
    assert data == (qr.ecl.format_bits << 3 | int(qr.mask))


def test_finder_pattern_and_dark_module():
    qr = encode_text("finder")
    size = qr.size
    for cx, cy in ((3, 3), (size - 4, 3), (3, size - 4)):
        assert qr.get_module(cx, cy) is True
        assert qr.get_module(cx - 3, cy - 3) is True
        assert qr.get_module(cx - 2, cy - 2) is False
    assert qr.get_module(7, 7) is False
    assert qr.get_module(8, size - 8) is True


def test_timing_patterns_alternate():
    qr = encode_text("timing pattern check", Ecc.HIGH)
    size = qr.size
    for i in range(8, size - 8):
        assert qr.get_module(i, 6) == (i % 2 == 0)
        assert qr.get_module(6, i) == (i % 2 == 0)


def test_out_of_bounds_modules_are_light():
    qr = encode_text("bounds")
    assert qr.get_module(-1, 0) is False
    assert qr.get_module(0, qr.size) is False
    assert qr.get_module(qr.size, qr.size) is False


def test_to_rows_matches_get_module():
    qr = encode_text("rows")
    rows = qr.to_rows()
    assert len(rows) == qr.size
    assert all(len(row) == qr.size for row in rows)
    assert all(rows[y][x] == qr.get_module(x, y)
               for y in range(qr.size) for x in range(qr.size))


def test_encode_segments_matches_encode_text_alphanumeric():
    text = "HELLO WORLD"
    assert encode_segments([make_alphanumeric(text)]) == encode_text(text)


def test_encode_segments_matches_encode_text_numeric():
    digits = "0123456789012345"
    assert encode_segments([make_numeric(digits)], Ecc.MEDIUM) == encode_text(digits, Ecc.MEDIUM)


def test_encode_binary_matches_byte_text():
    assert encode_binary(b"abc") == encode_text("abc")
    assert encode_segments([make_bytes(b"abc")]) == encode_binary(b"abc")


def test_auto_mask_has_minimal_penalty():
    text = "mask choice"
    auto = encode_text(text, Ecc.LOW)
    scores = {}
    for mask in (m for m in Mask if m != Mask.AUTO):
        fixed = encode_text(text, Ecc.LOW, mask=mask)
        grid = Grid(fixed.size)
        for y, row in enumerate(fixed.to_rows()):
            for x, dark in enumerate(row):
                grid.set(x, y, dark)
        scores[mask] = penalty_score(grid)
    best = min(scores.values())
    assert scores[auto.mask] == best
    assert auto.mask == next(m for m, s in scores.items() if s == best)
    assert auto == encode_text(text, Ecc.LOW, mask=auto.mask)


def test_mixed_segments():
    qr = encode_segments_advanced(
        [make_alphanumeric("ABC"), make_numeric("123")], Ecc.LOW, 1, 40, Mask.MASK_0, False
    )
    assert qr.ecl == Ecc.LOW
    assert qr.mask == Mask.MASK_0
    assert qr.version == 1


def test_too_long_binary_raises():
    with pytest.raises(QrCodeError):
        encode_binary(b"\x00" * 3000)


def test_too_long_for_version_range_raises():
    with pytest.raises(QrCodeError):
        encode_text("x" * 100, max_version=1)


def test_invalid_version_range_raises():
    with pytest.raises(ValueError):
        encode_text("abc", min_version=5, max_version=4)
    with pytest.raises(ValueError):
        encode_text("abc", min_version=0)
    with pytest.raises(ValueError):
        encode_segments_advanced([], Ecc.LOW, 1, 41, Mask.AUTO, True)


def test_constructor_rejects_wrong_grid():
    with pytest.raises(ValueError):
        QrCode(2, Ecc.LOW, Mask.MASK_0, Grid(21))
    with pytest.raises(ValueError):
        QrCode(1, Ecc.LOW, Mask.AUTO, Grid(21))


@settings(max_examples=15, deadline=None)
@given(st.binary(min_size=0, max_size=120))
def test_binary_version_is_minimal(data):
    qr = encode_binary(data, Ecc.LOW, mask=Mask.MASK_1)
    assert qr.size == qr.version * 4 + 17
    assert qr.get_module(8, qr.size - 8) is True
    if qr.version > 1:
        with pytest.raises(QrCodeError):
            encode_binary(data, Ecc.LOW, max_version=qr.version - 1, mask=Mask.MASK_1)