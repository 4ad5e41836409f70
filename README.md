# btkit

Small, dependency-free building blocks for Bitcoin tooling:

- `btkit.qrsegment`, `btkit.qrecc`, `btkit.qrmatrix`, `btkit.qrcode`: a complete
  QR Code (Model 2, versions 1–40, all four error correction levels) encoder
- `btkit.termio`: raw-mode terminal helpers built on VT100 escape codes

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## QR codes

```python
from btkit.qrcode import encode_text
from btkit.qrecc import Ecc
from btkit.qrmatrix import Mask

qr = encode_text("HELLO WORLD", Ecc.LOW, 1, 40, Mask.AUTO, True)
print(qr.version, qr.size, qr.ecl.name, qr.mask.name)
for row in qr.to_rows():
    print("".join("##" if dark else "  " for dark in row))
```

`encode_text` picks numeric mode for digit strings, alphanumeric mode for text in
the QR alphanumeric set (`0-9`, `A-Z`, space and `$%*+-./:`), and otherwise byte
mode over the UTF-8 encoding. All arguments after the text have defaults:
`Ecc.LOW`, versions 1 to 40, `Mask.AUTO` and `boost_ecl=True`. The smallest
version in the range that holds the data is used; with `boost_ecl` the error
correction level is raised as far as that version allows. With `Mask.AUTO` the
mask with the lowest penalty score is chosen.

`encode_binary(data, ...)` encodes bytes in byte mode. For mixed content, build
segments with `btkit.qrsegment` and pass them to `encode_segments(segments, ecl)`
or `encode_segments_advanced(segments, ecl, min_version, max_version, mask, boost_ecl)`:

```python
from btkit.qrcode import encode_segments
from btkit.qrsegment import make_alphanumeric, make_bytes, make_numeric

qr = encode_segments([make_alphanumeric("PAY:"), make_numeric("0123456789"), make_bytes(b"!")])
```

`make_eci(assign_val)` makes an Extended Channel Interpretation designator.

A `QrCode` has `version`, `ecl`, `mask` and `size`; `get_module(x, y)` returns
`True` for a dark module and `False` for light ones or coordinates outside the
symbol, and `to_rows()` returns the grid as tuples of booleans, top to bottom.

Data that does not fit any version of the requested range raises
`btkit.qrcode.QrCodeError` (a `ValueError`). A version range outside 1–40, or with
the minimum above the maximum, raises `ValueError`, as do segment constructors
given characters their mode cannot hold.

The lower layers are usable on their own:

- `btkit.qrsegment`: `Mode`, `Segment`, `BitBuffer`, `is_numeric`,
  `is_alphanumeric`, `calc_segment_bit_length`, `calc_segment_buffer_size`
  (both return `None` when the segment is too long), `num_char_count_bits`,
  `get_total_bits`.
- `btkit.qrecc`: `Ecc`, GF(2^8) arithmetic (`reed_solomon_multiply`),
  `reed_solomon_compute_divisor`, `reed_solomon_compute_remainder`,
  `get_num_raw_data_modules`, `get_num_data_codewords`, `add_ecc_and_interleave`.
- `btkit.qrmatrix`: `Mask`, `Grid`, `get_alignment_pattern_positions`,
  `function_modules`, `draw_light_function_modules`, `draw_format_bits`,
  `draw_codewords`, `apply_mask` (applying the same mask twice undoes it) and
  `penalty_score`.

## Terminal

```python
import sys
from btkit.termio import Terminal

with Terminal(sys.stdin, sys.stdout, clear_screen=True) as term:
    # echo and line buffering are off; the screen was saved and cleared
    term.set_foreground_color("green")
    term.move_cursor(1, 1)
    term.refresh()
    key = term.get_char()
# the terminal mode and screen are restored
```

`init_terminal()` and `restore_terminal()` do the same work explicitly. Other
methods: `get_rows()` and `get_cols()` (0 when the size is unknown),
`get_cursor_row()` (queries the terminal with `ESC[6n`), `clear_input()`,
`show_cursor()` and `beep()`. `set_foreground_color` takes a lowercase color name
from `Color` (`black`, `red`, `green`, `yellow`, `blue`, `magenta`, `cyan`,
`white`); any other name selects blue. `parse_cursor_row("\033[12;40R")` returns
`12`.

Raw mode needs the POSIX `termios` module and a real terminal on the input
stream; otherwise the mode changes are skipped and only the escape codes are
written.

## What this package does not do

btkit does not handle keys, addresses or any Bitcoin encoding (base58, base58check,
bech32), does not talk to the network and stores nothing. It has no command-line
program: QR codes are returned as data, and rendering them is up to the caller.