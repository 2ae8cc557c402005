# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# Copyright (C) 2026 HRDAG https://hrdag.org
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, see <https://www.gnu.org/licenses/>.
#
# ------
# smart-drivedb-parser/src/smart_drivedb/raw.py

"""Raw value decoding for SMART attribute slots.

Vendors pack raw counters into the 12-byte attribute slot in whatever
order suits them. The byte order string of a rule picks the bytes
(``v`` value, ``w`` worst, ``0``-``5`` raw bytes, ``r`` reserved) and the
format decides how the resulting integer is shown.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from .rules import AttributeRule, RawFormat

SLOT_SIZE: Final[int] = 12

# Position of each byte order token inside a 12-byte attribute slot
_TOKEN_OFFSETS: Final[dict[str, int]] = {
    'v': 3,
    'w': 4,
    '0': 5,
    '1': 6,
    '2': 7,
    '3': 8,
    '4': 9,
    '5': 10,
    'r': 11,
}


@dataclass(frozen=True)
class RawValue:
    """Decoded raw payload of one attribute."""
    format: RawFormat
    byte_order: str
    bytes_: bytes  # after reordering
    value: int | None  # comparable integer
    text: str

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'format': self.format.value,
            'byte_order': self.byte_order,
            'value': self.value,
            'string': self.text,
        }


def reorder(slot: bytes, byte_order: str) -> bytes:
    """Pick bytes out of an attribute slot following ``byte_order``.

    Unknown characters, and offsets past the end of a short slot, select a
    zero byte.
    """
    out = bytearray()
    for token in byte_order:
        offset = _TOKEN_OFFSETS.get(token)
        if offset is None or offset >= len(slot):
            out.append(0)
        else:
            out.append(slot[offset])
    return bytes(out)


def _read(data: bytes, width: int) -> int:
    # Leading bytes are the most significant; short input is left padded
    return int.from_bytes(data[:width].rjust(width, b'\x00'), 'big')


def _words(value: int) -> tuple[int, int, int]:
    return value & 0xFFFF, (value >> 16) & 0xFFFF, (value >> 32) & 0xFFFF


def _bytes6(value: int) -> list[int]:
    return [(value >> (8 * i)) & 0xFF for i in range(6)]


def _signed8(byte: int) -> int:
    return byte - 0x100 if byte & 0x80 else byte


def _format_raw8(value: int) -> tuple[int, str]:
    raw = _bytes6(value)
    return value, " ".join(str(b) for b in reversed(raw))


def _format_raw16(value: int) -> tuple[int, str]:
    word = _words(value)
    return value, f"{word[2]} {word[1]} {word[0]}"


def _format_raw16_opt_raw16(value: int) -> tuple[int, str]:
    word = _words(value)
    text = str(word[0])
    if word[1] or word[2]:
        text += f" ({word[2]} {word[1]})"
    return word[0], text


def _format_raw16_opt_avg16(value: int) -> tuple[int, str]:
    word = _words(value)
    text = str(word[0])
    if word[1]:
        text += f" (Average {word[1]})"
    return word[0], text


def _format_raw24_opt_raw8(value: int) -> tuple[int, str]:
    raw = _bytes6(value)
    low = value & 0xFFFFFF
    text = str(low)
    if raw[3] or raw[4] or raw[5]:
        text += f" ({raw[5]} {raw[4]} {raw[3]})"
    return low, text


def _format_raw24_div_raw24(value: int) -> tuple[int, str]:
    low = value & 0xFFFFFF
    return low, f"{value >> 24}/{low}"


def _format_raw24_div_raw32(value: int) -> tuple[int, str]:
    low = value & 0xFFFFFFFF
    return low, f"{value >> 32}/{low}"


def _format_sec2hour(value: int) -> tuple[int, str]:
    hours, rest = divmod(value, 3600)
    minutes, seconds = divmod(rest, 60)
    return hours, f"{hours}h+{minutes:02d}m+{seconds:02d}s"


def _format_min2hour(value: int) -> tuple[int, str]:
    word = _words(value)
    hours, minutes = divmod(word[0] + (word[1] << 16), 60)
    text = f"{hours}h+{minutes:02d}m"
    if word[2]:
        text += f" ({word[2]})"
    return hours, text


def _format_halfmin2hour(value: int) -> tuple[int, str]:
    hours, rest = divmod(value, 120)
    return hours, f"{hours}h+{rest // 2:02d}m"


def _format_msec24hour32(value: int) -> tuple[int, str]:
    hours = value & 0xFFFFFFFF
    milliseconds = value >> 32
    seconds, msec = divmod(milliseconds, 1000)
    minutes, seconds = divmod(seconds, 60)
    return hours, f"{hours}h+{minutes:02d}m+{seconds:02d}.{msec:03d}s"


def _is_extension(byte: int) -> bool:
    return byte in (0x00, 0xFF)


def _format_tempminmax(value: int) -> tuple[int, str]:
    # Known layouts, raw bytes 5..0:
    #   00 00 HH LL xx TT   Maxtor, Samsung, Seagate, Toshiba
    #   00 00 00 HH LL TT   WDC
    #   xx HH xx LL xx TT   Hitachi/HGST (Kingston swaps LL and HH)
    #   CC CC HH LL xx TT   WDC, CCCC is an over temperature counter
    # xx is 00 or ff (sign extension of the lower byte)
    raw = _bytes6(value)
    temp = _signed8(raw[0])
    if not any(raw[1:]):
        return temp, str(temp)

    low = high = None
    counter = 0
    if not raw[5] and not raw[4] and _is_extension(raw[1]) and raw[2] <= raw[3]:
        low, high = _signed8(raw[2]), _signed8(raw[3])
    elif not raw[5] and not raw[4] and not raw[3]:
        low, high = _signed8(raw[1]), _signed8(raw[2])
    elif _is_extension(raw[1]) and _is_extension(raw[3]) and _is_extension(raw[5]):
        low, high = sorted((_signed8(raw[2]), _signed8(raw[4])))
    elif _is_extension(raw[1]):
        low, high = _signed8(raw[2]), _signed8(raw[3])
        counter = raw[4] | (raw[5] << 8)

    if low is None or not (-60 <= low <= temp <= high <= 127):
        rest = " ".join(str(b) for b in reversed(raw[1:]))
        return temp, f"{temp} ({rest})"

    text = f"{temp} (Min/Max {low}/{high}"
    if counter:
        text += f" #{counter}"
    return temp, text + ")"


def _format_temp10x(value: int) -> tuple[int, str]:
    word = _words(value)
    return word[0], f"{word[0] // 10}.{word[0] % 10}"


def _decimal(value: int) -> tuple[int, str]:
    return value, str(value)


def _hex(digits: int) -> Callable[[int], tuple[int, str]]:
    def render(value: int) -> tuple[int, str]:
        return value, f"0x{value:0{digits}x}"
    return render


_FORMATTERS: Final[dict[RawFormat, Callable[[int], tuple[int, str]]]] = {
    RawFormat.RAW8: _format_raw8,
    RawFormat.RAW16: _format_raw16,
    RawFormat.RAW48: _decimal,
    RawFormat.HEX48: _hex(12),
    RawFormat.RAW56: _decimal,
    RawFormat.HEX56: _hex(14),
    RawFormat.RAW64: _decimal,
    RawFormat.HEX64: _hex(16),
    RawFormat.RAW16_OPT_RAW16: _format_raw16_opt_raw16,
    RawFormat.RAW16_OPT_AVG16: _format_raw16_opt_avg16,
    RawFormat.RAW24_OPT_RAW8: _format_raw24_opt_raw8,
    RawFormat.RAW24_DIV_RAW24: _format_raw24_div_raw24,
    RawFormat.RAW24_DIV_RAW32: _format_raw24_div_raw32,
    RawFormat.SEC2HOUR: _format_sec2hour,
    RawFormat.MIN2HOUR: _format_min2hour,
    RawFormat.HALFMIN2HOUR: _format_halfmin2hour,
    RawFormat.MSEC24HOUR32: _format_msec24hour32,
    RawFormat.TEMPMINMAX: _format_tempminmax,
    RawFormat.TEMP10X: _format_temp10x,
}


def decode_raw(slot: bytes, rule: AttributeRule | None = None) -> RawValue:
    """Decode the raw payload of a 12-byte attribute slot.

    Args:
        slot: Attribute slot, id byte first. Other lengths are padded or
              truncated to 12 bytes rather than rejected.
        rule: Resolved rule for this attribute, None for plain raw48

    Returns:
        RawValue with the reordered bytes, comparable value and display text
    """
    slot = bytes(slot[:SLOT_SIZE]).ljust(SLOT_SIZE, b'\x00')

    fmt = rule.format if rule is not None else RawFormat.RAW48
    byte_order = rule.effective_byte_order if rule is not None else fmt.default_byte_order

    reordered = reorder(slot, byte_order)
    number = _read(reordered, fmt.width)
    value, text = _FORMATTERS.get(fmt, _decimal)(number)

    return RawValue(
        format=fmt,
        byte_order=byte_order,
        bytes_=reordered,
        value=value,
        text=text,
    )
