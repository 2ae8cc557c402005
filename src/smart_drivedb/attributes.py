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
# smart-drivedb-parser/src/smart_drivedb/attributes.py

"""Decode the SMART READ DATA and READ THRESHOLDS tables.

Both tables are 512 bytes holding 30 slots of 12 bytes starting at offset 2:

    attribute slot: id, flags (2), value, worst, raw (6), reserved
    threshold slot: id, threshold, reserved (10)
"""

from dataclasses import dataclass
from typing import Final

import polars as pl
from loguru import logger

from .errors import InvalidLengthError
from .matcher import ResolvedMeta, render
from .raw import RawValue, decode_raw

TABLE_SIZE: Final[int] = 512
SLOT_COUNT: Final[int] = 30
SLOT_SIZE: Final[int] = 12
SLOT_OFFSET: Final[int] = 2

FLAG_PRE_FAIL: Final[int] = 1 << 0
FLAG_ONLINE: Final[int] = 1 << 1
FLAG_PERFORMANCE: Final[int] = 1 << 2
FLAG_ERROR_RATE: Final[int] = 1 << 3
FLAG_EVENT_COUNT: Final[int] = 1 << 4
FLAG_SELF_PRESERVING: Final[int] = 1 << 5
KNOWN_FLAGS: Final[int] = 0x3F

_INT64_MAX = 2**63 - 1

FRAME_SCHEMA: Final[dict] = {
    'id': pl.UInt8,
    'name': pl.Utf8,
    'flags': pl.Utf8,
    'value': pl.UInt8,
    'worst': pl.UInt8,
    'thresh': pl.UInt8,
    'failing': pl.Utf8,
    'raw': pl.Utf8,
    'raw_value': pl.Int64,
}


@dataclass(frozen=True)
class SmartAttribute:
    """One decoded entry of the SMART attribute table."""
    id: int
    name: str | None
    pre_fail: bool
    online: bool
    performance: bool
    error_rate: bool
    event_count: bool
    self_preserving: bool
    flags: int  # vendor bits beyond the six above
    value: int | None  # None when the byte belongs to the raw value
    worst: int | None
    thresh: int | None
    raw: RawValue

    @property
    def offline(self) -> bool:
        """Updated during off-line testing only (the ``O`` flag)."""
        return not self.online

    @property
    def failing(self) -> str | None:
        """'now' if value is at or below threshold, 'past' if worst was."""
        if self.thresh is None:
            return None
        if self.value is not None and self.value <= self.thresh:
            return "now"
        if self.worst is not None and self.worst <= self.thresh:
            return "past"
        return None

    def flag_string(self) -> str:
        """smartctl-style ``POSRCK`` flags, ``-`` for unset bits."""
        letters = (
            (self.pre_fail, 'P'),
            (self.offline, 'O'),
            (self.performance, 'S'),
            (self.error_rate, 'R'),
            (self.event_count, 'C'),
            (self.self_preserving, 'K'),
        )
        text = "".join(c if on else '-' for on, c in letters)
        if self.flags:
            text += f"+{self.flags:04x}"
        return text

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'flags': {
                'pre_fail': self.pre_fail,
                'online': self.online,
                'performance': self.performance,
                'error_rate': self.error_rate,
                'event_count': self.event_count,
                'self_preserving': self.self_preserving,
                'vendor': self.flags,
            },
            'value': self.value,
            'worst': self.worst,
            'thresh': self.thresh,
            'failing': self.failing,
            'raw': self.raw.to_dict(),
        }


def _check_length(table: str, data: bytes):
    if len(data) != TABLE_SIZE:
        raise InvalidLengthError(table, TABLE_SIZE, len(data))


def _slots(data: bytes):
    for i in range(SLOT_COUNT):
        offset = SLOT_OFFSET + i * SLOT_SIZE
        yield bytes(data[offset:offset + SLOT_SIZE])


def parse_thresholds(threshold_table: bytes) -> dict[int, int]:
    """Map attribute id to failure threshold.

    Raises:
        InvalidLengthError: if the table is not 512 bytes
    """
    _check_length("threshold", threshold_table)

    thresholds: dict[int, int] = {}
    for slot in _slots(threshold_table):
        # id 0 marks an unused slot
        if slot[0] == 0:
            continue
        thresholds.setdefault(slot[0], slot[1])
    return thresholds


def decode_attributes(
    attribute_table: bytes,
    threshold_table: bytes,
    resolved: ResolvedMeta | None = None,
) -> list[SmartAttribute]:
    """Decode SMART attribute values against their thresholds.

    Args:
        attribute_table: 512-byte SMART READ DATA response
        threshold_table: 512-byte SMART READ THRESHOLDS response
        resolved: Rules for this drive from resolve(); None decodes every
                  attribute as an unnamed raw48 value

    Returns:
        Attributes in table order, unused (id 0) slots left out

    Raises:
        InvalidLengthError: if either table is not 512 bytes
    """
    _check_length("attribute", attribute_table)
    thresholds = parse_thresholds(threshold_table)

    attrs = []
    seen: set[int] = set()
    for slot in _slots(attribute_table):
        attr_id = slot[0]
        if attr_id == 0:
            continue
        if attr_id in seen:
            logger.debug(f"Attribute {attr_id} reported more than once")
        seen.add(attr_id)

        # TODO confirm flag word byte order against ATA8-ACS, low byte first for now
        flags = slot[1] | (slot[2] << 8)
        rule = render(resolved, attr_id)

        attrs.append(SmartAttribute(
            id=attr_id,
            name=rule.name if rule else None,
            pre_fail=bool(flags & FLAG_PRE_FAIL),
            online=bool(flags & FLAG_ONLINE),
            performance=bool(flags & FLAG_PERFORMANCE),
            error_rate=bool(flags & FLAG_ERROR_RATE),
            event_count=bool(flags & FLAG_EVENT_COUNT),
            self_preserving=bool(flags & FLAG_SELF_PRESERVING),
            flags=flags & ~KNOWN_FLAGS,
            value=None if rule and rule.uses_value_byte() else slot[3],
            worst=None if rule and rule.uses_worst_byte() else slot[4],
            thresh=thresholds.get(attr_id),
            raw=decode_raw(slot, rule),
        ))

    return attrs


def attributes_to_frame(attrs: list[SmartAttribute]) -> pl.DataFrame:
    """Flatten decoded attributes into a polars DataFrame.

    ``raw_value`` is null where the comparable value does not fit in Int64.
    """
    records = []
    for attr in attrs:
        raw_value = attr.raw.value
        if raw_value is not None and raw_value > _INT64_MAX:
            raw_value = None
        records.append({
            'id': attr.id,
            'name': attr.name,
            'flags': attr.flag_string(),
            'value': attr.value,
            'worst': attr.worst,
            'thresh': attr.thresh,
            'failing': attr.failing,
            'raw': attr.raw.text,
            'raw_value': raw_value,
        })

    return pl.DataFrame(records, schema=FRAME_SCHEMA)
