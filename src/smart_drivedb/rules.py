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
# smart-drivedb-parser/src/smart_drivedb/rules.py

"""Attribute rendering rules and the vendor attribute spec parser.

A rule says how one SMART attribute is named and how its raw bytes are
decoded. Rules come from drivedb ``-v`` presets and from the command line,
both written as ``ID,FORMAT[:BYTEORDER][,NAME[,HDD|SSD]]``.
"""

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Final

from .errors import OverrideErrorKind, OverrideParseError

MAX_NAME_LENGTH: Final[int] = 23
MAX_BYTE_ORDER_LENGTH: Final[int] = 8
BYTE_ORDER_TOKENS: Final[str] = "vw012345r"
WILDCARD_ID: Final[str] = "N"

_ID_RE = re.compile(r"[0-9]{1,3}")


class DriveType(str, Enum):
    """Restricts a rule to rotating or solid state drives."""
    HDD = "HDD"
    SSD = "SSD"


class RawFormat(str, Enum):
    """Raw value formats understood by smartmontools' drivedb."""
    RAW8 = "raw8"
    RAW16 = "raw16"
    RAW48 = "raw48"
    HEX48 = "hex48"
    RAW56 = "raw56"
    HEX56 = "hex56"
    RAW64 = "raw64"
    HEX64 = "hex64"
    RAW16_OPT_RAW16 = "raw16(raw16)"
    RAW16_OPT_AVG16 = "raw16(avg16)"
    RAW24_OPT_RAW8 = "raw24(raw8)"
    RAW24_DIV_RAW24 = "raw24/raw24"
    RAW24_DIV_RAW32 = "raw24/raw32"
    SEC2HOUR = "sec2hour"
    MIN2HOUR = "min2hour"
    HALFMIN2HOUR = "halfmin2hour"
    MSEC24HOUR32 = "msec24hour32"
    TEMPMINMAX = "tempminmax"
    TEMP10X = "temp10x"

    @property
    def width(self) -> int:
        """Number of leading reordered bytes that carry the value."""
        return _WIDTHS.get(self, 6)

    @property
    def default_byte_order(self) -> str:
        if self in (RawFormat.RAW64, RawFormat.HEX64):
            return "543210wv"
        if self.width == 7:
            return "r543210"
        return "543210"


_WIDTHS = {
    RawFormat.RAW56: 7,
    RawFormat.HEX56: 7,
    RawFormat.RAW24_DIV_RAW32: 7,
    RawFormat.MSEC24HOUR32: 7,
    RawFormat.RAW64: 8,
    RawFormat.HEX64: 8,
}

_FORMATS = {fmt.value: fmt for fmt in RawFormat}


@dataclass(frozen=True)
class AttributeRule:
    """How to name and decode one SMART attribute.

    ``id`` is None for a wildcard rule (``N``) that applies to
    every attribute. ``byte_order`` is None when the format default applies.
    """
    id: int | None
    format: RawFormat = RawFormat.RAW48
    byte_order: str | None = None
    name: str | None = None
    drive_type: DriveType | None = None

    @property
    def effective_byte_order(self) -> str:
        return self.byte_order or self.format.default_byte_order

    def uses_value_byte(self) -> bool:
        return "v" in self.effective_byte_order

    def uses_worst_byte(self) -> bool:
        return "w" in self.effective_byte_order

    def bind(self, attr_id: int) -> "AttributeRule":
        """Return a copy of this rule that applies to ``attr_id`` only."""
        return dataclasses.replace(self, id=attr_id)

    def to_spec(self) -> str:
        """Serialize back to ``ID,FORMAT[:BYTEORDER][,NAME[,TYPE]]``."""
        spec = WILDCARD_ID if self.id is None else str(self.id)
        spec += f",{self.format.value}"
        if self.byte_order:
            spec += f":{self.byte_order}"
        if self.name or self.drive_type:
            spec += f",{self.name or ''}"
        if self.drive_type:
            spec += f",{self.drive_type.value}"
        return spec

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'format': self.format.value,
            'byte_order': self.effective_byte_order,
            'drive_type': self.drive_type.value if self.drive_type else None,
        }


# Old-style smartctl "-v ID,keyword" presets and what they stand for
LEGACY_ATTRIBUTES: Final[dict[tuple[int, str], tuple[RawFormat, str | None]]] = {
    (9, "halfminutes"): (RawFormat.HALFMIN2HOUR, "Power_On_Half_Minutes"),
    (9, "minutes"): (RawFormat.MIN2HOUR, "Power_On_Minutes"),
    (9, "seconds"): (RawFormat.SEC2HOUR, "Power_On_Seconds"),
    (9, "temp"): (RawFormat.TEMPMINMAX, "Temperature_Celsius"),
    (192, "emergencyretractcyclect"): (RawFormat.RAW48, "Emerg_Retract_Cycle_Ct"),
    (193, "loadunload"): (RawFormat.RAW24_DIV_RAW24, None),
    (194, "10xCelsius"): (RawFormat.TEMP10X, "Temperature_Celsius_x10"),
    (194, "unknown"): (RawFormat.RAW48, "Unknown_Attribute"),
    (197, "increasing"): (RawFormat.RAW48, "Total_Pending_Sectors"),
    (198, "increasing"): (RawFormat.RAW48, "Total_Offl_Uncorrectabl"),
    (198, "offlinescanuncsectorct"): (RawFormat.RAW48, "Offline_Scan_UNC_SectCt"),
    (200, "writeerrorcount"): (RawFormat.RAW48, "Write_Error_Count"),
    (201, "detectedtacount"): (RawFormat.RAW48, "Detected_TA_Count"),
    (220, "temp"): (RawFormat.TEMPMINMAX, "Temperature_Celsius"),
}


def _parse_id(spec: str, segment: str) -> int | None:
    if segment == WILDCARD_ID:
        return None
    if not _ID_RE.fullmatch(segment) or int(segment) > 255:
        raise OverrideParseError(OverrideErrorKind.BAD_ID, spec, segment)
    return int(segment)


def _parse_byte_order(spec: str, segment: str) -> str:
    # Unknown characters are legal (they read as zero padding), but an order
    # made of nothing but padding selects no data at all
    if (not segment or len(segment) > MAX_BYTE_ORDER_LENGTH
            or not any(c in BYTE_ORDER_TOKENS for c in segment)):
        raise OverrideParseError(OverrideErrorKind.BAD_BYTE_ORDER, spec, segment)
    return segment


def parse_vendor_attribute(spec: str) -> AttributeRule:
    """Parse ``ID,FORMAT[:BYTEORDER][,NAME[,HDD|SSD]]`` into a rule.

    Args:
        spec: Attribute spec as used by ``smartctl -v`` and drivedb presets,
              e.g. ``9,min2hour,Power_On_Minutes`` or ``N,raw48:543210``

    Returns:
        AttributeRule for the given id (None for ``N``)

    Raises:
        OverrideParseError: naming the segment that is malformed
    """
    fields = spec.split(",")
    attr_id = _parse_id(spec, fields[0])

    if len(fields) < 2 or not fields[1]:
        raise OverrideParseError(OverrideErrorKind.BAD_FORMAT, spec, "")
    if len(fields) > 4:
        raise OverrideParseError(
            OverrideErrorKind.TRAILING, spec, ",".join(fields[4:])
        )

    format_tag, sep, byte_order = fields[1].partition(":")

    fmt = _FORMATS.get(format_tag)
    if fmt is None:
        legacy = LEGACY_ATTRIBUTES.get((attr_id, format_tag))
        if legacy is None:
            raise OverrideParseError(OverrideErrorKind.BAD_FORMAT, spec, format_tag)
        if sep:
            raise OverrideParseError(
                OverrideErrorKind.BAD_BYTE_ORDER, spec, byte_order
            )
        if len(fields) > 2:
            raise OverrideParseError(
                OverrideErrorKind.TRAILING, spec, ",".join(fields[2:])
            )
        legacy_format, legacy_name = legacy
        return AttributeRule(id=attr_id, format=legacy_format, name=legacy_name)

    parsed_order = _parse_byte_order(spec, byte_order) if sep else None

    name = None
    drive_type = None
    if len(fields) > 2:
        name = fields[2]
        if len(name) > MAX_NAME_LENGTH or (not name and len(fields) < 4):
            raise OverrideParseError(OverrideErrorKind.BAD_NAME, spec, name)
        name = name or None
    if len(fields) > 3:
        try:
            drive_type = DriveType(fields[3])
        except ValueError:
            raise OverrideParseError(
                OverrideErrorKind.TRAILING, spec, fields[3]
            ) from None

    return AttributeRule(
        id=attr_id,
        format=fmt,
        byte_order=parsed_order,
        name=name,
        drive_type=drive_type,
    )
