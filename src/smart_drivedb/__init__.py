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
# smart-drivedb-parser/src/smart_drivedb/__init__.py

"""SMART attribute interpretation driven by the smartmontools drive database.

Parse drivedb.h, resolve the attribute rules for a drive model/firmware, and
decode raw SMART attribute tables with them.
"""

from .attributes import (
    SmartAttribute,
    attributes_to_frame,
    decode_attributes,
    parse_thresholds,
)
from .drivedb import (
    DatabaseRecord,
    RuleDatabase,
    default_candidates,
    load_drivedb,
    parse_drivedb,
)
from .errors import (
    DatabaseErrorKind,
    DatabaseParseError,
    InvalidLengthError,
    OverrideErrorKind,
    OverrideParseError,
    format_error,
)
from .matcher import ResolvedMeta, render, resolve
from .raw import RawValue, decode_raw, reorder
from .rules import AttributeRule, DriveType, RawFormat, parse_vendor_attribute

__version__ = "0.1.0"

__all__ = [
    "AttributeRule",
    "DatabaseErrorKind",
    "DatabaseParseError",
    "DatabaseRecord",
    "DriveType",
    "InvalidLengthError",
    "OverrideErrorKind",
    "OverrideParseError",
    "RawFormat",
    "RawValue",
    "ResolvedMeta",
    "RuleDatabase",
    "SmartAttribute",
    "attributes_to_frame",
    "decode_attributes",
    "decode_raw",
    "default_candidates",
    "format_error",
    "load_drivedb",
    "parse_drivedb",
    "parse_thresholds",
    "parse_vendor_attribute",
    "render",
    "reorder",
    "resolve",
]
