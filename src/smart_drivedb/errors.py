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
# smart-drivedb-parser/src/smart_drivedb/errors.py

"""Error types for override parsing, drivedb parsing and table decoding.

Each exception keeps its data structured (a ``kind`` plus the offending
text). Human-readable messages come from :func:`format_error`.
"""

from enum import Enum


class OverrideErrorKind(str, Enum):
    """Which segment of an ``id,format[:byteorder][,name]`` spec is bad."""
    BAD_ID = "bad_id"
    BAD_FORMAT = "bad_format"
    BAD_BYTE_ORDER = "bad_byte_order"
    BAD_NAME = "bad_name"
    TRAILING = "trailing"


class DatabaseErrorKind(str, Enum):
    """Structural problems found while parsing a drivedb source."""
    UNTERMINATED_RECORD = "unterminated_record"
    BAD_LITERAL = "bad_literal"
    BAD_PATTERN = "bad_pattern"
    BAD_ATTRIBUTE = "bad_attribute"
    UNKNOWN_DIRECTIVE = "unknown_directive"
    SYNTAX = "syntax"


class OverrideParseError(ValueError):
    """A vendor attribute spec could not be parsed."""

    def __init__(self, kind: OverrideErrorKind, spec: str, segment: str):
        super().__init__(kind, spec, segment)
        self.kind = kind
        self.spec = spec
        self.segment = segment

    def __str__(self) -> str:
        return format_error(self)


class DatabaseParseError(ValueError):
    """A drivedb source is malformed."""

    def __init__(self, kind: DatabaseErrorKind, line: int, text: str,
                 cause: OverrideParseError | None = None):
        super().__init__(kind, line, text)
        self.kind = kind
        self.line = line
        self.text = text
        self.cause = cause

    def __str__(self) -> str:
        return format_error(self)


class InvalidLengthError(ValueError):
    """A SMART table buffer is not exactly the expected size."""

    def __init__(self, table: str, expected: int, actual: int):
        super().__init__(table, expected, actual)
        self.table = table
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return format_error(self)


_OVERRIDE_MESSAGES = {
    OverrideErrorKind.BAD_ID: "attribute id must be 0-255 or N, got {segment!r}",
    OverrideErrorKind.BAD_FORMAT: "unknown format {segment!r}",
    OverrideErrorKind.BAD_BYTE_ORDER: "invalid byte order {segment!r}",
    OverrideErrorKind.BAD_NAME: "invalid attribute name {segment!r}",
    OverrideErrorKind.TRAILING: "unexpected trailing text {segment!r}",
}

_DATABASE_MESSAGES = {
    DatabaseErrorKind.UNTERMINATED_RECORD: "unterminated record",
    DatabaseErrorKind.BAD_LITERAL: "malformed string literal",
    DatabaseErrorKind.BAD_PATTERN: "invalid regular expression",
    DatabaseErrorKind.BAD_ATTRIBUTE: "invalid -v attribute spec",
    DatabaseErrorKind.UNKNOWN_DIRECTIVE: "unknown preset directive",
    DatabaseErrorKind.SYNTAX: "syntax error",
}


def format_error(err: Exception) -> str:
    """Render one of the errors above as a message for humans."""
    if isinstance(err, OverrideParseError):
        detail = _OVERRIDE_MESSAGES[err.kind].format(segment=err.segment)
        return f"invalid vendor attribute {err.spec!r}: {detail}"

    if isinstance(err, DatabaseParseError):
        message = f"drivedb line {err.line}: {_DATABASE_MESSAGES[err.kind]}"
        if err.text:
            message += f" near {err.text!r}"
        if err.cause is not None:
            message += f" ({format_error(err.cause)})"
        return message

    if isinstance(err, InvalidLengthError):
        return (
            f"{err.table} table must be {err.expected} bytes, "
            f"got {err.actual}"
        )

    return str(err)
