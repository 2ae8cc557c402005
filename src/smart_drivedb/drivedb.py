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
# smart-drivedb-parser/src/smart_drivedb/drivedb.py

"""Parser and loader for the smartmontools drive database (drivedb.h).

The database is a list of C struct initializers, one per drive family:

    { "Seagate Barracuda 7200.14 (AF)",   // family
      "ST3000DM001-9YN166",               // model regex
      "CC24",                             // firmware regex ("" = any)
      "",                                 // warning
      "-v 9,min2hour -v 194,tempminmax"   // presets
    },

Adjacent string literals are concatenated, C comments are ignored.
"""

import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, NamedTuple

from loguru import logger

from .errors import DatabaseErrorKind, DatabaseParseError, OverrideParseError
from .rules import AttributeRule, DriveType, parse_vendor_attribute

DRIVEDB_ENV_VAR: Final[str] = "SMART_DRIVEDB"

DEFAULT_DRIVEDB_PATHS: Final[tuple[Path, ...]] = (
    Path("/var/lib/smartmontools/drivedb/drivedb.h"),
    Path("/usr/share/smartmontools/drivedb.h"),
    Path("/usr/local/share/smartmontools/drivedb.h"),
    Path("/etc/smart_drivedb.h"),
)

FIELD_COUNT: Final[int] = 5

_TOKEN_RE = re.compile(
    r"""
      (?P<newline>\n)
    | (?P<preprocessor>^[ \t]*\#[^\n]*)
    | (?P<space>[ \t\r\f\v]+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    | (?P<punct>[{},;=\[\]])
    | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE | re.DOTALL | re.MULTILINE,
)

_SKIPPED = ("newline", "preprocessor", "space", "line_comment", "block_comment")

_POSIX_CLASS_RE = re.compile(r"\[:([a-z]+):\]")

# POSIX bracket classes used by drivedb, as Python character set contents
_POSIX_CLASSES: Final[dict[str, str]] = {
    'alnum': "0-9A-Za-z",
    'alpha': "A-Za-z",
    'blank': " \\t",
    'digit': "0-9",
    'lower': "a-z",
    'punct': "!-/:-@\\[-`{-~",
    'space': " \\t\\n\\r\\f\\v",
    'upper': "A-Z",
    'xdigit': "0-9A-Fa-f",
}

_ESCAPE_RE = re.compile(r"\\(?:x([0-9A-Fa-f]{1,2})|([0-7]{1,3})|(.))", re.DOTALL)

_SIMPLE_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'v': '\v',
    '\\': '\\',
    '"': '"',
    "'": "'",
    '?': '?',
    '\n': '',  # line continuation
}


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a drivedb regex, translating POSIX classes like ``[[:digit:]]``.

    Raises:
        re.error: for an unknown POSIX class or an invalid expression
        OverflowError: for repeat counts beyond what ``re`` supports
    """
    def translate(match: re.Match) -> str:
        name = match.group(1)
        if name not in _POSIX_CLASSES:
            raise re.error(f"unknown character class {name!r}", pattern, match.start())
        return _POSIX_CLASSES[name]

    return re.compile(_POSIX_CLASS_RE.sub(translate, pattern))


class _Token(NamedTuple):
    kind: str
    value: str
    line: int


@dataclass(frozen=True)
class DatabaseRecord:
    """One drive family entry of the database."""
    family: str
    model_pattern: str
    firmware_pattern: str | None = None
    warning: str | None = None
    rules: tuple[AttributeRule, ...] = ()
    firmware_bugs: tuple[str, ...] = ()
    device_type: str | None = None
    model_regex: re.Pattern = field(init=False, repr=False, compare=False)
    firmware_regex: re.Pattern | None = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'model_regex', compile_pattern(self.model_pattern))
        object.__setattr__(
            self,
            'firmware_regex',
            compile_pattern(self.firmware_pattern) if self.firmware_pattern else None,
        )

    @property
    def is_default(self) -> bool:
        return self.family == "DEFAULT"

    @property
    def is_version(self) -> bool:
        return self.family.startswith(("VERSION:", "$Id"))

    @property
    def is_usb(self) -> bool:
        return self.family.startswith("USB:")

    def matches(self, model: str, firmware: str) -> bool:
        """Whether this record applies to a drive with this model/firmware."""
        if self.is_default or self.is_version or self.is_usb:
            return False
        if not self.model_regex.fullmatch(model):
            return False
        return self.firmware_regex is None or bool(
            self.firmware_regex.fullmatch(firmware)
        )

    def rules_by_id(self) -> dict[int | None, AttributeRule]:
        """Rules keyed by attribute id; for HDD/SSD variants the last wins."""
        return {rule.id: rule for rule in self.rules}


@dataclass(frozen=True)
class RuleDatabase:
    """Ordered, read-only collection of drivedb records."""
    records: tuple[DatabaseRecord, ...] = ()
    source: str | None = None

    @classmethod
    def empty(cls) -> "RuleDatabase":
        return cls()

    @property
    def default(self) -> DatabaseRecord | None:
        return next((r for r in self.records if r.is_default), None)

    @property
    def version(self) -> str | None:
        record = next((r for r in self.records if r.is_version), None)
        return record.family if record else None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[DatabaseRecord]:
        return iter(self.records)


def _tokenize(text: str) -> Iterator[_Token]:
    pos = 0
    line = 1
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            snippet = text[pos:pos + 20].split('\n')[0]
            if text.startswith('"', pos):
                raise DatabaseParseError(DatabaseErrorKind.BAD_LITERAL, line, snippet)
            if text.startswith('/*', pos):
                raise DatabaseParseError(DatabaseErrorKind.SYNTAX, line, "/*")
            raise DatabaseParseError(DatabaseErrorKind.SYNTAX, line, snippet)

        kind = match.lastgroup
        value = match.group()
        if kind not in _SKIPPED:
            yield _Token(kind, value, line)
        line += value.count('\n')
        pos = match.end()


def _unescape(literal: str, line: int) -> str:
    """Decode the body of a C string literal (quotes included)."""
    def replace(match: re.Match) -> str:
        hex_digits, octal_digits, char = match.groups()
        if hex_digits:
            return chr(int(hex_digits, 16))
        if octal_digits:
            return chr(int(octal_digits, 8))
        if char in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[char]
        raise DatabaseParseError(DatabaseErrorKind.BAD_LITERAL, line, f"\\{char}")

    return _ESCAPE_RE.sub(replace, literal[1:-1])


def _parse_presets(presets: str, line: int) -> tuple[
        tuple[AttributeRule, ...], tuple[str, ...], str | None]:
    rules: dict[tuple[int | None, DriveType | None], AttributeRule] = {}
    bugs: list[str] = []
    device_type = None

    words = iter(presets.split())
    for directive in words:
        if directive not in ("-v", "-F", "-d"):
            raise DatabaseParseError(
                DatabaseErrorKind.UNKNOWN_DIRECTIVE, line, directive
            )
        argument = next(words, None)
        if argument is None:
            raise DatabaseParseError(DatabaseErrorKind.SYNTAX, line, directive)

        if directive == "-v":
            try:
                rule = parse_vendor_attribute(argument)
            except OverrideParseError as e:
                raise DatabaseParseError(
                    DatabaseErrorKind.BAD_ATTRIBUTE, line, argument, cause=e
                ) from e
            key = (rule.id, rule.drive_type)
            rules.pop(key, None)
            rules[key] = rule
        elif directive == "-F":
            bugs.append(argument)
        else:
            device_type = argument

    return tuple(rules.values()), tuple(bugs), device_type


def _build_record(fields: list[str], line: int) -> DatabaseRecord:
    family, model, firmware, warning, presets = fields
    rules, bugs, device_type = _parse_presets(presets, line)
    for pattern in (model, firmware):
        try:
            compile_pattern(pattern)
        except (re.error, OverflowError) as e:
            raise DatabaseParseError(
                DatabaseErrorKind.BAD_PATTERN, line, pattern
            ) from e

    return DatabaseRecord(
        family=family,
        model_pattern=model,
        firmware_pattern=firmware or None,
        warning=warning or None,
        rules=rules,
        firmware_bugs=bugs,
        device_type=device_type,
    )


def _parse_record(tokens: Iterator[_Token], start: _Token) -> DatabaseRecord:
    fields: list[str] = []
    current: str | None = None

    for token in tokens:
        if token.kind == "string":
            current = (current or "") + _unescape(token.value, token.line)
        elif token.value in (",", "}") and current is not None:
            fields.append(current)
            current = None
            if token.value == "}":
                break
        elif token.value == "}" and current is None and fields:
            # trailing comma after the last field
            break
        else:
            raise DatabaseParseError(DatabaseErrorKind.SYNTAX, token.line, token.value)
    else:
        raise DatabaseParseError(
            DatabaseErrorKind.UNTERMINATED_RECORD, start.line, fields[0] if fields else ""
        )

    if len(fields) != FIELD_COUNT:
        raise DatabaseParseError(
            DatabaseErrorKind.SYNTAX,
            start.line,
            f"expected {FIELD_COUNT} fields, got {len(fields)}",
        )
    return _build_record(fields, start.line)


def parse_drivedb(text: str, source: str | None = None) -> RuleDatabase:
    """Parse drivedb.h text into a RuleDatabase.

    Args:
        text: Database source, with or without the surrounding
              ``builtin_knowndrives[] = { ... };`` declaration
        source: Where the text came from, kept for diagnostics

    Returns:
        RuleDatabase with the records in file order

    Raises:
        DatabaseParseError: on the first structural problem
    """
    records = []
    tokens = _tokenize(text)
    pending: _Token | None = None

    for token in tokens:
        if pending is not None:
            # '{' followed by a string opens a record; anything else means
            # the brace belonged to the array declaration
            if token.kind == "string":
                records.append(_parse_record(_chain(token, tokens), pending))
                pending = None
                continue
            pending = None

        if token.value == "{":
            pending = token
        elif token.kind == "string":
            raise DatabaseParseError(DatabaseErrorKind.SYNTAX, token.line, token.value)

    if pending is not None:
        raise DatabaseParseError(DatabaseErrorKind.UNTERMINATED_RECORD, pending.line, "{")

    logger.debug(f"Parsed {len(records)} drivedb records from {source or '<text>'}")
    return RuleDatabase(records=tuple(records), source=source)


def _chain(first: _Token, rest: Iterator[_Token]) -> Iterator[_Token]:
    yield first
    yield from rest


def default_candidates(explicit: str | Path | None = None) -> list[Path]:
    """Database locations to try, most specific first."""
    candidates = []
    if explicit:
        candidates.append(Path(explicit))
    env_path = os.environ.get(DRIVEDB_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path))
    candidates.extend(DEFAULT_DRIVEDB_PATHS)
    return candidates


def load_drivedb(candidates: Iterable[str | Path] | None = None) -> RuleDatabase:
    """Load the first candidate database that reads and parses cleanly.

    Args:
        candidates: Paths to try in order; defaults to default_candidates()

    Returns:
        Parsed RuleDatabase, or an empty one if no candidate worked.
        Attributes still decode with generic formats against it.
    """
    if candidates is None:
        candidates = default_candidates()

    for candidate in candidates:
        path = Path(candidate)
        logger.debug(f"Trying drivedb candidate {path}")
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Skipping {path}: {e}")
            continue

        try:
            db = parse_drivedb(text, source=str(path))
        except DatabaseParseError as e:
            logger.warning(f"Ignoring {path}: {e}")
            continue

        logger.info(f"Loaded {len(db)} drivedb records from {path}")
        return db

    logger.warning("No usable drive database found, using generic attribute formats")
    return RuleDatabase.empty()
