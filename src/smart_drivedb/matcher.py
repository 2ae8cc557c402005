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
# smart-drivedb-parser/src/smart_drivedb/matcher.py

"""Resolve the effective attribute rules for one drive.

Rules are layered: the DEFAULT record first, then every matching record in
file order, then user overrides. A later rule for an id replaces the earlier
one outright.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from loguru import logger

from .drivedb import DatabaseRecord, RuleDatabase
from .rules import AttributeRule, DriveType


@dataclass(frozen=True)
class ResolvedMeta:
    """Merged drivedb knowledge for a specific drive."""
    family: str | None = None
    warning: str | None = None
    drive_type: DriveType | None = None
    rules: Mapping[int, AttributeRule] = field(
        default_factory=lambda: MappingProxyType({})
    )
    wildcard: AttributeRule | None = None
    matched: tuple[DatabaseRecord, ...] = ()
    firmware_bugs: tuple[str, ...] = ()

    def render(self, attr_id: int) -> AttributeRule | None:
        return render(self, attr_id)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'family': self.family,
            'warning': self.warning,
            'drive_type': self.drive_type.value if self.drive_type else None,
            'firmware_bugs': list(self.firmware_bugs),
            'wildcard': self.wildcard.to_dict() if self.wildcard else None,
            'rules': [self.rules[k].to_dict() for k in sorted(self.rules)],
        }


class _Layers:
    """Rule accumulator used by resolve()."""

    def __init__(self, drive_type: DriveType | None):
        self.drive_type = drive_type
        self.rules: dict[int, AttributeRule] = {}
        self.wildcard: AttributeRule | None = None

    def _off_type(self, rule: AttributeRule | None) -> bool:
        return (
            rule is not None
            and self.drive_type is not None
            and rule.drive_type is not None
            and rule.drive_type is not self.drive_type
        )

    def apply(self, rule: AttributeRule, affinity: bool = True):
        if affinity and self._off_type(rule):
            # rules for the other drive type only fill gaps
            if rule.id is None:
                if self.wildcard is None or self._off_type(self.wildcard):
                    self.wildcard = rule
            elif self._off_type(self.rules.get(rule.id, rule)):
                self.rules[rule.id] = rule
            return

        if rule.id is None:
            self.wildcard = rule
            self.rules.clear()
        else:
            self.rules[rule.id] = rule


def resolve(
    db: RuleDatabase,
    model: str,
    firmware: str,
    drive_type_hint: DriveType | None = None,
    user_overrides: Iterable[AttributeRule] = (),
) -> ResolvedMeta:
    """Match a drive against the database and merge its rules.

    Args:
        db: Loaded rule database (may be empty)
        model: Model string from IDENTIFY DEVICE
        firmware: Firmware revision from IDENTIFY DEVICE
        drive_type_hint: HDD or SSD if known; rules for the other type
                         never displace rules that fit this drive
        user_overrides: Rules from the command line, applied last

    Returns:
        ResolvedMeta for this drive. When nothing matches it only holds the
        DEFAULT record's rules (if any) and no warning.
    """
    layers = _Layers(drive_type_hint)
    matched: list[DatabaseRecord] = []
    family = None
    warning = None
    bugs: list[str] = []

    default = db.default
    if default is not None:
        for rule in default.rules:
            layers.apply(rule)

    for record in db:
        if not record.matches(model, firmware):
            continue
        logger.debug(f"{model} ({firmware}) matches drivedb family {record.family!r}")
        matched.append(record)
        family = record.family
        if record.warning:
            warning = record.warning
        for bug in record.firmware_bugs:
            if bug not in bugs:
                bugs.append(bug)
        for rule in record.rules:
            layers.apply(rule)

    for rule in user_overrides:
        layers.apply(rule, affinity=False)

    if not matched:
        logger.debug(f"No drivedb entry for {model} ({firmware})")

    return ResolvedMeta(
        family=family,
        warning=warning,
        drive_type=drive_type_hint,
        rules=MappingProxyType(dict(layers.rules)),
        wildcard=layers.wildcard,
        matched=tuple(matched),
        firmware_bugs=tuple(bugs),
    )


def render(resolved: ResolvedMeta | None, attr_id: int) -> AttributeRule | None:
    """Effective rule for ``attr_id``, or None to use generic decoding."""
    if resolved is None:
        return None
    rule = resolved.rules.get(attr_id)
    if rule is not None:
        return rule
    if resolved.wildcard is not None:
        return resolved.wildcard.bind(attr_id)
    return None
