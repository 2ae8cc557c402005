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
# smart-drivedb-parser/tests/test_json_serialization.py

import json

from smart_drivedb import (
    DriveType,
    RuleDatabase,
    decode_attributes,
    parse_vendor_attribute,
    resolve,
)

SEAGATE = ("ST3000DM001-9YN166", "CC24")


class TestJSONSerialization:
    """Test JSON serialization of decoded objects."""

    def test_attribute_to_dict(self, sample_db, sample_tables):
        """Test SmartAttribute.to_dict() creates valid JSON structure."""
        resolved = resolve(sample_db, *SEAGATE)
        attrs = {a.id: a for a in decode_attributes(*sample_tables, resolved)}

        attr_dict = attrs[9].to_dict()

        # Verify structure
        assert attr_dict['id'] == 9
        assert attr_dict['name'] == "Power_On_Minutes"
        assert attr_dict['value'] == 84
        assert attr_dict['worst'] == 84
        assert attr_dict['thresh'] == 0
        assert attr_dict['failing'] is None
        assert attr_dict['flags']['online'] is True
        assert attr_dict['flags']['pre_fail'] is False
        assert attr_dict['flags']['vendor'] == 0
        assert attr_dict['raw'] == {
            'format': "min2hour",
            'byte_order': "543210",
            'value': 256,
            'string': "256h+45m",
        }

        # Verify JSON serializable
        parsed = json.loads(json.dumps(attr_dict))
        assert parsed == attr_dict

    def test_failing_attribute_to_dict(self, sample_db, sample_tables):
        """Test the failing state survives serialization."""
        attrs = decode_attributes(*sample_tables, resolve(sample_db, *SEAGATE))
        failing = [a.to_dict()['failing'] for a in attrs]
        assert failing.count("now") == 1
        assert failing.count("past") == 1

    def test_resolved_to_dict(self, sample_db):
        """Test ResolvedMeta.to_dict() lists rules sorted by id."""
        resolved = resolve(sample_db, *SEAGATE, drive_type_hint=DriveType.HDD)
        resolved_dict = resolved.to_dict()

        assert resolved_dict['family'] == "Seagate Barracuda 7200.14 (AF), CC24 firmware"
        assert resolved_dict['warning'].startswith("A firmware update")
        assert resolved_dict['drive_type'] == "HDD"
        assert resolved_dict['firmware_bugs'] == ["xerrorlba"]
        assert resolved_dict['wildcard'] is None

        ids = [rule['id'] for rule in resolved_dict['rules']]
        assert ids == sorted(ids)
        assert ids == [1, 5, 9, 188, 194, 231, 240]

        rule_231 = resolved_dict['rules'][ids.index(231)]
        assert rule_231 == {
            'id': 231,
            'name': "Temperature_Celsius",
            'format': "raw48",
            'byte_order': "543210",
            'drive_type': "HDD",
        }

        json_str = json.dumps(resolved_dict)
        assert json.loads(json_str)['rules'][0]['id'] == 1

    def test_no_match_to_dict(self):
        """Test serialization of an unmatched drive with a wildcard override."""
        resolved = resolve(
            RuleDatabase.empty(), "Unknown", "",
            user_overrides=[parse_vendor_attribute("N,hex48:r543210")],
        )
        resolved_dict = resolved.to_dict()

        assert resolved_dict['family'] is None
        assert resolved_dict['warning'] is None
        assert resolved_dict['drive_type'] is None
        assert resolved_dict['rules'] == []
        assert resolved_dict['wildcard']['id'] is None
        assert resolved_dict['wildcard']['byte_order'] == "r543210"

        # Should still be JSON serializable
        parsed = json.loads(json.dumps(resolved_dict))
        assert parsed['wildcard']['format'] == "hex48"
