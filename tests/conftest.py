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
# smart-drivedb-parser/tests/conftest.py

"""Shared sample data: a small drivedb.h and a pair of SMART table dumps."""

import pytest

from smart_drivedb import parse_drivedb

SAMPLE_DRIVEDB = r'''/*
 * drivedb.h - smartmontools drive database file
 *
 * Structure used in this file (see drivedb.h in smartmontools)
 */

/*
const drive_settings builtin_knowndrives[] = {
 */
#if 0
#endif
  { "VERSION: 7.4/5500 2023-08-01 12:00:00 $Id: drivedb.h 5500 $",
    "-", "-",
    "Version information",
    ""
  },
  { "DEFAULT",
    "-", "-",
    "Default settings",
    "-v 1,raw48,Raw_Read_Error_Rate "
    "-v 5,raw16(raw16),Reallocated_Sector_Ct "
    "-v 9,raw24(raw8),Power_On_Hours "
    "-v 194,tempminmax,Temperature_Celsius "
    "-v 231,raw48,Temperature_Celsius,HDD "
    "-v 231,raw48,SSD_Life_Left,SSD"
  },
  { "USB: Seagate Expansion Portable; ",
    "0x0bc2:0x2300",
    "",
    "",
    "-d sat"
  },
  { "Seagate Barracuda 7200.14 (AF)", // tested with ST3000DM001-9YN166/CC4B
    "ST(1000|1500|2000|2500|3000)DM00[0-3]-.*",
    "", "",
    "-v 188,raw16 -v 240,msec24hour32"
  },
  { "Seagate Barracuda 7200.14 (AF), CC24 firmware",
    "ST3000DM001-9YN166",
    "CC24",
    "A firmware update for this drive is available,\n"
    "see the following Seagate web pages:\n"
    "http://knowledge.seagate.com/articles/en_US/FAQ/223651en",
    "-v 9,min2hour:543210,Power_On_Minutes -F xerrorlba"
  },
  { "Samsung based SSDs",
    "Samsung SSD 840 (PRO )?Series",
    "", "",
    "-v 177,raw48,Wear_Leveling_Count "
    "-v 241,raw48,Total_LBAs_Written,SSD"
  },
/*
};
 */
'''

SEAGATE_MODEL = "ST3000DM001-9YN166"
SEAGATE_FIRMWARE = "CC24"


def _slot(attr_id, flags=0x0032, value=100, worst=100, raw=(0, 0, 0, 0, 0, 0)):
    return bytes([attr_id, flags & 0xFF, flags >> 8, value, worst, *raw, 0])


# id, flags, value, worst, raw bytes 0..5
SAMPLE_SLOTS = [
    _slot(1, flags=0x000F, value=100, worst=5),
    _slot(5, flags=0x0033, raw=(8, 0, 0, 0, 0, 0)),
    _slot(9, flags=0x0032, value=84, worst=84, raw=(0x2D, 0x3C, 0, 0, 0, 0)),
    _slot(0, flags=0x0032, value=100, worst=100, raw=(1, 2, 3, 4, 5, 6)),
    _slot(194, flags=0x0022, value=30, worst=45, raw=(30, 0, 15, 45, 0, 0)),
    _slot(197, flags=0x0012, raw=(8, 0, 0, 0, 0, 0)),
    _slot(199, flags=0x003E, value=200, worst=200),
    _slot(200, flags=0x0008, value=10, worst=10, raw=(3, 0, 0, 0, 0, 0)),
]

SAMPLE_THRESHOLDS = [(1, 6), (5, 36), (9, 0), (194, 0), (197, 0), (200, 51)]


def build_attribute_table(slots) -> bytes:
    table = bytearray(512)
    table[0] = 0x10  # data structure revision
    for i, slot in enumerate(slots):
        offset = 2 + i * 12
        table[offset:offset + 12] = slot
    return bytes(table)


def build_threshold_table(thresholds) -> bytes:
    table = bytearray(512)
    table[0] = 0x10
    for i, (attr_id, thresh) in enumerate(thresholds):
        offset = 2 + i * 12
        table[offset] = attr_id
        table[offset + 1] = thresh
    return bytes(table)


@pytest.fixture
def sample_db():
    """Parsed SAMPLE_DRIVEDB."""
    return parse_drivedb(SAMPLE_DRIVEDB, source="sample")


@pytest.fixture
def sample_tables():
    """(attribute table, threshold table) for SAMPLE_SLOTS."""
    return (
        build_attribute_table(SAMPLE_SLOTS),
        build_threshold_table(SAMPLE_THRESHOLDS),
    )


@pytest.fixture
def drivedb_file(tmp_path):
    """SAMPLE_DRIVEDB written to disk."""
    path = tmp_path / "drivedb.h"
    path.write_text(SAMPLE_DRIVEDB, encoding="utf-8")
    return path


@pytest.fixture
def dump_files(tmp_path, sample_tables):
    """Sample attribute and threshold tables written to disk."""
    attribute_table, threshold_table = sample_tables
    attr_path = tmp_path / "smart_data.bin"
    thresh_path = tmp_path / "smart_thresholds.bin"
    attr_path.write_bytes(attribute_table)
    thresh_path.write_bytes(threshold_table)
    return attr_path, thresh_path
