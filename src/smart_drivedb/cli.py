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
# smart-drivedb-parser/src/smart_drivedb/cli.py

"""Command-line interface for decoding SMART attribute dumps."""

import json
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from .attributes import attributes_to_frame, decode_attributes
from .display import create_rules_table, display_attributes, display_warning
from .drivedb import DRIVEDB_ENV_VAR, default_candidates, load_drivedb, parse_drivedb
from .errors import (
    DatabaseParseError,
    InvalidLengthError,
    OverrideParseError,
    format_error,
)
from .matcher import ResolvedMeta, resolve
from .rules import AttributeRule, DriveType, parse_vendor_attribute

app = typer.Typer()


def configure_logging(verbose: bool):
    if not verbose:
        logger.remove()
        logger.add(lambda _: None)  # Suppress all logging


def parse_overrides(specs: list[str] | None) -> list[AttributeRule]:
    """Parse -v specs, skipping (and logging) the ones that are malformed."""
    rules = []
    for spec in specs or []:
        try:
            rules.append(parse_vendor_attribute(spec))
        except OverrideParseError as e:
            logger.warning(f"Skipping {format_error(e)}")
    return rules


def _resolve_drive(
    model: str,
    firmware: str,
    drive_type: DriveType | None,
    vendor_attribute: list[str] | None,
    drivedb: Path | None,
) -> ResolvedMeta:
    db = load_drivedb(default_candidates(drivedb))
    return resolve(
        db,
        model,
        firmware,
        drive_type_hint=drive_type,
        user_overrides=parse_overrides(vendor_attribute),
    )


@app.command()
def attrs(
    attribute_file: Path = typer.Argument(
        ...,
        help="512-byte SMART READ DATA dump"
    ),
    threshold_file: Path = typer.Argument(
        ...,
        help="512-byte SMART READ THRESHOLDS dump"
    ),
    model: str = typer.Option(
        "",
        "--model",
        help="Drive model string used for the drivedb lookup"
    ),
    firmware: str = typer.Option(
        "",
        "--firmware",
        help="Drive firmware revision used for the drivedb lookup"
    ),
    drive_type: DriveType | None = typer.Option(
        None,
        "--drive-type",
        case_sensitive=False,
        help="HDD or SSD, prefers matching drivedb rules"
    ),
    vendor_attribute: list[str] | None = typer.Option(
        None,
        "--vendorattribute",
        "-v",
        metavar="id,format[:byteorder][,name]",
        help="Set display option for vendor attribute 'id'"
    ),
    drivedb: Path | None = typer.Option(
        None,
        "--drivedb",
        envvar=DRIVEDB_ENV_VAR,
        help="drivedb.h file to use before the system locations"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON"
    ),
    csv_output: bool = typer.Option(
        False,
        "--csv",
        help="Output results as CSV"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging output"
    ),
):
    """Print the S.M.A.R.T. attributes contained in a table dump."""
    configure_logging(verbose)

    try:
        resolved = _resolve_drive(model, firmware, drive_type, vendor_attribute, drivedb)
        values = decode_attributes(
            attribute_file.read_bytes(),
            threshold_file.read_bytes(),
            resolved,
        )
    except (InvalidLengthError, OSError) as e:
        logger.error(f"Decoding failed: {e}")
        typer.echo(format_error(e), err=True)
        raise typer.Exit(1)

    if json_output:
        output = {
            'drive': resolved.to_dict(),
            'attributes': [attr.to_dict() for attr in values],
        }
        typer.echo(json.dumps(output, indent=2))
    elif csv_output:
        typer.echo(attributes_to_frame(values).write_csv(), nl=False)
    else:
        console = Console()
        display_attributes(values, console, resolved=resolved)


@app.command()
def lookup(
    model: str = typer.Option(..., "--model", help="Drive model string"),
    firmware: str = typer.Option("", "--firmware", help="Firmware revision"),
    drive_type: DriveType | None = typer.Option(
        None,
        "--drive-type",
        case_sensitive=False,
        help="HDD or SSD"
    ),
    vendor_attribute: list[str] | None = typer.Option(
        None,
        "--vendorattribute",
        "-v",
        metavar="id,format[:byteorder][,name]",
        help="Set display option for vendor attribute 'id'"
    ),
    drivedb: Path | None = typer.Option(
        None,
        "--drivedb",
        envvar=DRIVEDB_ENV_VAR,
        help="drivedb.h file to use before the system locations"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """Show which drivedb entries match a drive and the rules they yield."""
    configure_logging(verbose)

    resolved = _resolve_drive(model, firmware, drive_type, vendor_attribute, drivedb)

    if json_output:
        typer.echo(json.dumps(resolved.to_dict(), indent=2))
        return

    console = Console()
    display_warning(resolved, console)
    console.print(create_rules_table(resolved))


@app.command("check-db")
def check_db(
    path: Path = typer.Argument(..., help="drivedb.h file to validate"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """Parse a drivedb file and report problems."""
    configure_logging(verbose)

    try:
        db = parse_drivedb(path.read_text(encoding="utf-8", errors="replace"), source=str(path))
    except (DatabaseParseError, OSError) as e:
        typer.echo(f"{path}: {format_error(e)}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{path}: {len(db)} records")
    if db.version:
        typer.echo(f"version: {db.version}")


if __name__ == "__main__":
    app()
