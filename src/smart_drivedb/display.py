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
# smart-drivedb-parser/src/smart_drivedb/display.py

"""Rich tabular display for decoded SMART attributes."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .attributes import SmartAttribute
from .matcher import ResolvedMeta

FLAG_LEGEND = (
    "P prefailure warning",
    "O updated during off-line testing",
    "S speed/performance",
    "R error rate",
    "C event count",
    "K auto-keep",
)


def format_byte(value: int | None, missing: str = "---") -> str:
    """Format a value/worst/thresh byte, or a placeholder if absent."""
    if value is None:
        return missing
    return f"{value:3d}"


def format_failing(attr: SmartAttribute) -> Text:
    """Color the fail column: red for failing now, yellow for in the past."""
    failing = attr.failing
    if failing == "now":
        return Text("NOW", style="bold red")
    if failing == "past":
        return Text("past", style="yellow")
    return Text("-", style="dim")


def create_attributes_table(attrs: list[SmartAttribute]) -> Table:
    """Create the attribute table."""
    table = Table(title="S.M.A.R.T. Attributes", show_edge=True)

    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Flags", style="dim")
    table.add_column("Value", justify="right")
    table.add_column("Worst", justify="right")
    table.add_column("Thresh", justify="right")
    table.add_column("Fail", justify="center")
    table.add_column("Raw", justify="right")

    for attr in attrs:
        failing = attr.failing
        row_style = "bold" if failing == "now" else None

        table.add_row(
            str(attr.id),
            attr.name or Text("?", style="dim"),
            attr.flag_string(),
            format_byte(attr.value),
            format_byte(attr.worst),
            format_byte(attr.thresh, missing="(?)"),
            format_failing(attr),
            attr.raw.text,
            style=row_style
        )

    return table


def create_rules_table(resolved: ResolvedMeta) -> Table:
    """Create a table of the effective rules of a resolved drive."""
    table = Table(title=resolved.family or "No drivedb match", show_edge=True)

    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Format")
    table.add_column("Byte order", style="dim")
    table.add_column("Type", style="dim")

    rules = [resolved.rules[k] for k in sorted(resolved.rules)]
    if resolved.wildcard is not None:
        rules.insert(0, resolved.wildcard)

    for rule in rules:
        table.add_row(
            "N" if rule.id is None else str(rule.id),
            rule.name or "-",
            rule.format.value,
            rule.effective_byte_order,
            rule.drive_type.value if rule.drive_type else "-",
        )

    return table


def display_warning(resolved: ResolvedMeta | None, console: Console):
    if resolved is not None and resolved.warning:
        console.print(f"[bold yellow]WARNING:[/bold yellow] {escape(resolved.warning)}")
        console.print()


def display_attributes(attrs: list[SmartAttribute],
                       console: Console | None = None,
                       resolved: ResolvedMeta | None = None):
    """Display decoded attributes using rich tables."""
    if console is None:
        console = Console()

    display_warning(resolved, console)

    if not attrs:
        console.print("No S.M.A.R.T. attributes found.")
        return

    console.print(create_attributes_table(attrs))

    # Legend
    console.print("\n[dim]Flags:[/dim]")
    for line in FLAG_LEGEND:
        console.print(f"[dim]  {line}[/dim]")
