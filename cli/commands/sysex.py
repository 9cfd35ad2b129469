"""
SysEx command - list the messages of a System Exclusive dump.
"""

from pathlib import Path

import typer
from rich.console import Console

from cli.display.tables import sysex_table
from midimsg.sysex.parser import SysExParser

console = Console()


def sysex(
    file: Path = typer.Argument(..., help="System Exclusive file (.syx)"),
    raw: bool = typer.Option(False, "--raw", "-r", help="Show the first bytes of every message"),
    errors_only: bool = typer.Option(False, "--errors", "-e", help="Only list messages that fail to decode"),
) -> None:
    """
    Decode every System Exclusive message of a .syx file.

    Universal messages (identity, sample dump, MTC cueing, tuning, MMC...)
    are decoded in full; manufacturer messages are shown with their ID.

    [bold]Examples:[/bold]

        midimsg sysex dump.syx
        midimsg sysex dump.syx --errors --raw
    """
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    parser = SysExParser()
    entries = parser.parse_file(str(file))
    if not entries:
        console.print("[yellow]No System Exclusive messages found[/yellow]")
        raise typer.Exit(1)

    failed = [entry for entry in entries if not entry.is_valid]
    shown = failed if errors_only else entries
    console.print(sysex_table(shown, show_raw=raw))
    console.print(
        f"[bold]{len(entries)}[/bold] messages, "
        f"[green]{len(entries) - len(failed)} decoded[/green], "
        f"[red]{len(failed)} failed[/red]"
    )
