"""
SMF command - show the contents of a Standard MIDI File.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from cli.display.tables import display_header, track_table
from midimsg.errors import MidiFileParseError
from midimsg.smf.file import MidiFile

console = Console()


def smf(
    file: Path = typer.Argument(..., help="Standard MIDI File (.mid)"),
    track: Optional[int] = typer.Option(None, "--track", "-t", help="Show only this track (0-based)"),
    limit: Optional[int] = typer.Option(50, "--limit", "-n", help="Events shown per track"),
    all_events: bool = typer.Option(False, "--all", "-a", help="Show every event"),
    complex_cc: bool = typer.Option(
        False, "--complex-cc", help="Assemble 14-bit controllers and RPN/NRPN sequences"
    ),
) -> None:
    """
    Display the header and track events of a .mid file.

    [bold]Examples:[/bold]

        midimsg smf song.mid
        midimsg smf song.mid --track 1 --all
    """
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    try:
        midi_file = MidiFile.read(file, complex_cc=complex_cc)
    except MidiFileParseError as e:
        console.print(f"[red]Error at byte {e.offset} while parsing {e.parsing}: {escape(str(e.error))}[/red]")
        console.print(f"[dim]Next bytes: {' '.join(f'{b:02X}' for b in e.next_bytes)}[/dim]")
        raise typer.Exit(1)

    display_header(midi_file, file.name)

    if track is not None and not 0 <= track < len(midi_file.tracks):
        console.print(f"[red]Error: Track {track} out of range (0-{len(midi_file.tracks) - 1})[/red]")
        raise typer.Exit(1)

    shown = range(len(midi_file.tracks)) if track is None else [track]
    for track_num in shown:
        console.print()
        console.print(track_table(midi_file, track_num, None if all_events else limit))
