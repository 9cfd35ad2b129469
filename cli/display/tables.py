"""
Rich table displays for decoded MIDI data.

Provides formatted output for byte streams, Standard MIDI Files and
System Exclusive dumps.
"""

from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cli.display.formatters import KIND_STYLES, describe, hex_bytes, message_kind
from midimsg.message import MidiMsg
from midimsg.smf.file import AlienChunk, MidiFile, TicksPerQuarterNote
from midimsg.sysex.parser import SysExEntry

console = Console()

# (offset, raw bytes, message)
DecodedRow = Tuple[int, bytes, MidiMsg]


def messages_table(rows: List[DecodedRow], title: str = "Messages") -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("Offset", style="dim", justify="right")
    table.add_column("Bytes", style="cyan")
    table.add_column("Kind", width=8)
    table.add_column("Message")

    for offset, raw, msg in rows:
        kind = message_kind(msg)
        style = KIND_STYLES.get(kind, "")
        table.add_row(f"{offset:04X}", hex_bytes(raw, 12), f"[{style}]{kind}[/{style}]", escape(describe(msg)))
    return table


def display_messages(rows: List[DecodedRow], title: str = "Messages") -> None:
    console.print(messages_table(rows, title))


def display_header(midi_file: MidiFile, filename: str = "") -> None:
    """Header panel of a Standard MIDI File."""
    header = midi_file.header
    division = header.division
    if isinstance(division, TicksPerQuarterNote):
        division_text = f"{division.ticks} ticks per quarter note"
    else:
        division_text = (
            f"{division.frames_per_second.name} time code, "
            f"{division.ticks_per_frame} ticks per frame"
        )

    alien = sum(1 for track in midi_file.tracks if isinstance(track, AlienChunk))
    content = f"""[bold]File:[/bold] {filename or "N/A"}
[bold]Format:[/bold] {int(header.format)} ({header.format.name})
[bold]Tracks:[/bold] {header.num_tracks}{f" ({alien} unknown chunks)" if alien else ""}
[bold]Division:[/bold] {division_text}"""

    console.print(
        Panel(
            content,
            title="[bold blue]Standard MIDI File[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )


def track_table(midi_file: MidiFile, track_num: int, limit: Optional[int] = None) -> Table:
    """Event table of one track, with absolute ticks."""
    track = midi_file.tracks[track_num]
    if isinstance(track, AlienChunk):
        table = Table(
            title=f"Track {track_num}: unknown chunk {track.tag!r}",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Size", justify="right")
        table.add_column("Data", style="dim")
        table.add_row(str(len(track.raw)), hex_bytes(track.raw, 24))
        return table

    events = track.events
    table = Table(
        title=f"Track {track_num} ({len(events)} events)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Tick", justify="right", style="dim")
    table.add_column("Delta", justify="right")
    table.add_column("Kind", width=8)
    table.add_column("Event")

    shown = events if limit is None else events[:limit]
    tick = 0
    for event in shown:
        tick += event.delta_time
        kind = message_kind(event.event)
        style = KIND_STYLES.get(kind, "")
        table.add_row(
            str(tick),
            str(event.delta_time),
            f"[{style}]{kind}[/{style}]",
            escape(describe(event.event)),
        )
    if limit is not None and len(events) > limit:
        table.add_row("...", "", "", f"[dim]{len(events) - limit} more events[/dim]")
    return table


def sysex_table(entries: List[SysExEntry], show_raw: bool = False) -> Table:
    table = Table(
        title=f"System Exclusive ({len(entries)} messages)",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Offset", style="dim", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status", width=8)
    table.add_column("Message")
    if show_raw:
        table.add_column("Bytes", style="cyan")

    for i, entry in enumerate(entries):
        if entry.is_valid:
            status = "[green]OK[/green]"
            text = escape(describe(entry.message))
        else:
            status = "[red]Error[/red]"
            text = f"[red]{escape(str(entry.error))}[/red]"
        row = [str(i), f"{entry.offset:06X}", str(len(entry.raw)), status, text]
        if show_raw:
            row.append(hex_bytes(entry.raw, 16))
        table.add_row(*row)
    return table
