"""
Dump command - annotated hex dump of a .mid or .syx file.
"""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from cli.display.hex_view import Region, create_legend, format_hex_line
from midimsg.smf.file import CHUNK_HEADER_SIZE, HEADER_TAG, TRACK_TAG
from midimsg.sysex.parser import SysExParser

console = Console()

TRACK_COLORS = ["green", "yellow", "magenta", "cyan", "red", "blue"]


def smf_regions(data: bytes) -> List[Region]:
    """Regions for the chunks of a Standard MIDI File."""
    regions: List[Region] = []
    offset = 0
    track_num = 0
    while offset + CHUNK_HEADER_SIZE <= len(data):
        tag = data[offset : offset + 4]
        length = int.from_bytes(data[offset + 4 : offset + 8], "big")
        body_end = min(offset + CHUNK_HEADER_SIZE + length, len(data))
        if tag == HEADER_TAG:
            regions.append((offset, body_end, "HEADER", "bright_blue"))
        elif tag == TRACK_TAG:
            color = TRACK_COLORS[track_num % len(TRACK_COLORS)]
            regions.append((offset, offset + CHUNK_HEADER_SIZE, "CHUNK", "bold bright_blue"))
            regions.append((offset + CHUNK_HEADER_SIZE, body_end, f"TRACK {track_num}", color))
            track_num += 1
        else:
            regions.append((offset, body_end, "ALIEN", "dim"))
        offset = body_end
    return regions


def sysex_regions(data: bytes) -> List[Region]:
    """One region per System Exclusive message, red if it fails to decode."""
    regions: List[Region] = []
    for i, entry in enumerate(SysExParser().parse_bytes(data)):
        if entry.is_valid:
            color = TRACK_COLORS[i % 2]
            name = "SYSEX" if i % 2 == 0 else "SYSEX (next)"
        else:
            color, name = "red", "INVALID"
        regions.append((entry.offset, entry.offset + len(entry.raw), name, color))
    return regions


def file_regions(file: Path, data: bytes) -> List[Region]:
    if data[:4] == HEADER_TAG:
        return smf_regions(data)
    if file.suffix.lower() == ".syx" or data[:1] == b"\xf0":
        return sysex_regions(data)
    return []


def dump(
    file: Path = typer.Argument(..., help="File to dump"),
    start: int = typer.Option(0, "--start", "-s", help="Start offset"),
    length: int = typer.Option(0, "--length", "-l", help="Number of bytes (0=all)"),
    width: int = typer.Option(16, "--width", "-w", help="Bytes per line"),
    no_legend: bool = typer.Option(False, "--no-legend", help="Hide the legend"),
    region: str = typer.Option("", "--region", "-r", help="Show only one region (e.g. HEADER, 'TRACK 1')"),
) -> None:
    """
    Annotated hex dump of a MIDI file.

    Chunks of a .mid file and messages of a .syx file are color coded.
    Status bytes are shown in bold.

    [bold]Examples:[/bold]

        midimsg dump song.mid
        midimsg dump song.mid --region "TRACK 1"
        midimsg dump dump.syx --start 256 --length 128
    """
    if not file.exists():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(1)

    data = file.read_bytes()
    regions = file_regions(file, data)

    if region:
        matches = [r for r in regions if r[2].upper() == region.upper()]
        if not matches:
            console.print(f"[red]Unknown region: {region}[/red]")
            names = sorted({r[2] for r in regions})
            console.print("Available regions: " + (", ".join(names) or "none"))
            raise typer.Exit(1)
        start = matches[0][0]
        length = matches[0][1] - matches[0][0]

    if length == 0:
        length = len(data) - start
    end = min(start + length, len(data))

    if not no_legend and regions:
        console.print(create_legend(regions))
        console.print()

    console.print(
        Panel(
            f"[bold]File:[/bold] {file}\n"
            f"[bold]Size:[/bold] {len(data)} bytes\n"
            f"[bold]Showing:[/bold] 0x{start:04X} - 0x{max(end - 1, start):04X} ({max(end - start, 0)} bytes)",
            title="[bold]Hex Dump[/bold]",
            border_style="blue",
        )
    )

    window = data[start:end]
    lines_shown = 0
    shifted = [(r[0] - start, r[1] - start, r[2], r[3]) for r in regions]
    for offset in range(0, len(window), width):
        console.print(format_hex_line(window, offset, width, shifted, start))
        lines_shown += 1

    console.print()
    console.print(Text(f"Total: {lines_shown} lines displayed", style="dim"))
