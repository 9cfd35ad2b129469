"""
Decode command - decode a raw MIDI byte stream.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from cli.display.tables import display_messages
from midimsg.context import ReceiverContext
from midimsg.errors import ParseError
from midimsg.message import iter_decode

console = Console()
logger = logging.getLogger("midimsg")


def parse_hex(values: List[str]) -> bytes:
    """
    Parse hex bytes given as separate arguments or one string.

    Example:
        parse_hex(["90", "3C", "64"]) == parse_hex(["903c64"]) == b"\\x90\\x3c\\x64"
    """
    text = "".join(values).replace(",", "").replace(" ", "").replace("0x", "")
    return bytes.fromhex(text)


def decode(
    hex_bytes: Optional[List[str]] = typer.Argument(None, help="Bytes in hex, e.g. 90 3C 64"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read raw bytes from a file"),
    raw_cc: bool = typer.Option(False, "--raw-cc", help="Do not pair controllers or assemble parameters"),
    smf: bool = typer.Option(False, "--smf", help="Decode FF as a meta event, as inside a .mid track"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Stop after this many messages"),
) -> None:
    """
    Decode a MIDI byte stream into messages.

    Running status, 14-bit controllers and RPN/NRPN sequences are tracked
    across the stream.

    [bold]Examples:[/bold]

        midimsg decode 90 3C 64 3E 64
        midimsg decode B0 07 64 B0 27 20
        midimsg decode --file capture.bin --limit 50
    """
    if file is not None:
        if not file.exists():
            console.print(f"[red]Error: File not found: {file}[/red]")
            raise typer.Exit(1)
        data = file.read_bytes()
    elif hex_bytes:
        try:
            data = parse_hex(hex_bytes)
        except ValueError:
            console.print("[red]Error: Invalid hex input[/red]")
            raise typer.Exit(1)
    else:
        console.print("[red]Error: Give hex bytes or --file[/red]")
        raise typer.Exit(1)

    context = ReceiverContext.default().with_complex_cc(not raw_cc)
    if smf:
        context = context.for_smf()

    rows = []
    try:
        for msg, offset, consumed in iter_decode(data, context):
            rows.append((offset, data[offset : offset + consumed], msg))
            if limit is not None and len(rows) >= limit:
                break
    except ParseError as e:
        if rows:
            display_messages(rows, title=f"Messages ({len(rows)})")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    logger.info("Decoded %d messages from %d bytes", len(rows), len(data))
    display_messages(rows, title=f"Messages ({len(rows)})")
