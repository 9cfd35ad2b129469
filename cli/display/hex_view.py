"""
Hex dump display utilities.
"""

from typing import List, Optional, Sequence, Tuple

from rich.text import Text

# (start, end, name, color) with end exclusive
Region = Tuple[int, int, str, str]


def region_for_offset(regions: Sequence[Region], offset: int) -> Optional[Region]:
    """Find the region that contains `offset`."""
    for region in regions:
        if region[0] <= offset < region[1]:
            return region
    return None


def format_hex_line(
    data: bytes,
    offset: int,
    bytes_per_line: int,
    regions: Sequence[Region] = (),
    start_offset: int = 0,
) -> Text:
    """Format one dump line with bytes colored by region."""
    line = Text()
    line.append(f"{start_offset + offset:08X}", style="dim")
    line.append("  ")

    chunk = data[offset : offset + bytes_per_line]
    for i, b in enumerate(chunk):
        if i == 8:
            line.append(" ")
        region = region_for_offset(regions, offset + i)
        if region is not None:
            style = region[3]
        elif b == 0:
            style = "dim"
        elif b & 0x80:
            style = "bold"
        else:
            style = ""
        line.append(f"{b:02X}", style=style)
        line.append(" ")

    # Pad short last line
    missing = bytes_per_line - len(chunk)
    if missing > 0:
        line.append("   " * missing + (" " if len(chunk) <= 8 < bytes_per_line else ""))

    line.append(" ")
    line.append("".join(chr(b) if 32 <= b < 127 else "." for b in chunk), style="cyan")
    return line


def create_legend(regions: Sequence[Region]) -> Text:
    """Legend listing each region name once in its color."""
    legend = Text()
    seen: List[str] = []
    for _, _, name, color in regions:
        if name in seen:
            continue
        seen.append(name)
        if legend:
            legend.append("  ")
        legend.append("██", style=color)
        legend.append(f" {name}")
    return legend
