"""
CLI display modules.
"""

from cli.display.formatters import describe, hex_bytes, message_kind, note_name
from cli.display.tables import (
    display_header,
    display_messages,
    messages_table,
    sysex_table,
    track_table,
)

__all__ = [
    "describe",
    "display_header",
    "display_messages",
    "hex_bytes",
    "message_kind",
    "messages_table",
    "note_name",
    "sysex_table",
    "track_table",
]
