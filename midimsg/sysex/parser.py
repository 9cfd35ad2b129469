"""
Reader for .syx files: a concatenation of System Exclusive messages.

Bytes between messages are skipped. Every message is decoded on its own, so
one malformed message does not stop the rest of the file from being read.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from midimsg.context import ReceiverContext
from midimsg.errors import ParseError
from midimsg.sysex.envelope import SYSEX_END, SYSEX_START, parse_system_exclusive

logger = logging.getLogger("midimsg")


@dataclass
class SysExEntry:
    """
    One message found in a .syx file.

    Attributes:
        offset: Position of the F0 byte in the file
        raw: Message bytes including F0 and F7
        message: Decoded envelope, None if decoding failed
        error: Why decoding failed
    """

    offset: int
    raw: bytes
    message: Optional[object] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.message is not None


class SysExParser:
    """
    Parser for .syx files.

    Example:
        parser = SysExParser()
        entries = parser.parse_file("dump.syx")

        for entry in entries:
            if entry.is_valid:
                print(entry.offset, entry.message)
    """

    SYSEX_START = SYSEX_START
    SYSEX_END = SYSEX_END

    def __init__(self):
        self.entries: List[SysExEntry] = []

    def parse_file(self, filepath: str) -> List[SysExEntry]:
        """
        Parse a SysEx file.

        Args:
            filepath: Path to .syx file

        Returns:
            List of SysExEntry, in file order
        """
        with open(filepath, "rb") as f:
            data = f.read()
        return self.parse_bytes(data)

    def parse_bytes(self, data: Union[bytes, bytearray]) -> List[SysExEntry]:
        self.entries = []

        if isinstance(data, bytearray):
            data = bytes(data)

        for offset, raw in self._split_messages(data):
            self.entries.append(self._parse_message(offset, raw))

        return self.entries

    def _split_messages(self, data: bytes) -> List[tuple]:
        """Split data into (offset, message bytes) pairs."""
        messages = []
        start = None

        for i, byte in enumerate(data):
            if byte == self.SYSEX_START:
                if start is not None:
                    logger.debug("Unterminated system exclusive message at offset %d", start)
                start = i
            elif byte == self.SYSEX_END and start is not None:
                messages.append((start, data[start : i + 1]))
                start = None

        if start is not None:
            logger.debug("Unterminated system exclusive message at offset %d", start)
        return messages

    def _parse_message(self, offset: int, raw: bytes) -> SysExEntry:
        try:
            message, _ = parse_system_exclusive(raw, ReceiverContext.default())
        except ParseError as e:
            logger.debug("Could not decode message at offset %d: %s", offset, e)
            return SysExEntry(offset, raw, error=e.message)
        return SysExEntry(offset, raw, message)
