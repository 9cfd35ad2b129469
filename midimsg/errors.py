"""
Errors raised while decoding MIDI bytes.

Encoders never raise: out-of-range values are clamped. Decoders raise one of
the ParseError subclasses below and never return a partially decoded message.
"""

from typing import List, Optional

PREFIX = "Error parsing MIDI input: "


class ParseError(Exception):
    """Base class for all decoding errors."""

    description = "Invalid input"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.description
        super().__init__(PREFIX + self.message)


class UnexpectedEnd(ParseError):
    """The input ended in the middle of a message."""

    description = "The input ended before the message was complete"


class ByteOverflow(ParseError):
    """A byte that must be 7-bit had its top bit set."""

    description = "A byte exceeded 7 bits"


class ContextlessRunningStatus(ParseError):
    """A data byte arrived with no previous channel status to reuse."""

    description = "Encountered a running status without a previous channel message"


class NoEndOfSystemExclusiveFlag(ParseError):
    """A system exclusive message was not terminated with 0xF7."""

    description = "No End of System Exclusive flag (0xF7) found"


class VlqOverflow(ParseError):
    """A variable-length quantity was longer than four bytes."""

    description = "Variable length quantity exceeded 4 bytes"


class UndefinedSystemRealTimeMessage(ParseError):
    """One of the reserved real-time status bytes (0xF9, 0xFD) was seen."""

    def __init__(self, byte: int):
        self.byte = byte
        super().__init__(f"Undefined System Real Time message: 0x{byte:02X}")


class Invalid(ParseError):
    """Any other structural violation."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class Unimplemented(ParseError):
    """A recognised message class this library does not decode."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Not implemented: {feature}")


class MidiFileParseError(Exception):
    """
    Raised when a Standard MIDI File cannot be decoded.

    Wraps the ParseError that stopped the parser together with everything
    needed to diagnose it.

    Attributes:
        error: The underlying ParseError
        partial_file: The MidiFile as far as it could be parsed
        offset: Byte offset in the file at which parsing stopped
        parsing: Description of what was being parsed (e.g. "track 1 event 4")
        remaining: Number of bytes left in the input from `offset`
        next_bytes: Up to 20 bytes starting at `offset`
    """

    def __init__(
        self,
        error: ParseError,
        partial_file,
        offset: int,
        parsing: str,
        remaining: int,
        next_bytes: List[int],
    ):
        self.error = error
        self.partial_file = partial_file
        self.offset = offset
        self.parsing = parsing
        self.remaining = remaining
        self.next_bytes = list(next_bytes)
        super().__init__(str(self))

    def __str__(self) -> str:
        next_hex = " ".join(f"{b:02x}" for b in self.next_bytes)
        return (
            f"Error parsing MIDI file at position {self.offset}: {self.error}\n"
            f"Encountered this error while parsing: {self.parsing}\n"
            f"The incomplete MidiFile that managed to be parsed: {self.partial_file!r}\n\n"
            f"{self.remaining} bytes remain in the file. These are the next ones: [{next_hex}]"
        )
