"""
Manufacturer and device identifiers used by System Exclusive messages.

A manufacturer ID is either one byte (0x01-0x7C) or three bytes starting
with 0x00:

    F0 41 ...            Roland
    F0 00 20 33 ...      extended ID 00 20 33

IDs 0x7D, 0x7E and 0x7F are reserved for the non-commercial and universal
envelopes and can not be used by a Commercial message.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from midimsg.errors import UnexpectedEnd
from midimsg.utils.packing import ByteSource, clamp, decode_u7, to_u7

ALL_CALL = 0x7F


@dataclass(frozen=True)
class ManufacturerID:
    """
    A manufacturer ID.

    Attributes:
        first: The single byte ID, or the first byte after 0x00 of an
            extended ID
        second: The last byte of an extended ID, None for single byte IDs

    Example:
        ManufacturerID(0x43)          # Yamaha
        ManufacturerID(0x20, 0x33)    # encoded as 00 20 33
    """

    first: int
    second: Optional[int] = None

    @property
    def is_extended(self) -> bool:
        return self.second is not None

    def to_bytes(self) -> Tuple[int, ...]:
        if self.second is None:
            return (clamp(self.first, 0x01, 0x7C),)
        return (0x00, to_u7(self.first), to_u7(self.second))

    def encode_into(self, out: bytearray) -> None:
        out.extend(self.to_bytes())

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> Tuple["ManufacturerID", int]:
        """
        Read an ID at `index`.

        Returns:
            Tuple of (ManufacturerID, bytes consumed)
        """
        if len(data) <= index:
            raise UnexpectedEnd()
        first = decode_u7(data[index])
        if first != 0x00:
            return cls(first), 1
        if len(data) < index + 3:
            raise UnexpectedEnd()
        return cls(decode_u7(data[index + 1]), decode_u7(data[index + 2])), 3

    def __str__(self) -> str:
        name = KNOWN_MANUFACTURERS.get(self)
        raw = " ".join(f"{b:02X}" for b in self.to_bytes())
        return f"{name} ({raw})" if name else raw


ROLAND = ManufacturerID(0x41)
KORG = ManufacturerID(0x42)
YAMAHA = ManufacturerID(0x43)
CASIO = ManufacturerID(0x44)
AKAI = ManufacturerID(0x47)

KNOWN_MANUFACTURERS = {
    ROLAND: "Roland",
    KORG: "Korg",
    YAMAHA: "Yamaha",
    CASIO: "Casio",
    AKAI: "Akai",
}


def device_byte(device: int) -> int:
    """Clamp a receiver device ID; 0x7F addresses every device."""
    return to_u7(device)
