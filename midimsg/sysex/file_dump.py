"""
File Dump messages (Universal Non-Real Time sub-ID 07).

    07 01 ss tt tt tt tt ll ll ll ll [name...]   Header
    07 02 kk bc [packed data...] cs              Data Packet
    07 03 ss tt tt tt tt [name...]               Request

`ss` is the device ID of the other end of the transfer, `tttt` a four
character ASCII file type such as "MIDI", `llll` the file length as a
28-bit value, LSB first.

Data packets carry up to 112 raw 8-bit bytes, 7-bit packed (see
midimsg.utils.seven_bit). `bc` is the packed length minus one.
"""

import logging
from dataclasses import dataclass
from typing import List

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.utils.packing import (
    ByteSource,
    ascii_bytes,
    decode_u7,
    push_u28,
    to_u7,
    u28_from_midi,
    u7_from_midi,
)
from midimsg.utils.seven_bit import MAX_RAW_LENGTH, decode_7bit, encode_7bit, encoded_length

logger = logging.getLogger("midimsg")

FILE_DUMP = 0x07
HEADER = 0x01
DATA_PACKET = 0x02
REQUEST = 0x03

TYPE_LENGTH = 4


def _push_file_type(file_type: str, out: bytearray) -> None:
    out.extend(ascii_bytes(file_type, TYPE_LENGTH).ljust(TYPE_LENGTH, b" "))


def _read_text(data: ByteSource, start: int, end: int) -> str:
    if len(data) < end:
        raise UnexpectedEnd()
    return bytes(decode_u7(b) for b in data[start:end]).decode("ascii")


@dataclass
class FileDumpHeader:
    """
    Announces a file transfer.

    Attributes:
        requester: Device ID of the device that asked for the file
        file_type: Four character type, e.g. "MIDI", "MIEX", "ESEQ", "TEXT", "BIN "
        length: File length in bytes
        name: File name
    """

    requester: int = 0
    file_type: str = "MIDI"
    length: int = 0
    name: str = ""

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_DUMP, HEADER, to_u7(self.requester)])
        _push_file_type(self.file_type, out)
        push_u28(self.length, out)
        out.extend(ascii_bytes(self.name))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileDumpHeader":
        requester = u7_from_midi(data, 0)
        file_type = _read_text(data, 1, 1 + TYPE_LENGTH)
        length = u28_from_midi(data, 1 + TYPE_LENGTH)
        name = _read_text(data, 5 + TYPE_LENGTH, len(data))
        return cls(requester, file_type, length, name)


@dataclass
class FileDumpPacket:
    """
    One packet of file data. Ends with a checksum.

    Attributes:
        running_count: Packet number, wrapping from 127 to 0
        data: Raw 8-bit file bytes, at most 112
    """

    running_count: int = 0
    data: bytes = b""

    CHECKSUM = True

    def encode_into(self, out: bytearray) -> None:
        raw = bytes(self.data[:MAX_RAW_LENGTH])
        # An empty packet still carries one header byte
        packed = encode_7bit(raw) or b"\x00"
        out.extend([FILE_DUMP, DATA_PACKET, self.running_count & 0x7F, len(packed) - 1])
        out.extend(packed)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileDumpPacket":
        running_count = u7_from_midi(data, 0)
        count = u7_from_midi(data, 1) + 1
        if len(data) < 2 + count:
            raise UnexpectedEnd()
        if len(data) > 2 + count:
            raise Invalid("File dump packet is longer than its byte count")
        packed = [decode_u7(b) for b in data[2 : 2 + count]]
        return cls(running_count, decode_7bit(packed))


@dataclass
class FileDumpRequest:
    requester: int = 0
    file_type: str = "MIDI"
    name: str = ""

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_DUMP, REQUEST, to_u7(self.requester)])
        _push_file_type(self.file_type, out)
        out.extend(ascii_bytes(self.name))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileDumpRequest":
        requester = u7_from_midi(data, 0)
        file_type = _read_text(data, 1, 1 + TYPE_LENGTH)
        name = _read_text(data, 1 + TYPE_LENGTH, len(data))
        return cls(requester, file_type, name)


def split_file(contents: bytes, start_count: int = 0) -> List[FileDumpPacket]:
    """
    Cut a file into data packets of at most 112 bytes.

    Example:
        packets = split_file(Path("song.mid").read_bytes())
        # 1000 bytes -> 9 packets, the last holding 104 bytes
    """
    packets = []
    for offset in range(0, len(contents), MAX_RAW_LENGTH):
        count = (start_count + offset // MAX_RAW_LENGTH) & 0x7F
        packets.append(FileDumpPacket(count, bytes(contents[offset : offset + MAX_RAW_LENGTH])))
    logger.debug(
        "Split %d bytes into %d file dump packets (%d packed bytes each at most)",
        len(contents),
        len(packets),
        encoded_length(MAX_RAW_LENGTH),
    )
    return packets


def join_packets(packets: List[FileDumpPacket]) -> bytes:
    """Concatenate the raw data of received packets."""
    return b"".join(packet.data for packet in packets)
