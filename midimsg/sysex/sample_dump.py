"""
Sample Dump Standard messages (Universal Non-Real Time).

    01 ss ss ee pp pp pp ll ll ll sl sl sl el el el tt    Dump Header
    02 kk [120 data bytes] cs                             Data Packet
    03 ss ss                                              Dump Request
    05 01 ss ss bb bb tt sl sl sl el el el                Loop Point Transmission
    05 02 ss ss bb bb                                     Loop Points Request
    05 03 ss ss tl [tag] nl [name]                        Sample Name Transmission
    05 04 ss ss                                           Sample Name Request
    05 05 ss ss ee rr*4 ff*4 ll*5 sl*5 el*5 tt cc         Extended Dump Header
    05 06 ss ss bb bb tt sl*5 el*5                        Extended Loop Point Transmission
    05 07 ss ss bb bb                                     Extended Loop Points Request

Sample and loop numbers are 14-bit, wider fields are 21, 28 or 35-bit, all
written LSB first.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Union

from midimsg.errors import UnexpectedEnd
from midimsg.utils.packing import (
    ByteSource,
    ascii_bytes,
    clamp,
    decode_u7,
    push_u14,
    push_u21,
    push_u28,
    push_u35,
    to_u7,
    u14_from_midi,
    u21_from_midi,
    u28_from_midi,
    u35_from_midi,
    u7_from_midi,
)

HEADER = 0x01
DATA_PACKET = 0x02
REQUEST = 0x03
EXTENSIONS = 0x05
LOOP_POINT_TRANSMISSION = 0x01
LOOP_POINTS_REQUEST = 0x02
NAME_TRANSMISSION = 0x03
NAME_REQUEST = 0x04
EXTENDED_HEADER = 0x05
EXTENDED_LOOP_POINT_TRANSMISSION = 0x06
EXTENDED_LOOP_POINTS_REQUEST = 0x07

PACKET_DATA_LENGTH = 120

# Loop number that addresses every loop of a sample
ALL_LOOPS = 0x3FFF


class LoopType(IntEnum):
    FORWARD = 0x00
    BIDIRECTIONAL = 0x01
    OFF = 0x7F


def _loop_type(byte: int) -> Union[LoopType, int]:
    try:
        return LoopType(byte)
    except ValueError:
        return byte


@dataclass
class SampleDumpHeader:
    """
    Announces a sample dump.

    Attributes:
        sample_number: 0-16383
        format: Significant bits per sample, 8-28
        period: Sample period in nanoseconds
        length: Sample length in words
        sustain_loop_start: Word number
        sustain_loop_end: Word number
        loop_type: Sustain loop type
    """

    sample_number: int = 0
    format: int = 16
    period: int = 22675
    length: int = 0
    sustain_loop_start: int = 0
    sustain_loop_end: int = 0
    loop_type: Union[LoopType, int] = LoopType.OFF

    def encode_into(self, out: bytearray) -> None:
        out.append(HEADER)
        push_u14(self.sample_number, out)
        out.append(clamp(self.format, 8, 28))
        push_u21(self.period, out)
        push_u21(self.length, out)
        push_u21(self.sustain_loop_start, out)
        push_u21(self.sustain_loop_end, out)
        out.append(to_u7(int(self.loop_type)))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleDumpHeader":
        return cls(
            sample_number=u14_from_midi(data, 0),
            format=u7_from_midi(data, 2),
            period=u21_from_midi(data, 3),
            length=u21_from_midi(data, 6),
            sustain_loop_start=u21_from_midi(data, 9),
            sustain_loop_end=u21_from_midi(data, 12),
            loop_type=_loop_type(u7_from_midi(data, 15)),
        )


@dataclass
class SampleDataPacket:
    """
    120 bytes of sample data. Ends with a checksum.

    `running_count` wraps from 127 back to 0. Shorter data is padded with
    zeros.
    """

    running_count: int = 0
    data: bytes = b""

    CHECKSUM = True

    def encode_into(self, out: bytearray) -> None:
        out.extend([DATA_PACKET, self.running_count & 0x7F])
        body = bytes(to_u7(b) for b in self.data[:PACKET_DATA_LENGTH])
        out.extend(body.ljust(PACKET_DATA_LENGTH, b"\x00"))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleDataPacket":
        running_count = u7_from_midi(data, 0)
        if len(data) < 1 + PACKET_DATA_LENGTH:
            raise UnexpectedEnd()
        body = bytes(decode_u7(b) for b in data[1 : 1 + PACKET_DATA_LENGTH])
        return cls(running_count, body)


@dataclass
class SampleDumpRequest:
    sample_number: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.append(REQUEST)
        push_u14(self.sample_number, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleDumpRequest":
        return cls(u14_from_midi(data, 0))


@dataclass
class SampleLoopPointTransmission:
    sample_number: int = 0
    loop_number: int = 0
    loop_type: Union[LoopType, int] = LoopType.FORWARD
    start: int = 0
    end: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, LOOP_POINT_TRANSMISSION])
        push_u14(self.sample_number, out)
        push_u14(self.loop_number, out)
        out.append(to_u7(int(self.loop_type)))
        push_u21(self.start, out)
        push_u21(self.end, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleLoopPointTransmission":
        return cls(
            sample_number=u14_from_midi(data, 0),
            loop_number=u14_from_midi(data, 2),
            loop_type=_loop_type(u7_from_midi(data, 4)),
            start=u21_from_midi(data, 5),
            end=u21_from_midi(data, 8),
        )


@dataclass
class SampleLoopPointsRequest:
    sample_number: int = 0
    loop_number: int = ALL_LOOPS

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, LOOP_POINTS_REQUEST])
        push_u14(self.sample_number, out)
        push_u14(self.loop_number, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleLoopPointsRequest":
        return cls(u14_from_midi(data, 0), u14_from_midi(data, 2))


def _read_counted_text(data: ByteSource, index: int):
    """Read `len text...` and return (text, next index)."""
    length = u7_from_midi(data, index)
    if len(data) < index + 1 + length:
        raise UnexpectedEnd()
    raw = bytes(decode_u7(b) for b in data[index + 1 : index + 1 + length])
    return raw.decode("ascii"), index + 1 + length


@dataclass
class SampleNameTransmission:
    """
    Attributes:
        sample_number: 0-16383
        name: ASCII name, at most 127 characters
        language_tag: Optional language tag, empty for none
    """

    sample_number: int = 0
    name: str = ""
    language_tag: str = ""

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, NAME_TRANSMISSION])
        push_u14(self.sample_number, out)
        for text in (self.language_tag, self.name):
            raw = ascii_bytes(text, 127)
            out.append(len(raw))
            out.extend(raw)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleNameTransmission":
        sample_number = u14_from_midi(data, 0)
        language_tag, index = _read_counted_text(data, 2)
        name, _ = _read_counted_text(data, index)
        return cls(sample_number, name, language_tag)


@dataclass
class SampleNameRequest:
    sample_number: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, NAME_REQUEST])
        push_u14(self.sample_number, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "SampleNameRequest":
        return cls(u14_from_midi(data, 0))


@dataclass
class ExtendedSampleDumpHeader:
    """
    Header for samples longer than 2^21 words or with a fractional rate.

    Attributes:
        sample_number: 0-16383
        format: Significant bits per sample, 8-28
        sample_rate: Integer part of the rate in Hz
        sample_rate_fraction: Fractional part of the rate, in 2^-28 Hz
        length: Sample length in words
        sustain_loop_start: Word number
        sustain_loop_end: Word number
        loop_type: Sustain loop type
        channels: Channel count, 0 meaning unspecified
    """

    sample_number: int = 0
    format: int = 16
    sample_rate: int = 44100
    sample_rate_fraction: int = 0
    length: int = 0
    sustain_loop_start: int = 0
    sustain_loop_end: int = 0
    loop_type: Union[LoopType, int] = LoopType.OFF
    channels: int = 1

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, EXTENDED_HEADER])
        push_u14(self.sample_number, out)
        out.append(clamp(self.format, 8, 28))
        push_u28(self.sample_rate, out)
        push_u28(self.sample_rate_fraction, out)
        push_u35(self.length, out)
        push_u35(self.sustain_loop_start, out)
        push_u35(self.sustain_loop_end, out)
        out.append(to_u7(int(self.loop_type)))
        out.append(to_u7(self.channels))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ExtendedSampleDumpHeader":
        return cls(
            sample_number=u14_from_midi(data, 0),
            format=u7_from_midi(data, 2),
            sample_rate=u28_from_midi(data, 3),
            sample_rate_fraction=u28_from_midi(data, 7),
            length=u35_from_midi(data, 11),
            sustain_loop_start=u35_from_midi(data, 16),
            sustain_loop_end=u35_from_midi(data, 21),
            loop_type=_loop_type(u7_from_midi(data, 26)),
            channels=u7_from_midi(data, 27),
        )


@dataclass
class ExtendedLoopPointTransmission:
    sample_number: int = 0
    loop_number: int = 0
    loop_type: Union[LoopType, int] = LoopType.FORWARD
    start: int = 0
    end: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, EXTENDED_LOOP_POINT_TRANSMISSION])
        push_u14(self.sample_number, out)
        push_u14(self.loop_number, out)
        out.append(to_u7(int(self.loop_type)))
        push_u35(self.start, out)
        push_u35(self.end, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ExtendedLoopPointTransmission":
        return cls(
            sample_number=u14_from_midi(data, 0),
            loop_number=u14_from_midi(data, 2),
            loop_type=_loop_type(u7_from_midi(data, 4)),
            start=u35_from_midi(data, 5),
            end=u35_from_midi(data, 10),
        )


@dataclass
class ExtendedLoopPointsRequest:
    sample_number: int = 0
    loop_number: int = ALL_LOOPS

    def encode_into(self, out: bytearray) -> None:
        out.extend([EXTENSIONS, EXTENDED_LOOP_POINTS_REQUEST])
        push_u14(self.sample_number, out)
        push_u14(self.loop_number, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ExtendedLoopPointsRequest":
        return cls(u14_from_midi(data, 0), u14_from_midi(data, 2))


def split_sample_data(samples: bytes, start_count: int = 0) -> List[SampleDataPacket]:
    """
    Cut already packed sample bytes into data packets.

    Args:
        samples: 7-bit sample data, as laid out by the dump header format
        start_count: Running count of the first packet

    Returns:
        List of SampleDataPacket
    """
    packets = []
    for offset in range(0, len(samples), PACKET_DATA_LENGTH):
        count = (start_count + offset // PACKET_DATA_LENGTH) & 0x7F
        packets.append(SampleDataPacket(count, bytes(samples[offset : offset + PACKET_DATA_LENGTH])))
    return packets
