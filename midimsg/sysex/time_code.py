"""
Universal System Exclusive time code messages.

    RT   01 01 hr mn sc fr                  Full Time Code
    RT   01 02 u1 .. u9                     User Bits
    RT   05 tt sl sm [add...]               Time Code Cueing
    NRT  04 tt hr mn sc fr ff sl sm [add...] Time Code Cueing Set-Up

Cueing events may carry additional information: either a list of MIDI
messages or, for EVENT_NAME, an ASCII name. Both are sent nibblized, low
nibble first.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.time_code import HighResTimeCode, TimeCode, UserBits
from midimsg.utils.packing import (
    ByteSource,
    ascii_bytes,
    decode_u7,
    denibblize,
    nibblize,
    push_u14,
    u14_from_midi,
    u7_from_midi,
)

TIME_CODE = 0x01
FULL_MESSAGE = 0x01
USER_BITS = 0x02
CUEING_SETUP = 0x04
CUEING = 0x05


@dataclass
class TimeCodeFull:
    """Locate to a time code. Receiving it resets the context's time code."""

    time_code: TimeCode = field(default_factory=TimeCode)

    def encode_into(self, out: bytearray) -> None:
        out.extend([TIME_CODE, FULL_MESSAGE])
        self.time_code.encode_full(out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TimeCodeFull":
        if len(data) > 4:
            raise Invalid("Unexpected data after a full time code message")
        time_code = TimeCode.parse_full(data, 0)
        if ctx is not None:
            ctx.time_code = time_code.copy()
        return cls(time_code)


@dataclass
class TimeCodeUserBits:
    user_bits: UserBits = field(default_factory=UserBits)

    def encode_into(self, out: bytearray) -> None:
        out.extend([TIME_CODE, USER_BITS])
        out.extend(self.user_bits.to_nibbles())

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TimeCodeUserBits":
        return cls(UserBits.from_nibbles(data))


class CueingType(IntEnum):
    SPECIAL = 0x00
    PUNCH_IN = 0x01
    PUNCH_OUT = 0x02
    DELETE_PUNCH_IN = 0x03
    DELETE_PUNCH_OUT = 0x04
    EVENT_START = 0x05
    EVENT_STOP = 0x06
    EVENT_START_WITH_INFO = 0x07
    EVENT_STOP_WITH_INFO = 0x08
    DELETE_EVENT_START = 0x09
    DELETE_EVENT_STOP = 0x0A
    CUE_POINT = 0x0B
    CUE_POINT_WITH_INFO = 0x0C
    DELETE_CUE_POINT = 0x0D
    EVENT_NAME = 0x0E


def _cueing_type(byte: int) -> CueingType:
    try:
        return CueingType(byte)
    except ValueError:
        raise Invalid(f"Unknown time code cueing type: 0x{byte:02X}") from None


def _push_additional(cueing_type: CueingType, info: list, name: Optional[str], out: bytearray) -> None:
    if cueing_type == CueingType.EVENT_NAME:
        out.extend(nibblize(ascii_bytes(name or "")))
    elif info:
        from midimsg.message import encode_many

        out.extend(nibblize(encode_many(info)))


def _read_additional(cueing_type: CueingType, data: ByteSource):
    """Return (additional_info, name) from the nibblized tail of a cueing message."""
    raw = denibblize([decode_u7(b) for b in data])
    if cueing_type == CueingType.EVENT_NAME:
        return [], raw.decode("ascii", errors="replace")
    if not raw:
        return [], None
    from midimsg.message import decode_all

    return decode_all(raw), None


@dataclass
class TimeCodeCueing:
    """
    A cue sent in real time, at the moment it happens.

    Attributes:
        cueing_type: What the event is
        event_number: 0-16383
        additional_info: MIDI messages to send with the event
        name: Event name, only for CueingType.EVENT_NAME
    """

    cueing_type: CueingType = CueingType.CUE_POINT
    event_number: int = 0
    additional_info: list = field(default_factory=list)
    name: Optional[str] = None

    def encode_into(self, out: bytearray) -> None:
        out.extend([CUEING, int(self.cueing_type)])
        push_u14(self.event_number, out)
        _push_additional(self.cueing_type, self.additional_info, self.name, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TimeCodeCueing":
        cueing_type = _cueing_type(u7_from_midi(data, 0))
        event_number = u14_from_midi(data, 1)
        info, name = _read_additional(cueing_type, data[3:])
        return cls(cueing_type, event_number, info, name)


@dataclass
class TimeCodeCueingSetup:
    """A cue scheduled ahead of time at `time_code`."""

    cueing_type: CueingType = CueingType.CUE_POINT
    time_code: HighResTimeCode = field(default_factory=HighResTimeCode)
    event_number: int = 0
    additional_info: list = field(default_factory=list)
    name: Optional[str] = None

    def encode_into(self, out: bytearray) -> None:
        out.extend([CUEING_SETUP, int(self.cueing_type)])
        self.time_code.encode_into(out)
        push_u14(self.event_number, out)
        _push_additional(self.cueing_type, self.additional_info, self.name, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TimeCodeCueingSetup":
        cueing_type = _cueing_type(u7_from_midi(data, 0))
        if len(data) < 8:
            raise UnexpectedEnd()
        time_code = HighResTimeCode.parse(data, 1)
        event_number = u14_from_midi(data, 6)
        info, name = _read_additional(cueing_type, data[8:])
        return cls(cueing_type, time_code, event_number, info, name)
