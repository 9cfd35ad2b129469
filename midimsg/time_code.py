"""
SMPTE time code values.

A TimeCode travels in three shapes:

- Quarter frames (System Common F1): eight messages, each carrying one
  nibble tagged with its position in the high nibble of the data byte
- Full time code (Universal Real Time 01 01): four bytes `hr mn sc fr`
- High resolution / standard forms used by cueing, machine control and the
  SMPTE offset meta event, which add fractional frames or a status byte

The hour byte always carries the frame rate in bits 5-6:

    0 t t h h h h h     t = TimeCodeType, h = hours 0-23

Quarter frame layout:

    Piece  Nibble
    0      frames low
    1      frames high
    2      seconds low
    3      seconds high
    4      minutes low
    5      minutes high
    6      hours low
    7      (code_type << 1) | hours bit 4
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.utils.packing import ByteSource, decode_u7, to_nibbles


class TimeCodeType(IntEnum):
    """Frame rate of a time code."""

    FPS24 = 0
    FPS25 = 1
    DF30 = 2  # 29.97 drop frame
    NDF30 = 3

    @property
    def frames_per_second(self) -> int:
        return {
            TimeCodeType.FPS24: 24,
            TimeCodeType.FPS25: 25,
            TimeCodeType.DF30: 29,
            TimeCodeType.NDF30: 30,
        }[self]

    @classmethod
    def from_frames_per_second(cls, fps: int) -> "TimeCodeType":
        mapping = {24: cls.FPS24, 25: cls.FPS25, 29: cls.DF30, 30: cls.NDF30}
        if fps not in mapping:
            raise Invalid(f"Unsupported frame rate: {fps}")
        return mapping[fps]


def _hour_byte(hours: int, code_type: TimeCodeType) -> int:
    return min(max(hours, 0), 23) | (int(code_type) << 5)


def _split_hour_byte(byte: int) -> Tuple[int, TimeCodeType]:
    return byte & 0x1F, TimeCodeType((byte >> 5) & 0x03)


def _clamp(value: int, high: int) -> int:
    return min(max(int(value), 0), high)


@dataclass
class TimeCode:
    """
    A SMPTE time code.

    Attributes:
        frames: 0-29
        seconds: 0-59
        minutes: 0-59
        hours: 0-23
        code_type: Frame rate
    """

    frames: int = 0
    seconds: int = 0
    minutes: int = 0
    hours: int = 0
    code_type: TimeCodeType = TimeCodeType.NDF30

    def to_bytes(self) -> List[int]:
        """Return [frames, seconds, minutes, code_type + hours], clamped."""
        return [
            _clamp(self.frames, 29),
            _clamp(self.seconds, 59),
            _clamp(self.minutes, 59),
            _hour_byte(self.hours, self.code_type),
        ]

    def to_nibbles(self) -> List[int]:
        """
        Return the eight quarter frame data bytes.

        Example:
            >>> TimeCode(frames=29, seconds=58, minutes=20, hours=23,
            ...          code_type=TimeCodeType.DF30).to_nibbles()
            [13, 17, 42, 51, 68, 81, 103, 117]
        """
        result = []
        for index, byte in enumerate(self.to_bytes()):
            high, low = to_nibbles(byte)
            result.append(((index * 2) << 4) | low)
            result.append(((index * 2 + 1) << 4) | high)
        return result

    def to_quarter_frames(self) -> list:
        """Return the eight TimeCodeQuarterFrame messages that carry this time code."""
        from midimsg.system_common import TimeCodeQuarterFrame

        return [TimeCodeQuarterFrame(index, self.copy()) for index in range(8)]

    def extend(self, nibble: int) -> int:
        """
        Integrate one quarter frame data byte.

        Args:
            nibble: Data byte `(index << 4) | value`

        Returns:
            The piece index (0-7)
        """
        index = (nibble >> 4) & 0x07
        value = nibble & 0x0F
        if index == 0:
            self.frames = (self.frames & 0xF0) | value
        elif index == 1:
            self.frames = (self.frames & 0x0F) | (value << 4)
        elif index == 2:
            self.seconds = (self.seconds & 0xF0) | value
        elif index == 3:
            self.seconds = (self.seconds & 0x0F) | (value << 4)
        elif index == 4:
            self.minutes = (self.minutes & 0xF0) | value
        elif index == 5:
            self.minutes = (self.minutes & 0x0F) | (value << 4)
        elif index == 6:
            self.hours = (self.hours & 0xF0) | value
        else:
            self.hours = (self.hours & 0x0F) | ((value & 0x01) << 4)
            self.code_type = TimeCodeType((value >> 1) & 0x03)
        return index

    def encode_full(self, out: bytearray) -> None:
        """Append the four byte `hr mn sc fr` form used by full time code messages."""
        frames, seconds, minutes, hour_byte = self.to_bytes()
        out.extend([hour_byte, minutes, seconds, frames])

    @classmethod
    def parse_full(cls, data: ByteSource, index: int = 0) -> "TimeCode":
        if len(data) < index + 4:
            raise UnexpectedEnd()
        hours, code_type = _split_hour_byte(decode_u7(data[index]))
        return cls(
            frames=decode_u7(data[index + 3]),
            seconds=decode_u7(data[index + 2]),
            minutes=decode_u7(data[index + 1]),
            hours=hours,
            code_type=code_type,
        )

    def copy(self) -> "TimeCode":
        return TimeCode(self.frames, self.seconds, self.minutes, self.hours, self.code_type)

    def __str__(self) -> str:
        separator = ";" if self.code_type == TimeCodeType.DF30 else ":"
        return (
            f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"
            f"{separator}{self.frames:02d}"
        )


@dataclass
class HighResTimeCode:
    """
    A time code with 1/100 frame resolution.

    Used by time code cueing set-up and the SMPTE offset meta event.
    Written as `hr mn sc fr ff`.
    """

    fractional_frames: int = 0
    frames: int = 0
    seconds: int = 0
    minutes: int = 0
    hours: int = 0
    code_type: TimeCodeType = TimeCodeType.NDF30

    def encode_into(self, out: bytearray) -> None:
        out.extend(
            [
                _hour_byte(self.hours, self.code_type),
                _clamp(self.minutes, 59),
                _clamp(self.seconds, 59),
                _clamp(self.frames, 29),
                _clamp(self.fractional_frames, 99),
            ]
        )

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> "HighResTimeCode":
        if len(data) < index + 5:
            raise UnexpectedEnd()
        hours, code_type = _split_hour_byte(decode_u7(data[index]))
        return cls(
            fractional_frames=decode_u7(data[index + 4]),
            frames=decode_u7(data[index + 3]),
            seconds=decode_u7(data[index + 2]),
            minutes=decode_u7(data[index + 1]),
            hours=hours,
            code_type=code_type,
        )

    @property
    def time_code(self) -> TimeCode:
        return TimeCode(self.frames, self.seconds, self.minutes, self.hours, self.code_type)


@dataclass
class TimeCodeStatus:
    """Status byte carried by a StandardTimeCode in place of fractional frames."""

    estimated_code: bool = False
    invalid_code: bool = False
    video_field1: bool = False
    no_time_code: bool = False

    ESTIMATED = 0x40
    INVALID = 0x20
    VIDEO_FIELD1 = 0x10
    NO_TIME_CODE = 0x08

    def to_byte(self) -> int:
        byte = 0
        if self.estimated_code:
            byte |= self.ESTIMATED
        if self.invalid_code:
            byte |= self.INVALID
        if self.video_field1:
            byte |= self.VIDEO_FIELD1
        if self.no_time_code:
            byte |= self.NO_TIME_CODE
        return byte

    @classmethod
    def from_byte(cls, byte: int) -> "TimeCodeStatus":
        return cls(
            estimated_code=bool(byte & cls.ESTIMATED),
            invalid_code=bool(byte & cls.INVALID),
            video_field1=bool(byte & cls.VIDEO_FIELD1),
            no_time_code=bool(byte & cls.NO_TIME_CODE),
        )


@dataclass
class StandardTimeCode:
    """
    The MIDI Machine Control time code: `hr mn sc fr ff|st`.

    Bit 6 of the frame byte is the sign, bit 5 tells whether the fifth byte
    is fractional frames or a TimeCodeStatus.
    """

    subframes: Union[int, TimeCodeStatus] = 0
    frames: int = 0
    seconds: int = 0
    minutes: int = 0
    hours: int = 0
    code_type: TimeCodeType = TimeCodeType.NDF30
    negative: bool = False

    SIGN_BIT = 0x40
    STATUS_BIT = 0x20

    def encode_into(self, out: bytearray) -> None:
        frame_byte = _clamp(self.frames, 29)
        if self.negative:
            frame_byte |= self.SIGN_BIT
        if isinstance(self.subframes, TimeCodeStatus):
            frame_byte |= self.STATUS_BIT
            last = self.subframes.to_byte()
        else:
            last = _clamp(self.subframes, 99)
        out.extend(
            [
                _hour_byte(self.hours, self.code_type),
                _clamp(self.minutes, 59),
                _clamp(self.seconds, 59),
                frame_byte,
                last,
            ]
        )

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> "StandardTimeCode":
        if len(data) < index + 5:
            raise UnexpectedEnd()
        hours, code_type = _split_hour_byte(decode_u7(data[index]))
        frame_byte = decode_u7(data[index + 3])
        last = decode_u7(data[index + 4])
        subframes: Union[int, TimeCodeStatus]
        if frame_byte & cls.STATUS_BIT:
            subframes = TimeCodeStatus.from_byte(last)
        else:
            subframes = last
        return cls(
            subframes=subframes,
            frames=frame_byte & 0x1F,
            seconds=decode_u7(data[index + 2]),
            minutes=decode_u7(data[index + 1]),
            hours=hours,
            code_type=code_type,
            negative=bool(frame_byte & cls.SIGN_BIT),
        )


@dataclass
class UserBits:
    """
    SMPTE user bits: 32 application defined bits plus two flag bits.

    Sent as nine nibble bytes: the four bytes lowest nibble first, starting
    from the last byte, then the flags.
    """

    bytes: Tuple[int, int, int, int] = (0, 0, 0, 0)
    flag1: bool = False
    flag2: bool = False

    def to_nibbles(self) -> List[int]:
        result = []
        for byte in reversed(self.bytes):
            high, low = to_nibbles(byte & 0xFF)
            result.append(low)
            result.append(high)
        result.append((1 if self.flag1 else 0) | (2 if self.flag2 else 0))
        return result

    @classmethod
    def from_nibbles(cls, nibbles: ByteSource) -> "UserBits":
        if len(nibbles) < 9:
            raise UnexpectedEnd()
        values = [decode_u7(n) & 0x0F for n in nibbles[:8]]
        pairs = [(values[i + 1] << 4) | values[i] for i in range(0, 8, 2)]
        flags = decode_u7(nibbles[8])
        return cls(
            bytes=tuple(reversed(pairs)),
            flag1=bool(flags & 0x01),
            flag2=bool(flags & 0x02),
        )


def time_code_from_quarter_frames(pieces: List[Optional[int]]) -> Optional[TimeCode]:
    """
    Rebuild a TimeCode from an eight slot buffer of quarter frame data bytes.

    Returns None until every slot has been filled.
    """
    if len(pieces) != 8 or any(piece is None for piece in pieces):
        return None
    time_code = TimeCode()
    for piece in pieces:
        time_code.extend(piece)
    return time_code
