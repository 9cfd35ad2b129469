"""
System Common messages (F1-F6).

    F1 0nnn dddd    Time code quarter frame
    F2 lsb msb      Song position (MIDI beats, 1 beat = 6 clocks)
    F3 song         Song select
    F6              Tune request

F4 and F5 are undefined.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.time_code import TimeCode
from midimsg.utils.packing import ByteSource, decode_u7, push_u14, to_u7, u14_from_midi, u7_from_midi

QUARTER_FRAME = 0xF1
SONG_POSITION = 0xF2
SONG_SELECT = 0xF3
TUNE_REQUEST = 0xF6

# Number of data bytes following each status byte
DATA_LENGTHS = {
    QUARTER_FRAME: 1,
    SONG_POSITION: 2,
    SONG_SELECT: 1,
    TUNE_REQUEST: 0,
}


@dataclass
class TimeCodeQuarterFrame:
    """
    One of the eight quarter frame messages.

    `index` 0-7 selects which nibble of `time_code` is sent. When decoded,
    `time_code` is a copy of the receiver's time code after the nibble was
    integrated.
    """

    index: int = 0
    time_code: TimeCode = field(default_factory=TimeCode)

    def encode_into(self, out: bytearray) -> None:
        out.append(QUARTER_FRAME)
        out.append(self.time_code.to_nibbles()[min(max(self.index, 0), 7)])


@dataclass
class SongPosition:
    position: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.append(SONG_POSITION)
        push_u14(self.position, out)


@dataclass
class SongSelect:
    song: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.append(SONG_SELECT)
        out.append(to_u7(self.song))


@dataclass
class TuneRequest:
    def encode_into(self, out: bytearray) -> None:
        out.append(TUNE_REQUEST)


SystemCommonMsg = Union[TimeCodeQuarterFrame, SongPosition, SongSelect, TuneRequest]


def parse_system_common(data: ByteSource, time_code: TimeCode) -> Tuple[SystemCommonMsg, int]:
    """
    Decode a System Common message at the start of `data`.

    Args:
        data: Bytes starting with the status byte
        time_code: The receiver's rolling time code, updated by quarter frames

    Returns:
        (message, bytes consumed)
    """
    if not data:
        raise UnexpectedEnd()
    status = data[0]
    if status == QUARTER_FRAME:
        nibble = u7_from_midi(data, 1)
        index = time_code.extend(nibble)
        return TimeCodeQuarterFrame(index, time_code.copy()), 2
    if status == SONG_POSITION:
        return SongPosition(u14_from_midi(data, 1)), 3
    if status == SONG_SELECT:
        return SongSelect(u7_from_midi(data, 1)), 2
    if status == TUNE_REQUEST:
        return TuneRequest(), 1
    if status == 0xF7:
        raise Invalid("Unexpected End of System Exclusive flag")
    raise Invalid(f"Undefined System Common message: 0x{status:02X}")
