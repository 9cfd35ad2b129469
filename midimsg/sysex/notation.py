"""
Notation information (Universal Real Time sub-ID 03): bar markers and time
signatures.

    03 01 lsb msb                      Bar Marker
    03 02 len nn dd cc bb [nn dd]...   Time Signature (immediate)
    03 42 len nn dd cc bb [nn dd]...   Time Signature (delayed to next bar)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Union

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.utils.packing import ByteSource, clamp, decode_u7, i14_from_midi, push_i14, to_u7

NOTATION = 0x03
BAR_MARKER = 0x01
TIME_SIGNATURE = 0x02
TIME_SIGNATURE_DELAYED = 0x42

MAX_COMPOUND_SIGNATURES = 61


@dataclass
class BarMarker:
    """
    The bar about to start.

    `number` is a bar number, a negative count-in bar, or one of the two
    sentinels NOT_RUNNING and RUNNING_UNKNOWN. Other values are clamped to
    -8191..8190 so that they never collide with a sentinel.
    """

    number: int = 1

    NOT_RUNNING = -8192
    RUNNING_UNKNOWN = 8191

    @classmethod
    def count_in(cls, bars: int) -> "BarMarker":
        return cls(-abs(bars))

    @property
    def is_count_in(self) -> bool:
        return self.NOT_RUNNING < self.number < 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([NOTATION, BAR_MARKER])
        if self.number in (self.NOT_RUNNING, self.RUNNING_UNKNOWN):
            push_i14(self.number, out)
        else:
            push_i14(clamp(self.number, -8191, 8190), out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "BarMarker":
        return cls(i14_from_midi(data, 0))


class BeatValue(IntEnum):
    """Denominator of a time signature, as a negative power of two."""

    WHOLE = 0
    HALF = 1
    QUARTER = 2
    EIGHTH = 3
    SIXTEENTH = 4
    THIRTY_SECOND = 5
    SIXTY_FOURTH = 6

    @property
    def denominator(self) -> int:
        return 2 ** int(self)


def _beat_value(byte: int) -> Union[BeatValue, int]:
    try:
        return BeatValue(byte)
    except ValueError:
        return byte


@dataclass
class Signature:
    beats: int = 4
    beat_value: Union[BeatValue, int] = BeatValue.QUARTER

    def encode_into(self, out: bytearray) -> None:
        out.extend([to_u7(self.beats), to_u7(int(self.beat_value))])

    def __str__(self) -> str:
        value = int(self.beat_value)
        return f"{self.beats}/{2 ** value}" if value < 8 else f"{self.beats}/?"


@dataclass
class TimeSignature:
    """
    A time signature taking effect immediately.

    Attributes:
        signature: Main signature
        midi_clocks_in_metronome_click: 24 clicks once per quarter note
        thirty_second_notes_in_midi_quarter_note: 8 when a MIDI quarter
            note is a quarter note
        compound: Further signatures of a compound meter, at most 61
    """

    signature: Signature = field(default_factory=Signature)
    midi_clocks_in_metronome_click: int = 24
    thirty_second_notes_in_midi_quarter_note: int = 8
    compound: List[Signature] = field(default_factory=list)

    SUB_ID = TIME_SIGNATURE

    def encode_into(self, out: bytearray) -> None:
        compound = self.compound[:MAX_COMPOUND_SIGNATURES]
        out.extend([NOTATION, self.SUB_ID])
        out.append(min(4 + 2 * len(compound), 126))
        self.signature.encode_into(out)
        out.append(to_u7(self.midi_clocks_in_metronome_click))
        out.append(to_u7(self.thirty_second_notes_in_midi_quarter_note))
        for signature in compound:
            signature.encode_into(out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None):
        if len(data) < 1:
            raise UnexpectedEnd()
        length = decode_u7(data[0])
        if length < 4 or length % 2:
            raise Invalid(f"Bad time signature length: {length}")
        if len(data) < 1 + length:
            raise UnexpectedEnd()
        body = [decode_u7(b) for b in data[1 : 1 + length]]
        compound = [Signature(body[i], _beat_value(body[i + 1])) for i in range(4, length, 2)]
        return cls(
            signature=Signature(body[0], _beat_value(body[1])),
            midi_clocks_in_metronome_click=body[2],
            thirty_second_notes_in_midi_quarter_note=body[3],
            compound=compound,
        )


@dataclass
class TimeSignatureDelayed(TimeSignature):
    """A time signature that takes effect at the next bar marker."""

    SUB_ID = TIME_SIGNATURE_DELAYED
