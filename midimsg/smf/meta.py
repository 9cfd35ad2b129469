"""
Meta events of Standard MIDI Files.

    FF <type> <vlq length> <data>

Each payload class writes `type length data`; the leading FF is written by
the Meta wrapper in midimsg.message. Text events are stored as str and
written as UTF-8. Bytes that are not valid UTF-8 survive a round trip.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Optional, Tuple, Type

from midimsg.channel_voice import Channel
from midimsg.errors import UnexpectedEnd
from midimsg.sysex.notation import BeatValue
from midimsg.time_code import HighResTimeCode
from midimsg.utils.packing import ByteSource, clamp
from midimsg.utils.vlq import decode_vlq, push_vlq

logger = logging.getLogger("midimsg")

SEQUENCE_NUMBER = 0x00
TEXT = 0x01
COPYRIGHT = 0x02
TRACK_NAME = 0x03
INSTRUMENT_NAME = 0x04
LYRIC = 0x05
MARKER = 0x06
CUE_POINT = 0x07
CHANNEL_PREFIX = 0x20
END_OF_TRACK = 0x2F
SET_TEMPO = 0x51
SMPTE_OFFSET = 0x54
TIME_SIGNATURE = 0x58
KEY_SIGNATURE = 0x59
SEQUENCER_SPECIFIC = 0x7F

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"

DEFAULT_TEMPO = 500000  # microseconds per quarter note, 120 BPM


def _push_data(meta_type: int, data: bytes, out: bytearray) -> None:
    out.append(meta_type)
    push_vlq(len(data), out)
    out.extend(data)


@dataclass
class SequenceNumber:
    number: int = 0

    def encode_into(self, out: bytearray) -> None:
        _push_data(SEQUENCE_NUMBER, clamp(self.number, 0, 0xFFFF).to_bytes(2, "big"), out)

    @classmethod
    def parse(cls, data: bytes) -> "SequenceNumber":
        if len(data) < 2:
            raise UnexpectedEnd()
        return cls(int.from_bytes(data[:2], "big"))


@dataclass
class _TextEvent:
    text: str = ""

    META_TYPE = TEXT

    def encode_into(self, out: bytearray) -> None:
        _push_data(self.META_TYPE, self.text.encode(TEXT_ENCODING, TEXT_ERRORS), out)

    @classmethod
    def parse(cls, data: bytes):
        return cls(data.decode(TEXT_ENCODING, TEXT_ERRORS))


class Text(_TextEvent):
    META_TYPE = TEXT


class Copyright(_TextEvent):
    META_TYPE = COPYRIGHT


class TrackName(_TextEvent):
    META_TYPE = TRACK_NAME


class InstrumentName(_TextEvent):
    META_TYPE = INSTRUMENT_NAME


class Lyric(_TextEvent):
    META_TYPE = LYRIC


class Marker(_TextEvent):
    META_TYPE = MARKER


class CuePoint(_TextEvent):
    META_TYPE = CUE_POINT


@dataclass
class ChannelPrefix:
    """Channel that the following meta and sysex events refer to."""

    channel: Channel = Channel.CH1

    def encode_into(self, out: bytearray) -> None:
        _push_data(CHANNEL_PREFIX, bytes([int(self.channel) & 0x0F]), out)

    @classmethod
    def parse(cls, data: bytes) -> "ChannelPrefix":
        if len(data) < 1:
            raise UnexpectedEnd()
        return cls(Channel(data[0] & 0x0F))


@dataclass
class EndOfTrack:
    def encode_into(self, out: bytearray) -> None:
        _push_data(END_OF_TRACK, b"", out)

    @classmethod
    def parse(cls, data: bytes) -> "EndOfTrack":
        return cls()


@dataclass
class SetTempo:
    """
    Attributes:
        tempo: Microseconds per quarter note, 24 bits
    """

    tempo: int = DEFAULT_TEMPO

    def encode_into(self, out: bytearray) -> None:
        _push_data(SET_TEMPO, clamp(self.tempo, 0, 0xFFFFFF).to_bytes(3, "big"), out)

    @classmethod
    def parse(cls, data: bytes) -> "SetTempo":
        if len(data) < 3:
            raise UnexpectedEnd()
        return cls(int.from_bytes(data[:3], "big"))

    @property
    def bpm(self) -> float:
        return 60_000_000 / self.tempo if self.tempo else 0.0

    @classmethod
    def from_bpm(cls, bpm: float) -> "SetTempo":
        return cls(round(60_000_000 / bpm))


@dataclass
class SmpteOffset:
    """Time at which the track starts, written hour byte first."""

    time: HighResTimeCode = field(default_factory=HighResTimeCode)

    def encode_into(self, out: bytearray) -> None:
        out.append(SMPTE_OFFSET)
        push_vlq(5, out)
        self.time.encode_into(out)

    @classmethod
    def parse(cls, data: bytes) -> "SmpteOffset":
        return cls(HighResTimeCode.parse(data, 0))


@dataclass
class FileTimeSignature:
    """
    Time signature of a file.

    Attributes:
        numerator: Beats per bar as notated
        denominator: Note value of a beat as notated (4 for quarters);
            written as its power of two
        clocks_per_metronome_tick: MIDI clocks in a metronome click
        thirty_second_notes_per_24_clocks: Usually 8

    Example:
        FileTimeSignature(6, 8, 36, 8)  ->  58 04 06 03 24 08
    """

    numerator: int = 4
    denominator: int = 4
    clocks_per_metronome_tick: int = 24
    thirty_second_notes_per_24_clocks: int = 8

    def encode_into(self, out: bytearray) -> None:
        power = max(self.denominator, 1).bit_length() - 1
        _push_data(
            TIME_SIGNATURE,
            bytes(
                [
                    clamp(self.numerator, 0, 0xFF),
                    clamp(power, 0, 0xFF),
                    clamp(self.clocks_per_metronome_tick, 0, 0xFF),
                    clamp(self.thirty_second_notes_per_24_clocks, 0, 0xFF),
                ]
            ),
            out,
        )

    @classmethod
    def parse(cls, data: bytes) -> "FileTimeSignature":
        if len(data) < 4:
            raise UnexpectedEnd()
        return cls(data[0], 2 ** data[1], data[2], data[3])

    @property
    def beat_value(self) -> Optional[BeatValue]:
        power = max(self.denominator, 1).bit_length() - 1
        if power > BeatValue.SIXTY_FOURTH:
            return None
        return BeatValue(power)


class Scale(IntEnum):
    MAJOR = 0
    MINOR = 1


KEY_NAMES = {
    Scale.MAJOR: ["Cb", "Gb", "Db", "Ab", "Eb", "Bb", "F", "C", "G", "D", "A", "E", "B", "F#", "C#"],
    Scale.MINOR: ["Ab", "Eb", "Bb", "F", "C", "G", "D", "A", "E", "B", "F#", "C#", "G#", "D#", "A#"],
}


@dataclass
class KeySignature:
    """
    Attributes:
        key: Number of sharps (positive) or flats (negative), -7 to 7
        scale: Major or minor
    """

    key: int = 0
    scale: Scale = Scale.MAJOR

    def encode_into(self, out: bytearray) -> None:
        key = clamp(self.key, -128, 127) & 0xFF
        _push_data(KEY_SIGNATURE, bytes([key, int(self.scale) & 0xFF]), out)

    @classmethod
    def parse(cls, data: bytes) -> "KeySignature":
        if len(data) < 2:
            raise UnexpectedEnd()
        key = data[0] - 0x100 if data[0] > 0x7F else data[0]
        scale = Scale(data[1]) if data[1] in (Scale.MAJOR, Scale.MINOR) else data[1]
        return cls(key, scale)

    def __str__(self) -> str:
        if -7 <= self.key <= 7 and self.scale in KEY_NAMES:
            name = KEY_NAMES[self.scale][self.key + 7]
        else:
            name = f"{self.key:+d}"
        return f"{name} {'minor' if self.scale == Scale.MINOR else 'major'}"


@dataclass
class SequencerSpecific:
    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        _push_data(SEQUENCER_SPECIFIC, bytes(self.data), out)

    @classmethod
    def parse(cls, data: bytes) -> "SequencerSpecific":
        return cls(data)


@dataclass
class UnknownMeta:
    meta_type: int = 0x7E
    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        _push_data(self.meta_type & 0x7F, bytes(self.data), out)


META_TYPES: Dict[int, Type] = {
    SEQUENCE_NUMBER: SequenceNumber,
    TEXT: Text,
    COPYRIGHT: Copyright,
    TRACK_NAME: TrackName,
    INSTRUMENT_NAME: InstrumentName,
    LYRIC: Lyric,
    MARKER: Marker,
    CUE_POINT: CuePoint,
    CHANNEL_PREFIX: ChannelPrefix,
    END_OF_TRACK: EndOfTrack,
    SET_TEMPO: SetTempo,
    SMPTE_OFFSET: SmpteOffset,
    TIME_SIGNATURE: FileTimeSignature,
    KEY_SIGNATURE: KeySignature,
    SEQUENCER_SPECIFIC: SequencerSpecific,
}


def parse_meta(data: ByteSource, index: int = 0) -> Tuple[object, int]:
    """
    Decode a meta event from its type byte.

    Args:
        data: Buffer holding the event
        index: Offset of the type byte (just after FF)

    Returns:
        (meta payload, bytes consumed from `index`)
    """
    if len(data) < index + 2:
        raise UnexpectedEnd()
    meta_type = data[index]
    length, size = decode_vlq(data, index + 1)
    start = index + 1 + size
    end = start + length
    if len(data) < end:
        raise UnexpectedEnd()
    payload = bytes(data[start:end])

    cls = META_TYPES.get(meta_type)
    if cls is None:
        logger.debug("Unknown meta event type 0x%02X (%d bytes)", meta_type, length)
        return UnknownMeta(meta_type, payload), end - index
    return cls.parse(payload), end - index
