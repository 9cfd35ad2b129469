"""
Standard MIDI File reader and writer.

File layout:

    MThd 00000006 <format u16> <tracks u16> <division u16>
    MTrk <length u32> <event>...
    <tag> <length u32> <data>            chunks with other tags are kept as-is

Each event is a VLQ delta time followed by one of:

    FF <type> <vlq len> <data>     meta event
    F0 <vlq len> <data> F7         system exclusive, F0 implied in <data>
    F7 <vlq len> <bytes>           any other message, escaped
    <status> <data>                channel message, running status allowed

Example:
    midi = MidiFile.read("song.mid")
    for track in midi.tracks:
        for event in track.events:
            print(event.delta_time, event.event)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from midimsg.channel_voice import DATA_LENGTHS
from midimsg.context import ReceiverContext
from midimsg.errors import Invalid, MidiFileParseError, ParseError, UnexpectedEnd
from midimsg.message import (
    META_EVENT,
    Meta,
    MidiMsg,
    SystemExclusive,
    SystemRealTime,
    decode_with_context,
    encode,
    is_system_message,
    status_byte,
)
from midimsg.smf.meta import EndOfTrack, parse_meta
from midimsg.sysex.envelope import SYSEX_END, SYSEX_START, parse_system_exclusive
from midimsg.system_real_time import SystemRealTimeMsg
from midimsg.time_code import TimeCodeType
from midimsg.utils.packing import clamp
from midimsg.utils.vlq import decode_vlq, push_vlq

logger = logging.getLogger("midimsg")

HEADER_TAG = b"MThd"
TRACK_TAG = b"MTrk"
HEADER_LENGTH = 6
CHUNK_HEADER_SIZE = 8

# Channel and system common events never exceed three bytes
EVENT_WINDOW = 8

ERROR_CONTEXT_BYTES = 20


class SMFFormat(IntEnum):
    SINGLE_TRACK = 0
    MULTI_TRACK = 1
    MULTI_SONG = 2


@dataclass
class TicksPerQuarterNote:
    """Metrical time: delta times count fractions of a quarter note."""

    ticks: int = 96

    def encode_into(self, out: bytearray) -> None:
        out.extend(clamp(self.ticks, 1, 0x7FFF).to_bytes(2, "big"))

    def beat_or_frame_to_tick(self, beat_or_frame: float) -> int:
        return int(round(beat_or_frame * self.ticks))

    def ticks_to_beats_or_frames(self, ticks: int) -> float:
        return ticks / self.ticks if self.ticks else 0.0


@dataclass
class TimeCodeDivision:
    """
    Time code based time: delta times count fractions of a frame.

    Written as the two's complement of -fps, then ticks per frame.
    """

    frames_per_second: TimeCodeType = TimeCodeType.NDF30
    ticks_per_frame: int = 40

    def encode_into(self, out: bytearray) -> None:
        fps = TimeCodeType(self.frames_per_second).frames_per_second
        out.append((0x100 - fps) & 0xFF)
        out.append(clamp(self.ticks_per_frame, 0, 0xFF))

    def beat_or_frame_to_tick(self, beat_or_frame: float) -> int:
        return int(round(beat_or_frame * self.ticks_per_frame))

    def ticks_to_beats_or_frames(self, ticks: int) -> float:
        return ticks / self.ticks_per_frame if self.ticks_per_frame else 0.0


Division = Union[TicksPerQuarterNote, TimeCodeDivision]


def parse_division(high: int, low: int) -> Division:
    if high & 0x80:
        fps = 0x100 - high
        return TimeCodeDivision(TimeCodeType.from_frames_per_second(fps), low)
    return TicksPerQuarterNote((high << 8) | low)


@dataclass
class Header:
    format: SMFFormat = SMFFormat.MULTI_TRACK
    num_tracks: int = 0
    division: Division = field(default_factory=TicksPerQuarterNote)

    def encode_into(self, out: bytearray) -> None:
        out.extend(HEADER_TAG)
        out.extend(HEADER_LENGTH.to_bytes(4, "big"))
        out.extend(int(self.format).to_bytes(2, "big"))
        out.extend(clamp(self.num_tracks, 0, 0xFFFF).to_bytes(2, "big"))
        self.division.encode_into(out)

    @classmethod
    def parse(cls, data: bytes) -> "Header":
        if len(data) < CHUNK_HEADER_SIZE + HEADER_LENGTH:
            raise UnexpectedEnd()
        if data[0:4] != HEADER_TAG:
            raise Invalid("Invalid header")
        if int.from_bytes(data[4:8], "big") != HEADER_LENGTH:
            raise Invalid("Invalid header length")
        fmt = int.from_bytes(data[8:10], "big")
        if fmt > SMFFormat.MULTI_SONG:
            raise Invalid(f"Invalid SMF format: {fmt}")
        return cls(
            format=SMFFormat(fmt),
            num_tracks=int.from_bytes(data[10:12], "big"),
            division=parse_division(data[12], data[13]),
        )


@dataclass
class TrackEvent:
    """
    One event of a track.

    Attributes:
        delta_time: Ticks since the previous event of the track
        event: The message
        beat_or_frame: Absolute position in beats or frames, depending on
            the division. Filled in when reading; not written to the file.
    """

    delta_time: int
    event: MidiMsg
    beat_or_frame: float = field(default=0.0, compare=False)

    @property
    def is_end_of_track(self) -> bool:
        return isinstance(self.event, Meta) and isinstance(self.event.msg, EndOfTrack)


def _split_channel_bytes(raw: bytes, running: Optional[int]) -> List[bytes]:
    """Split encoded channel bytes into one chunk per wire message."""
    groups = []
    status = running
    index = 0
    while index < len(raw):
        start = index
        if raw[index] & 0x80:
            status = raw[index]
            index += 1
        index += DATA_LENGTHS[status >> 4]
        groups.append(raw[start:index])
    return groups


def _encode_event(event: TrackEvent, delta_time: int, out: bytearray, context: ReceiverContext) -> None:
    msg = event.event
    if isinstance(msg, Meta):
        push_vlq(delta_time, out)
        out.extend(encode(msg, context))
    elif is_system_message(msg):
        # The escape form carries every kind of system message
        raw = encode(msg, context)
        push_vlq(delta_time, out)
        out.append(SYSEX_END)
        push_vlq(len(raw), out)
        out.extend(raw)
    else:
        previous = context.previous_channel_status
        running = status_byte(*previous) if previous is not None else None
        raw = encode(msg, context)
        # 14-bit controllers, parameters and high resolution notes span
        # several wire messages; each one becomes its own event
        for index, group in enumerate(_split_channel_bytes(raw, running)):
            push_vlq(delta_time if index == 0 else 0, out)
            out.extend(group)


@dataclass
class MidiTrack:
    events: List[TrackEvent] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.events)

    def encode_into(self, out: bytearray) -> None:
        out.extend(TRACK_TAG)
        length_at = len(out)
        out.extend(b"\x00\x00\x00\x00")

        context = ReceiverContext.default().for_smf()
        carried = 0
        for event in self.events:
            delta_time = event.delta_time + carried
            if isinstance(event.event, SystemRealTime) and event.event.msg == SystemRealTimeMsg.SYSTEM_RESET:
                logger.warning("Skipping System Reset event: not allowed in a Standard MIDI File")
                carried = delta_time
                continue
            carried = 0
            _encode_event(event, delta_time, out, context)

        length = len(out) - length_at - 4
        out[length_at : length_at + 4] = length.to_bytes(4, "big")


@dataclass
class AlienChunk:
    """A chunk with an unknown tag, kept verbatim including its tag and length."""

    raw: bytes = b""

    @property
    def tag(self) -> bytes:
        return bytes(self.raw[:4])

    @property
    def events(self) -> List[TrackEvent]:
        return []

    def __len__(self) -> int:
        return len(self.raw)

    def encode_into(self, out: bytearray) -> None:
        out.extend(self.raw)


Track = Union[MidiTrack, AlienChunk]


class _FileReader:
    """Position and progress while reading a file, for error reports."""

    def __init__(self, data: bytes, midi_file: "MidiFile"):
        self.data = data
        self.file = midi_file
        self.offset = 0
        self.parsing = "header"

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def error(self, error: ParseError) -> MidiFileParseError:
        return MidiFileParseError(
            error,
            self.file,
            self.offset,
            self.parsing,
            self.remaining,
            self.data[self.offset : self.offset + ERROR_CONTEXT_BYTES],
        )


def _parse_embedded(body: bytes, context: ReceiverContext, kind: int) -> MidiMsg:
    """Decode the contents of an F0 or F7 event."""
    context.is_smf_sysex = True
    try:
        if kind == SYSEX_START:
            msg, consumed = parse_system_exclusive(body, context)
            msg = SystemExclusive(msg)
        else:
            msg, consumed = decode_with_context(body, context)
    finally:
        context.is_smf_sysex = False
    if consumed != len(body):
        raise Invalid("Event length does not match its contents")
    context.clear_running_status()
    return msg


def _parse_event(
    data: bytes, offset: int, context: ReceiverContext, division: Division, last_beat_or_frame: float
) -> Tuple[TrackEvent, int]:
    delta_time, size = decode_vlq(data, offset)
    position = offset + size
    if position >= len(data):
        raise UnexpectedEnd()
    beat_or_frame = last_beat_or_frame + division.ticks_to_beats_or_frames(delta_time)
    kind = data[position]

    if kind == META_EVENT:
        meta, length = parse_meta(data, position + 1)
        context.clear_running_status()
        end = position + 1 + length
        msg = Meta(meta)
    elif kind in (SYSEX_START, SYSEX_END):
        length, length_size = decode_vlq(data, position + 1)
        start = position + 1 + length_size
        end = start + length
        if end > len(data):
            raise UnexpectedEnd()
        msg = _parse_embedded(data[start:end], context, kind)
    else:
        msg, consumed = decode_with_context(data[position : position + EVENT_WINDOW], context)
        end = position + consumed

    return TrackEvent(delta_time, msg, beat_or_frame), end - offset


@dataclass
class MidiFile:
    """
    A Standard MIDI File.

    Example:
        midi = MidiFile(Header(division=TicksPerQuarterNote(480)))
        midi.add_track(MidiTrack())
        midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOn(60, 100)), 0.0)
        midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOff(60, 0)), 1.0)
        midi.extend_track(0, Meta(EndOfTrack()), 1.0)
        midi.write("out.mid")
    """

    header: Header = field(default_factory=Header)
    tracks: List[Track] = field(default_factory=list)

    # Building

    def add_track(self, track: Track) -> None:
        self.tracks.append(track)
        self.header.num_tracks += 1

    def remove_track(self, track_num: int) -> Track:
        track = self.tracks.pop(track_num)
        self.header.num_tracks -= 1
        return track

    def extend_track(self, track_num: int, event: MidiMsg, beat_or_frame: float) -> None:
        """
        Append an event at an absolute time in beats (or frames).

        The delta time is computed from the previous event of the track and
        the file's division.
        """
        track = self.tracks[track_num]
        if not isinstance(track, MidiTrack):
            raise TypeError("Cannot extend an alien chunk")
        division = self.header.division
        last = track.events[-1].beat_or_frame if track.events else 0.0
        delta_time = division.beat_or_frame_to_tick(beat_or_frame) - division.beat_or_frame_to_tick(last)
        if delta_time < 0:
            raise ValueError(f"Event at {beat_or_frame} comes before the end of track {track_num}")
        track.events.append(TrackEvent(delta_time, event, beat_or_frame))

    # Encoding

    def to_bytes(self) -> bytes:
        out = bytearray()
        self.header.encode_into(out)
        for track in self.tracks:
            track.encode_into(out)
        return bytes(out)

    def write(self, filepath: Union[str, Path]) -> None:
        with open(filepath, "wb") as f:
            f.write(self.to_bytes())

    # Decoding

    @classmethod
    def from_bytes(cls, data: bytes, complex_cc: bool = False) -> "MidiFile":
        """
        Decode a file.

        Args:
            data: File contents
            complex_cc: Assemble controllers that span several events. Off
                by default, so every CC event stays one raw controller.

        Raises:
            MidiFileParseError: Wrapping the first ParseError
        """
        data = bytes(data)
        midi_file = cls()
        reader = _FileReader(data, midi_file)
        try:
            midi_file.header = Header.parse(data)
            reader.offset = CHUNK_HEADER_SIZE + HEADER_LENGTH
            for track_num in range(midi_file.header.num_tracks):
                cls._parse_track(reader, track_num, complex_cc)
        except ParseError as e:
            raise reader.error(e) from e
        return midi_file

    @classmethod
    def read(cls, filepath: Union[str, Path], complex_cc: bool = False) -> "MidiFile":
        with open(filepath, "rb") as f:
            data = f.read()
        return cls.from_bytes(data, complex_cc)

    @staticmethod
    def _parse_track(reader: _FileReader, track_num: int, complex_cc: bool) -> None:
        data = reader.data
        reader.parsing = f"track {track_num}"
        if reader.remaining < CHUNK_HEADER_SIZE:
            raise UnexpectedEnd()
        start = reader.offset
        tag = data[start : start + 4]
        length = int.from_bytes(data[start + 4 : start + 8], "big")
        if reader.remaining < CHUNK_HEADER_SIZE + length:
            raise UnexpectedEnd()

        if tag != TRACK_TAG:
            logger.debug("Keeping chunk %r (%d bytes) as an alien chunk", tag, length)
            reader.file.tracks.append(AlienChunk(data[start : start + CHUNK_HEADER_SIZE + length]))
            reader.offset += CHUNK_HEADER_SIZE + length
            return

        track = MidiTrack()
        reader.file.tracks.append(track)
        reader.offset += CHUNK_HEADER_SIZE
        end = reader.offset + length

        context = ReceiverContext.default().with_complex_cc(complex_cc).for_smf()
        division = reader.file.header.division
        beat_or_frame = 0.0
        while reader.offset < end:
            if track.events and track.events[-1].is_end_of_track:
                logger.warning(
                    "Track %d ends %d bytes short of its declared length", track_num, end - reader.offset
                )
                reader.offset = end
                break
            reader.parsing = f"track {track_num} event {len(track.events)}"
            event, size = _parse_event(data, reader.offset, context, division, beat_or_frame)
            beat_or_frame = event.beat_or_frame
            track.events.append(event)
            reader.offset += size

        if reader.offset > end:
            raise Invalid("Track length exceeded the provided length")
