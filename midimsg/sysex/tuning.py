"""
MIDI Tuning Standard messages (Universal sub-ID 08).

    Real Time                        Non-Real Time
    08 02  Single Note Change        08 00  Bulk Dump Request
    08 07  Single Note Change/Bank   08 01  Key-Based Tuning Dump
    08 08  Scale Tuning 1 byte       08 03  Bulk Dump Request/Bank
    08 09  Scale Tuning 2 byte       08 04  Key-Based Tuning Dump/Bank
                                     08 05  Scale Tuning Dump 1 byte
                                     08 06  Scale Tuning Dump 2 byte
                                     08 07  Single Note Change/Bank
                                     08 08  Scale Tuning 1 byte
                                     08 09  Scale Tuning 2 byte

A single tuning is three bytes: semitone, then the 14-bit fraction of a
semitone MSB first. `7F 7F 7F` means "no change".
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from midimsg.channel_voice import Channel
from midimsg.errors import UnexpectedEnd
from midimsg.utils.packing import (
    ByteSource,
    ascii_bytes,
    biased_i14_from_midi,
    decode_u7,
    i_to_u7,
    push_biased_i14,
    push_u14_msb_first,
    to_u7,
    u14_from_midi_msb_first,
    u7_from_midi,
    u7_to_i,
)
from midimsg.utils.pitch import cents_to_u14, freq_to_midi_note_cents

TUNING = 0x08
BULK_DUMP_REQUEST = 0x00
KEY_BASED_DUMP = 0x01
NOTE_CHANGE = 0x02
BULK_DUMP_REQUEST_BANK = 0x03
KEY_BASED_DUMP_BANK = 0x04
SCALE_DUMP_1BYTE = 0x05
SCALE_DUMP_2BYTE = 0x06
NOTE_CHANGE_BANK = 0x07
SCALE_TUNING_1BYTE = 0x08
SCALE_TUNING_2BYTE = 0x09

NAME_LENGTH = 16
NO_CHANGE = (0x7F, 0x7F, 0x7F)

LOWEST_FREQ = 8.1758
HIGHEST_FREQ = 13289.73
MAX_FRACTION = 0x3FFE


def _push_name(name: str, out: bytearray) -> None:
    out.extend(ascii_bytes(name, NAME_LENGTH).ljust(NAME_LENGTH, b" "))


def _read_name(data: ByteSource, index: int) -> str:
    if len(data) < index + NAME_LENGTH:
        raise UnexpectedEnd()
    raw = bytes(decode_u7(b) for b in data[index : index + NAME_LENGTH])
    return raw.decode("ascii").rstrip(" ")


@dataclass(frozen=True)
class Tuning:
    """
    An absolute pitch: a MIDI note plus a fraction of a semitone.

    Attributes:
        semitone: MIDI note number 0-127
        fraction: 1/16384 semitone steps above `semitone`
    """

    semitone: int = 0
    fraction: int = 0

    @classmethod
    def from_freq(cls, freq: float) -> "Tuning":
        """
        Closest tuning to a frequency in Hz.

        Example:
            >>> Tuning.from_freq(440.0)
            Tuning(semitone=69, fraction=0)
        """
        if freq < LOWEST_FREQ:
            return cls(0, 0)
        if freq > HIGHEST_FREQ:
            return cls(127, MAX_FRACTION)
        semitone, cents = freq_to_midi_note_cents(freq)
        return cls(semitone, min(cents_to_u14(cents), MAX_FRACTION))

    def encode_into(self, out: bytearray) -> None:
        out.append(to_u7(self.semitone))
        push_u14_msb_first(self.fraction, out)


def _push_tuning(tuning: Optional[Tuning], out: bytearray) -> None:
    if tuning is None:
        out.extend(NO_CHANGE)
    else:
        tuning.encode_into(out)


def _read_tuning(data: ByteSource, index: int) -> Optional[Tuning]:
    if len(data) < index + 3:
        raise UnexpectedEnd()
    raw = tuple(decode_u7(b) for b in data[index : index + 3])
    if raw == NO_CHANGE:
        return None
    return Tuning(raw[0], u14_from_midi_msb_first(raw, 1))


@dataclass(frozen=True)
class ChannelBitMap:
    """
    The set of channels a scale tuning applies to.

    Sent as three bytes: `000000 ch16 ch15`, `ch14 .. ch8`, `ch7 .. ch1`.
    """

    channels: FrozenSet[Channel] = frozenset()

    @classmethod
    def all(cls) -> "ChannelBitMap":
        return cls(frozenset(Channel))

    @classmethod
    def none(cls) -> "ChannelBitMap":
        return cls()

    def encode_into(self, out: bytearray) -> None:
        bits = 0
        for channel in self.channels:
            bits |= 1 << int(channel)
        out.extend([(bits >> 14) & 0x03, (bits >> 7) & 0x7F, bits & 0x7F])

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> "ChannelBitMap":
        if len(data) < index + 3:
            raise UnexpectedEnd()
        high, mid, low = (decode_u7(b) for b in data[index : index + 3])
        bits = ((high & 0x03) << 14) | (mid << 7) | low
        return cls(frozenset(ch for ch in Channel if bits & (1 << int(ch))))


@dataclass
class TuningNoteChange:
    """
    Retune individual notes.

    Without a bank the real-time form is sent as 08 02. The non-real-time
    form always carries a bank, so `bank=None` is sent as bank 0 there.

    Attributes:
        program: Tuning program 0-127
        bank: Tuning bank 0-127, or None
        tunings: (note, Tuning or None for "no change") pairs, at most 127
    """

    program: int = 0
    bank: Optional[int] = None
    tunings: List[Tuple[int, Optional[Tuning]]] = field(default_factory=list)

    def encode_into(self, out: bytearray, real_time: bool = True) -> None:
        if real_time and self.bank is None:
            out.extend([TUNING, NOTE_CHANGE])
        else:
            out.extend([TUNING, NOTE_CHANGE_BANK, to_u7(self.bank or 0)])
        tunings = self.tunings[:127]
        out.append(to_u7(self.program))
        out.append(len(tunings))
        for note, tuning in tunings:
            out.append(to_u7(note))
            _push_tuning(tuning, out)

    @classmethod
    def _parse_body(cls, data: ByteSource, index: int, bank: Optional[int]) -> "TuningNoteChange":
        program = u7_from_midi(data, index)
        count = u7_from_midi(data, index + 1)
        index += 2
        tunings = []
        for _ in range(count):
            note = u7_from_midi(data, index)
            tunings.append((note, _read_tuning(data, index + 1)))
            index += 4
        return cls(program=program, bank=bank, tunings=tunings)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TuningNoteChange":
        return cls._parse_body(data, 0, None)

    @classmethod
    def parse_with_bank(cls, data: ByteSource, ctx=None) -> "TuningNoteChange":
        return cls._parse_body(data, 1, u7_from_midi(data, 0))


@dataclass
class KeyBasedTuningDump:
    """
    A full 128 note tuning table (bulk dump reply). Ends with a checksum.

    Notes beyond `tunings` are sent in equal temperament.
    """

    program: int = 0
    bank: Optional[int] = None
    name: str = ""
    tunings: List[Optional[Tuning]] = field(default_factory=list)

    CHECKSUM = True

    def encode_into(self, out: bytearray) -> None:
        if self.bank is None:
            out.extend([TUNING, KEY_BASED_DUMP])
        else:
            out.extend([TUNING, KEY_BASED_DUMP_BANK, to_u7(self.bank)])
        out.append(to_u7(self.program))
        _push_name(self.name, out)
        for note in range(128):
            if note < len(self.tunings):
                _push_tuning(self.tunings[note], out)
            else:
                out.extend([note, 0, 0])

    @classmethod
    def _parse_body(cls, data: ByteSource, index: int, bank: Optional[int]) -> "KeyBasedTuningDump":
        program = u7_from_midi(data, index)
        name = _read_name(data, index + 1)
        index += 1 + NAME_LENGTH
        tunings = [_read_tuning(data, index + 3 * note) for note in range(128)]
        return cls(program=program, bank=bank, name=name, tunings=tunings)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "KeyBasedTuningDump":
        return cls._parse_body(data, 0, None)

    @classmethod
    def parse_with_bank(cls, data: ByteSource, ctx=None) -> "KeyBasedTuningDump":
        return cls._parse_body(data, 1, u7_from_midi(data, 0))


def _pad12(values: List[int]) -> List[int]:
    return (list(values) + [0] * 12)[:12]


@dataclass
class ScaleTuningDump1Byte:
    """Octave tuning dump: 12 offsets in cents, -64..63. Ends with a checksum."""

    program: int = 0
    bank: int = 0
    name: str = ""
    tuning: List[int] = field(default_factory=lambda: [0] * 12)

    CHECKSUM = True

    def encode_into(self, out: bytearray) -> None:
        out.extend([TUNING, SCALE_DUMP_1BYTE, to_u7(self.bank), to_u7(self.program)])
        _push_name(self.name, out)
        out.extend(i_to_u7(t) for t in _pad12(self.tuning))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ScaleTuningDump1Byte":
        bank = u7_from_midi(data, 0)
        program = u7_from_midi(data, 1)
        name = _read_name(data, 2)
        tuning = [u7_to_i(u7_from_midi(data, 2 + NAME_LENGTH + i)) for i in range(12)]
        return cls(program=program, bank=bank, name=name, tuning=tuning)


@dataclass
class ScaleTuningDump2Byte:
    """
    Octave tuning dump: 12 offsets in 1/8192 of 100 cents, written LSB
    first with a bias of 8192. Ends with a checksum.
    """

    program: int = 0
    bank: int = 0
    name: str = ""
    tuning: List[int] = field(default_factory=lambda: [0] * 12)

    CHECKSUM = True

    def encode_into(self, out: bytearray) -> None:
        out.extend([TUNING, SCALE_DUMP_2BYTE, to_u7(self.bank), to_u7(self.program)])
        _push_name(self.name, out)
        for t in _pad12(self.tuning):
            push_biased_i14(t, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ScaleTuningDump2Byte":
        bank = u7_from_midi(data, 0)
        program = u7_from_midi(data, 1)
        name = _read_name(data, 2)
        start = 2 + NAME_LENGTH
        tuning = [biased_i14_from_midi(data, start + 2 * i) for i in range(12)]
        return cls(program=program, bank=bank, name=name, tuning=tuning)


@dataclass
class ScaleTuning1Byte:
    """Set the octave tuning of the given channels, in cents -64..63."""

    channels: ChannelBitMap = field(default_factory=ChannelBitMap.all)
    tuning: List[int] = field(default_factory=lambda: [0] * 12)

    def encode_into(self, out: bytearray) -> None:
        out.extend([TUNING, SCALE_TUNING_1BYTE])
        self.channels.encode_into(out)
        out.extend(i_to_u7(t) for t in _pad12(self.tuning))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ScaleTuning1Byte":
        channels = ChannelBitMap.parse(data, 0)
        tuning = [u7_to_i(u7_from_midi(data, 3 + i)) for i in range(12)]
        return cls(channels=channels, tuning=tuning)


@dataclass
class ScaleTuning2Byte:
    channels: ChannelBitMap = field(default_factory=ChannelBitMap.all)
    tuning: List[int] = field(default_factory=lambda: [0] * 12)

    def encode_into(self, out: bytearray) -> None:
        out.extend([TUNING, SCALE_TUNING_2BYTE])
        self.channels.encode_into(out)
        for t in _pad12(self.tuning):
            push_biased_i14(t, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ScaleTuning2Byte":
        channels = ChannelBitMap.parse(data, 0)
        tuning = [biased_i14_from_midi(data, 3 + 2 * i) for i in range(12)]
        return cls(channels=channels, tuning=tuning)


@dataclass
class TuningBulkDumpRequest:
    """Ask a device for a KeyBasedTuningDump."""

    program: int = 0
    bank: Optional[int] = None

    def encode_into(self, out: bytearray) -> None:
        if self.bank is None:
            out.extend([TUNING, BULK_DUMP_REQUEST, to_u7(self.program)])
        else:
            out.extend([TUNING, BULK_DUMP_REQUEST_BANK, to_u7(self.bank), to_u7(self.program)])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "TuningBulkDumpRequest":
        return cls(program=u7_from_midi(data, 0))

    @classmethod
    def parse_with_bank(cls, data: ByteSource, ctx=None) -> "TuningBulkDumpRequest":
        return cls(program=u7_from_midi(data, 1), bank=u7_from_midi(data, 0))

