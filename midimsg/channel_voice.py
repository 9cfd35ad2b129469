"""
Channel Voice messages.

    Status  Message           Data
    8n      Note Off          note, velocity
    9n      Note On           note, velocity
    An      Poly Pressure     note, pressure
    Bn      Control Change    control, value   (see control_change.py)
    Cn      Program Change    program
    Dn      Channel Pressure  pressure
    En      Pitch Bend        lsb, msb

n is the channel 0-15. Payload classes write only their data bytes; the
status byte is added by the ChannelVoice / RunningChannelVoice wrappers in
midimsg.message.

HighResNoteOn / HighResNoteOff carry a 14-bit velocity. They are sent as the
note message with the velocity MSB, followed by a HighResVelocity CC (0x58)
with the LSB on the same channel.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

from midimsg.control_change import HIGH_RES_VELOCITY, Controller, Undefined
from midimsg.utils.packing import push_u14, to_u14, to_u7

NOTE_OFF = 0x8
NOTE_ON = 0x9
POLY_PRESSURE = 0xA
CONTROL_CHANGE = 0xB
PROGRAM_CHANGE = 0xC
CHANNEL_PRESSURE = 0xD
PITCH_BEND = 0xE

# Data bytes per status nibble
DATA_LENGTHS = {
    NOTE_OFF: 2,
    NOTE_ON: 2,
    POLY_PRESSURE: 2,
    CONTROL_CHANGE: 2,
    PROGRAM_CHANGE: 1,
    CHANNEL_PRESSURE: 1,
    PITCH_BEND: 2,
}


class Channel(IntEnum):
    """MIDI channel 1-16, valued as the status byte low nibble."""

    CH1 = 0
    CH2 = 1
    CH3 = 2
    CH4 = 3
    CH5 = 4
    CH6 = 5
    CH7 = 6
    CH8 = 7
    CH9 = 8
    CH10 = 9
    CH11 = 10
    CH12 = 11
    CH13 = 12
    CH14 = 13
    CH15 = 14
    CH16 = 15

    @classmethod
    def from_status(cls, status: int) -> "Channel":
        return cls(status & 0x0F)

    @property
    def number(self) -> int:
        """1-based channel number, as printed on devices."""
        return int(self) + 1


@dataclass
class NoteOff:
    note: int = 0
    velocity: int = 0

    STATUS = NOTE_OFF

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        out.extend([to_u7(self.note), to_u7(self.velocity)])


@dataclass
class NoteOn:
    note: int = 0
    velocity: int = 0

    STATUS = NOTE_ON

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        out.extend([to_u7(self.note), to_u7(self.velocity)])


def _push_high_res_note(note: int, velocity: int, channel: int, out: bytearray) -> None:
    msb, lsb = to_u14(velocity)
    out.extend([to_u7(note), msb, 0xB0 | (channel & 0x0F), HIGH_RES_VELOCITY, lsb])


@dataclass
class HighResNoteOff:
    note: int = 0
    velocity: int = 0

    STATUS = NOTE_OFF

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        _push_high_res_note(self.note, self.velocity, channel, out)


@dataclass
class HighResNoteOn:
    """A Note On with a 14-bit velocity (CA-031)."""

    note: int = 0
    velocity: int = 0

    STATUS = NOTE_ON

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        _push_high_res_note(self.note, self.velocity, channel, out)


@dataclass
class PolyPressure:
    note: int = 0
    pressure: int = 0

    STATUS = POLY_PRESSURE

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        out.extend([to_u7(self.note), to_u7(self.pressure)])


@dataclass
class ControlChange:
    control: Controller = field(default_factory=Undefined)

    STATUS = CONTROL_CHANGE

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        self.control.encode_into(out)


@dataclass
class ProgramChange:
    program: int = 0

    STATUS = PROGRAM_CHANGE

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        out.append(to_u7(self.program))


@dataclass
class ChannelPressure:
    pressure: int = 0

    STATUS = CHANNEL_PRESSURE

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        out.append(to_u7(self.pressure))


@dataclass
class PitchBend:
    """0-8191 bend down, 8192 is centre, 8193-16383 bend up."""

    bend: int = 8192

    STATUS = PITCH_BEND

    def encode_into(self, out: bytearray, channel: int = 0) -> None:
        push_u14(self.bend, out)


ChannelVoiceMsg = Union[
    NoteOff,
    NoteOn,
    HighResNoteOff,
    HighResNoteOn,
    PolyPressure,
    ControlChange,
    ProgramChange,
    ChannelPressure,
    PitchBend,
]


def parse_channel_voice(status: int, data: list) -> ChannelVoiceMsg:
    """
    Build a voice message from its status nibble and already checked data bytes.

    Control Change is not handled here: the caller decides between channel
    mode, raw and assembled controllers.
    """
    if status == NOTE_OFF:
        return NoteOff(data[0], data[1])
    if status == NOTE_ON:
        return NoteOn(data[0], data[1])
    if status == POLY_PRESSURE:
        return PolyPressure(data[0], data[1])
    if status == PROGRAM_CHANGE:
        return ProgramChange(data[0])
    if status == CHANNEL_PRESSURE:
        return ChannelPressure(data[0])
    if status == PITCH_BEND:
        return PitchBend((data[1] << 7) | data[0])
    raise ValueError(f"Not a voice status nibble: {status:#x}")
