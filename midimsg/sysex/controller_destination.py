"""
Controller destination setting (Universal Real Time 09, CA-022) and
key-based instrument control (Universal Real Time 0A, CA-023).

    09 01 ch [pp rr]...        channel pressure destination
    09 02 ch [pp rr]...        poly pressure destination
    09 03 ch cc [pp rr]...     control change destination
    0A 01 ch kk [nn vv]...     key-based instrument control
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple, Union

from midimsg.channel_voice import Channel
from midimsg.errors import Invalid
from midimsg.utils.packing import ByteSource, decode_u7, to_u7, u7_from_midi

CONTROLLER_DESTINATION = 0x09
CHANNEL_PRESSURE = 0x01
POLY_PRESSURE = 0x02
CONTROL_CHANGE = 0x03

KEY_BASED_INSTRUMENT_CONTROL = 0x0A
KEY_BASED_CONTROL = 0x01


class ControlledParameter(IntEnum):
    PITCH_CONTROL = 0
    FILTER_CUTOFF_CONTROL = 1
    AMPLITUDE_CONTROL = 2
    LFO_PITCH_DEPTH = 3
    LFO_FILTER_DEPTH = 4
    LFO_AMPLITUDE_DEPTH = 5


ParameterRange = Tuple[Union[ControlledParameter, int], int]


def _push_ranges(param_ranges: List[ParameterRange], out: bytearray) -> None:
    for param, value in param_ranges:
        out.append(to_u7(int(param)))
        out.append(to_u7(value))


def _controlled_parameter(byte: int) -> Union[ControlledParameter, int]:
    try:
        return ControlledParameter(byte)
    except ValueError:
        return byte


def _read_pairs(data: ByteSource, index: int, what: str) -> List[Tuple[int, int]]:
    if (len(data) - index) % 2:
        raise Invalid(f"Odd number of bytes in {what}")
    raw = [decode_u7(b) for b in data[index:]]
    return [(raw[i], raw[i + 1]) for i in range(0, len(raw), 2)]


def _channel(data: ByteSource) -> Channel:
    return Channel(u7_from_midi(data, 0) & 0x0F)


@dataclass
class ControllerDestination:
    """
    Route channel pressure to sound parameters.

    Attributes:
        channel: Channel the setting applies to
        param_ranges: (parameter, range) pairs; 0x40 is the neutral range
    """

    channel: Channel = Channel.CH1
    param_ranges: List[ParameterRange] = field(default_factory=list)

    SUB_ID = CHANNEL_PRESSURE

    def encode_into(self, out: bytearray) -> None:
        out.extend([CONTROLLER_DESTINATION, self.SUB_ID, int(self.channel)])
        _push_ranges(self.param_ranges, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None):
        channel = _channel(data)
        pairs = _read_pairs(data, 1, "a controller destination")
        return cls(channel, [(_controlled_parameter(p), r) for p, r in pairs])


@dataclass
class PolyPressureControllerDestination(ControllerDestination):
    """Route polyphonic key pressure to sound parameters."""

    SUB_ID = POLY_PRESSURE


@dataclass
class ControlChangeControllerDestination:
    """
    Route a controller to sound parameters.

    `control_number` is clamped to 0x01-0x1F or 0x40-0x5F.
    """

    channel: Channel = Channel.CH1
    control_number: int = 0x01
    param_ranges: List[ParameterRange] = field(default_factory=list)

    def encode_into(self, out: bytearray) -> None:
        out.extend([CONTROLLER_DESTINATION, CONTROL_CHANGE, int(self.channel)])
        if self.control_number < 0x40:
            out.append(min(max(self.control_number, 0x01), 0x1F))
        else:
            out.append(min(self.control_number, 0x5F))
        _push_ranges(self.param_ranges, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ControlChangeControllerDestination":
        channel = _channel(data)
        control_number = u7_from_midi(data, 1)
        pairs = _read_pairs(data, 2, "a controller destination")
        return cls(channel, control_number, [(_controlled_parameter(p), r) for p, r in pairs])


def _allowed_control(control: int) -> int:
    """Data entry, increment/decrement, parameter selection and channel mode
    controllers can not be set per key; they are replaced with 0x01."""
    control = to_u7(control)
    if control in (0x06, 0x26) or 0x60 <= control <= 0x65 or control >= 0x78:
        return 0x01
    return control


@dataclass
class KeyBasedInstrumentControl:
    """
    Per key controller values for drum kits and other key-based instruments.

    Attributes:
        channel: Channel of the instrument
        key: Note number the values apply to
        control_values: (controller number, value) pairs
    """

    channel: Channel = Channel.CH1
    key: int = 60
    control_values: List[Tuple[int, int]] = field(default_factory=list)

    def encode_into(self, out: bytearray) -> None:
        out.extend([KEY_BASED_INSTRUMENT_CONTROL, KEY_BASED_CONTROL, int(self.channel), to_u7(self.key)])
        for control, value in self.control_values:
            out.append(_allowed_control(control))
            out.append(to_u7(value))

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "KeyBasedInstrumentControl":
        channel = _channel(data)
        key = u7_from_midi(data, 1)
        return cls(channel, key, _read_pairs(data, 2, "key-based instrument control"))
