"""
Channel Mode messages: status 0xBn with controller numbers 120-127.
"""

from dataclasses import dataclass, field
from typing import Union

from midimsg.errors import Invalid
from midimsg.utils.packing import bool_from_u7, bool_to_u7, decode_u7, to_u7

ALL_SOUND_OFF = 120
RESET_ALL_CONTROLLERS = 121
LOCAL_CONTROL = 122
ALL_NOTES_OFF = 123
OMNI_OFF = 124
OMNI_ON = 125
MONO_ON = 126
POLY_ON = 127


@dataclass
class AllSoundOff:
    def encode_into(self, out: bytearray) -> None:
        out.extend([ALL_SOUND_OFF, 0])


@dataclass
class ResetAllControllers:
    def encode_into(self, out: bytearray) -> None:
        out.extend([RESET_ALL_CONTROLLERS, 0])


@dataclass
class LocalControl:
    on: bool = True

    def encode_into(self, out: bytearray) -> None:
        out.extend([LOCAL_CONTROL, bool_to_u7(self.on)])


@dataclass
class AllNotesOff:
    def encode_into(self, out: bytearray) -> None:
        out.extend([ALL_NOTES_OFF, 0])


@dataclass
class OmniMode:
    on: bool = True

    def encode_into(self, out: bytearray) -> None:
        out.extend([OMNI_ON if self.on else OMNI_OFF, 0])


@dataclass
class Mono:
    """
    Monophonic operation over `channels` channels starting at the base
    channel. 0 lets the receiver use as many channels as it can.
    """

    channels: int = 0


@dataclass
class Poly:
    pass


@dataclass
class PolyMode:
    mode: Union[Mono, Poly] = field(default_factory=Poly)

    def encode_into(self, out: bytearray) -> None:
        if isinstance(self.mode, Mono):
            out.extend([MONO_ON, min(to_u7(self.mode.channels), 16)])
        else:
            out.extend([POLY_ON, 0])


ChannelModeMsg = Union[AllSoundOff, ResetAllControllers, LocalControl, AllNotesOff, OmniMode, PolyMode]


def parse_channel_mode(control: int, value: int) -> ChannelModeMsg:
    """Interpret controller number 120-127 and its value."""
    value = decode_u7(value)
    if control == ALL_SOUND_OFF:
        return AllSoundOff()
    if control == RESET_ALL_CONTROLLERS:
        return ResetAllControllers()
    if control == LOCAL_CONTROL:
        return LocalControl(bool_from_u7(value))
    if control == ALL_NOTES_OFF:
        return AllNotesOff()
    if control == OMNI_OFF:
        return OmniMode(False)
    if control == OMNI_ON:
        return OmniMode(True)
    if control == MONO_ON:
        return PolyMode(Mono(value))
    if control == POLY_ON:
        return PolyMode(Poly())
    raise Invalid(f"Not a channel mode controller: {control}")
