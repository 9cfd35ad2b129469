"""
midimsg - MIDI 1.0 message codec with Universal System Exclusive and
Standard MIDI File support.

This library provides tools to:
- Encode MIDI messages to wire bytes and decode them back
- Track running status, 14-bit controllers and time code across a stream
- Read and write Standard MIDI Files (.mid)
- Split and decode System Exclusive dumps (.syx)

Example usage:
    from midimsg import Channel, ChannelVoice, NoteOn, decode, encode

    data = encode(ChannelVoice(Channel.CH1, NoteOn(60, 100)))
    msg, consumed = decode(data)
"""

__version__ = "0.1.0"
__author__ = "midimsg Contributors"

from midimsg.channel_mode import (
    AllNotesOff,
    AllSoundOff,
    LocalControl,
    Mono,
    OmniMode,
    Poly,
    PolyMode,
    ResetAllControllers,
)
from midimsg.channel_voice import (
    Channel,
    ChannelPressure,
    ControlChange,
    HighResNoteOff,
    HighResNoteOn,
    NoteOff,
    NoteOn,
    PitchBend,
    PolyPressure,
    ProgramChange,
)
from midimsg.context import ReceiverContext
from midimsg.errors import (
    ByteOverflow,
    ContextlessRunningStatus,
    Invalid,
    MidiFileParseError,
    NoEndOfSystemExclusiveFlag,
    ParseError,
    UndefinedSystemRealTimeMessage,
    UnexpectedEnd,
    Unimplemented,
    VlqOverflow,
)
from midimsg.general_midi import GeneralMidi, GMPercussionMap, GMSoundSet
from midimsg.message import (
    ChannelMode,
    ChannelVoice,
    Meta,
    MidiMsg,
    RunningChannelMode,
    RunningChannelVoice,
    SystemCommon,
    SystemExclusive,
    SystemRealTime,
    decode,
    decode_all,
    decode_with_context,
    encode,
    encode_many,
    iter_decode,
)
from midimsg.smf import MidiFile
from midimsg.system_common import SongPosition, SongSelect, TimeCodeQuarterFrame, TuneRequest
from midimsg.system_real_time import SystemRealTimeMsg
from midimsg.time_code import TimeCode, TimeCodeType

__all__ = [
    # Messages
    "ChannelMode",
    "ChannelVoice",
    "Meta",
    "MidiMsg",
    "RunningChannelMode",
    "RunningChannelVoice",
    "SystemCommon",
    "SystemExclusive",
    "SystemRealTime",
    # Channel voice
    "Channel",
    "ChannelPressure",
    "ControlChange",
    "HighResNoteOff",
    "HighResNoteOn",
    "NoteOff",
    "NoteOn",
    "PitchBend",
    "PolyPressure",
    "ProgramChange",
    # Channel mode
    "AllNotesOff",
    "AllSoundOff",
    "LocalControl",
    "Mono",
    "OmniMode",
    "Poly",
    "PolyMode",
    "ResetAllControllers",
    # System
    "SongPosition",
    "SongSelect",
    "SystemRealTimeMsg",
    "TimeCode",
    "TimeCodeQuarterFrame",
    "TimeCodeType",
    "TuneRequest",
    # Codec
    "ReceiverContext",
    "decode",
    "decode_all",
    "decode_with_context",
    "encode",
    "encode_many",
    "iter_decode",
    # Files
    "MidiFile",
    # General MIDI
    "GMPercussionMap",
    "GMSoundSet",
    "GeneralMidi",
    # Errors
    "ByteOverflow",
    "ContextlessRunningStatus",
    "Invalid",
    "MidiFileParseError",
    "NoEndOfSystemExclusiveFlag",
    "ParseError",
    "UndefinedSystemRealTimeMessage",
    "UnexpectedEnd",
    "Unimplemented",
    "VlqOverflow",
]
