"""
Standard MIDI Files.
"""

from midimsg.smf.file import (
    AlienChunk,
    Division,
    Header,
    MidiFile,
    MidiTrack,
    SMFFormat,
    TicksPerQuarterNote,
    TimeCodeDivision,
    Track,
    TrackEvent,
)
from midimsg.smf.meta import (
    ChannelPrefix,
    Copyright,
    CuePoint,
    EndOfTrack,
    FileTimeSignature,
    InstrumentName,
    KeySignature,
    Lyric,
    Marker,
    Scale,
    SequenceNumber,
    SequencerSpecific,
    SetTempo,
    SmpteOffset,
    Text,
    TrackName,
    UnknownMeta,
)

__all__ = [
    "AlienChunk",
    "ChannelPrefix",
    "Copyright",
    "CuePoint",
    "Division",
    "EndOfTrack",
    "FileTimeSignature",
    "Header",
    "InstrumentName",
    "KeySignature",
    "Lyric",
    "Marker",
    "MidiFile",
    "MidiTrack",
    "SMFFormat",
    "Scale",
    "SequenceNumber",
    "SequencerSpecific",
    "SetTempo",
    "SmpteOffset",
    "Text",
    "TicksPerQuarterNote",
    "TimeCodeDivision",
    "Track",
    "TrackEvent",
    "TrackName",
    "UnknownMeta",
]
