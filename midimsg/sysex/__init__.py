"""
System Exclusive messages: envelopes, Universal payloads and .syx files.
"""

from midimsg.sysex.controller_destination import (
    ControlChangeControllerDestination,
    ControlledParameter,
    ControllerDestination,
    KeyBasedInstrumentControl,
    PolyPressureControllerDestination,
)
from midimsg.sysex.envelope import (
    Commercial,
    NonCommercial,
    UniversalNonRealTime,
    UniversalRealTime,
    parse_system_exclusive,
)
from midimsg.sysex.file_dump import FileDumpHeader, FileDumpPacket, FileDumpRequest, split_file
from midimsg.sysex.file_reference import (
    FileReferenceClose,
    FileReferenceOpen,
    FileReferenceOpenSelectContents,
    FileReferenceSelectContents,
    FileReferenceType,
    SoundFileBankOffset,
    SoundFileMap,
    SoundFileSelect,
    WAVBankOffset,
    WAVMap,
    WAVSelect,
)
from midimsg.sysex.global_parameter import (
    CHORUS,
    REVERB,
    ChorusType,
    GlobalParameter,
    GlobalParameterControl,
    ReverbType,
    SlotPath,
)
from midimsg.sysex.machine_control import (
    InformationField,
    LocateInformationField,
    LocateTarget,
    MachineControlCommand,
    MachineControlResponse,
    MMCCommand,
    RawMachineControlCommand,
)
from midimsg.sysex.manufacturer import ALL_CALL, KORG, ROLAND, YAMAHA, ManufacturerID
from midimsg.sysex.notation import BarMarker, BeatValue, Signature, TimeSignature, TimeSignatureDelayed
from midimsg.sysex.parser import SysExEntry, SysExParser
from midimsg.sysex.sample_dump import (
    ExtendedLoopPointTransmission,
    ExtendedLoopPointsRequest,
    ExtendedSampleDumpHeader,
    LoopType,
    SampleDataPacket,
    SampleDumpHeader,
    SampleDumpRequest,
    SampleLoopPointTransmission,
    SampleLoopPointsRequest,
    SampleNameRequest,
    SampleNameTransmission,
)
from midimsg.sysex.time_code import (
    CueingType,
    TimeCodeCueing,
    TimeCodeCueingSetup,
    TimeCodeFull,
    TimeCodeUserBits,
)
from midimsg.sysex.tuning import (
    ChannelBitMap,
    KeyBasedTuningDump,
    ScaleTuning1Byte,
    ScaleTuning2Byte,
    ScaleTuningDump1Byte,
    ScaleTuningDump2Byte,
    Tuning,
    TuningBulkDumpRequest,
    TuningNoteChange,
)
from midimsg.sysex.universal import (
    ACK,
    NAK,
    Cancel,
    EndOfFile,
    GeneralMidiSystem,
    IdentityReply,
    IdentityRequest,
    MasterBalance,
    MasterCoarseTuning,
    MasterFineTuning,
    MasterVolume,
    ShowControl,
    Wait,
)

__all__ = [
    "ACK",
    "ALL_CALL",
    "BarMarker",
    "BeatValue",
    "CHORUS",
    "Cancel",
    "ChannelBitMap",
    "ChorusType",
    "Commercial",
    "ControlChangeControllerDestination",
    "ControlledParameter",
    "ControllerDestination",
    "CueingType",
    "EndOfFile",
    "ExtendedLoopPointTransmission",
    "ExtendedLoopPointsRequest",
    "ExtendedSampleDumpHeader",
    "FileDumpHeader",
    "FileDumpPacket",
    "FileDumpRequest",
    "FileReferenceClose",
    "FileReferenceOpen",
    "FileReferenceOpenSelectContents",
    "FileReferenceSelectContents",
    "FileReferenceType",
    "GeneralMidiSystem",
    "GlobalParameter",
    "GlobalParameterControl",
    "IdentityReply",
    "IdentityRequest",
    "InformationField",
    "KORG",
    "KeyBasedInstrumentControl",
    "KeyBasedTuningDump",
    "LocateInformationField",
    "LocateTarget",
    "LoopType",
    "MMCCommand",
    "MachineControlCommand",
    "MachineControlResponse",
    "ManufacturerID",
    "MasterBalance",
    "MasterCoarseTuning",
    "MasterFineTuning",
    "MasterVolume",
    "NAK",
    "NonCommercial",
    "PolyPressureControllerDestination",
    "REVERB",
    "ROLAND",
    "RawMachineControlCommand",
    "ReverbType",
    "SampleDataPacket",
    "SampleDumpHeader",
    "SampleDumpRequest",
    "SampleLoopPointTransmission",
    "SampleLoopPointsRequest",
    "SampleNameRequest",
    "SampleNameTransmission",
    "ScaleTuning1Byte",
    "ScaleTuning2Byte",
    "ScaleTuningDump1Byte",
    "ScaleTuningDump2Byte",
    "ShowControl",
    "Signature",
    "SlotPath",
    "SoundFileBankOffset",
    "SoundFileMap",
    "SoundFileSelect",
    "SysExEntry",
    "SysExParser",
    "TimeCodeCueing",
    "TimeCodeCueingSetup",
    "TimeCodeFull",
    "TimeCodeUserBits",
    "TimeSignature",
    "TimeSignatureDelayed",
    "Tuning",
    "TuningBulkDumpRequest",
    "TuningNoteChange",
    "UniversalNonRealTime",
    "UniversalRealTime",
    "WAVBankOffset",
    "WAVMap",
    "WAVSelect",
    "Wait",
    "YAMAHA",
    "parse_system_exclusive",
    "split_file",
]
