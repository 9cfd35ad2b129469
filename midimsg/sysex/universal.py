"""
Universal System Exclusive payloads and their dispatch tables.

Every payload class writes its own sub-IDs followed by its body in
`encode_into(out)`. Decoding looks the leading sub-ID bytes up in
REAL_TIME_PARSERS or NON_REAL_TIME_PARSERS. Keys are either `(sub_id1,)`,
for families whose second byte is part of the body, or
`(sub_id1, sub_id2)`. Each parser is called with the bytes after the key
(checksum excluded) and the receiver context.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.general_midi import GeneralMidi
from midimsg.sysex.controller_destination import (
    ControlChangeControllerDestination,
    ControllerDestination,
    KeyBasedInstrumentControl,
    PolyPressureControllerDestination,
)
from midimsg.sysex.file_dump import FileDumpHeader, FileDumpPacket, FileDumpRequest
from midimsg.sysex.file_reference import (
    FileReferenceClose,
    FileReferenceOpen,
    FileReferenceOpenSelectContents,
    FileReferenceSelectContents,
)
from midimsg.sysex.global_parameter import GlobalParameterControl
from midimsg.sysex.machine_control import MachineControlResponse, parse_machine_control_command
from midimsg.sysex.manufacturer import ManufacturerID
from midimsg.sysex.notation import BarMarker, TimeSignature, TimeSignatureDelayed
from midimsg.sysex.sample_dump import (
    ExtendedLoopPointTransmission,
    ExtendedLoopPointsRequest,
    ExtendedSampleDumpHeader,
    SampleDataPacket,
    SampleDumpHeader,
    SampleDumpRequest,
    SampleLoopPointTransmission,
    SampleLoopPointsRequest,
    SampleNameRequest,
    SampleNameTransmission,
)
from midimsg.sysex.time_code import TimeCodeCueing, TimeCodeCueingSetup, TimeCodeFull, TimeCodeUserBits
from midimsg.sysex.tuning import (
    KeyBasedTuningDump,
    ScaleTuning1Byte,
    ScaleTuning2Byte,
    ScaleTuningDump1Byte,
    ScaleTuningDump2Byte,
    TuningBulkDumpRequest,
    TuningNoteChange,
)
from midimsg.utils.packing import (
    ByteSource,
    biased_i14_from_midi,
    decode_u7,
    i_to_u7,
    push_biased_i14,
    push_u14,
    to_u7,
    u14_from_midi,
    u7_from_midi,
    u7_to_i,
)

DEVICE_CONTROL = 0x04
GENERAL_INFORMATION = 0x06
GENERAL_MIDI = 0x09
SHOW_CONTROL = 0x02


# Device control


@dataclass
class MasterVolume:
    """Master volume, 0-16383."""

    volume: int = 0x3FFF

    def encode_into(self, out: bytearray) -> None:
        out.extend([DEVICE_CONTROL, 0x01])
        push_u14(self.volume, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "MasterVolume":
        return cls(u14_from_midi(data, 0))


@dataclass
class MasterBalance:
    """0 is hard left, 8192 centre, 16383 hard right."""

    balance: int = 8192

    def encode_into(self, out: bytearray) -> None:
        out.extend([DEVICE_CONTROL, 0x02])
        push_u14(self.balance, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "MasterBalance":
        return cls(u14_from_midi(data, 0))


@dataclass
class MasterFineTuning:
    """Offset in 1/8192 of 100 cents, -8192..8191."""

    tuning: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([DEVICE_CONTROL, 0x03])
        push_biased_i14(self.tuning, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "MasterFineTuning":
        return cls(biased_i14_from_midi(data, 0))


@dataclass
class MasterCoarseTuning:
    """Offset in semitones, -64..63."""

    semitones: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([DEVICE_CONTROL, 0x04, i_to_u7(self.semitones)])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "MasterCoarseTuning":
        return cls(u7_to_i(u7_from_midi(data, 0)))


# Show control


@dataclass
class ShowControl:
    """A MIDI Show Control message, kept as raw bytes after the 02 sub-ID."""

    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        out.append(SHOW_CONTROL)
        out.extend(to_u7(b) for b in self.data)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "ShowControl":
        return cls(bytes(decode_u7(b) for b in data))


# Handshaking


@dataclass
class _Handshake:
    packet: int = 0

    SUB_ID = 0x00

    def encode_into(self, out: bytearray) -> None:
        out.extend([self.SUB_ID, to_u7(self.packet)])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None):
        return cls(u7_from_midi(data, 0) if len(data) else 0)


@dataclass
class EndOfFile(_Handshake):
    SUB_ID = 0x7B


@dataclass
class Wait(_Handshake):
    SUB_ID = 0x7C


@dataclass
class Cancel(_Handshake):
    SUB_ID = 0x7D


@dataclass
class NAK(_Handshake):
    """Packet `packet` was received with an error; send it again."""

    SUB_ID = 0x7E


@dataclass
class ACK(_Handshake):
    SUB_ID = 0x7F


# General information


@dataclass
class GeneralMidiSystem:
    mode: GeneralMidi = GeneralMidi.GM1

    def encode_into(self, out: bytearray) -> None:
        out.extend([GENERAL_MIDI, int(self.mode)])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "GeneralMidiSystem":
        byte = u7_from_midi(data, 0)
        try:
            return cls(GeneralMidi(byte))
        except ValueError:
            raise Invalid(f"Unknown General MIDI mode: 0x{byte:02X}") from None


@dataclass
class IdentityRequest:
    def encode_into(self, out: bytearray) -> None:
        out.extend([GENERAL_INFORMATION, 0x01])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "IdentityRequest":
        return cls()


@dataclass
class IdentityReply:
    """
    A device describing itself.

    Attributes:
        id: Manufacturer ID
        family: Device family code, 14-bit
        family_member: Device family member code, 14-bit
        software_revision: Four revision bytes, format defined by the manufacturer
    """

    id: ManufacturerID = field(default_factory=lambda: ManufacturerID(0x01))
    family: int = 0
    family_member: int = 0
    software_revision: Tuple[int, int, int, int] = (0, 0, 0, 0)

    def encode_into(self, out: bytearray) -> None:
        out.extend([GENERAL_INFORMATION, 0x02])
        self.id.encode_into(out)
        push_u14(self.family, out)
        push_u14(self.family_member, out)
        revision = (list(self.software_revision) + [0, 0, 0, 0])[:4]
        out.extend(to_u7(b) for b in revision)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "IdentityReply":
        manufacturer, index = ManufacturerID.parse(data, 0)
        family = u14_from_midi(data, index)
        family_member = u14_from_midi(data, index + 2)
        revision = tuple(u7_from_midi(data, index + 4 + i) for i in range(4))
        return cls(manufacturer, family, family_member, revision)


Parser = Callable[[ByteSource, object], object]

REAL_TIME_PARSERS: Dict[Tuple[int, ...], Parser] = {
    (0x01, 0x01): TimeCodeFull.parse,
    (0x01, 0x02): TimeCodeUserBits.parse,
    (0x02,): ShowControl.parse,
    (0x03, 0x01): BarMarker.parse,
    (0x03, 0x02): TimeSignature.parse,
    (0x03, 0x42): TimeSignatureDelayed.parse,
    (0x04, 0x01): MasterVolume.parse,
    (0x04, 0x02): MasterBalance.parse,
    (0x04, 0x03): MasterFineTuning.parse,
    (0x04, 0x04): MasterCoarseTuning.parse,
    (0x04, 0x05): GlobalParameterControl.parse,
    (0x05,): TimeCodeCueing.parse,
    (0x06,): parse_machine_control_command,
    (0x07,): MachineControlResponse.parse,
    (0x08, 0x02): TuningNoteChange.parse,
    (0x08, 0x07): TuningNoteChange.parse_with_bank,
    (0x08, 0x08): ScaleTuning1Byte.parse,
    (0x08, 0x09): ScaleTuning2Byte.parse,
    (0x09, 0x01): ControllerDestination.parse,
    (0x09, 0x02): PolyPressureControllerDestination.parse,
    (0x09, 0x03): ControlChangeControllerDestination.parse,
    (0x0A, 0x01): KeyBasedInstrumentControl.parse,
}

NON_REAL_TIME_PARSERS: Dict[Tuple[int, ...], Parser] = {
    (0x01,): SampleDumpHeader.parse,
    (0x02,): SampleDataPacket.parse,
    (0x03,): SampleDumpRequest.parse,
    (0x04,): TimeCodeCueingSetup.parse,
    (0x05, 0x01): SampleLoopPointTransmission.parse,
    (0x05, 0x02): SampleLoopPointsRequest.parse,
    (0x05, 0x03): SampleNameTransmission.parse,
    (0x05, 0x04): SampleNameRequest.parse,
    (0x05, 0x05): ExtendedSampleDumpHeader.parse,
    (0x05, 0x06): ExtendedLoopPointTransmission.parse,
    (0x05, 0x07): ExtendedLoopPointsRequest.parse,
    (0x06, 0x01): IdentityRequest.parse,
    (0x06, 0x02): IdentityReply.parse,
    (0x07, 0x01): FileDumpHeader.parse,
    (0x07, 0x02): FileDumpPacket.parse,
    (0x07, 0x03): FileDumpRequest.parse,
    (0x08, 0x00): TuningBulkDumpRequest.parse,
    (0x08, 0x01): KeyBasedTuningDump.parse,
    (0x08, 0x03): TuningBulkDumpRequest.parse_with_bank,
    (0x08, 0x04): KeyBasedTuningDump.parse_with_bank,
    (0x08, 0x05): ScaleTuningDump1Byte.parse,
    (0x08, 0x06): ScaleTuningDump2Byte.parse,
    (0x08, 0x07): TuningNoteChange.parse_with_bank,
    (0x08, 0x08): ScaleTuning1Byte.parse,
    (0x08, 0x09): ScaleTuning2Byte.parse,
    (0x09,): GeneralMidiSystem.parse,
    (0x0B, 0x01): FileReferenceOpen.parse,
    (0x0B, 0x02): FileReferenceSelectContents.parse,
    (0x0B, 0x03): FileReferenceOpenSelectContents.parse,
    (0x0B, 0x04): FileReferenceClose.parse,
    (0x7B,): EndOfFile.parse,
    (0x7C,): Wait.parse,
    (0x7D,): Cancel.parse,
    (0x7E,): NAK.parse,
    (0x7F,): ACK.parse,
}

# Non-real-time payloads followed by a checksum byte
CHECKSUM_KEYS = frozenset(
    [
        (0x02,),
        (0x07, 0x02),
        (0x08, 0x01),
        (0x08, 0x04),
        (0x08, 0x05),
        (0x08, 0x06),
    ]
)


def lookup(table: Dict[Tuple[int, ...], Parser], data: ByteSource) -> Tuple[Tuple[int, ...], Parser]:
    """
    Find the parser for a payload that starts with its sub-IDs.

    Returns:
        Tuple of (key, parser); the key length is the number of sub-ID bytes

    Raises:
        UnexpectedEnd: If there is no sub-ID
        Invalid: If the sub-IDs are unknown
    """
    if len(data) < 1:
        raise UnexpectedEnd()
    key: Tuple[int, ...] = (decode_u7(data[0]),)
    if key in table:
        return key, table[key]
    if len(data) < 2:
        raise UnexpectedEnd()
    key = (key[0], decode_u7(data[1]))
    if key in table:
        return key, table[key]
    raise Invalid(f"Unknown universal system exclusive sub-IDs: {key[0]:02X} {key[1]:02X}")
