"""
MIDI Machine Control (Universal Real Time sub-IDs 06 and 07).

    06 cc                          one byte command
    06 44 02 00 ff                 Locate to information field ff
    06 44 06 01 hr mn sc fr st     Locate to a time code
    07 ...                         response (kept as raw bytes)

Commands this library does not model are kept as raw bytes so that they
survive a decode/encode round trip.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.time_code import StandardTimeCode
from midimsg.utils.packing import ByteSource, decode_u7, to_u7

COMMAND = 0x06
RESPONSE = 0x07
LOCATE = 0x44

LOCATE_FIELD = 0x00
LOCATE_TARGET = 0x01


class MMCCommand(IntEnum):
    STOP = 0x01
    PLAY = 0x02
    DEFERRED_PLAY = 0x03
    FAST_FORWARD = 0x04
    REWIND = 0x05
    RECORD_STROBE = 0x06
    RECORD_EXIT = 0x07
    RECORD_PAUSE = 0x08
    PAUSE = 0x09
    EJECT = 0x0A
    CHASE = 0x0B
    COMMAND_ERROR_RESET = 0x0C
    MMC_RESET = 0x0D
    WAIT = 0x7C
    RESUME = 0x7F


_COMMAND_VALUES = frozenset(int(c) for c in MMCCommand)


class InformationField(IntEnum):
    SELECTED_TIME_CODE = 0x01
    SELECTED_MASTER_CODE = 0x02
    REQUESTED_OFFSET = 0x03
    ACTUAL_OFFSET = 0x04
    LOCK_DEVIATION = 0x05
    GENERATOR_TIME_CODE = 0x06
    MIDI_TIME_CODE_INPUT = 0x07
    GP0 = 0x08
    GP1 = 0x09
    GP2 = 0x0A
    GP3 = 0x0B
    GP4 = 0x0C
    GP5 = 0x0D
    GP6 = 0x0E
    GP7 = 0x0F


@dataclass
class MachineControlCommand:
    command: MMCCommand = MMCCommand.STOP

    def encode_into(self, out: bytearray) -> None:
        out.extend([COMMAND, int(self.command)])


@dataclass
class LocateInformationField:
    """Locate to the time held in an information field."""

    information_field: InformationField = InformationField.SELECTED_TIME_CODE

    def encode_into(self, out: bytearray) -> None:
        out.extend([COMMAND, LOCATE, 0x02, LOCATE_FIELD, int(self.information_field)])


@dataclass
class LocateTarget:
    time_code: StandardTimeCode = field(default_factory=StandardTimeCode)

    def encode_into(self, out: bytearray) -> None:
        out.extend([COMMAND, LOCATE, 0x06, LOCATE_TARGET])
        self.time_code.encode_into(out)


@dataclass
class RawMachineControlCommand:
    """Any command string without a dedicated class, without the 06 sub-ID."""

    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        out.append(COMMAND)
        out.extend(to_u7(b) for b in self.data)


@dataclass
class MachineControlResponse:
    """A machine control response, without the 07 sub-ID."""

    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        out.append(RESPONSE)
        out.extend(to_u7(b) for b in self.data)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "MachineControlResponse":
        return cls(bytes(decode_u7(b) for b in data))


def _parse_locate(data: ByteSource):
    if len(data) < 3:
        raise UnexpectedEnd()
    count = decode_u7(data[1])
    if len(data) < 2 + count:
        raise UnexpectedEnd()
    sub_command = decode_u7(data[2])
    if sub_command == LOCATE_FIELD and count == 2:
        try:
            return LocateInformationField(InformationField(decode_u7(data[3])))
        except ValueError:
            raise Invalid(f"Unknown information field: 0x{data[3]:02X}") from None
    if sub_command == LOCATE_TARGET and count == 6:
        return LocateTarget(StandardTimeCode.parse(data, 3))
    return None


def parse_machine_control_command(data: ByteSource, ctx=None):
    """Decode the bytes after the 06 sub-ID."""
    if len(data) < 1:
        raise UnexpectedEnd()
    command = decode_u7(data[0])
    if command == LOCATE:
        located = _parse_locate(data)
        if located is not None and len(data) == 2 + decode_u7(data[1]):
            return located
    elif len(data) == 1 and command in _COMMAND_VALUES:
        return MachineControlCommand(MMCCommand(command))
    return RawMachineControlCommand(bytes(decode_u7(b) for b in data))
