"""
System Real Time messages: single status bytes that may appear anywhere in
a stream, even between the data bytes of another message.
"""

from enum import IntEnum

from midimsg.errors import Invalid, UndefinedSystemRealTimeMessage

UNDEFINED_REAL_TIME = (0xF9, 0xFD)


class SystemRealTimeMsg(IntEnum):
    TIMING_CLOCK = 0xF8
    START = 0xFA
    CONTINUE = 0xFB
    STOP = 0xFC
    ACTIVE_SENSING = 0xFE
    SYSTEM_RESET = 0xFF

    def encode_into(self, out: bytearray) -> None:
        out.append(int(self))


def is_real_time(byte: int, parsing_smf: bool = False) -> bool:
    """
    True for a byte that is a defined real-time status.

    0xFF introduces a meta event inside a Standard MIDI File, so it is not a
    real-time byte there.
    """
    if byte < 0xF8 or byte in UNDEFINED_REAL_TIME:
        return False
    if byte == 0xFF and parsing_smf:
        return False
    return True


def parse_system_real_time(byte: int) -> SystemRealTimeMsg:
    if byte in UNDEFINED_REAL_TIME:
        raise UndefinedSystemRealTimeMessage(byte)
    try:
        return SystemRealTimeMsg(byte)
    except ValueError:
        raise Invalid(f"Not a System Real Time status: 0x{byte:02X}") from None
