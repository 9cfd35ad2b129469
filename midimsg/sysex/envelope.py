"""
System Exclusive envelopes.

    F0 <id> <data...> F7               Commercial (one or three byte ID)
    F0 7D <data...> F7                 Non-commercial
    F0 7E <device> <payload...> F7     Universal Non-Real Time
    F0 7F <device> <payload...> F7     Universal Real Time

Some non-real-time payloads end with a checksum: the XOR of every byte from
7E through the last payload byte, masked to 7 bits. The encoder reserves a
zero byte and back-patches it once the payload is written.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from midimsg.errors import ByteOverflow, Invalid, NoEndOfSystemExclusiveFlag, UnexpectedEnd
from midimsg.sysex.manufacturer import ALL_CALL, ManufacturerID, device_byte
from midimsg.sysex.tuning import TuningNoteChange
from midimsg.sysex.universal import CHECKSUM_KEYS, NON_REAL_TIME_PARSERS, REAL_TIME_PARSERS, lookup
from midimsg.utils.packing import ByteSource, checksum, to_u7

logger = logging.getLogger("midimsg")

SYSEX_START = 0xF0
SYSEX_END = 0xF7
NON_COMMERCIAL = 0x7D
NON_REAL_TIME = 0x7E
REAL_TIME = 0x7F


@dataclass
class Commercial:
    """A manufacturer specific message. `data` excludes the ID and F0/F7."""

    id: ManufacturerID
    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        out.append(SYSEX_START)
        self.id.encode_into(out)
        out.extend(to_u7(b) for b in self.data)
        out.append(SYSEX_END)


@dataclass
class NonCommercial:
    """For research and private use; never sent by a commercial product."""

    data: bytes = b""

    def encode_into(self, out: bytearray) -> None:
        out.extend([SYSEX_START, NON_COMMERCIAL])
        out.extend(to_u7(b) for b in self.data)
        out.append(SYSEX_END)


def _encode_universal(kind: int, device: int, msg, out: bytearray) -> None:
    out.append(SYSEX_START)
    start = len(out)
    out.extend([kind, device_byte(device)])
    if isinstance(msg, TuningNoteChange):
        msg.encode_into(out, real_time=(kind == REAL_TIME))
    else:
        msg.encode_into(out)
    if getattr(msg, "CHECKSUM", False):
        out.append(0)
        out[-1] = checksum(out[start:-1]) & 0x7F
    out.append(SYSEX_END)


@dataclass
class UniversalRealTime:
    """
    Attributes:
        msg: Any payload listed in midimsg.sysex.universal.REAL_TIME_PARSERS
        device: Receiver device ID, ALL_CALL for every device
    """

    msg: object
    device: int = ALL_CALL

    def encode_into(self, out: bytearray) -> None:
        _encode_universal(REAL_TIME, self.device, self.msg, out)


@dataclass
class UniversalNonRealTime:
    msg: object
    device: int = ALL_CALL

    def encode_into(self, out: bytearray) -> None:
        _encode_universal(NON_REAL_TIME, self.device, self.msg, out)


def _find_end(data: ByteSource, start: int) -> int:
    for index in range(start, len(data)):
        byte = data[index]
        if byte == SYSEX_END:
            return index
        if byte > 0x7F:
            raise ByteOverflow()
    raise NoEndOfSystemExclusiveFlag()


def _parse_universal(body: ByteSource, ctx):
    kind = body[0]
    if len(body) < 2:
        raise UnexpectedEnd()
    device = body[1]
    payload = body[2:]
    table = REAL_TIME_PARSERS if kind == REAL_TIME else NON_REAL_TIME_PARSERS
    key, parser = lookup(table, payload)
    if kind == NON_REAL_TIME and key in CHECKSUM_KEYS:
        if len(payload) < len(key) + 1:
            raise UnexpectedEnd()
        expected = checksum(body[:-1]) & 0x7F
        if body[-1] != expected:
            raise Invalid(f"Checksum mismatch: got 0x{body[-1]:02X}, expected 0x{expected:02X}")
        msg = parser(payload[len(key) : -1], ctx)
    else:
        msg = parser(payload[len(key) :], ctx)
    if kind == REAL_TIME:
        return UniversalRealTime(msg, device)
    return UniversalNonRealTime(msg, device)


def parse_system_exclusive(data: ByteSource, ctx) -> Tuple[object, int]:
    """
    Decode a System Exclusive message at the start of `data`.

    `data` starts with F0. When `ctx.is_smf_sysex` is set the F0 may be
    left out, as it is inside an SMF sysex event.

    Returns:
        Tuple of (envelope, bytes consumed including F7)

    Raises:
        ByteOverflow: A non data byte before F7
        NoEndOfSystemExclusiveFlag: No F7 in `data`
        Invalid: Unknown sub-IDs, bad checksum or bad payload
    """
    if len(data) < 1:
        raise UnexpectedEnd()
    if data[0] == SYSEX_START:
        start = 1
    elif ctx.is_smf_sysex:
        start = 0
    else:
        raise Invalid("System exclusive message must start with 0xF0")
    end = _find_end(data, start)
    body = data[start:end]
    consumed = end + 1
    if len(body) < 1:
        raise Invalid("Empty system exclusive message")

    first = body[0]
    if first in (REAL_TIME, NON_REAL_TIME):
        msg = _parse_universal(body, ctx)
    elif first == NON_COMMERCIAL:
        msg = NonCommercial(bytes(body[1:]))
    else:
        manufacturer, length = ManufacturerID.parse(body, 0)
        msg = Commercial(manufacturer, bytes(body[length:]))
    logger.debug("Decoded system exclusive message of %d bytes: %s", consumed, type(msg).__name__)
    return msg, consumed
