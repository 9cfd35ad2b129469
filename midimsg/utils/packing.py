"""
Fixed-width integer packing for MIDI data bytes.

Every MIDI data byte carries 7 bits. Wider values are split into septets:

- u14: two septets, used for pitch bend, song position, master volume...
- u21 / u28 / u35: three to five septets, used by sample dump sizes
- i7 / i14: signed values biased by 64 / 8192

Encoders clamp out-of-range values to the nearest representable value and
never raise. Decoders check the top bit of every byte and raise ByteOverflow.

Multi-byte values are written LSB first unless a message says otherwise, so
byte order is decided by the caller, not by these helpers.
"""

from typing import List, Sequence, Tuple, Union

from midimsg.errors import ByteOverflow, UnexpectedEnd

ByteSource = Union[bytes, bytearray, Sequence[int]]

U7_MAX = 0x7F
U14_MAX = 0x3FFF
U21_MAX = 0x1FFFFF
U28_MAX = 0xFFFFFFF
U35_MAX = 0x7FFFFFFFF


def clamp(value: int, low: int, high: int) -> int:
    """Clamp an integer into [low, high]."""
    return max(low, min(int(value), high))


# 7-bit


def to_u7(value: int) -> int:
    """Clamp a value to 0-127."""
    return clamp(value, 0, U7_MAX)


def encode_u7(value: int) -> int:
    """Data byte for a value, clamped to 127. Never raises."""
    return to_u7(value)


def decode_u7(byte: int) -> int:
    """
    Check that a data byte has its top bit clear.

    Raises:
        ByteOverflow: If bit 7 is set
    """
    if byte > U7_MAX:
        raise ByteOverflow()
    return byte


def i_to_u7(value: int) -> int:
    """Encode a signed value -64..63 with a bias of 64."""
    return clamp(value, -64, 63) + 64


def u7_to_i(byte: int) -> int:
    return byte - 64


def bool_to_u7(value: bool) -> int:
    return 0x7F if value else 0x00


def bool_from_u7(byte: int) -> bool:
    """Switch controllers treat 64 and above as on."""
    return decode_u7(byte) >= 0x40


def u7_from_midi(data: ByteSource, index: int = 0) -> int:
    """Read one 7-bit byte at `index`, raising UnexpectedEnd if it is missing."""
    if len(data) <= index:
        raise UnexpectedEnd()
    return decode_u7(data[index])


def push_u7(value: int, out: bytearray) -> None:
    out.append(to_u7(value))


def to_nibbles(byte: int) -> Tuple[int, int]:
    """Split a byte into (high nibble, low nibble)."""
    return (byte >> 4) & 0x0F, byte & 0x0F


# 14-bit


def to_u14(value: int) -> Tuple[int, int]:
    """Clamp a value to 0-16383 and return it as (msb, lsb)."""
    value = clamp(value, 0, U14_MAX)
    return (value >> 7) & 0x7F, value & 0x7F


def i_to_u14(value: int) -> Tuple[int, int]:
    """Encode a signed value -8192..8191 with a bias of 8192, as (msb, lsb)."""
    return to_u14(clamp(value, -8192, 8191) + 8192)


def u14_from_u7s(msb: int, lsb: int) -> int:
    return ((msb & 0x7F) << 7) | (lsb & 0x7F)


def i14_from_u7s(msb: int, lsb: int) -> int:
    return u14_from_u7s(msb, lsb) - 8192


def replace_u14_lsb(value: int, lsb: int) -> int:
    """Keep the upper seven bits of a 14-bit value and replace the lower seven."""
    return (value & 0x3F80) | (lsb & 0x7F)


def push_u14(value: int, out: bytearray) -> None:
    """Append a 14-bit value LSB first."""
    msb, lsb = to_u14(value)
    out.append(lsb)
    out.append(msb)


def push_u14_msb_first(value: int, out: bytearray) -> None:
    msb, lsb = to_u14(value)
    out.append(msb)
    out.append(lsb)


def u14_from_midi(data: ByteSource, index: int = 0) -> int:
    """Read a 14-bit value stored LSB first."""
    if len(data) < index + 2:
        raise UnexpectedEnd()
    lsb = decode_u7(data[index])
    msb = decode_u7(data[index + 1])
    return u14_from_u7s(msb, lsb)


def u14_from_midi_msb_first(data: ByteSource, index: int = 0) -> int:
    if len(data) < index + 2:
        raise UnexpectedEnd()
    return u14_from_u7s(decode_u7(data[index]), decode_u7(data[index + 1]))


def push_i14(value: int, out: bytearray) -> None:
    """Append a signed 14-bit value as two's complement, LSB first."""
    value = clamp(value, -8192, 8191)
    out.append(value & 0x7F)
    out.append((value >> 7) & 0x7F)


def i14_from_midi(data: ByteSource, index: int = 0) -> int:
    """Read a two's complement 14-bit value stored LSB first."""
    value = u14_from_midi(data, index)
    if value & 0x2000:
        value -= 0x4000
    return value


def push_biased_i14(value: int, out: bytearray) -> None:
    """Append a signed value biased by 8192, LSB first."""
    msb, lsb = i_to_u14(value)
    out.append(lsb)
    out.append(msb)


def biased_i14_from_midi(data: ByteSource, index: int = 0) -> int:
    return u14_from_midi(data, index) - 8192


# 21 / 28 / 35-bit


def _push_septets(value: int, count: int, maximum: int, out: bytearray) -> None:
    value = clamp(value, 0, maximum)
    for i in range(count):
        out.append((value >> (7 * i)) & 0x7F)


def _septets_from_midi(data: ByteSource, index: int, count: int) -> int:
    if len(data) < index + count:
        raise UnexpectedEnd()
    value = 0
    for i in range(count):
        value |= decode_u7(data[index + i]) << (7 * i)
    return value


def push_u21(value: int, out: bytearray) -> None:
    _push_septets(value, 3, U21_MAX, out)


def push_u28(value: int, out: bytearray) -> None:
    _push_septets(value, 4, U28_MAX, out)


def push_u35(value: int, out: bytearray) -> None:
    _push_septets(value, 5, U35_MAX, out)


def u21_from_midi(data: ByteSource, index: int = 0) -> int:
    return _septets_from_midi(data, index, 3)


def u28_from_midi(data: ByteSource, index: int = 0) -> int:
    return _septets_from_midi(data, index, 4)


def u35_from_midi(data: ByteSource, index: int = 0) -> int:
    return _septets_from_midi(data, index, 5)


# Checksums


def checksum(data: ByteSource) -> int:
    """
    XOR checksum used by Universal System Exclusive packets.

    Covers every byte from the sub-ID (0x7E) through the last data byte.

    Example:
        >>> checksum([0xF0, 0x0F, 0xAA])
        85
    """
    result = 0
    for byte in data:
        result ^= byte
    return result & 0xFF


def verify_checksum(data: ByteSource, expected: int) -> bool:
    return (checksum(data) & 0x7F) == expected


# Nibblized data


def nibblize(data: ByteSource) -> List[int]:
    """Split each byte into two data bytes, low nibble first."""
    result = []
    for byte in data:
        high, low = to_nibbles(byte)
        result.append(low)
        result.append(high)
    return result


def denibblize(data: ByteSource) -> bytes:
    """Inverse of nibblize. A dangling final nibble is ignored."""
    result = bytearray()
    for i in range(0, len(data) - 1, 2):
        result.append(((data[i + 1] & 0x0F) << 4) | (data[i] & 0x0F))
    return bytes(result)


def ascii_bytes(text: str, limit: int = None) -> bytes:
    """Encode text as 7-bit ASCII, replacing anything outside it with '?'."""
    raw = text.encode("ascii", errors="replace")
    raw = bytes(b if b <= U7_MAX else 0x3F for b in raw)
    if limit is not None:
        raw = raw[:limit]
    return raw
