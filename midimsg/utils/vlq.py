"""
Variable-length quantities (VLQ) as used by Standard MIDI Files.

A VLQ is a big-endian base-128 integer: every byte but the last has bit 7
set. Delta times and chunk-internal lengths are at most four bytes long,
which caps the value at 0x0FFFFFFF.

Example:
    0x00000000 -> 00
    0x00000040 -> 40
    0x00002000 -> C0 00
    0x00200000 -> 81 80 80 00
    0x0FFFFFFF -> FF FF FF 7F
"""

from typing import Tuple

from midimsg.errors import UnexpectedEnd, VlqOverflow
from midimsg.utils.packing import ByteSource, clamp

VLQ_MAX = 0x0FFFFFFF
VLQ_MAX_BYTES = 4


def encode_vlq(value: int) -> bytes:
    """
    Encode an integer as the shortest VLQ.

    Values above 0x0FFFFFFF are clamped.

    Args:
        value: Integer to encode

    Returns:
        1 to 4 encoded bytes
    """
    value = clamp(value, 0, VLQ_MAX)
    result = bytearray([value & 0x7F])
    value >>= 7
    while value:
        result.insert(0, (value & 0x7F) | 0x80)
        value >>= 7
    return bytes(result)


def push_vlq(value: int, out: bytearray) -> None:
    out.extend(encode_vlq(value))


def decode_vlq(data: ByteSource, index: int = 0) -> Tuple[int, int]:
    """
    Decode a VLQ starting at `index`.

    Args:
        data: Buffer to read from
        index: Offset of the first VLQ byte

    Returns:
        (value, number of bytes consumed)

    Raises:
        UnexpectedEnd: If the buffer ends before the last VLQ byte
        VlqOverflow: If no terminating byte is found within four bytes
    """
    value = 0
    for i in range(VLQ_MAX_BYTES):
        if index + i >= len(data):
            raise UnexpectedEnd()
        byte = data[index + i]
        value = (value << 7) | (byte & 0x7F)
        if byte & 0x80 == 0:
            return value, i + 1
    raise VlqOverflow()
