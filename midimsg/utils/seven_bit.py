"""
7-bit group packing for 8-bit data carried in System Exclusive.

File Dump data packets carry arbitrary 8-bit bytes. They are packed 7 at a
time into 8-byte groups:

- Take 7 bytes of raw 8-bit data
- Collect the high bit of each into a "header" byte
- Clear the high bits in the original bytes
- Result: 8 bytes (1 header + 7 data bytes) for every 7 input bytes

Bit 6 of the header holds the top bit of the first data byte, bit 5 the
second, and so on. A final partial group is 1 header byte followed by as many
data bytes as remain.

Example:
    Input:  [0x80, 0x40, 0x20, 0x10, 0x08, 0x04, 0x02]  (7 bytes)
    Header: 0b01000000 (bit 7 of byte 0 is set, so bit 6 of header is set)
    Output: [0x40, 0x00, 0x40, 0x20, 0x10, 0x08, 0x04, 0x02]  (8 bytes)
"""

from typing import List, Union

MAX_RAW_LENGTH = 112


def encoded_length(raw_length: int) -> int:
    """Number of bytes `raw_length` bytes occupy once packed: ceil(n * 8 / 7)."""
    return (raw_length * 8 + 6) // 7


def decode_7bit(encoded_data: Union[bytes, List[int]]) -> bytes:
    """
    Decode 7-bit packed data to 8-bit raw data.

    For every 8 bytes of encoded data, produces 7 bytes of decoded data.
    The first byte of each 8-byte group is the "high-bit header" that
    contains the MSBs for the following 7 bytes.

    Args:
        encoded_data: The 7-bit encoded data from SysEx

    Returns:
        Decoded 8-bit raw data

    Example:
        >>> decode_7bit(bytes([0x40, 0x00, 0x40, 0x20, 0x10, 0x08, 0x04, 0x02]))
        b'\\x80@ \\x10\\x08\\x04\\x02'
    """
    if isinstance(encoded_data, list):
        encoded_data = bytes(encoded_data)

    result = bytearray()

    for i in range(0, len(encoded_data), 8):
        group = encoded_data[i : i + 8]
        if len(group) < 2:
            break

        header = group[0]
        for j, byte in enumerate(group[1:]):
            high_bit = (header >> (6 - j)) & 0x01
            result.append((byte & 0x7F) | (high_bit << 7))

    return bytes(result)


def encode_7bit(raw_data: Union[bytes, List[int]]) -> bytes:
    """
    Encode 8-bit raw data to 7-bit packed groups.

    Args:
        raw_data: The raw 8-bit data to encode

    Returns:
        7-bit encoded data suitable for SysEx transmission

    Example:
        >>> encode_7bit(b'\\x80@ \\x10\\x08\\x04\\x02')
        b'@\\x00@ \\x10\\x08\\x04\\x02'
    """
    if isinstance(raw_data, list):
        raw_data = bytes(b & 0xFF for b in raw_data)

    result = bytearray()

    for i in range(0, len(raw_data), 7):
        group = raw_data[i : i + 7]

        header = 0
        for j, byte in enumerate(group):
            header |= ((byte >> 7) & 0x01) << (6 - j)

        result.append(header)
        result.extend(byte & 0x7F for byte in group)

    return bytes(result)
