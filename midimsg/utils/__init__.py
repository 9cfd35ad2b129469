"""
Byte-level helpers shared by every message family.
"""

from midimsg.utils.packing import checksum, to_u7, to_u14
from midimsg.utils.seven_bit import decode_7bit, encode_7bit
from midimsg.utils.vlq import decode_vlq, encode_vlq
from midimsg.utils.pitch import freq_to_midi_note_cents, freq_to_midi_note_float

__all__ = [
    "checksum",
    "to_u7",
    "to_u14",
    "decode_7bit",
    "encode_7bit",
    "decode_vlq",
    "encode_vlq",
    "freq_to_midi_note_cents",
    "freq_to_midi_note_float",
]
