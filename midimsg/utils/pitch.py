"""
Frequency / note number conversions.
"""

import math
from typing import Tuple

from midimsg.utils.packing import U14_MAX


def freq_to_midi_note_float(freq: float) -> float:
    """Given a frequency in Hertz, return a fractional note number (1.0 = 100 cents)."""
    return 12.0 * math.log2(freq / 440.0) + 69.0


def midi_note_float_to_freq(note: float) -> float:
    return 2.0 ** ((note - 69.0) / 12.0) * 440.0


def midi_note_cents_to_freq(note: int, cents: float) -> float:
    return midi_note_float_to_freq(note + cents / 100.0)


def freq_to_midi_note_cents(freq: float) -> Tuple[int, float]:
    """
    Split a frequency into a note number and the cents above it.

    Example:
        >>> freq_to_midi_note_cents(440.0)
        (69, 0.0)
    """
    note = freq_to_midi_note_float(freq)
    semitone = int(note)
    return semitone, (note - semitone) * 100.0


def cents_to_u14(cents: float) -> int:
    """Fit 0.0-100.0 cents into the 14-bit range (one step is ~0.0061 cents)."""
    cents = max(0.0, min(cents, 100.0))
    return int(round(cents / 100.0 * U14_MAX))
