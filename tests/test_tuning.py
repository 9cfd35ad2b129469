"""Tests for MIDI Tuning Standard messages."""

from midimsg.channel_voice import Channel
from midimsg.message import SystemExclusive, decode, encode
from midimsg.sysex.envelope import UniversalNonRealTime, UniversalRealTime
from midimsg.sysex.tuning import (
    ChannelBitMap,
    KeyBasedTuningDump,
    ScaleTuning1Byte,
    Tuning,
    TuningBulkDumpRequest,
    TuningNoteChange,
)


class TestTuning:
    """Test cases for single note tunings."""

    def test_from_concert_a(self):
        """440 Hz is note 69 with no fraction."""
        assert Tuning.from_freq(440.0) == Tuning(69, 0)

    def test_from_freq_high(self):
        """A frequency just above a note gets a small fraction."""
        assert Tuning.from_freq(8372.0630) == Tuning(0x78, 2)

    def test_out_of_range(self):
        """Frequencies outside the table clamp to its ends."""
        assert Tuning.from_freq(1.0) == Tuning(0, 0)
        assert Tuning.from_freq(20000.0) == Tuning(127, 0x3FFE)


class TestTuningNoteChange:
    """Test cases for note change messages."""

    def test_real_time(self):
        """A real-time note change without a bank."""
        change = TuningNoteChange(
            program=5,
            tunings=[
                (0x01, Tuning(1, 255)),
                (0x33, Tuning(0x33, 511)),
                (0x45, None),
                (0x78, Tuning.from_freq(8372.0630)),
            ],
        )
        data = encode(SystemExclusive(UniversalRealTime(change)))
        assert data == bytes(
            [0xF0, 0x7F, 0x7F, 0x08, 0x02, 0x05, 0x04]
            + [0x01, 0x01, 0x01, 0x7F]
            + [0x33, 0x33, 0x03, 0x7F]
            + [0x45, 0x7F, 0x7F, 0x7F]
            + [0x78, 0x78, 0x00, 0x02]
            + [0xF7]
        )
        assert decode(data) == (SystemExclusive(UniversalRealTime(change)), len(data))

    def test_non_real_time_always_has_bank(self):
        """The non-real-time form writes bank 0 when none is given."""
        change = TuningNoteChange(program=1, tunings=[(60, Tuning(60, 0))])
        data = encode(SystemExclusive(UniversalNonRealTime(change)))
        assert data[3:7] == bytes([0x08, 0x07, 0x00, 0x01])

        msg, _ = decode(data)
        assert msg.msg.msg.bank == 0

    def test_with_bank(self):
        """A bank selects the 08 07 form in real time too."""
        change = TuningNoteChange(program=2, bank=3, tunings=[])
        data = encode(SystemExclusive(UniversalRealTime(change)))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x08, 0x07, 0x03, 0x02, 0x00, 0xF7])
        assert decode(data)[0] == SystemExclusive(UniversalRealTime(change))


class TestKeyBasedTuningDump:
    """Test cases for full tuning dumps."""

    def test_layout(self):
        """A dump always holds 128 notes and ends with a checksum."""
        dump = KeyBasedTuningDump(program=5, name="A Tuning", tunings=[Tuning(1, 255)])
        data = encode(SystemExclusive(UniversalNonRealTime(dump)))

        assert len(data) == 408
        assert data[0:7] == bytes([0xF0, 0x7E, 0x7F, 0x08, 0x01, 0x05, ord("A")])
        assert data[22:31] == bytes([0x01, 0x01, 0x7F, 0x01, 0x00, 0x00, 0x02, 0x00, 0x00])

    def test_decode(self):
        """Notes past the given tunings come back in equal temperament."""
        dump = KeyBasedTuningDump(program=5, name="A Tuning", tunings=[Tuning(1, 255)])
        msg, consumed = decode(encode(SystemExclusive(UniversalNonRealTime(dump))))
        decoded = msg.msg.msg

        assert consumed == 408
        assert decoded.name == "A Tuning"
        assert len(decoded.tunings) == 128
        assert decoded.tunings[0] == Tuning(1, 255)
        assert decoded.tunings[100] == Tuning(100, 0)

    def test_request(self):
        """Requesting a dump by program."""
        data = encode(SystemExclusive(UniversalNonRealTime(TuningBulkDumpRequest(program=3))))
        assert data == bytes([0xF0, 0x7E, 0x7F, 0x08, 0x00, 0x03, 0xF7])


class TestScaleTuning:
    """Test cases for scale/octave tuning."""

    def test_channel_bit_map(self):
        """Channel 16 is in the first byte, channel 1 in the last."""
        out = bytearray()
        ChannelBitMap(frozenset([Channel.CH1, Channel.CH16])).encode_into(out)
        assert out == bytearray([0x02, 0x00, 0x01])
        assert ChannelBitMap.parse(out) == ChannelBitMap(frozenset([Channel.CH1, Channel.CH16]))

    def test_all_channels(self):
        """Every channel sets every bit."""
        out = bytearray()
        ChannelBitMap.all().encode_into(out)
        assert out == bytearray([0x03, 0x7F, 0x7F])

    def test_one_byte_form(self):
        """Twelve one byte offsets, biased by 64."""
        scale = ScaleTuning1Byte(ChannelBitMap.all(), [0] * 12)
        msg = SystemExclusive(UniversalRealTime(scale))
        data = encode(msg)
        assert data[3:8] == bytes([0x08, 0x08, 0x03, 0x7F, 0x7F])
        assert data[8:20] == bytes([0x40] * 12)
        assert decode(data)[0] == msg
