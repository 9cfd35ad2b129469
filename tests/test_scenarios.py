"""End to end decoding of short byte streams."""

from midimsg import (
    Channel,
    ChannelVoice,
    ControlChange,
    MidiFile,
    NoteOff,
    NoteOn,
    RunningChannelVoice,
    SystemExclusive,
    SystemRealTime,
    SystemRealTimeMsg,
    decode,
    decode_all,
    decode_with_context,
    encode,
    encode_many,
)
from midimsg.control_change import Volume
from midimsg.smf import EndOfTrack, FileTimeSignature, SMFFormat
from midimsg.sysex import IdentityRequest
from midimsg.sysex.envelope import UniversalNonRealTime
from midimsg.sysex.manufacturer import ALL_CALL
from midimsg.utils.vlq import decode_vlq, encode_vlq


class TestScenarios:
    """Test cases for complete streams."""

    def test_note_on_then_off(self):
        """Two notes with their own status bytes."""
        msgs = decode_all(bytes.fromhex("90 3C 64 80 3C 00"))
        assert msgs == [
            ChannelVoice(Channel.CH1, NoteOn(60, 100)),
            ChannelVoice(Channel.CH1, NoteOff(60, 0)),
        ]
        assert encode_many(msgs) == bytes.fromhex("90 3C 64 80 3C 00")

    def test_running_status(self, context):
        """The second note borrows the first status byte."""
        msgs = decode_all(bytes.fromhex("90 3C 64 3D 64"), context)
        assert msgs == [
            ChannelVoice(Channel.CH1, NoteOn(60, 100)),
            RunningChannelVoice(Channel.CH1, NoteOn(61, 100)),
        ]

    def test_14_bit_volume(self, context):
        """An MSB and LSB pair becomes one volume controller."""
        msg, consumed = decode_with_context(bytes.fromhex("B1 07 07 B1 27 68"), context)
        assert msg == ChannelVoice(Channel.CH2, ControlChange(Volume(1000)))
        assert consumed == 6

    def test_identity_request(self):
        """The identity request addressed to every device."""
        data = bytes.fromhex("F0 7E 7F 06 01 F7")
        msg, consumed = decode(data)
        assert msg == SystemExclusive(UniversalNonRealTime(IdentityRequest(), ALL_CALL))
        assert consumed == 6
        assert encode(msg) == data

    def test_vlq(self):
        """A four byte variable length quantity."""
        assert encode_vlq(0x200000) == bytes([0x81, 0x80, 0x80, 0x00])
        assert decode_vlq(bytes([0x81, 0x80, 0x80, 0x00])) == (0x200000, 4)

    def test_minimal_file(self, single_track_data):
        """A time signature and end of track, re-encoded unchanged."""
        midi = MidiFile.from_bytes(single_track_data)

        assert midi.header.format == SMFFormat.MULTI_TRACK
        assert len(midi.tracks) == 1
        events = [e.event.msg for e in midi.tracks[0].events]
        assert events == [FileTimeSignature(4, 4, 24, 8), EndOfTrack()]
        assert midi.to_bytes() == single_track_data

    def test_real_time_inside_message(self):
        """A clock byte is surfaced on its own and the note still completes."""
        msgs = decode_all(bytes.fromhex("90 3C F8 64 80 3C 00"))
        assert msgs == [
            SystemRealTime(SystemRealTimeMsg.TIMING_CLOCK),
            ChannelVoice(Channel.CH1, NoteOn(60, 100)),
            ChannelVoice(Channel.CH1, NoteOff(60, 0)),
        ]
