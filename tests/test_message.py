"""Tests for channel and system message encoding and decoding."""

import pytest

from midimsg.channel_mode import (
    AllNotesOff,
    AllSoundOff,
    LocalControl,
    Mono,
    OmniMode,
    Poly,
    PolyMode,
    ResetAllControllers,
)
from midimsg.channel_voice import (
    Channel,
    ChannelPressure,
    HighResNoteOff,
    HighResNoteOn,
    NoteOff,
    NoteOn,
    PitchBend,
    PolyPressure,
    ProgramChange,
)
from midimsg.errors import (
    ByteOverflow,
    ContextlessRunningStatus,
    Invalid,
    UndefinedSystemRealTimeMessage,
    UnexpectedEnd,
)
from midimsg.message import (
    ChannelMode,
    ChannelVoice,
    RunningChannelMode,
    RunningChannelVoice,
    SystemCommon,
    SystemRealTime,
    decode,
    decode_all,
    decode_with_context,
    encode,
    encode_many,
    iter_decode,
)
from midimsg.system_common import SongPosition, SongSelect, TimeCodeQuarterFrame, TuneRequest
from midimsg.system_real_time import SystemRealTimeMsg
from midimsg.time_code import TimeCode


class TestChannelVoiceEncoding:
    """Test cases for voice message bytes."""

    @pytest.mark.parametrize(
        "msg,expected",
        [
            (ChannelVoice(Channel.CH1, NoteOn(60, 100)), "90 3c 64"),
            (ChannelVoice(Channel.CH1, NoteOff(60, 0)), "80 3c 00"),
            (ChannelVoice(Channel.CH10, PolyPressure(36, 20)), "a9 24 14"),
            (ChannelVoice(Channel.CH16, ProgramChange(5)), "cf 05"),
            (ChannelVoice(Channel.CH2, ChannelPressure(127)), "d1 7f"),
            (ChannelVoice(Channel.CH1, PitchBend(8192)), "e0 00 40"),
            (ChannelVoice(Channel.CH1, PitchBend(0x3FFF)), "e0 7f 7f"),
        ],
    )
    def test_encode(self, msg, expected):
        """Each voice message encodes to its status and data bytes."""
        assert encode(msg) == bytes.fromhex(expected)

    def test_out_of_range_values_clamp(self):
        """Oversized fields are clamped to their 7-bit maximum."""
        assert encode(ChannelVoice(Channel.CH1, NoteOn(200, 300))) == bytes([0x90, 0x7F, 0x7F])

    def test_high_res_note_on(self):
        """A high resolution note carries its velocity LSB in a trailing CC 88."""
        msg = ChannelVoice(Channel.CH1, HighResNoteOn(60, (100 << 7) | 0x20))
        assert encode(msg) == bytes([0x90, 0x3C, 0x64, 0xB0, 0x58, 0x20])

    def test_running_without_context_omits_status(self):
        """A running message on its own writes no status byte."""
        assert encode(RunningChannelVoice(Channel.CH1, NoteOn(61, 100))) == bytes([0x3D, 0x64])

    def test_channel_number(self):
        """Channels are numbered from 1 for display."""
        assert Channel.CH1.number == 1
        assert Channel.from_status(0x9F) == Channel.CH16


class TestChannelVoiceDecoding:
    """Test cases for decoding voice messages."""

    def test_note_on(self):
        """A note on decodes with its channel and consumed length."""
        msg, consumed = decode(bytes([0x91, 0x40, 0x50]))
        assert msg == ChannelVoice(Channel.CH2, NoteOn(64, 80))
        assert consumed == 3

    def test_note_on_velocity_zero_stays_note_on(self):
        """Velocity zero is not rewritten to a note off."""
        msg, _ = decode(bytes([0x90, 0x3C, 0x00]))
        assert msg == ChannelVoice(Channel.CH1, NoteOn(60, 0))

    def test_pitch_bend(self):
        """Pitch bend data is LSB first."""
        msg, consumed = decode(bytes([0xE3, 0x01, 0x40]))
        assert msg == ChannelVoice(Channel.CH4, PitchBend(8193))
        assert consumed == 3

    def test_truncated(self):
        """Missing data bytes raise UnexpectedEnd."""
        with pytest.raises(UnexpectedEnd):
            decode(bytes([0x90, 0x3C]))

    def test_empty(self):
        """Nothing to decode raises UnexpectedEnd."""
        with pytest.raises(UnexpectedEnd):
            decode(b"")

    def test_status_inside_data(self):
        """A status byte where a data byte belongs is an overflow."""
        with pytest.raises(ByteOverflow):
            decode(bytes([0x90, 0x3C, 0x90]))

    def test_running_status_without_context(self):
        """A data byte first needs a previous status."""
        with pytest.raises(ContextlessRunningStatus):
            decode(bytes([0x3C, 0x64]))

    def test_high_res_note_look_ahead(self, context):
        """A note followed by CC 88 on its channel becomes a high resolution note."""
        msg, consumed = decode_with_context(bytes([0x90, 0x3C, 0x64, 0xB0, 0x58, 0x20]), context)
        assert msg == ChannelVoice(Channel.CH1, HighResNoteOn(60, (100 << 7) | 0x20))
        assert consumed == 6

    def test_high_res_note_from_earlier_cc(self, context):
        """A standalone CC 88 is held for the next note on the same channel."""
        decode_with_context(bytes([0xB0, 0x58, 0x10]), context)
        msg, consumed = decode_with_context(bytes([0x80, 0x3C, 0x40]), context)
        assert msg == ChannelVoice(Channel.CH1, HighResNoteOff(60, (0x40 << 7) | 0x10))
        assert consumed == 3

    def test_high_res_velocity_other_channel(self, context):
        """A pending velocity LSB does not apply to another channel."""
        decode_with_context(bytes([0xB0, 0x58, 0x10]), context)
        msg, _ = decode_with_context(bytes([0x91, 0x3C, 0x40]), context)
        assert msg == ChannelVoice(Channel.CH2, NoteOn(60, 0x40))

    def test_high_res_disabled_without_complex_cc(self, raw_cc_context):
        """Without controller assembly the CC 88 is decoded separately."""
        msg, consumed = decode_with_context(bytes([0x90, 0x3C, 0x64, 0xB0, 0x58, 0x20]), raw_cc_context)
        assert msg == ChannelVoice(Channel.CH1, NoteOn(60, 100))
        assert consumed == 3


class TestRunningStatus:
    """Test cases for running status."""

    def test_running_note(self, context):
        """A second note reuses the previous status byte."""
        msgs = decode_all(bytes([0x90, 0x3C, 0x64, 0x3D, 0x64]), context)
        assert msgs == [
            ChannelVoice(Channel.CH1, NoteOn(60, 100)),
            RunningChannelVoice(Channel.CH1, NoteOn(61, 100)),
        ]

    def test_encode_many_uses_running_status(self):
        """Consecutive running messages on one status share a status byte."""
        data = encode_many(
            [
                ChannelVoice(Channel.CH1, NoteOn(60, 100)),
                RunningChannelVoice(Channel.CH1, NoteOn(64, 100)),
            ]
        )
        assert data == bytes([0x90, 0x3C, 0x64, 0x40, 0x64])

    def test_encode_many_is_concatenation(self):
        """Without a context the output is every message encoded on its own."""
        msgs = [
            RunningChannelVoice(Channel.CH1, NoteOn(60, 100)),
            ChannelVoice(Channel.CH2, NoteOn(1, 2)),
            RunningChannelVoice(Channel.CH1, NoteOn(61, 100)),
        ]
        data = encode_many(msgs)
        assert data == b"".join(encode(msg) for msg in msgs)
        assert data == bytes.fromhex("3c649101023d64")

    def test_encode_many_restores_status(self, context):
        """With a context, a running message after a different status gets its status byte back."""
        data = encode_many(
            [
                ChannelVoice(Channel.CH1, NoteOn(60, 100)),
                ChannelVoice(Channel.CH2, ProgramChange(1)),
                RunningChannelVoice(Channel.CH1, NoteOn(64, 100)),
            ],
            context,
        )
        assert data == bytes([0x90, 0x3C, 0x64, 0xC1, 0x01, 0x90, 0x40, 0x64])
        assert context.previous_channel_status == (0x9, Channel.CH1)

    def test_system_common_cancels_running_status(self, context):
        """Running status does not survive a system common message."""
        decode_with_context(bytes([0x90, 0x3C, 0x64]), context)
        decode_with_context(bytes([0xF6]), context)
        with pytest.raises(ContextlessRunningStatus):
            decode_with_context(bytes([0x3D, 0x64]), context)

    def test_real_time_keeps_running_status(self, context):
        """A real-time message leaves running status alone."""
        msgs = decode_all(bytes([0x90, 0x3C, 0x64, 0xF8, 0x3D, 0x64]), context)
        assert msgs[1] == SystemRealTime(SystemRealTimeMsg.TIMING_CLOCK)
        assert msgs[2] == RunningChannelVoice(Channel.CH1, NoteOn(61, 100))


class TestRealTimeInterleaving:
    """Test cases for real-time bytes inside other messages."""

    def test_clock_inside_note(self, context):
        """The clock is returned first, then the completed note."""
        data = bytes([0x90, 0x3C, 0xF8, 0x64])
        results = list(iter_decode(data, context))

        assert [msg for msg, _, _ in results] == [
            SystemRealTime(SystemRealTimeMsg.TIMING_CLOCK),
            ChannelVoice(Channel.CH1, NoteOn(60, 100)),
        ]
        assert results[0][2] == 3
        assert results[1][1] == 3
        assert results[1][2] == 1

    def test_interrupted_message_across_calls(self, context):
        """The interrupted head is kept in the context until its tail arrives."""
        msg, consumed = decode_with_context(bytes([0x90, 0x3C, 0xFE]), context)
        assert msg == SystemRealTime(SystemRealTimeMsg.ACTIVE_SENSING)
        assert consumed == 3

        msg, consumed = decode_with_context(bytes([0x64]), context)
        assert msg == ChannelVoice(Channel.CH1, NoteOn(60, 100))
        assert consumed == 1

    def test_short_tail_keeps_interrupted_head(self, context):
        """A tail that is still too short leaves the head for the next call."""
        msg, consumed = decode_with_context(bytes([0x90, 0xF8]), context)
        assert msg == SystemRealTime(SystemRealTimeMsg.TIMING_CLOCK)
        assert consumed == 2

        with pytest.raises(UnexpectedEnd):
            decode_with_context(bytes([0x3C]), context)
        assert context.interrupted == bytes([0x90])

        msg, consumed = decode_with_context(bytes([0x3C, 0x64]), context)
        assert msg == ChannelVoice(Channel.CH1, NoteOn(60, 100))
        assert consumed == 2

    def test_undefined_real_time_inside_message(self):
        """A reserved real-time byte between data bytes is reported as such."""
        with pytest.raises(UndefinedSystemRealTimeMessage) as info:
            decode(bytes([0x90, 0xF9, 0x3C, 0x64]))
        assert info.value.byte == 0xF9

    def test_new_status_drops_interrupted_head(self, context):
        """A new status byte abandons the interrupted message."""
        decode_with_context(bytes([0x90, 0x3C, 0xF8]), context)
        msg, _ = decode_with_context(bytes([0xC0, 0x05]), context)
        assert msg == ChannelVoice(Channel.CH1, ProgramChange(5))
        assert context.interrupted is None


class TestChannelMode:
    """Test cases for channel mode messages."""

    @pytest.mark.parametrize(
        "mode,expected",
        [
            (AllSoundOff(), "b0 78 00"),
            (ResetAllControllers(), "b0 79 00"),
            (LocalControl(True), "b0 7a 7f"),
            (LocalControl(False), "b0 7a 00"),
            (AllNotesOff(), "b0 7b 00"),
            (OmniMode(False), "b0 7c 00"),
            (OmniMode(True), "b0 7d 00"),
            (PolyMode(Mono(4)), "b0 7e 04"),
            (PolyMode(Poly()), "b0 7f 00"),
        ],
    )
    def test_encode_and_decode(self, mode, expected):
        """Each mode message encodes to CC 120-127 and decodes back."""
        data = bytes.fromhex(expected)
        assert encode(ChannelMode(Channel.CH1, mode)) == data
        assert decode(data) == (ChannelMode(Channel.CH1, mode), 3)

    def test_running_mode(self, context):
        """A mode message under running status keeps its running form."""
        msgs = decode_all(bytes([0xB0, 0x07, 0x64, 0x7B, 0x00]), context)
        assert msgs[1] == RunningChannelMode(Channel.CH1, AllNotesOff())

    def test_mode_without_complex_cc(self, raw_cc_context):
        """Channel mode messages are recognised even without controller assembly."""
        msg, _ = decode_with_context(bytes([0xB3, 0x78, 0x00]), raw_cc_context)
        assert msg == ChannelMode(Channel.CH4, AllSoundOff())


class TestSystemCommon:
    """Test cases for system common messages."""

    def test_song_position(self):
        """Song position is 14 bits, LSB first."""
        assert encode(SystemCommon(SongPosition(1000))) == bytes([0xF2, 0x68, 0x07])
        assert decode(bytes([0xF2, 0x68, 0x07])) == (SystemCommon(SongPosition(1000)), 3)

    def test_song_select(self):
        """Song select carries one data byte."""
        assert decode(bytes([0xF3, 0x05])) == (SystemCommon(SongSelect(5)), 2)

    def test_tune_request(self):
        """Tune request is a single byte."""
        assert encode(SystemCommon(TuneRequest())) == bytes([0xF6])
        assert decode(bytes([0xF6])) == (SystemCommon(TuneRequest()), 1)

    @pytest.mark.parametrize("status", [0xF4, 0xF5])
    def test_undefined_status(self, status):
        """Undefined system common status bytes are invalid."""
        with pytest.raises(Invalid):
            decode(bytes([status]))

    def test_stray_end_of_exclusive(self):
        """F7 without a message is invalid."""
        with pytest.raises(Invalid):
            decode(bytes([0xF7]))

    def test_quarter_frame(self):
        """A quarter frame writes the selected nibble of its time code."""
        msg = SystemCommon(TimeCodeQuarterFrame(0, TimeCode(frames=5)))
        assert encode(msg) == bytes([0xF1, 0x05])
        assert decode(bytes([0xF1, 0x05])) == (msg, 2)


class TestSystemRealTime:
    """Test cases for system real-time messages."""

    @pytest.mark.parametrize("msg", list(SystemRealTimeMsg))
    def test_single_byte(self, msg):
        """Each real-time message is its status byte."""
        data = encode(SystemRealTime(msg))
        assert data == bytes([int(msg)])
        assert decode(data) == (SystemRealTime(msg), 1)

    @pytest.mark.parametrize("status", [0xF9, 0xFD])
    def test_undefined(self, status):
        """F9 and FD are reserved."""
        with pytest.raises(UndefinedSystemRealTimeMessage):
            decode(bytes([status]))

    def test_reset_is_meta_in_files(self, smf_context):
        """Inside a file FF starts a meta event instead."""
        msg, consumed = decode_with_context(bytes([0xFF, 0x2F, 0x00]), smf_context)
        assert consumed == 3
        assert not isinstance(msg, SystemRealTime)
