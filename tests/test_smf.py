"""Tests for Standard MIDI File reading and writing."""

import logging

import pytest

from midimsg.channel_voice import Channel, ControlChange, NoteOff, NoteOn
from midimsg.control_change import Undefined, Volume
from midimsg.errors import Invalid, MidiFileParseError
from midimsg.message import ChannelVoice, Meta, RunningChannelVoice, SystemRealTime
from midimsg.smf import (
    AlienChunk,
    EndOfTrack,
    FileTimeSignature,
    Header,
    MidiFile,
    MidiTrack,
    SetTempo,
    SMFFormat,
    TicksPerQuarterNote,
    TimeCodeDivision,
    TrackEvent,
    TrackName,
)
from midimsg.system_real_time import SystemRealTimeMsg
from midimsg.time_code import TimeCodeType


def _single_track_file(*events):
    midi = MidiFile()
    midi.add_track(MidiTrack(list(events)))
    return midi


class TestReadFile:
    """Test cases for decoding files."""

    def test_single_track(self, single_track_data):
        """A one track file with a time signature."""
        midi = MidiFile.from_bytes(single_track_data)

        assert midi.header == Header(SMFFormat.MULTI_TRACK, 1, TicksPerQuarterNote(96))
        assert len(midi.tracks) == 1
        assert midi.tracks[0].events == [
            TrackEvent(0, Meta(FileTimeSignature(4, 4, 24, 8))),
            TrackEvent(0, Meta(EndOfTrack())),
        ]

    def test_read_from_path(self, single_track_file):
        """Files are read from disk."""
        midi = MidiFile.read(single_track_file)
        assert midi.tracks[0].events[-1].is_end_of_track

    def test_rewrite_is_identical(self, single_track_data):
        """Encoding a decoded file gives back the same bytes."""
        assert MidiFile.from_bytes(single_track_data).to_bytes() == single_track_data

    def test_track_longer_than_declared(self, single_track_data):
        """An event running past the track length is an error."""
        data = bytearray(single_track_data)
        data[21] = 0x0B

        with pytest.raises(MidiFileParseError) as exc_info:
            MidiFile.from_bytes(bytes(data))

        error = exc_info.value
        assert isinstance(error.error, Invalid)
        assert error.parsing == "track 0 event 1"
        assert len(error.partial_file.tracks[0].events) == 2

    def test_truncated(self, single_track_data):
        """A file cut short reports where it stopped."""
        with pytest.raises(MidiFileParseError) as exc_info:
            MidiFile.from_bytes(single_track_data[:-3])
        assert exc_info.value.parsing == "track 0"

    def test_bad_header(self):
        """Only MThd starts a file."""
        with pytest.raises(MidiFileParseError):
            MidiFile.from_bytes(b"RIFF" + bytes(10))

    def test_alien_chunk(self, single_track_data):
        """Unknown chunks are kept verbatim."""
        alien = b"XFIH" + bytes([0, 0, 0, 2, 0xAB, 0xCD])
        data = bytearray(single_track_data[:14] + alien + single_track_data[14:])
        data[11] = 2

        midi = MidiFile.from_bytes(bytes(data))

        assert isinstance(midi.tracks[0], AlienChunk)
        assert midi.tracks[0].tag == b"XFIH"
        assert midi.tracks[0].events == []
        assert midi.to_bytes() == bytes(data)

    def test_positions(self):
        """Events read back carry their position in beats."""
        data = _single_track_file(
            TrackEvent(48, ChannelVoice(Channel.CH1, NoteOn(60, 100))),
            TrackEvent(48, ChannelVoice(Channel.CH1, NoteOff(60, 0))),
            TrackEvent(0, Meta(EndOfTrack())),
        ).to_bytes()

        events = MidiFile.from_bytes(data).tracks[0].events
        assert [e.beat_or_frame for e in events] == [0.5, 1.0, 1.0]


class TestWriteFile:
    """Test cases for encoding files."""

    def test_write_then_read(self, tmp_path):
        """Notes placed by beat come back with their delta times."""
        midi = MidiFile()
        midi.add_track(MidiTrack())
        midi.extend_track(0, Meta(TrackName("Lead")), 0.0)
        midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOn(60, 100)), 0.0)
        midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOff(60, 0)), 1.0)
        midi.extend_track(0, Meta(EndOfTrack()), 1.0)
        path = tmp_path / "out.mid"
        midi.write(path)

        track = MidiFile.read(path).tracks[0]
        assert track.events == [
            TrackEvent(0, Meta(TrackName("Lead"))),
            TrackEvent(0, ChannelVoice(Channel.CH1, NoteOn(60, 100))),
            TrackEvent(96, ChannelVoice(Channel.CH1, NoteOff(60, 0))),
            TrackEvent(0, Meta(EndOfTrack())),
        ]

    def test_extend_track_backwards(self):
        """An event cannot be placed before the last one."""
        midi = MidiFile()
        midi.add_track(MidiTrack())
        midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOn(60, 100)), 2.0)
        with pytest.raises(ValueError):
            midi.extend_track(0, ChannelVoice(Channel.CH1, NoteOff(60, 0)), 1.0)

    def test_track_count(self):
        """Adding and removing tracks keeps the header count."""
        midi = MidiFile()
        midi.add_track(MidiTrack())
        midi.add_track(MidiTrack())
        midi.remove_track(0)
        assert midi.header.num_tracks == 1

    def test_system_reset_skipped(self, caplog):
        """System Reset is dropped and its delta time carried forward."""
        midi = _single_track_file(
            TrackEvent(10, SystemRealTime(SystemRealTimeMsg.SYSTEM_RESET)),
            TrackEvent(5, Meta(EndOfTrack())),
        )
        with caplog.at_level(logging.WARNING, logger="midimsg"):
            data = midi.to_bytes()

        assert data[14:] == b"MTrk" + bytes([0, 0, 0, 4, 0x0F, 0xFF, 0x2F, 0x00])
        assert "System Reset" in caplog.text

    def test_real_time_escaped(self):
        """Other system messages are written with the F7 escape."""
        midi = _single_track_file(
            TrackEvent(0, SystemRealTime(SystemRealTimeMsg.TIMING_CLOCK)),
            TrackEvent(0, Meta(EndOfTrack())),
        )
        data = midi.to_bytes()
        assert data[22:26] == bytes([0x00, 0xF7, 0x01, 0xF8])
        assert MidiFile.from_bytes(data).tracks[0].events == midi.tracks[0].events

    def test_compound_controller_split(self):
        """A 14-bit controller becomes two events with running status."""
        midi = _single_track_file(
            TrackEvent(4, ChannelVoice(Channel.CH2, ControlChange(Volume(1000)))),
            TrackEvent(0, Meta(EndOfTrack())),
        )
        data = midi.to_bytes()
        assert data[22:29] == bytes([0x04, 0xB1, 0x07, 0x07, 0x00, 0x27, 0x68])

        events = MidiFile.from_bytes(data).tracks[0].events
        assert events[0] == TrackEvent(4, ChannelVoice(Channel.CH2, ControlChange(Undefined(0x07, 0x07))))

    def test_compound_controller_assembled(self):
        """With assembly on, the LSB event completes the controller."""
        midi = _single_track_file(
            TrackEvent(4, ChannelVoice(Channel.CH2, ControlChange(Volume(1000)))),
            TrackEvent(0, Meta(EndOfTrack())),
        )
        events = MidiFile.from_bytes(midi.to_bytes(), complex_cc=True).tracks[0].events
        assert events[0].event == ChannelVoice(Channel.CH2, ControlChange(Volume(7 << 7)))
        assert events[1] == TrackEvent(0, RunningChannelVoice(Channel.CH2, ControlChange(Volume(1000))))


class TestDivision:
    """Test cases for the header division."""

    def test_time_code_division(self):
        """Frame rates are written as negative numbers."""
        out = bytearray()
        TimeCodeDivision(TimeCodeType.FPS25, 40).encode_into(out)
        assert out == bytearray([0xE7, 0x28])

    def test_time_code_division_read(self):
        """A time code division survives a round trip through a file."""
        midi = MidiFile(Header(division=TimeCodeDivision(TimeCodeType.NDF30, 80)))
        midi.add_track(MidiTrack([TrackEvent(0, Meta(EndOfTrack()))]))
        assert MidiFile.from_bytes(midi.to_bytes()).header.division == TimeCodeDivision(TimeCodeType.NDF30, 80)

    def test_ticks(self):
        """Beats convert to ticks at the file resolution."""
        division = TicksPerQuarterNote(480)
        assert division.beat_or_frame_to_tick(1.5) == 720
        assert division.ticks_to_beats_or_frames(240) == 0.5


class TestMetaEvents:
    """Test cases for meta event payloads."""

    def test_tempo(self):
        """Tempo is microseconds per quarter note."""
        assert SetTempo().bpm == 120.0
        assert SetTempo.from_bpm(100).tempo == 600000

    def test_time_signature_bytes(self):
        """The denominator is written as a power of two."""
        out = bytearray()
        Meta(FileTimeSignature(6, 8, 36, 8)).encode_into(out)
        assert out == bytearray([0xFF, 0x58, 0x04, 0x06, 0x03, 0x24, 0x08])

    def test_time_signature_huge_denominator(self):
        """A denominator beyond 2**255 is written as the largest power."""
        out = bytearray()
        Meta(FileTimeSignature(4, 1 << 300)).encode_into(out)
        assert out == bytearray([0xFF, 0x58, 0x04, 0x04, 0xFF, 0x18, 0x08])
