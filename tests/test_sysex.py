"""Tests for System Exclusive envelopes and Universal SysEx payloads."""

import pytest

from midimsg.channel_voice import Channel
from midimsg.errors import ByteOverflow, Invalid, NoEndOfSystemExclusiveFlag
from midimsg.general_midi import GeneralMidi
from midimsg.message import SystemExclusive, decode, decode_with_context, encode
from midimsg.sysex.controller_destination import (
    ControlledParameter,
    ControllerDestination,
    KeyBasedInstrumentControl,
)
from midimsg.sysex.envelope import Commercial, NonCommercial, UniversalNonRealTime, UniversalRealTime
from midimsg.sysex.file_dump import FileDumpHeader, FileDumpPacket, join_packets, split_file
from midimsg.sysex.file_reference import FileReferenceClose, FileReferenceOpen, FileReferenceType
from midimsg.sysex.global_parameter import GlobalParameterControl, ReverbType
from midimsg.sysex.machine_control import (
    LocateTarget,
    MachineControlCommand,
    MMCCommand,
    RawMachineControlCommand,
)
from midimsg.sysex.manufacturer import ALL_CALL, YAMAHA, ManufacturerID
from midimsg.sysex.notation import BarMarker, BeatValue, Signature, TimeSignature
from midimsg.sysex.parser import SysExParser
from midimsg.sysex.sample_dump import PACKET_DATA_LENGTH, SampleDataPacket, SampleDumpRequest, split_sample_data
from midimsg.sysex.time_code import TimeCodeFull
from midimsg.sysex.universal import (
    ACK,
    GeneralMidiSystem,
    IdentityReply,
    IdentityRequest,
    MasterCoarseTuning,
    MasterVolume,
)
from midimsg.time_code import StandardTimeCode, TimeCode, TimeCodeType


def sysex(envelope):
    return SystemExclusive(envelope)


class TestEnvelopes:
    """Test cases for the four System Exclusive envelopes."""

    def test_commercial(self):
        """Data bytes are clamped to seven bits."""
        msg = sysex(Commercial(ManufacturerID(0x01), bytes([0xFF, 0x77, 0x00])))
        assert encode(msg) == bytes([0xF0, 0x01, 0x7F, 0x77, 0x00, 0xF7])

    def test_commercial_extended_id(self):
        """Three byte IDs start with 00."""
        msg = sysex(Commercial(ManufacturerID(0x01, 0x03), bytes([0x7F, 0x77, 0x00])))
        data = bytes([0xF0, 0x00, 0x01, 0x03, 0x7F, 0x77, 0x00, 0xF7])
        assert encode(msg) == data
        assert decode(data) == (msg, len(data))

    def test_manufacturer_name(self):
        """Known manufacturers print with their name."""
        assert str(YAMAHA) == "Yamaha (43)"

    def test_non_commercial(self):
        """Non-commercial messages use ID 7D."""
        data = bytes([0xF0, 0x7D, 0x01, 0x02, 0xF7])
        assert encode(sysex(NonCommercial(bytes([0x01, 0x02])))) == data
        assert decode(data) == (sysex(NonCommercial(bytes([0x01, 0x02]))), 5)

    def test_identity_request(self):
        """An identity request to every device."""
        data = bytes([0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7])
        msg = sysex(UniversalNonRealTime(IdentityRequest(), ALL_CALL))
        assert encode(msg) == data
        assert decode(data) == (msg, 6)

    def test_consumed_stops_at_end_flag(self):
        """Bytes after F7 are left for the next message."""
        _, consumed = decode(bytes([0xF0, 0x7D, 0x01, 0xF7, 0x90, 0x3C, 0x64]))
        assert consumed == 4

    def test_missing_end(self):
        """A message without F7 is an error."""
        with pytest.raises(NoEndOfSystemExclusiveFlag):
            decode(bytes([0xF0, 0x7E, 0x7F, 0x06, 0x01]))

    def test_status_byte_inside(self):
        """A status byte before F7 is an overflow."""
        with pytest.raises(ByteOverflow):
            decode(bytes([0xF0, 0x43, 0x90, 0xF7]))

    def test_unknown_sub_ids(self):
        """Unknown universal sub-IDs are invalid."""
        with pytest.raises(Invalid):
            decode(bytes([0xF0, 0x7E, 0x7F, 0x20, 0x20, 0xF7]))

    def test_sysex_cancels_running_status(self, context):
        """Running status does not survive a System Exclusive message."""
        decode_with_context(bytes([0x90, 0x3C, 0x64]), context)
        decode_with_context(bytes([0xF0, 0x7D, 0xF7]), context)
        assert context.previous_channel_status is None


class TestUniversalMessages:
    """Test cases for individual Universal SysEx payloads."""

    def test_identity_reply(self):
        """Family codes are 14-bit, LSB first."""
        reply = IdentityReply(YAMAHA, family=0x0100, family_member=2, software_revision=(1, 2, 3, 4))
        data = bytes([0xF0, 0x7E, 0x10, 0x06, 0x02, 0x43, 0x00, 0x02, 0x02, 0x00, 0x01, 0x02, 0x03, 0x04, 0xF7])
        assert encode(sysex(UniversalNonRealTime(reply, 0x10))) == data
        assert decode(data) == (sysex(UniversalNonRealTime(reply, 0x10)), len(data))

    def test_default_identity_reply(self):
        """The default reply decodes to itself."""
        msg = sysex(UniversalNonRealTime(IdentityReply()))
        assert decode(encode(msg))[0] == msg

    def test_master_volume(self):
        """Master volume is a real-time device control message."""
        msg = sysex(UniversalRealTime(MasterVolume(0x3FFF)))
        assert encode(msg) == bytes([0xF0, 0x7F, 0x7F, 0x04, 0x01, 0x7F, 0x7F, 0xF7])

    def test_master_coarse_tuning(self):
        """Coarse tuning is one biased byte."""
        data = bytes([0xF0, 0x7F, 0x7F, 0x04, 0x04, 0x34, 0xF7])
        assert encode(sysex(UniversalRealTime(MasterCoarseTuning(-12)))) == data
        assert decode(data)[0] == sysex(UniversalRealTime(MasterCoarseTuning(-12)))

    def test_general_midi(self):
        """GM system on."""
        data = bytes([0xF0, 0x7E, 0x7F, 0x09, 0x01, 0xF7])
        assert encode(sysex(UniversalNonRealTime(GeneralMidiSystem(GeneralMidi.GM1)))) == data

    def test_handshake(self):
        """Handshakes carry a packet number."""
        data = bytes([0xF0, 0x7E, 0x01, 0x7F, 0x05, 0xF7])
        assert encode(sysex(UniversalNonRealTime(ACK(5), 0x01))) == data
        assert decode(data)[0] == sysex(UniversalNonRealTime(ACK(5), 0x01))

    def test_full_time_code_updates_context(self, context):
        """A full time code message resets the receiver time code."""
        code = TimeCode(frames=29, seconds=58, minutes=20, hours=23, code_type=TimeCodeType.DF30)
        data = encode(sysex(UniversalRealTime(TimeCodeFull(code))))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x01, 0x01, 0x57, 0x14, 0x3A, 0x1D, 0xF7])

        msg, _ = decode_with_context(data, context)
        assert msg == sysex(UniversalRealTime(TimeCodeFull(code)))
        assert context.time_code == code

    def test_bar_marker(self):
        """Bar numbers are signed 14-bit, LSB first."""
        data = encode(sysex(UniversalRealTime(BarMarker(-2))))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x03, 0x01, 0x7E, 0x7F, 0xF7])
        assert decode(data)[0] == sysex(UniversalRealTime(BarMarker(-2)))

    def test_time_signature(self):
        """A simple time signature has a length of 4."""
        signature = TimeSignature(Signature(3, BeatValue.QUARTER))
        data = encode(sysex(UniversalRealTime(signature)))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x03, 0x02, 0x04, 0x03, 0x02, 0x18, 0x08, 0xF7])
        assert decode(data)[0] == sysex(UniversalRealTime(signature))

    def test_global_parameter_reverb(self):
        """GM2 reverb type through global parameter control."""
        msg = sysex(UniversalRealTime(GlobalParameterControl.reverb(ReverbType.LARGE_HALL)))
        data = encode(msg)
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x04, 0x05, 0x01, 0x01, 0x01, 0x01, 0x01, 0x00, 0x04, 0xF7])
        assert decode(data)[0] == msg

    def test_controller_destination(self):
        """Channel pressure routed to pitch."""
        setting = ControllerDestination(Channel.CH3, [(ControlledParameter.PITCH_CONTROL, 0x42)])
        data = encode(sysex(UniversalRealTime(setting)))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x09, 0x01, 0x02, 0x00, 0x42, 0xF7])
        assert decode(data)[0] == sysex(UniversalRealTime(setting))

    def test_key_based_control_skips_data_entry(self):
        """Controllers that can not be set per key are replaced."""
        control = KeyBasedInstrumentControl(Channel.CH10, 38, [(0x07, 100), (0x06, 5)])
        data = encode(sysex(UniversalRealTime(control)))
        assert data == bytes([0xF0, 0x7F, 0x7F, 0x0A, 0x01, 0x09, 0x26, 0x07, 0x64, 0x01, 0x05, 0xF7])

    def test_file_reference_open(self):
        """The length covers the type, the URL and its terminator."""
        msg = sysex(UniversalNonRealTime(FileReferenceOpen(1, FileReferenceType.DLS, "a.dls")))
        data = encode(msg)
        assert data[:9] == bytes([0xF0, 0x7E, 0x7F, 0x0B, 0x01, 0x01, 0x00, 0x0A, 0x00])
        assert data[9:13] == b"DLS "
        assert data[-2:] == bytes([0x00, 0xF7])
        assert decode(data)[0] == msg

    def test_file_reference_close(self):
        """Close has an empty body."""
        data = bytes([0xF0, 0x7E, 0x7F, 0x0B, 0x04, 0x02, 0x00, 0x00, 0x00, 0xF7])
        assert encode(sysex(UniversalNonRealTime(FileReferenceClose(2)))) == data


class TestMachineControl:
    """Test cases for MIDI Machine Control."""

    def test_stop(self):
        """A single command."""
        data = bytes([0xF0, 0x7F, 0x7F, 0x06, 0x01, 0xF7])
        msg = sysex(UniversalRealTime(MachineControlCommand(MMCCommand.STOP)))
        assert encode(msg) == data
        assert decode(data) == (msg, 6)

    def test_locate_target(self):
        """Locate carries a standard time code."""
        target = LocateTarget(StandardTimeCode(seconds=0x20, code_type=TimeCodeType.FPS24))
        data = bytes([0xF0, 0x7F, 0x7F, 0x06, 0x44, 0x06, 0x01, 0x00, 0x00, 0x20, 0x00, 0x00, 0xF7])
        assert encode(sysex(UniversalRealTime(target))) == data
        assert decode(data)[0] == sysex(UniversalRealTime(target))

    def test_command_string(self):
        """Several commands in one message stay raw."""
        data = bytes([0xF0, 0x7F, 0x7F, 0x06, 0x01, 0x02, 0xF7])
        assert decode(data)[0] == sysex(UniversalRealTime(RawMachineControlCommand(bytes([0x01, 0x02]))))


class TestChecksums:
    """Test cases for packets ending with a checksum."""

    def test_sample_data_packet(self):
        """Sample data is padded to 120 bytes and checksummed."""
        packet = SampleDataPacket(3, bytes(range(10)))
        data = encode(sysex(UniversalNonRealTime(packet, 0x00)))
        assert len(data) == 5 + PACKET_DATA_LENGTH + 2

        msg, _ = decode(data)
        decoded = msg.msg.msg
        assert decoded.running_count == 3
        assert decoded.data == bytes(range(10)).ljust(PACKET_DATA_LENGTH, b"\x00")

    def test_split_sample_data(self):
        """Packed samples are cut into 120 byte packets with a wrapping count."""
        packets = split_sample_data(bytes(250), start_count=127)
        assert [p.running_count for p in packets] == [127, 0, 1]
        assert [len(p.data) for p in packets] == [120, 120, 10]

    def test_checksum_mismatch(self):
        """A corrupted packet fails its checksum."""
        data = bytearray(encode(sysex(UniversalNonRealTime(SampleDataPacket(1, b"\x10")))))
        data[6] ^= 0x01
        with pytest.raises(Invalid):
            decode(bytes(data))

    def test_file_dump(self):
        """8-bit file data survives packing into data packets."""
        contents = bytes(range(200))
        packets = split_file(contents)
        assert [len(p.data) for p in packets] == [112, 88]

        received = []
        for packet in packets:
            msg, _ = decode(encode(sysex(UniversalNonRealTime(packet, 0x05))))
            received.append(msg.msg.msg)
        assert received == packets
        assert join_packets(received) == contents

    def test_file_dump_packet_count_byte(self):
        """The count byte is the packed length minus one."""
        data = encode(sysex(UniversalNonRealTime(FileDumpPacket(0, bytes(7)))))
        assert data[3:7] == bytes([0x07, 0x02, 0x00, 0x07])

    def test_empty_file_dump_packet(self):
        """An empty packet is one header byte and decodes back to no data."""
        msg = sysex(UniversalNonRealTime(FileDumpPacket(1, b"")))
        data = encode(msg)
        assert data[3:8] == bytes([0x07, 0x02, 0x01, 0x00, 0x00])
        assert decode(data) == (msg, len(data))

    def test_file_dump_header(self):
        """The header carries the file type and name."""
        header = FileDumpHeader(requester=0x10, file_type="MIDI", length=1000, name="song.mid")
        msg = sysex(UniversalNonRealTime(header))
        assert decode(encode(msg))[0] == msg

    def test_sample_dump_request(self):
        """Requests have no checksum."""
        data = bytes([0xF0, 0x7E, 0x00, 0x03, 0x05, 0x00, 0xF7])
        assert encode(sysex(UniversalNonRealTime(SampleDumpRequest(5), 0x00))) == data


class TestSysExParser:
    """Test cases for .syx file parsing."""

    def test_parse_bytes(self, sysex_dump_data):
        """Each message is decoded on its own."""
        entries = SysExParser().parse_bytes(sysex_dump_data)

        assert [e.offset for e in entries] == [0, 6, 16]
        assert entries[0].message == UniversalNonRealTime(IdentityRequest(), ALL_CALL)
        assert not entries[1].is_valid
        assert "Checksum" in entries[1].error
        assert entries[2].message == Commercial(YAMAHA, bytes([0x10, 0x4C, 0x00, 0x00, 0x7E, 0x00]))

    def test_skips_bytes_between_messages(self):
        """Bytes outside F0..F7 are ignored."""
        data = b"\x00\x01" + bytes([0xF0, 0x7D, 0x01, 0xF7]) + b"\x02"
        entries = SysExParser().parse_bytes(data)
        assert len(entries) == 1
        assert entries[0].offset == 2

    def test_parse_file(self, sysex_dump_file):
        """Files are read whole."""
        assert len(SysExParser().parse_file(str(sysex_dump_file))) == 3
