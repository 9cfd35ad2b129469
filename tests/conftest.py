"""Test configuration and fixtures."""

import pytest

from midimsg.context import ReceiverContext

# Format 1, one track, 96 ticks per quarter: a 4/4 time signature and End of Track
SINGLE_TRACK_FILE = bytes.fromhex(
    "4d546864 00000006 0001 0001 0060"
    "4d54726b 0000000c 00 ff 58 04 04 02 18 08 00 ff 2f 00"
)


@pytest.fixture
def context():
    """Return a fresh receiver context."""
    return ReceiverContext.default()


@pytest.fixture
def raw_cc_context():
    """Return a context that keeps every CC as a raw controller."""
    return ReceiverContext.default().with_complex_cc(False)


@pytest.fixture
def smf_context():
    """Return a context set up for reading track data."""
    return ReceiverContext.default().for_smf()


@pytest.fixture
def single_track_data():
    """Return the bytes of a minimal one track Standard MIDI File."""
    return SINGLE_TRACK_FILE


@pytest.fixture
def single_track_file(tmp_path, single_track_data):
    """Return path to a minimal .mid file."""
    path = tmp_path / "single.mid"
    path.write_bytes(single_track_data)
    return path


@pytest.fixture
def sysex_dump_data():
    """Return a .syx payload: identity request, a bad checksum packet and a Yamaha message."""
    identity_request = bytes([0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7])
    bad_packet = bytes([0xF0, 0x7E, 0x00, 0x07, 0x02, 0x00, 0x00, 0x00, 0x00, 0xF7])
    yamaha = bytes([0xF0, 0x43, 0x10, 0x4C, 0x00, 0x00, 0x7E, 0x00, 0xF7])
    return identity_request + bad_packet + yamaha


@pytest.fixture
def sysex_dump_file(tmp_path, sysex_dump_data):
    """Return path to a .syx file."""
    path = tmp_path / "dump.syx"
    path.write_bytes(sysex_dump_data)
    return path
