"""Tests for controller encoding and CC assembly."""

import pytest

from midimsg.channel_voice import Channel, ControlChange, NoteOn
from midimsg.control_change import (
    BankSelect,
    GeneralPurpose1,
    GeneralPurpose5,
    HighResVelocity,
    Hold,
    Parameter,
    PortamentoControl,
    RegisteredParameter,
    TogglePortamento,
    Undefined,
    UndefinedHighRes,
    Unregistered,
    Volume,
    controller_from_cc,
    expected_partners,
    merge_controller,
)
from midimsg.message import ChannelVoice, RunningChannelVoice, decode, decode_all, decode_with_context, encode


def cc(channel, controller):
    return ChannelVoice(channel, ControlChange(controller))


class TestControllerEncoding:
    """Test cases for controller bytes."""

    def test_high_res(self):
        """14-bit controllers send MSB then LSB on control + 32."""
        assert encode(cc(Channel.CH2, Volume(1000))) == bytes([0xB1, 0x07, 0x07, 0x27, 0x68])

    def test_single_byte(self):
        """Single byte controllers send one pair."""
        assert encode(cc(Channel.CH1, Hold(100))) == bytes([0xB0, 0x40, 0x64])

    def test_switch(self):
        """Switches are sent as 127 or 0."""
        assert encode(cc(Channel.CH1, TogglePortamento(True))) == bytes([0xB0, 0x41, 0x7F])
        assert encode(cc(Channel.CH1, TogglePortamento(False))) == bytes([0xB0, 0x41, 0x00])

    def test_controller_numbers(self):
        """General purpose and portamento control numbers."""
        assert GeneralPurpose1.CONTROL == 16
        assert GeneralPurpose5.CONTROL == 80
        assert PortamentoControl.CONTROL == 84
        assert HighResVelocity.CONTROL == 88

    def test_undefined(self):
        """Undefined controllers are sent as given."""
        assert encode(cc(Channel.CH1, Undefined(3, 9))) == bytes([0xB0, 0x03, 0x09])
        assert encode(cc(Channel.CH1, UndefinedHighRes(3, 35, 1000))) == bytes([0xB0, 0x03, 0x07, 0x23, 0x68])

    def test_pitch_bend_sensitivity(self):
        """RPN selection is LSB first, then the data entry."""
        msg = cc(Channel.CH1, Parameter(RegisteredParameter.PITCH_BEND_SENSITIVITY, (2, 0)))
        assert encode(msg) == bytes([0xB0, 0x64, 0x00, 0x65, 0x00, 0x06, 0x02, 0x26, 0x00])

    def test_parameter_without_entry(self):
        """A parameter without an entry only selects."""
        msg = cc(Channel.CH1, Parameter(RegisteredParameter.NULL))
        assert encode(msg) == bytes([0xB0, 0x64, 0x7F, 0x65, 0x7F])

    def test_coarse_tuning_is_biased(self):
        """Coarse tuning entries are offset by 64."""
        msg = cc(Channel.CH1, Parameter(RegisteredParameter.COARSE_TUNING, -12))
        assert encode(msg) == bytes([0xB0, 0x64, 0x02, 0x65, 0x00, 0x06, 0x34, 0x26, 0x00])

    def test_nrpn(self):
        """Non-registered parameters use CC 98/99."""
        msg = cc(Channel.CH1, Parameter(Unregistered(300), 5000))
        assert encode(msg) == bytes([0xB0, 0x62, 0x2C, 0x63, 0x02, 0x06, 0x27, 0x26, 0x08])


class TestControllerAssembly:
    """Test cases for pairing controller halves."""

    def test_volume_with_repeated_status(self):
        """Both halves with their own status byte become one controller."""
        msg, consumed = decode(bytes([0xB1, 0x07, 0x07, 0xB1, 0x27, 0x68]))
        assert msg == cc(Channel.CH2, Volume(1000))
        assert consumed == 6

    def test_volume_with_running_status(self):
        """The LSB half may follow under running status."""
        msg, consumed = decode(bytes([0xB1, 0x07, 0x07, 0x27, 0x68]))
        assert msg == cc(Channel.CH2, Volume(1000))
        assert consumed == 5

    def test_msb_alone(self):
        """An MSB on its own carries its value in the upper seven bits."""
        msg, consumed = decode(bytes([0xB0, 0x00, 0x01]))
        assert msg == cc(Channel.CH1, BankSelect(1 << 7))
        assert consumed == 3

    def test_lsb_in_a_later_call(self, context):
        """A pending MSB is completed by an LSB decoded later."""
        decode_with_context(bytes([0xB1, 0x07, 0x07]), context)
        msg, consumed = decode_with_context(bytes([0xB1, 0x27, 0x68]), context)
        assert msg == cc(Channel.CH2, Volume(1000))
        assert consumed == 3

    def test_pending_is_per_channel(self, context):
        """An LSB on another channel does not complete the pending MSB."""
        decode_with_context(bytes([0xB1, 0x07, 0x07]), context)
        msg, _ = decode_with_context(bytes([0xB2, 0x27, 0x68]), context)
        assert msg == cc(Channel.CH3, controller_from_cc(0x27, 0x68))

    def test_other_message_discards_pending(self, context):
        """A note between the halves drops the pending MSB."""
        decode_with_context(bytes([0xB1, 0x07, 0x07]), context)
        decode_with_context(bytes([0x91, 0x3C, 0x64]), context)
        assert Channel.CH2 not in context.pending_controllers

    def test_registered_parameter(self):
        """An RPN selection followed by a data entry becomes one Parameter."""
        data = bytes([0xB0, 0x64, 0x00, 0x65, 0x00, 0x06, 0x02, 0x26, 0x00])
        msg, consumed = decode(data)
        assert msg == cc(Channel.CH1, Parameter(RegisteredParameter.PITCH_BEND_SENSITIVITY, (2, 0)))
        assert consumed == 9

    def test_parameter_selected_then_entered(self, context):
        """The data entry may arrive after the selection, in a later call."""
        msg, _ = decode_with_context(bytes([0xB0, 0x65, 0x00, 0x64, 0x00]), context)
        assert msg == cc(Channel.CH1, Parameter(RegisteredParameter.PITCH_BEND_SENSITIVITY))

        msg, _ = decode_with_context(bytes([0x06, 0x0C]), context)
        assert msg == RunningChannelVoice(
            Channel.CH1, ControlChange(Parameter(RegisteredParameter.PITCH_BEND_SENSITIVITY, (12, 0)))
        )

    def test_unregistered_parameter(self):
        """An NRPN selection with a 14-bit entry."""
        data = bytes([0xB0, 0x62, 0x2C, 0x63, 0x02, 0x06, 0x27, 0x26, 0x08])
        msg, consumed = decode(data)
        assert msg == cc(Channel.CH1, Parameter(Unregistered(300), 5000))
        assert consumed == 9

    def test_null_parameter_takes_no_entry(self):
        """The null RPN is complete after its selection."""
        data = bytes([0xB0, 0x64, 0x7F, 0x65, 0x7F, 0x06, 0x01])
        msgs = decode_all(data)
        assert msgs[0] == cc(Channel.CH1, Parameter(RegisteredParameter.NULL))
        assert msgs[1] == RunningChannelVoice(Channel.CH1, ControlChange(controller_from_cc(0x06, 0x01)))

    def test_raw_cc(self, raw_cc_context):
        """Without assembly every CC is an Undefined controller."""
        msgs = decode_all(bytes([0xB1, 0x07, 0x07, 0x27, 0x68]), raw_cc_context)
        assert msgs == [
            cc(Channel.CH2, Undefined(0x07, 0x07)),
            RunningChannelVoice(Channel.CH2, ControlChange(Undefined(0x27, 0x68))),
        ]

    def test_switch_threshold(self):
        """Switches read 64 and above as on."""
        assert decode(bytes([0xB0, 0x41, 0x40]))[0] == cc(Channel.CH1, TogglePortamento(True))
        assert decode(bytes([0xB0, 0x41, 0x3F]))[0] == cc(Channel.CH1, TogglePortamento(False))

    def test_standalone_velocity_lsb(self, context):
        """A lone CC 88 is reported and held for the next note."""
        msg, _ = decode_with_context(bytes([0xB0, 0x58, 0x10]), context)
        assert msg == cc(Channel.CH1, HighResVelocity(0x10))
        assert context.pending_high_res_velocity_lsb == 0x10

    def test_note_after_velocity_without_complex_cc(self, raw_cc_context):
        """Without assembly a CC 88 is left alone."""
        decode_with_context(bytes([0xB0, 0x58, 0x10]), raw_cc_context)
        msg, _ = decode_with_context(bytes([0x90, 0x3C, 0x40]), raw_cc_context)
        assert msg == ChannelVoice(Channel.CH1, NoteOn(60, 0x40))


class TestMergeHelpers:
    """Test cases for the pairing helpers."""

    def test_expected_partner_of_msb(self):
        """An MSB waits for control + 32."""
        assert expected_partners(Volume(0), 7) == frozenset([39])
        assert expected_partners(Volume(0), 39) == frozenset()

    def test_merge_replaces_lsb(self):
        """Merging keeps the MSB and replaces the LSB."""
        assert merge_controller(Volume(7 << 7), 39, 0x68) == Volume(1000)

    def test_merge_unrelated(self):
        """A control that does not complete the controller merges to None."""
        assert merge_controller(Volume(0), 40, 1) is None

    @pytest.mark.parametrize(
        "control,value,expected",
        [
            (7, 1, Volume(1 << 7)),
            (3, 1, UndefinedHighRes(3, 35, 1 << 7)),
            (64, 127, Hold(127)),
            (102, 5, Undefined(102, 5)),
        ],
    )
    def test_controller_from_cc(self, control, value, expected):
        """Single CCs map to their controller type."""
        assert controller_from_cc(control, value) == expected
