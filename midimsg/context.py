"""
Receiver state threaded through decode calls.

One ReceiverContext belongs to one input stream. Decoders read and update it
to resolve running status, to pair CC halves that arrive in separate calls,
to rebuild the time code from quarter frames, and to resume a channel
message that a real-time byte interrupted.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from midimsg.channel_voice import Channel
from midimsg.control_change import Controller
from midimsg.time_code import TimeCode


@dataclass
class PendingController:
    """A controller half waiting for the control numbers in `expects`."""

    controller: Controller
    expects: FrozenSet[int]


@dataclass
class ReceiverContext:
    """
    Mutable decoder state.

    Attributes:
        previous_channel_status: (status nibble, channel) of the last channel
            message, used for running status
        pending_high_res_velocity_lsb: LSB from a standalone CC 0x58, waiting
            for the next note on `pending_high_res_velocity_channel`
        time_code: Rolling time code rebuilt from quarter frames and full
            time code messages
        is_smf_sysex: System exclusive bodies start without F0
        parsing_smf: Inside a Standard MIDI File; 0xFF starts a meta event
        complex_cc: Assemble CC pairs and parameters; when False every CC
            0-119 decodes as Undefined
        pending_controllers: Per channel controller halves waiting for their
            partner
        interrupted: Head of a channel message cut by a real-time byte

    Example:
        ctx = ReceiverContext.default()
        msg, consumed = decode_with_context(data, ctx)
    """

    previous_channel_status: Optional[Tuple[int, Channel]] = None
    pending_high_res_velocity_lsb: Optional[int] = None
    pending_high_res_velocity_channel: Optional[Channel] = None
    time_code: TimeCode = field(default_factory=TimeCode)
    is_smf_sysex: bool = False
    parsing_smf: bool = False
    complex_cc: bool = True
    pending_controllers: Dict[Channel, PendingController] = field(default_factory=dict)
    interrupted: Optional[bytes] = None

    @classmethod
    def default(cls) -> "ReceiverContext":
        return cls()

    def with_complex_cc(self, flag: bool = True) -> "ReceiverContext":
        ctx = self.copy()
        ctx.complex_cc = flag
        return ctx

    def for_smf(self) -> "ReceiverContext":
        ctx = self.copy()
        ctx.parsing_smf = True
        return ctx

    def copy(self) -> "ReceiverContext":
        return ReceiverContext(
            previous_channel_status=self.previous_channel_status,
            pending_high_res_velocity_lsb=self.pending_high_res_velocity_lsb,
            pending_high_res_velocity_channel=self.pending_high_res_velocity_channel,
            time_code=self.time_code.copy(),
            is_smf_sysex=self.is_smf_sysex,
            parsing_smf=self.parsing_smf,
            complex_cc=self.complex_cc,
            pending_controllers=dict(self.pending_controllers),
            interrupted=self.interrupted,
        )

    # Pending state

    def take_high_res_velocity(self, channel: Channel) -> Optional[int]:
        """Consume the pending velocity LSB if it arrived on `channel`."""
        if self.pending_high_res_velocity_lsb is None:
            return None
        if self.pending_high_res_velocity_channel != channel:
            return None
        lsb = self.pending_high_res_velocity_lsb
        self.clear_high_res_velocity()
        return lsb

    def set_high_res_velocity(self, channel: Channel, lsb: int) -> None:
        self.pending_high_res_velocity_lsb = lsb
        self.pending_high_res_velocity_channel = channel

    def clear_high_res_velocity(self) -> None:
        self.pending_high_res_velocity_lsb = None
        self.pending_high_res_velocity_channel = None

    def discard_pending(self, channel: Channel) -> None:
        """Drop every half-received value on `channel`."""
        self.pending_controllers.pop(channel, None)
        if self.pending_high_res_velocity_channel == channel:
            self.clear_high_res_velocity()

    def clear_running_status(self) -> None:
        self.previous_channel_status = None
