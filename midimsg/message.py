"""
Top-level MIDI messages and the stream codec.

Every message on the wire is one of the wrappers below. The wrapper decides
how the status byte is written; the payload classes in channel_voice,
channel_mode, system_common, system_real_time and sysex write the rest.

Decoding reads the first byte to choose a branch:

    F0          system exclusive
    F1-F7       system common (F4, F5 and F7 are invalid here)
    F8-FF       system real time (FF is a meta event inside an SMF)
    00-7F       running status, using the context's previous status
    80-EF       channel voice or channel mode

Example:
    ctx = ReceiverContext.default()
    for msg in decode_all(bytes.fromhex("903C64803C00"), ctx):
        print(msg)
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from midimsg.channel_mode import ChannelModeMsg, parse_channel_mode
from midimsg.channel_voice import (
    CONTROL_CHANGE,
    DATA_LENGTHS,
    NOTE_OFF,
    NOTE_ON,
    Channel,
    ChannelVoiceMsg,
    ControlChange,
    HighResNoteOff,
    HighResNoteOn,
    NoteOn,
    parse_channel_voice,
)
from midimsg.context import PendingController, ReceiverContext
from midimsg.control_change import (
    FIRST_CHANNEL_MODE,
    HIGH_RES_VELOCITY,
    Controller,
    HighResVelocity,
    Undefined,
    controller_from_cc,
    expected_partners,
    merge_controller,
)
from midimsg.errors import (
    ContextlessRunningStatus,
    ParseError,
    UndefinedSystemRealTimeMessage,
    UnexpectedEnd,
)
from midimsg.sysex.envelope import SYSEX_START, parse_system_exclusive
from midimsg.system_common import SystemCommonMsg, parse_system_common
from midimsg.system_real_time import (
    UNDEFINED_REAL_TIME,
    SystemRealTimeMsg,
    is_real_time,
    parse_system_real_time,
)
from midimsg.utils.packing import ByteSource, decode_u7

logger = logging.getLogger("midimsg")

META_EVENT = 0xFF


def status_byte(nibble: int, channel: int) -> int:
    return ((nibble & 0x0F) << 4) | (int(channel) & 0x0F)


def _push_running_status(nibble: int, channel: Channel, out: bytearray, context) -> None:
    # A running message is only decodable if the receiver already holds its status
    if context is not None and context.previous_channel_status != (nibble, channel):
        out.append(status_byte(nibble, channel))


@dataclass
class ChannelVoice:
    """
    A voice message with its status byte.

    Example:
        ChannelVoice(Channel.CH1, NoteOn(60, 100))  ->  90 3C 64
    """

    channel: Channel
    msg: ChannelVoiceMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        out.append(status_byte(self.msg.STATUS, self.channel))
        self.msg.encode_into(out, int(self.channel))


@dataclass
class RunningChannelVoice:
    """
    A voice message sent under running status: no status byte is written.

    When encoded through a context that holds a different running status,
    the status byte is written after all.
    """

    channel: Channel
    msg: ChannelVoiceMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        _push_running_status(self.msg.STATUS, self.channel, out, context)
        self.msg.encode_into(out, int(self.channel))


@dataclass
class ChannelMode:
    channel: Channel
    msg: ChannelModeMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        out.append(status_byte(CONTROL_CHANGE, self.channel))
        self.msg.encode_into(out)


@dataclass
class RunningChannelMode:
    channel: Channel
    msg: ChannelModeMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        _push_running_status(CONTROL_CHANGE, self.channel, out, context)
        self.msg.encode_into(out)


@dataclass
class SystemCommon:
    msg: SystemCommonMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        self.msg.encode_into(out)


@dataclass
class SystemRealTime:
    msg: SystemRealTimeMsg

    def encode_into(self, out: bytearray, context=None) -> None:
        self.msg.encode_into(out)


@dataclass
class SystemExclusive:
    """Wraps a Commercial, NonCommercial, UniversalRealTime or UniversalNonRealTime envelope."""

    msg: object

    def encode_into(self, out: bytearray, context=None) -> None:
        self.msg.encode_into(out)


@dataclass
class Meta:
    """A Standard MIDI File meta event. Never sent on the wire."""

    msg: object

    def encode_into(self, out: bytearray, context=None) -> None:
        out.append(META_EVENT)
        self.msg.encode_into(out)


MidiMsg = Union[
    ChannelVoice,
    RunningChannelVoice,
    ChannelMode,
    RunningChannelMode,
    SystemCommon,
    SystemRealTime,
    SystemExclusive,
    Meta,
]


def is_system_message(msg: MidiMsg) -> bool:
    return isinstance(msg, (SystemCommon, SystemRealTime, SystemExclusive))


# Encoding


def _record_encoded(msg: MidiMsg, context: ReceiverContext) -> None:
    if isinstance(msg, (ChannelVoice, RunningChannelVoice)):
        if isinstance(msg.msg, (HighResNoteOn, HighResNoteOff)):
            # The trailing velocity CC leaves a Control Change status running
            context.previous_channel_status = (CONTROL_CHANGE, msg.channel)
        else:
            context.previous_channel_status = (msg.msg.STATUS, msg.channel)
    elif isinstance(msg, (ChannelMode, RunningChannelMode)):
        context.previous_channel_status = (CONTROL_CHANGE, msg.channel)
    elif isinstance(msg, (SystemCommon, SystemExclusive, Meta)):
        context.clear_running_status()


def encode(msg: MidiMsg, context: Optional[ReceiverContext] = None) -> bytes:
    """
    Encode one message.

    Args:
        msg: Message to encode. Out of range fields are clamped.
        context: Optional transmitter state. When given, running messages
            only omit their status byte if it is already running, and the
            running status is updated.

    Returns:
        The wire bytes
    """
    out = bytearray()
    msg.encode_into(out, context)
    if context is not None:
        _record_encoded(msg, context)
    return bytes(out)


def encode_many(msgs: List[MidiMsg], context: Optional[ReceiverContext] = None) -> bytes:
    """
    Encode a sequence of messages into one buffer.

    Without a context the result is the concatenation of `encode(msg)` for
    every message. With one, running status is tracked across the sequence
    as in `encode(msg, context)`.
    """
    out = bytearray()
    for msg in msgs:
        msg.encode_into(out, context)
        if context is not None:
            _record_encoded(msg, context)
    return bytes(out)


# Decoding


def decode(data: ByteSource) -> Tuple[MidiMsg, int]:
    """
    Decode the message at the start of `data` with a fresh context.

    Returns:
        (message, bytes consumed)
    """
    return decode_with_context(data, ReceiverContext.default())


def decode_with_context(data: ByteSource, context: ReceiverContext) -> Tuple[MidiMsg, int]:
    """
    Decode the message at the start of `data`, reading and updating `context`.

    Raises:
        ParseError: One of its subclasses; see midimsg.errors
    """
    if len(data) == 0:
        raise UnexpectedEnd()
    first = data[0]

    if context.interrupted is not None:
        if first < 0x80:
            return _resume_interrupted(data, context)
        if not is_real_time(first, context.parsing_smf):
            logger.debug("Dropped interrupted message head %s", context.interrupted.hex(" "))
            context.interrupted = None

    if first == SYSEX_START or (context.is_smf_sysex and first < 0x80):
        msg, consumed = parse_system_exclusive(data, context)
        context.clear_running_status()
        return SystemExclusive(msg), consumed
    if first == META_EVENT and context.parsing_smf:
        from midimsg.smf.meta import parse_meta

        meta, consumed = parse_meta(data, 1)
        context.clear_running_status()
        return Meta(meta), consumed + 1
    if first >= 0xF8:
        return SystemRealTime(parse_system_real_time(first)), 1
    if first > SYSEX_START:
        msg, consumed = parse_system_common(data, context.time_code)
        context.clear_running_status()
        return SystemCommon(msg), consumed
    return _decode_channel(data, context)


def decode_all(data: ByteSource, context: Optional[ReceiverContext] = None) -> List[MidiMsg]:
    """Decode every message in `data`. Stops at the first error by raising it."""
    return [msg for msg, _, _ in iter_decode(data, context)]


def iter_decode(
    data: ByteSource, context: Optional[ReceiverContext] = None
) -> Iterator[Tuple[MidiMsg, int, int]]:
    """
    Decode `data` message by message.

    Yields:
        (message, offset in `data`, bytes consumed)
    """
    if context is None:
        context = ReceiverContext.default()
    data = bytes(data)
    offset = 0
    while offset < len(data):
        msg, consumed = decode_with_context(data[offset:], context)
        yield msg, offset, consumed
        offset += consumed


def _resume_interrupted(data: ByteSource, context: ReceiverContext) -> Tuple[MidiMsg, int]:
    head = context.interrupted
    context.interrupted = None
    try:
        msg, consumed = _decode_channel(head + bytes(data), context)
    except ParseError:
        # The head was already reported as consumed; keep it for the next call
        context.interrupted = head
        raise
    # Only the bytes of this call count; the head was counted before
    return msg, consumed - len(head)


def _voice(msg: ChannelVoiceMsg, channel: Channel, running: bool) -> MidiMsg:
    if running:
        return RunningChannelVoice(channel, msg)
    return ChannelVoice(channel, msg)


def _decode_channel(data: ByteSource, context: ReceiverContext) -> Tuple[MidiMsg, int]:
    first = data[0]
    if first & 0x80:
        status = first
        index = 1
        running = False
    else:
        if context.previous_channel_status is None:
            raise ContextlessRunningStatus()
        status = status_byte(*context.previous_channel_status)
        index = 0
        running = True

    nibble = status >> 4
    channel = Channel.from_status(status)
    values = []
    while len(values) < DATA_LENGTHS[nibble]:
        if index >= len(data):
            raise UnexpectedEnd()
        byte = data[index]
        if is_real_time(byte, context.parsing_smf):
            context.interrupted = bytes(data[:index])
            logger.debug("Real time byte 0x%02X inside message 0x%02X", byte, status)
            return SystemRealTime(parse_system_real_time(byte)), index + 1
        if byte in UNDEFINED_REAL_TIME:
            raise UndefinedSystemRealTimeMessage(byte)
        values.append(decode_u7(byte))
        index += 1

    if running:
        logger.debug("Running status 0x%02X", status)
    context.previous_channel_status = (nibble, channel)

    if nibble == CONTROL_CHANGE:
        return _decode_control_change(data, index, channel, values, running, context)

    msg = parse_channel_voice(nibble, values)
    if context.complex_cc:
        if nibble in (NOTE_ON, NOTE_OFF):
            msg, index = _high_res_note(msg, data, index, channel, context)
        context.discard_pending(channel)
    return _voice(msg, channel, running), index


def _high_res_note(msg, data: ByteSource, index: int, channel: Channel, context: ReceiverContext):
    """Pair a note with a following CC 88, or with a CC 88 received before it."""
    velocity_cc = status_byte(CONTROL_CHANGE, channel)
    if (
        not context.parsing_smf
        and index + 2 < len(data)
        and data[index] == velocity_cc
        and data[index + 1] == HIGH_RES_VELOCITY
        and data[index + 2] < 0x80
    ):
        lsb = data[index + 2]
        index += 3
        context.previous_channel_status = (CONTROL_CHANGE, channel)
    else:
        lsb = context.take_high_res_velocity(channel)
        if lsb is None:
            return msg, index

    velocity = (msg.velocity << 7) | lsb
    cls = HighResNoteOn if isinstance(msg, NoteOn) else HighResNoteOff
    logger.debug("Merged velocity LSB %d into note %d on channel %d", lsb, msg.note, channel.number)
    return cls(msg.note, velocity), index


def _decode_control_change(
    data: ByteSource,
    index: int,
    channel: Channel,
    values: List[int],
    running: bool,
    context: ReceiverContext,
) -> Tuple[MidiMsg, int]:
    control, value = values

    if control >= FIRST_CHANNEL_MODE:
        if context.complex_cc:
            context.discard_pending(channel)
        mode = parse_channel_mode(control, value)
        if running:
            return RunningChannelMode(channel, mode), index
        return ChannelMode(channel, mode), index

    if not context.complex_cc:
        return _voice(ControlChange(Undefined(control, value)), channel, running), index

    if context.pending_high_res_velocity_channel == channel:
        context.clear_high_res_velocity()

    if control == HIGH_RES_VELOCITY:
        context.pending_controllers.pop(channel, None)
        context.set_high_res_velocity(channel, value)
        return _voice(ControlChange(HighResVelocity(value)), channel, running), index

    controller = _merge_pending(channel, control, value, context)
    last_control = control
    if not context.parsing_smf:
        controller, last_control, index = _merge_following(controller, last_control, data, index, channel)

    partners = expected_partners(controller, last_control)
    if partners:
        context.pending_controllers[channel] = PendingController(controller, partners)
    else:
        context.pending_controllers.pop(channel, None)
    return _voice(ControlChange(controller), channel, running), index


def _merge_pending(channel: Channel, control: int, value: int, context: ReceiverContext) -> Controller:
    pending = context.pending_controllers.get(channel)
    if pending is not None and control in pending.expects:
        merged = merge_controller(pending.controller, control, value)
        if merged is not None:
            logger.debug("Completed %s with CC %d on channel %d", type(merged).__name__, control, channel.number)
            return merged
    return controller_from_cc(control, value)


def _peek_cc(data: ByteSource, index: int, status: int) -> Optional[Tuple[int, int, int]]:
    """Return (control, value, size) of a CC at `index`, with or without its status byte."""
    start = index + 1 if index < len(data) and data[index] == status else index
    if start + 1 >= len(data):
        return None
    control, value = data[start], data[start + 1]
    if control > 0x7F or value > 0x7F:
        return None
    return control, value, start + 2 - index


def _merge_following(
    controller: Controller, last_control: int, data: ByteSource, index: int, channel: Channel
) -> Tuple[Controller, int, int]:
    """Merge the partner CCs that follow in the same buffer."""
    status = status_byte(CONTROL_CHANGE, channel)
    while True:
        partners = expected_partners(controller, last_control)
        if not partners:
            break
        peeked = _peek_cc(data, index, status)
        if peeked is None:
            break
        control, value, size = peeked
        if control not in partners:
            break
        merged = merge_controller(controller, control, value)
        if merged is None:
            break
        logger.debug("Merged CC %d into %s on channel %d", control, type(merged).__name__, channel.number)
        controller, last_control = merged, control
        index += size
    return controller, last_control, index
