"""
Text formatting for decoded messages.

Turns message values into the short one-line descriptions used by the
decode, smf and sysex tables.
"""

from typing import Optional

from midimsg.channel_mode import Mono, PolyMode
from midimsg.channel_voice import (
    ChannelPressure,
    ControlChange,
    HighResNoteOff,
    HighResNoteOn,
    NoteOff,
    NoteOn,
    PitchBend,
    PolyPressure,
    ProgramChange,
)
from midimsg.control_change import HighResController, Parameter, Unregistered
from midimsg.general_midi import DRUM_CHANNEL, get_percussion_name, get_voice_name
from midimsg.message import (
    ChannelMode,
    ChannelVoice,
    Meta,
    MidiMsg,
    RunningChannelMode,
    RunningChannelVoice,
    SystemCommon,
    SystemExclusive,
    SystemRealTime,
)
from midimsg.smf.meta import SetTempo, SmpteOffset, UnknownMeta
from midimsg.sysex.envelope import Commercial, NonCommercial, UniversalNonRealTime, UniversalRealTime
from midimsg.system_common import TimeCodeQuarterFrame

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

KIND_STYLES = {
    "Voice": "green",
    "Mode": "yellow",
    "Common": "cyan",
    "RealTime": "magenta",
    "SysEx": "blue",
    "Meta": "bright_black",
}


def note_name(note: int) -> str:
    """Convert a note number to a name, middle C (60) being C4."""
    return f"{NOTE_NAMES[note % 12]}{note // 12 - 1}"


def hex_bytes(data: bytes, limit: Optional[int] = None) -> str:
    """Format bytes as spaced hex, truncated after `limit` bytes."""
    shown = data if limit is None else data[:limit]
    text = " ".join(f"{b:02X}" for b in shown)
    if limit is not None and len(data) > limit:
        text += f" ... (+{len(data) - limit})"
    return text


def message_kind(msg: MidiMsg) -> str:
    if isinstance(msg, (ChannelVoice, RunningChannelVoice)):
        return "Voice"
    if isinstance(msg, (ChannelMode, RunningChannelMode)):
        return "Mode"
    if isinstance(msg, SystemCommon):
        return "Common"
    if isinstance(msg, SystemRealTime):
        return "RealTime"
    if isinstance(msg, SystemExclusive):
        return "SysEx"
    if isinstance(msg, Meta):
        return "Meta"
    return type(msg).__name__


def _describe_note(name: str, note: int, velocity: int, channel_number: int) -> str:
    text = f"{name} {note_name(note)} ({note}) vel {velocity}"
    if channel_number == DRUM_CHANNEL:
        drum = get_percussion_name(note)
        if drum:
            text += f" [{drum}]"
    return text


def _describe_controller(control) -> str:
    if isinstance(control, Parameter):
        if isinstance(control.parameter, Unregistered):
            name = f"NRPN {control.parameter.number}"
        else:
            name = f"RPN {control.parameter.name}"
        if control.entry is None:
            return name
        return f"{name} = {control.entry}"
    if isinstance(control, HighResController):
        return f"{type(control).__name__} {control.value} (14-bit)"
    fields = ", ".join(f"{k}={v}" for k, v in vars(control).items())
    return f"{type(control).__name__}({fields})" if fields else type(control).__name__


def describe_voice(payload, channel_number: int) -> str:
    if isinstance(payload, (NoteOn, NoteOff, HighResNoteOn, HighResNoteOff)):
        return _describe_note(type(payload).__name__, payload.note, payload.velocity, channel_number)
    if isinstance(payload, PolyPressure):
        return f"PolyPressure {note_name(payload.note)} {payload.pressure}"
    if isinstance(payload, ControlChange):
        return _describe_controller(payload.control)
    if isinstance(payload, ProgramChange):
        return f"ProgramChange {payload.program} ({get_voice_name(payload.program, channel_number)})"
    if isinstance(payload, ChannelPressure):
        return f"ChannelPressure {payload.pressure}"
    if isinstance(payload, PitchBend):
        return f"PitchBend {payload.bend - 8192:+d}"
    return repr(payload)


def describe_sysex(envelope) -> str:
    if isinstance(envelope, (UniversalRealTime, UniversalNonRealTime)):
        kind = "RT" if isinstance(envelope, UniversalRealTime) else "NRT"
        device = "all" if envelope.device == 0x7F else str(envelope.device)
        return f"Universal {kind} dev {device}: {envelope.msg!r}"
    if isinstance(envelope, Commercial):
        return f"{envelope.id}: {len(envelope.data)} data bytes"
    if isinstance(envelope, NonCommercial):
        return f"Non-commercial: {len(envelope.data)} data bytes"
    return repr(envelope)


def describe_meta(meta) -> str:
    if isinstance(meta, SetTempo):
        return f"SetTempo {meta.tempo} us/qn ({meta.bpm:.2f} BPM)"
    if isinstance(meta, SmpteOffset):
        return f"SmpteOffset {meta.time.time_code}.{meta.time.fractional_frames:02d}"
    if isinstance(meta, UnknownMeta):
        return f"Meta 0x{meta.meta_type:02X}: {hex_bytes(meta.data, 16)}"
    text = getattr(meta, "text", None)
    if text is not None:
        return f"{type(meta).__name__} {text!r}"
    return str(meta) if type(meta).__str__ is not object.__str__ else repr(meta)


def describe(msg: MidiMsg) -> str:
    """
    One-line description of a message.

    Example:
        describe(ChannelVoice(Channel.CH1, NoteOn(60, 100)))
        -> "ch1 NoteOn C4 (60) vel 100"
    """
    if isinstance(msg, (ChannelVoice, RunningChannelVoice)):
        running = " (running)" if isinstance(msg, RunningChannelVoice) else ""
        return f"ch{msg.channel.number} {describe_voice(msg.msg, msg.channel.number)}{running}"
    if isinstance(msg, (ChannelMode, RunningChannelMode)):
        mode = msg.msg
        if isinstance(mode, PolyMode) and isinstance(mode.mode, Mono):
            return f"ch{msg.channel.number} Mono ({mode.mode.channels} channels)"
        return f"ch{msg.channel.number} {mode!r}"
    if isinstance(msg, SystemCommon):
        if isinstance(msg.msg, TimeCodeQuarterFrame):
            return f"QuarterFrame {msg.msg.index + 1} -> {msg.msg.time_code}"
        return repr(msg.msg)
    if isinstance(msg, SystemRealTime):
        return msg.msg.name
    if isinstance(msg, SystemExclusive):
        return describe_sysex(msg.msg)
    if isinstance(msg, Meta):
        return describe_meta(msg.msg)
    return repr(msg)
