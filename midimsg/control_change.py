"""
Control Change controllers.

A ControlChange carries one Controller. Controllers come in four kinds:

- 14-bit controllers (CC 0-31): sent as `msb_cc msb lsb_cc lsb`, where the
  LSB controller number is the MSB number + 32
- single byte controllers (CC 64-97): sent as `cc value`
- parameter selection (RPN: CC 101/100, NRPN: CC 99/98), optionally
  followed by a data entry (CC 6 / CC 38)
- anything else, carried as Undefined / UndefinedHighRes

CC 120-127 are channel mode messages and live in channel_mode.py.

Pairing
-------
When decoding, a controller that has only seen its first half knows which
control numbers may complete it (`expected_partners`). `merge_controller`
folds the partner's raw (control, value) into it. The decoder in
midimsg.message drives both, eagerly within one buffer and incrementally
through the receiver context.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Dict, FrozenSet, Optional, Tuple, Type, Union

from midimsg.utils.packing import (
    bool_to_u7,
    i14_from_u7s,
    i_to_u14,
    i_to_u7,
    replace_u14_lsb,
    to_u14,
    to_u7,
    u14_from_u7s,
    u7_to_i,
)

# Control numbers with a meaning of their own during assembly
DATA_ENTRY = 6
DATA_ENTRY_LSB = 38
HIGH_RES_VELOCITY = 88
NRPN_LSB = 98
NRPN_MSB = 99
RPN_LSB = 100
RPN_MSB = 101
FIRST_CHANNEL_MODE = 120

LSB_OFFSET = 32

NO_PARTNERS: FrozenSet[int] = frozenset()


class Controller:
    """Base class for everything a ControlChange can carry."""

    CONTROL: ClassVar[int] = 0

    def encode_into(self, out: bytearray) -> None:
        raise NotImplementedError


# 14-bit controllers


@dataclass
class HighResController(Controller):
    """A controller whose 14-bit value is split over an MSB and an LSB control."""

    value: int = 0

    def encode_into(self, out: bytearray) -> None:
        msb, lsb = to_u14(self.value)
        out.extend([self.CONTROL, msb, self.CONTROL + LSB_OFFSET, lsb])


class BankSelect(HighResController):
    CONTROL = 0


class ModWheel(HighResController):
    CONTROL = 1


class Breath(HighResController):
    CONTROL = 2


class Foot(HighResController):
    CONTROL = 4


class Portamento(HighResController):
    CONTROL = 5


class DataEntry(HighResController):
    """A data entry that arrived without a selected parameter."""

    CONTROL = DATA_ENTRY


class Volume(HighResController):
    CONTROL = 7


class Balance(HighResController):
    CONTROL = 8


class Pan(HighResController):
    CONTROL = 10


class Expression(HighResController):
    CONTROL = 11


class Effect1(HighResController):
    CONTROL = 12


class Effect2(HighResController):
    CONTROL = 13


class GeneralPurpose1(HighResController):
    CONTROL = 16


class GeneralPurpose2(HighResController):
    CONTROL = 17


class GeneralPurpose3(HighResController):
    CONTROL = 18


class GeneralPurpose4(HighResController):
    CONTROL = 19


# Single byte controllers


@dataclass
class SingleByteController(Controller):
    value: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([self.CONTROL, to_u7(self.value)])


@dataclass
class SwitchController(Controller):
    """An on/off controller: sent as 127 or 0, read as on from 64 up."""

    on: bool = False

    def encode_into(self, out: bytearray) -> None:
        out.extend([self.CONTROL, bool_to_u7(self.on)])


class Hold(SingleByteController):
    CONTROL = 64


class TogglePortamento(SwitchController):
    CONTROL = 65


class Sostenuto(SingleByteController):
    CONTROL = 66


class SoftPedal(SingleByteController):
    CONTROL = 67


class ToggleLegato(SwitchController):
    CONTROL = 68


class Hold2(SingleByteController):
    CONTROL = 69


class SoundControl1(SingleByteController):
    CONTROL = 70


class SoundControl2(SingleByteController):
    CONTROL = 71


class SoundControl3(SingleByteController):
    CONTROL = 72


class SoundControl4(SingleByteController):
    CONTROL = 73


class SoundControl5(SingleByteController):
    CONTROL = 74


class SoundControl6(SingleByteController):
    CONTROL = 75


class SoundControl7(SingleByteController):
    CONTROL = 76


class SoundControl8(SingleByteController):
    CONTROL = 77


class SoundControl9(SingleByteController):
    CONTROL = 78


class SoundControl10(SingleByteController):
    CONTROL = 79


class GeneralPurpose5(SingleByteController):
    CONTROL = 80


class GeneralPurpose6(SingleByteController):
    CONTROL = 81


class GeneralPurpose7(SingleByteController):
    CONTROL = 82


class GeneralPurpose8(SingleByteController):
    CONTROL = 83


class PortamentoControl(SingleByteController):
    CONTROL = 84


class HighResVelocity(SingleByteController):
    """The low 7 bits of a note velocity (CA-031)."""

    CONTROL = HIGH_RES_VELOCITY


class Effects1Depth(SingleByteController):
    CONTROL = 91


class Effects2Depth(SingleByteController):
    CONTROL = 92


class Effects3Depth(SingleByteController):
    CONTROL = 93


class Effects4Depth(SingleByteController):
    CONTROL = 94


class Effects5Depth(SingleByteController):
    CONTROL = 95


class DataIncrement(SingleByteController):
    CONTROL = 96


class DataDecrement(SingleByteController):
    CONTROL = 97


# GM2 names for the sound controllers and effect depths
SoundVariation = SoundControl1
Timbre = SoundControl2
ReleaseTime = SoundControl3
AttackTime = SoundControl4
Brightness = SoundControl5
DecayTime = SoundControl6
VibratoRate = SoundControl7
VibratoDepth = SoundControl8
VibratoDelay = SoundControl9
ReverbSendLevel = Effects1Depth
TremoloDepth = Effects2Depth
ChorusSendLevel = Effects3Depth
CelesteDepth = Effects4Depth
PhaserDepth = Effects5Depth


# Undefined controllers


@dataclass
class Undefined(Controller):
    """A controller 0-119 carried as a raw number and value."""

    control: int = 3
    value: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([min(max(self.control, 0), 119), to_u7(self.value)])


@dataclass
class UndefinedHighRes(Controller):
    """A pair of undefined controllers used together as one 14-bit value."""

    control1: int = 3
    control2: int = 35
    value: int = 0

    def encode_into(self, out: bytearray) -> None:
        msb, lsb = to_u14(self.value)
        out.extend(
            [
                min(max(self.control1, 0), 119),
                msb,
                min(max(self.control2, 0), 119),
                lsb,
            ]
        )


# Parameters


class RegisteredParameter(IntEnum):
    """Registered parameter numbers, valued (msb << 7) | lsb."""

    PITCH_BEND_SENSITIVITY = 0x0000
    FINE_TUNING = 0x0001
    COARSE_TUNING = 0x0002
    TUNING_PROGRAM_SELECT = 0x0003
    TUNING_BANK_SELECT = 0x0004
    MODULATION_DEPTH_RANGE = 0x0005
    POLYPHONIC_EXPRESSION = 0x0006

    # RP-049 three dimensional sound controllers, MSB 61
    AZIMUTH_ANGLE_3D = (61 << 7) | 0
    ELEVATION_ANGLE_3D = (61 << 7) | 1
    GAIN_3D = (61 << 7) | 2
    DISTANCE_RATIO_3D = (61 << 7) | 3
    MAXIMUM_DISTANCE_3D = (61 << 7) | 4
    GAIN_AT_MAXIMUM_DISTANCE_3D = (61 << 7) | 5
    REFERENCE_DISTANCE_RATIO_3D = (61 << 7) | 6
    PAN_SPREAD_ANGLE_3D = (61 << 7) | 7
    ROLL_ANGLE_3D = (61 << 7) | 8

    NULL = 0x3FFF

    @property
    def msb(self) -> int:
        return (self.value >> 7) & 0x7F

    @property
    def lsb(self) -> int:
        return self.value & 0x7F


@dataclass
class Unregistered:
    """A non-registered parameter number, 0-16383."""

    number: int = 0


class EntryFormat(Enum):
    """How the data entry of a parameter is laid out."""

    NONE = "none"
    SEMITONES_CENTS = "semitones_cents"  # (semitones, cents): 6 semi 38 cents
    SIGNED_14 = "signed_14"  # -8192..8191: 6 msb 38 lsb
    SIGNED_7 = "signed_7"  # -64..63: 6 x+64 38 0
    UNSIGNED_7 = "unsigned_7"  # 0..127: 6 x
    CHANNEL_COUNT = "channel_count"  # 0..16: 6 x
    UNSIGNED_14 = "unsigned_14"  # 0..16383: 6 msb 38 lsb


_ENTRY_FORMATS: Dict[RegisteredParameter, EntryFormat] = {
    RegisteredParameter.NULL: EntryFormat.NONE,
    RegisteredParameter.PITCH_BEND_SENSITIVITY: EntryFormat.SEMITONES_CENTS,
    RegisteredParameter.FINE_TUNING: EntryFormat.SIGNED_14,
    RegisteredParameter.COARSE_TUNING: EntryFormat.SIGNED_7,
    RegisteredParameter.TUNING_PROGRAM_SELECT: EntryFormat.UNSIGNED_7,
    RegisteredParameter.TUNING_BANK_SELECT: EntryFormat.UNSIGNED_7,
    RegisteredParameter.POLYPHONIC_EXPRESSION: EntryFormat.CHANNEL_COUNT,
}

ParameterId = Union[RegisteredParameter, Unregistered]
Entry = Union[int, Tuple[int, int]]


@dataclass
class Parameter(Controller):
    """
    Select a registered or non-registered parameter, optionally followed by
    a data entry.

    The type of `entry` depends on the parameter:

        PITCH_BEND_SENSITIVITY    (semitones, cents), cents clamped to 100
        FINE_TUNING               -8192..8191, in 1/8192 of 100 cents
        COARSE_TUNING             -64..63 semitones
        TUNING_PROGRAM_SELECT     0..127
        TUNING_BANK_SELECT        0..127
        POLYPHONIC_EXPRESSION     0..16 channels
        everything else           0..16383

    Example:
        Parameter(RegisteredParameter.PITCH_BEND_SENSITIVITY, (2, 0))
        -> 64 00 65 00 06 02 26 00
    """

    parameter: ParameterId = RegisteredParameter.NULL
    entry: Optional[Entry] = None

    @property
    def entry_format(self) -> EntryFormat:
        if isinstance(self.parameter, Unregistered):
            return EntryFormat.UNSIGNED_14
        return _ENTRY_FORMATS.get(RegisteredParameter(self.parameter), EntryFormat.UNSIGNED_14)

    def encode_into(self, out: bytearray) -> None:
        if isinstance(self.parameter, Unregistered):
            msb, lsb = to_u14(self.parameter.number)
            out.extend([NRPN_LSB, lsb, NRPN_MSB, msb])
        else:
            parameter = RegisteredParameter(self.parameter)
            out.extend([RPN_LSB, parameter.lsb, RPN_MSB, parameter.msb])

        if self.entry is None:
            return

        fmt = self.entry_format
        if fmt == EntryFormat.SEMITONES_CENTS:
            semitones, cents = self.entry
            out.extend([DATA_ENTRY, to_u7(semitones), DATA_ENTRY_LSB, min(to_u7(cents), 100)])
        elif fmt == EntryFormat.SIGNED_14:
            msb, lsb = i_to_u14(self.entry)
            out.extend([DATA_ENTRY, msb, DATA_ENTRY_LSB, lsb])
        elif fmt == EntryFormat.SIGNED_7:
            out.extend([DATA_ENTRY, i_to_u7(self.entry), DATA_ENTRY_LSB, 0])
        elif fmt == EntryFormat.UNSIGNED_7:
            out.extend([DATA_ENTRY, to_u7(self.entry)])
        elif fmt == EntryFormat.CHANNEL_COUNT:
            out.extend([DATA_ENTRY, min(to_u7(self.entry), 16)])
        elif fmt == EntryFormat.UNSIGNED_14:
            msb, lsb = to_u14(self.entry)
            out.extend([DATA_ENTRY, msb, DATA_ENTRY_LSB, lsb])

    def with_entry_msb(self, msb: int) -> Optional["Parameter"]:
        """Return this parameter updated by a CC 6 data entry, or None if it takes no entry."""
        fmt = self.entry_format
        old = self.entry
        if fmt == EntryFormat.NONE:
            return None
        if fmt == EntryFormat.SEMITONES_CENTS:
            entry = (msb, old[1] if old is not None else 0)
        elif fmt == EntryFormat.SIGNED_14:
            old_lsb = i_to_u14(old)[1] if old is not None else 0
            entry = i14_from_u7s(msb, old_lsb)
        elif fmt == EntryFormat.SIGNED_7:
            entry = u7_to_i(msb)
        elif fmt == EntryFormat.UNSIGNED_14:
            old_lsb = old & 0x7F if old is not None else 0
            entry = u14_from_u7s(msb, old_lsb)
        else:
            entry = msb
        return Parameter(self.parameter, entry)

    def with_entry_lsb(self, lsb: int) -> Optional["Parameter"]:
        """Return this parameter updated by a CC 38 data entry, or None if it takes no entry."""
        fmt = self.entry_format
        old = self.entry
        if fmt == EntryFormat.NONE:
            return None
        if fmt == EntryFormat.SEMITONES_CENTS:
            entry = (old[0] if old is not None else 0, lsb)
        elif fmt == EntryFormat.SIGNED_14:
            old_msb = i_to_u14(old)[0] if old is not None else 0
            entry = i14_from_u7s(old_msb, lsb)
        elif fmt == EntryFormat.UNSIGNED_14:
            entry = replace_u14_lsb(old if old is not None else 0, lsb)
        else:
            # The LSB carries nothing for these formats
            entry = old if old is not None else 0
        return Parameter(self.parameter, entry)


# Decoding tables

HIGH_RES_CONTROLLERS: Dict[int, Type[HighResController]] = {
    cls.CONTROL: cls
    for cls in (
        BankSelect,
        ModWheel,
        Breath,
        Foot,
        Portamento,
        DataEntry,
        Volume,
        Balance,
        Pan,
        Expression,
        Effect1,
        Effect2,
        GeneralPurpose1,
        GeneralPurpose2,
        GeneralPurpose3,
        GeneralPurpose4,
    )
}

SINGLE_BYTE_CONTROLLERS: Dict[int, Type[Controller]] = {
    cls.CONTROL: cls
    for cls in (
        Hold,
        TogglePortamento,
        Sostenuto,
        SoftPedal,
        ToggleLegato,
        Hold2,
        SoundControl1,
        SoundControl2,
        SoundControl3,
        SoundControl4,
        SoundControl5,
        SoundControl6,
        SoundControl7,
        SoundControl8,
        SoundControl9,
        SoundControl10,
        GeneralPurpose5,
        GeneralPurpose6,
        GeneralPurpose7,
        GeneralPurpose8,
        PortamentoControl,
        HighResVelocity,
        Effects1Depth,
        Effects2Depth,
        Effects3Depth,
        Effects4Depth,
        Effects5Depth,
        DataIncrement,
        DataDecrement,
    )
}

UNDEFINED_HIGH_RES_CONTROLS = frozenset([3, 9, 14, 15] + list(range(20, 32)))

# Each parameter selector half and the half that completes it
SELECTOR_PARTNERS = {
    NRPN_LSB: NRPN_MSB,
    NRPN_MSB: NRPN_LSB,
    RPN_LSB: RPN_MSB,
    RPN_MSB: RPN_LSB,
}


def controller_from_cc(control: int, value: int) -> Controller:
    """
    Interpret a single raw CC (0-119) on its own.

    14-bit controllers come back with the value in their upper 7 bits.
    """
    if control in HIGH_RES_CONTROLLERS:
        return HIGH_RES_CONTROLLERS[control](value << 7)
    if control in UNDEFINED_HIGH_RES_CONTROLS:
        return UndefinedHighRes(control, control + LSB_OFFSET, value << 7)
    if control in SINGLE_BYTE_CONTROLLERS:
        cls = SINGLE_BYTE_CONTROLLERS[control]
        if issubclass(cls, SwitchController):
            return cls(value >= 0x40)
        return cls(value)
    return Undefined(control, value)


def _select_parameter(
    control1: int, value1: int, control2: int, value2: int
) -> Optional[Parameter]:
    values = {control1: value1, control2: value2}
    if set(values) == {NRPN_LSB, NRPN_MSB}:
        return Parameter(Unregistered(u14_from_u7s(values[NRPN_MSB], values[NRPN_LSB])))
    code = u14_from_u7s(values[RPN_MSB], values[RPN_LSB])
    try:
        return Parameter(RegisteredParameter(code))
    except ValueError:
        return None


def merge_controller(controller: Controller, control: int, value: int) -> Optional[Controller]:
    """
    Fold a raw CC into a partially received controller.

    Returns:
        The combined controller, or None if `control` does not complete it
    """
    if isinstance(controller, HighResController) and control == controller.CONTROL + LSB_OFFSET:
        return type(controller)(replace_u14_lsb(controller.value, value))
    if isinstance(controller, UndefinedHighRes) and control == controller.control2:
        return UndefinedHighRes(
            controller.control1, controller.control2, replace_u14_lsb(controller.value, value)
        )
    if isinstance(controller, Undefined) and SELECTOR_PARTNERS.get(controller.control) == control:
        return _select_parameter(controller.control, controller.value, control, value)
    if isinstance(controller, Parameter):
        if control == DATA_ENTRY:
            return controller.with_entry_msb(value)
        if control == DATA_ENTRY_LSB:
            return controller.with_entry_lsb(value)
    return None


def expected_partners(controller: Controller, last_control: int) -> FrozenSet[int]:
    """
    Control numbers that may still complete `controller`.

    Args:
        controller: The controller as assembled so far
        last_control: The raw control number that produced it
    """
    if isinstance(controller, HighResController) and last_control == controller.CONTROL:
        return frozenset([controller.CONTROL + LSB_OFFSET])
    if isinstance(controller, UndefinedHighRes) and last_control == controller.control1:
        return frozenset([controller.control2])
    if isinstance(controller, Undefined) and last_control in SELECTOR_PARTNERS:
        return frozenset([SELECTOR_PARTNERS[last_control]])
    if isinstance(controller, Parameter):
        fmt = controller.entry_format
        if fmt == EntryFormat.NONE:
            return NO_PARTNERS
        if last_control in SELECTOR_PARTNERS:
            return frozenset([DATA_ENTRY, DATA_ENTRY_LSB])
        if last_control == DATA_ENTRY and fmt not in (EntryFormat.UNSIGNED_7, EntryFormat.CHANNEL_COUNT):
            return frozenset([DATA_ENTRY_LSB])
    return NO_PARTNERS
