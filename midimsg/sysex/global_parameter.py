"""
Global Parameter Control (Universal Real Time 04 05, CA-024).

    04 05 sl pw vw [slot path: msb lsb]... [param: id*pw value*vw]...

Parameter IDs are written MSB first, values LSB first. `id` and `value` on
GlobalParameter are both kept MSB first.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from midimsg.errors import Invalid
from midimsg.utils.packing import ByteSource, decode_u7, push_u7, to_u7, u7_from_midi

DEVICE_CONTROL = 0x04
GLOBAL_PARAMETER_CONTROL = 0x05

MAX_SLOT_PATHS = 127


class ReverbType(IntEnum):
    SMALL_ROOM = 0
    MEDIUM_ROOM = 1
    LARGE_ROOM = 2
    MEDIUM_HALL = 3
    LARGE_HALL = 4
    PLATE = 8


class ChorusType(IntEnum):
    CHORUS1 = 0
    CHORUS2 = 1
    CHORUS3 = 2
    CHORUS4 = 3
    FB_CHORUS = 4
    FLANGER = 5


@dataclass(frozen=True)
class SlotPath:
    msb: int
    lsb: int

    def encode_into(self, out: bytearray) -> None:
        push_u7(self.msb, out)
        push_u7(self.lsb, out)


REVERB = SlotPath(0x01, 0x01)
CHORUS = SlotPath(0x01, 0x02)


@dataclass
class GlobalParameter:
    id: List[int] = field(default_factory=list)
    value: List[int] = field(default_factory=list)

    def encode_into(self, out: bytearray, id_width: int, value_width: int) -> None:
        for i in range(id_width):
            out.append(to_u7(self.id[i]) if i < len(self.id) else 0)
        for i in reversed(range(value_width)):
            out.append(to_u7(self.value[i]) if i < len(self.value) else 0)


@dataclass
class GlobalParameterControl:
    """
    Set parameters of a global sound unit such as the GM2 reverb or chorus.

    Attributes:
        slot_paths: Path to the addressed slot, at most 127 steps
        param_id_width: Bytes per parameter ID, at least 1
        value_width: Bytes per value, at least 1
        params: Parameters to set

    Example:
        GlobalParameterControl.reverb(ReverbType.LARGE_HALL, 2.5)
    """

    slot_paths: List[SlotPath] = field(default_factory=list)
    param_id_width: int = 1
    value_width: int = 1
    params: List[GlobalParameter] = field(default_factory=list)

    @classmethod
    def reverb(cls, reverb_type: Optional[ReverbType] = None, reverb_time: Optional[float] = None):
        """GM2 reverb. `reverb_time` is in seconds."""
        params = []
        if reverb_type is not None:
            params.append(GlobalParameter([0], [int(reverb_type)]))
        if reverb_time is not None:
            params.append(GlobalParameter([1], [to_u7(int(math.log(reverb_time) / 0.025 + 40.0))]))
        return cls([REVERB], 1, 1, params)

    @classmethod
    def chorus(
        cls,
        chorus_type: Optional[ChorusType] = None,
        mod_rate: Optional[float] = None,
        mod_depth: Optional[float] = None,
        feedback: Optional[float] = None,
        send_to_reverb: Optional[float] = None,
    ):
        """
        GM2 chorus.

        Args:
            chorus_type: Chorus algorithm
            mod_rate: Modulation rate in Hz
            mod_depth: Modulation depth in ms
            feedback: Feedback in percent
            send_to_reverb: Send level to reverb in percent
        """
        params = []
        if chorus_type is not None:
            params.append(GlobalParameter([0], [int(chorus_type)]))
        if mod_rate is not None:
            params.append(GlobalParameter([1], [to_u7(int(mod_rate / 0.122))]))
        if mod_depth is not None:
            params.append(GlobalParameter([2], [to_u7(int(mod_depth * 3.2 - 1.0))]))
        if feedback is not None:
            params.append(GlobalParameter([3], [to_u7(int(feedback / 0.763))]))
        if send_to_reverb is not None:
            params.append(GlobalParameter([4], [to_u7(int(send_to_reverb / 0.787))]))
        return cls([CHORUS], 1, 1, params)

    def encode_into(self, out: bytearray) -> None:
        slot_paths = self.slot_paths[:MAX_SLOT_PATHS]
        id_width = max(to_u7(self.param_id_width), 1)
        value_width = max(to_u7(self.value_width), 1)
        out.extend([DEVICE_CONTROL, GLOBAL_PARAMETER_CONTROL, len(slot_paths), id_width, value_width])
        for slot_path in slot_paths:
            slot_path.encode_into(out)
        for param in self.params:
            param.encode_into(out, id_width, value_width)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "GlobalParameterControl":
        count = u7_from_midi(data, 0)
        id_width = u7_from_midi(data, 1)
        value_width = u7_from_midi(data, 2)
        if id_width == 0 or value_width == 0:
            raise Invalid("Global parameter widths must be at least 1")
        index = 3
        slot_paths = []
        for _ in range(count):
            slot_paths.append(SlotPath(u7_from_midi(data, index), u7_from_midi(data, index + 1)))
            index += 2
        width = id_width + value_width
        if (len(data) - index) % width:
            raise Invalid("Global parameter data does not divide into whole parameters")
        params = []
        for start in range(index, len(data), width):
            raw = [decode_u7(b) for b in data[start : start + width]]
            params.append(GlobalParameter(raw[:id_width], list(reversed(raw[id_width:]))))
        return cls(slot_paths, id_width, value_width, params)
