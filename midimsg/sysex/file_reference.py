"""
File Reference messages (Universal Non-Real Time sub-ID 0B, CA-018).

Point a device at a sound file on a shared file system so it can play the
file's sounds without a transfer.

    0B 01 cc cc ll ll tttt url 00            Open
    0B 02 cc cc ll ll map                    Select Contents
    0B 03 cc cc ll ll tttt url 00 map        Open and Select Contents
    0B 04 cc cc 00 00                        Close

`cc cc` is a 14-bit context number that tells apart concurrent operations on
the same device, `ll ll` the 14-bit length of the rest of the message.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union

from midimsg.errors import Invalid, UnexpectedEnd
from midimsg.utils.packing import (
    ByteSource,
    ascii_bytes,
    decode_u7,
    i_to_u14,
    i14_from_u7s,
    push_u14,
    push_u7,
    u14_from_midi,
    u7_from_midi,
)

FILE_REFERENCE = 0x0B
OPEN = 0x01
SELECT_CONTENTS = 0x02
OPEN_SELECT_CONTENTS = 0x03
CLOSE = 0x04

MAX_URL_LENGTH = 260
MAX_SOUND_FILE_MAPS = 127

# Bank offset extension (CA-028)
EXTENSION_HEADER = (0x00, 0x00, 0x01, 0x03)

SRC_DRUM = 0x01
DST_DRUM = 0x02


class FileReferenceType(Enum):
    DLS = b"DLS "
    SF2 = b"SF2 "
    WAV = b"WAV "


def _push_flags(src_drum: bool, dst_drum: bool, out: bytearray) -> None:
    out.append((SRC_DRUM if src_drum else 0) | (DST_DRUM if dst_drum else 0))


@dataclass
class SoundFileMap:
    """
    Map one DLS or SF2 instrument onto a MIDI bank and program.

    Attributes:
        dst_bank: Bank that selects the sound for playing, 0-16383
        dst_prog: Program that selects the sound for playing
        src_bank: Bank in the file's instrument header
        src_prog: Program in the file's instrument header
        src_drum: The instrument is a drum instrument
        dst_drum: Load it as a drum instrument
        volume: Initial volume
    """

    dst_bank: int = 0
    dst_prog: int = 0
    src_bank: int = 0
    src_prog: int = 0
    src_drum: bool = False
    dst_drum: bool = False
    volume: int = 0x7F

    LENGTH = 8

    def encode_into(self, out: bytearray) -> None:
        push_u14(self.dst_bank, out)
        push_u7(self.dst_prog, out)
        push_u14(self.src_bank, out)
        push_u7(self.src_prog, out)
        _push_flags(self.src_drum, self.dst_drum, out)
        push_u7(self.volume, out)

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> "SoundFileMap":
        flags = u7_from_midi(data, index + 6)
        return cls(
            dst_bank=u14_from_midi(data, index),
            dst_prog=u7_from_midi(data, index + 2),
            src_bank=u14_from_midi(data, index + 3),
            src_prog=u7_from_midi(data, index + 5),
            src_drum=bool(flags & SRC_DRUM),
            dst_drum=bool(flags & DST_DRUM),
            volume=u7_from_midi(data, index + 7),
        )


@dataclass
class WAVMap:
    """
    Map a WAV file onto a key range.

    Attributes:
        dst_bank: Bank that selects the sound, 0-16383
        dst_prog: Program that selects the sound
        base: Note that plays the file at its original pitch
        lokey: Lowest note that plays
        hikey: Highest note that plays
        fine: Tuning offset in 1/8192 cent, -8192..8191
        volume: Initial volume
    """

    dst_bank: int = 0
    dst_prog: int = 0
    base: int = 60
    lokey: int = 0
    hikey: int = 0x7F
    fine: int = 0
    volume: int = 0x7F

    LENGTH = 9

    def encode_into(self, out: bytearray) -> None:
        push_u14(self.dst_bank, out)
        push_u7(self.dst_prog, out)
        push_u7(self.base, out)
        push_u7(self.lokey, out)
        push_u7(self.hikey, out)
        msb, lsb = i_to_u14(self.fine)
        out.extend([lsb, msb])
        push_u7(self.volume, out)

    @classmethod
    def parse(cls, data: ByteSource, index: int = 0) -> "WAVMap":
        return cls(
            dst_bank=u14_from_midi(data, index),
            dst_prog=u7_from_midi(data, index + 2),
            base=u7_from_midi(data, index + 3),
            lokey=u7_from_midi(data, index + 4),
            hikey=u7_from_midi(data, index + 5),
            fine=i14_from_u7s(u7_from_midi(data, index + 7), u7_from_midi(data, index + 6)),
            volume=u7_from_midi(data, index + 8),
        )


@dataclass
class SoundFileSelect:
    """DLS or SF2 maps. No maps means "use the mapping in the file"."""

    maps: List[SoundFileMap] = field(default_factory=list)

    def encode_into(self, out: bytearray) -> None:
        maps = self.maps[:MAX_SOUND_FILE_MAPS]
        out.append(len(maps))
        for sound_map in maps:
            sound_map.encode_into(out)

    def __len__(self) -> int:
        return 1 + SoundFileMap.LENGTH * len(self.maps[:MAX_SOUND_FILE_MAPS])


@dataclass
class WAVSelect:
    map: WAVMap = field(default_factory=WAVMap)

    def encode_into(self, out: bytearray) -> None:
        self.map.encode_into(out)

    def __len__(self) -> int:
        return WAVMap.LENGTH


def _push_bank_offset(bank_offset: int, src_drum: bool, out: bytearray) -> None:
    out.extend(EXTENSION_HEADER)
    push_u14(bank_offset, out)
    out.append(SRC_DRUM if src_drum else 0)


@dataclass
class SoundFileBankOffset:
    """Use the file's own mapping, shifting its banks by `bank_offset` (CA-028)."""

    bank_offset: int = 0
    src_drum: bool = False

    def encode_into(self, out: bytearray) -> None:
        _push_bank_offset(self.bank_offset, self.src_drum, out)

    def __len__(self) -> int:
        return 7


@dataclass
class WAVBankOffset:
    map: WAVMap = field(default_factory=WAVMap)
    bank_offset: int = 0
    src_drum: bool = False

    def encode_into(self, out: bytearray) -> None:
        self.map.encode_into(out)
        _push_bank_offset(self.bank_offset, self.src_drum, out)

    def __len__(self) -> int:
        return WAVMap.LENGTH + 7


SelectMap = Union[SoundFileSelect, WAVSelect, SoundFileBankOffset, WAVBankOffset]


def _read_bank_offset(data: ByteSource, index: int) -> Tuple[int, bool]:
    if len(data) < index + 7:
        raise UnexpectedEnd()
    if tuple(decode_u7(b) for b in data[index : index + 4]) != EXTENSION_HEADER:
        raise Invalid("Unknown file reference map extension")
    return u14_from_midi(data, index + 4), bool(u7_from_midi(data, index + 6) & SRC_DRUM)


def parse_select_map(data: ByteSource, is_wav: bool) -> SelectMap:
    """
    Read a select map that fills the whole of `data`.

    Whether it is a WAV map is known from the file type of an Open and
    Select message. A lone Select Contents message does not say, so the
    caller guesses from the length (see FileReferenceSelectContents).
    """
    length = len(data)
    if is_wav:
        if length == WAVMap.LENGTH + 7:
            offset, drum = _read_bank_offset(data, WAVMap.LENGTH)
            return WAVBankOffset(WAVMap.parse(data, 0), offset, drum)
        if length != WAVMap.LENGTH:
            raise Invalid(f"Bad WAV map length: {length}")
        return WAVSelect(WAVMap.parse(data, 0))
    count = u7_from_midi(data, 0)
    if count == 0 and length == 7:
        offset, drum = _read_bank_offset(data, 0)
        return SoundFileBankOffset(offset, drum)
    if length != 1 + count * SoundFileMap.LENGTH:
        raise Invalid(f"Bad sound file map length: {length}")
    return SoundFileSelect([SoundFileMap.parse(data, 1 + i * SoundFileMap.LENGTH) for i in range(count)])


def _push_url(file_type: FileReferenceType, url: str, out: bytearray) -> None:
    out.extend(file_type.value)
    out.extend(ascii_bytes(url, MAX_URL_LENGTH))
    out.append(0)


def _url_length(url: str) -> int:
    return 4 + len(ascii_bytes(url, MAX_URL_LENGTH)) + 1


def _read_url(data: ByteSource, index: int) -> Tuple[FileReferenceType, str, int]:
    """Return (file type, url, index after the terminating zero)."""
    if len(data) < index + 4:
        raise UnexpectedEnd()
    raw_type = bytes(decode_u7(b) for b in data[index : index + 4])
    try:
        file_type = FileReferenceType(raw_type)
    except ValueError:
        raise Invalid(f"Unknown file reference type: {raw_type!r}") from None
    index += 4
    end = index
    while True:
        if end >= len(data):
            raise UnexpectedEnd()
        if decode_u7(data[end]) == 0:
            break
        end += 1
    url = bytes(data[index:end]).decode("ascii")
    return file_type, url, end + 1


def _read_header(data: ByteSource) -> Tuple[int, ByteSource]:
    """Return (context number, the bytes covered by the length field)."""
    context_id = u14_from_midi(data, 0)
    length = u14_from_midi(data, 2)
    if len(data) < 4 + length:
        raise UnexpectedEnd()
    return context_id, data[4 : 4 + length]


@dataclass
class FileReferenceOpen:
    """
    Locate a file. A Select Contents message must follow before anything
    plays.
    """

    context_id: int = 0
    file_type: FileReferenceType = FileReferenceType.DLS
    url: str = ""

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_REFERENCE, OPEN])
        push_u14(self.context_id, out)
        push_u14(_url_length(self.url), out)
        _push_url(self.file_type, self.url, out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileReferenceOpen":
        context_id, body = _read_header(data)
        file_type, url, _ = _read_url(body, 0)
        return cls(context_id, file_type, url)


def _select_map_is_wav(body: ByteSource) -> bool:
    count = decode_u7(body[0]) if len(body) else 0
    if count == 0 and len(body) == 7:
        return False
    return len(body) != 1 + count * SoundFileMap.LENGTH


@dataclass
class FileReferenceSelectContents:
    """
    Prepare an opened file's sounds using `map`.

    On decode, a map whose length fits a list of sound file maps is read as
    one, otherwise as a WAV map.
    """

    context_id: int = 0
    map: SelectMap = field(default_factory=SoundFileSelect)

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_REFERENCE, SELECT_CONTENTS])
        push_u14(self.context_id, out)
        push_u14(len(self.map), out)
        self.map.encode_into(out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileReferenceSelectContents":
        context_id, body = _read_header(data)
        return cls(context_id, parse_select_map(body, _select_map_is_wav(body)))


@dataclass
class FileReferenceOpenSelectContents:
    context_id: int = 0
    file_type: FileReferenceType = FileReferenceType.DLS
    url: str = ""
    map: SelectMap = field(default_factory=SoundFileSelect)

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_REFERENCE, OPEN_SELECT_CONTENTS])
        push_u14(self.context_id, out)
        push_u14(_url_length(self.url) + len(self.map), out)
        _push_url(self.file_type, self.url, out)
        self.map.encode_into(out)

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileReferenceOpenSelectContents":
        context_id, body = _read_header(data)
        file_type, url, index = _read_url(body, 0)
        select_map = parse_select_map(body[index:], file_type == FileReferenceType.WAV)
        return cls(context_id, file_type, url, select_map)


@dataclass
class FileReferenceClose:
    context_id: int = 0

    def encode_into(self, out: bytearray) -> None:
        out.extend([FILE_REFERENCE, CLOSE])
        push_u14(self.context_id, out)
        out.extend([0, 0])

    @classmethod
    def parse(cls, data: ByteSource, ctx=None) -> "FileReferenceClose":
        return cls(u14_from_midi(data, 0))
