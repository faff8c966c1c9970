"""Core data models and the rfkill event record codec.

Records read from the character device are laid out as::

    u32 idx | u8 type | u8 op | u8 soft | u8 hard [| u8 hard_block_reasons]

with ``idx`` in native byte order. Kernels older than 5.11 emit 8-byte
records without the trailing reasons byte.
"""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from rfkillctl.core.errors import (
    InvalidDiscriminantError,
    InvalidHardBlockReasonsError,
    InvalidKindNameError,
    RecordLengthError,
)

CHAR_DEVICE = "/dev/rfkill"

_HEADER = struct.Struct("=IBBBB")
EVENT_SIZE_V1 = _HEADER.size
EVENT_SIZE = EVENT_SIZE_V1 + 1

_HEX_RE = re.compile(r"^[0-9a-f]+$", re.IGNORECASE)


class Kind(IntEnum):
    ALL = 0
    WLAN = 1
    BLUETOOTH = 2
    UWB = 3
    WIMAX = 4
    WWAN = 5
    GPS = 6
    FM = 7
    NFC = 8

    @classmethod
    def from_u8(cls, value: int) -> Kind:
        try:
            return cls(value)
        except ValueError:
            raise InvalidDiscriminantError("kind", value) from None

    @classmethod
    def from_label(cls, label: str) -> Kind:
        kind = _KINDS_BY_LABEL.get(label)
        if kind is None:
            raise InvalidKindNameError(label)
        return kind

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    def __str__(self) -> str:
        return self.label

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_KIND_LABELS = {
    Kind.ALL: "all",
    Kind.WLAN: "wifi",
    Kind.BLUETOOTH: "bluetooth",
    Kind.UWB: "uwb",
    Kind.WIMAX: "wimax",
    Kind.WWAN: "wwan",
    Kind.GPS: "gps",
    Kind.FM: "fm",
    Kind.NFC: "nfc",
}
_KINDS_BY_LABEL = {label: kind for kind, label in _KIND_LABELS.items()}


class Operation(IntEnum):
    """Event operation.

    ``CHANGE`` targets the device at the event index, ``CHANGE_ALL`` is the
    broadcast form. Both count as a change.
    """

    ADD = 0
    DELETE = 1
    CHANGE = 2
    CHANGE_ALL = 3

    @classmethod
    def from_u8(cls, value: int) -> Operation:
        try:
            return cls(value)
        except ValueError:
            raise InvalidDiscriminantError("operation", value) from None

    @property
    def is_change(self) -> bool:
        return self in (Operation.CHANGE, Operation.CHANGE_ALL)

    @property
    def all(self) -> bool:
        return self is Operation.CHANGE_ALL

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


class HardBlockReasons(IntFlag):
    SIGNAL = 1 << 0
    NOT_OWNER = 1 << 1

    @classmethod
    def from_bits_truncate(cls, bits: int) -> HardBlockReasons:
        return cls(bits & int(cls.SIGNAL | cls.NOT_OWNER))

    @classmethod
    def parse(cls, text: str) -> HardBlockReasons:
        """Parse sysfs ``hard_block_reasons`` text such as ``0x1``."""
        digits = text.strip()
        if digits.startswith(("0x", "0X")):
            digits = digits[2:]
        if not _HEX_RE.match(digits):
            raise InvalidHardBlockReasonsError(text)
        bits = int(digits, 16)
        if bits > 0xFF:
            raise InvalidHardBlockReasonsError(text)
        return cls.from_bits_truncate(bits)

    def any_of(self, other: HardBlockReasons) -> bool:
        return bool(self & other)

    def labels(self) -> tuple[str, ...]:
        return tuple(flag.name.lower() for flag in HardBlockReasons if flag in self)


@dataclass(frozen=True)
class Block:
    """Block flags of one event.

    ``hard_block_reasons`` is None when the device is not hard-blocked. A
    hard block with no known reason, as reported by kernels that send 8-byte
    records, is an empty ``HardBlockReasons(0)`` rather than None.
    """

    soft: bool
    hard_block_reasons: HardBlockReasons | None = None

    @property
    def hard(self) -> bool:
        return self.hard_block_reasons is not None


@dataclass(frozen=True)
class Event:
    index: int
    kind: Kind
    operation: Operation
    block: Block

    @classmethod
    def decode(cls, data: bytes | bytearray | memoryview) -> Event:
        return decode_event(data)

    def encode(self) -> bytes:
        header = _HEADER.pack(
            self.index,
            int(self.kind),
            int(self.operation),
            int(self.block.soft),
            int(self.block.hard),
        )
        if self.block.hard_block_reasons is None:
            return header
        return header + bytes([int(self.block.hard_block_reasons)])


def decode_event(data: bytes | bytearray | memoryview) -> Event:
    """Decode one 8- or 9-byte rfkill event record.

    The length is validated before any field is interpreted. The reasons
    byte is only consulted when the hard flag is set. An 8-byte record with
    the hard flag set decodes to ``HardBlockReasons(0)``, not None, so the
    event stays hard-blocked; check ``block.hard`` rather than the truthiness
    of the reasons.
    """
    buf = bytes(data)
    if len(buf) not in (EVENT_SIZE_V1, EVENT_SIZE):
        raise RecordLengthError(len(buf))

    index, kind_byte, op_byte, soft_byte, hard_byte = _HEADER.unpack_from(buf)
    kind = Kind.from_u8(kind_byte)
    operation = Operation.from_u8(op_byte)

    reasons: HardBlockReasons | None = None
    if hard_byte:
        if len(buf) == EVENT_SIZE:
            reasons = HardBlockReasons.from_bits_truncate(buf[EVENT_SIZE_V1])
        else:
            reasons = HardBlockReasons(0)

    return Event(
        index=index,
        kind=kind,
        operation=operation,
        block=Block(soft=soft_byte != 0, hard_block_reasons=reasons),
    )
