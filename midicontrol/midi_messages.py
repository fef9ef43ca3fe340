"""Buffered MIDI message records and their hashing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

HASH_TABLE_SIZE = 128

_FNV_PRIME = 16777619
_FNV_OFFSET_BASIS = 2166136261
_MASK32 = 0xFFFFFFFF


class MessageType(IntEnum):
    """Kinds of MIDI message that can be buffered."""

    CC = 0
    NOTE_ON = 1
    NOTE_OFF = 2


@dataclass
class MidiMessage:
    """A buffered message; `control` is a CC or note number, `value` a value or velocity."""

    type: MessageType = MessageType.CC
    channel: int = 0
    control: int = 0
    value: int = 0
    sent: bool = True
    hash_next: Optional[int] = None

    def same_target(self, other: "MidiMessage") -> bool:
        """True if both messages address the same type, channel and control."""
        return (
            self.type == other.type
            and self.channel == other.channel
            and self.control == other.control
        )


def hash_message(message_type: MessageType, channel: int, control: int) -> int:
    """FNV-1a hash of a message target, reduced to a hash table index."""
    value = _FNV_OFFSET_BASIS
    for part in (int(message_type) & 0xFF, channel & 0xFF, control & 0xFF):
        value ^= part
        value = (value * _FNV_PRIME) & _MASK32
    return value & (HASH_TABLE_SIZE - 1)