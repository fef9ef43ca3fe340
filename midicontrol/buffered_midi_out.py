"""MIDI output that buffers and de-duplicates messages before sending them."""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable, Optional

from midicontrol.midi_io import MidiInHandler, MidiOutputPort
from midicontrol.midi_messages import HASH_TABLE_SIZE, MessageType, MidiMessage, hash_message

DEFAULT_BUFFER_SIZE = 64
_SEARCH_LIMIT = 4
_FLUSH_DELAY_S = 50e-6
_UPDATE_DELAY_S = 100e-6


class BufferedMidiOut(MidiOutputPort):
    """Wraps an output port, keeping only the latest value per (type, channel, control).

    Pending messages are sent by `flush` or, a few at a time, by `update`.
    """

    def __init__(
        self,
        output: MidiOutputPort,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        immediate_flush: bool = False,
        *,
        midi_in: Optional[MidiInHandler] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._output = output
        self._size = buffer_size if buffer_size > 0 else DEFAULT_BUFFER_SIZE
        self._midi_in = midi_in
        self._sleep = sleep
        self._immediate_flush = immediate_flush
        self.high_priority = False
        self._buffer: list[MidiMessage] = []
        self._table: list[Optional[int]] = []
        self._next_index = 0
        self._dirty = 0
        self.clear()
        self._poll()

    @property
    def capacity(self) -> int:
        """Number of message slots in the buffer."""
        return self._size

    @property
    def pending_count(self) -> int:
        """Number of messages waiting to be sent."""
        return self._dirty

    @property
    def immediate_flush(self) -> bool:
        """Whether messages are also sent straight away while being buffered."""
        return self._immediate_flush

    @immediate_flush.setter
    def immediate_flush(self, enable: bool) -> None:
        self._immediate_flush = bool(enable)
        if enable and self._dirty > 0:
            self.flush()
            self._poll()

    def send_control_change(self, channel: int, cc: int, value: int) -> None:
        if self._store(MessageType.CC, channel, cc, value) and self._immediate_flush:
            self._output.send_control_change(channel, cc, value)
            self._poll()

    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        if self._store(MessageType.NOTE_ON, channel, note, velocity) and self._immediate_flush:
            self._output.send_note_on(channel, note, velocity)
            self._poll()

    def send_note_off(self, channel: int, note: int, velocity: int) -> None:
        if self._store(MessageType.NOTE_OFF, channel, note, velocity) and self._immediate_flush:
            self._output.send_note_off(channel, note, velocity)
            self._poll()

    def send_program_change(self, channel: int, program: int) -> None:
        self._output.send_program_change(channel, program)
        self._poll()

    def send_pitch_bend(self, channel: int, value: int) -> None:
        self._output.send_pitch_bend(channel, value)
        self._poll()

    def send_channel_pressure(self, channel: int, pressure: int) -> None:
        self._output.send_channel_pressure(channel, pressure)
        self._poll()

    def send_sys_ex(self, data: bytes) -> None:
        self._output.send_sys_ex(data)
        self._poll()

    def flush(self) -> None:
        """Send every pending message."""
        if self._dirty == 0:
            return
        indices = self._collect(self._dirty)
        for position, index in enumerate(indices):
            self._transmit(self._buffer[index])
            self._buffer[index].sent = True
            if not self.high_priority and position < len(indices) - 1:
                self._sleep(_FLUSH_DELAY_S)
        self._poll()
        self._dirty = 0
        if self._next_index > self._size // 2:
            self._optimize()

    def clear(self) -> None:
        """Drop every buffered message."""
        self._table = [None] * HASH_TABLE_SIZE
        self._buffer = [MidiMessage() for _ in range(self._size)]
        self._next_index = 0
        self._dirty = 0

    def update(self, max_messages: int = 8) -> int:
        """Send up to `max_messages` pending messages (all if 0); return how many were sent."""
        if self._dirty == 0:
            return 0
        limit = min(max_messages, self._dirty) if max_messages > 0 else self._dirty
        indices = self._collect(limit)
        sent = 0
        for position, index in enumerate(indices):
            self._transmit(self._buffer[index])
            self._buffer[index].sent = True
            sent += 1
            self._dirty -= 1
            if not self.high_priority and position < len(indices) - 1:
                self._sleep(_UPDATE_DELAY_S)
        self._poll()
        if self._dirty == 0 and self._next_index > self._size // 2:
            self._optimize()
        return sent

    def _poll(self) -> None:
        if self._midi_in is not None:
            self._midi_in.update()

    def _store(self, kind: MessageType, channel: int, control: int, value: int) -> bool:
        """Record `value` for the target; return True if the slot was changed."""
        message = self._buffer[self._find_or_create(kind, channel, control)]
        if message.value == value and not message.sent:
            return False
        message.value = value
        if message.sent:
            message.sent = False
            self._dirty += 1
        return True

    def _collect(self, limit: int) -> list[int]:
        indices: list[int] = []
        for index, message in enumerate(self._buffer):
            if len(indices) >= limit:
                break
            if not message.sent:
                indices.append(index)
        return indices

    def _transmit(self, message: MidiMessage) -> None:
        if message.type is MessageType.CC:
            self._output.send_control_change(message.channel, message.control, message.value)
        elif message.type is MessageType.NOTE_ON:
            self._output.send_note_on(message.channel, message.control, message.value)
        else:
            self._output.send_note_off(message.channel, message.control, message.value)

    def _claim(self, index: int, kind: MessageType, channel: int, control: int, key: int) -> None:
        message = self._buffer[index]
        message.type = kind
        message.channel = channel
        message.control = control
        message.sent = False
        self._dirty += 1
        message.hash_next = self._table[key]
        self._table[key] = index

    def _find_or_create(self, kind: MessageType, channel: int, control: int) -> int:
        key = hash_message(kind, channel, control)

        index = self._table[key]
        previous: Optional[int] = None
        steps = 0
        while index is not None and steps < _SEARCH_LIMIT:
            message = self._buffer[index]
            if message.type == kind and message.channel == channel and message.control == control:
                if previous is not None:
                    self._buffer[previous].hash_next = message.hash_next
                    message.hash_next = self._table[key]
                    self._table[key] = index
                return index
            previous = index
            index = message.hash_next
            steps += 1

        start = self._next_index
        for offset in range(self._size):
            candidate = (start + offset) % self._size
            if self._buffer[candidate].sent:
                self._claim(candidate, kind, channel, control, key)
                self._next_index = (candidate + 1) % self._size
                return candidate

        current = self._next_index
        self._next_index = (self._next_index + 1) % self._size
        old = self._buffer[current]
        old_key = hash_message(old.type, old.channel, old.control)
        if self._table[old_key] == current:
            self._table[old_key] = old.hash_next
        else:
            previous = self._table[old_key]
            steps = 0
            while (
                previous is not None
                and self._buffer[previous].hash_next != current
                and steps < _SEARCH_LIMIT
            ):
                previous = self._buffer[previous].hash_next
                steps += 1
            if previous is not None and self._buffer[previous].hash_next == current:
                self._buffer[previous].hash_next = old.hash_next

        self._claim(current, kind, channel, control, key)
        return current

    def _optimize(self) -> None:
        """Compact pending messages to the front of the buffer and rebuild the hash table."""
        self._table = [None] * HASH_TABLE_SIZE
        dest = 0
        for src in range(self._size):
            if self._buffer[src].sent:
                continue
            if src != dest:
                self._buffer[dest] = replace(self._buffer[src])
                self._buffer[src].sent = True
            moved = self._buffer[dest]
            key = hash_message(moved.type, moved.channel, moved.control)
            moved.hash_next = self._table[key]
            self._table[key] = dest
            dest += 1
        for message in self._buffer[dest:]:
            message.sent = True
            message.hash_next = None
        self._next_index = dest