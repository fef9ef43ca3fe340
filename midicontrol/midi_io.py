"""MIDI output over a mido port, a silent output, and dispatch of incoming messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import mido

ControlChangeCallback = Callable[[int, int, int], None]
NoteCallback = Callable[[int, int, int], None]

_MAX_ACTIVE_NOTES = 16
_PITCH_BEND_CENTER = 8192


class _Sender(Protocol):
    def send(self, message: mido.Message) -> None: ...


class _Poller(Protocol):
    def poll(self) -> Optional[mido.Message]: ...


class MidiOutputPort(ABC):
    """Destination for outgoing MIDI messages. Channels are numbered 0-15."""

    @abstractmethod
    def send_control_change(self, channel: int, cc: int, value: int) -> None:
        """Send a Control Change message."""

    @abstractmethod
    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        """Send a Note On message."""

    @abstractmethod
    def send_note_off(self, channel: int, note: int, velocity: int) -> None:
        """Send a Note Off message."""

    @abstractmethod
    def send_program_change(self, channel: int, program: int) -> None:
        """Send a Program Change message."""

    @abstractmethod
    def send_pitch_bend(self, channel: int, value: int) -> None:
        """Send a Pitch Bend message; `value` is 0-16383 with 8192 at centre."""

    @abstractmethod
    def send_channel_pressure(self, channel: int, pressure: int) -> None:
        """Send a Channel Pressure (aftertouch) message."""

    @abstractmethod
    def send_sys_ex(self, data: bytes) -> None:
        """Send a System Exclusive message; `data` excludes the F0/F7 framing."""


@dataclass
class _NoteSlot:
    channel: int = 0
    note: int = 0
    active: bool = False


class UsbMidiOut(MidiOutputPort):
    """Sends messages through a mido output port and tracks sounding notes."""

    def __init__(self, port: _Sender, midi_in: Optional["MidiInHandler"] = None) -> None:
        self._port = port
        self._midi_in = midi_in
        self._slots = [_NoteSlot() for _ in range(_MAX_ACTIVE_NOTES)]

    def send_control_change(self, channel: int, cc: int, value: int) -> None:
        self._port.send(
            mido.Message("control_change", channel=channel, control=cc, value=value)
        )

    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        self._mark_active(channel, note)
        self._port.send(
            mido.Message("note_on", channel=channel, note=note, velocity=velocity)
        )

    def send_note_off(self, channel: int, note: int, velocity: int) -> None:
        self._mark_inactive(channel, note)
        self._port.send(
            mido.Message("note_off", channel=channel, note=note, velocity=velocity)
        )

    def send_program_change(self, channel: int, program: int) -> None:
        self._port.send(mido.Message("program_change", channel=channel, program=program))

    def send_pitch_bend(self, channel: int, value: int) -> None:
        self._port.send(
            mido.Message("pitchwheel", channel=channel, pitch=value - _PITCH_BEND_CENTER)
        )

    def send_channel_pressure(self, channel: int, pressure: int) -> None:
        self._port.send(mido.Message("aftertouch", channel=channel, value=pressure))

    def send_sys_ex(self, data: bytes) -> None:
        self._port.send(mido.Message("sysex", data=bytes(data)))

    def flush(self) -> None:
        """Process pending incoming messages, if an input handler is attached."""
        if self._midi_in is not None:
            self._midi_in.update()

    @property
    def active_notes(self) -> list[tuple[int, int]]:
        """(channel, note) pairs currently marked as sounding, in slot order."""
        return [(slot.channel, slot.note) for slot in self._slots if slot.active]

    def _mark_active(self, channel: int, note: int) -> None:
        for slot in self._slots:
            if not slot.active:
                slot.channel, slot.note, slot.active = channel, note, True
                return
            if slot.channel == channel and slot.note == note:
                return
        first = self._slots[0]
        first.channel, first.note, first.active = channel, note, True

    def _mark_inactive(self, channel: int, note: int) -> None:
        for slot in self._slots:
            if slot.active and slot.channel == channel and slot.note == note:
                slot.active = False
                return


class NullMidiOut(MidiOutputPort):
    """Output that discards every message, for hosts without a MIDI port."""

    def send_control_change(self, channel: int, cc: int, value: int) -> None:
        return None

    def send_note_on(self, channel: int, note: int, velocity: int) -> None:
        return None

    def send_note_off(self, channel: int, note: int, velocity: int) -> None:
        return None

    def send_program_change(self, channel: int, program: int) -> None:
        return None

    def send_pitch_bend(self, channel: int, value: int) -> None:
        return None

    def send_channel_pressure(self, channel: int, pressure: int) -> None:
        return None

    def send_sys_ex(self, data: bytes) -> None:
        return None


class MidiInHandler:
    """Reads messages from a mido input and dispatches them to registered callbacks."""

    def __init__(self, source: Optional[_Poller] = None) -> None:
        self._source = source
        self._cc_callbacks: list[ControlChangeCallback] = []
        self._note_on_callbacks: list[NoteCallback] = []
        self._note_off_callbacks: list[NoteCallback] = []

    def on_control_change(self, callback: ControlChangeCallback) -> ControlChangeCallback:
        """Register `callback(channel, cc, value)`; returns it for decorator use."""
        self._cc_callbacks.append(callback)
        return callback

    def on_note_on(self, callback: NoteCallback) -> NoteCallback:
        """Register `callback(channel, note, velocity)` for Note On."""
        self._note_on_callbacks.append(callback)
        return callback

    def on_note_off(self, callback: NoteCallback) -> NoteCallback:
        """Register `callback(channel, note, velocity)` for Note Off."""
        self._note_off_callbacks.append(callback)
        return callback

    def update(self) -> None:
        """Handle at most one pending incoming message."""
        if self._source is None:
            return
        message = self._source.poll()
        if message is None:
            return
        if message.type == "control_change":
            self._dispatch(self._cc_callbacks, message.channel, message.control, message.value)
        elif message.type == "note_on":
            if message.velocity == 0:
                self._dispatch(self._note_off_callbacks, message.channel, message.note, 0)
            else:
                self._dispatch(
                    self._note_on_callbacks, message.channel, message.note, message.velocity
                )
        elif message.type == "note_off":
            self._dispatch(
                self._note_off_callbacks, message.channel, message.note, message.velocity
            )

    @staticmethod
    def _dispatch(callbacks: list[Callable[[int, int, int], None]], *args: int) -> None:
        for callback in callbacks:
            callback(*args)