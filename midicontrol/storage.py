"""In-memory storage of MIDI bindings for input controls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class MidiControl:
    """MIDI target of a control: channel (0-15), controller or note number, and mode."""

    channel: int = 0
    control: int = 0
    is_relative: bool = False


class MappingType(Enum):
    """Which part of a physical control a mapping applies to."""

    ENCODER = "encoder"
    BUTTON = "button"


@dataclass(frozen=True)
class InputMapping:
    """Association between an input control and its MIDI target."""

    control_id: int
    midi_mapping: MidiControl
    mapping_type: MappingType = MappingType.ENCODER


class SettingsStore:
    """Stores one MIDI binding per input id."""

    def __init__(self) -> None:
        self._storage: dict[int, MidiControl] = {}

    def save_mapping(self, input_id: int, binding: MidiControl) -> None:
        """Store `binding` for `input_id`, replacing any previous one."""
        self._storage[input_id] = binding

    def load_mapping(self, input_id: int) -> Optional[MidiControl]:
        """Return the binding stored for `input_id`, or None."""
        return self._storage.get(input_id)


_DEFAULT_BINDINGS = {
    71: MidiControl(channel=0, control=1, is_relative=False),
    72: MidiControl(channel=0, control=2, is_relative=False),
}


class ProfileManager:
    """Profile of MIDI bindings kept in memory."""

    def __init__(self) -> None:
        self._bindings: dict[int, MidiControl] = {}

    def get_binding(self, input_id: int) -> Optional[MidiControl]:
        """Return the binding of `input_id`, or None if it has none."""
        return self._bindings.get(input_id)

    def set_binding(self, input_id: int, binding: MidiControl) -> None:
        """Bind `input_id` to `binding`."""
        self._bindings[input_id] = binding

    def remove_binding(self, input_id: int) -> bool:
        """Remove the binding of `input_id`; return whether one existed."""
        return self._bindings.pop(input_id, None) is not None

    def all_mappings(self) -> list[InputMapping]:
        """Return every binding as an InputMapping."""
        return [
            InputMapping(control_id=input_id, midi_mapping=binding)
            for input_id, binding in self._bindings.items()
        ]

    def save_profile(self) -> bool:
        """Persist the profile. Memory-only storage always succeeds."""
        return True

    def load_profile(self) -> bool:
        """Load the profile. Memory-only storage always succeeds."""
        return True

    def reset_to_defaults(self) -> None:
        """Drop every binding and install the default ones."""
        self._bindings.clear()
        for input_id, binding in _DEFAULT_BINDINGS.items():
            self.set_binding(input_id, binding)