# midicontrol

This package provides building blocks for a hardware-style MIDI controller:

- validated descriptions of buttons and rotary encoders,
- button and encoder state tracking,
- in-memory storage of MIDI bindings,
- MIDI output through a `mido` port,
- dispatch of incoming MIDI messages,
- a deduplicating MIDI output buffer.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

### `midicontrol.input_config`

This module describes the controls.

- `GpioPin`, `ButtonConfig` and `EncoderConfig` check themselves with `is_valid()`. `InputConfig` does the same.
- `EncoderConfig.effective_resolution` is the pulses per revolution divided by the steps per detent.
- `InputConfig` has the following members:
  - `get_config(kind)` returns the specific config when it matches the input type.
  - `primary_physical_id` is a property.
  - `has_button` is a property.
  - `find_button_config()` returns the button config, if there is one.
- These builder functions return a validated `InputConfig`. They raise `InvalidConfigError`, a subclass of `ValueError`, when the result is not valid:
  - `create_button`
  - `create_advanced_button`
  - `create_encoder`
  - `create_encoder_with_button`
  - `create_high_performance_encoder`
- `set_ui_metadata` sets the group, description, display order and enabled flag in place.

### `midicontrol.storage`

This module provides `MidiControl`, `MappingType` and `InputMapping`. It also has two in-memory stores:

- `SettingsStore` with `save_mapping` and `load_mapping`.
- `ProfileManager` with `get_binding`, `set_binding`, `remove_binding`, `all_mappings` and `reset_to_defaults`.

`reset_to_defaults` binds inputs 71 and 72 to CC 1 and CC 2 on channel 0. `save_profile` and `load_profile` always return `True`. Nothing is written to disk.

### `midicontrol.buttons`

`DigitalButton` reads a pin through a callable `read_pin(pin) -> bool`, where `True` means a high level. It debounces the reading and reports `pressed`:

- In momentary mode, `pressed` is the physical state.
- In toggle mode, `pressed` flips on each press.

`DigitalButtonManager` owns a set of buttons. It can update them all and reset their toggle state.

### `midicontrol.encoders`

`QuadratureEncoder` takes its raw count from a callable `read_count() -> int`. From each new count it produces:

- a delta normalised to a 24-pulse reference, clamped to -128..127,
- `absolute_position`,
- `physical_position`.

An encoder with an integrated switch reports `is_pressed()` through `read_pin`.

`EncoderManager` builds the encoders from a list of configs and a `counter_for(config)` factory.

### `midicontrol.midi_io`

- `MidiOutputPort` is the abstract output interface. Channels are numbered 0-15.
- `UsbMidiOut` sends `mido.Message` objects to any object with a `send()` method, such as a `mido` output port. `active_notes` lists the (channel, note) pairs that are currently sounding.
- `NullMidiOut` discards everything.
- `MidiInHandler` polls a source with `poll()` and passes its messages to registered callbacks:
  - Control Change messages go to the `on_control_change` callbacks.
  - Note On messages go to the `on_note_on` callbacks. A Note On with velocity 0 is passed on as a Note Off.
  - Note Off messages go to the `on_note_off` callbacks.

### `midicontrol.midi_messages`

This module provides the buffered message record `MidiMessage` and the `MessageType` enum. It also provides `hash_message`, an FNV-1a hash that maps a message target to one of 128 table slots.

### `midicontrol.buffered_midi_out`

`BufferedMidiOut` wraps any `MidiOutputPort`. It keeps only the latest value per (type, channel, controller or note).

- `flush()` sends everything that is pending.
- `update(max_messages)` sends up to that many messages and returns the count. A `max_messages` of 0 means all.
- `pending_count` is the number of messages waiting to be sent.
- `capacity` is the number of slots in the buffer.
- When `immediate_flush` is set, messages are also sent straight away.
- When `high_priority` is set, there is no pause between sends.
- Program change, pitch bend, channel pressure and SysEx bypass the buffer.

## Example

```python
from midicontrol.buffered_midi_out import BufferedMidiOut
from midicontrol.input_config import create_encoder_with_button
from midicontrol.midi_io import NullMidiOut

encoder = create_encoder_with_button(71, "enc1", "Cutoff", 2, 3, 4, 1071)
assert encoder.has_button

out = BufferedMidiOut(NullMidiOut())
out.send_control_change(0, 74, 64)
out.send_control_change(0, 74, 80)   # replaces the pending value
assert out.pending_count == 1
out.flush()
assert out.pending_count == 0
```

## What this package does not do

- It does not talk to hardware pins. The caller supplies `read_pin`, `read_count` and a clock.
- It has no display output and no on-screen views or menus.
- It has no persistent storage.
- It has no command-line program.