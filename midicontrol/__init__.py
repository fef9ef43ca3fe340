"""Input configuration, button and encoder tracking, MIDI bindings, and buffered MIDI input/output."""

__version__ = "0.1.0"