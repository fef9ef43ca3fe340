"""Debounced digital buttons with momentary and toggle behaviour."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Optional

from midicontrol.input_config import ButtonConfig, ButtonMode

PinReader = Callable[[int], bool]
Clock = Callable[[], int]


def _millis() -> int:
    return int(time.monotonic() * 1000)


class _Debouncer:
    """Reports a pin level only once it has stayed unchanged for `interval_ms`."""

    def __init__(self, read: Callable[[], bool], interval_ms: int, clock: Clock) -> None:
        self._read = read
        self._interval_ms = interval_ms
        self._clock = clock
        self._state = read()
        self._unstable = self._state
        self._previous_ms = clock()

    def update(self) -> None:
        current = self._read()
        now = self._clock()
        if current != self._unstable:
            self._previous_ms = now
            self._unstable = current
        elif now - self._previous_ms >= self._interval_ms and current != self._state:
            self._previous_ms = now
            self._state = current

    @property
    def level(self) -> bool:
        return self._state


class DigitalButton:
    """A push button read through `read_pin` (True for a high level)."""

    def __init__(
        self,
        config: ButtonConfig,
        read_pin: PinReader,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        pin = config.gpio.pin
        self._debouncer = _Debouncer(
            lambda: bool(read_pin(pin)), config.debounce_ms, clock or _millis
        )
        self._debouncer.update()
        self._prev_pressed = self._raw_pressed()
        self._toggle_state = False
        if config.mode is ButtonMode.MOMENTARY:
            self._pressed = self._prev_pressed
        else:
            self._pressed = False

    def _raw_pressed(self) -> bool:
        level = self._debouncer.level
        return not level if self._config.active_low else level

    def update(self) -> None:
        """Sample the pin and refresh the logical state."""
        self._debouncer.update()
        raw = self._raw_pressed()
        rising = raw and not self._prev_pressed
        self._prev_pressed = raw
        if self._config.mode is ButtonMode.TOGGLE:
            if rising:
                self._toggle_state = not self._toggle_state
            self._pressed = self._toggle_state
        else:
            self._pressed = raw

    @property
    def pressed(self) -> bool:
        """Logical state: physical state when momentary, latched state when toggle."""
        return self._pressed

    @property
    def id(self) -> int:
        return self._config.id

    def reset_state(self) -> None:
        """Clear the toggle latch and the logical state."""
        self._toggle_state = False
        self._pressed = False


class DigitalButtonManager:
    """Owns a set of buttons built from their configurations."""

    def __init__(
        self,
        configs: Iterable[ButtonConfig],
        read_pin: PinReader,
        clock: Optional[Clock] = None,
    ) -> None:
        self._buttons = [DigitalButton(cfg, read_pin, clock) for cfg in configs]

    def update_all(self) -> None:
        """Update every button."""
        for button in self._buttons:
            button.update()

    @property
    def buttons(self) -> list[DigitalButton]:
        return list(self._buttons)

    def reset_all_toggle_states(self) -> None:
        """Reset the state of every button."""
        for button in self._buttons:
            button.reset_state()

    def reset_toggle_state(self, button_id: int) -> None:
        """Reset the first button whose id is `button_id`."""
        for button in self._buttons:
            if button.id == button_id:
                button.reset_state()
                break