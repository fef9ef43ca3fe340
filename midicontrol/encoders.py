"""Quadrature encoders normalised to a 24-pulse reference resolution."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Optional

from midicontrol.input_config import EncoderConfig

CountReader = Callable[[], int]
PinReader = Callable[[int], bool]
Clock = Callable[[], int]

_REFERENCE_PPR = 24
_MIN_CHANGE_INTERVAL_MS = 1
_EXTREME_DEBOUNCE_MS = 4
_INT8_MIN, _INT8_MAX = -128, 127


def _millis() -> int:
    return int(time.monotonic() * 1000)


def _no_pin(_pin: int) -> bool:
    return True


class QuadratureEncoder:
    """Encoder whose raw count comes from `read_count`, with an optional switch."""

    def __init__(
        self,
        config: EncoderConfig,
        read_count: CountReader,
        read_pin: Optional[PinReader] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._id = config.id
        self._ppr = config.ppr
        self._read_count = read_count
        self._read_pin = read_pin or _no_pin
        self._clock = clock or _millis
        button = config.button_config
        self._has_button = button is not None
        self._button_pin = button.gpio.pin if button else 0
        self._active_low_button = button.active_low if button else False
        self._last_count = 0
        self._physical = 0
        self._absolute = 0
        self._normalization = (_REFERENCE_PPR << 8) // self._ppr
        self._last_change_ms = 0
        self._extreme_change_ms = 0

    def read_delta(self) -> int:
        """Return the normalised movement since the last accepted read, clamped to int8."""
        now = self._clock()
        if now - self._last_change_ms < _MIN_CHANGE_INTERVAL_MS:
            return 0

        count = self._read_count()
        delta = count - self._last_count
        if delta == 0:
            return 0

        near_bottom = self._physical <= 1 and delta < 0
        near_top = self._physical >= 126 and delta > 0
        if near_bottom or near_top:
            if now - self._extreme_change_ms < _EXTREME_DEBOUNCE_MS:
                return 0
            self._extreme_change_ms = now

        self._last_change_ms = now
        self._last_count = count
        self._physical += delta

        normalized = (delta * self._normalization) >> 8
        if normalized == 0:
            normalized = 1 if delta > 0 else -1

        self._absolute = (self._physical * self._normalization) >> 8
        return max(_INT8_MIN, min(_INT8_MAX, normalized))

    def is_pressed(self) -> bool:
        """Return True if the integrated switch is held."""
        if not self._has_button:
            return False
        level = bool(self._read_pin(self._button_pin))
        return not level if self._active_low_button else level

    @property
    def id(self) -> int:
        return self._id

    @property
    def ppr(self) -> int:
        return self._ppr

    @property
    def absolute_position(self) -> int:
        """Accumulated position scaled to the reference resolution."""
        return self._absolute

    @property
    def physical_position(self) -> int:
        """Accumulated raw count since the last reset."""
        return self._physical

    def reset_position(self) -> None:
        """Zero the accumulated positions, keeping the raw count reference."""
        self._physical = 0
        self._absolute = 0


class EncoderManager:
    """Builds and exposes the encoders described by a list of configurations."""

    def __init__(
        self,
        configs: Iterable[EncoderConfig],
        counter_for: Callable[[EncoderConfig], CountReader],
        read_pin: Optional[PinReader] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._encoders = [
            QuadratureEncoder(cfg, counter_for(cfg), read_pin, clock) for cfg in configs
        ]

    def update_all(self) -> None:
        """Poll the switches; deltas are left for the consumer to read."""
        for encoder in self._encoders:
            encoder.is_pressed()

    @property
    def encoders(self) -> list[QuadratureEncoder]:
        return list(self._encoders)