"""Configuration records for physical inputs (buttons and rotary encoders)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TypeVar, Union


class InvalidConfigError(ValueError):
    """Raised when a builder is asked to produce an inconsistent configuration."""


class PinMode(Enum):
    """Electrical mode of a GPIO input pin."""

    INPUT = "input"
    PULLUP = "pullup"
    PULLDOWN = "pulldown"


@dataclass(frozen=True)
class GpioPin:
    """A GPIO pin number together with its input mode."""

    pin: int
    mode: PinMode = PinMode.PULLUP

    def is_valid(self) -> bool:
        """Return True if the pin number fits a byte and the mode is known."""
        return 0 <= self.pin <= 0xFF and isinstance(self.mode, PinMode)


class ButtonMode(Enum):
    """Behaviour of a push button."""

    MOMENTARY = "momentary"
    TOGGLE = "toggle"


class InputType(Enum):
    """Kind of physical control."""

    ENCODER = "encoder"
    BUTTON = "button"


@dataclass
class ButtonConfig:
    """Configuration of a single push button."""

    id: int
    gpio: GpioPin
    active_low: bool = True
    mode: ButtonMode = ButtonMode.MOMENTARY
    debounce_ms: int = 50
    long_press_ms: int = 800
    enable_long_press: bool = False

    def is_valid(self) -> bool:
        """Return True if every parameter lies within a sensible range."""
        return (
            self.id != 0
            and self.gpio.is_valid()
            and 0 < self.debounce_ms < 1000
            and self.debounce_ms < self.long_press_ms < 5000
        )


@dataclass
class EncoderConfig:
    """Configuration of a quadrature encoder with an optional push switch."""

    id: int
    pin_a: GpioPin
    pin_b: GpioPin
    ppr: int = 24
    button_config: Optional[ButtonConfig] = None
    invert_direction: bool = False
    sensitivity: float = 1.0
    enable_acceleration: bool = True
    steps_per_detent: int = 4
    acceleration_threshold: int = 100
    max_acceleration: float = 5.0

    def is_valid(self) -> bool:
        """Return True if every parameter lies within a sensible range."""
        return (
            self.id != 0
            and self.pin_a.is_valid()
            and self.pin_b.is_valid()
            and self.pin_a.pin != self.pin_b.pin
            and 0 < self.ppr <= 10000
            and 0.0 < self.sensitivity <= 10.0
            and 0 < self.steps_per_detent <= 8
            and self.acceleration_threshold > 0
            and 1.0 <= self.max_acceleration <= 20.0
        )

    @property
    def effective_resolution(self) -> float:
        """Pulses per revolution divided by steps per mechanical detent."""
        return float(self.ppr) / float(self.steps_per_detent)


_ConfigT = TypeVar("_ConfigT", ButtonConfig, EncoderConfig)

_TYPE_FOR_KIND = {ButtonConfig: InputType.BUTTON, EncoderConfig: InputType.ENCODER}


@dataclass
class InputConfig:
    """Generic description of an input control and its UI metadata."""

    id: int
    name: str
    type: InputType
    label: str
    config: Union[ButtonConfig, EncoderConfig]
    group: str = "General"
    description: str = ""
    enabled: bool = True
    display_order: int = 0

    def get_config(self, kind: type[_ConfigT]) -> Optional[_ConfigT]:
        """Return the specific config if it is of `kind` and matches the input type."""
        expected_type = _TYPE_FOR_KIND.get(kind)
        if expected_type is None:
            raise TypeError("kind must be ButtonConfig or EncoderConfig")
        if self.type is not expected_type:
            return None
        if isinstance(self.config, kind):
            return self.config
        return None

    def is_valid(self) -> bool:
        """Return True if the required fields are set and the config is consistent."""
        if self.id == 0 or not self.name or not self.label:
            return False
        if not self.config.is_valid():
            return False
        return (
            self.type is InputType.BUTTON and isinstance(self.config, ButtonConfig)
        ) or (
            self.type is InputType.ENCODER and isinstance(self.config, EncoderConfig)
        )

    @property
    def primary_physical_id(self) -> int:
        """GPIO pin for a button, encoder id for an encoder."""
        if isinstance(self.config, ButtonConfig):
            return self.config.gpio.pin
        return self.config.id

    @property
    def has_button(self) -> bool:
        """True for a button, or for an encoder with an integrated switch."""
        if self.type is InputType.BUTTON:
            return True
        if self.type is InputType.ENCODER:
            encoder = self.get_config(EncoderConfig)
            if encoder is not None:
                return encoder.button_config is not None
        return False

    def find_button_config(self) -> Optional[ButtonConfig]:
        """Return the button configuration of this control, if it has one."""
        if self.type is InputType.BUTTON:
            return self.get_config(ButtonConfig)
        if self.type is InputType.ENCODER:
            encoder = self.get_config(EncoderConfig)
            if encoder is not None:
                return encoder.button_config
        return None


def _checked(config: InputConfig, what: str) -> InputConfig:
    if not config.is_valid():
        raise InvalidConfigError(f"invalid {what} configuration: {config.name}")
    return config


def create_button(
    input_id: int,
    name: str,
    label: str,
    pin: int,
    mode: ButtonMode = ButtonMode.MOMENTARY,
    active_low: bool = True,
) -> InputConfig:
    """Build and validate a simple button configuration."""
    button = ButtonConfig(
        id=input_id,
        gpio=GpioPin(pin, PinMode.PULLUP),
        active_low=active_low,
        mode=mode,
    )
    return _checked(
        InputConfig(id=input_id, name=name, type=InputType.BUTTON, label=label, config=button),
        "button",
    )


def create_advanced_button(
    input_id: int,
    name: str,
    label: str,
    pin: int,
    mode: ButtonMode = ButtonMode.MOMENTARY,
    active_low: bool = True,
    debounce_ms: int = 50,
    enable_long_press: bool = False,
    long_press_ms: int = 800,
) -> InputConfig:
    """Build and validate a button with custom debounce and long-press settings."""
    button = ButtonConfig(
        id=input_id,
        gpio=GpioPin(pin, PinMode.PULLUP),
        active_low=active_low,
        mode=mode,
        debounce_ms=debounce_ms,
        long_press_ms=long_press_ms,
        enable_long_press=enable_long_press,
    )
    return _checked(
        InputConfig(id=input_id, name=name, type=InputType.BUTTON, label=label, config=button),
        "advanced button",
    )


def create_encoder(
    input_id: int,
    name: str,
    label: str,
    pin_a: int,
    pin_b: int,
    ppr: int = 24,
) -> InputConfig:
    """Build and validate a plain encoder configuration."""
    encoder = EncoderConfig(
        id=input_id,
        pin_a=GpioPin(pin_a, PinMode.PULLUP),
        pin_b=GpioPin(pin_b, PinMode.PULLUP),
        ppr=ppr,
    )
    return _checked(
        InputConfig(id=input_id, name=name, type=InputType.ENCODER, label=label, config=encoder),
        "encoder",
    )


def create_encoder_with_button(
    input_id: int,
    name: str,
    label: str,
    pin_a: int,
    pin_b: int,
    button_pin: int,
    button_id: int,
    ppr: int = 24,
    button_mode: ButtonMode = ButtonMode.MOMENTARY,
) -> InputConfig:
    """Build and validate an encoder with an integrated push switch."""
    button = ButtonConfig(
        id=button_id,
        gpio=GpioPin(button_pin, PinMode.PULLUP),
        active_low=True,
        mode=button_mode,
    )
    encoder = EncoderConfig(
        id=input_id,
        pin_a=GpioPin(pin_a, PinMode.PULLUP),
        pin_b=GpioPin(pin_b, PinMode.PULLUP),
        ppr=ppr,
        button_config=button,
    )
    return _checked(
        InputConfig(id=input_id, name=name, type=InputType.ENCODER, label=label, config=encoder),
        "encoder with button",
    )


def create_high_performance_encoder(
    input_id: int,
    name: str,
    label: str,
    pin_a: int,
    pin_b: int,
    ppr: int = 600,
    sensitivity: float = 1.0,
    enable_acceleration: bool = True,
    invert_direction: bool = False,
    steps_per_detent: int = 4,
) -> InputConfig:
    """Build and validate a high-resolution encoder configuration."""
    encoder = EncoderConfig(
        id=input_id,
        pin_a=GpioPin(pin_a, PinMode.PULLUP),
        pin_b=GpioPin(pin_b, PinMode.PULLUP),
        ppr=ppr,
        invert_direction=invert_direction,
        sensitivity=sensitivity,
        enable_acceleration=enable_acceleration,
        steps_per_detent=steps_per_detent,
    )
    return _checked(
        InputConfig(id=input_id, name=name, type=InputType.ENCODER, label=label, config=encoder),
        "high performance encoder",
    )


def set_ui_metadata(
    config: InputConfig,
    group: str = "General",
    description: str = "",
    display_order: int = 0,
    enabled: bool = True,
) -> InputConfig:
    """Set the UI metadata of `config` in place and return it."""
    config.group = group
    config.description = description
    config.display_order = display_order
    config.enabled = enabled
    return config