"""Board access: the interface the drivers use and an in-memory board."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Callable

from .params import ULONG_MASK

LOW = 0
HIGH = 1


class PinMode(enum.Enum):
    """Electrical configuration of a digital pin."""

    INPUT = "input"
    OUTPUT = "output"
    INPUT_PULLUP = "input_pullup"


class Hardware(ABC):
    """The board operations the encoder, motor and controller rely on."""

    esp32: bool = False

    @abstractmethod
    def micros(self) -> int:
        """Microseconds since start, wrapping at 32 bits."""

    @abstractmethod
    def pin_mode(self, pin: int, mode: PinMode) -> None:
        """Configure a pin."""

    @abstractmethod
    def digital_read(self, pin: int) -> int:
        """Read a pin as LOW or HIGH."""

    @abstractmethod
    def digital_write(self, pin: int, value: int) -> None:
        """Drive a pin LOW or HIGH."""

    @abstractmethod
    def analog_write(self, pin: int, value: int) -> None:
        """Write a PWM duty value to a pin."""

    @abstractmethod
    def attach_interrupt(self, pin: int, handler: Callable[[], None]) -> None:
        """Call ``handler`` on each rising edge of ``pin``."""

    @abstractmethod
    def pwm_setup(self, channel: int, frequency: int, resolution: int) -> None:
        """Configure a PWM channel."""

    @abstractmethod
    def pwm_attach(self, pin: int, channel: int) -> None:
        """Route a PWM channel to a pin."""

    @abstractmethod
    def pwm_write(self, channel: int, value: int) -> None:
        """Set the duty value of a PWM channel."""


class SimulatedHardware(Hardware):
    """A board kept in memory, with a clock that only moves when told to."""

    def __init__(self, esp32: bool = False) -> None:
        self.esp32 = esp32
        self._now = 0
        self.pin_modes: dict[int, PinMode] = {}
        self.inputs: dict[int, int] = {}
        self.digital_outputs: dict[int, int] = {}
        self.analog_outputs: dict[int, int] = {}
        self.interrupts: dict[int, Callable[[], None]] = {}
        self.pwm_config: dict[int, tuple[int, int]] = {}
        self.pwm_pins: dict[int, int] = {}
        self.pwm_outputs: dict[int, int] = {}

    def micros(self) -> int:
        return self._now & ULONG_MASK

    def advance(self, microseconds: int) -> None:
        """Move the clock forward."""
        if microseconds < 0:
            raise ValueError("the clock cannot move backwards")
        self._now += microseconds

    def pin_mode(self, pin: int, mode: PinMode) -> None:
        self.pin_modes[pin] = mode

    def digital_read(self, pin: int) -> int:
        if pin in self.inputs:
            return self.inputs[pin]
        mode = self.pin_modes.get(pin)
        if mode is PinMode.OUTPUT:
            return self.digital_outputs.get(pin, LOW)
        if mode is PinMode.INPUT_PULLUP:
            return HIGH
        return LOW

    def set_input(self, pin: int, value: int) -> None:
        """Set the level seen on an input pin."""
        self.inputs[pin] = HIGH if value else LOW

    def digital_write(self, pin: int, value: int) -> None:
        self.digital_outputs[pin] = HIGH if value else LOW

    def analog_write(self, pin: int, value: int) -> None:
        self.analog_outputs[pin] = value

    def attach_interrupt(self, pin: int, handler: Callable[[], None]) -> None:
        self.interrupts[pin] = handler

    def trigger(self, pin: int) -> bool:
        """Raise a rising edge on ``pin``; return whether a handler ran."""
        handler = self.interrupts.get(pin)
        if handler is None:
            return False
        handler()
        return True

    def _require_esp32(self) -> None:
        if not self.esp32:
            raise RuntimeError("PWM channels are only available on ESP32 boards")

    def pwm_setup(self, channel: int, frequency: int, resolution: int) -> None:
        self._require_esp32()
        self.pwm_config[channel] = (frequency, resolution)

    def pwm_attach(self, pin: int, channel: int) -> None:
        self._require_esp32()
        self.pwm_pins[pin] = channel

    def pwm_write(self, channel: int, value: int) -> None:
        self._require_esp32()
        self.pwm_outputs[channel] = value