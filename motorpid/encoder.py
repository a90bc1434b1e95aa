"""Quadrature encoder counted on the rising edge of its A channel."""

from __future__ import annotations

from .hardware import Hardware, PinMode
from .params import ULONG_MASK

DEFAULT_FILTER = 1100
"""Minimum microseconds between counted pulses."""


class Encoder:
    """Counts encoder pulses, ignoring edges that come too close together."""

    _instances = 0

    def __init__(
        self, pin_a: int, pin_b: int, degrees_per_pulse: float, hardware: Hardware
    ) -> None:
        self.pin_a = pin_a
        self.pin_b = pin_b
        self.degrees_per_pulse = degrees_per_pulse
        self.hardware = hardware
        self.pulses = 0
        self.period = 0
        self.filter = DEFAULT_FILTER
        self._last_count_time = 0
        self.id = Encoder._instances
        Encoder._instances += 1

    @staticmethod
    def instance_count() -> int:
        """Number of encoders created so far."""
        return Encoder._instances

    def init(self) -> None:
        """Configure the pins and start counting rising edges on channel A."""
        self.hardware.pin_mode(self.pin_a, PinMode.INPUT_PULLUP)
        self.hardware.pin_mode(self.pin_b, PinMode.INPUT_PULLUP)
        self.hardware.attach_interrupt(self.pin_a, self.on_pulse)

    def on_pulse(self) -> None:
        """Handle a rising edge on channel A."""
        level_a = self.hardware.digital_read(self.pin_a)
        level_b = self.hardware.digital_read(self.pin_b)
        now = self.hardware.micros()
        self.period = (now - self._last_count_time) & ULONG_MASK
        if self.period >= self.filter:
            self.pulses += -1 if level_a == level_b else 1
            self._last_count_time = now

    @property
    def degrees(self) -> float:
        """Angle turned, in degrees."""
        return self.pulses * self.degrees_per_pulse

    @degrees.setter
    def degrees(self, value: float) -> None:
        self.pulses = int(value / self.degrees_per_pulse)