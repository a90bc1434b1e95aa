"""A DC motor driven through a direction and an enable pin, with an encoder."""

from __future__ import annotations

import math
import sys
from typing import TextIO

from .encoder import Encoder
from .hardware import HIGH, LOW, Hardware, PinMode
from .params import (
    MISSING_PARAMETER,
    ULONG_MASK,
    _format_float,
    _to_ulong,
    number_parameter,
)

DEFAULT_PWM_CHANNEL = 0
DEFAULT_PWM_FREQ = 5000
DEFAULT_PWM_RESOLUTION = 8
DEFAULT_SAMPLING_TIME = 100000
"""Microseconds between speed updates."""

SPEED_SCALE = 159829.51
"""Factor turning pulses per microsecond into the reported speed unit."""

CENTER_DUTY = 128
"""Duty value that holds a centred (sign-magnitude) driver at rest."""

_HELP = (
    "......",
    "*****************",
    "*****************",
    ".........Comandos......",
    "filter_period (ej: filter_100)",
    "sampling_time (ej: sampling_1000)",
    "PWM           (ej: PWM_channel_frequency_resolution ",
    "turn_vel      (ej: turn_255 o turn_-255)",
    "Stop          (ej: Stop ",
    "Print         (ej: Print, Print_Degrees, Print_Degrees_Pulses, _C )",
    "*****************",
    "*****************",
)


def _map_range(value: int, in_min: int, in_max: int, out_min: int, out_max: int) -> int:
    """Linearly rescale an integer, truncating toward zero."""
    numerator = (value - in_min) * (out_max - out_min)
    denominator = in_max - in_min
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        quotient = -quotient
    return quotient + out_min


class MotorEncoder:
    """Motor with an attached quadrature encoder and a text command interface."""

    def __init__(
        self,
        dir_pin: int,
        en_pin: int,
        encoder_pin_a: int,
        encoder_pin_b: int,
        degrees_per_pulse: float,
        hardware: Hardware,
        out: TextIO | None = None,
    ) -> None:
        self.dir_pin = dir_pin
        self.en_pin = en_pin
        self.hardware = hardware
        self.encoder = Encoder(encoder_pin_a, encoder_pin_b, degrees_per_pulse, hardware)
        self.sampling_time = DEFAULT_SAMPLING_TIME
        self.pwm_channel = DEFAULT_PWM_CHANNEL
        self._out = out
        self._last_pulse_count = 0
        self._speed = 0.0
        self._last_update = 0
        self._report_fields = (False,) * 4

    def _write(self, text: str) -> None:
        (self._out if self._out is not None else sys.stdout).write(text)

    def init(self) -> None:
        """Configure the motor pins, hold them low and start the encoder."""
        self.hardware.pin_mode(self.dir_pin, PinMode.OUTPUT)
        self.hardware.pin_mode(self.en_pin, PinMode.OUTPUT)
        self.hardware.digital_write(self.en_pin, LOW)
        self.hardware.digital_write(self.dir_pin, LOW)
        self.encoder.init()

    def _setup_pwm(self, pin: int, channel: int, frequency: int, resolution: int) -> None:
        if not self.hardware.esp32:
            raise RuntimeError("PWM channels are only available on ESP32 boards")
        self.pwm_channel = channel & 0xFF
        self.hardware.pwm_setup(self.pwm_channel, frequency, resolution)
        self.hardware.pwm_attach(pin, self.pwm_channel)

    def configure_pwm(self, channel: int, frequency: int, resolution: int) -> None:
        """Drive the enable pin from a PWM channel."""
        self._setup_pwm(self.en_pin, channel, frequency, resolution)

    def configure_pwm_dir(self, channel: int, frequency: int, resolution: int) -> None:
        """Drive the direction pin from a PWM channel."""
        self._setup_pwm(self.dir_pin, channel, frequency, resolution)

    def set_encoder_filter(self, period: int) -> None:
        """Set the minimum microseconds between counted encoder pulses."""
        self.encoder.filter = period

    @property
    def pulses(self) -> int:
        """Pulses counted by the encoder."""
        return self.encoder.pulses

    @property
    def encoder_period(self) -> int:
        """Microseconds between the last two encoder edges."""
        return self.encoder.period

    @property
    def degrees(self) -> float:
        """Angle turned, in degrees."""
        return self.encoder.degrees

    def speed(self) -> float:
        """Return the speed, recomputed once per sampling period."""
        now = self.hardware.micros()
        elapsed = (now - self._last_update) & ULONG_MASK
        if elapsed >= self.sampling_time:
            difference = self.encoder.pulses - self._last_pulse_count
            if difference == 0:
                self._speed = 0.0
            elif elapsed == 0:
                self._speed = math.copysign(math.inf, difference)
            else:
                self._speed = difference * SPEED_SCALE / elapsed
            self._last_pulse_count = self.encoder.pulses
            self._last_update = now
        return self._speed

    def turn(self, velocity: int) -> None:
        """Turn with a direction pin and a duty value on the enable pin."""
        if velocity > 0:
            self.hardware.digital_write(self.dir_pin, HIGH)
        else:
            self.hardware.digital_write(self.dir_pin, LOW)
            velocity = -velocity
        if self.hardware.esp32:
            self.hardware.pwm_write(self.pwm_channel, velocity)
        else:
            self.hardware.analog_write(self.en_pin, velocity)

    def turn_centered(self, velocity: int) -> None:
        """Turn a driver whose PWM duty is centred on rest at 128."""
        self.hardware.digital_write(self.en_pin, HIGH)
        if velocity > 0:
            target = 0
        else:
            velocity = -velocity
            target = 255
        if self.hardware.esp32:
            duty = _map_range(velocity, 0, 255, CENTER_DUTY, target) & 0xFF
            self.hardware.pwm_write(self.pwm_channel, duty)
        else:
            self.hardware.analog_write(self.dir_pin, 0)

    def stop(self) -> None:
        """Stop by dropping the direction pin and the enable duty."""
        self.hardware.digital_write(self.dir_pin, LOW)
        self.hardware.analog_write(self.en_pin, 0)

    def stop_centered(self) -> None:
        """Stop a centred driver by writing the rest duty."""
        if self.hardware.esp32:
            self.hardware.pwm_write(self.pwm_channel, CENTER_DUTY)
        else:
            self.hardware.analog_write(self.dir_pin, CENTER_DUTY)

    def report(
        self,
        pulses: bool | None = None,
        period: bool | None = None,
        degrees: bool | None = None,
        speed: bool | None = None,
    ) -> None:
        """Write the chosen encoder values on one line.

        Called with no arguments, the previous selection is used again.
        """
        requested = (pulses, period, degrees, speed)
        if all(flag is None for flag in requested):
            flags = self._report_fields
        else:
            flags = tuple(bool(flag) for flag in requested)
        self._report_fields = flags
        if not any(flags):
            return
        show_pulses, show_period, show_degrees, show_speed = flags
        parts = [str(self.encoder.id)]
        if show_pulses:
            parts.append(f" Pulses: {self.encoder.pulses}")
        if show_period:
            parts.append(f" Period: {self.encoder.period}")
        if show_degrees:
            parts.append(f" Degrees: {_format_float(self.encoder.degrees)}")
        if show_speed:
            parts.append(f" Speed: {_format_float(self.speed())}")
        self._write("".join(parts) + "\n")

    def reset_encoder_data(self) -> None:
        """Clear the pulse count and the measured period."""
        self.encoder.pulses = 0
        self.encoder.period = 0

    def process_command(self, command: str) -> None:
        """Apply a text command and write its response."""
        if not command:
            self._write("Invalid command: Command is empty.\n")
        elif command.startswith("filter_"):
            period = _to_ulong(number_parameter(command, 1))
            if period > 0:
                self.set_encoder_filter(period)
                self._write(f"Encoder filter set to: {period}\n")
            else:
                self._write("Invalid command format for filter period.\n")
        elif command.startswith("sampling_"):
            sampling = _to_ulong(number_parameter(command, 1))
            if sampling > 0:
                self.sampling_time = sampling
                self._write(f"Sampling time set to: {sampling}\n")
            else:
                self._write("Invalid command format for sampling time.\n")
        elif command.startswith("PWM"):
            channel = number_parameter(command, 1)
            frequency = number_parameter(command, 2)
            resolution = number_parameter(command, 3)
            if channel >= 0 and frequency > 0 and resolution > 0:
                self.configure_pwm(channel, frequency, resolution)
                self._write(
                    f"PWM configured: Channel {channel}, Frequency {frequency}, "
                    f"Resolution {resolution}\n"
                )
            else:
                self._write("Invalid parameters for PWM command.\n")
        elif command.startswith("turn_"):
            velocity = number_parameter(command, 1)
            if velocity == MISSING_PARAMETER:
                self._write("Invalid command format for speed.\n")
            else:
                self.turn_centered(velocity)
                self._write(f"Motor turning at speed: {velocity}\n")
        elif command == "Stop":
            self.stop_centered()
            self._write("Motor stopped.\n")
        elif command == "Print_C":
            self._write("".join(line + "\n" for line in _HELP))
            self.report(False, False, False, False)
        elif "Print" in command and "Print_" not in command:
            self._write("......\n")
            self.report()
        elif "Print_" in command:
            self._write("......\n")
            flags = (
                "Pulses" in command,
                "Period" in command,
                "Degrees" in command,
                "Speed" in command,
            )
            if any(flags):
                self.report(*flags)
            else:
                self._write("Invalid parameters for Print command.\n")
        else:
            self._write(f"Invalid command: {command}\n")