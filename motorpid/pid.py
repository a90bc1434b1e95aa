"""A sampled PID controller driven by a microsecond clock."""

from __future__ import annotations

import math
import sys
import time
from typing import Callable, TextIO

from .params import ULONG_MASK, _format_float, _to_ulong, number_parameter

_LABELS = ("   error: ", "  ∫error: ", "  d(error)/dt: ", "  input: ", "  output: ")


def _default_clock() -> int:
    return (time.monotonic_ns() // 1000) & ULONG_MASK


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


class PID:
    """PID controller that recomputes its output once per sampling period."""

    def __init__(
        self,
        kp: float,
        ki: float,
        kd: float,
        sampling_time: int,
        max_out: float,
        error_tolerance: float,
        clock: Callable[[], int] | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.sampling_time = sampling_time
        self.max_out = max_out
        self.error_tolerance = error_tolerance
        self.error = 0.0
        self.error_integral = 0.0
        self.error_derivative = 0.0
        self.input = 0.0
        self.output = 0.0
        self.stable = False
        self._prev_error = 0.0
        self._last_time = 0
        self._clock = clock if clock is not None else _default_clock
        self._out = out
        self._report_fields = (False,) * 5

    def _write(self, text: str) -> None:
        (self._out if self._out is not None else sys.stdout).write(text)

    def _step(self, value: float, set_point: float, cumulative: bool) -> float:
        self.input = value
        now = self._clock()
        elapsed = (now - self._last_time) & ULONG_MASK
        if elapsed < self.sampling_time:
            return self.output

        error = set_point - value
        area = (error + self._prev_error) * (elapsed // 2) * 1e-6
        if cumulative:
            self.error_integral += area
        elif self._prev_error == error:
            self.error_integral += area
        else:
            self.error_integral = 0.0
        self.error = error
        self.error_derivative = _divide(error - self._prev_error, elapsed * 1e-6)

        output = (
            self.kp * error
            + self.ki * self.error_integral
            + self.kd * self.error_derivative
        )
        if math.isnan(output):
            output = self.max_out
        self.output = max(min(output, self.max_out), -self.max_out)

        self.stable = abs(error) <= self.error_tolerance and self.error_derivative == 0
        if self.stable:
            self.error_integral = 0.0
            self.error_derivative = 0.0
            self.output = 0.0

        self._prev_error = error
        self._last_time = now
        return self.output

    def compute(self, value: float, set_point: float) -> float:
        """Update the output; the integral restarts whenever the error changes."""
        return self._step(value, set_point, cumulative=False)

    def compute_cumulative(self, value: float, set_point: float) -> float:
        """Update the output with an integral that keeps accumulating."""
        return self._step(value, set_point, cumulative=True)

    def report(
        self,
        error: bool | None = None,
        integral: bool | None = None,
        derivative: bool | None = None,
        input_value: bool | None = None,
        output: bool | None = None,
    ) -> None:
        """Write the chosen state values on one line.

        Called with no arguments, the previous selection is used again.
        """
        requested = (error, integral, derivative, input_value, output)
        if all(flag is None for flag in requested):
            flags = self._report_fields
        else:
            flags = tuple(bool(flag) for flag in requested)
        self._report_fields = flags
        if not any(flags):
            return
        values = (
            self.error,
            self.error_integral,
            self.error_derivative,
            self.input,
            self.output,
        )
        line = "".join(
            label + _format_float(value)
            for label, value, shown in zip(_LABELS, values, flags)
            if shown
        )
        self._write(line + "\n")

    def process_command(self, command: str) -> None:
        """Apply a text command and write its response."""
        if not command:
            self._write("Invalid command: Command is empty.\n")
        elif command.startswith("set_kp_"):
            kp = float(number_parameter(command, 2))
            if kp >= 0:
                self.kp = kp
                self._write(f"Kp set to: {_format_float(kp)}\n")
            else:
                self._write("Invalid command format for Kp.\n")
        elif command.startswith("set_ki_"):
            ki = float(number_parameter(command, 2))
            if self.ki >= 0:
                self.ki = ki
                self._write(f"Ki set to: {_format_float(self.ki)}\n")
            else:
                self._write("Invalid command format for Ki.\n")
        elif command.startswith("set_kd_"):
            kd = float(number_parameter(command, 2))
            if self.kd >= 0:
                self.kd = kd
                self._write(f"Kd set to: {_format_float(self.kd)}\n")
            else:
                self._write("Invalid command format for Kd.\n")
        elif command.startswith("set_sampling_"):
            sampling = _to_ulong(number_parameter(command, 2))
            if sampling > 0:
                self.sampling_time = sampling
                self._write(f"Sampling time set to: {sampling}\n")
            else:
                self._write("Invalid command format for sampling time.\n")
        elif command.startswith("set_max_out_"):
            max_out = float(number_parameter(command, 3))
            if max_out >= 0:
                self.max_out = max_out
                self._write(f"Max output set to: {_format_float(max_out)}\n")
            else:
                self._write("Invalid command format for max output.\n")
        elif command.startswith("set_error_tolerance_"):
            tolerance = float(number_parameter(command, 3))
            if tolerance >= 0:
                self.error_tolerance = tolerance
                self._write(f"Error tolerance set to: {_format_float(tolerance)}\n")
            else:
                self._write("Invalid command format for error tolerance.\n")
        elif command == "Print_PID":
            self._write("......\n")
            self.report(True, True, True, True, True)
        elif "Print_C" in command:
            self._write("......\n")
            self.report(False, False, False, False, False)
        elif "Print_" in command:
            self._write("......\n")
            flags = (
                "Error" in command,
                "ErrorIntegral" in command,
                "ErrorDerivative" in command,
                "Input" in command,
                "Output" in command,
            )
            if any(flags):
                self.report(*flags)
            else:
                self._write("Invalid parameters for Print command.\n")
        else:
            self._write(f"Invalid command: {command}\n")