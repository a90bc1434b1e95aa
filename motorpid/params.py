"""Parsing of numeric parameters embedded in underscore-separated commands."""

from __future__ import annotations

import math
import re

MISSING_PARAMETER = -2147483648
"""Value returned when a command has fewer parameters than requested."""

ULONG_MASK = 0xFFFFFFFF
"""Mask that reduces an integer to a 32-bit unsigned value."""

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_FLOAT_LIMIT = 4294967040.0


def _to_int(text: str) -> int:
    """Parse a leading integer the way the serial firmware does; 0 when absent."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _to_ulong(value: int) -> int:
    """Reinterpret a signed integer as a 32-bit unsigned one."""
    return value & ULONG_MASK


def _format_float(value: float) -> str:
    """Render a float with two decimals, as the serial console shows it."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf"
    if value > _FLOAT_LIMIT or value < -_FLOAT_LIMIT:
        return "ovf"
    if value == 0:
        value = 0.0
    return f"{value:.2f}"


def number_parameter(command: str, index: int) -> int:
    """Return the integer after the ``index``-th underscore of ``command``.

    The parameter runs up to the next underscore or the end of the command.
    Text that does not start with a number yields 0; a command with too few
    underscores yields :data:`MISSING_PARAMETER`.
    """
    start = 0
    for _ in range(index):
        position = command.find("_", start)
        if position < 0:
            return MISSING_PARAMETER
        start = position + 1
    end = command.find("_", start)
    if end < 0:
        end = len(command)
    return _to_int(command[start:end])