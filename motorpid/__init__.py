"""Motor, encoder and PID control with a text command interface and a simulated board."""

__version__ = "0.1.0"
__all__ = ["encoder", "hardware", "motor", "params", "pid"]