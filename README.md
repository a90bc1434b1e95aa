# motorpid

Control a DC motor that has a quadrature encoder. Close the loop with a PID
controller. Drive both through short text commands such as `turn_200`,
`filter_1100` or `set_kp_3`.

All pin, timer and PWM access goes through a `Hardware` object. The package
ships `SimulatedHardware`, which does the following:

- keeps a microsecond clock that moves only when you call `advance()`
- records pin modes and digital, analog and PWM writes
- lets you set input levels with `set_input()`
- fires attached interrupt handlers with `trigger()`

With it, the whole stack can be exercised without a board.

## Installing

```
pip install motorpid
```

## Modules

- `motorpid.hardware`
  - `Hardware` is the abstract board interface, with these methods:
    - `micros`
    - `pin_mode`
    - `digital_read` and `digital_write`
    - `analog_write`
    - `attach_interrupt`
    - `pwm_setup`, `pwm_attach` and `pwm_write`
  - `SimulatedHardware` is the in-memory board.
    - Build it with `esp32=True` to allow PWM channels.
    - Without that, the PWM methods raise `RuntimeError`.
- `motorpid.encoder`
  - `Encoder` counts pulses on each rising edge of channel A.
  - The pulse counts down when A and B read the same level, and up otherwise.
  - Edges closer together than `filter` microseconds are ignored. The default is 1100.
  - `degrees` is a read/write property: `pulses * degrees_per_pulse`.
  - `Encoder.instance_count()` gives the number of encoders created so far.
- `motorpid.motor`
  - `MotorEncoder` is a motor driver together with its encoder.
  - `pulses`, `encoder_period` and `degrees` are properties.
  - `speed()` recomputes the speed once per `sampling_time` microseconds. The default is 100000.
  - `turn()` and `stop()` drive the motor through a direction pin and an enable pin.
  - `turn_centered()` and `stop_centered()` drive a driver whose PWM duty rests at 128.
  - `report()` writes the selected values.
  - `process_command()` interprets text commands.
- `motorpid.pid`
  - `PID` is a sampled PID controller.
  - `compute()` restarts the integral whenever the error changes.
  - `compute_cumulative()` keeps accumulating the integral.
  - The output is clamped to `±max_out`.
  - When the error is within `error_tolerance` and its derivative is zero, the controller sets `stable`. The output is then 0.
  - It has `report()` and `process_command()`.
- `motorpid.params`
  - `number_parameter(command, index)` returns the integer after the `index`-th underscore, as in `PWM_0_5000_8`.
  - Text that does not start with a number gives 0.
  - Too few underscores give `MISSING_PARAMETER`.

Output from `report()` and `process_command()` goes to the `out` stream you pass in. Without one, it goes to standard output.

## Example

```python
import io

from motorpid.hardware import SimulatedHardware
from motorpid.motor import MotorEncoder
from motorpid.pid import PID

hw = SimulatedHardware(esp32=True)
out = io.StringIO()

motor = MotorEncoder(26, 27, 34, 35, 0.5, hardware=hw, out=out)
motor.init()
motor.configure_pwm_dir(0, 5000, 8)

pid = PID(2.0, 0.5, 0.0, 10_000, 255, 1.0, clock=hw.micros, out=out)

hw.set_input(35, 0)
hw.advance(2_000)
hw.trigger(34)          # one counted encoder pulse

hw.advance(20_000)
drive = pid.compute(motor.degrees, 90.0)
motor.turn_centered(int(drive))

motor.process_command("Print_Degrees_Pulses")
pid.process_command("Print_PID")
print(out.getvalue())
```

## Motor commands

| Command | Effect |
| --- | --- |
| `filter_<us>` | set the encoder filter period |
| `sampling_<us>` | set the speed sampling window |
| `PWM_<channel>_<frequency>_<resolution>` | route a PWM channel to the enable pin (ESP32 boards only) |
| `turn_<velocity>` | `turn_centered(velocity)`; negative values reverse |
| `Stop` | `stop_centered()` |
| `Print` | report again with the previous selection |
| `Print_Pulses_Degrees`, ... | report any of `Pulses`, `Period`, `Degrees`, `Speed` |
| `Print_C` | list the commands and clear the report selection |

## PID commands

| Command | Effect |
| --- | --- |
| `set_kp_<n>`, `set_ki_<n>`, `set_kd_<n>` | set a gain |
| `set_sampling_<us>` | set the sampling period |
| `set_max_out_<n>` | set the output limit |
| `set_error_tolerance_<n>` | set the error tolerance |
| `Print_PID` | report every value |
| `Print_C` | clear the report selection |
| `Print_` followed by any of `Error`, `ErrorIntegral`, `ErrorDerivative`, `Input`, `Output` | report those values |

## What it does not do

The package has no backend for a real board. Only `SimulatedHardware` is provided. To drive physical pins, subclass `Hardware` and implement its methods.

There is no command-line program and no serial reader. You feed commands to `process_command()` yourself.

On boards without PWM channels (`esp32` false):

- `configure_pwm`, `configure_pwm_dir` and the `PWM_...` command raise `RuntimeError`.
- `turn_centered` writes a duty of 0 to the direction pin.

## Tests

```
pip install "motorpid[test]"
pytest
```