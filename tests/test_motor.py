import io

import pytest

from motorpid.hardware import HIGH, LOW, PinMode, SimulatedHardware
from motorpid.motor import DEFAULT_SAMPLING_TIME, MotorEncoder

DIR, EN, ENC_A, ENC_B = 5, 6, 2, 3


def make(esp32=False, degrees_per_pulse=0.5):
    hardware = SimulatedHardware(esp32=esp32)
    out = io.StringIO()
    motor = MotorEncoder(DIR, EN, ENC_A, ENC_B, degrees_per_pulse, hardware, out)
    motor.init()
    return motor, hardware, out


def pulse(hardware, forward=True, wait=2000):
    hardware.set_input(ENC_A, HIGH)
    hardware.set_input(ENC_B, LOW if forward else HIGH)
    hardware.advance(wait)
    hardware.trigger(ENC_A)


def test_init_configures_pins():
    motor, hw, _ = make()
    assert hw.pin_modes[DIR] is PinMode.OUTPUT
    assert hw.pin_modes[EN] is PinMode.OUTPUT
    assert hw.digital_outputs[DIR] == LOW
    assert hw.digital_outputs[EN] == LOW
    assert hw.pin_modes[ENC_A] is PinMode.INPUT_PULLUP
    assert ENC_A in hw.interrupts
    assert motor.sampling_time == DEFAULT_SAMPLING_TIME


def test_turn_without_pwm_channels():
    motor, hw, _ = make()
    motor.turn(200)
    assert hw.digital_outputs[DIR] == HIGH
    assert hw.analog_outputs[EN] == 200
    motor.turn(-150)
    assert hw.digital_outputs[DIR] == LOW
    assert hw.analog_outputs[EN] == 150


def test_turn_with_pwm_channel():
    motor, hw, _ = make(esp32=True)
    motor.configure_pwm(2, 5000, 8)
    assert hw.pwm_config[2] == (5000, 8)
    assert hw.pwm_pins[EN] == 2
    motor.turn(100)
    assert hw.pwm_outputs[2] == 100


def test_configure_pwm_dir_routes_direction_pin():
    motor, hw, _ = make(esp32=True)
    motor.configure_pwm_dir(3, 1000, 10)
    assert hw.pwm_pins[DIR] == 3
    assert motor.pwm_channel == 3


def test_configure_pwm_requires_esp32():
    motor, _, _ = make()
    with pytest.raises(RuntimeError):
        motor.configure_pwm(0, 5000, 8)


def test_turn_centered_extremes():
    motor, hw, _ = make(esp32=True)
    motor.configure_pwm_dir(1, 5000, 8)
    motor.turn_centered(255)
    assert hw.pwm_outputs[1] == 0
    assert hw.digital_outputs[EN] == HIGH
    motor.turn_centered(-255)
    assert hw.pwm_outputs[1] == 255
    motor.turn_centered(0)
    assert hw.pwm_outputs[1] == 128


def test_turn_centered_is_monotonic():
    motor, hw, _ = make(esp32=True)
    motor.configure_pwm_dir(1, 5000, 8)
    duties = []
    for velocity in range(1, 256, 10):
        motor.turn_centered(velocity)
        duties.append(hw.pwm_outputs[1])
    assert duties == sorted(duties, reverse=True)


def test_turn_centered_without_pwm_channels():
    motor, hw, _ = make()
    motor.turn_centered(200)
    assert hw.analog_outputs[DIR] == 0
    assert hw.digital_outputs[EN] == HIGH


def test_stop_and_stop_centered():
    motor, hw, _ = make()
    motor.turn(200)
    motor.stop()
    assert hw.digital_outputs[DIR] == LOW
    assert hw.analog_outputs[EN] == 0
    motor.stop_centered()
    assert hw.analog_outputs[DIR] == 128

    motor2, hw2, _ = make(esp32=True)
    motor2.configure_pwm(4, 5000, 8)
    motor2.stop_centered()
    assert hw2.pwm_outputs[4] == 128


def test_pulses_and_degrees():
    motor, hw, _ = make(degrees_per_pulse=0.5)
    pulse(hw)
    pulse(hw)
    assert motor.pulses == 2
    assert motor.degrees == pytest.approx(1.0)
    assert motor.encoder_period == 2000
    pulse(hw, forward=False)
    assert motor.pulses == 1


def test_set_encoder_filter_suppresses_close_edges():
    motor, hw, _ = make()
    motor.set_encoder_filter(5000)
    pulse(hw, wait=6000)
    pulse(hw, wait=2000)
    assert motor.pulses == 1
    assert motor.encoder.filter == 5000


def test_speed_zero_without_pulses():
    motor, hw, _ = make()
    hw.advance(DEFAULT_SAMPLING_TIME)
    assert motor.speed() == 0.0


def test_speed_scales_with_pulses_and_sign():
    one, hw1, _ = make()
    pulse(hw1)
    hw1.advance(DEFAULT_SAMPLING_TIME - 2000)
    two, hw2, _ = make()
    pulse(hw2)
    pulse(hw2)
    hw2.advance(DEFAULT_SAMPLING_TIME - 4000)
    back, hw3, _ = make()
    pulse(hw3, forward=False)
    hw3.advance(DEFAULT_SAMPLING_TIME - 2000)
    assert one.speed() > 0
    assert two.speed() == pytest.approx(2 * one.speed())
    assert back.speed() == pytest.approx(-one.speed())


def test_report_selection_and_repeat():
    motor, hw, out = make()
    motor.report(True, True, False, False)
    expected = f"{motor.encoder.id} Pulses: 0 Period: 0\n"
    assert out.getvalue() == expected
    motor.report()
    assert out.getvalue() == expected * 2
    motor.report(False, False, False, False)
    motor.report()
    assert out.getvalue() == expected * 2


def test_report_degrees_format():
    motor, hw, out = make()
    motor.report(degrees=True)
    assert out.getvalue() == f"{motor.encoder.id} Degrees: 0.00\n"


def test_reset_encoder_data():
    motor, hw, _ = make()
    pulse(hw)
    motor.reset_encoder_data()
    assert motor.pulses == 0
    assert motor.encoder_period == 0


def test_command_empty_and_unknown():
    motor, _, out = make()
    motor.process_command("")
    motor.process_command("jump")
    assert out.getvalue() == (
        "Invalid command: Command is empty.\nInvalid command: jump\n"
    )


def test_command_filter():
    motor, _, out = make()
    motor.process_command("filter_500")
    assert motor.encoder.filter == 500
    assert out.getvalue() == "Encoder filter set to: 500\n"
    motor.process_command("filter_abc")
    assert motor.encoder.filter == 500
    assert out.getvalue().endswith("Invalid command format for filter period.\n")


def test_command_sampling():
    motor, _, out = make()
    motor.process_command("sampling_2000")
    assert motor.sampling_time == 2000
    assert out.getvalue() == "Sampling time set to: 2000\n"
    motor.process_command("sampling_0")
    assert motor.sampling_time == 2000
    assert out.getvalue().endswith("Invalid command format for sampling time.\n")


def test_command_pwm():
    motor, hw, out = make(esp32=True)
    motor.process_command("PWM_1_5000_8")
    assert hw.pwm_config[1] == (5000, 8)
    assert out.getvalue() == "PWM configured: Channel 1, Frequency 5000, Resolution 8\n"
    motor.process_command("PWM")
    assert out.getvalue().endswith("Invalid parameters for PWM command.\n")


def test_command_turn_and_stop():
    motor, hw, out = make(esp32=True)
    motor.configure_pwm_dir(0, 5000, 8)
    motor.process_command("turn_255")
    assert hw.pwm_outputs[0] == 0
    motor.process_command("Stop")
    assert hw.pwm_outputs[0] == 128
    assert out.getvalue() == "Motor turning at speed: 255\nMotor stopped.\n"


def test_command_help_resets_report():
    motor, _, out = make()
    motor.report(True, False, False, False)
    motor.process_command("Print_C")
    text = out.getvalue()
    assert ".........Comandos......\n" in text
    assert "turn_vel      (ej: turn_255 o turn_-255)\n" in text
    out.seek(0)
    out.truncate()
    motor.process_command("Print")
    assert out.getvalue() == "......\n"


def test_command_print_fields():
    motor, _, out = make()
    motor.process_command("Print_Pulses")
    assert out.getvalue() == f"......\n{motor.encoder.id} Pulses: 0\n"
    motor.process_command("Print")
    assert out.getvalue().endswith(f"......\n{motor.encoder.id} Pulses: 0\n")
    assert out.getvalue().count("Pulses: 0") == 2


def test_command_print_without_fields():
    motor, _, out = make()
    motor.process_command("Print_Nothing")
    assert out.getvalue() == "......\nInvalid parameters for Print command.\n"