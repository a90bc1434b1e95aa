[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "motorpid"
version = "0.1.0"
description = "DC motor control with quadrature encoder feedback, a PID controller and a serial-style command interface"
requires-python = ">=3.10"
dependencies = []
keywords = ["motor", "encoder", "pid", "control", "robotics", "pwm"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["motorpid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
