[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "midicontrol"
version = "0.1.0"
description = "Input configuration, button and encoder tracking, and buffered MIDI input/output for a MIDI controller"
requires-python = ">=3.10"
dependencies = [
    "mido",
]
keywords = ["midi", "controller", "encoder", "button", "buffer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["midicontrol"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
