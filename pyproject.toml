[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pdp10kit"
version = "0.1.0"
description = "Readers, writers and analysers for PDP-10 and PDP-11 era binary files, core images and tapes"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "pdp-10",
    "pdp-11",
    "its",
    "waits",
    "tops-10",
    "tops-20",
    "tape",
    "dumper",
    "sixbit",
    "disassembler",
    "retrocomputing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving",
    "Topic :: System :: Emulators",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pdp10kit"]

[tool.pytest.ini_options]
addopts = "-ra"
