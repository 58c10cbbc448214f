"""Readers, writers and analysers for PDP-10 and PDP-11 era files, core images and tapes."""

__version__ = "0.1.0"

__all__ = [
    "words",
    "memory",
    "decdate",
    "pdp11",
    "atari",
    "csave",
    "exb",
    "exe",
    "constantinople",
    "acct",
    "cross",
    "classify",
    "disasm",
    "dumper",
]