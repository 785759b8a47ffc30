"""Deferred printf-style logging: parse formats, capture arguments, format
records later and write them through console and file handlers."""

__version__ = "0.1.0"

__all__ = [
    "printf_spec",
    "serialize",
    "handler",
    "formatting",
    "console_handler",
    "file_handler",
    "rotate_handler",
    "time_rotate_handler",
]