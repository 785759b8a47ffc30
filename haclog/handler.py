"""Log levels and the base class every log handler builds on."""

from __future__ import annotations

import enum
import ntpath
import time
from typing import Callable, TextIO

from haclog.serialize import MetaInfo

LEVEL_OFFSET = 8
LEVEL_MAX = 6

_LEVEL_NAMES = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "FATAL")


class Level(enum.IntEnum):
    """Log levels; the severity sits above ``LEVEL_OFFSET`` bits."""

    TRACE = 0
    DEBUG = 1 << LEVEL_OFFSET
    INFO = 2 << LEVEL_OFFSET
    WARNING = 3 << LEVEL_OFFSET
    WARN = 3 << LEVEL_OFFSET
    ERROR = 4 << LEVEL_OFFSET
    FATAL = 5 << LEVEL_OFFSET


def level_to_str(level: int) -> str:
    """Return the name of ``level``, or ``'UNKNOWN'``."""
    index = int(level) >> LEVEL_OFFSET
    if 0 <= index < LEVEL_MAX:
        return _LEVEL_NAMES[index]
    return "UNKNOWN"


def default_write_meta(handler: "Handler", meta: MetaInfo) -> int:
    """Write the standard message prefix and return its length."""
    t = time.gmtime(meta.ts_sec)
    filename = ntpath.basename(meta.loc.file)
    text = (
        f"{level_to_str(meta.loc.level)}|"
        f"{t.tm_year}-{t.tm_mon:02d}-{t.tm_mday:02d}T"
        f"{t.tm_hour:02d}:{t.tm_min:02d}:{t.tm_sec:02d}.{meta.ts_nsec:09d}|"
        f"{filename}:{meta.loc.line & 0xFFFFFFFF}|{meta.loc.func}|{meta.tid} - "
    )
    return handler.write_text(text)


WriteMeta = Callable[["Handler", MetaInfo], int]


class Handler:
    """A log destination writing to a text stream it does not own.

    Subclasses change where text goes by overriding ``write_text`` and
    the ``before_write``/``after_write`` hooks.
    """

    def __init__(self, stream: TextIO | None = None, level: int = Level.INFO):
        self.stream = stream
        self.level = level
        self._write_meta: WriteMeta = default_write_meta

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def should_write(self, level: int) -> bool:
        """Tell whether a message at ``level`` passes this handler's level."""
        return level >= self.level

    def write(self, meta: MetaInfo, msg: str) -> int:
        """Write one message with its prefix; return the characters written."""
        total = 0
        self.before_write(meta)
        n = self.write_meta(meta)
        if n > 0:
            total += n
        if msg:
            n = self.write_text(msg)
            if n > 0:
                total += n
        self.after_write(meta)
        return total

    def write_meta(self, meta: MetaInfo) -> int:
        """Write the message prefix with the configured function."""
        return self._write_meta(self, meta)

    def set_write_meta(self, fn: WriteMeta | None) -> None:
        """Use ``fn`` to write message prefixes; ``None`` restores the default."""
        self._write_meta = default_write_meta if fn is None else fn

    def before_write(self, meta: MetaInfo) -> None:
        """Hook run before each message."""

    def after_write(self, meta: MetaInfo) -> None:
        """Hook run after each message: end the line and flush."""
        if self.stream is not None:
            self.stream.write("\n")
            self.stream.flush()

    def write_text(self, text: str) -> int:
        """Write raw text; return the characters written."""
        if self.stream is None:
            return 0
        self.stream.write(text)
        return len(text)

    def close(self) -> None:
        """Flush and release the stream."""
        if self.stream is not None:
            self.stream.flush()
            self.stream = None