"""Handler writing log messages to the terminal."""

from __future__ import annotations

import sys
from typing import TextIO

from haclog.handler import Handler, Level
from haclog.serialize import MetaInfo


def _terminal_color(code: int) -> str:
    return f"\x1b[{code}m"


COLOR_RESET = _terminal_color(0)
COLOR_RED = _terminal_color(31)
COLOR_YELLOW = _terminal_color(33)


class ConsoleHandler(Handler):
    """Writes messages to stdout; with colour on, warnings and worse go to
    stderr in yellow (warnings) or red (errors and fatal)."""

    def __init__(
        self,
        enable_color: bool = False,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        level: int = Level.INFO,
    ):
        super().__init__(stream=None, level=level)
        self.enable_color = enable_color
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def _colored(self, meta: MetaInfo) -> bool:
        return bool(self.enable_color) and meta.loc.level >= Level.WARNING

    def before_write(self, meta: MetaInfo) -> None:
        """Pick the output stream and start the colour, if any."""
        if self._colored(meta):
            self.stream = self.stderr
            if meta.loc.level >= Level.ERROR:
                self.stream.write(COLOR_RED)
            else:
                self.stream.write(COLOR_YELLOW)
        else:
            self.stream = self.stdout

    def after_write(self, meta: MetaInfo) -> None:
        """End the line, reset the colour and flush."""
        stream = self.stream if self.stream is not None else self.stdout
        stream.write("\n")
        if self._colored(meta):
            self.stderr.write(COLOR_RESET)
        stream.flush()

    def write_text(self, text: str) -> int:
        """Write ``text`` to the current stream; return its length."""
        stream = self.stream if self.stream is not None else self.stdout
        stream.write(text)
        return len(text)

    def close(self) -> None:
        """Flush both streams; the terminal streams stay open."""
        self.stdout.flush()
        self.stderr.flush()
        self.stream = None