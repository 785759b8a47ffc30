"""Handler that moves its file aside once it grows past a size limit."""

from __future__ import annotations

import contextlib
import os
import sys

from haclog.file_handler import _open_text, resolve_log_path
from haclog.handler import Handler, Level
from haclog.serialize import MetaInfo


class RotatingFileHandler(Handler):
    """Writes to a file and keeps up to ``backup_count`` older copies.

    When the file reaches ``max_bytes`` it becomes ``<file>.1``, an
    existing ``<file>.1`` becomes ``<file>.2`` and so on; the oldest copy
    is removed.
    """

    def __init__(
        self,
        filepath: str | os.PathLike,
        max_bytes: int,
        backup_count: int,
        level: int = Level.INFO,
    ):
        self.filepath = resolve_log_path(filepath)
        super().__init__(stream=_open_text(self.filepath, "a"), level=level)
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.offset = os.path.getsize(self.filepath)
        if self.offset >= self.max_bytes:
            with contextlib.suppress(OSError):
                self.rotate()

    def _backup(self, index: int) -> str:
        return f"{self.filepath}.{index}"

    def rotate(self) -> None:
        """Shift the backups along and start a new, empty file."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None

        oldest = self._backup(self.backup_count)
        if os.path.exists(oldest):
            with contextlib.suppress(OSError):
                os.remove(oldest)

        for i in range(self.backup_count - 1, 0, -1):
            with contextlib.suppress(OSError):
                os.replace(self._backup(i), self._backup(i + 1))
        with contextlib.suppress(OSError):
            os.replace(self.filepath, self._backup(1))

        self.stream = _open_text(self.filepath, "a")
        self.offset = 0

    def before_write(self, meta: MetaInfo) -> None:
        """Nothing to prepare before a message."""

    def after_write(self, meta: MetaInfo) -> None:
        """End the line, flush, and rotate once the size limit is reached."""
        if self.stream is None:
            return
        self.stream.write("\n")
        self.offset += 1
        self.stream.flush()
        if self.offset >= self.max_bytes:
            try:
                self.rotate()
            except OSError:
                sys.stderr.write("failed rotate log handler")

    def write_text(self, text: str) -> int:
        """Write ``text`` and count its bytes; return its length."""
        if self.stream is None:
            return 0
        self.stream.write(text)
        self.offset += len(text.encode("utf-8"))
        return len(text)

    def close(self) -> None:
        """Close the file."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None