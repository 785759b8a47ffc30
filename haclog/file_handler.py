"""Handler appending log messages to a file."""

from __future__ import annotations

import os

from haclog.handler import Handler, Level
from haclog.serialize import MetaInfo


def resolve_log_path(filepath: str | os.PathLike) -> str:
    """Return an absolute path for ``filepath``.

    A relative path is taken from the current directory, and its parent
    directory is created when it does not exist yet.
    """
    path = os.fspath(filepath)
    if os.path.isabs(path):
        return path
    log_path = os.path.join(os.getcwd(), path)
    log_dir = os.path.dirname(log_path)
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)
    return log_path


def _open_text(path: str, mode: str):
    # The caller's mode may name binary access; messages are text.
    return open(path, mode.replace("b", ""), encoding="utf-8")


class FileHandler(Handler):
    """Writes each message as one line of a file it owns."""

    def __init__(
        self,
        filepath: str | os.PathLike,
        mode: str = "a",
        level: int = Level.INFO,
    ):
        self.filepath = resolve_log_path(filepath)
        super().__init__(stream=_open_text(self.filepath, mode), level=level)

    def before_write(self, meta: MetaInfo) -> None:
        """Nothing to prepare before a message."""

    def after_write(self, meta: MetaInfo) -> None:
        """End the line and flush the file."""
        if self.stream is not None:
            self.stream.write("\n")
            self.stream.flush()

    def write_text(self, text: str) -> int:
        """Write ``text`` to the file; return its length, or 0 once closed."""
        if self.stream is None:
            return 0
        self.stream.write(text)
        return len(text)

    def close(self) -> None:
        """Close the file."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None