"""Handler that starts a new file whenever a time period rolls over."""

from __future__ import annotations

import enum
import os
import sys
import time

from haclog.file_handler import _open_text, resolve_log_path
from haclog.handler import Handler, Level
from haclog.serialize import MetaInfo


class RotateUnit(str, enum.Enum):
    """Time unit a file covers."""

    SEC = "s"
    MIN = "m"
    HOUR = "h"
    DAY = "d"


class TimedRotatingFileHandler(Handler):
    """Writes to ``<file>.<timestamp>``, opening a new file per time period.

    A period is ``rotate_mod`` units long; the stamp in the file name has
    the precision of ``rotate_unit``. Times are UTC unless
    ``use_local_time`` is set.
    """

    def __init__(
        self,
        filepath: str | os.PathLike,
        rotate_unit: RotateUnit | str,
        rotate_mod: int,
        use_local_time: bool = False,
        level: int = Level.INFO,
    ):
        self.rotate_unit = RotateUnit(rotate_unit)
        if rotate_mod < 1:
            raise ValueError(f"rotate_mod must be at least 1, got {rotate_mod}")
        self.rotate_mod = rotate_mod
        self.use_local_time = bool(use_local_time)
        self.filepath = resolve_log_path(filepath)
        super().__init__(stream=None, level=level)

        self.last_sec = int(time.time())
        self.last_tm = self._to_tm(self.last_sec)
        self.rotate()

    def _to_tm(self, sec: int) -> time.struct_time:
        return time.localtime(sec) if self.use_local_time else time.gmtime(sec)

    def _period_key(self, tm: time.struct_time) -> tuple[int, ...]:
        mod = self.rotate_mod
        unit = self.rotate_unit
        if unit is RotateUnit.SEC:
            return (tm.tm_year, tm.tm_mon, tm.tm_mday, tm.tm_hour, tm.tm_min,
                    tm.tm_sec // mod)
        if unit is RotateUnit.MIN:
            return (tm.tm_year, tm.tm_mon, tm.tm_mday, tm.tm_hour,
                    tm.tm_min // mod)
        if unit is RotateUnit.HOUR:
            return (tm.tm_year, tm.tm_mon, tm.tm_mday, tm.tm_hour // mod)
        return (tm.tm_year, tm.tm_mon, tm.tm_mday // mod)

    def needs_rotation(self, meta: MetaInfo) -> bool:
        """Tell whether ``meta``'s time starts a new period.

        A time of 0 stands for now. Times not after the last one seen never
        rotate; later times become the new reference.
        """
        sec = meta.ts_sec or int(time.time())
        if self.last_sec >= sec:
            return False
        curr_tm = self._to_tm(sec)
        need_rot = self._period_key(curr_tm) != self._period_key(self.last_tm)
        self.last_sec = sec
        self.last_tm = curr_tm
        return need_rot

    def rotated_path(self) -> str:
        """Return the file name for the current period."""
        t = self.last_tm
        stamp = f"{t.tm_year}{t.tm_mon:02d}{t.tm_mday:02d}"
        unit = self.rotate_unit
        if unit is RotateUnit.SEC:
            stamp += f"T{t.tm_hour:02d}{t.tm_min:02d}{t.tm_sec:02d}"
        elif unit is RotateUnit.MIN:
            stamp += f"T{t.tm_hour:02d}{t.tm_min:02d}"
        elif unit is RotateUnit.HOUR:
            stamp += f"T{t.tm_hour:02d}"
        return f"{self.filepath}.{stamp}"

    def rotate(self) -> None:
        """Close the current file and open the one for the current period."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        self.stream = _open_text(self.rotated_path(), "a")

    def before_write(self, meta: MetaInfo) -> None:
        """Nothing to prepare before a message."""

    def after_write(self, meta: MetaInfo) -> None:
        """End the line, flush, and switch files when a new period began."""
        if self.stream is None:
            return
        self.stream.write("\n")
        self.stream.flush()
        if self.needs_rotation(meta):
            try:
                self.rotate()
            except OSError:
                sys.stderr.write("failed rotate log handler")

    def write_text(self, text: str) -> int:
        """Write ``text``; return its length, or 0 once closed."""
        if self.stream is None:
            return 0
        self.stream.write(text)
        return len(text)

    def close(self) -> None:
        """Close the file."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None