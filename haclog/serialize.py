"""Capture of a log call's arguments into a compact binary record.

Fixed-size arguments occupy 8-byte slots (16 bytes for ``long double``).
Each string argument stores an offset into a separate string area. There
every string is NUL terminated and padded to a multiple of 8 bytes.
"""

from __future__ import annotations

import operator
import struct
import time
from dataclasses import dataclass

from haclog.printf_spec import (
    DYNAMIC,
    LONG_DOUBLE_SIZE,
    PLACEHOLDER_SIZE,
    FormatError,
    FormatType,
    PrintfLocation,
    PrintfPrimitive,
    PrintfSpec,
    round_to_pow2,
)

MAX_STR_CACHE = 128
"""Most string arguments captured verbatim from one call."""

STR_CACHE_FULL = "(haclog str cache full)"
"""Text stored in place of string arguments beyond ``MAX_STR_CACHE``."""

STR_ALIGN = 8

# FormatType -> (size in bytes, signed)
_INT_CODECS: dict[FormatType, tuple[int, bool]] = {
    FormatType.CHAR: (1, True),
    FormatType.BYTE: (1, True),
    FormatType.UCHAR: (1, False),
    FormatType.UBYTE: (1, False),
    FormatType.SHORT: (2, True),
    FormatType.USHORT: (2, False),
    FormatType.INT: (4, True),
    FormatType.UINT: (4, False),
    FormatType.LONG: (8, True),
    FormatType.ULONG: (8, False),
    FormatType.LONGLONG: (8, True),
    FormatType.ULONGLONG: (8, False),
    FormatType.SIZE: (8, False),
    FormatType.PTR: (8, False),
    FormatType.PTRDIFF: (8, True),
}


@dataclass(frozen=True)
class MetaInfo:
    """What a handler knows about a message besides its text."""

    loc: PrintfLocation
    ts_sec: int = 0
    ts_nsec: int = 0
    tid: int = 0


@dataclass(frozen=True)
class LogRecord:
    """A primitive plus the serialized arguments of one call."""

    primitive: PrintfPrimitive
    ts_sec: int
    ts_nsec: int
    const_args: bytes
    str_args: bytes

    @property
    def extra_len(self) -> int:
        """Size of the string area in bytes."""
        return len(self.str_args)


def _pack_int(value: int, size: int, signed: bool) -> bytes:
    """Truncate ``value`` to a C integer of ``size`` bytes, padded to a slot."""
    bits = size * 8
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value.to_bytes(size, "little", signed=signed).ljust(PLACEHOLDER_SIZE, b"\0")


def _unpack_int(data: bytes, size: int, signed: bool) -> int:
    return int.from_bytes(data[:size], "little", signed=signed)


def _as_int(value, spec: PrintfSpec) -> int:
    if isinstance(value, (str, bytes)) and len(value) == 1 and spec.type == "c":
        return value[0] if isinstance(value, bytes) else ord(value)
    try:
        return operator.index(value)
    except TypeError:
        raise FormatError(
            f"argument {value!r} does not fit conversion %{spec.type}"
        ) from None


def _as_float(value, spec: PrintfSpec) -> float:
    if isinstance(value, (str, bytes)):
        raise FormatError(f"argument {value!r} does not fit conversion %{spec.type}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise FormatError(
            f"argument {value!r} does not fit conversion %{spec.type}"
        ) from None


def _as_bytes(value, spec: PrintfSpec) -> bytes:
    if isinstance(value, str):
        data = value.encode("utf-8")
    elif isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    else:
        raise FormatError(f"argument {value!r} does not fit conversion %{spec.type}")
    # C strings end at the first NUL.
    return data.split(b"\0", 1)[0]


def serialize(
    primitive: PrintfPrimitive,
    *args,
    min_level: int = 0,
    timestamp: int | None = None,
) -> LogRecord | None:
    """Capture ``args`` for ``primitive``.

    Returns ``None`` when the primitive's level is below ``min_level``.
    ``timestamp`` is in nanoseconds since the epoch; the current time is
    used when it is omitted.
    """
    if primitive.loc.level < min_level:
        return None
    if len(args) != primitive.num_args:
        raise FormatError(
            f"format {primitive.fmt!r} takes {primitive.num_args} arguments, "
            f"got {len(args)}"
        )

    values = iter(args)
    const = bytearray()
    strings = bytearray()
    n_str = 0

    for spec in primitive.specs:
        precision = spec.precision
        if spec.width == DYNAMIC:
            const += _pack_int(_as_int(next(values), spec), 4, True)
        if spec.precision == DYNAMIC:
            precision = _as_int(next(values), spec)
            const += _pack_int(precision, 8, True)

        fmt_type = spec.fmt_type
        value = next(values)
        if fmt_type == FormatType.STR:
            if n_str >= MAX_STR_CACHE:
                data = STR_CACHE_FULL.encode("utf-8")
            else:
                data = _as_bytes(value, spec)
                if spec.precision != 0 and precision >= 0:
                    data = data[:precision]
            slot = round_to_pow2(len(data) + 1, STR_ALIGN)
            const += _pack_int(len(strings), 8, False)
            strings += data.ljust(slot, b"\0")
            n_str += 1
        elif fmt_type == FormatType.DOUBLE:
            const += struct.pack("<d", _as_float(value, spec))
        elif fmt_type == FormatType.LONG_DOUBLE:
            const += struct.pack("<d", _as_float(value, spec)).ljust(
                LONG_DOUBLE_SIZE, b"\0"
            )
        elif fmt_type in _INT_CODECS:
            size, signed = _INT_CODECS[fmt_type]
            const += _pack_int(_as_int(value, spec), size, signed)
        else:
            raise FormatError(
                f"unsupported conversion {spec.text(primitive.fmt)!r} "
                f"in {primitive.fmt!r}"
            )

    if timestamp is None:
        timestamp = time.time_ns()
    ts_sec, ts_nsec = divmod(timestamp, 1_000_000_000)
    return LogRecord(
        primitive=primitive,
        ts_sec=ts_sec,
        ts_nsec=ts_nsec,
        const_args=bytes(const),
        str_args=bytes(strings),
    )