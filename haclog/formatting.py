"""Rendering of serialized log records back into text."""

from __future__ import annotations

import math
import struct

from haclog.printf_spec import (
    DYNAMIC,
    LONG_DOUBLE_SIZE,
    PLACEHOLDER_SIZE,
    FormatError,
    FormatType,
    PrintfSpec,
    SpecFlags,
)
from haclog.serialize import LogRecord, MetaInfo

DEFAULT_BUFSIZE = 4096
"""Default size of the output buffer, including the terminating NUL."""

_FLAG_CHARS = (
    ("-", SpecFlags.LEFT),
    ("+", SpecFlags.PLUS),
    (" ", SpecFlags.SPACE),
    ("#", SpecFlags.SPECIAL),
    ("0", SpecFlags.ZEROPAD),
)

# Byte size of each integer argument type.
_INT_SIZES: dict[FormatType, int] = {
    FormatType.CHAR: 1,
    FormatType.BYTE: 1,
    FormatType.UCHAR: 1,
    FormatType.UBYTE: 1,
    FormatType.SHORT: 2,
    FormatType.USHORT: 2,
    FormatType.INT: 4,
    FormatType.UINT: 4,
    FormatType.LONG: 8,
    FormatType.ULONG: 8,
    FormatType.LONGLONG: 8,
    FormatType.ULONGLONG: 8,
    FormatType.SIZE: 8,
    FormatType.PTR: 8,
    FormatType.PTRDIFF: 8,
}


class _ArgReader:
    """Cursor over the fixed-size argument area of a record."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def take(self, size: int = PLACEHOLDER_SIZE) -> bytes:
        chunk = self._data[self._pos : self._pos + size]
        if len(chunk) < size:
            raise FormatError("serialized arguments are truncated")
        self._pos += size
        return chunk

    def read_int(self, size: int, signed: bool) -> int:
        return int.from_bytes(self.take()[:size], "little", signed=signed)


def _pad(
    sign: str, prefix: str, body: str, flags: SpecFlags, width: int, zero_ok: bool
) -> str:
    fill = width - len(sign) - len(prefix) - len(body)
    if fill <= 0:
        return sign + prefix + body
    if flags & SpecFlags.LEFT:
        return sign + prefix + body + " " * fill
    if flags & SpecFlags.ZEROPAD and zero_ok:
        return sign + prefix + "0" * fill + body
    return " " * fill + sign + prefix + body


def _sign(negative: bool, flags: SpecFlags) -> str:
    if negative:
        return "-"
    if flags & SpecFlags.PLUS:
        return "+"
    if flags & SpecFlags.SPACE:
        return " "
    return ""


def _format_int(
    value: int, conv: str, flags: SpecFlags, width: int, precision: int | None
) -> str:
    magnitude = abs(value)
    if conv == "o":
        digits = format(magnitude, "o")
    elif conv == "x":
        digits = format(magnitude, "x")
    elif conv == "X":
        digits = format(magnitude, "X")
    else:
        digits = str(magnitude)

    if precision is not None:
        digits = "" if precision == 0 and magnitude == 0 else digits.zfill(precision)

    prefix = ""
    if flags & SpecFlags.SPECIAL:
        if conv == "o" and not digits.startswith("0"):
            digits = "0" + digits
        elif conv in "xX" and magnitude:
            prefix = "0" + conv

    sign = _sign(value < 0, flags) if conv in "di" else ""
    return _pad(sign, prefix, digits, flags, width, zero_ok=precision is None)


def _format_hex_float(
    value: float, upper: bool, flags: SpecFlags, width: int, precision: int | None
) -> str:
    sign = _sign(math.copysign(1.0, value) < 0, flags)
    if math.isnan(value) or math.isinf(value):
        body = "nan" if math.isnan(value) else "inf"
        text = _pad(sign, "", body, flags, width, zero_ok=False)
        return text.upper() if upper else text

    mantissa, exponent = abs(value).hex()[2:].split("p")
    lead, frac = mantissa.split(".")
    if precision is None:
        frac = frac.rstrip("0")
    elif precision < len(frac):
        scale = 16 ** (len(frac) - precision)
        q, r = divmod(int(lead + frac, 16), scale)
        if r * 2 > scale or (r * 2 == scale and q & 1):
            q += 1
        digits = format(q, "x").rjust(precision + 1, "0")
        if precision:
            lead, frac = digits[:-precision], digits[-precision:]
        else:
            lead, frac = digits, ""
    else:
        frac = frac.ljust(precision, "0")

    body = lead
    if frac or flags & SpecFlags.SPECIAL:
        body += "." + frac
    body += "p" + exponent
    prefix = "0x"
    if upper:
        prefix, body = prefix.upper(), body.upper()
    return _pad(sign, prefix, body, flags, width, zero_ok=True)


def _format_float(
    value: float, conv: str, flags: SpecFlags, width: int, precision: int | None
) -> str:
    if conv in "aA":
        return _format_hex_float(value, conv == "A", flags, width, precision)
    spec = "%" + "".join(c for c, flag in _FLAG_CHARS if flags & flag)
    if width:
        spec += str(width)
    if precision is not None:
        spec += f".{precision}"
    return (spec + conv) % value


def _format_spec(
    spec: PrintfSpec, fmt: str, reader: _ArgReader, str_args: bytes
) -> str:
    flags = spec.flags
    width = spec.width
    if width == DYNAMIC:
        width = reader.read_int(4, True)
        if width < 0:
            flags |= SpecFlags.LEFT
            width = -width

    precision: int | None = None
    if spec.precision == DYNAMIC:
        precision = reader.read_int(4, True)
        if precision < 0:
            precision = None
    elif "." in spec.text(fmt):
        precision = spec.precision

    fmt_type = spec.fmt_type
    conv = spec.type
    if fmt_type == FormatType.STR:
        offset = reader.read_int(8, False)
        end = str_args.find(b"\0", offset)
        if end < 0:
            end = len(str_args)
        text = str_args[offset:end].decode("utf-8", errors="replace")
        if precision is not None:
            text = text[:precision]
        return _pad("", "", text, flags, width, zero_ok=False)
    if fmt_type == FormatType.DOUBLE:
        (value,) = struct.unpack("<d", reader.take())
        return _format_float(value, conv, flags, width, precision)
    if fmt_type == FormatType.LONG_DOUBLE:
        (value,) = struct.unpack("<d", reader.take(LONG_DOUBLE_SIZE)[:8])
        return _format_float(value, conv, flags, width, precision)
    if fmt_type in _INT_SIZES:
        size = _INT_SIZES[fmt_type]
        if conv == "c":
            code = reader.read_int(size, False) & 0xFF
            return _pad("", "", chr(code), flags, width, zero_ok=False)
        if conv == "p":
            address = reader.read_int(size, False)
            text = f"0x{address:x}" if address else "(nil)"
            return _pad("", "", text, flags, width, zero_ok=False)
        value = reader.read_int(size, conv in "di")
        return _format_int(value, conv, flags, width, precision)
    raise FormatError(f"cannot format conversion {spec.text(fmt)!r} in {fmt!r}")


def format_record(
    record: LogRecord, bufsize: int = DEFAULT_BUFSIZE
) -> tuple[str, MetaInfo]:
    """Render ``record`` as text and return it with the record's meta info.

    The text is cut to ``bufsize - 1`` characters, leaving room for the
    terminator a buffer of ``bufsize`` would need.
    """
    if bufsize < 1:
        raise FormatError(f"bufsize must be at least 1, got {bufsize}")

    primitive = record.primitive
    fmt = primitive.fmt
    reader = _ArgReader(record.const_args)
    parts: list[str] = []
    pos = 0
    for spec in primitive.specs:
        parts.append(fmt[pos : spec.pos_begin])
        pos = spec.pos_end
        parts.append(_format_spec(spec, fmt, reader, record.str_args))
    parts.append(fmt[pos:])

    text = "".join(parts)[: bufsize - 1]
    meta = MetaInfo(loc=primitive.loc, ts_sec=record.ts_sec, ts_nsec=record.ts_nsec)
    return text, meta