# haclog

haclog is a printf-style logging library that works in separate steps. At
the call site it stores only the raw arguments of a log call. Formatting the
message and writing it out are done afterwards, through handlers.

## The steps

1. **Parse once.** `haclog.printf_spec.generate_primitive(fmt, loc)` parses a
   printf format string into a `PrintfPrimitive`. The primitive holds one
   `PrintfSpec` per conversion and the call's `PrintfLocation` (file,
   function, line, level). A malformed specifier, such as an unknown
   conversion or a length modifier longer than two characters, raises
   `FormatError`. So does a missing location. `count_params(fmt)` returns
   `(num_params, num_args)`, where a `*` width or precision counts as one
   more argument. `PrintfPrimitive.describe()` returns a readable dump of
   the primitive and its specifiers.
2. **Capture.** `haclog.serialize.serialize(primitive, *args, min_level=0,
   timestamp=None)` packs the arguments into a `LogRecord`:
   - Each fixed-size argument takes an 8-byte slot, and a `long double`
     takes 16 bytes.
   - Strings go to a separate area. Each one ends with a NUL and is padded
     to 8 bytes. A string's precision is applied at capture time. Only the
     first 128 strings of a call are kept, and the rest are stored as
     `(haclog str cache full)`.
   - `timestamp` is in nanoseconds since the epoch, and the current time is
     used when it is omitted.
   - The function returns `None` when the primitive's level is below
     `min_level`.
   - A wrong number of arguments, an argument of the wrong kind, or a
     conversion that cannot be captured (`%n`, `%lf`, `%ls`, ...) raises
     `FormatError`.
3. **Format.** `haclog.formatting.format_record(record, bufsize=4096)`
   returns `(text, meta)`. `text` is the finished message, cut to
   `bufsize - 1` characters. `meta` is a `MetaInfo` that carries the
   location and the timestamp.
4. **Write.** `Handler.write(meta, msg)` does three things in order. It
   writes a prefix through the handler's write-meta function, then the
   message, then ends the line. It returns the number of characters written.
   The default prefix (`default_write_meta`) uses UTC time and the file's
   base name:

   ```
   LEVEL|YYYY-MM-DDTHH:MM:SS.nnnnnnnnn|file:line|func|tid - message
   ```

   To change the prefix, pass `set_write_meta(fn)` a function
   `fn(handler, meta) -> int`. Passing `None` restores the default.

## Example

```python
import io

from haclog.formatting import format_record
from haclog.handler import Handler, Level
from haclog.printf_spec import PrintfLocation, generate_primitive
from haclog.serialize import serialize

loc = PrintfLocation(file="src/app.py", func="main", line=42, level=Level.WARNING)
primitive = generate_primitive("disk %s is %d%% full", loc)

record = serialize(primitive, "/dev/sda1", 93, min_level=Level.INFO,
                   timestamp=1_700_000_000_123_456_789)
text, meta = format_record(record)

out = io.StringIO()
with Handler(out) as handler:
    if handler.should_write(meta.loc.level):
        handler.write(meta, text)

print(out.getvalue())
# WARNING|2023-11-14T22:13:20.123456789|app.py:42|main|0 - disk /dev/sda1 is 93% full
```

## Levels

`haclog.handler.Level` has these members:

- `TRACE`
- `DEBUG`
- `INFO`
- `WARNING`, with `WARN` as an alias
- `ERROR`
- `FATAL`

The severity sits above 8 bits. `level_to_str(level)` returns the level's
name, or `"UNKNOWN"` for a value outside the range. Every handler starts at
`Level.INFO`, and `should_write(level)` is true for that level and above.

## Handlers

Every handler can be used as a context manager, and `close()` releases it.

- `Handler(stream=None, level=Level.INFO)` writes to a text stream that it
  does not own. `close()` flushes the stream and lets go of it.
- `haclog.console_handler.ConsoleHandler(enable_color=False, stdout=None,
  stderr=None)` writes to stdout. With colour on, warnings go to stderr in
  yellow, and errors and fatal messages go there in red. A reset code
  follows each such message.
- `haclog.file_handler.FileHandler(filepath, mode="a")` writes one line per
  message to a file that it owns. `resolve_log_path(filepath)` resolves a
  relative path against the current directory and creates its parent
  directory when it is missing.
- `haclog.rotate_handler.RotatingFileHandler(filepath, max_bytes,
  backup_count)` counts the bytes written to its file.
  - Once the count reaches `max_bytes`, `rotate()` renames `log` to `log.1`
    and shifts `log.1` to `log.2`, and so on.
  - The oldest copy is removed, so at most `backup_count` backups are kept.
  - A file that is already over the limit is rotated when the handler
    opens it.
- `haclog.time_rotate_handler.TimedRotatingFileHandler(filepath,
  rotate_unit, rotate_mod, use_local_time=False)` writes to
  `<file>.<stamp>`.
  - The period is given by `RotateUnit` (`SEC`, `MIN`, `HOUR`, `DAY`, or
    `"s"`, `"m"`, `"h"`, `"d"`) and `rotate_mod`.
  - The stamp has the unit's precision. With `HOUR`, for example, the file
    is `app.log.20240101T13`.
  - After each message, `needs_rotation(meta)` checks whether the message's
    time has moved into a new period, and if so the handler opens the next
    file.
  - Times are in UTC unless `use_local_time` is set.
  - A `rotate_mod` below 1 raises `ValueError`.

## What it does not do

haclog has no single logging call that runs the steps for you. There is no
global context, no shared ring buffer, no background writer thread and no
handler registry. The caller parses, serializes, formats and hands the text
to its handlers. The package has no command-line program.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```