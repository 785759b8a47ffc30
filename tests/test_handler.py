import io

import pytest

from haclog.handler import Handler, Level, default_write_meta, level_to_str
from haclog.printf_spec import PrintfLocation
from haclog.serialize import MetaInfo


def make_meta(level=Level.WARNING, file="/a/b/main.c", ts_sec=0, ts_nsec=5):
    loc = PrintfLocation(file=file, func="main", line=12, level=level)
    return MetaInfo(loc=loc, ts_sec=ts_sec, ts_nsec=ts_nsec)


@pytest.mark.parametrize(
    "level, name",
    [
        (Level.TRACE, "TRACE"),
        (Level.DEBUG, "DEBUG"),
        (Level.INFO, "INFO"),
        (Level.WARNING, "WARNING"),
        (Level.ERROR, "ERROR"),
        (Level.FATAL, "FATAL"),
    ],
)
def test_level_to_str(level, name):
    assert level_to_str(level) == name


@pytest.mark.parametrize("level", [6 << 8, -1, 100 << 8])
def test_level_to_str_unknown(level):
    assert level_to_str(level) == "UNKNOWN"


def test_warn_is_warning():
    assert level_to_str(Level.WARN) == "WARNING"
    handler = Handler(level=Level.WARN)
    assert handler.should_write(Level.WARNING)
    assert not handler.should_write(Level.INFO)


def test_should_write_respects_level():
    handler = Handler(level=Level.WARNING)
    assert handler.should_write(Level.ERROR)
    assert handler.should_write(Level.WARNING)
    assert not handler.should_write(Level.INFO)


def test_default_write_meta_text():
    stream = io.StringIO()
    handler = Handler(stream)
    n = default_write_meta(handler, make_meta())
    assert stream.getvalue() == "WARNING|1970-01-01T00:00:00.000000005|main.c:12|main|0 - "
    assert n == len(stream.getvalue())


def test_default_write_meta_windows_path_basename():
    stream = io.StringIO()
    handler = Handler(stream)
    default_write_meta(handler, make_meta(file="C:\\src\\app.c"))
    assert "|app.c:12|" in stream.getvalue()


def test_write_returns_total_and_ends_line():
    stream = io.StringIO()
    handler = Handler(stream)
    n = handler.write(make_meta(), "hello")
    out = stream.getvalue()
    assert out.endswith("hello\n")
    assert n == len(out) - 1


def test_write_without_message_writes_only_prefix():
    stream = io.StringIO()
    handler = Handler(stream)
    n = handler.write(make_meta(level=Level.INFO), "")
    assert stream.getvalue().startswith("INFO|")
    assert stream.getvalue().endswith(" - \n")
    assert n == len(stream.getvalue()) - 1


def test_custom_write_meta_and_reset():
    stream = io.StringIO()
    handler = Handler(stream)
    handler.set_write_meta(lambda h, meta: h.write_text(f"[{meta.loc.func}] "))
    handler.write(make_meta(), "msg")
    assert stream.getvalue() == "[main] msg\n"

    handler.set_write_meta(None)
    stream.seek(0)
    stream.truncate()
    handler.write(make_meta(), "msg")
    assert stream.getvalue().startswith("WARNING|")


class _Recording(Handler):
    def __init__(self):
        super().__init__(level=Level.TRACE)
        self.events = []

    def before_write(self, meta):
        self.events.append("before")

    def after_write(self, meta):
        self.events.append("after")

    def write_text(self, text):
        self.events.append(text)
        return len(text)


def test_hooks_run_in_order():
    handler = _Recording()
    handler.set_write_meta(lambda h, meta: h.write_text("meta"))
    total = handler.write(make_meta(), "body")
    assert handler.events == ["before", "meta", "body", "after"]
    assert total == len("metabody")


def test_closed_handler_writes_nothing():
    stream = io.StringIO()
    with Handler(stream) as handler:
        assert handler.write_text("abc") == 3
    assert handler.write_text("more") == 0
    assert stream.getvalue() == "abc"