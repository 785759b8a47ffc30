import pytest

from haclog.printf_spec import (
    DYNAMIC,
    LONG_DOUBLE_SIZE,
    PLACEHOLDER_SIZE,
    FormatError,
    FormatType,
    PrintfLocation,
    SpecFlags,
    count_params,
    generate_primitive,
    round_to_pow2,
    spec_param_size,
)


@pytest.fixture
def loc():
    return PrintfLocation(file="main.c", func="main", line=42, level=512)


def test_round_to_pow2_pinned():
    assert round_to_pow2(13, 8) == 16
    assert round_to_pow2(16, 8) == 16


@pytest.mark.parametrize("value", range(0, 70))
@pytest.mark.parametrize("round_to", [1, 2, 8, 64])
def test_round_to_pow2_invariants(value, round_to):
    result = round_to_pow2(value, round_to)
    assert result % round_to == 0
    assert value <= result < value + round_to


def test_round_to_pow2_rejects_non_power():
    with pytest.raises(ValueError):
        round_to_pow2(5, 3)


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("no specifiers", (0, 0)),
        ("100%%", (0, 0)),
        ("%d %s", (2, 2)),
        ("%*d", (1, 2)),
        ("%.*s", (1, 2)),
        ("%*.*f", (1, 3)),
        ("%% %d %%", (1, 1)),
    ],
)
def test_count_params(fmt, expected):
    assert count_params(fmt) == expected


@pytest.mark.parametrize("fmt", ["%q", "value %", "%llld", "%5"])
def test_count_params_errors(fmt):
    with pytest.raises(FormatError):
        count_params(fmt)


def test_spec_fields(loc):
    fmt = "x=%-+ #010.5lld!"
    prim = generate_primitive(fmt, loc)
    (spec,) = prim.specs
    assert spec.flags == (
        SpecFlags.LEFT | SpecFlags.PLUS | SpecFlags.SPACE | SpecFlags.SPECIAL | SpecFlags.ZEROPAD
    )
    assert spec.width == 10
    assert spec.precision == 5
    assert spec.length == "ll"
    assert spec.type == "d"
    assert spec.fmt_type == FormatType.LONGLONG
    assert spec.text(fmt) == "%-+ #010.5lld"
    assert spec.pos_begin == fmt.index("%")
    assert spec.pos_end == fmt.index("!")


def test_dynamic_width_and_precision(loc):
    prim = generate_primitive("%*.*s", loc)
    spec = prim.specs[0]
    assert spec.width == DYNAMIC
    assert spec.precision == DYNAMIC
    assert spec.fmt_type == FormatType.STR
    assert prim.num_args == 3
    assert spec_param_size(spec) == 3 * PLACEHOLDER_SIZE


@pytest.mark.parametrize(
    "fmt, fmt_type",
    [
        ("%d", FormatType.INT),
        ("%hhi", FormatType.CHAR),
        ("%hd", FormatType.SHORT),
        ("%ld", FormatType.LONG),
        ("%jd", FormatType.LONGLONG),
        ("%zd", FormatType.SIZE),
        ("%td", FormatType.PTRDIFF),
        ("%u", FormatType.UINT),
        ("%hhx", FormatType.UCHAR),
        ("%ho", FormatType.USHORT),
        ("%lX", FormatType.ULONG),
        ("%llu", FormatType.ULONGLONG),
        ("%ju", FormatType.ULONGLONG),
        ("%f", FormatType.DOUBLE),
        ("%Lg", FormatType.LONG_DOUBLE),
        ("%c", FormatType.CHAR),
        ("%s", FormatType.STR),
        ("%p", FormatType.PTR),
        ("%lf", FormatType.NONE),
        ("%hs", FormatType.NONE),
        ("%n", FormatType.NONE),
    ],
)
def test_format_types(loc, fmt, fmt_type):
    assert generate_primitive(fmt, loc).specs[0].fmt_type == fmt_type


def test_param_sizes(loc):
    prim = generate_primitive("%d %Lf %s %*d", loc)
    sizes = [spec_param_size(s) for s in prim.specs]
    assert sizes == [
        PLACEHOLDER_SIZE,
        LONG_DOUBLE_SIZE,
        PLACEHOLDER_SIZE,
        2 * PLACEHOLDER_SIZE,
    ]
    assert prim.param_size == sum(sizes)


def test_primitive_counts(loc):
    fmt = "a %d b %*.3f c %%"
    prim = generate_primitive(fmt, loc)
    assert prim.num_params == 2
    assert prim.num_args == 3
    assert prim.fmt_len == len(fmt)
    assert (prim.num_params, prim.num_args) == count_params(fmt)


def test_generate_requires_location():
    with pytest.raises(FormatError):
        generate_primitive("%d", None)


def test_generate_rejects_bad_format(loc):
    with pytest.raises(FormatError):
        generate_primitive("%y", loc)


@pytest.mark.parametrize(
    "fmt, name",
    [
        ("%lld", "long long int"),
        ("%Lf", "long double"),
        ("%zu", "size_t"),
        ("%s", "char*"),
        ("%p", "void*"),
        ("%hn", "short int*"),
    ],
)
def test_type_name(loc, fmt, name):
    assert generate_primitive(fmt, loc).specs[0].type_name() == name


def test_describe(loc):
    prim = generate_primitive("v=%-5.*d", loc)
    lines = prim.describe().splitlines()
    assert lines[0] == "-" * 32
    assert lines[1] == "v=%-5.*d"
    assert lines[2] == f"total param size: {prim.param_size}"
    assert lines[3] == "512|main.c:42|main"
    assert lines[4] == "[%-5.*d]: %[-][5][*]int"
    assert len(lines) == 5