from decimal import Decimal

import pytest

from tablemodel.formats import ColumnFormat, coerce_value, guess_format, is_numeric, resolve_format


@pytest.mark.parametrize(
    "value, expected",
    [
        ("string", ColumnFormat.STRING),
        (1.2334234, ColumnFormat.FLOAT),
        ("1.2334234", ColumnFormat.FLOAT),
        (3, ColumnFormat.INTEGER),
        ("3", ColumnFormat.INTEGER),
        (3.0, ColumnFormat.INTEGER),
        (" 42 ", ColumnFormat.INTEGER),
        ("1e3", ColumnFormat.INTEGER),
        (Decimal("2.50"), ColumnFormat.FLOAT),
        (True, ColumnFormat.INTEGER),
        (None, ColumnFormat.STRING),
        ("nan", ColumnFormat.STRING),
        (float("inf"), ColumnFormat.STRING),
        ("12abc", ColumnFormat.STRING),
    ],
)
def test_guess_format(value, expected):
    assert guess_format(value) is expected


def test_is_numeric_rejects_empty_and_signs_only():
    assert not is_numeric("")
    assert not is_numeric("-")
    assert is_numeric("-.5")


def test_column_format_accepts_placeholders_and_tags():
    assert ColumnFormat("%d") is ColumnFormat.INTEGER
    assert ColumnFormat("integer") is ColumnFormat.INTEGER
    assert ColumnFormat("Float") is ColumnFormat.FLOAT
    assert ColumnFormat("str") is ColumnFormat.STRING
    assert ColumnFormat.FLOAT.tag == "float"

    with pytest.raises(ValueError):
        ColumnFormat("%x")


def test_resolve_format_prefers_declared_format():
    # A stringified number bound to a declared string column stays a string
    columns = {"user_id": "%d", "slug": "%s"}

    assert resolve_format("slug", "123", columns) is ColumnFormat.STRING
    assert resolve_format("user_id", "7", columns) is ColumnFormat.INTEGER
    assert resolve_format("undeclared", "0.5", columns) is ColumnFormat.FLOAT


@pytest.mark.parametrize(
    "value, fmt, expected",
    [
        ("7", ColumnFormat.INTEGER, 7),
        (" 3.9 ", "%d", 3),
        (True, ColumnFormat.INTEGER, 1),
        ("0.5", ColumnFormat.FLOAT, 0.5),
        (12, ColumnFormat.STRING, "12"),
        (b"a\x00b", ColumnFormat.STRING, "a\x00b"),
        (None, ColumnFormat.INTEGER, None),
    ],
)
def test_coerce_value(value, fmt, expected):
    assert coerce_value(value, fmt) == expected


@pytest.mark.parametrize("value, fmt", [("abc", "%d"), ("nan", "%d"), ("abc", "%f"), (float("inf"), "%f")])
def test_coerce_value_rejects_uncoercible(value, fmt):
    with pytest.raises(ValueError):
        coerce_value(value, fmt)
