import pytest
from hypothesis import given
from hypothesis.strategies import integers, text

from dtt import DateTime

_RANGES = {
    DateTime.is_valid_day: (1, 31),
    DateTime.is_valid_hour: (0, 23),
    DateTime.is_valid_minute: (0, 59),
    DateTime.is_valid_second: (0, 59),
    DateTime.is_valid_month: (1, 12),
    DateTime.is_valid_microsecond: (0, 999_999),
    DateTime.is_valid_ordinal: (1, 366),
    DateTime.is_valid_iso_week: (1, 53),
}


@pytest.mark.parametrize("check", list(_RANGES), ids=lambda f: f.__name__)
def test_range_boundaries(check):
    lo, hi = _RANGES[check]
    assert check(str(lo))
    assert check(str(hi))
    assert not check(str(hi + 1))
    if lo > 0:
        assert not check(str(lo - 1))
    assert not check("-1")


@pytest.mark.parametrize(
    "s, expect",
    [
        ("13", False),
        ("12", True),
        ("1", True),
        ("0", False),
        ("01", True),
        ("+5", True),
        ("0000000000012", True),
        ("", False),
        ("a", False),
        ("1.0", False),
        (" 5", False),
        ("5 ", False),
        ("-0", False),
        ("٥", False),
        ("99999999999999999999", False),
    ],
)
def test_month_examples(s, expect):
    assert DateTime.is_valid_month(s) is expect


@pytest.mark.parametrize(
    "s, expect",
    [
        ("2024", True),
        ("0", True),
        ("-1", True),
        ("+10", True),
        ("-0", True),
        ("2147483647", True),
        ("-2147483648", True),
        ("2147483648", False),
        ("-2147483649", False),
        ("000002147483647", True),
        ("99999999999", False),
        ("", False),
        ("-", False),
        ("abc", False),
        ("20.24", False),
    ],
)
def test_year(s, expect):
    assert DateTime.is_valid_year(s) is expect


@pytest.mark.parametrize(
    "s, expect",
    [
        ("12:30:45", True),
        ("00:00:00", True),
        ("23:59:59", True),
        ("1:2:3", True),
        ("24:00:00", False),
        ("12:60:00", False),
        ("12:30:60", False),
        ("12:30", False),
        ("12:30:45:00", False),
        ("12:30:45.5", False),
        ("", False),
        ("::", False),
        ("12-30-45", False),
    ],
)
def test_time(s, expect):
    assert DateTime.is_valid_time(s) is expect


@pytest.mark.parametrize(
    "s, expect",
    [
        ("2023-09-01T12:00:00Z", True),
        ("2023-09-01T12:00:00+02:00", True),
        ("2023-09-01", True),
        ("not-a-date", False),
        ("2023-02-29", False),
        ("20230901", True),
        ("2023-0901", False),
        ("2023W35-5", False),
    ],
)
def test_iso_8601(s, expect):
    assert DateTime.is_valid_iso_8601(s) is expect


@given(integers(-10**12, 10**12))
def test_matches_integer_range(n):
    assert DateTime.is_valid_hour(str(n)) is (0 <= n <= 23)
    assert DateTime.is_valid_microsecond(str(n)) is (0 <= n <= 999_999)
    assert DateTime.is_valid_year(str(n)) is (-(2**31) <= n < 2**31)


@given(text())
def test_never_raises(s):
    for check in [
        *_RANGES,
        DateTime.is_valid_year,
        DateTime.is_valid_time,
        DateTime.is_valid_iso_8601,
    ]:
        assert check(s) in (True, False)


@pytest.mark.parametrize("value", [None, 5, b"5", 5.0])
def test_not_a_string(value):
    assert DateTime.is_valid_day(value) is False
    assert DateTime.is_valid_year(value) is False
    assert DateTime.is_valid_time(value) is False
    assert DateTime.is_valid_iso_8601(value) is False
