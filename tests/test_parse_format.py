from datetime import timedelta, timezone

import pytest
from hypothesis import given
from hypothesis.strategies import text

from dtt import DateTime, Duration, InvalidFormat, hours, minutes, seconds

from .common import naive_datetimes, offset_minutes


class TestParse:

    def test_utc(self):
        d = DateTime.parse("2023-09-01T12:00:00Z")
        assert (d.year, d.month, d.day) == (2023, 9, 1)
        assert (d.hour, d.minute, d.second) == (12, 0, 0)
        assert d.offset == Duration.ZERO

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("2023-09-01T12:00:00+02:00", DateTime(2023, 9, 1, 12)),
            ("2023-09-01t12:00:00z", DateTime(2023, 9, 1, 12)),
            (
                "2023-09-01T12:00:00.5-03:30",
                DateTime(2023, 9, 1, 12, microsecond=500_000),
            ),
            (
                "2023-09-01T12:00:00.123456789Z",
                DateTime(2023, 9, 1, 12, microsecond=123_456),
            ),
            ("0001-01-01T00:00:00+23:59", DateTime(1, 1, 1)),
        ],
    )
    def test_offset_is_discarded(self, s, expect):
        d = DateTime.parse(s)
        assert d == expect
        assert d.offset == Duration.ZERO

    @pytest.mark.parametrize(
        "s, expect",
        [
            ("2023-09-01", DateTime(2023, 9, 1)),
            ("20230901", DateTime(2023, 9, 1)),
            ("2023-244", DateTime(2023, 9, 1)),
            ("2024-366", DateTime(2024, 12, 31)),
            ("2023-W35-5", DateTime(2023, 9, 1)),
            ("2023W355", DateTime(2023, 9, 1)),
            ("2024-02-29", DateTime(2024, 2, 29)),
        ],
    )
    def test_date_only(self, s, expect):
        d = DateTime.parse(s)
        assert d == expect
        assert d.offset == Duration.ZERO

    @pytest.mark.parametrize(
        "s",
        [
            "not-a-date",
            "",
            "2023-09-01T12:00:00",
            "2023-09-01T12:00Z",
            "2023-09-01T24:00:00Z",
            "2023-09-01T12:00:00+24:00",
            "2023-09-01T12:00:00+0200",
            "2023-02-29",
            "2023-13-01",
            "2023-366",
            "2023-000",
            "2023-W54-1",
            "2023-W35-8",
            "2023-9-1",
            " 2023-09-01",
            "2023-09-01\n",
            "２０２３-09-01",
            "+2023-09-01",
            # mixed extended and basic forms
            "2024-0115",
            "202401-15",
            "2024W03-1",
            "2024-W031",
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(InvalidFormat):
            DateTime.parse(s)
        assert not DateTime.is_valid_iso_8601(s)

    def test_not_a_string(self):
        with pytest.raises(InvalidFormat):
            DateTime.parse(None)  # type: ignore[arg-type]

    @given(text())
    def test_never_unexpected_error(self, s):
        assert DateTime.is_valid_iso_8601(s) in (True, False)

    @given(naive_datetimes, offset_minutes)
    def test_keeps_fields_of_rfc3339(self, dt, offset_mins):
        d = DateTime.from_py_datetime(
            dt.replace(tzinfo=timezone(timedelta(minutes=offset_mins)))
        )
        parsed = DateTime.parse(d.format_rfc3339())
        assert parsed == d
        assert parsed.offset == Duration.ZERO


class TestParseRfc3339:

    @pytest.mark.parametrize(
        "s, expect, offset",
        [
            (
                "2020-08-15T23:12:00-04:00",
                DateTime(2020, 8, 15, 23, 12),
                hours(-4),
            ),
            ("2020-08-15T23:12:00Z", DateTime(2020, 8, 15, 23, 12), Duration.ZERO),
            (
                "2020-08-15T23:12:00.25+05:45",
                DateTime(2020, 8, 15, 23, 12, microsecond=250_000),
                Duration(hours=5, minutes=45),
            ),
        ],
    )
    def test_valid(self, s, expect, offset):
        d = DateTime.parse_rfc3339(s)
        assert d == expect
        assert d.offset == offset

    @pytest.mark.parametrize(
        "s", ["2020-08-15", "2020-08-15T23:12:00", "2020-08-15T23:12:00+4:00"]
    )
    def test_invalid(self, s):
        with pytest.raises(InvalidFormat):
            DateTime.parse_rfc3339(s)

    @given(naive_datetimes, offset_minutes)
    def test_inverse_of_format(self, dt, offset_mins):
        d = DateTime.from_py_datetime(
            dt.replace(tzinfo=timezone(timedelta(minutes=offset_mins)))
        )
        parsed = DateTime.parse_rfc3339(d.format_rfc3339())
        assert parsed == d
        assert parsed.offset == d.offset


class TestFormatRfc3339:

    @pytest.mark.parametrize(
        "d, expect",
        [
            (DateTime(2020, 8, 15, 23, 12, offset=4), "2020-08-15T23:12:00+04:00"),
            (DateTime(2020, 8, 15, 23, 12), "2020-08-15T23:12:00Z"),
            (
                DateTime(2020, 8, 15, 23, 12, microsecond=450, offset=hours(-3.5)),
                "2020-08-15T23:12:00.00045-03:30",
            ),
            (
                DateTime(2020, 8, 15, microsecond=500_000),
                "2020-08-15T00:00:00.5Z",
            ),
            (DateTime(5, 1, 1), "0005-01-01T00:00:00Z"),
        ],
    )
    def test_valid(self, d, expect):
        assert d.format_rfc3339() == expect
        assert str(d) == expect

    def test_offset_seconds(self):
        d = DateTime(2020, 8, 15, offset=seconds(3601))
        with pytest.raises(InvalidFormat):
            d.format_rfc3339()


@pytest.mark.parametrize(
    "d, expect",
    [
        (
            DateTime(2020, 8, 15, 23, 12, 5, microsecond=9, offset=2),
            "2020-08-15T23:12:05",
        ),
        (DateTime(5, 1, 1), "0005-01-01T00:00:00"),
    ],
)
def test_format_iso8601(d, expect):
    assert d.format_iso8601() == expect


class TestFormat:

    D = DateTime(2024, 8, 31, 15, 4, 5, microsecond=123, offset=hours(-3.5))

    @pytest.mark.parametrize(
        "fmt, expect",
        [
            ("[year]-[month]-[day] [hour]:[minute]:[second]", "2024-08-31 15:04:05"),
            ("[hour repr:12]:[minute] [period]", "03:04 PM"),
            ("[hour repr:12 padding:none][period case:lower]", "3pm"),
            ("[year repr:last_two]", "24"),
            ("[month repr:long] [month repr:short]", "August Aug"),
            ("[day padding:space]/[month padding:none]", "31/8"),
            ("[second].[subsecond]", "05.000123"),
            ("[ordinal]", "244"),
            ("[weekday]", "Saturday"),
            ("[weekday repr:short]", "Sat"),
            ("[weekday repr:monday]", "6"),
            ("[weekday repr:sunday]", "7"),
            ("[week_number]", "35"),
            ("[offset_hour]:[offset_minute]", "-03:30"),
            ("[[[year]]", "[2024]"),
            ("no components", "no components"),
            ("", ""),
        ],
    )
    def test_components(self, fmt, expect):
        assert self.D.format(fmt) == expect

    @pytest.mark.parametrize(
        "d, fmt, expect",
        [
            (DateTime(2024, 1, 1, offset=2), "[offset_hour]", "02"),
            (DateTime(2024, 1, 1, offset=2), "[offset_hour sign:mandatory]", "+02"),
            (DateTime(2024, 1, 1), "[offset_hour sign:mandatory]", "+00"),
            (DateTime(5, 1, 1), "[year]", "0005"),
            (DateTime(5, 1, 1), "[year padding:none]", "5"),
            (DateTime(5, 1, 1), "[year padding:space]", "   5"),
            (DateTime(2024, 1, 1, 0), "[hour repr:12] [period]", "12 AM"),
            (DateTime(2024, 1, 1, 12), "[hour repr:12] [period]", "12 PM"),
            (DateTime(2024, 1, 5), "[ordinal padding:none]", "5"),
            (DateTime(2024, 1, 7), "[weekday repr:sunday]", "1"),
        ],
    )
    def test_modifiers(self, d, fmt, expect):
        assert d.format(fmt) == expect

    def test_fields_are_not_shifted(self):
        d = DateTime(2024, 1, 1, 12, offset=5)
        assert d.format("[hour]:[minute]") == "12:00"

    @pytest.mark.parametrize(
        "fmt",
        [
            "[yeer]",
            "[year",
            "[]",
            "[ ]",
            "[year [month]]",
            "[year foo:bar]",
            "[year repr]",
            "[hour repr:13]",
            "[year repr:full repr:full]",
            "[subsecond padding:zero]",
        ],
    )
    def test_invalid_description(self, fmt):
        with pytest.raises(InvalidFormat, match="format description"):
            self.D.format(fmt)

    @pytest.mark.parametrize("fmt", [None, ["[year]"], {"[year]": 1}])
    def test_description_not_a_string(self, fmt):
        with pytest.raises(InvalidFormat, match="format description"):
            self.D.format(fmt)


class TestParseCustomFormat:

    @pytest.mark.parametrize(
        "s, fmt, expect",
        [
            (
                "2024-08-31 15:00:00",
                "[year]-[month]-[day] [hour]:[minute]:[second]",
                DateTime(2024, 8, 31, 15),
            ),
            (
                "08/31/2024 03:04 PM",
                "[month]/[day]/[year] [hour repr:12]:[minute] [period]",
                DateTime(2024, 8, 31, 15, 4),
            ),
            (
                "12:30 am 2024-01-01",
                "[hour repr:12]:[minute] [period case:lower] [year]-[month]-[day]",
                DateTime(2024, 1, 1, 0, 30),
            ),
            (
                "31 August 2024, 10h",
                "[day] [month repr:long] [year], [hour]h",
                DateTime(2024, 8, 31, 10),
            ),
            (
                "Sat 31 Aug 2024 10",
                "[weekday repr:short] [day] [month repr:short] [year] [hour]",
                DateTime(2024, 8, 31, 10),
            ),
            ("2024-244 06", "[year]-[ordinal] [hour]", DateTime(2024, 8, 31, 6)),
            (
                "2024-01-01 00:00:00.5",
                "[year]-[month]-[day] [hour]:[minute]:[second].[subsecond]",
                DateTime(2024, 1, 1, microsecond=500_000),
            ),
            (
                "2024-01-01 10 +05:30",
                "[year]-[month]-[day] [hour] [offset_hour]:[offset_minute]",
                DateTime(2024, 1, 1, 10),
            ),
            (
                " 5/1/2024 9",
                "[day padding:space]/[month padding:none]/[year] [hour padding:none]",
                DateTime(2024, 1, 5, 9),
            ),
            (
                "[2024-01-01 00]",
                "[[[year]-[month]-[day] [hour]]",
                DateTime(2024, 1, 1),
            ),
            (
                "2024-01-01 10 + 5:30",
                "[year]-[month]-[day] [hour] "
                "[offset_hour padding:space sign:mandatory]:[offset_minute]",
                DateTime(2024, 1, 1, 10),
            ),
        ],
    )
    def test_valid(self, s, fmt, expect):
        d = DateTime.parse_custom_format(s, fmt)
        assert d == expect
        assert d.offset == Duration.ZERO

    @pytest.mark.parametrize(
        "s, fmt",
        [
            # input doesn't match
            ("2024/08/31 15", "[year]-[month]-[day] [hour]"),
            ("2024-08-31 15 extra", "[year]-[month]-[day] [hour]"),
            ("", "[year]-[month]-[day] [hour]"),
            # invalid values
            ("2024-02-30 00", "[year]-[month]-[day] [hour]"),
            ("2024-01-01 24", "[year]-[month]-[day] [hour]"),
            ("2024-01-01 13 PM", "[year]-[month]-[day] [hour repr:12] [period]"),
            ("2023-366 00", "[year]-[ordinal] [hour]"),
            # space padding fills exactly the field width
            ("2024-01-       5 00", "[year]-[month]-[day padding:space] [hour]"),
            ("2024-01-5 00", "[year]-[month]-[day padding:space] [hour]"),
            ("2024-01- 15 00", "[year]-[month]-[day padding:space] [hour]"),
            # missing required fields
            ("2024-08-31", "[year]-[month]-[day]"),
            ("08-31 10", "[month]-[day] [hour]"),
            ("2024-08 10", "[year]-[month] [hour]"),
            ("2024-01-01 03", "[year]-[month]-[day] [hour repr:12]"),
            # ambiguous or inconsistent
            ("24-01-01 00", "[year repr:last_two]-[month]-[day] [hour]"),
            (
                "2024 2025-01-01 00",
                "[year] [year]-[month]-[day] [hour]",
            ),
            (
                "Fri 31 Aug 2024 10",
                "[weekday repr:short] [day] [month repr:short] [year] [hour]",
            ),
            ("2024-08-31 00 W01", "[year]-[month]-[day] [hour] W[week_number]"),
            ("2024-08-31-245 00", "[year]-[month]-[day]-[ordinal] [hour]"),
        ],
    )
    def test_invalid(self, s, fmt):
        with pytest.raises(InvalidFormat):
            DateTime.parse_custom_format(s, fmt)

    def test_invalid_description(self):
        with pytest.raises(InvalidFormat, match="format description"):
            DateTime.parse_custom_format("2024", "[yeer]")

    def test_not_a_string(self):
        with pytest.raises(InvalidFormat):
            DateTime.parse_custom_format(
                None, "[year]-[month]-[day] [hour]"  # type: ignore[arg-type]
            )

    @pytest.mark.parametrize("fmt", [None, ["[year]"], {"[year]": 1}])
    def test_description_not_a_string(self, fmt):
        with pytest.raises(InvalidFormat, match="format description"):
            DateTime.parse_custom_format("2024-01-01 00", fmt)

    @given(naive_datetimes)
    def test_inverse_of_format(self, dt):
        fmt = "[year]-[month]-[day]T[hour]:[minute]:[second].[subsecond]"
        d = DateTime(
            dt.year,
            dt.month,
            dt.day,
            dt.hour,
            dt.minute,
            dt.second,
            microsecond=dt.microsecond,
            offset=minutes(90),
        )
        parsed = DateTime.parse_custom_format(d.format(fmt), fmt)
        assert parsed == d
        assert parsed.offset == Duration.ZERO
