# The MIT License (MIT)
#
# Copyright (c) The DateTime (DTT) contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - The value types live in one file. The classes 'know' about each other,
#   and keeping them together prevents circular imports.
# - Helpers without knowledge of the value types (calendar math, the
#   format description language, the abbreviation registry) live in
#   their own private modules.
from __future__ import annotations

__version__ = "0.1.0"

import enum
import re
from dataclasses import dataclass, replace as _dc_replace
from datetime import (
    date as _date,
    datetime as _datetime,
    time as _time,
    timedelta as _timedelta,
    timezone as _timezone,
)
from struct import pack, unpack
from time import time_ns
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Mapping,
    no_type_check,
    overload,
)

from . import _format, _math
from ._common import (
    MAX_OFFSET_SECS,
    UTC as _UTC,
    DateTimeError,
    InvalidDate,
    InvalidFormat,
    InvalidTime,
    InvalidTimezone,
    mk_fixed_tzinfo,
)
from ._tz import TIMEZONE_OFFSETS as _TIMEZONE_OFFSETS, lookup_offset as _lookup

__all__ = [
    # Values
    "DateTime",
    "DateTimeBuilder",
    "Duration",
    # Time units
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    # Calendar and timezone helpers
    "is_leap_year",
    "days_in_month",
    "lookup_offset",
    "TIMEZONE_ABBREVIATIONS",
    # Exceptions
    "DateTimeError",
    "InvalidFormat",
    "InvalidTimezone",
    "InvalidDate",
    "InvalidTime",
    # Constants
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    "Weekday",
]


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    def number_days_from_monday(self) -> int:
        """Zero-based position in the week, counting from Monday

        >>> Weekday.SUNDAY.number_days_from_monday()
        6
        """
        return self.value - 1


MONDAY = Weekday.MONDAY
TUESDAY = Weekday.TUESDAY
WEDNESDAY = Weekday.WEDNESDAY
THURSDAY = Weekday.THURSDAY
FRIDAY = Weekday.FRIDAY
SATURDAY = Weekday.SATURDAY
SUNDAY = Weekday.SUNDAY

# Helpers that pre-compute/lookup as much as possible
_object_new = object.__new__
_MAX_DELTA_MICROS = 9999 * 366 * 86_400_000_000
_EPOCH = _datetime(1970, 1, 1)
_weekdays = tuple(Weekday)

TIMEZONE_ABBREVIATIONS: frozenset[str] = frozenset(_TIMEZONE_OFFSETS)
"""All timezone abbreviations known to :func:`lookup_offset`"""


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


@final
class Duration(_ImmutableBase):
    """A signed, exact amount of time with microsecond precision.

    The inputs are normalized, so 90 minutes becomes 1 hour and 30 minutes,
    for example. A day is always 24 hours.

    Examples
    --------
    >>> d = Duration(hours=1, minutes=30)
    Duration(01:30:00)
    >>> d.in_minutes()
    90.0

    Note
    ----
    A shorter way to instantiate a duration is to use the helper functions
    :func:`~dtt.hours`, :func:`~dtt.minutes`, etc.
    """

    __slots__ = ("_total_us",)

    def __init__(
        self,
        *,
        weeks: int = 0,
        days: int = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: int = 0,
    ) -> None:
        us = self._total_us = (
            # Cast individual components to int to avoid floating point errors
            int(weeks * 604_800_000_000)
            + int(days * 86_400_000_000)
            + int(hours * 3_600_000_000)
            + int(minutes * 60_000_000)
            + int(seconds * 1_000_000)
            + int(milliseconds * 1_000)
            + int(microseconds)
        )
        if abs(us) > _MAX_DELTA_MICROS:
            raise ValueError("Duration out of range")

    ZERO: ClassVar[Duration]
    """A duration of zero"""
    MAX: ClassVar[Duration]
    """The maximum possible duration"""
    MIN: ClassVar[Duration]
    """The minimum possible duration"""

    def in_days_of_24h(self) -> float:
        """The total size in days (of exactly 24 hours each)"""
        return self._total_us / 86_400_000_000

    def in_hours(self) -> float:
        """The total size in hours

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d.in_hours()
        1.5
        """
        return self._total_us / 3_600_000_000

    def in_minutes(self) -> float:
        """The total size in minutes

        Example
        -------
        >>> d = Duration(hours=1, minutes=30, seconds=30)
        >>> d.in_minutes()
        90.5
        """
        return self._total_us / 60_000_000

    def in_seconds(self) -> float:
        """The total size in seconds

        Example
        -------
        >>> d = Duration(minutes=2, seconds=1, microseconds=500_000)
        >>> d.in_seconds()
        121.5
        """
        return self._total_us / 1_000_000

    def in_milliseconds(self) -> float:
        """The total size in milliseconds"""
        return self._total_us / 1_000

    def in_microseconds(self) -> int:
        """The total size in microseconds

        >>> d = Duration(seconds=2, microseconds=50)
        >>> d.in_microseconds()
        2_000_050
        """
        return self._total_us

    def in_hrs_mins_secs_micros(self) -> tuple[int, int, int, int]:
        """Convert to a tuple of (hours, minutes, seconds, microseconds).
        All components carry the sign of the duration.

        Example
        -------
        >>> d = Duration(hours=-5, minutes=-30)
        >>> d.in_hrs_mins_secs_micros()
        (-5, -30, 0, 0)
        """
        hours, rem = divmod(abs(self._total_us), 3_600_000_000)
        mins, rem = divmod(rem, 60_000_000)
        secs, us = divmod(rem, 1_000_000)
        return (
            (hours, mins, secs, us)
            if self._total_us >= 0
            else (-hours, -mins, -secs, -us)
        )

    def py_timedelta(self) -> _timedelta:
        """Convert to a :class:`~datetime.timedelta`

        Inverse of :meth:`from_py_timedelta`
        """
        return _timedelta(microseconds=self._total_us)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        """Create from a :class:`~datetime.timedelta`

        Inverse of :meth:`py_timedelta`

        Example
        -------
        >>> Duration.from_py_timedelta(timedelta(seconds=5400))
        Duration(01:30:00)
        """
        return Duration(
            days=td.days, seconds=td.seconds, microseconds=td.microseconds
        )

    def format_common_iso(self) -> str:
        """Format as an ISO 8601 duration with only time units

        Example
        -------
        >>> Duration(hours=1, minutes=30).format_common_iso()
        'PT1H30M'
        """
        hrs, mins, secs, us = abs(self).in_hrs_mins_secs_micros()
        seconds = (
            f"{secs}.{us:06d}".rstrip("0") if us else str(secs)
        )
        return f"{(self._total_us < 0) * '-'}PT" + (
            (
                f"{hrs}H" * bool(hrs)
                + f"{mins}M" * bool(mins)
                + f"{seconds}S" * bool(secs or us)
            )
            or "0S"
        )

    def __add__(self, other: Duration) -> Duration:
        """Add two durations together

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d + Duration(minutes=30)
        Duration(02:00:00)
        """
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._total_us + other._total_us)

    def __sub__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._total_us - other._total_us)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us == other._total_us

    def __hash__(self) -> int:
        return hash(self._total_us)

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us < other._total_us

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us <= other._total_us

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us > other._total_us

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._total_us >= other._total_us

    def __bool__(self) -> bool:
        """True if the value is non-zero"""
        return bool(self._total_us)

    def __mul__(self, other: float) -> Duration:
        """Multiply by a number

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d * 2.5
        Duration(03:45:00)
        """
        if not isinstance(other, (int, float)):
            return NotImplemented
        return Duration(microseconds=int(self._total_us * other))

    def __rmul__(self, other: float) -> Duration:
        return self * other

    def __neg__(self) -> Duration:
        return Duration._from_micros_unchecked(-self._total_us)

    def __pos__(self) -> Duration:
        return self

    @overload
    def __truediv__(self, other: float) -> Duration: ...

    @overload
    def __truediv__(self, other: Duration) -> float: ...

    def __truediv__(self, other: float | Duration) -> Duration | float:
        """Divide by a number or another duration

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d / 2.5
        Duration(00:36:00)
        >>> d / Duration(minutes=30)
        3.0
        """
        if isinstance(other, Duration):
            return self._total_us / other._total_us
        elif isinstance(other, (int, float)):
            return Duration(microseconds=int(self._total_us / other))
        return NotImplemented

    def __abs__(self) -> Duration:
        return Duration._from_micros_unchecked(abs(self._total_us))

    __str__ = format_common_iso

    def __repr__(self) -> str:
        hrs, mins, secs, us = abs(self).in_hrs_mins_secs_micros()
        return (
            f"Duration({'-'*(self._total_us < 0)}{hrs:02}:{mins:02}:{secs:02}"
            + f".{us:06d}".rstrip("0") * bool(us)
            + ")"
        )

    @no_type_check
    def __reduce__(self):
        return _unpkl_duration, (pack("<q", self._total_us),)

    @classmethod
    def _from_micros_unchecked(cls, us: int) -> Duration:
        new = _object_new(cls)
        new._total_us = us
        return new


Duration.ZERO = Duration()
Duration.MAX = Duration._from_micros_unchecked(_MAX_DELTA_MICROS)
Duration.MIN = Duration._from_micros_unchecked(-_MAX_DELTA_MICROS)


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_duration(data: bytes) -> Duration:
    (us,) = unpack("<q", data)
    return Duration(microseconds=us)


@final
class DateTime(_ImmutableBase):
    """A calendar date and time of day, with a fixed UTC offset attached.

    The date and time fields are kept exactly as given ("naive"). The offset
    is only consulted by operations that need the exact moment in time:
    :meth:`convert_to_tz`, :meth:`unix_timestamp`, :meth:`duration_since`
    and :meth:`format_rfc3339`.

    Example
    -------
    >>> DateTime(2023, 4, 21, 9, 30, offset=-6)
    DateTime(2023-04-21 09:30:00-06:00)

    Important
    ---------
    Equality, ordering, and hashing only look at the date and time fields.
    Two values with the same fields but different offsets compare equal,
    even though they denote different moments. To compare moments across
    offsets, use :meth:`unix_timestamp` or :meth:`duration_since`,
    or convert both values to the same offset first.

    No daylight saving time is applied, ever: offsets are fixed.
    """

    __slots__ = ("_py_dt", "_offset")
    _py_dt: _datetime
    _offset: _timezone

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        microsecond: int = 0,
        offset: int | Duration = 0,
    ) -> None:
        self._offset = _load_offset(offset)
        self._py_dt = _combine_checked(
            year, month, day, hour, minute, second, microsecond
        )

    MIN: ClassVar[DateTime]
    """The earliest possible value, at UTC"""
    MAX: ClassVar[DateTime]
    """The latest possible value, at UTC"""

    @classmethod
    def now(cls) -> DateTime:
        """The current time, at UTC"""
        return cls._now_at(_UTC)

    @classmethod
    def now_with_offset(cls, tz: str, /) -> DateTime:
        """The current time, at the fixed offset of a timezone abbreviation

        Example
        -------
        >>> DateTime.now_with_offset("JST")
        DateTime(2024-06-01 21:04:11.283013+09:00)

        Raises :class:`InvalidTimezone` if the abbreviation is unknown.
        See :data:`TIMEZONE_ABBREVIATIONS` for the supported ones.
        """
        return cls._now_at(_lookup(tz))

    @classmethod
    def now_with_custom_offset(cls, hours: int, minutes: int, /) -> DateTime:
        """The current time, at an offset given in hours and minutes.

        Both parts carry the sign of the offset, so ``-3, -30`` means
        ``-03:30``. Mixing signs, ``|hours| > 23`` or ``|minutes| > 59``
        raises :class:`InvalidTimezone`.
        """
        if type(hours) is not int or type(minutes) is not int:
            raise TypeError("hours and minutes must be integers")
        if (
            abs(hours) > 23
            or abs(minutes) > 59
            or (hours < 0 < minutes)
            or (minutes < 0 < hours)
        ):
            raise InvalidTimezone(
                f"Invalid offset: {hours} hours, {minutes} minutes"
            )
        return cls._now_at(mk_fixed_tzinfo(hours * 3600 + minutes * 60))

    @classmethod
    def _now_at(cls, offset: _timezone) -> DateTime:
        secs, nanos = divmod(time_ns(), 1_000_000_000)
        return cls._from_py_unchecked(
            _datetime.fromtimestamp(secs, offset).replace(
                tzinfo=None, microsecond=nanos // 1_000
            ),
            offset,
        )

    @classmethod
    def from_components(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int,
        minute: int,
        second: int,
        offset: int | Duration = 0,
    ) -> DateTime:
        """Create from individual fields.

        Raises :class:`InvalidDate` if the date doesn't exist,
        and :class:`InvalidTime` if the time of day doesn't exist.

        Example
        -------
        >>> DateTime.from_components(2024, 2, 29, 12, 0, 0, hours(1))
        DateTime(2024-02-29 12:00:00+01:00)
        """
        return cls(year, month, day, hour, minute, second, offset=offset)

    def update(self) -> DateTime:
        """The current time, at the same offset as this value"""
        return self._now_at(self._offset)

    @property
    def year(self) -> int:
        return self._py_dt.year

    @property
    def month(self) -> int:
        return self._py_dt.month

    @property
    def day(self) -> int:
        return self._py_dt.day

    @property
    def hour(self) -> int:
        return self._py_dt.hour

    @property
    def minute(self) -> int:
        return self._py_dt.minute

    @property
    def second(self) -> int:
        return self._py_dt.second

    @property
    def microsecond(self) -> int:
        return self._py_dt.microsecond

    @property
    def offset(self) -> Duration:
        """The UTC offset, as a duration

        >>> DateTime(2024, 1, 1, offset=hours(5.5)).offset
        Duration(05:30:00)
        """
        return Duration._from_micros_unchecked(self._offset_secs() * 1_000_000)

    def weekday(self) -> Weekday:
        """The day of the week

        Example
        -------
        >>> DateTime(2024, 1, 15).weekday()
        Weekday.MONDAY
        """
        return _weekdays[self._py_dt.weekday()]

    def iso_week(self) -> int:
        """The ISO 8601 week number (1-53)"""
        return self._py_dt.isocalendar()[1]

    def ordinal(self) -> int:
        """The day of the year (1-366)"""
        return self._py_dt.timetuple().tm_yday

    def py_datetime(self) -> _datetime:
        """Convert to an aware standard library :class:`~datetime.datetime`"""
        return self._py_dt.replace(tzinfo=self._offset)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> DateTime:
        """Create from an aware standard library ``datetime``.

        The inverse of the ``py_datetime()`` method.
        """
        if (offset := d.utcoffset()) is None:
            raise InvalidTimezone(
                "Cannot create from a naive datetime. "
                "Attach a tzinfo, or use DateTime.from_components()."
            )
        return cls._from_py_unchecked(
            _datetime.combine(d.date(), d.time()),
            _offset_from_secs(offset // _timedelta(seconds=1)),
        )

    # ---------------------------------------------------------------------
    # Parsing
    # ---------------------------------------------------------------------

    @classmethod
    def parse(cls, s: str, /) -> DateTime:
        """Parse an RFC 3339 datetime or an ISO 8601 date.

        The result is always at UTC: the date and time fields are
        kept as written, and any offset in the string is discarded.
        Use :meth:`parse_rfc3339` to keep the offset.
        A date without a time is parsed as midnight.

        Example
        -------
        >>> DateTime.parse("2023-09-01T12:00:00+02:00")
        DateTime(2023-09-01 12:00:00+00:00)
        >>> DateTime.parse("2023-09-01")
        DateTime(2023-09-01 00:00:00+00:00)

        Raises :class:`InvalidFormat` if neither format matches.
        """
        if not isinstance(s, str):
            raise InvalidFormat(f"Invalid format: {s!r}")
        try:
            py_dt, _ = _parse_rfc3339(s)
        except InvalidFormat:
            py_dt = None
        if py_dt is None:
            # a date without a time
            py_dt = _datetime.combine(_parse_iso_date(s), _time())
        return cls._from_py_unchecked(py_dt, _UTC)

    @classmethod
    def parse_rfc3339(cls, s: str, /) -> DateTime:
        """Parse an RFC 3339 datetime, keeping its offset.

        Example
        -------
        >>> DateTime.parse_rfc3339("2020-08-15T23:12:00-04:00")
        DateTime(2020-08-15 23:12:00-04:00)
        """
        if not isinstance(s, str):
            raise InvalidFormat(f"Invalid format: {s!r}")
        return cls._from_py_unchecked(*_parse_rfc3339(s))

    @classmethod
    def parse_custom_format(cls, s: str, /, fmt: str) -> DateTime:
        """Parse a string following a format description.

        The result is always at UTC. See :meth:`format` for the
        format description language.

        Example
        -------
        >>> DateTime.parse_custom_format(
        ...     "2024-08-31 15:00:00",
        ...     "[year]-[month]-[day] [hour]:[minute]:[second]",
        ... )
        DateTime(2024-08-31 15:00:00+00:00)
        """
        return cls._from_py_unchecked(_format.parse(s, fmt), _UTC)

    # ---------------------------------------------------------------------
    # Formatting
    # ---------------------------------------------------------------------

    def format(self, fmt: str, /) -> str:
        """Format the date and time fields following a format description.

        Components are written in square brackets, with optional
        ``key:value`` modifiers. ``[[`` is a literal ``[``.

        =====================  ========================================
        Component              Modifiers
        =====================  ========================================
        ``[year]``             ``padding:zero|space|none``,
                               ``repr:full|last_two``
        ``[month]``            ``padding``, ``repr:numerical|long|short``
        ``[day]``              ``padding``
        ``[hour]``             ``padding``, ``repr:24|12``
        ``[minute]``           ``padding``
        ``[second]``           ``padding``
        ``[subsecond]``        (six digits)
        ``[ordinal]``          ``padding``
        ``[weekday]``          ``repr:long|short|monday|sunday``
        ``[week_number]``      ``padding`` (ISO week)
        ``[period]``           ``case:upper|lower``
        ``[offset_hour]``      ``padding``, ``sign:automatic|mandatory``
        ``[offset_minute]``    ``padding``
        =====================  ========================================

        The fields are rendered as they are, never shifted by the offset.
        ``[offset_hour]`` and ``[offset_minute]`` display the attached
        offset itself, so a string can carry its offset without the
        fields being converted.

        Example
        -------
        >>> d = DateTime(2024, 8, 31, 15, 4, 5)
        >>> d.format("[year]-[month]-[day] [hour repr:12]:[minute] [period]")
        '2024-08-31 03:04 PM'

        Raises :class:`InvalidFormat` if the format description is invalid.
        """
        return _format.render(fmt, self._py_dt, self._offset_secs())

    def format_rfc3339(self) -> str:
        """Format as RFC 3339: ``YYYY-MM-DDTHH:MM:SS[.ffffff]±HH:MM``

        A zero offset is written as ``Z``. Fractional seconds are
        only written when non-zero, without trailing zeros.

        Example
        -------
        >>> DateTime(2020, 8, 15, 23, 12, offset=4).format_rfc3339()
        '2020-08-15T23:12:00+04:00'

        Raises :class:`InvalidFormat` if the offset has a seconds component,
        which RFC 3339 can't express.
        """
        offset_secs = self._offset_secs()
        if offset_secs % 60:
            raise InvalidFormat("RFC 3339 does not support offset seconds")
        return (
            self._py_dt.isoformat()[:19]
            + bool(self._py_dt.microsecond)
            * f".{self._py_dt.microsecond:06d}".rstrip("0")
            + (_format_offset(offset_secs) if offset_secs else "Z")
        )

    def format_iso8601(self) -> str:
        """Format the fields as ``YYYY-MM-DDTHH:MM:SS``, without
        fractional seconds or offset"""
        return self._py_dt.isoformat()[:19]

    def format_time_in_timezone(self, tz: str, fmt: str, /) -> str:
        """Convert to the offset of a timezone abbreviation,
        then format following a format description.

        Example
        -------
        >>> d = DateTime(2024, 1, 1, 20, offset=0)
        >>> d.format_time_in_timezone("PST", "[hour repr:12]:[minute] [period]")
        '12:00 PM'
        """
        return self.convert_to_tz(tz).format(fmt)

    def __str__(self) -> str:
        """Same as :meth:`format_rfc3339`"""
        return self.format_rfc3339()

    def __repr__(self) -> str:
        return (
            f"DateTime({self._py_dt.isoformat(' ')}"
            f"{_format_offset(self._offset_secs())})"
        )

    # ---------------------------------------------------------------------
    # Serialization
    # ---------------------------------------------------------------------

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-compatible mapping of the fields and offset.

        The inverse of :meth:`from_dict`.

        >>> DateTime(2024, 1, 15, 14, 30, offset=hours(-5)).to_dict()
        {'datetime': '2024-01-15T14:30:00', 'offset': '-05:00'}
        """
        return {
            "datetime": self._py_dt.isoformat(),
            "offset": _format_offset(self._offset_secs()),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], /) -> DateTime:
        """Create from the mapping produced by :meth:`to_dict`.

        Raises :class:`InvalidFormat` for missing or malformed entries.
        """
        try:
            dt_str = data["datetime"]
            offset_str = data["offset"]
        except (KeyError, TypeError):
            raise InvalidFormat(f"Invalid DateTime mapping: {data!r}") from None
        if (
            not isinstance(dt_str, str)
            or _match_naive_str(dt_str) is None
        ):
            raise InvalidFormat(f"Invalid datetime: {dt_str!r}")
        try:
            py_dt = _datetime.fromisoformat(dt_str)
        except ValueError:
            raise InvalidFormat(f"Invalid datetime: {dt_str!r}") from None
        return cls._from_py_unchecked(py_dt, _parse_offset(offset_str))

    # a custom pickle implementation with a smaller payload
    def __reduce__(self) -> tuple[object, ...]:
        return (
            _unpkl_datetime,
            (
                pack(
                    "<HBBBBBIl",
                    *self._py_dt.timetuple()[:6],
                    self._py_dt.microsecond,
                    self._offset_secs(),
                ),
            ),
        )

    # ---------------------------------------------------------------------
    # Arithmetic
    # ---------------------------------------------------------------------

    def add_days(self, days: int, /) -> DateTime:
        """Shift by a number of calendar days. The offset is unchanged.

        Raises :class:`InvalidDate` if the result is outside
        the years 1-9999.
        """
        if type(days) is not int:
            raise TypeError("days must be an integer")
        return self._shift(days=days)

    def next_day(self) -> DateTime:
        return self.add_days(1)

    def previous_day(self) -> DateTime:
        return self.add_days(-1)

    def add_duration(self, d: Duration, /) -> DateTime:
        """Shift by an exact duration. The offset is unchanged.

        Raises :class:`InvalidDate` if the result is outside
        the years 1-9999.

        Example
        -------
        >>> DateTime(2023, 12, 31, 23, 30).add_duration(hours(1))
        DateTime(2024-01-01 00:30:00+00:00)
        """
        if not isinstance(d, Duration):
            raise TypeError("Expected a Duration")
        return self._shift(microseconds=d._total_us)

    def sub_duration(self, d: Duration, /) -> DateTime:
        """Inverse of :meth:`add_duration`"""
        if not isinstance(d, Duration):
            raise TypeError("Expected a Duration")
        return self._shift(microseconds=-d._total_us)

    def _shift(self, **kwargs: int) -> DateTime:
        try:
            new = self._py_dt + _timedelta(**kwargs)
        except OverflowError:
            raise InvalidDate("Result out of range") from None
        return self._from_py_unchecked(new, self._offset)

    def add_months(self, months: int, /) -> DateTime:
        """Shift by a number of months, keeping the time of day.

        The day is clamped to the length of the resulting month:

        >>> DateTime(2024, 1, 31).add_months(1)
        DateTime(2024-02-29 00:00:00+00:00)
        """
        try:
            new_date = _math.add_months(self._py_dt.date(), months)
        except (ValueError, OverflowError):
            raise InvalidDate("Result out of range") from None
        return self._with_date(new_date)

    def sub_months(self, months: int, /) -> DateTime:
        return self.add_months(-months)

    def add_years(self, years: int, /) -> DateTime:
        """Shift by a number of years, keeping the time of day.
        February 29th becomes February 28th in non-leap years."""
        try:
            new_date = _math.replace_year_saturating(
                self._py_dt.date(), self._py_dt.year + years
            )
        except (ValueError, OverflowError):
            raise InvalidDate("Result out of range") from None
        return self._with_date(new_date)

    def sub_years(self, years: int, /) -> DateTime:
        return self.add_years(-years)

    @overload
    def __sub__(self, other: DateTime) -> Duration: ...

    @overload
    def __sub__(self, other: Duration) -> DateTime: ...

    def __sub__(self, other: DateTime | Duration) -> DateTime | Duration:
        """Subtract a duration, or calculate the exact duration
        since another value (see :meth:`duration_since`)."""
        if isinstance(other, DateTime):
            return self.duration_since(other)
        elif isinstance(other, Duration):
            return self.sub_duration(other)
        return NotImplemented

    def __add__(self, other: Duration) -> DateTime:
        """Same as :meth:`add_duration`"""
        if not isinstance(other, Duration):
            return NotImplemented
        return self.add_duration(other)

    def duration_since(self, other: DateTime, /) -> Duration:
        """The exact duration between two moments, taking both offsets
        into account. Negative if this value is the earlier one.

        Example
        -------
        >>> a = DateTime(2024, 1, 1, 12, offset=0)
        >>> b = DateTime(2024, 1, 1, 12, offset=1)
        >>> a.duration_since(b)
        Duration(01:00:00)
        """
        naive_diff = self._py_dt - other._py_dt
        return Duration(
            microseconds=(naive_diff // _timedelta(microseconds=1))
            - (self._offset_secs() - other._offset_secs()) * 1_000_000
        )

    def unix_timestamp(self) -> int:
        """Whole seconds since 1970-01-01T00:00:00Z, rounded down"""
        delta = self._py_dt - _EPOCH
        return delta.days * 86_400 + delta.seconds - self._offset_secs()

    # ---------------------------------------------------------------------
    # Calendar
    # ---------------------------------------------------------------------

    def set_date(self, year: int, month: int, day: int, /) -> DateTime:
        """Replace the date, keeping the time of day and the offset.

        Raises :class:`InvalidDate` if the date doesn't exist.
        """
        try:
            new_date = _date(year, month, day)
        except ValueError:
            raise InvalidDate(
                f"Invalid date: {year}-{month}-{day}"
            ) from None
        return self._with_date(new_date)

    def set_time(self, hour: int, minute: int, second: int, /) -> DateTime:
        """Replace the time of day, keeping the date and the offset.
        The microseconds are reset to zero.

        Raises :class:`InvalidTime` if the time doesn't exist.
        """
        try:
            new_time = _time(hour, minute, second)
        except ValueError:
            raise InvalidTime(
                f"Invalid time: {hour}:{minute}:{second}"
            ) from None
        return self._from_py_unchecked(
            _datetime.combine(self._py_dt.date(), new_time), self._offset
        )

    def start_of_week(self) -> DateTime:
        """The Monday of the same ISO week, at the same time of day"""
        return self.add_days(-self._py_dt.weekday())

    def end_of_week(self) -> DateTime:
        """The Sunday of the same ISO week, at the same time of day"""
        return self.add_days(6 - self._py_dt.weekday())

    def start_of_month(self) -> DateTime:
        """The first day of the month, at the same time of day"""
        return self._with_date(self._py_dt.date().replace(day=1))

    def end_of_month(self) -> DateTime:
        """The last day of the month, at the same time of day

        >>> DateTime(2024, 2, 10, 8).end_of_month()
        DateTime(2024-02-29 08:00:00+00:00)
        """
        year, month = self._py_dt.year, self._py_dt.month
        return self._with_date(
            _date(year, month, _math.days_in_month(year, month))
        )

    def start_of_year(self) -> DateTime:
        """January 1st of the same year, at the same time of day"""
        return self._with_date(_date(self._py_dt.year, 1, 1))

    def end_of_year(self) -> DateTime:
        """December 31st of the same year, at the same time of day"""
        return self._with_date(_date(self._py_dt.year, 12, 31))

    def is_within_range(self, start: DateTime, end: DateTime, /) -> bool:
        """Whether ``start <= self <= end``, using the ordering
        of the date and time fields"""
        return start <= self <= end

    def _with_date(self, d: _date) -> DateTime:
        return self._from_py_unchecked(
            _datetime.combine(d, self._py_dt.time()), self._offset
        )

    # ---------------------------------------------------------------------
    # Timezones
    # ---------------------------------------------------------------------

    def convert_to_tz(self, tz: str, /) -> DateTime:
        """Express the same moment at the offset of another
        timezone abbreviation.

        Example
        -------
        >>> d = DateTime(2024, 1, 1, 12, offset=hours(-5))
        >>> d.convert_to_tz("CET")
        DateTime(2024-01-01 18:00:00+01:00)

        Raises :class:`InvalidTimezone` if the abbreviation is unknown,
        and :class:`InvalidDate` if the result is outside the years 1-9999.
        """
        new_offset = _lookup(tz)
        shift = new_offset.utcoffset(None) - self._offset.utcoffset(None)  # type: ignore[operator]
        return self._from_py_unchecked(
            self._shift(seconds=shift // _timedelta(seconds=1))._py_dt,
            new_offset,
        )

    # ---------------------------------------------------------------------
    # Comparison
    # ---------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Compare the date and time fields. The offset is ignored.

        Example
        -------
        >>> DateTime(2024, 1, 1, offset=0) == DateTime(2024, 1, 1, offset=3)
        True
        """
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._py_dt == other._py_dt

    def __hash__(self) -> int:
        return hash(self._py_dt)

    def __lt__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._py_dt < other._py_dt

    def __le__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._py_dt <= other._py_dt

    def __gt__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._py_dt > other._py_dt

    def __ge__(self, other: DateTime) -> bool:
        if not isinstance(other, DateTime):
            return NotImplemented
        return self._py_dt >= other._py_dt

    # ---------------------------------------------------------------------
    # Validation of individual fields
    # ---------------------------------------------------------------------

    @staticmethod
    def is_valid_day(s: str, /) -> bool:
        """Whether the string is a day number 1-31 (regardless of month)"""
        return _is_uint_in_range(s, 1, 31)

    @staticmethod
    def is_valid_hour(s: str, /) -> bool:
        return _is_uint_in_range(s, 0, 23)

    @staticmethod
    def is_valid_minute(s: str, /) -> bool:
        return _is_uint_in_range(s, 0, 59)

    @staticmethod
    def is_valid_second(s: str, /) -> bool:
        return _is_uint_in_range(s, 0, 59)

    @staticmethod
    def is_valid_month(s: str, /) -> bool:
        return _is_uint_in_range(s, 1, 12)

    @staticmethod
    def is_valid_microsecond(s: str, /) -> bool:
        return _is_uint_in_range(s, 0, 999_999)

    @staticmethod
    def is_valid_ordinal(s: str, /) -> bool:
        return _is_uint_in_range(s, 1, 366)

    @staticmethod
    def is_valid_iso_week(s: str, /) -> bool:
        return _is_uint_in_range(s, 1, 53)

    @staticmethod
    def is_valid_year(s: str, /) -> bool:
        """Whether the string is a signed 32-bit integer"""
        return (
            isinstance(s, str)
            and (match := _match_int(s)) is not None
            and -(2**31) <= int(match[1] + match[2]) < 2**31
        )

    @staticmethod
    def is_valid_time(s: str, /) -> bool:
        """Whether the string is ``H:M:S`` with valid hour,
        minute, and second numbers"""
        if not isinstance(s, str):
            return False
        parts = s.split(":")
        return (
            len(parts) == 3
            and DateTime.is_valid_hour(parts[0])
            and DateTime.is_valid_minute(parts[1])
            and DateTime.is_valid_second(parts[2])
        )

    @staticmethod
    def is_valid_iso_8601(s: str, /) -> bool:
        """Whether :meth:`parse` would succeed"""
        try:
            DateTime.parse(s)
        except DateTimeError:
            return False
        return True

    # ---------------------------------------------------------------------

    def _offset_secs(self) -> int:
        return self._offset.utcoffset(None) // _timedelta(seconds=1)  # type: ignore[operator]

    @classmethod
    def _from_py_unchecked(cls, d: _datetime, offset: _timezone, /) -> DateTime:
        assert d.tzinfo is None
        self = _object_new(cls)
        self._py_dt = d
        self._offset = offset
        return self


DateTime.MIN = DateTime._from_py_unchecked(_datetime.min, _UTC)
DateTime.MAX = DateTime._from_py_unchecked(_datetime.max, _UTC)


# A separate function is needed for unpickling, because the
# constructor doesn't accept a positional offset argument.
# Also, it allows backwards-compatible changes to the pickling format.
def _unpkl_datetime(data: bytes) -> DateTime:
    *args, micros, offset_secs = unpack("<HBBBBBIl", data)
    return DateTime._from_py_unchecked(
        _datetime(*args, micros), _offset_from_secs(offset_secs)
    )


@final
@dataclass(frozen=True)
class DateTimeBuilder:
    """Build a :class:`DateTime` one field at a time.

    Unset fields default to 1970-01-01 00:00:00 at UTC.
    Every setter returns a new builder.

    Example
    -------
    >>> DateTimeBuilder().year(2024).month(2).day(29).hour(6).build()
    DateTime(2024-02-29 06:00:00+00:00)
    """

    _year: int = 1970
    _month: int = 1
    _day: int = 1
    _hour: int = 0
    _minute: int = 0
    _second: int = 0
    _offset: int | Duration = 0

    def year(self, year: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _year=year)

    def month(self, month: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _month=month)

    def day(self, day: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _day=day)

    def hour(self, hour: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _hour=hour)

    def minute(self, minute: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _minute=minute)

    def second(self, second: int, /) -> DateTimeBuilder:
        return _dc_replace(self, _second=second)

    def offset(self, offset: int | Duration, /) -> DateTimeBuilder:
        return _dc_replace(self, _offset=offset)

    def build(self) -> DateTime:
        """Create the value. Raises the same errors as
        :meth:`DateTime.from_components`."""
        return DateTime.from_components(
            self._year,
            self._month,
            self._day,
            self._hour,
            self._minute,
            self._second,
            self._offset,
        )


def is_leap_year(year: int, /) -> bool:
    """Whether the year has a February 29th (Gregorian rules)"""
    return _math.is_leap(year)


def days_in_month(year: int, month: int, /) -> int:
    """The number of days in the month.

    Raises :class:`InvalidDate` for a month outside 1-12.
    """
    try:
        return _math.days_in_month(year, month)
    except ValueError:
        raise InvalidDate(f"Invalid month: {month}") from None


def lookup_offset(tz: str, /) -> Duration:
    """The fixed UTC offset of a timezone abbreviation.

    The match is exact and case-sensitive. Each abbreviation has exactly
    one meaning, even though some are ambiguous in the real world
    (e.g. ``IST`` is India Standard Time here).

    >>> lookup_offset("NST")
    Duration(-03:30:00)

    Raises :class:`InvalidTimezone` if the abbreviation is unknown.
    """
    return Duration(seconds=_lookup(tz).utcoffset(None) // _timedelta(seconds=1))  # type: ignore[operator]


def _load_offset(offset: int | Duration, /) -> _timezone:
    if isinstance(offset, int):
        secs = offset * 3600
    elif isinstance(offset, Duration):
        if offset._total_us % 1_000_000:
            raise InvalidTimezone("Offset must be a whole number of seconds")
        secs = offset._total_us // 1_000_000
    else:
        raise TypeError(
            "offset must be an int or Duration, e.g. `hours(2.5)`"
        )
    return _offset_from_secs(secs)


def _offset_from_secs(secs: int, /) -> _timezone:
    if abs(secs) > MAX_OFFSET_SECS:
        raise InvalidTimezone("offset must be strictly within 24 hours")
    return mk_fixed_tzinfo(secs)


def _combine_checked(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
) -> _datetime:
    try:
        d = _date(year, month, day)
    except ValueError:
        raise InvalidDate(f"Invalid date: {year}-{month}-{day}") from None
    try:
        t = _time(hour, minute, second, microsecond)
    except ValueError:
        raise InvalidTime(
            f"Invalid time: {hour}:{minute}:{second}.{microsecond}"
        ) from None
    return _datetime.combine(d, t)


def _format_offset(secs: int) -> str:
    sign = "-" if secs < 0 else "+"
    hrs, rem = divmod(abs(secs), 3600)
    mins, secs = divmod(rem, 60)
    return f"{sign}{hrs:02d}:{mins:02d}" + f":{secs:02d}" * bool(secs)


def _parse_offset(s: object) -> _timezone:
    if not isinstance(s, str) or (match := _match_offset(s)) is None:
        raise InvalidFormat(f"Invalid offset: {s!r}")
    sign = -1 if match[1] == "-" else 1
    return _offset_from_secs(
        sign * (int(match[2]) * 3600 + int(match[3]) * 60 + int(match[4] or 0))
    )


def _parse_rfc3339(s: str) -> tuple[_datetime, _timezone]:
    if (match := _match_rfc3339(s)) is None:
        raise InvalidFormat(f"Invalid format: {s!r}")
    micros = int(match[7][:6].ljust(6, "0")) if match[7] else 0
    offset_secs = 0
    if match[9]:
        offset_secs = int(match[9]) * 3600 + int(match[10]) * 60
        if match[8] == "-":
            offset_secs = -offset_secs
    try:
        py_dt = _datetime(*map(int, match.groups()[:6]), micros)  # type: ignore[misc]
    except ValueError:
        raise InvalidFormat(f"Invalid format: {s!r}") from None
    return py_dt, mk_fixed_tzinfo(offset_secs)


def _parse_iso_date(s: str) -> _date:
    try:
        if match := _match_calendar_date(s):
            return _date(int(match[1]), int(match[3]), int(match[4]))
        elif match := _match_ordinal_date(s):
            year, ordinal = int(match[1]), int(match[2])
            if not 1 <= ordinal <= 365 + _math.is_leap(year):
                raise ValueError("ordinal out of range")
            return _date.fromordinal(_date(year, 1, 1).toordinal() + ordinal - 1)
        elif match := _match_week_date(s):
            return _date.fromisocalendar(
                int(match[1]), int(match[3]), int(match[4])
            )
    except ValueError:
        pass
    raise InvalidFormat(f"Invalid format: {s!r}")


def _is_uint_in_range(s: str, lo: int, hi: int) -> bool:
    return (
        isinstance(s, str)
        and (match := _match_uint(s)) is not None
        and lo <= int(match[1]) <= hi
    )


# Leading zeros are allowed. Ten significant digits exceed any range checked.
_match_uint = re.compile(r"\+?0*(\d{1,10})", re.ASCII).fullmatch
_match_int = re.compile(r"([+-]?)0*(\d{1,10})", re.ASCII).fullmatch
_match_rfc3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:[Zz]|([+-])([01]\d|2[0-3]):([0-5]\d))",
    re.ASCII,
).fullmatch
# The extended or basic form is fixed by the first separator.
_match_calendar_date = re.compile(
    r"(\d{4})(-?)(\d{2})\2(\d{2})", re.ASCII
).fullmatch
_match_ordinal_date = re.compile(r"(\d{4})-?(\d{3})", re.ASCII).fullmatch
_match_week_date = re.compile(
    r"(\d{4})(-?)W(\d{2})\2([1-7])", re.ASCII
).fullmatch
_match_naive_str = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{6})?", re.ASCII
).fullmatch
_match_offset = re.compile(
    r"([+-])([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?", re.ASCII
).fullmatch


def weeks(i: int, /) -> Duration:
    """Create a :class:`~Duration` with the given number of weeks.
    ``weeks(1) == Duration(weeks=1)``
    """
    return Duration(weeks=i)


def days(i: int, /) -> Duration:
    """Create a :class:`~Duration` with the given number of 24-hour days.
    ``days(1) == Duration(days=1)``
    """
    return Duration(days=i)


def hours(i: float, /) -> Duration:
    """Create a :class:`~Duration` with the given number of hours.
    ``hours(1) == Duration(hours=1)``
    """
    return Duration(hours=i)


def minutes(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of minutes.
    ``minutes(1) == Duration(minutes=1)``
    """
    return Duration(minutes=i)


def seconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of seconds.
    ``seconds(1) == Duration(seconds=1)``
    """
    return Duration(seconds=i)


def milliseconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of milliseconds.
    ``milliseconds(1) == Duration(milliseconds=1)``
    """
    return Duration(milliseconds=i)


def microseconds(i: int, /) -> Duration:
    """Create a :class:`Duration` with the given number of microseconds.
    ``microseconds(1) == Duration(microseconds=1)``
    """
    return Duration(microseconds=i)


# We expose the public members in the root of the module.
# For clarity, we remove the "_pydtt" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if getattr(member, "__module__", None) == __name__:  # pragma: no branch
        member.__module__ = "dtt"

# clear up loop variables so they don't leak into the namespace
del name
del member

for _unpkl in (_unpkl_duration, _unpkl_datetime):
    _unpkl.__module__ = "dtt"


# disable further subclassing
final(_ImmutableBase)


def _patch_time_frozen(dt: DateTime) -> None:
    global time_ns

    def time_ns() -> int:
        return dt.unix_timestamp() * 1_000_000_000 + dt.microsecond * 1_000


def _patch_time_keep_ticking(dt: DateTime) -> None:
    global time_ns

    _patched_at = time_ns()
    _time_ns = time_ns

    def time_ns() -> int:
        return (
            dt.unix_timestamp() * 1_000_000_000
            + dt.microsecond * 1_000
            + _time_ns()
            - _patched_at
        )


def _unpatch_time() -> None:
    global time_ns

    from time import time_ns
