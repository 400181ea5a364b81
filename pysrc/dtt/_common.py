from __future__ import annotations

from datetime import timedelta as _timedelta, timezone as _timezone
from functools import lru_cache

UTC = _timezone.utc
# Offsets are limited to whole seconds strictly within one day
MAX_OFFSET_SECS = 86_399


# We cache fixed-offset tzinfo objects to avoid creating multiple identical ones.
# It's very common to only have whole-hour offsets, so this helps a lot.
@lru_cache
def mk_fixed_tzinfo(secs: int, /) -> _timezone:
    if secs == 0:
        return UTC
    return _timezone(_timedelta(seconds=secs))


class DateTimeError(ValueError):
    """Base class for all errors raised by this library"""

    _default_msg: str = "DateTime error"

    def __init__(self, msg: str | None = None) -> None:
        super().__init__(self._default_msg if msg is None else msg)


class InvalidFormat(DateTimeError):
    """A string or format description could not be parsed"""

    _default_msg = "Invalid date format"


class InvalidTimezone(DateTimeError):
    """An unknown timezone abbreviation or an out-of-range offset"""

    _default_msg = "Invalid or unsupported timezone; DST not supported"


class InvalidDate(DateTimeError):
    """A date that doesn't exist, or is outside the supported range"""

    _default_msg = "Invalid date"


class InvalidTime(DateTimeError):
    """A time of day that doesn't exist"""

    _default_msg = "Invalid time"
