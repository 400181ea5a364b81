"""Compiling, rendering, and parsing bracketed format descriptions.

A format description mixes literal text with components in square brackets,
optionally followed by ``key:value`` modifiers:

    ``[year]-[month]-[day] [hour repr:12]:[minute] [period]``

A literal ``[`` is written as ``[[``.
"""

from __future__ import annotations

import re
from datetime import date as _date, datetime as _datetime
from functools import lru_cache
from typing import Mapping, NamedTuple, NoReturn, Union

from ._common import InvalidFormat

__all__ = ["compile_format", "render", "parse"]

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
_PADDING = ("zero", "space", "none")

# component -> (width, allowed modifiers and their values).
# The first value of each modifier is its default.
_COMPONENTS: Mapping[str, tuple[int, Mapping[str, tuple[str, ...]]]] = {
    "year": (4, {"padding": _PADDING, "repr": ("full", "last_two")}),
    "month": (
        2,
        {"padding": _PADDING, "repr": ("numerical", "long", "short")},
    ),
    "day": (2, {"padding": _PADDING}),
    "hour": (2, {"padding": _PADDING, "repr": ("24", "12")}),
    "minute": (2, {"padding": _PADDING}),
    "second": (2, {"padding": _PADDING}),
    "subsecond": (6, {}),
    "ordinal": (3, {"padding": _PADDING}),
    "weekday": (0, {"repr": ("long", "short", "monday", "sunday")}),
    "week_number": (2, {"padding": _PADDING}),
    "period": (0, {"case": ("upper", "lower")}),
    "offset_hour": (
        2,
        {"padding": _PADDING, "sign": ("automatic", "mandatory")},
    ),
    "offset_minute": (2, {"padding": _PADDING}),
}


class LiteralText(NamedTuple):
    text: str


class Component(NamedTuple):
    name: str
    modifiers: Mapping[str, str]

    def mod(self, key: str) -> str:
        return self.modifiers.get(key) or _COMPONENTS[self.name][1][key][0]


FormatItem = Union[LiteralText, Component]


def _format_err(msg: str) -> NoReturn:
    raise InvalidFormat(f"Invalid format description: {msg}")


def _compile_component(body: str) -> Component:
    name, *mods = body.split()
    try:
        _, allowed = _COMPONENTS[name]
    except KeyError:
        _format_err(f"unknown component {name!r}")
    modifiers: dict[str, str] = {}
    for mod in mods:
        key, sep, value = mod.partition(":")
        if not sep or key not in allowed or value not in allowed[key]:
            _format_err(f"invalid modifier {mod!r} for [{name}]")
        if key in modifiers:
            _format_err(f"duplicate modifier {key!r} for [{name}]")
        modifiers[key] = value
    return Component(name, modifiers)


def compile_format(fmt: str, /) -> tuple[FormatItem, ...]:
    """Compile a format description into a sequence of items.

    Raises :class:`InvalidFormat` for unknown components or modifiers,
    and for unbalanced brackets.
    """
    _check_description(fmt)
    return _compile_format(fmt)


def _check_description(fmt: object) -> None:
    # must run before any cached call, which needs a hashable key
    if not isinstance(fmt, str):
        _format_err(f"expected a string, got {type(fmt).__name__}")


@lru_cache(maxsize=128)
def _compile_format(fmt: str) -> tuple[FormatItem, ...]:
    items: list[FormatItem] = []
    literal = ""
    pos = 0
    while pos < len(fmt):
        char = fmt[pos]
        if char != "[":
            literal += char
            pos += 1
        elif fmt.startswith("[[", pos):
            literal += "["
            pos += 2
        else:
            end = fmt.find("]", pos)
            body = fmt[pos + 1 : end].strip() if end != -1 else ""
            if end == -1 or not body or "[" in body:
                _format_err(f"unclosed or empty component at {pos}")
            if literal:
                items.append(LiteralText(literal))
                literal = ""
            items.append(_compile_component(body))
            pos = end + 1
    if literal:
        items.append(LiteralText(literal))
    return tuple(items)


def _pad(value: int, width: int, padding: str) -> str:
    if padding == "zero":
        return f"{value:0{width}d}"
    elif padding == "space":
        return f"{value:>{width}d}"
    return str(value)


def _render_component(c: Component, dt: _datetime, offset_secs: int) -> str:
    name = c.name
    if name == "year":
        if c.mod("repr") == "last_two":
            return f"{dt.year % 100:02d}"
        return _pad(dt.year, 4, c.mod("padding"))
    elif name == "month":
        repr_ = c.mod("repr")
        if repr_ == "long":
            return _MONTH_NAMES[dt.month - 1]
        elif repr_ == "short":
            return _MONTH_NAMES[dt.month - 1][:3]
        return _pad(dt.month, 2, c.mod("padding"))
    elif name == "hour":
        hour = dt.hour
        if c.mod("repr") == "12":
            hour = hour % 12 or 12
        return _pad(hour, 2, c.mod("padding"))
    elif name == "subsecond":
        return f"{dt.microsecond:06d}"
    elif name == "weekday":
        repr_ = c.mod("repr")
        if repr_ == "long":
            return _WEEKDAY_NAMES[dt.weekday()]
        elif repr_ == "short":
            return _WEEKDAY_NAMES[dt.weekday()][:3]
        elif repr_ == "monday":
            return str(dt.isoweekday())
        return str(dt.isoweekday() % 7 + 1)
    elif name == "period":
        period = "AM" if dt.hour < 12 else "PM"
        return period.lower() if c.mod("case") == "lower" else period
    elif name == "offset_hour":
        hours = abs(offset_secs) // 3600
        if offset_secs < 0:
            sign = "-"
        else:
            sign = "+" if c.mod("sign") == "mandatory" else ""
        return sign + _pad(hours, 2, c.mod("padding"))
    elif name == "offset_minute":
        return _pad(abs(offset_secs) % 3600 // 60, 2, c.mod("padding"))
    value = {
        "day": dt.day,
        "minute": dt.minute,
        "second": dt.second,
        "ordinal": dt.timetuple().tm_yday,
        "week_number": dt.isocalendar()[1],
    }[name]
    return _pad(value, _COMPONENTS[name][0], c.mod("padding"))


def render(fmt: str, dt: _datetime, offset_secs: int = 0) -> str:
    """Render the datetime's fields through the format description.

    The datetime is rendered as-is: offset components display
    ``offset_secs`` but never shift the other fields.
    """
    return "".join(
        (
            item.text
            if isinstance(item, LiteralText)
            else _render_component(item, dt, offset_secs)
        )
        for item in compile_format(fmt)
    )


def _numeric_pattern(width: int, padding: str) -> str:
    if padding == "zero":
        return rf"(\d{{{width}}})"
    elif padding == "space":
        # exactly `width` characters, leading spaces then digits
        alternatives = "|".join(
            " " * n + rf"\d{{{width - n}}}" for n in range(width)
        )
        return f"((?:{alternatives}))"
    return rf"(\d{{1,{width}}})"


def _component_pattern(c: Component) -> str:
    name = c.name
    if name == "month" and c.mod("repr") != "numerical":
        names = _MONTH_NAMES
        if c.mod("repr") == "short":
            names = tuple(n[:3] for n in names)
        return f"({'|'.join(names)})"
    elif name == "weekday":
        repr_ = c.mod("repr")
        if repr_ in ("monday", "sunday"):
            return "([1-7])"
        names = _WEEKDAY_NAMES
        if repr_ == "short":
            names = tuple(n[:3] for n in names)
        return f"({'|'.join(names)})"
    elif name == "subsecond":
        return r"(\d{1,9})"
    elif name == "period":
        return "(am|pm)" if c.mod("case") == "lower" else "(AM|PM)"
    elif name == "offset_hour":
        sign = "[+-]" if c.mod("sign") == "mandatory" else "[+-]?"
        return f"({sign}" + _numeric_pattern(2, c.mod("padding"))[1:]
    elif name == "year" and c.mod("repr") == "last_two":
        return r"(\d{2})"
    return _numeric_pattern(_COMPONENTS[name][0], c.mod("padding"))


@lru_cache(maxsize=128)
def _compile_parser(fmt: str) -> tuple[re.Pattern[str], tuple[Component, ...]]:
    items = _compile_format(fmt)
    components = tuple(i for i in items if isinstance(i, Component))
    pattern = "".join(
        (
            re.escape(item.text)
            if isinstance(item, LiteralText)
            else _component_pattern(item)
        )
        for item in items
    )
    return re.compile(pattern, re.ASCII), components


def _parse_err(s: str) -> NoReturn:
    raise InvalidFormat(f"Invalid format: {s!r}") from None


def _convert(c: Component, raw: str) -> int | str:
    name = c.name
    if name == "month" and c.mod("repr") != "numerical":
        return [n[: len(raw)] for n in _MONTH_NAMES].index(raw) + 1
    elif name == "weekday":
        repr_ = c.mod("repr")
        if repr_ == "monday":
            return int(raw)
        elif repr_ == "sunday":
            return (int(raw) + 5) % 7 + 1
        return [n[: len(raw)] for n in _WEEKDAY_NAMES].index(raw) + 1
    elif name == "subsecond":
        return int(raw[:6].ljust(6, "0"))
    elif name == "period":
        return raw.upper()
    elif name == "offset_hour":
        # a sign may precede the space padding
        return int(raw.replace(" ", ""))
    return int(raw)


def parse(s: str, fmt: str) -> _datetime:
    """Parse a string into a naive datetime following the format description.

    A date (year with month and day, or year with ordinal) and an hour
    are required. Minutes, seconds and subseconds default to zero.
    Offset components are matched but not used.
    """
    _check_description(fmt)
    pattern, components = _compile_parser(fmt)
    if not isinstance(s, str) or (match := pattern.fullmatch(s)) is None:
        _parse_err(s)

    fields: dict[str, int | str] = {}
    try:
        for c, raw in zip(components, match.groups()):
            if c.name == "year" and c.mod("repr") == "last_two":
                # the century is unknown
                _parse_err(s)
            value = _convert(c, raw)
            if fields.setdefault(c.name, value) != value:
                _parse_err(s)
    except ValueError:
        _parse_err(s)

    if "year" not in fields or "hour" not in fields:
        _parse_err(s)
    hour = int(fields["hour"])
    twelve_hour = any(
        c.name == "hour" and c.mod("repr") == "12" for c in components
    )
    if twelve_hour:
        if "period" not in fields or not 1 <= hour <= 12:
            _parse_err(s)
        hour = hour % 12 + (12 if fields["period"] == "PM" else 0)

    try:
        year = int(fields["year"])
        if "month" in fields and "day" in fields:
            d = _date(year, int(fields["month"]), int(fields["day"]))
            if "ordinal" in fields and (
                d.timetuple().tm_yday != fields["ordinal"]
            ):
                _parse_err(s)
        elif "ordinal" in fields and not (
            "month" in fields or "day" in fields
        ):
            ordinal = int(fields["ordinal"])
            d = _date(year, 1, 1)
            if not 1 <= ordinal <= 366:
                _parse_err(s)
            d = _date.fromordinal(d.toordinal() + ordinal - 1)
            if d.year != year:
                _parse_err(s)
        else:
            _parse_err(s)
        result = _datetime.combine(d, _datetime.min.time()).replace(
            hour=hour,
            minute=int(fields.get("minute", 0)),
            second=int(fields.get("second", 0)),
            microsecond=int(fields.get("subsecond", 0)),
        )
    except ValueError:
        _parse_err(s)

    if "weekday" in fields and result.isoweekday() != fields["weekday"]:
        _parse_err(s)
    if (
        "week_number" in fields
        and result.isocalendar()[1] != fields["week_number"]
    ):
        _parse_err(s)
    return result
