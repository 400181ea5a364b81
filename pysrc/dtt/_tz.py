"""The static registry of timezone abbreviations and their fixed offsets.

Abbreviations aren't unique in the real world. For example, ``IST`` may mean
India, Irish, or Israel Standard Time, and ``CST`` may mean Central Standard
Time or China Standard Time. Each key here has exactly one meaning, and no
daylight saving time is applied: ``EST`` and ``EDT`` are two unrelated
fixed offsets.
"""

from __future__ import annotations

from datetime import timezone as _timezone
from types import MappingProxyType
from typing import Mapping

from ._common import InvalidTimezone, mk_fixed_tzinfo

__all__ = ["TIMEZONE_OFFSETS", "lookup_offset"]

# (hours, minutes). Both carry the sign of the offset.
_ABBREVIATIONS: dict[str, tuple[int, int]] = {
    "UTC": (0, 0),
    "GMT": (0, 0),
    # North America
    "EST": (-5, 0),
    "EDT": (-4, 0),
    "CST": (-6, 0),
    "CDT": (-5, 0),
    "MST": (-7, 0),
    "MDT": (-6, 0),
    "PST": (-8, 0),
    "PDT": (-7, 0),
    "AKST": (-9, 0),
    "AKDT": (-8, 0),
    "HST": (-10, 0),
    "AST": (-4, 0),
    "ADT": (-3, 0),
    "NST": (-3, -30),
    "NDT": (-2, -30),
    # South America
    "BRT": (-3, 0),
    "ART": (-3, 0),
    # Europe and Africa
    "WET": (0, 0),
    "WEST": (1, 0),
    "BST": (1, 0),
    "CET": (1, 0),
    "CEST": (2, 0),
    "EET": (2, 0),
    "EEST": (3, 0),
    "MSK": (3, 0),
    "WAT": (1, 0),
    "SAST": (2, 0),
    "EAT": (3, 0),
    # Asia
    "GST": (4, 0),
    "PKT": (5, 0),
    "IST": (5, 30),
    "ICT": (7, 0),
    "WIB": (7, 0),
    "HKT": (8, 0),
    "SGT": (8, 0),
    "AWST": (8, 0),
    "WADT": (8, 45),
    "KST": (9, 0),
    "JST": (9, 0),
    # Oceania
    "ACST": (9, 30),
    "AEST": (10, 0),
    "AEDT": (11, 0),
    "NZST": (12, 0),
    "NZDT": (13, 0),
}


def _build(table: Mapping[str, tuple[int, int]]) -> Mapping[str, _timezone]:
    # An out-of-range entry is a defect in the table above,
    # so it's allowed to fail at import time.
    return MappingProxyType(
        {
            abbr: mk_fixed_tzinfo(hrs * 3600 + mins * 60)
            for abbr, (hrs, mins) in table.items()
        }
    )


TIMEZONE_OFFSETS: Mapping[str, _timezone] = _build(_ABBREVIATIONS)
del _ABBREVIATIONS


def lookup_offset(abbr: str, /) -> _timezone:
    """Look up the fixed offset of a timezone abbreviation.

    The match is exact and case-sensitive.

    >>> lookup_offset("CET")
    datetime.timezone(datetime.timedelta(seconds=3600))
    """
    try:
        return TIMEZONE_OFFSETS[abbr]
    except (KeyError, TypeError):
        raise InvalidTimezone(
            f"Unknown timezone abbreviation: {abbr!r}"
        ) from None
