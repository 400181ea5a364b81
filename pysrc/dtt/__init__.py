from __future__ import annotations

from ._pydtt import *
from ._pydtt import (  # for the docs
    __all__,
    __version__,
    _patch_time_frozen,
    _patch_time_keep_ticking,
    _unpatch_time,
    _unpkl_datetime,
    _unpkl_duration,
)

from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from typing import Iterator as _Iterator


@_dataclass
class _TimePatch:
    _pin: DateTime
    _keep_ticking: bool

    def shift(self, d: Duration, /) -> None:
        if self._keep_ticking:
            self._pin = new = (
                self._pin + (DateTime.now() - self._pin)
            ).add_duration(d)
            _patch_time_keep_ticking(new)
        else:
            self._pin = new = self._pin.add_duration(d)
            _patch_time_frozen(new)


@_contextmanager
def patch_current_time(
    dt: DateTime, /, *, keep_ticking: bool
) -> _Iterator[_TimePatch]:
    """Patch the current time to a fixed value (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    Important
    ---------

    * This function should be used only for testing purposes. It is not
      thread-safe or part of the stable API.
    * This function only affects the ``now`` functions of ``dtt``
      (including :meth:`DateTime.update`). It does not affect the standard
      library's time functions or any other libraries.

    Example
    -------

    >>> from dtt import DateTime, hours, patch_current_time
    >>> d = DateTime(1980, 3, 2, 2)
    >>> with patch_current_time(d, keep_ticking=False) as p:
    ...     assert DateTime.now() == d
    ...     p.shift(hours(4))
    ...     assert DateTime.now() == d + hours(4)
    ...
    >>> assert DateTime.now() != d
    """
    if keep_ticking:
        _patch_time_keep_ticking(dt)
    else:
        _patch_time_frozen(dt)

    try:
        yield _TimePatch(dt, keep_ticking)
    finally:
        _unpatch_time()
