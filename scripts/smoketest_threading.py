"""
Stress tests for thread-safety of the shared, read-only state:
the abbreviation registry and the compiled format description cache.

Note this isn't a unit test, because it relies on a clean format cache
"""

import sys
import time
from threading import Thread

from dtt import TIMEZONE_ABBREVIATIONS, DateTime

if not hasattr(sys, "_is_gil_enabled") or sys._is_gil_enabled():
    # Running with GIL enabled can still be useful to compare performance,
    # but be sure to warn that threading hasn't been stress tested.
    print("WARNING: Running with GIL enabled. Threading not stress tested.")


DT = DateTime(2024, 6, 15, 12, 0)
NUM_THREADS = 16
NUM_ITERATIONS = 500
TZ_SAMPLE = sorted(TIMEZONE_ABBREVIATIONS)
FORMAT_SAMPLE = [
    "[year]-[month]-[day] [hour]:[minute]:[second]",
    "[weekday], [month repr:long] [day]",
    "[hour repr:12]:[minute] [period]",
    "[offset_hour sign:mandatory]:[offset_minute]",
    "[year]-[ordinal] W[week_number]",
    "[day padding:space]/[month padding:none]/[year repr:last_two]",
    "[[[hour]]",
]
if not len(TZ_SAMPLE) % NUM_THREADS:
    # an uneven split makes threads touch the same keys at different times
    TZ_SAMPLE = TZ_SAMPLE[:-1]
TZS = TZ_SAMPLE * (NUM_THREADS * NUM_ITERATIONS)
FMTS = FORMAT_SAMPLE * (NUM_THREADS * NUM_ITERATIONS)


def convert_timezones(tzs):
    """Look up offsets and check the instant is kept"""
    expect = DT.unix_timestamp()
    for tz in tzs:
        assert DT.convert_to_tz(tz).unix_timestamp() == expect


def format_and_parse(fmts):
    """Compile, render, and parse format descriptions"""
    for fmt in fmts:
        DT.format(fmt)
        if "[hour]" in fmt and "[month]" in fmt:
            assert DateTime.parse_custom_format(DT.format(fmt), fmt) == DT


def main(func, work):
    print(f"Starting test: {func.__name__}")
    threads = []

    start_time = time.time()

    for n in range(NUM_THREADS):
        thread = Thread(target=func, args=(work[n::NUM_THREADS],))
        threads.append(thread)
        thread.start()

    for thread in threads:
        thread.join()

    end_time = time.time()
    print(f"Execution time: {end_time - start_time:.2f} seconds")


if __name__ == "__main__":
    main(convert_timezones, TZS)
    main(format_and_parse, FMTS)
