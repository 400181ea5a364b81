from datetime import datetime

from hypothesis import strategies as st

# Offsets in whole minutes, strictly within one day
offset_minutes = st.integers(-23 * 60 - 59, 23 * 60 + 59)

# Naive datetimes at least a day away from the edges of the
# supported range, so that any offset can be applied.
naive_datetimes = st.datetimes(
    min_value=datetime(1, 1, 2), max_value=datetime(9999, 12, 30)
)


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False
