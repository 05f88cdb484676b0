"""Calendar date helpers used by placement and auto-reschedule.

Weekdays are numbered 0=Sunday ... 6=Saturday. All values are plain
``datetime.date`` objects; there is no time-of-day or timezone handling.
"""
from collections.abc import Collection, Iterator
from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with Sunday as 0."""
    return day.isoweekday() % 7


def is_preferred_weekday(day: date, preferred_days: Collection[int]) -> bool:
    return weekday_index(day) in preferred_days


def first_preferred_on_or_after(day: date, preferred_days: Collection[int]) -> date:
    """Earliest preferred weekday on or after ``day``."""
    if not preferred_days:
        raise ValueError("preferred_days must not be empty")
    current = day
    while not is_preferred_weekday(current, preferred_days):
        current += ONE_DAY
    return current


def next_available_date(
    from_date_exclusive: date,
    preferred_days: Collection[int],
    occupied_dates: Collection[date],
    max_days_ahead: int,
) -> date | None:
    """First free preferred weekday in ``(from, from + max_days_ahead]``.

    Returns None when the window is exhausted.
    """
    for offset in range(1, max_days_ahead + 1):
        candidate = from_date_exclusive + timedelta(days=offset)
        if is_preferred_weekday(candidate, preferred_days) and candidate not in occupied_dates:
            return candidate
    return None


def date_range(start: date, end: date, inclusive: bool = True) -> Iterator[date]:
    current = start
    while current < end or (inclusive and current == end):
        yield current
        current += ONE_DAY


def preferred_dates_between(
    start: date,
    end: date,
    preferred_days: Collection[int],
    occupied_dates: Collection[date] = (),
) -> list[date]:
    """Unoccupied preferred weekdays in ``[start, end]``."""
    return [
        day
        for day in date_range(start, end)
        if is_preferred_weekday(day, preferred_days) and day not in occupied_dates
    ]
