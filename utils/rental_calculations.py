"""
Rental date and pricing calculations.

Pure helpers shared by the availability scanner, the fleet aggregator and the
reassignment optimizer. Dates are handled as local calendar dates
(`datetime.date` or 'YYYY-MM-DD' strings), never as UTC timestamps, so a
rental never shifts by a day across timezone or DST changes.

Business rules:
1. Rental days = end_date - start_date in whole days.
2. A scooter is free again the day after a rental ends, or the same day when
   the rental is returned before the cutoff (16:00) plus a turnaround buffer
   (2 hours).
3. A day strictly inside a rental is never available.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

DateLike = Union[str, date, datetime]

DEFAULT_START_TIME = '09:00'
DEFAULT_END_TIME = '18:00'
SAME_DAY_CUTOFF_TIME = '16:00'
TURNAROUND_BUFFER_HOURS = 2

# Statuses that hold a scooter; completed rentals never block
BLOCKING_STATUSES = ('pending', 'active')

BASE_DAILY_RATE = 1200

# (minimum days, daily rate), checked top-down
RATE_TIERS = (
    (30, 700),
    (14, 800),
    (7, 900),
    (5, 1000),
)


# =============================================================================
# DATE HELPERS
# =============================================================================

def parse_date(value: DateLike) -> date:
    """
    Normalize a date value to a midnight-local calendar date.

    Args:
        value: 'YYYY-MM-DD' string, date or datetime

    Returns:
        date object

    Raises:
        ValueError: If the string is not a valid YYYY-MM-DD date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


def next_day(value: DateLike) -> date:
    """Return the calendar day after the given one."""
    return parse_date(value) + timedelta(days=1)


def iter_days(start: DateLike, end: DateLike):
    """Yield every calendar day from start to end, both inclusive."""
    current = parse_date(start)
    last = parse_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def days_between(start: DateLike, end: DateLike) -> int:
    """
    Number of whole days from start to end.

    Both values are normalized to midnight before subtracting, so the result
    is the ceiling of the difference in days regardless of time of day.

    Args:
        start: Start date
        end: End date

    Returns:
        Days between the two dates (negative if end is before start)
    """
    return (parse_date(end) - parse_date(start)).days


# Rental duration uses the same arithmetic
calculate_rental_days = days_between


def calculate_end_date(start_date: DateLike, days: int) -> str:
    """
    Calculate the end date of a rental lasting `days` days.

    Args:
        start_date: Start date
        days: Number of rental days

    Returns:
        End date as YYYY-MM-DD
    """
    return (parse_date(start_date) + timedelta(days=days)).isoformat()


def is_sunday(value: Optional[DateLike]) -> bool:
    """Check if a date falls on a Sunday."""
    if not value:
        return False
    return parse_date(value).weekday() == 6


# =============================================================================
# CONFLICT TESTS
# =============================================================================

def ranges_overlap(start_a: DateLike, end_a: DateLike,
                   start_b: DateLike, end_b: DateLike) -> bool:
    """
    Check whether two date ranges overlap.

    End dates are treated as fully occupied (end-of-day semantics), so two
    ranges sharing a single boundary day overlap.
    """
    return parse_date(start_a) <= parse_date(end_b) and parse_date(start_b) <= parse_date(end_a)


# The whole-window check is the plain inclusive overlap
has_booking_conflict = ranges_overlap


def is_day_available(day: DateLike, booking_start: DateLike, booking_end: DateLike) -> bool:
    """
    Check if a single calendar day is free of one booking.

    The day is taken if it starts on or before the booking's end date and
    the following day starts after the booking's start date.

    Args:
        day: Day to check
        booking_start: Booking start date
        booking_end: Booking end date

    Returns:
        True if the booking does not occupy the day
    """
    day = parse_date(day)
    has_conflict = day <= parse_date(booking_end) and next_day(day) > parse_date(booking_start)
    return not has_conflict


# =============================================================================
# TIME HELPERS
# =============================================================================

def normalize_time(value: Optional[str], default: str) -> str:
    """Return a zero-padded HH:MM string, falling back to `default`."""
    if not value:
        return default
    hours, _, minutes = str(value).partition(':')
    return f'{int(hours):02d}:{int(minutes[:2] or 0):02d}'


def time_to_minutes(value: Optional[str]) -> int:
    """Convert 'HH:MM' to minutes since midnight (0 for empty)."""
    if not value:
        return 0
    hours, _, minutes = str(value).partition(':')
    return int(hours) * 60 + int(minutes[:2] or 0)


def add_hours_to_time(value: str, hours: int) -> str:
    """Add whole hours to an 'HH:MM' time, capped at 23:59."""
    total = min(time_to_minutes(value) + hours * 60, 23 * 60 + 59)
    return f'{total // 60:02d}:{total % 60:02d}'


def has_time_buffer(end_time: str, start_time: str,
                    buffer_hours: int = TURNAROUND_BUFFER_HOURS) -> bool:
    """True if start_time is at least `buffer_hours` after end_time."""
    return time_to_minutes(start_time) >= time_to_minutes(end_time) + buffer_hours * 60


def is_same_day_return(return_time: Optional[str],
                       cutoff_time: str = SAME_DAY_CUTOFF_TIME) -> bool:
    """
    Check if a return leaves the scooter usable later the same day.

    Times are compared as zero-padded 'HH:MM' strings.
    """
    return normalize_time(return_time, DEFAULT_END_TIME) < cutoff_time


def same_day_available_from(return_time: Optional[str],
                            buffer_hours: int = TURNAROUND_BUFFER_HOURS) -> str:
    """Time from which a scooter returned at `return_time` can go out again."""
    return add_hours_to_time(normalize_time(return_time, DEFAULT_END_TIME), buffer_hours)


def has_booking_conflict_with_time(
    requested_start: DateLike, requested_end: DateLike,
    requested_start_time: Optional[str], requested_end_time: Optional[str],
    rental_start: DateLike, rental_end: DateLike,
    rental_start_time: Optional[str], rental_end_time: Optional[str],
    buffer_hours: int = TURNAROUND_BUFFER_HOURS
) -> bool:
    """
    Check two bookings for a conflict, allowing same-day handovers.

    When the requested booking starts on the day the existing rental ends
    (or ends on the day it starts), the handover is allowed if the pickup is
    at least `buffer_hours` after the return.

    Returns:
        True if the bookings conflict
    """
    req_start = parse_date(requested_start)
    req_end = parse_date(requested_end)
    rent_start = parse_date(rental_start)
    rent_end = parse_date(rental_end)

    if req_end < rent_start or req_start > rent_end:
        return False

    # New booking picks up on the day the existing rental returns
    if req_start == rent_end and req_end > rent_start:
        return not has_time_buffer(
            rental_end_time or DEFAULT_END_TIME,
            requested_start_time or DEFAULT_START_TIME,
            buffer_hours
        )

    # New booking returns on the day the existing rental picks up
    if req_end == rent_start and req_start < rent_end:
        return not has_time_buffer(
            requested_end_time or DEFAULT_END_TIME,
            rental_start_time or DEFAULT_START_TIME,
            buffer_hours
        )

    return True


def is_blocking(rental: dict) -> bool:
    """True if the rental holds its scooter (pending or active)."""
    return rental.get('status') in BLOCKING_STATUSES


# =============================================================================
# WINDOWS AND PERIODS
# =============================================================================

def find_available_window(first_end: DateLike, second_start: DateLike) -> Optional[dict]:
    """
    Find the bookable window between two consecutive rentals.

    Args:
        first_end: End date of the earlier rental
        second_start: Start date of the later rental

    Returns:
        dict with start_date, end_date and days, or None if there is no gap
    """
    available_start = next_day(first_end)
    available_end = parse_date(second_start) - timedelta(days=1)
    days = days_between(available_start, available_end)

    if days <= 0:
        return None

    return {
        'start_date': available_start.isoformat(),
        'end_date': available_end.isoformat(),
        'days': days
    }


def get_available_days(rentals: List[dict], range_start: DateLike, range_end: DateLike) -> List[str]:
    """
    Get every day in a range not occupied by any pending/active rental.

    Args:
        rentals: Rentals of a single scooter
        range_start: First day of the range
        range_end: Last day of the range

    Returns:
        List of available days as YYYY-MM-DD strings
    """
    blocking = [r for r in rentals if is_blocking(r)]
    return [
        day.isoformat()
        for day in iter_days(range_start, range_end)
        if all(is_day_available(day, r['start_date'], r['end_date']) for r in blocking)
    ]


def find_consecutive_periods(available_days: List[DateLike]) -> List[dict]:
    """
    Collapse a sorted list of days into maximal consecutive periods.

    Returns:
        List of dicts with start_date, end_date, length_days (calendar days
        in the period) and rental_days (longest rental that fits)
    """
    periods = []
    current = None

    for value in available_days:
        day = parse_date(value)
        if current and day == next_day(current['end']):
            current['end'] = day
            continue
        if current:
            periods.append(current)
        current = {'start': day, 'end': day}

    if current:
        periods.append(current)

    return [
        {
            'start_date': p['start'].isoformat(),
            'end_date': p['end'].isoformat(),
            'length_days': days_between(p['start'], p['end']) + 1,
            'rental_days': days_between(p['start'], p['end'])
        }
        for p in periods
    ]


# =============================================================================
# PRICING
# =============================================================================

def calculate_daily_rate(days: int, base_rate: int = BASE_DAILY_RATE) -> dict:
    """
    Calculate rental pricing with long-rental discounts.

    Args:
        days: Number of rental days
        base_rate: Daily rate for short rentals

    Returns:
        dict with daily_rate, total and has_discount
    """
    daily_rate = base_rate
    for min_days, rate in RATE_TIERS:
        if days >= min_days:
            daily_rate = rate
            break

    return {
        'daily_rate': daily_rate,
        'total': days * daily_rate,
        'has_discount': daily_rate < base_rate
    }
