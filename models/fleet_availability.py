"""
Fleet availability calculations.

Works on an in-memory snapshot of scooters and rentals (plain dicts as
returned by the data-access functions), so the same snapshot can be shared
with the reassignment optimizer.

- scan_scooter_availability: day-by-day periods for one scooter
- check_fleet_availability: available / same-day / unavailable split for a
  requested window, with partial-availability fallbacks
- get_fleet_status: snapshot of the fleet on a single date
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from utils.rental_calculations import (
    DEFAULT_END_TIME,
    DEFAULT_START_TIME,
    SAME_DAY_CUTOFF_TIME,
    TURNAROUND_BUFFER_HOURS,
    days_between,
    find_consecutive_periods,
    has_booking_conflict_with_time,
    is_blocking,
    is_day_available,
    is_same_day_return,
    iter_days,
    normalize_time,
    parse_date,
    ranges_overlap,
    same_day_available_from,
)

logger = logging.getLogger(__name__)

SCOOTER_SIZES = ('small', 'large')
SIZE_ANY = 'any'
STATUS_MAINTENANCE = 'maintenance'


# =============================================================================
# INPUT CHECKS
# =============================================================================

def check_requested_window(start_date, end_date) -> tuple:
    """
    Parse and check a requested date window.

    Raises:
        ValueError: If a date is missing or invalid, or end is before start

    Returns:
        tuple: (start, end) as date objects
    """
    if not start_date or not end_date:
        raise ValueError('Start and end dates are required')
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError:
        raise ValueError('Dates must use the YYYY-MM-DD format')
    if end < start:
        raise ValueError('End date cannot be before start date')
    return start, end


def check_requested_size(size: Optional[str]) -> str:
    """Return a valid size filter ('any' when empty)."""
    size = size or SIZE_ANY
    if size != SIZE_ANY and size not in SCOOTER_SIZES:
        raise ValueError(f'Unknown scooter size: {size}')
    return size


def matches_size(scooter: dict, size: str) -> bool:
    """True if the scooter carries the requested size tag."""
    return size == SIZE_ANY or scooter.get('size') == size


def rentals_for_scooter(scooter_id, rentals: List[dict]) -> List[dict]:
    """Pending/active rentals currently assigned to one scooter."""
    return [r for r in rentals if r.get('scooter_id') == scooter_id and is_blocking(r)]


# =============================================================================
# PER-SCOOTER SCANNER
# =============================================================================

def _scan_days(own_rentals: List[dict], start, end,
               cutoff_time: str, buffer_hours: int) -> List[dict]:
    """
    Evaluate each day of the window for one scooter.

    Returns:
        List of {'day', 'available', 'available_from', 'returning_rental'}
    """
    days = []
    for day in iter_days(start, end):
        available = True
        available_from = None
        returning = None

        for rental in own_rentals:
            rental_end = parse_date(rental['end_date'])

            if is_day_available(day, rental['start_date'], rental['end_date']):
                if rental_end == day - timedelta(days=1) and returning is None:
                    returning = rental
                continue

            # Same-day return before the cutoff frees the afternoon
            if rental_end == day and is_same_day_return(rental.get('end_time'), cutoff_time):
                ready_at = same_day_available_from(rental.get('end_time'), buffer_hours)
                if available_from is None or ready_at > available_from:
                    available_from = ready_at
                    returning = rental
                continue

            available = False
            break

        days.append({
            'day': day,
            'available': available,
            'available_from': available_from if available else None,
            'returning_rental': returning if available else None
        })
    return days


def _explain_period(period: dict) -> Optional[str]:
    """Human-readable reason a period starts when it does."""
    rental = period.get('returning_rental')
    if not rental:
        return None
    customer = rental.get('customer_name') or f"rental {rental.get('id')}"
    if period.get('available_from'):
        return (f"Available from {period['available_from']} because {customer} "
                f"returns at {normalize_time(rental.get('end_time'), DEFAULT_END_TIME)}")
    return f"Available because {customer} returns on {rental['end_date']}"


def scan_scooter_availability(
    scooter: dict,
    rentals: List[dict],
    start_date,
    end_date,
    cutoff_time: str = SAME_DAY_CUTOFF_TIME,
    buffer_hours: int = TURNAROUND_BUFFER_HOURS
) -> Dict[str, Any]:
    """
    Compute the available periods of one scooter within a window.

    A day is available when no pending/active rental occupies it. A rental
    returned on the day before the cutoff leaves the day available from the
    return time plus the turnaround buffer; such a day always opens a new
    period because the scooter is out in the morning.

    Periods are computed over the whole window; filtering them by a minimum
    length is left to the caller.

    Args:
        scooter: Scooter dict
        rentals: Rentals snapshot (any scooter; filtered here)
        start_date: First day of the window
        end_date: Last day of the window (inclusive)
        cutoff_time: Latest return time allowing same-day availability
        buffer_hours: Turnaround time after a same-day return

    Returns:
        dict: {
            'scooter': dict,
            'periods': [{'start_date', 'end_date', 'length_days', 'rental_days',
                         'available_from', 'returning_rental', 'reason'}],
            'total_available_days': int,
            'window_days': int,
            'fully_available': bool (every day free, none after a same-day return),
            'earliest_period': dict or None,
            'longest_period': dict or None
        }
    """
    start, end = check_requested_window(start_date, end_date)
    own_rentals = rentals_for_scooter(scooter['id'], rentals)
    days = _scan_days(own_rentals, start, end, cutoff_time, buffer_hours)

    # Group into runs; a delayed-start day always opens a new run
    runs = []
    for entry in days:
        if not entry['available']:
            continue
        previous = runs[-1][-1] if runs else None
        contiguous = previous is not None and entry['day'] == previous['day'] + timedelta(days=1)
        if contiguous and entry['available_from'] is None:
            runs[-1].append(entry)
        else:
            runs.append([entry])

    periods = []
    for run in runs:
        period = find_consecutive_periods([e['day'] for e in run])[0]
        period['available_from'] = run[0]['available_from']
        period['returning_rental'] = run[0]['returning_rental']
        period['reason'] = _explain_period(period)
        periods.append(period)

    total_available = sum(1 for e in days if e['available'])
    longest = max(periods, key=lambda p: p['length_days']) if periods else None

    return {
        'scooter': scooter,
        'periods': periods,
        'total_available_days': total_available,
        'window_days': len(days),
        'fully_available': (
            len(periods) == 1 and total_available == len(days)
            and periods[0]['available_from'] is None
        ),
        'earliest_period': periods[0] if periods else None,
        'longest_period': longest
    }


# =============================================================================
# FLEET AGGREGATOR
# =============================================================================

def _next_rental(own_rentals: List[dict], after) -> Optional[dict]:
    """Earliest rental starting after the given date."""
    upcoming = [r for r in own_rentals if parse_date(r['start_date']) > after]
    if not upcoming:
        return None
    return min(upcoming, key=lambda r: parse_date(r['start_date']))


def _available_sort_key(entry: dict) -> tuple:
    """No future rentals first, then the longest free run before the next one."""
    if entry['next_rental'] is None:
        return (0, 0)
    return (1, -entry['days_until_next_rental'])


def _partial_by_fleet_day(scans: List[dict], count: int) -> List[dict]:
    """Calendar periods where at least `count` scooters are free together."""
    free_by_day = {}
    for scan in scans:
        for period in scan['periods']:
            for day in iter_days(period['start_date'], period['end_date']):
                free_by_day.setdefault(day, []).append(scan['scooter']['id'])

    good_days = sorted(day for day, ids in free_by_day.items() if len(ids) >= count)
    periods = find_consecutive_periods(good_days)

    for period in periods:
        period_days = list(iter_days(period['start_date'], period['end_date']))
        free_sets = [set(free_by_day[d]) for d in period_days]
        period['min_free_scooters'] = min(len(s) for s in free_sets)
        period['scooter_ids_free_throughout'] = sorted(set.intersection(*free_sets))
    return periods


def _partial_by_scooter(scans: List[dict]) -> List[dict]:
    """Each scooter's own best sub-period, ranked by length then total days."""
    ranked = [
        {
            'scooter': scan['scooter'],
            'earliest_period': scan['earliest_period'],
            'longest_period': scan['longest_period'],
            'periods': scan['periods'],
            'total_available_days': scan['total_available_days']
        }
        for scan in scans
        if scan['periods']
    ]
    ranked.sort(key=lambda e: (-e['longest_period']['length_days'], -e['total_available_days']))
    return ranked


def check_fleet_availability(
    scooters: List[dict],
    rentals: List[dict],
    start_date,
    end_date,
    count: int = 1,
    size: str = SIZE_ANY,
    pickup_time: Optional[str] = None,
    return_time: Optional[str] = None,
    cutoff_time: str = SAME_DAY_CUTOFF_TIME,
    buffer_hours: int = TURNAROUND_BUFFER_HOURS
) -> Dict[str, Any]:
    """
    Check which scooters can be rented for a window.

    Steps:
    1. A scooter is occupied when any pending/active rental conflicts with
       the whole window (time-aware at the edges), otherwise free.
    2. Scooters in maintenance are never free.
    3. Scooters whose only conflict is a rental returned on the start date
       before the cutoff are reported as same-day available.
    4. When fewer than `count` scooters are free, partial availability is
       computed fleet-wide (days with enough free scooters) and per scooter.

    Args:
        scooters: Scooters snapshot
        rentals: Rentals snapshot
        start_date: Requested pickup date
        end_date: Requested return date (inclusive)
        count: Number of scooters needed
        size: 'small', 'large' or 'any'
        pickup_time: Requested pickup time (default 09:00)
        return_time: Requested return time (default 18:00)
        cutoff_time: Latest return time allowing same-day availability
        buffer_hours: Turnaround time after a same-day return

    Returns:
        dict: {
            'available': [{'scooter', 'next_rental', 'days_until_next_rental'}],
            'same_day_available': [{'scooter', 'returning_rental', 'return_time',
                                    'available_from', 'customer_name'}],
            'unavailable': [{'scooter', 'reason', 'conflicting_rentals'}],
            'partial_by_fleet_day': [...],
            'partial_by_scooter': [...],
            'has_enough': bool,
            'requested': {...}
        }

    Raises:
        ValueError: On an invalid window, size or count
    """
    start, end = check_requested_window(start_date, end_date)
    size = check_requested_size(size)
    if not isinstance(count, int) or count < 1:
        raise ValueError('Requested scooter count must be a positive integer')

    pickup_time = normalize_time(pickup_time, DEFAULT_START_TIME)
    return_time = normalize_time(return_time, DEFAULT_END_TIME)

    available = []
    same_day = []
    unavailable = []

    for scooter in scooters:
        if not matches_size(scooter, size):
            continue

        own_rentals = rentals_for_scooter(scooter['id'], rentals)
        conflicts = [
            r for r in own_rentals
            if has_booking_conflict_with_time(
                start, end, pickup_time, return_time,
                r['start_date'], r['end_date'], r.get('start_time'), r.get('end_time'),
                buffer_hours
            )
        ]

        if scooter.get('status') == STATUS_MAINTENANCE:
            unavailable.append({
                'scooter': scooter,
                'reason': 'maintenance',
                'conflicting_rentals': conflicts
            })
            continue

        if not conflicts:
            upcoming = _next_rental(own_rentals, start)
            available.append({
                'scooter': scooter,
                'next_rental': upcoming,
                'days_until_next_rental': days_between(start, upcoming['start_date']) if upcoming else None
            })
            continue

        returning = [r for r in conflicts if parse_date(r['end_date']) == start]
        if len(returning) == 1 and is_same_day_return(returning[0].get('end_time'), cutoff_time):
            rental = returning[0]
            if all(r is rental for r in conflicts):
                same_day.append({
                    'scooter': scooter,
                    'returning_rental': rental,
                    'return_time': normalize_time(rental.get('end_time'), DEFAULT_END_TIME),
                    'available_from': same_day_available_from(rental.get('end_time'), buffer_hours),
                    'customer_name': rental.get('customer_name')
                })
                continue

        unavailable.append({
            'scooter': scooter,
            'reason': 'rented',
            'conflicting_rentals': conflicts
        })

    available.sort(key=_available_sort_key)

    partial_by_fleet_day = []
    partial_by_scooter = []
    if len(available) < count:
        available_ids = {e['scooter']['id'] for e in available}
        scans = [
            scan_scooter_availability(s, rentals, start, end, cutoff_time, buffer_hours)
            for s in scooters
            if matches_size(s, size) and s.get('status') != STATUS_MAINTENANCE
        ]
        partial_by_fleet_day = _partial_by_fleet_day(scans, count)
        partial_by_scooter = _partial_by_scooter(
            [scan for scan in scans if scan['scooter']['id'] not in available_ids]
        )

    logger.debug(
        'Availability %s..%s size=%s count=%d: %d available, %d same-day, %d unavailable',
        start, end, size, count, len(available), len(same_day), len(unavailable)
    )

    return {
        'available': available,
        'same_day_available': same_day,
        'unavailable': unavailable,
        'partial_by_fleet_day': partial_by_fleet_day,
        'partial_by_scooter': partial_by_scooter,
        'has_enough': len(available) >= count,
        'requested': {
            'start_date': start.isoformat(),
            'end_date': end.isoformat(),
            'count': count,
            'size': size,
            'pickup_time': pickup_time,
            'return_time': return_time
        }
    }


# =============================================================================
# FLEET STATUS FOR ONE DATE
# =============================================================================

def get_fleet_status(scooters: List[dict], rentals: List[dict], on_date) -> Dict[str, list]:
    """
    Split the fleet into available, rented and maintenance for one date.

    Args:
        scooters: Scooters snapshot
        rentals: Rentals snapshot
        on_date: Date to report on

    Returns:
        dict: {
            'available': [{'scooter', 'next_rental', 'days_until_next_rental'}],
            'rented': [{'scooter', 'rental', 'until_date', 'days_left'}],
            'maintenance': [{'scooter'}]
        }
    """
    day = parse_date(on_date)
    available = []
    rented = []
    maintenance = []

    for scooter in scooters:
        if scooter.get('status') == STATUS_MAINTENANCE:
            maintenance.append({'scooter': scooter})
            continue

        own_rentals = rentals_for_scooter(scooter['id'], rentals)
        current = next(
            (r for r in own_rentals if ranges_overlap(day, day, r['start_date'], r['end_date'])),
            None
        )

        if current:
            rented.append({
                'scooter': scooter,
                'rental': current,
                'until_date': current['end_date'],
                'days_left': days_between(day, current['end_date'])
            })
            continue

        upcoming = _next_rental(own_rentals, day)
        available.append({
            'scooter': scooter,
            'next_rental': upcoming,
            'days_until_next_rental': days_between(day, upcoming['start_date']) if upcoming else None
        })

    # Scooters needed soonest first; free-indefinitely ones last
    available.sort(key=lambda e: (e['next_rental'] is None, e['days_until_next_rental'] or 0))
    rented.sort(key=lambda e: e['days_left'])

    return {
        'available': available,
        'rented': rented,
        'maintenance': maintenance
    }
