"""
Availability optimizer.

Treats scooters of the same size as an interchangeable pool and suggests
moving movable rentals to other scooters so that more scooters become free
for a requested window.

A suggested plan never leaves an existing rental without a scooter: every
move targets a same-size scooter that is free for the rental's full dates,
counting both stored rentals and every move already planned in the same
call.

Planned moves are tracked per call in a plain list of dicts:
    {'rental_id', 'from_scooter_id', 'to_scooter_id', 'start_date', 'end_date'}
A freed scooter is also recorded as a hold (rental_id None) over the
requested window so no later plan moves a rental onto it.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.fleet_availability import (
    STATUS_MAINTENANCE,
    check_requested_size,
    check_requested_window,
    matches_size,
)
from utils.rental_calculations import is_blocking, parse_date, ranges_overlap

logger = logging.getLogger(__name__)

REASON_PINNED = 'pinned'
REASON_IN_PROGRESS = 'in_progress'
REASON_NO_ALTERNATIVE = 'no_alternative'
REASON_SWAP_TARGET = 'swap_target'

REASON_MESSAGES = {
    REASON_PINNED: 'Blocked by pinned rental',
    REASON_IN_PROGRESS: 'Blocked by active rental in progress',
    REASON_NO_ALTERNATIVE: 'No alternative scooter available for swap',
    REASON_SWAP_TARGET: 'Receives a rental moved by another swap',
}


# =============================================================================
# BUILDING BLOCKS
# =============================================================================

def is_scooter_available_for_period(
    scooter_id,
    start_date,
    end_date,
    rentals: List[dict],
    exclude_rental_id=None,
    planned_moves: Optional[List[dict]] = None
) -> bool:
    """
    Check a scooter against stored rentals and planned moves.

    Rentals planned to move away from the scooter no longer count; rentals
    (and holds) planned to move onto it do.

    Args:
        scooter_id: Scooter to check
        start_date: Period start
        end_date: Period end (inclusive)
        rentals: Rentals snapshot
        exclude_rental_id: Rental to ignore (the one being placed)
        planned_moves: Moves already planned in this pass

    Returns:
        True if the scooter is free for the whole period
    """
    planned_moves = planned_moves or []
    moved_away = {
        m['rental_id'] for m in planned_moves
        if m['rental_id'] is not None and m['from_scooter_id'] == scooter_id
    }

    for rental in rentals:
        if rental.get('scooter_id') != scooter_id or not is_blocking(rental):
            continue
        if exclude_rental_id is not None and rental['id'] == exclude_rental_id:
            continue
        if rental['id'] in moved_away:
            continue
        if ranges_overlap(start_date, end_date, rental['start_date'], rental['end_date']):
            return False

    for move in planned_moves:
        if move['to_scooter_id'] != scooter_id:
            continue
        if ranges_overlap(start_date, end_date, move['start_date'], move['end_date']):
            return False

    return True


def get_blocking_rentals(scooter_id, start_date, end_date, rentals: List[dict]) -> List[dict]:
    """Pending/active rentals on a scooter that overlap the window."""
    return [
        r for r in rentals
        if r.get('scooter_id') == scooter_id
        and is_blocking(r)
        and ranges_overlap(start_date, end_date, r['start_date'], r['end_date'])
    ]


def get_move_blocker(rental: dict, today) -> Optional[str]:
    """
    Return why a rental cannot be moved, or None if it can.

    Pinned rentals never move. An active rental that already started is
    physically with the customer.
    """
    if rental.get('pinned'):
        return REASON_PINNED
    if rental.get('status') == 'active' and parse_date(rental['start_date']) <= parse_date(today):
        return REASON_IN_PROGRESS
    return None


def can_rental_be_moved(rental: dict, today) -> bool:
    """True if the rental may be reassigned to another scooter."""
    return get_move_blocker(rental, today) is None


def find_best_alternative(
    rental: dict,
    current_scooter: dict,
    scooters: List[dict],
    rentals: List[dict],
    exclude_scooter_ids=(),
    planned_moves: Optional[List[dict]] = None
) -> Optional[dict]:
    """
    Find the first scooter that can take a rental.

    The target must be a different, same-size, non-maintenance scooter,
    not excluded, and free for the rental's dates.

    Returns:
        Scooter dict or None if no valid alternative exists
    """
    required_size = current_scooter.get('size')

    for scooter in scooters:
        if scooter['id'] in exclude_scooter_ids:
            continue
        if scooter['id'] == current_scooter['id']:
            continue
        if scooter.get('status') == STATUS_MAINTENANCE:
            continue
        if scooter.get('size') != required_size:
            continue
        if is_scooter_available_for_period(
            scooter['id'], rental['start_date'], rental['end_date'],
            rentals, rental['id'], planned_moves
        ):
            return scooter

    return None


def _as_move(swap: dict) -> dict:
    """Flatten a swap into the tracking form used by the availability check."""
    return {
        'rental_id': swap['rental']['id'],
        'from_scooter_id': swap['from_scooter']['id'],
        'to_scooter_id': swap['to_scooter']['id'],
        'start_date': swap['rental']['start_date'],
        'end_date': swap['rental']['end_date']
    }


# =============================================================================
# STRATEGIES
# =============================================================================

# (candidates, scooters, rentals, start, end, excluded_ids, today)
#   -> (available_with_swaps, unavailable)
SwapStrategy = Callable[..., Tuple[List[dict], List[dict]]]


def greedy_first_fit(
    candidates: List[dict],
    scooters: List[dict],
    rentals: List[dict],
    start_date,
    end_date,
    excluded_ids,
    today
) -> Tuple[List[dict], List[dict]]:
    """
    Free candidates one by one, in order, taking the first fitting target.

    Each accepted plan is committed to the planned moves before the next
    candidate is looked at, so plans never compete for the same slot. A
    candidate whose rentals cannot all be placed keeps none of its moves.
    Candidates are expected to be blocked; one with no blocking rental comes
    back as a plan without swaps.
    Not globally optimal: a different order could free more scooters.
    """
    planned_moves = []
    available_with_swaps = []
    unavailable = []
    rentals_by_id = {r['id']: r for r in rentals}

    for scooter in candidates:
        proposed = []
        blocker = None
        blocking_rental = None

        # An earlier plan already parks a rental on this scooter inside the window
        incoming = next(
            (m for m in planned_moves
             if m['rental_id'] is not None
             and m['to_scooter_id'] == scooter['id']
             and ranges_overlap(start_date, end_date, m['start_date'], m['end_date'])),
            None
        )
        if incoming:
            unavailable.append({
                'scooter': scooter,
                'reason': REASON_MESSAGES[REASON_SWAP_TARGET],
                'reason_code': REASON_SWAP_TARGET,
                'blocking_rental': rentals_by_id.get(incoming['rental_id'])
            })
            continue

        for rental in get_blocking_rentals(scooter['id'], start_date, end_date, rentals):
            blocker = get_move_blocker(rental, today)
            if blocker:
                blocking_rental = rental
                break

            alternative = find_best_alternative(
                rental, scooter, scooters, rentals,
                exclude_scooter_ids={scooter['id'], *excluded_ids},
                planned_moves=planned_moves + [_as_move(s) for s in proposed]
            )
            if alternative is None:
                blocker = REASON_NO_ALTERNATIVE
                blocking_rental = rental
                break

            proposed.append({
                'rental': rental,
                'from_scooter': scooter,
                'to_scooter': alternative
            })

        if blocker:
            unavailable.append({
                'scooter': scooter,
                'reason': REASON_MESSAGES[blocker],
                'reason_code': blocker,
                'blocking_rental': blocking_rental
            })
            continue

        available_with_swaps.append({'scooter': scooter, 'swaps': proposed})
        planned_moves.extend(_as_move(s) for s in proposed)
        planned_moves.append({
            'rental_id': None,
            'from_scooter_id': None,
            'to_scooter_id': scooter['id'],
            'start_date': start_date,
            'end_date': end_date
        })

    return available_with_swaps, unavailable


# =============================================================================
# ENTRY POINT
# =============================================================================

def find_optimal_availability(
    start_date,
    end_date,
    size: str,
    scooters: List[dict],
    rentals: List[dict],
    today,
    strategy: SwapStrategy = greedy_first_fit
) -> Dict[str, Any]:
    """
    Find scooters free for a window, directly or after moving rentals.

    Scooters directly available are never used as swap targets, since that
    would only shuffle the shortage around.

    Args:
        start_date: Requested start date (YYYY-MM-DD)
        end_date: Requested end date (YYYY-MM-DD, inclusive)
        size: 'small', 'large' or 'any'
        scooters: Scooters snapshot
        rentals: Rentals snapshot
        today: Current local date, decides which active rentals are in progress
        strategy: Plan builder for the scooters that are not directly free

    Returns:
        dict: {
            'directly_available': [{'scooter', 'swaps': []}],
            'available_with_swaps': [{'scooter', 'swaps': [{'rental', 'from_scooter', 'to_scooter'}]}],
            'unavailable': [{'scooter', 'reason', 'reason_code', 'blocking_rental'}]
        }

    Raises:
        ValueError: On an invalid window or size
    """
    start, end = check_requested_window(start_date, end_date)
    size = check_requested_size(size)
    start_date, end_date = start.isoformat(), end.isoformat()

    eligible = [
        s for s in scooters
        if s.get('status') != STATUS_MAINTENANCE and matches_size(s, size)
    ]

    directly_available = []
    candidates = []
    for scooter in eligible:
        if is_scooter_available_for_period(scooter['id'], start_date, end_date, rentals):
            directly_available.append({'scooter': scooter, 'swaps': []})
        else:
            candidates.append(scooter)

    direct_ids = {entry['scooter']['id'] for entry in directly_available}
    available_with_swaps, unavailable = strategy(
        candidates, scooters, rentals, start_date, end_date, direct_ids, today
    )

    logger.debug(
        'Optimizer %s..%s size=%s: %d direct, %d with swaps, %d unavailable',
        start_date, end_date, size,
        len(directly_available), len(available_with_swaps), len(unavailable)
    )

    return {
        'directly_available': directly_available,
        'available_with_swaps': available_with_swaps,
        'unavailable': unavailable
    }


def collect_swaps(plans: List[dict]) -> List[dict]:
    """Flatten the swaps of several accepted plans, keeping their order."""
    return [swap for plan in plans for swap in plan['swaps']]
