"""
Availability Service - binds the availability core to stored data.

Handles:
- Loading a fleet snapshot (scooters + rentals) for each request
- Passing configured same-day cutoff, turnaround buffer and local "today"
- Validate-then-apply for swap plans
"""

import logging
from typing import Any, Dict, List, Optional

from flask import current_app

from models.availability_optimizer import find_optimal_availability
from models.fleet_availability import (
    check_fleet_availability,
    get_fleet_status,
    scan_scooter_availability,
)
from models.rental import get_all_rentals, get_rental_stats, update_rental
from models.scooter import get_all_scooters, get_scooter_by_id
from models.swap_plan import apply_swaps, validate_swaps
from utils.datetime_helpers import get_today
from utils.rental_calculations import SAME_DAY_CUTOFF_TIME, TURNAROUND_BUFFER_HOURS

logger = logging.getLogger(__name__)


def load_snapshot() -> tuple:
    """
    Read the fleet once for a whole calculation.

    Returns:
        tuple: (scooters, rentals)
    """
    return get_all_scooters(), get_all_rentals()


def _rules() -> Dict[str, Any]:
    return {
        'cutoff_time': current_app.config.get('SAME_DAY_CUTOFF_TIME', SAME_DAY_CUTOFF_TIME),
        'buffer_hours': current_app.config.get('TURNAROUND_BUFFER_HOURS', TURNAROUND_BUFFER_HOURS)
    }


def check_availability(start_date: str, end_date: str, count: int = 1,
                       size: str = 'any', pickup_time: Optional[str] = None,
                       return_time: Optional[str] = None) -> Dict[str, Any]:
    """Fleet availability for a requested window."""
    scooters, rentals = load_snapshot()
    return check_fleet_availability(
        scooters, rentals, start_date, end_date,
        count=count, size=size,
        pickup_time=pickup_time, return_time=return_time,
        **_rules()
    )


def optimize_availability(start_date: str, end_date: str, size: str = 'any') -> Dict[str, Any]:
    """Direct and swap-enabled availability for a requested window."""
    scooters, rentals = load_snapshot()
    return find_optimal_availability(start_date, end_date, size, scooters, rentals, get_today())


def scan_scooter(scooter_id: int, start_date: str, end_date: str) -> Dict[str, Any]:
    """
    Available periods of one scooter.

    Raises:
        ValueError: If the scooter does not exist or the window is invalid
    """
    scooter = get_scooter_by_id(scooter_id)
    if not scooter:
        raise ValueError('Scooter not found')
    return scan_scooter_availability(
        scooter, get_all_rentals(scooter_id=scooter_id), start_date, end_date, **_rules()
    )


def fleet_status(on_date: Optional[str] = None) -> Dict[str, list]:
    """Fleet split into available / rented / maintenance (default: today)."""
    scooters, rentals = load_snapshot()
    return get_fleet_status(scooters, rentals, on_date or get_today())


def rental_statistics() -> Dict[str, int]:
    """Dashboard statistics as of today."""
    return get_rental_stats(get_today())


# =============================================================================
# SWAP PLANS
# =============================================================================

def build_swaps(swap_refs: List[dict], scooters: List[dict], rentals: List[dict]) -> List[dict]:
    """
    Resolve {rental_id, from_scooter_id, to_scooter_id} references.

    Unknown IDs are kept as bare {'id': ...} dicts so validation reports them.
    """
    rentals_by_id = {r['id']: r for r in rentals}
    scooters_by_id = {s['id']: s for s in scooters}

    return [
        {
            'rental': rentals_by_id.get(ref['rental_id'], {'id': ref['rental_id']}),
            'from_scooter': scooters_by_id.get(ref['from_scooter_id'], {'id': ref['from_scooter_id']}),
            'to_scooter': scooters_by_id.get(ref['to_scooter_id'], {'id': ref['to_scooter_id']})
        }
        for ref in swap_refs
    ]


def validate_swap_plan(swap_refs: List[dict]) -> Dict[str, Any]:
    """
    Check a swap plan against current data.

    Returns:
        dict: {'valid': bool, 'errors': list}
    """
    scooters, rentals = load_snapshot()
    errors = validate_swaps(build_swaps(swap_refs, scooters, rentals), rentals, scooters, get_today())
    return {'valid': not errors, 'errors': errors}


def apply_swap_plan(swap_refs: List[dict]) -> Dict[str, Any]:
    """
    Re-validate a swap plan on fresh data, then apply it.

    Nothing is written when validation fails.

    Returns:
        dict: {'success', 'validated', 'updated_rentals', 'errors'}
    """
    scooters, rentals = load_snapshot()
    swaps = build_swaps(swap_refs, scooters, rentals)

    errors = validate_swaps(swaps, rentals, scooters, get_today())
    if errors:
        logger.info('Swap plan rejected: %s', '; '.join(errors))
        return {'success': False, 'validated': False, 'updated_rentals': [], 'errors': errors}

    result = apply_swaps(swaps, update_rental)
    logger.info('Applied %d of %d swaps', len(result['updated_rentals']), len(swaps))
    return {'validated': True, **result}
