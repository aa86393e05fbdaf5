"""
Swap plan validation and application.

A swap moves one rental to another scooter of the same size, keeping its
dates. Plans are checked again against fresh data right before they are
applied, then applied one swap at a time; there is no transaction around the
batch, so a failure part-way leaves the earlier moves in place and callers
should re-run the availability check afterwards.
"""

import logging
from typing import Any, Callable, Dict, List

from models.availability_optimizer import (
    REASON_IN_PROGRESS,
    REASON_PINNED,
    get_move_blocker,
    is_scooter_available_for_period,
)
from models.fleet_availability import STATUS_MAINTENANCE
from utils.rental_calculations import is_blocking

logger = logging.getLogger(__name__)

MOVE_BLOCKER_ERRORS = {
    REASON_PINNED: 'is pinned to its scooter',
    REASON_IN_PROGRESS: 'is already in progress'
}


def _describe_rental(rental: dict) -> str:
    return rental.get('customer_name') or f"rental {rental.get('id')}"


def _describe_scooter(scooter: dict) -> str:
    return scooter.get('license_plate') or scooter.get('color') or f"scooter {scooter.get('id')}"


def validate_swaps(swaps: List[dict], rentals: List[dict], scooters: List[dict], today) -> List[str]:
    """
    Re-check a list of swaps against current data.

    For every swap the rental must still exist and hold a scooter. It must
    also still be movable (not pinned, not already with the customer) and
    still sit on the swap's source scooter. The target must exist, match the
    source size, not be in maintenance and be free for the rental's current
    dates, counting the earlier swaps of the same list.

    Args:
        swaps: [{'rental', 'from_scooter', 'to_scooter'}]
        rentals: Current rentals
        scooters: Current scooters
        today: Local date deciding whether an active rental is in progress

    Returns:
        List of error messages; empty means safe to apply
    """
    errors = []
    planned_moves = []
    rentals_by_id = {r['id']: r for r in rentals}
    scooters_by_id = {s['id']: s for s in scooters}

    for swap in swaps:
        rental = rentals_by_id.get(swap['rental']['id'])
        if rental is None:
            errors.append(f"Rental {swap['rental']['id']} not found")
            continue
        if not is_blocking(rental):
            errors.append(f"{_describe_rental(rental)}'s rental is no longer pending or active")
            continue

        blocker = get_move_blocker(rental, today)
        if blocker:
            errors.append(f"{_describe_rental(rental)}'s rental {MOVE_BLOCKER_ERRORS[blocker]}")
            continue

        source = scooters_by_id.get(rental.get('scooter_id'))
        expected_source_id = swap['from_scooter']['id']
        if rental.get('scooter_id') != expected_source_id:
            errors.append(f"{_describe_rental(rental)}'s rental is no longer on the expected scooter")
            continue

        target = scooters_by_id.get(swap['to_scooter']['id'])
        if target is None:
            errors.append(f"Target scooter {swap['to_scooter']['id']} not found")
            continue
        if source is None or target.get('size') != source.get('size'):
            errors.append('Size mismatch: cannot move rental to different size scooter')
            continue
        if target.get('status') == STATUS_MAINTENANCE:
            errors.append(f'Scooter {_describe_scooter(target)} is in maintenance')
            continue

        if not is_scooter_available_for_period(
            target['id'], rental['start_date'], rental['end_date'],
            rentals, rental['id'], planned_moves
        ):
            errors.append(
                f"Scooter {_describe_scooter(target)} is not available for "
                f"{_describe_rental(rental)}'s rental dates"
            )
            continue

        planned_moves.append({
            'rental_id': rental['id'],
            'from_scooter_id': rental['scooter_id'],
            'to_scooter_id': target['id'],
            'start_date': rental['start_date'],
            'end_date': rental['end_date']
        })

    return errors


def apply_swaps(swaps: List[dict], update_rental: Callable[[dict], dict]) -> Dict[str, Any]:
    """
    Apply swaps one by one through the given update function.

    A failed update does not stop the batch; its error is collected.

    Args:
        swaps: [{'rental', 'from_scooter', 'to_scooter'}]
        update_rental: Persists a rental dict and returns the stored version

    Returns:
        dict: {'success': bool, 'updated_rentals': list, 'errors': list}
    """
    updated_rentals = []
    errors = []

    for swap in swaps:
        rental = swap['rental']
        target = swap['to_scooter']
        try:
            updated = update_rental({
                **rental,
                'scooter_id': target['id'],
                'scooter_license_plate': target.get('license_plate'),
                'scooter_color': target.get('color')
            })
            updated_rentals.append(updated)
        except Exception as e:
            logger.warning(
                'Swap failed for rental %s -> scooter %s: %s',
                rental.get('id'), target.get('id'), e
            )
            errors.append(f"Failed to move {_describe_rental(rental)}'s rental: {e}")

    return {
        'success': not errors,
        'updated_rentals': updated_rentals,
        'errors': errors
    }
