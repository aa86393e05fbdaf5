"""
Availability API endpoints.

Handles:
- Fleet availability checks for a requested window
- Swap-enabled availability (reassignment optimizer)
- Swap plan validation and application
- Per-scooter availability periods
- Fleet status and rental statistics
"""

from flask import current_app, request
from flask_login import login_required

from blueprints.fleet.services.availability_service import (
    apply_swap_plan,
    check_availability,
    fleet_status,
    optimize_availability,
    rental_statistics,
    scan_scooter,
    validate_swap_plan,
)
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES
from utils.validators import (
    validate_availability_request,
    validate_date_format,
    validate_date_range,
    validate_swap_refs,
)


def register_routes(bp):
    """Register availability API routes on the blueprint."""

    @bp.route('/availability/check', methods=['POST'])
    @login_required
    def availability_check():
        """
        Check which scooters can be rented for a window.

        Request JSON:
        {
            "start_date": "YYYY-MM-DD",
            "end_date": "YYYY-MM-DD",
            "count": int (default 1),
            "size": "any" | "small" | "large",
            "pickup_time": "HH:MM", "return_time": "HH:MM"
        }

        Response JSON:
        {
            "success": true,
            "data": {
                "available": [...], "same_day_available": [...], "unavailable": [...],
                "partial_by_fleet_day": [...], "partial_by_scooter": [...],
                "has_enough": bool, "requested": {...}
            }
        }
        """
        data = request.get_json(silent=True)
        is_valid, error = validate_availability_request(data)
        if not is_valid:
            return api_error(error)

        try:
            result = check_availability(
                data['start_date'], data['end_date'],
                count=data.get('count', 1),
                size=data.get('size') or 'any',
                pickup_time=data.get('pickup_time'),
                return_time=data.get('return_time')
            )
        except ValueError as e:
            return api_error(str(e))
        except Exception as e:
            current_app.logger.error(f'Availability check failed: {e}', exc_info=True)
            return api_error(MESSAGES['internal_error'], status=500)

        return api_success(data=result)

    @bp.route('/availability/optimize', methods=['POST'])
    @login_required
    def availability_optimize():
        """
        Find scooters free for a window, directly or after moving rentals.

        Request JSON:
        {"start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD", "size": "any" | "small" | "large"}

        Response JSON:
        {
            "success": true,
            "data": {
                "directly_available": [{"scooter", "swaps": []}],
                "available_with_swaps": [{"scooter", "swaps": [{"rental", "from_scooter", "to_scooter"}]}],
                "unavailable": [{"scooter", "reason", "reason_code", "blocking_rental"}]
            }
        }
        """
        data = request.get_json(silent=True)
        is_valid, error = validate_availability_request(data)
        if not is_valid:
            return api_error(error)

        try:
            result = optimize_availability(
                data['start_date'], data['end_date'], size=data.get('size') or 'any'
            )
        except ValueError as e:
            return api_error(str(e))
        except Exception as e:
            current_app.logger.error(f'Availability optimizer failed: {e}', exc_info=True)
            return api_error(MESSAGES['internal_error'], status=500)

        return api_success(data=result)

    @bp.route('/availability/swaps/validate', methods=['POST'])
    @login_required
    def availability_swaps_validate():
        """
        Check a swap plan against current data without applying it.

        Request JSON:
        {"swaps": [{"rental_id": int, "from_scooter_id": int, "to_scooter_id": int}]}

        Response JSON:
        {"success": true, "data": {"valid": bool, "errors": [str]}}
        """
        data = request.get_json(silent=True) or {}
        is_valid, error = validate_swap_refs(data.get('swaps'))
        if not is_valid:
            return api_error(error)

        return api_success(data=validate_swap_plan(data['swaps']))

    @bp.route('/availability/swaps/apply', methods=['POST'])
    @login_required
    def availability_swaps_apply():
        """
        Re-validate and apply a swap plan.

        Request JSON:
        {"swaps": [{"rental_id": int, "from_scooter_id": int, "to_scooter_id": int}]}

        Response JSON (stale plan, nothing written, 409):
        {"success": false, "error": "...", "errors": [str]}

        Response JSON (partial failure, 500):
        {"success": false, "error": "...", "errors": [str], "updated_rentals": [...]}
        """
        data = request.get_json(silent=True) or {}
        is_valid, error = validate_swap_refs(data.get('swaps'))
        if not is_valid:
            return api_error(error)

        result = apply_swap_plan(data['swaps'])

        if not result['validated']:
            return api_error(MESSAGES['swap_validation_failed'], status=409, errors=result['errors'])

        if not result['success']:
            return api_error(
                MESSAGES['swap_apply_failed'], status=500,
                errors=result['errors'],
                updated_rentals=result['updated_rentals']
            )

        return api_success(
            data={'updated_rentals': result['updated_rentals']},
            message=MESSAGES['swaps_applied'].format(count=len(result['updated_rentals']))
        )

    @bp.route('/availability/scooters/<int:scooter_id>', methods=['GET'])
    @login_required
    def availability_scooter(scooter_id):
        """
        Available periods of one scooter.

        Query params:
            start_date: First day (YYYY-MM-DD, required)
            end_date: Last day (YYYY-MM-DD, required)
        """
        start_date = request.args.get('start_date')
        end_date = request.args.get('end_date')
        if not validate_date_format(start_date) or not validate_date_format(end_date):
            return api_error('start_date and end_date are required (YYYY-MM-DD)')
        if not validate_date_range(start_date, end_date):
            return api_error('End date cannot be before start date')

        try:
            result = scan_scooter(scooter_id, start_date, end_date)
        except ValueError as e:
            status = 404 if str(e) == MESSAGES['scooter_not_found'] else 400
            return api_error(str(e), status=status)

        return api_success(data=result)

    @bp.route('/status', methods=['GET'])
    @login_required
    def fleet_status_view():
        """
        Fleet split into available, rented and maintenance.

        Query params:
            date: Day to report on (YYYY-MM-DD, default today)
        """
        on_date = request.args.get('date')
        if on_date and not validate_date_format(on_date):
            return api_error('date must use the YYYY-MM-DD format')

        return api_success(data=fleet_status(on_date))

    @bp.route('/stats', methods=['GET'])
    @login_required
    def rental_stats_view():
        """Rental counts, revenue and unpaid amount."""
        return api_success(data=rental_statistics())
