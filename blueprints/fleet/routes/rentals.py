"""
Rental API endpoints.

Handles rental CRUD and the pending -> active -> completed lifecycle.
"""

from flask import current_app, request
from flask_login import login_required

from models.rental import (
    RENTAL_STATUSES,
    activate_rental,
    complete_rental,
    create_rental,
    delete_rental,
    get_all_rentals,
    get_rental_by_id,
    update_rental,
)
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES
from utils.validators import validate_date_format, validate_date_range, validate_time_format


def _validate_rental_data(data: dict, partial: bool = False):
    """
    Validate rental request fields.

    Args:
        data: Request JSON
        partial: Allow missing required fields (updates)

    Returns:
        Error message or None if valid
    """
    if not partial:
        for field in ('scooter_id', 'start_date', 'end_date'):
            if not data.get(field):
                return f'{field} is required'
        if not data.get('customer_name') and not data.get('customer_id'):
            return 'customer_name or customer_id is required'

    for field in ('start_date', 'end_date'):
        if field in data and not validate_date_format(data[field]):
            return f'{field} must use the YYYY-MM-DD format'
    if 'start_date' in data and 'end_date' in data:
        if not validate_date_range(data['start_date'], data['end_date']):
            return 'End date cannot be before start date'

    for field in ('start_time', 'end_time'):
        if data.get(field) and not validate_time_format(data[field]):
            return f'{field} must use the HH:MM format'

    if data.get('status') and data['status'] not in RENTAL_STATUSES:
        return f"Invalid rental status: {data['status']}"

    return None


def register_routes(bp):
    """Register rental API routes on the blueprint."""

    @bp.route('/rentals', methods=['GET'])
    @login_required
    def rentals_list():
        """
        List rentals.

        Query params:
            status: 'pending', 'active' or 'completed' (optional)
            scooter_id: Filter by scooter (optional)
            customer_id: Filter by customer (optional)
        """
        rentals = get_all_rentals(
            status=request.args.get('status'),
            scooter_id=request.args.get('scooter_id', type=int),
            customer_id=request.args.get('customer_id', type=int)
        )
        return api_success(data=rentals)

    @bp.route('/rentals/<int:rental_id>', methods=['GET'])
    @login_required
    def rentals_detail(rental_id):
        """Get one rental."""
        rental = get_rental_by_id(rental_id)
        if not rental:
            return api_error(MESSAGES['rental_not_found'], status=404)
        return api_success(data=rental)

    @bp.route('/rentals', methods=['POST'])
    @login_required
    def rentals_create():
        """
        Create a rental.

        Request JSON:
        {
            "scooter_id": int,
            "start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD",
            "customer_name": str, "customer_id": int,
            "start_time": "HH:MM", "end_time": "HH:MM",
            "pinned": bool, "daily_rate": int, "deposit": int, "paid": bool, "notes": str
        }

        Response JSON (conflict):
        {
            "success": false,
            "error": "Scooter 1ABC-101 is already booked for these dates (...)"
        }
        """
        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        error = _validate_rental_data(data)
        if error:
            return api_error(error)

        try:
            rental_id = create_rental(
                scooter_id=data['scooter_id'],
                start_date=data['start_date'],
                end_date=data['end_date'],
                customer_name=data.get('customer_name'),
                customer_id=data.get('customer_id'),
                start_time=data.get('start_time'),
                end_time=data.get('end_time'),
                status=data.get('status'),
                pinned=bool(data.get('pinned', False)),
                daily_rate=data.get('daily_rate'),
                deposit=data.get('deposit'),
                paid=bool(data.get('paid', False)),
                notes=data.get('notes')
            )
        except ValueError as e:
            return api_error(str(e))

        rental = get_rental_by_id(rental_id)
        return api_success(
            data=rental,
            message=MESSAGES['rental_created'].format(order_number=rental['order_number']),
            status=201
        )

    @bp.route('/rentals/<int:rental_id>', methods=['PUT'])
    @login_required
    def rentals_update(rental_id):
        """Update rental fields (dates, times, scooter, pinned, payment)."""
        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        error = _validate_rental_data(data, partial=True)
        if error:
            return api_error(error)

        if not get_rental_by_id(rental_id):
            return api_error(MESSAGES['rental_not_found'], status=404)

        try:
            rental = update_rental({**data, 'id': rental_id})
        except ValueError as e:
            return api_error(str(e))

        return api_success(data=rental, message=MESSAGES['rental_updated'])

    @bp.route('/rentals/<int:rental_id>/activate', methods=['POST'])
    @login_required
    def rentals_activate(rental_id):
        """Hand the scooter over to the customer."""
        if not get_rental_by_id(rental_id):
            return api_error(MESSAGES['rental_not_found'], status=404)

        try:
            rental = activate_rental(rental_id)
        except ValueError as e:
            return api_error(str(e))

        return api_success(data=rental, message=MESSAGES['rental_activated'])

    @bp.route('/rentals/<int:rental_id>/complete', methods=['POST'])
    @login_required
    def rentals_complete(rental_id):
        """
        Record the scooter's return.

        Request JSON (optional):
        {"paid": bool}
        """
        if not get_rental_by_id(rental_id):
            return api_error(MESSAGES['rental_not_found'], status=404)

        data = request.get_json(silent=True) or {}
        try:
            rental = complete_rental(rental_id, paid=data.get('paid'))
        except ValueError as e:
            return api_error(str(e))

        current_app.logger.info('Rental %s completed', rental['order_number'])
        return api_success(data=rental, message=MESSAGES['rental_completed'])

    @bp.route('/rentals/<int:rental_id>', methods=['DELETE'])
    @login_required
    def rentals_delete(rental_id):
        """Delete a rental."""
        if not delete_rental(rental_id):
            return api_error(MESSAGES['rental_not_found'], status=404)
        return api_success(message=MESSAGES['rental_deleted'])
