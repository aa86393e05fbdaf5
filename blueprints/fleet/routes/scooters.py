"""
Scooter API endpoints.
"""

from flask import current_app, request
from flask_login import login_required

from models.scooter import (
    create_scooter,
    delete_scooter,
    get_all_scooters,
    get_scooter_by_id,
    update_scooter,
)
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES


def register_routes(bp):
    """Register scooter API routes on the blueprint."""

    @bp.route('/scooters', methods=['GET'])
    @login_required
    def scooters_list():
        """
        List scooters.

        Query params:
            size: 'small' or 'large' (optional)
            include_maintenance: 'false' to hide scooters in maintenance
        """
        include_maintenance = request.args.get('include_maintenance', 'true').lower() != 'false'
        scooters = get_all_scooters(
            size=request.args.get('size'),
            include_maintenance=include_maintenance
        )
        return api_success(data=scooters)

    @bp.route('/scooters/<int:scooter_id>', methods=['GET'])
    @login_required
    def scooters_detail(scooter_id):
        """Get one scooter."""
        scooter = get_scooter_by_id(scooter_id)
        if not scooter:
            return api_error(MESSAGES['scooter_not_found'], status=404)
        return api_success(data=scooter)

    @bp.route('/scooters', methods=['POST'])
    @login_required
    def scooters_create():
        """
        Add a scooter to the fleet.

        Request JSON:
        {
            "license_plate": str,
            "size": "small" | "large",
            "color": str, "year": int, "mileage": int, "status": str, "notes": str
        }
        """
        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        try:
            scooter_id = create_scooter(
                license_plate=(data.get('license_plate') or '').strip(),
                size=data.get('size', 'large'),
                color=data.get('color'),
                year=data.get('year'),
                mileage=data.get('mileage', 0),
                status=data.get('status', 'available'),
                notes=data.get('notes')
            )
        except ValueError as e:
            return api_error(str(e))

        return api_success(
            data=get_scooter_by_id(scooter_id),
            message=MESSAGES['scooter_created'],
            status=201
        )

    @bp.route('/scooters/<int:scooter_id>', methods=['PUT'])
    @login_required
    def scooters_update(scooter_id):
        """Update scooter fields (setting status to 'maintenance' takes it out of service)."""
        if not get_scooter_by_id(scooter_id):
            return api_error(MESSAGES['scooter_not_found'], status=404)

        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        try:
            update_scooter(scooter_id, **data)
        except ValueError as e:
            return api_error(str(e))

        return api_success(data=get_scooter_by_id(scooter_id), message=MESSAGES['scooter_updated'])

    @bp.route('/scooters/<int:scooter_id>', methods=['DELETE'])
    @login_required
    def scooters_delete(scooter_id):
        """Remove a scooter without rental history."""
        if not get_scooter_by_id(scooter_id):
            return api_error(MESSAGES['scooter_not_found'], status=404)

        try:
            delete_scooter(scooter_id)
        except ValueError as e:
            return api_error(str(e))

        current_app.logger.info('Scooter %s deleted', scooter_id)
        return api_success(message=MESSAGES['scooter_deleted'])
