"""
Customer API endpoints.
"""

from flask import request
from flask_login import login_required

from models.customer import (
    create_customer,
    delete_customer,
    get_all_customers,
    get_customer_by_id,
    get_customer_with_rentals,
    search_customers,
    update_customer,
)
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES
from utils.validators import sanitize_input, validate_country_code, validate_email, validate_whatsapp_number


def _validate_contact(data: dict):
    """Return an error message for malformed contact fields, else None."""
    if data.get('email') and not validate_email(data['email']):
        return 'Invalid email format'
    if data.get('whatsapp_number') and not validate_whatsapp_number(data['whatsapp_number']):
        return 'Invalid WhatsApp number'
    if data.get('whatsapp_country_code') and not validate_country_code(data['whatsapp_country_code']):
        return 'Invalid country code'
    return None


def register_routes(bp):
    """Register customer API routes on the blueprint."""

    @bp.route('/customers', methods=['GET'])
    @login_required
    def customers_list():
        """
        List customers.

        Query params:
            q: Search by name, passport, WhatsApp number or email (optional)
        """
        query = sanitize_input(request.args.get('q', ''), max_length=100)
        customers = search_customers(query) if query else get_all_customers()
        return api_success(data=customers)

    @bp.route('/customers/<int:customer_id>', methods=['GET'])
    @login_required
    def customers_detail(customer_id):
        """Get a customer with rental history."""
        customer = get_customer_with_rentals(customer_id)
        if not customer:
            return api_error(MESSAGES['customer_not_found'], status=404)
        return api_success(data=customer)

    @bp.route('/customers', methods=['POST'])
    @login_required
    def customers_create():
        """Create a customer."""
        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        error = _validate_contact(data)
        if error:
            return api_error(error)

        try:
            customer_id = create_customer(
                name=sanitize_input(data.get('name'), max_length=200),
                passport_number=sanitize_input(data.get('passport_number'), max_length=50),
                whatsapp_country_code=data.get('whatsapp_country_code'),
                whatsapp_number=data.get('whatsapp_number'),
                email=data.get('email'),
                notes=data.get('notes')
            )
        except ValueError as e:
            return api_error(str(e))

        return api_success(
            data=get_customer_by_id(customer_id),
            message=MESSAGES['customer_created'],
            status=201
        )

    @bp.route('/customers/<int:customer_id>', methods=['PUT'])
    @login_required
    def customers_update(customer_id):
        """Update customer fields."""
        if not get_customer_by_id(customer_id):
            return api_error(MESSAGES['customer_not_found'], status=404)

        data = request.get_json(silent=True)
        if not data:
            return api_error(MESSAGES['no_data'])

        error = _validate_contact(data)
        if error:
            return api_error(error)

        try:
            update_customer(customer_id, **data)
        except ValueError as e:
            return api_error(str(e))

        return api_success(data=get_customer_by_id(customer_id), message=MESSAGES['customer_updated'])

    @bp.route('/customers/<int:customer_id>', methods=['DELETE'])
    @login_required
    def customers_delete(customer_id):
        """Delete a customer without pending or active rentals."""
        if not get_customer_by_id(customer_id):
            return api_error(MESSAGES['customer_not_found'], status=404)

        try:
            delete_customer(customer_id)
        except ValueError as e:
            return api_error(str(e))

        return api_success(message=MESSAGES['customer_deleted'])
