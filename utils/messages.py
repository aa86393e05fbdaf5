"""
Centralized API messages.
All user-facing response text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome {name}',
    'logout_success': 'Signed out',
    'scooter_created': 'Scooter added to the fleet',
    'scooter_updated': 'Scooter updated',
    'scooter_deleted': 'Scooter removed',
    'rental_created': 'Rental {order_number} created',
    'rental_updated': 'Rental updated',
    'rental_activated': 'Rental picked up',
    'rental_completed': 'Rental returned',
    'rental_deleted': 'Rental deleted',
    'customer_created': 'Customer created',
    'customer_updated': 'Customer updated',
    'customer_deleted': 'Customer deleted',
    'swaps_applied': '{count} rental(s) moved',

    # Error messages
    'invalid_credentials': 'Invalid username or password',
    'login_required': 'Please sign in to access this resource',
    'no_data': 'No data received',
    'not_found': 'Resource not found',
    'scooter_not_found': 'Scooter not found',
    'rental_not_found': 'Rental not found',
    'customer_not_found': 'Customer not found',
    'swap_validation_failed': 'Swap plan is no longer valid',
    'swap_apply_failed': 'Some swaps could not be applied',
    'internal_error': 'Internal server error',
}
