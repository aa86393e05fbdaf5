"""
Input validation helper functions.
Provides validation for common input types and availability requests.
"""

import re
from datetime import datetime

SCOOTER_SIZE_FILTERS = ('any', 'small', 'large')

_SWAP_REF_KEYS = ('rental_id', 'from_scooter_id', 'to_scooter_id')


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_whatsapp_number(number: str) -> bool:
    """
    Validate a WhatsApp number without its country code.
    Accepts 6 to 15 digits, ignoring spaces and common separators.

    Args:
        number: Phone number to validate

    Returns:
        True if valid
    """
    if not number:
        return False

    cleaned = re.sub(r'[\s\-\(\)]', '', number)
    return bool(re.match(r'^[0-9]{6,15}$', cleaned))


def validate_country_code(code: str) -> bool:
    """Validate an international dialing prefix such as '+66'."""
    if not code:
        return False
    return bool(re.match(r'^\+[0-9]{1,4}$', code))


def validate_date_range(start_date: str, end_date: str) -> bool:
    """
    Validate that end date is not before start date.

    Args:
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)

    Returns:
        True if valid date range
    """
    try:
        start = datetime.strptime(start_date, '%Y-%m-%d')
        end = datetime.strptime(end_date, '%Y-%m-%d')
        return end >= start
    except (TypeError, ValueError):
        return False


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    try:
        datetime.strptime(date_str, '%Y-%m-%d')
        return True
    except (TypeError, ValueError):
        return False


def validate_time_format(time_str: str) -> bool:
    """Validate time is a 24h HH:MM string."""
    if not time_str:
        return False
    return bool(re.match(r'^([01][0-9]|2[0-3]):[0-5][0-9]$', time_str))


def validate_availability_request(data: dict) -> tuple:
    """
    Validate an availability check/optimize request body.

    Args:
        data: Request JSON

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not data:
        return False, 'No data received'

    start_date = data.get('start_date')
    end_date = data.get('end_date')
    if not start_date or not end_date:
        return False, 'start_date and end_date are required'
    if not validate_date_format(start_date) or not validate_date_format(end_date):
        return False, 'Dates must use the YYYY-MM-DD format'
    if not validate_date_range(start_date, end_date):
        return False, 'End date cannot be before start date'

    size = data.get('size') or 'any'
    if size not in SCOOTER_SIZE_FILTERS:
        return False, f'Unknown scooter size: {size}'

    count = data.get('count', 1)
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        return False, 'count must be a positive integer'

    for field in ('pickup_time', 'return_time'):
        value = data.get(field)
        if value and not validate_time_format(value):
            return False, f'{field} must use the HH:MM format'

    return True, ''


def validate_swap_refs(swaps) -> tuple:
    """
    Validate a list of swap references.

    Each item needs integer rental_id, from_scooter_id and to_scooter_id.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(swaps, list) or not swaps:
        return False, 'swaps must be a non-empty list'

    for index, ref in enumerate(swaps):
        if not isinstance(ref, dict):
            return False, f'Swap {index} must be an object'
        for key in _SWAP_REF_KEYS:
            value = ref.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                return False, f'Swap {index}: {key} must be an integer'
        if ref['from_scooter_id'] == ref['to_scooter_id']:
            return False, f'Swap {index}: source and target scooter are the same'

    return True, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = text.strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
