"""
Rental data access functions.
Handles rental CRUD, order numbers, conflict checks and statistics.

Status lifecycle: pending -> active -> completed. Only pending and active
rentals hold a scooter.
"""

import logging

from flask import current_app

from database import get_db
from models.fleet_availability import STATUS_MAINTENANCE
from utils.datetime_helpers import get_timestamp, get_today
from utils.rental_calculations import (
    BASE_DAILY_RATE,
    DEFAULT_END_TIME,
    DEFAULT_START_TIME,
    TURNAROUND_BUFFER_HOURS,
    calculate_daily_rate,
    days_between,
    has_booking_conflict_with_time,
    normalize_time,
    parse_date,
)

logger = logging.getLogger(__name__)

RENTAL_STATUSES = ('pending', 'active', 'completed')

_UPDATABLE_FIELDS = (
    'scooter_id', 'customer_id', 'customer_name', 'start_date', 'end_date',
    'start_time', 'end_time', 'status', 'pinned', 'daily_rate', 'deposit',
    'paid', 'notes', 'completed_at'
)

_SELECT_RENTALS = '''
    SELECT r.*, s.license_plate as scooter_license_plate,
           s.color as scooter_color, s.size as scooter_size
    FROM rentals r
    JOIN scooters s ON r.scooter_id = s.id
'''


def _row_to_rental(row) -> dict:
    rental = dict(row)
    rental['pinned'] = bool(rental.get('pinned'))
    rental['paid'] = bool(rental.get('paid'))
    return rental


# =============================================================================
# QUERIES
# =============================================================================

def get_all_rentals(status: str = None, scooter_id: int = None,
                    customer_id: int = None) -> list:
    """
    Get rentals with their scooter details.

    Args:
        status: Filter by status (optional)
        scooter_id: Filter by scooter (optional)
        customer_id: Filter by customer (optional)

    Returns:
        List of rental dicts ordered by start date
    """
    db = get_db()
    cursor = db.cursor()

    query = _SELECT_RENTALS + ' WHERE 1=1'
    params = []

    if status:
        query += ' AND r.status = ?'
        params.append(status)

    if scooter_id:
        query += ' AND r.scooter_id = ?'
        params.append(scooter_id)

    if customer_id:
        query += ' AND r.customer_id = ?'
        params.append(customer_id)

    query += ' ORDER BY r.start_date, r.id'

    cursor.execute(query, params)
    return [_row_to_rental(row) for row in cursor.fetchall()]


def get_rental_by_id(rental_id: int) -> dict:
    """
    Get rental by ID.

    Args:
        rental_id: Rental ID

    Returns:
        Rental dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_SELECT_RENTALS + ' WHERE r.id = ?', (rental_id,))
    row = cursor.fetchone()
    return _row_to_rental(row) if row else None


def generate_order_number(order_date: str = None, cursor=None) -> str:
    """
    Generate the next order number for a day.

    Format: YYMMDDnnn, e.g. 260315001 for the first order of 15 Mar 2026.

    Raises:
        ValueError: If the daily sequence is exhausted
    """
    day = parse_date(order_date) if order_date else get_today()
    prefix = day.strftime('%y%m%d')

    cur = cursor or get_db().cursor()
    cur.execute('''
        SELECT MAX(CAST(SUBSTR(order_number, 7, 3) AS INTEGER)) as max_seq
        FROM rentals
        WHERE order_number LIKE ?
    ''', (f'{prefix}%',))
    result = cur.fetchone()
    next_seq = (result['max_seq'] or 0) + 1

    if next_seq > 999:
        raise ValueError(f'Maximum daily orders (999) reached for {day.isoformat()}')

    return f'{prefix}{next_seq:03d}'


def check_rental_conflicts(scooter_id: int, start_date: str, end_date: str,
                           start_time: str = None, end_time: str = None,
                           exclude_rental_id: int = None) -> list:
    """
    Find pending/active rentals on a scooter that clash with a booking.

    Same-day handovers are allowed when the turnaround buffer fits.

    Returns:
        List of conflicting rental dicts (empty if none)
    """
    buffer_hours = current_app.config.get('TURNAROUND_BUFFER_HOURS', TURNAROUND_BUFFER_HOURS)
    conflicts = []
    for rental in get_all_rentals(scooter_id=scooter_id):
        if rental['status'] == 'completed' or rental['id'] == exclude_rental_id:
            continue
        if has_booking_conflict_with_time(
            start_date, end_date, start_time, end_time,
            rental['start_date'], rental['end_date'],
            rental.get('start_time'), rental.get('end_time'),
            buffer_hours
        ):
            conflicts.append(rental)
    return conflicts


# =============================================================================
# VALIDATION
# =============================================================================

def _check_booking(fields: dict, exclude_rental_id: int = None) -> None:
    """Validate dates, status and scooter for a rental about to be stored."""
    from models.scooter import get_scooter_by_id

    try:
        start = parse_date(fields['start_date'])
        end = parse_date(fields['end_date'])
    except (KeyError, TypeError, ValueError):
        raise ValueError('Start and end dates must use the YYYY-MM-DD format')
    if end < start:
        raise ValueError('End date cannot be before start date')

    if fields.get('status') not in RENTAL_STATUSES:
        raise ValueError(f"Invalid rental status: {fields.get('status')}")

    scooter = get_scooter_by_id(fields['scooter_id'])
    if not scooter:
        raise ValueError('Scooter not found')

    if fields['status'] == 'completed':
        return

    if scooter['status'] == STATUS_MAINTENANCE:
        raise ValueError(f"Scooter {scooter['license_plate']} is in maintenance")

    conflicts = check_rental_conflicts(
        fields['scooter_id'], start, end,
        fields.get('start_time'), fields.get('end_time'),
        exclude_rental_id
    )
    if conflicts:
        names = ', '.join(c['customer_name'] for c in conflicts)
        raise ValueError(f"Scooter {scooter['license_plate']} is already booked for these dates ({names})")


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def create_rental(scooter_id: int, start_date: str, end_date: str,
                  customer_name: str = None, customer_id: int = None,
                  start_time: str = None, end_time: str = None,
                  status: str = None, pinned: bool = False,
                  daily_rate: int = None, deposit: int = None,
                  paid: bool = False, notes: str = None, today=None) -> int:
    """
    Create new rental.

    Args:
        scooter_id: Assigned scooter
        start_date: Pickup date (YYYY-MM-DD)
        end_date: Return date (YYYY-MM-DD)
        customer_name: Display name (taken from the customer when omitted)
        customer_id: Linked customer (optional)
        start_time: Pickup time (default 09:00)
        end_time: Return time (default 18:00)
        status: Initial status (default: active if it starts today or earlier)
        pinned: Never reassign to another scooter
        daily_rate: Daily price (default from the rate tiers)
        deposit: Deposit held (default from config)
        paid: Whether the rental is paid
        notes: Free text
        today: Current local date (default: now)

    Returns:
        New rental ID

    Raises:
        ValueError: If the customer, dates or scooter are invalid, or the
            scooter is already booked
    """
    if customer_id and not customer_name:
        from models.customer import get_customer_by_id
        customer = get_customer_by_id(customer_id)
        if not customer:
            raise ValueError('Customer not found')
        customer_name = customer['name']
    if not customer_name:
        raise ValueError('Customer name is required')

    today = parse_date(today) if today else get_today()
    if status is None:
        status = 'active' if parse_date(start_date) <= today else 'pending'

    fields = {
        'scooter_id': scooter_id,
        'start_date': start_date,
        'end_date': end_date,
        'start_time': normalize_time(start_time, DEFAULT_START_TIME),
        'end_time': normalize_time(end_time, DEFAULT_END_TIME),
        'status': status
    }
    _check_booking(fields)

    if daily_rate is None:
        days = max(days_between(start_date, end_date), 1)
        base_rate = current_app.config.get('BASE_DAILY_RATE', BASE_DAILY_RATE)
        daily_rate = calculate_daily_rate(days, base_rate)['daily_rate']
    if deposit is None:
        deposit = current_app.config.get('DEFAULT_DEPOSIT', 0)

    db = get_db()
    cursor = db.cursor()
    order_number = generate_order_number(today.isoformat(), cursor)

    cursor.execute('''
        INSERT INTO rentals (order_number, scooter_id, customer_id, customer_name,
                             start_date, end_date, start_time, end_time, status,
                             pinned, daily_rate, deposit, paid, notes)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        order_number, scooter_id, customer_id, customer_name,
        parse_date(start_date).isoformat(), parse_date(end_date).isoformat(),
        fields['start_time'], fields['end_time'], status,
        1 if pinned else 0, daily_rate, deposit, 1 if paid else 0, notes
    ))

    db.commit()
    logger.info('Created rental %s on scooter %s (%s..%s)',
                order_number, scooter_id, start_date, end_date)
    return cursor.lastrowid


def update_rental(rental: dict) -> dict:
    """
    Persist a full rental record.

    Only known columns are written; joined fields such as the scooter plate
    are ignored and re-read from the scooter.

    Args:
        rental: Rental dict with an 'id'

    Returns:
        The stored rental dict

    Raises:
        ValueError: If the rental does not exist or the new values clash
    """
    current = get_rental_by_id(rental.get('id'))
    if not current:
        raise ValueError('Rental not found')

    merged = {**current, **{k: v for k, v in rental.items() if k in _UPDATABLE_FIELDS}}
    merged['start_time'] = normalize_time(merged.get('start_time'), DEFAULT_START_TIME)
    merged['end_time'] = normalize_time(merged.get('end_time'), DEFAULT_END_TIME)
    _check_booking(merged, exclude_rental_id=current['id'])

    updates = {field: merged.get(field) for field in _UPDATABLE_FIELDS}
    updates['start_date'] = parse_date(updates['start_date']).isoformat()
    updates['end_date'] = parse_date(updates['end_date']).isoformat()
    updates['pinned'] = 1 if updates['pinned'] else 0
    updates['paid'] = 1 if updates['paid'] else 0

    db = get_db()
    cursor = db.cursor()

    set_clause = ', '.join(f'{field} = ?' for field in updates)
    values = list(updates.values()) + [current['id']]

    cursor.execute(f'''
        UPDATE rentals SET {set_clause}, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', values)

    db.commit()
    return get_rental_by_id(current['id'])


def activate_rental(rental_id: int) -> dict:
    """
    Mark a pending rental as picked up.

    Raises:
        ValueError: If the rental does not exist or is not pending
    """
    rental = get_rental_by_id(rental_id)
    if not rental:
        raise ValueError('Rental not found')
    if rental['status'] != 'pending':
        raise ValueError('Only pending rentals can be activated')
    return update_rental({'id': rental_id, 'status': 'active'})


def complete_rental(rental_id: int, paid: bool = None) -> dict:
    """
    Mark an active rental as returned.

    Args:
        rental_id: Rental ID
        paid: Update the paid flag at return time (optional)

    Raises:
        ValueError: If the rental does not exist or is not active
    """
    rental = get_rental_by_id(rental_id)
    if not rental:
        raise ValueError('Rental not found')
    if rental['status'] != 'active':
        raise ValueError('Only active rentals can be completed')

    changes = {
        'id': rental_id,
        'status': 'completed',
        'completed_at': get_timestamp()
    }
    if paid is not None:
        changes['paid'] = paid
    return update_rental(changes)


def delete_rental(rental_id: int) -> bool:
    """
    Delete a rental.

    Returns:
        True if deleted successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('DELETE FROM rentals WHERE id = ?', (rental_id,))
    db.commit()
    return cursor.rowcount > 0


# =============================================================================
# STATISTICS
# =============================================================================

def _billed_days(rental: dict) -> int:
    """Days charged: up to the actual return when completed, else the end date."""
    until = rental.get('completed_at') or rental['end_date']
    return max(days_between(rental['start_date'], until), 0)


def calculate_rental_statistics(rentals: list, today) -> dict:
    """
    Summarize rentals for the dashboard.

    Args:
        rentals: Rental dicts
        today: Current local date; active rentals ending before it are overdue

    Returns:
        dict: {
            'total_rentals', 'pending_rentals', 'active_rentals',
            'completed_rentals', 'overdue_rentals', 'total_revenue',
            'unpaid_amount'
        }
    """
    today = parse_date(today)
    stats = {
        'total_rentals': len(rentals),
        'pending_rentals': 0,
        'active_rentals': 0,
        'completed_rentals': 0,
        'overdue_rentals': 0,
        'total_revenue': 0,
        'unpaid_amount': 0
    }

    for rental in rentals:
        status = rental.get('status')
        if status in RENTAL_STATUSES:
            stats[f'{status}_rentals'] += 1
        if status == 'active' and parse_date(rental['end_date']) < today:
            stats['overdue_rentals'] += 1

        amount = _billed_days(rental) * (rental.get('daily_rate') or 0)
        if rental.get('paid'):
            stats['total_revenue'] += amount
        elif status == 'completed':
            stats['unpaid_amount'] += amount

    return stats


def get_rental_stats(today) -> dict:
    """Statistics over every stored rental."""
    return calculate_rental_statistics(get_all_rentals(), today)
