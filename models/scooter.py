"""
Scooter data access functions.
Handles fleet CRUD operations.

A scooter's stored status only records a manual maintenance lockout;
whether it is rented on a date is always derived from rentals.
"""

from database import get_db
from models.fleet_availability import SCOOTER_SIZES, STATUS_MAINTENANCE

SCOOTER_STATUSES = ('available', STATUS_MAINTENANCE)

_UPDATABLE_FIELDS = ('license_plate', 'color', 'year', 'mileage', 'size', 'status', 'notes')


def _check_fields(fields: dict) -> None:
    """Raise ValueError on an unknown size or status."""
    if 'size' in fields and fields['size'] not in SCOOTER_SIZES:
        raise ValueError(f"Invalid scooter size: {fields['size']}")
    if 'status' in fields and fields['status'] not in SCOOTER_STATUSES:
        raise ValueError(f"Invalid scooter status: {fields['status']}")


def get_all_scooters(size: str = None, include_maintenance: bool = True) -> list:
    """
    Get all scooters.

    Args:
        size: Filter by size (optional)
        include_maintenance: If False, skip scooters in maintenance

    Returns:
        List of scooter dicts ordered by ID
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM scooters WHERE 1=1'
    params = []

    if size:
        query += ' AND size = ?'
        params.append(size)

    if not include_maintenance:
        query += ' AND status != ?'
        params.append(STATUS_MAINTENANCE)

    query += ' ORDER BY id'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_scooter_by_id(scooter_id: int) -> dict:
    """
    Get scooter by ID.

    Args:
        scooter_id: Scooter ID

    Returns:
        Scooter dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM scooters WHERE id = ?', (scooter_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_scooter(license_plate: str, size: str = 'large', color: str = None,
                   year: int = None, mileage: int = 0, status: str = 'available',
                   notes: str = None) -> int:
    """
    Create new scooter.

    Args:
        license_plate: Unique plate
        size: 'small' or 'large'
        color: Display color
        year: Model year
        mileage: Current mileage
        status: 'available' or 'maintenance'
        notes: Free text

    Returns:
        New scooter ID

    Raises:
        ValueError: If plate is missing, duplicated, or size/status invalid
    """
    if not license_plate:
        raise ValueError('License plate is required')
    _check_fields({'size': size, 'status': status})

    db = get_db()
    cursor = db.cursor()

    cursor.execute('SELECT id FROM scooters WHERE license_plate = ?', (license_plate,))
    if cursor.fetchone():
        raise ValueError(f'A scooter with plate {license_plate} already exists')

    cursor.execute('''
        INSERT INTO scooters (license_plate, color, year, mileage, size, status, notes)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    ''', (license_plate, color, year, mileage or 0, size, status, notes))

    db.commit()
    return cursor.lastrowid


def update_scooter(scooter_id: int, **kwargs) -> bool:
    """
    Update scooter fields.

    Args:
        scooter_id: Scooter ID to update
        **kwargs: Fields to update (license_plate, color, year, mileage, size, status, notes)

    Returns:
        True if updated successfully

    Raises:
        ValueError: If size or status is invalid
    """
    updates = {k: v for k, v in kwargs.items() if k in _UPDATABLE_FIELDS}
    if not updates:
        return False
    _check_fields(updates)

    db = get_db()
    cursor = db.cursor()

    set_clause = ', '.join(f'{field} = ?' for field in updates)
    values = list(updates.values()) + [scooter_id]

    cursor.execute(f'''
        UPDATE scooters SET {set_clause}, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', values)

    db.commit()
    return cursor.rowcount > 0


def delete_scooter(scooter_id: int) -> bool:
    """
    Delete a scooter.

    Args:
        scooter_id: Scooter ID to delete

    Returns:
        True if deleted successfully

    Raises:
        ValueError: If the scooter has rental history
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT COUNT(*) as count FROM rentals
        WHERE scooter_id = ? AND status IN ('pending', 'active')
    ''', (scooter_id,))
    if cursor.fetchone()['count'] > 0:
        raise ValueError('Cannot delete a scooter with pending or active rentals')

    cursor.execute('SELECT COUNT(*) as count FROM rentals WHERE scooter_id = ?', (scooter_id,))
    if cursor.fetchone()['count'] > 0:
        raise ValueError('Cannot delete a scooter with rental history; set it to maintenance instead')

    cursor.execute('DELETE FROM scooters WHERE id = ?', (scooter_id,))
    db.commit()
    return cursor.rowcount > 0
