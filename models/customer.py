"""
Customer data access functions.
Handles customer CRUD operations, search, and rental history.
"""

from database import get_db

_UPDATABLE_FIELDS = ('name', 'passport_number', 'whatsapp_country_code',
                     'whatsapp_number', 'email', 'notes')


# =============================================================================
# READ
# =============================================================================

def get_all_customers() -> list:
    """
    Get all customers with their rental count.

    Returns:
        List of customer dicts, newest first
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT c.*,
               (SELECT COUNT(*) FROM rentals WHERE customer_id = c.id) as rental_count
        FROM customers c
        ORDER BY c.created_at DESC, c.id DESC
    ''')
    return [dict(row) for row in cursor.fetchall()]


def get_customer_by_id(customer_id: int) -> dict:
    """
    Get customer by ID.

    Args:
        customer_id: Customer ID

    Returns:
        Customer dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM customers WHERE id = ?', (customer_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def search_customers(query: str) -> list:
    """
    Search customers by name, passport, WhatsApp number, or email.

    Args:
        query: Search query string

    Returns:
        List of matching customer dicts (max 50)
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT * FROM customers
        WHERE name LIKE ? OR passport_number LIKE ? OR whatsapp_number LIKE ? OR email LIKE ?
        ORDER BY name
        LIMIT 50
    ''', [f'%{query}%'] * 4)
    return [dict(row) for row in cursor.fetchall()]


def get_customer_with_rentals(customer_id: int) -> dict:
    """
    Get a customer together with their rental history.

    Returns:
        Customer dict with a 'rentals' list, or None if not found
    """
    from models.rental import get_all_rentals

    customer = get_customer_by_id(customer_id)
    if not customer:
        return None
    customer['rentals'] = get_all_rentals(customer_id=customer_id)
    return customer


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def create_customer(name: str, **kwargs) -> int:
    """
    Create new customer.

    Args:
        name: Full name (required)
        **kwargs: Optional fields (passport_number, whatsapp_country_code,
            whatsapp_number, email, notes)

    Returns:
        New customer ID

    Raises:
        ValueError: If the name is missing or the passport is already registered
    """
    if not name or not name.strip():
        raise ValueError('Customer name is required')

    db = get_db()
    cursor = db.cursor()

    passport = kwargs.get('passport_number') or None
    if passport:
        cursor.execute('SELECT id FROM customers WHERE passport_number = ?', (passport,))
        if cursor.fetchone():
            raise ValueError(f'A customer with passport {passport} already exists')

    cursor.execute('''
        INSERT INTO customers
        (name, passport_number, whatsapp_country_code, whatsapp_number, email, notes)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (name.strip(), passport,
          kwargs.get('whatsapp_country_code') or '+66',
          kwargs.get('whatsapp_number'), kwargs.get('email'), kwargs.get('notes')))

    db.commit()
    return cursor.lastrowid


def update_customer(customer_id: int, **kwargs) -> bool:
    """
    Update customer fields.

    Args:
        customer_id: Customer ID to update
        **kwargs: Fields to update

    Returns:
        True if updated successfully

    Raises:
        ValueError: If the name is blanked or the passport belongs to another customer
    """
    db = get_db()

    if 'name' in kwargs and not (kwargs['name'] or '').strip():
        raise ValueError('Customer name is required')

    passport = kwargs.get('passport_number')
    if passport:
        cursor = db.cursor()
        cursor.execute('SELECT id FROM customers WHERE passport_number = ? AND id != ?',
                       (passport, customer_id))
        if cursor.fetchone():
            raise ValueError(f'A customer with passport {passport} already exists')

    updates = []
    values = []

    for field in _UPDATABLE_FIELDS:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(customer_id)

    cursor = db.cursor()
    cursor.execute(f'UPDATE customers SET {", ".join(updates)} WHERE id = ?', values)
    db.commit()

    return cursor.rowcount > 0


def delete_customer(customer_id: int) -> bool:
    """
    Delete customer (hard delete).
    Only allowed if no pending or active rentals.

    Returns:
        True if deleted successfully

    Raises:
        ValueError: If the customer has pending or active rentals
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        SELECT COUNT(*) as count
        FROM rentals
        WHERE customer_id = ? AND status IN ('pending', 'active')
    ''', (customer_id,))

    if cursor.fetchone()['count'] > 0:
        raise ValueError('Cannot delete a customer with pending or active rentals')

    cursor.execute('DELETE FROM customers WHERE id = ?', (customer_id,))
    db.commit()

    return cursor.rowcount > 0
