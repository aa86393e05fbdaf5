"""
Database seed data.
Demo fleet for fresh database installations.
"""


def seed_database(db):
    """Insert initial seed data."""

    # 1. Fleet
    scooters_data = [
        ('1ABC-101', 'Black', 2023, 'large'),
        ('1ABC-102', 'Orange', 2023, 'large'),
        ('1ABC-103', 'Purple', 2022, 'large'),
        ('1ABC-104', 'Pink', 2024, 'large'),
        ('2XYZ-201', 'White', 2024, 'small'),
        ('2XYZ-202', 'Blue', 2022, 'small'),
    ]

    for license_plate, color, year, size in scooters_data:
        db.execute('''
            INSERT INTO scooters (license_plate, color, year, size)
            VALUES (?, ?, ?, ?)
        ''', (license_plate, color, year, size))

    # 2. Example customers
    customers_data = [
        ('Walk-in Customer', None, '+66', None),
        ('Demo Traveller', 'X1234567', '+44', '7700900123'),
    ]

    for name, passport, country_code, number in customers_data:
        db.execute('''
            INSERT INTO customers (name, passport_number, whatsapp_country_code, whatsapp_number)
            VALUES (?, ?, ?, ?)
        ''', (name, passport, country_code, number))
