"""
Database schema definitions.
Table creation, indexes, and structure management.

Dates are stored as 'YYYY-MM-DD' text and times as 'HH:MM' text so they
compare lexicographically and come back from SQLite unchanged.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'rentals',
        'customers',
        'scooters',
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Fleet
    db.execute('''
        CREATE TABLE scooters (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            license_plate TEXT UNIQUE NOT NULL,
            color TEXT,
            year INTEGER,
            mileage INTEGER DEFAULT 0,
            size TEXT NOT NULL DEFAULT 'large' CHECK (size IN ('small', 'large')),
            status TEXT NOT NULL DEFAULT 'available' CHECK (status IN ('available', 'maintenance')),
            notes TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Customers
    db.execute('''
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            passport_number TEXT UNIQUE,
            whatsapp_country_code TEXT DEFAULT '+66',
            whatsapp_number TEXT,
            email TEXT,
            notes TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Rentals (pending reservations and active rentals)
    db.execute('''
        CREATE TABLE rentals (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_number TEXT UNIQUE NOT NULL,
            scooter_id INTEGER NOT NULL REFERENCES scooters(id),
            customer_id INTEGER REFERENCES customers(id) ON DELETE SET NULL,
            customer_name TEXT NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            start_time TEXT DEFAULT '09:00',
            end_time TEXT DEFAULT '18:00',
            status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'active', 'completed')),
            pinned INTEGER DEFAULT 0,
            daily_rate INTEGER,
            deposit INTEGER DEFAULT 0,
            paid INTEGER DEFAULT 0,
            notes TEXT,
            completed_at TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
            CHECK (end_date >= start_date)
        )
    ''')


def create_indexes(db):
    """Create performance indexes."""

    # Scooter indexes
    db.execute('CREATE INDEX idx_scooters_size ON scooters(size, status)')

    # Customer indexes
    db.execute('CREATE INDEX idx_customers_name ON customers(name)')

    # Rental indexes
    db.execute('CREATE INDEX idx_rentals_scooter ON rentals(scooter_id, status)')
    db.execute('CREATE INDEX idx_rentals_dates ON rentals(start_date, end_date)')
    db.execute('CREATE INDEX idx_rentals_customer ON rentals(customer_id)')
