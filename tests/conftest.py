"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import os
import pytest
import tempfile

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'scooterfleet_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database files after all tests
    for suffix in ('', '-wal', '-shm'):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def app():
    """Create test application with an empty, isolated database."""
    from app import create_app
    from database import init_db

    os.environ['DATABASE_PATH'] = TEST_DB_PATH

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = TEST_DB_PATH

    with app.app_context():
        init_db(with_seed=False)
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def authenticated_client(app, client):
    """Create authenticated test client."""
    client.post('/login', data={
        'username': 'admin',
        'password': 'admin123'
    })
    return client


@pytest.fixture
def fleet(app):
    """Three large scooters and one small scooter."""
    from models.scooter import create_scooter

    return {
        'large_1': create_scooter('1ABC-101', size='large', color='Black'),
        'large_2': create_scooter('1ABC-102', size='large', color='Orange'),
        'large_3': create_scooter('1ABC-103', size='large', color='Purple'),
        'small_1': create_scooter('2XYZ-201', size='small', color='White'),
    }


# =============================================================================
# IN-MEMORY SNAPSHOT BUILDERS
# =============================================================================

def make_scooter(scooter_id, size='large', status='available', plate=None):
    """Scooter dict as returned by the data-access layer."""
    return {
        'id': scooter_id,
        'license_plate': plate or f'PLATE-{scooter_id}',
        'color': 'Black',
        'size': size,
        'status': status,
    }


def make_rental(rental_id, scooter_id, start_date, end_date, status='pending',
                start_time=None, end_time=None, pinned=False, customer_name=None):
    """Rental dict as returned by the data-access layer."""
    return {
        'id': rental_id,
        'scooter_id': scooter_id,
        'customer_name': customer_name or f'Customer {rental_id}',
        'start_date': start_date,
        'end_date': end_date,
        'start_time': start_time,
        'end_time': end_time,
        'status': status,
        'pinned': pinned,
        'daily_rate': 1200,
        'paid': False,
    }
