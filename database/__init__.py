"""
SQLite storage for scooters, customers and rentals.

- connection: per-context connection on flask.g (get_db, close_db, init_db)
- schema: the three tables and their indexes
- seed: demo fleet for `flask init-db`
"""

from database.connection import get_db, close_db, init_db
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
]
