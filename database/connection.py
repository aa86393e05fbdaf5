"""
SQLite connection handling.

One connection per application context, kept on `flask.g` and closed on
teardown. Rows come back as `sqlite3.Row` so models can `dict(row)` them.
"""

import os
import sqlite3
from flask import g, current_app


def get_db():
    """
    Connection for the current context, opened on first use.

    Returns:
        sqlite3.Connection with foreign keys on and WAL journaling
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/scooterfleet.db')
        if db_path != ':memory:':
            os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)

        g.db = sqlite3.connect(db_path, timeout=current_app.config.get('DATABASE_TIMEOUT', 10))
        g.db.row_factory = sqlite3.Row
        g.db.execute('PRAGMA foreign_keys = ON')
        # Readers (availability checks) do not block the rental writer
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def close_db(e=None):
    """Teardown hook; `e` is the exception that ended the context, if any."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(with_seed: bool = True):
    """
    Recreate every table. Existing data is lost.

    Args:
        with_seed: Insert the demo fleet after creating the schema
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()
    drop_tables(db)
    create_tables(db)
    create_indexes(db)

    if with_seed:
        seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
