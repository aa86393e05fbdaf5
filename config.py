"""
Settings for the ScooterFleet app, one class per environment.

Values come from the environment (a local .env is loaded by app.py);
the business rules for turnaround and pricing live on `Config`.
"""

import os
from datetime import timedelta


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Config:
    """Settings shared by every environment."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # SQLite file; the directory is created on first connection
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/scooterfleet.db'
    DATABASE_TIMEOUT = _env_int('DATABASE_TIMEOUT', 10)
    LOG_DIR = os.environ.get('LOG_DIR') or 'logs'

    # Session and CSRF
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    PERMANENT_SESSION_LIFETIME = timedelta(hours=_env_int('SESSION_TIMEOUT_HOURS', 8))

    # Single operator account
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin123'
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH')  # Takes precedence when set

    # Decides "today" for new rental status, rentals in progress and default dates
    TIMEZONE = os.environ.get('TIMEZONE') or 'Asia/Bangkok'

    # Rental rules
    DEFAULT_START_TIME = '09:00'
    DEFAULT_END_TIME = '18:00'
    SAME_DAY_CUTOFF_TIME = os.environ.get('SAME_DAY_CUTOFF_TIME', '16:00')
    TURNAROUND_BUFFER_HOURS = _env_int('TURNAROUND_BUFFER_HOURS', 2)
    BASE_DAILY_RATE = _env_int('BASE_DAILY_RATE', 1200)
    DEFAULT_DEPOSIT = _env_int('DEFAULT_DEPOSIT', 2000)

    APP_NAME = 'ScooterFleet'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Local development: debug on, plain HTTP."""

    DEBUG = True
    TESTING = False
    WTF_CSRF_SSL_STRICT = False


class ProductionConfig(Config):
    """Behind gunicorn; HTTPS cookies unless SESSION_COOKIE_SECURE=false."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """
        Refuse to start with development defaults.

        Raises:
            ValueError: If the secret key, database path or admin password
                is not provided by the environment
        """
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key or len(secret_key) < 32:
            raise ValueError('SECRET_KEY must be set to at least 32 characters in production')
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError('DATABASE_PATH must be set in production')
        if not (os.environ.get('ADMIN_PASSWORD') or os.environ.get('ADMIN_PASSWORD_HASH')):
            raise ValueError('ADMIN_PASSWORD or ADMIN_PASSWORD_HASH must be set in production')


class TestConfig(Config):
    """pytest: CSRF off, fixed admin credentials, throwaway database."""

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    SECRET_KEY = 'test-secret-key'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'admin123'
    ADMIN_PASSWORD_HASH = None
    TIMEZONE = 'Asia/Bangkok'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
