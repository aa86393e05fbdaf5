"""
Operator account for Flask-Login.

The rental desk runs with a single admin account configured through
ADMIN_USERNAME and ADMIN_PASSWORD (or ADMIN_PASSWORD_HASH).
"""

import hmac

from flask import current_app
from werkzeug.security import check_password_hash

ADMIN_USER_ID = '1'


class User:
    """
    User class for Flask-Login integration.
    """

    def __init__(self, username):
        self.id = ADMIN_USER_ID
        self.username = username

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return self.id


def get_admin_user() -> User:
    """Build the configured admin user."""
    return User(current_app.config['ADMIN_USERNAME'])


def check_credentials(username: str, password: str) -> bool:
    """
    Check a login attempt against the configured admin account.

    Args:
        username: Submitted username
        password: Submitted plain password

    Returns:
        True if both match
    """
    if not username or not password:
        return False
    if not hmac.compare_digest(username, current_app.config['ADMIN_USERNAME']):
        return False

    password_hash = current_app.config.get('ADMIN_PASSWORD_HASH')
    if password_hash:
        return check_password_hash(password_hash, password)
    return hmac.compare_digest(password, current_app.config.get('ADMIN_PASSWORD') or '')
