"""
Shared extension objects, bound to the app in app.initialize_extensions.

There is one operator account, so the user loader only knows the admin id.
"""

from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()


@login_manager.user_loader
def load_user(user_id):
    """
    Load user by ID for Flask-Login.

    Args:
        user_id: The user ID as a string

    Returns:
        User object or None if not found
    """
    from models.user import ADMIN_USER_ID, get_admin_user

    if user_id == ADMIN_USER_ID:
        return get_admin_user()
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """Answer API calls without a session with a JSON 401."""
    from utils.api_response import api_error
    from utils.messages import MESSAGES

    return api_error(MESSAGES['login_required'], status=401)
