"""
Authentication routes: login, logout, current session.
"""

from flask import Blueprint, current_app, request
from flask_login import current_user, login_required, login_user, logout_user

from blueprints.auth.forms import LoginForm
from models.user import check_credentials, get_admin_user
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Sign in the operator.

    Request (form or JSON):
        username, password, remember_me (optional)
    """
    if current_user.is_authenticated:
        return api_success(data={'username': current_user.username})

    form = LoginForm()

    if not form.validate_on_submit():
        errors = [message for messages in form.errors.values() for message in messages]
        return api_error(errors[0] if errors else MESSAGES['invalid_credentials'], status=400)

    if not check_credentials(form.username.data, form.password.data):
        current_app.logger.warning('Failed login for %s from %s', form.username.data, request.remote_addr)
        return api_error(MESSAGES['invalid_credentials'], status=401)

    user = get_admin_user()
    login_user(user, remember=form.remember_me.data)
    current_app.logger.info('User %s signed in', user.username)

    return api_success(
        data={'username': user.username},
        message=MESSAGES['login_success'].format(name=user.username)
    )


@auth_bp.route('/logout')
@login_required
def logout():
    """Sign out the current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current session details."""
    return api_success(data={'username': current_user.username})


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token to send as X-CSRFToken on state-changing requests."""
    from flask_wtf.csrf import generate_csrf

    return api_success(data={'csrf_token': generate_csrf()})
