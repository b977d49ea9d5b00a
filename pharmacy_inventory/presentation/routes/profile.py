"""
Profile routes: the logged-in employee's name, login and password
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user

from pharmacy_inventory.auth import SessionUser, remember_profile
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.user_service import UserService

logger = get_logger("pharmacy_inventory.routes.profile")
profile_bp = Blueprint('profile', __name__)


@profile_bp.route('/')
@login_required
def index():
    profile = UserService(backend.client()).me()
    return render_template('profile/index.html', profile=profile)


@profile_bp.route('/info', methods=['POST'])
@login_required
def update_info():
    name = (request.form.get('name') or '').strip()
    login = (request.form.get('login') or '').strip()
    if not name or not login:
        flash('Name and login are required', 'error')
        return redirect(url_for('profile.index'))

    service = UserService(backend.client())
    try:
        service.update_profile(name, login)
        profile = service.me()
        remember_profile(profile, fallback_login=login)
        # The login is the session user id
        login_user(SessionUser(profile.login or login, profile.name, profile.id))
    except UnauthorizedError:
        raise
    except BackendError as e:
        flash(e.user_message('Failed to update the profile.'), 'error')
        return redirect(url_for('profile.index'))

    flash('Profile updated', 'success')
    return redirect(url_for('profile.index'))


@profile_bp.route('/password', methods=['POST'])
@login_required
def change_password():
    current_password = request.form.get('current_password') or ''
    new_password = request.form.get('new_password') or ''
    confirm_password = request.form.get('confirm_password') or ''

    if not current_password or not new_password:
        flash('Fill in the current and the new password', 'error')
        return redirect(url_for('profile.index'))
    if new_password != confirm_password:
        flash('The new password and its confirmation do not match', 'error')
        return redirect(url_for('profile.index'))

    try:
        UserService(backend.client()).change_password(current_password, new_password)
    except UnauthorizedError:
        raise
    except BackendError as e:
        logger.warning(f"Password change for {current_user.login} refused: {e}")
        flash(e.user_message('Failed to change the password.'), 'error')
        return redirect(url_for('profile.index'))

    flash('Password changed', 'success')
    return redirect(url_for('profile.index'))
