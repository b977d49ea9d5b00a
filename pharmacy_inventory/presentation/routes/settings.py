"""
Settings routes: alert thresholds and employee accounts
"""

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pharmacy_inventory.data.users import AlertSettings
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.user_service import NewEmployee, UserService
from pharmacy_inventory.utils.logging_sanitizer import sanitize_form_data

logger = get_logger("pharmacy_inventory.routes.settings")
settings_bp = Blueprint('settings', __name__)


@settings_bp.route('/')
@login_required
def index():
    service = UserService(backend.client())
    return render_template('settings/index.html',
                           alert_settings=service.get_alert_settings(),
                           employees=service.list_employees())


def _positive_int(raw, label, errors):
    try:
        value = int((raw or '').strip())
    except ValueError:
        errors.append(f'{label} must be a whole number')
        return None
    if value <= 0:
        errors.append(f'{label} must be greater than zero')
        return None
    return value


@settings_bp.route('/alerts', methods=['POST'])
@login_required
def save_alerts():
    errors = []
    expiry_days = _positive_int(request.form.get('expiry_alert_days'), 'Expiry alert days', errors)
    low_stock = _positive_int(request.form.get('low_stock_limit'), 'Low stock limit', errors)
    if errors:
        for error in errors:
            flash(error, 'error')
        return redirect(url_for('settings.index'))

    try:
        UserService(backend.client()).save_alert_settings(AlertSettings(expiry_days, low_stock))
    except UnauthorizedError:
        raise
    except BackendError as e:
        flash(e.user_message('Failed to save the alert settings.'), 'error')
        return redirect(url_for('settings.index'))

    flash('Alert settings saved', 'success')
    return redirect(url_for('settings.index'))


@settings_bp.route('/employees', methods=['POST'])
@login_required
def create_employee():
    logger.debug(f"Create employee form: {sanitize_form_data(request.form)}")
    employee, errors = NewEmployee.parse(request.form)
    admin_password = request.form.get('admin_password') or ''
    if not admin_password:
        errors.append('Confirm the operation with your password')
    if errors:
        for error in errors:
            flash(error, 'error')
        return redirect(url_for('settings.index'))

    try:
        UserService(backend.client()).create_employee(employee, admin_password)
    except UnauthorizedError as e:
        # A wrong confirmation password is answered with 403; keep the admin logged in
        logger.warning(f"Employee creation by {current_user.login} refused: {e}")
        flash(e.message or 'Administrator password not confirmed.', 'error')
        return redirect(url_for('settings.index'))
    except BackendError as e:
        flash(e.user_message('Failed to create the employee.'), 'error')
        return redirect(url_for('settings.index'))

    flash(f'Employee "{employee.name}" created', 'success')
    return redirect(url_for('settings.index'))
