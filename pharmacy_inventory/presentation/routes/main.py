"""
Main routes: landing redirect, dashboard and the JSON feeds of its charts
"""

from flask import Blueprint, jsonify, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import ApiError
from pharmacy_inventory.services.dashboard_service import CONSUMPTION_PERIODS, DashboardService

logger = get_logger("pharmacy_inventory.routes.main")
main = Blueprint('main', __name__)


@main.route('/')
@login_required
def index():
    return redirect(url_for('main.dashboard'))


@main.route('/dashboard')
@login_required
def dashboard():
    """Counters plus the expiring-lot and low-stock alert lists"""
    logger.debug(f"User {current_user.login} accessing dashboard")
    service = DashboardService(backend.client())

    stats = service.get_stats()
    expiring = service.expiring_lots()
    low_stock = service.low_stock()

    logger.info(f"Dashboard loaded - expiring: {len(expiring)}, low stock: {len(low_stock)}")
    return render_template('dashboard.html',
                           stats=stats,
                           expiring=expiring,
                           low_stock=low_stock,
                           periods=CONSUMPTION_PERIODS)


def _chart_error(e: ApiError):
    logger.warning(f"Chart data unavailable: {e}")
    return jsonify({'error': e.user_message('Failed to load chart data.')}), 502


@main.route('/dashboard/charts/movements')
@login_required
def chart_movements():
    try:
        series = DashboardService(backend.client()).movements_per_month()
    except ApiError as e:
        return _chart_error(e)
    return jsonify(series)


@main.route('/dashboard/charts/stock')
@login_required
def chart_stock():
    try:
        points = DashboardService(backend.client()).stock_by_item()
    except ApiError as e:
        return _chart_error(e)
    return jsonify([p.to_json() for p in points])


@main.route('/dashboard/charts/sector-consumption')
@login_required
def chart_sector_consumption():
    period = (request.args.get('periodo') or 'MES').upper()
    if period not in CONSUMPTION_PERIODS:
        return jsonify({'error': f'Unknown period: {period}'}), 400
    try:
        points = DashboardService(backend.client()).consumption_by_sector(period)
    except ApiError as e:
        return _chart_error(e)
    return jsonify([p.to_json() for p in points])
