"""
Stock routes: balances per item, lots of one item, lot adjustment
"""

from datetime import date

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.grid_state import PAGE_SIZE_OPTIONS, GridState
from pharmacy_inventory.services.stock_service import LotAdjustment, StockService

logger = get_logger("pharmacy_inventory.routes.stock")
stock_bp = Blueprint('stock', __name__)


@stock_bp.route('/')
@login_required
def balances():
    state = GridState.parse(request.args, default_size=current_app.config['ITEMS_PAGE_SIZE'])
    page = StockService(backend.client()).list_balances(state.page, state.size, state.search)
    return render_template('stock/list.html', page=page, state=state, page_sizes=PAGE_SIZE_OPTIONS)


@stock_bp.route('/item/<item_id>')
@login_required
def item_lots(item_id):
    lots = StockService(backend.client()).list_lots(item_id)
    item_name = lots[0].item_name if lots else request.args.get('name', '')
    return render_template('stock/lots.html',
                           item_id=item_id,
                           item_name=item_name,
                           lots=lots,
                           today=date.today())


@stock_bp.route('/item/<item_id>/lots/<lot_id>/adjust', methods=['POST'])
@login_required
def adjust_lot(item_id, lot_id):
    adjustment, errors = LotAdjustment.parse(request.form)
    if errors:
        for error in errors:
            flash(error, 'error')
        return redirect(url_for('stock.item_lots', item_id=item_id))

    try:
        StockService(backend.client()).adjust_lot(lot_id, adjustment)
    except UnauthorizedError:
        raise
    except BackendError as e:
        logger.warning(f"Lot {lot_id} adjustment by {current_user.login} failed: {e}")
        flash(e.user_message('Failed to adjust the lot.'), 'error')
        return redirect(url_for('stock.item_lots', item_id=item_id))

    flash('Lot adjusted successfully', 'success')
    return redirect(url_for('stock.item_lots', item_id=item_id))
