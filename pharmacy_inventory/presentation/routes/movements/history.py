"""
Movement history, movement details and the daily outbound PDF report.

The backend returns the whole history in one list; paging is done here.
"""

from datetime import date

from flask import flash, make_response, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.presentation.routes.movements import movements_bp
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.movement_service import MovementService, paginate, parse_report_day

logger = get_logger("pharmacy_inventory.routes.movements.history")

HISTORY_PAGE_SIZE = 15


@movements_bp.route('/')
@login_required
def history():
    movements = MovementService(backend.client()).list_history()
    page = request.args.get('page', 0, type=int)
    rows, total_pages = paginate(movements, page, HISTORY_PAGE_SIZE)
    page = min(max(page, 0), total_pages - 1)

    return render_template('movements/history.html',
                           movements=rows,
                           page=page,
                           total_pages=total_pages,
                           total=len(movements),
                           report_day=date.today().isoformat())


@movements_bp.route('/<movement_id>')
@login_required
def movement_detail(movement_id):
    details = MovementService(backend.client()).get_details(movement_id)
    return render_template('movements/detail.html', movement=details)


@movements_bp.route('/report')
@login_required
def daily_report():
    """Download the backend-rendered PDF of one day's outbound movements"""
    day = parse_report_day(request.args.get('data'))
    if day is None:
        flash('Select a valid date for the report', 'error')
        return redirect(url_for('movements.history'))

    try:
        pdf = MovementService(backend.client()).daily_outbound_report(day)
    except UnauthorizedError:
        raise
    except BackendError as e:
        logger.warning(f"Daily report for {day} unavailable: {e}")
        flash(e.user_message('Failed to generate the report.'), 'error')
        return redirect(url_for('movements.history'))

    logger.info(f"User {current_user.login} downloaded outbound report for {day}")
    response = make_response(pdf)
    response.headers['Content-Type'] = 'application/pdf'
    response.headers['Content-Disposition'] = (
        f'attachment; filename="{MovementService.report_filename(day)}"'
    )
    return response
