"""Sector routes"""

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_required

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.catalog_service import CatalogService

logger = get_logger("pharmacy_inventory.routes.sectors")
sectors_bp = Blueprint('sectors', __name__)


@sectors_bp.route('/')
@login_required
def list_sectors():
    sectors = CatalogService(backend.client()).list_sectors()
    sectors.sort(key=lambda s: s.display_name.lower())
    return render_template('sectors/list.html', sectors=sectors)


@sectors_bp.route('/new', methods=['POST'])
@login_required
def create_sector():
    name = (request.form.get('name') or '').strip()
    if not name:
        flash('Sector name is required', 'error')
        return redirect(url_for('sectors.list_sectors'))
    try:
        CatalogService(backend.client()).create_sector(name)
    except UnauthorizedError:
        raise
    except BackendError as e:
        flash(e.user_message('Failed to create the sector.'), 'error')
        return redirect(url_for('sectors.list_sectors'))
    flash(f'Sector "{name}" created', 'success')
    return redirect(url_for('sectors.list_sectors'))


@sectors_bp.route('/<sector_id>/edit', methods=['GET', 'POST'])
@login_required
def edit_sector(sector_id):
    service = CatalogService(backend.client())

    if request.method == 'POST':
        name = (request.form.get('name') or '').strip()
        if not name:
            flash('Sector name is required', 'error')
            return redirect(url_for('sectors.edit_sector', sector_id=sector_id))
        try:
            service.update_sector(sector_id, name)
        except UnauthorizedError:
            raise
        except BackendError as e:
            flash(e.user_message('Failed to update the sector.'), 'error')
            return redirect(url_for('sectors.edit_sector', sector_id=sector_id))
        flash('Sector updated', 'success')
        return redirect(url_for('sectors.list_sectors'))

    sector = next((s for s in service.list_sectors() if s.id == sector_id), None)
    if sector is None:
        flash('Sector not found', 'error')
        return redirect(url_for('sectors.list_sectors'))
    return render_template('sectors/form.html', sector=sector)


@sectors_bp.route('/<sector_id>/delete', methods=['POST'])
@login_required
def delete_sector(sector_id):
    try:
        CatalogService(backend.client()).delete_sector(sector_id)
        flash('Sector deleted', 'success')
    except UnauthorizedError:
        raise
    except BackendError as e:
        logger.warning(f"Delete of sector {sector_id} refused: {e}")
        flash(e.user_message('Failed to delete the sector.'), 'error')
    return redirect(url_for('sectors.list_sectors'))
