"""
Item catalog routes: paged list with search and tabs, create, edit, detail and delete.

List state (tab, page, size, search) lives in the query string.
"""

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pharmacy_inventory.data.catalog import ItemKind, MedicineType
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import BackendError, UnauthorizedError
from pharmacy_inventory.services.catalog_service import CatalogService, ItemForm
from pharmacy_inventory.services.grid_state import PAGE_SIZE_OPTIONS, GridState
from pharmacy_inventory.utils.logging_sanitizer import sanitize_form_data

logger = get_logger("pharmacy_inventory.routes.items")
items_bp = Blueprint('items', __name__)


def _kind_or_404(slug: str) -> ItemKind:
    kind = ItemKind.parse(slug)
    if kind is None:
        abort(404)
    return kind


@items_bp.route('/')
@login_required
def list_items():
    state = GridState.parse(request.args,
                            default_size=current_app.config['ITEMS_PAGE_SIZE'],
                            default_kind=ItemKind.MEDICAMENTO)

    page = CatalogService(backend.client()).search_items(state.kind, state.page, state.size, state.search)
    logger.debug(f"User {current_user.login} listing {state.kind.value} page {state.page} "
                 f"({len(page.content)} of {page.total_elements})")

    return render_template('items/list.html',
                           page=page,
                           state=state,
                           kinds=list(ItemKind),
                           page_sizes=PAGE_SIZE_OPTIONS)


@items_bp.route('/<kind_slug>/new', methods=['GET', 'POST'])
@login_required
def create_item(kind_slug):
    kind = _kind_or_404(kind_slug)

    if request.method == 'POST':
        logger.debug(f"Create {kind.value} form: {sanitize_form_data(request.form)}")
        item_form, errors = ItemForm.parse(kind, request.form)
        if errors:
            for error in errors:
                flash(error, 'error')
            return render_template('items/form.html', kind=kind, item=None,
                                   values=request.form, medicine_types=list(MedicineType))
        try:
            CatalogService(backend.client()).create_item(kind, item_form)
        except UnauthorizedError:
            raise
        except BackendError as e:
            flash(e.user_message(f'Failed to create {kind.label.lower()}.'), 'error')
            return render_template('items/form.html', kind=kind, item=None,
                                   values=request.form, medicine_types=list(MedicineType))

        flash(f'{kind.label} "{item_form.name}" created successfully', 'success')
        return redirect(url_for('items.list_items', kind=kind.slug))

    return render_template('items/form.html', kind=kind, item=None,
                           values={}, medicine_types=list(MedicineType))


@items_bp.route('/<kind_slug>/<item_id>')
@login_required
def item_detail(kind_slug, item_id):
    kind = _kind_or_404(kind_slug)
    item = CatalogService(backend.client()).get_item(kind, item_id)
    return render_template('items/detail.html', kind=kind, item=item)


@items_bp.route('/<kind_slug>/<item_id>/edit', methods=['GET', 'POST'])
@login_required
def edit_item(kind_slug, item_id):
    kind = _kind_or_404(kind_slug)
    service = CatalogService(backend.client())
    item = service.get_item(kind, item_id)

    if request.method == 'POST':
        item_form, errors = ItemForm.parse(kind, request.form)
        if errors:
            for error in errors:
                flash(error, 'error')
            return render_template('items/form.html', kind=kind, item=item,
                                   values=request.form, medicine_types=list(MedicineType))
        try:
            service.update_item(kind, item_id, item_form)
        except UnauthorizedError:
            raise
        except BackendError as e:
            flash(e.user_message(f'Failed to update {kind.label.lower()}.'), 'error')
            return render_template('items/form.html', kind=kind, item=item,
                                   values=request.form, medicine_types=list(MedicineType))

        flash(f'{kind.label} "{item_form.name}" updated successfully', 'success')
        return redirect(url_for('items.item_detail', kind_slug=kind.slug, item_id=item_id))

    values = {
        'name': item.display_name,
        'description': item.description,
        'unit': item.unit,
        'minimum_stock': item.minimum_stock,
        'medicine_type': item.medicine_type.value if item.medicine_type else '',
    }
    return render_template('items/form.html', kind=kind, item=item,
                           values=values, medicine_types=list(MedicineType))


@items_bp.route('/<kind_slug>/<item_id>/delete', methods=['POST'])
@login_required
def delete_item(kind_slug, item_id):
    kind = _kind_or_404(kind_slug)
    try:
        CatalogService(backend.client()).delete_item(kind, item_id)
        flash(f'{kind.label} deleted', 'success')
    except UnauthorizedError:
        raise
    except BackendError as e:
        logger.warning(f"Delete of {kind.value} {item_id} refused: {e}")
        flash(e.user_message(f'Failed to delete {kind.label.lower()}.'), 'error')
    return redirect(url_for('items.list_items', kind=kind.slug))
