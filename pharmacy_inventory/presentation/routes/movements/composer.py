"""Movement composer routes.

One composer per direction:
- /movements/compose/entrada  (stock entry, lines carry lot and expiry)
- /movements/compose/saida    (issue to a sector)

The composer (state, basket, header) lives in the server-side ComposerStore,
scoped to the browser session; only the half-typed draft line stays in the
session cookie.
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta

from flask import abort, flash, redirect, render_template, request, session, url_for
from flask_login import current_user, login_required

from pharmacy_inventory import cache
from pharmacy_inventory.business.movements import (
    ComposerStore,
    DraftLineBuilder,
    MovementComposer,
    MovementDirection,
    MovementSubmitter,
    ValidationError,
)
from pharmacy_inventory.business.movements.submitter import SUCCESS_MESSAGE
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.presentation.routes.movements import movements_bp
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.catalog_service import CatalogService
from pharmacy_inventory.utils.logging_sanitizer import sanitize_form_data

logger = get_logger("pharmacy_inventory.routes.movements.composer")

SESSION_OWNER_KEY = "composer_owner"
SESSION_DRAFT_KEY = "movement_draft_{}"

composer_store = ComposerStore(cache)


def _direction_or_404(slug: str) -> MovementDirection:
    try:
        return MovementDirection.from_slug(slug)
    except ValueError:
        abort(404)


def session_owner() -> str:
    """Scope of this browser session in the composer store, created on first use."""
    owner = session.get(SESSION_OWNER_KEY)
    if not owner:
        owner = uuid.uuid4().hex
        session[SESSION_OWNER_KEY] = owner
    return owner


def _get_composer(direction: MovementDirection) -> MovementComposer:
    return composer_store.load(session_owner(), direction)


def _set_composer(composer: MovementComposer) -> None:
    composer_store.save(session_owner(), composer)


def _get_draft(direction: MovementDirection) -> dict:
    raw = session.get(SESSION_DRAFT_KEY.format(direction.value), {})
    return raw if isinstance(raw, dict) else {}


def _set_draft(direction: MovementDirection, values: dict | None) -> None:
    key = SESSION_DRAFT_KEY.format(direction.value)
    if values:
        session[key] = values
    else:
        session.pop(key, None)
    session.modified = True


def _catalog() -> CatalogService:
    return CatalogService(backend.client())


def _selectable_items(direction: MovementDirection):
    # Issues can only draw from items that currently have stock
    return _catalog().list_items(only_with_stock=direction.requires_sector)


def _redirect_to_composer(direction: MovementDirection):
    return redirect(url_for('movements.compose', slug=direction.value))


def _apply_header(composer: MovementComposer, form) -> None:
    sector = None
    if composer.direction.requires_sector:
        sector_id = (form.get('sector_id') or '').strip()
        if sector_id:
            sectors = _catalog().list_sectors()
            sector = next((s for s in sectors if s.id == sector_id), None)
    composer.set_header(note=form.get('note', ''), destination_sector=sector)


@movements_bp.route('/compose/<slug>', methods=['GET'])
@login_required
def compose(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)

    items = []
    sectors = []
    if composer.is_open:
        items = _selectable_items(direction)
        if direction.requires_sector:
            sectors = _catalog().list_sectors()

    return render_template('movements/compose.html',
                           composer=composer,
                           direction=direction,
                           items=items,
                           sectors=sectors,
                           draft=_get_draft(direction),
                           min_expiry=(date.today() + timedelta(days=1)).isoformat())


@movements_bp.route('/compose/<slug>/open', methods=['POST'])
@login_required
def open_composer(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)
    composer.open()
    _set_composer(composer)
    _set_draft(direction, None)
    logger.info(f"User {current_user.login} opened {direction.value} composer")
    return _redirect_to_composer(direction)


@movements_bp.route('/compose/<slug>/close', methods=['POST'])
@login_required
def close_composer(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)
    composer.close()
    _set_composer(composer)
    _set_draft(direction, None)
    return redirect(url_for('movements.history'))


@movements_bp.route('/compose/<slug>/lines', methods=['POST'])
@login_required
def add_line(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)
    logger.debug(f"Add {direction.value} line: {sanitize_form_data(request.form)}")

    catalog = {item.id: item for item in _selectable_items(direction)}
    builder = DraftLineBuilder.from_form(direction, request.form, catalog)

    try:
        line = composer.add_line(builder)
    except ValidationError as e:
        for message in e.messages:
            flash(message, 'error')
        return _redirect_to_composer(direction)

    if line is None:
        for warning in builder.warnings:
            flash(warning, 'warning')
        # Keep what the user typed so the line can be corrected
        _set_draft(direction, {
            'item_id': request.form.get('item_id', ''),
            'quantity': request.form.get('quantity', ''),
            'lot_number': request.form.get('lot_number', ''),
            'expiry_date': request.form.get('expiry_date', ''),
        })
    else:
        _set_draft(direction, None)
        _set_composer(composer)
    return _redirect_to_composer(direction)


@movements_bp.route('/compose/<slug>/lines/<key>/remove', methods=['POST'])
@login_required
def remove_line(slug, key):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)
    try:
        composer.remove_line(key)
    except ValidationError as e:
        for message in e.messages:
            flash(message, 'error')
        return _redirect_to_composer(direction)
    _set_composer(composer)
    return _redirect_to_composer(direction)


@movements_bp.route('/compose/<slug>/header', methods=['POST'])
@login_required
def update_header(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)
    try:
        _apply_header(composer, request.form)
    except ValidationError as e:
        for message in e.messages:
            flash(message, 'error')
        return _redirect_to_composer(direction)
    _set_composer(composer)
    return _redirect_to_composer(direction)


@movements_bp.route('/compose/<slug>/submit', methods=['POST'])
@login_required
def submit(slug):
    direction = _direction_or_404(slug)
    composer = _get_composer(direction)

    # The submit form carries the header fields too
    if 'note' in request.form or 'sector_id' in request.form:
        try:
            _apply_header(composer, request.form)
        except ValidationError as e:
            for message in e.messages:
                flash(message, 'error')
            return _redirect_to_composer(direction)
        _set_composer(composer)

    try:
        result, applied = composer_store.submit(
            session_owner(),
            composer,
            MovementSubmitter(backend.client()),
            on_success=lambda: flash(SUCCESS_MESSAGE, 'success'),
        )
    except ValidationError as e:
        for message in e.messages:
            flash(message, 'error')
        return _redirect_to_composer(direction)

    if not result.ok:
        logger.warning(f"User {current_user.login} {direction.value} submission failed: {result.message}")
        flash(result.message, 'error')
        return _redirect_to_composer(direction)

    if applied:
        _set_draft(direction, None)
    logger.info(f"User {current_user.login} registered a {direction.value} movement")
    return redirect(url_for('movements.history'))
