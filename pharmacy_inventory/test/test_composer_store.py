"""
Tests for ComposerStore: composers kept in the Flask-Caching cache and
submitted against whatever is stored when the backend answers.
"""
import uuid
from datetime import date, timedelta

import pytest

from conftest import FakeResponse
from pharmacy_inventory import cache
from pharmacy_inventory.business.movements import (
    ComposerState,
    ComposerStore,
    DraftLineBuilder,
    MovementComposer,
    MovementDirection,
    MovementSubmitter,
    ValidationError,
)
from pharmacy_inventory.data.catalog import CatalogItem, ItemKind, Sector

PARACETAMOL = CatalogItem(id='i1', display_name='Paracetamol', kind=ItemKind.MEDICAMENTO)
PEDIATRIA = Sector(id='s2', display_name='Pediatria')


@pytest.fixture
def store(app):
    with app.app_context():
        yield ComposerStore(cache)


@pytest.fixture
def owner():
    return uuid.uuid4().hex


def open_composer(direction=MovementDirection.INBOUND):
    composer = MovementComposer(direction)
    composer.open()
    builder = DraftLineBuilder(direction)
    builder.item = PARACETAMOL
    builder.quantity = 10
    if direction.requires_lot:
        builder.lot_number = 'L1'
        builder.expiry_date = date.today() + timedelta(days=1)
    composer.add_line(builder)
    return composer


def test_unknown_owner_loads_a_closed_composer(store, owner):
    composer = store.load(owner, MovementDirection.OUTBOUND)
    assert composer.state is ComposerState.CLOSED
    assert composer.basket.is_empty


def test_directions_are_stored_separately(store, owner):
    store.save(owner, open_composer(MovementDirection.INBOUND))

    assert store.load(owner, MovementDirection.INBOUND).state is ComposerState.OPEN
    assert store.load(owner, MovementDirection.OUTBOUND).state is ComposerState.CLOSED
    assert store.load(uuid.uuid4().hex, MovementDirection.INBOUND).state is ComposerState.CLOSED


def test_successful_submit_closes_the_stored_dialog_and_refreshes_once(store, owner, api, fake_backend):
    composer = open_composer()
    store.save(owner, composer)
    refreshes = []

    result, applied = store.submit(owner, composer, MovementSubmitter(api), on_success=lambda: refreshes.append(1))

    assert result.ok and applied
    stored = store.load(owner, MovementDirection.INBOUND)
    assert stored.state is ComposerState.CLOSED
    assert stored.basket.is_empty
    assert refreshes == [1]


def test_failed_submit_reopens_with_basket_and_sector(store, owner, api, fake_backend):
    fake_backend.on('POST', '/movimentacoes/saida', status=400, json={'message': 'Estoque insuficiente'})
    composer = open_composer(MovementDirection.OUTBOUND)
    composer.set_header(destination_sector=PEDIATRIA)
    store.save(owner, composer)

    result, applied = store.submit(owner, composer, MovementSubmitter(api))

    assert result.message == 'Estoque insuficiente'
    assert applied
    stored = store.load(owner, MovementDirection.OUTBOUND)
    assert stored.state is ComposerState.OPEN
    assert len(stored.basket) == 1
    assert stored.destination_sector == PEDIATRIA


def test_submitting_state_is_visible_while_the_backend_works(store, owner, api, fake_backend):
    composer = open_composer()
    seen = []

    def record_state(call):
        seen.append(store.load(owner, MovementDirection.INBOUND).state)
        return FakeResponse(201, json={'id': 'm3'})

    fake_backend.on('POST', '/movimentacoes/entrada', handler=record_state)

    store.submit(owner, composer, MovementSubmitter(api))

    assert seen == [ComposerState.SUBMITTING]
    # Claim released
    assert cache.get(store.lock_key(owner, MovementDirection.INBOUND)) is None


def test_unexpected_error_reopens_and_releases_the_claim(store, owner, api, fake_backend):
    fake_backend.on('POST', '/movimentacoes/entrada', error=RuntimeError('boom'))
    composer = open_composer()

    with pytest.raises(RuntimeError):
        store.submit(owner, composer, MovementSubmitter(api))

    assert store.load(owner, MovementDirection.INBOUND).state is ComposerState.OPEN
    assert cache.get(store.lock_key(owner, MovementDirection.INBOUND)) is None


def test_result_for_a_closed_dialog_is_not_applied(store, owner, api, fake_backend):
    composer = open_composer()

    def close_meanwhile(call):
        stored = store.load(owner, MovementDirection.INBOUND)
        stored.close()
        store.save(owner, stored)
        return FakeResponse(400, json={'message': 'Lote duplicado'})

    fake_backend.on('POST', '/movimentacoes/entrada', handler=close_meanwhile)

    result, applied = store.submit(owner, composer, MovementSubmitter(api))

    assert not result.ok
    assert applied is False
    stored = store.load(owner, MovementDirection.INBOUND)
    assert stored.state is ComposerState.CLOSED
    assert stored.basket.is_empty


def test_claimed_dialog_is_not_submitted_twice(store, owner, api, fake_backend):
    composer = open_composer()
    cache.add(store.lock_key(owner, MovementDirection.INBOUND), 'other-request')

    with pytest.raises(ValidationError) as excinfo:
        store.submit(owner, composer, MovementSubmitter(api))

    assert excinfo.value.messages == ['A submission is already in progress']
    assert fake_backend.calls_to('POST', '/movimentacoes/entrada') == []

