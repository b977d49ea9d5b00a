"""
Tests for parsing backend JSON records into the front-end's data types.
"""
from datetime import date, datetime

import pytest

from pharmacy_inventory.data import (
    AlertSettings,
    CatalogItem,
    ItemKind,
    Lot,
    MedicineType,
    MovementDetails,
    MovementKind,
    MovementSummary,
    Page,
    StockBalance,
)
from conftest import GAZE, PARACETAMOL


def test_catalog_item_medicine():
    item = CatalogItem.from_json(PARACETAMOL)
    assert item.id == 'i1'
    assert item.display_name == 'Paracetamol'
    assert item.kind is ItemKind.MEDICAMENTO
    assert item.medicine_type is MedicineType.ORAL
    assert item.minimum_stock == 20
    assert item.has_stock is True


def test_catalog_item_supply_has_no_medicine_type():
    item = CatalogItem.from_json(dict(GAZE, tipo='ORAL'))
    assert item.kind is ItemKind.INSUMO
    assert item.medicine_type is None


def test_numeric_ids_become_strings():
    assert CatalogItem.from_json({'id': 7, 'nome': 'Dipirona', 'dtype': 'MEDICAMENTO'}).id == '7'


@pytest.mark.parametrize('raw, expected', [
    ('MEDICAMENTO', ItemKind.MEDICAMENTO),
    ('insumo', ItemKind.INSUMO),
    ('', None),
    ('OUTRO', None),
])
def test_item_kind_parse(raw, expected):
    assert ItemKind.parse(raw) is expected


def test_item_kind_endpoints():
    assert ItemKind.MEDICAMENTO.endpoint == '/medicamentos'
    assert ItemKind.INSUMO.endpoint == '/insumos'


def test_page_envelope_and_bare_list():
    envelope = Page.from_json({'content': [PARACETAMOL], 'totalElements': 31}, CatalogItem.from_json, page=1, size=10)
    assert envelope.total_elements == 31
    assert envelope.page_count == 4
    assert envelope.has_previous and envelope.has_next

    bare = Page.from_json([PARACETAMOL, GAZE], CatalogItem.from_json, page=0, size=10)
    assert bare.total_elements == 2
    assert not bare.has_previous and not bare.has_next


def test_lot_days_to_expiry():
    lot = Lot.from_json({'id': 'l1', 'numeroLote': 'L1', 'dataValidade': '2026-10-29', 'quantidade': 5,
                         'itemId': 'i1', 'nomeItem': 'Paracetamol', 'tipoItem': 'MEDICAMENTO'})
    assert lot.expiry_date == date(2026, 10, 29)
    assert lot.days_to_expiry(date(2026, 10, 19)) == 10
    assert lot.days_to_expiry(date(2026, 11, 1)) == -3


def test_stock_balance():
    balance = StockBalance.from_json({'itemId': 'i1', 'nomeItem': 'Paracetamol', 'dtype': 'MEDICAMENTO',
                                      'quantidadeTotal': '120'})
    assert balance.total_quantity == 120
    assert balance.kind is ItemKind.MEDICAMENTO


@pytest.mark.parametrize('raw, inbound, outbound', [
    ('ENTRADA', True, False),
    ('SAIDA', False, True),
    ('AJUSTE_ENTRADA', True, False),
    ('AJUSTE_SAIDA', False, True),
])
def test_movement_kind_direction(raw, inbound, outbound):
    kind = MovementKind.parse(raw)
    assert kind.is_inbound is inbound
    assert kind.is_outbound is outbound


def test_movement_summary_with_utc_timestamp():
    summary = MovementSummary.from_json({'id': 'm1', 'tipoMovimentacao': 'SAIDA', 'totalItens': 2,
                                         'quantidadeTotal': 8, 'nomeSetor': 'Pediatria',
                                         'dataMovimentacao': '2026-10-02T14:00:00Z'})
    assert summary.kind is MovementKind.SAIDA
    assert summary.sector_name == 'Pediatria'
    assert summary.moved_at.replace(tzinfo=None) == datetime(2026, 10, 2, 14, 0)


def test_movement_details_lines():
    details = MovementDetails.from_json({'id': 'm1', 'tipoMovimentacao': 'ENTRADA',
                                         'itens': [{'nomeItem': 'Paracetamol', 'quantidade': 10}]})
    assert details.sector_name is None
    assert [(line.item_name, line.quantity) for line in details.lines] == [('Paracetamol', 10)]


def test_alert_settings_defaults_and_wire_keys():
    assert AlertSettings.from_json(None) == AlertSettings(30, 10)
    settings = AlertSettings.from_json({'DIAS_ALERTA_VENCIMENTO': '60', 'LIMITE_ESTOQUE_BAIXO': 5})
    assert settings.to_json() == {'DIAS_ALERTA_VENCIMENTO': 60, 'LIMITE_ESTOQUE_BAIXO': 5}
