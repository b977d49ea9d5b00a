"""
Pytest configuration and fixtures.

The backend REST API is replaced by FakeBackend, an in-memory transport with
the same `request(...)` signature as requests.Session.
"""
import json as jsonlib
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

# Must be set before the application package is imported
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ['API_BASE_URL'] = 'http://backend.test/api'
os.environ['ENABLE_HTTPS'] = 'False'
os.environ['FORCE_HTTPS_REDIRECT'] = 'False'
os.environ['SESSION_COOKIE_SECURE'] = 'False'
os.environ['REMEMBER_COOKIE_SECURE'] = 'False'
os.environ['RATELIMIT_ENABLED'] = 'False'
os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'pharmacy_inventory_test_logs'))
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from pharmacy_inventory import create_app  # noqa: E402
from pharmacy_inventory.services import backend  # noqa: E402
from pharmacy_inventory.services.api_client import ApiClient, BackendSession  # noqa: E402

BASE_URL = 'http://backend.test/api'
_MISSING = object()


class FakeResponse:
    """The subset of requests.Response that ApiClient reads."""

    def __init__(self, status_code=200, json=_MISSING, text=None, content=None):
        self.status_code = status_code
        if content is not None:
            self.content = content
            self.text = ''
        elif json is not _MISSING:
            self.text = jsonlib.dumps(json)
            self.content = self.text.encode('utf-8')
        else:
            self.text = text or ''
            self.content = self.text.encode('utf-8')
        self.headers = {}

    def json(self):
        # json.JSONDecodeError is a ValueError, like requests' own
        return jsonlib.loads(self.text)


@dataclass
class Call:
    method: str
    path: str
    params: Optional[dict] = None
    json: Any = None
    headers: dict = field(default_factory=dict)


class FakeBackend:
    """Routes (method, path) to canned responses and records every call."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.closed = 0

    def on(self, method, path, status=200, json=_MISSING, text=None, content=None, error=None, handler=None):
        """Register a canned response, an exception to raise, or a handler(call) returning a FakeResponse."""
        if handler is not None:
            self.routes[(method.upper(), path)] = handler
        elif error is not None:
            self.routes[(method.upper(), path)] = error
        else:
            self.routes[(method.upper(), path)] = FakeResponse(status, json=json, text=text, content=content)
        return self

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append(Call(method.upper(), path, dict(params) if params else None, json, dict(headers or {})))
        handler = self.routes.get((method.upper(), path))
        if handler is None:
            return FakeResponse(404, text='Not found')
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(self.calls[-1])
        return handler

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def close(self):
        self.closed += 1


PARACETAMOL = {
    'id': 'i1', 'nome': 'Paracetamol', 'dtype': 'MEDICAMENTO', 'tipo': 'ORAL',
    'descricaoDetalhada': 'Paracetamol 500mg', 'unidadeMedida': 'comprimido',
    'estoqueMinimo': 20, 'ativo': True, 'possuiEstoque': True,
}
GAZE = {
    'id': 'i2', 'nome': 'Gaze', 'dtype': 'INSUMO',
    'descricaoDetalhada': 'Gaze esteril', 'unidadeMedida': 'pacote',
    'estoqueMinimo': 5, 'ativo': True, 'possuiEstoque': False,
}
SECTORS = [{'id': 's1', 'nome': 'Emergencia'}, {'id': 's2', 'nome': 'Pediatria'}]


def seed_backend(fake):
    """A small but complete backend: every GET page can render against it."""
    fake.on('POST', '/auth/login', text='test-token')
    fake.on('GET', '/auth/me', json={'id': 'u1', 'nome': 'Ana Souza', 'login': 'ana'})

    fake.on('GET', '/itens', json={'content': [PARACETAMOL, GAZE], 'totalElements': 2})
    fake.on('GET', '/itens/com-estoque', json=[PARACETAMOL])
    fake.on('GET', '/medicamentos/i1', json=PARACETAMOL)
    fake.on('GET', '/insumos/i2', json=GAZE)
    fake.on('GET', '/setores', json=SECTORS)

    fake.on('GET', '/estoque', json={'content': [
        {'itemId': 'i1', 'nomeItem': 'Paracetamol', 'dtype': 'MEDICAMENTO', 'quantidadeTotal': 120},
    ], 'totalElements': 1})
    fake.on('GET', '/estoque/item/i1', json=[
        {'id': 'l2', 'numeroLote': 'L2', 'dataValidade': '2031-06-30', 'quantidade': 70,
         'itemId': 'i1', 'nomeItem': 'Paracetamol', 'tipoItem': 'MEDICAMENTO'},
        {'id': 'l1', 'numeroLote': 'L1', 'dataValidade': '2030-01-31', 'quantidade': 50,
         'itemId': 'i1', 'nomeItem': 'Paracetamol', 'tipoItem': 'MEDICAMENTO'},
    ])

    fake.on('GET', '/movimentacoes', json=[
        {'id': 'm1', 'tipoMovimentacao': 'ENTRADA', 'totalItens': 1, 'quantidadeTotal': 10,
         'observacao': 'Compra', 'dataMovimentacao': '2026-10-01T09:30:00', 'nomeFuncionario': 'Ana Souza'},
        {'id': 'm2', 'tipoMovimentacao': 'SAIDA', 'totalItens': 1, 'quantidadeTotal': 4, 'nomeSetor': 'Pediatria',
         'observacao': '', 'dataMovimentacao': '2026-10-02T14:00:00', 'nomeFuncionario': 'Ana Souza'},
    ])
    fake.on('GET', '/movimentacoes/m1', json={
        'id': 'm1', 'tipoMovimentacao': 'ENTRADA', 'dataMovimentacao': '2026-10-01T09:30:00',
        'observacao': 'Compra', 'nomeFuncionario': 'Ana Souza',
        'itens': [{'nomeItem': 'Paracetamol', 'tipoItem': 'MEDICAMENTO', 'quantidade': 10}],
    })
    fake.on('POST', '/movimentacoes/entrada', status=201, json={'id': 'm3'})
    fake.on('POST', '/movimentacoes/saida', status=201, json={'id': 'm4'})

    fake.on('GET', '/dashboard/stats', json={
        'totalMedicamentos': 1, 'totalInsumos': 1, 'lotesProximosVencimento': 0, 'itensEstoqueBaixo': 1,
    })
    fake.on('GET', '/dashboard/vencimento', json=[])
    fake.on('GET', '/dashboard/estoque-baixo', json=[
        {'itemId': 'i2', 'nomeItem': 'Gaze', 'extraInfo': '0'},
    ])
    fake.on('GET', '/dashboard/movimentacoes-por-mes', json=[{'mes': 10, 'entradas': 10, 'saidas': 4}])
    fake.on('GET', '/dashboard/grafico-estoque', json=[{'nomeItem': 'Paracetamol', 'quantidadeTotal': 120}])
    fake.on('GET', '/dashboard/consumo-setor', json=[{'nomeSetor': 'Pediatria', 'quantidadeTotal': 4}])

    fake.on('GET', '/configuracoes', json={'DIAS_ALERTA_VENCIMENTO': 45, 'LIMITE_ESTOQUE_BAIXO': 15})
    fake.on('GET', '/funcionarios', json=[{'id': 'u1', 'nome': 'Ana Souza', 'login': 'ana', 'ativo': True}])
    return fake


@pytest.fixture(scope='session')
def app():
    """Create Flask application for testing"""
    app = create_app()
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    yield app


@pytest.fixture(scope='function')
def fake_backend(monkeypatch):
    fake = seed_backend(FakeBackend())
    monkeypatch.setattr(backend, 'http_factory', lambda: fake)
    return fake


@pytest.fixture(scope='function')
def api(fake_backend):
    """ApiClient wired straight to the fake, for service-level tests without Flask"""
    return ApiClient(BASE_URL, BackendSession(token='test-token', user_login='ana'), http=fake_backend, timeout=1)


@pytest.fixture(scope='function')
def client(app, fake_backend):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def authenticated_client(client):
    """Test client logged in as 'ana' against the fake backend"""
    response = client.post('/login', data={
        'login': 'ana',
        'password': 'secret'
    })
    assert response.status_code == 302, "Login against the fake backend should redirect"
    return client


def login_user(client, login='ana', password='secret'):
    """Helper function to login a user"""
    return client.post('/login', data={
        'login': login,
        'password': password
    }, follow_redirects=True)
