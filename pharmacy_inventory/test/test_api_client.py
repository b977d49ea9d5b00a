"""
Tests for the backend client: headers, error mapping and body decoding.
"""
import pytest
import requests

from pharmacy_inventory.services.api_client import (
    ApiClient,
    BackendError,
    BackendSession,
    NetworkError,
    UnauthorizedError,
    extract_error_message,
)
from conftest import BASE_URL, FakeResponse


def test_bearer_token_is_sent_when_present(api, fake_backend):
    api.get('/setores')
    assert fake_backend.calls[-1].headers['Authorization'] == 'Bearer test-token'


def test_no_authorization_header_without_token(fake_backend):
    anonymous = ApiClient(BASE_URL, BackendSession(), http=fake_backend)
    anonymous.post('/auth/login', {'login': 'ana', 'senha': 'x'})
    assert 'Authorization' not in fake_backend.calls[-1].headers


def test_query_params_are_forwarded(api, fake_backend):
    api.get('/itens', params={'page': 2, 'busca': 'para'})
    assert fake_backend.calls[-1].params == {'page': 2, 'busca': 'para'}


def test_json_body_is_decoded(api):
    assert api.get('/setores')[0] == {'id': 's1', 'nome': 'Emergencia'}


def test_text_body_is_returned_as_text(api):
    assert api.post('/auth/login', {'login': 'ana', 'senha': 'x'}) == 'test-token'


def test_empty_body_is_none(api, fake_backend):
    fake_backend.on('DELETE', '/setores/s1', status=204)
    assert api.delete('/setores/s1') is None


def test_get_bytes_returns_raw_content(api, fake_backend):
    fake_backend.on('GET', '/relatorios/saidas-diarias', content=b'%PDF-1.4 fake')
    assert api.get_bytes('/relatorios/saidas-diarias', params={'data': '2026-10-19'}) == b'%PDF-1.4 fake'


@pytest.mark.parametrize('status', [401, 403])
def test_auth_failures_raise_unauthorized(api, fake_backend, status):
    fake_backend.on('GET', '/auth/me', status=status, json={'message': 'Token expirado'})
    with pytest.raises(UnauthorizedError) as exc_info:
        api.get('/auth/me')
    assert exc_info.value.status_code == status
    # Never shown verbatim to the user
    assert exc_info.value.user_message('Session expired') == 'Session expired'


def test_other_errors_raise_backend_error_with_message(api, fake_backend):
    fake_backend.on('DELETE', '/setores/s1', status=409, json={'message': 'Setor possui movimentacoes'})
    with pytest.raises(BackendError) as exc_info:
        api.delete('/setores/s1')
    assert exc_info.value.status_code == 409
    assert exc_info.value.user_message('fallback') == 'Setor possui movimentacoes'


def test_unknown_route_is_a_404_backend_error(api):
    with pytest.raises(BackendError) as exc_info:
        api.get('/nao-existe')
    assert exc_info.value.status_code == 404


def test_timeout_becomes_network_error(api, fake_backend):
    fake_backend.on('GET', '/setores', error=requests.exceptions.Timeout('slow'))
    with pytest.raises(NetworkError) as exc_info:
        api.get('/setores')
    assert exc_info.value.user_message('Server unavailable') == 'Server unavailable'


def test_connection_refused_becomes_network_error(api, fake_backend):
    fake_backend.on('GET', '/setores', error=requests.exceptions.ConnectionError('refused'))
    with pytest.raises(NetworkError):
        api.get('/setores')


@pytest.mark.parametrize('response, expected', [
    (FakeResponse(400, json={'message': 'Estoque insuficiente'}), 'Estoque insuficiente'),
    (FakeResponse(400, json='Lote duplicado'), 'Lote duplicado'),
    (FakeResponse(400, text='Quantidade invalida'), 'Quantidade invalida'),
    (FakeResponse(400, json={'error': 'Bad Request'}), None),
    (FakeResponse(500, text=''), None),
])
def test_extract_error_message(response, expected):
    assert extract_error_message(response) == expected


def test_backend_session_from_store():
    session = BackendSession.from_store({'api_token': 'abc', 'api_user': {'login': 'ana'}})
    assert session.is_authenticated
    assert session.user_login == 'ana'
    assert BackendSession.from_store({}).is_authenticated is False
