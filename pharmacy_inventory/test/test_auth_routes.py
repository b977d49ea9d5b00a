"""
Tests for login/logout, session expiry and the account pages (profile, settings).
"""
import requests

from pharmacy_inventory.services.api_client import SESSION_TOKEN_KEY, SESSION_USER_KEY
from conftest import login_user


def flashes(client):
    with client.session_transaction() as sess:
        return [message for _, message in sess.get('_flashes', [])]


# ---------------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------------

def test_login_page_loads(client):
    response = client.get('/login')
    assert response.status_code == 200
    assert b'name="login"' in response.data


def test_login_stores_token_and_profile(client, fake_backend):
    response = client.post('/login', data={'login': 'ana', 'password': 'secret'})

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard')
    with client.session_transaction() as sess:
        assert sess[SESSION_TOKEN_KEY] == 'test-token'
        assert sess[SESSION_USER_KEY] == {'id': 'u1', 'nome': 'Ana Souza', 'login': 'ana'}

    me = fake_backend.calls_to('GET', '/auth/me')[0]
    assert me.headers['Authorization'] == 'Bearer test-token'


def test_login_honours_local_next(client):
    response = client.post('/login?next=/stock/', data={'login': 'ana', 'password': 'secret'})
    assert response.headers['Location'].endswith('/stock/')

    client.get('/logout')
    response = client.post('/login?next=http://evil.test/', data={'login': 'ana', 'password': 'secret'})
    assert response.headers['Location'].endswith('/dashboard')


def test_login_with_wrong_password(client, fake_backend):
    fake_backend.on('POST', '/auth/login', status=401, text='')

    response = login_user(client, password='wrong')

    assert b'Invalid credentials' in response.data
    with client.session_transaction() as sess:
        assert SESSION_TOKEN_KEY not in sess


def test_login_requires_both_fields(client, fake_backend):
    response = login_user(client, password='')
    assert b'Please enter both login and password' in response.data
    assert fake_backend.calls_to('POST', '/auth/login') == []


def test_login_with_backend_down(client, fake_backend):
    fake_backend.on('POST', '/auth/login', error=requests.exceptions.ConnectionError('refused'))

    response = login_user(client)

    assert b'The server is unavailable' in response.data


def test_logout_clears_the_token(authenticated_client):
    response = authenticated_client.get('/logout')

    assert response.headers['Location'].endswith('/login')
    with authenticated_client.session_transaction() as sess:
        assert SESSION_TOKEN_KEY not in sess
    assert authenticated_client.get('/dashboard').status_code == 302


# ---------------------------------------------------------------------------
# Backend failures on a logged-in page
# ---------------------------------------------------------------------------

def test_expired_token_logs_out(authenticated_client, fake_backend):
    fake_backend.on('GET', '/dashboard/stats', status=401, json={'message': 'Token expirado'})

    response = authenticated_client.get('/dashboard')

    assert response.status_code == 302
    assert '/login' in response.headers['Location']
    assert 'Your session has expired. Please log in again.' in flashes(authenticated_client)
    with authenticated_client.session_transaction() as sess:
        assert SESSION_TOKEN_KEY not in sess


def test_backend_unreachable_page(authenticated_client, fake_backend):
    fake_backend.on('GET', '/estoque', error=requests.exceptions.Timeout('slow'))

    response = authenticated_client.get('/stock/')

    assert response.status_code == 503
    assert b'The server is unavailable' in response.data


def test_backend_failure_page(authenticated_client, fake_backend):
    fake_backend.on('GET', '/movimentacoes', status=500, json={'message': 'Falha interna'})

    response = authenticated_client.get('/movements/')

    assert response.status_code == 502
    assert 'Falha interna' in response.get_data(as_text=True)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def test_password_confirmation_must_match(authenticated_client, fake_backend):
    authenticated_client.post('/profile/password', data={
        'current_password': 'old', 'new_password': 'new1', 'confirm_password': 'new2',
    })
    assert 'The new password and its confirmation do not match' in flashes(authenticated_client)
    assert fake_backend.calls_to('PUT', '/usuarios/perfil/alterar-senha') == []


def test_wrong_current_password_is_reported(authenticated_client, fake_backend):
    fake_backend.on('PUT', '/usuarios/perfil/alterar-senha', status=400, json={'message': 'Senha atual incorreta'})

    authenticated_client.post('/profile/password', data={
        'current_password': 'bad', 'new_password': 'new1', 'confirm_password': 'new1',
    })

    assert 'Senha atual incorreta' in flashes(authenticated_client)


def test_login_change_keeps_the_user_signed_in(authenticated_client, fake_backend):
    fake_backend.on('PUT', '/usuarios/perfil', json={})
    fake_backend.on('GET', '/auth/me', json={'id': 'u1', 'nome': 'Ana S.', 'login': 'ana.souza'})

    authenticated_client.post('/profile/info', data={'name': 'Ana S.', 'login': 'ana.souza'})

    assert fake_backend.calls_to('PUT', '/usuarios/perfil')[0].json == {'nome': 'Ana S.', 'login': 'ana.souza'}
    assert authenticated_client.get('/profile/').status_code == 200


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_save_alert_settings(authenticated_client, fake_backend):
    fake_backend.on('PUT', '/configuracoes', json={})

    authenticated_client.post('/settings/alerts', data={'expiry_alert_days': '60', 'low_stock_limit': '8'})

    assert fake_backend.calls_to('PUT', '/configuracoes')[0].json == {
        'DIAS_ALERTA_VENCIMENTO': 60, 'LIMITE_ESTOQUE_BAIXO': 8,
    }


def test_alert_settings_must_be_positive(authenticated_client, fake_backend):
    authenticated_client.post('/settings/alerts', data={'expiry_alert_days': '0', 'low_stock_limit': 'x'})

    assert fake_backend.calls_to('PUT', '/configuracoes') == []
    messages = flashes(authenticated_client)
    assert 'Expiry alert days must be greater than zero' in messages
    assert 'Low stock limit must be a whole number' in messages


def test_employee_creation_needs_admin_password(authenticated_client, fake_backend):
    authenticated_client.post('/settings/employees', data={'name': 'Joao', 'login': 'joao', 'password': 'x1'})

    assert fake_backend.calls_to('POST', '/funcionarios') == []
    assert 'Confirm the operation with your password' in flashes(authenticated_client)


def test_refused_admin_password_keeps_admin_logged_in(authenticated_client, fake_backend):
    fake_backend.on('POST', '/funcionarios', status=403, json={'message': 'Senha do administrador incorreta'})

    response = authenticated_client.post('/settings/employees', data={
        'name': 'Joao', 'login': 'joao', 'password': 'x1', 'admin_password': 'wrong',
    })

    assert response.headers['Location'].endswith('/settings/')
    assert 'Senha do administrador incorreta' in flashes(authenticated_client)
    with authenticated_client.session_transaction() as sess:
        assert sess[SESSION_TOKEN_KEY] == 'test-token'
