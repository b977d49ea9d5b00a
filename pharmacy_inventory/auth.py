from flask import Blueprint, render_template, redirect, url_for, flash, request, session
from flask_login import UserMixin, login_user, logout_user, login_required, current_user
from urllib.parse import urlparse
from pharmacy_inventory import limiter, login_manager
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend
from pharmacy_inventory.services.api_client import (
    BackendError,
    BackendSession,
    NetworkError,
    SESSION_TOKEN_KEY,
    SESSION_USER_KEY,
)
from pharmacy_inventory.services.user_service import UserService

logger = get_logger("pharmacy_inventory.auth")
auth = Blueprint('auth', __name__)


class SessionUser(UserMixin):
    """The logged-in employee as reported by the backend's /auth/me."""

    def __init__(self, login, name, backend_id=None):
        self.id = login
        self.login = login
        self.name = name
        self.backend_id = backend_id

    @property
    def display_name(self):
        return self.name or self.login


@login_manager.user_loader
def load_user(user_id):
    # Authentication is owned by the backend; a user exists while the session holds its token
    user = session.get(SESSION_USER_KEY)
    if not user or not session.get(SESSION_TOKEN_KEY) or user.get('login') != user_id:
        return None
    return SessionUser(user['login'], user.get('nome'), user.get('id'))


def remember_profile(profile, fallback_login=None):
    session[SESSION_USER_KEY] = {'id': profile.id, 'nome': profile.name, 'login': profile.login or fallback_login}
    session.modified = True


def clear_backend_session():
    session.pop(SESSION_TOKEN_KEY, None)
    session.pop(SESSION_USER_KEY, None)


@auth.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=["POST"])
def login():
    if current_user.is_authenticated:
        logger.debug(f"User {current_user.login} already authenticated, redirecting to dashboard")
        return redirect(url_for('main.dashboard'))

    if request.method == 'POST':
        username = (request.form.get('login') or '').strip()
        password = request.form.get('password') or ''

        logger.debug(f"Login attempt for login: {username}")

        if not username or not password:
            logger.warning(f"Login attempt with missing credentials for login: {username}")
            flash('Please enter both login and password', 'error')
            return render_template('auth/login.html', login=username)

        try:
            token = UserService(backend.client(BackendSession())).login(username, password)
            profile = UserService(backend.client(BackendSession(token=token, user_login=username))).me()
        except NetworkError as e:
            logger.error(f"Backend unreachable during login for {username}: {e}")
            flash('The server is unavailable. Please try again later.', 'error')
            return render_template('auth/login.html', login=username)
        except BackendError as e:
            logger.warning(f"Failed login attempt for login: {username} ({e.status_code})")
            flash('Invalid credentials. Please try again.', 'error')
            return render_template('auth/login.html', login=username)

        session.clear()
        session[SESSION_TOKEN_KEY] = token
        remember_profile(profile, fallback_login=username)
        session.permanent = True
        login_user(SessionUser(profile.login or username, profile.name, profile.id))
        logger.info(f"Successful login for user: {username}")

        next_page = request.args.get('next')
        if not next_page or urlparse(next_page).netloc != '':
            next_page = url_for('main.dashboard')

        flash(f'Welcome, {profile.name or username}!', 'success')
        return redirect(next_page)

    logger.debug("Login page accessed")
    return render_template('auth/login.html', login='')


@auth.route('/logout')
@login_required
def logout():
    username = current_user.login
    logout_user()
    clear_backend_session()
    logger.info(f"User logged out: {username}")
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))
