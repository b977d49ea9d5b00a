"""
Application-wide handlers for backend failures that escape a route.
"""

from flask import flash, redirect, render_template, request, url_for
from flask_login import logout_user

from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services.api_client import ApiError, NetworkError, UnauthorizedError

logger = get_logger("pharmacy_inventory.presentation.errors")


def register_error_handlers(app):

    @app.errorhandler(UnauthorizedError)
    def handle_unauthorized(error):
        # Token expired or revoked on the backend side
        from pharmacy_inventory.auth import clear_backend_session
        logger.warning(f"Backend rejected the session on {request.path}: {error}")
        logout_user()
        clear_backend_session()
        flash('Your session has expired. Please log in again.', 'error')
        return redirect(url_for('auth.login', next=request.path))

    @app.errorhandler(NetworkError)
    def handle_network_error(error):
        logger.error(f"Backend unreachable on {request.path}: {error}")
        return render_template('errors/backend.html',
                               message='The server is unavailable. Please try again later.'), 503

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        logger.error(f"Backend error on {request.path}: {error}")
        return render_template('errors/backend.html',
                               message=error.user_message('Failed to load data from the server.')), 502
