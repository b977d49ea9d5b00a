"""
Movement routes: history, details, daily report and the movement composer
"""

from flask import Blueprint

movements_bp = Blueprint('movements', __name__)

from . import history, composer  # noqa: E402,F401
