"""
Routes package for the pharmacy stock front-end.
One blueprint per page group; every page talks to the backend through
`pharmacy_inventory.services.backend`.
"""

from pharmacy_inventory.logger import get_logger

logger = get_logger("pharmacy_inventory.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .main import main
    from .items import items_bp
    from .stock import stock_bp
    from .sectors import sectors_bp
    from .movements import movements_bp
    from .settings import settings_bp
    from .profile import profile_bp

    app.register_blueprint(main)
    app.register_blueprint(items_bp, url_prefix='/items')
    app.register_blueprint(stock_bp, url_prefix='/stock')
    app.register_blueprint(sectors_bp, url_prefix='/sectors')
    app.register_blueprint(movements_bp, url_prefix='/movements')
    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(profile_bp, url_prefix='/profile')

    logger.info("All route blueprints registered successfully")
