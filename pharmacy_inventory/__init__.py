from flask import Flask
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache
import os
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import backend

# Initialize extensions
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)
# Server-side state shared by all requests of a worker (movement composers)
cache = Cache()


def env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app():
    from pathlib import Path

    base_dir = Path(__file__).parent
    template_folder = str(base_dir / 'presentation' / 'templates')
    static_folder = str(base_dir / 'presentation' / 'static')

    app = Flask(__name__,
                template_folder=template_folder,
                static_folder=static_folder)

    logger = get_logger("pharmacy_inventory")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY in environment - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    # Backend API
    app.config['API_BASE_URL'] = os.environ.get('API_BASE_URL', 'http://localhost:8080/api')
    app.config['API_TIMEOUT_SECONDS'] = float(os.environ.get('API_TIMEOUT_SECONDS', '15'))
    app.config['ITEMS_PAGE_SIZE'] = int(os.environ.get('ITEMS_PAGE_SIZE', '10'))

    # HTTPS/TLS Configuration
    app.config['ENABLE_HTTPS'] = env_flag('ENABLE_HTTPS', 'True')
    app.config['FORCE_HTTPS_REDIRECT'] = env_flag('FORCE_HTTPS_REDIRECT', 'True')

    # Session cookie security configuration. The bearer token lives in the signed session cookie.
    app.config['SESSION_COOKIE_SECURE'] = env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))

    app.config['REMEMBER_COOKIE_SECURE'] = env_flag('REMEMBER_COOKIE_SECURE', 'True')
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True

    app.config['RATELIMIT_ENABLED'] = env_flag('RATELIMIT_ENABLED', 'True')

    # Composer store. SimpleCache is per process; use FileSystemCache with several workers
    app.config['CACHE_TYPE'] = os.environ.get('CACHE_TYPE', 'SimpleCache')
    app.config['CACHE_DEFAULT_TIMEOUT'] = app.config['PERMANENT_SESSION_LIFETIME']
    app.config['CACHE_KEY_PREFIX'] = 'pharmacy_inventory:'
    if os.environ.get('CACHE_DIR'):
        app.config['CACHE_DIR'] = os.environ['CACHE_DIR']

    if app.config['ENABLE_HTTPS']:
        logger.info("HTTPS enforcement enabled")
        if app.config['FORCE_HTTPS_REDIRECT']:
            logger.info("Automatic HTTP to HTTPS redirect enabled")
    else:
        logger.warning("HTTPS enforcement DISABLED - Acceptable for development only!")

    logger.debug(f"Backend API configured: {app.config['API_BASE_URL']}")

    # Initialize extensions with app
    backend.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    cache.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    logger.debug("Extensions initialized")

    from pharmacy_inventory.services import events
    events.register_default_subscribers()

    # Register blueprints
    from pharmacy_inventory.auth import auth
    from pharmacy_inventory.presentation.routes import init_app as init_routes
    from pharmacy_inventory.presentation.errors import register_error_handlers
    from pharmacy_inventory.presentation.filters import register_template_filters

    app.register_blueprint(auth)
    init_routes(app)
    register_error_handlers(app)
    register_template_filters(app)

    @app.before_request
    def enforce_https():
        """Redirect HTTP requests to HTTPS if HTTPS enforcement is enabled"""
        if app.config.get('ENABLE_HTTPS') and app.config.get('FORCE_HTTPS_REDIRECT'):
            from flask import request, redirect

            if not request.is_secure and not request.headers.get('X-Forwarded-Proto') == 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "img-src 'self' data:; "
            "font-src 'self' data: https://cdn.jsdelivr.net;"
        )
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    logger.info("Flask application initialization complete")

    return app
