#!/usr/bin/env python3
#USE VENV: source venv/bin/activate
"""
Run script for the Pharmacy Stock front-end
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from pharmacy_inventory import create_app  # noqa: E402
from pharmacy_inventory.logger import get_logger  # noqa: E402

# Note: SECRET_KEY and API_BASE_URL are read from the environment.
# Run 'python generate_env.py' to create a .env file.

app = create_app()
logger = get_logger("pharmacy_inventory.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Pharmacy Stock front-end')
    parser.add_argument('--check-backend', action='store_true',
                        help='Check that the backend API answers, then exit')
    return parser.parse_args()


def check_backend():
    """Call /auth/me without a token to see whether the backend is up"""
    from pharmacy_inventory.services import backend
    from pharmacy_inventory.services.api_client import BackendError, BackendSession, NetworkError

    with app.app_context():
        try:
            backend.client(BackendSession()).get('/auth/me')
        except NetworkError as e:
            logger.error(f"Backend unreachable at {app.config['API_BASE_URL']}: {e}")
            return False
        except BackendError as e:
            # Any HTTP answer (401 included) means the backend is listening
            logger.info(f"Backend answered with {e.status_code}")
    logger.info(f"Backend reachable at {app.config['API_BASE_URL']}")
    return True


if __name__ == '__main__':
    args = parse_arguments()

    if args.check_backend:
        sys.exit(0 if check_backend() else 1)

    # Read configuration from environment variables
    # FLASK_DEBUG: Enable/disable debug mode (default: False for security)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # USE_RELOADER: Enable/disable auto-reloader (default: False in production)
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1 for security)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Backend API: {app.config['API_BASE_URL']}")
    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
