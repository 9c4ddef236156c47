#!/usr/bin/env python3
"""
Run script for the IT helpdesk
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before the app reads its config
load_dotenv()

from helpdesk import create_app  # noqa: E402
from helpdesk.build import build_database  # noqa: E402
from helpdesk.logger import get_logger  # noqa: E402

# Note: Default user credentials are configured via environment variables.
# Run 'python generate_env.py' to create a .env file with secure passwords.

logger = get_logger("helpdesk.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='IT Helpdesk')
    parser.add_argument('--build-only', action='store_true',
                        help='Create tables and critical data, then exit without starting the server')
    parser.add_argument('--skip-build', action='store_true',
                        help='Start the server without touching the database schema')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()
    app = create_app()

    if not args.skip_build:
        # Critical data (system user, admin, default master data) is checked on every start
        build_database(app)

    if args.build_only:
        logger.info("Build completed. Exiting without starting web server.")
        sys.exit(0)

    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
