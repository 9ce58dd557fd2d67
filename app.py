#!/usr/bin/env python3
"""
Run script for the Order Cycle Administration service
"""

import argparse
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before the app reads them
load_dotenv()

from cycle_admin import create_app  # noqa: E402
from cycle_admin.build import build_database  # noqa: E402
from cycle_admin.logger import get_logger  # noqa: E402

app = create_app()
logger = get_logger("cycle_admin.run")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Order Cycle Administration')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables and exit without starting the web server')
    parser.add_argument('--seed-demo', action='store_true',
                        help='Insert a demo admin, enterprises and order cycle')
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=5000, help='Port to listen on (default: 5000)')
    parser.add_argument('--debug', action='store_true', help='Run Flask in debug mode')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting Order Cycle Administration...")

    with app.app_context():
        build_database(seed_demo=args.seed_demo)

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    logger.debug(f"Access the application at: http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)
