"""Market Orders database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def _domain():
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


def setup_databases():
    """Create the marketplace schema on every SQL provider."""
    from marketplace.utils.db import setup_db

    domain = _domain()
    logger.info("Creating database schema", domain=domain.name)
    setup_db(domain)
    logger.info("Database schema ready", domain=domain.name)


def drop_databases():
    """Drop the marketplace schema from every SQL provider."""
    from marketplace.utils.db import drop_db

    domain = _domain()
    logger.info("Dropping database schema", domain=domain.name)
    drop_db(domain)
    logger.info("Database schema dropped", domain=domain.name)


def main():
    from marketplace.utils.logging import configure_logging

    configure_logging()

    parser = argparse.ArgumentParser(description="Market Orders database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
