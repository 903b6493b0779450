#!/usr/bin/env python
"""
Database initialization script for Filmscape.

Creates the schema (tables, indexes, constraints) and seeds the
administrator account that manages the movie catalog.

Usage:
    # Create tables if missing and seed the admin
    python scripts/init_database.py

    # Drop everything and start over
    python scripts/init_database.py --reset

    # Use another database file
    python scripts/init_database.py --db-path /tmp/filmscape.db
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from filmscape.api import config
from filmscape.database import init_database, seed_admin_user, verify_schema
from filmscape.utils.logging_config import configure_script_logging


def print_section(title):
    """Print a formatted section header."""
    print(f"\n{'='*60}")
    print(f"{title}")
    print('='*60)


def main():
    """Main entry point for database initialization."""

    parser = argparse.ArgumentParser(
        description="Initialize the Filmscape database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # First-time setup
  python scripts/init_database.py

  # Wipe and recreate all tables
  python scripts/init_database.py --reset
        """
    )

    parser.add_argument(
        '--reset',
        action='store_true',
        help='Drop and recreate database tables (WARNING: deletes all data)'
    )
    parser.add_argument(
        '--db-path',
        type=str,
        default=config.get_database_path(),
        help='Path to SQLite database file or database URL (default: DATABASE_URL or data/filmscape.db)'
    )
    parser.add_argument(
        '--admin-username',
        type=str,
        default=config.get_admin_username(),
        help='Username of the seeded admin account'
    )
    parser.add_argument(
        '--admin-email',
        type=str,
        default=config.get_admin_email(),
        help='Email of the seeded admin account'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()
    configure_script_logging(debug=args.debug)

    print_section("Filmscape Database Initialization")
    print(f"\nDatabase: {args.db_path}")
    if args.reset:
        print("Mode:     RESET (all existing data will be deleted)")

    db_manager = init_database(db_path=args.db_path, reset=args.reset)

    print_section("Schema Verification")
    if not verify_schema(db_manager):
        print("\n[ERROR] Schema verification failed")
        return 1
    print("\n[SUCCESS] All tables present")

    print_section("Admin Account")
    with db_manager.session_scope() as session:
        admin = seed_admin_user(session, username=args.admin_username, email=args.admin_email)
        if admin:
            print(f"\nCreated admin '{admin.username}' (id={admin.id})")
        else:
            print(f"\nAdmin with email {args.admin_email} already exists")

    print("\n[SUCCESS] Database ready")
    print("="*60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
