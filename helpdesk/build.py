#!/usr/bin/env python3
"""
Database build for the helpdesk
Creates the tables and inserts the critical data every installation needs:
the system and admin users, default departments, locations and asset categories.
"""

import argparse
import json
import os
import secrets
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from helpdesk import create_app, db
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.build")

CRITICAL_DATA_FILE = Path(__file__).parent / 'data' / 'core' / 'build_data_critical.json'
DEFAULT_ADMIN_PASSWORD = 'admin123456789'


def load_critical_data(path=CRITICAL_DATA_FILE):
    if not path.exists():
        error_msg = f"Critical data file not found: {path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def verify_critical_data():
    """
    Verify that critical data is present in the database

    Returns:
        bool: True if the system user, the admin user and at least one asset
        category exist
    """
    from helpdesk.data.core.user_info.user import User
    from helpdesk.data.assets.asset_category import AssetCategory

    try:
        if User.query.filter_by(username='system', is_system=True).first() is None:
            logger.warning("System user not found")
            return False

        if User.query.filter_by(username='admin').first() is None:
            logger.warning("Admin user not found")
            return False

        if AssetCategory.query.first() is None:
            logger.warning("No asset categories found")
            return False

        logger.info("Critical data verification passed")
        return True

    except SQLAlchemyError as e:
        logger.error(f"Error verifying critical data: {e}")
        return False


def _user_password(user_key, admin_password=None):
    if user_key == 'Admin':
        password = admin_password or os.environ.get('ADMIN_USER_PASSWORD')
        if not password:
            logger.warning("ADMIN_USER_PASSWORD not set, using the default admin password")
            password = DEFAULT_ADMIN_PASSWORD
        return password
    # The system user never logs in interactively
    return os.environ.get('SYSTEM_USER_PASSWORD') or secrets.token_urlsafe(32)


def insert_critical_data(admin_password=None):
    """
    Insert critical data that must always be present

    Loads helpdesk/data/core/build_data_critical.json. Existing rows are
    looked up by their unique name and left untouched.

    Raises:
        FileNotFoundError: If the critical data file is missing
        RuntimeError: If insertion fails or verification fails afterwards
    """
    from helpdesk.data.core.user_info.user import User
    from helpdesk.data.core.department import Department
    from helpdesk.data.core.location import Location
    from helpdesk.data.assets.asset_category import AssetCategory

    critical_data = load_critical_data()

    if verify_critical_data():
        logger.info("Critical data already present, skipping insertion")
        return

    logger.warning("Critical data missing, attempting insertion...")

    try:
        for user_key, user_data in critical_data.get('Essential', {}).get('Users', {}).items():
            user_data = dict(user_data, password=_user_password(user_key, admin_password))
            User.find_or_create_from_dict(user_data, lookup_fields=['username'])
            logger.info(f"Inserted essential user: {user_data.get('username')}")

        system_user = User.query.filter_by(username='system').first()
        system_user_id = system_user.id if system_user else None

        core_data = critical_data.get('Core', {})
        for section, model in (('Departments', Department),
                               ('Locations', Location),
                               ('Asset_Categories', AssetCategory)):
            for row in core_data.get(section, {}).values():
                model.find_or_create_from_dict(row, user_id=system_user_id, lookup_fields=['name'])
            logger.info(f"Inserted {len(core_data.get(section, {}))} {section.lower()}")

        db.session.commit()
        logger.info("Successfully inserted critical data")

    except SQLAlchemyError as e:
        db.session.rollback()
        error_msg = f"Critical data insertion failed: {e}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    if not verify_critical_data():
        error_msg = "Critical data insertion completed but verification failed"
        logger.error(error_msg)
        raise RuntimeError(error_msg)


def build_database(app=None, create_tables=True, insert_data=True):
    """
    Create all tables and insert the critical data

    Args:
        app: Flask app to build against (a new one is created when omitted)
        create_tables (bool): Run db.create_all()
        insert_data (bool): Insert the critical data
    """
    app = app or create_app()

    with app.app_context():
        logger.info(f"Starting database build - tables: {create_tables}, data: {insert_data}")

        if create_tables:
            # Import models to ensure they're registered with SQLAlchemy
            from helpdesk.data import core, assets, atk, tickets  # noqa: F401
            db.create_all()
            logger.info("All database tables created")

        if insert_data:
            insert_critical_data()

        logger.info("Database build completed successfully")


if __name__ == '__main__':
    from dotenv import load_dotenv

    load_dotenv()

    parser = argparse.ArgumentParser(description='Build the helpdesk database')
    parser.add_argument('--build-only', action='store_true', help='Create tables without inserting data')
    parser.add_argument('--data-only', action='store_true', help='Insert critical data without creating tables')
    args = parser.parse_args()

    build_database(create_tables=not args.data_only, insert_data=not args.build_only)
