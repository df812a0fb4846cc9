"""
Database connectivity check.

Runs SELECT 1 against the configured database and prints the table
inventory with row counts. Exit code 1 when the database is unreachable.

Usage: python check_db.py
"""
import sys
import traceback

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from gladgrade import create_app, db, config


def test_connection(app):
    with app.app_context():
        try:
            result = db.session.execute(text('SELECT 1')).scalar()
        except SQLAlchemyError as e:
            print(f"Database connection error: {e}")
            traceback.print_exc()
            return False
        print(f"SELECT 1 -> {result}")
        return True


def print_table_inventory(app):
    with app.app_context():
        tables = inspect(db.engine).get_table_names()
        if not tables:
            print("No tables found. Run `flask --app gladgrade:create_app init-db` first.")
            return
        for table in sorted(tables):
            count = db.session.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar()
            print(f"  {table:<45} {count:>8}")


if __name__ == "__main__":
    print("=== Database settings ===")
    print(f"Type: {config.DB_TYPE}")
    print(f"Host: {config.DB_HOST}:{config.DB_PORT}")
    print(f"Name: {config.DB_NAME}")

    app = create_app()

    print("\n=== Connection ===")
    connection_ok = test_connection(app)
    if not connection_ok:
        sys.exit(1)

    print("\n=== Tables ===")
    print_table_inventory(app)
