"""
Database initialization script.

Creates the glaneur tables (users, user_wallets, posts, collections)
from the SQLAlchemy models and verifies they exist.

Usage:
    ENV=development python scripts/init_database.py
    ENV=development python scripts/init_database.py --reset
"""

import argparse
import asyncio
import sys

from sqlalchemy import inspect

from glaneur.config.settings import get_settings
from glaneur.infrastructure.persistence.database import Database

EXPECTED_TABLES = ["users", "user_wallets", "posts", "collections"]


def mask_database_url(url: str) -> str:
    """Hide the password part of a database URL."""
    if "@" not in url or "//" not in url:
        return url
    scheme, rest = url.split("//", 1)
    credentials, location = rest.rsplit("@", 1)
    if ":" in credentials:
        user = credentials.split(":", 1)[0]
        credentials = f"{user}:***"
    return f"{scheme}//{credentials}@{location}"


async def verify_tables(database: Database) -> bool:
    """Check that every expected table was created."""
    async with database.engine.connect() as conn:
        tables = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )

    print(f"Found tables: {', '.join(sorted(tables))}")
    missing = set(EXPECTED_TABLES) - set(tables)
    if missing:
        print(f"Missing tables: {', '.join(sorted(missing))}")
        return False
    return True


async def main(reset: bool = False) -> int:
    """Run database initialization."""
    settings = get_settings()

    print("Glaneur Database Initialization")
    print("=" * 50)
    print(f"Database URL: {mask_database_url(settings.DATABASE_URL)}")
    print("=" * 50)

    database = Database(database_url=settings.DATABASE_URL, echo=False)
    await database.connect()

    try:
        if reset:
            print("Dropping existing tables...")
            await database.drop_tables()

        print("Creating tables...")
        await database.create_tables()

        if not await verify_tables(database):
            print("Database initialization completed with warnings")
            return 1

        print("Database initialization completed successfully!")
        return 0

    except Exception as e:
        print(f"Database initialization failed: {e}")
        return 1
    finally:
        await database.disconnect()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize Glaneur database")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before creating them",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(reset=args.reset)))
