#!/usr/bin/env python3
"""
Simple script to create the database tables.

Useful for local development; deployed databases are migrated with Alembic.
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from socialnet.config import settings
from socialnet.database import Database


async def create_tables():
    """Create all database tables."""
    print("Creating database tables...")
    print(f"Database URL: {settings.database_url}")

    database = Database.from_settings(settings)
    try:
        await database.create_all()
        print("✅ Database tables created successfully!")

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        return False

    finally:
        await database.dispose()

    return True


if __name__ == "__main__":
    sys.exit(0 if asyncio.run(create_tables()) else 1)
