"""
scripts/setup_db.py — Create the Bot Engine tables.

Run once before the first API start (the API also creates missing tables on
startup):
    python scripts/setup_db.py
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botengine.config import settings
from botengine.db.session import create_tables, ping


def setup_db() -> list[str]:
    print(f"🔌 Database: {settings.database_url[:40]}...")
    if not ping():
        print("❌ Database is not reachable.")
        return []

    tables = create_tables()
    print(f"✅ Tables ready: {', '.join(tables)}")
    return tables


if __name__ == "__main__":
    sys.exit(0 if setup_db() else 1)
