#!/usr/bin/env python
"""Seed script to create demo users and seals.

Run once after `alembic upgrade head` on a fresh database. Existing users
and seals with the same username or name are left untouched.

Usage:
    python backend/scripts/seed_demo_data.py

Environment Variables:
    DATABASE_URL: SQLAlchemy connection string (default: sqlite:///./sealflow.db)
"""

import sys

from sealflow.database import SessionLocal
from sealflow.seed import seed_demo_data


def main():
    """Create demo users and seals."""
    session = SessionLocal()

    try:
        created = seed_demo_data(session)
        print("SUCCESS: Demo data seeded")
        print(f"  Users: {created['users']}")
        print(f"  Seals: {created['seals']}")

    except Exception as e:
        session.rollback()
        print(f"ERROR: Failed to seed demo data: {e}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()
