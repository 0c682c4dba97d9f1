#!/usr/bin/env python3
"""
Create (or reset) the MosqueConnect administrator account.

Usage:
    python scripts/create_admin.py                                  # uses ADMIN_EMAIL / ADMIN_PASSWORD from .env
    python scripts/create_admin.py --email admin@example.com --password 'S3cret!pass'
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mosqueconnect.core.config import settings
from mosqueconnect.core.database import AsyncSessionLocal, init_db, close_db
from mosqueconnect.seed import ensure_admin


async def create_admin(email: str, password: str, name: str) -> None:
    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            admin = await ensure_admin(db, email, password, name)
        print(f"Admin ready: {admin.email}")
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the MosqueConnect admin account")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--password", default=settings.ADMIN_PASSWORD)
    parser.add_argument("--name", default=settings.ADMIN_NAME)
    args = parser.parse_args()

    if not args.email or not args.password:
        parser.error("admin email and password are required (flags or ADMIN_EMAIL / ADMIN_PASSWORD)")

    asyncio.run(create_admin(args.email, args.password, args.name))
    return 0


if __name__ == "__main__":
    sys.exit(main())
