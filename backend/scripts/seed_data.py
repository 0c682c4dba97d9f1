#!/usr/bin/env python3
"""
Seed an admin account plus a sample imam and approved sample mosques.

Usage:
    python scripts/seed_data.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mosqueconnect.core.config import settings
from mosqueconnect.core.database import AsyncSessionLocal, init_db, close_db
from mosqueconnect.seed import ensure_admin, seed_sample_mosques, SAMPLE_IMAM_EMAIL, SAMPLE_IMAM_PASSWORD


async def seed() -> None:
    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            admin = await ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)
            mosques = await seed_sample_mosques(db, admin)
    finally:
        await close_db()

    print(f"Admin: {admin.email}")
    print(f"Sample imam: {SAMPLE_IMAM_EMAIL} / {SAMPLE_IMAM_PASSWORD}")
    print(f"Created {len(mosques)} sample mosques")


if __name__ == "__main__":
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        print("Set ADMIN_EMAIL and ADMIN_PASSWORD in .env first")
        sys.exit(1)
    asyncio.run(seed())
