"""
Seed helpers used by scripts/create_admin.py and scripts/seed_data.py.

Both functions are idempotent: running them twice leaves one admin and one
copy of each sample mosque.
"""
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.core.logging_config import logger
from mosqueconnect.core.security import get_password_hash
from mosqueconnect.models import User, UserRole, Mosque, MosqueStatus, MosqueService


SAMPLE_IMAM_EMAIL = "imam@mosqueconnect.org"
SAMPLE_IMAM_PASSWORD = "imam12345"

SAMPLE_MOSQUES = [
    {
        "name": "Islamic Center of New York",
        "description": "Community mosque serving Manhattan since 1991.",
        "street": "1711 3rd Ave",
        "city": "New York",
        "state": "NY",
        "zip_code": "10029",
        "capacity": 1200,
        "services": [MosqueService.DAILY_PRAYERS, MosqueService.FRIDAY_PRAYERS, MosqueService.QURAN_CLASSES],
        "prayer_times": {"fajr": "05:30", "dhuhr": "13:00", "asr": "16:30", "maghrib": "19:15", "isha": "20:45", "jumma": "13:15"},
    },
    {
        "name": "Masjid Al-Noor",
        "description": "Neighbourhood masjid with weekend school and food bank.",
        "street": "240 Atlantic Ave",
        "city": "Brooklyn",
        "state": "NY",
        "zip_code": "11201",
        "capacity": 350,
        "services": [MosqueService.DAILY_PRAYERS, MosqueService.ISLAMIC_EDUCATION, MosqueService.FOOD_BANK],
        "prayer_times": {"fajr": "05:35", "dhuhr": "13:05", "asr": "16:35", "maghrib": "19:15", "isha": "20:50"},
    },
    {
        "name": "Dar Al-Hijrah",
        "description": "Youth programs, counseling and community events.",
        "street": "3159 Row St",
        "city": "Falls Church",
        "state": "VA",
        "zip_code": "22044",
        "capacity": 800,
        "services": [MosqueService.YOUTH_PROGRAMS, MosqueService.COUNSELING, MosqueService.COMMUNITY_EVENTS],
        "prayer_times": {"fajr": "05:40", "dhuhr": "13:10", "asr": "16:40", "maghrib": "19:20", "isha": "20:50"},
    },
]


async def ensure_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: UserRole,
) -> Tuple[User, bool]:
    """Create the user, or promote and reset an existing one. Returns (user, created)."""
    email = email.lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        return user, True

    user.role = role
    user.is_active = True
    user.hashed_password = get_password_hash(password)
    await db.flush()
    return user, False


async def ensure_admin(db: AsyncSession, email: str, password: str, name: str = "Administrator") -> User:
    if not email or not password:
        raise ValueError("Admin email and password are required")

    admin, created = await ensure_user(db, email, password, name, UserRole.ADMIN)
    await db.commit()
    logger.info(f"{'Created' if created else 'Updated'} admin account {admin.email}")
    return admin


async def seed_sample_mosques(db: AsyncSession, reviewer: User) -> List[Mosque]:
    """Approved sample mosques led by a sample imam"""
    imam, _ = await ensure_user(db, SAMPLE_IMAM_EMAIL, SAMPLE_IMAM_PASSWORD, "Imam Abdullah", UserRole.IMAM)

    existing = set((await db.execute(select(Mosque.name))).scalars().all())
    now = datetime.utcnow()
    created = []

    for sample in SAMPLE_MOSQUES:
        if sample["name"] in existing:
            continue
        data = dict(sample)
        data["services"] = [s.value for s in sample["services"]]
        mosque = Mosque(
            **data,
            imam_id=imam.id,
            status=MosqueStatus.APPROVED,
            verified=True,
            verified_by=reviewer.id,
            verified_at=now,
        )
        db.add(mosque)
        created.append(mosque)

    await db.commit()
    logger.info(f"Seeded {len(created)} sample mosques")
    return created
