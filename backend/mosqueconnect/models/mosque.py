from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class MosqueStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MosqueService(str, enum.Enum):
    """Services a mosque can advertise"""
    DAILY_PRAYERS = "Daily Prayers"
    FRIDAY_PRAYERS = "Friday Prayers"
    ISLAMIC_EDUCATION = "Islamic Education"
    QURAN_CLASSES = "Quran Classes"
    YOUTH_PROGRAMS = "Youth Programs"
    WOMEN_PROGRAMS = "Women Programs"
    COMMUNITY_EVENTS = "Community Events"
    MARRIAGE_SERVICES = "Marriage Services"
    FUNERAL_SERVICES = "Funeral Services"
    COUNSELING = "Counseling"
    FOOD_BANK = "Food Bank"
    LIBRARY = "Library"


PRAYER_NAMES = ("fajr", "dhuhr", "asr", "maghrib", "isha", "jumma")


class Mosque(Base):
    """Mosque profile, owned by an imam and approved by an admin"""
    __tablename__ = "mosques"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    imam_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    # Contact
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(500), nullable=True)

    # Address
    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=True, index=True)
    state = Column(String(100), nullable=True, index=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(100), default="United States")
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)

    capacity = Column(Integer, nullable=True)
    services = Column(JSON, default=list)  # list of MosqueService values
    facilities = Column(JSON, default=list)
    prayer_times = Column(JSON, default=dict)  # {fajr: "05:30", ...}

    # Review
    status = Column(SQLEnum(MosqueStatus), default=MosqueStatus.PENDING, nullable=False, index=True)
    verified = Column(Boolean, default=False, nullable=False)
    verification_notes = Column(Text, nullable=True)
    verified_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    verified_at = Column(DateTime, nullable=True)

    # Stats
    total_members = Column(Integer, default=0)
    total_events = Column(Integer, default=0)
    total_volunteers = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_address(self) -> str:
        parts = [self.street, self.city, self.state, self.zip_code, self.country]
        return ", ".join(p for p in parts if p)

    def __repr__(self):
        return f"<Mosque {self.name} ({self.status})>"
