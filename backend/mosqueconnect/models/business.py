from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
from typing import Optional
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class BusinessCategory(str, enum.Enum):
    RESTAURANT = "restaurant"
    GROCERY = "grocery"
    CLOTHING = "clothing"
    ELECTRONICS = "electronics"
    SERVICES = "services"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    AUTOMOTIVE = "automotive"
    BEAUTY = "beauty"
    HOME_GARDEN = "home_garden"
    SPORTS = "sports"
    BOOKS = "books"
    JEWELRY = "jewelry"
    OTHER = "other"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class BusinessStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def default_hours() -> dict:
    hours = {day: {"open": "09:00", "close": "17:00", "closed": False} for day in WEEKDAYS}
    hours["sunday"]["closed"] = True
    return hours


def default_settings() -> dict:
    return {
        "accepts_orders": True,
        "delivery_available": False,
        "pickup_available": True,
        "online_payments": False,
    }


class Business(Base):
    """Muslim-owned business listed in the directory"""
    __tablename__ = "businesses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    category = Column(SQLEnum(BusinessCategory), nullable=False, index=True)
    owner_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    # Contact
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    website = Column(String(500), nullable=True)

    # Address
    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(100), default="United States")
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)

    hours = Column(JSON, default=default_hours)
    images = Column(JSON, default=dict)  # {logo, banner, gallery: []}
    social_media = Column(JSON, default=dict)
    settings = Column(JSON, default=default_settings)
    tags = Column(JSON, default=list)

    # Verification review
    verification_status = Column(
        SQLEnum(VerificationStatus), default=VerificationStatus.PENDING, nullable=False, index=True
    )
    verification_notes = Column(Text, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    verified_by = Column(GUID, ForeignKey("users.id"), nullable=True)

    status = Column(SQLEnum(BusinessStatus), default=BusinessStatus.ACTIVE, nullable=False, index=True)
    featured = Column(Boolean, default=False, nullable=False)

    # Halal certification (kept in sync by the certification review)
    is_halal_certified = Column(Boolean, default=False, nullable=False)
    halal_certified_until = Column(DateTime, nullable=True)

    # Stats
    total_products = Column(Integer, default=0)
    total_orders = Column(Integer, default=0)
    average_rating = Column(Float, default=0)
    total_reviews = Column(Integer, default=0)
    views = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_address(self) -> str:
        parts = [self.street, self.city, self.state, self.zip_code, self.country]
        return ", ".join(p for p in parts if p)

    def is_currently_open(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now()
        day = (self.hours or {}).get(WEEKDAYS[now.weekday()])
        if not day or day.get("closed"):
            return False
        current = now.strftime("%H:%M")
        return day.get("open", "00:00") <= current <= day.get("close", "23:59")

    @staticmethod
    def normalize_tags(tags) -> list:
        return [t.strip().lower() for t in tags or [] if t and t.strip()]

    def __repr__(self):
        return f"<Business {self.name}>"
