from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class VolunteerRegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VolunteerCategory(str, enum.Enum):
    """Shared by applications, needs and offers"""
    CLEANING = "cleaning"
    EDUCATION = "education"
    EVENTS = "events"
    TECHNICAL = "technical"
    ADMINISTRATION = "administration"
    OUTREACH = "outreach"
    OTHER = "other"


class Volunteer(Base):
    """Volunteer registration reviewed by an admin or the mosque's imam"""
    __tablename__ = "volunteers"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    mosque_id = Column(GUID, ForeignKey("mosques.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    skills = Column(JSON, default=list)
    availability = Column(String(255), nullable=True)
    experience = Column(Text, nullable=True)
    interests = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    emergency_contact = Column(JSON, default=dict)  # {name, phone, relationship}

    status = Column(
        SQLEnum(VolunteerRegistrationStatus),
        default=VolunteerRegistrationStatus.PENDING,
        nullable=False,
        index=True
    )
    notes = Column(Text, nullable=True)
    reviewed_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    current_assignment = Column(String(255), nullable=True)
    assignment_date = Column(DateTime, nullable=True)
    assigned_by = Column(GUID, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Volunteer {self.email} ({self.status})>"


class VolunteerProfile(Base):
    """Per-user volunteer profile (skills, availability, bio)"""
    __tablename__ = "volunteer_profiles"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, unique=True, index=True)

    skills = Column(JSON, default=list)
    availability = Column(JSON, default=dict)
    contact_preferences = Column(JSON, default=dict)
    certificates = Column(JSON, default=list)
    bio = Column(Text, default="")
    experience = Column(Text, default="")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
