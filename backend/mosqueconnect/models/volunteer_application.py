from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid
from mosqueconnect.models.volunteer import VolunteerCategory


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VolunteerApplication(Base):
    """A user's application to volunteer at a specific mosque"""
    __tablename__ = "volunteer_applications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    mosque_id = Column(GUID, ForeignKey("mosques.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    motivation_message = Column(Text, nullable=True)
    category = Column(SQLEnum(VolunteerCategory), nullable=False)
    skills_offered = Column(JSON, default=list)
    availability = Column(String(255), nullable=False)
    time_commitment = Column(String(255), nullable=False)
    experience = Column(Text, nullable=True)
    languages = Column(JSON, default=list)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)

    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False, index=True)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)

    # Mosque response
    responded_by = Column(GUID, ForeignKey("users.id"), nullable=True)
    responded_at = Column(DateTime, nullable=True)
    response_message = Column(Text, nullable=True)
    response_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<VolunteerApplication {self.title} ({self.status})>"
