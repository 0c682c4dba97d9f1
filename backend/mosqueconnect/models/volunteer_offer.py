from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid
from mosqueconnect.models.volunteer import VolunteerCategory


class VolunteerOfferStatus(str, enum.Enum):
    ACTIVE = "active"
    MATCHED = "matched"
    INACTIVE = "inactive"


class InterestStatus(str, enum.Enum):
    INTERESTED = "interested"
    CONTACTED = "contacted"
    MATCHED = "matched"


class VolunteerOffer(Base):
    """A volunteer advertising availability, to one mosque or generally"""
    __tablename__ = "volunteer_offers"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(VolunteerCategory), nullable=False, index=True)
    skills_offered = Column(JSON, default=list)
    availability = Column(String(255), nullable=False)
    time_commitment = Column(String(255), nullable=False)
    preferred_locations = Column(JSON, default=list)
    experience = Column(Text, nullable=True)
    languages = Column(JSON, default=list)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)

    status = Column(SQLEnum(VolunteerOfferStatus), default=VolunteerOfferStatus.ACTIVE, nullable=False, index=True)
    target_mosque_id = Column(GUID, ForeignKey("mosques.id", ondelete="SET NULL"), nullable=True, index=True)
    is_general_offer = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    interests = relationship(
        "VolunteerOfferInterest",
        back_populates="offer",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class VolunteerOfferInterest(Base):
    """A mosque expressing interest in a volunteer offer"""
    __tablename__ = "volunteer_offer_interests"
    __table_args__ = (UniqueConstraint("offer_id", "mosque_id", name="uq_offer_interest"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    offer_id = Column(GUID, ForeignKey("volunteer_offers.id", ondelete="CASCADE"), nullable=False, index=True)
    mosque_id = Column(GUID, ForeignKey("mosques.id", ondelete="CASCADE"), nullable=False)
    status = Column(SQLEnum(InterestStatus), default=InterestStatus.INTERESTED, nullable=False)
    interested_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    offer = relationship("VolunteerOffer", back_populates="interests")
