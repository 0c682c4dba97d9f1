from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, JSON, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid
from mosqueconnect.models.volunteer import VolunteerCategory
from mosqueconnect.models.volunteer_application import Priority


class NeedStatus(str, enum.Enum):
    ACTIVE = "active"
    FILLED = "filled"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ApplicantStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class VolunteerNeed(Base):
    """Volunteer opening posted by a mosque"""
    __tablename__ = "volunteer_needs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    mosque_id = Column(GUID, ForeignKey("mosques.id", ondelete="CASCADE"), nullable=False, index=True)
    posted_by = Column(GUID, ForeignKey("users.id"), nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(VolunteerCategory), nullable=False, index=True)
    skills_required = Column(JSON, default=list)
    time_commitment = Column(String(255), nullable=False)
    urgency = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    volunteers_needed = Column(Integer, default=1, nullable=False)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)

    status = Column(SQLEnum(NeedStatus), default=NeedStatus.ACTIVE, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    applicants = relationship(
        "VolunteerNeedApplicant",
        back_populates="need",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VolunteerNeedApplicant.applied_at",
    )

    @property
    def accepted_count(self) -> int:
        return sum(1 for a in self.applicants if a.status == ApplicantStatus.ACCEPTED)

    def has_applicant(self, user_id: str) -> bool:
        return any(str(a.user_id) == str(user_id) for a in self.applicants)

    def refresh_filled(self) -> None:
        if self.status == NeedStatus.ACTIVE and self.accepted_count >= self.volunteers_needed:
            self.status = NeedStatus.FILLED
        elif self.status == NeedStatus.FILLED and self.accepted_count < self.volunteers_needed:
            self.status = NeedStatus.ACTIVE


class VolunteerNeedApplicant(Base):
    __tablename__ = "volunteer_need_applicants"
    __table_args__ = (UniqueConstraint("need_id", "user_id", name="uq_need_applicant"),)

    id = Column(GUID, primary_key=True, default=generate_uuid)
    need_id = Column(GUID, ForeignKey("volunteer_needs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    message = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    availability = Column(String(255), nullable=True)
    status = Column(SQLEnum(ApplicantStatus), default=ApplicantStatus.PENDING, nullable=False)
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    need = relationship("VolunteerNeed", back_populates="applicants")
