from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class CertificationStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class HalalCertification(Base):
    """Halal certification request for a business"""
    __tablename__ = "halal_certifications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    business_id = Column(GUID, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot of the business at request time
    business_name = Column(String(100), nullable=False)
    business_type = Column(String(50), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    postcode = Column(String(20), nullable=True)
    contact_name = Column(String(100), nullable=False)
    contact_email = Column(String(255), nullable=False)
    details = Column(Text, nullable=True)
    supplier_info = Column(Text, nullable=True)
    submitted_documents = Column(JSON, default=list)

    status = Column(SQLEnum(CertificationStatus), default=CertificationStatus.PENDING, nullable=False, index=True)
    request_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    reviewer_id = Column(GUID, ForeignKey("users.id"), nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    certificate_url = Column(String(500), nullable=True)
    certificate_number = Column(String(50), nullable=True)
    expiry_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<HalalCertification {self.business_name} ({self.status})>"
