from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

from mosqueconnect.models.halal_certification import CertificationStatus
from mosqueconnect.schemas.common import PaginationInfo


class CertificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    business_name: str
    business_type: str
    address: str
    city: str
    postcode: Optional[str] = None
    contact_name: str
    contact_email: str
    details: Optional[str] = None
    supplier_info: Optional[str] = None
    submitted_documents: List[str] = []
    status: CertificationStatus
    request_date: datetime
    reviewer_id: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    certificate_url: Optional[str] = None
    certificate_number: Optional[str] = None
    expiry_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CertificationListResponse(BaseModel):
    certifications: List[CertificationResponse]
    pagination: PaginationInfo


class CertificationReviewResponse(BaseModel):
    message: str
    certification: CertificationResponse
