from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from mosqueconnect.models.user import VolunteerStatus
from mosqueconnect.models.volunteer import VolunteerRegistrationStatus, VolunteerCategory
from mosqueconnect.models.volunteer_application import ApplicationStatus, Priority
from mosqueconnect.models.volunteer_need import NeedStatus, ApplicantStatus
from mosqueconnect.models.volunteer_offer import VolunteerOfferStatus, InterestStatus
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate, UTCDatetime


# ==================== Volunteer registration ====================

class EmergencyContact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class VolunteerRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    skills: List[str] = []
    availability: Optional[str] = Field(None, max_length=255)
    experience: Optional[str] = Field(None, max_length=2000)
    interests: List[str] = []
    languages: List[str] = []
    mosque_id: Optional[str] = None
    emergency_contact: EmergencyContact = EmergencyContact()


class VolunteerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    mosque_id: Optional[str] = None
    name: str
    email: str
    phone: Optional[str] = None
    skills: List[str] = []
    availability: Optional[str] = None
    experience: Optional[str] = None
    interests: List[str] = []
    languages: List[str] = []
    emergency_contact: Dict[str, Any] = {}
    status: VolunteerRegistrationStatus
    notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    current_assignment: Optional[str] = None
    assignment_date: Optional[datetime] = None
    created_at: datetime


class VolunteerListResponse(BaseModel):
    volunteers: List[VolunteerResponse]
    pagination: PaginationInfo


class VolunteerAssignment(BaseModel):
    current_assignment: str = Field(..., min_length=1, max_length=255)


# ==================== Applications ====================

class ApplicationCreate(BaseModel):
    mosque_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    motivation_message: Optional[str] = None
    category: VolunteerCategory
    skills_offered: List[str] = []
    availability: str = Field(..., min_length=1, max_length=255)
    time_commitment: str = Field(..., min_length=1, max_length=255)
    experience: Optional[str] = None
    languages: List[str] = []
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    priority: Priority = Priority.MEDIUM


class ApplicationUpdate(BaseModel):
    """Status change by the mosque (review) or the applicant (withdraw)"""
    status: ApplicationStatus
    message: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    mosque_id: str
    title: str
    description: str
    motivation_message: Optional[str] = None
    category: VolunteerCategory
    skills_offered: List[str] = []
    availability: str
    time_commitment: str
    experience: Optional[str] = None
    languages: List[str] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: ApplicationStatus
    priority: Priority
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    response_message: Optional[str] = None
    response_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationResponse]
    pagination: PaginationInfo


# ==================== Needs ====================

class NeedCreate(BaseModel):
    mosque_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: VolunteerCategory
    skills_required: List[str] = []
    time_commitment: str = Field(..., min_length=1, max_length=255)
    urgency: Priority = Priority.MEDIUM
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    volunteers_needed: int = Field(1, ge=1)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class NeedUpdate(PartialUpdate):
    CLEARABLE = frozenset({"start_date", "end_date", "contact_email", "contact_phone"})

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[VolunteerCategory] = None
    skills_required: Optional[List[str]] = None
    time_commitment: Optional[str] = Field(None, min_length=1, max_length=255)
    urgency: Optional[Priority] = None
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    volunteers_needed: Optional[int] = Field(None, ge=1)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    status: Optional[NeedStatus] = None


class ApplicantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    message: Optional[str] = None
    experience: Optional[str] = None
    availability: Optional[str] = None
    status: ApplicantStatus
    applied_at: datetime


class NeedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    mosque_id: str
    posted_by: str
    title: str
    description: str
    category: VolunteerCategory
    skills_required: List[str] = []
    time_commitment: str
    urgency: Priority
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    volunteers_needed: int
    accepted_count: int = 0
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: NeedStatus
    applicants: List[ApplicantResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class NeedListResponse(BaseModel):
    needs: List[NeedResponse]
    pagination: PaginationInfo


class NeedApply(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)
    experience: Optional[str] = Field(None, max_length=2000)
    availability: Optional[str] = Field(None, max_length=255)


class ApplicantStatusUpdate(BaseModel):
    status: ApplicantStatus


# ==================== Volunteer offers ====================

class VolunteerOfferCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: VolunteerCategory
    skills_offered: List[str] = []
    availability: str = Field(..., min_length=1, max_length=255)
    time_commitment: str = Field(..., min_length=1, max_length=255)
    preferred_locations: List[str] = []
    experience: Optional[str] = None
    languages: List[str] = []
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    target_mosque_id: Optional[str] = None


class VolunteerOfferUpdate(PartialUpdate):
    CLEARABLE = frozenset({"experience", "contact_email", "contact_phone"})

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[VolunteerCategory] = None
    skills_offered: Optional[List[str]] = None
    availability: Optional[str] = Field(None, min_length=1, max_length=255)
    time_commitment: Optional[str] = Field(None, min_length=1, max_length=255)
    preferred_locations: Optional[List[str]] = None
    experience: Optional[str] = None
    languages: Optional[List[str]] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    status: Optional[VolunteerOfferStatus] = None


class InterestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    mosque_id: str
    status: InterestStatus
    interested_at: datetime


class VolunteerOfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: str
    category: VolunteerCategory
    skills_offered: List[str] = []
    availability: str
    time_commitment: str
    preferred_locations: List[str] = []
    experience: Optional[str] = None
    languages: List[str] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: VolunteerOfferStatus
    target_mosque_id: Optional[str] = None
    is_general_offer: bool
    interests: List[InterestResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class VolunteerOfferListResponse(BaseModel):
    offers: List[VolunteerOfferResponse]
    pagination: PaginationInfo


class InterestCreate(BaseModel):
    mosque_id: str


# ==================== Profile & status ====================

class VolunteerProfileData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    skills: List[str] = []
    availability: Dict[str, Any] = {}
    contact_preferences: Dict[str, Any] = {}
    certificates: List[Dict[str, Any]] = []
    bio: str = Field("", max_length=2000)
    experience: str = Field("", max_length=2000)


class VolunteerProfileEnvelope(BaseModel):
    profile: VolunteerProfileData
    message: Optional[str] = None


class VolunteerStatusUpdate(BaseModel):
    status: VolunteerStatus


class VolunteerStatusResponse(BaseModel):
    status: VolunteerStatus
    active_since: Optional[datetime] = None
    total_applications: int
    accepted_applications: int
    total_hours: int
    active_offers: int


class ActivityEntry(BaseModel):
    type: str
    title: str
    description: str
    created_at: datetime
    metadata: Dict[str, Any] = {}


class VolunteerActivityResponse(BaseModel):
    activity: List[ActivityEntry]
    pagination: PaginationInfo
