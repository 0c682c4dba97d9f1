from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator
from typing import Optional, List
from datetime import datetime

from mosqueconnect.models.mosque import MosqueStatus, MosqueService
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate


class PrayerTimes(BaseModel):
    fajr: Optional[str] = None
    dhuhr: Optional[str] = None
    asr: Optional[str] = None
    maghrib: Optional[str] = None
    isha: Optional[str] = None
    jumma: Optional[str] = None


class MosqueBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)

    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=500)

    street: str = Field(..., min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: str = "United States"
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    latitude: Optional[float] = Field(None, ge=-90, le=90)

    capacity: Optional[int] = Field(None, ge=1)
    services: List[MosqueService] = []
    facilities: List[str] = []
    prayer_times: PrayerTimes = PrayerTimes()

    @model_validator(mode="after")
    def coordinates_pair(self):
        if (self.longitude is None) != (self.latitude is None):
            raise ValueError("Both longitude and latitude are required for coordinates")
        return self


class MosqueCreate(MosqueBase):
    pass


class MosqueUpdate(PartialUpdate):
    CLEARABLE = frozenset({
        "description", "phone", "email", "website", "city", "state",
        "zip_code", "country", "longitude", "latitude", "capacity",
    })

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=500)
    street: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = None
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    capacity: Optional[int] = Field(None, ge=1)
    services: Optional[List[MosqueService]] = None
    facilities: Optional[List[str]] = None
    prayer_times: Optional[PrayerTimes] = None


class MosqueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    imam_id: str
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    street: str
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    full_address: str
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    capacity: Optional[int] = None
    services: List[str] = []
    facilities: List[str] = []
    prayer_times: dict = {}
    status: MosqueStatus
    verified: bool
    verification_notes: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    total_members: int = 0
    total_events: int = 0
    total_volunteers: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class MosqueListResponse(BaseModel):
    mosques: List[MosqueResponse]
    pagination: PaginationInfo
