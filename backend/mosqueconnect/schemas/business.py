from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from mosqueconnect.models.business import BusinessCategory, BusinessStatus, VerificationStatus
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate, clean_strings


class DayHours(BaseModel):
    open: str = Field("09:00", pattern=r"^\d{2}:\d{2}$")
    close: str = Field("17:00", pattern=r"^\d{2}:\d{2}$")
    closed: bool = False


class BusinessSettings(BaseModel):
    accepts_orders: bool = True
    delivery_available: bool = False
    pickup_available: bool = True
    online_payments: bool = False


class BusinessImages(BaseModel):
    logo: Optional[str] = None
    banner: Optional[str] = None
    gallery: List[str] = []


class BusinessBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: BusinessCategory

    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=500)

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: str = "United States"
    longitude: Optional[float] = None
    latitude: Optional[float] = None

    hours: Optional[Dict[str, DayHours]] = None
    images: BusinessImages = BusinessImages()
    social_media: Dict[str, str] = {}
    settings: BusinessSettings = BusinessSettings()
    tags: List[str] = []

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return [t.lower() for t in clean_strings(v)]

    @model_validator(mode="after")
    def drop_invalid_coordinates(self):
        """Out-of-range or half-specified coordinates are discarded"""
        lng, lat = self.longitude, self.latitude
        if lng is None or lat is None or not (-180 <= lng <= 180) or not (-90 <= lat <= 90):
            self.longitude = None
            self.latitude = None
        return self


class BusinessCreate(BusinessBase):
    pass


class BusinessUpdate(PartialUpdate):
    CLEARABLE = frozenset({"description", "email", "phone", "website", "zip_code"})

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[BusinessCategory] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=500)
    street: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    hours: Optional[Dict[str, DayHours]] = None
    images: Optional[BusinessImages] = None
    social_media: Optional[Dict[str, str]] = None
    settings: Optional[BusinessSettings] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else [t.lower() for t in clean_strings(v)]


class HalalRequestDetails(BaseModel):
    """Optional certification request submitted with business registration"""
    details: Optional[str] = Field(None, max_length=2000)
    supplier_info: Optional[str] = Field(None, max_length=2000)
    postcode: Optional[str] = Field(None, max_length=20)
    submitted_documents: List[str] = []


class BusinessRegister(BaseModel):
    """Public sign-up: owner account + business + optional halal request"""
    owner_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=30)
    business: BusinessCreate
    request_halal_certification: bool = False
    halal_certification: Optional[HalalRequestDetails] = None


class BusinessResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    category: BusinessCategory
    owner_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    street: str
    city: str
    state: str
    zip_code: Optional[str] = None
    country: Optional[str] = None
    full_address: str
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    hours: Dict[str, Any] = {}
    images: Dict[str, Any] = {}
    social_media: Dict[str, Any] = {}
    settings: Dict[str, Any] = {}
    tags: List[str] = []
    verification_status: VerificationStatus
    verification_notes: Optional[str] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    status: BusinessStatus
    featured: bool
    is_halal_certified: bool
    halal_certified_until: Optional[datetime] = None
    total_products: int = 0
    total_orders: int = 0
    average_rating: float = 0
    total_reviews: int = 0
    views: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class BusinessListResponse(BaseModel):
    businesses: List[BusinessResponse]
    pagination: PaginationInfo


class BusinessRegisterResponse(BaseModel):
    message: str
    user_id: str
    business: BusinessResponse
    halal_certification_id: Optional[str] = None


class BusinessStatusUpdate(BaseModel):
    """Admin change of operational status or featured flag"""
    status: Optional[BusinessStatus] = None
    featured: Optional[bool] = None


class BusinessAnalytics(BaseModel):
    business_id: str
    views: int
    total_products: int
    active_products: int
    out_of_stock_products: int
    low_stock_products: int
    total_offers: int
    active_offers: int
    total_offer_redemptions: int
    total_announcements: int
    active_announcements: int
    product_views: int
    revenue: float
    average_rating: float
