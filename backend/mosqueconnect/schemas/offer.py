from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime

from mosqueconnect.models.offer import Offer, DiscountType, OfferStatus, MAX_PERCENTAGE
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate, UTCDatetime


class OfferCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    applicable_product_ids: List[str] = []
    applicable_categories: List[str] = []
    minimum_purchase: float = Field(0, ge=0)
    valid_from: UTCDatetime
    valid_to: UTCDatetime
    status: OfferStatus = OfferStatus.DRAFT
    featured: bool = False
    terms_and_conditions: Optional[str] = Field(None, max_length=1000)
    usage_limit: Optional[int] = Field(None, ge=1)
    customer_limit: Optional[int] = Field(None, ge=1)
    code: Optional[str] = Field(None, min_length=3, max_length=20)
    auto_apply: bool = False
    priority: int = 0
    image: Optional[str] = Field(None, max_length=500)

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None

    @model_validator(mode="after")
    def check_discount_and_window(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > MAX_PERCENTAGE:
            raise ValueError("Percentage discount cannot exceed 100")
        if self.valid_from >= self.valid_to:
            raise ValueError("valid_to must be after valid_from")
        if self.status == OfferStatus.EXPIRED:
            raise ValueError("An offer cannot be created as expired")
        return self


class OfferUpdate(PartialUpdate):
    CLEARABLE = frozenset({
        "description", "terms_and_conditions", "usage_limit", "customer_limit", "code", "image",
    })

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    applicable_product_ids: Optional[List[str]] = None
    applicable_categories: Optional[List[str]] = None
    minimum_purchase: Optional[float] = Field(None, ge=0)
    valid_from: Optional[UTCDatetime] = None
    valid_to: Optional[UTCDatetime] = None
    status: Optional[OfferStatus] = None
    featured: Optional[bool] = None
    terms_and_conditions: Optional[str] = Field(None, max_length=1000)
    usage_limit: Optional[int] = Field(None, ge=1)
    customer_limit: Optional[int] = Field(None, ge=1)
    code: Optional[str] = Field(None, min_length=3, max_length=20)
    auto_apply: Optional[bool] = None
    priority: Optional[int] = None
    image: Optional[str] = Field(None, max_length=500)

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class OfferStatusPatch(BaseModel):
    """Quick toggles from the offers dashboard"""
    status: Optional[OfferStatus] = None
    featured: Optional[bool] = None


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    title: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    applicable_product_ids: List[str] = []
    applicable_categories: List[str] = []
    minimum_purchase: float = 0
    valid_from: datetime
    valid_to: datetime
    status: OfferStatus
    featured: bool
    terms_and_conditions: Optional[str] = None
    usage_limit: Optional[int] = None
    used_count: int
    customer_limit: Optional[int] = None
    code: Optional[str] = None
    auto_apply: bool
    priority: int = 0
    image: Optional[str] = None
    is_valid: bool
    days_remaining: int
    usage_percentage: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_offer(cls, offer: Offer, now: Optional[datetime] = None) -> "OfferResponse":
        now = now or datetime.utcnow()
        data = {column.name: getattr(offer, column.name) for column in Offer.__table__.columns}
        data.update(
            is_valid=offer.is_valid(now),
            days_remaining=offer.days_remaining(now),
            usage_percentage=offer.usage_percentage,
            applicable_product_ids=[str(p) for p in offer.applicable_product_ids or []],
            applicable_categories=offer.applicable_categories or [],
            minimum_purchase=offer.minimum_purchase or 0,
            used_count=offer.used_count or 0,
        )
        return cls.model_validate(data)


class OfferEnvelope(BaseModel):
    offer: OfferResponse
    message: str


class OfferListResponse(BaseModel):
    offers: List[OfferResponse]
    pagination: PaginationInfo


class OfferUseRequest(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    product_id: Optional[str] = None
    category: Optional[str] = None


class OfferUseResponse(BaseModel):
    message: str
    offer: OfferResponse
    discount: float = 0


class OfferPerformance(BaseModel):
    discount_type: str
    count: int
    total_usage: int
    average_value: float


class OfferSummary(BaseModel):
    id: str
    title: str
    status: str
    used_count: int
    valid_to: datetime


class OfferStats(BaseModel):
    total_offers: int
    active_offers: int
    draft_offers: int
    inactive_offers: int
    expired_offers: int
    featured_offers: int
    total_usage: int
    performance_by_type: List[OfferPerformance]
    top_offers: List[OfferSummary]
    recent_offers: List[OfferSummary]
    expiring_soon: List[OfferSummary]
    monthly_created: Dict[str, int]
