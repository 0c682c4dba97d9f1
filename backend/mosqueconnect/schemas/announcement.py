from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from mosqueconnect.models.announcement import AnnouncementType, AnnouncementPriority, TargetAudience
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate, UTCDatetime


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=2000)
    type: AnnouncementType = AnnouncementType.GENERAL
    priority: AnnouncementPriority = AnnouncementPriority.MEDIUM
    is_active: bool = True
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    target_audience: TargetAudience = TargetAudience.ALL
    attachments: List[Dict[str, Any]] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AnnouncementUpdate(PartialUpdate):
    CLEARABLE = frozenset({"end_date"})

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=2000)
    type: Optional[AnnouncementType] = None
    priority: Optional[AnnouncementPriority] = None
    is_active: Optional[bool] = None
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    target_audience: Optional[TargetAudience] = None
    attachments: Optional[List[Dict[str, Any]]] = None


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    type: AnnouncementType
    priority: AnnouncementPriority
    business_id: Optional[str] = None
    created_by: str
    is_active: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    target_audience: TargetAudience
    attachments: List[Dict[str, Any]] = []
    view_count: int = 0
    is_admin_announcement: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class AnnouncementListResponse(BaseModel):
    announcements: List[AnnouncementResponse]
    pagination: PaginationInfo
