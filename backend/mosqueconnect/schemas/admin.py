from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime
import enum

from mosqueconnect.models.user import UserRole
from mosqueconnect.schemas.auth import UserResponse
from mosqueconnect.schemas.common import PaginationInfo


# ==================== Dashboard Schemas ====================

class EntityCounts(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class DashboardStats(BaseModel):
    """Admin dashboard KPI block"""
    total_users: int
    new_users_this_week: int
    users_by_role: Dict[str, int]
    mosques: EntityCounts
    businesses: EntityCounts
    volunteers: EntityCounts
    halal_certifications: Dict[str, int]
    total_products: int
    active_offers: int
    active_announcements: int
    pending_reviews: int


class ActivityItem(BaseModel):
    """Single activity item for the admin feed"""
    id: str
    type: str  # 'user_signup', 'mosque_submitted', 'business_registered', ...
    title: str
    description: str
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None


class ActivityFeedResponse(BaseModel):
    items: List[ActivityItem]
    total: int


class PlatformStats(BaseModel):
    users: Dict[str, int]
    mosques: Dict[str, int]
    businesses: Dict[str, int]
    volunteers: Dict[str, int]
    offers: Dict[str, int]
    certifications: Dict[str, int]


class MosqueStatistics(BaseModel):
    total_mosques: int
    by_status: Dict[str, int]
    by_state: Dict[str, int]
    by_city: Dict[str, int]
    services: Dict[str, int]
    total_capacity: int
    average_capacity: float
    verified_mosques: int


class TimeRange(str, enum.Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return {"7d": 7, "30d": 30, "90d": 90, "1y": 365}[self.value]


class LocationCount(BaseModel):
    city: str
    state: Optional[str] = None
    count: int


class GrowthRates(BaseModel):
    """Percent change in sign-ups against the preceding period of the same length"""
    users: int
    mosques: int
    businesses: int
    volunteers: int


class AnalyticsOverview(BaseModel):
    total_users: int
    total_mosques: int
    total_businesses: int
    total_volunteers: int
    active_users: int
    pending_approvals: int
    growth_rates: GrowthRates


class UserAnalytics(BaseModel):
    users_by_role: Dict[str, int]
    users_by_location: List[LocationCount]
    active_users: int


class MosqueAnalytics(BaseModel):
    mosques_by_location: List[LocationCount]
    status_distribution: Dict[str, int]
    services_popularity: Dict[str, int]


class BusinessAnalytics(BaseModel):
    businesses_by_category: Dict[str, int]
    businesses_by_location: List[LocationCount]
    status_distribution: Dict[str, int]


class TopMosque(BaseModel):
    mosque_id: str
    name: str
    city: Optional[str] = None
    total_applications: int


class VolunteerAnalytics(BaseModel):
    applications_by_category: Dict[str, int]
    status_distribution: Dict[str, int]
    offers_by_category: Dict[str, int]
    top_mosques: List[TopMosque]


class AnalyticsResponse(BaseModel):
    time_range: TimeRange
    start_date: datetime
    overview: AnalyticsOverview
    user_analytics: UserAnalytics
    mosque_analytics: MosqueAnalytics
    business_analytics: BusinessAnalytics
    volunteer_analytics: VolunteerAnalytics


# ==================== User Management Schemas ====================

class AdminUsersResponse(BaseModel):
    users: List[UserResponse]
    pagination: PaginationInfo


class UserStats(BaseModel):
    total_users: int
    active_users: int
    by_role: Dict[str, int]
    by_volunteer_status: Dict[str, int]
    new_users_today: int
    new_users_this_week: int
    new_users_this_month: int


class RoleUpdate(BaseModel):
    role: UserRole


class AdminCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    phone: Optional[str] = Field(None, max_length=30)


# ==================== Activity Log Schemas ====================

class ActivityLogCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    module: str = Field(..., min_length=1, max_length=50)
    target_id: Optional[str] = Field(None, max_length=100)
    details: Optional[str] = Field(None, max_length=2000)
    changes: Optional[Dict[str, Any]] = None


class ActivityLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_id: str
    admin_name: Optional[str] = None
    admin_email: Optional[str] = None
    action: str
    module: str
    target_id: Optional[str] = None
    details: Optional[str] = None
    changes: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class ActivityLogsResponse(BaseModel):
    logs: List[ActivityLogResponse]
    pagination: PaginationInfo
