from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
from typing import Optional
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class AnnouncementType(str, enum.Enum):
    EVENT = "event"
    GENERAL = "general"
    URGENT = "urgent"
    PROMOTION = "promotion"
    SALE = "sale"
    NEWS = "news"
    SERVICE = "service"
    SYSTEM = "system"
    MAINTENANCE = "maintenance"
    UPDATE = "update"


class AnnouncementPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TargetAudience(str, enum.Enum):
    ALL = "all"
    MEMBERS = "members"
    VISITORS = "visitors"
    BUSINESSES = "businesses"


class Announcement(Base):
    """Announcement posted by a business or by platform admins"""
    __tablename__ = "announcements"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    content = Column(String(2000), nullable=False)
    type = Column(SQLEnum(AnnouncementType), default=AnnouncementType.GENERAL, nullable=False)
    priority = Column(SQLEnum(AnnouncementPriority), default=AnnouncementPriority.MEDIUM, nullable=False)

    business_id = Column(GUID, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=True, index=True)
    created_by = Column(GUID, ForeignKey("users.id"), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime, nullable=True)
    target_audience = Column(SQLEnum(TargetAudience), default=TargetAudience.ALL, nullable=False)
    attachments = Column(JSON, default=list)
    view_count = Column(Integer, default=0)
    is_admin_announcement = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def is_visible(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.utcnow()
        if not self.is_active or self.start_date > now:
            return False
        return self.end_date is None or self.end_date >= now
