"""
Announcements.

`router` holds the business owner's CRUD (mounted under /business/announcements)
and `public_router` the public feed (mounted under /announcements).
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from datetime import datetime
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import ResourceNotFoundError, ValidationError
from mosqueconnect.models import (
    User,
    Announcement,
    AnnouncementType,
    AnnouncementPriority,
    TargetAudience,
)
from mosqueconnect.modules.auth.dependencies import get_current_business
from mosqueconnect.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementListResponse,
)
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.api.v1.endpoints.business import get_owned_business
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()
public_router = APIRouter()


def announcement_fields(data: AnnouncementCreate) -> dict:
    fields = data.model_dump()
    if fields.get("start_date") is None:
        fields["start_date"] = datetime.utcnow()
    return fields


def visible_now(query, now: datetime):
    return query.where(
        Announcement.is_active.is_(True),
        Announcement.start_date <= now,
        or_(Announcement.end_date.is_(None), Announcement.end_date >= now),
    )


async def get_owned_announcement(db: AsyncSession, business_id: str, announcement_id: str) -> Announcement:
    announcement = await get_or_404(db, Announcement, announcement_id, "Announcement")
    if str(announcement.business_id) != str(business_id):
        raise ResourceNotFoundError("Announcement", announcement_id)
    return announcement


# ==================== Business owner ====================

@router.get("", response_model=AnnouncementListResponse)
async def list_business_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[AnnouncementType] = None,
    priority: Optional[AnnouncementPriority] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)

    query = select(Announcement).where(Announcement.business_id == business.id)
    if type:
        query = query.where(Announcement.type == type)
    if priority:
        query = query.where(Announcement.priority == priority)
    if is_active is not None:
        query = query.where(Announcement.is_active == is_active)
    if search:
        query = query.where(search_filter(search, [Announcement.title, Announcement.content]))
    query = query.order_by(Announcement.created_at.desc())

    announcements, pagination = await paginate(db, query, page, limit)
    return AnnouncementListResponse(
        announcements=[AnnouncementResponse.model_validate(a) for a in announcements],
        pagination=pagination,
    )


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_business_announcement(
    data: AnnouncementCreate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)

    announcement = Announcement(
        **announcement_fields(data),
        business_id=business.id,
        created_by=current_user.id,
        is_admin_announcement=False,
    )
    db.add(announcement)
    await db.commit()
    await db.refresh(announcement)
    return announcement


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_business_announcement(
    announcement_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    return await get_owned_announcement(db, business.id, announcement_id)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_business_announcement(
    announcement_id: str,
    updates: AnnouncementUpdate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    announcement = await get_owned_announcement(db, business.id, announcement_id)
    apply_announcement_update(announcement, updates)

    await db.commit()
    await db.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_business_announcement(
    announcement_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    announcement = await get_owned_announcement(db, business.id, announcement_id)

    await db.delete(announcement)
    await db.commit()
    return MessageResponse(message="Announcement deleted successfully")


def apply_announcement_update(announcement: Announcement, updates: AnnouncementUpdate) -> None:
    """Shared by business and admin edits; 400 when the window ends up inverted"""
    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(announcement, field, value)

    if announcement.end_date and announcement.end_date <= announcement.start_date:
        raise ValidationError("end_date must be after start_date", field="end_date")


# ==================== Public feed ====================

@public_router.get("/public", response_model=AnnouncementListResponse)
async def public_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    audience: Optional[TargetAudience] = None,
    type: Optional[AnnouncementType] = None,
    business_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Currently visible announcements, platform announcements first"""
    query = visible_now(select(Announcement), datetime.utcnow())
    if audience:
        query = query.where(Announcement.target_audience.in_([audience, TargetAudience.ALL]))
    if type:
        query = query.where(Announcement.type == type)
    if business_id:
        query = query.where(Announcement.business_id == business_id)
    query = query.order_by(
        Announcement.is_admin_announcement.desc(),
        Announcement.created_at.desc(),
    )

    announcements, pagination = await paginate(db, query, page, limit)
    return AnnouncementListResponse(
        announcements=[AnnouncementResponse.model_validate(a) for a in announcements],
        pagination=pagination,
    )
